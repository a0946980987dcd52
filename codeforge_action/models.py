"""Pydantic models for the CodeForge generation API."""

from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Literal, Optional, Tuple


JobStatus = Literal["queued", "running", "completed", "failed"]

TERMINAL_STATUSES = frozenset({"completed", "failed"})

TRIGGER_SOURCE = "github_action"


class PublishedPackage(BaseModel):
    """Package pushed to a registry by a finished SDK build."""
    name: str
    version: str
    registry_url: str


class SdkResult(BaseModel):
    """One SDK target of a generation run."""
    id: str
    name: str
    status: str
    logs_url: str
    published_package: Optional[PublishedPackage] = None


class GenerationResult(BaseModel):
    """Trigger and status response for a generation run."""
    generation_run_id: str
    status: JobStatus
    sdks: List[SdkResult]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def logs_urls(self) -> List[str]:
        return [sdk.logs_url for sdk in self.sdks]

    @property
    def published_packages(self) -> List[PublishedPackage]:
        return [sdk.published_package for sdk in self.sdks if sdk.published_package is not None]


class GenerationRequest(BaseModel):
    """Everything sent to the trigger endpoint for one run."""
    model_config = ConfigDict(frozen=True)

    spec_id: str
    spec_path: str = ""
    spec_content: Optional[str] = None
    sdk_ids: Optional[Tuple[str, ...]] = None
    commit_sha: str = ""
    commit_message: str = ""
    repository: str = ""

    def to_payload(self) -> Dict[str, Any]:
        """
        Build the JSON body for the trigger call.

        ``spec_id`` travels in the URL, not the body. ``spec_content`` and
        ``sdk_ids`` are left out when unset; the commit fields are always
        sent, as empty strings when unknown.
        """
        payload: Dict[str, Any] = {}
        if self.spec_content is not None:
            payload["spec_content"] = self.spec_content
        payload["spec_path"] = self.spec_path
        if self.sdk_ids:
            payload["sdk_ids"] = list(self.sdk_ids)
        payload["trigger_source"] = TRIGGER_SOURCE
        payload["commit_sha"] = self.commit_sha
        payload["commit_message"] = self.commit_message
        payload["repository"] = self.repository
        return payload
