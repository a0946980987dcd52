"""Action inputs and hosting-environment configuration.

GitHub Actions passes each ``with:`` input to the step as an
``INPUT_<NAME>`` environment variable; commit metadata comes from the
``GITHUB_*`` variables the runner sets. Everything here reads through the
small ConfigProvider interface so the orchestrator can be driven from a
plain dict in tests.
"""

import json
import logging
import os
from typing import Dict, List, Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from codeforge_action.client import DEFAULT_INTERVAL_MS, DEFAULT_MAX_ATTEMPTS
from codeforge_action.errors import ConfigurationError

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


class ConfigProvider(Protocol):
    """Read-only view of the hosting environment."""

    def get_input(self, name: str) -> str:
        """Return the trimmed value of an action input, or "" when unset."""
        ...

    def get_env(self, name: str) -> str:
        """Return an ambient environment value, or "" when unset."""
        ...


def _input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


class EnvironmentConfig:
    """
    ConfigProvider backed by the process environment.

    ``overrides`` maps input names to values that win over the
    ``INPUT_*`` variables; the CLI uses it for its command-line options.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None,
                 overrides: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ
        self._overrides = dict(overrides or {})

    def get_input(self, name: str) -> str:
        if name in self._overrides:
            return str(self._overrides[name]).strip()
        return self._environ.get(_input_env_name(name), "").strip()

    def get_env(self, name: str) -> str:
        return self._environ.get(name, "")


class MappingConfig:
    """ConfigProvider over two plain dicts."""

    def __init__(self, inputs: Optional[Mapping[str, str]] = None,
                 env: Optional[Mapping[str, str]] = None):
        self._inputs = dict(inputs or {})
        self._env = dict(env or {})

    def get_input(self, name: str) -> str:
        return str(self._inputs.get(name, "")).strip()

    def get_env(self, name: str) -> str:
        return self._env.get(name, "")


class ActionInputs(BaseModel):
    """Parameters for one run of the action."""
    model_config = ConfigDict(frozen=True)

    spec_id: str
    api_token: str
    spec_path: str = ""
    sdk_ids: Optional[List[str]] = None
    wait_for_completion: bool = True
    fail_on_error: bool = True
    api_url: Optional[str] = None
    max_poll_attempts: int = DEFAULT_MAX_ATTEMPTS
    poll_interval_ms: int = DEFAULT_INTERVAL_MS


class CommitInfo(BaseModel):
    """Commit that triggered the workflow; fields are "" when unknown."""
    sha: str = ""
    message: str = ""
    repository: str = ""


def _required(config: ConfigProvider, name: str) -> str:
    value = config.get_input(name)
    if not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def _boolean(config: ConfigProvider, name: str, default: bool) -> bool:
    # Same accepted spellings as @actions/core getBooleanInput
    value = config.get_input(name)
    if not value:
        return default
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        f"Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def _integer(config: ConfigProvider, name: str, default: int, minimum: int) -> int:
    value = config.get_input(name)
    if not value:
        return default
    try:
        number = int(value)
    except ValueError:
        raise ConfigurationError(f"Input {name} must be an integer, got {value!r}")
    if number < minimum:
        raise ConfigurationError(f"Input {name} must be at least {minimum}, got {number}")
    return number


def parse_sdk_ids(raw: str) -> Optional[List[str]]:
    """Split a comma-separated SDK id list; None when nothing is listed."""
    ids = [part.strip() for part in raw.split(",") if part.strip()]
    return ids or None


def parse_inputs(config: ConfigProvider) -> ActionInputs:
    """
    Collect and validate the action inputs.

    Raises:
        ConfigurationError: a required input is missing or a value is invalid
    """
    return ActionInputs(
        spec_id=_required(config, "spec_id"),
        api_token=_required(config, "api_token"),
        spec_path=config.get_input("spec_path"),
        sdk_ids=parse_sdk_ids(config.get_input("sdk_ids")),
        wait_for_completion=_boolean(config, "wait_for_completion", True),
        fail_on_error=_boolean(config, "fail_on_error", True),
        api_url=config.get_input("api_url") or None,
        max_poll_attempts=_integer(config, "max_poll_attempts", DEFAULT_MAX_ATTEMPTS, 1),
        poll_interval_ms=_integer(config, "poll_interval_ms", DEFAULT_INTERVAL_MS, 0),
    )


def _head_commit_message_from_event(event_path: str) -> str:
    try:
        with open(event_path, "r", encoding="utf-8") as f:
            event: Dict = json.load(f)
    except (OSError, ValueError) as e:
        logger.debug(f"Could not read workflow event payload {event_path}: {e}")
        return ""
    head_commit = event.get("head_commit") if isinstance(event, dict) else None
    if isinstance(head_commit, dict) and isinstance(head_commit.get("message"), str):
        return head_commit["message"]
    return ""


def read_commit_info(config: ConfigProvider) -> CommitInfo:
    """
    Commit metadata for the trigger call.

    The commit message comes from GITHUB_EVENT_HEAD_COMMIT_MESSAGE when the
    workflow exports it, otherwise from the push event payload.
    """
    message = config.get_env("GITHUB_EVENT_HEAD_COMMIT_MESSAGE")
    if not message and config.get_env("GITHUB_EVENT_PATH"):
        message = _head_commit_message_from_event(config.get_env("GITHUB_EVENT_PATH"))
    return CommitInfo(
        sha=config.get_env("GITHUB_SHA"),
        message=message,
        repository=config.get_env("GITHUB_REPOSITORY"),
    )


def read_spec_file(spec_path: str) -> str:
    """
    Read the spec document as text.

    Raises:
        ConfigurationError: the file does not exist or cannot be read
    """
    try:
        with open(spec_path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        raise ConfigurationError(f"Spec file not found: {spec_path}")
    except OSError as e:
        raise ConfigurationError(f"Could not read spec file {spec_path}: {e}")
    except UnicodeDecodeError:
        raise ConfigurationError(f"Spec file {spec_path} is not valid UTF-8 text")
