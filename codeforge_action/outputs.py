"""Step outputs and the run summary."""

import json
import logging
import uuid
from typing import Dict, Optional, Protocol

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from codeforge_action.models import GenerationResult

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    """Receives the named outputs of a run."""

    def set_output(self, name: str, value: str) -> None:
        ...


class GitHubOutputSink:
    """Appends outputs to the file named by $GITHUB_OUTPUT."""

    def __init__(self, path: str):
        self.path = path

    def set_output(self, name: str, value: str) -> None:
        # Heredoc form so values may contain newlines
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if delimiter in name or delimiter in value:
            raise ValueError(f"Unexpected input: output delimiter found in {name}")
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


class ConsoleOutputSink:
    """Prints outputs; used when the action runs outside GitHub Actions."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def set_output(self, name: str, value: str) -> None:
        self.console.print(f"[bold]{name}[/bold]={escape(value)}", highlight=False)


def build_outputs(result: GenerationResult) -> Dict[str, str]:
    """
    Project a generation result onto the action's outputs.

    ``generation_urls`` joins the logs URL of every SDK with commas;
    ``published_packages`` is a JSON array holding only the SDKs that
    pushed a package, in SDK order.
    """
    packages = [package.model_dump() for package in result.published_packages]
    return {
        "generation_run_id": result.generation_run_id,
        "status": result.status,
        "generation_urls": ",".join(result.logs_urls),
        "published_packages": json.dumps(packages),
    }


def set_outputs(result: GenerationResult, sink: OutputSink) -> Dict[str, str]:
    outputs = build_outputs(result)
    for name, value in outputs.items():
        sink.set_output(name, value)
    logger.debug(f"Published outputs: {sorted(outputs)}")
    return outputs


def render_summary(result: GenerationResult, console: Console) -> None:
    """Print a per-SDK table for the run."""
    table = Table(title=f"Generation run {result.generation_run_id}: {result.status}")
    table.add_column("SDK")
    table.add_column("Status")
    table.add_column("Package")
    table.add_column("Logs")
    for sdk in result.sdks:
        package = sdk.published_package
        table.add_row(
            sdk.name,
            sdk.status,
            f"{package.name}@{package.version}" if package else "-",
            sdk.logs_url,
        )
    console.print(table)
