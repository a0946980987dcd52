"""
Command-line entry point.

Inside a GitHub Actions step, inputs arrive as INPUT_* environment variables
and outputs go to $GITHUB_OUTPUT. Run locally, the same values can be given
as options and the outputs are printed instead.
"""

import asyncio
import logging
import os
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from codeforge_action import __version__
from codeforge_action.inputs import EnvironmentConfig
from codeforge_action.outputs import ConsoleOutputSink, GitHubOutputSink
from codeforge_action.runner import run


def escape_command_data(message: str) -> str:
    """Escape a message for a ``::error::`` workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def report_failure(message: str, console: Console) -> None:
    click.echo(f"::error::{escape_command_data(message)}")
    console.print(Panel(
        f"[bold red]{escape(message)}[/bold red]",
        title="CodeForge",
        border_style="red",
    ))


@click.command()
@click.version_option(version=__version__, prog_name="codeforge-action")
@click.option("--spec-id", help="CodeForge spec identifier (INPUT_SPEC_ID).")
@click.option("--api-token", help="CodeForge API token (INPUT_API_TOKEN).")
@click.option("--spec-path", help="Path of the spec file to upload (INPUT_SPEC_PATH).")
@click.option("--sdk-ids", help="Comma-separated SDK ids to build (INPUT_SDK_IDS).")
@click.option("--wait/--no-wait", "wait_for_completion", default=None,
              help="Wait for the generation run to finish (INPUT_WAIT_FOR_COMPLETION).")
@click.option("--fail-on-error/--no-fail-on-error", "fail_on_error", default=None,
              help="Exit non-zero when the generation fails (INPUT_FAIL_ON_ERROR).")
@click.option("--api-url", help="Override the CodeForge API URL (INPUT_API_URL).")
@click.option("--max-poll-attempts", type=int, help="Status checks before giving up.")
@click.option("--poll-interval-ms", type=int, help="Pause between status checks.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose, **options):
    """Trigger CodeForge SDK generation for a spec and report the result."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    overrides = {}
    for name, value in options.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        overrides[name] = str(value)

    config = EnvironmentConfig(overrides=overrides)
    console = Console(stderr=True)
    output_path = os.environ.get("GITHUB_OUTPUT")
    sink = GitHubOutputSink(output_path) if output_path else ConsoleOutputSink()

    outcome = asyncio.run(run(config, sink, console=console))
    if not outcome.success:
        report_failure(outcome.message, console)
        sys.exit(1)
