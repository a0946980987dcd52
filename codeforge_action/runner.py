"""Run the action: verify, trigger, wait, publish."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from rich.console import Console

from codeforge_action.client import CodeForgeClient, Sleep
from codeforge_action.errors import AuthenticationError
from codeforge_action.inputs import (
    ConfigProvider,
    parse_inputs,
    read_commit_info,
    read_spec_file,
)
from codeforge_action.models import GenerationRequest, GenerationResult
from codeforge_action.outputs import OutputSink, render_summary, set_outputs

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid CodeForge API token. Generate one at code-forge.net/settings"


@dataclass(frozen=True)
class RunOutcome:
    """How a run ended. ``result`` is the last result seen, if any."""
    success: bool
    message: str = ""
    result: Optional[GenerationResult] = None


def failure_message(result: GenerationResult) -> str:
    return "SDK generation failed. Check logs at: " + ", ".join(result.logs_urls)


async def _execute(
    config: ConfigProvider,
    sink: OutputSink,
    transport: Optional[httpx.AsyncBaseTransport],
    sleep: Sleep,
    console: Console,
) -> RunOutcome:
    inputs = parse_inputs(config)

    spec_content = read_spec_file(inputs.spec_path) if inputs.spec_path else None

    async with CodeForgeClient(inputs.api_url, transport=transport, sleep=sleep) as client:
        if not await client.verify_token(inputs.api_token):
            raise AuthenticationError(INVALID_TOKEN_MESSAGE)

        commit = read_commit_info(config)
        request = GenerationRequest(
            spec_id=inputs.spec_id,
            spec_path=inputs.spec_path,
            spec_content=spec_content,
            sdk_ids=inputs.sdk_ids,
            commit_sha=commit.sha,
            commit_message=commit.message,
            repository=commit.repository,
        )
        result = await client.trigger_generation(request, inputs.api_token)
        logger.info(f"Generation triggered: {result.generation_run_id}")

        if inputs.wait_for_completion:
            logger.info("Waiting for generation to complete...")
            result = await client.poll_generation_status(
                result.generation_run_id,
                inputs.api_token,
                max_attempts=inputs.max_poll_attempts,
                interval_ms=inputs.poll_interval_ms,
            )

    set_outputs(result, sink)
    render_summary(result, console)

    if result.status == "failed" and inputs.fail_on_error:
        return RunOutcome(success=False, message=failure_message(result), result=result)
    return RunOutcome(success=True, result=result)


async def run(
    config: ConfigProvider,
    sink: OutputSink,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleep = asyncio.sleep,
    console: Optional[Console] = None,
) -> RunOutcome:
    """
    Execute one run of the action.

    Never raises: any error along the way is reported once, as a failed
    RunOutcome whose message starts with "Action failed". A remote run
    that ends ``failed`` still publishes its outputs and only fails the
    outcome when the fail_on_error input is on.
    """
    console = console or Console(stderr=True)
    try:
        return await _execute(config, sink, transport, sleep, console)
    except Exception as e:
        logger.debug("Run failed", exc_info=True)
        message = str(e)
        if message:
            return RunOutcome(success=False, message=f"Action failed: {message}")
        return RunOutcome(success=False, message="Action failed with an unknown error")
