"""HTTP client to communicate with the CodeForge generation API."""

import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from codeforge_action.errors import ApiError, PollCancelledError, PollTimeoutError
from codeforge_action.models import GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.code-forge.net/"
DEFAULT_MAX_ATTEMPTS = 60
DEFAULT_INTERVAL_MS = 5000

Sleep = Callable[[float], Awaitable[Any]]


# Set CODEFORGE_API_URL to point the action at another deployment,
# e.g. export CODEFORGE_API_URL=http://127.0.0.1:8000/ for local development.
def get_api_url(override: Optional[str] = None) -> str:
    """
    Get and normalize the API base URL.

    An explicit override wins, then the CODEFORGE_API_URL environment
    variable, then the production URL.
    """
    url = override or os.getenv("CODEFORGE_API_URL") or DEFAULT_API_URL
    # Paths are joined relative to the base, so it must end with /
    if not url.endswith('/'):
        url += '/'
    return url


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _error_message(response: httpx.Response) -> str:
    """Server-provided ``error`` text when the body has one, else the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return response.reason_phrase or f"HTTP {response.status_code}"


def _decode_result(response: httpx.Response) -> GenerationResult:
    try:
        return GenerationResult.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise ApiError(
            f"CodeForge API returned a malformed response: {e}",
            status_code=response.status_code,
        ) from e


class CodeForgeClient:
    """
    Async client for the three CodeForge endpoints used by the action.

    Use as an async context manager so the underlying connection pool is
    closed when the run ends:

        async with CodeForgeClient() as client:
            if await client.verify_token(token):
                ...

    Args:
        api_url: Base URL of the service; see get_api_url
        transport: Optional httpx transport (tests pass an httpx.MockTransport)
        timeout: Per-request timeout in seconds
        sleep: Coroutine used to wait between poll attempts
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 120.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self.api_url = get_api_url(api_url)
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=self.api_url,
            transport=transport,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "CodeForgeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ApiError(
                "Request Timeout: the CodeForge API took too long to respond."
            ) from e
        except httpx.RequestError as e:
            raise ApiError(
                f"Network Error: failed to connect to {self.api_url}. "
                f"Check the api_url input or CODEFORGE_API_URL environment variable."
            ) from e

    async def verify_token(self, token: str) -> bool:
        """
        Ask the service whether an API token is valid.

        A rejected token is an expected, user-correctable condition, so this
        never raises: any non-2xx status, network failure or unexpected body
        counts as invalid.

        Args:
            token: The API token to check

        Returns:
            True only if the service answered 2xx with ``{"valid": true}``
        """
        try:
            response = await self._send("POST", "action/auth/token", json={"api_token": token})
        except ApiError as e:
            logger.warning(f"Token verification request failed: {e}")
            return False

        if not response.is_success:
            logger.warning(f"Token verification returned HTTP {response.status_code}")
            return False

        try:
            data = response.json()
        except ValueError:
            logger.warning("Token verification returned a non-JSON body")
            return False

        return isinstance(data, dict) and data.get("valid") is True

    async def trigger_generation(self, request: GenerationRequest, token: str) -> GenerationResult:
        """
        Start a generation run for a spec.

        Args:
            request: Spec, target SDKs and commit metadata for the run
            token: API token sent as a bearer credential

        Returns:
            The run as reported by the service, usually still queued

        Raises:
            ApiError: non-2xx response, network failure or malformed body
        """
        response = await self._send(
            "POST",
            f"generation-entity/{request.spec_id}/generate",
            json=request.to_payload(),
            headers=_bearer(token),
        )
        if not response.is_success:
            raise ApiError(
                f"CodeForge API error: {_error_message(response)}",
                status_code=response.status_code,
            )
        return _decode_result(response)

    async def poll_generation_status(
        self,
        run_id: str,
        token: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationResult:
        """
        Wait for a generation run to reach ``completed`` or ``failed``.

        Makes at most ``max_attempts`` GET requests, sleeping ``interval_ms``
        between two attempts. An error response ends the wait at once. When
        the attempts run out the last non-terminal status is dropped and only
        the timeout is reported.

        Args:
            run_id: Identifier returned by trigger_generation
            token: API token sent as a bearer credential
            max_attempts: Number of status requests to make at most
            interval_ms: Pause between two requests, in milliseconds
            cancel_event: Checked before each attempt after the first;
                once set, polling stops with PollCancelledError

        Returns:
            The first terminal GenerationResult

        Raises:
            ApiError: non-2xx response, network failure or malformed body
            PollTimeoutError: no terminal status within max_attempts
            PollCancelledError: cancel_event was set
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval_ms < 0:
            raise ValueError("interval_ms must not be negative")

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                await self._sleep(interval_ms / 1000)
                if cancel_event is not None and cancel_event.is_set():
                    raise PollCancelledError(
                        f"Polling for generation run {run_id} was cancelled after {attempt - 1} attempt(s)"
                    )

            response = await self._send("GET", f"generation-runs/{run_id}", headers=_bearer(token))
            if not response.is_success:
                raise ApiError(
                    f"CodeForge API error while polling: {_error_message(response)}",
                    status_code=response.status_code,
                )

            result = _decode_result(response)
            if result.is_terminal:
                return result
            logger.info(f"Attempt {attempt}/{max_attempts}: status is {result.status}")

        raise PollTimeoutError(
            f"Generation run {run_id} did not finish after {max_attempts} attempts "
            f"(waited {(max_attempts - 1) * interval_ms / 1000:g}s)"
        )
