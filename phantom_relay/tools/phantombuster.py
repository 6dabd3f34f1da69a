"""
PhantomBuster API client.

Launches the LinkedIn search agent and fetches a container's status/output.
PhantomBuster answers in a few different envelopes depending on API version
and agent; each accepted envelope is a named ResponseShape, anything else
decodes to UnrecognizedShape.
"""

import logging
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from phantom_relay.config import settings
from phantom_relay.errors import LaunchError, PollError

logger = logging.getLogger(__name__)

LAUNCH_PATH = "/api/v1/agent/{agent_id}/launch"
OUTPUT_PATH = "/api/v1/agent/{agent_id}/output"
API_KEY_HEADER = "X-Phantombuster-Key-1"

_ID_FIELDS = ("containerId", "id")
_STATUS_FIELDS = ("containerStatus", "status")
_NESTED_STATUS_FIELDS = ("containerStatus", "status", "agentStatus")
_RESULT_FIELDS = ("resultObject", "result", "results")
_ERROR_FIELDS = ("error", "exitMessage", "message")

_FINISHED = {"finished", "success", "done", "completed", "not running"}
_ABORTED = {"aborted", "killed", "stopped", "canceled", "cancelled"}
_ERRORED = {"error", "failed", "failure"}


class ResponseShape(str, Enum):
    """Accepted response envelopes."""

    TOP_LEVEL = "top_level"
    DATA = "data"
    CONTAINER = "container"


class UnrecognizedShape(BaseModel):
    """A response matching none of the accepted envelopes."""

    reason: str
    body: Any = None


class LaunchReceipt(BaseModel):
    shape: ResponseShape
    container_id: str


class StatusReport(BaseModel):
    """Canonical status of one remote job."""

    status: str  # running/finished/aborted/error
    result: Any = None
    error: str | None = None
    shape: ResponseShape | None = None


def _first(node: dict, fields: tuple[str, ...]) -> Any:
    for field in fields:
        value = node.get(field)
        if value not in (None, ""):
            return value
    return None


def decode_launch(body: Any) -> LaunchReceipt | UnrecognizedShape:
    """Decode a launch response into a container id."""
    if not isinstance(body, dict):
        return UnrecognizedShape(reason="launch response is not a JSON object", body=body)

    candidates = [
        (ResponseShape.TOP_LEVEL, body),
        (ResponseShape.DATA, body.get("data")),
        (ResponseShape.CONTAINER, body.get("container")),
    ]
    for shape, node in candidates:
        if isinstance(node, dict):
            container_id = _first(node, _ID_FIELDS)
            if container_id is not None:
                return LaunchReceipt(shape=shape, container_id=str(container_id))

    reason = "no container id in launch response"
    remote_error = _first(body, _ERROR_FIELDS)
    if remote_error:
        reason = f"{reason}: {remote_error}"
    return UnrecognizedShape(reason=reason, body=body)


def map_status(raw: Any) -> str:
    """Map a PhantomBuster status string onto running/finished/aborted/error."""
    value = str(raw or "").strip().lower()
    if value in _FINISHED:
        return "finished"
    if value in _ABORTED:
        return "aborted"
    if value in _ERRORED:
        return "error"
    return "running"


def decode_status(body: Any) -> StatusReport | UnrecognizedShape:
    """Decode an output/status response.

    When a container/data envelope is present only that envelope carries the
    job status: the v1 API puts its own request status ("success") at the
    root. An envelope without any status field reads as still running.
    The result payload is passed through untouched.
    """
    if not isinstance(body, dict):
        return UnrecognizedShape(reason="status response is not a JSON object", body=body)

    for shape, key in ((ResponseShape.CONTAINER, "container"), (ResponseShape.DATA, "data")):
        node = body.get(key)
        if isinstance(node, dict):
            return _status_report(shape, node, body, _NESTED_STATUS_FIELDS)

    if _first(body, _STATUS_FIELDS) is None:
        return UnrecognizedShape(reason="no job status in output response", body=body)
    return _status_report(ResponseShape.TOP_LEVEL, body, body, _STATUS_FIELDS)


def _status_report(shape: ResponseShape, node: dict, body: dict, status_fields: tuple[str, ...]) -> StatusReport:
    raw_status = _first(node, status_fields)
    status = map_status(raw_status)

    result = _first(node, _RESULT_FIELDS)
    if result is None and node is not body:
        result = _first(body, _RESULT_FIELDS)

    error = None
    if status in ("aborted", "error"):
        error = str(_first(node, _ERROR_FIELDS) or f"PhantomBuster job {raw_status}")

    return StatusReport(status=status, result=result, error=error, shape=shape)


class PhantomBusterClient:
    """Async wrapper around the two PhantomBuster calls the relay needs."""

    def __init__(
        self,
        api_key: str,
        agent_id: str,
        base_url: str = "https://api.phantombuster.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.agent_id = agent_id
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                API_KEY_HEADER: api_key,
            },
        )

    async def launch(self, search_url: str) -> str:
        """
        Launch the agent on one LinkedIn search URL.

        Args:
            search_url: LinkedIn people-search URL

        Returns:
            PhantomBuster container id of the launched job

        Raises:
            LaunchError: transport failure or no container id in the response
        """
        payload = {
            "output": "first-result-object",
            "argument": {"search": search_url, "searches": [search_url]},
        }
        path = LAUNCH_PATH.format(agent_id=self.agent_id)

        try:
            response = await self._http.post(path, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise LaunchError(
                f"PhantomBuster launch HTTP error: {e.response.status_code}",
                http_status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise LaunchError(f"PhantomBuster launch error: {e!r}", transport=True) from e
        except ValueError as e:
            raise LaunchError(f"PhantomBuster launch returned invalid JSON: {e}") from e

        decoded = decode_launch(body)
        if isinstance(decoded, UnrecognizedShape):
            raise LaunchError(f"PhantomBuster launch failed: {decoded.reason}")

        logger.debug(f"Launched container {decoded.container_id} ({decoded.shape.value} response)")
        return decoded.container_id

    async def fetch_status(self, container_id: str) -> StatusReport:
        """
        Fetch the current status and result of a launched job.

        Never raises: transport failures and unrecognized responses come back
        as a synthetic "error" report so one bad status check cannot break a
        poll round.
        """
        try:
            return await self._fetch_output(container_id)
        except PollError as e:
            logger.warning(f"Status fetch for container {container_id} failed: {e.message}")
            return StatusReport(status="error", error=e.message)

    async def _fetch_output(self, container_id: str) -> StatusReport:
        path = OUTPUT_PATH.format(agent_id=self.agent_id)
        params = {"containerId": container_id, "withoutResultObject": "false"}

        try:
            response = await self._http.get(path, params=params)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise PollError(f"PhantomBuster output HTTP error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise PollError(f"PhantomBuster output error: {e!r}") from e
        except ValueError as e:
            raise PollError(f"PhantomBuster output returned invalid JSON: {e}") from e

        decoded = decode_status(body)
        if isinstance(decoded, UnrecognizedShape):
            raise PollError(f"Unrecognized PhantomBuster output: {decoded.reason}")
        return decoded

    async def aclose(self) -> None:
        await self._http.aclose()


# Initialize client (lazy - only when credentials are set)
_client: PhantomBusterClient | None = None


def get_client() -> PhantomBusterClient:
    """Get or create the PhantomBuster client. FastAPI dependency."""
    global _client
    if _client is None:
        missing = settings.missing_credentials()
        if missing:
            raise ValueError(f"{', '.join(missing)} not set")
        _client = PhantomBusterClient(
            api_key=settings.phantombuster_api_key,
            agent_id=settings.phantombuster_agent_id,
            base_url=settings.phantombuster_api_url,
            timeout=settings.request_timeout,
        )
    return _client


async def close_client() -> None:
    """Close the shared client. Call at app shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
