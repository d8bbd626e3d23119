"""
Sparkz Backend: Mux Video Provider Client
==========================================

What:  Thin async wrapper around the Mux Video REST API.
How:   One shared httpx.AsyncClient with HTTP basic auth
       (MUX_TOKEN_ID:MUX_TOKEN_SECRET). `call()` never raises; it returns a
       MuxResponse describing success or failure. The typed helpers on top of
       it raise UpstreamServiceError so services can stay straight-line.
Who:   AuthService (provision on signup, release on failed insert) and
       UserService (stream key reset).

Call contract:
    call(method, path, body=None) -> MuxResponse(success, data, error, status_code)
    - JSON body sent when `body` is given
    - Response body parsed as JSON whatever the status (empty body → None)
    - success == 200 <= status < 300
    - Transport failures (DNS, connect, timeout) and unparseable bodies become
      success=False with `error` set; nothing propagates

There are no retries. A failed provider call fails the request.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.config import settings
from app.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

LIVE_STREAMS_PATH = "/video/v1/live-streams"

# Public playback for the live stream and its recorded assets, low-latency ingest
NEW_LIVE_STREAM_BODY = {
    "playback_policy": ["public"],
    "new_asset_settings": {"playback_policy": ["public"]},
    "latency_mode": "low",
}


@dataclass
class MuxResponse:
    """Outcome of a single provider call."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


@dataclass
class LiveStreamCredentials:
    """Ingest and playback identifiers of a freshly provisioned live stream."""

    stream_key: str
    stream_id: str
    playback_id: Optional[str] = None


class MuxClient:
    """
    Mux Video API client.

    Args:
        token_id / token_secret: Mux access token pair
        base_url: API root, https://api.mux.com in production
        timeout: Per-request timeout in seconds
        client: Pre-built httpx.AsyncClient (tests pass one backed by
                httpx.MockTransport). When omitted the client is created
                lazily and owned by this instance.
    """

    def __init__(
        self,
        token_id: str,
        token_secret: str,
        base_url: str = "https://api.mux.com",
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._auth = httpx.BasicAuth(token_id, token_secret)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._own_client = client is None
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                auth=self._auth,
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        """Closes the owned HTTP client. Called during application shutdown."""
        if self._own_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def call(self, method: str, path: str, body: Optional[dict] = None) -> MuxResponse:
        """
        Issues one authenticated request and reports the outcome.

        Args:
            method: HTTP verb
            path: API path starting with "/", appended to the base URL
            body: Optional JSON payload

        Returns:
            MuxResponse. Never raises for provider or network problems.
        """
        call_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()
        client = self._get_client()

        try:
            response = await client.request(method, path, json=body, auth=self._auth)
        except httpx.HTTPError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] Mux %s %s failed after %.0fms: %s",
                call_id, method, path, duration_ms, type(e).__name__,
            )
            return MuxResponse(success=False, error=str(e) or type(e).__name__)

        duration_ms = (time.perf_counter() - start_time) * 1000
        success = 200 <= response.status_code < 300

        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError:
                logger.error(
                    "[%s] Mux %s %s returned a non-JSON body (status %d)",
                    call_id, method, path, response.status_code,
                )
                return MuxResponse(
                    success=False,
                    error="Provider returned a non-JSON response",
                    status_code=response.status_code,
                )

        log_level = logging.INFO if success else logging.WARNING
        logger.log(
            log_level,
            "[%s] Mux %s %s -> %d in %.0fms",
            call_id, method, path, response.status_code, duration_ms,
        )

        error = None
        if not success:
            error = _extract_error_message(data) or f"HTTP {response.status_code}"

        return MuxResponse(
            success=success,
            data=data,
            error=error,
            status_code=response.status_code,
        )

    # ── Typed operations ──────────────────────────────────────────────────

    async def create_live_stream(self) -> LiveStreamCredentials:
        """
        Provisions a public, low-latency live stream.

        Raises:
            UpstreamServiceError: call failed or the answer lacks a key/id
        """
        result = await self.call("POST", LIVE_STREAMS_PATH, NEW_LIVE_STREAM_BODY)
        if not result.success:
            raise UpstreamServiceError(
                message="Failed to create stream",
                operation="create_live_stream",
                status_code=result.status_code,
                context={"provider_error": result.error},
            )

        stream = _payload(result.data)
        stream_key = stream.get("stream_key")
        stream_id = stream.get("id")
        if not stream_key or not stream_id:
            raise UpstreamServiceError(
                message="Failed to create stream",
                operation="create_live_stream",
                status_code=result.status_code,
                context={"provider_error": "response missing stream_key or id"},
            )

        playback_ids = stream.get("playback_ids") or []
        playback_id = None
        if playback_ids and isinstance(playback_ids[0], dict):
            playback_id = playback_ids[0].get("id")

        return LiveStreamCredentials(
            stream_key=stream_key,
            stream_id=stream_id,
            playback_id=playback_id,
        )

    async def reset_stream_key(self, stream_id: str) -> str:
        """
        Rotates the ingest key of an existing live stream.

        Returns:
            The new stream key.

        Raises:
            UpstreamServiceError: call failed or the answer lacks a key
        """
        result = await self.call("POST", f"{LIVE_STREAMS_PATH}/{stream_id}/reset-stream-key")
        if not result.success:
            raise UpstreamServiceError(
                message="Failed to reset stream key",
                operation="reset_stream_key",
                status_code=result.status_code,
                context={"provider_error": result.error, "stream_id": stream_id},
            )

        stream_key = _payload(result.data).get("stream_key")
        if not stream_key:
            raise UpstreamServiceError(
                message="Failed to reset stream key",
                operation="reset_stream_key",
                status_code=result.status_code,
                context={"provider_error": "response missing stream_key", "stream_id": stream_id},
            )
        return stream_key

    async def delete_live_stream(self, stream_id: str) -> bool:
        """
        Releases a live stream. Best effort: returns False instead of raising.

        Used to undo a provision whose user row could not be inserted.
        """
        result = await self.call("DELETE", f"{LIVE_STREAMS_PATH}/{stream_id}")
        if not result.success:
            logger.error(
                "Could not release Mux live stream %s: %s", stream_id, result.error
            )
        return result.success


def _payload(data: Any) -> dict:
    """Mux wraps every resource in {"data": {...}}."""
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        return data["data"]
    return {}


def _extract_error_message(data: Any) -> Optional[str]:
    """Pulls the message out of a Mux error body ({"error": {"messages": [...]}})."""
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        messages = error.get("messages")
        if isinstance(messages, list) and messages:
            return "; ".join(str(m) for m in messages)
        if error.get("type"):
            return str(error["type"])
    return None


# ── Singleton Instance ────────────────────────────────────────────────────
# One HTTP connection pool to Mux for the whole process
mux_client = MuxClient(
    token_id=settings.mux_token_id,
    token_secret=settings.mux_token_secret,
    base_url=settings.mux_base_url,
    timeout=settings.mux_timeout,
)
