"""
Fire-and-forget access logging.

The route guard hands every request's access event to ``AccessLogger.emit``,
which schedules an HTTP POST to the configured log endpoint and returns
immediately. Delivery failures are logged at debug level and otherwise dropped.
"""

import asyncio
import logging
from typing import Optional, Set, Iterable

import httpx
from fastapi import Request

logger = logging.getLogger(__name__)

REDACTED = "[redacted]"


def build_access_event(
    request: Request,
    request_id: str,
    redact_cookies: Iterable[str] = (),
) -> dict:
    """
    Build the access-log event for a request.

    Args:
        request: Incoming request
        request_id: Correlation id generated for this request
        redact_cookies: Cookie names whose values must not leave the process

    Returns:
        dict with level, requestId and request details
    """
    hidden = set(redact_cookies)
    cookies = {
        name: (REDACTED if name in hidden else value)
        for name, value in request.cookies.items()
    }
    headers = dict(request.headers)
    if "cookie" in headers:
        headers["cookie"] = REDACTED

    return {
        "level": "info",
        "requestId": request_id,
        "request": {
            "url": str(request.url),
            "method": request.method,
            "path": request.url.path,
            "headers": headers,
            "cookies": cookies,
        },
    }


class AccessLogger:
    """
    Posts access events to the log endpoint without blocking the caller.

    The destination is fixed at construction; nothing taken from an incoming
    request decides where events are sent.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        endpoint_path: str = "/api/logger",
        enabled: bool = True,
        timeout: float = 2.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize AccessLogger.

        Args:
            base_url: Origin serving the log endpoint
            endpoint_path: Path of the log endpoint
            enabled: When False, ``emit`` does nothing
            timeout: Per-request timeout in seconds
            client: HTTP client used for every delivery; one is created if omitted
        """
        self._url = base_url.rstrip("/") + endpoint_path
        self._endpoint_path = endpoint_path
        self._enabled = enabled
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._pending: Set[asyncio.Task] = set()

    @property
    def endpoint_path(self) -> str:
        return self._endpoint_path

    @property
    def url(self) -> str:
        return self._url

    def emit(self, event: dict) -> None:
        """
        Schedule delivery of an access event. Never raises.

        Args:
            event: Event built by ``build_access_event``
        """
        if not self._enabled:
            return

        try:
            task = asyncio.get_running_loop().create_task(self._post(event))
        except RuntimeError as e:
            logger.debug(f"Access log not scheduled: {e}")
            return

        # Keep a reference until done so the task is not garbage collected
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post(self, event: dict) -> None:
        try:
            await self._client.post(self._url, json=event, timeout=self._timeout)
        except Exception as e:
            logger.debug(f"Error logging request {event.get('requestId')}: {e}")

    async def flush(self) -> None:
        """Wait for every scheduled delivery to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        """Flush pending deliveries and close the client."""
        await self.flush()
        await self._client.aclose()
