"""
rest.py — Hiven REST API Client

Thin async wrapper over httpx for the state-changing side of the API.
Independent of the gateway: handlers may call it while a session is live.

Every request goes to https://<api_host>/v1<path> with an
`authorization: <token>` header. Requests other than GET carry a JSON body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx

from hiven.exceptions import HTTPConnectionError, HTTPRequestError
from hiven.observability.logger import get_logger

log = get_logger(__name__)

DEFAULT_API_HOST = "api.hiven.io"

RoomId = Union[int, str]


@dataclass
class RequestInfo:
    method: str
    path: str
    body: Optional[dict[str, Any]] = field(default=None)

    @classmethod
    def message_send(cls, room_id: RoomId, content: str) -> "RequestInfo":
        """POST /rooms/{room_id}/messages"""
        return cls(
            method="POST",
            path=f"/rooms/{int(room_id)}/messages",
            body={"content": content},
        )


class RestClient:
    """
    Async REST client. Owns its httpx.AsyncClient unless one is passed in.
    """

    def __init__(
        self,
        token: str,
        api_host: str = DEFAULT_API_HOST,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self._token = token
        self._base_url = f"https://{api_host}/v1"
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def execute(self, request: RequestInfo) -> httpx.Response:
        """Send one request. Raises HTTPRequestError on non-2xx, HTTPConnectionError on network failure."""
        url = f"{self._base_url}{request.path}"
        headers = {"authorization": self._token}
        kwargs: dict[str, Any] = {"headers": headers}
        if request.method.upper() != "GET":
            headers["content-type"] = "application/json"
            kwargs["json"] = request.body if request.body is not None else {}

        log.debug("rest.request", method=request.method, path=request.path)
        try:
            response = await self._http.request(request.method.upper(), url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.warning("rest.request.failed", method=request.method, path=request.path, status=status)
            raise HTTPRequestError(
                status,
                f"{request.method} {request.path} failed with HTTP {status}",
                body=e.response.text[:2000],
            ) from e
        except httpx.HTTPError as e:
            log.warning(
                "rest.request.error",
                method=request.method,
                path=request.path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise HTTPConnectionError(f"Cannot reach {url}: {e}") from e
        return response

    async def send_message(self, room_id: RoomId, content: str) -> None:
        await self.execute(RequestInfo.message_send(room_id, content))
