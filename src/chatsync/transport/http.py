"""
REST HTTP client for the remote message store.
"""

import logging
from typing import Any, Optional

import httpx

from chatsync.errors import RemoteStoreError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api",
            headers={"User-Agent": "chatsync/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _unwrap(json_data: Any) -> Any:
        """Unwrap ``{"status": ..., "data": <actual_data>}`` responses."""
        if isinstance(json_data, dict) and "status" in json_data and "data" in json_data:
            return json_data["data"]
        return json_data

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, headers=self._auth_headers(), **kwargs)
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{method} {path} failed: {e}", code="network_error") from e
        if resp.status_code >= 400:
            raise RemoteStoreError(
                f"HTTP {resp.status_code}: {resp.text[:200]}",
                code="http_error",
                details={"status": resp.status_code},
            )
        if not resp.content:
            return None
        try:
            return self._unwrap(resp.json())
        except ValueError as e:
            raise RemoteStoreError(f"Invalid JSON from {method} {path}", code="decode_error") from e

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("POST", path, json=body)

    async def patch(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("PATCH", path, json=body)

    async def delete(self, path: str, params: Optional[dict[str, str]] = None) -> Any:
        return await self._request("DELETE", path, params=params)

    async def close(self) -> None:
        await self._client.aclose()
