from __future__ import annotations

from typing import Any

import httpx


class RtdbClient:
    """Read-only client for a path-addressed JSON store (`GET <base>/<path>.json`)."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        auth_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.strip('/')}.json"

    async def get_json(self, path: str, *, params: dict[str, str] | None = None) -> Any:
        query = dict(params or {})
        if self._auth_token:
            query["auth"] = self._auth_token
        resp = await self._client.get(self.url_for(path), params=query or None)
        resp.raise_for_status()
        return resp.json()
