from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx


class PortalClient:
    """Thin async client for the portal's public API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "PortalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_error_types(self) -> list[dict[str, Any]]:
        r = await self._client.get("/error-types")
        r.raise_for_status()
        return r.json()

    async def validate_customer(self, customer_number: str) -> bool:
        r = await self._client.get(f"/customers/{quote(customer_number, safe='')}/validate")
        r.raise_for_status()
        return bool(r.json().get("valid"))

    async def generate_rma(self) -> str:
        r = await self._client.post("/rma/generate")
        r.raise_for_status()
        return r.json()["rmaNumber"]

    async def create_ticket(self, payload: dict[str, Any]) -> dict[str, Any]:
        r = await self._client.post("/support-tickets", json=payload)
        r.raise_for_status()
        return r.json()

    async def download_document(self, rma_number: str) -> bytes:
        r = await self._client.get(f"/support-tickets/{quote(rma_number, safe='')}/document")
        r.raise_for_status()
        return r.content
