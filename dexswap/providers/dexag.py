"""Async client for the dex.ag aggregator API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.swap.constants import PROVIDER_NAME
from .base import AggregatorClient


class DexAgProvider(AggregatorClient):
    """Thin wrapper around the dex.ag trade, status and address endpoints."""

    name = PROVIDER_NAME

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        configured = base_url or settings.dexag_base_url
        if configured:
            self.base_urls: List[str] = [configured.rstrip("/")]
        else:
            self.base_urls = ["https://api-v2.dex.ag", "https://api.dex.ag"]
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "user-agent": "dexswap/0.1",
        }

    async def _request(self, method: str, path: str, **params: Any) -> httpx.Response:
        """GET-style call against each configured host until one answers."""
        last_error: Optional[Exception] = None

        for index, base_url in enumerate(self.base_urls):
            try:
                async with httpx.AsyncClient(
                    base_url=base_url,
                    timeout=self.timeout_s,
                    transport=self._transport,
                ) as client:
                    response = await client.request(method, path, headers=self._headers(), params=params)
                    response.raise_for_status()
                    return response
            except httpx.HTTPStatusError as exc:
                # Older hosts lack some routes; only fall through on 404/405.
                if exc.response.status_code in (404, 405) and index < len(self.base_urls) - 1:
                    self._logger.warning("dex.ag %s %s not served by %s, trying next host", method, path, base_url)
                    last_error = exc
                    continue
                raise
            except httpx.RequestError as exc:
                self._logger.warning("dex.ag host %s unreachable: %s", base_url, exc)
                last_error = exc
                continue

        if last_error is not None:
            raise last_error
        raise RuntimeError("All dex.ag hosts failed without providing an error response")

    async def create_trade(self, request: Any, dex: str) -> Dict[str, Any]:
        """Create a trade; the response carries ``trade`` and ``metadata`` objects."""

        params = {
            "from": request.from_currency,
            "to": request.to_currency,
            "fromAmount": str(request.from_value),
            "dex": dex,
            "recipient": request.to_address,
        }
        resp = await self._request("GET", "/trade", **params)
        return resp.json()

    async def get_status(self, order_id: str, network: str) -> str:
        resp = await self._request("GET", "/status", id=order_id, network=network)
        body = resp.json()
        if isinstance(body, dict):
            return body.get("status") or body.get("result")
        return body

    async def validate_address(self, currency: str, address: str, network: str) -> bool:
        resp = await self._request("GET", "/validate-address", currency=currency, address=address, network=network)
        body = resp.json()
        if isinstance(body, dict):
            return bool(body.get("result", body.get("valid", False)))
        return bool(body)
