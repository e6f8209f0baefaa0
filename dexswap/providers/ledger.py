"""JSON-RPC ledger client for allowance and balance reads."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ..config import settings
from ..core.errors import LedgerReadFailure
from ..core.execution.tx_builder import (
    encode_allowance,
    encode_approve,
    encode_balance_of,
    parse_quantity,
)
from .base import LedgerClient


logger = logging.getLogger(__name__)


class RpcLedgerClient(LedgerClient):
    """Reads ERC20 and native balances through ``eth_call`` / ``eth_getBalance``."""

    name = "rpc"

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        *,
        timeout_s: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.rpc_url = rpc_url or settings.rpc_url
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._client = client
        self._request_id = 0

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make an RPC call; any transport or node error becomes LedgerReadFailure."""
        if not self.rpc_url:
            raise LedgerReadFailure("No RPC URL configured", method=method)

        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }

        try:
            if self._client is not None:
                response = await self._client.post(self.rpc_url, json=payload, timeout=self.timeout_s)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                    response = await client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("RPC %s failed: %s", method, exc)
            raise LedgerReadFailure(f"RPC {method} failed: {exc}", method=method) from exc

        if "error" in result:
            logger.warning("RPC %s returned error: %s", method, result["error"])
            raise LedgerReadFailure(f"RPC error: {result['error']}", method=method)

        return result.get("result")

    async def _eth_call(self, to_address: str, data: str) -> int:
        raw = await self._rpc_call("eth_call", [{"to": to_address, "data": data}, "latest"])
        try:
            return parse_quantity(raw)
        except (TypeError, ValueError) as exc:
            raise LedgerReadFailure(f"Unparseable eth_call result: {raw!r}", method="eth_call", address=to_address) from exc

    async def read_allowance(self, token_address: str, owner_address: str, spender_address: str) -> int:
        return await self._eth_call(token_address, encode_allowance(owner_address, spender_address))

    async def read_token_balance(self, token_address: str, owner_address: str) -> int:
        return await self._eth_call(token_address, encode_balance_of(owner_address))

    async def read_native_balance(self, address: str) -> int:
        raw = await self._rpc_call("eth_getBalance", [address, "latest"])
        try:
            return parse_quantity(raw)
        except (TypeError, ValueError) as exc:
            raise LedgerReadFailure(f"Unparseable balance: {raw!r}", method="eth_getBalance", address=address) from exc

    def encode_approve_call(self, token_address: str, spender_address: str, amount: int) -> str:
        return encode_approve(spender_address, amount)
