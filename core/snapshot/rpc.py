"""
JSON-RPC balance and bytecode queries at a fixed block.

balanceOf calls are sent as JSON-RPC batches (one HTTP request per
batch_size addresses). Responses are matched back to requests by id,
since nodes may answer a batch out of order.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

from core.crypto.hashing import from_hex, to_hex
from core.http.client import HttpClient, HttpError
from core.schemas.errors import AirdropException, ErrorCodes
from core.schemas.holders import normalize_address

logger = logging.getLogger(__name__)

BALANCE_OF_SELECTOR: bytes = function_signature_to_4byte_selector("balanceOf(address)")
DEFAULT_BATCH_SIZE = 100


class RpcError(AirdropException):
    """The node rejected a call or returned a malformed response."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.RPC_ERROR,
            details=details,
            retryable=True,
        )


def encode_balance_of(holder: str) -> str:
    """Calldata for balanceOf(holder)."""
    return to_hex(BALANCE_OF_SELECTOR + encode(["address"], [normalize_address(holder)]))


def decode_uint256(result: str) -> int:
    data = from_hex(result)
    if len(data) == 0:
        # Non-contract targets answer eth_call with empty data
        return 0
    (value,) = decode(["uint256"], data)
    return value


class RpcClient:
    """Minimal Ethereum JSON-RPC client for snapshot queries."""

    def __init__(
        self,
        url: str,
        *,
        http: Optional[HttpClient] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.url = url
        self.http = http or HttpClient()
        self.batch_size = batch_size
        self._next_id = 0

    def _payload(self, method: str, params: list[Any]) -> dict[str, Any]:
        self._next_id += 1
        return {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}

    def _post(self, body: Any) -> Any:
        response = self.http.post(self.url, json=body)
        try:
            response.raise_for_status()
            return response.json()
        except (HttpError, ValueError) as e:
            raise RpcError(f"RPC request to {self.url} failed: {e}") from e

    @staticmethod
    def _result(reply: dict[str, Any]) -> Any:
        if "error" in reply:
            raise RpcError(f"RPC error: {reply['error']}", details={"reply": reply})
        if "result" not in reply:
            raise RpcError("RPC reply without a result", details={"reply": reply})
        return reply["result"]

    def call(self, method: str, params: list[Any]) -> Any:
        """Single JSON-RPC call."""
        reply = self._post(self._payload(method, params))
        if not isinstance(reply, dict):
            raise RpcError("Unexpected RPC reply", details={"reply": reply})
        return self._result(reply)

    def batch_call(self, calls: Sequence[tuple[str, list[Any]]]) -> list[Any]:
        """JSON-RPC batch; results are returned in request order."""
        if not calls:
            return []
        payloads = [self._payload(method, params) for method, params in calls]
        replies = self._post(payloads)
        if not isinstance(replies, list):
            raise RpcError("Batch RPC reply is not a list", details={"reply": replies})

        by_id = {reply.get("id"): reply for reply in replies if isinstance(reply, dict)}
        results: list[Any] = []
        for payload in payloads:
            reply = by_id.get(payload["id"])
            if reply is None:
                raise RpcError(f"Missing reply for request id {payload['id']}")
            results.append(self._result(reply))
        return results

    def balances_of(self, token: str, holders: Sequence[str], block: int) -> list[int]:
        """
        balanceOf(holder) for every holder at block, in input order.
        """
        block_tag = hex(block)
        token = normalize_address(token)
        balances: list[int] = []
        for start in range(0, len(holders), self.batch_size):
            chunk = holders[start:start + self.batch_size]
            logger.debug("Querying balances %d-%d of %d", start, start + len(chunk), len(holders))
            calls = [
                ("eth_call", [{"to": token, "data": encode_balance_of(holder)}, block_tag])
                for holder in chunk
            ]
            balances.extend(decode_uint256(result) for result in self.batch_call(calls))
        return balances

    def is_contract(self, address: str, block: int) -> bool:
        """True if the address had bytecode at block."""
        code = self.call("eth_getCode", [normalize_address(address), hex(block)])
        return code not in (None, "0x", "0x0")


__all__ = [
    "BALANCE_OF_SELECTOR",
    "DEFAULT_BATCH_SIZE",
    "RpcError",
    "RpcClient",
    "encode_balance_of",
    "decode_uint256",
]
