"""
Block-explorer holder discovery.

Walks an Etherscan-compatible logs API (etherscan, bscscan, basescan,
era explorer, ...) from the token's creation block to the snapshot block
in fixed windows and yields every address that ever received the token.
Discovery is lazy: a window is only requested when the consumer asks for
more addresses, and a fixed delay precedes every request to stay under
the explorer's rate limit.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Iterator, Optional

from core.http.client import HttpClient, HttpError
from core.schemas.errors import AirdropException, ErrorCodes
from core.schemas.holders import normalize_address

logger = logging.getLogger(__name__)

# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

DEFAULT_BLOCK_STEP = 50_000
DEFAULT_REQUEST_DELAY = 0.5

LLAMA_BLOCK_URL = "https://coins.llama.fi/block/{chain}/{timestamp}"


class ExplorerError(AirdropException):
    """Explorer or block-lookup API returned an unusable response."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EXPLORER_ERROR,
            details=details,
            retryable=True,
        )


def _is_empty_result(payload: dict[str, Any]) -> bool:
    # Etherscan reports an empty window as status "0"
    message = str(payload.get("message", "")).lower()
    return payload.get("status") == "0" and "no records found" in message


def recipient_from_log(log: dict[str, Any]) -> str:
    """Transfer recipient from a raw log: the last 20 bytes of topics[2]."""
    topics = log.get("topics") or []
    if len(topics) < 3:
        raise ExplorerError("Transfer log without a recipient topic", details={"log": log})
    return normalize_address("0x" + topics[2][-40:])


class ExplorerClient:
    """
    Client for an Etherscan-compatible logs API.

    Example:
        >>> explorer = ExplorerClient("https://api.basescan.org", api_key)
        >>> for address in explorer.iter_transfer_recipients(token, 4298599, 15378131):
        ...     print(address)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        *,
        http: Optional[HttpClient] = None,
        block_step: int = DEFAULT_BLOCK_STEP,
        request_delay: float = DEFAULT_REQUEST_DELAY,
        sleep=time.sleep,
    ) -> None:
        if block_step <= 0:
            raise ValueError(f"block_step must be positive, got {block_step}")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.http = http or HttpClient()
        self.block_step = block_step
        self.request_delay = request_delay
        self._sleep = sleep

    def get_transfer_logs(self, token: str, from_block: int, to_block: int) -> list[dict[str, Any]]:
        """
        Fetch Transfer logs emitted by token in [from_block, to_block].

        Raises:
            ExplorerError: On a non-success payload other than "no records"
        """
        params = {
            "module": "logs",
            "action": "getLogs",
            "fromBlock": from_block,
            "toBlock": to_block,
            "address": token,
            "topic0": TRANSFER_TOPIC,
            "apikey": self.api_key,
        }
        if self.request_delay > 0:
            self._sleep(self.request_delay)

        response = self.http.get(f"{self.base_url}/api", params=params)
        try:
            response.raise_for_status()
            payload = response.json()
        except (HttpError, ValueError) as e:
            raise ExplorerError(
                f"Explorer request failed for blocks {from_block}-{to_block}: {e}",
                details={"from_block": from_block, "to_block": to_block},
            ) from e

        if payload.get("status") == "1":
            return list(payload.get("result") or [])
        if _is_empty_result(payload):
            return []
        raise ExplorerError(
            f"Explorer returned an error for blocks {from_block}-{to_block}: "
            f"{payload.get('message')} {payload.get('result')}",
            details={"from_block": from_block, "to_block": to_block, "payload": payload},
        )

    def iter_block_windows(self, from_block: int, to_block: int) -> Iterator[tuple[int, int]]:
        """Inclusive [start, end] windows of at most block_step + 1 blocks."""
        start = from_block
        while start <= to_block:
            end = min(start + self.block_step, to_block)
            yield start, end
            start = end + 1

    def iter_transfer_recipients(self, token: str, from_block: int, to_block: int) -> Iterator[str]:
        """
        Lazily yield each distinct Transfer recipient once, lowercase.

        Args:
            token: Token contract address
            from_block: First block to scan (usually the creation block)
            to_block: Snapshot block
        """
        seen: set[str] = set()
        for start, end in self.iter_block_windows(from_block, to_block):
            logger.debug("Fetching transfer logs from block %d to %d", start, end)
            for log in self.get_transfer_logs(token, start, end):
                recipient = recipient_from_log(log)
                if recipient not in seen:
                    seen.add(recipient)
                    yield recipient


def resolve_block_number(chain: str, timestamp: int, *, http: Optional[HttpClient] = None) -> int:
    """
    Block height closest to a unix timestamp, via DefiLlama's block API.

    Raises:
        ExplorerError: If the response carries no height
    """
    client = http or HttpClient()
    url = LLAMA_BLOCK_URL.format(chain=chain, timestamp=int(timestamp))
    response = client.get(url)
    try:
        response.raise_for_status()
        height = response.json()["height"]
    except (HttpError, ValueError, KeyError, TypeError) as e:
        raise ExplorerError(
            f"Could not resolve block for {chain} at {timestamp}: {e}",
            details={"chain": chain, "timestamp": timestamp},
        ) from e
    return int(height)


__all__ = [
    "TRANSFER_TOPIC",
    "DEFAULT_BLOCK_STEP",
    "DEFAULT_REQUEST_DELAY",
    "ExplorerError",
    "ExplorerClient",
    "recipient_from_log",
    "resolve_block_number",
]
