"""
Blockchain balance lookups for contract funding checks.

Any Ethereum-compatible JSON-RPC node works (BNB Smart Chain, Polygon, ...).
"""

from decimal import Decimal
from typing import Optional, Protocol
import logging

import httpx

from core.security import normalize_address

logger = logging.getLogger(__name__)

# Native coin decimals on Ethereum-compatible networks
WEI_DECIMALS = 18

# Well-known addresses answered by the in-process oracle
FUNDED_TEST_ADDRESS = "0xaB8722B889D231d62c9eB35Eb1b557926F3B3289"
NOT_FUNDED_TEST_ADDRESS = "0x9Ca2702c5bcc51D79d9a059D58607028aa36DD67"


class BlockchainError(Exception):
    """Raised when the node cannot answer a balance request."""
    pass


class BalanceOracle(Protocol):
    """Anything that can tell the native coin balance of an address."""

    async def balance(self, address: str) -> Decimal:
        ...

    async def close(self) -> None:
        ...


class StaticBalanceOracle:
    """
    Oracle backed by a fixed address to balance map.

    Used when the node URL is "test". Addresses are compared case-insensitively
    and unknown addresses hold nothing.
    """

    def __init__(self, balances: Optional[dict[str, Decimal]] = None):
        if balances is None:
            balances = {
                FUNDED_TEST_ADDRESS: Decimal("42"),
                NOT_FUNDED_TEST_ADDRESS: Decimal("0"),
            }
        self._balances = {normalize_address(k): Decimal(v) for k, v in balances.items()}

    def set_balance(self, address: str, amount: Decimal) -> None:
        self._balances[normalize_address(address)] = Decimal(amount)

    async def balance(self, address: str) -> Decimal:
        return self._balances.get(normalize_address(address), Decimal("0"))

    async def close(self) -> None:
        return None


class JsonRpcBalanceOracle:
    """Oracle asking a node through `eth_getBalance`."""

    def __init__(self, url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the oracle.

        Args:
            url: JSON-RPC endpoint of the node
            timeout: Per-request timeout in seconds
            client: Pre-built client, mostly for tests
        """
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    async def balance(self, address: str) -> Decimal:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": "eth_getBalance",
            "params": [address, "latest"],
            "id": self._request_id,
        }
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Balance request for {address} failed: {e}")
            raise BlockchainError(f"unable to query balance: {e}") from e

        data = response.json()
        if data.get("error"):
            raise BlockchainError(f"node error: {data['error'].get('message', data['error'])}")

        wei = int(data["result"], 16)
        return Decimal(wei).scaleb(-WEI_DECIMALS)

    async def close(self) -> None:
        await self._client.aclose()


def create_balance_oracle(url: str, timeout: float = 5.0) -> BalanceOracle:
    """Build the oracle that matches the configured node URL."""
    if url == "test":
        logger.info("Using in-process balance oracle")
        return StaticBalanceOracle()
    return JsonRpcBalanceOracle(url, timeout=timeout)
