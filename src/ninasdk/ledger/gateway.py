"""
Abstract boundary between the enrichment engine and the ledger.

The enricher only needs two reads: one account, or many accounts in one
index-aligned batch. Keeping that surface small lets tests swap in an
in-memory gateway and lets callers plug in any transport.

See Also:
    [RpcLedgerGateway][ninasdk.ledger.rpc.RpcLedgerGateway]: JSON-RPC
        implementation over ``aiohttp``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


class LedgerGateway(ABC):
    """Read-only access to raw account bytes.

    Implementations must keep ``fetch_many`` output index-aligned with its
    input: slot ``i`` holds the bytes stored at ``addresses[i]``, or ``None``
    when no account exists there. Slots are never dropped or reordered.
    Transport failures surface as
    [LedgerFetchFailure][ninasdk.exceptions.LedgerFetchFailure].
    """

    @abstractmethod
    async def fetch_one(self, address: str) -> bytes | None:
        """Raw data of the account at *address*, or ``None`` if absent."""

    @abstractmethod
    async def fetch_many(self, addresses: Sequence[str]) -> list[bytes | None]:
        """Raw data for every address, in input order."""
