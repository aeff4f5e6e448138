"""Ledger read layer: the gateway contract and its JSON-RPC implementation."""

from .gateway import LedgerGateway
from .rpc import RpcLedgerGateway


__all__ = ["LedgerGateway", "RpcLedgerGateway"]
