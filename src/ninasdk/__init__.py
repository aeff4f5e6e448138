r"""Nina SDK -- read client for the Nina JSON API with on-chain account data.

The JSON API serves a denormalized index of hubs, releases, posts, exchanges
and subscriptions. The canonical records live on-chain. This package fetches
the API response, derives the addresses of the records behind it, batch-reads
and decodes them, and splices the normalized data back under ``accountData``.

Architecture follows a layered dependency structure where imports flow
strictly downward:

```text
              client / api         Facade and JSON API client
                   |
                enrich             Route recipes and address-keyed merging
               /      \
          ledger      codec        JSON-RPC gateway / binary record decoding
               \      /
         core  models  utils       Config and logging, pure models, helpers
                   |
               exceptions
```

Note:
    For lightweight usage, import directly from subpackages::

        from ninasdk.codec import Release
        from ninasdk.models import derive_address

    Top-level imports (``from ninasdk import Nina``) use lazy loading and
    resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("nina-sdk")

__all__ = [
    "ApiError",
    "ClientConfig",
    "DecodeError",
    "LedgerFetchFailure",
    "LedgerGateway",
    "Nina",
    "NinaApi",
    "NinaError",
    "RecordNotFound",
    "RecordType",
    "RouteEnricher",
    "RpcLedgerGateway",
    "decode",
    "derive_address",
    "parse_route",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Nina": ("ninasdk.client", "Nina"),
    "NinaApi": ("ninasdk.api", "NinaApi"),
    "ClientConfig": ("ninasdk.core", "ClientConfig"),
    "RouteEnricher": ("ninasdk.enrich", "RouteEnricher"),
    "LedgerGateway": ("ninasdk.ledger", "LedgerGateway"),
    "RpcLedgerGateway": ("ninasdk.ledger", "RpcLedgerGateway"),
    "decode": ("ninasdk.codec", "decode"),
    "RecordType": ("ninasdk.models", "RecordType"),
    "derive_address": ("ninasdk.models", "derive_address"),
    "parse_route": ("ninasdk.models", "parse_route"),
    "NinaError": ("ninasdk.exceptions", "NinaError"),
    "ApiError": ("ninasdk.exceptions", "ApiError"),
    "DecodeError": ("ninasdk.exceptions", "DecodeError"),
    "LedgerFetchFailure": ("ninasdk.exceptions", "LedgerFetchFailure"),
    "RecordNotFound": ("ninasdk.exceptions", "RecordNotFound"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'ninasdk' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
