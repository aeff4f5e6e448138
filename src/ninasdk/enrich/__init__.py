"""Enrichment layer: route recipes and address-keyed merging.

See Also:
    [RouteEnricher][ninasdk.enrich.enricher.RouteEnricher]: Dispatches a
        route to its join recipe.
    [attach()][ninasdk.enrich.merger.attach]: Splices decoded records onto
        JSON items by address.
"""

from .enricher import Lookup, RouteEnricher, is_open_exchange, items_of
from .merger import account_data, account_data_errors, attach, decode_batch, item_address


__all__ = [
    "Lookup",
    "RouteEnricher",
    "account_data",
    "account_data_errors",
    "attach",
    "decode_batch",
    "is_open_exchange",
    "item_address",
    "items_of",
]
