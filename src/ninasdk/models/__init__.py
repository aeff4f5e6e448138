"""Pure models layer: constants, derived addresses and API routes.

Zero network I/O. Address derivation is CPU-only (SHA-256 plus a curve
check), and routes are frozen dataclasses produced by
[parse_route()][ninasdk.models.routes.parse_route].

See Also:
    [ninasdk.models.constants][]: Program ids, mints and record type names.
    [ninasdk.models.address][]: Program-derived address computation.
    [ninasdk.models.routes][]: Closed set of enrichable API routes.
"""

from .address import (
    DerivedAddress,
    derive_address,
    hub_child_address,
    hub_collaborator_address,
    hub_content_address,
    subscription_address,
    to_pubkey,
)
from .constants import (
    MAX_SAFE_INTEGER,
    MAX_U64,
    NINA_PROGRAM_ID,
    Cluster,
    HubChildKind,
    RecordType,
)
from .routes import ROUTE_TYPES, AccountReleaseKind, Route, UnknownRoute, parse_route


__all__ = [
    "MAX_SAFE_INTEGER",
    "MAX_U64",
    "NINA_PROGRAM_ID",
    "ROUTE_TYPES",
    "AccountReleaseKind",
    "Cluster",
    "DerivedAddress",
    "HubChildKind",
    "RecordType",
    "Route",
    "UnknownRoute",
    "derive_address",
    "hub_child_address",
    "hub_collaborator_address",
    "hub_content_address",
    "parse_route",
    "subscription_address",
    "to_pubkey",
]
