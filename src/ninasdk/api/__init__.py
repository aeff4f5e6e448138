"""JSON API client. See [NinaApi][ninasdk.api.client.NinaApi].

Per-entity requests live in [ninasdk.api.resources][].
"""

from .client import NinaApi
from .resources import (
    Accounts,
    Exchanges,
    Hubs,
    Pagination,
    Posts,
    Releases,
    Resource,
    Search,
    Subscriptions,
)


__all__ = [
    "Accounts",
    "Exchanges",
    "Hubs",
    "NinaApi",
    "Pagination",
    "Posts",
    "Releases",
    "Resource",
    "Search",
    "Subscriptions",
]
