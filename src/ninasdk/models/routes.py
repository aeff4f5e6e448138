"""
Closed set of API routes that can carry on-chain account data.

[parse_route()][ninasdk.models.routes.parse_route] turns a JSON API path into
one frozen ``Route`` variant by matching path *segments*, not ordered regular
expressions, so overlapping shapes such as ``/releases/{id}/exchanges`` and
``/accounts/{id}/exchanges`` can never shadow each other. Paths that carry no
ledger data map to [UnknownRoute][ninasdk.models.routes.UnknownRoute], which
the enricher passes through unchanged.

Examples:
    ```python
    parse_route("/hubs/ninas-picks")
    # HubRoute(hub='ninas-picks')
    parse_route("/accounts/52xY.../collected?limit=20")
    # AccountReleasesRoute(account='52xY...', kind=<AccountReleaseKind.COLLECTED: 'collected'>)
    parse_route("/verifications")
    # UnknownRoute(path='/verifications')
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import urlsplit


class AccountReleaseKind(StrEnum):
    """Release lists hanging off an account; the value is the JSON list key."""

    PUBLISHED = "published"
    COLLECTED = "collected"
    REVENUE_SHARES = "revenueShares"


@dataclass(frozen=True, slots=True)
class Route:
    """Base for all route variants. Never instantiated directly."""


# --- hubs -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HubsRoute(Route):
    """``/hubs``"""


@dataclass(frozen=True, slots=True)
class HubRoute(Route):
    """``/hubs/{hub}`` -- hub plus its releases, posts and collaborators."""

    hub: str


@dataclass(frozen=True, slots=True)
class HubReleasesRoute(Route):
    """``/hubs/{hub}/releases``"""

    hub: str


@dataclass(frozen=True, slots=True)
class HubPostsRoute(Route):
    """``/hubs/{hub}/posts``"""

    hub: str


@dataclass(frozen=True, slots=True)
class HubCollaboratorsRoute(Route):
    """``/hubs/{hub}/collaborators``"""

    hub: str


@dataclass(frozen=True, slots=True)
class HubSubscriptionsRoute(Route):
    """``/hubs/{hub}/subscriptions``"""

    hub: str


# --- releases ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReleasesRoute(Route):
    """``/releases``"""


@dataclass(frozen=True, slots=True)
class ReleaseRoute(Route):
    """``/releases/{release}``"""

    release: str


@dataclass(frozen=True, slots=True)
class ReleaseHubsRoute(Route):
    """``/releases/{release}/hubs``"""

    release: str


@dataclass(frozen=True, slots=True)
class ReleaseExchangesRoute(Route):
    """``/releases/{release}/exchanges``"""

    release: str


@dataclass(frozen=True, slots=True)
class RevenueShareRecipientsRoute(Route):
    """``/releases/{release}/revenueShareRecipients``"""

    release: str


# --- posts ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PostsRoute(Route):
    """``/posts``"""


@dataclass(frozen=True, slots=True)
class PostRoute(Route):
    """``/posts/{post}``"""

    post: str


# --- accounts ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AccountRoute(Route):
    """``/accounts/{account}`` -- hubs, published, collected, posts, exchanges."""

    account: str


@dataclass(frozen=True, slots=True)
class AccountHubsRoute(Route):
    """``/accounts/{account}/hubs``"""

    account: str


@dataclass(frozen=True, slots=True)
class AccountReleasesRoute(Route):
    """``/accounts/{account}/{published|collected|revenueShares}``"""

    account: str
    kind: AccountReleaseKind


@dataclass(frozen=True, slots=True)
class AccountPostsRoute(Route):
    """``/accounts/{account}/posts``"""

    account: str


@dataclass(frozen=True, slots=True)
class AccountExchangesRoute(Route):
    """``/accounts/{account}/exchanges``"""

    account: str


@dataclass(frozen=True, slots=True)
class AccountSubscriptionsRoute(Route):
    """``/accounts/{account}/subscriptions``"""

    account: str


# --- exchanges, search, subscriptions ---------------------------------------


@dataclass(frozen=True, slots=True)
class ExchangesRoute(Route):
    """``/exchanges``"""


@dataclass(frozen=True, slots=True)
class ExchangeRoute(Route):
    """``/exchanges/{exchange}``"""

    exchange: str


@dataclass(frozen=True, slots=True)
class SearchRoute(Route):
    """``/search``"""


@dataclass(frozen=True, slots=True)
class SubscriptionsRoute(Route):
    """``/subscriptions``"""


@dataclass(frozen=True, slots=True)
class SubscriptionRoute(Route):
    """``/subscriptions/{subscription}``"""

    subscription: str


@dataclass(frozen=True, slots=True)
class UnknownRoute(Route):
    """Any path without on-chain account data. Enrichment is a no-op."""

    path: str


ROUTE_TYPES: tuple[type[Route], ...] = (
    HubsRoute,
    HubRoute,
    HubReleasesRoute,
    HubPostsRoute,
    HubCollaboratorsRoute,
    HubSubscriptionsRoute,
    ReleasesRoute,
    ReleaseRoute,
    ReleaseHubsRoute,
    ReleaseExchangesRoute,
    RevenueShareRecipientsRoute,
    PostsRoute,
    PostRoute,
    AccountRoute,
    AccountHubsRoute,
    AccountReleasesRoute,
    AccountPostsRoute,
    AccountExchangesRoute,
    AccountSubscriptionsRoute,
    ExchangesRoute,
    ExchangeRoute,
    SearchRoute,
    SubscriptionsRoute,
    SubscriptionRoute,
    UnknownRoute,
)


_ACCOUNT_RELEASE_KINDS = frozenset(kind.value for kind in AccountReleaseKind)

# Collection paths with no identifier segment.
_COLLECTIONS: dict[str, type[Route]] = {
    "hubs": HubsRoute,
    "releases": ReleasesRoute,
    "posts": PostsRoute,
    "exchanges": ExchangesRoute,
    "search": SearchRoute,
    "subscriptions": SubscriptionsRoute,
}

# ``/{collection}/{id}``
_ENTITIES: dict[str, type[Route]] = {
    "hubs": HubRoute,
    "releases": ReleaseRoute,
    "posts": PostRoute,
    "accounts": AccountRoute,
    "exchanges": ExchangeRoute,
    "subscriptions": SubscriptionRoute,
}

# ``/{collection}/{id}/{relation}``
_RELATIONS: dict[tuple[str, str], type[Route]] = {
    ("hubs", "releases"): HubReleasesRoute,
    ("hubs", "posts"): HubPostsRoute,
    ("hubs", "collaborators"): HubCollaboratorsRoute,
    ("hubs", "subscriptions"): HubSubscriptionsRoute,
    ("releases", "hubs"): ReleaseHubsRoute,
    ("releases", "exchanges"): ReleaseExchangesRoute,
    ("releases", "revenueShareRecipients"): RevenueShareRecipientsRoute,
    ("accounts", "hubs"): AccountHubsRoute,
    ("accounts", "posts"): AccountPostsRoute,
    ("accounts", "exchanges"): AccountExchangesRoute,
    ("accounts", "subscriptions"): AccountSubscriptionsRoute,
}


def parse_route(path: str) -> Route:
    """Classify an API path into a ``Route`` variant.

    The query string and leading or trailing slashes are ignored. Matching
    is total: unrecognized paths yield ``UnknownRoute``.

    Args:
        path: API path such as ``/hubs/ninas-picks/releases?limit=20``.

    Returns:
        The matching route variant.
    """
    clean = urlsplit(path).path
    segments = [s for s in clean.split("/") if s]

    if len(segments) == 1 and segments[0] in _COLLECTIONS:
        return _COLLECTIONS[segments[0]]()

    if len(segments) == 2 and segments[0] in _ENTITIES:
        return _ENTITIES[segments[0]](segments[1])

    if len(segments) == 3:
        collection, ident, relation = segments
        if collection == "accounts" and relation in _ACCOUNT_RELEASE_KINDS:
            return AccountReleasesRoute(ident, AccountReleaseKind(relation))
        route_type = _RELATIONS.get((collection, relation))
        if route_type is not None:
            return route_type(ident)

    return UnknownRoute(path)
