"""Named read requests for each JSON API entity.

Every API path the SDK knows is built here, so callers write
``await nina.hubs.fetch_releases("ninas-picks")`` instead of assembling
``/hubs/ninas-picks/releases`` themselves. Each resource is a thin wrapper
around a [NinaApi][ninasdk.api.client.NinaApi]; ``with_account_data=True``
routes the response through the
[RouteEnricher][ninasdk.enrich.enricher.RouteEnricher] exactly as
``NinaApi.get()`` does.

The resources are grouped as follows:

- **Accounts**: ``fetch_all``, ``fetch``, ``fetch_hubs``, ``fetch_collected``,
  ``fetch_published``, ``fetch_posts``, ``fetch_exchanges``,
  ``fetch_revenue_shares``, ``fetch_subscriptions``, ``fetch_verifications``
- **Hubs**: ``fetch_all``, ``fetch``, ``fetch_collaborators``,
  ``fetch_hub_collaborator``, ``fetch_releases``, ``fetch_posts``,
  ``fetch_hub_release``, ``fetch_hub_post``, ``fetch_subscriptions``,
  ``fetch_all_content_nodes``
- **Releases**: ``fetch_all``, ``fetch``, ``fetch_collectors``, ``fetch_hubs``,
  ``fetch_exchanges``, ``fetch_revenue_share_recipients``
- **Posts**, **Exchanges**, **Subscriptions**: ``fetch_all``, ``fetch``
- **Search**: ``with_query``

Note:
    ``fetch_all`` always sends pagination, defaulting to
    ``limit=20, offset=0, sort=desc``. Relation listings send pagination
    only when one is given and otherwise leave the server defaults in force.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


if TYPE_CHECKING:
    from .client import NinaApi


class Pagination(BaseModel):
    """Page selection for list endpoints."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)
    sort: Literal["asc", "desc"] = "desc"

    def to_query(self) -> dict[str, Any]:
        return self.model_dump()


def _page(pagination: Pagination | None) -> dict[str, Any] | None:
    return pagination.to_query() if pagination is not None else None


class Resource:
    """Base for the per-entity request groups.

    Args:
        api: Client that performs the requests.
    """

    collection: str = ""

    def __init__(self, api: NinaApi) -> None:
        self._api = api

    def _path(self, *segments: str) -> str:
        return "/" + "/".join((self.collection, *segments))

    async def fetch_all(
        self, pagination: Pagination | None = None, *, with_account_data: bool = False
    ) -> Any:
        """Page through the whole collection."""
        return await self._api.get(
            self._path(),
            (pagination or Pagination()).to_query(),
            with_account_data=with_account_data,
        )

    async def fetch(self, public_key: str, *, with_account_data: bool = False) -> Any:
        """Fetch one entity by public key (hubs also accept a handle)."""
        return await self._api.get(self._path(public_key), with_account_data=with_account_data)

    async def _relation(
        self,
        public_key: str,
        relation: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._api.get(
            self._path(public_key, relation),
            _page(pagination),
            with_account_data=with_account_data,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(collection={self.collection})"


class Accounts(Resource):
    """``/accounts`` requests.

    ``fetch()`` returns everything tied to the account: published and
    collected releases, hubs, posts, exchanges and revenue shares.
    """

    collection = "accounts"

    async def fetch_hubs(
        self,
        public_key: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        """Hubs the account is an authority or collaborator of."""
        return await self._relation(
            public_key, "hubs", pagination, with_account_data=with_account_data
        )

    async def fetch_collected(
        self,
        public_key: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            public_key, "collected", pagination, with_account_data=with_account_data
        )

    async def fetch_published(
        self,
        public_key: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            public_key, "published", pagination, with_account_data=with_account_data
        )

    async def fetch_posts(
        self,
        public_key: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            public_key, "posts", pagination, with_account_data=with_account_data
        )

    async def fetch_exchanges(
        self,
        public_key: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        """Open, cancelled and completed exchanges of the account."""
        return await self._relation(
            public_key, "exchanges", pagination, with_account_data=with_account_data
        )

    async def fetch_revenue_shares(
        self,
        public_key: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        """Releases on which the account is a revenue-share recipient."""
        return await self._relation(
            public_key, "revenueShares", pagination, with_account_data=with_account_data
        )

    async def fetch_subscriptions(
        self,
        public_key: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            public_key, "subscriptions", pagination, with_account_data=with_account_data
        )

    async def fetch_verifications(
        self, public_key: str, pagination: Pagination | None = None
    ) -> Any:
        """Identity verifications; these have no on-chain records to attach."""
        return await self._relation(public_key, "verifications", pagination)


class Hubs(Resource):
    """``/hubs`` requests. Hubs are addressed by public key or handle."""

    collection = "hubs"

    async def fetch_collaborators(
        self,
        hub: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            hub, "collaborators", pagination, with_account_data=with_account_data
        )

    async def fetch_hub_collaborator(self, hub: str, collaborator: str) -> Any:
        return await self._api.get(self._path(hub, "collaborators", collaborator))

    async def fetch_releases(
        self,
        hub: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            hub, "releases", pagination, with_account_data=with_account_data
        )

    async def fetch_posts(
        self,
        hub: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(hub, "posts", pagination, with_account_data=with_account_data)

    async def fetch_hub_release(self, hub: str, hub_release: str) -> Any:
        """One ``HubRelease`` entry by its own public key."""
        return await self._api.get(self._path(hub, "hubReleases", hub_release))

    async def fetch_hub_post(self, hub: str, hub_post: str) -> Any:
        """One ``HubPost`` entry by its own public key."""
        return await self._api.get(self._path(hub, "hubPosts", hub_post))

    async def fetch_subscriptions(
        self,
        hub: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            hub, "subscriptions", pagination, with_account_data=with_account_data
        )

    async def fetch_all_content_nodes(
        self, hub: str, pagination: Pagination | None = None
    ) -> Any:
        """Releases and posts of the hub in one listing."""
        return await self._relation(hub, "all", pagination)


class Releases(Resource):
    collection = "releases"

    async def fetch_collectors(self, release: str, *, with_collection: bool = False) -> Any:
        """Collectors of a release, optionally with each collector's collection."""
        query = {"withCollection": True} if with_collection else None
        return await self._api.get(self._path(release, "collectors"), query)

    async def fetch_hubs(self, release: str, *, with_account_data: bool = False) -> Any:
        return await self._relation(release, "hubs", with_account_data=with_account_data)

    async def fetch_exchanges(
        self,
        release: str,
        pagination: Pagination | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        return await self._relation(
            release, "exchanges", pagination, with_account_data=with_account_data
        )

    async def fetch_revenue_share_recipients(
        self, release: str, *, with_account_data: bool = False
    ) -> Any:
        return await self._relation(
            release, "revenueShareRecipients", with_account_data=with_account_data
        )


class Posts(Resource):
    collection = "posts"


class _TransactionLookup(Resource):
    """Entities whose ledger account may already be closed.

    A ``transaction_id`` gives the API the interaction that closed or
    created the account, so it can still describe the entity.
    """

    async def fetch(
        self,
        public_key: str,
        *,
        with_account_data: bool = False,
        transaction_id: str | None = None,
    ) -> Any:
        query = {"transactionId": transaction_id} if transaction_id else None
        return await self._api.get(
            self._path(public_key), query, with_account_data=with_account_data
        )


class Exchanges(_TransactionLookup):
    collection = "exchanges"


class Subscriptions(_TransactionLookup):
    collection = "subscriptions"


class Search:
    """``POST /search`` across hubs and releases."""

    def __init__(self, api: NinaApi) -> None:
        self._api = api

    async def with_query(self, query: str, *, with_account_data: bool = False) -> Any:
        return await self._api.post(
            "/search", {"query": query}, with_account_data=with_account_data
        )
