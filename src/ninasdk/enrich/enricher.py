"""
Route-driven enrichment of JSON API responses with on-chain account data.

[RouteEnricher][ninasdk.enrich.enricher.RouteEnricher] maps each
[Route][ninasdk.models.routes.Route] variant to a recipe. A recipe plans
*lookups* (which items, which ledger addresses, which record type, which
``accountData`` key), derives every address it needs up front, then issues
its batched reads concurrently and merges the results by address.

Lookups placed in the same group share one ``fetch_many`` call. The single
hub route, for instance, reads its releases and posts in one batch, their
``hubRelease``/``hubPost`` siblings in a second and their ``hubContent``
records in a third, all three in flight at once.

Examples:
    ```python
    enricher = RouteEnricher(gateway, program_id=NINA_PROGRAM_ID)
    enriched = await enricher.enrich("/hubs/ninas-picks", body)
    enriched["releases"][0]["accountData"].keys()
    # dict_keys(['release', 'hubRelease', 'hubContent'])
    ```

Note:
    The input body is never mutated; ``enrich()`` works on a deep copy. A
    ledger transport failure fails the whole call. A record that fails to
    decode only marks its own item under ``accountDataErrors``.
"""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ninasdk.codec import Release
from ninasdk.core.logger import Logger
from ninasdk.exceptions import DecodeError, LedgerFetchFailure, RecordNotFound
from ninasdk.models.address import (
    AddressLike,
    hub_child_address,
    hub_collaborator_address,
    hub_content_address,
    to_pubkey,
)
from ninasdk.models.constants import NINA_PROGRAM_ID, HubChildKind, RecordType
from ninasdk.models.routes import (
    AccountExchangesRoute,
    AccountHubsRoute,
    AccountPostsRoute,
    AccountReleasesRoute,
    AccountRoute,
    AccountSubscriptionsRoute,
    ExchangeRoute,
    ExchangesRoute,
    HubCollaboratorsRoute,
    HubPostsRoute,
    HubReleasesRoute,
    HubRoute,
    HubsRoute,
    HubSubscriptionsRoute,
    PostRoute,
    PostsRoute,
    ReleaseExchangesRoute,
    ReleaseHubsRoute,
    ReleaseRoute,
    ReleasesRoute,
    RevenueShareRecipientsRoute,
    Route,
    SearchRoute,
    SubscriptionRoute,
    SubscriptionsRoute,
    UnknownRoute,
    parse_route,
)

from .merger import account_data, account_data_errors, attach, decode_batch, item_address


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from solders.pubkey import Pubkey

    from ninasdk.ledger.gateway import LedgerGateway
    from ninasdk.models.address import DerivedAddress

    Recipe = Callable[[Any, dict[str, Any]], Awaitable[None]]


COLLABORATOR_FIELD = "collaborator"
REVENUE_SHARE_FIELD = "revenueShareRecipient"


@dataclass(slots=True)
class Lookup:
    """One planned join: slot ``i`` reads ``addresses[i]`` for the item keyed ``keys[i]``.

    Attributes:
        items: Candidate items; matched to slots by address.
        record_type: Record layout used to decode every slot.
        data_key: Key under ``accountData``.
        keys: Item-level addresses, one per slot.
        addresses: Ledger addresses to read, one per slot.
    """

    items: list[dict[str, Any]]
    record_type: RecordType
    data_key: str
    keys: list[str] = field(default_factory=list)
    addresses: list[str] = field(default_factory=list)

    def add(self, key: str, address: str) -> None:
        self.keys.append(key)
        self.addresses.append(address)


def items_of(body: dict[str, Any], name: str) -> list[dict[str, Any]]:
    """List field *name* of *body*; missing or malformed lists are empty."""
    value = body.get(name)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def entity_of(body: dict[str, Any], name: str) -> dict[str, Any] | None:
    value = body.get(name)
    return value if isinstance(value, dict) else None


def is_open_exchange(item: dict[str, Any]) -> bool:
    """Cancelled or completed exchanges no longer exist on-chain."""
    return not item.get("cancelled") and not item.get("completedBy")


class RouteEnricher:
    """Enriches API responses with decoded ledger records.

    Args:
        gateway: Source of raw account bytes.
        program_id: Program that owns every derived address.

    Each call is self-contained: no state is shared between ``enrich``
    calls, so one enricher may serve many concurrent requests.
    """

    def __init__(self, gateway: LedgerGateway, program_id: AddressLike = NINA_PROGRAM_ID) -> None:
        self._gateway = gateway
        self._program_id: Pubkey = to_pubkey(program_id)
        self._logger = Logger("enricher")
        self._recipes: dict[type[Route], Recipe] = {
            HubsRoute: self._enrich_hubs,
            HubRoute: self._enrich_hub,
            HubReleasesRoute: self._enrich_hub_releases,
            HubPostsRoute: self._enrich_hub_posts,
            HubCollaboratorsRoute: self._enrich_hub_collaborators,
            HubSubscriptionsRoute: self._enrich_subscriptions,
            ReleasesRoute: self._enrich_releases,
            ReleaseRoute: self._enrich_release,
            ReleaseHubsRoute: self._enrich_release_hubs,
            ReleaseExchangesRoute: self._enrich_exchanges,
            RevenueShareRecipientsRoute: self._enrich_revenue_share_recipients,
            PostsRoute: self._enrich_posts,
            PostRoute: self._enrich_post,
            AccountRoute: self._enrich_account,
            AccountHubsRoute: self._enrich_account_hubs,
            AccountReleasesRoute: self._enrich_account_releases,
            AccountPostsRoute: self._enrich_posts,
            AccountExchangesRoute: self._enrich_exchanges,
            AccountSubscriptionsRoute: self._enrich_subscriptions,
            ExchangesRoute: self._enrich_exchanges,
            ExchangeRoute: self._enrich_exchange,
            SearchRoute: self._enrich_search,
            SubscriptionsRoute: self._enrich_subscriptions,
            SubscriptionRoute: self._enrich_subscription,
            UnknownRoute: self._pass_through,
        }

    @property
    def program_id(self) -> str:
        return str(self._program_id)

    def recipe_for(self, route_type: type[Route]) -> Recipe:
        """Recipe bound to *route_type*.

        Raises:
            KeyError: If *route_type* has no recipe.
        """
        return self._recipes[route_type]

    async def enrich(self, route: Route | str, body: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of *body* with ``accountData`` attached where possible.

        Args:
            route: Parsed route, or an API path to parse.
            body: Parsed JSON response for that route.

        Raises:
            RecordNotFound: If a single-entity recipe's record is absent.
            LedgerFetchFailure: If any ledger read fails.
            AddressDerivationExhausted: If a derived address cannot be found.
        """
        if isinstance(route, str):
            route = parse_route(route)
        enriched = copy.deepcopy(body)
        self._logger.debug("enrich_started", route=type(route).__name__)
        await self._recipes[type(route)](route, enriched)
        return enriched

    # -------------------------------------------------------------------------
    # Planning helpers
    # -------------------------------------------------------------------------

    def _entity_lookup(
        self,
        items: list[dict[str, Any]],
        record_type: RecordType,
        data_key: str | None = None,
    ) -> Lookup:
        lookup = Lookup(items, record_type, data_key or record_type.value)
        for item in items:
            address = item_address(item)
            if address is not None:
                lookup.add(address, address)
        return lookup

    def _derived_lookup(
        self,
        items: list[dict[str, Any]],
        record_type: RecordType,
        data_key: str,
        derive: Callable[[str], DerivedAddress],
    ) -> Lookup:
        """Lookup whose ledger address is derived from each item's address."""
        lookup = Lookup(items, record_type, data_key)
        for item in items:
            address = item_address(item)
            if address is None:
                continue
            try:
                derived = str(derive(address))
            except ValueError as e:
                self._logger.warning(
                    "address_derivation_skipped",
                    record=record_type.value,
                    item=address,
                    error=str(e),
                )
                continue
            lookup.add(address, derived)
        return lookup

    def _hub_content_lookups(
        self, items: list[dict[str, Any]], hub: str, kind: HubChildKind
    ) -> tuple[Lookup, Lookup, Lookup]:
        """Child, type-specific sibling and ``hubContent`` lookups for a hub's items."""
        program = self._program_id
        child = self._entity_lookup(items, kind.record_type)
        sibling = self._derived_lookup(
            items,
            kind.sibling_type,
            kind.sibling_type.value,
            lambda address: hub_child_address(kind, hub, address, program),
        )
        content = self._derived_lookup(
            items,
            RecordType.HUB_CONTENT,
            RecordType.HUB_CONTENT.value,
            lambda address: hub_content_address(hub, address, program),
        )
        return child, sibling, content

    def _collaborator_lookup(self, items: list[dict[str, Any]], hub: str) -> Lookup:
        """``HubCollaborator`` records for collaborator items of one hub."""
        program = self._program_id
        return self._derived_lookup(
            items,
            RecordType.HUB_COLLABORATOR,
            COLLABORATOR_FIELD,
            lambda address: hub_collaborator_address(hub, address, program),
        )

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def _run(self, *groups: Sequence[Lookup]) -> None:
        """Fetch each group in one batch, all groups concurrently, then merge."""
        batches = [[lookup for lookup in group if lookup.addresses] for group in groups]
        batches = [batch for batch in batches if batch]
        if not batches:
            return

        fetched = await asyncio.gather(
            *(
                self._gateway.fetch_many([a for lookup in batch for a in lookup.addresses])
                for batch in batches
            )
        )

        for batch, raws in zip(batches, fetched, strict=True):
            expected = sum(len(lookup.addresses) for lookup in batch)
            if len(raws) != expected:
                raise LedgerFetchFailure(
                    f"gateway returned {len(raws)} slots for {expected} addresses"
                )
            offset = 0
            for lookup in batch:
                end = offset + len(lookup.addresses)
                decoded = decode_batch(lookup.record_type, lookup.addresses, raws[offset:end])
                attach(lookup.items, lookup.keys, decoded, lookup.data_key)
                offset = end

    async def _run_single(
        self,
        item: dict[str, Any],
        record_type: RecordType,
        *,
        required: bool = True,
        data_key: str | None = None,
    ) -> None:
        """Fetch and attach the one record named by *item*'s address."""
        address = item_address(item)
        if address is None:
            if required:
                raise RecordNotFound(record_type.value, "<missing publicKey>")
            return
        raw = await self._gateway.fetch_one(address)
        if raw is None:
            if required:
                raise RecordNotFound(record_type.value, address)
            return
        decoded = decode_batch(record_type, [address], [raw])
        attach([item], [address], decoded, data_key or record_type.value)

    # -------------------------------------------------------------------------
    # Recipes: hubs
    # -------------------------------------------------------------------------

    async def _enrich_hubs(self, route: HubsRoute, body: dict[str, Any]) -> None:
        await self._run([self._entity_lookup(items_of(body, "hubs"), RecordType.HUB)])

    async def _enrich_hub(self, route: HubRoute, body: dict[str, Any]) -> None:
        hub_item = entity_of(body, "hub")
        if hub_item is None:
            raise RecordNotFound(RecordType.HUB.value, route.hub)
        hub = item_address(hub_item)
        if hub is None:
            raise RecordNotFound(RecordType.HUB.value, "<missing publicKey>")

        releases = self._hub_content_lookups(items_of(body, "releases"), hub, HubChildKind.RELEASE)
        posts = self._hub_content_lookups(items_of(body, "posts"), hub, HubChildKind.POST)
        collaborators = self._collaborator_lookup(items_of(body, "collaborators"), hub)

        await asyncio.gather(
            self._run_single(hub_item, RecordType.HUB),
            self._run(
                [releases[0], posts[0]],
                [releases[1], posts[1]],
                [releases[2], posts[2]],
                [collaborators],
            ),
        )

    async def _enrich_hub_children(
        self, body: dict[str, Any], kind: HubChildKind, list_name: str
    ) -> None:
        hub = body.get("publicKey")
        if not isinstance(hub, str) or not hub:
            self._logger.debug("enrich_skipped", list=list_name, reason="no hub publicKey")
            return
        child, sibling, content = self._hub_content_lookups(items_of(body, list_name), hub, kind)
        await self._run([child], [sibling], [content])

    async def _enrich_hub_releases(self, route: HubReleasesRoute, body: dict[str, Any]) -> None:
        await self._enrich_hub_children(body, HubChildKind.RELEASE, "releases")

    async def _enrich_hub_posts(self, route: HubPostsRoute, body: dict[str, Any]) -> None:
        await self._enrich_hub_children(body, HubChildKind.POST, "posts")

    async def _enrich_hub_collaborators(
        self, route: HubCollaboratorsRoute, body: dict[str, Any]
    ) -> None:
        hub = body.get("publicKey")
        if not isinstance(hub, str) or not hub:
            self._logger.debug("enrich_skipped", list="collaborators", reason="no hub publicKey")
            return
        await self._run([self._collaborator_lookup(items_of(body, "collaborators"), hub)])

    # -------------------------------------------------------------------------
    # Recipes: releases
    # -------------------------------------------------------------------------

    async def _enrich_releases(self, route: ReleasesRoute, body: dict[str, Any]) -> None:
        await self._run([self._entity_lookup(items_of(body, "releases"), RecordType.RELEASE)])

    async def _enrich_release(self, route: ReleaseRoute, body: dict[str, Any]) -> None:
        item = entity_of(body, "release")
        if item is None:
            raise RecordNotFound(RecordType.RELEASE.value, route.release)
        await self._run_single(item, RecordType.RELEASE)

    async def _enrich_release_hubs(self, route: ReleaseHubsRoute, body: dict[str, Any]) -> None:
        hubs = items_of(body, "hubs")
        release = route.release
        program = self._program_id
        hub_release = self._derived_lookup(
            hubs,
            RecordType.HUB_RELEASE,
            RecordType.HUB_RELEASE.value,
            lambda hub: hub_child_address(HubChildKind.RELEASE, hub, release, program),
        )
        hub_content = self._derived_lookup(
            hubs,
            RecordType.HUB_CONTENT,
            RecordType.HUB_CONTENT.value,
            lambda hub: hub_content_address(hub, release, program),
        )
        await self._run(
            [self._entity_lookup(hubs, RecordType.HUB)],
            [hub_release],
            [hub_content],
        )

    async def _enrich_revenue_share_recipients(
        self, route: RevenueShareRecipientsRoute, body: dict[str, Any]
    ) -> None:
        recipients = items_of(body, "revenueShareRecipients")
        if not recipients:
            return

        raw = await self._gateway.fetch_one(route.release)
        if raw is None:
            raise RecordNotFound(RecordType.RELEASE.value, route.release)
        try:
            release = Release.decode(raw, route.release)
        except DecodeError as e:
            self._logger.warning(
                "record_decode_failed",
                field=REVENUE_SHARE_FIELD,
                address=route.release,
                error=str(e),
            )
            for item in recipients:
                account_data_errors(item)[REVENUE_SHARE_FIELD] = str(e)
            return

        for item in recipients:
            authority = item_address(item)
            match = release.recipient_for(authority) if authority else None
            if match is not None:
                account_data(item)[REVENUE_SHARE_FIELD] = match.to_dict()

    # -------------------------------------------------------------------------
    # Recipes: posts
    # -------------------------------------------------------------------------

    async def _enrich_posts(
        self, route: PostsRoute | AccountPostsRoute, body: dict[str, Any]
    ) -> None:
        await self._run([self._entity_lookup(items_of(body, "posts"), RecordType.POST)])

    async def _enrich_post(self, route: PostRoute, body: dict[str, Any]) -> None:
        item = entity_of(body, "post")
        if item is None:
            raise RecordNotFound(RecordType.POST.value, route.post)
        tasks = [self._run_single(item, RecordType.POST)]
        hub_item = entity_of(body, "publishedThroughHub")
        if hub_item is not None:
            tasks.append(self._run_single(hub_item, RecordType.HUB, required=False))
        await asyncio.gather(*tasks)

    # -------------------------------------------------------------------------
    # Recipes: accounts
    # -------------------------------------------------------------------------

    async def _enrich_account(self, route: AccountRoute, body: dict[str, Any]) -> None:
        await self._run(
            [self._entity_lookup(items_of(body, "hubs"), RecordType.HUB)],
            [
                self._entity_lookup(items_of(body, "published"), RecordType.RELEASE),
                self._entity_lookup(items_of(body, "collected"), RecordType.RELEASE),
            ],
            [self._entity_lookup(items_of(body, "posts"), RecordType.POST)],
            [self._exchange_lookup(body)],
        )

    async def _enrich_account_hubs(self, route: AccountHubsRoute, body: dict[str, Any]) -> None:
        hubs = items_of(body, "hubs")
        account = route.account
        program = self._program_id
        collaborator = self._derived_lookup(
            hubs,
            RecordType.HUB_COLLABORATOR,
            COLLABORATOR_FIELD,
            lambda hub: hub_collaborator_address(hub, account, program),
        )
        await self._run([self._entity_lookup(hubs, RecordType.HUB)], [collaborator])

    async def _enrich_account_releases(
        self, route: AccountReleasesRoute, body: dict[str, Any]
    ) -> None:
        items = items_of(body, route.kind.value)
        await self._run([self._entity_lookup(items, RecordType.RELEASE)])

    # -------------------------------------------------------------------------
    # Recipes: exchanges, search, subscriptions
    # -------------------------------------------------------------------------

    def _exchange_lookup(self, body: dict[str, Any]) -> Lookup:
        open_items = [item for item in items_of(body, "exchanges") if is_open_exchange(item)]
        return self._entity_lookup(open_items, RecordType.EXCHANGE)

    async def _enrich_exchanges(
        self,
        route: ExchangesRoute | ReleaseExchangesRoute | AccountExchangesRoute,
        body: dict[str, Any],
    ) -> None:
        await self._run([self._exchange_lookup(body)])

    async def _enrich_exchange(self, route: ExchangeRoute, body: dict[str, Any]) -> None:
        item = entity_of(body, "exchange")
        if item is None:
            raise RecordNotFound(RecordType.EXCHANGE.value, route.exchange)
        if not is_open_exchange(item):
            return
        await self._run_single(item, RecordType.EXCHANGE)

    async def _enrich_search(self, route: SearchRoute, body: dict[str, Any]) -> None:
        await self._run(
            [self._entity_lookup(items_of(body, "hubs"), RecordType.HUB)],
            [self._entity_lookup(items_of(body, "releases"), RecordType.RELEASE)],
        )

    async def _enrich_subscriptions(
        self,
        route: SubscriptionsRoute | HubSubscriptionsRoute | AccountSubscriptionsRoute,
        body: dict[str, Any],
    ) -> None:
        items = items_of(body, "subscriptions")
        await self._run([self._entity_lookup(items, RecordType.SUBSCRIPTION)])

    async def _enrich_subscription(self, route: SubscriptionRoute, body: dict[str, Any]) -> None:
        item = entity_of(body, "subscription")
        if item is None:
            raise RecordNotFound(RecordType.SUBSCRIPTION.value, route.subscription)
        await self._run_single(item, RecordType.SUBSCRIPTION)

    async def _pass_through(self, route: UnknownRoute, body: dict[str, Any]) -> None:
        return None
