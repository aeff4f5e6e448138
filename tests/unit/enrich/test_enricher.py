"""Unit tests for enrich.enricher module.

Tests:
- Dispatch: every route variant has a recipe; paths are parsed
- Hub route: batching into one fetch per record group, derived siblings
- Hub lists, releases, posts, accounts, exchanges, search, subscriptions
- Revenue-share recipients matched against the release's table
- Single-entity routes: RecordNotFound when the record is absent
- Closed exchanges are never fetched
- Input bodies are never mutated; unknown routes pass through
- Ledger failures propagate; decode failures stay on their item
"""

import copy
from typing import Any

import pytest

from fixtures.ledger import FakeLedgerGateway, ShortBatchGateway
from fixtures.records import (
    U64_MAX,
    exchange_bytes,
    hub_bytes,
    hub_collaborator_bytes,
    hub_content_bytes,
    hub_post_bytes,
    hub_release_bytes,
    make_address,
    post_bytes,
    release_bytes,
    subscription_bytes,
)
from ninasdk.enrich import RouteEnricher, is_open_exchange, items_of
from ninasdk.exceptions import LedgerFetchFailure, RecordNotFound
from ninasdk.models.address import (
    hub_child_address,
    hub_collaborator_address,
    hub_content_address,
)
from ninasdk.models.constants import NINA_PROGRAM_ID, HubChildKind
from ninasdk.models.routes import (
    ROUTE_TYPES,
    AccountReleaseKind,
    AccountReleasesRoute,
    HubRoute,
    UnknownRoute,
)


HUB = make_address(40)
OTHER_HUB = make_address(41)
R1 = make_address(5)
R2 = make_address(50)
P1 = make_address(6)
ACCOUNT = make_address(7)
SUBSCRIPTION = make_address(70)


def _hub_release(hub: str, release: str) -> str:
    return str(hub_child_address(HubChildKind.RELEASE, hub, release, NINA_PROGRAM_ID))


def _hub_post(hub: str, post: str) -> str:
    return str(hub_child_address(HubChildKind.POST, hub, post, NINA_PROGRAM_ID))


def _hub_content(hub: str, child: str) -> str:
    return str(hub_content_address(hub, child, NINA_PROGRAM_ID))


def _collaborator(hub: str, account: str) -> str:
    return str(hub_collaborator_address(hub, account, NINA_PROGRAM_ID))


def _data(item: dict[str, Any]) -> dict[str, Any]:
    return item.get("accountData", {})


@pytest.fixture
def hub_ledger(fake_gateway: FakeLedgerGateway) -> FakeLedgerGateway:
    """Ledger holding a hub with two releases and one post.

    The hubRelease record of R2 is absent on-chain.
    """
    fake_gateway.accounts.update(
        {
            HUB: hub_bytes(),
            R1: release_bytes(),
            R2: release_bytes(total_supply=U64_MAX, remaining_supply=U64_MAX),
            P1: post_bytes(),
            _hub_release(HUB, R1): hub_release_bytes(hub=HUB, release=R1),
            _hub_post(HUB, P1): hub_post_bytes(hub=HUB, post=P1),
            _hub_content(HUB, R1): hub_content_bytes(hub=HUB, child=R1),
            _hub_content(HUB, R2): hub_content_bytes(hub=HUB, child=R2),
            _hub_content(HUB, P1): hub_content_bytes(hub=HUB, child=P1, content_type=1),
            _collaborator(HUB, ACCOUNT): hub_collaborator_bytes(hub=HUB, collaborator=ACCOUNT),
        }
    )
    return fake_gateway


# =============================================================================
# Dispatch
# =============================================================================


class TestDispatch:
    """Tests for route dispatch."""

    @pytest.mark.parametrize("route_type", ROUTE_TYPES)
    def test_every_route_has_recipe(
        self, enricher: RouteEnricher, route_type: type
    ) -> None:
        """No route variant is left without a recipe."""
        assert callable(enricher.recipe_for(route_type))

    def test_program_id(self, enricher: RouteEnricher) -> None:
        """The program id is exposed as text."""
        assert enricher.program_id == NINA_PROGRAM_ID

    async def test_path_is_parsed(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """A path string is parsed, query included."""
        enriched = await enricher.enrich("/hubs?limit=1", {"hubs": [{"publicKey": HUB}]})
        assert _data(enriched["hubs"][0])["hub"]["handle"] == "ninas-picks"

    async def test_unknown_route_passes_through(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """Unknown routes return an equal copy without ledger reads."""
        body = {"verifications": [{"publicKey": HUB}]}
        enriched = await enricher.enrich(UnknownRoute("/verifications"), body)
        assert enriched == body
        assert enriched is not body
        assert fake_gateway.fetch_many_calls == []
        assert fake_gateway.fetch_one_calls == []


# =============================================================================
# Hub Route
# =============================================================================


class TestHubRoute:
    """Tests for /hubs/{hub}."""

    @pytest.fixture
    def body(self) -> dict[str, Any]:
        return {
            "hub": {"publicKey": HUB, "handle": "ninas-picks"},
            "releases": [{"publicKey": R1}, {"publicKey": R2}],
            "posts": [{"publicKey": P1}],
            "collaborators": [],
        }

    async def test_batches(
        self,
        enricher: RouteEnricher,
        hub_ledger: FakeLedgerGateway,
        body: dict[str, Any],
    ) -> None:
        """Children, siblings and hub content are each read in one batch."""
        await enricher.enrich(HubRoute(HUB), body)

        assert hub_ledger.fetch_one_calls == [HUB]
        assert hub_ledger.fetch_many_calls == [
            [R1, R2, P1],
            [_hub_release(HUB, R1), _hub_release(HUB, R2), _hub_post(HUB, P1)],
            [_hub_content(HUB, R1), _hub_content(HUB, R2), _hub_content(HUB, P1)],
        ]

    async def test_account_data(
        self,
        enricher: RouteEnricher,
        hub_ledger: FakeLedgerGateway,
        body: dict[str, Any],
    ) -> None:
        """Each item carries the records found for it."""
        enriched = await enricher.enrich(HubRoute(HUB), body)

        assert _data(enriched["hub"])["hub"]["publicKey"] == HUB
        release_one, release_two = enriched["releases"]
        assert set(_data(release_one)) == {"release", "hubRelease", "hubContent"}
        assert _data(release_one)["hubRelease"]["release"] == R1
        assert set(_data(release_two)) == {"release", "hubContent"}
        assert _data(release_two)["release"]["editionType"] == "open"
        (post,) = enriched["posts"]
        assert set(_data(post)) == {"post", "hubPost", "hubContent"}
        assert _data(post)["hubContent"]["contentType"] == "post"

    async def test_input_not_mutated(
        self,
        enricher: RouteEnricher,
        hub_ledger: FakeLedgerGateway,
        body: dict[str, Any],
    ) -> None:
        """The caller's body is left unchanged."""
        original = copy.deepcopy(body)
        await enricher.enrich(HubRoute(HUB), body)
        assert body == original

    async def test_collaborators(
        self,
        enricher: RouteEnricher,
        hub_ledger: FakeLedgerGateway,
        body: dict[str, Any],
    ) -> None:
        """Collaborators are read in their own batch."""
        body["collaborators"] = [{"publicKey": ACCOUNT}]
        enriched = await enricher.enrich(HubRoute(HUB), body)

        assert [_collaborator(HUB, ACCOUNT)] in hub_ledger.fetch_many_calls
        assert len(hub_ledger.fetch_many_calls) == 4
        collaborator = _data(enriched["collaborators"][0])["collaborator"]
        assert collaborator["allowance"] == -1

    async def test_empty_hub(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """A hub without content reads only the hub record."""
        enriched = await enricher.enrich(HubRoute(HUB), {"hub": {"publicKey": HUB}})
        assert hub_ledger.fetch_many_calls == []
        assert hub_ledger.fetch_one_calls == [HUB]
        assert "hub" in _data(enriched["hub"])

    async def test_missing_hub_record(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A hub absent on-chain raises RecordNotFound."""
        with pytest.raises(RecordNotFound):
            await enricher.enrich(HubRoute(HUB), {"hub": {"publicKey": HUB}})

    async def test_no_hub_in_body(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A body without a hub fails like every other single-entity route."""
        with pytest.raises(RecordNotFound) as exc_info:
            await enricher.enrich(HubRoute(HUB), {"error": "not found"})
        assert exc_info.value.address == HUB
        assert fake_gateway.fetch_one_calls == []


# =============================================================================
# Hub Lists
# =============================================================================


class TestHubLists:
    """Tests for /hubs, /hubs/{hub}/releases, /posts and /collaborators."""

    async def test_hubs(self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway) -> None:
        """Hubs found on-chain are enriched; missing ones are untouched."""
        body = {"hubs": [{"publicKey": HUB}, {"publicKey": OTHER_HUB}]}
        enriched = await enricher.enrich("/hubs", body)
        assert hub_ledger.fetch_many_calls == [[HUB, OTHER_HUB]]
        assert "hub" in _data(enriched["hubs"][0])
        assert "accountData" not in enriched["hubs"][1]

    async def test_hub_releases(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """Hub releases get release, hubRelease and hubContent records."""
        body = {"publicKey": HUB, "releases": [{"publicKey": R1}]}
        enriched = await enricher.enrich(f"/hubs/{HUB}/releases", body)
        assert hub_ledger.fetch_many_calls == [
            [R1],
            [_hub_release(HUB, R1)],
            [_hub_content(HUB, R1)],
        ]
        assert set(_data(enriched["releases"][0])) == {"release", "hubRelease", "hubContent"}

    async def test_hub_posts(self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway) -> None:
        """Hub posts get post, hubPost and hubContent records."""
        body = {"publicKey": HUB, "posts": [{"publicKey": P1}]}
        enriched = await enricher.enrich(f"/hubs/{HUB}/posts", body)
        assert set(_data(enriched["posts"][0])) == {"post", "hubPost", "hubContent"}

    async def test_hub_list_without_hub_key(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """Without the hub's publicKey nothing can be derived."""
        await enricher.enrich(f"/hubs/{HUB}/releases", {"releases": [{"publicKey": R1}]})
        assert fake_gateway.fetch_many_calls == []

    async def test_invalid_child_address_skipped(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """Items whose address cannot seed a derivation are skipped there."""
        body = {"publicKey": HUB, "releases": [{"publicKey": "not-base58"}, {"publicKey": R1}]}
        enriched = await enricher.enrich(f"/hubs/{HUB}/releases", body)
        assert hub_ledger.fetch_many_calls[1] == [_hub_release(HUB, R1)]
        assert "accountData" not in enriched["releases"][0]
        assert "hubRelease" in _data(enriched["releases"][1])

    async def test_hub_collaborators(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """Collaborator records are derived from hub and account."""
        body = {"publicKey": HUB, "collaborators": [{"publicKey": ACCOUNT}]}
        enriched = await enricher.enrich(f"/hubs/{HUB}/collaborators", body)
        assert hub_ledger.fetch_many_calls == [[_collaborator(HUB, ACCOUNT)]]
        assert _data(enriched["collaborators"][0])["collaborator"]["canAddContent"] is True


# =============================================================================
# Releases
# =============================================================================


class TestReleases:
    """Tests for release routes."""

    async def test_releases(self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway) -> None:
        """Release lists are read in one batch."""
        body = {"releases": [{"publicKey": R1}, {"publicKey": R2}]}
        enriched = await enricher.enrich("/releases", body)
        assert hub_ledger.fetch_many_calls == [[R1, R2]]
        assert [_data(r)["release"]["editionType"] for r in enriched["releases"]] == [
            "limited",
            "open",
        ]

    async def test_release(self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway) -> None:
        """A single release is read with fetch_one."""
        enriched = await enricher.enrich(f"/releases/{R1}", {"release": {"publicKey": R1}})
        assert hub_ledger.fetch_one_calls == [R1]
        assert _data(enriched["release"])["release"]["publicKey"] == R1

    async def test_release_missing_on_chain(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A release absent on-chain raises RecordNotFound."""
        with pytest.raises(RecordNotFound) as exc_info:
            await enricher.enrich(f"/releases/{R1}", {"release": {"publicKey": R1}})
        assert exc_info.value.address == R1

    async def test_release_missing_in_body(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A body without a release raises RecordNotFound for the route id."""
        with pytest.raises(RecordNotFound) as exc_info:
            await enricher.enrich(f"/releases/{R1}", {})
        assert exc_info.value.address == R1

    async def test_release_hubs(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """Hubs of a release get hub, hubRelease and hubContent records."""
        body = {"hubs": [{"publicKey": HUB}]}
        enriched = await enricher.enrich(f"/releases/{R1}/hubs", body)
        assert hub_ledger.fetch_many_calls == [
            [HUB],
            [_hub_release(HUB, R1)],
            [_hub_content(HUB, R1)],
        ]
        data = _data(enriched["hubs"][0])
        assert data["hub"]["handle"] == "ninas-picks"
        assert data["hubRelease"]["release"] == R1
        assert data["hubContent"]["child"] == R1


# =============================================================================
# Revenue Share Recipients
# =============================================================================


class TestRevenueShareRecipients:
    """Tests for /releases/{release}/revenueShareRecipients."""

    async def test_matched_by_authority(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """Each recipient receives its own slot of the table."""
        first, second, stranger = make_address(1), make_address(2), make_address(3)
        fake_gateway.accounts[R1] = release_bytes(
            recipients=[(first, 800_000), (second, 200_000)]
        )
        body = {
            "revenueShareRecipients": [
                {"publicKey": first},
                {"publicKey": second},
                {"publicKey": stranger},
            ]
        }
        enriched = await enricher.enrich(f"/releases/{R1}/revenueShareRecipients", body)

        assert fake_gateway.fetch_one_calls == [R1]
        recipients = enriched["revenueShareRecipients"]
        assert _data(recipients[0])["revenueShareRecipient"]["percentShare"] == 800_000
        assert _data(recipients[1])["revenueShareRecipient"]["percentShare"] == 200_000
        assert "accountData" not in recipients[2]

    async def test_empty_list(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """No recipients means no ledger read."""
        await enricher.enrich(f"/releases/{R1}/revenueShareRecipients", {})
        assert fake_gateway.fetch_one_calls == []

    async def test_release_missing(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """The release must exist."""
        body = {"revenueShareRecipients": [{"publicKey": make_address(1)}]}
        with pytest.raises(RecordNotFound):
            await enricher.enrich(f"/releases/{R1}/revenueShareRecipients", body)

    async def test_corrupt_release(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A corrupt release marks every recipient with the decode error."""
        fake_gateway.accounts[R1] = hub_bytes()
        body = {"revenueShareRecipients": [{"publicKey": make_address(1)}]}
        enriched = await enricher.enrich(f"/releases/{R1}/revenueShareRecipients", body)
        errors = enriched["revenueShareRecipients"][0]["accountDataErrors"]
        assert "revenueShareRecipient" in errors


# =============================================================================
# Posts
# =============================================================================


class TestPosts:
    """Tests for post routes."""

    async def test_posts(self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway) -> None:
        """Post lists are read in one batch."""
        enriched = await enricher.enrich("/posts", {"posts": [{"publicKey": P1}]})
        assert _data(enriched["posts"][0])["post"]["slug"] == "first-post"

    async def test_post_with_hub(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """The post and the hub it was published through are both read."""
        body = {"post": {"publicKey": P1}, "publishedThroughHub": {"publicKey": HUB}}
        enriched = await enricher.enrich(f"/posts/{P1}", body)
        assert sorted(hub_ledger.fetch_one_calls) == sorted([P1, HUB])
        assert "post" in _data(enriched["post"])
        assert "hub" in _data(enriched["publishedThroughHub"])

    async def test_post_hub_optional(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A missing publishing hub is not an error."""
        fake_gateway.accounts[P1] = post_bytes()
        body = {"post": {"publicKey": P1}, "publishedThroughHub": {"publicKey": HUB}}
        enriched = await enricher.enrich(f"/posts/{P1}", body)
        assert "accountData" not in enriched["publishedThroughHub"]

    async def test_post_missing(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """The post itself is required."""
        with pytest.raises(RecordNotFound):
            await enricher.enrich(f"/posts/{P1}", {"post": {"publicKey": P1}})


# =============================================================================
# Accounts
# =============================================================================


class TestAccounts:
    """Tests for account routes."""

    async def test_account(self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway) -> None:
        """Account pages batch each record type, skipping closed exchanges."""
        open_exchange, closed_exchange = make_address(60), make_address(61)
        hub_ledger.accounts[open_exchange] = exchange_bytes()
        body = {
            "hubs": [{"publicKey": HUB}],
            "published": [{"publicKey": R1}],
            "collected": [{"publicKey": R2}],
            "posts": [{"publicKey": P1}],
            "exchanges": [
                {"publicKey": open_exchange},
                {"publicKey": closed_exchange, "cancelled": True},
            ],
        }
        enriched = await enricher.enrich(f"/accounts/{ACCOUNT}", body)

        assert hub_ledger.fetch_many_calls == [[HUB], [R1, R2], [P1], [open_exchange]]
        assert "release" in _data(enriched["published"][0])
        assert "release" in _data(enriched["collected"][0])
        assert "exchange" in _data(enriched["exchanges"][0])
        assert "accountData" not in enriched["exchanges"][1]

    async def test_account_hubs(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """Account hubs get the hub and the account's collaborator record."""
        enriched = await enricher.enrich(
            f"/accounts/{ACCOUNT}/hubs", {"hubs": [{"publicKey": HUB}]}
        )
        assert hub_ledger.fetch_many_calls == [[HUB], [_collaborator(HUB, ACCOUNT)]]
        assert set(_data(enriched["hubs"][0])) == {"hub", "collaborator"}

    @pytest.mark.parametrize("kind", list(AccountReleaseKind))
    async def test_account_releases(
        self,
        enricher: RouteEnricher,
        hub_ledger: FakeLedgerGateway,
        kind: AccountReleaseKind,
    ) -> None:
        """Each account release list reads from its own key."""
        route = AccountReleasesRoute(ACCOUNT, kind)
        enriched = await enricher.enrich(route, {kind.value: [{"publicKey": R1}]})
        assert "release" in _data(enriched[kind.value][0])

    async def test_account_posts(
        self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway
    ) -> None:
        """Account posts are read like the global post list."""
        enriched = await enricher.enrich(
            f"/accounts/{ACCOUNT}/posts", {"posts": [{"publicKey": P1}]}
        )
        assert "post" in _data(enriched["posts"][0])


# =============================================================================
# Exchanges
# =============================================================================


class TestExchanges:
    """Tests for exchange routes."""

    @pytest.mark.parametrize(
        "path", ["/exchanges", f"/releases/{R1}/exchanges", f"/accounts/{ACCOUNT}/exchanges"]
    )
    async def test_closed_exchanges_not_fetched(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway, path: str
    ) -> None:
        """Only open exchanges are requested and each gets its own record."""
        addresses = [make_address(60 + i) for i in range(5)]
        for n, address in enumerate(addresses):
            fake_gateway.accounts[address] = exchange_bytes(expected_amount=n)
        items: list[dict[str, Any]] = [{"publicKey": a} for a in addresses]
        items[1]["cancelled"] = True
        items[3]["completedBy"] = ACCOUNT

        enriched = await enricher.enrich(path, {"exchanges": items})

        assert fake_gateway.fetch_many_calls == [[addresses[0], addresses[2], addresses[4]]]
        amounts = [
            _data(item).get("exchange", {}).get("expectedAmount") for item in enriched["exchanges"]
        ]
        assert amounts == [0, None, 2, None, 4]

    async def test_exchange(self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway) -> None:
        """An open exchange is read with fetch_one."""
        address = make_address(60)
        fake_gateway.accounts[address] = exchange_bytes()
        enriched = await enricher.enrich(
            f"/exchanges/{address}", {"exchange": {"publicKey": address}}
        )
        assert _data(enriched["exchange"])["exchange"]["isSelling"] is True

    async def test_closed_exchange(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A completed exchange is returned without a ledger read."""
        address = make_address(60)
        body = {"exchange": {"publicKey": address, "completedBy": ACCOUNT}}
        enriched = await enricher.enrich(f"/exchanges/{address}", body)
        assert fake_gateway.fetch_one_calls == []
        assert enriched == body

    def test_is_open_exchange(self) -> None:
        """Cancelled or completed exchanges are closed."""
        assert is_open_exchange({"publicKey": "E"})
        assert not is_open_exchange({"cancelled": True})
        assert not is_open_exchange({"completedBy": ACCOUNT})


# =============================================================================
# Search and Subscriptions
# =============================================================================


class TestSearchAndSubscriptions:
    """Tests for search and subscription routes."""

    async def test_search(self, enricher: RouteEnricher, hub_ledger: FakeLedgerGateway) -> None:
        """Search results read hubs and releases in separate batches."""
        body = {"hubs": [{"publicKey": HUB}], "releases": [{"publicKey": R1}]}
        enriched = await enricher.enrich("/search", body)
        assert hub_ledger.fetch_many_calls == [[HUB], [R1]]
        assert "hub" in _data(enriched["hubs"][0])
        assert "release" in _data(enriched["releases"][0])

    @pytest.mark.parametrize(
        "path",
        ["/subscriptions", f"/accounts/{ACCOUNT}/subscriptions", f"/hubs/{HUB}/subscriptions"],
    )
    async def test_subscriptions(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway, path: str
    ) -> None:
        """Subscription lists are read in one batch."""
        fake_gateway.accounts[SUBSCRIPTION] = subscription_bytes(subscriber=ACCOUNT)
        body = {"subscriptions": [{"publicKey": SUBSCRIPTION}]}
        enriched = await enricher.enrich(path, body)
        assert _data(enriched["subscriptions"][0])["subscription"]["from"] == ACCOUNT

    async def test_subscription(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A single subscription is required."""
        with pytest.raises(RecordNotFound):
            await enricher.enrich(
                f"/subscriptions/{SUBSCRIPTION}", {"subscription": {"publicKey": SUBSCRIPTION}}
            )


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    """Tests for failure handling."""

    async def test_ledger_failure_propagates(
        self,
        enricher: RouteEnricher,
        fake_gateway: FakeLedgerGateway,
        transport_failure: LedgerFetchFailure,
    ) -> None:
        """A transport failure fails the whole call."""
        fake_gateway.fail_with = transport_failure
        with pytest.raises(LedgerFetchFailure):
            await enricher.enrich("/hubs", {"hubs": [{"publicKey": HUB}]})

    async def test_short_batch_rejected(self) -> None:
        """A gateway returning fewer slots than requested is a fetch failure."""
        gateway = ShortBatchGateway({HUB: hub_bytes()})
        enricher = RouteEnricher(gateway)
        with pytest.raises(LedgerFetchFailure, match="slots"):
            await enricher.enrich("/hubs", {"hubs": [{"publicKey": HUB}]})

    async def test_decode_failure_is_local(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """A corrupt record marks only its own item."""
        fake_gateway.accounts.update({HUB: b"corrupt", OTHER_HUB: hub_bytes()})
        body = {"hubs": [{"publicKey": HUB}, {"publicKey": OTHER_HUB}]}
        enriched = await enricher.enrich("/hubs", body)
        assert "hub" in enriched["hubs"][0]["accountDataErrors"]
        assert "hub" in _data(enriched["hubs"][1])

    async def test_malformed_lists_ignored(
        self, enricher: RouteEnricher, fake_gateway: FakeLedgerGateway
    ) -> None:
        """Non-list fields and non-object items are skipped."""
        enriched = await enricher.enrich("/hubs", {"hubs": "oops"})
        assert enriched == {"hubs": "oops"}
        assert fake_gateway.fetch_many_calls == []

    def test_items_of(self) -> None:
        """items_of() keeps only dictionaries."""
        assert items_of({"hubs": [{"a": 1}, "x", None]}, "hubs") == [{"a": 1}]
        assert items_of({}, "hubs") == []

    async def test_other_program(self, fake_gateway: FakeLedgerGateway) -> None:
        """Derived addresses follow the configured program id."""
        other_program = make_address(99)
        enricher = RouteEnricher(fake_gateway, program_id=other_program)
        body = {"publicKey": HUB, "collaborators": [{"publicKey": ACCOUNT}]}
        await enricher.enrich(f"/hubs/{HUB}/collaborators", body)
        expected = str(hub_collaborator_address(HUB, ACCOUNT, other_program))
        assert fake_gateway.fetch_many_calls == [[expected]]
        assert expected != _collaborator(HUB, ACCOUNT)
