"""
Normalized record models for every account type the SDK reads.

Each model pairs a [RecordLayout][ninasdk.codec.layout.RecordLayout] with a
frozen pydantic model whose camelCase aliases match the JSON keys consumers
expect under ``accountData``. Decoding is one-way: raw bytes are unpacked,
normalized (timestamps to milliseconds, padded text stripped, sentinels
expanded) and validated. Nothing is ever encoded back.

Examples:
    ```python
    hub = Hub.decode(raw, public_key="4Z8T...")
    hub.handle          # 'ninas-picks'
    hub.to_dict()       # {'publicKey': '4Z8T...', 'authority': ..., 'handle': ...}

    record = decode(RecordType.RELEASE, raw, public_key=address)
    record.edition_type # 'open'
    ```

Note:
    Python integers are exact. A ``u64`` above ``2**53 - 1`` cannot be read
    back exactly by a JavaScript JSON consumer; such values are kept intact
    and reported through a debug-level ``unsafe_integer`` log event. Use
    [is_js_safe_integer()][ninasdk.codec.records.is_js_safe_integer] to
    check a value explicitly.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ninasdk.core.logger import Logger
from ninasdk.exceptions import DecodeError
from ninasdk.models.constants import MAX_SAFE_INTEGER, MAX_U64, RecordType

from .layout import (
    RecordLayout,
    boolean,
    enum,
    i8,
    i64,
    optional_pubkey,
    padded_bytes,
    pubkey,
    struct_array,
    u8,
    u64,
)


_logger = Logger("codec")

# Release.totalSupply / remainingSupply value for open editions.
OPEN_EDITION_SUPPLY = -1

ROYALTY_RECIPIENT_SLOTS = 10
PADDED_TEXT_LENGTH = 100


def is_js_safe_integer(value: int) -> bool:
    """True if *value* survives a round-trip through an IEEE-754 double."""
    return -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER


def decode_padded_text(record: str, name: str, value: bytes) -> str:
    """Strip trailing NUL padding and decode strict UTF-8.

    Raises:
        DecodeError: If the unpadded bytes are not valid UTF-8.
    """
    try:
        return value.rstrip(b"\x00").decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(record, f"{name}: invalid UTF-8 ({e.reason})") from e


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------

HUB_LAYOUT = RecordLayout(
    RecordType.HUB.account_name,
    (
        pubkey("authority"),
        padded_bytes("handle", PADDED_TEXT_LENGTH),
        padded_bytes("uri", PADDED_TEXT_LENGTH),
        pubkey("hub_signer"),
        u8("hub_signer_bump"),
        u64("publish_fee"),
        u64("referral_fee"),
        u64("total_fees_earned"),
        i64("datetime"),
    ),
)

RELEASE_LAYOUT = RecordLayout(
    RecordType.RELEASE.account_name,
    (
        pubkey("payer"),
        pubkey("authority"),
        pubkey("authority_token_account"),
        pubkey("release_signer"),
        pubkey("release_mint"),
        pubkey("royalty_token_account"),
        pubkey("payment_mint"),
        u64("price"),
        u64("total_supply"),
        u64("remaining_supply"),
        u64("resale_percentage"),
        i64("release_datetime"),
        u64("sale_counter"),
        u64("sale_total"),
        u64("exchange_sale_counter"),
        u64("exchange_sale_total"),
        u64("total_collected"),
        u64("head"),
        u64("tail"),
        struct_array(
            "royalty_recipients",
            ROYALTY_RECIPIENT_SLOTS,
            pubkey("recipient_token_account"),
            pubkey("recipient_authority"),
            u64("percent_share"),
            u64("owed"),
            u64("collected"),
        ),
    ),
)

POST_LAYOUT = RecordLayout(
    RecordType.POST.account_name,
    (
        pubkey("author"),
        i64("created_at"),
        i64("updated_at"),
        padded_bytes("slug", PADDED_TEXT_LENGTH),
        padded_bytes("uri", PADDED_TEXT_LENGTH),
    ),
)

EXCHANGE_LAYOUT = RecordLayout(
    RecordType.EXCHANGE.account_name,
    (
        pubkey("initializer"),
        pubkey("release_mint"),
        pubkey("initializer_expected_token_account"),
        pubkey("initializer_sending_token_account"),
        pubkey("initializer_sending_mint"),
        pubkey("initializer_expected_mint"),
        pubkey("exchange_signer"),
        pubkey("exchange_escrow_token_account"),
        pubkey("release"),
        u64("expected_amount"),
        u64("initializer_amount"),
        boolean("is_selling"),
        u8("bump"),
    ),
)

HUB_CONTENT_LAYOUT = RecordLayout(
    RecordType.HUB_CONTENT.account_name,
    (
        pubkey("hub"),
        pubkey("added_by"),
        pubkey("child"),
        enum("content_type", "ninaReleaseV1", "post"),
        i64("datetime"),
        boolean("published_through_hub"),
        pubkey("reposted_from_hub"),
        boolean("visible"),
    ),
)

HUB_RELEASE_LAYOUT = RecordLayout(
    RecordType.HUB_RELEASE.account_name,
    (
        pubkey("hub"),
        pubkey("release"),
        u64("sales"),
    ),
)

HUB_POST_LAYOUT = RecordLayout(
    RecordType.HUB_POST.account_name,
    (
        pubkey("hub"),
        pubkey("post"),
        optional_pubkey("reference_content"),
        enum("reference_content_type", "none", "ninaReleaseV1", "post"),
        padded_bytes("version_uri", PADDED_TEXT_LENGTH),
    ),
)

HUB_COLLABORATOR_LAYOUT = RecordLayout(
    RecordType.HUB_COLLABORATOR.account_name,
    (
        pubkey("hub"),
        pubkey("collaborator"),
        pubkey("added_by"),
        boolean("can_add_content"),
        boolean("can_add_collaborator"),
        i8("allowance"),
        i64("datetime"),
    ),
)

SUBSCRIPTION_LAYOUT = RecordLayout(
    RecordType.SUBSCRIPTION.account_name,
    (
        pubkey("from_"),
        pubkey("to"),
        i64("datetime"),
        enum("subscription_type", "account", "hub"),
    ),
)


# ---------------------------------------------------------------------------
# Base models
# ---------------------------------------------------------------------------


class CamelModel(BaseModel):
    """Frozen model serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dictionary with camelCase keys."""
        return self.model_dump(by_alias=True)


class AccountRecord(CamelModel):
    """Base class for decoded on-chain accounts.

    Subclasses bind a record type and a layout, and list the fields holding
    second-resolution timestamps. ``normalize()`` handles the rules shared by
    every record; subclasses extend it for record-specific sentinels.
    """

    _RECORD_TYPE: ClassVar[RecordType]
    _LAYOUT: ClassVar[RecordLayout]
    _TIMESTAMP_FIELDS: ClassVar[frozenset[str]] = frozenset()

    public_key: str | None = None

    @classmethod
    def record_type(cls) -> RecordType:
        return cls._RECORD_TYPE

    @classmethod
    def layout(cls) -> RecordLayout:
        return cls._LAYOUT

    @classmethod
    def normalize(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Apply shared raw-to-JSON rules to unpacked field values."""
        record = cls._RECORD_TYPE.value
        normalized: dict[str, Any] = {}
        for name, value in values.items():
            if isinstance(value, bytes):
                value = decode_padded_text(record, name, value)
            elif name in cls._TIMESTAMP_FIELDS:
                value = value * 1000
            normalized[name] = value
        return normalized

    @classmethod
    def decode(cls, raw: bytes, public_key: str | None = None) -> Self:
        """Decode raw account bytes into a normalized record.

        Args:
            raw: Full account data, discriminator included.
            public_key: Address the bytes were fetched from.

        Raises:
            DecodeError: If *raw* does not match this record's layout.
        """
        values = cls.normalize(cls._LAYOUT.unpack(raw))
        record = cls.model_validate({**values, "public_key": public_key})
        _flag_unsafe_integers(cls._RECORD_TYPE.value, public_key, values)
        return record


def _flag_unsafe_integers(record: str, public_key: str | None, values: dict[str, Any]) -> None:
    for name, value in values.items():
        if isinstance(value, list):
            for index, element in enumerate(value):
                nested = {f"{name}[{index}].{k}": v for k, v in element.items()}
                _flag_unsafe_integers(record, public_key, nested)
        elif isinstance(value, int) and not isinstance(value, bool):
            if not is_js_safe_integer(value):
                _logger.debug(
                    "unsafe_integer", record=record, address=public_key, field=name, value=value
                )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class Hub(AccountRecord):
    _RECORD_TYPE: ClassVar[RecordType] = RecordType.HUB
    _LAYOUT: ClassVar[RecordLayout] = HUB_LAYOUT
    _TIMESTAMP_FIELDS: ClassVar[frozenset[str]] = frozenset({"datetime"})

    authority: str
    handle: str
    uri: str
    hub_signer: str
    hub_signer_bump: int
    publish_fee: int
    referral_fee: int
    total_fees_earned: int
    datetime: int


class RevenueShareRecipient(CamelModel):
    """One slot of a Release's fixed revenue-share table."""

    recipient_token_account: str
    recipient_authority: str
    percent_share: int
    owed: int
    collected: int


class Release(AccountRecord):
    """Release account.

    ``royaltyRecipients`` is exposed as ``revenueShareRecipients`` with all
    ten slots kept. Unused slots, like any all-zero address field, carry
    the zero address in base58. A ``totalSupply`` equal to the u64 maximum
    marks an open edition: both supply counters become ``-1`` and
    ``editionType`` is ``"open"``.
    """

    _RECORD_TYPE: ClassVar[RecordType] = RecordType.RELEASE
    _LAYOUT: ClassVar[RecordLayout] = RELEASE_LAYOUT
    _TIMESTAMP_FIELDS: ClassVar[frozenset[str]] = frozenset({"release_datetime"})

    payer: str
    authority: str
    authority_token_account: str
    release_signer: str
    release_mint: str
    royalty_token_account: str
    payment_mint: str
    price: int
    total_supply: int
    remaining_supply: int
    resale_percentage: int
    release_datetime: int
    sale_counter: int
    sale_total: int
    exchange_sale_counter: int
    exchange_sale_total: int
    total_collected: int
    head: int
    tail: int
    edition_type: Literal["open", "limited"]
    revenue_share_recipients: list[RevenueShareRecipient]

    @classmethod
    def normalize(cls, values: dict[str, Any]) -> dict[str, Any]:
        normalized = super().normalize(values)
        normalized["revenue_share_recipients"] = normalized.pop("royalty_recipients")
        if normalized["total_supply"] == MAX_U64:
            normalized["edition_type"] = "open"
            normalized["total_supply"] = OPEN_EDITION_SUPPLY
            normalized["remaining_supply"] = OPEN_EDITION_SUPPLY
        else:
            normalized["edition_type"] = "limited"
        return normalized

    def recipient_for(self, authority: str) -> RevenueShareRecipient | None:
        """First revenue-share slot whose ``recipientAuthority`` is *authority*."""
        for recipient in self.revenue_share_recipients:
            if recipient.recipient_authority == authority:
                return recipient
        return None


class Post(AccountRecord):
    _RECORD_TYPE: ClassVar[RecordType] = RecordType.POST
    _LAYOUT: ClassVar[RecordLayout] = POST_LAYOUT
    _TIMESTAMP_FIELDS: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at"})

    author: str
    created_at: int
    updated_at: int
    slug: str
    uri: str


class Exchange(AccountRecord):
    _RECORD_TYPE: ClassVar[RecordType] = RecordType.EXCHANGE
    _LAYOUT: ClassVar[RecordLayout] = EXCHANGE_LAYOUT

    initializer: str
    release_mint: str
    initializer_expected_token_account: str
    initializer_sending_token_account: str
    initializer_sending_mint: str
    initializer_expected_mint: str
    exchange_signer: str
    exchange_escrow_token_account: str
    release: str
    expected_amount: int
    initializer_amount: int
    is_selling: bool
    bump: int


class HubContent(AccountRecord):
    """Generic hub membership record for a release or post."""

    _RECORD_TYPE: ClassVar[RecordType] = RecordType.HUB_CONTENT
    _LAYOUT: ClassVar[RecordLayout] = HUB_CONTENT_LAYOUT
    _TIMESTAMP_FIELDS: ClassVar[frozenset[str]] = frozenset({"datetime"})

    hub: str
    added_by: str
    child: str
    content_type: Literal["ninaReleaseV1", "post"]
    datetime: int
    published_through_hub: bool
    reposted_from_hub: str
    visible: bool


class HubRelease(AccountRecord):
    _RECORD_TYPE: ClassVar[RecordType] = RecordType.HUB_RELEASE
    _LAYOUT: ClassVar[RecordLayout] = HUB_RELEASE_LAYOUT

    hub: str
    release: str
    sales: int


class HubPost(AccountRecord):
    _RECORD_TYPE: ClassVar[RecordType] = RecordType.HUB_POST
    _LAYOUT: ClassVar[RecordLayout] = HUB_POST_LAYOUT

    hub: str
    post: str
    reference_content: str | None
    reference_content_type: Literal["none", "ninaReleaseV1", "post"]
    version_uri: str


class HubCollaborator(AccountRecord):
    """Collaborator permissions on a hub. ``allowance`` of -1 is unlimited."""

    _RECORD_TYPE: ClassVar[RecordType] = RecordType.HUB_COLLABORATOR
    _LAYOUT: ClassVar[RecordLayout] = HUB_COLLABORATOR_LAYOUT
    _TIMESTAMP_FIELDS: ClassVar[frozenset[str]] = frozenset({"datetime"})

    hub: str
    collaborator: str
    added_by: str
    can_add_content: bool
    can_add_collaborator: bool
    allowance: int
    datetime: int


class Subscription(AccountRecord):
    _RECORD_TYPE: ClassVar[RecordType] = RecordType.SUBSCRIPTION
    _LAYOUT: ClassVar[RecordLayout] = SUBSCRIPTION_LAYOUT
    _TIMESTAMP_FIELDS: ClassVar[frozenset[str]] = frozenset({"datetime"})

    from_: str = Field(alias="from")
    to: str
    datetime: int
    subscription_type: Literal["account", "hub"]


RECORD_MODELS: dict[RecordType, type[AccountRecord]] = {
    model.record_type(): model
    for model in (
        Hub,
        Release,
        Post,
        Exchange,
        HubContent,
        HubRelease,
        HubPost,
        HubCollaborator,
        Subscription,
    )
}


def decode(record_type: RecordType, raw: bytes, public_key: str | None = None) -> AccountRecord:
    """Decode *raw* as *record_type*.

    Raises:
        DecodeError: If *raw* does not match the layout of *record_type*.
    """
    return RECORD_MODELS[record_type].decode(raw, public_key)
