"""Shared constants for the models layer.

Program and mint identifiers per cluster, record type names, and the numeric
sentinels used by on-chain layouts. Kept dependency-free so every other layer
can import it.

See Also:
    [ninasdk.codec.records][]: Uses [RecordType][ninasdk.models.constants.RecordType]
        to register one decoder per record.
    [ninasdk.utils.currency][]: Uses [CLUSTER_MINTS][ninasdk.models.constants.CLUSTER_MINTS]
        for decimal conversion.
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType


NINA_PROGRAM_ID = "ninaN2tm9vUkxoanvGcNApEeWiidLMM2TdBX8HoJuL4"

# Raw u64 totalSupply value marking an open (unlimited) edition.
MAX_U64 = 2**64 - 1

# Largest integer a JavaScript JSON consumer can represent exactly.
MAX_SAFE_INTEGER = 2**53 - 1


class Cluster(StrEnum):
    """Solana cluster the client talks to."""

    MAINNET = "mainnet"
    DEVNET = "devnet"


class RecordType(StrEnum):
    """On-chain account types read by the SDK.

    The value is the key used under ``accountData`` in enriched responses.
    [account_name][ninasdk.models.constants.RecordType.account_name] is the
    program-side struct name that seeds the 8-byte account discriminator.
    """

    HUB = "hub"
    RELEASE = "release"
    POST = "post"
    EXCHANGE = "exchange"
    HUB_CONTENT = "hubContent"
    HUB_RELEASE = "hubRelease"
    HUB_POST = "hubPost"
    HUB_COLLABORATOR = "hubCollaborator"
    SUBSCRIPTION = "subscription"

    @property
    def account_name(self) -> str:
        return self.value[0].upper() + self.value[1:]


class HubChildKind(StrEnum):
    """Content a hub can hold; selects the ``nina-hub-{kind}`` seed."""

    RELEASE = "release"
    POST = "post"

    @property
    def record_type(self) -> RecordType:
        return RecordType(self.value)

    @property
    def sibling_type(self) -> RecordType:
        """The type-specific hub record (``hubRelease`` / ``hubPost``)."""
        return RecordType(f"hub{self.value.capitalize()}")


# Seed namespaces for derived accounts.
SEED_HUB_CONTENT = "nina-hub-content"
SEED_HUB_COLLABORATOR = "nina-hub-collaborator"
SEED_SUBSCRIPTION = "nina-subscription"
SEED_HUB_CHILD_PREFIX = "nina-hub-"

USDC_DECIMALS = 6
SOL_DECIMALS = 9

CLUSTER_MINTS: MappingProxyType[Cluster, MappingProxyType[str, str]] = MappingProxyType(
    {
        Cluster.MAINNET: MappingProxyType(
            {
                "usdc": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
                "wsol": "So11111111111111111111111111111111111111112",
            }
        ),
        Cluster.DEVNET: MappingProxyType(
            {
                "usdc": "J8Kvy9Kjot83DEgnnbK55BYbAK9pZuyYt4NBGkEJ9W1K",
                "wsol": "So11111111111111111111111111111111111111112",
            }
        ),
    }
)

CLUSTER_RPC_ENDPOINTS: MappingProxyType[Cluster, str] = MappingProxyType(
    {
        Cluster.MAINNET: "https://api.mainnet-beta.solana.com",
        Cluster.DEVNET: "https://api.devnet.solana.com",
    }
)

DEFAULT_API_ENDPOINT = "https://api.ninaprotocol.com/v1"
