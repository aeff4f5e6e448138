"""
Deterministic program-derived addresses.

Derived accounts (hub content, hub collaborators, subscriptions) have no
foreign key in the JSON index. Their location is recomputed from the parent
addresses: SHA-256 over the seed segments, a bump byte, the program id and the
``ProgramDerivedAddress`` marker, walking the bump down from 255 until the
hash is *not* a valid ed25519 point. The result must match every other
implementation bit for bit, so this module only uses the ledger's standard
hash and the ``solders`` curve check.

Examples:
    ```python
    derived = hub_content_address(hub, release, program_id)
    derived.address   # 'B6XN...'
    derived.bump      # 254
    ```
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey

from ninasdk.exceptions import AddressDerivationExhausted

from .constants import (
    SEED_HUB_CHILD_PREFIX,
    SEED_HUB_COLLABORATOR,
    SEED_HUB_CONTENT,
    SEED_SUBSCRIPTION,
    HubChildKind,
)


PDA_MARKER: Final = b"ProgramDerivedAddress"
MAX_SEED_LENGTH: Final = 32
MAX_SEEDS: Final = 16

AddressLike = str | bytes | Pubkey


@dataclass(frozen=True, slots=True)
class DerivedAddress:
    """A program-derived address and the bump that produced it.

    Attributes:
        address: Base58 text form of the derived address.
        bump: Bump byte that pushed the hash off the curve.
    """

    address: str
    bump: int

    def __str__(self) -> str:
        return self.address


def to_pubkey(value: AddressLike) -> Pubkey:
    """Coerce base58 text, 32 raw bytes, or a ``Pubkey`` into a ``Pubkey``.

    Raises:
        ValueError: If *value* is not a valid 32-byte address.
    """
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, bytes):
        if len(value) != 32:
            raise ValueError(f"address must be 32 bytes, got {len(value)}")
        return Pubkey.from_bytes(value)
    if isinstance(value, str):
        return Pubkey.from_string(value)
    raise TypeError(f"address must be str, bytes or Pubkey, got {type(value).__name__}")


def _is_on_curve(candidate: bytes) -> bool:
    return Pubkey.from_bytes(candidate).is_on_curve()


def derive_address(
    seed: str,
    parts: Sequence[AddressLike],
    program_id: AddressLike,
) -> DerivedAddress:
    """Derive the program address for ``(seed, *parts)`` under *program_id*.

    Args:
        seed: Namespace seed, e.g. ``"nina-hub-content"``.
        parts: Ordered parent/child addresses appended after the seed.
        program_id: Owning program.

    Returns:
        The first off-curve candidate, starting from bump 255.

    Raises:
        ValueError: If a seed segment exceeds 32 bytes or there are more than
            16 segments (bump included).
        AddressDerivationExhausted: If every bump lands on the curve.
    """
    segments = [seed.encode("utf-8"), *(bytes(to_pubkey(p)) for p in parts)]
    if len(segments) + 1 > MAX_SEEDS:
        raise ValueError(f"too many seed segments: {len(segments) + 1} > {MAX_SEEDS}")
    for segment in segments:
        if len(segment) > MAX_SEED_LENGTH:
            raise ValueError(f"seed segment exceeds {MAX_SEED_LENGTH} bytes: {segment!r}")

    program = bytes(to_pubkey(program_id))
    prefix = b"".join(segments)
    suffix = program + PDA_MARKER

    for bump in range(255, -1, -1):
        candidate = hashlib.sha256(prefix + bytes((bump,)) + suffix).digest()
        if not _is_on_curve(candidate):
            return DerivedAddress(address=str(Pubkey.from_bytes(candidate)), bump=bump)

    raise AddressDerivationExhausted(seed, str(Pubkey.from_bytes(program)))


# ---------------------------------------------------------------------------
# Named derivations
# ---------------------------------------------------------------------------


def hub_child_address(
    kind: HubChildKind, hub: AddressLike, child: AddressLike, program_id: AddressLike
) -> DerivedAddress:
    """``HubRelease`` / ``HubPost`` address for a (hub, child) pair."""
    return derive_address(f"{SEED_HUB_CHILD_PREFIX}{kind.value}", (hub, child), program_id)


def hub_content_address(
    hub: AddressLike, child: AddressLike, program_id: AddressLike
) -> DerivedAddress:
    """Generic ``HubContent`` address for a (hub, child) pair."""
    return derive_address(SEED_HUB_CONTENT, (hub, child), program_id)


def hub_collaborator_address(
    hub: AddressLike, collaborator: AddressLike, program_id: AddressLike
) -> DerivedAddress:
    """``HubCollaborator`` membership edge between an account and a hub."""
    return derive_address(SEED_HUB_COLLABORATOR, (hub, collaborator), program_id)


def subscription_address(
    subscriber: AddressLike, target: AddressLike, program_id: AddressLike
) -> DerivedAddress:
    """``Subscription`` follow edge from *subscriber* to an account or hub."""
    return derive_address(SEED_SUBSCRIPTION, (subscriber, target), program_id)
