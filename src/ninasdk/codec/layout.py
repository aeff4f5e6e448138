"""
Declarative binary layouts for on-chain accounts.

Every record type declares a [RecordLayout][ninasdk.codec.layout.RecordLayout]:
an ordered tuple of [FieldLayout][ninasdk.codec.layout.FieldLayout] entries
behind an 8-byte discriminator. [RecordLayout.unpack()][ninasdk.codec.layout.RecordLayout.unpack]
walks the buffer once and returns a flat ``dict`` of raw Python values
(base58 text for addresses, ``int`` for integers, ``bytes`` for padded
arrays). Turning those raw values into normalized JSON is left to the record
models in [ninasdk.codec.records][].

Supported field kinds (all integers little-endian):

* ``pubkey`` -- 32 bytes, emitted as base58 text.
* ``optional_pubkey`` -- 1-byte tag + 32 bytes (fixed width), ``None`` when
  the tag is 0.
* ``u8`` / ``i8`` / ``u64`` / ``i64``.
* ``bool`` -- strictly 0 or 1.
* ``bytes`` -- fixed-width padded byte array.
* ``enum`` -- 1-byte discriminant, emitted as the variant name.
* ``struct_array`` -- fixed count of a nested field group.

Note:
    Unlike the lenient JSON field parsing this pattern comes from, a layout
    mismatch is never silently dropped: any structural problem raises
    [DecodeError][ninasdk.exceptions.DecodeError] so a corrupt account cannot
    masquerade as valid data.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from solders.pubkey import Pubkey

from ninasdk.exceptions import DecodeError


DISCRIMINATOR_SIZE = 8
PUBKEY_SIZE = 32

_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")
_I8 = struct.Struct("<b")


class FieldKind(StrEnum):
    PUBKEY = "pubkey"
    OPTIONAL_PUBKEY = "optional_pubkey"
    U8 = "u8"
    I8 = "i8"
    BOOL = "bool"
    U64 = "u64"
    I64 = "i64"
    BYTES = "bytes"
    ENUM = "enum"
    STRUCT_ARRAY = "struct_array"


_FIXED_SIZES: dict[FieldKind, int] = {
    FieldKind.PUBKEY: PUBKEY_SIZE,
    FieldKind.OPTIONAL_PUBKEY: 1 + PUBKEY_SIZE,
    FieldKind.U8: 1,
    FieldKind.I8: 1,
    FieldKind.BOOL: 1,
    FieldKind.U64: 8,
    FieldKind.I64: 8,
    FieldKind.ENUM: 1,
}


@dataclass(frozen=True, slots=True)
class FieldLayout:
    """One field in a record layout.

    Attributes:
        name: Raw field name (snake_case) in the unpacked dictionary.
        kind: Wire encoding of the field.
        length: Byte width for ``bytes`` fields.
        variants: Variant names for ``enum`` fields, indexed by discriminant.
        items: Nested field group for ``struct_array`` fields.
        count: Number of elements for ``struct_array`` fields.
    """

    name: str
    kind: FieldKind
    length: int = 0
    variants: tuple[str, ...] = ()
    items: tuple[FieldLayout, ...] = ()
    count: int = 0

    @property
    def size(self) -> int:
        if self.kind is FieldKind.BYTES:
            return self.length
        if self.kind is FieldKind.STRUCT_ARRAY:
            return self.count * sum(item.size for item in self.items)
        return _FIXED_SIZES[self.kind]


# ---------------------------------------------------------------------------
# Field constructors
# ---------------------------------------------------------------------------


def pubkey(name: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.PUBKEY)


def optional_pubkey(name: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.OPTIONAL_PUBKEY)


def u8(name: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.U8)


def i8(name: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.I8)


def boolean(name: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.BOOL)


def u64(name: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.U64)


def i64(name: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.I64)


def padded_bytes(name: str, length: int) -> FieldLayout:
    return FieldLayout(name, FieldKind.BYTES, length=length)


def enum(name: str, *variants: str) -> FieldLayout:
    return FieldLayout(name, FieldKind.ENUM, variants=variants)


def struct_array(name: str, count: int, *items: FieldLayout) -> FieldLayout:
    return FieldLayout(name, FieldKind.STRUCT_ARRAY, items=items, count=count)


def account_discriminator(account_name: str) -> bytes:
    """First 8 bytes of ``sha256("account:<Name>")``."""
    return hashlib.sha256(f"account:{account_name}".encode()).digest()[:DISCRIMINATOR_SIZE]


# ---------------------------------------------------------------------------
# Record layout
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RecordLayout:
    """Fixed binary layout of one account type.

    Attributes:
        account_name: Program-side struct name, e.g. ``"HubContent"``.
        fields: Ordered fields following the discriminator.
        discriminator: Computed 8-byte type tag.
        size: Computed total byte length, discriminator included.
    """

    account_name: str
    fields: tuple[FieldLayout, ...]
    discriminator: bytes = field(init=False, repr=False)
    size: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "discriminator", account_discriminator(self.account_name))
        object.__setattr__(
            self, "size", DISCRIMINATOR_SIZE + sum(f.size for f in self.fields)
        )

    def unpack(self, raw: bytes) -> dict[str, Any]:
        """Decode *raw* into a dictionary of raw field values.

        Raises:
            DecodeError: On discriminator mismatch, length mismatch, or an
                invalid bool/enum byte.
        """
        if len(raw) != self.size:
            raise DecodeError(
                self.account_name, f"expected {self.size} bytes, got {len(raw)}"
            )
        if raw[:DISCRIMINATOR_SIZE] != self.discriminator:
            raise DecodeError(self.account_name, "discriminator mismatch")

        view = memoryview(raw)
        values, offset = _unpack_fields(self.account_name, self.fields, view, DISCRIMINATOR_SIZE)
        if offset != self.size:
            raise DecodeError(self.account_name, f"layout consumed {offset} of {self.size} bytes")
        return values


def _unpack_fields(
    record: str, fields: tuple[FieldLayout, ...], view: memoryview, offset: int
) -> tuple[dict[str, Any], int]:
    values: dict[str, Any] = {}
    for spec in fields:
        if spec.kind is FieldKind.STRUCT_ARRAY:
            elements = []
            for _ in range(spec.count):
                element, offset = _unpack_fields(record, spec.items, view, offset)
                elements.append(element)
            values[spec.name] = elements
            continue
        values[spec.name] = _read_scalar(record, spec, view[offset : offset + spec.size])
        offset += spec.size
    return values, offset


def _read_scalar(record: str, spec: FieldLayout, chunk: memoryview) -> Any:  # noqa: PLR0911
    kind = spec.kind
    if kind is FieldKind.PUBKEY:
        return str(Pubkey.from_bytes(bytes(chunk)))
    if kind is FieldKind.OPTIONAL_PUBKEY:
        tag = chunk[0]
        if tag == 0:
            return None
        if tag != 1:
            raise DecodeError(record, f"{spec.name}: invalid option tag {tag}")
        return str(Pubkey.from_bytes(bytes(chunk[1:])))
    if kind is FieldKind.U8:
        return chunk[0]
    if kind is FieldKind.I8:
        return _I8.unpack(chunk)[0]
    if kind is FieldKind.BOOL:
        if chunk[0] > 1:
            raise DecodeError(record, f"{spec.name}: invalid bool byte {chunk[0]}")
        return chunk[0] == 1
    if kind is FieldKind.U64:
        return _U64.unpack(chunk)[0]
    if kind is FieldKind.I64:
        return _I64.unpack(chunk)[0]
    if kind is FieldKind.BYTES:
        return bytes(chunk)
    if kind is FieldKind.ENUM:
        index = chunk[0]
        if index >= len(spec.variants):
            raise DecodeError(record, f"{spec.name}: unknown variant {index}")
        return spec.variants[index]
    raise DecodeError(record, f"{spec.name}: unsupported field kind {kind}")
