"""
Address-keyed merging of decoded records onto JSON items.

Batch results are aligned with the *addresses requested*, not with the JSON
list they came from: filtering (closed exchanges) or derivation (hub content,
collaborators) means slot ``i`` of a batch rarely corresponds to item ``i``.
[attach()][ninasdk.enrich.merger.attach] therefore pairs every slot with the
item-level address it was built from and matches items by that address.

Outcomes per slot:

* decoded record -- stored under ``item["accountData"][field]``.
* ``None`` (no account on-chain) -- the item is left untouched.
* [DecodeError][ninasdk.exceptions.DecodeError] -- the message is stored under
  ``item["accountDataErrors"][field]``; other items are unaffected.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ninasdk.codec import AccountRecord, decode
from ninasdk.core.logger import Logger
from ninasdk.exceptions import DecodeError


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ninasdk.models.constants import RecordType


Decoded = AccountRecord | DecodeError | None

_logger = Logger("merger")


def item_address(item: dict[str, Any]) -> str | None:
    """Primary address of a JSON item (its ``publicKey``)."""
    value = item.get("publicKey")
    return value if isinstance(value, str) and value else None


def decode_batch(
    record_type: RecordType,
    addresses: Sequence[str],
    raws: Sequence[bytes | None],
) -> list[Decoded]:
    """Decode an index-aligned batch, keeping failures in their slot."""
    decoded: list[Decoded] = []
    for address, raw in zip(addresses, raws, strict=True):
        if raw is None:
            decoded.append(None)
            continue
        try:
            decoded.append(decode(record_type, raw, address))
        except DecodeError as e:
            decoded.append(e)
    return decoded


def attach(
    items: Sequence[dict[str, Any]],
    keys: Sequence[str],
    decoded: Sequence[Decoded],
    field: str,
    key: Callable[[dict[str, Any]], str | None] = item_address,
) -> None:
    """Attach decoded records to the items they belong to.

    Args:
        items: JSON items to enrich in place.
        keys: Item-level address for each slot of *decoded*.
        decoded: Decoded records, index-aligned with *keys*.
        field: Key under ``accountData`` (e.g. ``"hubContent"``).
        key: Extracts an item's address for matching.
    """
    by_address: dict[str, Decoded] = dict(zip(keys, decoded, strict=True))

    for item in items:
        address = key(item)
        if address is None or address not in by_address:
            continue
        record = by_address[address]
        if record is None:
            continue
        if isinstance(record, DecodeError):
            account_data_errors(item)[field] = str(record)
            _logger.warning(
                "record_decode_failed",
                field=field,
                address=address,
                error=str(record),
            )
            continue
        account_data(item)[field] = record.to_dict()


def account_data(item: dict[str, Any]) -> dict[str, Any]:
    """The item's ``accountData`` mapping, created when missing."""
    current = item.get("accountData")
    if not isinstance(current, dict):
        current = {}
        item["accountData"] = current
    return current


def account_data_errors(item: dict[str, Any]) -> dict[str, str]:
    """The item's ``accountDataErrors`` mapping, created when missing."""
    current = item.get("accountDataErrors")
    if not isinstance(current, dict):
        current = {}
        item["accountDataErrors"] = current
    return current
