"""Record codec: declarative binary layouts and normalized record models.

Pure CPU work with no I/O. [decode()][ninasdk.codec.records.decode] is the
single entry point used by the enricher; per-model ``decode()`` classmethods
are available when the record type is known statically.

See Also:
    [ninasdk.codec.layout][]: Field kinds and the byte-walking unpacker.
    [ninasdk.codec.records][]: Layouts, pydantic models and normalization.
"""

from .layout import DISCRIMINATOR_SIZE, FieldKind, FieldLayout, RecordLayout, account_discriminator
from .records import (
    RECORD_MODELS,
    AccountRecord,
    CamelModel,
    Exchange,
    Hub,
    HubCollaborator,
    HubContent,
    HubPost,
    HubRelease,
    Post,
    Release,
    RevenueShareRecipient,
    Subscription,
    decode,
    is_js_safe_integer,
)


__all__ = [
    "DISCRIMINATOR_SIZE",
    "RECORD_MODELS",
    "AccountRecord",
    "CamelModel",
    "Exchange",
    "FieldKind",
    "FieldLayout",
    "Hub",
    "HubCollaborator",
    "HubContent",
    "HubPost",
    "HubRelease",
    "Post",
    "RecordLayout",
    "Release",
    "RevenueShareRecipient",
    "Subscription",
    "account_discriminator",
    "decode",
    "is_js_safe_integer",
]
