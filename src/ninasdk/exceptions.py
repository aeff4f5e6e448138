"""Nina SDK exception hierarchy.

Provides typed exceptions for every failure category of the read path, so
callers can tell a malformed record apart from a transport outage and let
``CancelledError`` propagate untouched.

Exception hierarchy:

```text
NinaError (base -- never raised directly)
├── ConfigurationError          -- config validation, missing keys, bad YAML
├── AddressDerivationExhausted  -- no bump in [0, 255] yields an off-curve address
├── DecodeError                 -- raw bytes do not match the claimed record layout
├── LedgerError                 -- ledger read failures
│   ├── LedgerFetchFailure      -- transport/RPC failure (after retries)
│   └── RecordNotFound          -- a required record is absent on-chain
└── ApiError                    -- JSON API returned an error or malformed body
```

This module has no imports from the rest of the package so that every layer,
including the pure ``models`` layer, can raise these types.

See Also:
    [RpcLedgerGateway][ninasdk.ledger.rpc.RpcLedgerGateway]: Raises
        [LedgerFetchFailure][ninasdk.exceptions.LedgerFetchFailure].
    [RouteEnricher][ninasdk.enrich.enricher.RouteEnricher]: Raises
        [RecordNotFound][ninasdk.exceptions.RecordNotFound] for single-entity
        recipes.
"""

from __future__ import annotations


class NinaError(Exception):
    """Base exception for all Nina SDK errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(NinaError):
    """Invalid or missing configuration (YAML, env vars)."""


# ---------------------------------------------------------------------------
# Address derivation
# ---------------------------------------------------------------------------


class AddressDerivationExhausted(NinaError):
    """No bump seed in ``[0, 255]`` produced an address off the ed25519 curve.

    Astronomically unlikely for real inputs. Fatal and never retried: the
    same inputs will always exhaust again.
    """

    def __init__(self, seed: str, program_id: str) -> None:
        super().__init__(f"no valid bump for seed {seed!r} under program {program_id}")
        self.seed = seed
        self.program_id = program_id


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class DecodeError(NinaError):
    """Raw account bytes do not match the expected layout for a record type.

    Scoped to a single record: the enricher surfaces it on the affected item
    and keeps enriching the rest of the batch.
    """

    def __init__(self, record_type: str, reason: str) -> None:
        super().__init__(f"{record_type}: {reason}")
        self.record_type = record_type
        self.reason = reason


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class LedgerError(NinaError):
    """Base for all ledger read errors."""


class LedgerFetchFailure(LedgerError):
    """Transport-level failure reading from the ledger RPC.

    Raised after the gateway's own retry budget is spent. The enricher does
    not retry; the whole ``enrich`` call fails.
    """


class RecordNotFound(LedgerError):
    """A record required by a single-entity recipe does not exist on-chain."""

    def __init__(self, record_type: str, address: str) -> None:
        super().__init__(f"{record_type} account not found: {address}")
        self.record_type = record_type
        self.address = address


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


class ApiError(NinaError):
    """The JSON API returned a non-success status or an unparseable body."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
