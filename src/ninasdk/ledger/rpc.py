"""
Ledger gateway over the Solana JSON-RPC HTTP API.

Uses ``getAccountInfo`` for single reads and ``getMultipleAccounts`` for
batches, both with ``base64`` encoding. Batches larger than the node limit
are split into chunks that are requested concurrently and reassembled in
input order.

Transient failures (connection errors, timeouts, HTTP 429 and 5xx) are
retried with the backoff from [RetryConfig][ninasdk.core.config.RetryConfig].
JSON-RPC error objects are deterministic and fail immediately.

Examples:
    ```python
    async with RpcLedgerGateway(config.ledger) as gateway:
        raw = await gateway.fetch_one(hub_address)
        batch = await gateway.fetch_many([a, b, c])   # [bytes, None, bytes]
    ```
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import itertools
from typing import TYPE_CHECKING, Any

import aiohttp

from ninasdk.core.config import LedgerConfig
from ninasdk.core.logger import Logger
from ninasdk.exceptions import LedgerFetchFailure
from ninasdk.models.constants import CLUSTER_RPC_ENDPOINTS, Cluster
from ninasdk.utils.http import read_bounded_json

from .gateway import LedgerGateway


if TYPE_CHECKING:
    from collections.abc import Sequence


_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class RpcLedgerGateway(LedgerGateway):
    """[LedgerGateway][ninasdk.ledger.gateway.LedgerGateway] backed by JSON-RPC.

    The ``aiohttp.ClientSession`` is created lazily on first use and closed
    by [close()][ninasdk.ledger.rpc.RpcLedgerGateway.close] or on context
    exit. A gateway may be shared by concurrent ``enrich`` calls.
    """

    def __init__(
        self,
        config: LedgerConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            config: Ledger settings. An empty ``rpc_endpoint`` falls back to
                the mainnet default.
            session: Externally owned session. When given, ``close()`` leaves
                it open.
        """
        self._config = config or LedgerConfig()
        self._endpoint = self._config.rpc_endpoint or CLUSTER_RPC_ENDPOINTS[Cluster.MAINNET]
        self._session = session
        self._owns_session = session is None
        self._session_lock = asyncio.Lock()
        self._request_ids = itertools.count(1)
        self._logger = Logger("ledger")

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                timeout = aiohttp.ClientTimeout(total=self._config.timeout)
                self._session = aiohttp.ClientSession(timeout=timeout)
                self._owns_session = True
            return self._session

    async def close(self) -> None:
        """Close the owned session. Idempotent."""
        async with self._session_lock:
            if self._session is not None and self._owns_session:
                try:
                    await self._session.close()
                finally:
                    self._session = None

    async def __aenter__(self) -> RpcLedgerGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _account_options(self) -> dict[str, str]:
        return {"encoding": "base64", "commitment": self._config.commitment}

    async def fetch_one(self, address: str) -> bytes | None:
        result = await self._call("getAccountInfo", [address, self._account_options()])
        return _decode_account(_result_value(result, "getAccountInfo"))

    async def fetch_many(self, addresses: Sequence[str]) -> list[bytes | None]:
        addresses = list(addresses)
        if not addresses:
            return []

        size = self._config.batch_size
        chunks = [addresses[i : i + size] for i in range(0, len(addresses), size)]
        results = await asyncio.gather(*(self._fetch_chunk(chunk) for chunk in chunks))
        accounts = [account for chunk_result in results for account in chunk_result]

        self._logger.debug(
            "ledger_batch_fetched",
            requested=len(addresses),
            chunks=len(chunks),
            found=sum(1 for a in accounts if a is not None),
        )
        return accounts

    async def _fetch_chunk(self, chunk: list[str]) -> list[bytes | None]:
        result = await self._call("getMultipleAccounts", [chunk, self._account_options()])
        values = _result_value(result, "getMultipleAccounts")
        if not isinstance(values, list) or len(values) != len(chunk):
            raise LedgerFetchFailure(
                f"getMultipleAccounts returned {len(values) if isinstance(values, list) else 'no'}"
                f" values for {len(chunk)} addresses"
            )
        return [_decode_account(value) for value in values]

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Send one JSON-RPC request, retrying transient failures.

        Raises:
            LedgerFetchFailure: On a JSON-RPC error object, a malformed
                response, or once the retry budget is spent.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        retry = self._config.retry

        for attempt in range(retry.max_attempts):
            try:
                body = await self._post(payload)
            except (aiohttp.ClientError, TimeoutError) as e:
                if attempt < retry.max_attempts - 1:
                    delay = retry.delay_for(attempt)
                    self._logger.warning(
                        "ledger_retry",
                        method=method,
                        attempt=attempt + 1,
                        delay_s=delay,
                        error=str(e) or type(e).__name__,
                    )
                    await asyncio.sleep(delay)
                    continue
                self._logger.error(
                    "ledger_fetch_failed",
                    method=method,
                    attempts=retry.max_attempts,
                    error=str(e) or type(e).__name__,
                )
                raise LedgerFetchFailure(
                    f"{method} failed after {retry.max_attempts} attempts: {e}"
                ) from e

            if not isinstance(body, dict):
                raise LedgerFetchFailure(f"{method}: response is not a JSON object")
            error = body.get("error")
            if error is not None:
                raise LedgerFetchFailure(f"{method}: RPC error {_format_rpc_error(error)}")
            if "result" not in body:
                raise LedgerFetchFailure(f"{method}: response has no result")
            return body["result"]

        raise RuntimeError("Unexpected state in _call")

    async def _post(self, payload: dict[str, Any]) -> Any:
        session = await self._get_session()
        async with session.post(self._endpoint, json=payload) as response:
            if response.status in _RETRYABLE_STATUS:
                raise aiohttp.ClientResponseError(
                    response.request_info,
                    response.history,
                    status=response.status,
                    message=f"HTTP {response.status}",
                )
            if response.status != 200:
                raise LedgerFetchFailure(f"{payload['method']}: HTTP {response.status}")
            try:
                return await read_bounded_json(response, self._config.max_response_size)
            except ValueError as e:
                raise LedgerFetchFailure(f"{payload['method']}: {e}") from e

    def __repr__(self) -> str:
        return f"RpcLedgerGateway(endpoint={self._endpoint}, commitment={self._config.commitment})"


def _result_value(result: Any, method: str) -> Any:
    if not isinstance(result, dict) or "value" not in result:
        raise LedgerFetchFailure(f"{method}: result has no value")
    return result["value"]


def _decode_account(value: Any) -> bytes | None:
    """Extract raw bytes from an RPC account object (``None`` if absent)."""
    if value is None:
        return None
    try:
        encoded, encoding = value["data"]
    except (KeyError, TypeError, ValueError) as e:
        raise LedgerFetchFailure(f"malformed account object: {value!r}") from e
    if encoding != "base64":
        raise LedgerFetchFailure(f"unexpected account encoding: {encoding}")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, TypeError) as e:
        raise LedgerFetchFailure(f"invalid base64 account data: {e}") from e


def _format_rpc_error(error: Any) -> str:
    if isinstance(error, dict):
        return f"{error.get('code')}: {error.get('message')}"
    return str(error)
