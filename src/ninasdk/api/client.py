"""
Client for the Nina JSON API.

Thin ``aiohttp`` wrapper: joins the path onto the configured endpoint, adds
the ``api_key`` query parameter when one is configured, reads the body with
a size bound and, on request, routes the parsed body through the
[RouteEnricher][ninasdk.enrich.enricher.RouteEnricher].

Examples:
    ```python
    async with NinaApi(config.api, enricher) as api:
        hub = await api.get("/hubs/ninas-picks", with_account_data=True)
        hub["hub"]["accountData"]["hub"]["handle"]   # 'ninas-picks'
    ```
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import aiohttp

from ninasdk.core.config import ApiConfig
from ninasdk.core.logger import Logger
from ninasdk.exceptions import ApiError, ConfigurationError
from ninasdk.models.routes import parse_route
from ninasdk.utils.http import read_bounded_json


if TYPE_CHECKING:
    from ninasdk.enrich.enricher import RouteEnricher


def _query_value(value: Any) -> str:
    # Booleans go out in JSON spelling: ``true`` / ``false``.
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class NinaApi:
    """Async client for the JSON API.

    Args:
        config: Endpoint, key and limits.
        enricher: Required only for ``with_account_data=True`` requests.
        session: Externally owned session; ``close()`` leaves it open.
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        enricher: RouteEnricher | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or ApiConfig()
        self._enricher = enricher
        self._session = session
        self._owns_session = session is None
        self._session_lock = asyncio.Lock()
        self._logger = Logger("api")

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

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

    async def __aenter__(self) -> NinaApi:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def get(
        self,
        path: str,
        query: dict[str, Any] | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        """GET *path*, optionally enriched with on-chain account data.

        Raises:
            ApiError: On transport failure, a non-2xx status or a malformed body.
            ConfigurationError: If account data is requested without an enricher.
        """
        return await self._request("GET", path, query=query, with_account_data=with_account_data)

    async def post(
        self,
        path: str,
        data: dict[str, Any],
        *,
        with_account_data: bool = False,
    ) -> Any:
        """POST a JSON body to *path* (used by search)."""
        return await self._request("POST", path, data=data, with_account_data=with_account_data)

    def url_for(self, path: str) -> str:
        return f"{self._config.endpoint}/{path.lstrip('/')}"

    def _params(self, query: dict[str, Any] | None) -> dict[str, str]:
        params = {k: _query_value(v) for k, v in (query or {}).items() if v is not None}
        if self._config.api_key is not None:
            params["api_key"] = self._config.api_key.get_secret_value()
        return params

    async def _request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        with_account_data: bool,
    ) -> Any:
        if not with_account_data:
            return await self._send(method, path, query, data)

        enricher = self._enricher
        if enricher is None:
            raise ConfigurationError("with_account_data requires a RouteEnricher")
        body = await self._send(method, path, query, data)
        if not isinstance(body, dict):
            raise ApiError(f"{method} {path}: expected a JSON object, got {type(body).__name__}")
        return await enricher.enrich(parse_route(path), body)

    async def _send(
        self,
        method: str,
        path: str,
        query: dict[str, Any] | None,
        data: dict[str, Any] | None,
    ) -> Any:
        session = await self._get_session()
        try:
            async with session.request(
                method, self.url_for(path), params=self._params(query), json=data
            ) as response:
                self._logger.debug(
                    "api_response", method=method, path=path, status=response.status
                )
                if not 200 <= response.status < 300:
                    raise ApiError(
                        f"{method} {path}: HTTP {response.status}", status=response.status
                    )
                try:
                    return await read_bounded_json(response, self._config.max_response_size)
                except ValueError as e:
                    raise ApiError(f"{method} {path}: {e}", status=response.status) from e
        except (aiohttp.ClientError, TimeoutError) as e:
            self._logger.warning("api_request_failed", method=method, path=path, error=str(e))
            raise ApiError(f"{method} {path}: {e}") from e

    def __repr__(self) -> str:
        return f"NinaApi(endpoint={self._config.endpoint})"
