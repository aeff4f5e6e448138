"""
Top-level facade wiring configuration, ledger gateway, enricher and API.

Every [Nina][ninasdk.client.Nina] instance owns its own sessions and
configuration; there is no module-level client state, so a mainnet and a
devnet client can run side by side.

Examples:
    ```python
    async with Nina.from_yaml("nina.yaml") as nina:
        body = await nina.get("/hubs/ninas-picks", with_account_data=True)
        releases = await nina.hubs.fetch_releases("ninas-picks", with_account_data=True)

    devnet = Nina.from_dict({"cluster": "devnet"})
    ```
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any

from ninasdk.api.client import NinaApi
from ninasdk.api.resources import (
    Accounts,
    Exchanges,
    Hubs,
    Posts,
    Releases,
    Search,
    Subscriptions,
)
from ninasdk.core.config import ClientConfig
from ninasdk.core.logger import configure_logging
from ninasdk.enrich.enricher import RouteEnricher
from ninasdk.ledger.gateway import LedgerGateway
from ninasdk.ledger.rpc import RpcLedgerGateway
from ninasdk.models.address import AddressLike
from ninasdk.models.routes import Route
from ninasdk.utils import currency


class Nina:
    """Read client for the Nina JSON API and the records behind it.

    Args:
        config: Client configuration; defaults to mainnet.
        gateway: Ledger gateway override (tests, custom transports). When
            omitted an [RpcLedgerGateway][ninasdk.ledger.rpc.RpcLedgerGateway]
            is built from ``config.ledger`` and closed with the facade.

    Attributes:
        accounts, hubs, releases, posts, exchanges, subscriptions, search:
            Named requests per entity, see [ninasdk.api.resources][].
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        gateway: LedgerGateway | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        configure_logging(self._config.logging)
        self._rpc: RpcLedgerGateway | None = None
        if gateway is None:
            self._rpc = RpcLedgerGateway(self._config.ledger)
            gateway = self._rpc
        self._gateway = gateway
        self._enricher = RouteEnricher(gateway, self._config.ledger.program_id)
        self._api = NinaApi(self._config.api, self._enricher)
        self.accounts = Accounts(self._api)
        self.hubs = Hubs(self._api)
        self.releases = Releases(self._api)
        self.posts = Posts(self._api)
        self.exchanges = Exchanges(self._api)
        self.subscriptions = Subscriptions(self._api)
        self.search = Search(self._api)

    @classmethod
    def from_yaml(cls, config_path: str | Path, **kwargs: Any) -> Nina:
        """Build a facade from a YAML configuration file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the configuration is invalid.
        """
        return cls(ClientConfig.from_yaml(config_path), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any], **kwargs: Any) -> Nina:
        """Build a facade from a configuration dictionary."""
        return cls(ClientConfig.from_dict(data), **kwargs)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def api(self) -> NinaApi:
        return self._api

    @property
    def enricher(self) -> RouteEnricher:
        return self._enricher

    @property
    def gateway(self) -> LedgerGateway:
        return self._gateway

    async def get(
        self,
        path: str,
        query: dict[str, Any] | None = None,
        *,
        with_account_data: bool = False,
    ) -> Any:
        """See [NinaApi.get()][ninasdk.api.client.NinaApi.get]."""
        return await self._api.get(path, query, with_account_data=with_account_data)

    async def post(
        self,
        path: str,
        data: dict[str, Any],
        *,
        with_account_data: bool = False,
    ) -> Any:
        """See [NinaApi.post()][ninasdk.api.client.NinaApi.post]."""
        return await self._api.post(path, data, with_account_data=with_account_data)

    async def enrich(self, route: Route | str, body: dict[str, Any]) -> dict[str, Any]:
        """Enrich a body obtained elsewhere.

        See [RouteEnricher.enrich()][ninasdk.enrich.enricher.RouteEnricher.enrich].
        """
        return await self._enricher.enrich(route, body)

    # Payment mints on the configured cluster

    def is_sol(self, mint: AddressLike) -> bool:
        return currency.is_sol(mint, self._config.cluster)

    def is_usdc(self, mint: AddressLike) -> bool:
        return currency.is_usdc(mint, self._config.cluster)

    def decimals_for_mint(self, mint: AddressLike) -> int | None:
        return currency.decimals_for_mint(mint, self._config.cluster)

    def native_to_ui(self, amount: int, mint: AddressLike) -> Decimal:
        """See [native_to_ui()][ninasdk.utils.currency.native_to_ui]."""
        return currency.native_to_ui(amount, mint, self._config.cluster)

    def ui_to_native(self, amount: Decimal | int | float | str, mint: AddressLike) -> int:
        """See [ui_to_native()][ninasdk.utils.currency.ui_to_native]."""
        return currency.ui_to_native(amount, mint, self._config.cluster)

    def native_to_ui_string(
        self,
        amount: int,
        mint: AddressLike,
        *,
        decimal_override: bool = False,
        show_currency: bool = True,
    ) -> str:
        """See [native_to_ui_string()][ninasdk.utils.currency.native_to_ui_string]."""
        return currency.native_to_ui_string(
            amount,
            mint,
            self._config.cluster,
            decimal_override=decimal_override,
            show_currency=show_currency,
        )

    async def close(self) -> None:
        """Close the API session and the owned ledger gateway."""
        try:
            await self._api.close()
        finally:
            if self._rpc is not None:
                await self._rpc.close()

    async def __aenter__(self) -> Nina:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Nina(cluster={self._config.cluster}, api={self._api.endpoint})"
