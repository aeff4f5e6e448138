"""Mint-aware amount formatting.

Ledger amounts are integers in the mint's smallest unit. These helpers
convert them to and from display values for the two payment mints the
protocol accepts (USDC and wrapped SOL). ``Decimal`` is used throughout so
conversions never pick up binary floating-point noise.

Examples:
    ```python
    native_to_ui(1_500_000, USDC_MINT)          # Decimal('1.5')
    native_to_ui_string(1_500_000, USDC_MINT)   # '$1.50 USDC'
    ui_to_native("0.25", WSOL_MINT)             # 250000000
    ```
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ninasdk.models.address import AddressLike, to_pubkey
from ninasdk.models.constants import CLUSTER_MINTS, SOL_DECIMALS, USDC_DECIMALS, Cluster


def _mint_text(mint: AddressLike) -> str:
    return mint if isinstance(mint, str) else str(to_pubkey(mint))


def is_sol(mint: AddressLike, cluster: Cluster = Cluster.MAINNET) -> bool:
    return _mint_text(mint) == CLUSTER_MINTS[cluster]["wsol"]


def is_usdc(mint: AddressLike, cluster: Cluster = Cluster.MAINNET) -> bool:
    return _mint_text(mint) == CLUSTER_MINTS[cluster]["usdc"]


def decimals_for_mint(mint: AddressLike, cluster: Cluster = Cluster.MAINNET) -> int | None:
    """Decimal places of a payment mint, or ``None`` for any other mint."""
    if is_usdc(mint, cluster):
        return USDC_DECIMALS
    if is_sol(mint, cluster):
        return SOL_DECIMALS
    return None


def _require_decimals(mint: AddressLike, cluster: Cluster) -> int:
    decimals = decimals_for_mint(mint, cluster)
    if decimals is None:
        raise ValueError(f"not a payment mint on {cluster}: {_mint_text(mint)}")
    return decimals


def native_to_ui(amount: int, mint: AddressLike, cluster: Cluster = Cluster.MAINNET) -> Decimal:
    """Convert a smallest-unit amount to a display value.

    Raises:
        ValueError: If *mint* is not a payment mint on *cluster*.
    """
    return Decimal(amount).scaleb(-_require_decimals(mint, cluster))


def ui_to_native(
    amount: Decimal | int | float | str, mint: AddressLike, cluster: Cluster = Cluster.MAINNET
) -> int:
    """Convert a display value to smallest units, rounding half up.

    Raises:
        ValueError: If *mint* is not a payment mint on *cluster*.
    """
    scaled = Decimal(str(amount)).scaleb(_require_decimals(mint, cluster))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def native_to_ui_string(
    amount: int,
    mint: AddressLike,
    cluster: Cluster = Cluster.MAINNET,
    *,
    decimal_override: bool = False,
    show_currency: bool = True,
) -> str:
    """Format an amount for display.

    USDC (or *decimal_override*) renders with two decimals, SOL with three.
    With *show_currency*, USDC reads ``$1.50 USDC`` and SOL ``0.250 SOL``.
    """
    usdc = is_usdc(mint, cluster)
    places = 2 if usdc or decimal_override else 3
    value = native_to_ui(amount, mint, cluster).quantize(
        Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP
    )
    text = f"{value:.{places}f}"
    if not show_currency:
        return text
    return f"${text} USDC" if usdc else f"{text} SOL"
