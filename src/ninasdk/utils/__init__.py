"""Helpers shared across layers: bounded HTTP reads and currency formatting."""

from .currency import (
    decimals_for_mint,
    is_sol,
    is_usdc,
    native_to_ui,
    native_to_ui_string,
    ui_to_native,
)
from .http import read_bounded, read_bounded_json


__all__ = [
    "decimals_for_mint",
    "is_sol",
    "is_usdc",
    "native_to_ui",
    "native_to_ui_string",
    "read_bounded",
    "read_bounded_json",
    "ui_to_native",
]
