"""Supported donation currencies and splitting a donation into shares."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

UNKNOWN_SYMBOL = "¤"


@dataclass(frozen=True)
class CurrencyInfo:
    """The amount needed for premium perks in a currency, and how to show it."""

    amount: int
    display_name: str
    symbol: str

    def to_dict(self) -> dict:
        return {
            "premium_amount": self.amount,
            "display_name": self.display_name,
            "symbol": self.symbol,
        }


_CURRENCIES: Mapping[str, CurrencyInfo] = MappingProxyType(
    {
        "usd": CurrencyInfo(500, "$ USD", "$"),
        "eur": CurrencyInfo(500, "€ EUR", "€"),
        "gbp": CurrencyInfo(500, "£ GBP", "£"),
    }
)


def get_currency_symbol(currency: str) -> str:
    """The symbol for a supported currency, or the generic currency sign."""
    info = _CURRENCIES.get(currency)
    return info.symbol if info is not None else UNKNOWN_SYMBOL


def get_currency_info(currency: str) -> CurrencyInfo:
    """Details of a supported currency; raises ValueError otherwise."""
    try:
        return _CURRENCIES[currency]
    except KeyError:
        raise ValueError(f'invalid or unsupported currency "{currency}"') from None


def get_currency_map() -> Mapping[str, CurrencyInfo]:
    """All supported currencies, keyed by lower-case code."""
    return _CURRENCIES


def calculate_share(net: int, target_leftover: int, shares: int) -> int:
    """Each shareholder's part of net after keeping target_leftover, in minor units.

    Raises ValueError when there are no shareholders or the share is not positive.
    """
    if shares < 1:
        raise ValueError("unable to distribute shares, zero shareholders")
    remaining = net - target_leftover
    share = abs(remaining) // shares
    if remaining < 0:
        share = -share
    if share <= 0:
        raise ValueError(f"calculated share ({share / 100:.2f}) is less than zero")
    return share