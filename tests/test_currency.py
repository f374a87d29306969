import pytest

from impactserver.currency import (
    CurrencyInfo,
    calculate_share,
    get_currency_info,
    get_currency_map,
    get_currency_symbol,
)


def test_symbols():
    assert get_currency_symbol("usd") == "$"
    assert get_currency_symbol("eur") == "€"
    assert get_currency_symbol("gbp") == "£"
    assert get_currency_symbol("jpy") == "¤"


def test_info():
    info = get_currency_info("eur")
    assert info == CurrencyInfo(500, "€ EUR", "€")
    assert info.to_dict() == {"premium_amount": 500, "display_name": "€ EUR", "symbol": "€"}


def test_unknown_info_raises():
    with pytest.raises(ValueError, match='"xyz"'):
        get_currency_info("xyz")


def test_map():
    currencies = get_currency_map()
    assert set(currencies) == {"usd", "eur", "gbp"}
    assert all(info.amount == 500 for info in currencies.values())


@pytest.mark.parametrize("net,leftover,shares", [(1000, 100, 3), (5000, 0, 7), (12345, 45, 2)])
def test_share_invariant(net, leftover, shares):
    share = calculate_share(net, leftover, shares)
    assert share > 0
    assert share * shares <= net - leftover < (share + 1) * shares


def test_share_even_split():
    assert calculate_share(900, 0, 3) * 3 == 900


def test_zero_shareholders():
    with pytest.raises(ValueError, match="zero shareholders"):
        calculate_share(1000, 0, 0)


@pytest.mark.parametrize("net,leftover", [(100, 500), (100, 100), (2, 0)])
def test_non_positive_share(net, leftover):
    with pytest.raises(ValueError):
        calculate_share(net, leftover, 3)