from dataclasses import dataclass
from typing import Optional

from predictsafe.services.pricing import currency_symbol, format_amount, normalize_country, resolve_price


@dataclass
class Price:
    country: str
    duration_days: int
    currency: str
    price: float = 0
    activation_fee: Optional[float] = None


PRICES = [
    Price("Nigeria", 7, "NGN", 3000),
    Price("Nigeria", 30, "NGN", 10000),
    Price("Ghana", 30, "GHS", 150),
    Price("Other", 30, "USD", 15),
]


def test_exact_country_wins():
    assert resolve_price(PRICES, 30, "Ghana").currency == "GHS"


def test_other_markets_fall_back_to_usd_not_naira():
    assert resolve_price(PRICES, 30, "France").currency == "USD"
    assert resolve_price(PRICES, 30, "Kenya").country == "Other"
    assert resolve_price(PRICES, 30, None).country == "Other"


def test_ghana_without_own_row_gets_usd():
    prices = [Price("Nigeria", 30, "NGN"), Price("Other", 30, "USD")]
    assert resolve_price(prices, 30, "Ghana").currency == "USD"


def test_nigeria_falls_back_to_a_naira_row():
    prices = [Price("Ghana", 30, "GHS"), Price("Lagos", 30, "NGN")]
    assert resolve_price(prices, 30, "Nigeria").country == "Lagos"


def test_usd_currency_matched_case_insensitively():
    prices = [Price("Nigeria", 30, "NGN"), Price("International", 30, "usd")]
    assert resolve_price(prices, 30, "Kenya").country == "International"


def test_usd_row_used_when_home_market_missing():
    prices = [Price("Ghana", 30, "GHS"), Price("Other", 30, "USD")]
    assert resolve_price(prices, 30, "Kenya").country == "Other"


def test_any_row_for_duration_as_last_resort():
    prices = [Price("Ghana", 30, "GHS")]
    assert resolve_price(prices, 30, "Kenya").country == "Ghana"


def test_missing_duration_has_no_price():
    assert resolve_price(PRICES, 90, "Nigeria") is None


def test_duration_never_crosses_over():
    assert resolve_price(PRICES, 7, "Ghana").duration_days == 7


def test_normalize_country():
    assert normalize_country("nigeria ") == "Nigeria"
    assert normalize_country("KENYA") == "Kenya"
    assert normalize_country("Brazil") == "Other"
    assert normalize_country(None) == "Other"


def test_currency_symbols():
    assert currency_symbol("NGN") == "₦"
    assert currency_symbol("usd") == "$"
    assert currency_symbol("XYZ") == "XYZ"
    assert currency_symbol(None, "Ghana") == "₵"
    assert currency_symbol(None, None, "Kenya") == "KSh"
    assert currency_symbol(None, None, "Nigeria") == "₦"
    assert currency_symbol(None, None, "Brazil") == "$"
    assert currency_symbol(None) == "$"


def test_format_amount():
    assert format_amount(10000, "NGN") == "₦10,000.00"
