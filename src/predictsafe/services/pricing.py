"""
Price lookup with country fallback and currency symbol display.

No conversion, rounding or tax: a price row is shown as stored.
"""
from typing import Optional, Protocol, Sequence

HOME_MARKET = "Nigeria"
HOME_CURRENCY = "NGN"
FALLBACK_COUNTRY = "Other"
FALLBACK_CURRENCY = "USD"

CURRENCY_SYMBOLS = {
    "NGN": "₦",
    "GHS": "₵",
    "KES": "KSh",
    "USD": "$",
    "EUR": "€",
}

COUNTRY_SYMBOLS = {
    "Nigeria": "₦",
    "Ghana": "₵",
    "Kenya": "KSh",
}

SUPPORTED_COUNTRIES = ("Nigeria", "Ghana", "Kenya")


class PriceRow(Protocol):
    country: str
    duration_days: int
    currency: str


def normalize_country(country: Optional[str]) -> str:
    """Map free-text country input onto a priced market."""
    if not country:
        return FALLBACK_COUNTRY
    value = country.strip().lower()
    for market in SUPPORTED_COUNTRIES:
        if value == market.lower():
            return market
    return FALLBACK_COUNTRY


def resolve_price(
    prices: Sequence[PriceRow], duration_days: int, country: Optional[str]
) -> Optional[PriceRow]:
    """Pick the price row shown to a user for one duration.

    Order: exact country, a USD or "Other" row, a row in the market's currency
    (NGN for Nigeria, USD elsewhere), then whatever row exists for the duration.
    """
    candidates = [p for p in prices if p.duration_days == duration_days]
    if not candidates:
        return None

    if country:
        for price in candidates:
            if price.country == country:
                return price

    # Nigerian users are matched by the exact-country pass; nobody else falls
    # back onto the Naira row before the USD one
    for price in candidates:
        if (price.currency or "").upper() == FALLBACK_CURRENCY or price.country == FALLBACK_COUNTRY:
            return price

    market_currency = HOME_CURRENCY if country == HOME_MARKET else FALLBACK_CURRENCY
    for price in candidates:
        if (price.currency or "").upper() == market_currency:
            return price

    return candidates[0]


def currency_symbol(
    currency: Optional[str],
    price_country: Optional[str] = None,
    user_country: Optional[str] = None,
) -> str:
    """Symbol to show next to a price."""
    if currency:
        return CURRENCY_SYMBOLS.get(currency.upper(), currency)
    # markets without a local currency are priced in USD
    if price_country:
        return COUNTRY_SYMBOLS.get(price_country.strip(), "$")
    if user_country:
        return COUNTRY_SYMBOLS.get(user_country.strip(), "$")
    return "$"


def format_amount(amount: float, currency: Optional[str], price_country: Optional[str] = None) -> str:
    return f"{currency_symbol(currency, price_country)}{amount:,.2f}"
