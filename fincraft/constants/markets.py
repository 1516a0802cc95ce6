MARKETS = {
    "Malawi":   {"currency": "MWK", "market_focus": "Malawi Stock Exchange (MSE)",
                 "exchange": "MSE", "regulator": "Reserve Bank of Malawi"},
    "Botswana": {"currency": "BWP", "market_focus": "Botswana Stock Exchange (BSE)",
                 "exchange": "BSE", "regulator": "Bank of Botswana"},
}

DEFAULT_MARKET = {"currency": "USD", "market_focus": "emerging markets",
                  "exchange": "local exchanges", "regulator": "the central bank"}


def market_for(country) -> dict:
    """Market facts for a country; anything unknown (including 'Other') gets the default."""
    return MARKETS.get(country or "", DEFAULT_MARKET)


def currency_for(country) -> str:
    return market_for(country)["currency"]
