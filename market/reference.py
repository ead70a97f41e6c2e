"""Static reference tables used by the aggregator."""
from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

DEFAULT_SECTOR = "Technology"

SECTOR_BY_TICKER: Dict[str, str] = {
    # Technology
    "AAPL": "Technology", "MSFT": "Technology", "GOOGL": "Technology",
    "NVDA": "Technology", "AMD": "Technology", "INTC": "Technology",
    "CRM": "Technology", "ORCL": "Technology", "ADBE": "Technology",
    "NET": "Technology", "DDOG": "Technology", "MDB": "Technology",
    "TEAM": "Technology", "NOW": "Technology", "WDAY": "Technology",
    "OKTA": "Technology", "CRWD": "Technology", "ZS": "Technology",
    "PLTR": "Technology", "SNOW": "Technology", "ROKU": "Technology",
    "SQ": "Technology", "PYPL": "Technology", "TWLO": "Technology",
    "DOCU": "Technology", "SHOP": "Technology", "ZM": "Technology",
    "SNAP": "Technology", "SPOT": "Technology", "TWTR": "Technology",
    # Healthcare
    "JNJ": "Healthcare", "VEEV": "Healthcare", "ZEN": "Healthcare",
    # Financial
    "JPM": "Financial", "V": "Financial",
    # Consumer Discretionary
    "AMZN": "Consumer Discretionary", "TSLA": "Consumer Discretionary",
    "DIS": "Consumer Discretionary", "BA": "Consumer Discretionary",
    "F": "Consumer Discretionary", "GM": "Consumer Discretionary",
    "UBER": "Consumer Discretionary", "ABNB": "Consumer Discretionary",
    "CPNG": "Consumer Discretionary",
    # Consumer Staples
    "PG": "Consumer Staples", "KO": "Consumer Staples", "WMT": "Consumer Staples",
    # Industrial
    "GE": "Industrial",
    # Communication Services
    "META": "Communication Services", "NFLX": "Communication Services",
    "T": "Communication Services", "VZ": "Communication Services",
    # Energy
    "XOM": "Energy", "CVX": "Energy",
    # Funds
    "SPY": "ETF", "QQQ": "ETF", "SCHD": "ETF",
    # Cryptocurrency
    "BTC": "Cryptocurrency", "ETH": "Cryptocurrency", "COIN": "Cryptocurrency",
}

QUARTERLY = (3, 6, 9, 12)
MONTHLY = tuple(range(1, 13))
SEMIANNUAL = (6, 12)
ANNUAL = (12,)

DEFAULT_PAYMENT_MONTHS = QUARTERLY

DIVIDEND_MONTHS: Dict[str, Sequence[int]] = {
    "AAPL": QUARTERLY, "MSFT": QUARTERLY, "GOOGL": QUARTERLY,
    "JNJ": QUARTERLY, "PG": QUARTERLY, "KO": QUARTERLY,
    "V": QUARTERLY, "JPM": QUARTERLY, "WMT": QUARTERLY,
    "SCHD": QUARTERLY, "SPY": QUARTERLY, "QQQ": QUARTERLY,
    "O": MONTHLY,
    "BRK": SEMIANNUAL,
    "AMZN": ANNUAL, "META": ANNUAL, "NFLX": ANNUAL, "TSLA": ANNUAL,
    "NVDA": ANNUAL, "BTC": ANNUAL, "ETH": ANNUAL,
}


def sector_for(ticker: str, sector_map: Mapping[str, str] | None = None) -> str:
    table = SECTOR_BY_TICKER if sector_map is None else sector_map
    return table.get(ticker.upper(), DEFAULT_SECTOR)


def payment_months(ticker: str, schedule: Mapping[str, Sequence[int]] | None = None) -> List[int]:
    table = DIVIDEND_MONTHS if schedule is None else schedule
    return [m for m in table.get(ticker.upper(), DEFAULT_PAYMENT_MONTHS) if 1 <= m <= 12]
