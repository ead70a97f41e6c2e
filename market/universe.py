"""Stock universe: the tickers that can be placed on the pitch.

Each entry carries static metadata (name, sector, default risk tier,
dividend yield) and the simulated market state (current price and the
change recorded by the last refresh).
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from common.errors import NotFoundError
from portfolio.holding import check_risk_tier


@dataclass
class Quote:
    ticker: str
    name: str
    sector: str
    risk_tier: str
    current_price: float
    dividend_yield: float  # percent
    previous_price: Optional[float] = None
    price_change: float = 0.0
    price_change_percent: float = 0.0


class Universe:
    """Ticker -> Quote mapping, in catalog order."""

    def __init__(self, quotes: Iterable[Quote]):
        self._quotes: Dict[str, Quote] = {}
        for q in quotes:
            self._quotes[q.ticker.upper()] = q

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Universe":
        quotes = []
        for ticker, info in (config.get("stocks") or {}).items():
            price = float(info["price"])
            quotes.append(
                Quote(
                    ticker=str(ticker),
                    name=str(info.get("name", ticker)),
                    sector=str(info.get("sector", "")),
                    risk_tier=check_risk_tier(info.get("risk_tier", "medium")),
                    current_price=price,
                    dividend_yield=float(info.get("dividend_yield", 0.0)),
                    previous_price=price,
                )
            )
        return cls(quotes)

    def __contains__(self, ticker: object) -> bool:
        return isinstance(ticker, str) and ticker.upper() in self._quotes

    def __len__(self) -> int:
        return len(self._quotes)

    def tickers(self) -> List[str]:
        return list(self._quotes)

    def quotes(self) -> List[Quote]:
        return list(self._quotes.values())

    def get(self, ticker: str) -> Quote:
        q = self._quotes.get(ticker.upper())
        if q is None:
            raise NotFoundError(f"Unknown ticker: {ticker}")
        return q

    def search(self, term: str) -> List[Quote]:
        term = (term or "").strip().lower()
        if not term:
            return []
        return [q for q in self._quotes.values() if term in q.ticker.lower() or term in q.name.lower()]

    def snapshot(self) -> Dict[str, Quote]:
        return {t: replace(q) for t, q in self._quotes.items()}
