from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

from portfolio.holding import Holding


@dataclass(frozen=True)
class HoldingReturn:
    id: str
    ticker: str
    invested: float
    current: float
    gain: float
    gain_percent: float


@dataclass(frozen=True)
class ReturnMetrics:
    total_invested: float
    total_current: float
    total_return: float
    return_percent: float
    annual_dividend_at_market: float  # shares x current price x yield


def _return_pct(gain: float, invested: float) -> float:
    return gain / invested * 100 if invested > 0 else 0.0


def portfolio_returns(holdings: Sequence[Holding]) -> ReturnMetrics:
    invested = sum(h.cost_basis for h in holdings)
    current = sum(h.value for h in holdings)
    gain = current - invested
    at_market = sum(h.value * h.dividend_yield / 100 for h in holdings)
    return ReturnMetrics(invested, current, gain, _return_pct(gain, invested), at_market)


def holding_returns(holdings: Sequence[Holding]) -> List[HoldingReturn]:
    out = []
    for h in holdings:
        gain = h.value - h.cost_basis
        out.append(HoldingReturn(h.id, h.ticker, h.cost_basis, h.value, gain, _return_pct(gain, h.cost_basis)))
    return out
