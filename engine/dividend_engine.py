"""Dividend projections.

Annual income is based on cost: purchase price x yield. The monthly schedule
puts a quarterly-equivalent payment (annual / 4) in every month the ticker
pays, so it only adds up to the annual figure for quarterly payers. Monthly
payers are overstated and annual payers understated. ``mode="prorated"``
spreads the annual amount over the payment months instead.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from market.reference import payment_months
from portfolio.holding import Holding

QUARTERLY = "quarterly"
PRORATED = "prorated"


@dataclass(frozen=True)
class HoldingDividend:
    id: str
    ticker: str
    annual_per_share: float
    annual: float


@dataclass(frozen=True)
class DividendProjection:
    holdings: List[HoldingDividend]
    total_annual: float


@dataclass(frozen=True)
class PaymentDetail:
    ticker: str
    name: str
    amount: float
    dividend_yield: float


@dataclass
class MonthlyDividend:
    month: int
    total: float = 0.0
    details: List[PaymentDetail] = field(default_factory=list)


def annual_dividend_per_share(h: Holding) -> float:
    return h.purchase_price * h.dividend_yield / 100


def annual_dividends(holdings: Sequence[Holding]) -> DividendProjection:
    rows = []
    for h in holdings:
        per_share = annual_dividend_per_share(h)
        rows.append(HoldingDividend(h.id, h.ticker, per_share, h.shares * per_share))
    return DividendProjection(rows, sum(r.annual for r in rows))


def monthly_dividends(
    holdings: Sequence[Holding],
    schedule: Optional[Mapping[str, Sequence[int]]] = None,
    mode: str = QUARTERLY,
) -> List[MonthlyDividend]:
    if mode not in (QUARTERLY, PRORATED):
        raise ValueError(f"Unknown dividend mode: {mode}")
    months = [MonthlyDividend(m) for m in range(1, 13)]
    for h in holdings:
        pay = payment_months(h.ticker, schedule)
        if not pay:
            continue
        annual = h.shares * annual_dividend_per_share(h)
        amount = annual / 4 if mode == QUARTERLY else annual / len(pay)
        for m in pay:
            bucket = months[m - 1]
            bucket.total += amount
            bucket.details.append(PaymentDetail(h.ticker, h.display_name, amount, h.dividend_yield))
    return months
