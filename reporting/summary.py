from __future__ import annotations
from typing import Any, Dict, List, Sequence

import pandas as pd

from engine.allocation_engine import holding_weights, position_weights, sector_weights, total_value
from engine.dividend_engine import MonthlyDividend, annual_dividends, monthly_dividends
from engine.return_engine import holding_returns, portfolio_returns
from portfolio.holding import Holding

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

HOLDING_COLUMNS = [
    "id", "ticker", "name", "tier", "shares", "purchase_price", "current_price",
    "value", "weight_pct", "gain", "gain_pct", "annual_dividend",
]


def format_currency(amount: float, currency: str = "USD", usd_to_krw: float = 1320.0) -> str:
    if currency == "KRW":
        return f"₩{round(amount * usd_to_krw):,}"
    return f"${amount:,.2f}"


def dividend_summary(schedule: Sequence[MonthlyDividend]) -> Dict[str, Any]:
    return {
        "total": sum(m.total for m in schedule),
        "paying_months": sum(1 for m in schedule if m.total > 0),
    }


def portfolio_summary(holdings: Sequence[Holding], top_n: int = 6) -> Dict[str, Any]:
    schedule = monthly_dividends(holdings)
    return {
        "total_value": total_value(holdings),
        "returns": portfolio_returns(holdings),
        "positions": position_weights(holdings),
        "top_holdings": holding_weights(holdings, top_n=top_n),
        "sectors": sector_weights(holdings),
        "dividends": annual_dividends(holdings),
        "monthly_dividends": schedule,
        "monthly_summary": dividend_summary(schedule),
    }


def holdings_frame(holdings: Sequence[Holding]) -> pd.DataFrame:
    """One row per holding, largest position first."""
    weights = {w.id: w.weight for w in holding_weights(holdings, top_n=None)}
    gains = {r.id: r for r in holding_returns(holdings)}
    divs = {d.id: d.annual for d in annual_dividends(holdings).holdings}
    rows: List[Dict[str, Any]] = []
    for h in holdings:
        rows.append(
            {
                "id": h.id,
                "ticker": h.ticker,
                "name": h.display_name,
                "tier": h.risk_tier,
                "shares": h.shares,
                "purchase_price": h.purchase_price,
                "current_price": h.current_price,
                "value": h.value,
                "weight_pct": weights[h.id],
                "gain": gains[h.id].gain,
                "gain_pct": gains[h.id].gain_percent,
                "annual_dividend": divs[h.id],
            }
        )
    df = pd.DataFrame(rows, columns=HOLDING_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("value", ascending=False).reset_index(drop=True)


def monthly_frame(schedule: Sequence[MonthlyDividend]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "month": [MONTH_NAMES[m.month - 1] for m in schedule],
            "total": [m.total for m in schedule],
            "payers": [", ".join(d.ticker for d in m.details) for m in schedule],
        }
    )
