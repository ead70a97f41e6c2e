"""Shared builders for tests."""
from __future__ import annotations

from datetime import date

from portfolio.holding import Holding, holding_id


def make_holding(
    ticker: str,
    position_type: str = "defender",
    slot: int = 0,
    shares: float = 10,
    purchase_price: float = 100.0,
    current_price: float = 100.0,
    dividend_yield: float = 0.0,
) -> Holding:
    """Helper to create a test holding."""
    return Holding(
        id=holding_id(position_type, slot),
        ticker=ticker,
        display_name=ticker,
        risk_tier="medium",
        position_type=position_type,
        slot_index=slot,
        position=(50.0, 50.0),
        shares=shares,
        purchase_price=purchase_price,
        purchase_date=date(2024, 1, 1),
        current_price=current_price,
        dividend_yield=dividend_yield,
    )
