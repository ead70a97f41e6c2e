"""Tests for summary formatting and tables."""
from __future__ import annotations

import pytest

from engine.dividend_engine import monthly_dividends
from reporting.summary import (
    HOLDING_COLUMNS,
    format_currency,
    holdings_frame,
    monthly_frame,
    portfolio_summary,
)
from tests.helpers import make_holding


class TestFormatCurrency:
    """Tests for USD and KRW display."""

    def test_usd(self):
        assert format_currency(1234.5) == "$1,234.50"

    def test_krw_converts_and_rounds(self):
        """KRW amounts are converted at the given rate and shown without decimals."""
        assert format_currency(10.0, "KRW", usd_to_krw=1320) == "₩13,200"
        assert format_currency(0.25, "KRW", usd_to_krw=1320) == "₩330"


class TestFrames:
    """Tests for the pandas tables."""

    def test_holdings_frame_sorted_by_value(self):
        """Rows should be ordered largest first with weights summing to 100."""
        df = holdings_frame([
            make_holding("KO", "defender", 0, shares=10, current_price=60),
            make_holding("SPY", "midfielder", 0, shares=2, current_price=600),
        ])

        assert list(df.columns) == HOLDING_COLUMNS
        assert list(df["ticker"]) == ["SPY", "KO"]
        assert df["weight_pct"].sum() == pytest.approx(100.0)

    def test_empty_holdings_frame(self):
        """No holdings give an empty frame with the usual columns."""
        df = holdings_frame([])

        assert df.empty
        assert list(df.columns) == HOLDING_COLUMNS

    def test_monthly_frame(self):
        """Twelve rows, named months, payers listed."""
        df = monthly_frame(monthly_dividends([make_holding("KO", dividend_yield=3.0)]))

        assert len(df) == 12
        assert df.loc[2, "month"] == "Mar"
        assert df.loc[2, "payers"] == "KO"
        assert df.loc[0, "payers"] == ""


class TestPortfolioSummary:
    """Tests for the combined summary."""

    def test_keys_and_totals(self):
        """Summary should bundle every statistic."""
        s = portfolio_summary([make_holding("KO", shares=10, current_price=60, dividend_yield=3.0)], top_n=1)

        assert s["total_value"] == pytest.approx(600)
        assert len(s["top_holdings"]) == 1
        assert len(s["monthly_dividends"]) == 12
        assert s["monthly_summary"]["paying_months"] == 4
