"""Tests for allocation breakdowns and return metrics.

Covers:
- Position tier weights tie out to 100%
- Top-N holding weights
- Sector weights with the default sector
- Return metrics, including the empty portfolio
"""
from __future__ import annotations

import pytest

from engine.allocation_engine import holding_weights, position_weights, sector_weights, total_value
from engine.return_engine import holding_returns, portfolio_returns
from tests.helpers import make_holding


def mixed_lineup():
    return [
        make_holding("JNJ", "defender", 0, shares=10, current_price=150),  # 1500
        make_holding("KO", "defender", 1, shares=20, current_price=60),  # 1200
        make_holding("SPY", "midfielder", 0, shares=5, current_price=600),  # 3000
        make_holding("TSLA", "forward", 0, shares=10, current_price=250),  # 2500
        make_holding("XYZ", "forward", 1, shares=1, current_price=300),  # 300
    ]


class TestPositionWeights:
    """Tests for defender/midfielder/forward weights."""

    def test_tiers_tie_out_to_100(self):
        """Tier weights should sum to 100 when the portfolio has value."""
        weights = position_weights(mixed_lineup())

        assert sum(w.weight for w in weights.values()) == pytest.approx(100.0)

    def test_tier_values_and_counts(self):
        """Each tier should aggregate shares x current price of its holdings."""
        weights = position_weights(mixed_lineup())

        # Total 8500: defenders 2700, midfield 3000, forwards 2800
        assert weights["defender"].value == pytest.approx(2700)
        assert weights["defender"].count == 2
        assert weights["midfielder"].weight == pytest.approx(3000 / 8500 * 100)
        assert weights["forward"].count == 2

    def test_tier_holdings_sorted_by_value(self):
        """Holdings inside a tier should be ordered largest first."""
        weights = position_weights(mixed_lineup())

        assert [h.ticker for h in weights["forward"].holdings] == ["TSLA", "XYZ"]

    def test_empty_portfolio_is_all_zero(self):
        """Empty portfolio should give zero weights without dividing by zero."""
        weights = position_weights([])

        assert set(weights) == {"defender", "midfielder", "forward"}
        assert sum(w.weight for w in weights.values()) == 0
        assert all(w.count == 0 for w in weights.values())

    def test_zero_value_holdings_give_zero_weights(self):
        """Holdings worth nothing should not produce a division error."""
        weights = position_weights([make_holding("AAPL", shares=0)])

        assert weights["defender"].weight == 0


class TestHoldingWeights:
    """Tests for per-holding weights."""

    def test_sorted_descending(self):
        """Largest holding should come first."""
        rows = holding_weights(mixed_lineup())

        assert [r.ticker for r in rows][:2] == ["SPY", "TSLA"]

    def test_top_n_cap_does_not_change_weights(self):
        """Capping the list should not renormalize the remaining weights."""
        rows = holding_weights(mixed_lineup(), top_n=2)

        assert len(rows) == 2
        assert rows[0].weight == pytest.approx(3000 / 8500 * 100)

    def test_no_cap(self):
        """top_n=None should return every holding, summing to 100."""
        rows = holding_weights(mixed_lineup(), top_n=None)

        assert len(rows) == 5
        assert sum(r.weight for r in rows) == pytest.approx(100.0)


class TestSectorWeights:
    """Tests for sector aggregation."""

    def test_unknown_ticker_uses_default_sector(self):
        """Tickers missing from the sector table should count as Technology."""
        rows = {r.sector: r for r in sector_weights(mixed_lineup())}

        # XYZ (300) is unknown and lands in Technology
        assert rows["Technology"].value == pytest.approx(300)
        assert rows["ETF"].value == pytest.approx(3000)
        assert rows["Consumer Staples"].value == pytest.approx(1200)

    def test_sorted_by_weight(self):
        """Sectors should be ordered by weight, descending."""
        rows = sector_weights(mixed_lineup())

        assert [r.weight for r in rows] == sorted((r.weight for r in rows), reverse=True)

    def test_custom_sector_map(self):
        """A caller-supplied table should override the built-in one."""
        rows = sector_weights([make_holding("AAPL")], sector_map={"AAPL": "Fruit"})

        assert rows[0].sector == "Fruit"
        assert rows[0].weight == pytest.approx(100.0)

    def test_empty(self):
        """No holdings should produce no sectors."""
        assert sector_weights([]) == []


class TestReturns:
    """Tests for return metrics."""

    def test_single_holding_example(self):
        """10 AAPL bought at 150, now 200."""
        r = portfolio_returns([make_holding("AAPL", shares=10, purchase_price=150, current_price=200)])

        assert r.total_invested == pytest.approx(1500)
        assert r.total_current == pytest.approx(2000)
        assert r.total_return == pytest.approx(500)
        assert r.return_percent == pytest.approx(33.333, abs=0.01)

    def test_return_is_current_minus_invested(self):
        """total_return should always equal current minus invested."""
        r = portfolio_returns(mixed_lineup())

        assert r.total_return == pytest.approx(r.total_current - r.total_invested)

    def test_empty_portfolio(self):
        """Empty portfolio should be all zeros."""
        r = portfolio_returns([])

        assert r.total_invested == 0
        assert r.total_current == 0
        assert r.total_return == 0
        assert r.return_percent == 0
        assert total_value([]) == 0

    def test_zero_cost_basis(self):
        """A free position should report 0% rather than dividing by zero."""
        r = portfolio_returns([make_holding("AAPL", purchase_price=0, current_price=10)])

        assert r.total_return == pytest.approx(100)
        assert r.return_percent == 0

    def test_dividend_at_market_uses_current_price(self):
        """Market dividend income should use the current price."""
        r = portfolio_returns([make_holding("KO", shares=10, purchase_price=50, current_price=60, dividend_yield=3.0)])

        assert r.annual_dividend_at_market == pytest.approx(18.0)

    def test_holding_returns(self):
        """Per-holding returns should match their own cost basis."""
        rows = holding_returns([make_holding("AAPL", shares=2, purchase_price=100, current_price=90)])

        assert rows[0].gain == pytest.approx(-20)
        assert rows[0].gain_percent == pytest.approx(-10)
