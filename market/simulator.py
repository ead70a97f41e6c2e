"""Simulated market data.

Prices follow a bounded uniform random walk: every refresh moves each quote
by a percentage drawn from [-max_change_pct, +max_change_pct], rounded to
cents and floored at ``min_price``. A single USD->KRW exchange rate moves the
same way within its own band and is floored at ``fx_min_rate``.

No real feed is contacted; ``latency`` only emulates a network round trip.
"""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

import numpy as np

from common.config_loader import Settings
from market.universe import Quote, Universe
from portfolio.holding import Holding

LOGGER = logging.getLogger(__name__)


class MarketDataSimulator:
    """Owns the simulated quotes and exchange rate."""

    def __init__(
        self,
        universe: Universe,
        rng: Optional[np.random.Generator] = None,
        max_change_pct: float = 5.0,
        min_price: float = 0.01,
        usd_to_krw: float = 1320.0,
        fx_max_change_pct: float = 2.0,
        fx_min_rate: float = 1000.0,
        latency: float = 0.0,
    ):
        self.universe = universe
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_change_pct = max_change_pct
        self.min_price = min_price
        self.usd_to_krw = usd_to_krw
        self.fx_max_change_pct = fx_max_change_pct
        self.fx_min_rate = fx_min_rate
        self.latency = latency

    @classmethod
    def from_settings(
        cls,
        universe: Universe,
        settings: Settings,
        rng: Optional[np.random.Generator] = None,
    ) -> "MarketDataSimulator":
        return cls(
            universe,
            rng=rng,
            max_change_pct=settings.max_change_pct,
            min_price=settings.min_price,
            usd_to_krw=settings.fx_initial_rate,
            fx_max_change_pct=settings.fx_max_change_pct,
            fx_min_rate=settings.fx_min_rate,
            latency=settings.simulated_latency,
        )

    def _move_price(self, quote: Quote) -> None:
        change_pct = float(self.rng.uniform(-self.max_change_pct, self.max_change_pct))
        old = quote.current_price
        new = old * (1 + change_pct / 100)
        quote.previous_price = old
        quote.current_price = max(self.min_price, round(new, 2))
        quote.price_change = round(new - old, 2)
        quote.price_change_percent = round(change_pct, 2)

    def _move_fx(self) -> None:
        change_pct = float(self.rng.uniform(-self.fx_max_change_pct, self.fx_max_change_pct))
        new_rate = self.usd_to_krw * (1 + change_pct / 100)
        self.usd_to_krw = max(self.fx_min_rate, float(round(new_rate)))

    def refresh(self, tickers: Optional[Iterable[str]] = None) -> Dict[str, Quote]:
        """Move prices and the exchange rate once.

        Args:
            tickers: Tickers to move; defaults to the whole universe.
                Tickers not in the universe are ignored.

        Returns:
            Copies of the updated quotes keyed by ticker.
        """
        if self.latency > 0:
            time.sleep(self.latency)

        wanted: List[str] = self.universe.tickers() if tickers is None else [t.upper() for t in tickers]
        updated: Dict[str, Quote] = {}
        for t in wanted:
            if t not in self.universe or t in updated:
                continue
            quote = self.universe.get(t)
            self._move_price(quote)
            updated[quote.ticker] = replace(quote)

        self._move_fx()
        LOGGER.debug("Refreshed %d quotes, USD/KRW %.0f", len(updated), self.usd_to_krw)
        return updated

    @staticmethod
    def apply(holdings: Iterable[Holding], quotes: Dict[str, Quote]) -> int:
        """Copy refreshed prices onto matching holdings. Returns the number updated."""
        n = 0
        for h in holdings:
            q = quotes.get(h.ticker.upper())
            if q is None:
                continue
            h.previous_price = h.current_price
            h.current_price = q.current_price
            h.price_change = q.price_change
            h.price_change_percent = q.price_change_percent
            n += 1
        return n
