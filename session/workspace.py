"""Workspace: one user's working lineup plus the services around it.

All mutations and timer callbacks go through one re-entrant lock, so at most
one change is in flight at a time. Every change to the lineup re-arms the
autosave debounce; the market timer refreshes prices in the background once
``start`` is called. ``close`` cancels both timers.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

import numpy as np

from accounts.account import User
from accounts.identity import IdentityProvider
from common.config_loader import LoadedConfig
from common.errors import NotFoundError, ValidationError
from market.simulator import MarketDataSimulator
from market.universe import Quote, Universe
from portfolio.formation import FormationCatalog
from portfolio.holding import Holding
from portfolio.portfolio import Portfolio
from portfolio.presets import Preset, apply_preset, build_presets, find_preset
from reporting.summary import portfolio_summary
from session.timers import Debouncer, RepeatingTimer
from storage.backend import JsonFileBackend
from storage.portfolio_store import AUTOSAVE_NAME, PortfolioStore, SavedPortfolio

LOGGER = logging.getLogger(__name__)


class Workspace:
    def __init__(
        self,
        identity: IdentityProvider,
        store: PortfolioStore,
        simulator: MarketDataSimulator,
        catalog: FormationCatalog,
        presets: Optional[List[Preset]] = None,
        autosave_delay: float = 2.0,
        refresh_interval: float = 30.0,
        top_holdings: int = 6,
    ):
        self.identity = identity
        self.store = store
        self.simulator = simulator
        self.catalog = catalog
        self.presets = presets or []
        self.top_holdings = top_holdings
        self.portfolio = Portfolio(catalog.default)
        self._lock = threading.RLock()
        self._autosaver = Debouncer(autosave_delay, self._autosave)
        self._autosave_owner: Optional[str] = None
        self._market_timer = RepeatingTimer(refresh_interval, self.refresh_market)

    @classmethod
    def from_config(
        cls,
        cfg: LoadedConfig,
        backend=None,
        rng: Optional[np.random.Generator] = None,
    ) -> "Workspace":
        s = cfg.settings
        backend = backend if backend is not None else JsonFileBackend(s.data_dir)
        return cls(
            identity=IdentityProvider(backend, latency=s.simulated_latency),
            store=PortfolioStore(backend, max_per_user=s.max_portfolios_per_user),
            simulator=MarketDataSimulator.from_settings(Universe.from_config(cfg.universe), s, rng=rng),
            catalog=FormationCatalog.from_config(cfg.formations),
            presets=build_presets(cfg.presets),
            autosave_delay=s.autosave_delay,
            refresh_interval=s.refresh_interval,
            top_holdings=s.top_holdings,
        )

    @property
    def universe(self) -> Universe:
        return self.simulator.universe

    @property
    def user(self) -> Optional[User]:
        return self.identity.current_user

    def _require_user(self) -> User:
        user = self.identity.current_user
        if user is None:
            raise ValidationError("Sign in to save and load portfolios")
        return user

    # sign-in

    def register(self, email: str, password: str, name: str) -> bool:
        """Create an account; the current lineup becomes the new user's autosave."""
        self._autosaver.flush()
        if not self.identity.register(email, password, name):
            return False
        self._changed()
        return True

    def login(self, email: str, password: str) -> bool:
        """Sign in and restore the user's autosave, writing any pending autosave first."""
        self._autosaver.flush()
        if not self.identity.login(email, password):
            return False
        self.restore()
        return True

    def logout(self) -> None:
        self._autosaver.flush()
        self.identity.logout()

    # lifecycle

    def restore(self) -> bool:
        """Load the signed-in user's autosave record into the lineup."""
        user = self.user
        if user is None:
            return False
        with self._lock:
            rec = self.store.get_autosave(user.id)
            if rec is None or rec.formation not in self.catalog:
                return False
            self.portfolio.load(self.catalog.get(rec.formation), rec.holdings)
            LOGGER.info("Restored %d holdings from autosave", len(self.portfolio.holdings))
            return True

    @property
    def polling(self) -> bool:
        return self._market_timer.running

    def start(self, poll_market: bool = True) -> None:
        self.restore()
        if poll_market:
            self._market_timer.start()

    def close(self, flush: bool = True) -> None:
        self._market_timer.stop()
        if flush:
            self._autosaver.flush()
        else:
            self._autosaver.cancel()

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # autosave

    @property
    def autosave_pending(self) -> bool:
        return self._autosaver.pending

    def _changed(self) -> None:
        user = self.user
        if user is None:
            return
        with self._lock:
            if self._autosave_owner not in (None, user.id):
                # the previous user's change is still pending
                self._autosaver.flush()
            self._autosave_owner = user.id
        self._autosaver.trigger()

    def _autosave(self) -> None:
        with self._lock:
            owner, self._autosave_owner = self._autosave_owner, None
            if owner is None:
                return
            self.store.autosave(owner, AUTOSAVE_NAME, self.portfolio.formation.code, self.portfolio.holdings)

    def flush_autosave(self) -> bool:
        return self._autosaver.flush()

    # lineup

    def assign(
        self,
        position_type: str,
        slot_index: int,
        ticker: str,
        shares: Any,
        purchase_price: Any,
        purchase_date: Any,
        risk_tier: Optional[str] = None,
    ) -> Holding:
        with self._lock:
            quote = self.universe.get(ticker)
            h = self.portfolio.assign(position_type, slot_index, quote, shares, purchase_price, purchase_date, risk_tier)
        self._changed()
        return h

    def edit(self, hid: str, shares: Any, purchase_price: Any, purchase_date: Any, risk_tier: Optional[str] = None) -> Holding:
        with self._lock:
            h = self.portfolio.edit(hid, shares, purchase_price, purchase_date, risk_tier)
        self._changed()
        return h

    def set_risk_tier(self, hid: str, risk_tier: str) -> Holding:
        with self._lock:
            h = self.portfolio.set_risk_tier(hid, risk_tier)
        self._changed()
        return h

    def remove(self, hid: str) -> bool:
        with self._lock:
            removed = self.portfolio.remove(hid)
        if removed:
            self._changed()
        return removed

    def change_formation(self, code: str) -> None:
        with self._lock:
            self.portfolio.change_formation(self.catalog.get(code))
        self._changed()

    def apply_preset(self, name: str) -> List[Holding]:
        with self._lock:
            holdings = apply_preset(self.portfolio, find_preset(self.presets, name), self.catalog, self.universe)
        self._changed()
        return holdings

    def search(self, term: str) -> List[Quote]:
        return self.universe.search(term)

    # market

    def refresh_market(self) -> Dict[str, Quote]:
        with self._lock:
            quotes = self.simulator.refresh()
            n = self.simulator.apply(self.portfolio.holdings, quotes)
        LOGGER.debug("Applied refreshed prices to %d holdings", n)
        if n:
            self._changed()
        return quotes

    # persistence

    def save_as(self, name: str) -> str:
        user = self._require_user()
        name = (name or "").strip()
        if not name:
            raise ValidationError("Portfolio name is required")
        with self._lock:
            return self.store.save(user.id, name, self.portfolio.formation.code, self.portfolio.holdings)

    def saved(self) -> List[SavedPortfolio]:
        return self.store.list_saved(self._require_user().id)

    def load(self, portfolio_id: str) -> SavedPortfolio:
        user = self._require_user()
        with self._lock:
            rec = self.store.get(user.id, portfolio_id)
            if rec is None:
                raise NotFoundError(f"No saved portfolio {portfolio_id}")
            self.portfolio.load(self.catalog.get(rec.formation), rec.holdings)
        self._changed()
        return rec

    def delete(self, portfolio_id: str) -> bool:
        return self.store.delete(self._require_user().id, portfolio_id)

    # stats

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            return portfolio_summary(self.portfolio.holdings, top_n=self.top_holdings)
