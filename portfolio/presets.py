from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from common.errors import NotFoundError
from market.universe import Universe
from portfolio.formation import FormationCatalog
from portfolio.holding import Holding, check_risk_tier, holding_id, parse_date
from portfolio.portfolio import Portfolio


@dataclass(frozen=True)
class PresetHolding:
    ticker: str
    risk_tier: str
    position_type: str
    shares: float
    purchase_price: float
    purchase_date: str


@dataclass(frozen=True)
class Preset:
    name: str
    description: str
    formation: str
    holdings: Tuple[PresetHolding, ...]


def build_presets(config: Dict[str, Any]) -> List[Preset]:
    out = []
    for p in config.get("presets") or []:
        out.append(
            Preset(
                name=str(p["name"]),
                description=str(p.get("description", "")),
                formation=str(p["formation"]),
                holdings=tuple(
                    PresetHolding(
                        ticker=str(h["ticker"]),
                        risk_tier=check_risk_tier(h["risk_tier"]),
                        position_type=str(h["position_type"]),
                        shares=float(h["shares"]),
                        purchase_price=float(h["purchase_price"]),
                        purchase_date=str(h["purchase_date"]),
                    )
                    for h in p.get("holdings") or []
                ),
            )
        )
    return out


def find_preset(presets: List[Preset], name: str) -> Preset:
    for p in presets:
        if p.name.lower() == name.strip().lower():
            return p
    raise NotFoundError(f"Unknown preset {name!r}")


def apply_preset(
    portfolio: Portfolio,
    preset: Preset,
    catalog: FormationCatalog,
    universe: Universe,
) -> List[Holding]:
    """Switch to the preset's formation and fill it at current prices.

    Slot indices are assigned per position type in preset order. Tickers
    missing from the universe are skipped but still consume their slot index.
    """
    formation = catalog.get(preset.formation)
    counters: Dict[str, int] = {}
    holdings: List[Holding] = []
    for ph in preset.holdings:
        idx = counters.get(ph.position_type, 0)
        counters[ph.position_type] = idx + 1
        if ph.ticker not in universe or not formation.has_slot(ph.position_type, idx):
            continue
        quote = universe.get(ph.ticker)
        holdings.append(
            Holding(
                id=holding_id(ph.position_type, idx),
                ticker=quote.ticker,
                display_name=quote.name,
                risk_tier=ph.risk_tier,
                position_type=ph.position_type,
                slot_index=idx,
                position=formation.slots(ph.position_type)[idx],
                shares=ph.shares,
                purchase_price=ph.purchase_price,
                purchase_date=parse_date(ph.purchase_date),
                current_price=quote.current_price,
                dividend_yield=quote.dividend_yield,
                previous_price=quote.current_price,
            )
        )
    portfolio.change_formation(formation)
    portfolio.holdings = holdings
    return holdings
