"""Allocation breakdowns: position tier, individual holding and sector weights.

Weights are percentages of total market value (shares x current price) and
are 0 when the total is 0.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from market.reference import sector_for
from portfolio.holding import POSITION_TYPES, Holding


@dataclass(frozen=True)
class TierWeight:
    position_type: str
    value: float
    weight: float
    count: int
    holdings: List[Holding] = field(default_factory=list)  # by value, descending


@dataclass(frozen=True)
class HoldingWeight:
    id: str
    ticker: str
    name: str
    value: float
    weight: float


@dataclass(frozen=True)
class SectorWeight:
    sector: str
    value: float
    weight: float


def _pct(part: float, total: float) -> float:
    return part / total * 100 if total > 0 else 0.0


def total_value(holdings: Sequence[Holding]) -> float:
    return sum(h.value for h in holdings)


def position_weights(holdings: Sequence[Holding]) -> Dict[str, TierWeight]:
    total = total_value(holdings)
    out: Dict[str, TierWeight] = {}
    for pt in POSITION_TYPES:
        group = sorted((h for h in holdings if h.position_type == pt), key=lambda h: h.value, reverse=True)
        value = sum(h.value for h in group)
        out[pt] = TierWeight(pt, value, _pct(value, total), len(group), group)
    return out


def holding_weights(holdings: Sequence[Holding], top_n: Optional[int] = 6) -> List[HoldingWeight]:
    total = total_value(holdings)
    rows = [HoldingWeight(h.id, h.ticker, h.display_name, h.value, _pct(h.value, total)) for h in holdings]
    rows.sort(key=lambda r: r.weight, reverse=True)
    return rows if top_n is None else rows[:top_n]


def sector_weights(
    holdings: Sequence[Holding],
    sector_map: Optional[Mapping[str, str]] = None,
) -> List[SectorWeight]:
    total = total_value(holdings)
    values: Dict[str, float] = {}
    for h in holdings:
        s = sector_for(h.ticker, sector_map)
        values[s] = values.get(s, 0.0) + h.value
    rows = [SectorWeight(s, v, _pct(v, total)) for s, v in values.items()]
    rows.sort(key=lambda r: r.weight, reverse=True)
    return rows
