from __future__ import annotations
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Literal, Optional, Tuple

from common.errors import ValidationError

RiskTier = Literal["low", "medium", "high"]
PositionType = Literal["defender", "midfielder", "forward"]

RISK_TIERS: Tuple[str, ...] = ("low", "medium", "high")
POSITION_TYPES: Tuple[str, ...] = ("defender", "midfielder", "forward")


def holding_id(position_type: str, slot_index: int) -> str:
    return f"{position_type}-{slot_index}"


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if value is None or str(value).strip() == "":
        raise ValidationError("Purchase date is required")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid purchase date: {value!r} (expected YYYY-MM-DD)")


def check_risk_tier(tier: str) -> str:
    if tier not in RISK_TIERS:
        raise ValidationError(f"Unknown risk tier {tier!r}; choose one of {', '.join(RISK_TIERS)}")
    return tier


@dataclass
class Holding:
    id: str
    ticker: str
    display_name: str
    risk_tier: RiskTier
    position_type: PositionType
    slot_index: int
    position: Tuple[float, float]  # pitch (x, y)
    shares: float
    purchase_price: float
    purchase_date: date
    current_price: float
    dividend_yield: float  # percent
    previous_price: Optional[float] = None
    price_change: float = 0.0
    price_change_percent: float = 0.0

    @property
    def value(self) -> float:
        return self.shares * self.current_price

    @property
    def cost_basis(self) -> float:
        return self.shares * self.purchase_price

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["position"] = list(self.position)
        d["purchase_date"] = self.purchase_date.isoformat()
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Holding":
        position_type = d["position_type"]
        slot_index = int(d["slot_index"])
        return cls(
            id=d.get("id") or holding_id(position_type, slot_index),
            ticker=d["ticker"],
            display_name=d.get("display_name", d["ticker"]),
            risk_tier=d["risk_tier"],
            position_type=position_type,
            slot_index=slot_index,
            position=tuple(float(c) for c in d.get("position") or (50.0, 50.0)),
            shares=float(d["shares"]),
            purchase_price=float(d["purchase_price"]),
            purchase_date=parse_date(d["purchase_date"]),
            current_price=float(d["current_price"]),
            dividend_yield=float(d.get("dividend_yield", 0.0)),
            previous_price=None if d.get("previous_price") is None else float(d["previous_price"]),
            price_change=float(d.get("price_change", 0.0)),
            price_change_percent=float(d.get("price_change_percent", 0.0)),
        )
