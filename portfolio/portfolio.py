"""Working lineup: the in-memory holding list bound to a formation."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from common.errors import NotFoundError, ValidationError
from market.universe import Quote
from portfolio.formation import Formation
from portfolio.holding import (
    POSITION_TYPES,
    Holding,
    check_risk_tier,
    holding_id,
    parse_date,
)


def _require_amount(value: Any, label: str) -> float:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        raise ValidationError(f"{label} is required")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number, got {value!r}")
    if amount != amount or amount < 0:
        raise ValidationError(f"{label} must be zero or positive, got {value!r}")
    return amount


@dataclass
class Portfolio:
    formation: Formation
    holdings: List[Holding] = field(default_factory=list)

    def total_value(self) -> float:
        return sum(h.value for h in self.holdings)

    def tickers(self) -> List[str]:
        return sorted({h.ticker for h in self.holdings})

    def get(self, hid: str) -> Holding:
        for h in self.holdings:
            if h.id == hid:
                return h
        raise NotFoundError(f"No holding in slot {hid}")

    def holding_at(self, position_type: str, slot_index: int) -> Optional[Holding]:
        hid = holding_id(position_type, slot_index)
        return next((h for h in self.holdings if h.id == hid), None)

    def open_slots(self) -> List[Tuple[str, int]]:
        taken = {h.id for h in self.holdings}
        return [
            (pt, i)
            for pt in POSITION_TYPES
            for i in range(self.formation.slot_count(pt))
            if holding_id(pt, i) not in taken
        ]

    def assign(
        self,
        position_type: str,
        slot_index: int,
        quote: Quote,
        shares: Any,
        purchase_price: Any,
        purchase_date: Any,
        risk_tier: Optional[str] = None,
    ) -> Holding:
        """Place a stock in a slot, replacing whatever held it."""
        if not self.formation.has_slot(position_type, slot_index):
            raise ValidationError(
                f"Formation {self.formation.name} has no {position_type} slot {slot_index}"
            )
        h = Holding(
            id=holding_id(position_type, slot_index),
            ticker=quote.ticker,
            display_name=quote.name,
            risk_tier=check_risk_tier(risk_tier or quote.risk_tier),
            position_type=position_type,
            slot_index=slot_index,
            position=self.formation.slots(position_type)[slot_index],
            shares=_require_amount(shares, "Share count"),
            purchase_price=_require_amount(purchase_price, "Purchase price"),
            purchase_date=parse_date(purchase_date),
            current_price=quote.current_price,
            dividend_yield=quote.dividend_yield,
            previous_price=quote.current_price,
        )
        self.holdings = [x for x in self.holdings if x.id != h.id]
        self.holdings.append(h)
        return h

    def edit(
        self,
        hid: str,
        shares: Any,
        purchase_price: Any,
        purchase_date: Any,
        risk_tier: Optional[str] = None,
    ) -> Holding:
        h = self.get(hid)
        new_shares = _require_amount(shares, "Share count")
        new_price = _require_amount(purchase_price, "Purchase price")
        new_date = parse_date(purchase_date)
        new_tier = check_risk_tier(risk_tier) if risk_tier is not None else h.risk_tier
        h.shares = new_shares
        h.purchase_price = new_price
        h.purchase_date = new_date
        h.risk_tier = new_tier
        return h

    def set_risk_tier(self, hid: str, risk_tier: str) -> Holding:
        h = self.get(hid)
        h.risk_tier = check_risk_tier(risk_tier)
        return h

    def remove(self, hid: str) -> bool:
        before = len(self.holdings)
        self.holdings = [h for h in self.holdings if h.id != hid]
        return len(self.holdings) != before

    def change_formation(self, formation: Formation) -> None:
        self.formation = formation
        self.holdings = []

    def load(self, formation: Formation, holdings: Iterable[Holding]) -> None:
        """Replace the lineup with a saved snapshot.

        Holdings whose slot does not exist in ``formation`` are dropped.
        """
        kept = [copy.deepcopy(h) for h in holdings if formation.has_slot(h.position_type, h.slot_index)]
        self.formation = formation
        self.holdings = kept

    def snapshot(self) -> List[Dict[str, Any]]:
        return [h.to_dict() for h in self.holdings]
