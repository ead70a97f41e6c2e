"""Formation catalog.

A formation is an immutable layout of pitch slots grouped by position type.
The catalog is loaded from ``config/formations.yaml``; its first entry is the
default formation.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from common.errors import NotFoundError
from portfolio.holding import POSITION_TYPES

Point = Tuple[float, float]


@dataclass(frozen=True)
class Formation:
    name: str
    code: str
    defender: Tuple[Point, ...]
    midfielder: Tuple[Point, ...]
    forward: Tuple[Point, ...]

    def slots(self, position_type: str) -> Tuple[Point, ...]:
        if position_type not in POSITION_TYPES:
            raise NotFoundError(f"Unknown position type: {position_type}")
        return getattr(self, position_type)

    def slot_count(self, position_type: str) -> int:
        return len(self.slots(position_type))

    def has_slot(self, position_type: str, slot_index: int) -> bool:
        if position_type not in POSITION_TYPES:
            return False
        return 0 <= slot_index < len(getattr(self, position_type))

    @property
    def total_slots(self) -> int:
        return sum(len(getattr(self, pt)) for pt in POSITION_TYPES)


def _points(raw: Any) -> Tuple[Point, ...]:
    return tuple((float(p[0]), float(p[1])) for p in (raw or []))


def build_formations(config: Dict[str, Any]) -> List[Formation]:
    """Build the formation catalog from the ``formations`` config document."""
    out: List[Formation] = []
    for f in config.get("formations") or []:
        positions = f.get("positions") or {}
        out.append(
            Formation(
                name=str(f["name"]),
                code=str(f["code"]),
                defender=_points(positions.get("defender")),
                midfielder=_points(positions.get("midfielder")),
                forward=_points(positions.get("forward")),
            )
        )
    if not out:
        raise ValueError("Formation catalog is empty")
    return out


@dataclass(frozen=True)
class FormationCatalog:
    formations: Tuple[Formation, ...]

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FormationCatalog":
        return cls(tuple(build_formations(config)))

    @property
    def default(self) -> Formation:
        return self.formations[0]

    def codes(self) -> List[str]:
        return [f.code for f in self.formations]

    def get(self, code: str) -> Formation:
        for f in self.formations:
            if f.code == str(code):
                return f
        raise NotFoundError(f"Unknown formation {code!r}; choose one of {', '.join(self.codes())}")

    def __contains__(self, code: object) -> bool:
        return any(f.code == str(code) for f in self.formations)
