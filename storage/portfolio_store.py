"""Saved portfolios, one collection per user.

Each user's records live under a single backend key and every write replaces
the whole collection. Unreadable collections are treated as empty.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from common.errors import CorruptDataError, DuplicateError, ValidationError
from portfolio.holding import Holding

LOGGER = logging.getLogger(__name__)

AUTOSAVE_NAME = "autosave"
_UPDATABLE = ("name", "formation", "holdings")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SavedPortfolio:
    id: str
    user_id: str
    name: str
    formation: str
    holdings: List[Holding]
    created_at: str
    updated_at: str
    is_autosave: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "formation": self.formation,
            "holdings": [h.to_dict() for h in self.holdings],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "is_autosave": self.is_autosave,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SavedPortfolio":
        return cls(
            id=str(d["id"]),
            user_id=str(d["user_id"]),
            name=str(d["name"]),
            formation=str(d["formation"]),
            holdings=[Holding.from_dict(h) for h in d.get("holdings") or []],
            created_at=str(d["created_at"]),
            updated_at=str(d["updated_at"]),
            is_autosave=bool(d.get("is_autosave", False)),
        )

    @property
    def total_value(self) -> float:
        return sum(h.value for h in self.holdings)


class PortfolioStore:
    def __init__(
        self,
        backend,
        max_per_user: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.backend = backend
        self.max_per_user = max_per_user
        self.clock = clock

    @staticmethod
    def key_for(user_id: str) -> str:
        return f"goalfolio-portfolios-{user_id}"

    def _now(self) -> str:
        return self.clock().isoformat()

    def _write(self, user_id: str, records: Sequence[SavedPortfolio]) -> None:
        self.backend.dump(self.key_for(user_id), [r.to_dict() for r in records])

    def list(self, user_id: str) -> List[SavedPortfolio]:
        """All records for the user, oldest first. Never raises on bad data."""
        key = self.key_for(user_id)
        try:
            raw = self.backend.load(key)
            if raw is None:
                return []
            if not isinstance(raw, list):
                raise CorruptDataError(key, f"expected a list, got {type(raw).__name__}")
            return [SavedPortfolio.from_dict(r) for r in raw]
        except CorruptDataError as e:
            LOGGER.warning("Failed to load portfolios for %s: %s", user_id, e)
            return []
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            LOGGER.warning("Failed to load portfolios for %s: malformed record (%s)", user_id, e)
            return []

    def list_saved(self, user_id: str) -> List[SavedPortfolio]:
        return [r for r in self.list(user_id) if not r.is_autosave]

    def get(self, user_id: str, portfolio_id: str) -> Optional[SavedPortfolio]:
        return next((r for r in self.list(user_id) if r.id == portfolio_id), None)

    def get_autosave(self, user_id: str) -> Optional[SavedPortfolio]:
        return next((r for r in self.list(user_id) if r.is_autosave), None)

    def save(
        self,
        user_id: str,
        name: str,
        formation: str,
        holdings: Sequence[Holding],
        is_autosave: bool = False,
    ) -> str:
        records = self.list(user_id)
        if not is_autosave and self.max_per_user is not None:
            manual = sum(1 for r in records if not r.is_autosave)
            if manual >= self.max_per_user:
                raise DuplicateError(
                    f"Storage quota exceeded: {manual} of {self.max_per_user} portfolios saved"
                )
        now = self._now()
        record = SavedPortfolio(
            id=uuid.uuid4().hex,
            user_id=user_id,
            name=name,
            formation=str(formation),
            holdings=[Holding.from_dict(h.to_dict()) for h in holdings],
            created_at=now,
            updated_at=now,
            is_autosave=is_autosave,
        )
        records.append(record)
        self._write(user_id, records)
        LOGGER.info("Saved portfolio %r (%s) for %s", name, record.id, user_id)
        return record.id

    def update(self, user_id: str, portfolio_id: str, **fields: Any) -> bool:
        unknown = set(fields) - set(_UPDATABLE)
        if unknown:
            raise TypeError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        records = self.list(user_id)
        for r in records:
            if r.id != portfolio_id:
                continue
            if "name" in fields:
                r.name = str(fields["name"])
            if "formation" in fields:
                r.formation = str(fields["formation"])
            if "holdings" in fields:
                r.holdings = [Holding.from_dict(h.to_dict()) for h in fields["holdings"]]
            r.updated_at = self._now()
            self._write(user_id, records)
            return True
        return False

    def delete(self, user_id: str, portfolio_id: str) -> bool:
        records = self.list(user_id)
        kept = [r for r in records if r.id != portfolio_id]
        if len(kept) == len(records):
            return False
        self._write(user_id, kept)
        LOGGER.info("Deleted portfolio %s for %s", portfolio_id, user_id)
        return True

    def autosave(
        self,
        user_id: str,
        name: str,
        formation: str,
        holdings: Sequence[Holding],
    ) -> str:
        """Update the user's autosave record, creating it on first use."""
        existing = self.get_autosave(user_id)
        if existing is not None:
            self.update(user_id, existing.id, formation=formation, holdings=holdings)
            LOGGER.debug("Autosaved %d holdings for %s", len(holdings), user_id)
            return existing.id
        return self.save(user_id, name or AUTOSAVE_NAME, formation, holdings, is_autosave=True)
