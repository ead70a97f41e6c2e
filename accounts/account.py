from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict

@dataclass(frozen=True)
class User:
    """Public profile; safe to persist as the signed-in session."""

    id: str
    email: str
    display_name: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        return cls(
            id=str(d["id"]),
            email=str(d["email"]),
            display_name=str(d.get("display_name", "")),
            created_at=str(d["created_at"]),
        )

@dataclass(frozen=True)
class UserRecord:
    user: User
    password_salt: str  # hex
    password_hash: str  # hex

    def to_dict(self) -> Dict[str, Any]:
        d = self.user.to_dict()
        d["password_salt"] = self.password_salt
        d["password_hash"] = self.password_hash
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "UserRecord":
        return cls(User.from_dict(d), str(d["password_salt"]), str(d["password_hash"]))
