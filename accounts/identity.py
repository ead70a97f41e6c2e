"""Local sign-in for a single-user client.

Users and the signed-in profile are kept in the same key-value backend as
saved portfolios. This is not a security boundary: anyone with access to the
data directory can read or replace the records.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import time
import uuid
from typing import List, Optional

from accounts.account import User, UserRecord
from common.errors import CorruptDataError, DuplicateError, ValidationError
from storage.portfolio_store import utc_now

LOGGER = logging.getLogger(__name__)

USERS_KEY = "goalfolio-users"
SESSION_KEY = "goalfolio-session"
MIN_PASSWORD_LENGTH = 6
_PBKDF2_ROUNDS = 100_000


def validate_credentials(email: str, password: str, name: Optional[str] = None, registering: bool = False) -> None:
    if not email or not password or (registering and not (name or "").strip()):
        raise ValidationError("Please fill in all fields")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def _hash_password(password: str, salt: bytes) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS).hex()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityProvider:
    def __init__(self, backend, latency: float = 0.0):
        self.backend = backend
        self.latency = latency
        self.current_user: Optional[User] = None
        self._rehydrate()

    def _pause(self) -> None:
        if self.latency > 0:
            time.sleep(self.latency)

    def _rehydrate(self) -> None:
        try:
            raw = self.backend.load(SESSION_KEY)
            if raw is not None:
                self.current_user = User.from_dict(raw)
        except (CorruptDataError, KeyError, TypeError) as e:
            LOGGER.warning("Discarding unreadable session: %s", e)
            self.backend.remove(SESSION_KEY)

    def _users(self) -> List[UserRecord]:
        try:
            raw = self.backend.load(USERS_KEY) or []
            return [UserRecord.from_dict(u) for u in raw]
        except (CorruptDataError, KeyError, TypeError) as e:
            kept = self.backend.set_aside(USERS_KEY)
            LOGGER.error("User registry unreadable, moved to %s and starting empty: %s", kept, e)
            return []

    def _start_session(self, user: User) -> None:
        self.current_user = user
        self.backend.dump(SESSION_KEY, user.to_dict())

    def _create_user(self, email: str, password: str, name: str) -> User:
        users = self._users()
        if any(u.user.email == email for u in users):
            raise DuplicateError(f"Email already registered: {email}")
        salt = secrets.token_bytes(16)
        user = User(
            id=uuid.uuid4().hex,
            email=email,
            display_name=name.strip(),
            created_at=utc_now().isoformat(),
        )
        users.append(UserRecord(user, salt.hex(), _hash_password(password, salt)))
        self.backend.dump(USERS_KEY, [u.to_dict() for u in users])
        return user

    @property
    def signed_in(self) -> bool:
        return self.current_user is not None

    def register(self, email: str, password: str, name: str) -> bool:
        """Create an account and sign in. False if the email is taken."""
        validate_credentials(email, password, name, registering=True)
        self._pause()
        try:
            user = self._create_user(_normalize_email(email), password, name)
        except DuplicateError as e:
            LOGGER.info("Registration rejected: %s", e)
            return False
        self._start_session(user)
        LOGGER.info("Registered %s", user.email)
        return True

    def login(self, email: str, password: str) -> bool:
        validate_credentials(email, password)
        self._pause()
        email = _normalize_email(email)
        for rec in self._users():
            if rec.user.email != email:
                continue
            digest = _hash_password(password, bytes.fromhex(rec.password_salt))
            if hmac.compare_digest(digest, rec.password_hash):
                self._start_session(rec.user)
                LOGGER.info("Signed in %s", email)
                return True
        LOGGER.warning("Failed sign-in for %s", email)
        return False

    def logout(self) -> None:
        self.current_user = None
        self.backend.remove(SESSION_KEY)
