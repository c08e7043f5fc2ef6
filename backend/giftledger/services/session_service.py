# Overview: In-process bearer token sessions for the HTTP API.

"""
Session Token Management

Tokens are cryptographically secure, kept only as SHA-256 hashes, and
time-limited by an absolute and an idle timeout. Sessions live in process
memory; a restart logs everyone out. They are deliberately not part of the
persisted dataset.
"""
from __future__ import annotations

import hashlib
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..time_utils import utcnow


@dataclass
class Session:
    holder_id: int
    created_at: datetime
    last_used_at: datetime
    expires_at: datetime


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy)."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionRegistry:
    def __init__(self, absolute_timeout: timedelta = timedelta(hours=24), idle_timeout: timedelta = timedelta(hours=2)):
        self.absolute_timeout = absolute_timeout
        self.idle_timeout = idle_timeout
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def init_app(self, app) -> None:
        self.absolute_timeout = timedelta(hours=app.config["SESSION_ABSOLUTE_TIMEOUT_HOURS"])
        self.idle_timeout = timedelta(hours=app.config["SESSION_IDLE_TIMEOUT_HOURS"])
        with self._lock:
            self._sessions.clear()
        app.extensions["giftledger_sessions"] = self

    def create_session(self, holder_id: int) -> str:
        """Create a session and return the plaintext token (never stored)."""
        token = generate_token()
        now = utcnow()
        with self._lock:
            self._purge_expired(now)
            self._sessions[hash_token(token)] = Session(
                holder_id=holder_id,
                created_at=now,
                last_used_at=now,
                expires_at=now + self.absolute_timeout,
            )
        return token

    def _is_expired(self, session: Session, now) -> bool:
        return now >= session.expires_at or now - session.last_used_at >= self.idle_timeout

    def _purge_expired(self, now) -> int:
        """Drop every expired session. Caller holds the lock."""
        expired = [k for k, s in self._sessions.items() if self._is_expired(s, now)]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def validate_session(self, token: str) -> Session | None:
        """
        Return the live session for a token, refreshing its idle timer.

        Expired sessions are dropped.
        """
        key = hash_token(token)
        now = utcnow()
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return None
            if self._is_expired(session, now):
                del self._sessions[key]
                return None
            session.last_used_at = now
            return session

    def revoke_session(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(hash_token(token), None) is not None

    def revoke_holder_sessions(self, holder_id: int) -> int:
        """Revoke every session of a holder (deactivation, deletion)."""
        with self._lock:
            keys = [k for k, s in self._sessions.items() if s.holder_id == holder_id]
            for key in keys:
                del self._sessions[key]
            return len(keys)
