from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..security import new_session_token


@dataclass(frozen=True)
class Session:
    username: str
    expires_at: float


class SessionStore:
    """In-memory server-side sessions keyed by an opaque cookie token.

    Sessions do not survive a restart.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, username: str) -> str:
        token = new_session_token()
        with self._lock:
            now = self._clock()
            expired = [key for key, session in self._sessions.items() if session.expires_at <= now]
            for key in expired:
                del self._sessions[key]
            self._sessions[token] = Session(username=username, expires_at=now + self.ttl_seconds)
        return token

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, token: Optional[str]) -> Optional[Session]:
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.expires_at <= self._clock():
                del self._sessions[token]
                return None
            return session

    def destroy(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)
