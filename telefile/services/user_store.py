from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import InvalidCredentials
from ..security import hash_password, verify_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    username: str
    password_hash: str


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except Exception:
        Path(tmp_path).unlink(missing_ok=True)
        raise


class JsonUserStore:
    """Flat JSON list of ``{"username", "passhash"}`` records, re-read on every lookup."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> list[UserRecord]:
        if not self.path.exists():
            return []
        raw = json.loads(self.path.read_text(encoding='utf-8'))
        return [UserRecord(username=item['username'], password_hash=item['passhash']) for item in raw]

    def _save(self, users: list[UserRecord]) -> None:
        payload = [{'username': u.username, 'passhash': u.password_hash} for u in users]
        _atomic_write_text(self.path, json.dumps(payload, indent=2))

    def find_by_username(self, username: Optional[str]) -> Optional[UserRecord]:
        if not username:
            return None
        return next((u for u in self._load() if u.username == username), None)

    def add(self, username: str, password: str) -> UserRecord:
        users = self._load()
        if any(u.username == username for u in users):
            raise ValueError('User exists')
        record = UserRecord(username=username, password_hash=hash_password(password))
        users.append(record)
        self._save(users)
        return record

    def ensure_default(self, username: str, password: str) -> bool:
        if self.path.exists():
            return False
        self.add(username, password)
        logger.info('Created user file %s with account %s', self.path, username)
        return True

    def authenticate(self, username: Optional[str], password: Optional[str]) -> UserRecord:
        user = self.find_by_username(username)
        if not user or not verify_password(password or '', user.password_hash):
            logger.warning('Failed login for %r', username)
            raise InvalidCredentials()
        return user
