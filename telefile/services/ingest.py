from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Awaitable, Callable, Optional

from .file_ops import sanitize_name, stored_name
from .paths import PathResolver, join_logical

logger = logging.getLogger(__name__)

INGEST_DIR = 'telegram'

Downloader = Callable[[Path], Awaitable[Any]]


@dataclass(frozen=True)
class IngestResult:
    path: Path
    url: str


class TelegramIngest:
    """Writes bot media into ``telegram/<YYYY-MM-DD>/<ms>_<name>`` under the data root."""

    def __init__(self, resolver: PathResolver, public_base_url: str):
        self.resolver = resolver
        self.public_base_url = public_base_url.rstrip('/')

    def target_for(self, suggested_name: Optional[str], remote_path: Optional[str] = None, now: Optional[datetime] = None) -> Path:
        now = now or datetime.now()
        name = sanitize_name(suggested_name)
        ext = PurePosixPath(remote_path or '').suffix
        if ext and not PurePosixPath(name).suffix:
            name = sanitize_name(name + ext)

        stamp = int(now.timestamp() * 1000)
        day = now.strftime('%Y-%m-%d')
        while True:
            target = self.resolver.resolve(join_logical(INGEST_DIR, day, stored_name(name, stamp)))
            if not target.exists():
                return target
            stamp += 1

    def public_url(self, target: Path) -> str:
        return self.public_base_url + self.resolver.public_url(target)

    async def ingest(self, download: Downloader, suggested_name: Optional[str], remote_path: Optional[str] = None) -> IngestResult:
        target = self.target_for(suggested_name, remote_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        await download(target)
        logger.info('Telegram file saved: %s', target)
        return IngestResult(path=target, url=self.public_url(target))
