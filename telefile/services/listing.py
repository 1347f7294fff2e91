from __future__ import annotations

from dataclasses import dataclass
from stat import S_ISDIR
from typing import Optional

from ..errors import NotFound
from .paths import PathResolver
from .preview import PreviewKind, classify, mime_for


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    is_dir: bool
    mtime: int
    size: Optional[int] = None
    url: Optional[str] = None
    mime: Optional[str] = None
    kind: Optional[PreviewKind] = None

    def as_dict(self) -> dict:
        return {
            'name': self.name,
            'isDir': self.is_dir,
            'size': self.size,
            'mtime': self.mtime,
            'url': self.url,
            'mime': self.mime,
            'kind': self.kind.value if self.kind else None,
        }


_KEY_MAP = {
    'name': lambda e: (e.name.lower(), e.name),
    'size': lambda e: (e.size or 0, e.name.lower()),
    'mtime': lambda e: (e.mtime, e.name.lower()),
}


def sort_entries(entries: list[DirectoryEntry], sort_key: str = 'name', direction: str = 'asc') -> list[DirectoryEntry]:
    """Directories first, then files; each group ordered by ``sort_key``.

    Unknown keys fall back to name ordering; any direction other than ``asc`` sorts descending.
    """
    key = _KEY_MAP.get(sort_key, _KEY_MAP['name'])
    reverse = direction != 'asc'
    dirs = sorted((e for e in entries if e.is_dir), key=key, reverse=reverse)
    files = sorted((e for e in entries if not e.is_dir), key=key, reverse=reverse)
    return dirs + files


class DirectoryLister:
    def __init__(self, resolver: PathResolver):
        self.resolver = resolver

    def list_dir(self, logical: Optional[str], sort_key: str = 'name', direction: str = 'asc') -> list[DirectoryEntry]:
        target = self.resolver.resolve(logical)
        if not target.exists():
            raise NotFound()
        if not target.is_dir():
            raise NotFound('Directory not found')

        entries: list[DirectoryEntry] = []
        for child in target.iterdir():
            try:
                st = child.stat()
            except FileNotFoundError:
                # removed after iterdir, or a dangling symlink
                continue

            mtime = st.st_mtime_ns // 1_000_000
            if S_ISDIR(st.st_mode):
                entries.append(DirectoryEntry(name=child.name, is_dir=True, mtime=mtime))
                continue

            mime = mime_for(child.name)
            entries.append(
                DirectoryEntry(
                    name=child.name,
                    is_dir=False,
                    mtime=mtime,
                    size=st.st_size,
                    url=self.resolver.public_url(child),
                    mime=mime,
                    kind=classify(mime),
                )
            )
        return sort_entries(entries, sort_key, direction)
