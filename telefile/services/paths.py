from __future__ import annotations

import logging
import posixpath
from pathlib import Path, PurePosixPath
from typing import Optional

from ..errors import InvalidPath

logger = logging.getLogger(__name__)

_FORBIDDEN_CHARS = ('\x00', '\\')


def join_logical(*parts: Optional[str]) -> str:
    """Join logical fragments; unlike posixpath.join a leading slash does not restart the path."""
    return '/' + '/'.join(part.strip('/') for part in parts if part and part.strip('/'))


def _reject_forbidden(requested_path: str) -> None:
    if any(ch in requested_path for ch in _FORBIDDEN_CHARS):
        logger.warning('Rejected path with forbidden characters: %r', requested_path)
        raise InvalidPath()


def validate_path(requested_path: str, root: str | Path) -> Path:
    base = Path(root).resolve(strict=False)
    _reject_forbidden(requested_path)

    try:
        candidate = (base / requested_path.lstrip('/')).resolve(strict=False)
    except (OSError, RuntimeError):
        # symlink loops
        logger.warning('Could not resolve path: %r', requested_path)
        raise InvalidPath()

    if base != candidate and base not in candidate.parents:
        logger.warning('Path traversal detected: %r', requested_path)
        raise InvalidPath()
    return candidate


class PathResolver:
    def __init__(self, root: str | Path, public_mount: str = '/data'):
        self.root = Path(root).resolve()
        self.public_mount = '/' + public_mount.strip('/')

    def resolve(self, logical: Optional[str]) -> Path:
        return validate_path(logical or '', self.root)

    def resolve_entry(self, logical: Optional[str]) -> Path:
        """Resolve the parent directory but keep the final component as named.

        A symlink at the end of ``logical`` is returned as the link itself, so
        mutations act on the link and never on its target.
        """
        logical = logical or ''
        _reject_forbidden(logical)
        requested = PurePosixPath('/', logical)
        if requested.name in ('', '..'):
            return self.resolve(logical)
        return validate_path(str(requested.parent), self.root) / requested.name

    def relative(self, target: Path) -> str:
        return target.relative_to(self.root).as_posix()

    def public_url(self, target: Path) -> str:
        rel = self.relative(target)
        if rel == '.':
            return self.public_mount
        return f'{self.public_mount}/{rel}'

    def breadcrumb(self, logical: Optional[str]) -> list[str]:
        self.resolve(logical)
        return [part for part in posixpath.normpath('/' + (logical or '')).split('/') if part]
