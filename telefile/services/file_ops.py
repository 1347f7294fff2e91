from __future__ import annotations

import logging
import os
import re
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Optional

from ..errors import InvalidPath, MissingField, NotFound, TooLarge
from .paths import PathResolver, join_logical

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 ** 3

_UNSAFE_CHARS = re.compile(r'[^\w\-.]+', re.ASCII)


def sanitize_name(name: Optional[str]) -> str:
    return _UNSAFE_CHARS.sub('_', name or '') or 'file'


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def stored_name(original: Optional[str], stamp: int) -> str:
    return f'{stamp}_{sanitize_name(original)}'


@dataclass(frozen=True)
class StoredFile:
    filename: str
    originalname: str
    url: str

    def as_dict(self) -> dict:
        return {'filename': self.filename, 'originalname': self.originalname, 'url': self.url}


class FileOps:
    def __init__(
        self,
        resolver: PathResolver,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        default_upload_dir: str = 'uploads',
    ):
        self.resolver = resolver
        self.max_upload_bytes = max_upload_bytes
        self.default_upload_dir = default_upload_dir

    def _resolve_non_root(self, logical: str) -> Path:
        target = self.resolver.resolve_entry(logical)
        if target == self.resolver.root:
            raise InvalidPath('Operation not allowed on the data root')
        return target

    def create_folder(self, base: Optional[str], name: Optional[str]) -> Path:
        if not name:
            raise MissingField('Missing name')
        target = self.resolver.resolve(join_logical(base, name))
        target.mkdir(parents=True, exist_ok=True)
        logger.info('Created folder %s', target)
        return target

    def _claim(self, directory: Path, original: Optional[str]) -> tuple[Path, BinaryIO]:
        stamp = now_millis()
        while True:
            target = directory / stored_name(original, stamp)
            try:
                return target, target.open('xb')
            except FileExistsError:
                stamp += 1

    def _write_stream(self, stream: BinaryIO, target: Path, handle: BinaryIO, original: str) -> None:
        written = 0
        try:
            with handle:
                while chunk := stream.read(CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_upload_bytes:
                        raise TooLarge(f'{original} exceeds the upload limit of {self.max_upload_bytes} bytes')
                    handle.write(chunk)
                handle.flush()
                os.fsync(handle.fileno())
        except Exception:
            target.unlink(missing_ok=True)
            raise

    def upload(self, destination: Optional[str], files: Iterable[tuple[str, BinaryIO]]) -> list[StoredFile]:
        """Store each ``(original_name, stream)`` pair under ``destination``.

        Files already written stay in place when a later one fails.
        """
        target_dir = self.resolver.resolve(destination or self.default_upload_dir)
        target_dir.mkdir(parents=True, exist_ok=True)

        stored: list[StoredFile] = []
        for original, stream in files:
            original = original or ''
            target, handle = self._claim(target_dir, original)
            self._write_stream(stream, target, handle, original)
            logger.info('Uploaded %s as %s', original, target)
            stored.append(StoredFile(filename=target.name, originalname=original, url=self.resolver.public_url(target)))
        return stored

    def delete(self, logical: Optional[str]):
        if not logical:
            raise MissingField('path required')
        target = self._resolve_non_root(logical)
        if not target.exists() and not target.is_symlink():
            raise NotFound()

        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
        logger.info('Deleted %s', target)

    def rename(self, from_path: Optional[str], to_path: Optional[str]) -> Path:
        if not from_path or not to_path:
            raise MissingField('from/to required')
        src = self._resolve_non_root(from_path)
        dst = self._resolve_non_root(to_path)
        src.rename(dst)
        logger.info('Renamed %s to %s', src, dst)
        return dst

    def move(self, logical: Optional[str], target_dir: Optional[str]) -> Path:
        if not logical or not target_dir:
            raise MissingField('path/targetDir required')
        src = self._resolve_non_root(logical)
        dst = self._resolve_non_root(join_logical(target_dir, src.name))
        # not rolled back if the rename below fails
        dst.parent.mkdir(parents=True, exist_ok=True)
        src.rename(dst)
        logger.info('Moved %s to %s', src, dst)
        return dst
