from __future__ import annotations

import mimetypes
from enum import Enum
from typing import Optional

DEFAULT_MIME = 'application/octet-stream'


class PreviewKind(str, Enum):
    IMAGE = 'image'
    VIDEO = 'video'
    AUDIO = 'audio'
    PDF = 'pdf'
    TEXT = 'text'
    OTHER = 'other'


def mime_for(name: str) -> str:
    mime, _ = mimetypes.guess_type(name, strict=False)
    return mime or DEFAULT_MIME


def classify(mime: Optional[str]) -> PreviewKind:
    if not mime:
        return PreviewKind.OTHER
    if mime == 'application/pdf':
        return PreviewKind.PDF
    for prefix, kind in (
        ('image/', PreviewKind.IMAGE),
        ('video/', PreviewKind.VIDEO),
        ('audio/', PreviewKind.AUDIO),
        ('text/', PreviewKind.TEXT),
    ):
        if mime.startswith(prefix):
            return kind
    return PreviewKind.OTHER
