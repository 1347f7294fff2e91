from __future__ import annotations

import re
from datetime import datetime

import pytest

from telefile.services.ingest import TelegramIngest

NOW = datetime(2024, 5, 6, 7, 8, 9)


@pytest.fixture
def ingest(resolver):
    return TelegramIngest(resolver, 'https://files.example.com/')


def test_target_is_dated_and_timestamped(ingest, resolver):
    target = ingest.target_for('photo.jpg', 'photos/file_1.jpg', now=NOW)

    assert target.parent == resolver.root / 'telegram' / '2024-05-06'
    assert re.fullmatch(r'\d+_photo\.jpg', target.name)
    assert target.name.startswith(f'{int(NOW.timestamp() * 1000)}_')


def test_remote_extension_added_when_name_has_none(ingest):
    target = ingest.target_for('quarterly report', 'documents/file_7.pdf', now=NOW)

    assert target.name.endswith('_quarterly_report.pdf')


def test_missing_name_falls_back_to_file(ingest):
    target = ingest.target_for(None, None, now=NOW)

    assert target.name.endswith('_file')


def test_existing_target_bumps_timestamp(ingest):
    first = ingest.target_for('a.txt', now=NOW)
    first.parent.mkdir(parents=True)
    first.write_text('taken')

    second = ingest.target_for('a.txt', now=NOW)

    assert second != first
    assert second.parent == first.parent


def test_hostile_name_stays_inside_root(ingest, resolver):
    target = ingest.target_for('../../../etc/passwd', now=NOW)

    assert resolver.root in target.parents


@pytest.mark.asyncio
async def test_ingest_downloads_and_builds_public_url(ingest, resolver):
    async def _download(target):
        target.write_bytes(b'media')

    result = await ingest.ingest(_download, 'clip.mp4', 'videos/file_3.mp4')

    assert result.path.read_bytes() == b'media'
    rel = result.path.relative_to(resolver.root).as_posix()
    assert rel.startswith('telegram/')
    assert result.url == f'https://files.example.com/data/{rel}'
