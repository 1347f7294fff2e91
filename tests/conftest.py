from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from telefile.config import Settings
from telefile.main import create_app
from telefile.services.file_ops import FileOps
from telefile.services.listing import DirectoryLister
from telefile.services.paths import PathResolver


@pytest.fixture
def data_root(tmp_path):
    root = tmp_path / 'data'
    root.mkdir()
    return root


@pytest.fixture
def resolver(data_root):
    return PathResolver(data_root)


@pytest.fixture
def ops(resolver):
    return FileOps(resolver)


@pytest.fixture
def lister(resolver):
    return DirectoryLister(resolver)


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        _env_file=None,
        data_dir=str(tmp_path / 'data'),
        users_file=str(tmp_path / 'users.json'),
        admin_user='admin',
        admin_password='correct-horse-battery',
        bot_token=None,
        web_dist=str(tmp_path / 'web'),
    )


@pytest.fixture
def client(app_settings):
    with TestClient(create_app(app_settings)) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client, app_settings):
    response = client.post('/api/auth/login', json={'username': 'admin', 'password': app_settings.admin_password})
    assert response.status_code == 200
    return client
