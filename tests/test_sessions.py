from __future__ import annotations

from telefile.services.sessions import SessionStore


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_create_and_get():
    store = SessionStore(ttl_seconds=60)
    token = store.create('alice')

    assert store.get(token).username == 'alice'
    assert store.get('unknown') is None
    assert store.get(None) is None


def test_tokens_are_unique():
    store = SessionStore(ttl_seconds=60)
    assert store.create('alice') != store.create('alice')


def test_destroy():
    store = SessionStore(ttl_seconds=60)
    token = store.create('alice')

    store.destroy(token)
    store.destroy(token)

    assert store.get(token) is None


def test_expired_session_is_dropped():
    clock = _Clock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    token = store.create('alice')

    clock.now += 59
    assert store.get(token) is not None

    clock.now += 1
    assert store.get(token) is None


def test_create_sweeps_expired_sessions():
    clock = _Clock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    for _ in range(1000):
        store.create('script')
    assert len(store) == 1000

    clock.now += 61
    token = store.create('alice')

    assert len(store) == 1
    assert store.get(token).username == 'alice'
