import json
import threading

import pytest

from app.db import Base, make_engine, make_session_factory
from app.domain.leaderboard.cache import CacheLayer, DatabaseStore, MemoryStore, RestKVStore


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class Refresher:
    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.payload


def test_first_call_fresh_then_cache_then_fresh_after_ttl():
    clock = Clock()
    cache = CacheLayer(MemoryStore(clock=clock))
    refresh = Refresher([{"name": "A", "badgeCount": 1, "arcadeComplete": 0}])

    assert cache.get_or_refresh("leaderboard", 1800, refresh) == (refresh.payload, "fresh")
    assert refresh.calls == 1

    clock.now += 1799
    assert cache.get_or_refresh("leaderboard", 1800, refresh) == (refresh.payload, "cache")
    assert refresh.calls == 1

    clock.now += 2
    payload, source = cache.get_or_refresh("leaderboard", 1800, refresh)
    assert source == "fresh"
    assert refresh.calls == 2


def test_unconfigured_cache_always_refreshes():
    cache = CacheLayer(None)
    refresh = Refresher([])
    assert not cache.is_configured
    for _ in range(3):
        assert cache.get_or_refresh("leaderboard", 1800, refresh)[1] == "fresh"
    assert refresh.calls == 3


def test_failed_refresh_does_not_write():
    store = MemoryStore()
    cache = CacheLayer(store)

    def broken():
        raise RuntimeError("sheet down")

    with pytest.raises(RuntimeError):
        cache.get_or_refresh("leaderboard", 60, broken)
    assert store.get("leaderboard") is None


def test_failed_refresh_keeps_previous_entry_untouched():
    clock = Clock()
    store = MemoryStore(clock=clock)
    store.set("leaderboard", b'[{"name": "old"}]', 60)
    cache = CacheLayer(store)

    payload, source = cache.get_or_refresh("leaderboard", 60, lambda: 1 / 0)

    assert (payload, source) == ([{"name": "old"}], "cache")


def test_database_store_roundtrip_and_expiry(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'cache.db'}")
    Base.metadata.create_all(bind=engine)
    store = DatabaseStore(make_session_factory(engine))

    assert store.get("leaderboard") is None
    store.set("leaderboard", b'{"v": 1}', 60)
    assert json.loads(store.get("leaderboard")) == {"v": 1}

    # reemplazo completo, no parcial
    store.set("leaderboard", b'{"v": 2}', 60)
    assert json.loads(store.get("leaderboard")) == {"v": 2}

    store.set("leaderboard", b'{"v": 3}', -1)
    assert store.get("leaderboard") is None


def test_rest_store_get_and_set(make_session, response):
    session = make_session({
        "https://kv.example.com/get/leaderboard": response(json_data={"result": '[{"name": "A"}]'}),
        "https://kv.example.com/set/leaderboard": response(json_data={"result": "OK"}),
    })
    store = RestKVStore("https://kv.example.com/", "tok", session=session)

    assert store.get("leaderboard") == b'[{"name": "A"}]'
    store.set("leaderboard", b"[]", 1800)

    method, url, kwargs = session.calls[-1]
    assert (method, url) == ("POST", "https://kv.example.com/set/leaderboard")
    assert kwargs["params"] == {"EX": 1800}
    assert kwargs["data"] == b"[]"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_rest_store_miss(make_session, response):
    session = make_session({"https://kv.example.com/get/leaderboard": response(json_data={"result": None})})
    assert RestKVStore("https://kv.example.com", "tok", session=session).get("leaderboard") is None


def test_database_store_concurrent_writers_last_write_wins(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'cache.db'}")
    Base.metadata.create_all(bind=engine)
    base_factory = make_session_factory(engine)
    barrier = threading.Barrier(2, timeout=5)

    def factory():
        # ambos escritores hacen el SELECT antes de que cualquiera haga commit
        db = base_factory()
        original_commit = db.commit
        state = {"waited": False}

        def commit():
            if not state["waited"]:
                state["waited"] = True
                barrier.wait()
            original_commit()

        db.commit = commit
        return db

    store = DatabaseStore(factory)
    errors = []

    def writer(payload):
        try:
            store.set("leaderboard", payload, 60)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(p,)) for p in (b'{"v": 1}', b'{"v": 2}')]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    assert errors == []
    assert json.loads(store.get("leaderboard")) in ({"v": 1}, {"v": 2})
