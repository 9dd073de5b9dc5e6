from __future__ import annotations
import json
import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Protocol, Tuple
from urllib.parse import quote

import requests
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.core.settings import LeaderboardSettings
from app.db import Base, make_engine, make_session_factory
from app.models.cache_entry import CacheEntry

log = logging.getLogger("leaderboard.cache")

class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...
    def set(self, key: str, value: bytes, expire_after: int) -> None: ...


class MemoryStore:
    """Store en memoria del proceso. `clock` se inyecta en tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[bytes, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._data.get(key)
            if not entry:
                return None
            value, expires = entry
            if self._clock() >= expires:
                self._data.pop(key, None)
                return None
            return value

    def set(self, key: str, value: bytes, expire_after: int) -> None:
        with self._lock:
            self._data[key] = (value, self._clock() + expire_after)


class DatabaseStore:
    """Tabla cache_entries; una fila vencida se lee como miss."""

    def __init__(self, session_factory: sessionmaker,
                 now: Callable[[], datetime] = lambda: datetime.now(tz=timezone.utc)):
        self._session_factory = session_factory
        self._now = now

    def get(self, key: str) -> Optional[bytes]:
        with self._session_factory() as db:
            row = db.get(CacheEntry, key)
            if row is None:
                return None
            expires = row.expires_at
            if expires.tzinfo is None:
                # SQLite devuelve datetimes naive
                expires = expires.replace(tzinfo=timezone.utc)
            if expires <= self._now():
                return None
            return row.payload.encode("utf-8")

    def set(self, key: str, value: bytes, expire_after: int) -> None:
        expires = self._now() + timedelta(seconds=expire_after)
        payload = value.decode("utf-8")
        with self._session_factory() as db:
            db.merge(CacheEntry(key=key, payload=payload, expires_at=expires))
            try:
                db.commit()
            except IntegrityError:
                # otro refresh insertó la fila entre el SELECT y el INSERT: gana la última escritura
                db.rollback()
                db.execute(
                    update(CacheEntry)
                    .where(CacheEntry.key == key)
                    .values(payload=payload, expires_at=expires)
                )
                db.commit()


class RestKVStore:
    """Cliente del API REST tipo Upstash / Vercel KV."""

    def __init__(self, url: str, token: str, *, session=None, timeout: float = 10.0):
        self.url = url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {"Authorization": f"Bearer {token}"}

    def get(self, key: str) -> Optional[bytes]:
        r = self.session.get(f"{self.url}/get/{quote(key, safe='')}",
                             headers=self.headers, timeout=self.timeout)
        r.raise_for_status()
        result = r.json().get("result")
        return result.encode("utf-8") if result is not None else None

    def set(self, key: str, value: bytes, expire_after: int) -> None:
        r = self.session.post(f"{self.url}/set/{quote(key, safe='')}",
                              params={"EX": int(expire_after)}, data=value,
                              headers=self.headers, timeout=self.timeout)
        r.raise_for_status()


def build_store(settings: LeaderboardSettings) -> Optional[KeyValueStore]:
    """None = cache deshabilitado (modo sin cache, no es error)."""
    backend = settings.cache_backend
    if backend == "memory":
        return MemoryStore()
    if backend == "database":
        engine = make_engine(settings.database_url)
        Base.metadata.create_all(bind=engine)
        return DatabaseStore(make_session_factory(engine))
    if backend == "rest":
        return RestKVStore(settings.kv_rest_api_url, settings.kv_rest_api_token)
    return None


class CacheLayer:
    """Cache-aside con TTL sobre un KeyValueStore opcional."""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store

    @property
    def is_configured(self) -> bool:
        return self.store is not None

    def get_or_refresh(self, key: str, ttl_seconds: int,
                       refresh_fn: Callable[[], Any]) -> Tuple[Any, str]:
        if not self.is_configured:
            return refresh_fn(), "fresh"

        cached = self.store.get(key)
        if cached is not None:
            log.info("cache hit: %s", key)
            return json.loads(cached), "cache"

        # si refresh_fn lanza no se escribe nada
        payload = refresh_fn()
        self.store.set(key, json.dumps(payload).encode("utf-8"), ttl_seconds)
        log.info("cache set: %s (ttl=%ss)", key, ttl_seconds)
        return payload, "fresh"
