# FILE: cepoka/offline/cache_storage.py
"""
Versioned cache stores persisted with SQLAlchemy.

``CacheStorage`` is the equivalent of the browser's ``caches`` global and
``Cache`` of a single opened store. Every call uses its own session, so
concurrent fetch handlers never share one.
"""
from __future__ import annotations

import json
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..models import CacheEntry, CacheStore
from .fetch import FetchResponse

logger = logging.getLogger(__name__)


def _to_response(entry: CacheEntry) -> FetchResponse:
    return FetchResponse(
        status=entry.status,
        status_text=entry.status_text or "",
        headers=json.loads(entry.headers or "{}"),
        body=entry.body or b"",
        url=entry.url,
        type=entry.response_type,
    )


def _get_store(db: Session, name: str) -> Optional[CacheStore]:
    return db.execute(select(CacheStore).where(CacheStore.name == name)).scalar_one_or_none()


def _ensure_store(db: Session, name: str) -> CacheStore:
    store = _get_store(db, name)
    if store is None:
        store = CacheStore(name=name)
        db.add(store)
        db.flush()
    return store


def _upsert_entry(db: Session, store: CacheStore, url: str, response: FetchResponse) -> None:
    entry = db.execute(
        select(CacheEntry).where(CacheEntry.store_id == store.id, CacheEntry.url == url)
    ).scalar_one_or_none()
    if entry is None:
        entry = CacheEntry(store_id=store.id, url=url)
        db.add(entry)
    entry.status = response.status
    entry.status_text = response.status_text
    entry.headers = json.dumps(response.headers)
    entry.body = response.body
    entry.response_type = response.type


class Cache:
    def __init__(self, storage: "CacheStorage", name: str):
        self.storage = storage
        self.name = name

    def match(self, url: str) -> Optional[FetchResponse]:
        with self.storage.session() as db:
            entry = db.execute(
                select(CacheEntry)
                .join(CacheStore)
                .where(CacheStore.name == self.name, CacheEntry.url == url)
            ).scalar_one_or_none()
            return _to_response(entry) if entry else None

    def put(self, url: str, response: FetchResponse, create: bool = True) -> bool:
        return self.put_all([(url, response)], create=create)

    def put_all(self, items: Iterable[Tuple[str, FetchResponse]], create: bool = True) -> bool:
        """
        Store every item in one transaction: all or nothing.
        With ``create=False`` nothing is written when the store no longer exists.
        """
        items = list(items)
        # 동시 put 으로 unique 충돌이 나면 한 번 더 시도 (이번엔 update 경로)
        for attempt in (1, 2):
            with self.storage.session() as db:
                try:
                    if create:
                        store = _ensure_store(db, self.name)
                    else:
                        store = _get_store(db, self.name)
                        if store is None:
                            return False
                    for url, response in items:
                        _upsert_entry(db, store, url, response)
                    db.commit()
                    return True
                except IntegrityError:
                    db.rollback()
                    if attempt == 2:
                        raise
                    logger.info("cache %s: concurrent write, retrying", self.name)

    def keys(self) -> List[str]:
        with self.storage.session() as db:
            rows = db.execute(
                select(CacheEntry.url)
                .join(CacheStore)
                .where(CacheStore.name == self.name)
                .order_by(CacheEntry.id)
            ).scalars()
            return list(rows)

    def delete(self, url: str) -> bool:
        with self.storage.session() as db:
            entry = db.execute(
                select(CacheEntry)
                .join(CacheStore)
                .where(CacheStore.name == self.name, CacheEntry.url == url)
            ).scalar_one_or_none()
            if entry is None:
                return False
            db.delete(entry)
            db.commit()
            return True


class CacheStorage:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session = session_factory

    def open(self, name: str) -> Cache:
        with self.session() as db:
            try:
                _ensure_store(db, name)
                db.commit()
            except IntegrityError:
                # 다른 요청이 먼저 만든 경우
                db.rollback()
        return Cache(self, name)

    def has(self, name: str) -> bool:
        with self.session() as db:
            return db.execute(
                select(CacheStore.id).where(CacheStore.name == name)
            ).first() is not None

    def keys(self) -> List[str]:
        with self.session() as db:
            rows = db.execute(select(CacheStore.name).order_by(CacheStore.created_at, CacheStore.id))
            return list(rows.scalars())

    def delete(self, name: str) -> bool:
        with self.session() as db:
            store = db.execute(select(CacheStore).where(CacheStore.name == name)).scalar_one_or_none()
            if store is None:
                return False
            db.delete(store)  # entries: cascade delete-orphan
            db.commit()
            return True

    def match(self, url: str) -> Optional[FetchResponse]:
        """Search every store, oldest first."""
        with self.session() as db:
            entry = db.execute(
                select(CacheEntry)
                .join(CacheStore)
                .where(CacheEntry.url == url)
                .order_by(CacheStore.created_at, CacheStore.id)
                .limit(1)
            ).scalar_one_or_none()
            return _to_response(entry) if entry else None
