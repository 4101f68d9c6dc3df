# FILE: cepoka/offline/service_worker.py
"""
Offline-caching worker: install / activate / fetch.

States::

    parsed -> installing -> installed -> activating -> activated
                  \\
                   -> redundant   (install failed, or superseded by a newer version)

Fetch strategy is cache-first without revalidation. On a miss the network
response is cached only when it is a same-origin 200 to a GET. When the
network itself fails the request falls back to the offline page (navigation),
the site logo (images) or a synthetic 408.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..constants.offline import CACHE_NAME, IMAGE_FALLBACK_URL, OFFLINE_URL, PRECACHE_URLS
from .cache_storage import Cache, CacheStorage
from .fetch import FetchRequest, FetchResponse, Network, NetworkError, network_error_response

logger = logging.getLogger(__name__)

Defer = Callable[..., None]

# 엣지 캐시는 모든 사용자가 공유하므로 사용자별 응답은 저장하지 않음
PRIVATE_REQUEST_HEADERS = ("cookie", "authorization")
PRIVATE_CACHE_CONTROL = ("private", "no-store")


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def is_shareable(request: FetchRequest, response: FetchResponse) -> bool:
    """True when the response may be served to other clients from the shared cache."""
    if any(_header(request.headers, h) for h in PRIVATE_REQUEST_HEADERS):
        return False
    if _header(response.headers, "set-cookie") is not None:
        return False
    cache_control = (_header(response.headers, "cache-control") or "").lower()
    return not any(d in cache_control for d in PRIVATE_CACHE_CONTROL)


class WorkerState(str, Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class InstallError(Exception):
    """Seeding the cache failed; this worker version is discarded."""


class ServiceWorker:
    def __init__(
        self,
        caches: CacheStorage,
        network: Network,
        cache_name: str = CACHE_NAME,
        precache_urls: Sequence[str] = PRECACHE_URLS,
        offline_url: str = OFFLINE_URL,
        image_fallback_url: str = IMAGE_FALLBACK_URL,
    ):
        self.caches = caches
        self.network = network
        self.cache_name = cache_name
        self.precache_urls = tuple(precache_urls)
        self.offline_url = offline_url
        self.image_fallback_url = image_fallback_url
        self.state = WorkerState.PARSED
        self.deleted_caches: List[str] = []

    # ------------------------------------------------------------------
    # Lifecycle

    def install(self) -> None:
        if self.state is not WorkerState.PARSED:
            raise RuntimeError(f"cannot install a worker in state {self.state.value}")
        self.state = WorkerState.INSTALLING
        try:
            cache = self.caches.open(self.cache_name)
            logger.info("Opened cache %s", self.cache_name)
            fetched = [(self.network.resolve(url), self._fetch_seed(url)) for url in self.precache_urls]
            cache.put_all(fetched)
        except (NetworkError, InstallError, SQLAlchemyError) as e:
            self.state = WorkerState.REDUNDANT
            logger.error("Install of %s failed: %s", self.cache_name, e)
            if isinstance(e, InstallError):
                raise
            raise InstallError(str(e)) from e
        self.state = WorkerState.INSTALLED
        logger.info("Installed %s (%d assets)", self.cache_name, len(self.precache_urls))

    def _fetch_seed(self, url: str) -> FetchResponse:
        response = self.network.fetch(FetchRequest(url=url))
        if not response.ok:
            raise InstallError(f"Request for {url} failed with status {response.status}")
        return response

    def activate(self) -> List[str]:
        if self.state is not WorkerState.INSTALLED:
            raise RuntimeError(f"cannot activate a worker in state {self.state.value}")
        self.state = WorkerState.ACTIVATING
        deleted = []
        for name in self.caches.keys():
            if name != self.cache_name and self.caches.delete(name):
                logger.info("Deleted old cache %s", name)
                deleted.append(name)
        self.deleted_caches = deleted
        self.state = WorkerState.ACTIVATED
        return deleted

    # ------------------------------------------------------------------
    # Fetch

    def handle_fetch(self, request: FetchRequest, defer: Optional[Defer] = None) -> FetchResponse:
        """
        ``defer(fn, *args)`` schedules the cache write after the response is
        returned (e.g. ``BackgroundTasks.add_task``); without it the write is
        done inline.
        """
        key = self.network.resolve(request.url)

        if request.method == "GET":
            cached = self._match(key)
            if cached is not None:
                return cached

        try:
            response = self.network.fetch(request)
        except NetworkError as e:
            logger.info("Network failed for %s: %s", key, e)
            return self._fallback(request)

        if request.method != "GET" or response.status != 200 or response.type != "basic":
            return response
        if not is_shareable(request, response):
            return response

        clone = response.clone()
        if defer is None:
            self._store(key, clone)
        else:
            defer(self._store, key, clone)
        return response

    def _match(self, key: str) -> Optional[FetchResponse]:
        try:
            return self.caches.match(key)
        except SQLAlchemyError:
            logger.exception("Cache lookup failed for %s", key)
            return None

    def _store(self, key: str, response: FetchResponse) -> None:
        # 지연된 쓰기: 그 사이 새 버전이 활성화됐으면 지워진 캐시를 되살리지 않음
        if self.state is not WorkerState.ACTIVATED:
            logger.info("Dropped cache write for %s: %s is %s", key, self.cache_name, self.state.value)
            return
        try:
            if not Cache(self.caches, self.cache_name).put(key, response, create=False):
                logger.info("Dropped cache write for %s: %s was deleted", key, self.cache_name)
        except SQLAlchemyError:
            logger.exception("Cache write failed for %s", key)

    def _fallback(self, request: FetchRequest) -> FetchResponse:
        if request.is_navigation:
            fallback_url = self.offline_url
        elif request.destination == "image":
            fallback_url = self.image_fallback_url
        else:
            return network_error_response()

        cached = self._match(self.network.resolve(fallback_url))
        if cached is None:
            logger.warning("Fallback %s is not cached", fallback_url)
            return network_error_response()
        return cached


class Registration:
    """Holds the worker that currently controls the edge."""

    def __init__(self, caches: CacheStorage, network: Network):
        self.caches = caches
        self.network = network
        self.active: Optional[ServiceWorker] = None
        self.installing: Optional[ServiceWorker] = None
        self._lock = threading.Lock()

    def new_worker(self, cache_name: str = CACHE_NAME, **kwargs) -> ServiceWorker:
        return ServiceWorker(self.caches, self.network, cache_name=cache_name, **kwargs)

    def update(self, worker: ServiceWorker) -> List[str]:
        """Install then activate ``worker``; the previous version becomes redundant."""
        with self._lock:
            self.installing = worker
            try:
                worker.install()
            finally:
                self.installing = None
            deleted = worker.activate()
            previous, self.active = self.active, worker
            if previous is not None and previous is not worker:
                previous.state = WorkerState.REDUNDANT
            return deleted

    def handle_fetch(self, request: FetchRequest, defer: Optional[Defer] = None) -> FetchResponse:
        """Uncontrolled requests go straight to the network (``NetworkError`` propagates)."""
        worker = self.active
        if worker is None:
            return self.network.fetch(request)
        return worker.handle_fetch(request, defer)
