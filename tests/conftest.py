import itertools
import json
import os
import tempfile
from collections import defaultdict

# settings 는 import 시점에 읽히므로 cepoka import 전에 설정
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "cepoka-test.db")
os.environ["EDGE_INSTALL_ON_STARTUP"] = "0"
os.environ["ADMIN_ACCESS_KEY"] = "test-admin-key"
os.environ.pop("ADMIN_ACCESS_KEY_HASH", None)

import pytest
from appwrite.exception import AppwriteException
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cepoka import models  # noqa: F401  (table registration)
from cepoka.appwrite_client import get_databases
from cepoka.constants.offline import PRECACHE_URLS
from cepoka.database import Base, get_db
from cepoka.offline.cache_storage import CacheStorage
from cepoka.offline.fetch import FetchResponse, Network, NetworkError
from cepoka.offline.service_worker import Registration

ORIGIN = "https://shop.test"
ADMIN_KEY = "test-admin-key"


class FakeNetwork(Network):
    """Origin stand-in: canned responses by URL, records every fetch."""

    def __init__(self, origin_url: str = ORIGIN):
        super().__init__(origin_url)
        self.routes = {}
        self.handlers = {}        # url -> fn(FetchRequest) -> FetchResponse
        self.calls = []
        self.offline = False
        self.unreachable = set()

    def add(self, path, body=b"", status=200, headers=None, type=None):
        url = self.resolve(path)
        self.routes[url] = FetchResponse(
            status=status,
            status_text="OK" if status == 200 else "Error",
            headers=headers or {"Content-Type": "text/plain"},
            body=body,
            url=url,
            type=type or self.response_type(url),
        )

    def fetch(self, request):
        url = self.resolve(request.url)
        self.calls.append(url)
        if self.offline or url in self.unreachable:
            raise NetworkError(f"offline: {url}")
        if url in self.handlers:
            return self.handlers[url](request)
        if url not in self.routes:
            return FetchResponse(status=404, status_text="Not Found", body=b"not found", url=url)
        return self.routes[url].clone()


class FakeDatabases:
    """In-memory stand-in for the SDK's appwrite.services.databases.Databases."""

    def __init__(self):
        self.collections = defaultdict(dict)
        self.calls = []
        self.fail_list = False
        self.fail_create = set()      # names that fail on create
        self.fail_update = set()      # document ids that fail on update
        self._ids = itertools.count(1)

    def seed(self, collection_id, **data):
        doc_id = data.pop("id", None) or f"doc{next(self._ids)}"
        self.collections[collection_id][doc_id] = {"$id": doc_id, **data}
        return doc_id

    def list_documents(self, database_id, collection_id, queries=None):
        self.calls.append(("list", collection_id, list(queries or [])))
        if self.fail_list:
            raise AppwriteException("Server Error", code=500, type="general_unknown")
        docs = [dict(d) for d in self.collections[collection_id].values()]
        limit = None
        for raw in queries or []:
            q = json.loads(raw)
            if q["method"] == "equal":
                docs = [d for d in docs if d.get(q["attribute"]) in q["values"]]
            elif q["method"] == "orderAsc":
                docs.sort(key=lambda d: d.get(q["attribute"]) or "")
            elif q["method"] == "limit":
                limit = q["values"][0]
        if limit is not None:
            docs = docs[:limit]
        return {"total": len(docs), "documents": docs}

    def get_document(self, database_id, collection_id, document_id):
        doc = self.collections[collection_id].get(document_id)
        if doc is None:
            raise AppwriteException("Document not found", code=404, type="document_not_found")
        return dict(doc)

    def create_document(self, database_id, collection_id, document_id, data):
        self.calls.append(("create", collection_id, data))
        if data.get("name") in self.fail_create:
            raise AppwriteException("Invalid document", code=400, type="document_invalid_structure")
        doc_id = f"doc{next(self._ids)}" if document_id == "unique()" else document_id
        self.collections[collection_id][doc_id] = {"$id": doc_id, **data}
        return dict(self.collections[collection_id][doc_id])

    def update_document(self, database_id, collection_id, document_id, data):
        self.calls.append(("update", collection_id, document_id, data))
        if document_id in self.fail_update:
            raise AppwriteException("Server Error", code=500, type="general_unknown")
        doc = self.get_document(database_id, collection_id, document_id)
        doc.update(data)
        self.collections[collection_id][document_id] = doc
        return dict(doc)

    def delete_document(self, database_id, collection_id, document_id):
        self.calls.append(("delete", collection_id, document_id))
        self.get_document(database_id, collection_id, document_id)
        del self.collections[collection_id][document_id]


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def caches(session_factory):
    return CacheStorage(session_factory)


def seed_origin(network: FakeNetwork) -> FakeNetwork:
    for url in PRECACHE_URLS:
        network.add(url, body=f"asset:{url}".encode())
    network.add("/offline", body=b"<h1>You're offline</h1>", headers={"Content-Type": "text/html"})
    return network


@pytest.fixture
def network():
    return seed_origin(FakeNetwork())


@pytest.fixture
def databases():
    return FakeDatabases()


@pytest.fixture
def app(session_factory, caches, network, databases):
    from cepoka.main import app as fastapi_app

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    previous = fastapi_app.state.registration
    fastapi_app.state.registration = Registration(caches, network)
    fastapi_app.dependency_overrides[get_databases] = lambda: databases
    fastapi_app.dependency_overrides[get_db] = _get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.registration = previous


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    r = client.post("/admin/login", data={"username": "admin", "password": ADMIN_KEY})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
