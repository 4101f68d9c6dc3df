# FILE: cepoka/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.routing import APIRoute

from cepoka.database import Base, engine
from cepoka import models  # 모델 등록용 (create_all 전에 임포트)
from cepoka.offline.cache_storage import CacheStorage
from cepoka.offline.fetch import Network
from cepoka.offline.service_worker import InstallError, Registration
from cepoka.routers import admin, edge, site
from cepoka.settings import EDGE_INSTALL_ON_STARTUP, configure_logging

configure_logging()
logger = logging.getLogger(__name__)

VERSION = "0.3.0"

# --- DB schema bootstrap ---
Base.metadata.create_all(bind=engine)


def _dump_routes(app: FastAPI) -> None:
    logger.info("Registered routes:")
    for r in app.routes:
        if isinstance(r, APIRoute):
            methods = ",".join(sorted(r.methods))
            logger.info("  %-15s %s", methods, r.path)


def _install_edge(registration: Registration) -> None:
    try:
        registration.update(registration.new_worker())
    except InstallError as e:
        logger.error("Offline edge not installed, serving uncontrolled: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _dump_routes(app)
    if EDGE_INSTALL_ON_STARTUP:
        await run_in_threadpool(_install_edge, app.state.registration)
    yield


app = FastAPI(
    title="Cepoka Beauty Hub API",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.state.registration = Registration(CacheStorage(), Network())

# --- CORS (dev: allow all origins) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1024)


# --- Health check ---
@app.get("/health")
def health():
    return {"status": "ok", "service": "cepoka", "version": VERSION}


# --- Routers (edge 는 catch-all 이므로 마지막) ---
app.include_router(site.router)
app.include_router(admin.router)
app.include_router(edge.router)
