# FILE: cepoka/routers/admin.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from appwrite.exception import AppwriteException
from appwrite.services.databases import Databases
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..appwrite_client import appwrite_config, get_databases
from ..database import get_db
from ..deps import ADMIN_SUBJECT, get_registration, require_admin
from ..offline.service_worker import InstallError, Registration, ServiceWorker
from ..services import category_service, product_backfill
from ..settings import ALGORITHM, ADMIN_ACCESS_KEY, ADMIN_ACCESS_KEY_HASH, SECRET_KEY, jwt_exp_delta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

# -----------------------------
# Access key hashing
# -----------------------------
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_admin_key_hash = ADMIN_ACCESS_KEY_HASH or pwd_context.hash(ADMIN_ACCESS_KEY)


def verify_access_key(access_key: str) -> bool:
    return bool(access_key) and pwd_context.verify(access_key, _admin_key_hash)


def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + jwt_exp_delta()})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


@router.post("/login", response_model=schemas.Token)
def login(form: OAuth2PasswordRequestForm = Depends()):
    """
    관리자 키로 로그인 (OAuth2 form, password = access key, username 무시)
    """
    if not verify_access_key(form.password):
        logger.warning("Rejected admin login")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin access key",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return schemas.Token(access_token=create_access_token({"sub": ADMIN_SUBJECT}))


# -----------------------------
# Categories (remote)
# -----------------------------
def _to_out(category) -> schemas.CategoryOut:
    return schemas.CategoryOut(**category._asdict())


@router.get("/categories", response_model=List[schemas.CategoryOut])
def list_remote_categories(
    _: str = Depends(require_admin),
    databases: Databases = Depends(get_databases),
):
    return [_to_out(c) for c in category_service.fetch_categories(databases, appwrite_config)]


@router.post("/categories", response_model=schemas.CategoryOut, status_code=201)
def create_category(
    body: schemas.CategoryCreate,
    _: str = Depends(require_admin),
    databases: Databases = Depends(get_databases),
):
    created = category_service.add_category(body.name, body.icon, databases, appwrite_config)
    if created is None:
        raise HTTPException(status_code=502, detail="Failed to add category")
    return _to_out(created)


@router.patch("/categories/{category_id}", response_model=schemas.CategoryOut)
def patch_category(
    category_id: str,
    body: schemas.CategoryUpdate,
    _: str = Depends(require_admin),
    databases: Databases = Depends(get_databases),
):
    if body.name is None and body.icon is None:
        raise HTTPException(status_code=400, detail="Nothing to update")
    updated = category_service.update_category(
        category_id, body.name, body.icon, databases, appwrite_config
    )
    if updated is None:
        raise HTTPException(status_code=502, detail="Failed to update category")
    return _to_out(updated)


@router.delete("/categories/{category_id}", status_code=204)
def remove_category(
    category_id: str,
    _: str = Depends(require_admin),
    databases: Databases = Depends(get_databases),
):
    try:
        databases.get_document(
            appwrite_config.database_id, appwrite_config.categories_collection_id, category_id
        )
    except AppwriteException as e:
        if e.code == 404:
            raise HTTPException(status_code=404, detail="Category not found")
        raise HTTPException(status_code=502, detail=e.message)
    if not category_service.delete_category(category_id, databases, appwrite_config):
        raise HTTPException(status_code=502, detail="Failed to delete category")
    return


@router.post("/categories/bootstrap", response_model=schemas.BootstrapReport)
def bootstrap_categories(
    _: str = Depends(require_admin),
    databases: Databases = Depends(get_databases),
):
    return category_service.initialize_categories(databases, appwrite_config)


@router.post("/categories/reset", response_model=schemas.ResetReport)
def reset_categories(
    _: str = Depends(require_admin),
    databases: Databases = Depends(get_databases),
):
    return category_service.reset_categories(databases=databases, config=appwrite_config)


# -----------------------------
# Products
# -----------------------------
@router.post("/products/backfill-category-names", response_model=schemas.BackfillReport)
def backfill_category_names(
    limit: int = Query(product_backfill.DEFAULT_PAGE_SIZE, ge=1, le=5000),
    dry_run: bool = Query(False),
    _: str = Depends(require_admin),
    databases: Databases = Depends(get_databases),
):
    return product_backfill.update_existing_products(databases, appwrite_config, limit=limit, dry_run=dry_run)


# -----------------------------
# Offline edge
# -----------------------------
def _worker_status(worker: Optional[ServiceWorker]) -> schemas.WorkerStatus:
    if worker is None:
        return schemas.WorkerStatus()
    return schemas.WorkerStatus(
        cache_name=worker.cache_name,
        state=worker.state.value,
        precache_urls=list(worker.precache_urls),
        deleted_caches=worker.deleted_caches,
    )


@router.get("/edge/status", response_model=schemas.WorkerStatus)
def edge_status(
    _: str = Depends(require_admin),
    registration: Registration = Depends(get_registration),
):
    return _worker_status(registration.active)


@router.post("/edge/update", response_model=schemas.WorkerStatus)
def edge_update(
    cache_name: Optional[str] = Body(None, embed=True),
    _: str = Depends(require_admin),
    registration: Registration = Depends(get_registration),
):
    """새 버전 설치 → 활성화. 설치 실패 시 기존 워커가 계속 동작."""
    worker = registration.new_worker(cache_name) if cache_name else registration.new_worker()
    try:
        registration.update(worker)
    except InstallError as e:
        raise HTTPException(status_code=503, detail=f"Install failed: {e}")
    return _worker_status(worker)


@router.get("/edge/caches", response_model=List[schemas.CacheStoreOut])
def edge_caches(
    _: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    rows = db.execute(
        select(models.CacheStore, func.count(models.CacheEntry.id))
        .outerjoin(models.CacheEntry)
        .group_by(models.CacheStore.id)
        .order_by(models.CacheStore.created_at, models.CacheStore.id)
    ).all()
    return [
        schemas.CacheStoreOut(name=store.name, created_at=store.created_at, entry_count=count)
        for store, count in rows
    ]
