# FILE: cepoka/services/category_service.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from appwrite.exception import AppwriteException
from appwrite.id import ID
from appwrite.query import Query
from appwrite.services.databases import Databases

from ..appwrite_client import AppwriteConfig, appwrite_config, get_databases
from ..constants.categories import CATEGORIES, Category
from ..schemas import BootstrapReport, ResetReport

logger = logging.getLogger(__name__)

DEFAULT_ICON = "✨"

# 백엔드 호출 실패로 취급하는 예외 (SDK 가 전송 오류도 AppwriteException 으로 감쌈)
BACKEND_ERRORS = (AppwriteException,)


def appwrite_to_local_category(doc: Dict[str, Any]) -> Category:
    name = doc.get("name") or ""
    return Category(
        id=doc["$id"],
        name=name,
        icon=doc.get("icon") or DEFAULT_ICON,
        image_src="/icons/{}.png".format(re.sub(r"\s+", "-", name.lower())),
    )


def local_to_appwrite_category(category: Category) -> Dict[str, str]:
    return {"name": category.name, "icon": category.icon}


def fetch_categories(
    databases: Optional[Databases] = None, config: AppwriteConfig = appwrite_config
) -> List[Category]:
    databases = databases or get_databases()
    try:
        response = databases.list_documents(
            config.database_id, config.categories_collection_id, [Query.order_asc("name")]
        )
    except BACKEND_ERRORS:
        logger.exception("Error fetching categories")
        return []
    return [appwrite_to_local_category(doc) for doc in response.get("documents", [])]


def find_category_by_name(
    name: str, databases: Optional[Databases] = None, config: AppwriteConfig = appwrite_config
) -> Optional[Category]:
    """Raises on backend failure; callers decide how to tally it."""
    databases = databases or get_databases()
    existing = databases.list_documents(
        config.database_id, config.categories_collection_id, [Query.equal("name", name)]
    )
    docs = existing.get("documents", [])
    return appwrite_to_local_category(docs[0]) if docs else None


def _create_category(name: str, icon: str, databases: Databases, config: AppwriteConfig) -> Category:
    doc = databases.create_document(
        config.database_id, config.categories_collection_id, ID.unique(), {"name": name, "icon": icon}
    )
    return appwrite_to_local_category(doc)


def add_category(
    name: str,
    icon: str = DEFAULT_ICON,
    databases: Optional[Databases] = None,
    config: AppwriteConfig = appwrite_config,
) -> Optional[Category]:
    """
    같은 이름의 카테고리가 이미 있으면 그것을 반환, 없으면 생성.
    실패 시 None.
    """
    databases = databases or get_databases()
    try:
        found = find_category_by_name(name, databases, config)
        if found:
            logger.info("Category already exists: %s", name)
            return found
        return _create_category(name, icon, databases, config)
    except BACKEND_ERRORS:
        logger.exception("Error adding category %s", name)
        return None


def update_category(
    category_id: str,
    name: Optional[str] = None,
    icon: Optional[str] = None,
    databases: Optional[Databases] = None,
    config: AppwriteConfig = appwrite_config,
) -> Optional[Category]:
    databases = databases or get_databases()
    data = {k: v for k, v in (("name", name), ("icon", icon)) if v is not None}
    try:
        doc = databases.update_document(
            config.database_id, config.categories_collection_id, category_id, data
        )
    except BACKEND_ERRORS:
        logger.exception("Error updating category %s", category_id)
        return None
    return appwrite_to_local_category(doc)


def delete_category(
    category_id: str, databases: Optional[Databases] = None, config: AppwriteConfig = appwrite_config
) -> bool:
    databases = databases or get_databases()
    logger.info(
        "Deleting category %s (database=%s, collection=%s)",
        category_id, config.database_id, config.categories_collection_id,
    )
    try:
        databases.delete_document(config.database_id, config.categories_collection_id, category_id)
    except BACKEND_ERRORS:
        logger.exception("Error deleting category %s", category_id)
        return False
    logger.info("Deleted category %s", category_id)
    return True


def upload_initial_categories(
    categories: Iterable[Category] = CATEGORIES,
    databases: Optional[Databases] = None,
    config: AppwriteConfig = appwrite_config,
) -> BootstrapReport:
    """
    정적 카탈로그를 원격 컬렉션에 한 번 밀어넣는다.
    항목별 실패는 집계만 하고 다음 항목으로 진행.
    """
    databases = databases or get_databases()
    created = existing = failed = 0

    for category in categories:
        try:
            if find_category_by_name(category.name, databases, config):
                logger.info("Category already exists: %s", category.name)
                existing += 1
                continue
            _create_category(category.name, category.icon, databases, config)
            logger.info("Created category %s", category.name)
            created += 1
        except BACKEND_ERRORS:
            logger.exception("Error uploading category %s", category.name)
            failed += 1

    message = f"Categories uploaded: created={created}, existing={existing}, failed={failed}"
    logger.info(message)
    return BootstrapReport(
        success=failed == 0, message=message, created=created, existing=existing, failed=failed
    )


def initialize_categories(
    databases: Optional[Databases] = None, config: AppwriteConfig = appwrite_config
) -> BootstrapReport:
    try:
        return upload_initial_categories(CATEGORIES, databases or get_databases(), config)
    except Exception as e:
        logger.exception("Error initializing categories")
        return BootstrapReport(success=False, message=f"Failed to upload categories: {e}")


def reset_categories(
    desired: Iterable[Category] = CATEGORIES,
    databases: Optional[Databases] = None,
    config: AppwriteConfig = appwrite_config,
) -> ResetReport:
    """원격 카테고리를 모두 지우고 desired 로 다시 생성."""
    databases = databases or get_databases()
    try:
        current = databases.list_documents(
            config.database_id, config.categories_collection_id, [Query.limit(100)]
        ).get("documents", [])
    except BACKEND_ERRORS as e:
        logger.exception("Error loading current categories")
        return ResetReport(success=False, error=str(e))

    deleted = created = failed = 0
    for i, doc in enumerate(current, start=1):
        logger.info("Deleting existing categories %d/%d: %s", i, len(current), doc.get("name"))
        if delete_category(doc["$id"], databases, config):
            deleted += 1
        else:
            failed += 1

    desired = list(desired)
    for i, category in enumerate(desired, start=1):
        logger.info("Creating new categories %d/%d: %s", i, len(desired), category.name)
        try:
            _create_category(category.name, category.icon, databases, config)
            created += 1
        except BACKEND_ERRORS:
            logger.exception("Error creating category %s", category.name)
            failed += 1

    return ResetReport(success=failed == 0, deleted=deleted, created=created, failed=failed)
