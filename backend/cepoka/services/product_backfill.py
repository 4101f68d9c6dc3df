# FILE: cepoka/services/product_backfill.py
"""
Backfill the denormalized ``categoryName`` on existing product documents.

- reads up to ``limit`` products (single page)
- skips products that already carry a ``categoryName``
- resolves ``category`` (a catalog id) through the static catalog
- an unknown category id is counted as an error and the product is left as is
- one product failing never aborts the batch
"""
from __future__ import annotations

import logging
from typing import Optional

from appwrite.query import Query
from appwrite.services.databases import Databases

from ..appwrite_client import AppwriteConfig, appwrite_config, get_databases
from ..constants.categories import get_category
from ..schemas import BackfillReport
from .category_service import BACKEND_ERRORS

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def update_existing_products(
    databases: Optional[Databases] = None,
    config: AppwriteConfig = appwrite_config,
    limit: int = DEFAULT_PAGE_SIZE,
    dry_run: bool = False,
) -> BackfillReport:
    databases = databases or get_databases()
    logger.info("Starting to update existing products...")

    try:
        response = databases.list_documents(
            config.database_id, config.products_collection_id, [Query.limit(limit)]
        )
    except BACKEND_ERRORS as e:
        logger.exception("Error updating products")
        return BackfillReport(success=False, dry_run=dry_run, error=str(e))

    products = response.get("documents", [])
    logger.info("Found %d products to update", len(products))

    updated = errors = skipped = 0

    for product in products:
        name = product.get("name")

        if product.get("categoryName"):
            logger.info("Product %s already has categoryName: %s", name, product["categoryName"])
            skipped += 1
            continue

        category_id = product.get("category")
        category = get_category(category_id)
        if category is None:
            logger.error("Could not find category for product %s with category ID: %s", name, category_id)
            errors += 1
            continue

        if dry_run:
            logger.info("[DRY] update %s %s -> categoryName=%s", product.get("$id"), name, category.name)
            updated += 1
            continue

        try:
            databases.update_document(
                config.database_id,
                config.products_collection_id,
                product["$id"],
                {"categoryName": category.name},
            )
        except BACKEND_ERRORS + (KeyError,):
            logger.exception("Error updating product %s", name)
            errors += 1
            continue

        logger.info("Updated product %s with category name: %s", name, category.name)
        updated += 1

    logger.info("Update complete. Updated %d products. Errors: %d. Skipped: %d", updated, errors, skipped)
    return BackfillReport(
        success=True, updated_count=updated, error_count=errors, skipped_count=skipped, dry_run=dry_run
    )
