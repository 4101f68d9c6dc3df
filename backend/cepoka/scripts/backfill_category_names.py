# FILE: cepoka/scripts/backfill_category_names.py
# Run: python -m cepoka.scripts.backfill_category_names [--limit 100] [--dry-run]
#
# Sets product.categoryName from the static catalog for products missing it.
# - products already carrying categoryName are skipped
# - unknown category ids are reported, product left untouched
import argparse
import logging
import sys

from cepoka.services.product_backfill import DEFAULT_PAGE_SIZE, update_existing_products
from cepoka.settings import configure_logging

logger = logging.getLogger("cepoka.backfill")


def main() -> int:
    parser = argparse.ArgumentParser(description="Backfill product categoryName from the category catalog")
    parser.add_argument("--limit", type=int, default=DEFAULT_PAGE_SIZE, help="products to scan (one page)")
    parser.add_argument("--dry-run", action="store_true", help="resolve and count, do not write")
    args = parser.parse_args()

    configure_logging()
    report = update_existing_products(limit=args.limit, dry_run=args.dry_run)
    if not report.success:
        logger.error("Backfill failed: %s", report.error)
        return 1

    logger.info(
        "Updated: %d  Errors: %d  Skipped: %d%s",
        report.updated_count, report.error_count, report.skipped_count,
        "  (dry run)" if report.dry_run else "",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
