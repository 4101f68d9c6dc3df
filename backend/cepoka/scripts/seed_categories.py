# FILE: cepoka/scripts/seed_categories.py
# Run: python -m cepoka.scripts.seed_categories [--reset]
#
# Pushes the static category catalog into the Appwrite categories collection.
# - categories that already exist (same name) are left alone
# - --reset deletes every remote category first, then recreates the catalog
import argparse
import logging
import sys

from cepoka.services.category_service import initialize_categories, reset_categories
from cepoka.settings import configure_logging

logger = logging.getLogger("cepoka.seed")


def run(reset: bool = False) -> bool:
    if reset:
        report = reset_categories()
        logger.info(
            "[seed] reset: deleted=%d created=%d failed=%d",
            report.deleted, report.created, report.failed,
        )
    else:
        report = initialize_categories()
        logger.info("[seed] %s", report.message)
    return report.success


def main() -> int:
    parser = argparse.ArgumentParser(description="Upload the static categories to Appwrite")
    parser.add_argument("--reset", action="store_true", help="delete remote categories before uploading")
    args = parser.parse_args()

    configure_logging()
    return 0 if run(reset=args.reset) else 1


if __name__ == "__main__":
    sys.exit(main())
