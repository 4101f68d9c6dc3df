import json
import logging

from cepoka.appwrite_client import appwrite_config
from cepoka.services.product_backfill import update_existing_products

COLL = appwrite_config.products_collection_id


def _updates(databases):
    return [c for c in databases.calls if c[0] == "update"]


def test_missing_category_name_is_filled(databases):
    pid = databases.seed(COLL, name="Pedicure chair", category="spa-salon-furniture")

    report = update_existing_products(databases)

    assert report.success is True
    assert report.updated_count == 1
    assert databases.collections[COLL][pid]["categoryName"] == "Spa and salon furnitures"


def test_existing_category_name_is_left_untouched(databases):
    pid = databases.seed(COLL, name="Wax pot", category="facial-waxing", categoryName="Custom label")

    report = update_existing_products(databases)

    assert report.skipped_count == 1
    assert report.updated_count == 0
    assert _updates(databases) == []
    assert databases.collections[COLL][pid]["categoryName"] == "Custom label"


def test_unknown_category_counts_as_error_and_batch_continues(databases):
    bad = databases.seed(COLL, name="Mystery", category="does-not-exist")
    good = databases.seed(COLL, name="Nail kit", category="pedicure-manicure")

    report = update_existing_products(databases)

    assert report.success is True
    assert (report.updated_count, report.error_count, report.skipped_count) == (1, 1, 0)
    assert "categoryName" not in databases.collections[COLL][bad]
    assert databases.collections[COLL][good]["categoryName"] == "Pedicure and manicure"


def test_update_failure_is_counted(databases):
    broken = databases.seed(COLL, name="Dryer", category="beauty-equipment")
    databases.seed(COLL, name="Serum", category="skincare-accessories")
    databases.fail_update.add(broken)

    report = update_existing_products(databases)

    assert (report.updated_count, report.error_count) == (1, 1)


def test_dry_run_writes_nothing(databases):
    databases.seed(COLL, name="Dryer", category="beauty-equipment")

    report = update_existing_products(databases, dry_run=True)

    assert report.dry_run is True
    assert report.updated_count == 1
    assert _updates(databases) == []


def test_list_failure_reports_top_level_error(databases):
    databases.fail_list = True

    report = update_existing_products(databases)

    assert report.success is False
    assert report.error
    assert report.updated_count == 0


def test_limit_is_sent_as_query(databases):
    for i in range(5):
        databases.seed(COLL, name=f"p{i}", category="beauty-equipment")

    report = update_existing_products(databases, limit=3)

    assert report.updated_count == 3
    _, _, queries = next(c for c in databases.calls if c[0] == "list")
    assert json.loads(queries[0]) == {"method": "limit", "values": [3]}


def test_unknown_category_is_logged_as_error(databases, caplog):
    databases.seed(COLL, name="Mystery", category="does-not-exist")

    with caplog.at_level(logging.INFO, logger="cepoka.services.product_backfill"):
        update_existing_products(databases)

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert any("Mystery" in r.getMessage() for r in errors)
