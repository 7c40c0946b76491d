"""Seed the medicine catalogue.

Usage:
    python seed_inventory.py                  # demo categories, medicines, doctors, customers
    python seed_inventory.py medicines.json   # load medicines from a JSON list

JSON entries: {"name", "category", "form", "batch_number", "expiry_date" (YYYY-MM-DD),
"mrp", "stock", optional "description", "low_stock_threshold", "gst_rate"}.
Unknown categories are created. Existing medicines with the same name and
batch are skipped.
"""
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

from medbill.core.config import settings
from medbill.db.init_db import init_db, seed_demo_data
from medbill.db.session import SessionLocal
from medbill.models import Category, Medicine

logger = logging.getLogger("seed_inventory")


def load_medicines(path: Path) -> int:
    entries = json.loads(path.read_text(encoding="utf-8"))
    db = SessionLocal()
    added = 0
    try:
        categories = {c.name: c for c in db.query(Category).all()}
        for entry in entries:
            category = categories.get(entry["category"])
            if not category:
                category = Category(name=entry["category"])
                db.add(category)
                db.flush()
                categories[category.name] = category

            exists = db.query(Medicine).filter(
                Medicine.name == entry["name"],
                Medicine.batch_number == entry["batch_number"],
            ).first()
            if exists:
                continue

            db.add(Medicine(
                name=entry["name"],
                description=entry.get("description"),
                category_id=category.id,
                form=entry["form"],
                batch_number=entry["batch_number"],
                expiry_date=date.fromisoformat(entry["expiry_date"]),
                mrp=Decimal(str(entry["mrp"])),
                stock=int(entry["stock"]),
                low_stock_threshold=int(entry.get("low_stock_threshold", settings.DEFAULT_LOW_STOCK_THRESHOLD)),
                gst_rate=Decimal(str(entry.get("gst_rate", settings.DEFAULT_GST_RATE))),
            ))
            added += 1
        db.commit()
    finally:
        db.close()
    return added


def main(argv) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    init_db()

    if len(argv) > 1:
        path = Path(argv[1])
        if not path.exists():
            logger.error(f"{path} not found")
            return 1
        added = load_medicines(path)
        logger.info(f"Loaded {added} medicines from {path}")
        return 0

    db = SessionLocal()
    try:
        if db.query(Category).count():
            logger.info("Catalogue already has data, nothing to seed")
            return 0
        seed_demo_data(db)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
