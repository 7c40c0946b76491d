"""Demo data bootstrap, the JSON catalogue loader and the server entry point."""
import json
import logging
from datetime import date

import run_server
import seed_inventory
from medbill.db import init_db as init_db_module
from medbill.db.init_db import DEMO_CATEGORIES, DEMO_CUSTOMERS, DEMO_DOCTORS, DEMO_MEDICINES, seed_demo_data
from medbill.models import Category, Customer, Doctor, Medicine, User
from medbill.services import catalog_service, user_service


def test_seed_demo_data_counts(db):
    seed_demo_data(db)

    assert db.query(Category).count() == len(DEMO_CATEGORIES)
    assert db.query(Medicine).count() == len(DEMO_MEDICINES)
    assert db.query(Doctor).count() == len(DEMO_DOCTORS)
    assert db.query(Customer).count() == len(DEMO_CUSTOMERS)


def test_demo_data_triggers_alerts(db):
    today = date(2024, 6, 1)
    seed_demo_data(db, today=today)

    low = {m.name for m in catalog_service.get_low_stock_medicines(db)}
    assert low == {"Cetirizine 10mg", "Amoxicillin 250mg"}

    expiring = {m.name for m in catalog_service.get_expiring_medicines(db, 30, today=today)}
    assert expiring == {"Amoxicillin 250mg"}


def test_create_admin_user_uses_configured_password(db, monkeypatch):
    monkeypatch.setattr(init_db_module.settings, "ADMIN_PASSWORD", "counter-admin-1")

    admin = init_db_module.create_admin_user(db)

    assert admin.role == "admin"
    assert db.query(User).count() == 1
    assert user_service.authenticate(db, admin.username, "counter-admin-1").id == admin.id


def test_load_medicines_from_json(db, session_factory, tmp_path, monkeypatch, catalogue):
    monkeypatch.setattr(seed_inventory, "SessionLocal", session_factory)
    source = tmp_path / "medicines.json"
    source.write_text(json.dumps([
        {
            "name": "Metformin 500mg", "category": "Antidiabetic", "form": "tablet",
            "batch_number": "B2024001", "expiry_date": "2026-01-31", "mrp": 45, "stock": 120,
        },
        # already in the catalogue with this batch
        {
            "name": "Paracetamol 500mg", "category": "Pain Relief", "form": "tablet",
            "batch_number": "B2023056", "expiry_date": "2026-01-31", "mrp": 25, "stock": 10,
        },
    ]))

    assert seed_inventory.load_medicines(source) == 1

    db.expire_all()
    metformin = db.query(Medicine).filter(Medicine.name == "Metformin 500mg").one()
    assert metformin.category.name == "Antidiabetic"
    assert metformin.low_stock_threshold == 10
    assert db.query(Category).count() == 3
    assert db.query(Medicine).filter(Medicine.name == "Paracetamol 500mg").one().stock == 100


def test_run_server_logs_and_starts_uvicorn(monkeypatch, caplog):
    calls = []
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "9100")
    monkeypatch.setattr(run_server.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    with caplog.at_level(logging.INFO, logger="run_server"):
        run_server.main()

    assert calls == [("medbill.main:app", {"host": "0.0.0.0", "port": 9100, "log_level": "info"})]
    assert "Starting MedBill backend on 0.0.0.0:9100" in caplog.text
