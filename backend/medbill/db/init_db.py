"""Create all tables and bootstrap a fresh database. Run on app startup.

The first admin gets ADMIN_PASSWORD from the environment, or a random
password that is logged once. Demo catalogue data is only inserted into an
empty database and only when SEED_DEMO_DATA is on.
"""
import logging
import secrets
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from medbill.core.config import settings
from medbill.core.security import get_password_hash
from medbill.db.base import Base
from medbill.db.session import engine, SessionLocal
from medbill import models  # noqa: F401 - register models
from medbill.models import Category, Customer, Doctor, Medicine, User

logger = logging.getLogger(__name__)

DEMO_CATEGORIES = [
    "Pain Relief",
    "Antibiotics",
    "Antiallergic",
    "Antidiabetic",
    "Supplements",
    "Cold & Cough",
]

# (name, description, category, form, batch, days until expiry, mrp, stock, low stock threshold)
DEMO_MEDICINES = [
    ("Paracetamol 500mg", "Tablet (Strip of 10)", "Pain Relief", "tablet", "B2023056", 420, "25", 235, 20),
    ("Azithromycin 500mg", "Tablet (Strip of 6)", "Antibiotics", "tablet", "B2023042", 300, "90", 186, 20),
    ("Cetirizine 10mg", "Tablet (Strip of 10)", "Antiallergic", "tablet", "B2023089", 330, "30", 3, 10),
    ("Amoxicillin 250mg", "Capsule (Strip of 10)", "Antibiotics", "capsule", "B2023016", 20, "80", 12, 15),
    ("Multivitamin", "Tablet (Bottle of 30)", "Supplements", "tablet", "B2023098", 540, "150", 45, 10),
    ("Cough Syrup", "Syrup (100ml)", "Cold & Cough", "syrup", "B2023021", 45, "85", 65, 15),
]

DEMO_DOCTORS = [
    ("Dr. Sharma", "General Physician", "9876543210"),
    ("Dr. Patel", "Cardiologist", "9876543211"),
    ("Dr. Kumar", "Pediatrician", "9876543212"),
    ("Dr. Singh", "Dermatologist", "9876543213"),
    ("Dr. Gupta", "Orthopedic", "9876543214"),
]

DEMO_CUSTOMERS = [
    ("Amit Kumar", "9876543220", "amit@example.com", "123 Main St, Delhi"),
    ("Priya Sharma", "9876543221", "priya@example.com", "456 Park Ave, Mumbai"),
    ("Rahul Singh", "9876543222", "rahul@example.com", "789 Gandhi Rd, Bangalore"),
]


def create_admin_user(db: Session) -> User:
    password = settings.ADMIN_PASSWORD
    if not password:
        password = secrets.token_urlsafe(12)
        logger.warning(
            f"DEFAULT ADMIN USER CREATED - username: {settings.ADMIN_USERNAME} password: {password} "
            f"(set ADMIN_PASSWORD to choose one; change this password after first login)"
        )
    admin = User(
        username=settings.ADMIN_USERNAME,
        hashed_password=get_password_hash(password),
        name="Administrator",
        role="admin",
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def seed_demo_data(db: Session, today: date = None) -> None:
    """Insert the demo catalogue. Expiry dates are relative to today so alerts stay meaningful."""
    today = today or date.today()

    categories = {name: Category(name=name) for name in DEMO_CATEGORIES}
    db.add_all(categories.values())
    db.flush()

    for name, description, category, form, batch, expires_in, mrp, stock, threshold in DEMO_MEDICINES:
        db.add(Medicine(
            name=name,
            description=description,
            category_id=categories[category].id,
            form=form,
            batch_number=batch,
            expiry_date=today + timedelta(days=expires_in),
            mrp=Decimal(mrp),
            stock=stock,
            low_stock_threshold=threshold,
            gst_rate=settings.DEFAULT_GST_RATE,
        ))

    for name, specialization, phone in DEMO_DOCTORS:
        db.add(Doctor(name=name, specialization=specialization, phone=phone))

    for name, phone, email, address in DEMO_CUSTOMERS:
        db.add(Customer(name=name, phone=phone, email=email, address=address))

    db.commit()
    logger.info(
        f"Seeded demo data: {len(DEMO_CATEGORIES)} categories, {len(DEMO_MEDICINES)} medicines, "
        f"{len(DEMO_DOCTORS)} doctors, {len(DEMO_CUSTOMERS)} customers"
    )


def init_db():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if db.query(User).count() == 0:
            create_admin_user(db)
        if settings.SEED_DEMO_DATA and db.query(Category).count() == 0:
            seed_demo_data(db)
    finally:
        db.close()
