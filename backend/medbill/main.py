"""
MedBill backend - pharmacy inventory, billing and reporting API.

ARCHITECTURE:
- FastAPI routers under /api: auth, catalogue, customers, invoices, analytics
- SQLAlchemy models, SQLite by default
- Service layer owns all storage access and the POS cart arithmetic
- Session token in an httpOnly cookie
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medbill.api.routes import (
    analytics,
    auth,
    categories,
    customers,
    doctors,
    invoices,
    medicines,
    prescriptions,
    reports,
    users,
)
from medbill.core.config import settings
from medbill.core.exceptions import register_exception_handlers
from medbill.db.init_db import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: create tables, bootstrap the admin user and demo data.
    """
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="MedBill API",
    description="Pharmacy inventory, point of sale, prescriptions and reports.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    max_age=600,
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
app.include_router(medicines.router, prefix="/api/medicines", tags=["medicines"])
app.include_router(customers.router, prefix="/api/customers", tags=["customers"])
app.include_router(doctors.router, prefix="/api/doctors", tags=["doctors"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["invoices"])
app.include_router(invoices.cart_router, prefix="/api/cart", tags=["pos"])
app.include_router(prescriptions.router, prefix="/api/prescriptions", tags=["prescriptions"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])


@app.get("/health")
def health():
    return {"status": "ok"}
