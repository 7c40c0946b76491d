from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from medbill.db.base import Base

ROLES = ("admin", "pharmacist", "accountant")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="pharmacist")  # admin | pharmacist | accountant
    created_at = Column(DateTime(timezone=True), server_default=func.now())
