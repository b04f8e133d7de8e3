"""SQLAlchemy models for the pocketbook store."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from pocketbook.domain.entities import AMOUNT_PLACES, RATE_PLACES

Base = declarative_base()


def new_id() -> str:
    """Generate a store-assigned identifier."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


class Category(Base):
    """Transaction category model."""

    __tablename__ = "categories"

    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    kind = Column(String(16), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_category_owner_name"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Income or expense transaction model."""

    __tablename__ = "transactions"

    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(String, nullable=False, index=True)
    amount = Column(Numeric(12, AMOUNT_PLACES), nullable=False)
    kind = Column(String(16), nullable=False)
    category_id = Column(String(32), ForeignKey("categories.id"), nullable=True)
    date = Column(Date, nullable=False)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    category = relationship("Category", back_populates="transactions")


class ExchangeRate(Base):
    """Monthly exchange rate model, one row per owner and month."""

    __tablename__ = "exchange_rates"

    id = Column(String(32), primary_key=True, default=new_id)
    owner_id = Column(String, nullable=False, index=True)
    month = Column(String(7), nullable=False)
    value = Column(Numeric(14, RATE_PLACES), nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("owner_id", "month", name="uq_rate_owner_month"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
