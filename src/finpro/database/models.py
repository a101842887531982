"""SQLAlchemy models for finpro database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Balance-holding account model."""

    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String(16), nullable=False)
    balance = Column(Numeric(14, 2), nullable=False, default=0)
    color = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship(
        "Transaction", back_populates="account", foreign_keys="Transaction.account_id"
    )


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(String(32), primary_key=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(32), primary_key=True)
    amount = Column(Numeric(14, 2), nullable=False)
    category_id = Column(String(32), ForeignKey("categories.id"), nullable=False)
    account_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)
    target_account_id = Column(String(32), ForeignKey("accounts.id"), nullable=True)
    debt_id = Column(String(32), ForeignKey("debts.id"), nullable=True)
    description = Column(String, nullable=False, default="")
    date = Column(Date, nullable=False)
    type = Column(String(16), nullable=False)
    attachments = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions", foreign_keys=[account_id])


class Debt(Base):
    """Debt model."""

    __tablename__ = "debts"

    id = Column(String(32), primary_key=True)
    name = Column(String, nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    remaining_amount = Column(Numeric(14, 2), nullable=False)
    overpaid_amount = Column(Numeric(14, 2), nullable=False, default=0)
    interest_rate = Column(Numeric(6, 3), nullable=True)
    due_date = Column(Date, nullable=True)
    type = Column(String(16), nullable=False)
    icon = Column(String, nullable=False)
    color = Column(String, nullable=False)


class Obligation(Base):
    """Scheduled payment model."""

    __tablename__ = "obligations"

    id = Column(String(32), primary_key=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category_id = Column(String(32), ForeignKey("categories.id"), nullable=False)
    account_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)
    due_date = Column(Date, nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)


class Budget(Base):
    """Per-category spending limit model."""

    __tablename__ = "budgets"

    category_id = Column(String(32), ForeignKey("categories.id"), primary_key=True)
    limit = Column(Numeric(14, 2), nullable=False)


class Settings(Base):
    """Single-row user settings model."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    user_name = Column(String, nullable=False)
    currency = Column(String, nullable=False)
    primary_color = Column(String, nullable=False)
    secondary_color = Column(String, nullable=False)
    accent_color = Column(String, nullable=False)
    logo = Column(String, nullable=True)
    ai_api_key = Column(String, nullable=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
