from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: categories
# ---------------------------


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Stored with the casing of its first use; lookups compare lower(name). The unique
    # constraint is the conflict target for the importer's get-or-create.
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    color: Mapped[str] = mapped_column(
        String(7), nullable=False, server_default=text("'#6b7280'")
    )

    __table_args__ = (
        CheckConstraint("kind in ('income','expense')", name="ck_categories_kind"),
    )


# ---------------------------
# Core: transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Magnitude only; the direction of money flow comes from the category kind.
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(
        String(255), nullable=False, server_default=text("''")
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_recurring: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    recurring_interval: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "recurring_interval IS NULL OR "
            "recurring_interval in ('daily','weekly','monthly','yearly')",
            name="ck_transactions_recurring_interval",
        ),
        # Non-unique lookup index for the import deduplication check.
        Index("ix_transactions_dedup", "date", "amount", "description"),
    )


__all__ = [
    "Base",
    "Category",
    "Transaction",
]
