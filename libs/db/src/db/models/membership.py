from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: civicrm_contact
# ---------------------------


class Contact(Base):
    __tablename__ = "civicrm_contact"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contact_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sort_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)


# ---------------------------
# Entity: civicrm_membership
# ---------------------------


class Membership(Base):
    __tablename__ = "civicrm_membership"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Memberships may outlive their contact (merged/deleted contacts), so the
    # reference is optional and reports must outer-join it.
    contact_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("civicrm_contact.id", ondelete="SET NULL"), nullable=True
    )
    membership_type_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)


# ---------------------------------------
# Category: civicrm_price_field_value
# ---------------------------------------


class PriceFieldValue(Base):
    __tablename__ = "civicrm_price_field_value"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    price_field_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Short machine name; ``label`` is the human-facing title and may be blank.
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 9), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))


# ---------------------------------
# Transaction line: civicrm_line_item
# ---------------------------------


class LineItem(Base):
    __tablename__ = "civicrm_line_item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Polymorphic owner: ``entity_table`` names the owning table (e.g.
    # ``civicrm_membership``) and ``entity_id`` its row. No FK is declared
    # because the target table varies per row.
    entity_table: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    price_field_value_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("civicrm_price_field_value.id"), nullable=True
    )
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    qty: Mapped[Decimal] = mapped_column(Numeric(20, 2), nullable=False, server_default=text("1"))
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(20, 2), nullable=False, server_default=text("0")
    )
    line_total: Mapped[Decimal] = mapped_column(
        Numeric(20, 2), nullable=False, server_default=text("0")
    )

    __table_args__ = (Index("ix_civicrm_line_item_entity", "entity_table", "entity_id"),)


__all__ = [
    "Base",
    "Contact",
    "Membership",
    "PriceFieldValue",
    "LineItem",
]
