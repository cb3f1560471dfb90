"""
SQLAlchemy database models for the invoice management application.

This module defines the ORM models for persisting users, invoices
and invoice line items.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class InvoiceStatus(enum.Enum):
    """Payment status of an invoice."""

    PAID = "Paid"
    UNPAID = "Unpaid"


class User(Base):
    """
    Registered account.

    Owns invoices and carries the business details used as the
    default "bill from" party.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    business_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    address: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    phone: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationships
    invoices: Mapped[list["Invoice"]] = relationship(
        "Invoice",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class Invoice(Base):
    """
    A persisted invoice.

    Bill-from and bill-to parties are stored as JSON documents
    ({businessName|clientName, email, address, phone}).
    """

    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invoice_number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    invoice_date: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    bill_from: Mapped[dict] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
    bill_to: Mapped[dict] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    payment_terms: Mapped[str] = mapped_column(
        String(100),
        default="Net 15",
        nullable=False,
    )
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(InvoiceStatus),
        default=InvoiceStatus.UNPAID,
        nullable=False,
        index=True,
    )
    subtotal: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
    )
    tax_total: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
    )
    total: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationships
    user: Mapped[User] = relationship(
        "User",
        back_populates="invoices",
    )
    items: Mapped[list["InvoiceItem"]] = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position",
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number='{self.invoice_number}', total={self.total})>"


class InvoiceItem(Base):
    """A single line item on an invoice."""

    __tablename__ = "invoice_items"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    quantity: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    unit_price: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    tax_percent: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
    )
    total: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )

    invoice: Mapped[Invoice] = relationship(
        "Invoice",
        back_populates="items",
    )

    def __repr__(self) -> str:
        return f"<InvoiceItem(name='{self.name}', quantity={self.quantity}, unit_price={self.unit_price})>"
