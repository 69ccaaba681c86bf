from __future__ import annotations

import datetime as dt
import enum
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from cisops.db.base_class import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class SubmissionStatus(str, enum.Enum):
    SUBMITTED = "submitted"


submission_invoices = Table(
    "submission_invoices",
    Base.metadata,
    Column("submission_id", ForeignKey("submission.id", ondelete="CASCADE"), primary_key=True),
    Column("invoice_id", ForeignKey("invoice.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    # Values: 'user', 'admin'
    role: Mapped[str] = mapped_column(String(20), default=UserRole.USER.value, server_default="user", index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    subcontractors: Mapped[list[Subcontractor]] = relationship("Subcontractor", back_populates="user")  # type: ignore


class Subcontractor(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(120), index=True)
    company: Mapped[str] = mapped_column(String(200))
    line1: Mapped[str] = mapped_column(String(200))
    line2: Mapped[str | None] = mapped_column(String(200), nullable=True)
    city: Mapped[str] = mapped_column(String(100))
    county: Mapped[str] = mapped_column(String(100))
    postal_code: Mapped[str] = mapped_column(String(20))
    cis_number: Mapped[str] = mapped_column(String(40))
    utr_number: Mapped[str] = mapped_column(String(20))
    vat_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_gross: Mapped[bool] = mapped_column(default=False)
    # CIS deduction rate: 0 (gross), 0.2 (registered) or 0.3 (higher rate)
    deduction: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=Decimal("0.2"))
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    user: Mapped[User | None] = relationship("User", back_populates="subcontractors")  # type: ignore
    invoices: Mapped[list[Invoice]] = relationship(
        "Invoice",
        back_populates="subcontractor",
        cascade="all, delete-orphan",
        order_by="Invoice.invoice_date",
    )  # type: ignore


class Invoice(Base):
    __table_args__ = (
        UniqueConstraint("subcontractor_id", "invoice_number", name="uq_invoice_subcontractor_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    subcontractor_id: Mapped[int] = mapped_column(ForeignKey("subcontractor.id", ondelete="CASCADE"), index=True)
    invoice_number: Mapped[str] = mapped_column(String(60))
    kashflow_number: Mapped[str] = mapped_column(String(60), index=True)
    invoice_date: Mapped[dt.date] = mapped_column(Date)
    remittance_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    labour_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    material_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    # Amounts computed from the subcontractor's deduction status at write time
    cis_rate: Mapped[Decimal] = mapped_column(Numeric(3, 2))
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    cis_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    net_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    reverse_charge: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    # Return period the invoice belongs to (period starting the 6th of month/year)
    month: Mapped[int] = mapped_column(Integer, index=True)
    year: Mapped[int] = mapped_column(Integer, index=True)
    submission_date: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    subcontractor: Mapped[Subcontractor] = relationship("Subcontractor", back_populates="invoices")  # type: ignore
    submissions: Mapped[list[Submission]] = relationship(
        "Submission",
        secondary=submission_invoices,
        back_populates="invoices",
    )  # type: ignore


class Submission(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    month: Mapped[int] = mapped_column(Integer, index=True)
    year: Mapped[int] = mapped_column(Integer, index=True)
    status: Mapped[str] = mapped_column(String(20), default=SubmissionStatus.SUBMITTED.value)
    submitted_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    submitted_by_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )
    invoice_count: Mapped[int] = mapped_column(Integer, default=0)
    total_gross: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    total_cis: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    total_net: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    invoices: Mapped[list[Invoice]] = relationship(
        "Invoice",
        secondary=submission_invoices,
        back_populates="submissions",
        order_by="Invoice.kashflow_number",
    )  # type: ignore
    submitted_by: Mapped[User | None] = relationship("User")  # type: ignore
