"""Invoice model covering invoices, credit notes (avoir) and quotes (devis)."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from facturo.app.db.base_class import Base

INVOICE_TYPES = ("invoice", "avoir", "devis")


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint("company_id", "ref", name="uq_invoices_company_ref"),)

    id = Column(Integer, primary_key=True, index=True)
    ref = Column(String(50), nullable=False, index=True)
    type = Column(String(10), nullable=False, default="invoice")
    wording = Column(String(255), nullable=True)
    commentary = Column(Text, nullable=True)

    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    valid_until = Column(DateTime(timezone=True), nullable=True)

    subscription = Column(Boolean, nullable=False, default=False)
    subscription_months = Column(JSON, nullable=True)
    month = Column(Integer, nullable=True)

    total_ht = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)

    # Independent flags, not a status lifecycle
    paid = Column(Boolean, nullable=False, default=False)
    archived = Column(Boolean, nullable=False, default=False)
    payment_date = Column(DateTime(timezone=True), nullable=True)
    last_payment_method = Column(String(50), nullable=True)

    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    company = relationship("Company", back_populates="invoices")
    client = relationship("User", back_populates="client_invoices", foreign_keys=[client_id])
    employee = relationship("User", back_populates="employee_invoices", foreign_keys=[employee_id])
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan", order_by="InvoiceItem.id")
    transfers = relationship("Transfer", secondary="transfer_invoices", back_populates="invoices")
