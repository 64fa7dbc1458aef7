"""Invoice line items. `tax` is the rate snapshot taken when the line was written."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from facturo.app.db.base_class import Base


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="SET NULL"), nullable=True)
    product = Column(String(255), nullable=False)
    intern_ref = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    unite = Column(String(20), nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    discount = Column(Float, nullable=False, default=0)
    tax = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    invoice = relationship("Invoice", back_populates="items")
    group = relationship("Group")
