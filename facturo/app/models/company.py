"""Company model: the tenant root."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from facturo.app.db.base_class import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    code_postal = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)
    bank = Column(String(255), nullable=True)
    account = Column(String(100), nullable=True)
    iban = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    users = relationship("User", back_populates="company")
    invoices = relationship("Invoice", back_populates="company")
    groups = relationship("Group", back_populates="company", cascade="all, delete-orphan")
    transfers = relationship("Transfer", back_populates="company", cascade="all, delete-orphan")

    @property
    def user_count(self) -> int:
        return len(self.users)
