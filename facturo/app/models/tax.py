"""Tax rate model. Global, shared by every tenant."""

from sqlalchemy import Column, DateTime, Float, Integer, String, func

from facturo.app.db.base_class import Base


class Tax(Base):
    __tablename__ = "taxes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    percent = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
