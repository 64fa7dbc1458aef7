"""Product groups and the catalogue articles they hold."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from facturo.app.db.base_class import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    account = Column(String(100), nullable=True)
    color = Column(String(20), nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="groups")
    articles = relationship("Article", back_populates="group", cascade="all, delete-orphan", order_by="Article.id")

    @property
    def article_count(self) -> int:
        return len(self.articles)


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    code = Column(String(50), nullable=True)
    intern_ref = Column(String(50), nullable=True)
    unite = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)
    tax = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    group = relationship("Group", back_populates="articles")
