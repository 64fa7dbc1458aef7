"""CRUD operations for groups and their articles."""

from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from facturo.app.models.group import Article, Group
from facturo.app.schemas.group import ArticleCreate, GroupCreate, GroupUpdate


class CRUDGroup:
    def create(self, db: Session, *, obj_in: GroupCreate, company_id: int) -> Group:
        obj = Group(company_id=company_id, **obj_in.model_dump())
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    def get(self, db: Session, *, group_id: int) -> Optional[Group]:
        return db.query(Group).filter(Group.id == group_id).first()

    def get_multi(self, db: Session, *, company_id: int) -> List[Group]:
        return (
            db.query(Group)
            .options(selectinload(Group.articles))
            .filter(Group.company_id == company_id)
            .order_by(Group.name.asc(), Group.id.asc())
            .all()
        )

    def update(self, db: Session, *, db_obj: Group, obj_in: GroupUpdate) -> Group:
        update_data = obj_in.model_dump(exclude_unset=True)
        if update_data.get("name", "") is None:
            update_data.pop("name")
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, *, db_obj: Group) -> Group:
        db.delete(db_obj)
        db.commit()
        return db_obj

    def get_article(self, db: Session, *, group_id: int, article_id: int) -> Optional[Article]:
        return db.query(Article).filter(Article.id == article_id, Article.group_id == group_id).first()

    def add_article(self, db: Session, *, group: Group, obj_in: ArticleCreate) -> Article:
        article = Article(group_id=group.id, **obj_in.model_dump())
        db.add(article)
        db.commit()
        db.refresh(article)
        return article

    def update_article(self, db: Session, *, db_obj: Article, obj_in: ArticleCreate) -> Article:
        for field, value in obj_in.model_dump().items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def delete_article(self, db: Session, *, db_obj: Article) -> Article:
        db.delete(db_obj)
        db.commit()
        return db_obj


group_crud = CRUDGroup()
