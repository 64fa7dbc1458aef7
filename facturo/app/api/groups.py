"""Product groups and their catalogue articles, scoped to the caller's company."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from facturo.app.core.errors import NotFound
from facturo.app.core.permissions import READ, WRITE, Policy, ensure_same_tenant
from facturo.app.crud.crud_group import group_crud
from facturo.app.db.session import get_db
from facturo.app.dependencies.auth import get_current_user, require
from facturo.app.models.group import Group
from facturo.app.models.user import User
from facturo.app.schemas.auth import MessageResponse
from facturo.app.schemas.group import ArticleCreate, ArticleRead, GroupCreate, GroupRead, GroupUpdate

router = APIRouter(prefix="/api/groups", tags=["groups"])


def _get_group(db: Session, group_id: int, current_user: User, policy: Policy) -> Group:
    group = group_crud.get(db, group_id=group_id)
    if not group:
        raise NotFound("Group not found")
    ensure_same_tenant(current_user, group.company_id, policy)
    return group


@router.get("/", response_model=list[GroupRead])
def list_groups(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", READ)),
):
    return group_crud.get_multi(db, company_id=current_user.company_id)


@router.post("/", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
def create_group(
    group_in: GroupCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", WRITE)),
):
    return group_crud.create(db, obj_in=group_in, company_id=current_user.company_id)


@router.get("/{group_id}", response_model=GroupRead)
def get_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", READ)),
):
    return _get_group(db, group_id, current_user, policy)


@router.put("/{group_id}", response_model=GroupRead)
def update_group(
    group_id: int,
    group_in: GroupUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", WRITE)),
):
    group = _get_group(db, group_id, current_user, policy)
    return group_crud.update(db, db_obj=group, obj_in=group_in)


@router.delete("/{group_id}", response_model=MessageResponse)
def delete_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", WRITE)),
):
    group = _get_group(db, group_id, current_user, policy)
    group_crud.delete(db, db_obj=group)
    return {"message": "Group deleted successfully"}


@router.post("/{group_id}/articles", response_model=ArticleRead, status_code=status.HTTP_201_CREATED)
def add_article(
    group_id: int,
    article_in: ArticleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", WRITE)),
):
    group = _get_group(db, group_id, current_user, policy)
    return group_crud.add_article(db, group=group, obj_in=article_in)


@router.put("/{group_id}/articles/{article_id}", response_model=ArticleRead)
def update_article(
    group_id: int,
    article_id: int,
    article_in: ArticleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", WRITE)),
):
    _get_group(db, group_id, current_user, policy)
    article = group_crud.get_article(db, group_id=group_id, article_id=article_id)
    if not article:
        raise NotFound("Article not found")
    return group_crud.update_article(db, db_obj=article, obj_in=article_in)


@router.delete("/{group_id}/articles/{article_id}", response_model=MessageResponse)
def delete_article(
    group_id: int,
    article_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    policy: Policy = Depends(require("groups", WRITE)),
):
    _get_group(db, group_id, current_user, policy)
    article = group_crud.get_article(db, group_id=group_id, article_id=article_id)
    if not article:
        raise NotFound("Article not found")
    group_crud.delete_article(db, db_obj=article)
    return {"message": "Article deleted successfully"}
