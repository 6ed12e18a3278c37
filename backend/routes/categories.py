# backend/routes/categories.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category
from schemas.category import CategoryCreate, CategoryOut, CategoryPage, CategoryUpdate
from schemas.common import MessageResponse
from utils.audit import write_log, client_ip
from utils.pagination import paginate

router = APIRouter(prefix="/categories", tags=["Categories"])


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail=f"Category with ID {category_id} not found")
    return category


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryCreate, request: Request, db: Session = Depends(get_db)):
    category = Category(**payload.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    write_log(db, user_id=None, action="CATEGORY_CREATE", resource="categories",
              ip=client_ip(request), meta={"id": category.id, "name": category.name})
    return category


@router.get("", response_model=CategoryPage)
def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = Query(None, description="Search by name or description"),
    db: Session = Depends(get_db),
):
    query = db.query(Category)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Category.name.ilike(like), Category.description.ilike(like)))
    query = query.order_by(Category.created_at.desc(), Category.id.desc())
    return paginate(query, page, limit)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _get_category_or_404(db, category_id)


@router.patch("/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryUpdate, request: Request, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is None:
        del changes["name"]
    for key, value in changes.items():
        setattr(category, key, value)
    db.commit()
    db.refresh(category)
    write_log(db, user_id=None, action="CATEGORY_UPDATE", resource="categories",
              ip=client_ip(request), meta={"id": category.id})
    return category


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(category_id: int, request: Request, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    try:
        db.delete(category)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Category still has products")
    write_log(db, user_id=None, action="CATEGORY_DELETE", resource="categories",
              ip=client_ip(request), meta={"id": category_id})
    return {"message": "Category deleted successfully"}
