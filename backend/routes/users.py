# backend/routes/users.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.common import MessageResponse
from schemas.user import UserCreate, UserOut, UserPage, UserUpdate
from utils.audit import write_log, client_ip
from utils.hashing import get_password_hash
from utils.pagination import paginate

# Base user routes stay open so the first account can be created from the SPA
router = APIRouter(prefix="/users", tags=["Users"])


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found")
    return user


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(User).filter(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, request: Request, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(email=email, password_hash=get_password_hash(payload.password), username=payload.username)
    db.add(user)
    db.commit()
    db.refresh(user)

    write_log(db, user_id=None, action="USER_CREATE", resource="users",
              ip=client_ip(request), meta={"id": user.id, "email": user.email})
    return user


@router.get("", response_model=UserPage)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = Query(None, description="Search by email or username"),
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(User.email.ilike(like), User.username.ilike(like)))
    query = query.order_by(User.created_at.desc(), User.id.desc())
    return paginate(query, page, limit)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return _get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, request: Request, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, user_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("email"):
        email = changes["email"].strip().lower()
        if _email_taken(db, email, exclude_id=user.id):
            raise HTTPException(status_code=409, detail="Email already registered")
        user.email = email
    if changes.get("password"):
        user.password_hash = get_password_hash(changes["password"])
    if "username" in changes:
        user.username = changes["username"]

    db.commit()
    db.refresh(user)
    write_log(db, user_id=None, action="USER_UPDATE", resource="users",
              ip=client_ip(request), meta={"id": user.id, "fields": sorted(changes)})
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, request: Request, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()
    write_log(db, user_id=None, action="USER_DELETE", resource="users",
              ip=client_ip(request), meta={"id": user_id})
    return {"message": "User deleted successfully"}
