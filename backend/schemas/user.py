# backend/schemas/user.py
from datetime import datetime
from typing import List, Optional
from pydantic import EmailStr, Field

from schemas.common import ORMBase, PageMeta


# Schema for user authentication credentials
class UserLogin(ORMBase):
    email: EmailStr
    password: str


class UserCreate(ORMBase):
    email: EmailStr
    password: str = Field(..., min_length=6)
    username: Optional[str] = None


class UserUpdate(ORMBase):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    username: Optional[str] = None


# Output schema, never exposes the password hash
class UserOut(ORMBase):
    id: int
    email: str
    username: Optional[str] = None
    created_at: Optional[datetime] = None


class UserPage(PageMeta):
    data: List[UserOut]


# Schema for JWT authentication token response
class Token(ORMBase):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
