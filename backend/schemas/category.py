# backend/schemas/category.py
from datetime import datetime
from typing import List, Optional
from pydantic import Field

from schemas.common import ORMBase, PageMeta


class CategoryCreate(ORMBase):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


# PATCH payload - all fields optional
class CategoryUpdate(ORMBase):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class CategoryRef(ORMBase):
    id: int
    name: str


class CategoryOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryPage(PageMeta):
    data: List[CategoryOut]
