# backend/schemas/product.py
from datetime import datetime
from typing import List, Optional
from pydantic import Field

from schemas.common import ORMBase, PageMeta, PersonRef
from schemas.category import CategoryRef


class ProductPhotoOut(ORMBase):
    id: int
    product_id: int
    photo_doc: str
    created_at: Optional[datetime] = None


# Legacy batch insert of already encoded photos (data URIs or URLs)
class ProductPhotoBatch(ORMBase):
    product_id: int
    photo_docs: List[str] = Field(..., min_length=1)


class ProductPhotoBatchResult(ORMBase):
    count: int


# Schema for creating a new product
class ProductCreate(ORMBase):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    sale_price: float = Field(..., ge=0)
    # Required for owned stock, ignored for dépôt products
    purchase_price: Optional[float] = Field(None, ge=0)
    stock_quantity: int = Field(0, ge=0)
    is_depot: bool = False
    depot_percentage: Optional[float] = Field(None, ge=0, le=100)
    surcharge: Optional[float] = Field(0, ge=0)
    category_id: int
    co_client_id: Optional[int] = None


# Schema for partial product updates.
# Only the fields present in the request are merged (model_dump(exclude_unset=True)).
class ProductUpdate(ORMBase):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    sale_price: Optional[float] = Field(None, ge=0)
    purchase_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    is_depot: Optional[bool] = None
    depot_percentage: Optional[float] = Field(None, ge=0, le=100)
    surcharge: Optional[float] = Field(None, ge=0)
    category_id: Optional[int] = None
    co_client_id: Optional[int] = None


class ProductOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    sale_price: float
    purchase_price: Optional[float] = None
    stock_quantity: int
    is_depot: bool
    depot_percentage: Optional[float] = None
    surcharge: float
    gain: float
    is_available: bool
    is_sold: bool = False
    category_id: int
    co_client_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    co_client: Optional[PersonRef] = None
    photos: List[ProductPhotoOut] = []
    created_at: Optional[datetime] = None


# Paginated response for product listings
class ProductPage(PageMeta):
    data: List[ProductOut]
