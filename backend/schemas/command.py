# backend/schemas/command.py
from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator

from models.command import CommandStatus
from schemas.common import ORMBase, PageMeta, PersonRef


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class CommandCreate(ORMBase):
    product_ids: List[int] = Field(..., min_length=1)
    client_id: int
    co_client_id: Optional[int] = None
    # Derived from the referenced products when omitted
    products_number: Optional[int] = Field(None, ge=1)
    sale_price: Optional[float] = Field(None, ge=0)
    purchase_price: Optional[float] = Field(None, ge=0)
    status: CommandStatus = CommandStatus.NOT_DELIVERED
    delivery_date: Optional[datetime] = None
    delivery_address: str

    @field_validator("delivery_address")
    @classmethod
    def check_address(cls, value):
        return _not_blank(value)


# PATCH payload. Status changes go through services.command_lifecycle.
class CommandUpdate(ORMBase):
    products_number: Optional[int] = Field(None, ge=1)
    sale_price: Optional[float] = Field(None, ge=0)
    purchase_price: Optional[float] = Field(None, ge=0)
    status: Optional[CommandStatus] = None
    delivery_date: Optional[datetime] = None
    delivery_address: Optional[str] = None

    @field_validator("delivery_address")
    @classmethod
    def check_address(cls, value):
        return _not_blank(value)


class CommandProductRef(ORMBase):
    id: int
    name: str
    sale_price: float
    is_available: bool


class CommandDetailOut(ORMBase):
    id: int
    product_id: int
    client_id: int
    co_client_id: Optional[int] = None
    product: Optional[CommandProductRef] = None
    client: Optional[PersonRef] = None
    co_client: Optional[PersonRef] = None


class CommandOut(ORMBase):
    id: int
    products_number: int
    sale_price: float
    purchase_price: float
    status: CommandStatus
    delivery_address: str
    delivery_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    details: List[CommandDetailOut] = []


class CommandPage(PageMeta):
    data: List[CommandOut]
