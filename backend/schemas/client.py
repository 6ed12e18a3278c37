# backend/schemas/client.py
from datetime import datetime
from typing import List, Optional
from pydantic import EmailStr, Field

from schemas.common import ORMBase, PageMeta


# Shared contact attributes of clients and co-clients
class ContactBase(ORMBase):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    email: EmailStr
    phone_number: str = Field(..., min_length=1)


class ContactUpdate(ORMBase):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, min_length=1)


class ClientCreate(ContactBase):
    pass


class ClientUpdate(ContactUpdate):
    pass


class ClientOut(ORMBase):
    id: int
    first_name: str
    last_name: str
    address: str
    email: str
    phone_number: str
    created_at: Optional[datetime] = None


class ClientPage(PageMeta):
    data: List[ClientOut]


class CoClientCreate(ContactBase):
    rib: str = Field(..., min_length=1, description="Bank account (RIB)")


class CoClientUpdate(ContactUpdate):
    rib: Optional[str] = Field(None, min_length=1)


class CoClientOut(ClientOut):
    rib: str


class CoClientPage(PageMeta):
    data: List[CoClientOut]
