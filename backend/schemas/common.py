# backend/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# Base configuration: ORM compatibility and camelCase JSON for the SPA.
# Python code keeps snake_case, requests accept both spellings.
class ORMBase(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Pagination envelope shared by every list endpoint
class PageMeta(ORMBase):
    page: int
    limit: int
    total: int
    total_pages: int


class MessageResponse(ORMBase):
    message: str


# Short "who" reference used inside products and commands
class PersonRef(ORMBase):
    id: int
    first_name: str
    last_name: str
