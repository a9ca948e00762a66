"""Shared Pydantic schemas."""
from pydantic import BaseModel
from app.schemas.base import CamelModel


class PaginationInfo(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class DeleteResponse(BaseModel):
    deleted: bool = True
    id: str = ""
