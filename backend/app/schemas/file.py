"""File request/response schemas."""
import uuid
from typing import Any, Optional
from datetime import datetime
from app.schemas.base import CamelModel
from app.schemas.common import PaginationInfo


class TableData(CamelModel):
    headers: list[str] = []
    rows: list[dict[str, Any]] = []


class FileResponse(CamelModel):
    id: uuid.UUID
    name: str
    original_name: str
    mime_type: Optional[str] = None
    size_bytes: int
    row_count: int
    column_count: int
    headers: list[str] = []
    user_id: uuid.UUID
    uploaded_at: datetime
    last_modified: datetime


class FileDetailResponse(FileResponse):
    data: TableData


class OwnerSummary(CamelModel):
    id: uuid.UUID
    name: str
    email: str


class AdminFileResponse(FileResponse):
    owner: Optional[OwnerSummary] = None


class AdminFilePage(CamelModel):
    data: list[AdminFileResponse]
    pagination: PaginationInfo
