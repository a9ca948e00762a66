"""Record helpers shared by the user and admin routes.

Response conversion, ownership checks, cascading deletes and admin-list
pagination. Cascades are explicit: the database has no ON DELETE rules.
"""
import logging
import math
from typing import Any, Optional

from fastapi import HTTPException
from pydantic.alias_generators import to_snake
from sqlalchemy import Select, asc, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.chart import Chart
from app.models.file_record import FileRecord
from app.models.user import User
from app.services.file_storage import file_storage

logger = logging.getLogger(__name__)

# Columns never offered as sort keys
_UNSORTABLE = {"data", "password_hash"}


def file_to_response(file_rec: FileRecord, include_data: bool = False) -> dict:
    """Convert SQLAlchemy model to response dict."""
    data = file_rec.data or {}
    response = {
        "id": file_rec.id,
        "name": file_rec.name,
        "original_name": file_rec.original_name,
        "mime_type": file_rec.mime_type,
        "size_bytes": file_rec.size_bytes,
        "row_count": file_rec.row_count,
        "column_count": file_rec.column_count,
        "headers": data.get("headers", []),
        "user_id": file_rec.user_id,
        "uploaded_at": file_rec.created_at,
        "last_modified": file_rec.updated_at,
    }
    if include_data:
        response["data"] = {"headers": data.get("headers", []), "rows": data.get("rows", [])}
    return response


def chart_to_response(chart: Chart, file_name: Optional[str] = None) -> dict:
    """Convert SQLAlchemy model to response dict."""
    return {
        "id": chart.id,
        "title": chart.title,
        "type": chart.type,
        "file_id": chart.file_id,
        "file_name": file_name,
        "x_axis": chart.x_axis,
        "y_axis": chart.y_axis,
        "data": chart.data or {"labels": [], "values": []},
        "user_id": chart.user_id,
        "created_at": chart.created_at,
        "updated_at": chart.updated_at,
    }


def user_to_response(user: User) -> dict:
    """Convert SQLAlchemy model to response dict (never includes the password hash)."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "last_login": user.last_login,
        "created_at": user.created_at,
    }


def owner_summary(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def ensure_owner_or_admin(owner_id: Any, user: User, action: str) -> None:
    """Raise 403 unless `user` owns the record or is an admin."""
    if owner_id != user.id and user.role != "admin":
        raise HTTPException(status_code=403, detail=f"Not authorized to {action}")


async def get_file_or_404(db: AsyncSession, file_id) -> FileRecord:
    file_rec = await db.get(FileRecord, file_id)
    if not file_rec:
        raise HTTPException(status_code=404, detail="File not found")
    return file_rec


async def get_chart_or_404(db: AsyncSession, chart_id) -> Chart:
    chart = await db.get(Chart, chart_id)
    if not chart:
        raise HTTPException(status_code=404, detail="Chart not found")
    return chart


async def delete_file_cascade(db: AsyncSession, file_rec: FileRecord) -> str:
    """Delete a file record and its charts. Returns the storage path of its bytes.

    The caller removes the bytes only after its commit succeeds.
    """
    result = await db.execute(delete(Chart).where(Chart.file_id == file_rec.id))
    await db.delete(file_rec)
    logger.info("Deleted file %s and %d chart(s)", file_rec.id, result.rowcount)
    return file_rec.storage_path


async def delete_user_cascade(db: AsyncSession, user: User) -> list[str]:
    """Delete a user with all of their files and charts.

    Returns the storage paths to remove once the caller has committed.
    """
    files = (await db.execute(
        select(FileRecord).where(FileRecord.user_id == user.id)
    )).scalars().all()

    # Charts owned by the user, plus anyone's charts that point at the user's files
    await db.execute(delete(Chart).where(Chart.user_id == user.id))
    storage_paths = [await delete_file_cascade(db, file_rec) for file_rec in files]
    await db.flush()

    await db.delete(user)
    logger.info("Deleted user %s with %d file(s)", user.id, len(files))
    return storage_paths


async def remove_stored_files(storage_paths: list[str]) -> None:
    for path in storage_paths:
        await file_storage.delete(path)


def resolve_sort(model, sort_by: Optional[str], default: str, aliases: Optional[dict] = None):
    """Map an API sort key (camelCase or snake_case) to a column; unknown keys use `default`."""
    aliases = aliases or {}
    name = default
    if sort_by:
        candidate = aliases.get(sort_by, to_snake(sort_by))
        if candidate in model.__table__.columns and candidate not in _UNSORTABLE:
            name = candidate
    return model.__table__.columns[name]


def apply_sort(query: Select, column, sort_order: Optional[str]) -> Select:
    """Ascending only when sort_order == "asc"; anything else sorts descending."""
    return query.order_by(asc(column) if sort_order == "asc" else desc(column))


async def paginate(db: AsyncSession, query: Select, page: int, limit: int) -> tuple[list, dict]:
    """Run `query` for one page. Returns (rows, pagination dict)."""
    total = await db.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
    result = await db.execute(query.limit(limit).offset((page - 1) * limit))
    pagination = {
        "page": page,
        "limit": limit,
        "total": total or 0,
        "pages": math.ceil((total or 0) / limit),
    }
    return result.all(), pagination
