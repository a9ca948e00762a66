"""Files API routes: spreadsheet upload, listing, parsed data and deletion."""
import asyncio
import logging
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File as FastAPIFile
from sqlalchemy import select, desc, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, get_system_config
from app.models.file_record import FileRecord
from app.models.user import User
from app.schemas.chart import ChartSeriesData
from app.schemas.common import DeleteResponse
from app.schemas.file import FileDetailResponse, FileResponse, TableData
from app.services.aggregation import aggregate
from app.services.file_storage import file_storage
from app.services.ingestion import ParseError, parse_table, resolve_format
from app.services.records import (
    delete_file_cascade, ensure_owner_or_admin, file_to_response, get_file_or_404,
)
from app.services.system_config import SystemConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("/upload", response_model=FileDetailResponse, status_code=201)
async def upload_file(
    file: UploadFile = FastAPIFile(...),
    user: User = Depends(get_current_user),
    config: SystemConfig = Depends(get_system_config),
    db: AsyncSession = Depends(get_db),
):
    """Upload a spreadsheet, parse it and create a file record.

    Nothing is stored when the file is rejected or cannot be parsed.
    """
    original_name = file.filename or "unnamed"
    file_format = resolve_format(file.filename, file.content_type)
    if not config.allows(file_format):
        allowed = ", ".join(config.allowed_file_types)
        raise HTTPException(status_code=400, detail=f"File type not allowed. Allowed types: {allowed}")

    contents = await file.read()
    if len(contents) > config.max_file_size_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File exceeds the {config.max_file_size_mb} MB size limit",
        )

    owned = await db.scalar(
        select(func.count()).select_from(FileRecord).where(FileRecord.user_id == user.id)
    )
    if owned >= config.max_files_per_user:
        raise HTTPException(
            status_code=400,
            detail=f"File limit reached ({config.max_files_per_user} files per user)",
        )

    try:
        table = await asyncio.to_thread(parse_table, contents, file_format)
    except ParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    storage_path = await file_storage.save(contents, original_name)
    record = FileRecord(
        name=original_name,
        original_name=original_name,
        mime_type=file.content_type,
        size_bytes=len(contents),
        storage_path=storage_path,
        row_count=table.row_count,
        column_count=table.column_count,
        data=table.to_dict(),
        user_id=user.id,
    )
    db.add(record)
    try:
        await db.commit()
    except Exception:
        await file_storage.delete(storage_path)
        raise
    await db.refresh(record)

    logger.info(
        "User %s uploaded %s (%d rows x %d columns)",
        user.id, original_name, table.row_count, table.column_count,
    )
    return file_to_response(record, include_data=True)


@router.get("", response_model=list[FileResponse])
async def list_files(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's files, newest first."""
    result = await db.execute(
        select(FileRecord)
        .where(FileRecord.user_id == user.id)
        .order_by(desc(FileRecord.created_at))
    )
    return [file_to_response(f) for f in result.scalars().all()]


@router.get("/{file_id}", response_model=FileDetailResponse)
async def get_file(
    file_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a file record including its parsed table."""
    file_rec = await get_file_or_404(db, file_id)
    ensure_owner_or_admin(file_rec.user_id, user, "access this file")
    return file_to_response(file_rec, include_data=True)


@router.get("/{file_id}/data", response_model=TableData)
async def get_file_data(
    file_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get only the parsed headers and rows of a file."""
    file_rec = await get_file_or_404(db, file_id)
    ensure_owner_or_admin(file_rec.user_id, user, "access this file")
    return file_to_response(file_rec, include_data=True)["data"]


@router.get("/{file_id}/series", response_model=ChartSeriesData)
async def preview_series(
    file_id: UUID,
    x_axis: str = Query(..., alias="xAxis", min_length=1),
    y_axis: str = Query(..., alias="yAxis", min_length=1),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Aggregate a file's rows for a chart preview without saving anything."""
    file_rec = await get_file_or_404(db, file_id)
    ensure_owner_or_admin(file_rec.user_id, user, "access this file")
    return aggregate((file_rec.data or {}).get("rows", []), x_axis, y_axis).to_dict()


@router.delete("/{file_id}", response_model=DeleteResponse)
async def delete_file(
    file_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a file, its stored bytes and every chart built from it."""
    file_rec = await get_file_or_404(db, file_id)
    ensure_owner_or_admin(file_rec.user_id, user, "delete this file")

    storage_path = await delete_file_cascade(db, file_rec)
    await db.commit()
    await file_storage.delete(storage_path)
    return {"deleted": True, "id": str(file_id)}
