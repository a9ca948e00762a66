"""Charts API routes."""
import logging
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.models.chart import Chart
from app.models.file_record import FileRecord
from app.models.user import User
from app.schemas.chart import ChartCreate, ChartResponse, ChartUpdate
from app.schemas.common import DeleteResponse
from app.services.aggregation import aggregate
from app.services.records import chart_to_response, ensure_owner_or_admin, get_chart_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/charts", tags=["charts"])


@router.post("", response_model=ChartResponse, status_code=201)
async def create_chart(
    body: ChartCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a chart over one of the user's files. The series is derived server-side."""
    file_rec = await db.get(FileRecord, body.file_id)
    if not file_rec:
        raise HTTPException(status_code=404, detail="File not found")
    if file_rec.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to use this file")

    series = aggregate((file_rec.data or {}).get("rows", []), body.x_axis, body.y_axis)
    chart = Chart(
        title=body.title,
        type=body.type,
        file_id=file_rec.id,
        x_axis=body.x_axis,
        y_axis=body.y_axis,
        data=series.to_dict(),
        user_id=user.id,
    )
    db.add(chart)
    await db.commit()
    await db.refresh(chart)
    logger.info("User %s created %s chart %s on file %s", user.id, chart.type, chart.id, file_rec.id)
    return chart_to_response(chart, file_rec.name)


@router.get("", response_model=list[ChartResponse])
async def list_charts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's charts, newest first."""
    result = await db.execute(
        select(Chart, FileRecord.name)
        .outerjoin(FileRecord, Chart.file_id == FileRecord.id)
        .where(Chart.user_id == user.id)
        .order_by(desc(Chart.created_at))
    )
    return [chart_to_response(chart, file_name) for chart, file_name in result.all()]


@router.get("/{chart_id}", response_model=ChartResponse)
async def get_chart(
    chart_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a single chart. Owners and admins only."""
    chart = await get_chart_or_404(db, chart_id)
    ensure_owner_or_admin(chart.user_id, user, "access this chart")
    file_rec = await db.get(FileRecord, chart.file_id)
    return chart_to_response(chart, file_rec.name if file_rec else None)


@router.put("/{chart_id}", response_model=ChartResponse)
async def update_chart(
    chart_id: UUID,
    body: ChartUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update title, type or axes. Changing an axis re-derives the series."""
    chart = await get_chart_or_404(db, chart_id)
    if chart.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not authorized to update this chart")

    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    axes_changed = any(
        key in update_data and update_data[key] != getattr(chart, key)
        for key in ("x_axis", "y_axis")
    )
    for key, value in update_data.items():
        setattr(chart, key, value)

    file_rec = await db.get(FileRecord, chart.file_id)
    if axes_changed and file_rec:
        series = aggregate((file_rec.data or {}).get("rows", []), chart.x_axis, chart.y_axis)
        chart.data = series.to_dict()

    await db.commit()
    await db.refresh(chart)
    return chart_to_response(chart, file_rec.name if file_rec else None)


@router.delete("/{chart_id}", response_model=DeleteResponse)
async def delete_chart(
    chart_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a chart. The source file is left untouched."""
    chart = await get_chart_or_404(db, chart_id)
    ensure_owner_or_admin(chart.user_id, user, "delete this chart")

    await db.delete(chart)
    await db.commit()
    return {"deleted": True, "id": str(chart_id)}
