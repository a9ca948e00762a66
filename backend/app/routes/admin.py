"""Admin API routes: dashboard stats, user/file/chart management, system settings.

Every route except /login requires a user with the "admin" role.
List routes take page, limit, search, sortBy and sortOrder query parameters.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, desc, func, extract, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_config_store, require_admin
from app.models.chart import Chart
from app.models.file_record import FileRecord
from app.models.system_settings import SystemSettings
from app.models.user import User
from app.routes.auth import authenticate, token_response
from app.schemas.admin import AdminStatsResponse, UserDetailResponse
from app.schemas.chart import AdminChartPage, ChartResponse
from app.schemas.common import DeleteResponse
from app.schemas.file import AdminFilePage
from app.schemas.system_settings import SystemSettingsResponse, SystemSettingsUpdate
from app.schemas.user import (
    AdminCreate, AdminProfileUpdate, LoginRequest, TokenResponse, UserPage, UserResponse,
)
from app.services.records import (
    apply_sort, chart_to_response, delete_file_cascade, delete_user_cascade, file_to_response,
    get_chart_or_404, get_file_or_404, owner_summary, paginate, remove_stored_files, resolve_sort,
    user_to_response,
)
from app.services.security import hash_password, verify_password
from app.services.system_config import SystemConfigStore, load_settings_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

# API sort keys that differ from the column names
_FILE_SORT_ALIASES = {"uploadedAt": "created_at", "lastModified": "updated_at", "size": "size_bytes"}


# ── Auth & profile ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def admin_login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Admin login. Regular users are rejected with the same error as bad credentials."""
    admin = await authenticate(db, body.email, body.password, role="admin")
    return token_response(admin)


@router.get("/me", response_model=UserResponse)
async def get_admin_profile(admin: User = Depends(require_admin)):
    """Get the current admin."""
    return user_to_response(admin)


@router.put("/profile", response_model=UserResponse)
async def update_admin_profile(
    body: AdminProfileUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update name/email; changing the password requires the current one."""
    if body.new_password:
        if not body.current_password:
            raise HTTPException(
                status_code=400, detail="Current password is required to change password"
            )
        if not verify_password(body.current_password, admin.password_hash):
            raise HTTPException(status_code=400, detail="Current password is incorrect")
        admin.password_hash = hash_password(body.new_password)

    if body.email and body.email != admin.email:
        taken = await db.execute(select(User).where(User.email == body.email))
        if taken.scalar_one_or_none():
            raise HTTPException(status_code=400, detail="Email is already in use")
        admin.email = body.email
    if body.name:
        admin.name = body.name.strip()

    await db.commit()
    await db.refresh(admin)
    return user_to_response(admin)


@router.post("/create", response_model=UserResponse, status_code=201)
async def create_admin(
    body: AdminCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create another admin account."""
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Admin already exists")

    new_admin = User(
        name=body.name.strip(),
        email=body.email,
        password_hash=hash_password(body.password),
        role="admin",
    )
    db.add(new_admin)
    await db.commit()
    await db.refresh(new_admin)
    logger.info("Admin %s created admin %s", admin.id, new_admin.id)
    return user_to_response(new_admin)


# ── Dashboard ────────────────────────────────────────────────────


@router.get("/stats", response_model=AdminStatsResponse)
async def get_dashboard_stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Totals, uploads per month (last 12 months with data) and top uploaders."""
    total_users = await db.scalar(select(func.count()).select_from(User).where(User.role == "user"))
    total_admins = await db.scalar(select(func.count()).select_from(User).where(User.role == "admin"))
    total_files = await db.scalar(select(func.count()).select_from(FileRecord))
    total_charts = await db.scalar(select(func.count()).select_from(Chart))

    thirty_days_ago = datetime.now(timezone.utc) - timedelta(days=30)
    recent_users = await db.scalar(
        select(func.count()).select_from(User)
        .where(User.role == "user", User.created_at >= thirty_days_ago)
    )

    year = extract("year", FileRecord.created_at)
    month = extract("month", FileRecord.created_at)
    monthly = await db.execute(
        select(
            year.label("year"),
            month.label("month"),
            func.count(FileRecord.id).label("uploads"),
            func.coalesce(func.sum(FileRecord.size_bytes), 0).label("total_size"),
        )
        .group_by(year, month)
        .order_by(desc(year), desc(month))
        .limit(12)
    )

    file_count = func.count(FileRecord.id).label("file_count")
    top = await db.execute(
        select(
            User.id, User.name, User.email, file_count,
            func.coalesce(func.sum(FileRecord.size_bytes), 0).label("total_size"),
        )
        .join(FileRecord, FileRecord.user_id == User.id)
        .group_by(User.id, User.name, User.email)
        .order_by(desc(file_count))
        .limit(10)
    )

    return {
        "total_users": total_users,
        "total_files": total_files,
        "total_charts": total_charts,
        "total_admins": total_admins,
        "recent_users": recent_users,
        "file_stats": [
            {"year": int(r.year), "month": int(r.month), "count": r.uploads, "total_size": int(r.total_size)}
            for r in monthly.all()
        ],
        "top_users": [
            {
                "user_id": r.id, "name": r.name, "email": r.email,
                "file_count": r.file_count, "total_size": int(r.total_size),
            }
            for r in top.all()
        ],
    }


# ── Users ────────────────────────────────────────────────────────


@router.get("/users", response_model=UserPage)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query(""),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Paginated users, searchable by name or email."""
    query = select(User)
    if search:
        query = query.where(or_(User.name.ilike(f"%{search}%"), User.email.ilike(f"%{search}%")))
    query = apply_sort(query, resolve_sort(User, sort_by, "created_at"), sort_order)

    rows, pagination = await paginate(db, query, page, limit)
    return {"data": [user_to_response(u) for (u,) in rows], "pagination": pagination}


@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def get_user_details(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """A user with their files, charts and storage totals."""
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    files = (await db.execute(
        select(FileRecord).where(FileRecord.user_id == user.id).order_by(desc(FileRecord.created_at))
    )).scalars().all()
    charts = await db.execute(
        select(Chart, FileRecord.name)
        .outerjoin(FileRecord, Chart.file_id == FileRecord.id)
        .where(Chart.user_id == user.id)
        .order_by(desc(Chart.created_at))
    )
    chart_rows = [chart_to_response(c, name) for c, name in charts.all()]

    return {
        "user": user_to_response(user),
        "files": [file_to_response(f) for f in files],
        "charts": chart_rows,
        "stats": {
            "total_files": len(files),
            "total_charts": len(chart_rows),
            "total_storage": sum(f.size_bytes for f in files),
        },
    }


@router.delete("/users/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a user together with all of their files and charts."""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    storage_paths = await delete_user_cascade(db, user)
    await db.commit()
    await remove_stored_files(storage_paths)
    return {"deleted": True, "id": str(user_id)}


# ── Files ────────────────────────────────────────────────────────


@router.get("/files", response_model=AdminFilePage)
async def list_all_files(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query(""),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Paginated files across all users, searchable by name."""
    query = select(FileRecord, User).outerjoin(User, FileRecord.user_id == User.id)
    if search:
        query = query.where(FileRecord.name.ilike(f"%{search}%"))
    column = resolve_sort(FileRecord, sort_by, "created_at", _FILE_SORT_ALIASES)
    query = apply_sort(query, column, sort_order)

    rows, pagination = await paginate(db, query, page, limit)
    data = [
        {**file_to_response(file_rec), "owner": owner_summary(owner)}
        for file_rec, owner in rows
    ]
    return {"data": data, "pagination": pagination}


@router.delete("/files/{file_id}", response_model=DeleteResponse)
async def delete_any_file(
    file_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete any file with its charts and stored bytes."""
    file_rec = await get_file_or_404(db, file_id)
    storage_path = await delete_file_cascade(db, file_rec)
    await db.commit()
    await remove_stored_files([storage_path])
    return {"deleted": True, "id": str(file_id)}


# ── Charts ───────────────────────────────────────────────────────


@router.get("/charts", response_model=AdminChartPage)
async def list_all_charts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = Query(""),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Paginated charts across all users, searchable by title."""
    query = (
        select(Chart, FileRecord.name, User)
        .outerjoin(FileRecord, Chart.file_id == FileRecord.id)
        .outerjoin(User, Chart.user_id == User.id)
    )
    if search:
        query = query.where(Chart.title.ilike(f"%{search}%"))
    query = apply_sort(query, resolve_sort(Chart, sort_by, "created_at"), sort_order)

    rows, pagination = await paginate(db, query, page, limit)
    data = [
        {**chart_to_response(chart, file_name), "owner": owner_summary(owner)}
        for chart, file_name, owner in rows
    ]
    return {"data": data, "pagination": pagination}


@router.get("/charts/{chart_id}", response_model=ChartResponse)
async def get_any_chart(
    chart_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Get any chart by ID."""
    chart = await get_chart_or_404(db, chart_id)
    file_rec = await db.get(FileRecord, chart.file_id)
    return chart_to_response(chart, file_rec.name if file_rec else None)


@router.delete("/charts/{chart_id}", response_model=DeleteResponse)
async def delete_any_chart(
    chart_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete any chart."""
    chart = await get_chart_or_404(db, chart_id)
    await db.delete(chart)
    await db.commit()
    return {"deleted": True, "id": str(chart_id)}


# ── System settings ──────────────────────────────────────────────


@router.get("/system-settings", response_model=SystemSettingsResponse)
async def get_system_settings(
    admin: User = Depends(require_admin),
    store: SystemConfigStore = Depends(get_config_store),
):
    """The settings currently in force."""
    return store.current.to_dict()


@router.put("/system-settings", response_model=SystemSettingsResponse)
async def update_system_settings(
    body: SystemSettingsUpdate,
    admin: User = Depends(require_admin),
    store: SystemConfigStore = Depends(get_config_store),
    db: AsyncSession = Depends(get_db),
):
    """Update the settings row (only provided fields) and reload the running config."""
    record = await load_settings_record(db)
    if record is None:
        record = SystemSettings()
        db.add(record)

    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_data.items():
        setattr(record, key, value)
    record.updated_by = admin.id

    await db.commit()
    config = await store.reload(db)
    logger.info("Admin %s updated system settings: %s", admin.id, sorted(update_data))
    return config.to_dict()


@router.post("/system-settings/reload", response_model=SystemSettingsResponse)
async def reload_system_settings(
    admin: User = Depends(require_admin),
    store: SystemConfigStore = Depends(get_config_store),
    db: AsyncSession = Depends(get_db),
):
    """Re-read the settings row, e.g. after it was changed by another process."""
    config = await store.reload(db)
    return config.to_dict()
