"""Admin dashboard schemas."""
import uuid
from app.schemas.base import CamelModel
from app.schemas.chart import ChartResponse
from app.schemas.file import FileResponse
from app.schemas.user import UserResponse


class MonthlyFileStat(CamelModel):
    year: int
    month: int
    count: int
    total_size: int


class TopUploader(CamelModel):
    user_id: uuid.UUID
    name: str
    email: str
    file_count: int
    total_size: int


class AdminStatsResponse(CamelModel):
    total_users: int
    total_files: int
    total_charts: int
    total_admins: int
    recent_users: int
    file_stats: list[MonthlyFileStat]
    top_users: list[TopUploader]


class UserStats(CamelModel):
    total_files: int
    total_charts: int
    total_storage: int


class UserDetailResponse(CamelModel):
    user: UserResponse
    files: list[FileResponse]
    charts: list[ChartResponse]
    stats: UserStats
