"""SystemSettings model - single row of global upload and retention policy."""
import uuid
from sqlalchemy import Integer, Boolean, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin

DEFAULT_ALLOWED_FILE_TYPES = ["xlsx", "xls", "csv"]


class SystemSettings(Base, TimestampMixin):
    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    max_file_size_mb: Mapped[int] = mapped_column(Integer, default=10)
    allowed_file_types: Mapped[list] = mapped_column(
        JSON, default=lambda: list(DEFAULT_ALLOWED_FILE_TYPES)
    )
    max_files_per_user: Mapped[int] = mapped_column(Integer, default=100)
    data_retention_days: Mapped[int] = mapped_column(Integer, default=365)
    enable_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    enable_analytics: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
