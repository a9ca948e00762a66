"""System settings request/response schemas."""
from typing import Optional
from pydantic import Field, field_validator
from app.schemas.base import CamelModel


class SystemSettingsUpdate(CamelModel):
    max_file_size_mb: Optional[int] = Field(default=None, ge=1, le=100)
    allowed_file_types: Optional[list[str]] = Field(default=None, min_length=1)
    max_files_per_user: Optional[int] = Field(default=None, ge=1)
    data_retention_days: Optional[int] = Field(default=None, ge=30)
    enable_notifications: Optional[bool] = None
    enable_analytics: Optional[bool] = None

    @field_validator("allowed_file_types")
    @classmethod
    def normalize_types(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        types = [t.strip().lower().lstrip(".") for t in v if t and t.strip()]
        if not types:
            raise ValueError("At least one file type is required")
        return list(dict.fromkeys(types))


class SystemSettingsResponse(CamelModel):
    max_file_size_mb: int
    allowed_file_types: list[str]
    max_files_per_user: int
    data_retention_days: int
    enable_notifications: bool
    enable_analytics: bool
