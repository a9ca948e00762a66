"""Chart request/response schemas."""
import uuid
from typing import Literal, Optional
from datetime import datetime
from pydantic import Field, field_validator
from app.schemas.base import CamelModel
from app.schemas.common import PaginationInfo
from app.schemas.file import OwnerSummary

ChartType = Literal["bar", "bar3d", "pie", "pie3d", "line", "area", "scatter"]


def _clean_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Please add a chart title")
    return v


class ChartSeriesData(CamelModel):
    labels: list[str] = []
    values: list[float] = []


class ChartCreate(CamelModel):
    title: str = Field(min_length=1, max_length=500)
    type: ChartType
    file_id: uuid.UUID
    x_axis: str = Field(min_length=1)
    y_axis: str = Field(min_length=1)
    # Accepted for compatibility; the server always derives the series itself
    data: Optional[dict] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return _clean_title(v)


class ChartUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    type: Optional[ChartType] = None
    x_axis: Optional[str] = Field(default=None, min_length=1)
    y_axis: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return _clean_title(v)


class ChartResponse(CamelModel):
    id: uuid.UUID
    title: str
    type: str
    file_id: uuid.UUID
    file_name: Optional[str] = None
    x_axis: str
    y_axis: str
    data: ChartSeriesData
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class AdminChartResponse(ChartResponse):
    owner: Optional[OwnerSummary] = None


class AdminChartPage(CamelModel):
    data: list[AdminChartResponse]
    pagination: PaginationInfo
