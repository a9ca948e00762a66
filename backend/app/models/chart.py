"""Chart model - chart definitions derived from an uploaded file."""
import uuid
from sqlalchemy import String, JSON, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin, OwnerMixin


class Chart(Base, TimestampMixin, OwnerMixin):
    __tablename__ = "charts"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # see schemas.chart.ChartType
    file_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("files.id"), nullable=False, index=True
    )
    x_axis: Mapped[str] = mapped_column(String(500), nullable=False)
    y_axis: Mapped[str] = mapped_column(String(500), nullable=False)
    # {"labels": [...], "values": [...]}
    data: Mapped[dict] = mapped_column(JSON, default=dict)
