"""Import all models so SQLAlchemy metadata knows about them."""
from app.models.base import Base
from app.models.user import User
from app.models.file_record import FileRecord
from app.models.chart import Chart
from app.models.system_settings import SystemSettings

__all__ = ["Base", "User", "FileRecord", "Chart", "SystemSettings"]
