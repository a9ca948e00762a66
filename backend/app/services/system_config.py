"""In-memory copy of the global system settings.

The SystemSettings row is loaded once at startup into a SystemConfigStore
held on ``app.state``. Handlers read ``store.current``; the admin routes call
``store.reload()`` after changing the row. Nothing re-reads the table lazily.
"""
import logging
from dataclasses import dataclass, field, asdict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.system_settings import SystemSettings, DEFAULT_ALLOWED_FILE_TYPES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemConfig:
    max_file_size_mb: int = 10
    allowed_file_types: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_FILE_TYPES))
    max_files_per_user: int = 100
    data_retention_days: int = 365
    enable_notifications: bool = True
    enable_analytics: bool = True

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    def allows(self, file_format: str | None) -> bool:
        return bool(file_format) and file_format.lower() in {t.lower() for t in self.allowed_file_types}

    @classmethod
    def from_record(cls, record: SystemSettings) -> "SystemConfig":
        return cls(
            max_file_size_mb=record.max_file_size_mb,
            allowed_file_types=list(record.allowed_file_types or DEFAULT_ALLOWED_FILE_TYPES),
            max_files_per_user=record.max_files_per_user,
            data_retention_days=record.data_retention_days,
            enable_notifications=record.enable_notifications,
            enable_analytics=record.enable_analytics,
        )

    def to_dict(self) -> dict:
        return asdict(self)


class SystemConfigStore:
    """Holds the current SystemConfig; refreshed only through reload()."""

    def __init__(self, config: SystemConfig | None = None):
        self._config = config or SystemConfig()

    @property
    def current(self) -> SystemConfig:
        return self._config

    async def reload(self, db: AsyncSession) -> SystemConfig:
        record = await load_settings_record(db)
        self._config = SystemConfig.from_record(record) if record else SystemConfig()
        logger.info("System settings reloaded: %s", self._config.to_dict())
        return self._config


async def load_settings_record(db: AsyncSession) -> SystemSettings | None:
    """Return the single settings row (lowest id), if one exists."""
    result = await db.execute(select(SystemSettings).order_by(SystemSettings.id).limit(1))
    return result.scalar_one_or_none()
