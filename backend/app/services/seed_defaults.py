"""Seed the system settings row and the bootstrap admin on startup.

Idempotent: checks for existing rows before inserting.
"""
import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.models.system_settings import SystemSettings
from app.services.security import hash_password
from app.services.system_config import load_settings_record

logger = logging.getLogger(__name__)


async def _seed_system_settings(session: AsyncSession) -> None:
    """Insert the default settings row if the table is empty."""
    if await load_settings_record(session) is not None:
        logger.info("System settings already present")
        return
    session.add(SystemSettings())
    await session.flush()
    logger.info("Seeded default system settings")


async def _seed_admin(session: AsyncSession) -> None:
    """Create the admin account named by ADMIN_EMAIL / ADMIN_PASSWORD if missing."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return
    email = settings.ADMIN_EMAIL.strip().lower()
    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.info("Admin '%s' already exists", email)
        return
    session.add(User(
        name=settings.ADMIN_NAME,
        email=email,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        role="admin",
    ))
    await session.flush()
    logger.info("Seeded admin account '%s'", email)


async def seed_all_defaults(session: AsyncSession) -> None:
    """Idempotent entry point: seed all default data."""
    logger.info("Checking seed defaults...")
    await _seed_system_settings(session)
    await _seed_admin(session)
    await session.commit()
    logger.info("Seed defaults check complete")
