"""File storage abstraction. Uploaded spreadsheets are kept on the local filesystem."""
import os
import uuid
import aiofiles
from pathlib import Path
from app.config import settings


class FileStorageService:
    """Handles spreadsheet byte read/write on local disk."""

    def __init__(self):
        if settings.FILE_STORAGE_TYPE == "local":
            self.base_path = Path(settings.FILE_STORAGE_PATH)
            self.base_path.mkdir(parents=True, exist_ok=True)

    async def save(self, file_bytes: bytes, original_name: str) -> str:
        """Save file bytes under a generated name. Returns the storage path."""
        file_id = str(uuid.uuid4())
        ext = Path(original_name).suffix.lower()
        filename = f"{file_id}{ext}"

        if settings.FILE_STORAGE_TYPE == "local":
            file_path = self.base_path / filename
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(file_bytes)
            return str(file_path)

        raise ValueError(f"Unknown storage type: {settings.FILE_STORAGE_TYPE}")

    async def delete(self, storage_path: str) -> None:
        """Delete file from storage. Missing files are ignored."""
        if settings.FILE_STORAGE_TYPE == "local":
            path = Path(storage_path)
            if path.exists():
                os.remove(path)
            return
        raise ValueError(f"Unknown storage type: {settings.FILE_STORAGE_TYPE}")


file_storage = FileStorageService()
