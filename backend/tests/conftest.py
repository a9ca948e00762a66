import asyncio
import io
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="sheet-charts-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["FILE_STORAGE_PATH"] = os.path.join(_TMP_DIR, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASSWORD"] = "admin-pass"

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from app.database import engine
from app.main import app
from app.models import Base

SALES_CSV = b"month,sales\nJan,10\nFeb,20\nJan,5\n"


async def _drop_all() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def client():
    asyncio.run(_drop_all())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    def _make(email: str = "alice@example.com", name: str = "Alice", password: str = "secret-pass"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]

    return _make


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/admin/login",
        json={"email": "admin@example.com", "password": "admin-pass"},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def upload(client):
    def _upload(headers, content: bytes = SALES_CSV, filename: str = "sales.csv", content_type: str = "text/csv"):
        return client.post(
            "/api/files/upload",
            files={"file": (filename, content, content_type)},
            headers=headers,
        )

    return _upload


def build_xlsx(rows: list[list]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def xlsx_bytes():
    return build_xlsx
