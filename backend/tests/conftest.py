"""
Pytest fixtures for CISS Workforce tests.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pandas as pd
import pytest
import pytest_asyncio
from fastapi import HTTPException
from httpx import AsyncClient, ASGITransport
from unittest.mock import MagicMock, AsyncMock

from jobs.job_store import ExportJobStore
from records.attendance_store import AttendanceStore
from records.client_store import ClientStore
from records.employee_store import EmployeeStore


# Import app lazily to avoid circular imports
@pytest.fixture
def app():
    """Get FastAPI app instance."""
    from main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def mock_db():
    """Mock database connection."""
    db = MagicMock()
    db.is_connected = True
    db.fetch = AsyncMock(return_value=[])
    db.fetchrow = AsyncMock(return_value=None)
    db.fetchval = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="INSERT 0 1")
    return db


# ---------------------------------------------------------------------------
# In-memory stores
# ---------------------------------------------------------------------------

@pytest.fixture
def employee_store():
    return EmployeeStore()


@pytest.fixture
def job_store():
    return ExportJobStore()


@pytest.fixture
def attendance_store():
    return AttendanceStore()


@pytest.fixture
def client_store():
    return ClientStore()


class FakeBlobStore:
    """Blob store double that keeps uploaded workbooks readable after the temp file is gone."""

    def __init__(self):
        self.uploads = {}

    async def upload_file(self, path, local_path, content_type, metadata=None):
        self.uploads[path] = {
            "local_path": local_path,
            "content_type": content_type,
            "metadata": metadata or {},
            "sheets": pd.read_excel(local_path, sheet_name=None),
        }
        return path

    async def upload_bytes(self, path, data, content_type, metadata=None):
        self.uploads[path] = {
            "data": data,
            "content_type": content_type,
            "metadata": metadata or {},
        }
        return path

    async def create_signed_url(self, path, expires_in):
        return f"https://storage.test/{path}?token=signed&expires={expires_in}"


@pytest.fixture
def blob_store():
    return FakeBlobStore()


def make_employee(**overrides):
    """EmployeeCreate payload with sensible defaults."""
    from models.employee import EmployeeCreate

    data = {
        "client_name": "TCS",
        "first_name": "Asha",
        "last_name": "Nair",
        "father_name": "Ravi Nair",
        "mother_name": "Latha Nair",
        "district": "Ernakulam",
        "phone_number": "9876543210",
        "bank_account_number": "1234567890",
        "ifsc_code": "SBIN0000001",
        "bank_name": "SBI",
        "full_address": "MG Road, Kochi",
        "identity_proof_url_front": "https://files.test/id-front.jpg",
        "profile_picture_url": "https://files.test/profile.jpg",
        "joining_date": datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return EmployeeCreate(**data)


@pytest.fixture
def employee_factory():
    return make_employee


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_user():
    """Create a mock authenticated user with no claims (an employee)."""
    from auth.models import User
    return User(
        id="employee-user-1",
        phone="919876543210",
        created_at="2024-01-01T00:00:00Z",
    )


@pytest.fixture
def admin_user():
    from auth.models import User
    return User(
        id="state-admin-1",
        email="state.admin@example.com",
        email_confirmed=True,
        claims={"role": "stateAdmin", "state": "Kerala"},
    )


@pytest.fixture
def super_admin_user():
    from auth.models import User
    return User(
        id="super-admin-1",
        email="owner@example.com",
        email_confirmed=True,
        claims={"superAdmin": True, "role": "superAdmin"},
    )


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------

def _not_authenticated():
    raise HTTPException(status_code=401, detail="Not authenticated")


@pytest.fixture
def override_services(app, employee_store, job_store, attendance_store, client_store, blob_store):
    """Point every store dependency at the in-memory fixtures."""
    import dependencies

    app.dependency_overrides[dependencies.get_employee_store] = lambda: employee_store
    app.dependency_overrides[dependencies.get_job_store] = lambda: job_store
    app.dependency_overrides[dependencies.get_attendance_store] = lambda: attendance_store
    app.dependency_overrides[dependencies.get_client_store] = lambda: client_store
    app.dependency_overrides[dependencies.get_blob_store] = lambda: blob_store
    return SimpleNamespace(
        employees=employee_store,
        jobs=job_store,
        attendance=attendance_store,
        clients=client_store,
        blobs=blob_store,
    )


def _authenticate_as(app, user):
    from auth.dependencies import get_current_user, get_optional_user

    if user is None:
        app.dependency_overrides[get_current_user] = _not_authenticated
        app.dependency_overrides[get_optional_user] = lambda: None
    else:
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user


@pytest_asyncio.fixture
async def async_client(app, override_services):
    """Create an anonymous async HTTP client for testing."""
    _authenticate_as(app, None)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def async_client_with_auth(app, override_services, mock_user):
    """Async HTTP client signed in as an employee (no claims)."""
    _authenticate_as(app, mock_user)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_client(app, override_services, admin_user):
    """Async HTTP client signed in as a state admin."""
    _authenticate_as(app, admin_user)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def super_admin_client(app, override_services, super_admin_user):
    """Async HTTP client signed in as a super admin."""
    _authenticate_as(app, super_admin_user)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
