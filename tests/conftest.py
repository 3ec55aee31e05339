import os
import tempfile

# settings are read at import time, so the test values must be in place first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-prod")
os.environ["OTP_DEV_MODE"] = "true"
os.environ["RATE_LIMIT_USE_REDIS"] = "false"
os.environ["ENV"] = "dev"
os.environ.pop("ADMIN_SECRET", None)
os.environ["MEDIA_TMP_ROOT"] = os.path.join(tempfile.gettempdir(), "skolara_test_uploads")

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from skolara.auth.sms_provider import get_sms_provider
from skolara.db.dependencies import get_session
from skolara.main import app
from skolara.media.storage import StorageError, get_storage
from skolara.rate_limiting.constants import _in_memory_counters
import skolara.schema.full_schema  # noqa: F401

url_prefix = "/api/v1"


class FakeSmsProvider:
    """Stands in for the Twilio client; approves `approved_code` only."""

    def __init__(self):
        self.sent = []
        self.checked = []
        self.approved_code = "123456"
        self.phone_number = "+15005550006"

    def missing_settings(self):
        return {"account_sid": False, "auth_token": False, "service_sid": False, "phone_number": False}

    async def start_verification(self, to):
        self.sent.append(to)
        return "pending"

    async def check_verification(self, to, code):
        self.checked.append((to, code))
        return code == self.approved_code

    async def fetch_account_status(self):
        return {
            "account": {"friendly_name": "test account", "status": "active", "type": "Trial"},
            "configured_number": self.phone_number,
            "number_exists": True,
            "number_details": None,
            "total_numbers": 1,
        }


class FakeStorage:
    def __init__(self):
        self.uploaded = []
        self.deleted = []
        self.fail_deletes = False
        self.fail_upload_calls = set()
        self.upload_calls = 0

    async def upload(self, local_path, bucket, name):
        self.upload_calls += 1
        if self.upload_calls in self.fail_upload_calls:
            raise StorageError("storage down")
        self.uploaded.append((bucket, name))
        return f"https://res.cloudinary.com/demo/image/upload/v1700000000/{bucket}/{name}.png"

    async def delete(self, bucket, path):
        if self.fail_deletes:
            raise StorageError("storage down")
        self.deleted.append((bucket, path))
        return True

    async def delete_many(self, bucket, paths):
        if self.fail_deletes:
            raise StorageError("storage down")
        self.deleted.extend((bucket, p) for p in paths)
        return list(paths)

    def signed_url(self, path, ttl=86400):
        return f"https://signed.example/{path}?ttl={ttl}"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def sms_provider():
    return FakeSmsProvider()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture(autouse=True)
def clear_rate_limits():
    _in_memory_counters.clear()
    yield
    _in_memory_counters.clear()


@pytest.fixture
async def ac_client(session_factory, sms_provider, storage):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_sms_provider] = lambda: sms_provider
    app.dependency_overrides[get_storage] = lambda: storage

    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac

    app.dependency_overrides.clear()
