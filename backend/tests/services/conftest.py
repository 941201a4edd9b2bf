"""API test fixtures — async DB, FastAPI test client, fake storage and seeded users.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to a session from the patched db_manager,
      so IntegrityError mapping and out-of-request audit writes behave as in
      production
    - Process-wide caches (academic config, lookups) are cleared around each test
    - get_storage_client overridden with FakeStorage; nothing leaves the process

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, so the request
      session and the out-of-band audit session see the same tables
    - Users are seeded straight into the DB and authenticated with minted
      identity tokens, no auth provider involved
"""

from dataclasses import dataclass, field

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

import pecup.infrastructure.database as db_module
import pecup.models  # noqa: F401
from pecup.config import get_settings
from pecup.core.errors import StorageError
from pecup.core.lookup_cache import lookup_cache
from pecup.db.base import Base
from pecup.infrastructure.database import DatabaseSessionManager, get_db
from pecup.infrastructure.storage_client import get_storage_client
from pecup.infrastructure.tokens import create_identity_token
from pecup.main import app
from pecup.models.admin import Admin
from pecup.models.lookups import Branch, Semester, Year
from pecup.models.profile import Profile
from pecup.models.representative import Representative
from pecup.services.academic_config import academic_config

STORAGE_BASE = "http://storage.test/storage/v1"


@dataclass
class FakeStorage:
    """Stands in for StorageClient; records calls instead of sending them."""

    base_url: str = STORAGE_BASE
    uploads: list[tuple[str, str, bytes, str | None]] = field(default_factory=list)
    removed: list[tuple[str, str]] = field(default_factory=list)
    fail_remove: bool = False

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{bucket}/{path}"

    async def upload(self, bucket, path, data, content_type):
        self.uploads.append((bucket, path, data, content_type))
        return self.public_url(bucket, path)

    async def remove(self, bucket, path):
        if self.fail_remove:
            raise StorageError("HTTP 500: boom", "remove")
        self.removed.append((bucket, path))


@pytest.fixture(autouse=True)
def _reset_caches():
    academic_config.clear_cache()
    lookup_cache.clear()
    yield
    academic_config.clear_cache()
    lookup_cache.clear()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_storage):
    """FastAPI test client with DB and storage dependencies overridden."""
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async def override_get_db():
        async with fake_manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_client] = lambda: fake_storage

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def development(monkeypatch):
    """Flip the cached settings into development mode for one test."""
    monkeypatch.setattr(get_settings(), "environment", "development")


def auth_headers(email: str) -> dict[str, str]:
    settings = get_settings()
    token = create_identity_token(
        email, settings.auth_jwt_secret, settings.auth_jwt_algorithm,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def lookups(test_db):
    """CSE/ECE branches and batch years 2023/2024 with both semesters."""
    cse = Branch(name="Computer Science Engineering", code="CSE")
    ece = Branch(name="Electronics & Communication Engineering", code="ECE")
    y2024 = Year(
        batch_year=2024, display_name="2024-25 Batch",
        semesters=[Semester(semester_number=1), Semester(semester_number=2)],
    )
    y2023 = Year(
        batch_year=2023, display_name="2023-24 Batch",
        semesters=[Semester(semester_number=1), Semester(semester_number=2)],
    )
    test_db.add_all([cse, ece, y2024, y2023])
    await test_db.commit()
    return {
        "cse": cse, "ece": ece, "y2024": y2024, "y2023": y2023,
        "y2024_s1": y2024.semesters[0], "y2024_s2": y2024.semesters[1],
        "y2023_s1": y2023.semesters[0], "y2023_s2": y2023.semesters[1],
    }


async def _seed_profile(db, email, role, lookups, **extra) -> Profile:
    profile = Profile(
        email=email,
        name=email.split("@")[0],
        role=role,
        branch_id=lookups["cse"].id,
        year_id=lookups["y2024"].id,
        semester_id=lookups["y2024_s1"].id,
        **extra,
    )
    db.add(profile)
    await db.commit()
    return profile


@pytest.fixture
async def student(test_db, lookups):
    await _seed_profile(test_db, "student@pec.edu", "student", lookups, roll_number="24CSE001")
    return auth_headers("student@pec.edu")


@pytest.fixture
async def admin(test_db, lookups):
    test_db.add(Admin(email="admin@pec.edu", role="admin"))
    await _seed_profile(test_db, "admin@pec.edu", "admin", lookups)
    return auth_headers("admin@pec.edu")


@pytest.fixture
async def superadmin(test_db, lookups):
    test_db.add(Admin(email="root@pec.edu", role="superadmin"))
    await _seed_profile(test_db, "root@pec.edu", "superadmin", lookups)
    return auth_headers("root@pec.edu")


@pytest.fixture
async def representative(test_db, lookups):
    """Representative for CSE / batch 2024."""
    profile = await _seed_profile(test_db, "rep@pec.edu", "representative", lookups)
    test_db.add(Representative(
        user_id=profile.id,
        branch_id=lookups["cse"].id,
        year_id=lookups["y2024"].id,
        assigned_by="root@pec.edu",
    ))
    await test_db.commit()
    return auth_headers("rep@pec.edu")


@pytest.fixture
def headers_for():
    """Bearer headers for an arbitrary email (profile or not)."""
    return auth_headers
