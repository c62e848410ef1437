"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-secret")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("EMAIL_BACKEND", "log")
os.environ.setdefault("CAPTCHA_BACKEND", "static")

from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import labelvault.models  # noqa: F401
from labelvault.api.dependencies.common import get_captcha, get_email_sender, get_storage
from labelvault.core.database import Base, get_db_session
from labelvault.main import app
from labelvault.middleware.auth import get_password_hash
from labelvault.models.label import Label
from labelvault.models.user import LABEL_ADMIN_PERMISSIONS, User, UserRole
from labelvault.services.captcha import StaticCaptchaVerifier
from labelvault.services.mailer import LogMailer
from labelvault.services.storage import MemoryAssetStore
from labelvault.services.token_service import get_token_service

CAPTCHA_TOKEN = "1x00000000000000000000AA"
PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """A fresh SQLite database file per test."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'labelvault.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Session for seeding and for asserting on stored state."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def asset_store():
    return MemoryAssetStore("https://cdn.test")


@pytest.fixture
def mailer():
    return LogMailer()


@pytest.fixture
def captcha():
    return StaticCaptchaVerifier(bypass_token=CAPTCHA_TOKEN)


@pytest_asyncio.fixture
async def client(session_factory, asset_store, mailer, captcha):
    """HTTP client with one database session per request and in-memory collaborators."""

    async def get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = get_test_db
    app.dependency_overrides[get_storage] = lambda: asset_store
    app.dependency_overrides[get_email_sender] = lambda: mailer
    app.dependency_overrides[get_captcha] = lambda: captcha

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build a bearer header for a stored user."""

    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {get_token_service().issue_for_user(user)}"}

    return _headers


def make_user(name, role, label=None, permissions=None, **extra) -> User:
    return User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@labels.io",
        password_hash=get_password_hash(PASSWORD),
        role=role.value,
        label_id=label.id if label else None,
        label_name=label.name if label else None,
        permissions=permissions or {},
        **extra,
    )


@pytest_asyncio.fixture
async def world(session_factory):
    """
    Two label trees and a staff team.

    North (root) -> North East (child) -> North East Indie (grandchild)
    South (root)
    """
    async with session_factory() as session:
        return await _seed_world(session)


async def _seed_world(db_session):
    north = Label(id="label-north", name="North Records")
    north_east = Label(id="label-north-east", name="North East", parent_label_id=north.id)
    ne_indie = Label(id="label-ne-indie", name="North East Indie", parent_label_id=north_east.id)
    south = Label(id="label-south", name="South Sounds")
    db_session.add_all([north, north_east, ne_indie, south])

    owner = make_user("Olive Owner", UserRole.OWNER)
    employee = make_user(
        "Evan Employee",
        UserRole.EMPLOYEE,
        permissions={"canManageReleases": True, "canManageArtists": True},
    )
    viewer = make_user("Vera Viewer", UserRole.EMPLOYEE)
    north_admin = make_user("Nora North", UserRole.LABEL_ADMIN, north, dict(LABEL_ADMIN_PERMISSIONS))
    north_east_admin = make_user(
        "Ned East", UserRole.SUB_LABEL_ADMIN, north_east, dict(LABEL_ADMIN_PERMISSIONS)
    )
    south_admin = make_user("Sam South", UserRole.LABEL_ADMIN, south, dict(LABEL_ADMIN_PERMISSIONS))
    db_session.add_all([owner, employee, viewer, north_admin, north_east_admin, south_admin])
    await db_session.flush()

    north.owner_id = north_admin.id
    north_east.owner_id = north_east_admin.id
    south.owner_id = south_admin.id
    await db_session.commit()

    return SimpleNamespace(
        north=north,
        north_east=north_east,
        ne_indie=ne_indie,
        south=south,
        owner=owner,
        employee=employee,
        viewer=viewer,
        north_admin=north_admin,
        north_east_admin=north_east_admin,
        south_admin=south_admin,
    )
