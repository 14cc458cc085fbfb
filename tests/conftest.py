"""Fixtures for the fitness service test suite.

Every test gets a fresh database: in-memory SQLite by default, or whatever
``TEST_DATABASE_URL`` points at. Services commit for real, so isolation comes
from recreating the schema per test rather than from an outer transaction.
"""

import contextlib
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.base import Base
from libs.db.config import enable_sqlite_foreign_keys
from libs.db.session import get_async_db
from services.fitness_service import models as _fitness_models  # noqa: F401
from services.fitness_service.models import ParentChildRelationship, Profile
from services.fitness_service.policies import RequestContext
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from tests.factories import (
    ChildProfileFactory,
    ProfileFactory,
    RelationshipFactory,
    UserProgressFactory,
)

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def make_user(user_id: Optional[str] = None, role: str = "authenticated") -> AuthUser:
    return AuthUser(
        user_id=user_id or f"user-{uuid.uuid4().hex[:8]}",
        email=None,
        role=role,
    )


def make_service_user() -> AuthUser:
    return make_user(user_id="service", role="service_role")


def ctx_for(auth_user_id: Optional[str]) -> RequestContext:
    """A fresh request context, as a new request would build it."""
    return RequestContext(auth_user_id=auth_user_id)


@contextlib.contextmanager
def override_auth(app, user: AuthUser):
    """Temporarily make ``user`` the authenticated caller for ``app``."""
    previous = app.dependency_overrides.get(get_current_user)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = previous


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        enable_sqlite_foreign_keys(engine)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def fitness_app(db_session):
    from services.fitness_service.app.main import app

    async def _override_db():
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_async_db] = _override_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(fitness_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=fitness_app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict:
    """Placeholder bearer header; auth itself is overridden per test."""
    return {"Authorization": "Bearer mock-token"}


# ---------------------------------------------------------------------------
# Family fixture
# ---------------------------------------------------------------------------


@dataclass
class Family:
    parent: Profile
    child: Profile
    relationship: ParentChildRelationship
    stranger: Profile

    @property
    def parent_ctx(self) -> RequestContext:
        return ctx_for(self.parent.auth_user_id)

    @property
    def stranger_ctx(self) -> RequestContext:
        return ctx_for(self.stranger.auth_user_id)


@pytest_asyncio.fixture
async def family(db_session) -> Family:
    """Parent A actively linked to child C1, plus an unrelated parent B."""
    parent = ProfileFactory.create(display_name="Parent A")
    child = ChildProfileFactory.create(display_name="Child C1")
    stranger = ProfileFactory.create(display_name="Parent B")
    db_session.add_all([parent, child, stranger])
    await db_session.flush()

    relationship = RelationshipFactory.create(parent_id=parent.id, child_id=child.id)
    db_session.add(relationship)
    db_session.add_all(
        [
            UserProgressFactory.create(profile_id=parent.id),
            UserProgressFactory.create(
                profile_id=child.id, weekly_points_goal=50, monthly_goal_exercises=15
            ),
            UserProgressFactory.create(profile_id=stranger.id),
        ]
    )
    await db_session.commit()
    return Family(
        parent=parent, child=child, relationship=relationship, stranger=stranger
    )
