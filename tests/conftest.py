"""
Pytest configuration and fixtures.

This module provides:
- A fresh in-memory SQLite database per test (schema via create_all)
- The default seed (6 modules × 4 actions, Super Admin, admin user)
- An httpx AsyncClient bound to the app with `get_db` overridden
- Token / header helpers for arbitrary users
"""

import os

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTO_SEED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret"

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import insert, select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from iam.core.config import settings  # noqa: E402
from iam.core.database import enable_sqlite_foreign_keys, get_db  # noqa: E402
from iam.core.security import create_access_token, hash_password  # noqa: E402
from iam.main import app  # noqa: E402
from iam.models import Base, Group, Module, Permission, PermissionAction, Role, User  # noqa: E402
from iam.models.group import user_groups  # noqa: E402
from iam.models.role import group_roles, role_permissions  # noqa: E402
from iam.rbac.permission_seed import seed  # noqa: E402


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for calling services / the store directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(session_factory) -> None:
    async with session_factory() as session:
        await seed(session)


@pytest.fixture
async def admin_id(seeded, session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(User.id).where(User.email == settings.ADMIN_EMAIL))
        return result.scalar_one()


# =============================================================================
# CLIENT FIXTURES
# =============================================================================


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async client whose requests run against the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# =============================================================================
# AUTHENTICATION HELPERS
# =============================================================================


def _auth_headers(user_id: int) -> dict[str, str]:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    """Build a bearer header for any user id."""
    return _auth_headers


@pytest.fixture
def admin_headers(admin_id) -> dict[str, str]:
    return _auth_headers(admin_id)


# =============================================================================
# GRAPH BUILDERS
# =============================================================================


class GraphBuilder:
    """Writes users / groups / roles / permissions and links directly."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def _add(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
        return obj.id

    async def user(
        self, *, email: str | None = None, is_active: bool = True, password: str = "secret123"
    ) -> int:
        n = self._next()
        return await self._add(
            User(
                username=f"user{n}",
                email=email or f"user{n}@example.com",
                password_hash=hash_password(password),
                is_active=is_active,
            )
        )

    async def group(self, name: str | None = None) -> int:
        return await self._add(Group(name=name or f"group-{self._next()}"))

    async def role(self, name: str | None = None) -> int:
        return await self._add(Role(name=name or f"role-{self._next()}"))

    async def module(self, name: str | None = None) -> int:
        return await self._add(Module(name=name or f"module-{self._next()}"))

    async def permission(self, module_id: int, action: str, name: str | None = None) -> int:
        return await self._add(
            Permission(
                name=name or f"perm-{self._next()}",
                module_id=module_id,
                action=PermissionAction(action),
            )
        )

    async def permission_id(self, module: str, action: str) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Permission.id)
                .join(Module, Module.id == Permission.module_id)
                .where(Module.name == module, Permission.action == PermissionAction(action))
            )
            return result.scalar_one()

    async def _link(self, table, **values) -> None:
        async with self.session_factory() as session:
            await session.execute(insert(table).values(**values))
            await session.commit()

    async def add_to_group(self, user_id: int, group_id: int) -> None:
        await self._link(user_groups, user_id=user_id, group_id=group_id)

    async def grant_role(self, group_id: int, role_id: int) -> None:
        await self._link(group_roles, group_id=group_id, role_id=role_id)

    async def grant_permission(self, role_id: int, permission_id: int) -> None:
        await self._link(role_permissions, role_id=role_id, permission_id=permission_id)

    async def user_with(self, *grants: tuple[str, str]) -> int:
        """A user whose only group → role holds the given (module, action) grants."""
        user_id = await self.user()
        group_id = await self.group()
        role_id = await self.role()
        await self.add_to_group(user_id, group_id)
        await self.grant_role(group_id, role_id)
        for module, action in grants:
            await self.grant_permission(role_id, await self.permission_id(module, action))
        return user_id


@pytest.fixture
def graph(session_factory) -> GraphBuilder:
    return GraphBuilder(session_factory)
