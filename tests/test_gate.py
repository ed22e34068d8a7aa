"""The `require_permission` gate, called directly and over HTTP."""

import pytest

from iam.core.errors import ForbiddenError, InternalError
from iam.rbac.dependencies import require_permission
from iam.rbac.resolver import PermissionResolver
from tests.fakes import InMemoryEntityStore


@pytest.fixture
def resolver() -> PermissionResolver:
    store = InMemoryEntityStore()
    store.add_module(1, "Users")
    store.add_permission(1, 1, "read")
    store.add_permission(2, 1, "create")
    store.add_user(7)
    store.add_group(70)
    store.add_role(700)
    store.user_groups.add((7, 70))
    store.group_roles.add((70, 700))
    store.role_permissions.add((700, 1))
    return PermissionResolver(store)


async def test_allows_granted_action(resolver):
    gate = require_permission("Users", "read")
    assert await gate(user_id=7, resolver=resolver) == 7


async def test_denies_ungranted_action(resolver):
    gate = require_permission("Users", "create")
    with pytest.raises(ForbiddenError) as exc_info:
        await gate(user_id=7, resolver=resolver)
    assert exc_info.value.message == "Insufficient permissions"


async def test_unknown_module_is_internal_not_forbidden(resolver):
    gate = require_permission("Billing", "read")
    with pytest.raises(InternalError, match="unknown module 'Billing'"):
        await gate(user_id=7, resolver=resolver)


def test_rejects_unknown_action_at_registration():
    with pytest.raises(ValueError):
        require_permission("Users", "archive")


def test_gate_is_named_after_its_check():
    assert require_permission("Users", "delete").__name__ == "require_users_delete"


# ── Over HTTP ────────────────────────────────────────────────────────

async def test_missing_token_is_401(client, seeded):
    response = await client.get("/api/users")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_garbage_token_is_401(client, seeded):
    response = await client.get("/api/users", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_token_for_deleted_user_is_401(client, seeded, headers_for):
    response = await client.get("/api/users", headers=headers_for(424242))
    assert response.status_code == 401


async def test_token_for_inactive_user_is_401(client, seeded, graph, headers_for):
    user_id = await graph.user(is_active=False)
    response = await client.get("/api/me/permissions", headers=headers_for(user_id))
    assert response.status_code == 401


async def test_read_without_create(client, seeded, graph, headers_for):
    user_id = await graph.user_with(("Users", "read"))
    headers = headers_for(user_id)

    assert (await client.get("/api/users", headers=headers)).status_code == 200

    response = await client.post(
        "/api/users",
        json={"username": "blocked", "email": "blocked@example.com", "password": "secret123"},
        headers=headers,
    )
    assert response.status_code == 403
    # Denials never enumerate what is missing.
    assert response.json() == {"detail": "Insufficient permissions"}


async def test_route_wired_to_missing_module_is_500(client, seeded, admin_headers, session_factory):
    from sqlalchemy import delete

    from iam.models import Module

    async with session_factory() as session:
        await session.execute(delete(Module).where(Module.name == "Roles"))
        await session.commit()

    response = await client.get("/api/roles", headers=admin_headers)
    assert response.status_code == 500
    assert "unknown module 'Roles'" in response.json()["detail"]


async def test_token_with_out_of_range_subject_is_401(client, seeded, headers_for):
    response = await client.get("/api/me/permissions", headers=headers_for(10**20))
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid token payload"}
