"""
Pydantic schemas for request / response serialization.

Kept in a single file for now — split per-domain when it grows.
Schemas are deliberately decoupled from SQLAlchemy models so the
API surface can evolve independently of the DB layer.

The wire format is camelCase (`userId`, `isActive`); attributes stay
snake_case in Python.  Both spellings are accepted on input.
"""

from datetime import datetime
from typing import Annotated

from fastapi import Path
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from iam.models.permission import PermissionAction

# Primary keys are BIGINT-sized at most; anything outside is rejected
# with a 422 before it reaches the driver.
MAX_ID = 2**63 - 1
EntityId = Annotated[int, Field(ge=1, le=MAX_ID)]
IdPath = Annotated[int, Path(ge=1, le=MAX_ID)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Auth ─────────────────────────────────────────────────────────────
class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)


class LoginRequest(CamelModel):
    email: str
    password: str


# ── User ─────────────────────────────────────────────────────────────
class UserCreate(RegisterRequest):
    is_active: bool = True


class UserUpdate(CamelModel):
    username: str | None = Field(default=None, min_length=3, max_length=50)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=100)
    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    is_active: bool | None = None


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AuthResponse(CamelModel):
    user: UserOut
    token: str
    token_type: str = "bearer"


# ── Group / Role / Module ────────────────────────────────────────────
# The three share one shape: unique name, optional description, flag.
class NamedEntityCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    is_active: bool = True


class NamedEntityUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    is_active: bool | None = None


class NamedEntityOut(CamelModel):
    id: int
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class GroupCreate(NamedEntityCreate):
    pass


class GroupUpdate(NamedEntityUpdate):
    pass


class GroupOut(NamedEntityOut):
    pass


class RoleCreate(NamedEntityCreate):
    pass


class RoleUpdate(NamedEntityUpdate):
    pass


class RoleOut(NamedEntityOut):
    pass


class ModuleCreate(NamedEntityCreate):
    pass


class ModuleUpdate(NamedEntityUpdate):
    pass


class ModuleOut(NamedEntityOut):
    pass


# ── Permission ───────────────────────────────────────────────────────
class PermissionCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    action: PermissionAction
    module_id: EntityId
    description: str | None = Field(default=None, max_length=255)
    is_active: bool = True


class PermissionUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    action: PermissionAction | None = None
    module_id: EntityId | None = None
    description: str | None = Field(default=None, max_length=255)
    is_active: bool | None = None


class ModuleRef(CamelModel):
    id: int
    name: str


class PermissionOut(CamelModel):
    id: int
    name: str
    action: PermissionAction
    module_id: int
    module: ModuleRef
    description: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ── Assignments ──────────────────────────────────────────────────────
class AssignUsersRequest(CamelModel):
    user_ids: list[EntityId] = Field(min_length=1)


class AssignRolesRequest(CamelModel):
    role_ids: list[EntityId] = Field(min_length=1)


class AssignPermissionsRequest(CamelModel):
    permission_ids: list[EntityId] = Field(min_length=1)


class AssignmentResult(CamelModel):
    assigned: int
    skipped: int


class RemovalResult(CamelModel):
    removed: int


# ── Access checks ────────────────────────────────────────────────────
class UserPermissionOut(CamelModel):
    id: int
    module_id: int
    module_name: str
    action: PermissionAction
    description: str | None = None
    is_active: bool


class SimulateActionRequest(CamelModel):
    user_id: EntityId
    module_id: EntityId
    # Plain str: an out-of-set action is rejected by the resolver with
    # a specific 400, not by schema validation.
    action: str


class SimulateActionResponse(CamelModel):
    user_id: int
    module_id: int
    module_name: str
    action: PermissionAction
    has_permission: bool
