"""
Module controller — CRUD for modules.

Gated on the `Modules` module; one action per HTTP verb.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from iam.core.database import get_db
from iam.rbac.dependencies import require_permission
from iam.schemas import IdPath, ModuleCreate, ModuleOut, ModuleUpdate
from iam.services import module_service

router = APIRouter(prefix="/api/modules", tags=["Modules"])


@router.get("", response_model=list[ModuleOut], dependencies=[Depends(require_permission("Modules", "read"))])
async def list_modules(
    db: AsyncSession = Depends(get_db),
    search: str | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    items = await module_service.list_modules(db, search, is_active, skip, limit)
    return [ModuleOut.model_validate(item) for item in items]


@router.post(
    "", response_model=ModuleOut, status_code=201,
    dependencies=[Depends(require_permission("Modules", "create"))],
)
async def create_module(body: ModuleCreate, db: AsyncSession = Depends(get_db)):
    module = await module_service.create_module(body, db)
    return ModuleOut.model_validate(module)


@router.get("/{module_id}", response_model=ModuleOut, dependencies=[Depends(require_permission("Modules", "read"))])
async def get_module(module_id: IdPath, db: AsyncSession = Depends(get_db)):
    module = await module_service.get_module_by_id(module_id, db)
    return ModuleOut.model_validate(module)


@router.put("/{module_id}", response_model=ModuleOut, dependencies=[Depends(require_permission("Modules", "update"))])
async def update_module(module_id: IdPath, body: ModuleUpdate, db: AsyncSession = Depends(get_db)):
    module = await module_service.update_module(module_id, body, db)
    return ModuleOut.model_validate(module)


@router.delete("/{module_id}", status_code=204, dependencies=[Depends(require_permission("Modules", "delete"))])
async def delete_module(module_id: IdPath, db: AsyncSession = Depends(get_db)):
    await module_service.delete_module(module_id, db)
    return Response(status_code=204)
