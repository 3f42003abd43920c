"""Job description (role) API."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..domain.role_service import RoleService
from .deps import get_role_service
from .schemas import RoleCreateRequest, RoleOut, RoleUpdateRequest

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=List[RoleOut])
async def list_roles(service: RoleService = Depends(get_role_service)):
    return [RoleOut.from_role(role) for role in await service.list_roles()]


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
async def create_role(request: RoleCreateRequest, service: RoleService = Depends(get_role_service)):
    existing = await service.list_roles()
    role = await service.create_role(request.role_name, request.role_description, existing)
    return RoleOut.from_role(role)


@router.put("/{role_name}", response_model=RoleOut)
async def update_role(role_name: str, request: RoleUpdateRequest, service: RoleService = Depends(get_role_service)):
    role = await service.update_role(role_name, request.role_description)
    return RoleOut.from_role(role)


@router.delete("/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(role_name: str, service: RoleService = Depends(get_role_service)):
    await service.delete_role(role_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
