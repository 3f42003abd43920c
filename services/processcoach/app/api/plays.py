"""Play management API."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..domain.play_service import PlayService
from .deps import get_play_service
from .schemas import (
    NotificationOut,
    PlayCreateRequest,
    PlayCreateResponse,
    PlayDetailResponse,
    PlayOut,
    PlayRenameRequest,
    PlaysOverviewResponse,
    RoleOut,
    StepOut,
)

router = APIRouter(prefix="/plays", tags=["plays"])


@router.get("", response_model=PlaysOverviewResponse)
async def list_plays(service: PlayService = Depends(get_play_service)):
    overview = await service.load_overview()
    return PlaysOverviewResponse(
        plays=[PlayOut.from_play(play) for play in overview.plays],
        roles=[RoleOut.from_role(role) for role in overview.roles],
    )


@router.post("", response_model=PlayCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_play(request: PlayCreateRequest, service: PlayService = Depends(get_play_service)):
    role_names: list[str] = []
    if request.goal and request.goal.strip():
        role_names = await service.role_names()
    creation = await service.create_play(request.play_name, goal=request.goal, role_names=role_names)
    return PlayCreateResponse(
        play=PlayOut.from_play(creation.play),
        steps=[StepOut.from_step(step) for step in creation.generated_steps],
        warning=creation.warning,
        notifications=[NotificationOut.from_notification(n) for n in service.notifier.drain()],
    )


@router.get("/{play_id}", response_model=PlayDetailResponse)
async def get_play(play_id: str, service: PlayService = Depends(get_play_service)):
    detail = await service.load_play(play_id)
    return PlayDetailResponse(
        play=PlayOut.from_play(detail.play),
        steps=[StepOut.from_step(step) for step in detail.steps],
    )


@router.patch("/{play_id}", response_model=PlayOut)
async def rename_play(play_id: str, request: PlayRenameRequest, service: PlayService = Depends(get_play_service)):
    play = await service.rename_play(play_id, request.play_name)
    return PlayOut.from_play(play)


@router.delete("/{play_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_play(play_id: str, service: PlayService = Depends(get_play_service)):
    await service.delete_play(play_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
