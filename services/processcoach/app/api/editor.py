"""Play-steps editor API.

An editor session holds the in-memory step list of one play between
requests; nothing reaches the server until ``/save`` except deletes of
persisted steps, which are sent immediately in the background.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..domain.play_service import EditorSession, PlayService
from ..domain.types import OwnerContext
from .deps import EditorRegistry, get_editor_registry, get_owner_context, get_play_service
from .schemas import (
    EditorStateResponse,
    NotificationOut,
    PlayOut,
    ReorderRequest,
    RoleOut,
    StepDeleteRequest,
    StepEditRequest,
    StepOut,
)

router = APIRouter(tags=["editor"])


def _state(session_id: str, session: EditorSession) -> EditorStateResponse:
    editor = session.editor
    return EditorStateResponse(
        sessionId=session_id,
        play=PlayOut.from_play(session.play),
        steps=[StepOut.from_step(step) for step in editor.steps],
        roles=[RoleOut.from_role(role) for role in session.roles],
        dirty=editor.is_dirty,
        notifications=[NotificationOut.from_notification(n) for n in editor.notifier.drain()],
    )


@router.post("/plays/{play_id}/editor", response_model=EditorStateResponse, status_code=status.HTTP_201_CREATED)
async def open_editor(
    play_id: str,
    service: PlayService = Depends(get_play_service),
    owner: OwnerContext = Depends(get_owner_context),
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = await service.open_editor(play_id, owner_token=owner.token)
    session_id = registry.add(session)
    return _state(session_id, session)


@router.get("/editor/{session_id}", response_model=EditorStateResponse)
async def get_editor(session_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    return _state(session_id, registry.get(session_id))


@router.post("/editor/{session_id}/steps", response_model=EditorStateResponse)
async def add_step(session_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = registry.get(session_id)
    session.editor.add_step()
    return _state(session_id, session)


@router.patch("/editor/{session_id}/steps", response_model=EditorStateResponse)
async def edit_step(
    session_id: str,
    request: StepEditRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = registry.get(session_id)
    ref = request.ref.to_ref()
    if request.field == "step_role_name":
        session.editor.set_role(ref, request.value or None)
    else:
        session.editor.edit_field(ref, request.field, request.value or "")
    return _state(session_id, session)


@router.delete("/editor/{session_id}/steps", response_model=EditorStateResponse)
async def delete_step(
    session_id: str,
    request: StepDeleteRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = registry.get(session_id)
    session.editor.delete_step(request.ref.to_ref())
    return _state(session_id, session)


@router.post("/editor/{session_id}/reorder", response_model=EditorStateResponse)
async def reorder_steps(
    session_id: str,
    request: ReorderRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
):
    session = registry.get(session_id)
    session.editor.reorder(request.from_index, request.to_index)
    return _state(session_id, session)


@router.post("/editor/{session_id}/save", response_model=EditorStateResponse)
async def save_steps(session_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    session = registry.get(session_id)
    await session.editor.save_all()
    return _state(session_id, session)


@router.delete("/editor/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_editor(session_id: str, registry: EditorRegistry = Depends(get_editor_registry)):
    registry.close(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
