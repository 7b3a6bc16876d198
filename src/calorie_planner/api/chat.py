"""Chat endpoints between professionals and clients."""

from __future__ import annotations

from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Request, status

from calorie_planner.api.dependencies import current_user_id, get_container
from calorie_planner.api.models import MessageIn  # noqa: TC001
from calorie_planner.domain.tracking import ChatMessage  # noqa: TC001
from calorie_planner.services.chat import ChatError

router = APIRouter(prefix="/chats", tags=["chat"])


@router.get("/professional")
def my_professional(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the professional the current user can chat with."""
    container = get_container(request)
    professional_id = container.client_service.professional_for(user_id)
    if professional_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No professional assigned"
        )
    profile = container.profile_service.get_profile(professional_id)
    return {
        "professional_id": str(professional_id),
        "display_name": profile.display_name if profile else None,
    }


@router.get("/{other_user_id}/messages")
def list_messages(
    other_user_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the conversation with another user."""
    try:
        messages = get_container(request).chat_service.list_messages(
            user_id, other_user_id
        )
    except ChatError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)
        ) from exc
    return {"messages": [_message_payload(message) for message in messages]}


@router.post("/{other_user_id}/messages", status_code=status.HTTP_201_CREATED)
def send_message(
    other_user_id: UUID,
    payload: MessageIn,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Send a message to another user."""
    container = get_container(request)
    try:
        message = container.chat_service.send_message(
            user_id, other_user_id, payload.text, container.clock()
        )
    except ChatError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return _message_payload(message)


def _message_payload(message: ChatMessage) -> dict[str, object]:
    return {
        "id": str(message.id),
        "room_id": message.room_id,
        "sender_id": str(message.sender_id),
        "text": message.text,
        "sent_at": message.sent_at.isoformat(),
    }
