"""Chat between a professional and their clients."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID, uuid4

from calorie_planner.domain.tracking import ChatMessage
from calorie_planner.services.profiles import ProfileService

MAX_MESSAGE_LENGTH = 2000


class ChatError(ValueError):
    """Raised when a chat message or room is rejected."""


class ChatRepository(Protocol):
    """Persistence interface for chat messages."""

    def add_message(self, message: ChatMessage) -> ChatMessage:
        """Store a message."""

    def list_messages(self, room_id: str) -> list[ChatMessage]:
        """Return all messages of a room."""


def room_id(first_id: UUID, second_id: UUID) -> str:
    """Return the room id shared by two users regardless of order."""
    return "_".join(sorted((str(first_id), str(second_id))))


@dataclass
class ChatService:
    """Application service for chat rooms between linked users."""

    repository: ChatRepository
    profiles: ProfileService

    def send_message(
        self, sender_id: UUID, recipient_id: UUID, text: str, now: datetime
    ) -> ChatMessage:
        """Store a message from sender to recipient."""
        cleaned = text.strip()
        if not cleaned:
            raise ChatError("Message text is required")
        if len(cleaned) > MAX_MESSAGE_LENGTH:
            raise ChatError("Message is too long")
        self._ensure_linked(sender_id, recipient_id)
        message = ChatMessage(
            id=uuid4(),
            room_id=room_id(sender_id, recipient_id),
            sender_id=sender_id,
            text=cleaned,
            sent_at=now,
        )
        return self.repository.add_message(message)

    def list_messages(self, user_id: UUID, other_user_id: UUID) -> list[ChatMessage]:
        """Return the room's messages ordered by time."""
        self._ensure_linked(user_id, other_user_id)
        messages = self.repository.list_messages(room_id(user_id, other_user_id))
        return sorted(messages, key=lambda message: message.sent_at)

    def _ensure_linked(self, first_id: UUID, second_id: UUID) -> None:
        if first_id == second_id or not self.profiles.are_linked(first_id, second_id):
            raise ChatError("You can only chat with your professional or clients")
