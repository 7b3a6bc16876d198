"""Domain models for weight tracking and chat."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class WeightEntry:
    """Body weight recorded for one week, keyed by the week's Monday."""

    id: UUID
    user_id: UUID
    week_start: str
    weight_kg: float
    recorded_at: datetime


@dataclass(frozen=True)
class ChatMessage:
    """A message exchanged between a professional and a client."""

    id: UUID
    room_id: str
    sender_id: UUID
    text: str
    sent_at: datetime
