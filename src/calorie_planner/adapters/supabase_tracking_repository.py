"""Supabase repositories for weight entries and chat messages."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from calorie_planner.domain.tracking import ChatMessage, WeightEntry
from calorie_planner.services.chat import ChatRepository
from calorie_planner.services.weight import WeightRepository


@dataclass
class SupabaseWeightRepository(WeightRepository):
    """Stores one weight row per user and week."""

    client: Client

    def get_entry(self, user_id: UUID, week_start: str) -> WeightEntry | None:
        """Return the entry for a week, if present."""
        response = (
            self.client.table("weight_entries")
            .select("*")
            .eq("user_id", str(user_id))
            .eq("week_start", week_start)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_weight(response.data[0])

    def save_entry(self, entry: WeightEntry) -> WeightEntry:
        """Insert or replace the week's entry."""
        response = (
            self.client.table("weight_entries")
            .upsert(
                {
                    "id": str(entry.id),
                    "user_id": str(entry.user_id),
                    "week_start": entry.week_start,
                    "weight_kg": entry.weight_kg,
                    "recorded_at": entry.recorded_at.isoformat(),
                },
                on_conflict="user_id,week_start",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save weight entry")
        return _parse_weight(response.data[0])

    def list_entries(self, user_id: UUID) -> list[WeightEntry]:
        """Return all entries for a user."""
        response = (
            self.client.table("weight_entries")
            .select("*")
            .eq("user_id", str(user_id))
            .order("week_start")
            .execute()
        )
        return [_parse_weight(row) for row in response.data or []]


@dataclass
class SupabaseChatRepository(ChatRepository):
    """Stores chat messages keyed by room id."""

    client: Client

    def add_message(self, message: ChatMessage) -> ChatMessage:
        """Insert a message and return it."""
        response = (
            self.client.table("chat_messages")
            .insert(
                {
                    "id": str(message.id),
                    "room_id": message.room_id,
                    "sender_id": str(message.sender_id),
                    "text": message.text,
                    "sent_at": message.sent_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store chat message")
        return _parse_message(response.data[0])

    def list_messages(self, room_id: str) -> list[ChatMessage]:
        """Return a room's messages ordered by time."""
        response = (
            self.client.table("chat_messages")
            .select("*")
            .eq("room_id", room_id)
            .order("sent_at")
            .execute()
        )
        return [_parse_message(row) for row in response.data or []]


def _parse_weight(row: dict[str, object]) -> WeightEntry:
    return WeightEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        week_start=str(row["week_start"]),
        weight_kg=float(row["weight_kg"]),  # type: ignore[arg-type]
        recorded_at=datetime.fromisoformat(str(row["recorded_at"])),
    )


def _parse_message(row: dict[str, object]) -> ChatMessage:
    return ChatMessage(
        id=UUID(str(row["id"])),
        room_id=str(row["room_id"]),
        sender_id=UUID(str(row["sender_id"])),
        text=str(row.get("text", "")),
        sent_at=datetime.fromisoformat(str(row["sent_at"])),
    )
