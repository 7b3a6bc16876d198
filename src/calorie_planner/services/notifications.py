"""User-visible notifications."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Notification:
    """A short message surfaced to the user."""

    title: str
    description: str
    level: str = "error"


class Notifier(Protocol):
    """Delivers notifications to the active session's user."""

    async def notify(self, notification: Notification) -> None:
        """Send a notification."""
