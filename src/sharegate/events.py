"""Change event types published to subscribers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class EventType(Enum):
    """Kinds of server-originated change events."""

    PERMISSION_UPDATE = "permission_update"


@dataclass(frozen=True, slots=True)
class PermissionEvent:
    """Immutable record that grants on a file changed.

    Attributes:
        file_id: The file whose grants were created, replaced, or revoked.
        event_type: Always ``PERMISSION_UPDATE`` today.
    """

    file_id: int
    event_type: EventType = EventType.PERMISSION_UPDATE

    def to_payload(self) -> dict[str, Any]:
        """Wire form: ``{"type": "permission_update", "fileId": <int>}``."""
        return {"type": self.event_type.value, "fileId": self.file_id}
