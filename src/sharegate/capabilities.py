"""Capability enum and the read/write/share tuple carried by grants."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from .exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping


class Capability(str, Enum):
    """A single capability a user may hold on a file."""

    READ = "read"
    WRITE = "write"
    SHARE = "share"

    @property
    def flag(self) -> str:
        """Name of the grant column backing this capability."""
        return f"can_{self.value}"


# Wire (camelCase) key -> field name
_WIRE_KEYS = {
    "canRead": "can_read",
    "canWrite": "can_write",
    "canShare": "can_share",
}


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Complete read/write/share tuple.

    Defaults match a freshly created share: readable, not writable,
    not re-shareable.
    """

    can_read: bool = True
    can_write: bool = False
    can_share: bool = False

    ALL: ClassVar[Capabilities]
    NONE: ClassVar[Capabilities]

    def allows(self, capability: Capability) -> bool:
        """Return True if *capability* is granted."""
        return bool(getattr(self, capability.flag))

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Capabilities:
        """Build from snake_case or camelCase keys.

        Missing keys take the creation defaults.  Unknown keys and
        non-boolean values raise ``ValidationError``.
        """
        values: dict[str, bool] = {}
        for key, value in data.items():
            name = _WIRE_KEYS.get(key, key)
            if name not in ("can_read", "can_write", "can_share"):
                raise ValidationError(f"Unknown capability field: {key!r}")
            if not isinstance(value, bool):
                raise ValidationError(
                    f"Capability {key!r} must be a boolean, got {type(value).__name__}"
                )
            values[name] = value
        return cls(**values)

    @classmethod
    def of(cls, obj: Any) -> Capabilities:
        """Extract the three flags from any object exposing ``can_*`` attributes."""
        return cls(
            can_read=bool(obj.can_read),
            can_write=bool(obj.can_write),
            can_share=bool(obj.can_share),
        )


Capabilities.ALL = Capabilities(can_read=True, can_write=True, can_share=True)
Capabilities.NONE = Capabilities(can_read=False, can_write=False, can_share=False)
