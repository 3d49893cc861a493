"""sharegate: capability-based file sharing.

Decides who may read, write, or re-share a file, manages the grants
that record it, and tells live clients when grants change.
"""

__version__ = "0.1.0"

from sharegate.authorization import can_manage_grants, effective_capabilities
from sharegate.capabilities import Capabilities, Capability
from sharegate.config import ShareConfig
from sharegate.events import EventType, PermissionEvent
from sharegate.exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ShareGateError,
    ValidationError,
)
from sharegate.gate import AccessGate
from sharegate.models import File, Grant, User
from sharegate.notifier import ChangeNotifier
from sharegate.protocols import Channel, FileRepository, GrantRepository, UserRepository
from sharegate.service import SharingService

__all__ = [
    "AccessDeniedError",
    "AccessGate",
    "Capabilities",
    "Capability",
    "ChangeNotifier",
    "Channel",
    "ConflictError",
    "EventType",
    "File",
    "FileRepository",
    "Grant",
    "GrantRepository",
    "NotFoundError",
    "PermissionEvent",
    "ShareConfig",
    "ShareGateError",
    "SharingService",
    "User",
    "UserRepository",
    "ValidationError",
    "__version__",
    "can_manage_grants",
    "effective_capabilities",
]
