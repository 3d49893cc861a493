"""Custom exception hierarchy for the sharing core."""


class ShareGateError(Exception):
    """Base exception for all sharegate errors."""


class NotFoundError(ShareGateError):
    """Raised when a file, user, or grant does not exist."""


class AccessDeniedError(ShareGateError):
    """Raised when a capability check fails."""


class ConflictError(ShareGateError):
    """Raised when the store rejects a grant mutation (e.g. a uniqueness violation)."""


class ValidationError(ShareGateError):
    """Raised on malformed capability input or a meaningless grant target."""
