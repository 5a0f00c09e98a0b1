"""
Error taxonomy for authentication demos.

All errors carry the mechanism they occurred under so the top-level
handler can print mechanism-specific troubleshooting hints.
"""
from typing import Iterable, Optional

from mongo_auth_demo.models.mechanism import MechanismKind


class AuthDemoError(Exception):
    """Base class for errors raised during a demo run."""

    def __init__(self, message: str, kind: Optional[MechanismKind] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind


class ConfigurationError(AuthDemoError):
    """A required credential field is unset or a referenced file is missing."""

    def __init__(
        self,
        message: str,
        kind: Optional[MechanismKind] = None,
        missing: Iterable[str] = (),
        missing_files: Iterable[str] = (),
    ):
        super().__init__(message, kind)
        self.missing = frozenset(missing)
        self.missing_files = frozenset(missing_files)


class ConnectionFailedError(AuthDemoError):
    """The driver or identity provider could not establish an authenticated connection."""


class OperationError(AuthDemoError):
    """A database operation failed after the connection was established."""

    def __init__(self, message: str, step: str, kind: Optional[MechanismKind] = None):
        super().__init__(message, kind)
        self.step = step
