"""Reconciliation exceptions."""

from typing import Any, Optional


class TreeSyncError(Exception):
    """Base class for every error raised by pyqt-treesync."""


class TransportError(TreeSyncError):
    """Raised when an item list request fails before producing an answer."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MutationFault(TreeSyncError):
    """Raised when the document store throws while nodes are written."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class ConfigParseFault(TreeSyncError, ValueError):
    """Raised when a configuration field cannot be parsed."""

    def __init__(self, field_name: str, raw_value: Any, expected: str):
        super().__init__(f"{field_name}: expected {expected}, got {raw_value!r}")
        self.field_name = field_name
        self.raw_value = raw_value
