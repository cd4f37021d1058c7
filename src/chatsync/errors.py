"""
chatsync error types.

Nothing here is fatal to the process: callers catch these at the view
boundary and surface them to the host.
"""

from typing import Any, Optional


class ChatSyncError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class RemoteStoreError(ChatSyncError):
    def __init__(self, message: str, code: str = "remote_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class FetchError(RemoteStoreError):
    """Transient fetch failure. The cache is kept and the next tick retries."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="fetch_error", details=details)


class OutboundError(ChatSyncError):
    """A send/edit/delete was not confirmed. ``details`` holds what to retry with."""

    def __init__(self, message: str, code: str = "outbound_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class SendError(OutboundError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="send_error", details=details)


class EditError(OutboundError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="edit_error", details=details)


class DeleteError(OutboundError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code="delete_error", details=details)


class ValidationError(ChatSyncError):
    def __init__(self, message: str):
        super().__init__("validation_error", message)


class ConnectionError(ChatSyncError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)
