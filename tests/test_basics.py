"""Basic unit tests for the chatsync package."""

from chatsync import (
    ChatSyncError,
    ConversationView,
    FetchError,
    OutboundError,
    RemoteStoreError,
    SnapshotCache,
    ValidationError,
    __version__,
)
from chatsync.errors import ConnectionError, DeleteError, EditError, SendError


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert ConversationView is not None
    assert SnapshotCache is not None


def test_error_hierarchy():
    assert issubclass(RemoteStoreError, ChatSyncError)
    assert issubclass(FetchError, RemoteStoreError)
    assert issubclass(SendError, OutboundError)
    assert issubclass(EditError, OutboundError)
    assert issubclass(DeleteError, OutboundError)
    assert issubclass(ValidationError, ChatSyncError)
    assert issubclass(ConnectionError, ChatSyncError)


def test_error_attributes():
    err = ChatSyncError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    err_with_details = SendError("not sent", details={"draft": "hi"})
    assert err_with_details.code == "send_error"
    assert err_with_details.details == {"draft": "hi"}

    assert FetchError("down").code == "fetch_error"
    assert RemoteStoreError("HTTP 500", code="http_error").code == "http_error"
    assert ValidationError("empty").code == "validation_error"
