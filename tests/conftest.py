from datetime import timezone

import pytest

from chatsync.config import SyncSettings
from chatsync.engine import ConversationView
from chatsync.models.conversation import Conversation, ConversationKind

from fakes import FakeStore, RecordingHost


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def host():
    return RecordingHost()


@pytest.fixture
def settings():
    return SyncSettings(poll_interval=0.01, min_request_interval=0)


@pytest.fixture
def view(store, host, settings):
    return ConversationView(store, host, settings, tz=timezone.utc)


@pytest.fixture
def channel():
    return Conversation(id="c1", name="general")


@pytest.fixture
def direct():
    return Conversation(id="d1", kind=ConversationKind.DIRECT, members=["alice", "bob"])
