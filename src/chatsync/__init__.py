"""
chatsync — client-side message sync and timeline reconciliation.

Cache-first loading, polling reconciliation against a remote message store,
and render-ready timeline entries for a chat view.
"""

from chatsync.cache import SnapshotCache
from chatsync.config import SyncSettings, load_settings
from chatsync.engine import ConversationView
from chatsync.errors import ChatSyncError, FetchError, OutboundError, RemoteStoreError, ValidationError
from chatsync.models import Conversation, ConversationKind, Message, Profile
from chatsync.reconciler import Reconciler
from chatsync.remote import HttpRemoteStore, RemoteStore, create_store

__version__ = "0.1.0"
__all__ = [
    "SnapshotCache",
    "SyncSettings",
    "load_settings",
    "ConversationView",
    "ChatSyncError",
    "FetchError",
    "OutboundError",
    "RemoteStoreError",
    "ValidationError",
    "Conversation",
    "ConversationKind",
    "Message",
    "Profile",
    "Reconciler",
    "HttpRemoteStore",
    "RemoteStore",
    "create_store",
]
