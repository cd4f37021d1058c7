from chatsync.models.conversation import Conversation, ConversationKind, Member, normalize_members
from chatsync.models.message import Message, normalize_timestamp
from chatsync.models.profile import Profile, display_name_for, shorten_address

__all__ = [
    "Conversation",
    "ConversationKind",
    "Member",
    "Message",
    "Profile",
    "display_name_for",
    "normalize_members",
    "normalize_timestamp",
    "shorten_address",
]
