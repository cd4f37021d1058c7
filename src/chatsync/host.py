"""
Interface the hosting UI implements for a ConversationView.

The view never reads ambient UI state. It calls back into the host with the
conversation it is acting on, and asks the host for the current viewport
when it needs to recompute the scroll anchor.
"""

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

from chatsync.errors import ChatSyncError
from chatsync.models.conversation import Conversation
from chatsync.scroll import Viewport

if TYPE_CHECKING:
    from chatsync.render import TimelineEntry


class ViewHost(Protocol):
    def render(self, conversation: Conversation, entries: Sequence["TimelineEntry"]) -> None: ...

    def scroll_to_bottom(self, smooth: bool = True) -> None: ...

    def scroll_to_entry(self, message_id: str) -> bool:
        """Scroll a rendered entry into view. False if it is not rendered."""
        ...

    def viewport(self) -> Optional[Viewport]: ...

    def focus_compose(self) -> None: ...

    def insert_compose_text(self, text: str) -> None: ...

    def notify(self, message: str) -> None: ...

    def notify_error(self, error: ChatSyncError) -> None: ...


class NullHost:
    """Host that renders nothing. Used when a view runs headless."""

    def render(self, conversation: Conversation, entries: Sequence["TimelineEntry"]) -> None:
        pass

    def scroll_to_bottom(self, smooth: bool = True) -> None:
        pass

    def scroll_to_entry(self, message_id: str) -> bool:
        return False

    def viewport(self) -> Optional[Viewport]:
        return None

    def focus_compose(self) -> None:
        pass

    def insert_compose_text(self, text: str) -> None:
        pass

    def notify(self, message: str) -> None:
        pass

    def notify_error(self, error: ChatSyncError) -> None:
        pass
