"""
TimelineGrouper — per-entry presentation flags for an ordered message list.

Pure functions. A date divider opens every calendar day; an avatar header
opens every run of consecutive messages from one author within a day.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Sequence

from chatsync.models.message import MAX_TIMESTAMP_MS, Message


@dataclass(frozen=True)
class TimelineFlags:
    show_date_divider: bool
    show_avatar_header: bool
    is_grouped: bool


def to_datetime(timestamp_ms: int, tz: Optional[tzinfo] = None) -> datetime:
    # Clamped so a message built without validation still renders.
    clamped = min(max(timestamp_ms, 0), MAX_TIMESTAMP_MS)
    return datetime.fromtimestamp(clamped / 1000, tz)


def day_of(timestamp_ms: int, tz: Optional[tzinfo] = None) -> date:
    return to_datetime(timestamp_ms, tz).date()


def group_timeline(messages: Sequence[Message], tz: Optional[tzinfo] = None) -> list[TimelineFlags]:
    flags: list[TimelineFlags] = []
    prev: Optional[Message] = None
    for i, message in enumerate(messages):
        divider = i == 0 or day_of(prev.timestamp, tz) != day_of(message.timestamp, tz)
        same_author = i > 0 and prev.author_id == message.author_id
        flags.append(TimelineFlags(
            show_date_divider=divider,
            show_avatar_header=i == 0 or divider or not same_author,
            is_grouped=not divider and same_author,
        ))
        prev = message
    return flags


def date_divider_label(timestamp_ms: int, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
    """'Today', 'Yesterday', or e.g. 'Monday, March 4, 2024'."""
    moment = to_datetime(timestamp_ms, tz)
    today = (now or datetime.now(tz)).date()
    if moment.date() == today:
        return "Today"
    if moment.date() == today - timedelta(days=1):
        return "Yesterday"
    return f"{moment:%A, %B} {moment.day}, {moment.year}"


def relative_time(timestamp_ms: int, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
    moment = to_datetime(timestamp_ms, tz)
    diff = ((now or datetime.now(tz)) - moment).total_seconds()
    if diff < 0 or diff >= 7 * 86400:
        return f"{moment:%Y-%m-%d %H:%M}"
    if diff < 60:
        return "now"
    if diff < 3600:
        return f"{int(diff // 60)}m"
    if diff < 86400:
        return f"{int(diff // 3600)}h"
    return f"{int(diff // 86400)}d"
