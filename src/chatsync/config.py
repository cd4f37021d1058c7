"""
Settings for the sync engine and CLI, stored as JSON in ``~/.chatsync/config.json``.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from chatsync.attachments import DEFAULT_MEDIA_GATEWAY
from chatsync.polling import DEFAULT_POLL_INTERVAL
from chatsync.scroll import DEFAULT_THRESHOLD
from chatsync.transport.http import DEFAULT_BASE_URL

CONFIG_FILE = Path.home() / ".chatsync" / "config.json"


class SyncSettings(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    access_token: Optional[str] = None
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    fetch_limit: int = Field(default=100, ge=1)
    scroll_threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0)
    min_request_interval: float = Field(default=0.25, ge=0)
    media_gateway: str = DEFAULT_MEDIA_GATEWAY
    request_timeout: float = Field(default=30.0, gt=0)


def load_settings(path: Optional[Path] = None) -> SyncSettings:
    path = path or CONFIG_FILE
    try:
        raw = json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return SyncSettings()
    if not isinstance(raw, dict):
        return SyncSettings()
    return SyncSettings.model_validate(raw)


def save_settings(settings: SyncSettings, path: Optional[Path] = None) -> None:
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.model_dump(exclude_none=True), indent=2))
