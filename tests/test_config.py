import json

import pytest
from pydantic import ValidationError as SettingsValidationError

from chatsync.config import SyncSettings, load_settings, save_settings


def test_defaults():
    s = SyncSettings()
    assert s.base_url == "http://localhost:8080"
    assert s.poll_interval == 2.0
    assert s.fetch_limit == 100
    assert s.scroll_threshold == 100
    assert s.min_request_interval == 0.25
    assert s.media_gateway == "https://arweave.net"


def test_missing_or_broken_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "absent.json") == SyncSettings()
    broken = tmp_path / "broken.json"
    broken.write_text("{nope")
    assert load_settings(broken) == SyncSettings()
    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]")
    assert load_settings(listed) == SyncSettings()


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "config.json"
    save_settings(SyncSettings(base_url="https://chat.example", poll_interval=1.1), path)
    raw = json.loads(path.read_text())
    assert "access_token" not in raw
    loaded = load_settings(path)
    assert loaded.base_url == "https://chat.example"
    assert loaded.poll_interval == 1.1


def test_invalid_values_raise():
    with pytest.raises(SettingsValidationError):
        SyncSettings(poll_interval=0)
    with pytest.raises(SettingsValidationError):
        SyncSettings(fetch_limit=0)
