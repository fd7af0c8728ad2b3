from __future__ import annotations

import getpass
import json
from pathlib import Path

from config import JsonConfigStore


def test_config_defaults(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "config.json")

    assert store.get_username() == getpass.getuser()
    assert store.get_bus() == "system"
    assert store.get_device_path() == ""
    assert store.get_poll_interval_ms() == 100
    assert store.get_log_level() == "INFO"


def test_config_reads_file_values(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "username": "alice",
                "bus": "session",
                "device_path": "/net/reactivated/Fprint/Device/1",
                "poll_interval_ms": 250,
            }
        ),
        encoding="utf-8",
    )

    store = JsonConfigStore(path=path)
    assert store.get_username() == "alice"
    assert store.get_bus() == "session"
    assert store.get_device_path() == "/net/reactivated/Fprint/Device/1"
    assert store.get_poll_interval_ms() == 250


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_bus() == "system"
    assert store.get_poll_interval_ms() == 100


def test_config_bad_values_fall_back(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        '{"bus": "tcp", "poll_interval_ms": "soon", "log_level": "debug"}',
        encoding="utf-8",
    )

    store = JsonConfigStore(path=path)
    assert store.get_bus() == "system"
    assert store.get_poll_interval_ms() == 100
    assert store.get_log_level() == "DEBUG"
