"""Simple JSON-based config store."""

from __future__ import annotations

import getpass
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BUS = "system"
DEFAULT_POLL_INTERVAL_MS = 100
DEFAULT_LOG_LEVEL = "INFO"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "fprint_manager" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_username(self) -> str:
        data = self._read_all()
        return str(data.get("username") or getpass.getuser())

    def get_bus(self) -> str:
        data = self._read_all()
        bus = str(data.get("bus", DEFAULT_BUS))
        return bus if bus in ("system", "session") else DEFAULT_BUS

    def get_device_path(self) -> str:
        data = self._read_all()
        return str(data.get("device_path", ""))

    def get_poll_interval_ms(self) -> int:
        data = self._read_all()
        try:
            value = int(data.get("poll_interval_ms", DEFAULT_POLL_INTERVAL_MS))
        except (TypeError, ValueError):
            return DEFAULT_POLL_INTERVAL_MS
        return value if value > 0 else DEFAULT_POLL_INTERVAL_MS

    def get_log_level(self) -> str:
        data = self._read_all()
        return str(data.get("log_level", DEFAULT_LOG_LEVEL)).upper()

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("ignoring unreadable config %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

