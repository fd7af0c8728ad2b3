"""Protocol interfaces used by the orchestrator and the UI."""

from __future__ import annotations

from typing import Callable, Iterator, Optional, Protocol

from models import FingerName, OperationKind, StatusEvent


class StatusSubscription(Protocol):
    def next_event(self, timeout: float) -> Optional[StatusEvent]: ...

    def __iter__(self) -> Iterator[StatusEvent]: ...

    def close(self) -> None: ...


class DeviceClient(Protocol):
    def claim(self, user: str) -> None: ...

    def release(self) -> None: ...

    def start_enroll(self, finger: FingerName) -> None: ...

    def stop_enroll(self) -> None: ...

    def start_verify(self, finger: FingerName) -> None: ...

    def stop_verify(self) -> None: ...

    def subscribe_status(self, kind: OperationKind) -> StatusSubscription: ...

    def list_enrolled_fingers(self, user: str) -> list[FingerName]: ...

    def delete_enrolled_fingers(self, finger: FingerName) -> None: ...

    def close(self) -> None: ...


ClientFactory = Callable[[], DeviceClient]


class ConfigStore(Protocol):
    def get_username(self) -> str: ...

    def get_bus(self) -> str: ...

    def get_device_path(self) -> str: ...

    def get_poll_interval_ms(self) -> int: ...

    def get_log_level(self) -> str: ...
