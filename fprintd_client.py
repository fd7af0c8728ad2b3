"""fprintd device client over D-Bus using PyGObject (Gio).

Each client owns a private GLib main context that is made thread-default
while the device proxy is created, so ``EnrollStatus``/``VerifyStatus``
signals are dispatched only when the owning worker thread pumps that
context through ``FprintdStatusSubscription.next_event``.  A client must be
created, used and closed on the same thread.
"""

from __future__ import annotations

import collections
import logging
from typing import Any, Iterator, Optional

from errors import (
    ALREADY_CLAIMED,
    DEVICE_BUSY,
    DEVICE_NOT_CLAIMED,
    INVALID_FINGER,
    NO_ENROLLED_PRINTS,
    PERMISSION_DENIED,
    ClaimError,
    FprintError,
    OperationError,
    TransportError,
)
from models import FingerName, OperationKind, StatusEvent

try:
    from gi.repository import Gio, GLib
except Exception:  # pragma: no cover
    Gio = None  # type: ignore
    GLib = None  # type: ignore

logger = logging.getLogger(__name__)

FPRINT_NAMESPACE = "net.reactivated.Fprint"
FPRINT_PATH = "/" + FPRINT_NAMESPACE.replace(".", "/")
MANAGER_INTERFACE = FPRINT_NAMESPACE + ".Manager"
DEVICE_INTERFACE = FPRINT_NAMESPACE + ".Device"
ERROR_PREFIX = FPRINT_NAMESPACE + ".Error."

STATUS_SIGNALS = {
    OperationKind.ENROLL: "EnrollStatus",
    OperationKind.VERIFY: "VerifyStatus",
}

# fprintd error suffix -> (code while claiming, code otherwise)
_REMOTE_ERROR_CODES = {
    "AlreadyInUse": (ALREADY_CLAIMED, DEVICE_BUSY),
    "ClaimDevice": (ALREADY_CLAIMED, DEVICE_NOT_CLAIMED),
    "PermissionDenied": (PERMISSION_DENIED, PERMISSION_DENIED),
    "InvalidFingername": (INVALID_FINGER, INVALID_FINGER),
    "NoEnrolledPrints": (NO_ENROLLED_PRINTS, NO_ENROLLED_PRINTS),
}


def map_remote_error(remote_name: Optional[str], message: str, claiming: bool = False) -> FprintError:
    """Translate a D-Bus error name into the app's exception taxonomy."""
    if not remote_name or not remote_name.startswith(ERROR_PREFIX):
        return TransportError(message)
    suffix = remote_name[len(ERROR_PREFIX):]
    if suffix == "NoSuchDevice":
        return TransportError(message)
    codes = _REMOTE_ERROR_CODES.get(suffix)
    if codes is None:
        return OperationError(suffix, message)
    code = codes[0] if claiming else codes[1]
    if claiming:
        return ClaimError(code, message)
    return OperationError(code, message)


def _to_fprint_error(exc: Exception, claiming: bool = False) -> FprintError:
    remote_name = None
    if Gio is not None and isinstance(exc, GLib.GError):
        remote_name = Gio.DBusError.get_remote_error(exc)
    message = getattr(exc, "message", "") or str(exc)
    return map_remote_error(remote_name, message, claiming=claiming)


class FprintdStatusSubscription:
    """Lazy, non-restartable sequence of status events for one operation."""

    def __init__(self, proxy: Any, context: Any, signal_name: str) -> None:
        self._proxy = proxy
        self._context = context
        self._signal_name = signal_name
        self._events: collections.deque[StatusEvent] = collections.deque()
        self._handler_id: Optional[int] = proxy.connect("g-signal", self._on_signal)

    def _on_signal(self, proxy: Any, sender: str, signal: str, params: Any) -> None:
        if signal != self._signal_name:
            return
        result, done = params.unpack()
        self._events.append(StatusEvent(result_code=str(result), done=bool(done)))

    def next_event(self, timeout: float) -> Optional[StatusEvent]:
        if self._handler_id is None:
            raise TransportError("status subscription is closed")
        if not self._events:
            self._pump(timeout)
        if self._events:
            return self._events.popleft()
        return None

    def __iter__(self) -> Iterator[StatusEvent]:
        while self._handler_id is not None:
            event = self.next_event(0.1)
            if event is not None:
                yield event

    def close(self) -> None:
        if self._handler_id is not None:
            self._proxy.disconnect(self._handler_id)
            self._handler_id = None
        self._events.clear()

    def _pump(self, timeout: float) -> None:
        # A timeout source wakes the blocking iteration when nothing arrives.
        source = GLib.timeout_source_new(max(int(timeout * 1000), 1))
        source.set_callback(lambda *_: False)
        source.attach(self._context)
        try:
            self._context.iteration(True)
            while self._context.pending():
                self._context.iteration(False)
        finally:
            source.destroy()


class FprintdDeviceClient:
    def __init__(
        self,
        bus: str = "system",
        device_path: str = "",
        call_timeout_ms: int = 30000,
    ) -> None:
        if Gio is None:
            raise RuntimeError("PyGObject is not installed")
        self._call_timeout_ms = call_timeout_ms
        bus_type = Gio.BusType.SESSION if bus == "session" else Gio.BusType.SYSTEM
        self._context = GLib.MainContext.new()
        self._context.push_thread_default()
        try:
            path = device_path or self._default_device_path(bus_type)
            self._proxy = Gio.DBusProxy.new_for_bus_sync(
                bus_type,
                Gio.DBusProxyFlags.DO_NOT_AUTO_START,
                None,
                FPRINT_NAMESPACE,
                path,
                DEVICE_INTERFACE,
                None,
            )
        except GLib.GError as exc:
            self._context.pop_thread_default()
            raise _to_fprint_error(exc) from exc
        except Exception:
            self._context.pop_thread_default()
            raise
        self._closed = False
        logger.debug("connected to fprintd device %s on %s bus", path, bus)

    def _default_device_path(self, bus_type: Any) -> str:
        manager = Gio.DBusProxy.new_for_bus_sync(
            bus_type,
            Gio.DBusProxyFlags.DO_NOT_AUTO_START,
            None,
            FPRINT_NAMESPACE,
            FPRINT_PATH + "/Manager",
            MANAGER_INTERFACE,
            None,
        )
        result = manager.call_sync(
            "GetDefaultDevice", None, Gio.DBusCallFlags.NONE, self._call_timeout_ms, None
        )
        return str(result.unpack()[0])

    def _call(self, method: str, args: Optional[Any] = None, claiming: bool = False) -> Any:
        try:
            result = self._proxy.call_sync(
                method, args, Gio.DBusCallFlags.NONE, self._call_timeout_ms, None
            )
        except GLib.GError as exc:
            raise _to_fprint_error(exc, claiming=claiming) from exc
        return result.unpack() if result is not None else ()

    def claim(self, user: str) -> None:
        self._call("Claim", GLib.Variant("(s)", (user,)), claiming=True)

    def release(self) -> None:
        self._call("Release")

    def start_enroll(self, finger: FingerName) -> None:
        self._call("EnrollStart", GLib.Variant("(s)", (FingerName(finger).value,)))

    def stop_enroll(self) -> None:
        self._call("EnrollStop")

    def start_verify(self, finger: FingerName) -> None:
        self._call("VerifyStart", GLib.Variant("(s)", (FingerName(finger).value,)))

    def stop_verify(self) -> None:
        self._call("VerifyStop")

    def subscribe_status(self, kind: OperationKind) -> FprintdStatusSubscription:
        return FprintdStatusSubscription(self._proxy, self._context, STATUS_SIGNALS[kind])

    def list_enrolled_fingers(self, user: str) -> list[FingerName]:
        try:
            (names,) = self._call("ListEnrolledFingers", GLib.Variant("(s)", (user,)))
        except OperationError as exc:
            if exc.code == NO_ENROLLED_PRINTS:
                return []
            raise
        fingers: list[FingerName] = []
        for name in names:
            try:
                fingers.append(FingerName(name))
            except ValueError:
                logger.warning("ignoring unknown enrolled finger %r", name)
        return fingers

    def delete_enrolled_fingers(self, finger: FingerName) -> None:
        self._call("DeleteEnrolledFinger", GLib.Variant("(s)", (FingerName(finger).value,)))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._proxy = None
        self._context.pop_thread_default()
