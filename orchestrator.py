"""State-machine based enroll/verify session orchestration."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from classification import classify
from errors import INTERNAL, FprintError
from interfaces import ClientFactory, DeviceClient, StatusSubscription
from models import (
    FingerName,
    OperationKind,
    OperationState,
    Outcome,
    StatusEvent,
    Verdict,
    parse_finger,
)
from result_channel import ResultChannel

logger = logging.getLogger(__name__)

StateCallback = Callable[[OperationState, OperationState], None]
ProgressCallback = Callable[[StatusEvent], None]

_CANCELLABLE_STATES = (
    OperationState.IDLE,
    OperationState.CLAIMING,
    OperationState.STARTING,
    OperationState.LISTENING,
)


@dataclass
class _Session:
    kind: OperationKind
    finger: FingerName
    user: str
    claimed: bool = False
    started: bool = False
    outcome: Optional[Outcome] = None

    def settle(self, outcome: Outcome) -> bool:
        if self.outcome is not None:
            return False
        self.outcome = outcome
        return True


class _SessionRunner:
    """Drives one session on its worker thread.

    claim -> subscribe -> start -> listen -> stop -> release, where stop runs
    only if start succeeded and release only if claim succeeded.  The outcome
    is fixed by the first of: claim/start failure, a terminal status event,
    or an observed cancel request.  It is published exactly once.
    """

    def __init__(
        self,
        session: _Session,
        client_factory: ClientFactory,
        channel: ResultChannel,
        cancel_event: threading.Event,
        poll_interval_s: float,
        on_state_change: Optional[StateCallback],
        on_progress: Optional[ProgressCallback],
    ) -> None:
        self._session = session
        self._client_factory = client_factory
        self._channel = channel
        self._cancel_event = cancel_event
        self._poll_interval_s = poll_interval_s
        self._on_state_change = on_state_change
        self._on_progress = on_progress
        self.state = OperationState.IDLE

    def run(self) -> None:
        session = self._session
        client: Optional[DeviceClient] = None
        try:
            client = self._client_factory()
            self._drive(client)
        except FprintError as exc:
            logger.error("%s session failed: %s", session.kind.value, exc.message)
            session.settle(Outcome.failure(exc.code))
        except Exception:
            logger.exception("%s session crashed", session.kind.value)
            session.settle(Outcome.failure(INTERNAL))
        finally:
            if client is not None:
                self._cleanup(client)
                self._safe_close(client)
            outcome = session.outcome or Outcome.failure(INTERNAL)
            self._transition(OperationState.DONE)
            logger.info(
                "%s of %s finished: %s %s",
                session.kind.value,
                session.finger.value,
                outcome.status.value,
                outcome.reason,
            )
            self._channel.put(outcome)

    def _drive(self, client: DeviceClient) -> None:
        session = self._session
        if self._cancel_observed():
            return

        self._transition(OperationState.CLAIMING)
        try:
            client.claim(session.user)
        except FprintError as exc:
            logger.error("claim for %s failed: %s", session.user, exc.message)
            session.settle(Outcome.failure(exc.code))
            return
        session.claimed = True
        if self._cancel_observed():
            return

        self._transition(OperationState.STARTING)
        # Subscribe before starting so the first status event cannot be missed.
        try:
            subscription = client.subscribe_status(session.kind)
        except FprintError as exc:
            logger.error("status subscription failed: %s", exc.message)
            session.settle(Outcome.failure(exc.code))
            return

        try:
            try:
                self._start_operation(client)
            except FprintError as exc:
                logger.error(
                    "%s start for %s failed: %s",
                    session.kind.value,
                    session.finger.value,
                    exc.message,
                )
                session.settle(Outcome.failure(exc.code))
                return
            session.started = True
            if self._cancel_observed():
                return

            self._transition(OperationState.LISTENING)
            self._listen(subscription)
        finally:
            self._safe_close_subscription(subscription)

    def _listen(self, subscription: StatusSubscription) -> None:
        session = self._session
        while True:
            if self._cancel_observed():
                return
            try:
                event = subscription.next_event(self._poll_interval_s)
            except FprintError as exc:
                logger.error("status stream broke: %s", exc.message)
                session.settle(Outcome.failure(exc.code))
                return
            if event is None:
                continue

            verdict = classify(session.kind, event.result_code, event.done)
            logger.debug(
                "%s status %s done=%s -> %s",
                session.kind.value,
                event.result_code,
                event.done,
                verdict.value,
            )
            if verdict == Verdict.CONTINUE:
                self._notify_progress(event)
                continue
            if verdict == Verdict.SUCCESS:
                session.settle(Outcome.success())
            else:
                session.settle(Outcome.failure(event.result_code))
            return

    def _start_operation(self, client: DeviceClient) -> None:
        if self._session.kind == OperationKind.ENROLL:
            client.start_enroll(self._session.finger)
        else:
            client.start_verify(self._session.finger)

    def _cleanup(self, client: DeviceClient) -> None:
        session = self._session
        if session.started:
            self._transition(OperationState.STOPPING)
            self._safe_stop(client)
        if session.claimed:
            self._transition(OperationState.RELEASING)
            self._safe_release(client)

    def _cancel_observed(self) -> bool:
        if not self._cancel_event.is_set():
            return False
        if self._session.settle(Outcome.cancelled()):
            logger.info("%s session cancelled in %s", self._session.kind.value, self.state.value)
        return True

    def _safe_stop(self, client: DeviceClient) -> None:
        try:
            if self._session.kind == OperationKind.ENROLL:
                client.stop_enroll()
            else:
                client.stop_verify()
        except Exception as exc:
            logger.warning("%s stop failed: %s", self._session.kind.value, exc)
        self._session.started = False

    def _safe_release(self, client: DeviceClient) -> None:
        try:
            client.release()
        except Exception as exc:
            logger.warning("device release failed: %s", exc)
        self._session.claimed = False

    def _safe_close_subscription(self, subscription: StatusSubscription) -> None:
        try:
            subscription.close()
        except Exception as exc:
            logger.warning("closing status subscription failed: %s", exc)

    def _safe_close(self, client: DeviceClient) -> None:
        try:
            client.close()
        except Exception as exc:
            logger.warning("closing device client failed: %s", exc)

    def _notify_progress(self, event: StatusEvent) -> None:
        if not self._on_progress:
            return
        try:
            self._on_progress(event)
        except Exception:
            logger.exception("progress callback failed")

    def _transition(self, to_state: OperationState) -> None:
        from_state = self.state
        if from_state == to_state:
            return
        self.state = to_state
        logger.debug("%s: %s -> %s", self._session.kind.value, from_state.value, to_state.value)
        if self._on_state_change:
            try:
                self._on_state_change(from_state, to_state)
            except Exception:
                logger.exception("state callback failed")


class SessionHandle:
    """Caller-side view of a running session."""

    def __init__(
        self,
        runner: _SessionRunner,
        channel: ResultChannel,
        cancel_event: threading.Event,
        thread: threading.Thread,
        kind: OperationKind,
        finger: FingerName,
    ) -> None:
        self._runner = runner
        self._channel = channel
        self._cancel_event = cancel_event
        self._thread = thread
        self.kind = kind
        self.finger = finger

    @property
    def state(self) -> OperationState:
        return self._runner.state

    @property
    def done(self) -> bool:
        return self._channel.filled

    def cancel(self) -> bool:
        """Request cancellation; returns False once the outcome is already fixed."""
        if self._channel.filled or self._runner.state not in _CANCELLABLE_STATES:
            return False
        self._cancel_event.set()
        return True

    def poll(self) -> Optional[Outcome]:
        return self._channel.try_take()

    def wait(self, timeout: Optional[float] = None) -> Optional[Outcome]:
        return self._channel.wait(timeout=timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout=timeout)


class OperationOrchestrator:
    def __init__(
        self,
        client_factory: ClientFactory,
        user: str,
        poll_interval_s: float = 0.1,
        on_state_change: Optional[StateCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self._client_factory = client_factory
        self._user = user
        self._poll_interval_s = poll_interval_s
        self._on_state_change = on_state_change
        self._on_progress = on_progress

    def start(
        self,
        kind: OperationKind,
        finger: FingerName | str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SessionHandle:
        """Validate ``finger`` and run one session on a background thread.

        Raises InvalidFingerError before any device call is made.
        """
        kind = OperationKind(kind)
        finger = parse_finger(finger)
        session = _Session(kind=kind, finger=finger, user=self._user)
        channel = ResultChannel()
        cancel_event = threading.Event()
        runner = _SessionRunner(
            session=session,
            client_factory=self._client_factory,
            channel=channel,
            cancel_event=cancel_event,
            poll_interval_s=self._poll_interval_s,
            on_state_change=self._on_state_change,
            on_progress=on_progress or self._on_progress,
        )
        thread = threading.Thread(
            target=runner.run,
            name=f"fprint-{kind.value}",
            daemon=True,
        )
        handle = SessionHandle(runner, channel, cancel_event, thread, kind, finger)
        logger.info("starting %s of %s for %s", kind.value, finger.value, self._user)
        thread.start()
        return handle
