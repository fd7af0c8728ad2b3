"""Listing and deleting enrolled fingerprints."""

from __future__ import annotations

import logging

from interfaces import ClientFactory, DeviceClient
from models import FingerName, parse_finger

logger = logging.getLogger(__name__)


class EnrolledPrintsService:
    """Blocking helpers; callers run them off the UI thread.

    A fresh DeviceClient is created per call and closed afterwards.
    """

    def __init__(self, client_factory: ClientFactory, user: str) -> None:
        self._client_factory = client_factory
        self._user = user

    def list(self) -> list[FingerName]:
        client = self._client_factory()
        try:
            return client.list_enrolled_fingers(self._user)
        finally:
            self._safe_close(client)

    def delete(self, finger: FingerName | str) -> None:
        """Claim, delete the print for ``finger``, release.

        Release runs only when the claim succeeded; its failure is logged.
        """
        finger = parse_finger(finger)
        client = self._client_factory()
        try:
            client.claim(self._user)
            try:
                client.delete_enrolled_fingers(finger)
                logger.info("deleted %s for %s", finger.value, self._user)
            finally:
                self._safe_release(client)
        finally:
            self._safe_close(client)

    def _safe_release(self, client: DeviceClient) -> None:
        try:
            client.release()
        except Exception as exc:
            logger.warning("device release failed: %s", exc)

    def _safe_close(self, client: DeviceClient) -> None:
        try:
            client.close()
        except Exception as exc:
            logger.warning("closing device client failed: %s", exc)
