"""
Noise meter: two-state (idle/active) sampling lifecycle over a MicrophoneSource.
Keeps only the most recent amplitude; readers derive level and tier from it.
"""
from __future__ import annotations

import enum
import logging
import math
import threading

from audio.level import Tier, amplitude_to_level, classify
from sdk import MicPermission, MicrophoneError, MicrophoneSource

logger = logging.getLogger(__name__)


class MeterState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


class MeterSubscription:
    """
    Handle returned by NoiseMeter.start(). cancel() stops the meter if this is still
    the live subscription; cancelling an old handle after a restart does nothing.
    """

    def __init__(self, meter: NoiseMeter) -> None:
        self._meter = meter

    @property
    def active(self) -> bool:
        return self._meter._subscription is self

    def cancel(self) -> None:
        self._meter._stop_subscription(self)


class NoiseMeter:
    """
    start() requests permission and opens the microphone; stop() releases it and clears the reading.
    Both are idempotent. Samples arrive on the capability's thread, so the reading is lock-guarded.
    """

    def __init__(self, microphone: MicrophoneSource) -> None:
        self._microphone = microphone
        self._lock = threading.Lock()
        self._state = MeterState.IDLE
        self._raw: float | None = None
        self._permission: MicPermission | None = None
        self._subscription: MeterSubscription | None = None

    @property
    def state(self) -> MeterState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is MeterState.ACTIVE

    @property
    def permission(self) -> MicPermission | None:
        """Result of the last permission request, or None if start() has not asked yet."""
        return self._permission

    @property
    def raw_amplitude(self) -> float | None:
        with self._lock:
            return self._raw

    @property
    def level(self) -> float | None:
        return amplitude_to_level(self.raw_amplitude)

    @property
    def tier(self) -> Tier:
        return classify(self.level)

    def permission_status(self) -> str:
        """Label for the current microphone access ("Granted" / "Not granted" / "Denied")."""
        try:
            return self._microphone.get_permission().status_label
        except Exception as e:
            logger.warning("Microphone permission check failed: %s", e)
            return MicPermission(granted=False, can_ask_again=True).status_label

    def start(self) -> MeterSubscription | None:
        """
        Begin sampling. Returns the live subscription, or None when access is denied
        or the device cannot be opened. Starting while active returns the existing subscription.
        """
        if self._subscription is not None:
            return self._subscription

        try:
            permission = self._microphone.request_permission()
        except Exception as e:
            logger.warning("Microphone permission request failed: %s", e)
            permission = MicPermission(granted=False, can_ask_again=True)
        self._permission = permission
        if not permission.granted:
            logger.info("Microphone access not granted (%s)", permission.status_label)
            self._reset_reading()
            return None

        try:
            self._microphone.start(self._on_sample)
        except MicrophoneError as e:
            logger.warning("Noise meter could not start: %s", e)
            self._release()
            self._reset_reading()
            return None

        self._subscription = MeterSubscription(self)
        self._state = MeterState.ACTIVE
        logger.debug("Noise meter active")
        return self._subscription

    def stop(self) -> None:
        """Stop sampling and clear the reading. Safe to call when idle; teardown errors are logged only."""
        subscription = self._subscription
        if subscription is None:
            self._reset_reading()
            return
        self._stop_subscription(subscription)

    def _stop_subscription(self, subscription: MeterSubscription) -> None:
        if self._subscription is not subscription:
            return
        self._subscription = None
        self._state = MeterState.IDLE
        self._release()
        self._reset_reading()
        logger.debug("Noise meter idle")

    def _release(self) -> None:
        try:
            self._microphone.stop()
        except Exception as e:
            logger.debug("Ignoring microphone stop error: %s", e)

    def _reset_reading(self) -> None:
        with self._lock:
            self._raw = None

    def _on_sample(self, amplitude: float) -> None:
        if self._state is not MeterState.ACTIVE:
            return
        if isinstance(amplitude, bool) or not isinstance(amplitude, (int, float)):
            return
        if math.isnan(amplitude):
            return
        with self._lock:
            self._raw = float(amplitude)
