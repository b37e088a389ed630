"""
Microphone source backed by sounddevice (PortAudio): delivers one dBFS reading per sampling interval.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable

import numpy as np

from sdk import MicPermission, MicrophoneError, MicrophoneSource

logger = logging.getLogger(__name__)

# Floor for silent blocks so log10 never sees zero.
DBFS_FLOOR = -160.0


def block_dbfs(samples) -> float:
    """
    Return RMS of a float block (-1.0..1.0) in dBFS. Empty or silent blocks return DBFS_FLOOR.
    Accepts any array-like; multi-channel input is averaged over all values.
    """
    data = np.asarray(samples, dtype=np.float64)
    if data.size == 0:
        return DBFS_FLOOR
    rms = float(np.sqrt(np.mean(np.square(data))))
    if not np.isfinite(rms) or rms <= 0.0:
        return DBFS_FLOOR
    return max(DBFS_FLOOR, 20.0 * float(np.log10(rms)))


class SoundDeviceMicrophone(MicrophoneSource):
    """
    Opens a mono float32 InputStream whose block size is one sampling interval,
    so the stream callback fires at that cadence with the block's dBFS.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        interval_ms: int = 250,
        device: int | str | None = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._interval_ms = interval_ms
        self._device = device
        self._stream = None
        self._lock = threading.Lock()

    @property
    def blocksize(self) -> int:
        return max(1, int(self._sample_rate * self._interval_ms / 1000))

    def request_permission(self) -> MicPermission:
        """Desktop audio has no prompt; access means an input device can be queried."""
        import sounddevice as sd

        try:
            sd.query_devices(self._device, kind="input")
        except (sd.PortAudioError, ValueError) as e:
            logger.warning("No usable input device (%s): %s", self._device, e)
            return MicPermission(granted=False, can_ask_again=True)
        return MicPermission(granted=True, can_ask_again=True)

    def start(self, on_sample: Callable[[float], None]) -> None:
        import sounddevice as sd

        def callback(indata, frames, time, status) -> None:
            if status:
                logger.debug("Input stream status: %s", status)
            on_sample(block_dbfs(indata))

        with self._lock:
            if self._stream is not None:
                return
            try:
                stream = sd.InputStream(
                    samplerate=self._sample_rate,
                    channels=1,
                    dtype="float32",
                    blocksize=self.blocksize,
                    device=self._device,
                    callback=callback,
                )
            except (sd.PortAudioError, ValueError) as e:
                raise MicrophoneError(f"Could not open input stream: {e}") from e
            try:
                stream.start()
            except (sd.PortAudioError, ValueError) as e:
                stream.close()
                raise MicrophoneError(f"Could not start input stream: {e}") from e
            self._stream = stream
        logger.info(
            "Microphone started (rate=%s, blocksize=%s, device=%s)",
            self._sample_rate,
            self.blocksize,
            self._device,
        )

    def stop(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        logger.info("Microphone stopped")
