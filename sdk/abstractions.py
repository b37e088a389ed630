"""
Microphone capability abstractions: interface, permission result, and no-op implementation.
Used by the noise meter; the concrete sounddevice source lives in audio.microphone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable


class MicrophoneError(Exception):
    """Raised when the microphone is unavailable or cannot be opened."""


@dataclass(frozen=True)
class MicPermission:
    """Result of a permission request or check."""

    granted: bool
    can_ask_again: bool = True

    @property
    def status_label(self) -> str:
        if self.granted:
            return "Granted"
        return "Not granted" if self.can_ask_again else "Denied"


class MicrophoneSource(ABC):
    """
    Periodic amplitude source. Call request_permission(), then start(on_sample);
    stop() to release. on_sample receives the raw amplitude (dBFS-like float) at a fixed cadence.
    """

    @abstractmethod
    def request_permission(self) -> MicPermission:
        """Ask for (or confirm) access to the input device."""
        ...

    def get_permission(self) -> MicPermission:
        """Check access without prompting. Defaults to request_permission()."""
        return self.request_permission()

    @abstractmethod
    def start(self, on_sample: Callable[[float], None]) -> None:
        """Open the input and begin delivering samples to on_sample."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering samples and release the input."""
        ...


class NoOpMicrophone(MicrophoneSource):
    """Source that grants access but never delivers samples; use when no audio backend is configured."""

    def request_permission(self) -> MicPermission:
        return MicPermission(granted=True, can_ask_again=True)

    def start(self, on_sample: Callable[[float], None]) -> None:
        pass

    def stop(self) -> None:
        pass


__all__ = ["MicPermission", "MicrophoneError", "MicrophoneSource", "NoOpMicrophone"]
