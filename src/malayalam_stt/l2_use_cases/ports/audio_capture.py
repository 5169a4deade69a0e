"""Port: microphone capture session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class InputDevice:
    """An audio input device the user can pick."""

    index: int
    name: str
    is_default: bool = False


class AudioCapture(Protocol):
    """Abstract recorder: idle -> recording -> idle, one finished buffer per session."""

    @property
    def is_recording(self) -> bool: ...

    def start(self, device_id: str | None = None) -> None:
        """Open the input device and begin accumulating audio.

        Raises PermissionDeniedError, DeviceUnavailableError or AlreadyRecordingError.
        """
        ...

    def stop(self) -> bytes | None:
        """Release the device and return the finished buffer. None while idle."""
        ...

    def list_devices(self) -> list[InputDevice]:
        """Enumerate available input devices."""
        ...
