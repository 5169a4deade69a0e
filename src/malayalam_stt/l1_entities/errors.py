"""Domain error types."""


class SpeechAppError(Exception):
    """Base for every error surfaced to the user by the transcription pipeline."""


# --- Capture stage ---


class CaptureError(SpeechAppError):
    """Raised when microphone capture cannot start or finish."""


class PermissionDeniedError(CaptureError):
    """Raised when the host refuses access to the input device."""


class DeviceUnavailableError(CaptureError):
    """Raised when the requested input device is missing or busy."""


class AlreadyRecordingError(CaptureError):
    """Raised when a recording is started while another one is active."""


class NotRecordingError(CaptureError):
    """Raised when a recording is submitted but nothing was captured."""


# --- Decode stage ---


class AudioDecodeError(SpeechAppError):
    """Raised when a raw audio buffer cannot be turned into PCM samples."""


class UnsupportedFormatError(AudioDecodeError):
    """Raised when the container or codec cannot be decoded at all."""


class CorruptDataError(AudioDecodeError):
    """Raised when the payload looks like audio but yields no usable samples."""


# --- Model stage ---


class ModelResolutionError(SpeechAppError):
    """Raised when a whisper model cannot be resolved to a local path."""


class ModelLoadError(SpeechAppError):
    """Raised when the recognition model fails to load. Retryable."""


class ModelUnavailableError(SpeechAppError):
    """Raised once automatic load retries are exhausted; needs a manual retry."""


class ModelNotReadyError(SpeechAppError):
    """Raised when transcription is requested before the model is loaded."""


class TranscribeError(SpeechAppError):
    """Raised when the loaded model fails during inference."""


class BusyError(SpeechAppError):
    """Raised when a submission arrives while another one is in flight."""


class PlaybackStoreError(SpeechAppError):
    """Raised when the audio of a finished submission cannot be kept for playback."""
