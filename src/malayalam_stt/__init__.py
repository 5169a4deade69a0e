"""malayalam-stt -- terminal speech-to-text for Malayalam with a short recording history."""

__version__ = '0.3.0'
