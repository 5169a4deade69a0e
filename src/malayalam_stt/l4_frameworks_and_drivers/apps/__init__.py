"""Textual application for malayalam-stt."""

from malayalam_stt.l4_frameworks_and_drivers.apps.speech import SpeechApp

__all__ = ['SpeechApp']
