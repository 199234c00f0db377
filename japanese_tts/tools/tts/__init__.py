"""
Text-to-Speech for the Japanese TTS MCP server.

This package sends synthesis requests to the remote speech API, saves the
returned audio and plays it locally.
"""

from .errors import (
    AudioDecodeError,
    FileWriteError,
    PlaybackError,
    RemoteAPIError,
    TTSError,
)
from .playback import AudioPlayer, PlaybackResult, select_player
from .tts_service import SynthesisOrchestrator, SynthesisOutcome, SynthesisResult

__all__ = [
    "AudioDecodeError",
    "AudioPlayer",
    "FileWriteError",
    "PlaybackError",
    "PlaybackResult",
    "RemoteAPIError",
    "SynthesisOrchestrator",
    "SynthesisOutcome",
    "SynthesisResult",
    "TTSError",
    "select_player",
]
