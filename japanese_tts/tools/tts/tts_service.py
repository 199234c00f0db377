"""
Speech synthesis against a Baidu-style TTS HTTP endpoint.

One call of :meth:`SynthesisOrchestrator.synthesize` sends the text and voice
parameters as a multipart form, decodes the base64 audio in the JSON reply,
writes it to the configured save directory and plays it.  Remote, decode and
write failures end the call with an error outcome; playback failures are
only logged.
"""

import base64
import binascii
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from japanese_tts.config.schema_models import AUDIO_TYPE, SAMPLE_RATE, SynthesisRequest
from japanese_tts.config.settings import TTSConfig

from .errors import (
    AudioDecodeError,
    FileWriteError,
    RemoteAPIError,
    TTSError,
    preview,
    truncate_error,
)
from .playback import AudioPlayer, PlaybackResult, select_player

logger = logging.getLogger(__name__)

UNKNOWN_DURATION = "unknown"


@dataclass(frozen=True)
class SynthesisResult:
    """Where the audio was written and how long the service says it runs."""

    audio_file_path: str
    duration: Union[float, int, str]


@dataclass(frozen=True)
class SynthesisOutcome:
    """Success or error value returned for a single synthesis call."""

    text: str
    result: Optional[SynthesisResult] = None
    playback: Optional[PlaybackResult] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, text: str, error: Exception) -> "SynthesisOutcome":
        return cls(text=text, error=str(error), error_type=type(error).__name__)


def _form_value(value: Union[int, float, str]) -> str:
    """Render a form field; integral floats lose their trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SynthesisOrchestrator:
    """Runs the request, decode, save and play steps for ``speak`` calls."""

    FILE_PREFIX = "tts"

    def __init__(
        self,
        config: TTSConfig,
        player: Optional[AudioPlayer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.player = player or select_player(enabled=config.playback)
        self._transport = transport

    def build_form(self, request: SynthesisRequest) -> Dict[str, Tuple[None, str]]:
        """Multipart fields for the synthesis endpoint (no filenames)."""
        fields = {
            "text": request.text,
            "model_type": _form_value(request.model_type),
            "spk_id": _form_value(request.speaker_id),
            "speed": _form_value(request.speed),
            "volume": _form_value(request.volume),
            "sample_rate": str(SAMPLE_RATE),
            "audio_type": AUDIO_TYPE,
        }
        return {name: (None, value) for name, value in fields.items()}

    async def synthesize(self, request: SynthesisRequest) -> SynthesisOutcome:
        """
        Synthesize speech for a request and play it.

        Args:
            request: Validated ``speak`` arguments

        Returns:
            A success outcome carrying the saved file path and duration, or
            an error outcome describing the first fatal failure.
        """
        logger.info(f'Processing TTS request: "{preview(request.text)}"')

        try:
            result = await self._request_synthesis(request)
            audio = self._decode_audio(result["audio"])
            audio_path = self._save_audio(audio)
        except TTSError as e:
            logger.error(f"TTS request failed: {truncate_error(str(e))}")
            return SynthesisOutcome.failure(request.text, e)

        playback = await self.player.play(str(audio_path))

        return SynthesisOutcome(
            text=request.text,
            result=SynthesisResult(
                audio_file_path=str(audio_path),
                duration=result.get("duration") or UNKNOWN_DURATION,
            ),
            playback=playback,
        )

    async def _request_synthesis(self, request: SynthesisRequest) -> Dict[str, Any]:
        if not self.config.api_url:
            raise RemoteAPIError(
                "Synthesis endpoint is not configured (set BAIDU_TTS_API_URL)"
            )

        headers = {"apikey": self.config.api_key, "Model": self.config.model}
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.config.api_url,
                    files=self.build_form(request),
                    headers=headers,
                )
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"API connection error: {e}") from e

        return self._validate_response(response)

    @staticmethod
    def _validate_response(response: httpx.Response) -> Dict[str, Any]:
        """Return the ``result`` object of a reply that carries audio."""
        body = response.text
        if not response.is_success:
            raise RemoteAPIError(f"API error ({response.status_code}): {body}")

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteAPIError(f"API error: {body}") from e

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict) or not result.get("audio"):
            raise RemoteAPIError(f"API error: {body}")
        return result

    @staticmethod
    def _decode_audio(audio_b64: Any) -> bytes:
        """Decode standard base64 strictly; URL-safe or line-wrapped data is rejected."""
        try:
            return base64.b64decode(audio_b64, validate=True)
        except (binascii.Error, TypeError, ValueError) as e:
            raise AudioDecodeError(f"Invalid base64 audio data: {e}") from e

    def _save_audio(self, audio: bytes) -> Path:
        timestamp = int(time.time() * 1000)
        path = self.config.save_dir / f"{self.FILE_PREFIX}-{timestamp}.{AUDIO_TYPE}"
        try:
            path.write_bytes(audio)
        except OSError as e:
            raise FileWriteError(f"Failed to save audio file {path}: {e}") from e

        logger.info(f"Audio file saved: {path} ({len(audio)} bytes)")
        return path
