"""
Runtime configuration for the Japanese TTS MCP server.

Configuration is read exactly once at startup, from environment variables
(optionally seeded from a ``.env`` file) with command-line flags taking
precedence, and frozen into a :class:`TTSConfig` that is handed to the
synthesis orchestrator.

Environment variables:
- BAIDU_TTS_API_URL: Synthesis endpoint URL
- BAIDU_TTS_API_KEY: Value of the ``apikey`` request header
- BAIDU_TTS_MODEL: Value of the ``Model`` request header
- BAIDU_TTS_SAVE_DIR: Directory audio files are written to (default: temp dir)
- BAIDU_TTS_TIMEOUT: HTTP request timeout in seconds (default: 30)
- BAIDU_TTS_PLAYBACK: Enable/disable local playback (default: true)
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class TTSConfig(BaseModel):
    """Immutable process-wide settings shared by every synthesis call."""

    model_config = ConfigDict(frozen=True)

    api_url: Optional[str] = Field(
        default=None, description="Remote synthesis endpoint."
    )
    api_key: str = Field(default="", description="Sent as the 'apikey' header.")
    model: str = Field(default="", description="Sent as the 'Model' header.")
    save_dir: Path = Field(description="Resolved directory for audio files.")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    playback: bool = Field(default=True, description="Play audio after saving.")


def parse_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("true", "yes", "1", "t", "y", "on")


def parse_float(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        logger.warning(f"Ignoring invalid float value {value!r}, using {default}")
        return default
    return parsed if parsed > 0 else default


def resolve_save_dir(configured: Optional[str]) -> Path:
    """
    Resolve the directory audio files are written to.

    The directory is created recursively when missing.  If it is not
    configured, or cannot be created, the platform temporary directory is
    used instead, so this always returns a usable path.

    Args:
        configured: Directory from the command line or environment, if any

    Returns:
        The directory to write audio files into
    """
    fallback = Path(tempfile.gettempdir())

    if not configured:
        logger.info(f"No audio save directory configured, using {fallback}")
        return fallback

    path = Path(configured).expanduser()
    if path.is_dir():
        return path

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create audio save directory {path}: {e}")
        logger.warning(f"Falling back to temporary directory: {fallback}")
        return fallback

    logger.info(f"Created audio save directory: {path}")
    return path


def load_config(
    save_dir: Optional[str] = None,
    playback: Optional[bool] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TTSConfig:
    """
    Build the server configuration.

    Args:
        save_dir: ``--save-dir`` value; overrides BAIDU_TTS_SAVE_DIR
        playback: ``False`` when ``--no-playback`` was given; overrides
            BAIDU_TTS_PLAYBACK
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        The frozen configuration
    """
    env = os.environ if environ is None else environ

    api_url = env.get("BAIDU_TTS_API_URL") or None
    if not api_url:
        logger.warning("BAIDU_TTS_API_URL is not set; speak requests will fail")

    return TTSConfig(
        api_url=api_url,
        api_key=env.get("BAIDU_TTS_API_KEY", ""),
        model=env.get("BAIDU_TTS_MODEL", ""),
        save_dir=resolve_save_dir(save_dir or env.get("BAIDU_TTS_SAVE_DIR")),
        timeout=parse_float(env.get("BAIDU_TTS_TIMEOUT"), DEFAULT_TIMEOUT),
        playback=(
            playback
            if playback is not None
            else parse_bool(env.get("BAIDU_TTS_PLAYBACK"), True)
        ),
    )
