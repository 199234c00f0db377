"""
Configuration management for the Japanese TTS MCP server.
"""

from japanese_tts.config.schema_models import MODEL_TYPES, SynthesisRequest
from japanese_tts.config.settings import TTSConfig, load_config, resolve_save_dir

__all__ = [
    "MODEL_TYPES",
    "SynthesisRequest",
    "TTSConfig",
    "load_config",
    "resolve_save_dir",
]
