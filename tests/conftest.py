"""
Configuration for pytest.

This file provides common fixtures and configuration for all tests.
"""

import pytest


@pytest.fixture(autouse=True)
def _clean_tts_env(monkeypatch):
    """Keep developer BAIDU_TTS_* settings out of the tests."""
    for name in (
        "BAIDU_TTS_API_URL",
        "BAIDU_TTS_API_KEY",
        "BAIDU_TTS_MODEL",
        "BAIDU_TTS_SAVE_DIR",
        "BAIDU_TTS_TIMEOUT",
        "BAIDU_TTS_PLAYBACK",
    ):
        monkeypatch.delenv(name, raising=False)
