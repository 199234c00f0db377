"""
Pydantic models for the tool-call interface of the TTS server.
"""

from pydantic import BaseModel, ConfigDict, Field

SAMPLE_RATE = 22050
AUDIO_TYPE = "mp3"

# Model types understood by the remote service.
MODEL_TYPES = {
    8: {"name": "Influencer custom (imma)", "speakers": 3, "description": "3 speaking styles"},
    9: {"name": "Kansai dialect", "speakers": 10, "description": "10 speakers"},
    10: {"name": "Anime", "speakers": 1104, "description": "1104 speakers across 56 styles"},
    11: {"name": "ASMR", "speakers": 4, "description": "4 speakers"},
    101: {"name": "English", "speakers": 112, "description": "112 speakers, 8 extra voices"},
}


class SynthesisRequest(BaseModel):
    """Arguments of the ``speak`` tool, validated before dispatch."""

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, protected_namespaces=()
    )

    text: str = Field(min_length=1, description="Text to convert to speech.")
    model_type: int = Field(
        default=10,
        alias="modelType",
        description="Model type (8: imma, 9: Kansai dialect, 10: anime, 11: ASMR, 101: English).",
    )
    speaker_id: int = Field(default=0, alias="speakerId", description="Speaker ID.")
    speed: float = Field(default=1.0, ge=0, le=3, description="Speaking rate (0-3).")
    volume: float = Field(default=1.0, ge=0, le=3, description="Volume (0-3).")
