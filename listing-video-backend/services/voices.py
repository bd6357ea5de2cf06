"""
Narration voices offered on the script step.
"""

from dataclasses import asdict, dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Voice:
    id: str
    name: str
    gender: str
    language: str
    accent: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


VOICES = [
    # English voices
    Voice("en-us-female-1", "Emma", "Female", "English", "US"),
    Voice("en-us-male-1", "David", "Male", "English", "US"),
    Voice("en-uk-female-1", "Charlotte", "Female", "English", "UK"),
    Voice("en-uk-male-1", "James", "Male", "English", "UK"),
    Voice("en-au-female-1", "Olivia", "Female", "English", "Australian"),
    Voice("en-au-male-1", "William", "Male", "English", "Australian"),
    # Spanish voices
    Voice("es-female-1", "Sofia", "Female", "Spanish"),
    Voice("es-male-1", "Carlos", "Male", "Spanish"),
    # French voices
    Voice("fr-female-1", "Marie", "Female", "French"),
    Voice("fr-male-1", "Pierre", "Male", "French"),
    # Arabic voices
    Voice("ar-female-1", "Layla", "Female", "Arabic"),
    Voice("ar-male-1", "Ahmed", "Male", "Arabic"),
]

LANGUAGES = ["English", "Spanish", "French", "Arabic"]
ACCENTS = ["US", "UK", "Australian", "Canadian"]


def filter_voices(language: str, accent: Optional[str] = None) -> List[Voice]:
    """Voices for ``language``; English voices must also match ``accent``."""
    is_english = language == "English"
    return [
        voice
        for voice in VOICES
        if voice.language == language and (not is_english or voice.accent == accent)
    ]


def get_voice(voice_id: str) -> Optional[Voice]:
    return next((voice for voice in VOICES if voice.id == voice_id), None)
