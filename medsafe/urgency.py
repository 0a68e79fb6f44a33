# Keyword heuristics used only to tag chat bubbles in the client.
# Safety handling itself is done by the model through the prompt preamble.

from typing import Literal

Tone = Literal["worried", "frustrated", "tired", "neutral"]

EMERGENCY_KEYWORDS = (
    "chest pain",
    "cant breathe",
    "can't breathe",
    "shortness of breath",
    "severe pain",
    "suicide",
    "kill myself",
    "confused",
    "slurred speech",
    "seizure",
    "unconscious",
    "severe bleeding",
    "heart attack",
    "stroke",
)

_TONE_WORDS = (
    ("worried", ("worried", "scared", "afraid", "anxious", "nervous", "concerned")),
    ("frustrated", ("frustrated", "angry", "annoyed", "upset", "fed up")),
    ("tired", ("exhausted", "tired", "fatigue", "drained", "weak")),
)


def detect_emergency_symptoms(text: str) -> bool:
    lower = (text or "").lower()
    return any(kw in lower for kw in EMERGENCY_KEYWORDS)


def detect_emotional_tone(text: str) -> Tone:
    lower = (text or "").lower()
    for tone, words in _TONE_WORDS:
        if any(w in lower for w in words):
            return tone
    return "neutral"


def bubble_emotion(text: str) -> str:
    """Tag for the assistant bubble that answers `text`."""
    if detect_emergency_symptoms(text):
        return "urgent"
    if detect_emotional_tone(text) == "worried":
        return "reassuring"
    return "supportive"
