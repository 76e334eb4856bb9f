"""
UI-facing script previews.

Word-count estimates only. They never feed the render timeline, which uses
the probed narration duration.
"""
import math
from dataclasses import dataclass

WORDS_PER_MINUTE = 150


@dataclass
class ScriptPreview:
    words: int
    estimated_minutes: int
    quality: str


def count_words(text: str) -> int:
    return len(text.split())


def estimate_minutes(text: str) -> int:
    """Rounded-up minutes of content at an average narration pace."""
    return math.ceil(count_words(text) / WORDS_PER_MINUTE)


def script_quality(text: str) -> str:
    words = count_words(text)
    if words < 50:
        return "Too short"
    if words < 150:
        return "Good"
    if words < 500:
        return "Excellent"
    return "Very long"


def preview_script(text: str) -> ScriptPreview:
    return ScriptPreview(
        words=count_words(text),
        estimated_minutes=estimate_minutes(text),
        quality=script_quality(text),
    )
