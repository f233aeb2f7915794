"""Lightweight token estimation.

Vendor tokenizers are not called; a fixed chars-per-token ratio is
good enough for a displayed cost estimate.
"""

import math

CHARS_PER_TOKEN = 4
"""Rough average for English text across OpenAI and Gemini tokenizers."""


def estimate_tokens_from_chars(char_count: int) -> int:
    """Return an estimated token count for *char_count* characters."""
    return math.ceil(char_count / CHARS_PER_TOKEN)
