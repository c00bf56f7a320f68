import re

from .errors import InvalidInputError

# 20 MB overall payload limit (adjust if needed)
MAX_FILE_SIZE_BYTES = 20 * 1024 * 1024

MIN_TEXT_CHARS = 50
MAX_TEXT_CHARS = 50_000
MIN_TOPIC_CHARS = 3
MAX_TOPIC_CHARS = 500

MIN_SLIDES = 1
MAX_SLIDES = 20
DEFAULT_SLIDES = 5

MASK = "••••••••"

_unsafe_filename_re = re.compile(r"[^A-Za-z0-9]")


def mask_api_key(s: str) -> str:
    if not s:
        return s
    if len(s) <= 8:
        return MASK
    return s[:4] + MASK + s[-2:]


def safe_len(s: str) -> int:
    return len(s or "")


def clamp_slide_count(value) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return DEFAULT_SLIDES
    return min(max(n, MIN_SLIDES), MAX_SLIDES)


def validate_text(text: str) -> str:
    if not text or not text.strip():
        raise InvalidInputError("Please provide text content")
    if safe_len(text) < MIN_TEXT_CHARS:
        raise InvalidInputError(
            f"Text content is too short. Please provide at least {MIN_TEXT_CHARS} characters."
        )
    if safe_len(text) > MAX_TEXT_CHARS:
        raise InvalidInputError(
            f"Text content is too long. Maximum {MAX_TEXT_CHARS:,} characters allowed."
        )
    return text


def validate_topic(topic: str) -> str:
    topic = (topic or "").strip()
    if not topic:
        raise InvalidInputError("Please provide a topic")
    if len(topic) < MIN_TOPIC_CHARS:
        raise InvalidInputError("Topic is too short. Please provide a more descriptive topic.")
    if len(topic) > MAX_TOPIC_CHARS:
        raise InvalidInputError(f"Topic is too long. Maximum {MAX_TOPIC_CHARS} characters allowed.")
    return topic


def safe_filename(title: str) -> str:
    stem = _unsafe_filename_re.sub("_", title or "presentation")
    return f"{stem}_presentation.pptx"
