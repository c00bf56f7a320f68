import json
import logging
import re
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from . import llm_providers
from .config import Settings
from .errors import InvalidAIResponseError, InvalidInputError
from .images import ImageLookup, attach_images
from .models import MAX_DECK_SLIDES, MAX_TITLE_CHARS, SlideDeck
from .security import MAX_TEXT_CHARS, clamp_slide_count

logger = logging.getLogger(__name__)

InvokeFn = Callable[[str, str], Awaitable[str]]

# =========================
# Prompts
# =========================
SYSTEM_PROMPT = """You are a professional presentation designer and subject matter expert.
You turn source material into presentation slides and answer with JSON only.

RULES:
1. Return ONLY valid JSON - no markdown, no explanations, no extra text.
2. Follow the exact output structure below.
3. Every slide has 4-7 substantive bullet points.
4. Every bullet point is a complete sentence of 15-30 words carrying specific information:
   facts, figures, examples or real-world applications. No generic filler.
5. Every slide has an "imageKeyword": a 2-4 word search term for a relevant professional photo.

OUTPUT FORMAT (STRICT):
{
  "title": "Presentation Title",
  "slides": [
    {
      "slideTitle": "Descriptive Slide Title",
      "imageKeyword": "relevant image term",
      "points": [
        "Specific point with concrete information, figures or examples that gives the audience real value",
        "Another complete sentence explaining a key aspect with context and practical relevance"
      ]
    }
  ]
}

BAD point: "AI is used in healthcare"
GOOD point: "Machine learning models now flag early-stage tumours in screening scans, cutting radiologist review time by roughly a third in large hospital trials"
"""

USER_PROMPT_TMPL = """Create a professional presentation with exactly {slide_count} slides based on the following content:

{content}

REQUIREMENTS:
- 4-7 detailed bullet points per slide, each a complete sentence of 15-30 words
- Specific facts, statistics, examples and applications; no generic statements
- An imageKeyword (2-4 words) for every slide

Return ONLY valid JSON in the specified format."""

TOPIC_PROMPT_TMPL = """Create a comprehensive presentation about: "{topic}"

Target Audience: {audience}
Style: {style}
Number of Slides: {slide_count}

Cover the key aspects of the topic with an introduction slide, main content slides and a conclusion/summary slide."""


def build_user_prompt(content: str, slide_count: int) -> str:
    return USER_PROMPT_TMPL.format(slide_count=slide_count, content=content[:MAX_TEXT_CHARS])


def build_topic_prompt(topic: str, slide_count: int, audience: str = "general", style: str = "professional") -> str:
    return TOPIC_PROMPT_TMPL.format(
        topic=topic,
        audience=(audience or "general")[:100],
        style=(style or "professional")[:100],
        slide_count=slide_count,
    )


# =========================
# Response post-processing
# =========================
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?|\n?```\s*$")


def strip_code_fences(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("```"):
        text = _FENCE_RE.sub("", text).strip()
    return text


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # prose-wrapped JSON: take the outermost object
        m = re.search(r"(\{.*\})", text, flags=re.S)
        if not m:
            raise
        return json.loads(m.group(1))


def _repair(payload: Dict[str, Any]) -> Dict[str, Any]:
    slides: List[Dict[str, Any]] = []
    for slide in payload["slides"][:MAX_DECK_SLIDES]:
        slides.append({
            "slideTitle": str(slide["slideTitle"]).strip(),
            "points": [str(p).strip() for p in slide["points"] if p is not None and str(p).strip()],
            "imageKeyword": slide.get("imageKeyword") if isinstance(slide.get("imageKeyword"), str) else None,
        })
    return {"title": str(payload["title"]).strip()[:MAX_TITLE_CHARS], "slides": slides}


def parse_ai_response(response_text: str) -> SlideDeck:
    """Turn raw model output into a validated deck or raise InvalidAIResponseError."""
    text = strip_code_fences(response_text)
    if not text:
        raise InvalidAIResponseError("Empty response from generative service")
    try:
        payload = _load_json(text)
    except json.JSONDecodeError as e:
        logger.debug("Unparseable response: %s", response_text[:500])
        raise InvalidAIResponseError("Failed to parse AI response as valid JSON") from e

    if not isinstance(payload, dict) or not payload.get("title"):
        raise InvalidAIResponseError("Invalid presentation structure: missing title")
    if not isinstance(payload.get("slides"), list) or not payload["slides"]:
        raise InvalidAIResponseError("Invalid presentation structure: slides must be a non-empty list")
    for index, slide in enumerate(payload["slides"]):
        if (
            not isinstance(slide, dict)
            or not isinstance(slide.get("slideTitle"), str)
            or not slide["slideTitle"].strip()
            or not isinstance(slide.get("points"), list)
        ):
            raise InvalidAIResponseError(f"Invalid slide structure at index {index}")

    try:
        return SlideDeck.model_validate(_repair(payload))
    except ValidationError as ve:
        raise InvalidAIResponseError(f"AI response failed deck validation: {ve.errors()[0]['msg']}") from ve


# =========================
# Orchestrator
# =========================
async def generate_deck(
    content: str,
    slide_count: int = 5,
    *,
    invoke_fn: Optional[InvokeFn] = None,
    resolver: Optional[ImageLookup] = None,
    settings: Optional[Settings] = None,
) -> SlideDeck:
    """One generative round-trip: prompt, parse, validate, attach image URLs.

    Failures (``ServiceError``/``InvalidAIResponseError``) propagate; the
    caller decides whether to fall back.
    """
    if not content or not content.strip():
        raise InvalidInputError("Please provide content to generate slides from")
    slide_count = clamp_slide_count(slide_count)
    if invoke_fn is None:
        invoke_fn = partial(llm_providers.invoke, settings=settings)

    response_text = await invoke_fn(SYSTEM_PROMPT, build_user_prompt(content, slide_count))
    deck = parse_ai_response(response_text)
    logger.info("Generated deck %r with %d slides", deck.title, len(deck.slides))
    return await attach_images(deck, resolver)
