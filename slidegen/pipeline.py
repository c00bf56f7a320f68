"""Source → deck entry points.

These are the callers of the generative orchestrator: they decide when
to substitute the deterministic fallback and tag the result so the
persistence layer can tell the two paths apart.
"""

import logging
from typing import Callable, Optional

from .config import Settings
from .errors import InvalidAIResponseError, InvalidInputError, ServiceError
from .fallback import scraped_to_basic_slides, text_to_basic_slides
from .generator import InvokeFn, build_topic_prompt, generate_deck
from .images import ImageLookup
from .models import DeckSource, GenerationResult, ScrapedPage, SlideDeck
from .pdf_extract import extract_clean_pdf_text
from .scraper import scrape_url
from .security import MIN_TEXT_CHARS, clamp_slide_count, validate_text, validate_topic

logger = logging.getLogger(__name__)


async def generate_with_fallback(
    content: str,
    slide_count: int,
    fallback: Callable[[], SlideDeck],
    *,
    invoke_fn: Optional[InvokeFn] = None,
    resolver: Optional[ImageLookup] = None,
    settings: Optional[Settings] = None,
    user_id: Optional[str] = None,
) -> GenerationResult:
    try:
        deck = await generate_deck(
            content, slide_count, invoke_fn=invoke_fn, resolver=resolver, settings=settings
        )
    except (ServiceError, InvalidAIResponseError) as e:
        logger.warning("Generative path failed, using fallback builder: %s", e)
        return GenerationResult(
            deck=fallback(), source=DeckSource.FALLBACK, error=str(e), user_id=user_id
        )
    return GenerationResult(deck=deck, source=DeckSource.AI, user_id=user_id)


async def deck_from_text(
    text: str,
    slide_count: int = 5,
    *,
    enhance: bool = True,
    invoke_fn: Optional[InvokeFn] = None,
    resolver: Optional[ImageLookup] = None,
    settings: Optional[Settings] = None,
    user_id: Optional[str] = None,
) -> GenerationResult:
    text = validate_text(text)
    slide_count = clamp_slide_count(slide_count)

    def fallback() -> SlideDeck:
        return text_to_basic_slides(text, slide_count)

    if not enhance:
        return GenerationResult(deck=fallback(), source=DeckSource.FALLBACK, user_id=user_id)
    return await generate_with_fallback(
        text,
        slide_count,
        fallback,
        invoke_fn=invoke_fn,
        resolver=resolver,
        settings=settings,
        user_id=user_id,
    )


async def deck_from_pdf(
    data: bytes,
    slide_count: int = 5,
    *,
    enhance: bool = True,
    invoke_fn: Optional[InvokeFn] = None,
    resolver: Optional[ImageLookup] = None,
    settings: Optional[Settings] = None,
    user_id: Optional[str] = None,
) -> GenerationResult:
    extraction = extract_clean_pdf_text(data)
    if len(extraction.text) < MIN_TEXT_CHARS:
        raise InvalidInputError("PDF contains insufficient text content")
    slide_count = clamp_slide_count(slide_count)

    def fallback() -> SlideDeck:
        return text_to_basic_slides(
            extraction.text, slide_count, title=extraction.info.title or "Extracted Content"
        )

    if not enhance:
        return GenerationResult(deck=fallback(), source=DeckSource.FALLBACK, user_id=user_id)
    return await generate_with_fallback(
        extraction.text,
        slide_count,
        fallback,
        invoke_fn=invoke_fn,
        resolver=resolver,
        settings=settings,
        user_id=user_id,
    )


def scraped_prompt(page: ScrapedPage) -> str:
    return f"Title: {page.title}\n\nDescription: {page.description}\n\nContent:\n{page.content}"


async def deck_from_page(
    page: ScrapedPage,
    slide_count: int = 5,
    *,
    enhance: bool = True,
    invoke_fn: Optional[InvokeFn] = None,
    resolver: Optional[ImageLookup] = None,
    settings: Optional[Settings] = None,
    user_id: Optional[str] = None,
) -> GenerationResult:
    if len(page.content or "") < MIN_TEXT_CHARS:
        raise InvalidInputError("Could not extract sufficient content from the URL")
    slide_count = clamp_slide_count(slide_count)

    def fallback() -> SlideDeck:
        return scraped_to_basic_slides(page, slide_count)

    if not enhance:
        return GenerationResult(deck=fallback(), source=DeckSource.FALLBACK, user_id=user_id)
    return await generate_with_fallback(
        scraped_prompt(page),
        slide_count,
        fallback,
        invoke_fn=invoke_fn,
        resolver=resolver,
        settings=settings,
        user_id=user_id,
    )


async def deck_from_url(
    url: str,
    slide_count: int = 5,
    *,
    enhance: bool = True,
    invoke_fn: Optional[InvokeFn] = None,
    resolver: Optional[ImageLookup] = None,
    settings: Optional[Settings] = None,
    user_id: Optional[str] = None,
    transport=None,
) -> GenerationResult:
    settings = settings or Settings.from_env()
    page = await scrape_url(url, timeout=settings.fetch_timeout, transport=transport)
    return await deck_from_page(
        page,
        slide_count,
        enhance=enhance,
        invoke_fn=invoke_fn,
        resolver=resolver,
        settings=settings,
        user_id=user_id,
    )


async def deck_from_topic(
    topic: str,
    slide_count: int = 5,
    *,
    audience: str = "general",
    style: str = "professional",
    invoke_fn: Optional[InvokeFn] = None,
    resolver: Optional[ImageLookup] = None,
    settings: Optional[Settings] = None,
    user_id: Optional[str] = None,
) -> GenerationResult:
    topic = validate_topic(topic)
    slide_count = clamp_slide_count(slide_count)
    return await generate_with_fallback(
        build_topic_prompt(topic, slide_count, audience, style),
        slide_count,
        lambda: text_to_basic_slides(topic, slide_count, title=topic),
        invoke_fn=invoke_fn,
        resolver=resolver,
        settings=settings,
        user_id=user_id,
    )
