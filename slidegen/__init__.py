"""Turn text, PDFs, web pages or a topic into a slide deck and render it to PPTX."""

from .errors import (
    BlockedError,
    DeckValidationError,
    ExtractionError,
    FetchError,
    FetchTimeoutError,
    HostNotFoundError,
    InvalidAIResponseError,
    InvalidInputError,
    NotFoundError,
    ServiceError,
    SlideGenError,
)
from .fallback import scraped_to_basic_slides, text_to_basic_slides
from .generator import generate_deck, parse_ai_response
from .images import ImageResolver, attach_images
from .layouts import Layout, choose_layout
from .models import DeckSource, GenerationResult, ScrapedPage, Slide, SlideDeck, validate_deck
from .pipeline import deck_from_page, deck_from_pdf, deck_from_text, deck_from_topic, deck_from_url
from .pptx_builder import build_presentation, render_deck
from .themes import Theme, ThemeName, get_theme

__version__ = "1.0.0"
__all__ = [
    # Model
    "Slide", "SlideDeck", "ScrapedPage", "DeckSource", "GenerationResult", "validate_deck",
    # Pipeline
    "deck_from_text", "deck_from_pdf", "deck_from_url", "deck_from_page", "deck_from_topic",
    "generate_deck", "parse_ai_response",
    "text_to_basic_slides", "scraped_to_basic_slides",
    "ImageResolver", "attach_images",
    # Rendering
    "render_deck", "build_presentation", "Layout", "choose_layout", "Theme", "ThemeName", "get_theme",
    # Errors
    "SlideGenError", "InvalidInputError", "ExtractionError",
    "FetchError", "HostNotFoundError", "FetchTimeoutError", "BlockedError", "NotFoundError",
    "ServiceError", "InvalidAIResponseError", "DeckValidationError",
]
