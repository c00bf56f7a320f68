from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import DeckValidationError

MAX_TITLE_CHARS = 200
MAX_DECK_SLIDES = 20


class Slide(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slide_title: str = Field(..., alias="slideTitle", min_length=1)
    points: List[str] = Field(default_factory=list)
    image_keyword: Optional[str] = Field(default=None, alias="imageKeyword")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @field_validator("slide_title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("slideTitle must not be blank")
        return v

    @field_validator("image_keyword", "image_url")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)


class SlideDeck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_CHARS)
    slides: List[Slide] = Field(..., min_length=1, max_length=MAX_DECK_SLIDES)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def validate_deck(payload: Union[SlideDeck, Dict[str, Any], str]) -> SlideDeck:
    """Validate a deck before rendering.

    All problems are folded into a single ``DeckValidationError`` that
    names the first offending slide (if the problem is inside a slide).
    """
    if isinstance(payload, SlideDeck):
        payload = payload.model_dump(by_alias=True)
    try:
        if isinstance(payload, str):
            return SlideDeck.model_validate_json(payload)
        return SlideDeck.model_validate(payload)
    except ValidationError as ve:
        errors = ve.errors()
        slide_errors = [
            e for e in errors
            if len(e["loc"]) >= 2 and e["loc"][0] == "slides" and isinstance(e["loc"][1], int)
        ]
        if slide_errors:
            first = min(slide_errors, key=lambda e: e["loc"][1])
            index = first["loc"][1]
            field = ".".join(str(p) for p in first["loc"][2:]) or "slide"
            raise DeckValidationError(
                f"Invalid deck: slide {index} ({field}): {first['msg']}", slide_index=index
            ) from ve
        first = errors[0]
        field = ".".join(str(p) for p in first["loc"]) or "deck"
        raise DeckValidationError(f"Invalid deck: {field}: {first['msg']}") from ve


# =========================
# Content normalizer output
# =========================
class Heading(BaseModel):
    level: int
    text: str


class ScrapedPage(BaseModel):
    url: str = ""
    title: str = "Untitled Page"
    description: str = ""
    content: str = ""
    headings: List[Heading] = Field(default_factory=list)
    list_items: List[str] = Field(default_factory=list)


class PdfInfo(BaseModel):
    title: str = ""
    author: str = ""
    subject: str = ""
    keywords: str = ""


class PdfExtraction(BaseModel):
    text: str
    num_pages: int = 0
    info: PdfInfo = Field(default_factory=PdfInfo)


# =========================
# Generation results
# =========================
class DeckSource(str, Enum):
    AI = "ai"
    FALLBACK = "fallback"


class GenerationResult(BaseModel):
    deck: SlideDeck
    source: DeckSource
    error: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def used_ai(self) -> bool:
        return self.source is DeckSource.AI


# =========================
# HTTP request/response bodies
# =========================
class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slide_count: Union[int, str] = Field(default=5, alias="slideCount")


class TextRequest(_Request):
    text: str = ""
    enhance: bool = True


class UrlRequest(_Request):
    url: str = ""
    enhance: bool = True


class TopicRequest(_Request):
    topic: str = ""
    audience: str = "general"
    style: str = "professional"


class ExportRequest(BaseModel):
    presentation: Dict[str, Any]
    theme: Optional[str] = None


class DeckResponse(BaseModel):
    title: str
    slides: List[Dict[str, Any]]
    source: DeckSource

    @classmethod
    def from_result(cls, result: GenerationResult) -> "DeckResponse":
        body = result.deck.to_json_dict()
        return cls(title=body["title"], slides=body["slides"], source=result.source)
