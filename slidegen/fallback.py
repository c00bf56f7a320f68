"""Deterministic slide construction used when the generative path is off or failed.

Both builders are pure and total: any input yields a valid ``SlideDeck``
with between one and ``slide_count`` slides.
"""

import math
import re
from typing import List

from .models import MAX_TITLE_CHARS, ScrapedPage, Slide, SlideDeck
from .security import clamp_slide_count
from .text_cleaning import clean_extracted_text, split_paragraphs

MIN_PARAGRAPH_CHARS = 20
MIN_SENTENCE_CHARS = 10
MAX_POINTS = 5
SNIPPET_CHARS = 200

_TITLE_END_RE = re.compile(r"[.!?]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_SECTION_SPLIT_RE = re.compile(r"[.\n]+")


def _sentences(paragraph: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(paragraph) if len(s.strip()) > MIN_SENTENCE_CHARS]


def _slide_title(paragraph: str, n: int) -> str:
    first_sentence = _TITLE_END_RE.split(paragraph, maxsplit=1)[0].strip()
    if 10 <= len(first_sentence) <= 99:
        return first_sentence
    return f"Section {n}"


def _snippet(text: str) -> str:
    if len(text) > SNIPPET_CHARS:
        return text[:SNIPPET_CHARS] + "..."
    return text


def _deck_title(title: str, default: str) -> str:
    title = (title or "").strip() or default
    return title[:MAX_TITLE_CHARS]


def text_to_basic_slides(text: str, slide_count: int = 5, title: str = "Extracted Content") -> SlideDeck:
    slide_count = clamp_slide_count(slide_count)
    clean = clean_extracted_text(text)
    paragraphs = split_paragraphs(clean, MIN_PARAGRAPH_CHARS)

    slides: List[Slide] = []
    if paragraphs:
        per_slide = math.ceil(len(paragraphs) / slide_count)
        for n, start in enumerate(range(0, len(paragraphs), per_slide), start=1):
            if len(slides) >= slide_count:
                break
            group = paragraphs[start:start + per_slide]
            points = [s for p in group for s in _sentences(p)[:MAX_POINTS]][:MAX_POINTS]
            if points:
                slides.append(Slide(slide_title=_slide_title(group[0], n), points=points))

    if not slides:
        slides.append(Slide(slide_title="Content Overview", points=[clean[:SNIPPET_CHARS] + "..."]))

    return SlideDeck(title=_deck_title(title, "Extracted Content"), slides=slides)


# =========================
# Scraped pages
# =========================
def _heading_slides(page: ScrapedPage, room: int) -> List[Slide]:
    content = page.content
    slides: List[Slide] = []
    cursor = 0
    for i, heading in enumerate(page.headings):
        if len(slides) >= room:
            break
        start = content.find(heading.text, cursor)
        if start == -1:
            continue
        span_start = start + len(heading.text)
        span_end = len(content)
        if i + 1 < len(page.headings):
            nxt = content.find(page.headings[i + 1].text, span_start)
            if nxt != -1:
                span_end = nxt
        cursor = span_start

        points = [
            s.strip() for s in _SECTION_SPLIT_RE.split(content[span_start:span_end])
            if 20 <= len(s.strip()) <= 299
        ][:MAX_POINTS]
        if points:
            slides.append(Slide(slide_title=heading.text, points=points))
    return slides


def scraped_to_basic_slides(page: ScrapedPage, slide_count: int = 5) -> SlideDeck:
    slide_count = clamp_slide_count(slide_count)
    content = page.content or ""

    first_line = next((line.strip() for line in content.split("\n") if line.strip()), "")
    slides: List[Slide] = [
        Slide(
            slide_title=(page.title or "").strip() or "Overview",
            points=[page.description or first_line or "Content from web page"],
        )
    ]

    if page.headings:
        slides.extend(_heading_slides(page, slide_count - len(slides)))

    if len(slides) < slide_count and page.list_items:
        items = page.list_items
        per_slide = math.ceil(len(items) / (slide_count - len(slides)))
        for start in range(0, len(items), per_slide):
            if len(slides) >= slide_count:
                break
            chunk = items[start:start + per_slide]
            slides.append(Slide(slide_title=f"Key Points {len(slides)}", points=chunk[:MAX_POINTS]))

    paragraphs = split_paragraphs(content)
    cursor = 0
    while len(slides) < slide_count and cursor < len(paragraphs):
        pair = paragraphs[cursor:cursor + 2]
        cursor += 2
        points = [_snippet(p) for p in pair if len(p) > MIN_PARAGRAPH_CHARS]
        if points:
            slides.append(Slide(slide_title=f"Section {len(slides) + 1}", points=points))

    return SlideDeck(
        title=_deck_title(page.title, "Web Content Presentation"),
        slides=slides[:slide_count],
    )
