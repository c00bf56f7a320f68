"""Keyword → image URL resolution.

Resolution never fails: a keyword either hits the topic table (first
match in declaration order wins) or lands deterministically in the
generic fallback pool.
"""

import asyncio
import logging
import re
from typing import Optional, Protocol, Sequence, Tuple

from .models import Slide, SlideDeck

logger = logging.getLogger(__name__)

_UNSPLASH = "https://images.unsplash.com/photo-{}?w=1920&h=1080&fit=crop&q=80"

# Order matters: "fiber optic cables" must hit "fiber" before "cable".
DEFAULT_IMAGE_TABLE: Tuple[Tuple[str, str], ...] = (
    ("network", _UNSPLASH.format("1558494949-ef010cbdcc31")),
    ("technology", _UNSPLASH.format("1518770660439-4636190af475")),
    ("computer", _UNSPLASH.format("1496181133206-80ce9b88a853")),
    ("data", _UNSPLASH.format("1551288049-bebda4e38f71")),
    ("server", _UNSPLASH.format("1558494949-ef010cbdcc31")),
    ("fiber", _UNSPLASH.format("1516044734145-07ca8eef8731")),
    ("cable", _UNSPLASH.format("1544197150-b99a580bb7a8")),
    ("wireless", _UNSPLASH.format("1562408590-e32931084e23")),
    ("signal", _UNSPLASH.format("1606765962248-7ff407b51667")),
    ("security", _UNSPLASH.format("1555949963-ff9fe0c870eb")),
    ("cloud", _UNSPLASH.format("1544197150-b99a580bb7a8")),
    ("internet", _UNSPLASH.format("1451187580459-43490279c0fa")),
    ("communication", _UNSPLASH.format("1516321318423-f06f85e504b3")),
    ("digital", _UNSPLASH.format("1550751827-4bd374c3f58b")),
    ("hardware", _UNSPLASH.format("1591799264318-7e6ef8ddb7ea")),
    ("infrastructure", _UNSPLASH.format("1558494949-ef010cbdcc31")),
    ("transmission", _UNSPLASH.format("1544197150-b99a580bb7a8")),
    ("protocol", _UNSPLASH.format("1550751827-4bd374c3f58b")),
    ("solar", _UNSPLASH.format("1509391366360-2e959784a276")),
    ("energy", _UNSPLASH.format("1473341304170-971dccb5ac1e")),
    ("climate", _UNSPLASH.format("1611273426858-450d8e3c9fce")),
    ("health", _UNSPLASH.format("1505751172876-fa1923c5c528")),
    ("business", _UNSPLASH.format("1507003211169-0a1dd7228f2d")),
    ("team", _UNSPLASH.format("1522071820081-009f0129c71c")),
    ("challenge", _UNSPLASH.format("1454165804606-c3d57bc86b40")),
    ("solution", _UNSPLASH.format("1552664730-d307ca884978")),
    ("future", _UNSPLASH.format("1451187580459-43490279c0fa")),
    ("innovation", _UNSPLASH.format("1485827404703-89b55fcc595e")),
    ("machine", _UNSPLASH.format("1555255707-c07966088b7b")),
    ("education", _UNSPLASH.format("1503676260728-1c00da094a0b")),
    ("research", _UNSPLASH.format("1532094349884-543bc11b234d")),
    ("ai", _UNSPLASH.format("1677442136019-21780ecad995")),
)

FALLBACK_IMAGES: Tuple[str, ...] = (
    _UNSPLASH.format("1558494949-ef010cbdcc31"),  # servers
    _UNSPLASH.format("1518770660439-4636190af475"),  # circuit
    _UNSPLASH.format("1544197150-b99a580bb7a8"),  # cables
    _UNSPLASH.format("1451187580459-43490279c0fa"),  # earth
    _UNSPLASH.format("1550751827-4bd374c3f58b"),  # code
    _UNSPLASH.format("1551288049-bebda4e38f71"),  # charts
    _UNSPLASH.format("1516321318423-f06f85e504b3"),  # communication
    _UNSPLASH.format("1555949963-ff9fe0c870eb"),  # security
)

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9\s]")


def clean_keyword(keyword: str) -> str:
    return _NON_ALNUM_RE.sub("", keyword or "").strip().lower()


def keyword_hash(cleaned: str) -> int:
    """32-bit ``h*31 + c`` rolling hash; only used to pick a fallback."""
    h = 0
    for ch in cleaned:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    return h


class ImageLookup(Protocol):
    async def lookup(self, keyword: str) -> str:
        ...


class ImageResolver:
    def __init__(
        self,
        table: Sequence[Tuple[str, str]] = DEFAULT_IMAGE_TABLE,
        fallback_pool: Sequence[str] = FALLBACK_IMAGES,
    ):
        if not fallback_pool:
            raise ValueError("fallback_pool must not be empty")
        self.table = tuple(table)
        self.fallback_pool = tuple(fallback_pool)

    def resolve(self, keyword: str) -> str:
        cleaned = clean_keyword(keyword)
        for key, url in self.table:
            if key in cleaned:
                logger.debug("Mapped image for %r (matched: %s)", keyword, key)
                return url
        index = keyword_hash(cleaned) % len(self.fallback_pool)
        logger.debug("Fallback image for %r (index: %d)", keyword, index)
        return self.fallback_pool[index]

    async def lookup(self, keyword: str) -> str:
        return self.resolve(keyword)


default_resolver = ImageResolver()


async def _attach(slide: Slide, resolver: ImageLookup) -> Slide:
    if not slide.image_keyword:
        return slide
    try:
        url = await resolver.lookup(slide.image_keyword)
    except Exception as e:
        # pluggable lookups must not sink a deck; the local table always answers
        logger.warning("Image lookup failed for %r: %s", slide.image_keyword, e)
        url = default_resolver.resolve(slide.image_keyword)
    return slide.model_copy(update={"image_url": url})


async def attach_images(deck: SlideDeck, resolver: Optional[ImageLookup] = None) -> SlideDeck:
    """Resolve every slide's keyword concurrently; slide order is preserved."""
    resolver = resolver or default_resolver
    slides = await asyncio.gather(*(_attach(s, resolver) for s in deck.slides))
    return deck.model_copy(update={"slides": list(slides)})
