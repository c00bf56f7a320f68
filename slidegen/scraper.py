import logging
import socket
from typing import List, Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from .errors import (
    BlockedError,
    FetchError,
    FetchTimeoutError,
    HostNotFoundError,
    InvalidInputError,
    NotFoundError,
)
from .models import Heading, ScrapedPage
from .text_cleaning import clean_web_content

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
FETCH_TIMEOUT = 15.0
MAX_REDIRECTS = 5

NON_CONTENT_SELECTORS = (
    "script, style, noscript, iframe, nav, header, footer, aside, "
    ".sidebar, .advertisement, .ads, .ad, .comments, #comments, .social-share, .share-buttons"
)
MAIN_CONTENT_SELECTORS = [
    "article",
    "main",
    ".content",
    ".post-content",
    ".entry-content",
    "#content",
    ".article-body",
]
MIN_MAIN_CONTENT_CHARS = 200
TEXT_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "td", "th"]

MAX_HEADINGS = 20
MAX_LIST_ITEMS = 50

_DNS_FAILURE_HINTS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated",
)


# =========================
# Fetching
# =========================
def validate_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise InvalidInputError("Please provide a URL")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidInputError("Invalid URL protocol. Use HTTP or HTTPS.")
    if not parsed.netloc:
        raise InvalidInputError("Please provide a valid URL")
    return url


def _is_dns_failure(exc: BaseException) -> bool:
    seen = exc
    while seen is not None:
        if isinstance(seen, socket.gaierror):
            return True
        if any(hint in str(seen).lower() for hint in _DNS_FAILURE_HINTS):
            return True
        seen = seen.__cause__ or seen.__context__
    return False


async def fetch_html(
    url: str,
    *,
    timeout: float = FETCH_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """GET ``url`` like a browser would and map failures onto FetchError types."""
    async with httpx.AsyncClient(
        headers=REQUEST_HEADERS,
        timeout=timeout,
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        transport=transport,
    ) as client:
        try:
            r = await client.get(url)
            r.raise_for_status()
        except httpx.TimeoutException as e:
            raise FetchTimeoutError("Request timed out. The website may be slow or unavailable.") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 403:
                raise BlockedError("Access forbidden. The website may be blocking automated requests.") from e
            if status == 404:
                raise NotFoundError("Page not found. Please check the URL.") from e
            raise FetchError(f"Failed to scrape URL: HTTP {status}") from e
        except httpx.ConnectError as e:
            if _is_dns_failure(e):
                raise HostNotFoundError("Website not found. Please check the URL.") from e
            raise FetchError(f"Failed to scrape URL: {e}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to scrape URL: {e}") from e
        return r.text


# =========================
# Parsing
# =========================
def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def _page_title(soup: BeautifulSoup) -> str:
    if soup.title is not None:
        title = soup.title.get_text(strip=True)
        if title:
            return title
    og_title = _meta_content(soup, property="og:title")
    if og_title:
        return og_title
    h1 = soup.find("h1")
    if h1 is not None and h1.get_text(strip=True):
        return h1.get_text(strip=True)
    return "Untitled Page"


def _page_description(soup: BeautifulSoup) -> str:
    return _meta_content(soup, name="description") or _meta_content(soup, property="og:description")


def _text_from_regions(regions) -> str:
    texts = []
    for region in regions:
        for el in region.find_all(TEXT_TAGS):
            text = el.get_text(" ", strip=True)
            if text:
                texts.append(text)
    return "\n\n".join(texts)


def _main_content(soup: BeautifulSoup) -> str:
    for selector in MAIN_CONTENT_SELECTORS:
        regions = soup.select(selector)
        if not regions:
            continue
        region_text = " ".join(r.get_text(" ", strip=True) for r in regions)
        if len(region_text) > MIN_MAIN_CONTENT_CHARS:
            logger.debug("Main content located via %r", selector)
            return _text_from_regions(regions)
    body = soup.body or soup
    return _text_from_regions([body])


def _collect_headings(soup: BeautifulSoup) -> List[Heading]:
    headings = []
    for el in soup.find_all(["h1", "h2", "h3"]):
        text = el.get_text(" ", strip=True)
        if 0 < len(text) < 200:
            headings.append(Heading(level=int(el.name[1]), text=text))
        if len(headings) >= MAX_HEADINGS:
            break
    return headings


def _collect_list_items(soup: BeautifulSoup) -> List[str]:
    items = []
    for el in soup.select("ul li, ol li"):
        text = el.get_text(" ", strip=True)
        if 10 < len(text) < 500:
            items.append(text)
        if len(items) >= MAX_LIST_ITEMS:
            break
    return items


def parse_html(html: str, url: str = "") -> ScrapedPage:
    soup = BeautifulSoup(html or "", "lxml")

    title = _page_title(soup)
    description = _page_description(soup)

    for el in soup.select(NON_CONTENT_SELECTORS):
        # nested matches are already gone with their ancestor
        if not el.decomposed:
            el.decompose()

    return ScrapedPage(
        url=url,
        title=title,
        description=description,
        content=clean_web_content(_main_content(soup)),
        headings=_collect_headings(soup),
        list_items=_collect_list_items(soup),
    )


async def scrape_url(
    url: str,
    *,
    timeout: float = FETCH_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ScrapedPage:
    url = validate_url(url)
    html = await fetch_html(url, timeout=timeout, transport=transport)
    page = parse_html(html, url)
    logger.info(
        "Scraped %s: %d chars, %d headings, %d list items",
        url, len(page.content), len(page.headings), len(page.list_items),
    )
    return page
