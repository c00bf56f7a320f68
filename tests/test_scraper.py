import asyncio

import httpx
import pytest

from slidegen.errors import (
    BlockedError,
    FetchError,
    FetchTimeoutError,
    HostNotFoundError,
    InvalidInputError,
    NotFoundError,
)
from slidegen.scraper import REQUEST_HEADERS, parse_html, scrape_url, validate_url

ARTICLE_BODY = (
    "Heat pumps move heat from the outside air into a building using a refrigerant cycle. "
    "A well installed system delivers three to four units of heat per unit of electricity."
)

PAGE = f"""
<html>
  <head>
    <title>Heat Pumps Explained</title>
    <meta name="description" content="A practical guide to domestic heat pumps">
    <script>var tracking = "ignore me";</script>
  </head>
  <body>
    <nav><ul><li>Home page navigation link</li><li>About us navigation link</li></ul></nav>
    <aside class="sidebar"><p>Sidebar promotion text that should disappear</p></aside>
    <article>
      <h1>How heat pumps work</h1>
      <p>{ARTICLE_BODY}</p>
      <h2>Installation</h2>
      <p>Installers size the system to the heat loss of the building and fit an outdoor unit.</p>
      <ul>
        <li>Air source units suit most homes</li>
        <li>Ground source units need outdoor space</li>
      </ul>
      <p>Subscribe to our newsletter</p>
    </article>
    <footer><p>Copyright footer text</p></footer>
  </body>
</html>
"""


def _transport(status=200, body=PAGE, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, text=body, headers={"content-type": "text/html"})

    return httpx.MockTransport(handler)


def _raising_transport(exc_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_factory(request)

    return httpx.MockTransport(handler)


# =========================
# parse_html
# =========================
def test_parse_extracts_title_description_and_main_content():
    page = parse_html(PAGE, "https://example.com/heat-pumps")
    assert page.url == "https://example.com/heat-pumps"
    assert page.title == "Heat Pumps Explained"
    assert page.description == "A practical guide to domestic heat pumps"
    assert ARTICLE_BODY in page.content
    assert "tracking" not in page.content
    assert "Sidebar promotion" not in page.content
    assert "Copyright footer" not in page.content
    assert "newsletter" not in page.content


def test_parse_collects_headings_and_list_items():
    page = parse_html(PAGE)
    assert [(h.level, h.text) for h in page.headings] == [(1, "How heat pumps work"), (2, "Installation")]
    assert page.list_items == ["Air source units suit most homes", "Ground source units need outdoor space"]


@pytest.mark.parametrize(
    "head, body, expected",
    [
        ("<title>From title</title><meta property='og:title' content='From og'>", "<h1>From h1</h1>", "From title"),
        ("<meta property='og:title' content='From og'>", "<h1>From h1</h1>", "From og"),
        ("", "<h1>From h1</h1>", "From h1"),
        ("", "<p>No heading at all</p>", "Untitled Page"),
    ],
)
def test_title_precedence(head, body, expected):
    html = f"<html><head>{head}</head><body>{body}</body></html>"
    assert parse_html(html).title == expected


def test_og_description_is_used_when_meta_description_missing():
    html = "<html><head><meta property='og:description' content='OG desc'></head><body></body></html>"
    assert parse_html(html).description == "OG desc"


def test_falls_back_to_body_when_no_main_region():
    html = "<html><body><div><p>Plain paragraph in a div.</p><p>Another one.</p></div></body></html>"
    page = parse_html(html)
    assert page.content == "Plain paragraph in a div.\n\nAnother one."


def test_short_main_region_is_skipped():
    html = (
        "<html><body><article><p>Tiny article.</p></article>"
        "<div><p>Body text outside the article.</p></div></body></html>"
    )
    page = parse_html(html)
    assert "Body text outside the article." in page.content


def test_list_items_are_capped():
    items = "".join(f"<li>List item number {i} text</li>" for i in range(80))
    page = parse_html(f"<html><body><ul>{items}</ul></body></html>")
    assert len(page.list_items) == 50


def test_headings_are_capped():
    heads = "".join(f"<h2>Heading {i}</h2>" for i in range(30))
    page = parse_html(f"<html><body>{heads}</body></html>")
    assert len(page.headings) == 20


def test_empty_document():
    page = parse_html("")
    assert page.title == "Untitled Page"
    assert page.content == ""


# =========================
# fetching
# =========================
@pytest.mark.parametrize("url", ["", "ftp://example.com/file", "javascript:alert(1)", "https://"])
def test_rejects_bad_urls(url):
    with pytest.raises(InvalidInputError):
        validate_url(url)


def test_scrape_sends_browser_headers():
    seen = []
    page = asyncio.run(scrape_url("https://example.com/a", transport=_transport(seen=seen)))
    assert page.title == "Heat Pumps Explained"
    assert seen[0].headers["user-agent"] == REQUEST_HEADERS["User-Agent"]


def test_not_found():
    with pytest.raises(NotFoundError, match="Page not found"):
        asyncio.run(scrape_url("https://example.com/missing", transport=_transport(status=404)))


def test_forbidden():
    with pytest.raises(BlockedError):
        asyncio.run(scrape_url("https://example.com/private", transport=_transport(status=403)))


def test_other_status_is_generic_fetch_error():
    with pytest.raises(FetchError) as info:
        asyncio.run(scrape_url("https://example.com/boom", transport=_transport(status=500)))
    assert not isinstance(info.value, (NotFoundError, BlockedError))


def test_timeout():
    transport = _raising_transport(lambda req: httpx.ReadTimeout("timed out", request=req))
    with pytest.raises(FetchTimeoutError):
        asyncio.run(scrape_url("https://slow.example.com", transport=transport))


def test_dns_failure_is_host_not_found():
    transport = _raising_transport(
        lambda req: httpx.ConnectError("[Errno -2] Name or service not known", request=req)
    )
    with pytest.raises(HostNotFoundError):
        asyncio.run(scrape_url("https://no-such-host.invalid", transport=transport))


def test_refused_connection_is_generic_fetch_error():
    transport = _raising_transport(lambda req: httpx.ConnectError("Connection refused", request=req))
    with pytest.raises(FetchError) as info:
        asyncio.run(scrape_url("https://example.com", transport=transport))
    assert not isinstance(info.value, HostNotFoundError)


def test_invalid_scheme_never_hits_network():
    seen = []
    with pytest.raises(InvalidInputError):
        asyncio.run(scrape_url("file:///etc/passwd", transport=_transport(seen=seen)))
    assert seen == []
