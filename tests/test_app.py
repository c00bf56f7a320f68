import io

import pytest

pytest.importorskip("pptx")

from fastapi.testclient import TestClient  # noqa: E402
from pptx import Presentation  # noqa: E402

import slidegen.main as main  # noqa: E402
from slidegen.config import Settings  # noqa: E402
from slidegen.pptx_builder import PPTX_MEDIA_TYPE  # noqa: E402
from tests.llm_stubs import pdf_bytes  # noqa: E402

LONG_TEXT = (
    "Heat pumps move heat from outside air into buildings using a refrigerant cycle. "
    "They deliver three to four units of heat for each unit of electricity.\n\n"
    "Installation requires an outdoor unit and often a larger hot water cylinder. "
    "Grants reduce the upfront cost for many households across Europe."
)


@pytest.fixture
def client(monkeypatch):
    # no API key: every generative call fails fast and the fallback builder answers
    monkeypatch.setattr(main, "settings", Settings())
    return TestClient(main.app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_themes_catalogue(client):
    body = client.get("/themes").json()
    assert body["success"] is True
    ids = [t["id"] for t in body["themes"]]
    assert len(ids) == 7
    assert "professional" in ids


def test_layouts_catalogue(client):
    body = client.get("/layouts").json()
    assert len(body["layouts"]) == 6


def test_generate_text_falls_back_without_service(client):
    r = client.post("/generate/text", json={"text": LONG_TEXT, "slideCount": 2}, headers={"X-User-Id": "u-7"})
    assert r.status_code == 200
    body = r.json()
    assert body["source"] == "fallback"
    assert body["title"] == "Extracted Content"
    assert 1 <= len(body["slides"]) <= 2
    assert "slideTitle" in body["slides"][0]


def test_generate_text_accepts_string_slide_count(client):
    r = client.post("/generate/text", json={"text": LONG_TEXT, "slideCount": "abc", "enhance": False})
    assert r.status_code == 200
    assert r.json()["source"] == "fallback"


def test_generate_text_rejects_short_text(client):
    r = client.post("/generate/text", json={"text": "too short"})
    assert r.status_code == 400
    assert "too short" in r.json()["detail"]


def test_generate_topic_falls_back(client):
    r = client.post("/generate/topic", json={"topic": "Heat pumps", "slideCount": 3})
    assert r.status_code == 200
    assert r.json()["title"] == "Heat pumps"


def test_generate_url_rejects_bad_scheme(client):
    r = client.post("/generate/url", json={"url": "ftp://example.com/page"})
    assert r.status_code == 400


def test_generate_pdf_without_enhance(client):
    pdf = pdf_bytes(
        [
            "Heat pumps move heat from outside air into homes.",
            "They deliver three units of heat per unit of power.",
        ],
        title="Heat Pump Guide",
    )
    r = client.post(
        "/generate/pdf",
        files={"file": ("guide.pdf", pdf, "application/pdf")},
        data={"slideCount": "3", "enhance": "false"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Heat Pump Guide"
    assert body["source"] == "fallback"


def test_generate_pdf_rejects_other_files(client):
    r = client.post("/generate/pdf", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert r.status_code == 415


def test_generate_pdf_rejects_garbage(client):
    r = client.post("/generate/pdf", files={"file": ("broken.pdf", b"not a pdf", "application/pdf")})
    assert r.status_code == 400


def test_export_streams_a_pptx(client):
    deck = {
        "title": "Quarterly Review: Q3/2026",
        "slides": [
            {"slideTitle": "Revenue", "points": ["Up 12%", "Driven by services"]},
            {"slideTitle": "Next steps", "points": ["Hire two engineers"]},
        ],
    }
    r = client.post("/export", json={"presentation": deck, "theme": "sunset"})
    assert r.status_code == 200
    assert r.headers["content-type"] == PPTX_MEDIA_TYPE
    assert 'filename="Quarterly_Review__Q3_2026_presentation.pptx"' in r.headers["content-disposition"]
    prs = Presentation(io.BytesIO(r.content))
    assert len(prs.slides) == 4


def test_export_rejects_invalid_deck(client):
    r = client.post("/export", json={"presentation": {"title": "Empty", "slides": []}})
    assert r.status_code == 422
