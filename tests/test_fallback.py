import pytest

from slidegen.fallback import scraped_to_basic_slides, text_to_basic_slides
from slidegen.models import Heading, ScrapedPage

SOLAR_TEXT = (
    "Solar energy converts sunlight into electricity. Panels on rooftops now power millions of homes.\n\n"
    "Costs have fallen sharply over the last decade. Module prices dropped by roughly ninety percent.\n\n"
    "Grid operators are adapting to variable output. Storage and forecasting smooth the daily curve.\n\n"
    "Policy support accelerated early adoption. Feed-in tariffs and tax credits drove installations.\n\n"
    "The outlook remains strong for the coming years. Analysts expect capacity to keep doubling."
)


def test_solar_scenario_produces_five_slides():
    deck = text_to_basic_slides(SOLAR_TEXT, 5)
    assert len(deck.slides) == 5
    assert deck.slides[0].slide_title == "Solar energy converts sunlight into electricity"
    assert deck.title == "Extracted Content"
    for slide in deck.slides:
        assert 1 <= len(slide.points) <= 5


def test_groups_paragraphs_when_fewer_slides_requested():
    deck = text_to_basic_slides(SOLAR_TEXT, 2)
    assert len(deck.slides) == 2
    # three paragraphs per group, capped at five points overall
    assert len(deck.slides[0].points) == 5


def test_short_first_sentence_gets_section_title():
    text = "Intro. " + "This paragraph explains the topic in enough detail to keep it."
    deck = text_to_basic_slides(text, 3)
    assert deck.slides[0].slide_title == "Section 1"


def test_all_short_content_yields_overview_slide():
    text = "tiny bit\n\nshort one\n\nanother tiny\n\n" + "x" * 15
    deck = text_to_basic_slides(text, 4)
    assert len(deck.slides) == 1
    assert deck.slides[0].slide_title == "Content Overview"
    assert deck.slides[0].points[0].endswith("...")


@pytest.mark.parametrize("slide_count", [1, 3, 7, 20])
def test_slide_count_bounds_hold(slide_count):
    text = "\n\n".join(
        f"Paragraph number {i} talks about subject {i}. It carries a second sentence too." for i in range(40)
    )
    deck = text_to_basic_slides(text, slide_count)
    assert 1 <= len(deck.slides) <= slide_count


def test_pdf_title_override():
    deck = text_to_basic_slides(SOLAR_TEXT, 3, title="Solar Report 2025")
    assert deck.title == "Solar Report 2025"


# =========================
# Scraped pages
# =========================
def _page(**overrides):
    content = (
        "Introduction\n\n"
        "Heat pumps move heat instead of generating it. They reach efficiencies above three hundred percent.\n\n"
        "Installation\n\n"
        "Most homes need an outdoor unit and a hot water cylinder. Installers size the system to the heat loss.\n\n"
        "Running costs depend on the electricity tariff and insulation levels of the building.\n\n"
        "Grants cover part of the upfront price in many countries across Europe."
    )
    data = dict(
        url="https://example.com/heat-pumps",
        title="Heat Pumps Explained",
        description="A practical guide to domestic heat pumps.",
        content=content,
        headings=[Heading(level=2, text="Introduction"), Heading(level=2, text="Installation")],
        list_items=[],
    )
    data.update(overrides)
    return ScrapedPage(**data)


def test_first_slide_is_page_title_and_description():
    deck = scraped_to_basic_slides(_page(), 3)
    first = deck.slides[0]
    assert first.slide_title == "Heat Pumps Explained"
    assert first.points == ["A practical guide to domestic heat pumps."]
    assert deck.title == "Heat Pumps Explained"


def test_heading_slides_use_text_between_headings():
    deck = scraped_to_basic_slides(_page(), 3)
    assert [s.slide_title for s in deck.slides] == ["Heat Pumps Explained", "Introduction", "Installation"]
    intro_points = deck.slides[1].points
    assert intro_points[0] == "Heat pumps move heat instead of generating it"
    assert all("outdoor unit" not in p for p in intro_points)
    assert all(20 <= len(p) <= 299 for s in deck.slides[1:] for p in s.points)


def test_description_missing_uses_first_content_line():
    deck = scraped_to_basic_slides(_page(description=""), 1)
    assert deck.slides[0].points == ["Introduction"]
    assert len(deck.slides) == 1


def test_list_items_fill_key_points_slides():
    items = [f"List item number {i} with some detail" for i in range(8)]
    deck = scraped_to_basic_slides(_page(headings=[], list_items=items), 3)
    assert len(deck.slides) == 3
    assert deck.slides[1].slide_title == "Key Points 1"
    assert deck.slides[2].slide_title == "Key Points 2"
    assert all(len(s.points) <= 5 for s in deck.slides)


def test_paragraph_sections_truncate_long_paragraphs():
    long_para = "Long paragraph " * 30
    page = _page(headings=[], content="First short intro line here.\n\n" + long_para + "\n\nSecond body paragraph that is long enough.")
    deck = scraped_to_basic_slides(page, 4)
    sections = [s for s in deck.slides if s.slide_title.startswith("Section")]
    assert sections
    assert any(p.endswith("...") and len(p) == 203 for s in sections for p in s.points)
    assert len(deck.slides) <= 4


def test_scraped_result_never_exceeds_target():
    items = [f"Feature number {i} described at length" for i in range(30)]
    deck = scraped_to_basic_slides(_page(list_items=items), 2)
    assert len(deck.slides) == 2
