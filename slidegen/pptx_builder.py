import asyncio
import datetime as dt
import io
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import httpx
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.parts.image import Image as PptxImage
from pptx.util import Inches, Pt

from .layouts import Layout, choose_layout
from .models import Slide, SlideDeck, validate_deck
from .security import MAX_FILE_SIZE_BYTES
from .themes import BackgroundKind, Theme, get_theme

logger = logging.getLogger(__name__)

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

# 16:9 widescreen canvas, all geometry below is in inches
SLIDE_W = 13.333
SLIDE_H = 7.5
FONT = "Arial"
LIGHT_TEXT = "E2E8F0"
WHITE = "FFFFFF"
BLACK = "000000"
BLANK_LAYOUT = 6

IMAGE_TIMEOUT = 15.0
IMAGE_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


# =========================
# Image stage
# =========================
@dataclass(frozen=True)
class ImageAsset:
    blob: bytes
    content_type: str
    width: int
    height: int


async def download_image(
    client: httpx.AsyncClient, url: str, max_bytes: int = MAX_FILE_SIZE_BYTES
) -> Optional[ImageAsset]:
    """Fetch and sniff one image; ``None`` means "render without it"."""
    try:
        async with client.stream("GET", url) as r:
            r.raise_for_status()
            declared = r.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > max_bytes:
                raise ValueError(f"declared size {declared} exceeds {max_bytes} bytes")
            chunks = []
            size = 0
            async for chunk in r.aiter_bytes():
                size += len(chunk)
                if size > max_bytes:
                    raise ValueError(f"body exceeds {max_bytes} bytes")
                chunks.append(chunk)
        blob = b"".join(chunks)
        width, height = PptxImage.from_blob(blob).size
    except Exception as e:
        logger.warning("Image unavailable (%s): %s", url, e)
        return None
    if not width or not height:
        return None
    return ImageAsset(
        blob=blob,
        content_type=r.headers.get("content-type", "image/jpeg"),
        width=width,
        height=height,
    )


async def fetch_slide_images(
    deck: SlideDeck,
    *,
    timeout: float = IMAGE_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[Optional[ImageAsset]]:
    """Download every slide's image concurrently, one result per slide in order."""
    urls = sorted({s.image_url for s in deck.slides if s.image_url})
    if not urls:
        return [None] * len(deck.slides)
    async with httpx.AsyncClient(
        timeout=timeout, follow_redirects=True, headers=IMAGE_HEADERS, transport=transport
    ) as client:
        assets = await asyncio.gather(*(download_image(client, u) for u in urls))
    by_url: Dict[str, Optional[ImageAsset]] = dict(zip(urls, assets))
    return [by_url.get(s.image_url) if s.image_url else None for s in deck.slides]


# =========================
# Drawing primitives
# =========================
def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color)


def _alpha(transparency: float):
    alpha = OxmlElement("a:alpha")
    alpha.set("val", str(int(round((100 - transparency) * 1000))))
    return alpha


def _overlay_transparency(theme: Theme) -> float:
    return round((1 - theme.overlay_opacity) * 100)


def _no_line(shape):
    shape.line.fill.background()
    shape.shadow.inherit = False


def _add_shape(slide, x, y, w, h, color: str, transparency: float = 0, kind=MSO_SHAPE.RECTANGLE):
    shape = slide.shapes.add_shape(kind, Inches(x), Inches(y), Inches(w), Inches(h))
    shape.fill.solid()
    shape.fill.fore_color.rgb = _rgb(color)
    if transparency:
        shape._element.spPr.find(qn("a:solidFill"))[0].append(_alpha(transparency))
    _no_line(shape)
    return shape


def _add_gradient_overlay(slide, x, y, w, h, color: str, light: float, dark: float):
    """Rectangle fading from ``light`` to ``dark`` transparency (percent), top to bottom."""
    shape = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, Inches(x), Inches(y), Inches(w), Inches(h))
    fill = shape.fill
    fill.gradient()
    fill.gradient_angle = 90
    stops = fill.gradient_stops
    for stop, position, transparency in ((stops[0], 0.0, dark), (stops[1], 1.0, light)):
        stop.position = position
        stop.color.rgb = _rgb(color)
        stop._gs.find(qn("a:srgbClr")).append(_alpha(transparency))
    _no_line(shape)
    return shape


def _paint_background(slide, theme: Theme):
    fill = slide.background.fill
    bg = theme.background
    if bg.kind is BackgroundKind.GRADIENT:
        fill.gradient()
        fill.gradient_angle = 90
        stops = fill.gradient_stops
        stops[0].color.rgb = _rgb(bg.colors[1])
        stops[1].color.rgb = _rgb(bg.colors[0])
    else:
        fill.solid()
        fill.fore_color.rgb = _rgb(bg.base)


def _paint_solid_background(slide, color: str):
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = _rgb(color)


def _style_run(run, size: int, color: str, bold: bool = False):
    run.font.name = FONT
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.color.rgb = _rgb(color)


def _add_text(slide, text: str, x, y, w, h, size: int, color: str, *, bold=False,
              align=PP_ALIGN.LEFT, anchor=MSO_ANCHOR.MIDDLE):
    box = slide.shapes.add_textbox(Inches(x), Inches(y), Inches(w), Inches(h))
    tf = box.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = anchor
    p = tf.paragraphs[0]
    p.alignment = align
    run = p.add_run()
    run.text = text
    _style_run(run, size, color, bold)
    return box


def _set_bullet(paragraph, color: str, numbered: bool):
    indent = int(Inches(0.3))
    pPr = paragraph._p.get_or_add_pPr()
    pPr.set("marL", str(indent))
    pPr.set("indent", str(-indent))
    bu_clr = OxmlElement("a:buClr")
    srgb = OxmlElement("a:srgbClr")
    srgb.set("val", color)
    bu_clr.append(srgb)
    pPr.append(bu_clr)
    if numbered:
        marker = OxmlElement("a:buAutoNum")
        marker.set("type", "arabicPeriod")
    else:
        marker = OxmlElement("a:buChar")
        marker.set("char", "•")
    pPr.append(marker)


def _add_bullets(slide, points: Sequence[str], x, y, w, h, size: int, color: str, bullet_color: str,
                 *, spacing: int = 12, numbered=False):
    box = slide.shapes.add_textbox(Inches(x), Inches(y), Inches(w), Inches(h))
    tf = box.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = MSO_ANCHOR.TOP
    for i, point in enumerate(points):
        p = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
        p.space_after = Pt(spacing)
        _set_bullet(p, bullet_color, numbered)
        run = p.add_run()
        run.text = point
        _style_run(run, size, color)
    return box


def _add_cover_picture(slide, asset: ImageAsset, x, y, w, h):
    """Place ``asset`` over the box, cropping the overflow so it fills without letterboxing."""
    pic = slide.shapes.add_picture(io.BytesIO(asset.blob), Inches(x), Inches(y), Inches(w), Inches(h))
    box_ratio = w / h
    img_ratio = asset.width / asset.height
    if img_ratio > box_ratio:
        crop = (1 - box_ratio / img_ratio) / 2
        pic.crop_left = crop
        pic.crop_right = crop
    elif img_ratio < box_ratio:
        crop = (1 - img_ratio / box_ratio) / 2
        pic.crop_top = crop
        pic.crop_bottom = crop
    return pic


def _bottom_accent(slide, theme: Theme):
    _add_shape(slide, 0, 7.35, SLIDE_W, 0.15, theme.accent_color)


def _format_date(day: dt.date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


# =========================
# Deck assembly
# =========================
class DeckBuilder:
    """Draws one deck onto a fresh widescreen presentation."""

    def __init__(self, theme: Theme, today: Optional[dt.date] = None):
        self.theme = theme
        self.today = today or dt.date.today()
        self.prs = Presentation()
        self.prs.slide_width = Inches(SLIDE_W)
        self.prs.slide_height = Inches(SLIDE_H)
        self._draw = {
            Layout.FULL_IMAGE_TITLE: self._full_image_title,
            Layout.SPLIT_IMAGE_LEFT: self._split_image_left,
            Layout.SPLIT_IMAGE_RIGHT: self._split_image_right,
            Layout.IMAGE_DOMINANT_CONCEPT: self._image_dominant_concept,
            Layout.GRADIENT_BACKGROUND_BULLETS: self._gradient_bullets,
            Layout.CLEAN_SUMMARY: self._clean_summary,
        }
        missing = set(Layout) - set(self._draw)
        if missing:
            raise RuntimeError(f"No drawing routine for layouts: {sorted(m.value for m in missing)}")

    def _new_slide(self):
        return self.prs.slides.add_slide(self.prs.slide_layouts[BLANK_LAYOUT])

    def build(self, deck: SlideDeck, images: Sequence[Optional[ImageAsset]]) -> bytes:
        props = self.prs.core_properties
        props.title = deck.title
        props.author = "Slide Generator"
        props.subject = "Generated Presentation"

        self.title_slide(deck.title, images[0] if images else None)
        total = len(deck.slides)
        for index, slide_data in enumerate(deck.slides):
            image = images[index] if index < len(images) else None
            layout = choose_layout(index, total, image is not None, len(slide_data.points))
            logger.debug("Slide %d: %s", index + 2, layout.value)
            slide = self._new_slide()
            full_bleed = self._draw[layout](slide, slide_data, image, index)
            self._page_number(slide, index + 2, light=full_bleed)
        self.closing_slide()

        bio = io.BytesIO()
        self.prs.save(bio)
        return bio.getvalue()

    # -- fixed slides ------------------------------------------------
    def title_slide(self, title: str, image: Optional[ImageAsset]):
        theme = self.theme
        slide = self._new_slide()
        if image is not None:
            _add_cover_picture(slide, image, 0, 0, SLIDE_W, SLIDE_H)
            _add_shape(slide, 0, 0, SLIDE_W, SLIDE_H, theme.overlay_color, transparency=35)
            _add_gradient_overlay(slide, 0, 4.5, SLIDE_W, 3, BLACK, light=100, dark=40)
        else:
            _paint_background(slide, theme)
            _add_shape(slide, 11.5, -1, 3, 3, theme.secondary_accent, 85, kind=MSO_SHAPE.OVAL)

        _add_shape(slide, 4.67, 2.8, 4, 0.06, theme.accent_color)
        _add_text(slide, title, 0.8, 3.0, 11.73, 1.5, 48,
                  WHITE if image else theme.title_color, bold=True, align=PP_ALIGN.CENTER)
        _add_text(slide, _format_date(self.today), 0.8, 4.8, 11.73, 0.6, 18,
                  LIGHT_TEXT if image else theme.text_color, align=PP_ALIGN.CENTER)
        _bottom_accent(slide, theme)
        return slide

    def closing_slide(self):
        theme = self.theme
        slide = self._new_slide()
        _paint_background(slide, theme)
        _add_shape(slide, -2, -2, 6, 6, theme.accent_color, 90, kind=MSO_SHAPE.OVAL)
        _add_shape(slide, 10, 4, 5, 5, theme.secondary_accent, 85, kind=MSO_SHAPE.OVAL)
        _add_text(slide, "Thank You!", 0.8, 2.5, 11.73, 1.5, 56, theme.title_color,
                  bold=True, align=PP_ALIGN.CENTER)
        _add_shape(slide, 5.17, 4.2, 3, 0.08, theme.accent_color)
        _add_text(slide, "Questions & Discussion", 0.8, 4.5, 11.73, 0.8, 24, theme.text_color,
                  align=PP_ALIGN.CENTER)
        _bottom_accent(slide, theme)
        return slide

    def _page_number(self, slide, number: int, light: bool = False):
        _add_text(slide, str(number), 12.5, 7.05, 0.6, 0.35, 11,
                  LIGHT_TEXT if light else self.theme.text_color, align=PP_ALIGN.RIGHT)

    # -- content layouts ---------------------------------------------
    # Each returns True when the slide is a full-bleed image (light page number).

    def _full_image_title(self, slide, data: Slide, image: Optional[ImageAsset], index: int) -> bool:
        if image is None:
            return self._gradient_bullets(slide, data, image, index)
        theme = self.theme
        _add_cover_picture(slide, image, 0, 0, SLIDE_W, SLIDE_H)
        _add_shape(slide, 0, 0, SLIDE_W, SLIDE_H, theme.overlay_color,
                   transparency=_overlay_transparency(theme))
        _add_gradient_overlay(slide, 0, 3.5, SLIDE_W, 4, BLACK, light=100, dark=40)
        _add_text(slide, data.slide_title, 0.8, 1.0, 11.73, 1.4, 40, WHITE, bold=True)
        _add_shape(slide, 0.8, 2.5, 3, 0.06, theme.accent_color)
        if data.points:
            _add_bullets(slide, data.points, 0.8, 2.8, 11.73, 4.2, 18, LIGHT_TEXT,
                         theme.secondary_accent, spacing=10)
        return True

    def _split_image_right(self, slide, data: Slide, image: Optional[ImageAsset], index: int) -> bool:
        if image is None:
            return self._gradient_bullets(slide, data, image, index)
        theme = self.theme
        base = theme.background.base
        _paint_solid_background(slide, base)
        _add_shape(slide, 0, 0, 0.1, SLIDE_H, theme.accent_color)
        _add_text(slide, data.slide_title, 0.5, 0.5, 5.5, 1.0, 32, theme.title_color, bold=True)
        _add_shape(slide, 0.5, 1.5, 2.5, 0.05, theme.accent_color)
        _add_bullets(slide, data.points, 0.5, 1.8, 5.5, 5.2, 16, theme.text_color, theme.bullet_color)
        _add_cover_picture(slide, image, 6.33, 0, 7, SLIDE_H)
        _add_shape(slide, 6.33, 0, 1.5, SLIDE_H, base, transparency=70)
        return False

    def _split_image_left(self, slide, data: Slide, image: Optional[ImageAsset], index: int) -> bool:
        if image is None:
            return self._gradient_bullets(slide, data, image, index)
        theme = self.theme
        base = theme.background.base
        _paint_solid_background(slide, base)
        _add_cover_picture(slide, image, 0, 0, 7, SLIDE_H)
        _add_shape(slide, 5.5, 0, 1.5, SLIDE_H, base, transparency=70)
        _add_shape(slide, 13.23, 0, 0.1, SLIDE_H, theme.accent_color)
        _add_text(slide, data.slide_title, 7.3, 0.5, 5.5, 1.0, 32, theme.title_color, bold=True)
        _add_shape(slide, 7.3, 1.5, 2.5, 0.05, theme.accent_color)
        _add_bullets(slide, data.points, 7.3, 1.8, 5.5, 5.2, 16, theme.text_color, theme.bullet_color)
        return False

    def _image_dominant_concept(self, slide, data: Slide, image: Optional[ImageAsset], index: int) -> bool:
        if image is None:
            return self._gradient_bullets(slide, data, image, index)
        theme = self.theme
        _add_cover_picture(slide, image, 0, 0, SLIDE_W, SLIDE_H)
        _add_gradient_overlay(slide, 0, 0, SLIDE_W, SLIDE_H, BLACK, light=85, dark=55)
        _add_shape(slide, 0, 4.5, SLIDE_W, 3, theme.overlay_color,
                   transparency=max(_overlay_transparency(theme) - 5, 0))
        _add_shape(slide, 0.8, 4.6, 3, 0.06, theme.accent_color)
        _add_text(slide, data.slide_title, 0.8, 4.8, 11.73, 1.2, 40, WHITE, bold=True)
        if data.points:
            _add_bullets(slide, data.points[:3], 0.8, 6.0, 11.73, 1.3, 16, LIGHT_TEXT,
                         theme.secondary_accent, spacing=8)
        return True

    def _gradient_bullets(self, slide, data: Slide, image: Optional[ImageAsset], index: int) -> bool:
        theme = self.theme
        _paint_background(slide, theme)
        _add_shape(slide, 0, 0, SLIDE_W, 0.08, theme.accent_color)
        _add_shape(slide, 10.5, -1, 4, 4, theme.secondary_accent, 88, kind=MSO_SHAPE.OVAL)
        _add_text(slide, data.slide_title, 0.5, 0.5, 12.33, 1.0, 34, theme.title_color, bold=True)
        _add_shape(slide, 0.5, 1.5, 2.5, 0.05, theme.accent_color)
        _add_bullets(slide, data.points, 0.5, 1.8, 12.33, 5.2, 18, theme.text_color,
                     theme.bullet_color, spacing=14)
        _bottom_accent(slide, theme)
        return False

    def _clean_summary(self, slide, data: Slide, image: Optional[ImageAsset], index: int) -> bool:
        theme = self.theme
        _paint_background(slide, theme)
        _add_shape(slide, 10, -1.5, 5, 5, theme.accent_color, 90, kind=MSO_SHAPE.OVAL)
        _add_shape(slide, 0, 0, 0.12, SLIDE_H, theme.accent_color)
        _add_text(slide, data.slide_title or "Summary", 0.6, 0.4, 12, 1.2, 36, theme.title_color, bold=True)
        _add_shape(slide, 0.6, 1.5, 3, 0.06, theme.accent_color)
        _add_bullets(slide, data.points, 0.6, 1.9, 12, 5.0, 18, theme.text_color,
                     theme.bullet_color, spacing=16, numbered=True)
        _bottom_accent(slide, theme)
        return False


def build_presentation(
    deck: SlideDeck,
    theme: Theme,
    images: Optional[Sequence[Optional[ImageAsset]]] = None,
    *,
    today: Optional[dt.date] = None,
) -> bytes:
    """Synchronous half of rendering: draw an already-validated deck."""
    if images is None:
        images = [None] * len(deck.slides)
    return DeckBuilder(theme, today=today).build(deck, images)


async def render_deck(
    deck: Union[SlideDeck, dict, str],
    theme_name: Optional[str] = None,
    *,
    image_timeout: float = IMAGE_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    today: Optional[dt.date] = None,
) -> bytes:
    """Validate, fetch images, draw. Returns the .pptx bytes.

    Output always has ``len(deck.slides) + 2`` slides: title, content, closing.
    """
    deck = validate_deck(deck)
    theme = get_theme(theme_name)
    images = await fetch_slide_images(deck, timeout=image_timeout, transport=transport)
    logger.info(
        "Rendering %r: %d slides, theme=%s, %d images embedded",
        deck.title, len(deck.slides), theme.id, sum(1 for i in images if i is not None),
    )
    # python-pptx is synchronous; keep the event loop free while it draws
    return await asyncio.to_thread(build_presentation, deck, theme, images, today=today)
