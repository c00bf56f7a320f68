from enum import Enum
from typing import List


class Layout(str, Enum):
    FULL_IMAGE_TITLE = "full-image-title"
    SPLIT_IMAGE_LEFT = "split-image-left"
    SPLIT_IMAGE_RIGHT = "split-image-right"
    IMAGE_DOMINANT_CONCEPT = "image-dominant-concept"
    GRADIENT_BACKGROUND_BULLETS = "gradient-background-bullets"
    CLEAN_SUMMARY = "clean-summary"


LAYOUT_DESCRIPTIONS = {
    Layout.FULL_IMAGE_TITLE: "Full background image with dark overlay and a large title",
    Layout.SPLIT_IMAGE_LEFT: "Large image on the left, title and bullets on the right",
    Layout.SPLIT_IMAGE_RIGHT: "Title and bullets on the left, large image on the right",
    Layout.IMAGE_DOMINANT_CONCEPT: "Full-bleed image with title and up to three points over a dark band",
    Layout.GRADIENT_BACKGROUND_BULLETS: "Theme gradient background with decorative shapes and bullets",
    Layout.CLEAN_SUMMARY: "Clean summary with numbered points and accent shapes",
}

CONCEPT_MAX_POINTS = 3


def choose_layout(index: int, total: int, has_image: bool, point_count: int) -> Layout:
    """Pick a slide's layout; a pure function of its four arguments."""
    if index == 0:
        return Layout.FULL_IMAGE_TITLE
    if total > 1 and index == total - 1:
        return Layout.CLEAN_SUMMARY
    if has_image and point_count <= CONCEPT_MAX_POINTS:
        return Layout.IMAGE_DOMINANT_CONCEPT
    if has_image:
        return Layout.SPLIT_IMAGE_RIGHT if index % 2 == 0 else Layout.SPLIT_IMAGE_LEFT
    return Layout.GRADIENT_BACKGROUND_BULLETS


def available_layouts() -> List[dict]:
    return [{"id": layout.value, "description": LAYOUT_DESCRIPTIONS[layout]} for layout in Layout]
