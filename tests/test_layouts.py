import pytest

from slidegen.layouts import Layout, available_layouts, choose_layout


def test_first_slide_is_always_full_image_title():
    assert choose_layout(0, 5, False, 0) is Layout.FULL_IMAGE_TITLE
    assert choose_layout(0, 5, True, 7) is Layout.FULL_IMAGE_TITLE


def test_single_slide_deck_uses_title_layout():
    assert choose_layout(0, 1, True, 2) is Layout.FULL_IMAGE_TITLE


def test_last_slide_is_summary():
    assert choose_layout(4, 5, True, 2) is Layout.CLEAN_SUMMARY
    assert choose_layout(1, 2, False, 6) is Layout.CLEAN_SUMMARY


def test_few_points_with_image_is_concept():
    assert choose_layout(2, 6, True, 3) is Layout.IMAGE_DOMINANT_CONCEPT
    assert choose_layout(2, 6, True, 0) is Layout.IMAGE_DOMINANT_CONCEPT


def test_split_alternates_by_parity():
    assert choose_layout(2, 6, True, 5) is Layout.SPLIT_IMAGE_RIGHT
    assert choose_layout(3, 6, True, 5) is Layout.SPLIT_IMAGE_LEFT


def test_no_image_uses_gradient():
    assert choose_layout(2, 6, False, 5) is Layout.GRADIENT_BACKGROUND_BULLETS
    assert choose_layout(3, 6, False, 1) is Layout.GRADIENT_BACKGROUND_BULLETS


@pytest.mark.parametrize("args", [(0, 3, True, 4), (1, 3, True, 5), (1, 4, False, 2), (2, 3, True, 1)])
def test_selection_is_pure(args):
    assert choose_layout(*args) is choose_layout(*args)


def test_catalogue_covers_every_layout():
    ids = {item["id"] for item in available_layouts()}
    assert ids == {layout.value for layout in Layout}
