from slidegen.text_cleaning import clean_extracted_text, clean_web_content, split_paragraphs


def test_collapses_newlines_and_spaces():
    raw = "First   line\t\twith  gaps\n\n\n\n\nSecond paragraph"
    assert clean_extracted_text(raw) == "First line with gaps\n\nSecond paragraph"


def test_rejoins_hyphenated_words():
    assert clean_extracted_text("photo-\nvoltaic cells") == "photovoltaic cells"


def test_form_feed_becomes_paragraph_break():
    assert clean_extracted_text("page one\fpage two") == "page one\n\npage two"


def test_trims_lines_and_whole_text():
    assert clean_extracted_text("  \n  hello  \n  world  \n\n") == "hello\nworld"


def test_clean_text_is_idempotent():
    clean = "Solar power is growing.\n\nPanels are cheaper than ever.\nStorage follows."
    assert clean_extracted_text(clean) == clean
    assert clean_extracted_text(clean_extracted_text(clean)) == clean


def test_empty_input():
    assert clean_extracted_text("") == ""
    assert clean_extracted_text(None) == ""


def test_web_content_drops_ui_chrome_lines():
    raw = (
        "We use cookies to improve your experience\n\n"
        "Solar farms now supply a growing share of grid electricity.\n\n"
        "Subscribe to our newsletter\n\n"
        "Log in\n\n"
        "Battery storage smooths the evening peak."
    )
    cleaned = clean_web_content(raw)
    assert "cookies" not in cleaned
    assert "Subscribe" not in cleaned
    assert "Log in" not in cleaned
    assert cleaned == (
        "Solar farms now supply a growing share of grid electricity.\n\n"
        "Battery storage smooths the evening peak."
    )


def test_web_content_keeps_long_prose_mentioning_privacy():
    prose = (
        "Regulators argue that privacy protections must keep pace with the spread of "
        "smart meters, which record household consumption every fifteen minutes."
    )
    assert clean_web_content(prose) == prose


def test_split_paragraphs_filters_short():
    text = "tiny\n\nThis paragraph is comfortably longer than twenty characters."
    assert split_paragraphs(text, 20) == ["This paragraph is comfortably longer than twenty characters."]


def test_blank_lines_and_page_breaks_settle_to_one_paragraph_break():
    raw = "page one\n  \n \npage two\n\n\fpage three"
    once = clean_extracted_text(raw)
    assert once == "page one\n\npage two\n\npage three"
    assert clean_extracted_text(once) == once
