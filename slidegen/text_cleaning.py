"""Whitespace normalisation shared by every content source."""

import re

_MANY_NEWLINES_RE = re.compile(r"\n{3,}")
_SPACES_RE = re.compile(r"[ \t]+")
_HYPHEN_BREAK_RE = re.compile(r"(\w)-\n(\w)")

# Navigation/consent chrome that survives tag stripping on most sites.
_UI_CHROME_RE = re.compile(
    r"\b(cookies?|privacy|subscribe|newsletter|sign[ -]?up|log[ -]?in|loading)\b",
    flags=re.I,
)
# Longer lines are treated as prose even if they mention one of the phrases.
UI_CHROME_MAX_LINE = 100


def clean_extracted_text(text: str) -> str:
    """Canonicalise raw extracted text.

    Applied in order: collapse 3+ newlines to 2, collapse space/tab runs,
    rejoin words hyphenated across a line break, turn form feeds into
    paragraph breaks, trim every line, collapse newline runs again, trim
    the whole text.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _MANY_NEWLINES_RE.sub("\n\n", text)
    text = _SPACES_RE.sub(" ", text)
    text = _HYPHEN_BREAK_RE.sub(r"\1\2", text)
    text = text.replace("\f", "\n\n")
    text = "\n".join(line.strip() for line in text.split("\n"))
    # blank-after-trim lines and expanded form feeds can reopen long gaps
    text = _MANY_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def is_ui_chrome(line: str) -> bool:
    return len(line) < UI_CHROME_MAX_LINE and bool(_UI_CHROME_RE.search(line))


def clean_web_content(text: str) -> str:
    text = clean_extracted_text(text)
    if not text:
        return ""
    kept = [line for line in text.split("\n") if not is_ui_chrome(line)]
    text = _MANY_NEWLINES_RE.sub("\n\n", "\n".join(kept))
    return text.strip()


def split_paragraphs(text: str, min_chars: int = 0):
    return [p.strip() for p in re.split(r"\n\s*\n", text or "") if len(p.strip()) > min_chars]
