"""Text cleanup for values pulled out of job cards."""

import html
import re
import unicodedata
from typing import Optional

# Characters that render as blanks or nothing in listing markup
_INVISIBLE = {
    "\xa0": " ",  # Non-breaking space
    "\u200b": "",  # Zero-width space
    "\u200c": "",  # Zero-width non-joiner
    "\u200d": "",  # Zero-width joiner
    "\ufeff": "",  # BOM
}


def clean_text(text: Optional[str]) -> str:
    """
    Normalize a single-line value extracted from markup.

    Decodes leftover HTML entities, drops invisible characters and control
    codes, and collapses all whitespace runs (including newlines) to one space.
    """
    if not text:
        return ""

    text = html.unescape(text)
    text = unicodedata.normalize("NFC", text)
    for old, new in _INVISIBLE.items():
        text = text.replace(old, new)
    text = "".join(ch for ch in text if unicodedata.category(ch)[0] != "C" or ch in "\n\t")
    return re.sub(r"\s+", " ", text).strip()


def clean_title(title: Optional[str]) -> str:
    """Clean a job title and strip dangling separators ("Engineer - ")."""
    title = clean_text(title)
    return re.sub(r"[,;:|\-\s]+$", "", title)
