"""Plain-text cleanup for user-entered fields."""

import html

import bleach


def clean_text(text):
    """Strip all HTML tags and surrounding whitespace. None passes through.

    bleach escapes the text it keeps; that is undone so "R&D" is stored
    as typed rather than as "R&amp;D".
    """
    if text is None:
        return text
    return html.unescape(bleach.clean(text, tags=[], strip=True)).strip()
