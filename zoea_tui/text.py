"""Display-width aware text helpers and the greedy word wrapper."""

from __future__ import annotations

from rich.cells import cell_len

DEFAULT_WRAP_WIDTH = 80
ELLIPSIS = "..."


def display_width(text: str) -> int:
    """Return the number of terminal columns *text* occupies."""
    return cell_len(text)


def truncate_to_width(text: str, max_width: int) -> str:
    """Cut *text* so it fits in *max_width* columns without splitting a glyph."""
    if max_width <= 0:
        return ""
    if cell_len(text) <= max_width:
        return text
    current = 0
    for index, char in enumerate(text):
        char_width = cell_len(char)
        if current + char_width > max_width:
            return text[:index]
        current += char_width
    return text


def truncate_with_ellipsis(text: str, max_width: int) -> str:
    """Fit *text* into *max_width* columns, marking the cut with an ellipsis."""
    if max_width <= 0:
        return ""
    if cell_len(text) <= max_width:
        return text
    if max_width <= len(ELLIPSIS):
        return truncate_to_width(text, max_width)
    return truncate_to_width(text, max_width - len(ELLIPSIS)) + ELLIPSIS


def pad_to_width(text: str, width: int) -> str:
    """Right-pad *text* with spaces up to *width* display columns."""
    missing = width - cell_len(text)
    if missing <= 0:
        return text
    return text + " " * missing


def wrap_text(text: str, max_width: int) -> list[str]:
    """Greedy word-wrap of *text* into lines of at most *max_width* columns.

    Paragraphs (split on newlines) are wrapped independently and a blank
    paragraph is kept as a single empty line. Words are never broken: a word
    wider than the limit gets a line of its own.
    """
    if max_width <= 0:
        max_width = DEFAULT_WRAP_WIDTH

    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = words[0]
        current_width = cell_len(current)
        for word in words[1:]:
            word_width = cell_len(word)
            if current_width + 1 + word_width <= max_width:
                current += " " + word
                current_width += 1 + word_width
            else:
                lines.append(current)
                current = word
                current_width = word_width
        lines.append(current)
    return lines
