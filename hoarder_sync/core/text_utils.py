"""Pure text utilities with no domain knowledge."""

from __future__ import annotations

ELLIPSIS = "..."


def normalize_whitespace(text: str) -> str:
    """Collapse multiple whitespace characters into a single space."""
    if not isinstance(text, str):
        return ""
    return " ".join(text.split()).strip()


def clean_text(text: str | None, max_length: int) -> str:
    """Collapse whitespace and cap *text* at *max_length* characters.

    Text longer than the cap is cut and ends with ``...`` so the result is
    exactly *max_length* characters long.
    """
    if max_length <= len(ELLIPSIS):
        msg = f"max_length must be greater than {len(ELLIPSIS)}"
        raise ValueError(msg)

    cleaned = normalize_whitespace(text or "")
    if len(cleaned) > max_length:
        cleaned = cleaned[: max_length - len(ELLIPSIS)] + ELLIPSIS
    return cleaned
