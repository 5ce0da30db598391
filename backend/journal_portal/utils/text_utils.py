"""
Text helpers shared by the services.
"""
import re
from typing import Tuple

_NON_SLUG_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def generate_slug(text: str) -> str:
    """
    URL-friendly slug for a title.

    Lowercases and trims, drops everything except ASCII word characters,
    whitespace and hyphens, then joins words with single hyphens.
    """
    slug = text.lower().strip()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    return _HYPHENS.sub("-", slug)


def split_full_name(name: str) -> Tuple[str, str, str]:
    """Split a display name into first, middle and last parts."""
    parts = (name or "").split()
    if not parts:
        return "", "", ""
    if len(parts) == 1:
        return parts[0], "", ""
    return parts[0], " ".join(parts[1:-1]), parts[-1]
