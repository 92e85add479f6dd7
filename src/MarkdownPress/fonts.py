from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import FontNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_FONT = "calibri"
DEFAULT_CODE_FONT = "courier"


@dataclass(frozen=True)
class FontFamily:
    """Face names used for each variant of one font family."""

    regular: str
    bold: str
    italic: str
    bold_italic: str

    @classmethod
    def single(cls, name: str) -> "FontFamily":
        return cls(regular=name, bold=name, italic=name, bold_italic=name)

    def variant(self, bold: bool = False, italic: bool = False) -> str:
        if bold and italic:
            return self.bold_italic
        if bold:
            return self.bold
        if italic:
            return self.italic
        return self.regular


KNOWN_FONTS: dict[str, FontFamily] = {
    "calibri": FontFamily.single("Calibri"),
    "arial": FontFamily.single("Arial"),
    "helvetica": FontFamily.single("Helvetica"),
    "roboto": FontFamily.single("Roboto"),
    "times": FontFamily.single("Times New Roman"),
    "georgia": FontFamily.single("Georgia"),
    "courier": FontFamily.single("Courier New"),
    "consolas": FontFamily.single("Consolas"),
}

_ALIASES = {
    "times new roman": "times",
    "courier new": "courier",
    "monospace": "courier",
    "serif": "times",
    "sans-serif": "arial",
}


def resolve_font(name: str | None) -> str:
    """Map a user supplied font name to a known font reference.

    Unknown names fall back to ``DEFAULT_FONT``.
    """
    if not name:
        return DEFAULT_FONT
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    if key in KNOWN_FONTS:
        return key
    logger.warning("Unknown font family %r, using %s", name, DEFAULT_FONT)
    return DEFAULT_FONT


def lookup_font_family(font_ref: str) -> FontFamily:
    try:
        return KNOWN_FONTS[font_ref]
    except KeyError as exc:
        raise FontNotFoundError(font_ref) from exc
