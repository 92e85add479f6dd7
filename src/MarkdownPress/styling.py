"""Style descriptors for every Markdown element and the override merge.

Spacing values are measured in lines of the descriptor's own font size,
margins in millimetres.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from .fonts import DEFAULT_CODE_FONT, DEFAULT_FONT, resolve_font

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

DEFAULT_MARGIN_MM = 20.0

ELEMENT_NAMES = (
    "heading_1",
    "heading_2",
    "heading_3",
    "emphasis",
    "strong_emphasis",
    "code",
    "block_quote",
    "list_item",
    "link",
    "image",
    "text",
    "horizontal_rule",
)


class TextAlignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


@dataclass(frozen=True)
class StyleDescriptor:
    size: int = 11
    text_color: Optional[RGB] = None
    background_color: Optional[RGB] = None
    before_spacing: float = 0.0
    after_spacing: float = 0.0
    alignment: Optional[TextAlignment] = None
    font_family: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False


@dataclass(frozen=True)
class Margins:
    top: float = DEFAULT_MARGIN_MM
    right: float = DEFAULT_MARGIN_MM
    bottom: float = DEFAULT_MARGIN_MM
    left: float = DEFAULT_MARGIN_MM


@dataclass(frozen=True)
class StyleTable:
    heading_1: StyleDescriptor
    heading_2: StyleDescriptor
    heading_3: StyleDescriptor
    emphasis: StyleDescriptor
    strong_emphasis: StyleDescriptor
    code: StyleDescriptor
    block_quote: StyleDescriptor
    list_item: StyleDescriptor
    link: StyleDescriptor
    image: StyleDescriptor
    text: StyleDescriptor
    horizontal_rule: StyleDescriptor
    margins: Margins = field(default_factory=Margins)

    def for_heading(self, level: int) -> StyleDescriptor:
        if level == 1:
            return self.heading_1
        if level == 2:
            return self.heading_2
        if level == 3:
            return self.heading_3
        return self.text

    def font_refs(self) -> set[str]:
        refs = {getattr(self, name).font_family for name in ELEMENT_NAMES}
        refs.discard(None)
        return refs


def default_style_table() -> StyleTable:
    """Built-in styles used when no override source is available."""
    return StyleTable(
        heading_1=StyleDescriptor(
            size=20,
            text_color=(0, 0, 0),
            before_spacing=0.5,
            after_spacing=0.5,
            alignment=TextAlignment.CENTER,
            font_family=DEFAULT_FONT,
            bold=True,
        ),
        heading_2=StyleDescriptor(
            size=16,
            text_color=(0, 0, 0),
            before_spacing=0.5,
            after_spacing=0.4,
            alignment=TextAlignment.LEFT,
            font_family=DEFAULT_FONT,
            bold=True,
        ),
        heading_3=StyleDescriptor(
            size=13,
            text_color=(0, 0, 0),
            before_spacing=0.4,
            after_spacing=0.3,
            alignment=TextAlignment.LEFT,
            font_family=DEFAULT_FONT,
            bold=True,
        ),
        emphasis=StyleDescriptor(size=11, italic=True),
        strong_emphasis=StyleDescriptor(size=11, bold=True),
        code=StyleDescriptor(
            size=10,
            text_color=(80, 80, 80),
            background_color=(240, 240, 240),
            after_spacing=0.5,
            alignment=TextAlignment.LEFT,
            font_family=DEFAULT_CODE_FONT,
        ),
        block_quote=StyleDescriptor(
            size=11,
            text_color=(90, 90, 90),
            background_color=(245, 245, 245),
            after_spacing=0.5,
            font_family=DEFAULT_FONT,
            italic=True,
        ),
        list_item=StyleDescriptor(size=11, after_spacing=0.3, font_family=DEFAULT_FONT),
        link=StyleDescriptor(size=11, text_color=(0, 0, 238), underline=True),
        image=StyleDescriptor(size=10, text_color=(110, 110, 110), alignment=TextAlignment.CENTER, italic=True),
        text=StyleDescriptor(
            size=11,
            text_color=(0, 0, 0),
            after_spacing=0.3,
            alignment=TextAlignment.LEFT,
            font_family=DEFAULT_FONT,
        ),
        horizontal_rule=StyleDescriptor(size=11, text_color=(160, 160, 160), before_spacing=0.3, after_spacing=0.3),
        margins=Margins(),
    )


def resolve_styles(defaults: StyleTable, overrides: Optional[Mapping[str, Any]] = None) -> StyleTable:
    """Merge a sparse override mapping into ``defaults``.

    Present, well-typed values replace the default field. Missing or
    mistyped values keep the default; they are never an error.
    """
    if not overrides:
        return defaults

    changes: dict[str, Any] = {}
    margin_section = overrides.get("margin")
    if isinstance(margin_section, Mapping):
        changes["margins"] = _resolve_margins(defaults.margins, margin_section)

    for name in ELEMENT_NAMES:
        section = _element_section(overrides, name)
        if section is not None:
            changes[name] = resolve_descriptor(getattr(defaults, name), section, name)

    return replace(defaults, **changes)


def resolve_descriptor(default: StyleDescriptor, section: Mapping[str, Any], name: str = "") -> StyleDescriptor:
    changes: dict[str, Any] = {}
    for key, value in section.items():
        parser = _FIELD_PARSERS.get(str(key))
        if parser is None:
            logger.debug("Ignoring unknown style key %s.%s", name, key)
            continue
        field_name, convert = parser
        parsed = convert(value)
        if parsed is None:
            logger.debug("Ignoring invalid value for %s.%s: %r", name, key, value)
            continue
        changes[field_name] = parsed
    return replace(default, **changes)


def _resolve_margins(default: Margins, section: Mapping[str, Any]) -> Margins:
    changes: dict[str, float] = {}
    for side in (f.name for f in fields(Margins)):
        value = _parse_float(section.get(side))
        if value is not None:
            changes[side] = value
    return replace(default, **changes)


def _element_section(overrides: Mapping[str, Any], name: str) -> Optional[Mapping[str, Any]]:
    if name.startswith("heading_"):
        level = name.split("_", 1)[1]
        dotted = overrides.get(f"heading.{level}")
        if isinstance(dotted, Mapping):
            return dotted
        headings = overrides.get("heading")
        if not isinstance(headings, Mapping):
            return None
        section = headings.get(level, headings.get(int(level)))
    else:
        section = overrides.get(name)
    return section if isinstance(section, Mapping) else None


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if 0 < value <= 255 else None


def _parse_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _parse_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _parse_color(value: Any) -> Optional[RGB]:
    if not isinstance(value, (tuple, list)) or len(value) != 3:
        return None
    for component in value:
        if isinstance(component, bool) or not isinstance(component, int) or not 0 <= component <= 255:
            return None
    return (value[0], value[1], value[2])


def _parse_alignment(value: Any) -> Optional[TextAlignment]:
    if not isinstance(value, str):
        return None
    try:
        return TextAlignment(value.strip().lower())
    except ValueError:
        return None


def _parse_font(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return resolve_font(value)


_FIELD_PARSERS = {
    "size": ("size", _parse_int),
    "textcolor": ("text_color", _parse_color),
    "backgroundcolor": ("background_color", _parse_color),
    "beforespacing": ("before_spacing", _parse_float),
    "afterspacing": ("after_spacing", _parse_float),
    "alignment": ("alignment", _parse_alignment),
    "fontfamily": ("font_family", _parse_font),
    "bold": ("bold", _parse_bool),
    "italic": ("italic", _parse_bool),
    "underline": ("underline", _parse_bool),
    "strikethrough": ("strikethrough", _parse_bool),
}
