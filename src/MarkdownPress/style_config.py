"""Loading of the YAML style override file.

Example ``markdownpressrc.yaml``::

    margin:
      top: 15
      left: 25
    heading:
      1:
        size: 24
        textcolor: {r: 20, g: 40, b: 120}
        alignment: left
    text:
      fontfamily: georgia
    link:
      textcolor: {r: 0, g: 0, b: 255}
      underline: true

The file only supplies overrides; see ``styling.resolve_styles`` for how
they are merged into the built-in styles.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

STYLE_FILENAME = "markdownpressrc.yaml"
_COLOR_KEYS = ("textcolor", "backgroundcolor")


def find_style_file() -> Optional[Path]:
    """Look for the style file in the home directory, then the working directory."""
    for directory in (Path.home(), Path.cwd()):
        candidate = directory / STYLE_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_style_overrides(path: str | Path | None = None) -> Optional[dict[str, Any]]:
    """Read and decode the override file, or return ``None`` to keep defaults."""
    style_path = Path(path).expanduser() if path is not None else find_style_file()
    if style_path is None:
        logger.debug("No style file found, using default styles")
        return None

    try:
        text = style_path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Cannot read style file %s: %s", style_path, exc)
        return None

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        logger.warning("Invalid style file %s: %s", style_path, exc)
        return None

    if not isinstance(data, dict):
        logger.warning("Style file %s must contain a mapping at the top level", style_path)
        return None

    logger.info("Loaded style overrides from %s", style_path)
    return decode_overrides(data)


def decode_overrides(data: dict[Any, Any]) -> dict[str, Any]:
    """Reduce a decoded YAML mapping to primitive override values.

    Colour mappings ``{r, g, b}`` become 3-tuples; everything else is passed
    through for the resolver to accept or ignore.
    """
    decoded: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            if str(key) in _COLOR_KEYS:
                decoded[str(key)] = _decode_color(value)
            else:
                decoded[str(key)] = decode_overrides(value)
        else:
            decoded[str(key)] = value
    return decoded


def _decode_color(value: dict[Any, Any]) -> Any:
    try:
        return (value["r"], value["g"], value["b"])
    except KeyError:
        return value
