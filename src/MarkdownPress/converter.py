"""End-to-end conversion of Markdown text into a styled DOCX document.

The pipeline is strictly sequential: tokenize, group tokens into blocks,
resolve styles, then drive the rendering backend. A ``ParseError`` aborts
before anything is rendered; a ``RenderError`` aborts during emission.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .blocks import group_tokens
from .builder import DocumentBuilder, RenderBackend
from .markdown_parser import tokenize
from .renderer_docx import DocxBackend
from .style_config import load_style_overrides
from .styling import StyleTable, default_style_table, resolve_styles
from .utils import read_markdown, resolve_output_path

logger = logging.getLogger(__name__)


def load_styles(style_path: str | Path | None = None) -> StyleTable:
    """Built-in styles merged with the overrides found at ``style_path`` (or the default location)."""
    return resolve_styles(default_style_table(), load_style_overrides(style_path))


def convert_markdown(
    markdown: str,
    output_path: str | Path,
    styles: Optional[StyleTable] = None,
    style_path: str | Path | None = None,
    backend: Optional[RenderBackend] = None,
    asset_root: Optional[Path] = None,
) -> Path:
    output_path = Path(output_path)

    tokens = tokenize(markdown)
    blocks = group_tokens(tokens)
    logger.debug("Grouped %d tokens into %d blocks", len(tokens), len(blocks))

    if styles is None:
        styles = load_styles(style_path)
    if backend is None:
        backend = DocxBackend(asset_root=asset_root)

    DocumentBuilder(styles, backend).render(blocks, output_path)
    logger.info("Rendered %d blocks to %s", len(blocks), output_path)
    return output_path


def convert_file(
    input_path: str | Path,
    output_path: str | Path | None = None,
    styles: Optional[StyleTable] = None,
    style_path: str | Path | None = None,
) -> Path:
    input_path = Path(input_path).expanduser()
    target = resolve_output_path(input_path, str(output_path) if output_path is not None else None)
    markdown = read_markdown(input_path)
    logger.debug("Markdown length: %d chars", len(markdown))
    return convert_markdown(
        markdown,
        target,
        styles=styles,
        style_path=style_path,
        asset_root=input_path.parent,
    )
