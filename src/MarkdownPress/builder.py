from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from .errors import RenderError
from .fonts import FontFamily, lookup_font_family
from .model import (
    Block,
    BlockQuoteBlock,
    Code,
    CodeBlock,
    Emphasis,
    EmptyLine,
    HeadingBlock,
    HorizontalRuleBlock,
    Image,
    Link,
    ListBlock,
    ListItem,
    Newline,
    Paragraph,
    StrongEmphasis,
    Text,
    Token,
    Unknown,
)
from .styling import RGB, Margins, StyleDescriptor, StyleTable, TextAlignment

logger = logging.getLogger(__name__)

BULLET_MARKER = "•"


@dataclass(frozen=True)
class RunStyle:
    size: int
    color: Optional[RGB] = None
    background_color: Optional[RGB] = None
    font_family: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False

    @classmethod
    def from_descriptor(cls, descriptor: StyleDescriptor) -> "RunStyle":
        return cls(
            size=descriptor.size,
            color=descriptor.text_color,
            background_color=descriptor.background_color,
            font_family=descriptor.font_family,
            bold=descriptor.bold,
            italic=descriptor.italic,
            underline=descriptor.underline,
            strikethrough=descriptor.strikethrough,
        )


@dataclass
class TextRun:
    text: str
    style: RunStyle


@dataclass
class LinkRun:
    text: str
    url: str
    style: RunStyle


@dataclass
class ImageRun:
    src: str
    alt: str
    style: RunStyle


@dataclass
class StyledParagraph:
    alignment: Optional[TextAlignment] = None
    background_color: Optional[RGB] = None
    indent_level: int = 0
    runs: List[TextRun | LinkRun | ImageRun] = field(default_factory=list)

    def push_styled(self, text: str, style: RunStyle) -> None:
        self.runs.append(TextRun(text, style))

    def push_link(self, text: str, url: str, style: RunStyle) -> None:
        self.runs.append(LinkRun(text, url, style))

    def push_image(self, src: str, alt: str, style: RunStyle) -> None:
        self.runs.append(ImageRun(src, alt, style))

    def text(self) -> str:
        return "".join(run.alt if isinstance(run, ImageRun) else run.text for run in self.runs)

    def ends_with_space(self) -> bool:
        return not self.runs or self.text()[-1:].isspace()


@dataclass
class ListEntry:
    paragraph: StyledParagraph
    marker: str
    level: int = 0
    marker_style: Optional[RunStyle] = None


class RenderBackend(Protocol):
    """Primitives the builder needs from a page-layout engine."""

    def configure_page(self, margins: Margins) -> None: ...

    def register_font_family(self, font_ref: str, family: FontFamily) -> None: ...

    def add_spacing(self, points: float) -> None: ...

    def add_paragraph(self, paragraph: StyledParagraph) -> None: ...

    def add_list(self, entries: Sequence[ListEntry]) -> None: ...

    def add_horizontal_rule(self, style: RunStyle) -> None: ...

    def render(self, target: str | Path) -> None: ...


class DocumentBuilder:
    """Turn blocks plus a resolved style table into backend calls."""

    def __init__(self, styles: StyleTable, backend: RenderBackend) -> None:
        self.styles = styles
        self.backend = backend

    def build(self, blocks: Iterable[Block]) -> None:
        try:
            self._build(blocks)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"Rendering backend failed: {exc}", original_error=exc) from exc

    def render(self, blocks: Iterable[Block], target: str | Path) -> None:
        self.build(blocks)
        try:
            self.backend.render(target)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"Rendering backend failed: {exc}", original_error=exc) from exc

    def _build(self, blocks: Iterable[Block]) -> None:
        self.backend.configure_page(self.styles.margins)
        for font_ref in sorted(self.styles.font_refs()):
            self.backend.register_font_family(font_ref, lookup_font_family(font_ref))

        for block in blocks:
            self._dispatch_block(block)

    def _dispatch_block(self, block: Block) -> None:
        if isinstance(block, HeadingBlock):
            self._render_inline_block(block.children, self.styles.for_heading(block.level))
        elif isinstance(block, Paragraph):
            self._render_inline_block(block.children, self.styles.text)
        elif isinstance(block, ListBlock):
            self._render_list(block)
        elif isinstance(block, BlockQuoteBlock):
            self._render_inline_block(block.children, self.styles.block_quote, indent_level=1)
        elif isinstance(block, CodeBlock):
            self._render_code_block(block)
        elif isinstance(block, HorizontalRuleBlock):
            descriptor = self.styles.horizontal_rule
            self._spacing(descriptor.before_spacing, descriptor)
            self.backend.add_horizontal_rule(RunStyle.from_descriptor(descriptor))
            self._spacing(descriptor.after_spacing, descriptor)
        elif isinstance(block, EmptyLine):
            self._spacing(1.0, self.styles.text)

    def _render_inline_block(
        self, tokens: Sequence[Token], descriptor: StyleDescriptor, indent_level: int = 0
    ) -> None:
        self._spacing(descriptor.before_spacing, descriptor)
        paragraph = StyledParagraph(
            alignment=descriptor.alignment,
            background_color=descriptor.background_color,
            indent_level=indent_level,
        )
        self._render_inline(paragraph, tokens, RunStyle.from_descriptor(descriptor))
        self.backend.add_paragraph(paragraph)
        self._spacing(descriptor.after_spacing, descriptor)

    def _render_code_block(self, block: CodeBlock) -> None:
        descriptor = self.styles.code
        self._spacing(descriptor.before_spacing, descriptor)
        paragraph = StyledParagraph(alignment=descriptor.alignment, background_color=descriptor.background_color)
        paragraph.push_styled(block.code, RunStyle.from_descriptor(descriptor))
        self.backend.add_paragraph(paragraph)
        self._spacing(descriptor.after_spacing, descriptor)

    def _render_list(self, block: ListBlock) -> None:
        descriptor = self.styles.list_item
        base_style = RunStyle.from_descriptor(descriptor)
        entries: List[ListEntry] = []
        for children, number in zip(block.items, block.numbers or [None] * len(block.items)):
            self._collect_entries(entries, children, number, 0, base_style, descriptor)
        self._spacing(descriptor.before_spacing, descriptor)
        self.backend.add_list(entries)
        self._spacing(descriptor.after_spacing, descriptor)

    def _collect_entries(
        self,
        entries: List[ListEntry],
        children: Sequence[Token],
        number: Optional[int],
        level: int,
        style: RunStyle,
        descriptor: StyleDescriptor,
    ) -> None:
        paragraph = StyledParagraph(alignment=descriptor.alignment, indent_level=level)
        inline = [tok for tok in children if not isinstance(tok, ListItem)]
        self._render_inline(paragraph, inline, style)
        marker = f"{number}." if number is not None else BULLET_MARKER
        entries.append(
            ListEntry(paragraph=paragraph, marker=marker, level=level, marker_style=style)
        )
        for nested in children:
            if isinstance(nested, ListItem):
                self._collect_entries(entries, nested.children, nested.number, level + 1, style, descriptor)

    def _render_inline(self, paragraph: StyledParagraph, tokens: Sequence[Token], style: RunStyle) -> None:
        for index, tok in enumerate(tokens):
            if isinstance(tok, Text):
                paragraph.push_styled(tok.text, style)
            elif isinstance(tok, Emphasis):
                nested = replace(style, italic=style.italic or tok.level != 2, bold=style.bold or tok.level >= 2)
                self._render_inline(paragraph, tok.children, self._tint(nested, self.styles.emphasis))
            elif isinstance(tok, StrongEmphasis):
                nested = replace(style, bold=True)
                self._render_inline(paragraph, tok.children, self._tint(nested, self.styles.strong_emphasis))
            elif isinstance(tok, Link):
                link = self.styles.link
                link_style = replace(self._tint(style, link), underline=style.underline or link.underline)
                if tok.url:
                    paragraph.push_link(tok.text, tok.url, link_style)
                else:
                    paragraph.push_styled(tok.text, link_style)
            elif isinstance(tok, Code):
                code = self.styles.code
                code_style = self._tint(style, code)
                if code.font_family:
                    code_style = replace(code_style, font_family=code.font_family)
                if code.background_color:
                    code_style = replace(code_style, background_color=code.background_color)
                paragraph.push_styled(tok.content, code_style)
            elif isinstance(tok, Image):
                paragraph.push_image(tok.url, tok.alt, RunStyle.from_descriptor(self.styles.image))
            elif isinstance(tok, Newline):
                # soft break: line flow is up to the backend, only keep words apart
                following = tokens[index + 1] if index + 1 < len(tokens) else None
                if not paragraph.ends_with_space() and not _starts_with_space(following):
                    paragraph.push_styled(" ", style)
            elif isinstance(tok, Unknown):
                paragraph.push_styled(tok.text, style)

    @staticmethod
    def _tint(style: RunStyle, descriptor: StyleDescriptor) -> RunStyle:
        if descriptor.text_color is None:
            return style
        return replace(style, color=descriptor.text_color)

    def _spacing(self, lines: float, descriptor: StyleDescriptor) -> None:
        if lines > 0:
            self.backend.add_spacing(lines * descriptor.size)


def _starts_with_space(token: Optional[Token]) -> bool:
    return isinstance(token, Text) and token.text[:1].isspace()
