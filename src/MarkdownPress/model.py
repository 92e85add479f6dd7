from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Token:
    """Base class for tokens produced by the lexer."""


@dataclass
class Heading(Token):
    children: List[Token]
    level: int


@dataclass
class Emphasis(Token):
    level: int
    children: List[Token]


@dataclass
class StrongEmphasis(Token):
    children: List[Token]


@dataclass
class Code(Token):
    language: str
    content: str
    fenced: bool = field(default=False, compare=False)


@dataclass
class BlockQuote(Token):
    text: str


@dataclass
class ListItem(Token):
    children: List[Token]
    ordered: bool = False
    number: Optional[int] = None


@dataclass
class Link(Token):
    text: str
    url: str


@dataclass
class Image(Token):
    alt: str
    url: str


@dataclass
class Text(Token):
    text: str


@dataclass
class HtmlComment(Token):
    text: str


@dataclass
class Newline(Token):
    """Line end inside running text or a blank line."""


@dataclass
class HorizontalRule(Token):
    """Thematic break."""


@dataclass
class Unknown(Token):
    text: str


@dataclass
class Block:
    """Base class for block-level nodes."""


@dataclass
class Document:
    blocks: List[Block]


@dataclass
class HeadingBlock(Block):
    level: int
    children: List[Token]


@dataclass
class Paragraph(Block):
    children: List[Token]


@dataclass
class ListBlock(Block):
    items: List[List[Token]]
    ordered: bool = False
    numbers: List[Optional[int]] = field(default_factory=list)


@dataclass
class BlockQuoteBlock(Block):
    children: List[Token]


@dataclass
class CodeBlock(Block):
    language: str | None
    code: str


@dataclass
class HorizontalRuleBlock(Block):
    """Horizontal rule / thematic break."""


@dataclass
class EmptyLine(Block):
    """Blank line between paragraphs."""
