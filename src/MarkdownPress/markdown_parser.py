from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple, Type

from .blocks import group_tokens
from .errors import (
    EmptyTextRun,
    MalformedLinkOrImage,
    ParseError,
    UnmatchedDelimiter,
    UnmatchedEmphasis,
    UnterminatedComment,
)
from .model import (
    BlockQuote,
    Code,
    Document,
    Emphasis,
    Heading,
    HorizontalRule,
    HtmlComment,
    Image,
    Link,
    ListItem,
    Newline,
    Text,
    Token,
)

logger = logging.getLogger(__name__)

TAB_WIDTH = 4
MAX_HEADING_LEVEL = 6
MAX_EMPHASIS_LEVEL = 3
RULE_MIN_LENGTH = 3
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

_BLANKS = " \t"
_DIGITS = "0123456789"


def tokenize(text: str) -> List[Token]:
    """Split Markdown source into a tree of tokens."""
    tokens = MarkdownLexer(text).parse()
    logger.debug("Tokenized %d characters into %d top-level tokens", len(text), len(tokens))
    return tokens


def parse_markdown(text: str) -> Document:
    tokens = tokenize(text)
    return Document(blocks=group_tokens(tokens))


def _is_newline(char: str) -> bool:
    return char == "\n"


class MarkdownLexer:
    """Recursive-descent lexer over a Markdown string.

    The cursor only moves forward apart from bounded lookahead for rules,
    list markers and delimiter runs. Nesting is expressed through recursion:
    headings and emphasis parse inline content up to their delimiter, list
    items recurse into more deeply indented list items. Any error aborts the
    whole parse.
    """

    def __init__(self, text: str) -> None:
        self.source = text.replace("\r\n", "\n").replace("\r", "\n")
        self.position = 0
        # Set by parsers that end on a closing delimiter so the next text run
        # keeps its leading space.
        self._after_closing = False

    def parse(self) -> List[Token]:
        tokens: List[Token] = []
        while not self._at_end():
            token = self._next_token()
            if token is not None:
                tokens.append(token)
        return tokens

    # -- dispatch -----------------------------------------------------------

    def _next_token(self, until: Optional[Callable[[str], bool]] = None) -> Optional[Token]:
        preserve_space = self._after_closing
        self._after_closing = False
        if preserve_space and self._at_blank():
            return self._parse_text()
        indent_start = self.position if self._at_line_start() else None
        self._skip_whitespace()

        # a blank-only line keeps its blanks as text
        if indent_start is not None and self.position > indent_start and until is None:
            if self._at_end() or self._current() == "\n":
                return Text(text=self.source[indent_start : self.position])

        if self._at_end():
            return None
        char = self._current()
        if until is not None and until(char):
            return None
        if char == "\n":
            self._advance()
            return Newline()

        if self._at_line_start():
            token = self._parse_line_start(char)
            if token is not None:
                return token

        if char in "*_":
            return self._parse_emphasis()
        if char == "`":
            return self._parse_code()
        if char == "[":
            return self._parse_link()
        if char == "!" and self._peek() == "[":
            return self._parse_image()
        if self._starts_with(COMMENT_OPEN):
            return self._parse_html_comment()
        if indent_start is not None:
            self.position = indent_start
        return self._parse_text()

    def _parse_line_start(self, char: str) -> Optional[Token]:
        if char == "#":
            return self._parse_heading()
        if char == ">":
            return self._parse_blockquote()
        if char in "-*_" and self._is_rule_line():
            return self._parse_horizontal_rule()
        marker = self._match_list_marker(self.position)
        if marker is not None:
            return self._parse_list_item(self._line_indent(), marker)
        return None

    def _parse_nested(self, until: Callable[[str], bool]) -> List[Token]:
        children: List[Token] = []
        while not self._at_end() and not until(self._current()):
            token = self._next_token(until)
            if token is not None:
                children.append(token)
        return children

    # -- block-level constructs ---------------------------------------------

    def _parse_heading(self) -> Optional[Heading]:
        level = self._run_length("#")
        after = self._peek(level)
        if level > MAX_HEADING_LEVEL or (after and after not in _BLANKS + "\n"):
            return None
        self.position += level
        self._skip_whitespace()
        children = self._parse_nested(_is_newline)
        self._consume_newline()
        return Heading(children=_trim_trailing_blanks(children), level=level)

    def _parse_blockquote(self) -> BlockQuote:
        self._advance()
        self._skip_whitespace()
        text = self._read_until_newline()
        self._consume_newline()
        return BlockQuote(text=text.rstrip())

    def _parse_horizontal_rule(self) -> HorizontalRule:
        self._read_until_newline()
        self._consume_newline()
        return HorizontalRule()

    def _parse_list_item(self, indent: int, marker: Tuple[bool, Optional[int], int]) -> ListItem:
        ordered, number, content_start = marker
        self.position = content_start
        self._skip_whitespace()
        children = self._parse_nested(_is_newline)
        self._consume_newline()

        while not self._at_end():
            child_indent, child_start = self._measure_indent(self.position)
            while self.source.startswith("\n", child_start):
                child_indent, child_start = self._measure_indent(child_start + 1)
            child_marker = self._match_list_marker(child_start)
            if child_indent <= indent or child_marker is None:
                break
            self.position = child_start
            children.append(self._parse_list_item(child_indent, child_marker))

        return ListItem(children=_trim_trailing_blanks(children), ordered=ordered, number=number)

    # -- inline constructs --------------------------------------------------

    def _parse_emphasis(self) -> Emphasis:
        start = self.position
        delimiter = self._current()
        length = self._run_length(delimiter)
        self.position += length

        children = self._parse_nested(lambda c: c == delimiter or c == "\n")

        if self._run_length(delimiter) != length:
            raise self._error(UnmatchedEmphasis, f"Unmatched emphasis {delimiter * length!r}", start)
        self.position += length
        self._after_closing = True
        return Emphasis(level=min(length, MAX_EMPHASIS_LEVEL), children=children)

    def _parse_code(self) -> Code:
        start = self.position
        length = self._run_length("`")
        self.position += length

        if length == 1:
            end = self.source.find("`", self.position)
            if end == -1:
                raise self._error(UnmatchedDelimiter, "Unclosed inline code", start)
            content = self.source[self.position : end]
            self.position = end + 1
            self._after_closing = True
            return Code(language="", content=content)

        # ``code`` closed on its own line is inline code, not a fence.
        line_end = self._line_end(self.position)
        same_line = self._find_backtick_run(length, self.position, line_end)
        if same_line != -1:
            content = self.source[self.position : same_line]
            self.position = same_line + length
            self._after_closing = True
            return Code(language="", content=content.strip())

        language = self._read_until_newline().strip()
        self._consume_newline()
        body_start = self.position
        close = self._find_backtick_run(length, body_start, len(self.source))
        if close == -1:
            raise self._error(UnmatchedDelimiter, f"Unclosed code fence {'`' * length!r}", start)
        content = self.source[body_start:close]
        self.position = close + length
        self._skip_whitespace()
        self._consume_newline()
        return Code(language=language, content=content.lstrip("\n").rstrip(), fenced=True)

    def _parse_link(self) -> Link:
        start = self.position
        text = self._read_enclosed("]", start)
        url = ""
        if self._current() == "(":
            url = self._read_enclosed(")", start).strip()
        self._after_closing = True
        return Link(text=text, url=url)

    def _parse_image(self) -> Image:
        start = self.position
        self._advance()  # '!'
        alt = self._read_enclosed("]", start)
        url = ""
        if self._current() == "(":
            url = self._read_enclosed(")", start).strip()
        self._after_closing = True
        return Image(alt=alt, url=url)

    def _parse_html_comment(self) -> HtmlComment:
        start = self.position
        end = self.source.find(COMMENT_CLOSE, start + len(COMMENT_OPEN))
        if end == -1:
            raise self._error(UnterminatedComment, "Unterminated HTML comment", start)
        text = self.source[start + len(COMMENT_OPEN) : end]
        self.position = end + len(COMMENT_CLOSE)
        self._after_closing = True
        return HtmlComment(text=text)

    def _parse_text(self) -> Text:
        start = self.position
        while not self._at_end():
            if self._current() == "\n" or self._at_special():
                break
            self._advance()
        if self.position == start:
            raise self._error(EmptyTextRun, f"Unexpected character {self._current()!r}", start)
        return Text(text=self.source[start : self.position])

    # -- lookahead helpers --------------------------------------------------

    def _at_special(self) -> bool:
        char = self._current()
        if char in "*`[":
            return True
        if char == "_":
            return not self._is_intraword(self.position)
        if char == "!":
            return self._peek() == "["
        if char == "<":
            return self._starts_with(COMMENT_OPEN)
        return False

    def _is_intraword(self, index: int) -> bool:
        before = self.source[index - 1] if index > 0 else ""
        after = self.source[index + 1] if index + 1 < len(self.source) else ""
        return before.isalnum() and after.isalnum()

    def _is_rule_line(self) -> bool:
        char = self._current()
        length = self._run_length(char)
        if length < RULE_MIN_LENGTH:
            return False
        rest = self.source[self.position + length : self._line_end(self.position)]
        return rest.strip(_BLANKS) == ""

    def _match_list_marker(self, index: int) -> Optional[Tuple[bool, Optional[int], int]]:
        """Return ``(ordered, number, content_start)`` for a list marker at ``index``."""
        source = self.source
        if index >= len(source):
            return None
        char = source[index]
        if char in "-+":
            if index + 1 < len(source) and source[index + 1] in _BLANKS:
                return False, None, index + 1
            return None
        end = index
        while end < len(source) and source[end] in _DIGITS:
            end += 1
        if end == index or end + 1 >= len(source):
            return None
        if source[end] == "." and source[end + 1] in _BLANKS:
            return True, int(source[index:end]), end + 1
        return None

    def _find_backtick_run(self, length: int, start: int, stop: int) -> int:
        index = start
        while True:
            index = self.source.find("`", index, stop)
            if index == -1:
                return -1
            run = self._run_length("`", index)
            if run == length:
                return index
            index += run

    def _measure_indent(self, index: int) -> Tuple[int, int]:
        columns = 0
        while index < len(self.source) and self.source[index] in _BLANKS:
            columns += TAB_WIDTH if self.source[index] == "\t" else 1
            index += 1
        return columns, index

    def _line_indent(self) -> int:
        line_start = self.source.rfind("\n", 0, self.position) + 1
        columns, _ = self._measure_indent(line_start)
        return columns

    def _line_end(self, index: int) -> int:
        end = self.source.find("\n", index)
        return len(self.source) if end == -1 else end

    def _at_line_start(self) -> bool:
        index = self.position - 1
        while index >= 0 and self.source[index] in _BLANKS:
            index -= 1
        return index < 0 or self.source[index] == "\n"

    def _run_length(self, char: str, index: Optional[int] = None) -> int:
        index = self.position if index is None else index
        end = index
        while end < len(self.source) and self.source[end] == char:
            end += 1
        return end - index

    def _starts_with(self, prefix: str) -> bool:
        return self.source.startswith(prefix, self.position)

    # -- cursor primitives --------------------------------------------------

    def _read_enclosed(self, closer: str, start: int) -> str:
        self._advance()  # opening bracket
        begin = self.position
        while not self._at_end() and self._current() not in (closer, "\n"):
            self._advance()
        if self._current() != closer:
            raise self._error(MalformedLinkOrImage, f"Missing {closer!r} in link or image", start)
        content = self.source[begin : self.position]
        self._advance()
        return content

    def _read_until_newline(self) -> str:
        start = self.position
        self.position = self._line_end(self.position)
        return self.source[start : self.position]

    def _consume_newline(self) -> None:
        if self._current() == "\n":
            self._advance()
        self._after_closing = False

    def _at_blank(self) -> bool:
        return self._current() != "" and self._current() in _BLANKS

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._current() in _BLANKS:
            self._advance()

    def _at_end(self) -> bool:
        return self.position >= len(self.source)

    def _current(self) -> str:
        return self.source[self.position] if self.position < len(self.source) else ""

    def _peek(self, offset: int = 1) -> str:
        index = self.position + offset
        return self.source[index] if index < len(self.source) else ""

    def _advance(self) -> None:
        self.position += 1

    def _error(self, error_type: Type[ParseError], message: str, position: int) -> ParseError:
        line = self.source.count("\n", 0, position) + 1
        column = position - (self.source.rfind("\n", 0, position) + 1) + 1
        return error_type(message, position, line, column)


def _trim_trailing_blanks(children: List[Token]) -> List[Token]:
    if children and isinstance(children[-1], Text):
        trimmed = children[-1].text.rstrip()
        if trimmed:
            children[-1] = Text(text=trimmed)
        else:
            children.pop()
    return children
