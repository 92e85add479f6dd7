from __future__ import annotations

import logging
from typing import Iterable, List

from .model import (
    Block,
    BlockQuote,
    BlockQuoteBlock,
    Code,
    CodeBlock,
    Emphasis,
    EmptyLine,
    Heading,
    HeadingBlock,
    HorizontalRule,
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
)

logger = logging.getLogger(__name__)

INLINE_TOKENS = (Text, Emphasis, StrongEmphasis, Link, Image)


def group_tokens(tokens: Iterable[Token]) -> List[Block]:
    """Group the top-level token stream into block-level document units.

    Inline tokens collect into a pending paragraph. One newline inside running
    text is kept as a soft break; two in a row close the paragraph and emit an
    ``EmptyLine``. Headings, code blocks, rules, quotes and runs of list items
    flush the pending paragraph and become blocks of their own.
    """
    token_list = list(tokens)
    blocks: List[Block] = []
    pending: List[Token] = []
    newline_count = 0

    def flush() -> None:
        while pending and (isinstance(pending[-1], Newline) or _is_blank_text(pending[-1])):
            pending.pop()
        if pending:
            blocks.append(Paragraph(children=list(pending)))
            pending.clear()

    i = 0
    while i < len(token_list):
        tok = token_list[i]
        if isinstance(tok, Newline):
            newline_count += 1
            if newline_count >= 2:
                flush()
                blocks.append(EmptyLine())
                newline_count = 0
            elif pending:
                pending.append(tok)
            i += 1
        elif _is_blank_text(tok):
            if pending:
                pending.append(tok)
            i += 1
        elif isinstance(tok, Code) and (tok.fenced or "\n" in tok.content):
            flush()
            blocks.append(CodeBlock(language=tok.language or None, code=tok.content))
            newline_count = 0
            i += 1
        elif isinstance(tok, (Code,) + INLINE_TOKENS):
            pending.append(tok)
            newline_count = 0
            i += 1
        elif isinstance(tok, Heading):
            flush()
            blocks.append(HeadingBlock(level=tok.level, children=tok.children))
            newline_count = 0
            i += 1
        elif isinstance(tok, HorizontalRule):
            flush()
            blocks.append(HorizontalRuleBlock())
            newline_count = 0
            i += 1
        elif isinstance(tok, ListItem):
            flush()
            list_block, i = _collect_list(token_list, i)
            blocks.append(list_block)
            newline_count = 0
        elif isinstance(tok, BlockQuote):
            flush()
            blocks.append(BlockQuoteBlock(children=[Text(tok.text)]))
            newline_count = 0
            i += 1
        else:
            logger.debug("Dropping %s outside of any block", type(tok).__name__)
            i += 1

    flush()
    return blocks


def _collect_list(tokens: List[Token], index: int) -> tuple[ListBlock, int]:
    run: List[ListItem] = []
    i = index
    while i < len(tokens):
        item = tokens[i]
        if not isinstance(item, ListItem):
            break
        run.append(item)
        i += 1
    list_block = ListBlock(
        items=[item.children for item in run],
        ordered=run[0].ordered,
        numbers=[item.number for item in run],
    )
    return list_block, i


def _is_blank_text(token: Token) -> bool:
    return isinstance(token, Text) and not token.text.strip()
