from MarkdownPress.blocks import group_tokens
from MarkdownPress.markdown_parser import parse_markdown
from MarkdownPress.model import (
    BlockQuote,
    BlockQuoteBlock,
    Code,
    CodeBlock,
    Emphasis,
    EmptyLine,
    HeadingBlock,
    HorizontalRule,
    HorizontalRuleBlock,
    HtmlComment,
    ListBlock,
    ListItem,
    Newline,
    Paragraph,
    Text,
)


def test_consecutive_list_items_form_one_list():
    blocks = group_tokens([ListItem([Text("A")]), ListItem([Text("B")])])
    assert len(blocks) == 1
    assert isinstance(blocks[0], ListBlock)
    assert blocks[0].items == [[Text("A")], [Text("B")]]


def test_nested_list_items_travel_unchanged():
    nested = ListItem([Text("inner")], ordered=True, number=1)
    blocks = group_tokens([ListItem([Text("outer"), nested])])
    assert blocks[0].items == [[Text("outer"), nested]]


def test_ordered_list_keeps_numbers():
    blocks = parse_markdown("3. third\n4. fourth").blocks
    assert blocks == [ListBlock(items=[[Text("third")], [Text("fourth")]], ordered=True, numbers=[3, 4])]


def test_blank_line_separates_paragraphs():
    assert parse_markdown("A\n\nB").blocks == [
        Paragraph([Text("A")]),
        EmptyLine(),
        Paragraph([Text("B")]),
    ]


def test_single_newline_is_soft_break():
    assert parse_markdown("A\nB").blocks == [Paragraph([Text("A"), Newline(), Text("B")])]


def test_heading_then_paragraph():
    assert parse_markdown("# Title\n\nSome *text*.").blocks == [
        HeadingBlock(level=1, children=[Text("Title")]),
        Paragraph([Text("Some "), Emphasis(1, [Text("text")]), Text(".")]),
    ]


def test_fenced_code_between_paragraphs():
    blocks = parse_markdown("Intro\n\n```py\nprint(1)\n```\n\nOutro").blocks
    assert blocks == [
        Paragraph([Text("Intro")]),
        EmptyLine(),
        CodeBlock(language="py", code="print(1)"),
        Paragraph([Text("Outro")]),
    ]


def test_inline_code_stays_in_paragraph():
    blocks = group_tokens([Text("run "), Code("", "ls")])
    assert blocks == [Paragraph([Text("run "), Code("", "ls")])]


def test_multiline_code_becomes_block():
    blocks = group_tokens([Text("before"), Code("", "a\nb")])
    assert blocks == [Paragraph([Text("before")]), CodeBlock(language=None, code="a\nb")]


def test_blockquote_flushes_paragraph():
    blocks = group_tokens([Text("a"), Newline(), BlockQuote("quoted")])
    assert blocks == [Paragraph([Text("a")]), BlockQuoteBlock([Text("quoted")])]


def test_horizontal_rule_block():
    blocks = group_tokens([Text("a"), HorizontalRule(), Text("b")])
    assert blocks == [Paragraph([Text("a")]), HorizontalRuleBlock(), Paragraph([Text("b")])]


def test_comments_are_dropped():
    blocks = group_tokens([HtmlComment("hidden"), Text("shown")])
    assert blocks == [Paragraph([Text("shown")])]


def test_trailing_content_is_flushed():
    assert group_tokens([Text("end"), Newline()]) == [Paragraph([Text("end")])]


def test_list_followed_by_paragraph():
    blocks = parse_markdown("- a\n- b\n\nAfter").blocks
    assert blocks == [
        ListBlock(items=[[Text("a")], [Text("b")]], ordered=False, numbers=[None, None]),
        Paragraph([Text("After")]),
    ]


def test_blank_only_line_still_separates_paragraphs():
    assert parse_markdown("A\n  \nB").blocks == [
        Paragraph([Text("A")]),
        EmptyLine(),
        Paragraph([Text("B")]),
    ]


def test_indented_line_keeps_its_blanks():
    assert parse_markdown("first\n  indented").blocks == [
        Paragraph([Text("first"), Newline(), Text("  indented")]),
    ]


def test_blank_line_inside_nested_list_keeps_one_list():
    blocks = parse_markdown("- a\n\n  - b").blocks
    assert blocks == [ListBlock(items=[[Text("a"), ListItem([Text("b")])]], ordered=False, numbers=[None])]
