import pytest

from agentchat.markdown import (
    Alignment,
    BlockKind,
    escape_rich_text,
    is_hrule,
    parse_alignment,
    parse_blocks,
    render,
    render_inline,
    split_table_row,
)


def test_escape_replaces_angle_bracket():
    assert escape_rich_text("a<b") == "a＜b"
    assert "<" not in escape_rich_text("<<x>>")


@pytest.mark.parametrize("line", ["---", "* * *", "  ___  ", "- - -"])
def test_hrule_accepts(line):
    assert is_hrule(line) is True


@pytest.mark.parametrize("line", ["--", "-*-", "-- a", "===", ""])
def test_hrule_rejects(line):
    assert is_hrule(line) is False


def test_split_table_row_drops_outer_empties():
    assert split_table_row("| a | b |") == ["a", "b"]
    assert split_table_row("a||b") == ["a", "", "b"]
    assert split_table_row("") == []


@pytest.mark.parametrize(
    "cell, expected",
    [
        ("---", Alignment.LEFT),
        (":---", Alignment.LEFT),
        ("---:", Alignment.RIGHT),
        (" :-: ", Alignment.CENTER),
    ],
)
def test_parse_alignment_valid(cell, expected):
    assert parse_alignment(cell) is expected


@pytest.mark.parametrize("cell", ["", ":", "::", "-:-", "abc", "-x-"])
def test_parse_alignment_invalid(cell):
    assert parse_alignment(cell) is None


def test_render_inline_tags():
    assert render_inline("**bold**") == "<Markdown.Bold>bold</>"
    assert render_inline("*it*") == "<Markdown.Italic>it</>"
    assert render_inline("`a<b`") == "<Markdown.Code>a＜b</>"


def test_render_inline_unclosed_passes_through():
    assert render_inline("`x") == "`x"
    assert render_inline("**a") == "**a"
    assert render_inline("****") == "****"
    assert render_inline("x < y") == "x ＜ y"


def test_render_inline_plain_text_unchanged():
    assert render_inline("hello world") == "hello world"


def test_heading_levels():
    blocks = parse_blocks("# One\n### Three")
    assert [b.kind for b in blocks] == [BlockKind.HEADING, BlockKind.HEADING]
    assert [b.heading_level for b in blocks] == [1, 3]
    assert blocks[0].lines == ["One"]


def test_code_block_keeps_lines_and_unterminated():
    blocks = parse_blocks("```py\n  x = 1\n# not a heading\n```\nafter")
    assert blocks[0].kind is BlockKind.CODE_BLOCK
    assert blocks[0].lines == ["  x = 1", "# not a heading"]
    assert blocks[1].kind is BlockKind.PARAGRAPH
    assert blocks[1].lines == ["after"]

    open_block = parse_blocks("```\ncode")
    assert len(open_block) == 1
    assert open_block[0].lines == ["code"]


def test_lists():
    blocks = parse_blocks("- a\n* b\n+ c\n\n1. one\n22. two")
    assert blocks[0].kind is BlockKind.UNORDERED_LIST
    assert blocks[0].lines == ["a", "b", "c"]
    assert blocks[1].kind is BlockKind.ORDERED_LIST
    assert blocks[1].lines == ["one", "two"]


def test_paragraph_joins_until_opener():
    blocks = parse_blocks("first\nsecond\n- item\n\nthird")
    assert blocks[0].kind is BlockKind.PARAGRAPH
    assert blocks[0].lines == ["first", "second"]
    assert blocks[1].kind is BlockKind.UNORDERED_LIST
    assert blocks[2].lines == ["third"]


def test_hash_without_space_is_paragraph():
    blocks = parse_blocks("#tag\nmore")
    assert len(blocks) == 1
    assert blocks[0].kind is BlockKind.PARAGRAPH
    assert blocks[0].lines == ["#tag", "more"]


def test_table_pads_and_truncates():
    text = "| a | b |\n|:--|--:|\n| 1 |\n| 2 | 3 | 4 |\ntail"
    blocks = parse_blocks(text)
    table = blocks[0]
    assert table.kind is BlockKind.TABLE
    assert table.alignments == [Alignment.LEFT, Alignment.RIGHT]
    assert table.rows == [["a", "b"], ["1", ""], ["2", "3"]]
    assert all(len(r) == len(table.rows[0]) for r in table.rows)
    assert blocks[1].lines == ["tail"]


def test_mismatched_separator_is_not_table():
    blocks = parse_blocks("a | b\n---")
    assert blocks[0].kind is BlockKind.PARAGRAPH
    assert blocks[1].kind is BlockKind.HRULE


def test_blank_text_has_no_blocks():
    assert parse_blocks("") == []
    assert parse_blocks("\n  \r\n\n") == []


def test_render_applies_inline_markup():
    blocks = render("Hello **you**\nthere\n\n## Title *x*\n```\n**raw**\n```\n- `c`")
    assert blocks[0].lines == ["Hello <Markdown.Bold>you</>\nthere"]
    assert blocks[1].heading_level == 2
    assert blocks[1].lines == ["Title <Markdown.Italic>x</>"]
    assert blocks[2].lines == ["**raw**"]
    assert blocks[3].lines == ["<Markdown.Code>c</>"]


def test_render_table_cells():
    blocks = render("| **h** | x |\n|---|:-:|\n| *i* | y |")
    assert blocks[0].rows == [["<Markdown.Bold>h</>", "x"], ["<Markdown.Italic>i</>", "y"]]
    assert blocks[0].alignments == [Alignment.LEFT, Alignment.CENTER]


def test_render_keeps_block_kinds():
    text = "p\n\n---\n\n1. a\n\n# h"
    assert [b.kind for b in render(text)] == [b.kind for b in parse_blocks(text)]