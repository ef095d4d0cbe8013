"""A small Markdown subset for chat messages, turned into rich-text markup.

Supported: paragraphs with inline bold, italic and code, fenced code blocks,
ATX headings, bullet and ordered lists, horizontal rules and pipe tables.
Anything else passes through as plain text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

BOLD_TAG = "<Markdown.Bold>"
ITALIC_TAG = "<Markdown.Italic>"
CODE_TAG = "<Markdown.Code>"
CLOSE_TAG = "</>"
_FULLWIDTH_LT = "＜"
_FENCE = "```"
_MAX_HEADING_LEVEL = 6
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class BlockKind(Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    CODE_BLOCK = "code_block"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    HRULE = "hrule"
    TABLE = "table"


class Alignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass
class Block:
    """One block-level element.

    For tables, ``rows[0]`` is the header row and ``alignments`` holds one
    entry per column.
    """

    kind: BlockKind = BlockKind.PARAGRAPH
    heading_level: int = 0
    lines: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    alignments: list[Alignment] = field(default_factory=list)


def escape_rich_text(text: str) -> str:
    """Swap '<' for a fullwidth look-alike so it cannot open a markup tag."""
    return text.replace("<", _FULLWIDTH_LT)


def is_hrule(line: str) -> bool:
    """Three or more of the same '-', '*' or '_', optionally spaced."""
    s = line.strip()
    if len(s) < 3:
        return False
    marker = s[0]
    if marker not in "-*_":
        return False
    return all(ch in (marker, " ") for ch in s)


def _is_unordered_item(trimmed: str) -> bool:
    return len(trimmed) >= 2 and trimmed[0] in "-*+" and trimmed[1] == " "


def _ordered_prefix_len(trimmed: str) -> Optional[int]:
    """Length of a "12. " prefix, or None when the line is not an ordered item."""
    digits = 0
    while digits < len(trimmed) and trimmed[digits].isdigit():
        digits += 1
    if (
        digits > 0
        and digits + 1 < len(trimmed)
        and trimmed[digits] == "."
        and trimmed[digits + 1] == " "
    ):
        return digits + 2
    return None


def split_table_row(line: str) -> list[str]:
    """Split a table row on '|', dropping empty outer cells but keeping inner ones."""
    parts = line.strip().split("|")
    if parts and not parts[0].strip():
        parts.pop(0)
    if parts and not parts[-1].strip():
        parts.pop()
    return [part.strip() for part in parts]


def parse_alignment(cell: str) -> Optional[Alignment]:
    """Alignment of a separator cell such as ':---:', or None if it is not one."""
    t = cell.strip()
    if not t:
        return None
    has_dash = False
    last = len(t) - 1
    for pos, ch in enumerate(t):
        if ch == "-":
            has_dash = True
        elif ch == ":":
            if pos not in (0, last):
                return None
        else:
            return None
    if not has_dash:
        return None
    starts, ends = t[0] == ":", t[-1] == ":"
    if starts and ends:
        return Alignment.CENTER
    if ends:
        return Alignment.RIGHT
    return Alignment.LEFT


def _table_start(lines: list[str], index: int) -> Optional[list[Alignment]]:
    """Column alignments if lines[index] opens a table, else None."""
    if index + 1 >= len(lines):
        return None
    header = lines[index]
    if "|" not in header:
        return None
    header_cells = split_table_row(header)
    if not header_cells:
        return None
    sep_cells = split_table_row(lines[index + 1])
    if len(sep_cells) != len(header_cells):
        return None
    aligns = [parse_alignment(cell) for cell in sep_cells]
    if any(a is None for a in aligns):
        return None
    return aligns  # type: ignore[return-value]


def render_inline(raw: str) -> str:
    """Turn **bold**, *italic* and `code` into rich-text markup tags."""
    out: list[str] = []
    n = len(raw)
    i = 0
    while i < n:
        ch = raw[i]
        if ch == "`":
            end = raw.find("`", i + 1)
            if end != -1:
                out.append(CODE_TAG + escape_rich_text(raw[i + 1:end]) + CLOSE_TAG)
                i = end + 1
                continue
        elif ch == "*" and i + 1 < n and raw[i + 1] == "*":
            end = raw.find("**", i + 2)
            if end != -1 and end > i + 2:
                out.append(BOLD_TAG + escape_rich_text(raw[i + 2:end]) + CLOSE_TAG)
                i = end + 2
                continue
        elif ch == "*":
            end = raw.find("*", i + 1)
            if end != -1 and end > i + 1:
                out.append(ITALIC_TAG + escape_rich_text(raw[i + 1:end]) + CLOSE_TAG)
                i = end + 1
                continue
        out.append(_FULLWIDTH_LT if ch == "<" else ch)
        i += 1
    return "".join(out)


def _heading(trimmed: str) -> Optional[Block]:
    if not trimmed.startswith("#"):
        return None
    level = 0
    while level < len(trimmed) and trimmed[level] == "#" and level < _MAX_HEADING_LEVEL:
        level += 1
    if level < len(trimmed) and trimmed[level] == " ":
        return Block(BlockKind.HEADING, heading_level=level, lines=[trimmed[level + 1:]])
    return None


def _opens_block(lines: list[str], index: int) -> bool:
    line = lines[index]
    tl = line.lstrip()
    return (
        not line.strip()
        or tl.startswith(_FENCE)
        or tl.startswith("#")
        or is_hrule(line)
        or _is_unordered_item(tl)
        or _ordered_prefix_len(tl) is not None
        or _table_start(lines, index) is not None
    )


def parse_blocks(text: str) -> list[Block]:
    """Split text into block-level elements."""
    lines = _LINE_BREAK.split(text)
    blocks: list[Block] = []
    n = len(lines)
    i = 0
    while i < n:
        line = lines[i]
        trimmed = line.lstrip()

        if trimmed.startswith(_FENCE):
            block = Block(BlockKind.CODE_BLOCK)
            i += 1
            while i < n and not lines[i].lstrip().startswith(_FENCE):
                block.lines.append(lines[i])
                i += 1
            if i < n:
                i += 1  # closing fence
            blocks.append(block)
            continue

        if is_hrule(line):
            blocks.append(Block(BlockKind.HRULE))
            i += 1
            continue

        heading = _heading(trimmed)
        if heading is not None:
            blocks.append(heading)
            i += 1
            continue

        if _is_unordered_item(trimmed):
            block = Block(BlockKind.UNORDERED_LIST)
            while i < n and _is_unordered_item(lines[i].lstrip()):
                block.lines.append(lines[i].lstrip()[2:])
                i += 1
            blocks.append(block)
            continue

        if _ordered_prefix_len(trimmed) is not None:
            block = Block(BlockKind.ORDERED_LIST)
            while i < n:
                item = lines[i].lstrip()
                prefix = _ordered_prefix_len(item)
                if prefix is None:
                    break
                block.lines.append(item[prefix:])
                i += 1
            blocks.append(block)
            continue

        if not line.strip():
            i += 1
            continue

        aligns = _table_start(lines, i)
        if aligns is not None:
            header = split_table_row(lines[i])
            width = len(header)
            block = Block(BlockKind.TABLE, rows=[header], alignments=aligns)
            i += 2
            while i < n:
                row = lines[i].strip()
                if not row or "|" not in row:
                    break
                cells = split_table_row(row)[:width]
                cells.extend([""] * (width - len(cells)))
                block.rows.append(cells)
                i += 1
            blocks.append(block)
            continue

        # Paragraph: the first line always belongs to it, so a line such as
        # "#tag" that opens nothing still makes progress.
        block = Block(BlockKind.PARAGRAPH, lines=[line])
        i += 1
        while i < n and not _opens_block(lines, i):
            block.lines.append(lines[i])
            i += 1
        blocks.append(block)
    return blocks


def render(text: str) -> list[Block]:
    """Parse text and apply inline markup to every block that shows rich text.

    Paragraphs become a single markup line (source lines joined by newlines);
    code blocks become a single line of verbatim code; list items and table
    cells are rendered one by one.
    """
    rendered: list[Block] = []
    for block in parse_blocks(text):
        kind = block.kind
        if kind is BlockKind.PARAGRAPH:
            rendered.append(replace(block, lines=[render_inline("\n".join(block.lines))]))
        elif kind is BlockKind.HEADING:
            head = block.lines[0] if block.lines else ""
            rendered.append(replace(block, lines=[render_inline(head)]))
        elif kind is BlockKind.CODE_BLOCK:
            rendered.append(replace(block, lines=["\n".join(block.lines)]))
        elif kind in (BlockKind.UNORDERED_LIST, BlockKind.ORDERED_LIST):
            rendered.append(replace(block, lines=[render_inline(x) for x in block.lines]))
        elif kind is BlockKind.TABLE:
            if not block.rows:
                continue
            rows = [[render_inline(cell) for cell in row] for row in block.rows]
            rendered.append(replace(block, rows=rows, alignments=list(block.alignments)))
        else:
            rendered.append(replace(block))
    return rendered