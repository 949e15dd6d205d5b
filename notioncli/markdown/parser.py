"""Line-oriented Markdown to Notion block converter."""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from notioncli.markdown.elements import (
    DEFAULT_LANGUAGE,
    Block,
    Code,
    bulleted_list_item,
    callout,
    code_block,
    divider,
    heading_1,
    heading_2,
    heading_3,
    numbered_list_item,
    paragraph,
    quote,
    to_do,
)
from notioncli.utils.logging import NullLogger, WarningLogger

_FENCE = "```"
# Longest prefix first so "## Title" never lands in heading_1.
_HEADING_PREFIXES = (
    ("### ", heading_3),
    ("## ", heading_2),
    ("# ", heading_1),
)
_DIVIDER_RE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
_CALLOUT_RE = re.compile(
    r"^>\s*\[!(?P<kind>NOTE|TIP|WARNING|IMPORTANT|CAUTION)\]\s*(?P<body>.*)$",
    re.IGNORECASE,
)
_NUMBERED_RE = re.compile(r"^\d+\.\s+(?P<body>.*)$")
_CALLOUT_ICONS = {
    "WARNING": "⚠️",
    "CAUTION": "⚠️",
    "TIP": "💡",
    "IMPORTANT": "❗",
    "NOTE": "ℹ️",
}
_TODO_PREFIXES = (
    ("- [ ] ", False),
    ("- [x] ", True),
    ("- [X] ", True),
)


def markdown_to_blocks(
    text: str, *, source_file: str = "", logger: WarningLogger | None = None
) -> list[Block]:
    """Convert Markdown text into a flat list of Notion blocks.

    Unrecognized lines become paragraphs and unterminated fences or tables
    close at the end of the input, so any string converts without error.

    Args:
        text: Markdown document.
        source_file: Name reported alongside warnings.
        logger: Optional collector for conversion warnings.

    Returns:
        Blocks in document order.
    """

    lines = text.replace("\r\n", "\n").split("\n")
    active_logger = logger or NullLogger()
    blocks: List[Block] = []
    index = 0
    while index < len(lines):
        stripped = lines[index].strip()

        if not stripped:
            index += 1
            continue

        if stripped.startswith(_FENCE):
            block, index = _parse_code_block(lines, index, source_file, active_logger)
            blocks.append(block)
            continue

        line_block = _parse_line(stripped)
        if line_block is not None:
            blocks.append(line_block)
            index += 1
            continue

        if stripped.startswith("|"):
            table, index = _parse_table(lines, index, source_file, active_logger)
            blocks.append(table)
            continue

        blocks.append(paragraph(stripped))
        index += 1
    return blocks


def _parse_line(stripped: str) -> Block | None:
    """Match the single-line rules in priority order."""

    for prefix, factory in _HEADING_PREFIXES:
        if stripped.startswith(prefix):
            return factory(stripped[len(prefix) :])

    if _DIVIDER_RE.match(stripped):
        return divider()

    match = _CALLOUT_RE.match(stripped)
    if match:
        kind = match.group("kind").upper()
        body = match.group("body")
        return callout(body or kind, _CALLOUT_ICONS.get(kind, _CALLOUT_ICONS["NOTE"]))

    if stripped.startswith("> "):
        return quote(stripped[2:])

    for prefix, checked in _TODO_PREFIXES:
        if stripped.startswith(prefix):
            return to_do(stripped[len(prefix) :], checked=checked)

    if stripped.startswith(("- ", "* ")):
        return bulleted_list_item(stripped[2:])

    match = _NUMBERED_RE.match(stripped)
    if match:
        return numbered_list_item(match.group("body"))

    return None


def _parse_code_block(
    lines: Sequence[str], index: int, source_file: str, logger: WarningLogger
) -> Tuple[Code, int]:
    start = index
    language = lines[index].strip()[len(_FENCE) :].strip() or DEFAULT_LANGUAGE
    index += 1
    code_lines: List[str] = []
    while index < len(lines) and not lines[index].strip().startswith(_FENCE):
        code_lines.append(lines[index])
        index += 1
    if index >= len(lines):
        logger.warn(
            filename=source_file,
            line=start + 1,
            element_type="CodeBlock",
            message="Unterminated code fence, closing at end of document",
            code="unterminated-fence",
        )
    return code_block("\n".join(code_lines), language), index + 1


def _parse_table(
    lines: Sequence[str], index: int, source_file: str, logger: WarningLogger
) -> Tuple[Code, int]:
    start = index
    table_lines: List[str] = []
    while index < len(lines) and lines[index].strip().startswith("|"):
        table_lines.append(lines[index])
        index += 1
    logger.warn(
        filename=source_file,
        line=start + 1,
        element_type="Table",
        message="table kept verbatim as a plain text code block",
        code="table-parse-warning",
    )
    return code_block("\n".join(table_lines), DEFAULT_LANGUAGE), index


__all__ = ["markdown_to_blocks"]
