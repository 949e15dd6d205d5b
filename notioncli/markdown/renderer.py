"""Render Notion blocks back to Markdown."""

from __future__ import annotations

from typing import List, Sequence

from notioncli.markdown.elements import (
    DEFAULT_CALLOUT_EMOJI,
    Block,
    BulletedListItem,
    Callout,
    Code,
    Divider,
    Heading1,
    Heading2,
    Heading3,
    NumberedListItem,
    Paragraph,
    Quote,
    ToDo,
)


def blocks_to_markdown(blocks: Sequence[Block]) -> str:
    """Render blocks as Markdown, one blank line after every block.

    The separator is also emitted after the last block, so non-empty output
    always ends with a newline. Numbered items are written as ``1.`` and
    callouts as quotes prefixed by their emoji.
    """

    lines: List[str] = []
    for block in blocks:
        lines.extend(_render_block(block))
        lines.append("")
    return "\n".join(lines)


def _render_block(block: Block) -> List[str]:
    if isinstance(block, Heading1):
        return [f"# {block.text}"]
    if isinstance(block, Heading2):
        return [f"## {block.text}"]
    if isinstance(block, Heading3):
        return [f"### {block.text}"]
    if isinstance(block, BulletedListItem):
        return [f"- {block.text}"]
    if isinstance(block, NumberedListItem):
        return [f"1. {block.text}"]
    if isinstance(block, ToDo):
        mark = "x" if block.checked else " "
        return [f"- [{mark}] {block.text}"]
    if isinstance(block, Code):
        return [f"```{block.language}", block.text, "```"]
    if isinstance(block, Quote):
        return [f"> {block.text}"]
    if isinstance(block, Divider):
        return ["---"]
    if isinstance(block, Callout):
        emoji = block.icon.emoji if block.icon else DEFAULT_CALLOUT_EMOJI
        return [f"> {emoji} {block.text}"]
    if isinstance(block, Paragraph):
        return [block.text]
    raise TypeError(f"Unsupported block type: {type(block).__name__}")


__all__ = ["blocks_to_markdown"]
