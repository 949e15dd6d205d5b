"""Utilities for converting blocks to and from Notion API payloads."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable, Mapping, Sequence

from notioncli.markdown.elements import (
    BLOCK_TYPES,
    DEFAULT_LANGUAGE,
    Annotations,
    Block,
    Callout,
    Code,
    Divider,
    Icon,
    TextBlock,
    TextSpan,
    ToDo,
)
from notioncli.utils.logging import NullLogger, WarningLogger


class BlockInputError(ValueError):
    """Raised when externally supplied block JSON has an unexpected shape."""


def serialize_blocks(blocks: Iterable[Block]) -> list[dict[str, Any]]:
    """Convert blocks to Notion-ready dictionaries.

    Args:
        blocks: Blocks in document order.

    Returns:
        A list of dictionaries matching the Notion API schema for blocks.
    """

    return [serialize_block(block) for block in blocks]


def serialize_block(block: Block) -> dict[str, Any]:
    """Return the ``{"type": t, t: {...}}`` payload for a single block."""

    body: dict[str, Any] = {}
    if isinstance(block, TextBlock):
        body["rich_text"] = [text_rich(span) for span in block.rich_text]
    if isinstance(block, ToDo):
        body["checked"] = block.checked
    if isinstance(block, Code):
        body["language"] = block.language
    if isinstance(block, Callout) and block.icon is not None:
        body["icon"] = {"type": "emoji", "emoji": block.icon.emoji}
    return {"type": block.type, block.type: body}


def text_rich(span: TextSpan) -> dict[str, Any]:
    """Return a Notion rich text payload for a span."""

    link = {"url": span.href} if span.href else None
    return {
        "type": "text",
        "text": {"content": span.content, "link": link},
        "annotations": asdict(span.annotations),
        "plain_text": span.plain_text,
        "href": span.href,
    }


def deserialize_blocks(
    payloads: Sequence[Mapping[str, Any]],
    *,
    source_file: str = "",
    logger: WarningLogger | None = None,
) -> list[Block]:
    """Build blocks from Notion API payloads, skipping unsupported kinds.

    Args:
        payloads: Block objects as returned by the API or read from JSON.
        source_file: Name reported alongside warnings.
        logger: Optional collector notified about skipped blocks.
    """

    active_logger = logger or NullLogger()
    blocks: list[Block] = []
    for position, payload in enumerate(payloads, start=1):
        block = deserialize_block(payload)
        if block is None:
            active_logger.warn(
                filename=source_file,
                line=position,
                element_type=str(payload.get("type", "unknown")),
                message="unsupported block type skipped",
                code="unsupported-block",
            )
            continue
        blocks.append(block)
    return blocks


def deserialize_block(payload: Mapping[str, Any]) -> Block | None:
    """Return the block described by ``payload`` or None when unsupported."""

    block_type = payload.get("type")
    block_class = BLOCK_TYPES.get(block_type) if isinstance(block_type, str) else None
    if block_class is None:
        return None
    if block_class is Divider:
        return Divider()

    body = payload.get(block_type) or {}
    spans = tuple(_span_from_payload(item) for item in body.get("rich_text", []))
    if block_class is ToDo:
        return ToDo(rich_text=spans, checked=bool(body.get("checked", False)))
    if block_class is Code:
        return Code(rich_text=spans, language=body.get("language") or DEFAULT_LANGUAGE)
    if block_class is Callout:
        icon_payload = body.get("icon") or {}
        emoji = icon_payload.get("emoji")
        return Callout(rich_text=spans, icon=Icon(emoji=emoji) if emoji else None)
    return block_class(rich_text=spans)


def extract_block_list(parsed: Any) -> list[dict[str, Any]]:
    """Accept a bare JSON array or an object with a ``children`` array.

    Raises:
        BlockInputError: If neither shape is present.
    """

    if isinstance(parsed, list):
        children = parsed
    elif isinstance(parsed, Mapping) and isinstance(parsed.get("children"), list):
        children = parsed["children"]
    else:
        raise BlockInputError(
            "Expected a JSON array of blocks or an object with a 'children' array"
        )
    if not all(isinstance(child, Mapping) for child in children):
        raise BlockInputError("Every block must be a JSON object")
    return [dict(child) for child in children]


def _span_from_payload(item: Mapping[str, Any]) -> TextSpan:
    text = item.get("text") or {}
    content = text.get("content")
    plain = item.get("plain_text")
    if content is None:
        content = plain or ""
    annotation_payload = item.get("annotations") or {}
    annotations = Annotations(
        bold=bool(annotation_payload.get("bold", False)),
        italic=bool(annotation_payload.get("italic", False)),
        strikethrough=bool(annotation_payload.get("strikethrough", False)),
        underline=bool(annotation_payload.get("underline", False)),
        code=bool(annotation_payload.get("code", False)),
        color=str(annotation_payload.get("color", "default")),
    )
    link = text.get("link") or {}
    return TextSpan(
        content=content,
        annotations=annotations,
        plain_text=content if plain is None else plain,
        href=item.get("href") or link.get("url"),
    )


__all__ = [
    "BlockInputError",
    "deserialize_block",
    "deserialize_blocks",
    "extract_block_list",
    "serialize_block",
    "serialize_blocks",
    "text_rich",
]
