"""Entry points for reading input, converting it and pushing it to Notion."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, Protocol

import typer

from .markdown.parser import markdown_to_blocks
from .markdown.renderer import blocks_to_markdown
from .notion.api_adapter import NotionAdapter, iter_block_children
from .notion.serializer import (
    BlockInputError,
    deserialize_blocks,
    extract_block_list,
    serialize_blocks,
)
from .utils.ids import normalize_id, validate_file_path
from .utils.logging import WarningLogger

SourceFormat = Literal["md", "json"]


class PublishProgress(Protocol):
    """Reporting hook for block upload progress."""

    def start(self, total: int) -> None:
        """Begin tracking upload progress.

        Args:
            total: Total number of blocks that will be appended.
        """

    def advance(self, count: int) -> None:
        """Advance the tracker after a batch has been appended.

        Args:
            count: Number of blocks in the appended batch.
        """

    def finish(self) -> None:
        """Finalize progress tracking."""


@dataclass(frozen=True)
class PushResult:
    """Outcome of a push: where the blocks went and how many there were."""

    page_id: str
    blocks_appended: int
    page_url: str | None = None


def read_source(file: Optional[Path], use_stdin: bool) -> str:
    """Return the raw text of ``file`` or standard input.

    Raises:
        BlockInputError: If neither a file nor ``--stdin`` was given.
    """

    if use_stdin:
        return typer.get_text_stream("stdin").read()
    if file is None:
        raise BlockInputError("Must specify a file or --stdin")
    validate_file_path(str(file))
    return file.read_text(encoding="utf-8")


def detect_format(file: Optional[Path], forced: Optional[str] = None) -> SourceFormat:
    """Pick the input format from ``--format`` or the file extension."""

    if forced:
        normalized = forced.strip().lower()
        if normalized not in ("md", "json"):
            raise BlockInputError(f"Unknown format {forced!r}; use 'md' or 'json'")
        return "json" if normalized == "json" else "md"
    if file is not None and file.suffix.lower() == ".json":
        return "json"
    return "md"


def parse_block_json(content: str) -> list[dict[str, Any]]:
    """Parse block JSON as a bare array or an object with ``children``."""

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise BlockInputError(f"Invalid JSON: {exc.msg}") from exc
    return extract_block_list(parsed)


def load_blocks(
    content: str,
    fmt: SourceFormat,
    *,
    source_file: str = "",
    logger: WarningLogger | None = None,
) -> list[dict[str, Any]]:
    """Turn source text into Notion block payloads.

    Markdown goes through the converter; JSON is passed through unchanged
    apart from unwrapping a ``children`` object.
    """

    if fmt == "json":
        return parse_block_json(content)
    blocks = markdown_to_blocks(content, source_file=source_file, logger=logger)
    return serialize_blocks(blocks)


def run_push(
    adapter: NotionAdapter,
    parent_id: str,
    blocks: list[dict[str, Any]],
    *,
    title: Optional[str] = None,
    progress: PublishProgress | None = None,
) -> PushResult:
    """Append blocks to a page, optionally creating a child page first.

    Args:
        adapter: Notion adapter used for every request.
        parent_id: Page that receives the blocks (or the new child page).
        blocks: Block payloads in document order.
        title: When set, create a child page with this title and push into it.
        progress: Optional reporter for upload progress.

    Raises:
        BlockInputError: If there is nothing to push.
        NotionRequestError: If any request fails.
    """

    if not blocks:
        raise BlockInputError("No blocks to push")

    target_id = normalize_id(parent_id)
    page_url: str | None = None
    if title:
        page = adapter.create_page(target_id, title, "page")
        target_id = str(page["id"]).replace("-", "")
        page_url = page.get("url")

    if progress:
        progress.start(len(blocks))
    try:
        adapter.append_blocks(
            target_id, blocks, on_batch=progress.advance if progress else None
        )
    finally:
        if progress:
            progress.finish()

    return PushResult(page_id=target_id, blocks_appended=len(blocks), page_url=page_url)


def render_children_markdown(
    adapter: NotionAdapter, block_id: str, *, logger: WarningLogger | None = None
) -> str:
    """Fetch every child block and render the supported ones as Markdown."""

    children = list(iter_block_children(adapter, block_id))
    blocks = deserialize_blocks(children, source_file=block_id, logger=logger)
    return blocks_to_markdown(blocks)


__all__ = [
    "PublishProgress",
    "PushResult",
    "detect_format",
    "load_blocks",
    "parse_block_json",
    "read_source",
    "render_children_markdown",
    "run_push",
]
