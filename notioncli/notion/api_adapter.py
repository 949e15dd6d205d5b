"""Notion adapter implementations and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional, Sequence, cast

import httpx
from notion_client import Client
from notion_client.errors import APIResponseError, HTTPResponseError, RequestTimeoutError

from notioncli.config import CliContext, create_cli_context
from notioncli.utils.ids import format_id

# Notion rejects append requests with more than 100 children.
APPEND_BATCH_SIZE = 100

ParentType = Literal["page", "database"]
SearchFilter = Literal["page", "database"]


class NotionRequestError(RuntimeError):
    """Raised when a Notion API call fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotionAdapter(ABC):
    """
    Abstract interface for communicating with Notion.

    Commands only talk to this interface, which keeps the SDK swappable and
    lets tests substitute recording adapters.
    """

    @abstractmethod
    def get_page(self, page_id: str) -> dict[str, Any]:
        """Retrieve a page object."""
        raise NotImplementedError

    @abstractmethod
    def create_page(
        self,
        parent_id: str,
        title: str,
        parent_type: ParentType = "page",
        properties: Optional[Dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Create a page under a page or database and return it."""
        raise NotImplementedError

    @abstractmethod
    def update_page(self, page_id: str, updates: Dict[str, Any]) -> dict[str, Any]:
        """Patch page fields such as icon, cover or archived."""
        raise NotImplementedError

    def archive_page(self, page_id: str) -> dict[str, Any]:
        return self.update_page(page_id, {"archived": True})

    @abstractmethod
    def get_database(self, database_id: str) -> dict[str, Any]:
        """Retrieve a database schema."""
        raise NotImplementedError

    @abstractmethod
    def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Any]] = None,
        cursor: Optional[str] = None,
    ) -> dict[str, Any]:
        """Return one page of database entries."""
        raise NotImplementedError

    @abstractmethod
    def get_block(self, block_id: str) -> dict[str, Any]:
        """Retrieve a single block."""
        raise NotImplementedError

    @abstractmethod
    def get_block_children(
        self, block_id: str, cursor: Optional[str] = None
    ) -> dict[str, Any]:
        """Return one page of child blocks."""
        raise NotImplementedError

    @abstractmethod
    def append_blocks(
        self,
        block_id: str,
        children: Sequence[Dict[str, Any]],
        on_batch: Callable[[int], None] | None = None,
    ) -> dict[str, Any]:
        """Append children to a page or block and return the created blocks."""
        raise NotImplementedError

    @abstractmethod
    def delete_block(self, block_id: str) -> dict[str, Any]:
        """Delete (archive) a block."""
        raise NotImplementedError

    @abstractmethod
    def search(
        self,
        query: Optional[str] = None,
        filter_type: Optional[SearchFilter] = None,
        cursor: Optional[str] = None,
    ) -> dict[str, Any]:
        """Search pages and databases shared with the integration."""
        raise NotImplementedError

    @abstractmethod
    def get_me(self) -> dict[str, Any]:
        """Return the bot user behind the token."""
        raise NotImplementedError

    @abstractmethod
    def list_users(self, cursor: Optional[str] = None) -> dict[str, Any]:
        """Return one page of workspace users."""
        raise NotImplementedError


def get_default_adapter(context: CliContext | None = None) -> NotionAdapter:
    """Return a functional adapter using the official Notion SDK.

    Args:
        context: Resolved CLI settings. Built from the environment when omitted.

    Returns:
        NotionAdapter: Configured adapter ready for API calls.

    Raises:
        ConfigError: If no API key is configured.
    """

    active = context or create_cli_context()
    return NotionClientAdapter(
        token=active.api_key,
        timeout_ms=active.timeout_ms,
        notion_version=active.notion_version,
    )


class NotionClientAdapter(NotionAdapter):
    """Adapter backed by the official Notion Python client."""

    def __init__(
        self,
        token: str,
        *,
        timeout_ms: int = 30_000,
        notion_version: str = "2022-06-28",
    ) -> None:
        self.client = Client(
            auth=token, timeout_ms=timeout_ms, notion_version=notion_version
        )

    def get_page(self, page_id: str) -> dict[str, Any]:
        with _translate_errors():
            return _as_dict(self.client.pages.retrieve(page_id=page_id))

    def create_page(
        self,
        parent_id: str,
        title: str,
        parent_type: ParentType = "page",
        properties: Optional[Dict[str, Any]] = None,
    ) -> dict[str, Any]:
        parent_key = f"{parent_type}_id"
        parent = {"type": parent_key, parent_key: format_id(parent_id)}
        page_properties = properties or {
            "title": {"title": [{"type": "text", "text": {"content": title}}]}
        }
        with _translate_errors():
            return _as_dict(
                self.client.pages.create(parent=parent, properties=page_properties)
            )

    def update_page(self, page_id: str, updates: Dict[str, Any]) -> dict[str, Any]:
        with _translate_errors():
            return _as_dict(self.client.pages.update(page_id=page_id, **updates))

    def get_database(self, database_id: str) -> dict[str, Any]:
        with _translate_errors():
            return _as_dict(self.client.databases.retrieve(database_id=database_id))

    def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Any]] = None,
        cursor: Optional[str] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if cursor:
            body["start_cursor"] = cursor
        # Raw request keeps the classic database query endpoint across SDK versions.
        with _translate_errors():
            return _as_dict(
                self.client.request(
                    path=f"databases/{database_id}/query", method="POST", body=body
                )
            )

    def get_block(self, block_id: str) -> dict[str, Any]:
        with _translate_errors():
            return _as_dict(self.client.blocks.retrieve(block_id=block_id))

    def get_block_children(
        self, block_id: str, cursor: Optional[str] = None
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"block_id": block_id}
        if cursor:
            params["start_cursor"] = cursor
        with _translate_errors():
            return _as_dict(self.client.blocks.children.list(**params))

    def append_blocks(
        self,
        block_id: str,
        children: Sequence[Dict[str, Any]],
        on_batch: Callable[[int], None] | None = None,
    ) -> dict[str, Any]:
        results: list[dict[str, Any]] = []
        appended = 0
        for start in range(0, len(children), APPEND_BATCH_SIZE):
            batch = list(children[start : start + APPEND_BATCH_SIZE])
            try:
                with _translate_errors():
                    response = _as_dict(
                        self.client.blocks.children.append(
                            block_id=block_id, children=batch
                        )
                    )
            except NotionRequestError as exc:
                if not appended:
                    raise
                raise NotionRequestError(
                    f"{exc} (appended {appended} of {len(children)} blocks before failing)",
                    status=exc.status,
                ) from exc
            results.extend(response.get("results", []))
            appended += len(batch)
            if on_batch:
                on_batch(len(batch))
        return {
            "object": "list",
            "results": results,
            "next_cursor": None,
            "has_more": False,
        }

    def delete_block(self, block_id: str) -> dict[str, Any]:
        with _translate_errors():
            return _as_dict(self.client.blocks.delete(block_id=block_id))

    def search(
        self,
        query: Optional[str] = None,
        filter_type: Optional[SearchFilter] = None,
        cursor: Optional[str] = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if query:
            params["query"] = query
        if filter_type:
            params["filter"] = {"property": "object", "value": filter_type}
        if cursor:
            params["start_cursor"] = cursor
        with _translate_errors():
            return _as_dict(self.client.search(**params))

    def get_me(self) -> dict[str, Any]:
        with _translate_errors():
            return _as_dict(self.client.users.me())

    def list_users(self, cursor: Optional[str] = None) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if cursor:
            params["start_cursor"] = cursor
        with _translate_errors():
            return _as_dict(self.client.users.list(**params))


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Re-raise SDK and transport failures as ``NotionRequestError``."""

    try:
        yield
    except APIResponseError as exc:
        raise NotionRequestError(str(exc) or f"HTTP {exc.status}", status=exc.status) from exc
    except HTTPResponseError as exc:
        raise NotionRequestError(f"HTTP {exc.status}: {exc}", status=exc.status) from exc
    except RequestTimeoutError as exc:
        raise NotionRequestError("Request to Notion timed out") from exc
    except httpx.HTTPError as exc:
        raise NotionRequestError(f"Network error: {exc}") from exc


def _as_dict(response: Any) -> dict[str, Any]:
    return cast(dict[str, Any], response)


def iter_block_children(adapter: NotionAdapter, block_id: str) -> Iterator[dict[str, Any]]:
    """Yield every child block, following pagination cursors."""

    cursor: Optional[str] = None
    while True:
        page = adapter.get_block_children(block_id, cursor=cursor)
        yield from page.get("results", [])
        cursor = page.get("next_cursor")
        if not page.get("has_more") or not cursor:
            return


__all__ = [
    "APPEND_BATCH_SIZE",
    "NotionAdapter",
    "NotionClientAdapter",
    "NotionRequestError",
    "get_default_adapter",
    "iter_block_children",
]
