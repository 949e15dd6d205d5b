from pathlib import Path
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from notioncli.notion.api_adapter import NotionAdapter  # noqa: E402


class RecordingAdapter(NotionAdapter):
    """In-memory adapter that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.appended: list[tuple[str, list[Dict[str, Any]]]] = []
        self.children_pages: list[dict[str, Any]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def get_page(self, page_id: str) -> dict[str, Any]:
        self._record("get_page", page_id)
        return {"object": "page", "id": page_id}

    def create_page(
        self,
        parent_id: str,
        title: str,
        parent_type: str = "page",
        properties: Optional[Dict[str, Any]] = None,
    ) -> dict[str, Any]:
        self._record("create_page", parent_id, title, parent_type)
        return {
            "object": "page",
            "id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb",
            "url": "https://www.notion.so/new-page",
        }

    def update_page(self, page_id: str, updates: Dict[str, Any]) -> dict[str, Any]:
        self._record("update_page", page_id, updates)
        return {"object": "page", "id": page_id, **updates}

    def get_database(self, database_id: str) -> dict[str, Any]:
        self._record("get_database", database_id)
        return {"object": "database", "id": database_id}

    def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Any]] = None,
        cursor: Optional[str] = None,
    ) -> dict[str, Any]:
        self._record("query_database", database_id, filter, sorts, cursor)
        return {"object": "list", "results": [], "next_cursor": None, "has_more": False}

    def get_block(self, block_id: str) -> dict[str, Any]:
        self._record("get_block", block_id)
        return {"object": "block", "id": block_id}

    def get_block_children(
        self, block_id: str, cursor: Optional[str] = None
    ) -> dict[str, Any]:
        self._record("get_block_children", block_id, cursor)
        if self.children_pages:
            return self.children_pages.pop(0)
        return {"object": "list", "results": [], "next_cursor": None, "has_more": False}

    def append_blocks(
        self,
        block_id: str,
        children: Sequence[Dict[str, Any]],
        on_batch: Callable[[int], None] | None = None,
    ) -> dict[str, Any]:
        self._record("append_blocks", block_id, len(children))
        self.appended.append((block_id, list(children)))
        if on_batch:
            on_batch(len(children))
        return {"object": "list", "results": list(children), "next_cursor": None, "has_more": False}

    def delete_block(self, block_id: str) -> dict[str, Any]:
        self._record("delete_block", block_id)
        return {"object": "block", "id": block_id, "archived": True}

    def search(
        self,
        query: Optional[str] = None,
        filter_type: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> dict[str, Any]:
        self._record("search", query, filter_type, cursor)
        return {"object": "list", "results": [], "next_cursor": None, "has_more": False}

    def get_me(self) -> dict[str, Any]:
        self._record("get_me")
        return {"object": "user", "type": "bot"}

    def list_users(self, cursor: Optional[str] = None) -> dict[str, Any]:
        self._record("list_users", cursor)
        return {"object": "list", "results": [], "next_cursor": None, "has_more": False}


@pytest.fixture
def recording_adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, recording_adapter: RecordingAdapter, tmp_path: Path):
    """Configure credentials and route the CLI to the recording adapter."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NOTION_API_KEY", "secret_test")
    monkeypatch.setattr(
        "notioncli.cli.get_default_adapter", lambda context=None: recording_adapter
    )
    return recording_adapter
