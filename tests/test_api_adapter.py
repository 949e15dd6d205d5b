from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
from notion_client.errors import RequestTimeoutError

from notioncli.config import CliContext
from notioncli.notion.api_adapter import (
    APPEND_BATCH_SIZE,
    NotionClientAdapter,
    NotionRequestError,
    get_default_adapter,
    iter_block_children,
)


class _FakeChildren:
    def __init__(self, pages: list[dict[str, object]] | None = None, fail_on: int | None = None) -> None:
        self.append_calls: list[tuple[str, list[dict[str, object]]]] = []
        self.list_calls: list[dict[str, object]] = []
        self._pages = pages or []
        self._fail_on = fail_on

    def list(self, **kwargs: object) -> dict[str, object]:
        self.list_calls.append(kwargs)
        return self._pages.pop(0)

    def append(self, block_id: str, children: list[dict[str, object]]) -> dict[str, object]:
        if self._fail_on is not None and len(self.append_calls) == self._fail_on:
            raise httpx.ConnectError("connection refused")
        self.append_calls.append((block_id, children))
        return {"results": [{"id": f"block-{len(self.append_calls)}-{i}"} for i in range(len(children))]}


class _FakePages:
    def __init__(self) -> None:
        self.created: list[dict[str, object]] = []
        self.updated: list[dict[str, object]] = []

    def create(self, **kwargs: object) -> dict[str, object]:
        self.created.append(kwargs)
        return {"id": "new-page"}

    def update(self, **kwargs: object) -> dict[str, object]:
        self.updated.append(kwargs)
        return {"id": kwargs["page_id"]}

    def retrieve(self, page_id: str) -> dict[str, object]:
        raise RequestTimeoutError()


def _adapter_with(**parts: object) -> NotionClientAdapter:
    adapter = NotionClientAdapter(token="dummy")
    adapter.client = SimpleNamespace(**parts)  # type: ignore[assignment]
    return adapter


def _paragraphs(count: int) -> list[dict[str, object]]:
    return [{"type": "paragraph", "paragraph": {"rich_text": []}} for _ in range(count)]


def test_append_blocks_splits_into_batches_of_one_hundred() -> None:
    children = _FakeChildren()
    adapter = _adapter_with(blocks=SimpleNamespace(children=children))
    batches: list[int] = []

    result = adapter.append_blocks("parent", _paragraphs(APPEND_BATCH_SIZE + 1), on_batch=batches.append)

    assert [len(call[1]) for call in children.append_calls] == [100, 1]
    assert batches == [100, 1]
    assert len(result["results"]) == 101
    assert result["has_more"] is False


def test_small_appends_use_a_single_request() -> None:
    children = _FakeChildren()
    adapter = _adapter_with(blocks=SimpleNamespace(children=children))

    adapter.append_blocks("parent", _paragraphs(3))

    assert len(children.append_calls) == 1


def test_failed_batch_reports_partial_progress() -> None:
    children = _FakeChildren(fail_on=1)
    adapter = _adapter_with(blocks=SimpleNamespace(children=children))

    with pytest.raises(NotionRequestError) as excinfo:
        adapter.append_blocks("parent", _paragraphs(150))

    assert "appended 100 of 150 blocks" in str(excinfo.value)


def test_first_batch_failure_is_reported_as_network_error() -> None:
    children = _FakeChildren(fail_on=0)
    adapter = _adapter_with(blocks=SimpleNamespace(children=children))

    with pytest.raises(NotionRequestError, match="Network error"):
        adapter.append_blocks("parent", _paragraphs(2))


def test_timeouts_become_request_errors() -> None:
    adapter = _adapter_with(pages=_FakePages())

    with pytest.raises(NotionRequestError, match="timed out"):
        adapter.get_page("abc")


def test_create_page_builds_parent_and_title() -> None:
    pages = _FakePages()
    adapter = _adapter_with(pages=pages)

    adapter.create_page("a1b2c3d4e5f6a7b8c9d0e1f2a3b4c5d6", "Notes", "database")

    created = pages.created[0]
    assert created["parent"] == {
        "type": "database_id",
        "database_id": "a1b2c3d4-e5f6-a7b8-c9d0-e1f2a3b4c5d6",
    }
    assert created["properties"]["title"]["title"][0]["text"]["content"] == "Notes"


def test_archive_page_patches_archived_flag() -> None:
    pages = _FakePages()
    adapter = _adapter_with(pages=pages)

    adapter.archive_page("abc")

    assert pages.updated == [{"page_id": "abc", "archived": True}]


def test_search_only_sends_given_parameters() -> None:
    calls: list[dict[str, object]] = []
    adapter = _adapter_with(search=lambda **kwargs: calls.append(kwargs) or {"results": []})

    adapter.search()
    adapter.search("roadmap", "database", "cur")

    assert calls[0] == {}
    assert calls[1] == {
        "query": "roadmap",
        "filter": {"property": "object", "value": "database"},
        "start_cursor": "cur",
    }


def test_query_database_posts_to_query_endpoint() -> None:
    requests: list[dict[str, object]] = []
    adapter = _adapter_with(request=lambda **kwargs: requests.append(kwargs) or {"results": []})

    adapter.query_database("db", filter={"property": "Done"}, cursor="next")

    assert requests == [
        {
            "path": "databases/db/query",
            "method": "POST",
            "body": {"filter": {"property": "Done"}, "start_cursor": "next"},
        }
    ]


def test_iter_block_children_follows_cursors() -> None:
    children = _FakeChildren(
        pages=[
            {"results": [{"id": "1"}], "has_more": True, "next_cursor": "c2"},
            {"results": [{"id": "2"}], "has_more": False, "next_cursor": None},
        ]
    )
    adapter = _adapter_with(blocks=SimpleNamespace(children=children))

    ids = [child["id"] for child in iter_block_children(adapter, "page")]

    assert ids == ["1", "2"]
    assert children.list_calls == [{"block_id": "page"}, {"block_id": "page", "start_cursor": "c2"}]


def test_get_default_adapter_uses_context_settings() -> None:
    adapter = get_default_adapter(CliContext(api_key="secret", timeout_ms=5_000))

    assert isinstance(adapter, NotionClientAdapter)
