from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .config import ConfigError, create_cli_context, load_env_file
from .notion.api_adapter import NotionAdapter, NotionRequestError, get_default_adapter
from .runner import (
    PublishProgress,
    detect_format,
    load_blocks,
    parse_block_json,
    read_source,
    render_children_markdown,
    run_push,
)
from .utils.console import ConsoleOutput
from .utils.ids import normalize_id, validate_url
from .utils.logging import WarningLogger

app = typer.Typer(
    name="notion",
    help="Fast Notion CLI for pages, databases, and blocks.",
    add_completion=True,
    no_args_is_help=True,
)
page_app = typer.Typer(help="Page operations.", no_args_is_help=True)
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
block_app = typer.Typer(help="Block operations.", no_args_is_help=True)
user_app = typer.Typer(help="User operations.", no_args_is_help=True)
app.add_typer(page_app, name="page")
app.add_typer(db_app, name="db")
app.add_typer(block_app, name="block")
app.add_typer(user_app, name="user")

SEARCH_FILTERS = ("page", "database")


@dataclass(frozen=True)
class GlobalOptions:
    """Flags given before the command name."""

    json_output: bool = False
    quiet: bool = False


class RichPublishProgress(PublishProgress):
    """Render an animated progress bar while appending blocks."""

    def __init__(self, console: Console) -> None:
        """Initialize the progress renderer.

        Args:
            console: Console used to display progress output.
        """
        self.console = console
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None

    def start(self, total: int) -> None:
        """Start the animated progress bar.

        Args:
            total: Total number of blocks to append.
        """
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total} blocks"),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        self._progress.start()
        self._task_id = self._progress.add_task("Pushing to Notion", total=total)

    def advance(self, count: int) -> None:
        """Advance the bar after a batch has been appended.

        Args:
            count: Number of blocks in the batch.
        """
        if not self._progress or self._task_id is None:
            return

        self._progress.advance(self._task_id, count)

    def finish(self) -> None:
        """Stop rendering the progress bar."""
        if not self._progress:
            return

        self._progress.stop()
        self._progress = None
        self._task_id = None


@app.callback()
def main_options(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON."),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress non-error output."),
) -> None:
    """
    Talk to the Notion API from the command line.

    Credentials are read from NOTION_API_KEY (or a .env file in the current
    directory).

    Examples:
        notion page get <id>
        notion page create --parent <id> --title "Title"
        notion block append <id> --json blocks.json
        notion push file.md --parent <id>
        notion search "query"
    """
    load_env_file(Path.cwd() / ".env")
    ctx.obj = GlobalOptions(json_output=json_output, quiet=quiet)


def _options(ctx: typer.Context) -> GlobalOptions:
    return ctx.obj if isinstance(ctx.obj, GlobalOptions) else GlobalOptions()


def _output(ctx: typer.Context) -> ConsoleOutput:
    options = _options(ctx)
    return ConsoleOutput(json_output=options.json_output, quiet=options.quiet)


def _adapter(ctx: typer.Context) -> NotionAdapter:
    options = _options(ctx)
    context = create_cli_context(json_output=options.json_output, quiet=options.quiet)
    return get_default_adapter(context)


@contextmanager
def _handle_errors(out: ConsoleOutput) -> Iterator[None]:
    """Print failures as ``Error: ...`` and exit with status 1."""
    try:
        yield
    except (ConfigError, NotionRequestError, ValueError) as exc:
        out.error(str(exc))
        raise typer.Exit(code=1) from exc


def _parse_json_option(raw: str, label: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid {label} JSON: {exc.msg}") from exc


@page_app.command("get")
def page_get(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page ID or URL."),
) -> None:
    """Get a page by ID."""
    out = _output(ctx)
    with _handle_errors(out):
        out.output(_adapter(ctx).get_page(normalize_id(page_id)))


@page_app.command("create")
def page_create(
    ctx: typer.Context,
    parent: str = typer.Option(..., "--parent", help="Parent page or database ID."),
    title: str = typer.Option(..., "--title", help="Page title."),
    database: bool = typer.Option(
        False, "--database", help="Parent is a database (not a page)."
    ),
) -> None:
    """
    Create a new page.

    Example:
        notion page create --parent <PAGE_ID> --title "Meeting notes"
    """
    out = _output(ctx)
    with _handle_errors(out):
        page = _adapter(ctx).create_page(
            normalize_id(parent), title, "database" if database else "page"
        )
        out.output(page)
        if not out.json_output:
            out.success(f"Created page: {page.get('url', page.get('id'))}")


@page_app.command("update")
def page_update(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page ID or URL."),
    icon: Optional[str] = typer.Option(None, "--icon", help="Set page icon (emoji)."),
    cover: Optional[str] = typer.Option(None, "--cover", help="Set cover image URL."),
    archived: bool = typer.Option(False, "--archived", help="Archive the page."),
) -> None:
    """Update page icon, cover, or archived state."""
    out = _output(ctx)
    with _handle_errors(out):
        updates: dict[str, Any] = {}
        if icon:
            updates["icon"] = {"type": "emoji", "emoji": icon}
        if cover:
            updates["cover"] = {"type": "external", "external": {"url": validate_url(cover)}}
        if archived:
            updates["archived"] = True
        if not updates:
            raise ValueError("Nothing to update; pass --icon, --cover or --archived")
        out.output(_adapter(ctx).update_page(normalize_id(page_id), updates))
        if not out.json_output:
            out.success("Page updated")


@page_app.command("archive")
def page_archive(
    ctx: typer.Context,
    page_id: str = typer.Argument(..., help="Page ID or URL."),
) -> None:
    """Archive a page."""
    out = _output(ctx)
    with _handle_errors(out):
        _adapter(ctx).archive_page(normalize_id(page_id))
        if out.json_output:
            out.output({"archived": True})
        else:
            out.success("Page archived")


@db_app.command("get")
def db_get(
    ctx: typer.Context,
    database_id: str = typer.Argument(..., help="Database ID or URL."),
) -> None:
    """Get a database schema."""
    out = _output(ctx)
    with _handle_errors(out):
        out.output(_adapter(ctx).get_database(normalize_id(database_id)))


@db_app.command("query")
def db_query(
    ctx: typer.Context,
    database_id: str = typer.Argument(..., help="Database ID or URL."),
    filter_json: Optional[str] = typer.Option(None, "--filter", help="Filter as JSON."),
    sort_json: Optional[str] = typer.Option(None, "--sort", help="Sorts as a JSON array."),
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Pagination cursor."),
) -> None:
    """
    Query database entries.

    Example:
        notion db query <DB_ID> --filter '{"property": "Done", "checkbox": {"equals": true}}'
    """
    out = _output(ctx)
    with _handle_errors(out):
        query_filter = _parse_json_option(filter_json, "filter") if filter_json else None
        sorts = _parse_json_option(sort_json, "sort") if sort_json else None
        if sorts is not None and not isinstance(sorts, list):
            raise ValueError("Sort must be a JSON array")
        out.output(
            _adapter(ctx).query_database(
                normalize_id(database_id), query_filter, sorts, cursor
            )
        )


@block_app.command("get")
def block_get(
    ctx: typer.Context,
    block_id: str = typer.Argument(..., help="Block ID."),
) -> None:
    """Get a block by ID."""
    out = _output(ctx)
    with _handle_errors(out):
        out.output(_adapter(ctx).get_block(normalize_id(block_id)))


@block_app.command("children")
def block_children(
    ctx: typer.Context,
    block_id: str = typer.Argument(..., help="Page or block ID."),
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Pagination cursor."),
    markdown: bool = typer.Option(
        False,
        "--markdown",
        help="Fetch every child and render supported blocks as Markdown.",
    ),
) -> None:
    """Get child blocks of a page or block."""
    out = _output(ctx)
    with _handle_errors(out):
        adapter = _adapter(ctx)
        if not markdown:
            out.output(adapter.get_block_children(normalize_id(block_id), cursor))
            return
        logger = WarningLogger("children")
        rendered = render_children_markdown(adapter, normalize_id(block_id), logger=logger)
        out.output({"markdown": rendered} if out.json_output else rendered)
        for entry in logger.warnings:
            out.warning(entry.format())
        if logger.has_warnings() and not out.json_output:
            out.info(logger.summary())


@block_app.command("append")
def block_append(
    ctx: typer.Context,
    block_id: str = typer.Argument(..., help="Page or block ID."),
    json_file: Optional[Path] = typer.Option(
        None,
        "--json",
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="JSON file containing blocks.",
    ),
    stdin: bool = typer.Option(False, "--stdin", help="Read blocks from stdin."),
) -> None:
    """
    Append blocks to a page or block.

    The JSON may be a bare array of blocks or an object with a "children" array.
    """
    out = _output(ctx)
    with _handle_errors(out):
        if not stdin and json_file is None:
            raise ValueError("Must specify --json <file> or --stdin")
        children = parse_block_json(read_source(json_file, stdin))
        if not children:
            raise ValueError("No blocks to append")
        out.output(_adapter(ctx).append_blocks(normalize_id(block_id), children))
        if not out.json_output:
            out.success(f"Appended {len(children)} blocks")


@block_app.command("delete")
def block_delete(
    ctx: typer.Context,
    block_id: str = typer.Argument(..., help="Block ID."),
) -> None:
    """Delete a block."""
    out = _output(ctx)
    with _handle_errors(out):
        _adapter(ctx).delete_block(normalize_id(block_id))
        if out.json_output:
            out.output({"deleted": True})
        else:
            out.success("Block deleted")


@app.command("search")
def search(
    ctx: typer.Context,
    query: Optional[str] = typer.Argument(None, help="Search query."),
    filter_type: Optional[str] = typer.Option(
        None, "--filter", help="Filter by type: page or database."
    ),
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Pagination cursor."),
) -> None:
    """Search pages and databases."""
    out = _output(ctx)
    with _handle_errors(out):
        if filter_type and filter_type not in SEARCH_FILTERS:
            raise ValueError('Filter must be "page" or "database"')
        out.output(_adapter(ctx).search(query, filter_type, cursor))  # type: ignore[arg-type]


@user_app.command("me")
def user_me(ctx: typer.Context) -> None:
    """Show the bot user behind the API key."""
    out = _output(ctx)
    with _handle_errors(out):
        out.output(_adapter(ctx).get_me())


@user_app.command("list")
def user_list(
    ctx: typer.Context,
    cursor: Optional[str] = typer.Option(None, "--cursor", help="Pagination cursor."),
) -> None:
    """List workspace users."""
    out = _output(ctx)
    with _handle_errors(out):
        out.output(_adapter(ctx).list_users(cursor))


@app.command("push")
def push(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(
        None,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="File to push (.md or .json).",
    ),
    parent: Optional[str] = typer.Option(
        None, "--parent", "-p", help="Parent page ID (required unless --dry-run)."
    ),
    stdin: bool = typer.Option(False, "--stdin", help="Read from stdin."),
    source_format: Optional[str] = typer.Option(
        None, "--format", help="Force format: md or json."
    ),
    title: Optional[str] = typer.Option(
        None, "--title", help="Create a new child page with this title first."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the converted blocks without calling Notion."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail when conversion warnings are encountered."
    ),
) -> None:
    """
    Push Markdown or JSON blocks to a Notion page.

    Examples:
        notion push notes.md --parent <PAGE_ID>
        notion push notes.md --parent <PAGE_ID> --title "Weekly notes"
        cat blocks.json | notion push --stdin --format json --parent <PAGE_ID>
        notion push notes.md --dry-run --strict
    """
    out = _output(ctx)
    with _handle_errors(out):
        content = read_source(file, stdin)
        fmt = detect_format(file, source_format)
        logger = WarningLogger(file.stem if file else "stdin")
        blocks = load_blocks(
            content, fmt, source_file=str(file) if file else "", logger=logger
        )
        for entry in logger.warnings:
            out.warning(entry.format())
        if strict and logger.has_warnings():
            raise ValueError(logger.summary())

        if dry_run:
            out.output(blocks)
            return

        if not parent:
            raise ValueError("--parent is required unless --dry-run is set")
        adapter = _adapter(ctx)
        progress = (
            None if out.json_output or out.quiet else RichPublishProgress(out.console)
        )
        result = run_push(adapter, parent, blocks, title=title, progress=progress)

        if out.json_output:
            out.output(
                {
                    "success": True,
                    "blocksAppended": result.blocks_appended,
                    "pageId": result.page_id,
                }
            )
            return
        if result.page_url:
            out.success(f"Created page: {result.page_url}")
        out.success(f"Pushed {result.blocks_appended} blocks to page")


def main() -> None:
    """Entry point for Python -m execution."""
    app()


if __name__ == "__main__":
    main()
