from notioncli.markdown.elements import (
    Callout,
    TextSpan,
    Paragraph,
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
    rich_text,
    to_do,
)
from notioncli.markdown.parser import markdown_to_blocks
from notioncli.markdown.renderer import blocks_to_markdown


def _summary(blocks):
    summary = []
    for block in blocks:
        entry = [block.type, getattr(block, "text", None)]
        entry.append(getattr(block, "checked", None))
        entry.append(getattr(block, "language", None))
        icon = getattr(block, "icon", None)
        entry.append(icon.emoji if icon else None)
        summary.append(tuple(entry))
    return summary


def test_empty_input_renders_empty_document() -> None:
    assert blocks_to_markdown([]) == ""


def test_every_block_is_followed_by_blank_line() -> None:
    rendered = blocks_to_markdown([heading_1("Title"), paragraph("Body")])

    assert rendered == "# Title\n\nBody\n"


def test_each_kind_renders_its_prefix() -> None:
    blocks = [
        heading_2("Two"),
        heading_3("Three"),
        bulleted_list_item("bullet"),
        numbered_list_item("number"),
        to_do("open"),
        to_do("done", checked=True),
        quote("said"),
        divider(),
        callout("watch out", "⚠️"),
    ]

    lines = blocks_to_markdown(blocks).split("\n")

    assert lines[0::2][:9] == [
        "## Two",
        "### Three",
        "- bullet",
        "1. number",
        "- [ ] open",
        "- [x] done",
        "> said",
        "---",
        "> ⚠️ watch out",
    ]


def test_code_blocks_render_fenced_with_language() -> None:
    rendered = blocks_to_markdown([code_block("a = 1\nb = 2", "python")])

    assert rendered == "```python\na = 1\nb = 2\n```\n"


def test_callout_without_icon_uses_light_bulb() -> None:
    rendered = blocks_to_markdown([Callout(rich_text=(rich_text("hint"),))])

    assert rendered == "> 💡 hint\n"


def test_multiple_spans_are_concatenated_by_plain_text() -> None:
    block = Paragraph(
        rich_text=(
            rich_text("Hello, ", bold=True),
            TextSpan(content="world", plain_text="world"),
        )
    )

    assert blocks_to_markdown([block]) == "Hello, world\n"


def test_round_trip_preserves_content() -> None:
    document = """# Title
## Section
### Detail

Intro paragraph.

- bullet one
* bullet two
- [ ] open task
- [X] done task
> quoted words
"""

    first = markdown_to_blocks(document)
    second = markdown_to_blocks(blocks_to_markdown(first))

    assert _summary(second) == _summary(first)


def test_round_trip_keeps_code_language_and_numbered_text() -> None:
    first = markdown_to_blocks("7. seventh\n```ruby\nputs 1\n```\n***")
    second = markdown_to_blocks(blocks_to_markdown(first))

    assert _summary(second) == _summary(first)


def test_rendered_callout_reparses_as_quote() -> None:
    first = markdown_to_blocks("> [!TIP] Stay hydrated")
    second = markdown_to_blocks(blocks_to_markdown(first))

    assert second[0].type == "quote"
    assert second[0].text == "💡 Stay hydrated"


def test_span_without_explicit_plain_text_renders_content() -> None:
    span = TextSpan(content="hello")

    assert blocks_to_markdown([Paragraph(rich_text=(span,))]) == "hello\n"
