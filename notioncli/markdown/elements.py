"""Block models aligned to the Notion block schema.

Each block class carries the Notion discriminant in ``type`` and exactly the
payload fields Notion expects for that kind. Blocks are immutable values; the
module-level constructors below are the preferred way to build them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, Iterable

DEFAULT_LANGUAGE = "plain text"
DEFAULT_CALLOUT_EMOJI = "💡"


@dataclass(frozen=True)
class Annotations:
    """Style flags applied to a text span."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: str = "default"


@dataclass(frozen=True)
class TextSpan:
    """Rich text span with its plain-text projection."""

    content: str
    annotations: Annotations = field(default_factory=Annotations)
    plain_text: str | None = None
    href: str | None = None

    def __post_init__(self) -> None:
        if self.plain_text is None:
            object.__setattr__(self, "plain_text", self.content)


@dataclass(frozen=True)
class Icon:
    """Emoji icon attached to a callout."""

    emoji: str


@dataclass(frozen=True, kw_only=True)
class Block:
    """Base block; ``type`` is the Notion discriminant."""

    type: ClassVar[str]


@dataclass(frozen=True, kw_only=True)
class TextBlock(Block):
    """Block whose payload is a rich text sequence."""

    rich_text: tuple[TextSpan, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return plain_text(self.rich_text)


@dataclass(frozen=True, kw_only=True)
class Paragraph(TextBlock):
    type: ClassVar[str] = "paragraph"


@dataclass(frozen=True, kw_only=True)
class Heading1(TextBlock):
    type: ClassVar[str] = "heading_1"


@dataclass(frozen=True, kw_only=True)
class Heading2(TextBlock):
    type: ClassVar[str] = "heading_2"


@dataclass(frozen=True, kw_only=True)
class Heading3(TextBlock):
    type: ClassVar[str] = "heading_3"


@dataclass(frozen=True, kw_only=True)
class BulletedListItem(TextBlock):
    type: ClassVar[str] = "bulleted_list_item"


@dataclass(frozen=True, kw_only=True)
class NumberedListItem(TextBlock):
    """Numbered list item; Notion renumbers items at render time."""

    type: ClassVar[str] = "numbered_list_item"


@dataclass(frozen=True, kw_only=True)
class Quote(TextBlock):
    type: ClassVar[str] = "quote"


@dataclass(frozen=True, kw_only=True)
class ToDo(TextBlock):
    """Checkbox item."""

    checked: bool = False
    type: ClassVar[str] = "to_do"


@dataclass(frozen=True, kw_only=True)
class Code(TextBlock):
    """Code block holding the whole body in a single span."""

    language: str = DEFAULT_LANGUAGE
    type: ClassVar[str] = "code"


@dataclass(frozen=True, kw_only=True)
class Divider(Block):
    """Horizontal rule divider."""

    type: ClassVar[str] = "divider"


@dataclass(frozen=True, kw_only=True)
class Callout(TextBlock):
    """Callout/admonition block with an optional emoji icon."""

    icon: Icon | None = None
    type: ClassVar[str] = "callout"


BLOCK_TYPES: dict[str, type[Block]] = {
    cls.type: cls
    for cls in (
        Paragraph,
        Heading1,
        Heading2,
        Heading3,
        BulletedListItem,
        NumberedListItem,
        ToDo,
        Code,
        Quote,
        Divider,
        Callout,
    )
}


def plain_text(spans: Iterable[TextSpan]) -> str:
    """Flatten spans into their concatenated plain text."""

    return "".join(span.plain_text for span in spans)


def rich_text(content: str, **overrides: bool | str) -> TextSpan:
    """Return a text span with default annotations.

    Args:
        content: Raw text; also used verbatim as the plain-text projection.
        **overrides: Annotation fields to change, e.g. ``bold=True`` or
            ``color="red"``.

    Raises:
        TypeError: If an override names an unknown annotation.
    """

    annotations = replace(Annotations(), **overrides) if overrides else Annotations()
    return TextSpan(content=content, annotations=annotations, plain_text=content)


def paragraph(text: str) -> Paragraph:
    return Paragraph(rich_text=(rich_text(text),))


def heading_1(text: str) -> Heading1:
    return Heading1(rich_text=(rich_text(text),))


def heading_2(text: str) -> Heading2:
    return Heading2(rich_text=(rich_text(text),))


def heading_3(text: str) -> Heading3:
    return Heading3(rich_text=(rich_text(text),))


def bulleted_list_item(text: str) -> BulletedListItem:
    return BulletedListItem(rich_text=(rich_text(text),))


def numbered_list_item(text: str) -> NumberedListItem:
    return NumberedListItem(rich_text=(rich_text(text),))


def to_do(text: str, checked: bool = False) -> ToDo:
    return ToDo(rich_text=(rich_text(text),), checked=checked)


def code_block(text: str, language: str = DEFAULT_LANGUAGE) -> Code:
    return Code(rich_text=(rich_text(text),), language=language)


def quote(text: str) -> Quote:
    return Quote(rich_text=(rich_text(text),))


def divider() -> Divider:
    return Divider()


def callout(text: str, emoji: str = DEFAULT_CALLOUT_EMOJI) -> Callout:
    return Callout(rich_text=(rich_text(text),), icon=Icon(emoji=emoji))


__all__ = [
    "Annotations",
    "BLOCK_TYPES",
    "Block",
    "BulletedListItem",
    "Callout",
    "Code",
    "DEFAULT_CALLOUT_EMOJI",
    "DEFAULT_LANGUAGE",
    "Divider",
    "Heading1",
    "Heading2",
    "Heading3",
    "Icon",
    "NumberedListItem",
    "Paragraph",
    "Quote",
    "TextBlock",
    "TextSpan",
    "ToDo",
    "bulleted_list_item",
    "callout",
    "code_block",
    "divider",
    "heading_1",
    "heading_2",
    "heading_3",
    "numbered_list_item",
    "paragraph",
    "plain_text",
    "quote",
    "rich_text",
    "to_do",
]
