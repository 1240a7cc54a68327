# reflow/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

# pdf2json style vector: [fontFaceId, fontSize, bold, italic]
FONT_SIZE_INDEX = 1
BOLD_INDEX = 2


@dataclass(frozen=True)
class TextFragment:
    """One styled run of decoded text, as supplied by a page loader."""

    content: str
    color: Optional[str] = None
    font_size: Optional[float] = None
    bold: Any = False
    alignment: Optional[str] = None

    @classmethod
    def from_style_vector(
        cls,
        content: str,
        style: Optional[Sequence[Any]],
        color: Optional[str] = None,
        alignment: Optional[str] = None,
    ) -> "TextFragment":
        """
        Build a fragment from a pdf2json-like style vector.

        Missing entries, or a style that is not a list at all, fall back to
        defaults instead of raising.
        """
        style = list(style) if isinstance(style, (list, tuple)) else []
        font_size = style[FONT_SIZE_INDEX] if len(style) > FONT_SIZE_INDEX else None
        bold = style[BOLD_INDEX] if len(style) > BOLD_INDEX else False
        return cls(
            content=content,
            color=color,
            font_size=font_size,
            bold=bold,
            alignment=alignment,
        )


@dataclass(frozen=True)
class FragmentStyle:
    color: str
    font_size: float
    font_weight: str
    alignment: str

    def css(self) -> str:
        return (
            f"color: {self.color}; "
            f"font-size: {_format_size(self.font_size)}px; "
            f"font-weight: {self.font_weight}; "
            f"text-align: {self.alignment};"
        )


def _format_size(size: float) -> str:
    # 16.0 -> "16", 16.5 -> "16.5"
    if float(size).is_integer():
        return str(int(size))
    return f"{size:g}"


class BlockKind(str, Enum):
    HEADING = "h2"
    PARAGRAPH = "p"
    ORDERED_LIST = "ol"
    UNORDERED_LIST = "ul"


@dataclass
class InlineSpan:
    text: str
    style: FragmentStyle


@dataclass
class ListItem:
    """List item builder; wrapped continuation lines are appended as extra parts."""

    style: FragmentStyle
    parts: List[str] = field(default_factory=list)

    def append(self, text: str) -> None:
        self.parts.append(text)

    @property
    def text(self) -> str:
        return " ".join(self.parts)


@dataclass
class ContentBlock:
    kind: BlockKind
    items: List[Union[InlineSpan, ListItem]] = field(default_factory=list)


@dataclass
class PageContent:
    page_number: int
    blocks: List[ContentBlock]
