# reflow/page_parser.py
import logging
import re
from typing import List, Optional, Sequence

from .config import ReflowConfig
from .html_builder import render_block
from .models import (
    BlockKind,
    ContentBlock,
    FragmentStyle,
    InlineSpan,
    ListItem,
    PageContent,
    TextFragment,
)

logger = logging.getLogger(__name__)

# whitespace trimmed around list markers: Unicode space separators, line breaks
# and the BOM; the U+001C..U+001F information separators are kept
TRIM_CHARS = (
    "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def raw_font_size(fragment: TextFragment) -> float:
    """Unclamped font size of a fragment; unusable values count as 0."""
    try:
        size = float(fragment.font_size)
    except (TypeError, ValueError):
        return 0.0
    if size != size:  # NaN
        return 0.0
    return size


def resolve_style(fragment: TextFragment, config: ReflowConfig) -> FragmentStyle:
    return FragmentStyle(
        color=fragment.color or config.default_color,
        font_size=max(raw_font_size(fragment), config.min_font_size),
        font_weight="bold" if fragment.bold in (True, 1) else "normal",
        alignment=fragment.alignment or config.default_alignment,
    )


class _BlockAccumulator:
    """Open block of one page plus the blocks already flushed."""

    def __init__(self) -> None:
        self.blocks: List[ContentBlock] = []
        self._reset()

    def _reset(self) -> None:
        self.kind = BlockKind.PARAGRAPH
        self.items: list = []
        self.inside_list_item = False

    def flush(self) -> None:
        if self.items:
            self.blocks.append(ContentBlock(kind=self.kind, items=self.items))
        self._reset()

    def open(self, kind: BlockKind) -> None:
        if self.kind != kind:
            self.flush()
            self.kind = kind

    def emit_heading(self, span: InlineSpan) -> None:
        self.flush()
        self.blocks.append(ContentBlock(kind=BlockKind.HEADING, items=[span]))

    def add_list_item(self, kind: BlockKind, item: ListItem) -> None:
        self.open(kind)
        self.items.append(item)
        self.inside_list_item = True

    def continue_list_item(self, text: str) -> None:
        self.items[-1].append(text)

    def add_span(self, span: InlineSpan) -> None:
        self.open(BlockKind.PARAGRAPH)
        self.items.append(span)


class BlockClassifier:
    def __init__(self, config: Optional[ReflowConfig] = None):
        """
        Group a page's fragments into headings, paragraphs and lists.

        Args:
            config: thresholds and list-marker patterns; defaults when omitted
        """
        self._config = config or ReflowConfig()
        self._ordered = re.compile(self._config.ordered_list_pattern)
        self._unordered = re.compile(self._config.unordered_list_pattern)

    def classify(self, fragments: Sequence[TextFragment]) -> List[ContentBlock]:
        acc = _BlockAccumulator()

        for fragment in fragments:
            text = fragment.content or ""
            style = resolve_style(fragment, self._config)

            if raw_font_size(fragment) >= self._config.title_font_size_threshold:
                acc.emit_heading(InlineSpan(text=text, style=style))
                continue

            trimmed = text.strip(TRIM_CHARS)
            # ordered marker is tested first
            if self._ordered.match(trimmed):
                acc.add_list_item(BlockKind.ORDERED_LIST, self._list_item(trimmed, style))
            elif self._unordered.match(trimmed):
                acc.add_list_item(BlockKind.UNORDERED_LIST, self._list_item(trimmed, style))
            elif acc.inside_list_item:
                acc.continue_list_item(text)
            else:
                acc.add_span(InlineSpan(text=text, style=style))

        acc.flush()
        return acc.blocks

    def _list_item(self, trimmed: str, style: FragmentStyle) -> ListItem:
        text = self._ordered.sub("", trimmed, count=1)
        text = self._unordered.sub("", text, count=1)
        return ListItem(style=style, parts=[text.strip(TRIM_CHARS)])

    def parse(self, page_number: int, fragments: Sequence[TextFragment]) -> PageContent:
        blocks = self.classify(fragments)
        logger.debug(
            "page %d: %d fragments -> %d blocks", page_number, len(fragments), len(blocks)
        )
        return PageContent(page_number=page_number, blocks=blocks)


def render_page_blocks(
    fragments: Sequence[TextFragment], config: Optional[ReflowConfig] = None
) -> List[str]:
    """Classify one page and render each block to its HTML fragment."""
    return [render_block(block) for block in BlockClassifier(config).classify(fragments)]
