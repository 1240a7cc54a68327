# reflow/html_builder.py
import logging
from pathlib import Path
from typing import List, Sequence

from .models import BlockKind, ContentBlock, PageContent

logger = logging.getLogger(__name__)

PAGE_STYLE = "max-width: 700px; margin: 20px auto 50px; text-align: left;"
PAGE_FOOTER_STYLE = "font-size: 20px; margin-bottom: 20px; text-align: center;"

DOCUMENT_CSS = '''    body { font-family: Arial, sans-serif; }
    .page { margin-bottom: 20px; }
    .text { margin: 0; }'''


def escape_html(text: str) -> str:
    """Escape HTML special characters."""
    return (text
            .replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;')
            .replace("'", '&#39;'))


def render_block(block: ContentBlock) -> str:
    """Render one finalized block as an HTML fragment."""
    if block.kind is BlockKind.HEADING:
        span = block.items[0]
        return f'<h2 style="{span.style.css()}">{escape_html(span.text)}</h2>'

    if block.kind is BlockKind.PARAGRAPH:
        spans = " ".join(
            f'<span style="{span.style.css()}">{escape_html(span.text)}</span>'
            for span in block.items
        )
        return f'<p>{spans}</p>'

    tag = block.kind.value
    items = "".join(
        f'<li style="{item.style.css()}">{escape_html(item.text)}</li>'
        for item in block.items
    )
    return f'<{tag}>{items}</{tag}>'


def render_page(blocks: Sequence[str], page_number: int) -> str:
    """Wrap a page's rendered blocks and append the centered "Page N" label."""
    html_parts = []
    html_parts.append(f'  <div class="page" style="{PAGE_STYLE}">')
    html_parts.extend(f'    {block}' for block in blocks)
    html_parts.append(f'    <div class="page-footer" style="{PAGE_FOOTER_STYLE}">')
    html_parts.append(f'      Page {page_number}')
    html_parts.append('    </div>')
    html_parts.append('  </div>')
    return '\n'.join(html_parts) + '\n'


class HTMLBuilder:
    def __init__(self, title: str):
        self._title = title
        self._pages: List[str] = []

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def add_page(self, page: PageContent) -> None:
        blocks = [render_block(block) for block in page.blocks]
        self._pages.append(render_page(blocks, page.page_number))

    def render(self) -> str:
        html_parts = []

        html_parts.append('<!DOCTYPE html>')
        html_parts.append('<html lang="en">')
        html_parts.append('<head>')
        html_parts.append('  <meta charset="UTF-8">')
        html_parts.append('  <meta name="viewport" content="width=device-width, initial-scale=1.0">')
        html_parts.append(f'  <title>{escape_html(self._title)}</title>')
        html_parts.append('  <style>')
        html_parts.append(DOCUMENT_CSS)
        html_parts.append('  </style>')
        html_parts.append('</head>')
        html_parts.append('<body>')
        html_parts.append(''.join(self._pages).rstrip('\n'))
        html_parts.append('</body>')
        html_parts.append('</html>')

        return '\n'.join(html_parts) + '\n'

    def build(self, output_path: Path) -> None:
        """Write the full document, UTF-8 encoded."""
        output_path = Path(output_path)
        output_path.write_text(self.render(), encoding='utf-8')
        logger.debug("wrote %d pages to %s", len(self._pages), output_path)
