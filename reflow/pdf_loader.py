# reflow/pdf_loader.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union
from urllib.parse import unquote

from pdfminer.high_level import extract_pages
from pdfminer.layout import LTChar, LTPage, LTTextContainer, LTTextLine

from .models import TextFragment

logger = logging.getLogger(__name__)

# alignment heuristics, as fractions of the page's text column width
_ALIGN_TOLERANCE = 0.05
_CENTERED_MAX_WIDTH = 0.6

Bbox = Tuple[float, float, float, float]


class DecodeError(RuntimeError):
    """The decoder could not turn a document into page fragments."""

    def __init__(self, path: Path, reason: object):
        super().__init__(f"Failed to decode {path}: {reason}")
        self.path = path


class PDFPageLoader:
    def __init__(self, pdf_path: Path):
        self._pdf_path = Path(pdf_path)

    def iter_pages(self) -> Iterator[List[TextFragment]]:
        """Yield the fragments of each page in reading order, as pdfminer lays them out."""
        for layout in extract_pages(self._pdf_path):
            yield fragments_from_layout(layout)

    def load(self) -> List[List[TextFragment]]:
        """Decode the whole document before any page is classified."""
        try:
            pages = list(self.iter_pages())
        except Exception as e:
            raise DecodeError(self._pdf_path, e) from e
        logger.debug("decoded %d pages from %s", len(pages), self._pdf_path)
        return pages


class Pdf2JsonPageLoader:
    """Loads a document already decoded by pdf2json (``Pages[].Texts[]``)."""

    def __init__(self, json_path: Path):
        self._json_path = Path(json_path)

    def load(self) -> List[List[TextFragment]]:
        try:
            with self._json_path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            return [fragments_from_pdf2json_page(page) for page in _pdf2json_pages(data)]
        except Exception as e:
            raise DecodeError(self._json_path, e) from e


PageLoader = Union[PDFPageLoader, Pdf2JsonPageLoader]


def open_loader(path: Path) -> PageLoader:
    path = Path(path)
    if path.suffix.lower() == ".json":
        return Pdf2JsonPageLoader(path)
    return PDFPageLoader(path)


# --------------------------------------------------
# pdfminer
# --------------------------------------------------

def fragments_from_layout(page: LTPage) -> List[TextFragment]:
    lines: List[LTTextLine] = []
    for element in page:
        if isinstance(element, LTTextLine):
            lines.append(element)
        elif isinstance(element, LTTextContainer):
            lines.extend(obj for obj in element if isinstance(obj, LTTextLine))

    column = _text_column(lines) or page.bbox
    return [_fragment_from_line(line, column) for line in lines]


def _fragment_from_line(line: LTTextLine, column: Bbox) -> TextFragment:
    chars = [obj for obj in line if isinstance(obj, LTChar)]
    first = chars[0] if chars else None
    return TextFragment(
        content=line.get_text().rstrip("\n"),
        color=_char_color(first) if first is not None else None,
        font_size=first.size if first is not None else None,
        bold=first is not None and "bold" in first.fontname.lower(),
        alignment=_alignment(line, column),
    )


def _text_column(lines: Sequence[LTTextLine]) -> Optional[Bbox]:
    if not lines:
        return None
    return (
        min(line.x0 for line in lines),
        min(line.y0 for line in lines),
        max(line.x1 for line in lines),
        max(line.y1 for line in lines),
    )


def _alignment(line: LTTextLine, column: Bbox) -> str:
    left, _, right, _ = column
    width = right - left
    if width <= 0:
        return "left"
    tolerance = width * _ALIGN_TOLERANCE
    centre = (left + right) / 2
    if abs((line.x0 + line.x1) / 2 - centre) <= tolerance and line.width < width * _CENTERED_MAX_WIDTH:
        return "center"
    if right - line.x1 <= tolerance and line.x0 > centre:
        return "right"
    return "left"


def _char_color(char: LTChar) -> Optional[str]:
    color = getattr(char, "non_stroking_color", None)
    if color is None:
        graphicstate = getattr(char, "graphicstate", None)
        color = getattr(graphicstate, "ncolor", None)
    return color_to_hex(color)


def color_to_hex(value: Any) -> Optional[str]:
    """
    Convert a pdfminer colour (gray, RGB or CMYK components in 0..1) to ``#rrggbb``.

    Pattern colours and anything unrecognised give ``None``.
    """
    if isinstance(value, (int, float)):
        value = (value,)
    if not isinstance(value, (tuple, list)):
        return None
    try:
        comps = [float(c) for c in value]
    except (TypeError, ValueError):
        return None

    if len(comps) == 1:
        r = g = b = comps[0]
    elif len(comps) == 3:
        r, g, b = comps
    elif len(comps) == 4:
        c, m, y, k = comps
        r, g, b = (1 - c) * (1 - k), (1 - m) * (1 - k), (1 - y) * (1 - k)
    else:
        return None

    return "#" + "".join(f"{round(min(max(x, 0.0), 1.0) * 255):02x}" for x in (r, g, b))


# --------------------------------------------------
# pdf2json
# --------------------------------------------------

def _pdf2json_pages(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    # pdf2json < 2 nests everything under "formImage"
    if "Pages" not in data and isinstance(data.get("formImage"), dict):
        data = data["formImage"]
    return data["Pages"]


def fragments_from_pdf2json_page(page: Dict[str, Any]) -> List[TextFragment]:
    fragments = []
    for text in page.get("Texts") or []:
        runs = text.get("R") or []
        content = "".join(unquote(str(run.get("T", ""))) for run in runs)
        style = runs[0].get("TS") if runs else None
        fragments.append(
            TextFragment.from_style_vector(
                content,
                style,
                color=text.get("oc"),
                alignment=text.get("A"),
            )
        )
    return fragments
