#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HTML Canvas

Accumulates layout operations as absolutely positioned elements, one
<section> per page, for in-browser previews.

Version: 1.0.0
"""

from io import BytesIO
from typing import List, Optional
import base64
import html
import logging

from config.constants import EMPTY_PLACEHOLDER
from workledger.contracts import PageConfig, ImageEmbedError
from .base_canvas import BaseCanvas, PT_TO_MM
from .images import ImageLoader

logger = logging.getLogger(__name__)

# Baseline sits roughly this far below the top of the line box
ASCENT_RATIO = 0.8

PAGE_STYLE = """
body { background: #e5e7eb; margin: 0; padding: 16px; font-family: Helvetica, Arial, sans-serif; }
.page { position: relative; background: #fff; margin: 0 auto 16px auto; overflow: hidden;
        box-shadow: 0 1px 4px rgba(0, 0, 0, 0.2); }
.page > * { position: absolute; margin: 0; }
.page .t { white-space: pre; line-height: 1; }
.page .page-number { width: 100%; text-align: center; color: #808080; font-size: 9pt; }
"""


def _css_rgb(rgb) -> str:
    r, g, b = rgb
    return f"rgb({r},{g},{b})"


def _mm(value: float) -> str:
    return f"{value:.2f}mm"


class HtmlCanvas(BaseCanvas):
    """
    HTML output.

    Images are referenced by URL unless an ImageLoader is supplied, in
    which case they are fetched, checked and inlined as data URIs.
    """

    def __init__(
        self,
        page: PageConfig,
        image_loader: Optional[ImageLoader] = None,
        page_numbers: bool = True,
        title: str = "Report",
    ):
        super().__init__(page)
        self.image_loader = image_loader
        self.page_numbers = page_numbers
        self.title = title
        self._pages: List[List[str]] = [[]]

    @property
    def _elements(self) -> List[str]:
        return self._pages[-1]

    # Primitives

    def _text(self, text: str, x: float, y: float) -> None:
        top = y - self.font_size * PT_TO_MM * ASCENT_RATIO
        style = (
            f"left:{_mm(x)};top:{_mm(top)};font-size:{self.font_size}pt;"
            f"font-weight:{'bold' if self.bold else 'normal'};"
            f"font-style:{'italic' if self.italic else 'normal'};"
            f"color:{_css_rgb(self.text_color)}"
        )
        self._elements.append(f'<div class="t" style="{style}">{html.escape(text)}</div>')

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        # Horizontal and vertical rules only
        left, top = min(x1, x2), min(y1, y2)
        width, height = abs(x2 - x1), abs(y2 - y1)
        color = _css_rgb(self.draw_color)
        if height == 0:
            style = f"left:{_mm(left)};top:{_mm(top)};width:{_mm(width)};border-top:{_mm(self.line_width)} solid {color}"
        else:
            style = f"left:{_mm(left)};top:{_mm(top)};height:{_mm(height)};width:{_mm(width)};border-left:{_mm(self.line_width)} solid {color}"
        self._elements.append(f'<div class="l" style="{style}"></div>')

    def draw_rect(self, x: float, y: float, w: float, h: float, fill: bool = False, stroke: bool = True) -> None:
        style = f"left:{_mm(x)};top:{_mm(y)};width:{_mm(w)};height:{_mm(h)};box-sizing:border-box;"
        if fill:
            style += f"background:{_css_rgb(self.fill_color)};"
        if stroke:
            style += f"border:{_mm(self.line_width)} solid {_css_rgb(self.draw_color)};"
        self._elements.append(f'<div class="r" style="{style}"></div>')

    async def draw_image(self, source: str, x: float, y: float, w: float, h: float, fit: str = "fill") -> None:
        if not source:
            raise ImageEmbedError(str(source), "no image source")

        src = source
        if self.image_loader is not None:
            image = await self.image_loader.load(source)
            buffer = BytesIO()
            image.save(buffer, format="PNG")
            src = "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")

        object_fit = "contain" if fit == "contain" else "fill"
        style = f"left:{_mm(x)};top:{_mm(y)};width:{_mm(w)};height:{_mm(h)};object-fit:{object_fit}"
        self._elements.append(f'<img src="{html.escape(src, quote=True)}" alt="" style="{style}">')

    def _on_new_page(self) -> None:
        self._pages.append([])

    # Output

    def finalize(self) -> str:
        """Serialize every page into one HTML document"""
        total = len(self._pages)
        page_style = f"width:{_mm(self.page_width)};height:{_mm(self.page_height)}"

        sections = []
        for number, elements in enumerate(self._pages, 1):
            body = list(elements)
            if self.page_numbers:
                top = self.page_height - 10 - 9 * PT_TO_MM * ASCENT_RATIO
                body.append(
                    f'<div class="page-number" style="left:0;top:{_mm(top)}">Page {number} of {total}</div>'
                )
            sections.append(
                f'<section class="page" data-page="{number}" style="{page_style}">\n'
                + "\n".join(body)
                + "\n</section>"
            )

        document = (
            "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
            f"<title>{html.escape(self.title or EMPTY_PLACEHOLDER)}</title>\n"
            f"<style>{PAGE_STYLE}</style>\n</head>\n<body>\n"
            + "\n".join(sections)
            + "\n</body>\n</html>\n"
        )
        logger.info(f"HTML finalized: {total} pages")
        return document
