#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDF Canvas

Draws layout operations onto a ReportLab canvas. Coordinates arrive in
millimetres from the top-left and are flipped to PDF points here.

Version: 1.0.0
"""

from io import BytesIO
from typing import Any, List, Optional
import logging

from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as rl_canvas

from workledger.contracts import PageConfig
from .base_canvas import BaseCanvas
from .images import ImageLoader

logger = logging.getLogger(__name__)

PAGE_NUMBER_COLOR = (128, 128, 128)
PAGE_NUMBER_FONT_SIZE = 9
PAGE_NUMBER_OFFSET = 10  # mm above the bottom edge


def _rgb(rgb) -> Color:
    r, g, b = rgb
    return Color(r / 255.0, g / 255.0, b / 255.0)


class NumberedCanvas(rl_canvas.Canvas):
    """
    ReportLab canvas that writes "Page i of n" on every page.

    Page states are held back on showPage() so the total is known when
    the footers are drawn at save().
    """

    def __init__(self, *args, number_pages: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.number_pages = number_pages
        self._saved_page_states: List[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            if self.number_pages:
                self._draw_page_number(total)
            super().showPage()
        super().save()

    def _draw_page_number(self, total: int):
        width, _ = self._pagesize
        self.saveState()
        self.setFont("Helvetica", PAGE_NUMBER_FONT_SIZE)
        self.setFillColor(_rgb(PAGE_NUMBER_COLOR))
        self.drawCentredString(width / 2, PAGE_NUMBER_OFFSET * mm, f"Page {self._pageNumber} of {total}")
        self.restoreState()


class PdfCanvas(BaseCanvas):
    """
    PDF output backed by ReportLab.

    Usage:
        canvas = PdfCanvas(tree.page)
        await LayoutEngine().render(tree, canvas)
        pdf_bytes = canvas.finalize()
    """

    def __init__(
        self,
        page: PageConfig,
        image_loader: Optional[ImageLoader] = None,
        page_numbers: bool = True,
        title: Optional[str] = None,
    ):
        super().__init__(page)
        self.image_loader = image_loader or ImageLoader()
        self._buffer = BytesIO()
        self._canvas = NumberedCanvas(
            self._buffer,
            pagesize=(self.page_width * mm, self.page_height * mm),
            number_pages=page_numbers,
        )
        if title:
            self._canvas.setTitle(title)
        self._finalized: Optional[bytes] = None

    # Coordinate conversion

    def _x(self, x: float) -> float:
        return x * mm

    def _y(self, y: float) -> float:
        return (self.page_height - y) * mm

    # Primitives

    def _text(self, text: str, x: float, y: float) -> None:
        c = self._canvas
        c.setFillColor(_rgb(self.text_color))
        cursor_x = self._x(x)
        for font, chunk in self.text_runs(text):
            c.setFont(font, self.font_size)
            c.drawString(cursor_x, self._y(y), chunk)
            cursor_x += c.stringWidth(chunk, font, self.font_size)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        c = self._canvas
        c.setStrokeColor(_rgb(self.draw_color))
        c.setLineWidth(self.line_width * mm)
        c.line(self._x(x1), self._y(y1), self._x(x2), self._y(y2))

    def draw_rect(self, x: float, y: float, w: float, h: float, fill: bool = False, stroke: bool = True) -> None:
        c = self._canvas
        c.setStrokeColor(_rgb(self.draw_color))
        c.setFillColor(_rgb(self.fill_color))
        c.setLineWidth(self.line_width * mm)
        c.rect(self._x(x), self._y(y + h), w * mm, h * mm, stroke=int(stroke), fill=int(fill))

    async def draw_image(self, source: str, x: float, y: float, w: float, h: float, fit: str = "fill") -> None:
        image = await self.image_loader.load(source)

        draw_x, draw_y, draw_w, draw_h = x, y, w, h
        if fit == "contain":
            img_w, img_h = image.size
            scale = min(w / img_w, h / img_h)
            draw_w, draw_h = img_w * scale, img_h * scale
            draw_x = x + (w - draw_w) / 2
            draw_y = y + (h - draw_h) / 2

        self._canvas.drawImage(
            ImageReader(image),
            self._x(draw_x),
            self._y(draw_y + draw_h),
            width=draw_w * mm,
            height=draw_h * mm,
            mask="auto",
        )

    def _on_new_page(self) -> None:
        self._canvas.showPage()

    def finalize(self) -> bytes:
        """Close the document; returns the PDF bytes"""
        if self._finalized is None:
            self._canvas.showPage()
            self._canvas.save()
            self._finalized = self._buffer.getvalue()
            logger.info(f"PDF finalized: {self.page_count} pages, {len(self._finalized)} bytes")
        return self._finalized
