#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base Canvas Interface

The drawing capability consumed by the layout engine. Concrete canvases
implement the primitives; text measurement and wrapping are shared so
every backend breaks lines at the same places.

Coordinates are millimetres from the top-left corner. Text `y` is the
baseline of the first line.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from reportlab.pdfbase import pdfmetrics

from config.constants import CHECK_GLYPH, CROSS_GLYPH
from workledger.contracts import PageConfig
from ..executor.cursor import page_dimensions

RGB = Tuple[int, int, int]

PT_TO_MM = 25.4 / 72

# Standard PDF fonts
FONT_FAMILY = {
    (False, False): "Helvetica",
    (True, False): "Helvetica-Bold",
    (False, True): "Helvetica-Oblique",
    (True, True): "Helvetica-BoldOblique",
}

# Check / cross are not in the Helvetica encoding
SYMBOL_FONT = "ZapfDingbats"
SYMBOL_CODES = {CHECK_GLYPH: "4", CROSS_GLYPH: "8"}


class BaseCanvas(ABC):
    """
    Abstract drawing surface.

    Subclasses implement:
    - _text(): draw one already-positioned line
    - draw_line(), draw_rect(), draw_image()
    - _on_new_page(): backend page break
    - finalize(): produce the output artifact
    """

    DEFAULT_LINE_HEIGHT_FACTOR = 1.15

    def __init__(self, page: PageConfig):
        self.page = page
        self._page_width, self._page_height = page_dimensions(page)
        self._page_index = 0

        self.font_size = 10.0
        self.bold = False
        self.italic = False
        self.text_color: RGB = (0, 0, 0)
        self.draw_color: RGB = (0, 0, 0)
        self.fill_color: RGB = (255, 255, 255)
        self.line_width = 0.2

    # ------------------------------------------------------------------
    # Page
    # ------------------------------------------------------------------

    @property
    def page_width(self) -> float:
        return self._page_width

    @property
    def page_height(self) -> float:
        return self._page_height

    @property
    def page_index(self) -> int:
        return self._page_index

    @property
    def page_count(self) -> int:
        return self._page_index + 1

    def new_page(self) -> None:
        """Start a new page; drawing continues on it"""
        self._on_new_page()
        self._page_index += 1

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def set_font(self, size: float, bold: bool = False, italic: bool = False) -> None:
        self.font_size = size
        self.bold = bold
        self.italic = italic

    def set_text_color(self, rgb: RGB) -> None:
        self.text_color = tuple(rgb)

    def set_draw_color(self, rgb: RGB) -> None:
        self.draw_color = tuple(rgb)

    def set_fill_color(self, rgb: RGB) -> None:
        self.fill_color = tuple(rgb)

    def set_line_width(self, width: float) -> None:
        self.line_width = width

    @property
    def font_name(self) -> str:
        return FONT_FAMILY[(self.bold, self.italic)]

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def text_runs(self, text: str) -> List[Tuple[str, str]]:
        """Split text into (font name, chars) runs, symbols in their own font"""
        runs = []
        for char in text:
            if char in SYMBOL_CODES:
                font, chunk = SYMBOL_FONT, SYMBOL_CODES[char]
            else:
                font, chunk = self.font_name, char
            if runs and runs[-1][0] == font:
                runs[-1] = (font, runs[-1][1] + chunk)
            else:
                runs.append((font, chunk))
        return runs

    def text_width(self, text: str) -> float:
        """Width of a single line in mm at the current font"""
        points = sum(
            pdfmetrics.stringWidth(chunk, font, self.font_size)
            for font, chunk in self.text_runs(text)
        )
        return points * PT_TO_MM

    def split_text(self, text: str, width: float) -> List[str]:
        """
        Wrap text to a width in mm.

        Explicit newlines are kept; words longer than the width are broken
        by character. Always returns at least one line.
        """
        lines = []
        for paragraph in str(text).split("\n"):
            words = paragraph.split()
            if not words:
                lines.append("")
                continue

            current = ""
            for word in words:
                candidate = f"{current} {word}" if current else word
                if self.text_width(candidate) <= width:
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                    current = ""
                # Break an over-long word
                while self.text_width(word) > width and len(word) > 1:
                    cut = len(word) - 1
                    while cut > 1 and self.text_width(word[:cut]) > width:
                        cut -= 1
                    lines.append(word[:cut])
                    word = word[cut:]
                current = word
            lines.append(current)

        return lines or [""]

    def default_line_height(self) -> float:
        return self.font_size * PT_TO_MM * self.DEFAULT_LINE_HEIGHT_FACTOR

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        width: Optional[float] = None,
        align: str = "left",
        line_height: Optional[float] = None,
    ) -> int:
        """
        Draw text, wrapped when a width is given.

        Without a width, `x` is the left edge, centre or right edge
        depending on `align`. With a width, lines are aligned inside
        [x, x + width].

        Returns:
            Number of lines drawn
        """
        text = "" if text is None else str(text)
        lines = self.split_text(text, width) if width is not None else text.split("\n")
        step = line_height if line_height is not None else self.default_line_height()

        for i, line in enumerate(lines):
            line_x = x
            if align in ("center", "right"):
                line_w = self.text_width(line)
                if width is None:
                    line_x = x - line_w / 2 if align == "center" else x - line_w
                else:
                    line_x = x + (width - line_w) / 2 if align == "center" else x + width - line_w
            if line:
                self._text(line, line_x, y + i * step)

        return len(lines)

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def _text(self, text: str, x: float, y: float) -> None:
        """Draw one line with its left edge at x and baseline at y"""
        pass

    @abstractmethod
    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        pass

    @abstractmethod
    def draw_rect(self, x: float, y: float, w: float, h: float, fill: bool = False, stroke: bool = True) -> None:
        pass

    @abstractmethod
    async def draw_image(self, source: str, x: float, y: float, w: float, h: float, fit: str = "fill") -> None:
        """
        Place an image in the box (x, y, w, h).

        `fit` is "fill" (stretch to the box) or "contain" (letterbox).

        Raises:
            ImageEmbedError: When the image cannot be fetched or decoded
        """
        pass

    @abstractmethod
    def _on_new_page(self) -> None:
        pass

    @abstractmethod
    def finalize(self):
        """Close the document and return the artifact (bytes or str)"""
        pass
