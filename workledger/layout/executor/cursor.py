#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout cursor and page geometry.

All values are millimetres, origin at the top-left corner of the page.
"""

from dataclasses import dataclass, replace
from typing import Dict, Tuple

from workledger.contracts import PageConfig, PageSize, Orientation

# Portrait (width, height) in mm
PAGE_SIZES_MM: Dict[PageSize, Tuple[float, float]] = {
    PageSize.A4: (210.0, 297.0),
    PageSize.A3: (297.0, 420.0),
    PageSize.LETTER: (215.9, 279.4),
}


def page_dimensions(page: PageConfig) -> Tuple[float, float]:
    """(width, height) in mm for a page config, orientation applied"""
    width, height = PAGE_SIZES_MM[page.size]
    if page.orientation == Orientation.LANDSCAPE:
        return height, width
    return width, height


@dataclass(frozen=True)
class PageFrame:
    """Printable area of a page"""
    page_width: float
    page_height: float
    margin_top: float
    margin_bottom: float
    margin_left: float
    margin_right: float

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def bottom_limit(self) -> float:
        """Lowest y a drawn unit may reach"""
        return self.page_height - self.margin_bottom

    @property
    def content_left(self) -> float:
        return self.margin_left

    @property
    def content_right(self) -> float:
        return self.page_width - self.margin_right

    @classmethod
    def from_page(cls, page: PageConfig) -> 'PageFrame':
        width, height = page_dimensions(page)
        margins = page.margins
        return cls(
            page_width=width,
            page_height=height,
            margin_top=margins.top,
            margin_bottom=margins.bottom,
            margin_left=margins.left,
            margin_right=margins.right,
        )


@dataclass(frozen=True)
class Cursor:
    """Write position: page index and vertical offset"""
    page: int
    y: float

    def advance(self, height: float) -> 'Cursor':
        return replace(self, y=self.y + height)

    def next_page(self, frame: PageFrame) -> 'Cursor':
        return Cursor(page=self.page + 1, y=frame.margin_top)

    def at_top(self, frame: PageFrame) -> bool:
        return self.y <= frame.margin_top

    def fits(self, required: float, frame: PageFrame) -> bool:
        return self.y + required <= frame.bottom_limit

    @classmethod
    def top_of_page(cls, frame: PageFrame, page: int = 0) -> 'Cursor':
        return cls(page=page, y=frame.margin_top)
