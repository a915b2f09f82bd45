"""
Layout Executor - Pagination and block layout
"""

from .cursor import Cursor, PageFrame, page_dimensions, PAGE_SIZES_MM
from .engine import LayoutEngine, LayoutContext

__all__ = [
    'Cursor',
    'PageFrame',
    'page_dimensions',
    'PAGE_SIZES_MM',
    'LayoutEngine',
    'LayoutContext',
]
