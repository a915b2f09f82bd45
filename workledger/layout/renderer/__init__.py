"""
Output canvases for the layout engine.
"""

from .base_canvas import BaseCanvas
from .images import ImageLoader
from .pdf_canvas import PdfCanvas
from .html_canvas import HtmlCanvas

__all__ = [
    'BaseCanvas',
    'ImageLoader',
    'PdfCanvas',
    'HtmlCanvas',
]
