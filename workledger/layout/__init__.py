"""
Report layout: render tree building, pagination and output canvases.
"""

from .builder import RenderTreeBuilder
from .executor import LayoutEngine, Cursor, PageFrame
from .renderer import BaseCanvas, HtmlCanvas, PdfCanvas, ImageLoader
from .generator import ReportGenerator
from .templates import LayoutTemplate, LAYOUT_TEMPLATES, get_layout_template, list_layout_templates

__all__ = [
    'RenderTreeBuilder',
    'LayoutEngine',
    'Cursor',
    'PageFrame',
    'BaseCanvas',
    'HtmlCanvas',
    'PdfCanvas',
    'ImageLoader',
    'ReportGenerator',
    'LayoutTemplate',
    'LAYOUT_TEMPLATES',
    'get_layout_template',
    'list_layout_templates',
]
