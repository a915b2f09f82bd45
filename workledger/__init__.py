"""
WorkLedger report core.

Turns a declarative layout schema and a work entry record into a
paginated PDF or HTML report.
"""

__version__ = "1.0.0"

from .contracts import LayoutSchema, BusinessRecord, RenderTree, SchemaValidationError, LayoutError
from .layout import RenderTreeBuilder, LayoutEngine, ReportGenerator

__all__ = [
    '__version__',
    'LayoutSchema',
    'BusinessRecord',
    'RenderTree',
    'SchemaValidationError',
    'LayoutError',
    'RenderTreeBuilder',
    'LayoutEngine',
    'ReportGenerator',
]
