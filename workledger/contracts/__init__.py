"""
Contracts for the report rendering pipeline.

Pipeline:
    LayoutSchema + BusinessRecord -> RenderTreeBuilder -> RenderTree -> LayoutEngine -> canvas
"""

from .base import (
    BaseContract,
    ContractError,
    ContractValidationError,
    SchemaValidationError,
    LayoutError,
    LayoutImportError,
    ImageEmbedError,
    calculate_checksum,
)
from .layout_schema import (
    BlockType,
    PageSize,
    Orientation,
    FileType,
    Margins,
    PageConfig,
    AlwaysVisible,
    EqualsCondition,
    ExistsCondition,
    ContainsCondition,
    HasItemsCondition,
    Condition,
    parse_condition,
    SourcePath,
    TemplateSection,
    MetricSpec,
    Metrics,
    AutoExtractAll,
    AttachmentFilter,
    StaticContent,
    BindingSpec,
    parse_binding,
    Section,
    LayoutSchema,
)
from .business_record import Attachment, BusinessRecord
from .render_tree import RenderMetadata, RenderBlock, RenderTree
from .validation import SchemaValidator
from .layout_io import (
    LayoutDocument,
    migrate_schema,
    export_layout,
    import_layout,
    export_layout_bundle,
    import_layout_bundle,
)

__all__ = [
    # Base
    'BaseContract',
    'ContractError',
    'ContractValidationError',
    'SchemaValidationError',
    'LayoutError',
    'LayoutImportError',
    'ImageEmbedError',
    'calculate_checksum',
    # Layout schema
    'BlockType',
    'PageSize',
    'Orientation',
    'FileType',
    'Margins',
    'PageConfig',
    'AlwaysVisible',
    'EqualsCondition',
    'ExistsCondition',
    'ContainsCondition',
    'HasItemsCondition',
    'Condition',
    'parse_condition',
    'SourcePath',
    'TemplateSection',
    'MetricSpec',
    'Metrics',
    'AutoExtractAll',
    'AttachmentFilter',
    'StaticContent',
    'BindingSpec',
    'parse_binding',
    'Section',
    'LayoutSchema',
    # Business record
    'Attachment',
    'BusinessRecord',
    # Render tree
    'RenderMetadata',
    'RenderBlock',
    'RenderTree',
    # Validation
    'SchemaValidator',
    # Import / export
    'LayoutDocument',
    'migrate_schema',
    'export_layout',
    'import_layout',
    'export_layout_bundle',
    'import_layout_bundle',
]
