"""
Binding layer: data path resolution, visibility conditions and
per-variant content extraction against a business record.
"""

from .resolver import resolve, check_path_syntax, split_path
from .conditions import evaluate
from .extractors import (
    extract,
    extract_all_fields,
    extract_template_section,
    extract_metrics,
    extract_photos,
    extract_signatures,
    normalize_checklist,
    photo_entry,
    signature_entry,
)

__all__ = [
    'resolve',
    'check_path_syntax',
    'split_path',
    'evaluate',
    'extract',
    'extract_all_fields',
    'extract_template_section',
    'extract_metrics',
    'extract_photos',
    'extract_signatures',
    'normalize_checklist',
    'photo_entry',
    'signature_entry',
]
