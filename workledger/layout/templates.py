#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout template library.

Pre-built layout schemas that organisations clone and customise.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import copy

from workledger.contracts import LayoutSchema

A4_PORTRAIT = {
    "size": "A4",
    "orientation": "portrait",
    "margins": {"top": 20, "bottom": 20, "left": 20, "right": 20},
}


@dataclass(frozen=True)
class LayoutTemplate:
    """A named, pre-built layout"""
    id: str
    name: str
    description: str
    category: str
    compatible_types: List[str] = field(default_factory=list)
    schema: Dict[str, Any] = field(default_factory=dict)

    def to_schema(self) -> LayoutSchema:
        """Validated LayoutSchema built from a copy of the template"""
        return LayoutSchema.from_dict(copy.deepcopy(self.schema))

    def is_compatible(self, template_type: str) -> bool:
        return template_type in self.compatible_types


LAYOUT_TEMPLATES = [
    LayoutTemplate(
        id="minimal_report",
        name="Minimal Report",
        description="Simple, clean layout with essential information only",
        category="basic",
        compatible_types=["PMC", "CMC", "AMC", "CORRECTIVE"],
        schema={
            "version": 1,
            "page": A4_PORTRAIT,
            "sections": [
                {
                    "section_id": "header",
                    "block_type": "header",
                    "content": {"title": "Work Report", "subtitle": "Maintenance Activity"},
                    "binding_rules": {},
                    "options": {},
                },
                {
                    "section_id": "details",
                    "block_type": "detail_entry",
                    "binding_rules": {"mode": "auto_extract_all"},
                    "options": {"columns": 2, "layout": "two_column", "title": "Details"},
                },
                {
                    "section_id": "signatures",
                    "block_type": "signature_box",
                    "binding_rules": {},
                    "options": {"title": "Signatures"},
                },
            ],
        },
    ),
    LayoutTemplate(
        id="photo_focused",
        name="Photo-Focused Report",
        description="Emphasizes visual evidence with a large photo grid",
        category="visual",
        compatible_types=["PMC", "CMC", "CORRECTIVE", "EMERGENCY"],
        schema={
            "version": 1,
            "page": {
                "size": "A4",
                "orientation": "portrait",
                "margins": {"top": 15, "bottom": 15, "left": 15, "right": 15},
            },
            "sections": [
                {
                    "section_id": "header",
                    "block_type": "header",
                    "content": {"title": "Visual Inspection Report"},
                    "binding_rules": {},
                    "options": {},
                },
                {
                    "section_id": "details",
                    "block_type": "detail_entry",
                    "binding_rules": {"mode": "auto_extract_all"},
                    "options": {"columns": 2, "layout": "two_column"},
                },
                {
                    "section_id": "photo_evidence",
                    "block_type": "photo_grid",
                    "binding_rules": {"source": "attachments[file_type=photo]"},
                    "options": {"columns": 3, "show_timestamps": True, "show_captions": True},
                    "show_if": {"field": "attachments[file_type=photo]", "has_items": True},
                },
                {
                    "section_id": "signatures",
                    "block_type": "signature_box",
                    "binding_rules": {},
                    "options": {"title": "Signatures"},
                },
            ],
        },
    ),
    LayoutTemplate(
        id="detailed_inspection",
        name="Detailed Inspection Report",
        description="Before/after photo sets with full entry details",
        category="detailed",
        compatible_types=["PMC", "CMC", "AMC", "SLA"],
        schema={
            "version": 1,
            "page": A4_PORTRAIT,
            "sections": [
                {
                    "section_id": "header",
                    "block_type": "header",
                    "content": {"title": "Inspection Report"},
                    "binding_rules": {},
                    "options": {},
                },
                {
                    "section_id": "basic_info",
                    "block_type": "detail_entry",
                    "binding_rules": {"mode": "auto_extract_all"},
                    "options": {"title": "Inspection Details"},
                },
                {
                    "section_id": "photos_before",
                    "block_type": "photo_grid",
                    "binding_rules": {"filter_by_field": "before"},
                    "options": {"columns": 2, "title": "Before"},
                },
                {
                    "section_id": "photos_after",
                    "block_type": "photo_grid",
                    "binding_rules": {"filter_by_field": "after"},
                    "options": {"columns": 2, "title": "After"},
                },
                {
                    "section_id": "signatures",
                    "block_type": "signature_box",
                    "binding_rules": {},
                    "options": {"title": "Approvals"},
                },
            ],
        },
    ),
    LayoutTemplate(
        id="signoff_sheet",
        name="Sign-off Sheet",
        description="One-page summary for customer acknowledgement",
        category="basic",
        compatible_types=["PMC", "CMC", "AMC", "CORRECTIVE", "CONSTRUCTION", "T_AND_M"],
        schema={
            "version": 1,
            "page": A4_PORTRAIT,
            "sections": [
                {
                    "section_id": "header",
                    "block_type": "header",
                    "content": {"title": "Work Completion Sign-off"},
                    "binding_rules": {},
                    "options": {},
                },
                {
                    "section_id": "summary",
                    "block_type": "table",
                    "binding_rules": {"mode": "auto_extract_all"},
                    "options": {"title": "Summary"},
                },
                {
                    "section_id": "sign_off",
                    "block_type": "signature_box",
                    "binding_rules": {},
                    "options": {"title": "Sign-off"},
                },
            ],
        },
    ),
]

_BY_ID = {t.id: t for t in LAYOUT_TEMPLATES}


def get_layout_template(template_id: str) -> Optional[LayoutTemplate]:
    """Template by id, None when unknown"""
    return _BY_ID.get(template_id)


def list_layout_templates(template_type: Optional[str] = None) -> List[LayoutTemplate]:
    """All templates, or those compatible with a contract/template type"""
    if template_type is None:
        return list(LAYOUT_TEMPLATES)
    return [t for t in LAYOUT_TEMPLATES if t.is_compatible(template_type)]
