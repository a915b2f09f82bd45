#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout Schema Contract

Declarative, versioned description of a report: page setup plus an
ordered list of sections. Each section names a block type, the binding
that feeds it and an optional visibility condition.

Binding rules and conditions arrive as loose JSON maps. They are parsed
once, here, into explicit variants so that later stages never guess the
shape of a rule from which keys happen to be present.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from enum import Enum
import logging

from config.constants import (
    DEFAULT_PAGE_SIZE, DEFAULT_ORIENTATION, DEFAULT_MARGIN, SCHEMA_VERSION,
)
from .base import BaseContract

logger = logging.getLogger(__name__)


class BlockType(Enum):
    """Renderable block types (closed set)"""
    HEADER = "header"
    DETAIL_ENTRY = "detail_entry"
    TEXT_SECTION = "text_section"
    CHECKLIST = "checklist"
    TABLE = "table"
    PHOTO_GRID = "photo_grid"
    SIGNATURE_BOX = "signature_box"
    METRICS_CARDS = "metrics_cards"


class PageSize(Enum):
    """Supported paper sizes"""
    A4 = "A4"
    A3 = "A3"
    LETTER = "Letter"


class Orientation(Enum):
    """Page orientation"""
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class FileType(Enum):
    """Attachment file types"""
    PHOTO = "photo"
    SIGNATURE = "signature"
    DOCUMENT = "document"


@dataclass(frozen=True)
class Margins:
    """Page margins in mm"""
    top: float = DEFAULT_MARGIN
    bottom: float = DEFAULT_MARGIN
    left: float = DEFAULT_MARGIN
    right: float = DEFAULT_MARGIN

    def to_dict(self) -> Dict:
        return {"top": self.top, "bottom": self.bottom, "left": self.left, "right": self.right}

    @classmethod
    def from_dict(cls, data: Optional[Dict], defaults: Optional[Dict] = None) -> 'Margins':
        """Sides missing from `data` come from `defaults`, then DEFAULT_MARGIN"""
        merged = dict(defaults or {})
        merged.update(data or {})
        return cls(
            top=merged.get("top", DEFAULT_MARGIN),
            bottom=merged.get("bottom", DEFAULT_MARGIN),
            left=merged.get("left", DEFAULT_MARGIN),
            right=merged.get("right", DEFAULT_MARGIN),
        )


@dataclass(frozen=True)
class PageConfig:
    """Page setup"""
    size: PageSize = PageSize(DEFAULT_PAGE_SIZE)
    orientation: Orientation = Orientation(DEFAULT_ORIENTATION)
    margins: Margins = field(default_factory=Margins)

    def to_dict(self) -> Dict:
        return {
            "size": self.size.value,
            "orientation": self.orientation.value,
            "margins": self.margins.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict], defaults: Optional[Dict] = None) -> 'PageConfig':
        data = data or {}
        defaults = defaults or {}
        return cls(
            size=PageSize(data.get("size") or defaults.get("size", DEFAULT_PAGE_SIZE)),
            orientation=Orientation(
                data.get("orientation") or defaults.get("orientation", DEFAULT_ORIENTATION)
            ),
            margins=Margins.from_dict(data.get("margins"), defaults.get("margins")),
        )


# =============================================================================
# CONDITIONS
# =============================================================================

@dataclass(frozen=True)
class AlwaysVisible:
    """No condition: the section is always shown"""


@dataclass(frozen=True)
class EqualsCondition:
    """Visible when the value at `field` equals `equals`"""
    field: str
    equals: Any


@dataclass(frozen=True)
class ExistsCondition:
    """Visible when the value at `field` is (or is not) present"""
    field: str
    exists: bool


@dataclass(frozen=True)
class ContainsCondition:
    """Visible when any element of the list at `field` matches every pair"""
    field: str
    contains: Dict[str, Any]


@dataclass(frozen=True)
class HasItemsCondition:
    """Visible when the list at `field` is (or is not) non-empty"""
    field: str
    has_items: bool


Condition = Union[
    AlwaysVisible, EqualsCondition, ExistsCondition, ContainsCondition, HasItemsCondition
]


def parse_condition(data: Optional[Dict[str, Any]]) -> Condition:
    """
    Parse a `show_if` map into a Condition variant.

    Key presence selects the variant, so `{"equals": None}` is a real
    equality test. Unrecognised shapes fall back to AlwaysVisible.
    """
    if not data or not data.get("field"):
        return AlwaysVisible()

    path = data["field"]
    if "equals" in data:
        return EqualsCondition(field=path, equals=data["equals"])
    if "exists" in data:
        return ExistsCondition(field=path, exists=bool(data["exists"]))
    if isinstance(data.get("contains"), dict):
        return ContainsCondition(field=path, contains=dict(data["contains"]))
    if "has_items" in data:
        return HasItemsCondition(field=path, has_items=bool(data["has_items"]))
    logger.warning(f"Unrecognised show_if condition on '{path}', section always shown")
    return AlwaysVisible()


# =============================================================================
# BINDINGS
# =============================================================================

@dataclass(frozen=True)
class SourcePath:
    """Content comes from a single data path"""
    source: str


@dataclass(frozen=True)
class TemplateSection:
    """Content is every flat key under `<template_section>.`"""
    template_section: str
    fields: Optional[List[str]] = None
    field: Optional[str] = None


@dataclass(frozen=True)
class MetricSpec:
    """One metrics card"""
    template_section: str
    field: str
    label: str = ""
    unit: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> 'MetricSpec':
        return cls(
            template_section=data.get("template_section", ""),
            field=data.get("field", ""),
            label=data.get("label") or data.get("field", ""),
            unit=data.get("unit") or "",
        )


@dataclass(frozen=True)
class Metrics:
    """Content is a list of metric values"""
    metrics: List[MetricSpec]


@dataclass(frozen=True)
class AutoExtractAll:
    """Content is every scalar field of the record"""


@dataclass(frozen=True)
class AttachmentFilter:
    """Content is the record attachments of one file type"""
    file_type: FileType
    field_filter: Optional[str] = None


@dataclass(frozen=True)
class StaticContent:
    """Content is the section's own static `content` map"""


BindingSpec = Union[
    SourcePath, TemplateSection, Metrics, AutoExtractAll, AttachmentFilter, StaticContent
]


def parse_binding(rules: Optional[Dict[str, Any]], block_type: BlockType) -> BindingSpec:
    """
    Resolve a `binding_rules` map into exactly one BindingSpec variant.

    Precedence (first match wins): auto-extract mode, filtered photo grid,
    template section, source path, metrics, implicit attachment filter for
    photo/signature blocks, static content.
    """
    rules = rules or {}

    if rules.get("mode") == "auto_extract_all":
        return AutoExtractAll()

    if block_type == BlockType.PHOTO_GRID and rules.get("filter_by_field"):
        return AttachmentFilter(FileType.PHOTO, field_filter=str(rules["filter_by_field"]))

    if rules.get("template_section"):
        fields = rules.get("fields")
        return TemplateSection(
            template_section=rules["template_section"],
            fields=list(fields) if isinstance(fields, list) else None,
            field=rules.get("field"),
        )

    if rules.get("source"):
        return SourcePath(source=rules["source"])

    if isinstance(rules.get("metrics"), list):
        return Metrics(metrics=[MetricSpec.from_dict(m) for m in rules["metrics"]])

    if block_type == BlockType.PHOTO_GRID:
        return AttachmentFilter(FileType.PHOTO)

    if block_type == BlockType.SIGNATURE_BOX:
        return AttachmentFilter(FileType.SIGNATURE)

    return StaticContent()


# =============================================================================
# SCHEMA
# =============================================================================

@dataclass(frozen=True)
class Section:
    """One schema section; becomes at most one render block"""
    section_id: str
    block_type: BlockType
    binding: BindingSpec
    layout: str = "single_column"
    options: Dict[str, Any] = field(default_factory=dict)
    show_if: Condition = field(default_factory=AlwaysVisible)
    content: Dict[str, Any] = field(default_factory=dict)

    # Raw maps kept for lossless serialization
    binding_rules: Dict[str, Any] = field(default_factory=dict)
    show_if_rules: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict:
        data = {
            "section_id": self.section_id,
            "block_type": self.block_type.value,
            "layout": self.layout,
            "binding_rules": dict(self.binding_rules),
            "options": dict(self.options),
        }
        if self.show_if_rules:
            data["show_if"] = dict(self.show_if_rules)
        if self.content:
            data["content"] = dict(self.content)
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Section':
        block_type = BlockType(data["block_type"])
        options = dict(data.get("options") or {})
        rules = dict(data.get("binding_rules") or {})
        show_if = data.get("show_if")
        return cls(
            section_id=data["section_id"],
            block_type=block_type,
            binding=parse_binding(rules, block_type),
            layout=data.get("layout") or options.get("layout") or "single_column",
            options=options,
            show_if=parse_condition(show_if),
            content=dict(data.get("content") or {}),
            binding_rules=rules,
            show_if_rules=dict(show_if) if show_if else None,
        )


@dataclass(frozen=True)
class LayoutSchema(BaseContract):
    """
    A validated layout schema.

    Build instances with LayoutSchema.from_dict(), which validates the raw
    map first and raises SchemaValidationError listing every violation.
    """
    page: PageConfig = field(default_factory=PageConfig)
    sections: List[Section] = field(default_factory=list)
    version: int = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "page": self.page.to_dict(),
            "sections": [s.to_dict() for s in self.sections],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        validate: bool = True,
        page_defaults: Optional[Dict[str, Any]] = None,
    ) -> 'LayoutSchema':
        if validate:
            from .validation import SchemaValidator
            SchemaValidator().validate_or_raise(data)

        return cls(
            page=PageConfig.from_dict(data.get("page"), page_defaults),
            sections=[Section.from_dict(s) for s in data.get("sections", [])],
            version=int(data.get("version", SCHEMA_VERSION)),
        )

    def get_section(self, section_id: str) -> Optional[Section]:
        """Find a section by id"""
        for section in self.sections:
            if section.section_id == section_id:
                return section
        return None
