#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Render Tree Builder

Turns (LayoutSchema, BusinessRecord) into a RenderTree:
1. Page config with defaults
2. Metadata, once, from record top-level fields
3. Per section: visibility, binding extraction, block-type shaping

The builder is pure apart from the generation timestamp, which callers
can inject for reproducible output.

Version: 1.0.0
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union
import copy
import logging

from config.settings import Settings, get_settings
from workledger.binding import evaluate, extract, normalize_checklist, photo_entry, signature_entry
from workledger.contracts import (
    BindingSpec,
    BlockType,
    BusinessRecord,
    LayoutSchema,
    RenderBlock,
    RenderMetadata,
    RenderTree,
    Section,
    parse_binding,
)
from .formatting import field_label

logger = logging.getLogger(__name__)


class RenderTreeBuilder:
    """
    Builds render trees.

    Usage:
        builder = RenderTreeBuilder()
        tree = builder.build(schema, record)

        # Reproducible output
        tree = builder.build(schema, record, generated_at="2026-02-01T00:00:00+00:00")
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def build(
        self,
        schema: Union[LayoutSchema, Mapping[str, Any]],
        record: Union[BusinessRecord, Mapping[str, Any]],
        binding_overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
        generated_at: Optional[str] = None,
    ) -> RenderTree:
        """
        Build a render tree.

        Args:
            schema: LayoutSchema, or a raw schema map (validated here)
            record: BusinessRecord, or a raw record map
            binding_overrides: section_id -> binding_rules replacing the
                section's own rules
            generated_at: ISO timestamp for metadata (now when omitted)

        Returns:
            RenderTree

        Raises:
            SchemaValidationError: Raw schema is invalid
        """
        if not isinstance(schema, LayoutSchema):
            schema = LayoutSchema.from_dict(schema, page_defaults=self.settings.page_defaults())
        if not isinstance(record, BusinessRecord):
            record = BusinessRecord.from_dict(record)

        overrides = binding_overrides or {}
        metadata = self.build_metadata(record, generated_at)

        blocks = []
        for section in schema.sections:
            block = self.build_block(section, record, overrides.get(section.section_id))
            if block is not None:
                blocks.append(block)

        logger.info(
            f"Render tree generated: {len(blocks)}/{len(schema.sections)} blocks "
            f"(entry {record.id or '-'})"
        )
        return RenderTree(page=schema.page, metadata=metadata, blocks=blocks)

    def build_metadata(self, record: BusinessRecord, generated_at: Optional[str] = None) -> RenderMetadata:
        """Header/footer summary of the record"""
        contract = record.contract or {}
        project = contract.get("project") or {}
        template = record.template or {}
        profile = record.created_by_profile or {}

        return RenderMetadata(
            generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
            entry_id=record.id,
            entry_date=record.entry_date,
            shift=record.shift,
            status=record.status,
            contract={
                "number": contract.get("contract_number"),
                "name": contract.get("contract_name"),
                "client": project.get("client_name") or contract.get("client_name"),
                "location": project.get("site_address") or contract.get("site_location"),
                "category": contract.get("contract_category"),
            },
            template={
                "name": template.get("template_name"),
                "category": template.get("contract_category"),
            },
            creator={
                "id": record.created_by,
                "name": record.creator_name or "Unknown",
                "role": profile.get("role"),
            },
        )

    def build_block(
        self,
        section: Section,
        record: BusinessRecord,
        override: Optional[Mapping[str, Any]] = None,
    ) -> Optional[RenderBlock]:
        """One block for a visible section, None when its condition hides it"""
        if not evaluate(section.show_if, record):
            logger.debug(f"Skipping section {section.section_id} (condition not met)")
            return None

        binding: BindingSpec = section.binding
        if override is not None:
            binding = parse_binding(dict(override), section.block_type)

        raw = extract(binding, record, section.content)
        content = self.shape_content(section.block_type, raw)

        return RenderBlock(
            block_id=section.section_id,
            type=section.block_type,
            layout=section.layout,
            content=copy.deepcopy(content),
            options=copy.deepcopy(section.options),
        )

    # =========================================================================
    # BLOCK-TYPE SHAPING
    # =========================================================================

    def shape_content(self, block_type: BlockType, raw: Any) -> Dict[str, Any]:
        """Bring extracted content into the shape the block's layout expects"""
        if block_type == BlockType.PHOTO_GRID:
            return {"photos": self._entries(raw, "photos", photo_entry)}

        if block_type == BlockType.SIGNATURE_BOX:
            return {"signatures": self._entries(raw, "signatures", signature_entry)}

        if block_type == BlockType.CHECKLIST:
            return {"items": self._checklist_items(raw)}

        if block_type == BlockType.TEXT_SECTION:
            return {"text": self._text(raw)}

        if block_type == BlockType.METRICS_CARDS:
            return {"metrics": self._metrics(raw)}

        if raw is None:
            return {}
        if isinstance(raw, Mapping):
            return dict(raw)
        return {"value": raw}

    @staticmethod
    def _entries(raw: Any, key: str, normalize) -> List[Dict[str, Any]]:
        if isinstance(raw, Mapping):
            # Already shaped by an attachment extractor
            return list(raw.get(key) or [])
        if isinstance(raw, list):
            return [normalize(item) for item in raw if isinstance(item, Mapping)]
        return []

    @staticmethod
    def _checklist_items(raw: Any) -> List[Dict[str, Any]]:
        if isinstance(raw, list):
            return normalize_checklist(raw)
        if isinstance(raw, Mapping):
            if "items" in raw:
                return normalize_checklist(raw["items"])
            labels = raw.get("_labels") or {}
            return [
                {"task": field_label(key, labels), "status": value, "remarks": ""}
                for key, value in raw.items()
                if not str(key).startswith("_")
            ]
        return []

    @staticmethod
    def _text(raw: Any) -> str:
        if raw is None:
            return ""
        if isinstance(raw, Mapping):
            if "text" in raw:
                return "" if raw["text"] is None else str(raw["text"])
            parts = [
                str(value) for key, value in raw.items()
                if not str(key).startswith("_") and value not in (None, "")
            ]
            return "\n\n".join(parts)
        if isinstance(raw, list):
            return "\n".join(str(item) for item in raw)
        return str(raw)

    @staticmethod
    def _metrics(raw: Any) -> List[Dict[str, Any]]:
        if isinstance(raw, list):
            return [dict(m) for m in raw if isinstance(m, Mapping)]
        if isinstance(raw, Mapping):
            if "metrics" in raw:
                return list(raw["metrics"] or [])
            labels = raw.get("_labels") or {}
            return [
                {"label": field_label(key, labels), "value": value, "unit": ""}
                for key, value in raw.items()
                if not str(key).startswith("_")
            ]
        return []
