#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout Export / Import

Shares layouts between organisations as JSON files. A single layout is
wrapped in an envelope::

    {
      "version": "1.0",
      "exported_at": "2026-02-12T09:30:00+00:00",
      "layout": {
        "layout_name": ..., "layout_description": ...,
        "layout_schema": {...}, "compatible_template_types": [...]
      }
    }

Bundles carry a ``layouts`` list instead of ``layout``. Imported schemas
are migrated to the current schema version and validated.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union
import copy
import json
import logging
import re

from config.constants import SCHEMA_VERSION, EXPORT_FORMAT_VERSION
from .base import LayoutImportError, SchemaValidationError
from .layout_schema import LayoutSchema

logger = logging.getLogger(__name__)


@dataclass
class LayoutDocument:
    """A named, shareable layout"""
    layout_name: str
    schema: LayoutSchema
    layout_description: str = ""
    compatible_template_types: List[str] = field(default_factory=list)
    exported_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layout_name": self.layout_name,
            "layout_description": self.layout_description,
            "layout_schema": self.schema.to_dict(),
            "compatible_template_types": list(self.compatible_template_types),
        }


def migrate_schema(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Upgrade a stored schema map to the current version.

    Legacy sections named their block type ``type``; unversioned schemas
    predate the version field. Returns a new map, the input is untouched.
    """
    migrated = copy.deepcopy(raw)
    version = migrated.get("version")

    sections = migrated.get("sections")
    if isinstance(sections, list):
        for section in sections:
            if isinstance(section, dict) and "block_type" not in section and "type" in section:
                section["block_type"] = section.pop("type")

    if version is None:
        migrated["version"] = SCHEMA_VERSION
        logger.info(f"Migrated unversioned layout schema to version {SCHEMA_VERSION}")

    return migrated


def sanitize_filename(name: str) -> str:
    """Filesystem-safe stem for an exported layout"""
    stem = re.sub(r"[^a-z0-9]+", "_", (name or "").lower()).strip("_")
    return stem[:50] or "layout"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def export_layout(
    layout_name: str,
    schema: Union[LayoutSchema, Dict[str, Any]],
    layout_description: str = "",
    compatible_template_types: Optional[List[str]] = None,
    exported_at: Optional[str] = None,
) -> str:
    """
    Serialize one layout into the export envelope.

    Returns:
        JSON text, indented for humans
    """
    schema_dict = schema.to_dict() if isinstance(schema, LayoutSchema) else copy.deepcopy(schema)
    envelope = {
        "version": EXPORT_FORMAT_VERSION,
        "exported_at": exported_at or _now(),
        "layout": {
            "layout_name": layout_name,
            "layout_description": layout_description,
            "layout_schema": schema_dict,
            "compatible_template_types": list(compatible_template_types or []),
        },
    }
    logger.info(f"Exported layout '{layout_name}'")
    return json.dumps(envelope, indent=2, ensure_ascii=False)


def _load_json(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise LayoutImportError(f"Invalid layout file: not JSON ({e})") from e
    if not isinstance(data, dict):
        raise LayoutImportError("Invalid layout file: expected a JSON object")
    return data


def _build_document(layout: Any, exported_at: Optional[str]) -> LayoutDocument:
    if not isinstance(layout, dict):
        raise LayoutImportError("Invalid layout file: missing layout data")
    raw_schema = layout.get("layout_schema")
    if not isinstance(raw_schema, dict):
        raise LayoutImportError("Invalid layout file: missing layout_schema")

    try:
        schema = LayoutSchema.from_dict(migrate_schema(raw_schema))
    except SchemaValidationError as e:
        raise LayoutImportError(str(e)) from e

    return LayoutDocument(
        layout_name=layout.get("layout_name") or "Imported layout",
        schema=schema,
        layout_description=layout.get("layout_description") or "",
        compatible_template_types=list(layout.get("compatible_template_types") or []),
        exported_at=exported_at,
    )


def import_layout(text: str) -> LayoutDocument:
    """
    Parse an exported layout.

    Raises:
        LayoutImportError: Malformed JSON, missing envelope fields or an
            invalid schema (the message lists every schema error)
    """
    data = _load_json(text)
    document = _build_document(data.get("layout"), data.get("exported_at"))
    logger.info(f"Imported layout '{document.layout_name}'")
    return document


def export_layout_bundle(documents: List[LayoutDocument], exported_at: Optional[str] = None) -> str:
    """Serialize several layouts into one bundle"""
    bundle = {
        "version": EXPORT_FORMAT_VERSION,
        "exported_at": exported_at or _now(),
        "count": len(documents),
        "layouts": [d.to_dict() for d in documents],
    }
    logger.info(f"Exported {len(documents)} layouts")
    return json.dumps(bundle, indent=2, ensure_ascii=False)


def import_layout_bundle(text: str) -> Tuple[List[LayoutDocument], List[str]]:
    """
    Parse a layout bundle.

    Invalid entries are skipped and reported rather than failing the
    whole bundle.

    Returns:
        (valid layouts, per-layout error messages)
    """
    data = _load_json(text)
    layouts = data.get("layouts")
    if not isinstance(layouts, list):
        raise LayoutImportError("Invalid bundle file: missing layouts array")

    documents = []
    errors = []
    for i, layout in enumerate(layouts, 1):
        try:
            documents.append(_build_document(layout, data.get("exported_at")))
        except LayoutImportError as e:
            errors.append(f"Layout {i}: {e}")

    logger.info(f"Imported {len(documents)}/{len(layouts)} layouts")
    return documents, errors
