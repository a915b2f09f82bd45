#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Binding extractors.

One extractor per BindingSpec variant. Each takes a BusinessRecord and
returns raw section content; block-type shaping happens in the builder.

Records keep their field map flat::

    {"section_1_dates.entry_date": "2026-02-05", "section_2_text.simple_text": "TEST"}

so section extraction is prefix matching on keys, not tree walking.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from workledger.contracts.business_record import BusinessRecord
from workledger.contracts.layout_schema import (
    BindingSpec,
    SourcePath,
    TemplateSection,
    Metrics,
    AutoExtractAll,
    AttachmentFilter,
    StaticContent,
    FileType,
)
from .resolver import resolve

logger = logging.getLogger(__name__)

# Data keys with their own block types
DEDICATED_KEY_MARKERS = ("photo", "signature")


def extract(binding: BindingSpec, record: BusinessRecord, static_content: Optional[Dict] = None) -> Any:
    """
    Run the extractor for a binding variant.

    Returns a dict for most variants; SourcePath may yield any value
    found at the path (list, scalar or None).
    """
    if isinstance(binding, AutoExtractAll):
        return extract_all_fields(record)
    if isinstance(binding, TemplateSection):
        return extract_template_section(record, binding)
    if isinstance(binding, SourcePath):
        return extract_path(record, binding.source)
    if isinstance(binding, Metrics):
        return {"metrics": extract_metrics(record, binding)}
    if isinstance(binding, AttachmentFilter):
        if binding.file_type == FileType.SIGNATURE:
            return {"signatures": extract_signatures(record)}
        if binding.file_type == FileType.PHOTO:
            return {"photos": extract_photos(record, binding.field_filter)}
        return {"attachments": [a.to_dict() for a in record.attachments_of_type(binding.file_type.value)]}
    if isinstance(binding, StaticContent):
        return dict(static_content or {})

    raise TypeError(f"Unsupported binding: {type(binding).__name__}")


# =============================================================================
# FIELD EXTRACTION
# =============================================================================

def _is_dedicated(key: str) -> bool:
    lower = key.lower()
    return any(marker in lower for marker in DEDICATED_KEY_MARKERS)


def extract_all_fields(record: BusinessRecord) -> Dict[str, Any]:
    """
    Every scalar value of the data map, keyed by short field name.

    Photo and signature keys are skipped. Top-level entry date, shift and
    technician name are added when the record has them.
    """
    extracted = {}

    for full_key, value in record.data.items():
        if _is_dedicated(full_key):
            continue
        if isinstance(value, list):
            continue
        extracted[full_key.split(".")[-1]] = value

    if record.entry_date:
        extracted["entry_date"] = record.entry_date
    if record.shift:
        extracted["shift"] = record.shift
    if record.creator_name:
        extracted["technician_name"] = record.creator_name

    logger.debug(f"Auto-extracted {len(extracted)} fields (photos/signatures excluded)")
    return extracted


def field_labels(template: Mapping[str, Any], section_id: str) -> Dict[str, str]:
    """field_id -> field_name for one section of a template fields_schema"""
    schema = (template or {}).get("fields_schema") or {}
    for section in schema.get("sections") or []:
        if section.get("section_id") != section_id:
            continue
        return {
            f["field_id"]: f["field_name"]
            for f in section.get("fields") or []
            if f.get("field_id") and f.get("field_name")
        }
    return {}


def extract_template_section(record: BusinessRecord, binding: TemplateSection) -> Dict[str, Any]:
    """Flat keys under ``<template_section>.``, keyed by the remainder"""
    prefix = f"{binding.template_section}."
    extracted = {}

    for full_key, value in record.data.items():
        if not full_key.startswith(prefix) or isinstance(value, list):
            continue
        name = full_key[len(prefix):]
        if binding.fields is not None:
            if name not in binding.fields:
                continue
        elif binding.field and name != binding.field:
            continue
        extracted[name] = value

    if not extracted:
        logger.warning(
            f"No data found for template section '{binding.template_section}'. "
            f"Check the section id matches the template."
        )

    labels = field_labels(record.template, binding.template_section)
    labels = {k: v for k, v in labels.items() if k in extracted}
    if labels:
        extracted["_labels"] = labels

    return extracted


def extract_path(record: BusinessRecord, source: str) -> Any:
    """Whatever the path resolves to"""
    value = resolve(record, source)
    if value is None:
        logger.warning(f"Binding source resolved to nothing: {source}")
    return value


def extract_metrics(record: BusinessRecord, binding: Metrics) -> List[Dict[str, Any]]:
    """One {label, value, unit} per metric, read from flat keys"""
    metrics = []
    for metric in binding.metrics:
        key = f"{metric.template_section}.{metric.field}"
        value = record.data.get(key)
        if value is None:
            logger.warning(f"Metric value missing: {key}")
        metrics.append({"label": metric.label, "value": value, "unit": metric.unit})
    return metrics


# =============================================================================
# ATTACHMENTS
# =============================================================================

def attachment_url(attachment: Mapping[str, Any]) -> Optional[str]:
    """Storage URL, else the public URL"""
    return attachment.get("storage_url") or attachment.get("url")


def photo_entry(attachment: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalise an attachment map into a photo grid entry"""
    metadata = attachment.get("metadata") or {}
    entry = {
        "url": attachment_url(attachment),
        "caption": (
            attachment.get("caption") or metadata.get("caption") or attachment.get("file_name") or ""
        ),
        "timestamp": attachment.get("created_at") or attachment.get("uploaded_at") or "",
        "field_id": attachment.get("field_id"),
    }
    if metadata.get("location"):
        entry["location"] = metadata["location"]
    return entry


def signature_entry(attachment: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalise an attachment map into a signature entry"""
    metadata = attachment.get("metadata") or {}
    return {
        "url": attachment_url(attachment),
        "name": metadata.get("signer_name") or attachment.get("field_id") or "Signature",
        "role": metadata.get("signer_role") or "",
        "date": attachment.get("created_at") or attachment.get("uploaded_at") or "",
        "field_id": attachment.get("field_id"),
    }


def extract_photos(record: BusinessRecord, field_filter: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Photo attachments, optionally narrowed to those whose field_id
    contains ``field_filter`` (case-insensitive), e.g. before/after sets.
    """
    photos = record.attachments_of_type(FileType.PHOTO.value)

    if field_filter:
        needle = field_filter.lower()
        photos = [p for p in photos if p.field_id and needle in p.field_id.lower()]

    logger.debug(
        f"Extracted {len(photos)} photos" + (f" (filtered by: {field_filter})" if field_filter else "")
    )
    return [photo_entry(p.to_dict()) for p in photos]


def extract_signatures(record: BusinessRecord) -> List[Dict[str, Any]]:
    """
    Signature attachments.

    When the record has none typed as signatures, string values of data
    keys containing "signature" are treated as attachment ids and looked
    up in the attachment list.
    """
    signatures = [signature_entry(a.to_dict()) for a in record.attachments_of_type(FileType.SIGNATURE.value)]

    if not signatures:
        for key, value in record.data.items():
            if "signature" not in key.lower() or not isinstance(value, str) or not value:
                continue
            attachment = record.find_attachment(value)
            if attachment is not None:
                signatures.append(signature_entry(attachment.to_dict()))

    logger.debug(f"Extracted {len(signatures)} signatures")
    return signatures


# =============================================================================
# CHECKLISTS
# =============================================================================

def _first_present(item: Mapping[str, Any], keys) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None and value != "":
            return value
    return ""


def normalize_checklist(items: Any) -> List[Dict[str, Any]]:
    """Map varying item shapes onto {task, status, remarks}"""
    if not isinstance(items, list):
        return []

    normalized = []
    for item in items:
        if isinstance(item, Mapping):
            normalized.append({
                "task": _first_present(item, ("task", "label", "item")),
                "status": _first_present(item, ("status", "value", "checked")),
                "remarks": _first_present(item, ("remarks", "notes")),
            })
        else:
            normalized.append({"task": item, "status": "", "remarks": ""})
    return normalized
