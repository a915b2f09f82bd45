#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Schema Validation Layer

Structural and enumerated-value checks for raw layout schemas, run at
authoring time (reject bad saves) and again before rendering (reject
malformed stored schemas).

Version: 1.0.0
"""

from numbers import Number
from typing import Any, List, Mapping
import logging

from config.constants import SUPPORTED_SCHEMA_VERSIONS
from workledger.binding.resolver import check_path_syntax
from .base import SchemaValidationError
from .layout_schema import BlockType, PageSize, Orientation

logger = logging.getLogger(__name__)

PAGE_SIZES = [s.value for s in PageSize]
ORIENTATIONS = [o.value for o in Orientation]
BLOCK_TYPES = [b.value for b in BlockType]
BINDING_MODES = ["auto_extract_all"]


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value != ""


class SchemaValidator:
    """
    Validates raw layout schema maps.

    Usage:
        validator = SchemaValidator()

        # Collect every problem
        errors = validator.validate(raw_schema)

        # Or fail with one aggregate error
        validator.validate_or_raise(raw_schema)
    """

    def validate(self, raw: Any) -> List[str]:
        """
        Validate a raw schema map. Never mutates its input.

        Args:
            raw: Decoded schema JSON

        Returns:
            List of validation errors (empty when valid)
        """
        if not isinstance(raw, Mapping):
            return ["schema must be an object"]

        errors = []
        errors.extend(self._validate_page(raw.get("page")))

        if "version" in raw and raw["version"] not in SUPPORTED_SCHEMA_VERSIONS:
            errors.append(
                f"version: unsupported schema version {raw['version']!r} "
                f"(supported: {SUPPORTED_SCHEMA_VERSIONS})"
            )

        sections = raw.get("sections")
        if sections is None:
            errors.append("sections: missing")
        elif not isinstance(sections, list):
            errors.append("sections: must be a list")
        else:
            seen_ids = set()
            for i, section in enumerate(sections):
                errors.extend(self._validate_section(i, section, seen_ids))

        if errors:
            logger.warning(f"Layout schema validation failed: {len(errors)} error(s)")
        else:
            logger.debug(f"Layout schema validated: {len(sections)} sections")

        return errors

    def validate_or_raise(self, raw: Any) -> None:
        """
        Validate and raise one aggregate error listing every violation.

        Raises:
            SchemaValidationError: If validation fails
        """
        errors = self.validate(raw)

        if errors:
            raise SchemaValidationError(errors)

    def _validate_page(self, page: Any) -> List[str]:
        if page is None:
            return ["page: missing"]
        if not isinstance(page, Mapping):
            return ["page: must be an object"]

        errors = []
        if page.get("size") is not None and page["size"] not in PAGE_SIZES:
            errors.append(f"page.size: '{page['size']}' is not one of {PAGE_SIZES}")
        if page.get("orientation") is not None and page["orientation"] not in ORIENTATIONS:
            errors.append(f"page.orientation: '{page['orientation']}' is not one of {ORIENTATIONS}")

        margins = page.get("margins")
        if margins is not None:
            if not isinstance(margins, Mapping):
                errors.append("page.margins: must be an object")
            else:
                for side, value in margins.items():
                    if isinstance(value, bool) or not isinstance(value, Number):
                        errors.append(f"page.margins.{side}: must be a number")
        return errors

    def _validate_section(self, index: int, section: Any, seen_ids: set) -> List[str]:
        prefix = f"sections[{index}]"
        if not isinstance(section, Mapping):
            return [f"{prefix}: must be an object"]

        errors = []

        section_id = section.get("section_id")
        if section_id is None or section_id == "":
            errors.append(f"{prefix}: section_id missing")
        elif not _is_text(section_id):
            errors.append(f"{prefix}: section_id must be a non-empty string")
        elif section_id in seen_ids:
            errors.append(f"{prefix}: duplicate section_id '{section_id}'")
        else:
            seen_ids.add(section_id)

        block_type = section.get("block_type")
        if not block_type:
            errors.append(f"{prefix}: block_type missing")
        elif block_type not in BLOCK_TYPES:
            errors.append(f"{prefix}: block_type '{block_type}' is not one of {BLOCK_TYPES}")

        rules = section.get("binding_rules")
        if rules is not None and not isinstance(rules, Mapping):
            errors.append(f"{prefix}: binding_rules must be an object")
        elif rules:
            errors.extend(self._validate_binding_rules(f"{prefix}: binding_rules", rules))

        show_if = section.get("show_if")
        if show_if is not None:
            if not isinstance(show_if, Mapping):
                errors.append(f"{prefix}: show_if must be an object")
            else:
                errors.extend(self._validate_show_if(f"{prefix}: show_if", show_if))

        for key in ("options", "content"):
            value = section.get(key)
            if value is not None and not isinstance(value, Mapping):
                errors.append(f"{prefix}: {key} must be an object")

        return errors

    def _validate_binding_rules(self, where: str, rules: Mapping) -> List[str]:
        errors = []

        if rules.get("source") is not None:
            problem = check_path_syntax(rules["source"])
            if problem:
                errors.append(f"{where}.source: {problem}")

        mode = rules.get("mode")
        if mode is not None and mode not in BINDING_MODES:
            errors.append(f"{where}.mode: {mode!r} is not one of {BINDING_MODES}")

        for key in ("template_section", "field", "filter_by_field"):
            value = rules.get(key)
            if value is not None and not _is_text(value):
                errors.append(f"{where}.{key}: must be a non-empty string")

        fields = rules.get("fields")
        if fields is not None and not (isinstance(fields, list) and all(_is_text(f) for f in fields)):
            errors.append(f"{where}.fields: must be a list of non-empty strings")

        metrics = rules.get("metrics")
        if metrics is not None:
            if not isinstance(metrics, list):
                errors.append(f"{where}.metrics: must be a list")
            else:
                for i, metric in enumerate(metrics):
                    at = f"{where}.metrics[{i}]"
                    if not isinstance(metric, Mapping):
                        errors.append(f"{at}: must be an object")
                        continue
                    for key in ("template_section", "field"):
                        if not _is_text(metric.get(key)):
                            errors.append(f"{at}.{key}: must be a non-empty string")

        return errors

    def _validate_show_if(self, where: str, show_if: Mapping) -> List[str]:
        errors = []

        if show_if.get("field") is not None:
            problem = check_path_syntax(show_if["field"])
            if problem:
                errors.append(f"{where}.field: {problem}")

        for key in ("exists", "has_items"):
            if key in show_if and not isinstance(show_if[key], bool):
                errors.append(f"{where}.{key}: must be true or false")

        if "contains" in show_if and not isinstance(show_if["contains"], Mapping):
            errors.append(f"{where}.contains: must be an object")

        return errors
