#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Section visibility conditions.
"""

import logging
from typing import Any, Mapping

from workledger.contracts.layout_schema import (
    Condition,
    AlwaysVisible,
    EqualsCondition,
    ExistsCondition,
    ContainsCondition,
    HasItemsCondition,
)
from .resolver import resolve

logger = logging.getLogger(__name__)


def _strict_equals(left: Any, right: Any) -> bool:
    # True must not equal 1
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    return left == right


def _matches(item: Any, pairs: Mapping[str, Any]) -> bool:
    if not isinstance(item, Mapping):
        return False
    return all(key in item and _strict_equals(item[key], expected) for key, expected in pairs.items())


def evaluate(condition: Condition, record: Any) -> bool:
    """
    Decide whether a section is visible for a record.

    Sections are visible unless a condition explicitly hides them.
    """
    if isinstance(condition, AlwaysVisible):
        return True

    value = resolve(record, condition.field)

    if isinstance(condition, EqualsCondition):
        return _strict_equals(value, condition.equals)

    if isinstance(condition, ExistsCondition):
        return (value is not None) == condition.exists

    if isinstance(condition, ContainsCondition):
        if not isinstance(value, list):
            return False
        return any(_matches(item, condition.contains) for item in value)

    if isinstance(condition, HasItemsCondition):
        has_items = isinstance(value, list) and len(value) > 0
        return has_items == condition.has_items

    logger.warning(f"Unknown condition type {type(condition).__name__}, treating as visible")
    return True
