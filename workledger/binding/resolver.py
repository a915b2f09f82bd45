#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Binding path resolver.

Resolves dotted data paths such as ``data.section_1.entry_date`` or
``attachments[file_type=photo]`` against a business record.

Resolution is total: a missing intermediate key, a type mismatch or a
malformed filter yields ``None``. Nothing in here raises for bad data.

Path grammar::

    path    := segment ("." segment)*
    segment := name | name "[" key "=" value "]" | index

Records store their field map flat (``{"s1.approved": True}``), so at a
mapping the longest run of remaining segments that exists as a key is
taken first, falling back to shorter runs.
"""

import logging
import re
from typing import Any, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# name[key=value], one predicate, equality only
FILTER_SEGMENT = re.compile(r"^(?P<name>[^\[\]=]+)\[(?P<key>[A-Za-z0-9_\-]+)=(?P<value>[^\[\]=!<>,&|]*)\]$")


def split_path(path: str) -> Optional[List[str]]:
    """
    Split a path on dots that sit outside brackets.

    Returns None for unbalanced brackets or empty segments.
    """
    segments = []
    current = []
    depth = 0

    for char in path:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth < 0:
                return None

        if char == "." and depth == 0:
            segments.append("".join(current))
            current = []
        else:
            current.append(char)

    if depth != 0:
        return None

    segments.append("".join(current))
    if any(not s for s in segments):
        return None
    return segments


def parse_filter(segment: str) -> Optional[Tuple[str, str, str]]:
    """(name, key, value) for a filter segment, None when malformed"""
    match = FILTER_SEGMENT.match(segment)
    if not match:
        return None
    return match.group("name"), match.group("key"), match.group("value")


def check_path_syntax(path: str) -> Optional[str]:
    """
    Describe why a path is not supported, or return None when it is.

    Only a single ``key=value`` equality predicate per segment is
    accepted; multiple predicates and inequality operators are rejected.
    """
    if not isinstance(path, str) or not path:
        return "path must be a non-empty string"

    segments = split_path(path)
    if segments is None:
        return f"malformed path '{path}'"

    for segment in segments:
        if "[" not in segment and "]" not in segment:
            continue
        if segment.count("[") > 1 or re.search(r"[,&|]", segment):
            return f"multiple filter predicates are not supported in '{segment}'"
        if re.search(r"!=|<|>", segment):
            return f"only equality filters are supported in '{segment}'"
        if parse_filter(segment) is None:
            return f"malformed filter '{segment}' (expected name[key=value])"

    return None


def filter_text(value: Any) -> str:
    """String form used when comparing against a filter value"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _tree_of(record: Any) -> Any:
    as_tree = getattr(record, "as_tree", None)
    if callable(as_tree):
        return as_tree()
    return record


def _walk(node: Any, segments: List[str], path: str) -> Any:
    if not segments:
        return node
    if node is None:
        return None

    head = segments[0]

    if "[" in head:
        parsed = parse_filter(head)
        if parsed is None:
            logger.warning(f"Invalid array filter syntax in '{path}': {head}")
            return None
        name, key, value = parsed
        if not isinstance(node, Mapping):
            return None
        items = node.get(name)
        if not isinstance(items, list):
            return None
        matched = [
            item for item in items
            if isinstance(item, Mapping) and key in item and filter_text(item[key]) == value
        ]
        return _walk(matched, segments[1:], path)

    if isinstance(node, Mapping):
        # Longest dotted run first so flat keys win over nesting
        for end in range(len(segments), 0, -1):
            run = segments[:end]
            if any("[" in s for s in run):
                continue
            key = ".".join(run)
            if key in node:
                result = _walk(node[key], segments[end:], path)
                if result is not None or end == len(segments):
                    return result
        return None

    if isinstance(node, list) and head.isdigit():
        index = int(head)
        if index < len(node):
            return _walk(node[index], segments[1:], path)

    return None


def resolve(record: Any, path: Optional[str]) -> Any:
    """
    Resolve a data path against a record.

    Args:
        record: BusinessRecord (anything with ``as_tree()``) or a mapping
        path: Dotted path, optionally with ``name[key=value]`` filters

    Returns:
        The value found, or None
    """
    if not path:
        return None

    segments = split_path(path)
    if segments is None:
        logger.warning(f"Malformed binding path: {path}")
        return None

    value = _walk(_tree_of(record), segments, path)
    if value is None:
        logger.debug(f"Binding path resolved to nothing: {path}")
    return value
