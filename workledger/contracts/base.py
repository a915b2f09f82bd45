#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base Contract Classes

Defines the foundation for the report rendering contracts and the
error taxonomy shared by every stage of the pipeline.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
import json
import hashlib


class ContractError(Exception):
    """Base error for contract violations"""
    pass


class ContractValidationError(ContractError):
    """Raised when contract validation fails"""
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Contract validation failed: {errors}")


class SchemaValidationError(ContractValidationError):
    """Raised when a layout schema is structurally invalid"""
    def __init__(self, errors: List[str]):
        self.errors = errors
        listing = "\n".join(f"  - {e}" for e in errors)
        ContractError.__init__(
            self, f"Layout schema is invalid ({len(errors)} error(s)):\n{listing}"
        )


class LayoutError(ContractError):
    """Raised when a render tree cannot be laid out (caller contract violation)"""
    pass


class LayoutImportError(ContractError):
    """Raised when a layout export file cannot be imported"""
    pass


class ImageEmbedError(Exception):
    """Raised by a canvas when an image cannot be fetched or decoded"""
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot embed image {source!r}: {reason}")


def calculate_checksum(data: Dict[str, Any]) -> str:
    """Stable checksum of JSON-serializable contract data"""
    json_str = json.dumps(data, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(json_str.encode()).hexdigest()[:16]


class BaseContract(ABC):
    """
    Abstract base class for serializable contracts.

    All contracts must:
    1. Be serializable to JSON
    2. Be deserializable from JSON
    """

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Convert contract to dictionary"""
        pass

    def to_json(self, indent: int = 2) -> str:
        """Convert contract to JSON string"""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, default=str)

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseContract':
        """Create contract from dictionary"""
        pass

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseContract':
        """Create contract from JSON string"""
        data = json.loads(json_str)
        return cls.from_dict(data)

    def checksum(self) -> str:
        """Checksum of the serialized contract"""
        return calculate_checksum(self.to_dict())
