#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Render Tree Contract

Output-format independent representation of a report, positioned
between (schema, record) and a concrete drawing backend.

The tree is a plain value: it holds no reference to the schema or the
record it came from, serializes to JSON and can be laid out any number
of times.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import copy

from .base import BaseContract, LayoutError
from .layout_schema import BlockType, PageConfig


@dataclass(frozen=True)
class RenderMetadata:
    """Record summary used by headers and footers"""
    generated_at: str
    entry_id: Optional[str] = None
    entry_date: Optional[str] = None
    shift: Optional[str] = None
    status: Optional[str] = None
    contract: Dict[str, Any] = field(default_factory=dict)
    template: Dict[str, Any] = field(default_factory=dict)
    creator: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "generated_at": self.generated_at,
            "entry_id": self.entry_id,
            "entry_date": self.entry_date,
            "shift": self.shift,
            "status": self.status,
            "contract": dict(self.contract),
            "template": dict(self.template),
            "creator": dict(self.creator),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'RenderMetadata':
        return cls(
            generated_at=data.get("generated_at", ""),
            entry_id=data.get("entry_id"),
            entry_date=data.get("entry_date"),
            shift=data.get("shift"),
            status=data.get("status"),
            contract=dict(data.get("contract") or {}),
            template=dict(data.get("template") or {}),
            creator=dict(data.get("creator") or {}),
        )


@dataclass(frozen=True)
class RenderBlock:
    """One renderable unit, produced from one visible section"""
    block_id: str
    type: BlockType
    layout: str = "single_column"
    content: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)

    def option(self, *names: str, default: Any = None) -> Any:
        """First option present under any of the given names"""
        for name in names:
            if name in self.options and self.options[name] is not None:
                return self.options[name]
        return default

    def to_dict(self) -> Dict:
        return {
            "block_id": self.block_id,
            "type": self.type.value,
            "layout": self.layout,
            "content": copy.deepcopy(self.content),
            "options": copy.deepcopy(self.options),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'RenderBlock':
        try:
            block_type = BlockType(data["type"])
        except (KeyError, ValueError) as e:
            raise LayoutError(f"Render block {data.get('block_id')!r} has unknown type {data.get('type')!r}") from e

        return cls(
            block_id=data["block_id"],
            type=block_type,
            layout=data.get("layout") or "single_column",
            content=copy.deepcopy(data.get("content") or {}),
            options=copy.deepcopy(data.get("options") or {}),
        )


@dataclass(frozen=True)
class RenderTree(BaseContract):
    """
    Intermediate representation consumed by the layout engine.

    `blocks` follows schema section order; sections hidden by their
    condition are absent rather than present with empty content.
    """
    page: PageConfig
    metadata: RenderMetadata
    blocks: List[RenderBlock] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page.to_dict(),
            "metadata": self.metadata.to_dict(),
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderTree':
        return cls(
            page=PageConfig.from_dict(data.get("page")),
            metadata=RenderMetadata.from_dict(data.get("metadata") or {}),
            blocks=[RenderBlock.from_dict(b) for b in data.get("blocks", [])],
        )

    def reproducible_dict(self) -> Dict[str, Any]:
        """to_dict() without the generation timestamp"""
        data = self.to_dict()
        data["metadata"].pop("generated_at", None)
        return data

    def get_block(self, block_id: str) -> Optional[RenderBlock]:
        for block in self.blocks:
            if block.block_id == block_id:
                return block
        return None

    def get_blocks_by_type(self, block_type: BlockType) -> List[RenderBlock]:
        return [b for b in self.blocks if b.type == block_type]
