#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Business Record Contract

The work entry being rendered, as produced by the persistence layer:
a flat dotted-key data map, an attachment list and a handful of
top-level fields (date, shift, status, creator, contract, template).

The rendering core only reads records. `as_tree()` exposes the record as
the JSON-shaped mapping that binding paths walk.

Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import BaseContract


@dataclass(frozen=True)
class Attachment:
    """A stored file linked to a work entry"""
    id: str
    file_type: str
    storage_url: Optional[str] = None
    url: Optional[str] = None
    field_id: Optional[str] = None
    caption: Optional[str] = None
    file_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "file_type": self.file_type,
            "storage_url": self.storage_url,
            "url": self.url,
            "field_id": self.field_id,
            "caption": self.caption,
            "file_name": self.file_name,
            "metadata": dict(self.metadata),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Attachment':
        return cls(
            id=str(data.get("id", "")),
            file_type=data.get("file_type", "document"),
            storage_url=data.get("storage_url"),
            url=data.get("url"),
            field_id=data.get("field_id"),
            caption=data.get("caption"),
            file_name=data.get("file_name"),
            metadata=dict(data.get("metadata") or {}),
            created_at=data.get("created_at") or data.get("uploaded_at"),
        )


@dataclass(frozen=True)
class BusinessRecord(BaseContract):
    """A work entry with its data map and attachments"""
    id: Optional[str] = None
    entry_date: Optional[str] = None
    shift: Optional[str] = None
    status: Optional[str] = None
    created_by: Optional[str] = None
    created_by_profile: Dict[str, Any] = field(default_factory=dict)
    contract: Dict[str, Any] = field(default_factory=dict)
    template: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)
    attachments: List[Attachment] = field(default_factory=list)

    @property
    def creator_name(self) -> Optional[str]:
        return self.created_by_profile.get("full_name")

    def attachments_of_type(self, file_type: str) -> List[Attachment]:
        return [a for a in self.attachments if a.file_type == file_type]

    def find_attachment(self, attachment_id: str) -> Optional[Attachment]:
        if not attachment_id:
            return None
        for attachment in self.attachments:
            if attachment.id == attachment_id:
                return attachment
        return None

    def as_tree(self) -> Dict[str, Any]:
        """JSON-shaped view walked by binding paths"""
        return self.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entry_date": self.entry_date,
            "shift": self.shift,
            "status": self.status,
            "created_by": self.created_by,
            "created_by_profile": dict(self.created_by_profile),
            "contract": dict(self.contract),
            "template": dict(self.template),
            "data": dict(self.data),
            "attachments": [a.to_dict() for a in self.attachments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BusinessRecord':
        # Older rows store the field map under entry_data
        entry_data = data.get("data")
        if entry_data is None:
            entry_data = data.get("entry_data") or {}

        return cls(
            id=data.get("id"),
            entry_date=data.get("entry_date"),
            shift=data.get("shift"),
            status=data.get("status"),
            created_by=data.get("created_by"),
            created_by_profile=dict(data.get("created_by_profile") or {}),
            contract=dict(data.get("contract") or {}),
            template=dict(data.get("template") or {}),
            data=dict(entry_data),
            attachments=[Attachment.from_dict(a) for a in data.get("attachments") or []],
        )
