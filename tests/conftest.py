"""
Pytest configuration and shared fixtures for WorkLedger report tests.
"""
import base64
import copy
import sys
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pytest
from PIL import Image

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import Settings
from workledger.contracts import ImageEmbedError, PageConfig, BlockType, RenderBlock, RenderTree, RenderMetadata
from workledger.layout.executor import LayoutEngine
from workledger.layout.renderer.base_canvas import BaseCanvas


# ============================================================================
# Fixtures: Configuration & Settings
# ============================================================================

@pytest.fixture(scope="session")
def test_settings():
    """Settings without the report banner so block layout starts at the top margin."""
    return Settings(
        include_report_header=False,
        include_page_numbers=True,
        number_decimals=2,
    )


@pytest.fixture
def engine(test_settings):
    """Layout engine using test settings."""
    return LayoutEngine(test_settings)


# ============================================================================
# Recording canvas
# ============================================================================

@dataclass
class DrawOp:
    """One recorded draw call."""
    kind: str
    page: int
    args: Dict[str, Any] = field(default_factory=dict)


class RecordingCanvas(BaseCanvas):
    """
    Canvas that records every primitive with the page it landed on.

    Image sources listed in `failing` (or starting with "fail:") raise
    ImageEmbedError, like a broken download would.
    """

    def __init__(self, page: Optional[PageConfig] = None, failing: Optional[Set[str]] = None):
        super().__init__(page or PageConfig())
        self.failing = set(failing or [])
        self.ops: List[DrawOp] = []

    def _record(self, kind: str, **args) -> None:
        self.ops.append(DrawOp(kind=kind, page=self.page_index, args=args))

    def _text(self, text: str, x: float, y: float) -> None:
        self._record(
            "text", text=text, x=x, y=y, size=self.font_size,
            bold=self.bold, italic=self.italic, color=self.text_color,
        )

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._record("line", x1=x1, y1=y1, x2=x2, y2=y2)

    def draw_rect(self, x: float, y: float, w: float, h: float, fill: bool = False, stroke: bool = True) -> None:
        self._record("rect", x=x, y=y, w=w, h=h, fill=fill, stroke=stroke, fill_color=self.fill_color)

    async def draw_image(self, source: str, x: float, y: float, w: float, h: float, fit: str = "fill") -> None:
        if not source or source in self.failing or source.startswith("fail:"):
            raise ImageEmbedError(str(source), "fetch failed")
        self._record("image", source=source, x=x, y=y, w=w, h=h, fit=fit)

    def _on_new_page(self) -> None:
        self._record("page_break")

    def finalize(self):
        return self.ops

    # Query helpers

    def of_kind(self, kind: str) -> List[DrawOp]:
        return [op for op in self.ops if op.kind == kind]

    def texts(self) -> List[str]:
        return [op.args["text"] for op in self.of_kind("text")]

    def text_op(self, text: str) -> Optional[DrawOp]:
        for op in self.of_kind("text"):
            if op.args["text"] == text:
                return op
        return None


@pytest.fixture
def canvas():
    """A4 portrait recording canvas."""
    return RecordingCanvas()


@pytest.fixture
def make_canvas():
    """Factory for recording canvases with a page config or failing sources."""
    def _make(page: Optional[PageConfig] = None, failing: Optional[Set[str]] = None) -> RecordingCanvas:
        return RecordingCanvas(page, failing)
    return _make


@pytest.fixture
def make_tree():
    """Factory for a render tree around a list of blocks."""
    def _make(*blocks: RenderBlock, page: Optional[PageConfig] = None) -> RenderTree:
        return RenderTree(
            page=page or PageConfig(),
            metadata=RenderMetadata(generated_at="2026-02-05T09:00:00+00:00", entry_id="entry-1"),
            blocks=list(blocks),
        )
    return _make


@pytest.fixture
def make_block():
    """Factory for render blocks; keyword arguments become options."""
    def _make(block_type: BlockType, content: Dict[str, Any], block_id: str = "b1",
              layout: str = "single_column", **options) -> RenderBlock:
        return RenderBlock(block_id=block_id, type=block_type, layout=layout, content=content, options=options)
    return _make


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

SAMPLE_SCHEMA = {
    "version": 1,
    "page": {
        "size": "A4",
        "orientation": "portrait",
        "margins": {"top": 20, "bottom": 20, "left": 20, "right": 20},
    },
    "sections": [
        {
            "section_id": "header",
            "block_type": "header",
            "content": {"title": "Daily Maintenance Report", "subtitle": "Chiller Plant"},
            "binding_rules": {},
            "options": {},
        },
        {
            "section_id": "equipment",
            "block_type": "detail_entry",
            "binding_rules": {"template_section": "s1"},
            "options": {"title": "Equipment", "layout": "two_column"},
        },
        {
            "section_id": "notes",
            "block_type": "text_section",
            "binding_rules": {"source": "data.s2.notes"},
            "options": {"title": "Observations"},
        },
        {
            "section_id": "tasks",
            "block_type": "checklist",
            "binding_rules": {"source": "data.s3.items"},
            "options": {"title": "Tasks"},
        },
        {
            "section_id": "readings",
            "block_type": "metrics_cards",
            "binding_rules": {
                "metrics": [
                    {"template_section": "s4", "field": "runtime_hours", "label": "Runtime", "unit": "h"},
                    {"template_section": "s4", "field": "pressure", "label": "Pressure", "unit": "bar"},
                ]
            },
            "options": {"title": "Readings"},
        },
        {
            "section_id": "approval",
            "block_type": "detail_entry",
            "binding_rules": {"source": "data.s5.approved_by"},
            "options": {"title": "Approval"},
            "show_if": {"field": "data.s5.approved", "equals": True},
        },
        {
            "section_id": "photos",
            "block_type": "photo_grid",
            "binding_rules": {},
            "options": {"columns": 2},
        },
        {
            "section_id": "signatures",
            "block_type": "signature_box",
            "binding_rules": {},
            "options": {"title": "Sign-off"},
        },
    ],
}

SAMPLE_RECORD = {
    "id": "entry-001",
    "entry_date": "2026-02-05",
    "shift": "Morning",
    "status": "submitted",
    "created_by": "user-7",
    "created_by_profile": {"full_name": "Aina Rahman", "role": "technician"},
    "contract": {
        "contract_number": "PMC-2026-014",
        "contract_name": "Chiller Maintenance",
        "contract_category": "PMC",
        "project": {"client_name": "Menara Holdings", "site_address": "Jalan Ampang"},
    },
    "template": {
        "template_name": "Chiller PMC Checklist",
        "contract_category": "PMC",
        "fields_schema": {
            "sections": [
                {
                    "section_id": "s1",
                    "fields": [
                        {"field_id": "equipment", "field_name": "Equipment Tag"},
                        {"field_id": "count", "field_name": "Units Serviced"},
                    ],
                }
            ]
        },
    },
    "data": {
        "s1.equipment": "Pump A",
        "s1.count": 3,
        "s1.inlet_temp": 6.5,
        "s2.notes": "Replaced worn gasket on the inlet flange. No leaks after restart.",
        "s3.items": [
            {"label": "Check oil level", "value": True, "notes": "Topped up"},
            {"task": "Clean strainer", "status": "done"},
            {"item": "Inspect belts", "checked": False},
        ],
        "s4.runtime_hours": 12,
        "s4.pressure": 4.25,
        "s5.approved": False,
        "s5.approved_by": "Supervisor",
    },
    "attachments": [
        {
            "id": "att-1",
            "file_type": "photo",
            "storage_url": "https://files.example.com/before.jpg",
            "field_id": "photo_before",
            "file_name": "before.jpg",
            "metadata": {"caption": "Before service"},
            "created_at": "2026-02-05T08:15:00Z",
        },
        {
            "id": "att-2",
            "file_type": "photo",
            "url": "https://files.example.com/after.jpg",
            "field_id": "photo_after",
            "file_name": "after.jpg",
            "created_at": "2026-02-05T10:40:00Z",
        },
        {
            "id": "att-3",
            "file_type": "signature",
            "storage_url": "https://files.example.com/sig.png",
            "field_id": "technician_signature",
            "metadata": {"signer_name": "Aina Rahman", "signer_role": "Technician"},
            "created_at": "2026-02-05T11:00:00Z",
        },
    ],
}


@pytest.fixture
def sample_schema_dict():
    """Layout schema touching every block type."""
    return copy.deepcopy(SAMPLE_SCHEMA)


@pytest.fixture
def sample_record():
    """Work entry with template labels, photos and a signature."""
    return copy.deepcopy(SAMPLE_RECORD)


@pytest.fixture(scope="session")
def png_bytes():
    """A tiny real PNG."""
    buffer = BytesIO()
    Image.new("RGB", (8, 6), (30, 120, 200)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(scope="session")
def png_data_uri(png_bytes):
    """The tiny PNG as a data URI."""
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


# ============================================================================
# Session-level Setup
# ============================================================================

def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: end-to-end pipeline tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # Auto-add 'unit' marker to test files in tests/unit/
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        # Auto-add 'integration' marker to test files in tests/integration/
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
