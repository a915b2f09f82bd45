"""
Unit tests for workledger/layout/builder.py - RenderTreeBuilder
"""
import copy

import pytest

from config.settings import Settings
from workledger.binding import extract_signatures
from workledger.contracts import BlockType, BusinessRecord, LayoutSchema, RenderTree, SchemaValidationError
from workledger.layout.builder import RenderTreeBuilder

GENERATED_AT = "2026-02-05T12:00:00+00:00"


@pytest.fixture
def builder(test_settings):
    return RenderTreeBuilder(test_settings)


def single_section(section):
    return {"page": {}, "sections": [section]}


class TestScenarios:
    """Build behaviour on small hand-written inputs."""

    def test_auto_extract_all(self, builder):
        schema = single_section({
            "section_id": "details",
            "block_type": "detail_entry",
            "binding_rules": {"mode": "auto_extract_all"},
        })
        record = {"data": {"s1.name": "Pump A", "s1.count": 3}, "entry_date": "2026-02-01"}

        tree = builder.build(schema, record)

        assert len(tree.blocks) == 1
        assert tree.blocks[0].content == {"name": "Pump A", "count": 3, "entry_date": "2026-02-01"}

    def test_hidden_section_is_omitted(self, builder):
        schema = {
            "page": {},
            "sections": [
                {"section_id": "intro", "block_type": "header", "content": {"title": "T"}},
                {
                    "section_id": "approval",
                    "block_type": "detail_entry",
                    "binding_rules": {"mode": "auto_extract_all"},
                    "show_if": {"field": "data.s1.approved", "equals": True},
                },
            ],
        }
        record = {"data": {"s1.approved": False}}

        tree = builder.build(schema, record)

        assert [b.block_id for b in tree.blocks] == ["intro"]
        assert tree.get_block("approval") is None

    def test_visible_when_condition_holds(self, builder):
        schema = single_section({
            "section_id": "approval",
            "block_type": "detail_entry",
            "binding_rules": {"mode": "auto_extract_all"},
            "show_if": {"field": "data.s1.approved", "equals": True},
        })
        tree = builder.build(schema, {"data": {"s1.approved": True}})
        assert tree.get_block("approval") is not None

    def test_photo_grid_from_filtered_attachments(self, builder):
        schema = single_section({
            "section_id": "photos",
            "block_type": "photo_grid",
            "binding_rules": {"source": "attachments[file_type=photo]"},
        })
        record = {
            "attachments": [
                {"id": "1", "file_type": "photo", "storage_url": "u1"},
                {"id": "2", "file_type": "signature", "storage_url": "u2"},
            ]
        }

        photos = builder.build(schema, record).blocks[0].content["photos"]

        assert len(photos) == 1
        assert photos[0]["url"] == "u1"


class TestDeterminism:
    """Identical inputs give identical trees."""

    def test_same_timestamp_same_json(self, builder, sample_schema_dict, sample_record):
        first = builder.build(sample_schema_dict, sample_record, generated_at=GENERATED_AT)
        second = builder.build(sample_schema_dict, sample_record, generated_at=GENERATED_AT)
        assert first.to_json() == second.to_json()
        assert first.checksum() == second.checksum()

    def test_only_timestamp_differs(self, builder, sample_schema_dict, sample_record):
        first = builder.build(sample_schema_dict, sample_record)
        second = builder.build(sample_schema_dict, sample_record, generated_at="1999-01-01T00:00:00+00:00")
        assert first.reproducible_dict() == second.reproducible_dict()

    def test_inputs_not_mutated(self, builder, sample_schema_dict, sample_record):
        schema_before = copy.deepcopy(sample_schema_dict)
        record_before = copy.deepcopy(sample_record)
        builder.build(sample_schema_dict, sample_record)
        assert sample_schema_dict == schema_before
        assert sample_record == record_before

    def test_tree_json_round_trip(self, builder, sample_schema_dict, sample_record):
        tree = builder.build(sample_schema_dict, sample_record, generated_at=GENERATED_AT)
        assert RenderTree.from_json(tree.to_json()).to_dict() == tree.to_dict()


class TestSampleReport:
    """Full sample schema against the sample record."""

    @pytest.fixture
    def tree(self, builder, sample_schema_dict, sample_record):
        return builder.build(sample_schema_dict, sample_record, generated_at=GENERATED_AT)

    def test_block_order_and_omission(self, tree):
        assert [b.block_id for b in tree.blocks] == [
            "header", "equipment", "notes", "tasks", "readings", "photos", "signatures",
        ]

    def test_page_config(self, tree):
        assert tree.page.size.value == "A4"
        assert tree.page.margins.left == 20

    def test_metadata(self, tree):
        meta = tree.metadata
        assert meta.generated_at == GENERATED_AT
        assert meta.entry_id == "entry-001"
        assert meta.contract == {
            "number": "PMC-2026-014",
            "name": "Chiller Maintenance",
            "client": "Menara Holdings",
            "location": "Jalan Ampang",
            "category": "PMC",
        }
        assert meta.template == {"name": "Chiller PMC Checklist", "category": "PMC"}
        assert meta.creator == {"id": "user-7", "name": "Aina Rahman", "role": "technician"}

    def test_header_static_content(self, tree):
        assert tree.get_block("header").content == {"title": "Daily Maintenance Report", "subtitle": "Chiller Plant"}

    def test_template_section_with_labels(self, tree):
        content = tree.get_block("equipment").content
        assert content["equipment"] == "Pump A"
        assert content["count"] == 3
        assert content["inlet_temp"] == 6.5
        assert content["_labels"] == {"equipment": "Equipment Tag", "count": "Units Serviced"}
        assert tree.get_block("equipment").layout == "two_column"

    def test_text_section(self, tree):
        assert tree.get_block("notes").content["text"].startswith("Replaced worn gasket")

    def test_checklist_normalized(self, tree):
        assert tree.get_block("tasks").content["items"] == [
            {"task": "Check oil level", "status": True, "remarks": "Topped up"},
            {"task": "Clean strainer", "status": "done", "remarks": ""},
            {"task": "Inspect belts", "status": False, "remarks": ""},
        ]

    def test_metrics(self, tree):
        assert tree.get_block("readings").content["metrics"] == [
            {"label": "Runtime", "value": 12, "unit": "h"},
            {"label": "Pressure", "value": 4.25, "unit": "bar"},
        ]

    def test_implicit_photo_filter(self, tree):
        photos = tree.get_block("photos").content["photos"]
        assert [p["url"] for p in photos] == [
            "https://files.example.com/before.jpg",
            "https://files.example.com/after.jpg",
        ]
        assert photos[0]["caption"] == "Before service"
        assert photos[1]["caption"] == "after.jpg"
        assert photos[0]["timestamp"] == "2026-02-05T08:15:00Z"
        assert photos[0]["field_id"] == "photo_before"

    def test_implicit_signature_filter(self, tree):
        signatures = tree.get_block("signatures").content["signatures"]
        assert signatures == [{
            "url": "https://files.example.com/sig.png",
            "name": "Aina Rahman",
            "role": "Technician",
            "date": "2026-02-05T11:00:00Z",
            "field_id": "technician_signature",
        }]

    def test_options_copied_verbatim(self, tree):
        assert tree.get_block("photos").options == {"columns": 2}
        assert tree.get_block("signatures").options == {"title": "Sign-off"}

    def test_blocks_by_type(self, tree):
        assert [b.block_id for b in tree.get_blocks_by_type(BlockType.PHOTO_GRID)] == ["photos"]


class TestBindingVariants:
    """Extraction details per binding variant."""

    def test_filter_by_field(self, builder, sample_record):
        schema = single_section({
            "section_id": "after",
            "block_type": "photo_grid",
            "binding_rules": {"filter_by_field": "AFTER"},
        })
        photos = builder.build(schema, sample_record).blocks[0].content["photos"]
        assert [p["field_id"] for p in photos] == ["photo_after"]

    def test_template_section_field_subset(self, builder, sample_record):
        schema = single_section({
            "section_id": "eq",
            "block_type": "table",
            "binding_rules": {"template_section": "s1", "fields": ["count"]},
        })
        content = builder.build(schema, sample_record).blocks[0].content
        assert content == {"count": 3, "_labels": {"count": "Units Serviced"}}

    def test_missing_source_gives_empty_content(self, builder, sample_record):
        schema = single_section({
            "section_id": "x",
            "block_type": "detail_entry",
            "binding_rules": {"source": "data.s9.nothing"},
        })
        assert builder.build(schema, sample_record).blocks[0].content == {}

    def test_missing_text_is_empty_string(self, builder, sample_record):
        schema = single_section({
            "section_id": "x",
            "block_type": "text_section",
            "binding_rules": {"source": "data.s9.nothing"},
        })
        assert builder.build(schema, sample_record).blocks[0].content == {"text": ""}

    def test_binding_override(self, builder, sample_record):
        schema = single_section({
            "section_id": "details",
            "block_type": "detail_entry",
            "binding_rules": {"mode": "auto_extract_all"},
        })
        tree = builder.build(schema, sample_record, binding_overrides={"details": {"template_section": "s4"}})
        assert tree.blocks[0].content == {"runtime_hours": 12, "pressure": 4.25}

    def test_signature_fallback_through_data_reference(self, builder):
        record = {
            "data": {"s6.customer_signature": "att-9"},
            "attachments": [{
                "id": "att-9",
                "file_type": "document",
                "storage_url": "https://files.example.com/cust.png",
                "field_id": "customer_signature",
                "created_at": "2026-02-05T12:30:00Z",
            }],
        }
        schema = single_section({"section_id": "sig", "block_type": "signature_box"})

        signatures = builder.build(schema, record).blocks[0].content["signatures"]

        assert signatures == extract_signatures(BusinessRecord.from_dict(record))
        assert signatures[0]["url"] == "https://files.example.com/cust.png"
        assert signatures[0]["name"] == "customer_signature"

    def test_empty_signature_reference_matches_nothing(self, builder):
        record = {
            "data": {"s5.technician_signature": ""},
            "attachments": [{"file_type": "photo", "storage_url": "photo.jpg"}],
        }
        schema = single_section({"section_id": "sig", "block_type": "signature_box"})
        assert builder.build(schema, record).blocks[0].content == {"signatures": []}

    def test_storage_url_preferred_over_url(self, builder):
        record = {"attachments": [
            {"id": "1", "file_type": "photo", "storage_url": "stored.jpg", "url": "public.jpg"},
            {"id": "2", "file_type": "photo", "url": "public-only.jpg"},
        ]}
        schema = single_section({"section_id": "p", "block_type": "photo_grid"})
        photos = builder.build(schema, record).blocks[0].content["photos"]
        assert [p["url"] for p in photos] == ["stored.jpg", "public-only.jpg"]

    def test_no_signatures(self, builder):
        schema = single_section({"section_id": "sig", "block_type": "signature_box"})
        assert builder.build(schema, {}).blocks[0].content == {"signatures": []}

    def test_auto_extract_skips_photo_and_signature_keys(self, builder, sample_record):
        sample_record["data"]["s7.site_photo"] = "att-1"
        sample_record["data"]["s7.customer_signature"] = "att-3"
        schema = single_section({
            "section_id": "all",
            "block_type": "detail_entry",
            "binding_rules": {"mode": "auto_extract_all"},
        })
        content = builder.build(schema, sample_record).blocks[0].content
        assert "site_photo" not in content
        assert "customer_signature" not in content
        assert "items" not in content
        assert content["technician_name"] == "Aina Rahman"
        assert content["shift"] == "Morning"


class TestInputs:
    """Accepted input forms."""

    def test_accepts_parsed_contracts(self, builder, sample_schema_dict, sample_record):
        schema = LayoutSchema.from_dict(sample_schema_dict)
        record = BusinessRecord.from_dict(sample_record)
        tree = builder.build(schema, record, generated_at=GENERATED_AT)
        assert tree.to_dict() == builder.build(sample_schema_dict, sample_record, generated_at=GENERATED_AT).to_dict()

    def test_invalid_raw_schema_raises(self, builder):
        with pytest.raises(SchemaValidationError):
            builder.build({"sections": []}, {})

    def test_unset_page_fields_use_defaults(self, builder):
        tree = builder.build({"page": {}, "sections": []}, {})
        assert tree.page.to_dict() == {
            "size": "A4",
            "orientation": "portrait",
            "margins": {"top": 20, "bottom": 20, "left": 20, "right": 20},
        }

    def test_partial_margins_use_configured_default(self):
        builder = RenderTreeBuilder(Settings(default_margin=12))
        tree = builder.build({"page": {"margins": {"top": 5}}, "sections": []}, {})
        assert tree.page.margins.to_dict() == {"top": 5, "bottom": 12, "left": 12, "right": 12}
