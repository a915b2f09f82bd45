"""
Unit tests for workledger/contracts/validation.py - SchemaValidator
"""
import copy

import pytest

from workledger.contracts import LayoutSchema, SchemaValidationError, SchemaValidator, BlockType


@pytest.fixture
def validator():
    return SchemaValidator()


class TestValidSchemas:
    """Schemas that must pass."""

    def test_sample_schema_is_valid(self, validator, sample_schema_dict):
        assert validator.validate(sample_schema_dict) == []

    def test_minimal_schema(self, validator):
        assert validator.validate({"page": {}, "sections": []}) == []

    def test_letter_landscape(self, validator):
        schema = {"page": {"size": "Letter", "orientation": "landscape"}, "sections": []}
        assert validator.validate(schema) == []

    def test_does_not_mutate_input(self, validator, sample_schema_dict):
        before = copy.deepcopy(sample_schema_dict)
        validator.validate(sample_schema_dict)
        assert sample_schema_dict == before


class TestStructuralErrors:
    """Page and section structure."""

    def test_not_an_object(self, validator):
        assert validator.validate(["sections"]) == ["schema must be an object"]

    def test_missing_page_and_sections(self, validator):
        errors = validator.validate({})
        assert "page: missing" in errors
        assert "sections: missing" in errors

    def test_sections_not_a_list(self, validator):
        errors = validator.validate({"page": {}, "sections": {"a": 1}})
        assert errors == ["sections: must be a list"]

    def test_bad_page_size_and_orientation(self, validator):
        errors = validator.validate({"page": {"size": "B5", "orientation": "sideways"}, "sections": []})
        assert len(errors) == 2
        assert errors[0].startswith("page.size: 'B5'")
        assert errors[1].startswith("page.orientation: 'sideways'")

    def test_non_numeric_margin(self, validator):
        errors = validator.validate({"page": {"margins": {"top": "20"}}, "sections": []})
        assert errors == ["page.margins.top: must be a number"]

    def test_unsupported_version(self, validator):
        errors = validator.validate({"version": 9, "page": {}, "sections": []})
        assert len(errors) == 1
        assert errors[0].startswith("version: unsupported schema version 9")


class TestSectionErrors:
    """Per-section checks accumulate with index prefixes."""

    def test_all_failures_reported(self, validator):
        schema = {
            "page": {"size": "A5"},
            "sections": [
                {"block_type": "header"},
                {"section_id": "b", "block_type": "chart"},
                {"section_id": "c"},
            ],
        }
        errors = validator.validate(schema)
        assert len(errors) == 4
        assert errors[0].startswith("page.size")
        assert errors[1] == "sections[0]: section_id missing"
        assert errors[2].startswith("sections[1]: block_type 'chart' is not one of")
        assert errors[3] == "sections[2]: block_type missing"

    def test_duplicate_section_id(self, validator):
        schema = {
            "page": {},
            "sections": [
                {"section_id": "a", "block_type": "header"},
                {"section_id": "a", "block_type": "table"},
            ],
        }
        assert validator.validate(schema) == ["sections[1]: duplicate section_id 'a'"]

    def test_every_block_type_accepted(self, validator):
        sections = [{"section_id": t.value, "block_type": t.value} for t in BlockType]
        assert validator.validate({"page": {}, "sections": sections}) == []

    def test_multiple_filter_predicates_rejected(self, validator):
        schema = {
            "page": {},
            "sections": [{
                "section_id": "p",
                "block_type": "photo_grid",
                "binding_rules": {"source": "attachments[file_type=photo,field_id=x]"},
            }],
        }
        errors = validator.validate(schema)
        assert len(errors) == 1
        assert "multiple filter predicates are not supported" in errors[0]
        assert errors[0].startswith("sections[0]: binding_rules.source")

    def test_inequality_filter_rejected(self, validator):
        schema = {
            "page": {},
            "sections": [{
                "section_id": "p",
                "block_type": "photo_grid",
                "show_if": {"field": "attachments[file_type!=photo]", "has_items": True},
            }],
        }
        errors = validator.validate(schema)
        assert len(errors) == 1
        assert "only equality filters are supported" in errors[0]

    def test_options_must_be_object(self, validator):
        schema = {"page": {}, "sections": [{"section_id": "a", "block_type": "table", "options": [1]}]}
        assert validator.validate(schema) == ["sections[0]: options must be an object"]


class TestValidateOrRaise:
    """Aggregate error."""

    def test_raises_with_every_error(self, validator):
        with pytest.raises(SchemaValidationError) as exc_info:
            validator.validate_or_raise({"sections": [{"section_id": "a"}]})

        errors = exc_info.value.errors
        assert errors == ["page: missing", "sections[0]: block_type missing"]
        assert "2 error(s)" in str(exc_info.value)

    def test_layout_schema_from_dict_validates(self):
        with pytest.raises(SchemaValidationError):
            LayoutSchema.from_dict({"page": {}, "sections": [{"section_id": "x", "block_type": "chart"}]})

    def test_layout_schema_round_trip(self, sample_schema_dict):
        schema = LayoutSchema.from_dict(sample_schema_dict)
        again = LayoutSchema.from_dict(schema.to_dict())
        assert again.to_dict() == schema.to_dict()
        assert again.get_section("photos").block_type == BlockType.PHOTO_GRID
        assert again.get_section("missing") is None


def one_section(section):
    return {"page": {}, "sections": [section]}


class TestSectionShapes:
    """Malformed section values are reported, never raised."""

    @pytest.mark.parametrize("section_id", [["a"], {"id": "a"}, 7])
    def test_non_string_section_id(self, validator, section_id):
        errors = validator.validate(one_section({"section_id": section_id, "block_type": "header"}))
        assert errors == ["sections[0]: section_id must be a non-empty string"]

    def test_content_must_be_object(self, validator):
        errors = validator.validate(one_section({"section_id": "h", "block_type": "header", "content": ["T"]}))
        assert errors == ["sections[0]: content must be an object"]


class TestBindingRuleShapes:
    """binding_rules keys are checked before any parsing."""

    @staticmethod
    def rules(rules, block_type="detail_entry"):
        return one_section({"section_id": "s", "block_type": block_type, "binding_rules": rules})

    def test_metrics_entries_must_be_objects(self, validator):
        errors = validator.validate(self.rules({"metrics": ["hours"]}, "metrics_cards"))
        assert errors == ["sections[0]: binding_rules.metrics[0]: must be an object"]

    def test_metric_needs_section_and_field(self, validator):
        errors = validator.validate(self.rules({"metrics": [{"template_section": "s4", "field": 3}, {}]}, "metrics_cards"))
        assert errors == [
            "sections[0]: binding_rules.metrics[0].field: must be a non-empty string",
            "sections[0]: binding_rules.metrics[1].template_section: must be a non-empty string",
            "sections[0]: binding_rules.metrics[1].field: must be a non-empty string",
        ]

    def test_metrics_must_be_list(self, validator):
        errors = validator.validate(self.rules({"metrics": {"field": "x"}}, "metrics_cards"))
        assert errors == ["sections[0]: binding_rules.metrics: must be a list"]

    def test_fields_must_be_strings(self, validator):
        errors = validator.validate(self.rules({"template_section": "s1", "fields": ["count", 2]}))
        assert errors == ["sections[0]: binding_rules.fields: must be a list of non-empty strings"]

    @pytest.mark.parametrize("key", ["template_section", "field", "filter_by_field"])
    def test_text_keys(self, validator, key):
        errors = validator.validate(self.rules({key: 5}, "photo_grid"))
        assert errors == [f"sections[0]: binding_rules.{key}: must be a non-empty string"]

    def test_unknown_mode(self, validator):
        errors = validator.validate(self.rules({"mode": "extract_some"}))
        assert len(errors) == 1
        assert errors[0].startswith("sections[0]: binding_rules.mode: 'extract_some' is not one of")

    def test_valid_rules_pass(self, validator):
        schema = self.rules({
            "template_section": "s1",
            "fields": ["count"],
            "metrics": [{"template_section": "s4", "field": "pressure", "label": "P"}],
        })
        assert validator.validate(schema) == []

    def test_bad_metrics_rejected_before_parsing(self):
        with pytest.raises(SchemaValidationError):
            LayoutSchema.from_dict(self.rules({"metrics": ["hours"]}, "metrics_cards"))


class TestShowIfShapes:
    """show_if operator values."""

    @staticmethod
    def show_if(condition):
        return one_section({"section_id": "s", "block_type": "table", "show_if": condition})

    @pytest.mark.parametrize("key", ["exists", "has_items"])
    def test_flag_must_be_bool(self, validator, key):
        errors = validator.validate(self.show_if({"field": "data.x", key: "false"}))
        assert errors == [f"sections[0]: show_if.{key}: must be true or false"]

    def test_contains_must_be_object(self, validator):
        errors = validator.validate(self.show_if({"field": "attachments", "contains": "photo"}))
        assert errors == ["sections[0]: show_if.contains: must be an object"]
