"""
Integration tests for the full report pipeline.

Schema + record -> render tree -> layout -> PDF / HTML. Images come from
data URIs and local paths only, so no network is needed.
"""
import pytest

from config.settings import Settings
from workledger.contracts import SchemaValidationError
from workledger.layout import ReportGenerator
from workledger.layout.generator import summarize
from workledger.layout.templates import get_layout_template

pytestmark = pytest.mark.integration


@pytest.fixture
def generator(tmp_path):
    settings = Settings(output_dir=tmp_path / "out", include_page_numbers=True)
    return ReportGenerator(settings)


@pytest.fixture
def offline_record(sample_record, png_data_uri, tmp_path):
    """Sample record with its photos and signature served locally."""
    sample_record["attachments"][0]["storage_url"] = png_data_uri
    sample_record["attachments"][1]["url"] = str(tmp_path / "missing.jpg")
    sample_record["attachments"][2]["storage_url"] = png_data_uri
    return sample_record


class TestSingleReport:
    """One record, one document."""

    def test_html_report(self, generator, sample_schema_dict, offline_record):
        output = generator.generate_bytes(sample_schema_dict, offline_record, output_format="html")

        assert isinstance(output, str)
        assert "Daily Maintenance Report" in output
        assert "Pump A" in output
        assert "Units Serviced" in output
        assert "Page 1 of" in output

    def test_pdf_report_with_broken_image(self, generator, sample_schema_dict, offline_record):
        output = generator.generate_bytes(sample_schema_dict, offline_record, output_format="pdf")
        assert isinstance(output, bytes)
        assert output.startswith(b"%PDF")

    def test_generate_to_file_infers_format(self, generator, sample_schema_dict, offline_record, tmp_path):
        path = generator.generate(sample_schema_dict, offline_record, tmp_path / "reports" / "entry.html")
        assert path.exists()
        assert path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_generate_pdf_file(self, generator, sample_schema_dict, offline_record, tmp_path):
        path = generator.generate(sample_schema_dict, offline_record, tmp_path / "entry.pdf")
        assert path.read_bytes().startswith(b"%PDF")

    def test_unsupported_format(self, generator, sample_schema_dict, offline_record):
        with pytest.raises(ValueError, match="Unsupported output format"):
            generator.generate_bytes(sample_schema_dict, offline_record, output_format="docx")

    def test_invalid_schema(self, generator, offline_record):
        with pytest.raises(SchemaValidationError):
            generator.generate_bytes({"sections": []}, offline_record, output_format="html")

    def test_template_layout(self, generator, offline_record):
        schema = get_layout_template("detailed_inspection").to_schema()
        output = generator.generate_bytes(schema, offline_record, output_format="pdf")
        assert output.startswith(b"%PDF")

    def test_default_output_path(self, generator, offline_record, tmp_path):
        assert generator.default_output_path(offline_record, "html") == tmp_path / "out" / "report_entry-001.html"

    @pytest.mark.asyncio
    async def test_async_inside_event_loop(self, generator, sample_schema_dict, offline_record):
        output = await generator.generate_bytes_async(sample_schema_dict, offline_record, output_format="html")
        assert "Pump A" in output


class TestCombinedReport:
    """Several records in one document."""

    def test_each_record_starts_a_page(self, generator, sample_schema_dict, offline_record):
        second = dict(offline_record, id="entry-002", data=dict(offline_record["data"], **{"s1.equipment": "Pump B"}))

        output = generator.generate_combined(sample_schema_dict, [offline_record, second], output_format="html")

        assert output.count('<section class="page"') >= 2
        assert "Pump A" in output and "Pump B" in output
        assert output.index("Pump A") < output.index("Pump B")

    def test_combined_to_file(self, generator, sample_schema_dict, offline_record, tmp_path):
        path = generator.generate_combined(sample_schema_dict, [offline_record], tmp_path / "all.pdf")
        assert path.read_bytes().startswith(b"%PDF")

    def test_no_records(self, generator, sample_schema_dict):
        with pytest.raises(ValueError, match="at least one record"):
            generator.generate_combined(sample_schema_dict, [], output_format="pdf")


class TestSummary:
    """Diagnostics helper."""

    def test_block_counts(self, generator, sample_schema_dict, offline_record):
        tree = generator.build_tree(sample_schema_dict, offline_record)
        summary = summarize(tree)
        assert summary["entry_id"] == "entry-001"
        assert summary["blocks"] == 7
        assert summary["by_type"]["detail_entry"] == 1
