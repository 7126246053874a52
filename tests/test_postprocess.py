"""
Tests for payload parsing (pipelines/postprocess.py).

Report descriptions and comparisons are parsed tolerantly; a report record
without an identifier is rejected.
"""
import pytest

from pipelines.postprocess import (
    parse_comparison,
    parse_report,
    parse_report_description,
    parse_report_list,
)
from services.errors import ServerError


class TestParseReportDescription:
    """Structured or free-text descriptions"""

    def test_dict_with_aliases(self):
        desc = parse_report_description(
            {"summary": "Fine", "precautions": "Rest", "medication": ["A", "B"], "unknown": "x"}
        )
        assert desc.summary == "Fine"
        assert desc.precautionary_measures == "Rest"
        assert desc.medications == "A\nB"

    def test_json_embedded_in_fenced_text(self):
        raw = 'Here you go:\n```json\n{"summary": "Mild anaemia", "vitals": "Hb 11"}\n```'
        desc = parse_report_description(raw)
        assert desc.summary == "Mild anaemia"
        assert desc.vitals == "Hb 11"

    def test_plain_text_becomes_summary(self):
        assert parse_report_description("  Normal results.  ").summary == "Normal results."

    def test_broken_json_falls_back_to_text(self):
        desc = parse_report_description("{summary: not json}")
        assert desc.summary == "{summary: not json}"

    def test_none(self):
        assert parse_report_description(None).sections() == []


class TestParseReport:
    """One report record"""

    def test_id_and_description_mapping(self):
        report = parse_report({"id": 42, "title": "CBC", "report_description": "Looks fine"})
        assert report.report_id == "42"
        assert report.title == "CBC"
        assert report.description.summary == "Looks fine"

    def test_blank_title_gets_default(self):
        assert parse_report({"report_id": "r1", "title": ""}).title == "Untitled report"

    @pytest.mark.parametrize("raw", [{"title": "no id"}, {"report_id": ""}, "r1", None])
    def test_malformed_record_raises(self, raw):
        with pytest.raises(ServerError):
            parse_report(raw)


class TestParseReportList:
    """List endpoint payloads"""

    def test_wrapped_and_bare_lists(self):
        records = [{"id": "a"}, {"id": "b"}]
        assert [r.report_id for r in parse_report_list({"reports": records})] == ["a", "b"]
        assert [r.report_id for r in parse_report_list(records)] == ["a", "b"]

    def test_malformed_records_are_skipped(self):
        reports = parse_report_list([{"id": "a"}, {"title": "broken"}, "junk"])
        assert [r.report_id for r in reports] == ["a"]

    def test_unexpected_payload_is_empty(self):
        assert parse_report_list(None) == []
        assert parse_report_list({"reports": None}) == []


class TestParseComparison:
    """Comparison payloads"""

    def test_nested_fields(self):
        result = parse_comparison({"comparison_result": {"summary": "Better", "vitals": "BP down"}}, ("a", "b"))
        assert result.report_ids == ("a", "b")
        assert result.summary == "Better"
        assert result.vitals == "BP down"

    def test_top_level_overrides_nested(self):
        data = {"comparison_result": {"summary": "nested"}, "summary": "top", "vitals": "  "}
        result = parse_comparison(data, ("a", "b"))
        assert result.summary == "top"
        assert result.vitals == ""

    def test_string_result_is_summary(self):
        result = parse_comparison({"comparison_result": "Both normal"}, ("a", "b"))
        assert result.comparison_summary == "Both normal"

    def test_unusable_payload_is_empty(self):
        result = parse_comparison(None, ("a", "b"))
        assert result.sections() == []
