"""Tests for report validation, naming and PDF rendering."""

from __future__ import annotations

from datetime import date

import pytest

from app.modules.reports.generator import (
    REPORT_TYPES,
    format_compliance_status,
    generate_report,
    generate_report_filename,
    get_report_title,
    validate_report_data,
)
from app.modules.reports.generator.base import clean_text, decode_image, format_long_date, item_number
from app.modules.reports.generator.config import normalize_report_data, to_snake_case
from app.modules.reports.generator.inspection import InspectionReportGenerator, split_weather

REPORT_DATE = date(2024, 8, 1)

BASE_FIELDS = {
    "projectName": "Gulf Harbor Tower",
    "projectAddress": "1200 Bay St, Fort Myers, FL",
    "inspectorName": "Dana Reyes",
    "reportSequence": "7",
    "observations": "Shoring installed per drawings.",
}

TYPE_FIELDS = {
    "inspection": {"inspectionType": "Framing", "workPerformed": "Wall framing", "weather": "Clear, 84°F"},
    "compliance": {"complianceStandard": "FBC 2023", "complianceStatus": "non_compliant"},
    "safety_incident": {"incidentType": "Fall", "incidentDate": "2024-07-30", "severity": "minor"},
    "material_defect": {"materialType": "Stucco", "defectType": "Cracking", "discoveryDate": "2024-07-29"},
    "engineering": {"reportType": "structural", "professionalOpinion": "Adequate.", "sealDate": "2024-08-01"},
}


def _payload(report_type: str, **extra) -> dict:
    return {**BASE_FIELDS, **TYPE_FIELDS[report_type], **extra}


class TestConfig:
    def test_camel_case_keys_are_normalized(self) -> None:
        assert to_snake_case("projectName") == "project_name"
        assert to_snake_case("reportedToOSHA") == "reported_to_osha"
        assert normalize_report_data({"jobNumber": "J-1", "job_number_x": 1}) == {"job_number": "J-1", "job_number_x": 1}

    def test_filename_uses_date_sequence_and_prefix(self) -> None:
        assert generate_report_filename("inspection", "7", REPORT_DATE) == "24 08 01 007 - Inspection Report"
        assert generate_report_filename("safety_incident", 12, REPORT_DATE) == "24 08 01 012 - Safety Incident Report"

    def test_titles(self) -> None:
        assert get_report_title("material_defect") == "Material/Installation Defect Report"
        with pytest.raises(ValueError):
            get_report_title("memo")

    def test_complete_payload_has_no_errors(self) -> None:
        for report_type in REPORT_TYPES:
            assert validate_report_data(report_type, _payload(report_type)) == []

    def test_missing_fields_are_listed(self) -> None:
        errors = validate_report_data("compliance", {"projectName": "X"})
        assert "Project address is required" in errors
        assert "Compliance standard is required" in errors
        assert "Project name is required" not in errors

    def test_unknown_type_is_reported(self) -> None:
        assert "Unknown report type: memo" in validate_report_data("memo", BASE_FIELDS)


class TestHelpers:
    def test_compliance_status_labels(self) -> None:
        assert format_compliance_status("compliant") == "COMPLIANT"
        assert format_compliance_status("non-compliant") == "NON-COMPLIANT"
        assert format_compliance_status("partial") == "PARTIALLY COMPLIANT"
        assert format_compliance_status(None) == "PENDING REVIEW"

    def test_split_weather(self) -> None:
        assert split_weather("Clear, 80 °F") == ("Clear", "80°F")
        assert split_weather("") == ("Not recorded", "Not recorded")

    def test_item_number(self) -> None:
        assert item_number({"report_sequence": "7"}, 2) == "007.02"

    def test_long_date(self) -> None:
        assert format_long_date(REPORT_DATE) == "August 1, 2024"
        assert format_long_date(REPORT_DATE, weekday=True) == "Thursday, August 1, 2024"

    def test_clean_text_replaces_typographic_characters(self) -> None:
        assert clean_text("“Hi” – it’s ok…") == '"Hi" - it\'s ok...'
        assert clean_text(None) == ""

    def test_decode_image_rejects_non_data_uri(self) -> None:
        with pytest.raises(ValueError):
            decode_image("https://example.com/a.png")
        with pytest.raises(ValueError):
            decode_image("data:image/png,rawbytes")


class TestRendering:
    @pytest.mark.parametrize("report_type", REPORT_TYPES)
    def test_every_type_renders_a_pdf(self, report_type: str) -> None:
        pdf = generate_report(report_type, _payload(report_type), REPORT_DATE)
        assert pdf.startswith(b"%PDF")

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(ValueError):
            generate_report("memo", BASE_FIELDS, REPORT_DATE)

    def test_long_content_breaks_across_pages(self) -> None:
        data = normalize_report_data(_payload("inspection", observations="Rebar spacing verified. " * 400))
        short = InspectionReportGenerator(REPORT_DATE)
        short.generate(normalize_report_data(_payload("inspection")))
        long = InspectionReportGenerator(REPORT_DATE)
        long.generate(data)
        assert long.page_count > short.page_count

    def test_invalid_images_are_skipped(self) -> None:
        payload = _payload(
            "inspection",
            digitalSignature="data:image/png;base64,not-base64!!",
            photos=[{"url": "data:image/png;base64,###", "caption": "North wall"}],
        )
        assert generate_report("inspection", payload, REPORT_DATE).startswith(b"%PDF")
