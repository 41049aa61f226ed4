from typing import Any, Dict, Optional

from app.modules.reports.generator.base import (
    BULLET, ReportGenerator, format_long_date, item_number, report_number
)

COMPLIANCE_STATUS_LABELS = {
    "compliant": "COMPLIANT",
    "non_compliant": "NON-COMPLIANT",
    "non-compliant": "NON-COMPLIANT",
    "partial": "PARTIALLY COMPLIANT",
}

COMPLIANT_OPINION = (
    "It is my professional opinion that the observed elements are in compliance with the applicable "
    "standards and requirements as specified above."
)
CORRECTIVE_ACTION_OPINION = (
    "It is my professional opinion that corrective action is required to achieve full compliance "
    "with the applicable standards and requirements as specified above."
)


def format_compliance_status(status: Optional[str]) -> str:
    return COMPLIANCE_STATUS_LABELS.get(status or "", "PENDING REVIEW")


class ComplianceReportGenerator(ReportGenerator):
    report_type = "compliance"

    def generate_specific_content(self, data: Dict[str, Any]):
        self.add_compliance_details(data)
        self.add_compliance_findings(data)
        self.add_corrective_actions(data)

    def add_compliance_details(self, data: Dict[str, Any]):
        self.set_font()
        self.add_paragraph(
            f"HBS conducted a compliance audit on {format_long_date(self.report_date, weekday=True)} "
            "to verify adherence to the following standards and requirements:"
        )
        self.text(f"{BULLET} {data.get('compliance_standard') or 'Florida Building Code'}")
        self.y += 10

        if data.get("audit_scope"):
            self.text("Audit Scope:")
            self.y += 6
            self.add_paragraph(data["audit_scope"], indent=10)

        details = [
            f"Compliance Report: {report_number(data)}",
            f"Date of Audit: {data.get('compliance_date') or format_long_date(self.report_date)}",
            f"Compliance Standard: {data.get('compliance_standard') or ''}",
            f"Compliance Status: {format_compliance_status(data.get('compliance_status'))}",
        ]
        if data.get("next_review_date"):
            details.append(f"Next Review Date: {data['next_review_date']}")
        self.check_page_break(6 * len(details))
        for line in details:
            self.text(line)
            self.y += 6
        self.y += 5

    def add_compliance_findings(self, data: Dict[str, Any]):
        self.check_page_break(80)

        if data.get("regulatory_requirements"):
            self.add_section("Regulatory Requirements", data["regulatory_requirements"], indent=10, spacing=10)

        observations = data.get("observations") or "Compliance audit findings and observations are documented below."
        self.add_section("Compliance Findings", f"{item_number(data, 1)} {observations}", indent=10, spacing=10)

        violations = data.get("violations") or []
        if violations:
            self.check_page_break(20)
            self.set_font("B")
            self.text("Violations Identified:")
            self.y += 8
            self.set_font()
            # violations continue the finding numbering after the main observation
            for index, violation in enumerate(violations, start=2):
                self.add_paragraph(f"{item_number(data, index)} {violation}", indent=10, spacing=5)
            self.y += 5

        if data.get("compliance_status") != "compliant" and data.get("non_compliance_details"):
            self.add_section("Non-Compliance Details", data["non_compliance_details"], indent=10, spacing=10)

        if data.get("compliance_evidence"):
            self.add_section("Compliance Evidence", data["compliance_evidence"], indent=10, spacing=10)

    def add_corrective_actions(self, data: Dict[str, Any]):
        self.check_page_break(60)
        if data.get("corrective_actions"):
            self.add_section("Corrective Actions Required", data["corrective_actions"], indent=10, spacing=10)
        if data.get("recommendations"):
            self.add_section("Recommendations", data["recommendations"], indent=10, spacing=15)

        if data.get("compliance_status") == "compliant":
            self.add_professional_opinion(COMPLIANT_OPINION)
        else:
            self.add_professional_opinion(CORRECTIVE_ACTION_OPINION)
