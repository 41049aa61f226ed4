from typing import Any, Dict

from app.modules.reports.generator.base import ReportGenerator, item_number, yes_no

# (heading, field) pairs rendered as sections when present
TECHNICAL_SECTIONS = (
    ("Design Criteria", "design_criteria"),
    ("Load Requirements", "load_requirements"),
    ("Material Specifications", "material_specifications"),
    ("Construction Methods", "construction_methods"),
    ("Structural Analysis", "structural_analysis"),
    ("Code Compliance", "code_compliance"),
    ("Safety Factors", "safety_factors"),
    ("Quality Assurance", "quality_assurance"),
)


class EngineeringReportGenerator(ReportGenerator):
    report_type = "engineering"
    include_seal = True

    def generate_specific_content(self, data: Dict[str, Any]):
        engineering_type = data.get("report_type") or "assessment"
        self.add_introduction(
            data,
            f"provide a {engineering_type} engineering evaluation of the referenced work and to render "
            "a professional opinion",
        )

        self.add_section(
            "Professional Engineer",
            f"{data.get('inspector_name') or ''}, P.E.\n"
            f"Florida License No. {data.get('inspector_license') or 'N/A'}\n"
            f"Seal Date: {data.get('seal_date') or ''}",
        )

        standards = data.get("engineering_standards") or []
        if standards:
            self.add_section("Engineering Standards", "")
            self.add_numbered_list(standards)

        for heading, field in TECHNICAL_SECTIONS:
            if data.get(field):
                self.add_section(heading, data[field])

        if data.get("general_context"):
            self.add_section("General Context", data["general_context"])
        self.add_section("Observations", f"{item_number(data, 1)} {data.get('observations') or ''}", indent=10)

        self.add_section("Professional Opinion", data.get("professional_opinion") or "")
        if data.get("engineering_recommendations") or data.get("recommendations"):
            self.add_section(
                "Engineering Recommendations",
                data.get("engineering_recommendations") or data.get("recommendations"),
            )
        if data.get("limitations_and_assumptions"):
            self.add_section("Limitations and Assumptions", data["limitations_and_assumptions"])

        self.add_section("Attachments", "")
        self.add_bullet_list([
            f"Calculations attached: {yes_no(data.get('calculations_attached'))}",
            f"Drawings attached: {yes_no(data.get('drawings_attached'))}",
            f"Peer review required: {yes_no(data.get('peer_review_required'))}",
        ])
