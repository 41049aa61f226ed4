import re
from typing import Any, Dict, Tuple

from app.modules.reports.generator.base import (
    BULLET, ReportGenerator, format_long_date, item_number, report_number
)

TEMPERATURE_PATTERN = re.compile(r"-?\d+(?:\.\d+)?\s*°F")

INSPECTION_OPINION = (
    "It is my professional opinion that the observed structural elements were completed in "
    "substantial accordance with the approved project documents and specifications and as modified "
    "by RFI's approved by the Structural Engineer of Record."
)


def split_weather(weather: str) -> Tuple[str, str]:
    """'Clear, 80°F' -> ('Clear', '80°F')."""
    if not weather:
        return "Not recorded", "Not recorded"
    condition = weather.split(",")[0].strip() or "Not recorded"
    match = TEMPERATURE_PATTERN.search(weather)
    return condition, match.group(0).replace(" ", "") if match else "Not recorded"


class InspectionReportGenerator(ReportGenerator):
    report_type = "inspection"

    def generate_specific_content(self, data: Dict[str, Any]):
        self.add_inspection_details(data)
        self.add_observations(data)

    def add_inspection_details(self, data: Dict[str, Any]):
        self.set_font()
        self.add_paragraph(
            f"HBS was on site {format_long_date(self.report_date, weekday=True)} "
            "to inspect the following items:",
            spacing=5,
        )
        self.text(f"{BULLET} {data.get('work_performed') or data.get('inspection_type')}")
        self.y += 10
        self.text("Our visual observations determined the following:")
        self.y += 10

        for title, key in (("Crew", "crew"), ("Equipment", "equipment")):
            items = data.get(key) or []
            if items:
                self.check_page_break(6 + 5 * len(items))
                self.text(f"{title}:")
                self.y += 6
                self.add_bullet_list(items)

        condition, temperature = split_weather(data.get("weather") or "")
        details = [
            f"{data.get('inspection_type') or 'Inspection'} Report: {report_number(data)}",
            f"Date & Time of Inspection: {data.get('inspection_date') or format_long_date(self.report_date)}",
            f"Inspector Name: {data.get('inspector_name') or ''}",
            f"Weather Conditions: {condition}",
            f"Temperature: {temperature}",
            f"Work Zone: {data.get('work_zone') or 'Not specified'}",
            f"Work Performed: {data.get('work_performed') or ''}",
            f"Drawing Page: {data.get('drawing_page') or ''}",
        ]
        if data.get("permit_number"):
            details.append(f"Permit Number: {data['permit_number']}")
        self.check_page_break(6 * len(details))
        for line in details:
            self.text(line)
            self.y += 6
        self.y += 10

        if data.get("general_context"):
            self.add_section("General Context", data["general_context"], spacing=10)

    def add_observations(self, data: Dict[str, Any]):
        self.check_page_break(60)
        self.set_font("B")
        self.text("Observations:")
        self.y += 10
        self.set_font()
        self.add_paragraph(f"{item_number(data, 1)} {data.get('observations') or ''}", indent=10)

        self.set_font("B")
        self.text("Exceptions:")
        self.y += 10
        self.set_font()
        exceptions = data.get("exceptions") or []
        if exceptions:
            for index, exception in enumerate(exceptions, start=1):
                self.add_paragraph(f"{item_number(data, index)}    {exception}", indent=10, spacing=2)
            self.y += 8
        else:
            self.text(f"{item_number(data, 1)}    None Noted", self.margin + 10)
            self.y += 15

        if data.get("recommendations"):
            self.add_section("Recommendations", data["recommendations"], spacing=10)

        self.y += 10
        self.add_professional_opinion(INSPECTION_OPINION)
