from typing import Any, Dict

from app.modules.reports.generator.base import ReportGenerator, item_number, yes_no


class SafetyIncidentReportGenerator(ReportGenerator):
    report_type = "safety_incident"

    def generate_specific_content(self, data: Dict[str, Any]):
        self.add_introduction(data, "investigate and document the safety incident that occurred on the project site")

        self.add_section("Incident Overview", "\n".join([
            f"Incident Type: {data.get('incident_type') or ''}",
            f"Date: {data.get('incident_date') or ''}",
            f"Time: {data.get('incident_time') or 'Not recorded'}",
            f"Location: {data.get('location_of_incident') or data.get('work_zone') or 'Not specified'}",
            f"Severity: {(data.get('severity') or '').upper()}",
            f"Equipment Involved: {data.get('equipment_involved') or 'None'}",
        ]))

        if data.get("injured_party"):
            self.add_section("Injured Party Information", "\n".join([
                f"Name: {data['injured_party']}",
                f"Injury Type: {data.get('injury_type') or 'Not specified'}",
                f"Medical Attention Required: {yes_no(data.get('medical_attention_required'))}",
            ]))

        witnesses = data.get("witness_names") or []
        if witnesses:
            self.add_section("Witnesses", "")
            self.add_numbered_list(witnesses, indent=10)

        self.add_section(
            "Incident Description",
            data.get("incident_description") or f"{item_number(data, 1)} {data.get('observations') or ''}",
        )

        for heading, field in (
            ("Immediate Actions Taken", "immediate_actions"),
            ("Root Cause Analysis", "root_cause"),
            ("Investigation Findings", "investigation_findings"),
            ("Preventive Measures", "preventive_measures"),
        ):
            if data.get(field):
                self.add_section(heading, data[field])

        self.add_section("Notifications", "\n".join([
            f"Supervisor Notified: {data.get('supervisor_notified') or 'Not recorded'}",
            f"Reported to OSHA: {yes_no(data.get('reported_to_osha'))}",
            f"Work Stoppage: {yes_no(data.get('work_stoppage'))}",
        ]))

        if data.get("recommendations"):
            self.add_section("Recommendations", data["recommendations"])
