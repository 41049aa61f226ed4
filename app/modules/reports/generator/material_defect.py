from typing import Any, Dict

from app.modules.reports.generator.base import ReportGenerator, item_number, yes_no


class MaterialDefectReportGenerator(ReportGenerator):
    report_type = "material_defect"

    def generate_specific_content(self, data: Dict[str, Any]):
        self.add_introduction(data, "investigate and assess material defects identified during construction")

        self.add_section("Material Information", "\n".join([
            f"Material Type: {data.get('material_type') or ''}",
            f"Manufacturer: {data.get('manufacturer') or 'Unknown'}",
            f"Batch/Lot Number: {data.get('batch_lot_number') or 'N/A'}",
            f"Delivery Date: {data.get('delivery_date') or 'N/A'}",
            f"Installation Date: {data.get('installation_date') or 'N/A'}",
        ]))

        self.add_section("Defect Details", "\n".join([
            f"Defect Type: {data.get('defect_type') or ''}",
            f"Description: {data.get('defect_description') or ''}",
        ]))

        if data.get("affected_quantity"):
            self.add_section("Affected Quantity", data["affected_quantity"])

        self.add_section("Discovery Information", "\n".join([
            f"Discovery Date: {data.get('discovery_date') or ''}",
            f"Work Zone: {data.get('work_zone') or 'Not specified'}",
        ]))

        if data.get("test_results"):
            self.add_section("Test Results", data["test_results"])

        self.add_section("Impact Assessment", "\n".join([
            f"Cost Impact: {data.get('cost_impact') or 'To be determined'}",
            f"Schedule Impact: {data.get('schedule_impact') or 'To be determined'}",
            f"Replacement Required: {yes_no(data.get('replacement_required'))}",
        ]))

        supplier_lines = [f"Supplier Notified: {yes_no(data.get('supplier_notified'))}"]
        if data.get("approved_replacement"):
            supplier_lines.append(f"Approved Replacement: {data['approved_replacement']}")
        self.add_section("Supplier Notification", "\n".join(supplier_lines))

        if data.get("corrective_action"):
            self.add_section("Corrective Actions", data["corrective_action"])
        if data.get("quality_control_measures"):
            self.add_section("QA Enhancements", data["quality_control_measures"])

        self.add_section("Additional Observations", f"{item_number(data, 1)} {data.get('observations') or ''}")
        if data.get("recommendations"):
            self.add_section("Recommendations", data["recommendations"])
