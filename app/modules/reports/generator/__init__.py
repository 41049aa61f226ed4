from datetime import date
from typing import Any, Dict, Optional, Type

from app.modules.reports.generator.base import ReportGenerator
from app.modules.reports.generator.compliance import ComplianceReportGenerator, format_compliance_status
from app.modules.reports.generator.config import (
    REPORT_CONFIGS, REPORT_TYPES, generate_report_filename, get_report_title,
    normalize_report_data, validate_report_data
)
from app.modules.reports.generator.engineering import EngineeringReportGenerator
from app.modules.reports.generator.inspection import InspectionReportGenerator
from app.modules.reports.generator.material_defect import MaterialDefectReportGenerator
from app.modules.reports.generator.safety_incident import SafetyIncidentReportGenerator

GENERATORS: Dict[str, Type[ReportGenerator]] = {
    "inspection": InspectionReportGenerator,
    "compliance": ComplianceReportGenerator,
    "engineering": EngineeringReportGenerator,
    "safety_incident": SafetyIncidentReportGenerator,
    "material_defect": MaterialDefectReportGenerator,
}


def generate_report(report_type: str, data: Dict[str, Any], report_date: Optional[date] = None) -> bytes:
    """Render a report of the given type to PDF bytes."""
    generator_class = GENERATORS.get(report_type)
    if generator_class is None:
        raise ValueError(f"Unknown report type: {report_type}")
    return generator_class(report_date).generate(normalize_report_data(data))


__all__ = [
    "REPORT_CONFIGS",
    "REPORT_TYPES",
    "GENERATORS",
    "ReportGenerator",
    "InspectionReportGenerator",
    "ComplianceReportGenerator",
    "EngineeringReportGenerator",
    "SafetyIncidentReportGenerator",
    "MaterialDefectReportGenerator",
    "format_compliance_status",
    "generate_report",
    "generate_report_filename",
    "get_report_title",
    "validate_report_data",
]
