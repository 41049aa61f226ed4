"""
Report type configuration, file naming and payload validation.
"""

import re
from datetime import date
from typing import Any, Dict, List, Optional

REPORT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "inspection": {
        "title": "Inspection Report",
        "file_prefix": "Inspection Report",
        "requires_weather": True,
        "requires_work_zone": True,
        "requires_photos": True,
        "requires_seal": False,
    },
    "compliance": {
        "title": "Compliance Report",
        "file_prefix": "Compliance Report",
        "requires_weather": False,
        "requires_work_zone": False,
        "requires_photos": True,
        "requires_seal": False,
    },
    "safety_incident": {
        "title": "Safety/Incident Report",
        "file_prefix": "Safety Incident Report",
        "requires_weather": True,
        "requires_work_zone": True,
        "requires_photos": True,
        "requires_seal": False,
    },
    "material_defect": {
        "title": "Material/Installation Defect Report",
        "file_prefix": "Material Defect Report",
        "requires_weather": False,
        "requires_work_zone": True,
        "requires_photos": True,
        "requires_seal": False,
    },
    "engineering": {
        "title": "Engineering Report",
        "file_prefix": "Engineering Report",
        "requires_weather": False,
        "requires_work_zone": False,
        "requires_photos": True,
        "requires_seal": True,
    },
}

REPORT_TYPES = list(REPORT_CONFIGS)

COMMON_REQUIRED_FIELDS = [
    ("project_name", "Project name is required"),
    ("project_address", "Project address is required"),
    ("inspector_name", "Inspector name is required"),
    ("report_sequence", "Report sequence is required"),
    ("observations", "Observations are required"),
]

TYPE_REQUIRED_FIELDS = {
    "inspection": [
        ("inspection_type", "Inspection type is required"),
        ("work_performed", "Work performed is required"),
    ],
    "compliance": [
        ("compliance_standard", "Compliance standard is required"),
        ("compliance_status", "Compliance status is required"),
    ],
    "safety_incident": [
        ("incident_type", "Incident type is required"),
        ("incident_date", "Incident date is required"),
        ("severity", "Severity is required"),
    ],
    "material_defect": [
        ("material_type", "Material type is required"),
        ("defect_type", "Defect type is required"),
        ("discovery_date", "Discovery date is required"),
    ],
    "engineering": [
        ("report_type", "Engineering report type is required"),
        ("professional_opinion", "Professional opinion is required"),
        ("seal_date", "Seal date is required"),
    ],
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_case(key: str) -> str:
    """projectName -> project_name, reportedToOSHA -> reported_to_osha"""
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def normalize_report_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Accept camelCase form payloads as well as snake_case."""
    return {to_snake_case(key): value for key, value in (data or {}).items()}


def get_report_config(report_type: str) -> Dict[str, Any]:
    if report_type not in REPORT_CONFIGS:
        raise ValueError(f"Unknown report type: {report_type}")
    return REPORT_CONFIGS[report_type]


def get_report_title(report_type: str) -> str:
    return get_report_config(report_type)["title"]


def generate_report_filename(report_type: str, sequence: Any, report_date: Optional[date] = None) -> str:
    """``YY MM DD NNN - <prefix>``, e.g. ``24 08 01 007 - Inspection Report``"""
    report_date = report_date or date.today()
    prefix = get_report_config(report_type)["file_prefix"]
    return f"{report_date:%y %m %d} {str(sequence).zfill(3)} - {prefix}"


def validate_report_data(report_type: str, data: Dict[str, Any]) -> List[str]:
    """Return the list of validation errors (empty when the payload is complete)."""
    data = normalize_report_data(data)
    errors = [message for field, message in COMMON_REQUIRED_FIELDS if not data.get(field)]
    if report_type not in REPORT_CONFIGS:
        errors.append(f"Unknown report type: {report_type}")
        return errors
    errors.extend(message for field, message in TYPE_REQUIRED_FIELDS[report_type] if not data.get(field))
    return errors
