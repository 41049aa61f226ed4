from fastapi import APIRouter, Depends, UploadFile, File, Form
from app.database.supabase_client import get_supabase
from app.modules.permits.schemas import (
    PermitRecordResponse, SyncAllResponse, WebhookRegistration,
    WebhookRegistrationResponse, JurisdictionListResponse
)
from app.modules.permits.portal import PermitData, PermitStatus
from app.modules.permits.service import PermitService
from app.modules.permits import jurisdictions
from app.core.dependencies import require_permission
from supabase import Client
from typing import Iterator, List, Optional, Dict, Any

router = APIRouter(prefix="/permits", tags=["permits"])


def get_permit_service(supabase: Client = Depends(get_supabase)) -> Iterator[PermitService]:
    service = PermitService(supabase)
    try:
        yield service
    finally:
        service.close()


@router.get("", response_model=List[PermitRecordResponse])
async def list_permits(
    jurisdiction: Optional[str] = None,
    user_data: Dict = Depends(require_permission("permits:read")),
    service: PermitService = Depends(get_permit_service)
):
    return service.list_permits(jurisdiction)


@router.get("/jurisdictions", response_model=JurisdictionListResponse)
async def list_jurisdictions(
    region: Optional[str] = None,
    provider: Optional[str] = None,
    api_only: bool = False,
    user_data: Dict = Depends(require_permission("permits:read"))
):
    """Florida jurisdictions with portal details and electronic submission support"""
    results = []
    for profile in jurisdictions.find_jurisdictions(region, provider, api_only):
        entry = profile.model_dump()
        entry["electronic_submission"] = jurisdictions.supports_electronic_submission(profile.name)
        results.append(entry)
    return {"jurisdictions": results, "regions": jurisdictions.FLORIDA_REGIONS}


@router.post("/sync-all", response_model=SyncAllResponse)
async def sync_all_permits(
    user_data: Dict = Depends(require_permission("permits:sync")),
    service: PermitService = Depends(get_permit_service)
):
    return service.sync_all_permits(user_data["id"])


@router.post("/sync/{jurisdiction}/{permit_number}", response_model=PermitData)
async def sync_permit(
    jurisdiction: str,
    permit_number: str,
    user_data: Dict = Depends(require_permission("permits:sync")),
    service: PermitService = Depends(get_permit_service)
):
    return service.sync_permit(jurisdiction, permit_number, user_data["id"])


@router.post("/submittals", response_model=jurisdictions.SubmittalResponse)
async def submit_to_jurisdiction(
    submittal_number: str = Form(...),
    project_name: str = Form(...),
    project_address: str = Form(...),
    applicant: str = Form(...),
    type: str = Form(...),
    category: str = Form(...),
    jurisdiction: str = Form(...),
    contractor: Optional[str] = Form(None),
    documents: List[UploadFile] = File(default=[]),
    user_data: Dict = Depends(require_permission("permits:submit")),
    service: PermitService = Depends(get_permit_service)
):
    """
    Submit a permit application to a jurisdiction.
    Jurisdictions without an API get a prepared submittal with manual next steps.
    """
    payload = jurisdictions.SubmittalPayload(
        submittal_number=submittal_number,
        project_name=project_name,
        project_address=project_address,
        applicant=applicant,
        contractor=contractor,
        type=type,
        category=category,
        jurisdiction=jurisdiction,
    )
    files = [
        (doc.filename or f"document_{i}", await doc.read(), doc.content_type or "application/octet-stream")
        for i, doc in enumerate(documents)
    ]
    return service.submit(payload, files, user_data["id"])


@router.get("/submittals/{jurisdiction}/{tracking_number}", response_model=Dict[str, Any])
async def check_submittal_status(
    jurisdiction: str,
    tracking_number: str,
    user_data: Dict = Depends(require_permission("permits:read")),
    service: PermitService = Depends(get_permit_service)
):
    return service.check_submittal_status(jurisdiction, tracking_number)


@router.post("/webhooks", response_model=WebhookRegistrationResponse)
async def register_webhook(
    registration: WebhookRegistration,
    user_data: Dict = Depends(require_permission("permits:submit")),
    service: PermitService = Depends(get_permit_service)
):
    registered = service.register_webhook(
        registration.jurisdiction, registration.submittal_id, registration.callback_url
    )
    return {"registered": registered}


@router.get("/{jurisdiction}/{permit_number}/status", response_model=PermitStatus)
async def get_permit_status(
    jurisdiction: str,
    permit_number: str,
    user_data: Dict = Depends(require_permission("permits:read")),
    service: PermitService = Depends(get_permit_service)
):
    """Live status from the jurisdiction's permit portal"""
    return service.get_portal_status(jurisdiction, permit_number)
