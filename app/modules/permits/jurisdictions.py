"""
Florida jurisdiction registry and submittal API calls.

JURISDICTION_ENDPOINTS lists the building departments that accept electronic
submittals (or at least status checks). Anything not listed falls back to
DEFAULT_JURISDICTION, which requires a manual submission at the permit office.

FLORIDA_JURISDICTIONS holds the portal profile of each major city and county
(provider, public portal, department contact) used by the permits UI.
"""

from pydantic import BaseModel
from app.config import settings
from typing import List, Optional, Dict, Any, Literal, Tuple
import logging

import httpx

logger = logging.getLogger(__name__)

AuthType = Literal["api_key", "oauth", "basic", "none"]
JurisdictionMethod = Literal["submit", "status", "update", "documents"]

WEBHOOK_EVENTS = ["status_change", "comment_added", "document_requested"]


class JurisdictionEndpoint(BaseModel):
    name: str
    api_url: Optional[str] = None
    webhook_url: Optional[str] = None
    api_key_setting: Optional[str] = None  # Settings attribute holding the API key
    auth_type: AuthType = "none"
    supported_methods: List[JurisdictionMethod] = []
    requires_manual_submission: bool = True

    @property
    def api_key(self) -> Optional[str]:
        return getattr(settings, self.api_key_setting) if self.api_key_setting else None


class JurisdictionProfile(BaseModel):
    id: str
    name: str
    type: Literal["city", "county"]
    region: str
    provider: str  # tyler, accela, citizenserve, custom
    portal_url: str
    api_available: bool
    department: str
    phone: Optional[str] = None


class SubmittalPayload(BaseModel):
    submittal_number: str
    project_name: str
    project_address: str
    applicant: str
    contractor: Optional[str] = None
    type: str
    category: str
    jurisdiction: str


class SubmittalResponse(BaseModel):
    success: bool
    jurisdiction_id: Optional[str] = None
    tracking_number: Optional[str] = None
    status: Optional[str] = None
    message: str
    next_steps: List[str] = []


JURISDICTION_ENDPOINTS: Dict[str, JurisdictionEndpoint] = {
    "Miami-Dade County": JurisdictionEndpoint(
        name="Miami-Dade County",
        api_url="https://api.miamidade.gov/permits/v1",
        webhook_url="https://permits.miamidade.gov/webhooks/status",
        api_key_setting="miami_dade_api_key",
        auth_type="api_key",
        supported_methods=["submit", "status", "update", "documents"],
        requires_manual_submission=False,
    ),
    "Broward County": JurisdictionEndpoint(
        name="Broward County",
        api_url="https://api.broward.org/building/permits",
        webhook_url="https://permits.broward.org/api/webhooks",
        api_key_setting="broward_api_key",
        auth_type="api_key",
        supported_methods=["submit", "status", "documents"],
        requires_manual_submission=False,
    ),
    "Palm Beach County": JurisdictionEndpoint(
        name="Palm Beach County",
        api_url="https://epermits.pbcgov.org/api/v2",
        api_key_setting="palm_beach_api_key",
        auth_type="oauth",
        supported_methods=["submit", "status", "update"],
        requires_manual_submission=False,
    ),
    "City of Miami": JurisdictionEndpoint(
        name="City of Miami",
        api_url="https://permitsonline.miami.gov/api",
        api_key_setting="miami_api_key",
        auth_type="api_key",
        supported_methods=["submit", "status"],
        requires_manual_submission=False,
    ),
    "City of Tampa": JurisdictionEndpoint(
        name="City of Tampa",
        api_url="https://permits.tampagov.net/api/v1",
        webhook_url="https://permits.tampagov.net/webhooks",
        auth_type="basic",
        supported_methods=["submit", "status", "update", "documents"],
        requires_manual_submission=False,
    ),
    "City of Orlando": JurisdictionEndpoint(
        name="City of Orlando",
        api_url="https://permits.cityoforlando.net/api",
        api_key_setting="orlando_api_key",
        auth_type="api_key",
        supported_methods=["submit", "status"],
        requires_manual_submission=False,
    ),
    "Lee County": JurisdictionEndpoint(
        name="Lee County",
        api_url="https://econnect.leegov.com/api/permits",
        auth_type="oauth",
        supported_methods=["status"],
        requires_manual_submission=True,
    ),
    "Jacksonville": JurisdictionEndpoint(
        name="Jacksonville",
        api_url="https://permits.coj.net/api/v1",
        auth_type="api_key",
        supported_methods=["submit", "status", "documents"],
        requires_manual_submission=False,
    ),
}

DEFAULT_JURISDICTION = JurisdictionEndpoint(name="Manual Submission Required")

FLORIDA_REGIONS = ["South Florida", "Southwest Florida", "Central Florida", "North Florida"]

FLORIDA_JURISDICTIONS: List[JurisdictionProfile] = [
    JurisdictionProfile(id="miami-dade", name="Miami-Dade County", type="county", region="South Florida",
                        provider="tyler", portal_url="https://www.miamidade.gov/permits/", api_available=True,
                        department="Department of Regulatory and Economic Resources", phone="(786) 315-2000"),
    JurisdictionProfile(id="broward", name="Broward County", type="county", region="South Florida",
                        provider="tyler", portal_url="https://www.broward.org/permittingandlicensing/", api_available=True,
                        department="Building Code Services Division", phone="(954) 765-4400"),
    JurisdictionProfile(id="palm-beach", name="Palm Beach County", type="county", region="South Florida",
                        provider="tyler", portal_url="https://www.pbcgov.com/pzb/", api_available=True,
                        department="Planning, Zoning & Building Department", phone="(561) 233-5000"),
    JurisdictionProfile(id="lee-county", name="Lee County", type="county", region="Southwest Florida",
                        provider="accela", portal_url="https://www.leegov.com/dcd", api_available=True,
                        department="Department of Community Development", phone="(239) 533-8585"),
    JurisdictionProfile(id="collier", name="Collier County", type="county", region="Southwest Florida",
                        provider="accela", portal_url="https://www.colliercountyfl.gov/government/growth-management",
                        api_available=True, department="Growth Management Department", phone="(239) 252-2400"),
    JurisdictionProfile(id="charlotte", name="Charlotte County", type="county", region="Southwest Florida",
                        provider="citizenserve", portal_url="https://www.charlottecountyfl.gov/services/buildingconstruction/",
                        api_available=False, department="Building Construction Services", phone="(941) 743-1201"),
    JurisdictionProfile(id="sarasota", name="Sarasota County", type="county", region="Southwest Florida",
                        provider="accela", portal_url="https://www.scgov.net/government/planning-and-development-services",
                        api_available=True, department="Planning and Development Services", phone="(941) 861-5000"),
    JurisdictionProfile(id="orlando", name="City of Orlando", type="city", region="Central Florida",
                        provider="accela", portal_url="https://www.orlando.gov/Building-Development", api_available=True,
                        department="Permitting Services", phone="(407) 246-2300"),
    JurisdictionProfile(id="orange-county", name="Orange County", type="county", region="Central Florida",
                        provider="tyler", portal_url="https://www.orangecountyfl.net/PermitsLicenses/", api_available=True,
                        department="Building Safety Division", phone="(407) 836-5550"),
    JurisdictionProfile(id="tampa", name="City of Tampa", type="city", region="Central Florida",
                        provider="accela", portal_url="https://www.tampa.gov/construction-services", api_available=True,
                        department="Construction Services Department", phone="(813) 274-3100"),
    JurisdictionProfile(id="hillsborough", name="Hillsborough County", type="county", region="Central Florida",
                        provider="accela", portal_url="https://www.hillsboroughcounty.org/en/businesses/permits",
                        api_available=True, department="Development Services", phone="(813) 272-5600"),
    JurisdictionProfile(id="jacksonville", name="City of Jacksonville", type="city", region="North Florida",
                        provider="accela", portal_url="https://www.coj.net/departments/planning-and-development",
                        api_available=True, department="Building Inspection Division", phone="(904) 255-7000"),
    JurisdictionProfile(id="duval", name="Duval County", type="county", region="North Florida",
                        provider="accela", portal_url="https://www.duvalcountyfl.gov/", api_available=True,
                        department="Building Inspection Division", phone="(904) 255-7000"),
    JurisdictionProfile(id="fort-myers", name="City of Fort Myers", type="city", region="Southwest Florida",
                        provider="citizenserve", portal_url="https://www.cityftmyers.com/development-services",
                        api_available=False, department="Building Department", phone="(239) 321-7925"),
    JurisdictionProfile(id="cape-coral", name="City of Cape Coral", type="city", region="Southwest Florida",
                        provider="tyler", portal_url="https://www.capecoral.gov/department/building_division/",
                        api_available=True, department="Building Division", phone="(239) 574-0546"),
    JurisdictionProfile(id="naples", name="City of Naples", type="city", region="Southwest Florida",
                        provider="custom", portal_url="https://www.naplesgov.com/buildingpermitting",
                        api_available=False, department="Building Department", phone="(239) 213-5030"),
]

# city or county shorthand -> profile id
JURISDICTION_QUICK_LOOKUP = {
    "Miami": "miami-dade",
    "Fort Lauderdale": "broward",
    "West Palm Beach": "palm-beach",
    "Fort Myers": "lee-county",
    "Naples": "collier",
    "Tampa": "tampa",
    "Orlando": "orlando",
    "Jacksonville": "jacksonville",
    "Cape Coral": "cape-coral",
    "Sarasota": "sarasota",
    "Miami-Dade": "miami-dade",
    "Broward": "broward",
    "Palm Beach": "palm-beach",
    "Lee": "lee-county",
    "Collier": "collier",
    "Charlotte": "charlotte",
    "Orange": "orange-county",
    "Hillsborough": "hillsborough",
    "Duval": "duval",
}


def get_jurisdiction_by_id(jurisdiction_id: str) -> Optional[JurisdictionProfile]:
    return next((j for j in FLORIDA_JURISDICTIONS if j.id == jurisdiction_id), None)


def find_jurisdictions(
    region: Optional[str] = None,
    provider: Optional[str] = None,
    api_only: bool = False,
) -> List[JurisdictionProfile]:
    return [
        j for j in FLORIDA_JURISDICTIONS
        if (region is None or j.region == region)
        and (provider is None or j.provider == provider)
        and (not api_only or j.api_available)
    ]


def get_jurisdiction_config(jurisdiction: str) -> JurisdictionEndpoint:
    return JURISDICTION_ENDPOINTS.get(jurisdiction, DEFAULT_JURISDICTION)


def supports_electronic_submission(jurisdiction: str) -> bool:
    endpoint = JURISDICTION_ENDPOINTS.get(jurisdiction)
    return not endpoint.requires_manual_submission if endpoint else False


def _auth_headers(endpoint: JurisdictionEndpoint) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if endpoint.auth_type == "api_key" and endpoint.api_key:
        headers["X-API-Key"] = endpoint.api_key
    return headers


def _basic_auth(endpoint: JurisdictionEndpoint) -> Optional[httpx.BasicAuth]:
    if endpoint.auth_type == "basic" and settings.jurisdiction_basic_username:
        return httpx.BasicAuth(settings.jurisdiction_basic_username, settings.jurisdiction_basic_password or "")
    return None


def _client(client: Optional[httpx.Client]) -> httpx.Client:
    return client or httpx.Client(timeout=settings.portal_http_timeout)


def submit_to_jurisdiction(
    payload: SubmittalPayload,
    documents: Optional[List[Tuple[str, bytes, str]]] = None,
    client: Optional[httpx.Client] = None,
) -> SubmittalResponse:
    """
    Submit a permit application.
    documents are (file name, content, content type) tuples sent as document_0, document_1, ...
    Failures are reported in the response, never raised.
    """
    endpoint = get_jurisdiction_config(payload.jurisdiction)

    if endpoint.requires_manual_submission:
        return SubmittalResponse(
            success=True,
            message=f"Submittal prepared for {payload.jurisdiction}. Manual submission required.",
            next_steps=[
                f"Visit {payload.jurisdiction} permit office or website",
                "Upload documents to jurisdiction portal",
                f"Reference submittal number: {payload.submittal_number}",
            ],
        )

    if not endpoint.api_url or "submit" not in endpoint.supported_methods:
        return SubmittalResponse(
            success=False,
            message=f"Electronic submission not available for {payload.jurisdiction}",
            next_steps=["Contact jurisdiction directly for submission instructions"],
        )

    form = {
        "project_name": payload.project_name,
        "project_address": payload.project_address,
        "applicant": payload.applicant,
        "permit_type": payload.type,
        "category": payload.category,
        "reference_number": payload.submittal_number,
    }
    if payload.contractor:
        form["contractor"] = payload.contractor
    files = {
        f"document_{index}": document
        for index, document in enumerate(documents or [])
    }

    http = _client(client)
    try:
        response = http.post(
            f"{endpoint.api_url}/submittals",
            data=form,
            files=files or None,
            headers=_auth_headers(endpoint),
            auth=_basic_auth(endpoint),
        )
    except httpx.HTTPError as e:
        logger.error(f"Jurisdiction submission error for {payload.jurisdiction}: {e}")
        return SubmittalResponse(
            success=False,
            message=f"Network error submitting to {payload.jurisdiction}",
            next_steps=["Check internet connection", "Try again later", "Contact support"],
        )
    finally:
        if client is None:
            http.close()

    if response.is_success:
        data = response.json()
        return SubmittalResponse(
            success=True,
            jurisdiction_id=data.get("id") or data.get("submittal_id"),
            tracking_number=data.get("tracking_number"),
            status=data.get("status") or "submitted",
            message=f"Successfully submitted to {payload.jurisdiction}",
            next_steps=data.get("next_steps") or [
                "Monitor status in dashboard",
                "Check email for updates",
                "Respond to any review comments",
            ],
        )
    return SubmittalResponse(
        success=False,
        message=f"Submission failed: {response.text}",
        next_steps=["Review error message", "Contact support if needed"],
    )


def check_permit_status(
    jurisdiction: str,
    tracking_number: str,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    endpoint = get_jurisdiction_config(jurisdiction)
    if not endpoint.api_url or "status" not in endpoint.supported_methods:
        return {"success": False, "message": "Status check not available for this jurisdiction"}

    headers = {"X-API-Key": endpoint.api_key} if endpoint.api_key else {}
    http = _client(client)
    try:
        response = http.get(f"{endpoint.api_url}/status/{tracking_number}", headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Status check error for {jurisdiction}/{tracking_number}: {e}")
        return {"success": False, "message": "Error checking permit status"}
    finally:
        if client is None:
            http.close()

    if response.is_success:
        return response.json()
    return {"success": False, "message": "Unable to retrieve status"}


def register_webhook(
    jurisdiction: str,
    submittal_id: str,
    callback_url: str,
    client: Optional[httpx.Client] = None,
) -> bool:
    """Ask the jurisdiction to call callback_url on status changes, comments and document requests"""
    endpoint = JURISDICTION_ENDPOINTS.get(jurisdiction)
    if not endpoint or not endpoint.webhook_url:
        logger.info(f"No webhook support for {jurisdiction}")
        return False

    headers = {"X-API-Key": endpoint.api_key} if endpoint.api_key else {}
    http = _client(client)
    try:
        response = http.post(
            endpoint.webhook_url,
            json={"submittal_id": submittal_id, "callback_url": callback_url, "events": WEBHOOK_EVENTS},
            headers=headers,
        )
        return response.is_success
    except httpx.HTTPError as e:
        logger.error(f"Webhook registration error for {jurisdiction}: {e}")
        return False
    finally:
        if client is None:
            http.close()
