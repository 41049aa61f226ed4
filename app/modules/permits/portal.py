"""
Permit portal integrations.

Each provider (Tyler EnerGov, Accela Civic Platform) is wrapped by a
PortalIntegration subclass that authenticates lazily and translates the
provider's payloads into PermitData. PortalIntegrationManager loads the active
credentials from portal_credentials and keeps the permits table in sync.
"""

from abc import ABC, abstractmethod
from pydantic import BaseModel
from supabase import Client
from app.config import settings
from app.core.errors import AppError, ErrorTypes, to_app_error
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
import logging

import httpx

logger = logging.getLogger(__name__)

PortalProvider = Literal["tyler", "accela", "cityview", "citizenserve", "viewpoint", "custom"]
IPCStatus = Literal["submitted", "under_review", "approved", "rejected", "issued", "closed", "on_hold"]

STATUS_MAP: Dict[str, str] = {
    "submitted": "submitted",
    "pending": "under_review",
    "in review": "under_review",
    "approved": "approved",
    "rejected": "rejected",
    "issued": "issued",
    "closed": "closed",
    "on hold": "on_hold",
    "expired": "closed",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def map_status(portal_status: Optional[str]) -> str:
    """Map a portal's status text to the internal permit status (unknown -> submitted)."""
    return STATUS_MAP.get((portal_status or "").strip().lower(), "submitted")


class PortalCredentials(BaseModel):
    id: Optional[str] = None
    jurisdiction: str
    provider: PortalProvider
    api_url: str
    api_key: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    sandbox: bool = False
    active: bool = True

    class Config:
        extra = "ignore"


class PermitStatus(BaseModel):
    portal_status: str
    ipc_status: IPCStatus
    last_updated: Optional[str] = None
    next_action: Optional[str] = None


class PermitInspection(BaseModel):
    id: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None  # scheduled, passed, failed, cancelled
    scheduled_date: Optional[str] = None
    completed_date: Optional[str] = None
    inspector: Optional[str] = None
    comments: Optional[str] = None


class PermitDocument(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None
    uploaded_date: Optional[str] = None
    status: Optional[str] = None  # pending, approved, rejected
    comments: Optional[str] = None


class PermitFee(BaseModel):
    id: Optional[str] = None
    description: Optional[str] = None
    amount: float = 0
    status: Optional[str] = None  # unpaid, paid, waived
    due_date: Optional[str] = None
    paid_date: Optional[str] = None


class PermitContact(BaseModel):
    name: str
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None


class PermitEvent(BaseModel):
    timestamp: Optional[str] = None
    event: Optional[str] = None
    description: Optional[str] = None
    user: Optional[str] = None

    class Config:
        extra = "allow"


class PermitData(BaseModel):
    id: Optional[str] = None
    permit_number: str
    project_id: str = ""
    jurisdiction: str
    type: Optional[str] = None
    status: PermitStatus
    submitted_date: Optional[str] = None
    approved_date: Optional[str] = None
    expiration_date: Optional[str] = None
    inspections: Optional[List[PermitInspection]] = None
    documents: Optional[List[PermitDocument]] = None
    fees: Optional[List[PermitFee]] = None
    contacts: Optional[List[PermitContact]] = None
    timeline: Optional[List[PermitEvent]] = None


class PortalIntegration(ABC):
    """Base class for a provider API. Operations authenticate on first use."""

    def __init__(
        self,
        credentials: PortalCredentials,
        supabase: Optional[Client] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.credentials = credentials
        self.supabase = supabase
        self.base_url = credentials.api_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=settings.portal_http_timeout)
        self.access_token: Optional[str] = None

    def close(self) -> None:
        """Close the HTTP client if this integration created it"""
        if self._owns_client:
            self.client.close()

    @abstractmethod
    def authenticate(self) -> bool:
        ...

    @abstractmethod
    def auth_headers(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def submit_permit(self, data: Dict[str, Any]) -> str:
        ...

    @abstractmethod
    def get_permit_status(self, permit_number: str) -> PermitStatus:
        ...

    @abstractmethod
    def get_permit_details(self, permit_number: str) -> PermitData:
        ...

    @abstractmethod
    def schedule_inspection(self, permit_number: str, inspection: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def upload_document(self, permit_number: str, filename: str, content: bytes,
                        content_type: str = "application/pdf") -> bool:
        ...

    @abstractmethod
    def get_inspection_results(self, permit_number: str) -> List[PermitInspection]:
        ...

    @abstractmethod
    def search_permits(self, query: Dict[str, Any]) -> List[PermitData]:
        ...

    def map_status(self, portal_status: Optional[str]) -> str:
        return map_status(portal_status)

    def log_activity(self, action: str, details: Dict[str, Any]) -> None:
        if self.supabase is None:
            return
        try:
            self.supabase.table("permit_portal_logs").insert({
                "jurisdiction": self.credentials.jurisdiction,
                "provider": self.credentials.provider,
                "action": action,
                "details": details,
                "timestamp": _now(),
            }).execute()
        except Exception as e:
            logger.warning(f"Portal log '{action}' for {self.credentials.jurisdiction} failed: {e}")

    def ensure_authenticated(self) -> None:
        if self.access_token:
            return
        if not self.authenticate():
            raise AppError(
                f"Authentication with the {self.credentials.provider} portal for "
                f"{self.credentials.jurisdiction} failed",
                ErrorTypes.API_UNAUTHORIZED,
            )

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Authenticated request against the portal; transport failures become AppErrors"""
        self.ensure_authenticated()
        headers = {**self.auth_headers(), **kwargs.pop("headers", {})}
        try:
            return self.client.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise to_app_error(e, ErrorTypes.API_REQUEST_FAILED)

    def request_json(self, method: str, path: str, **kwargs) -> Any:
        response = self.request(method, path, **kwargs)
        if response.status_code == 401:
            self.access_token = None
            raise AppError(f"{self.credentials.provider} portal rejected the access token", ErrorTypes.API_UNAUTHORIZED)
        if response.status_code == 429:
            raise AppError(code=ErrorTypes.API_RATE_LIMIT)
        if response.is_error:
            raise AppError(
                f"{self.credentials.provider} portal request failed ({response.status_code})",
                ErrorTypes.API_REQUEST_FAILED,
                details=response.text,
            )
        return response.json()


class TylerIntegration(PortalIntegration):
    """Tyler Technologies (EnerGov) REST API with client-credentials OAuth."""

    def authenticate(self) -> bool:
        try:
            response = self.client.post(
                f"{self.base_url}/auth/token",
                json={
                    "client_id": self.credentials.client_id,
                    "client_secret": self.credentials.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            self.log_activity("authentication", {"status": "error", "error": str(e)})
            return False

        if response.is_success:
            self.access_token = response.json().get("access_token")
            self.log_activity("authentication", {"status": "success"})
            return bool(self.access_token)

        self.log_activity("authentication", {"status": "failed", "status_code": response.status_code})
        return False

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def submit_permit(self, data: Dict[str, Any]) -> str:
        result = self.request_json("POST", "/permits", json=data)
        self.log_activity("permit_submission", {"permit_number": result.get("permitNumber")})
        return result.get("permitNumber")

    def get_permit_status(self, permit_number: str) -> PermitStatus:
        data = self.request_json("GET", f"/permits/{permit_number}/status")
        return PermitStatus(
            portal_status=data.get("status") or "",
            ipc_status=self.map_status(data.get("status")),
            last_updated=data.get("lastModified") or _now(),
            next_action=data.get("nextRequiredAction"),
        )

    def get_permit_details(self, permit_number: str) -> PermitData:
        return self.transform_permit(self.request_json("GET", f"/permits/{permit_number}"))

    def schedule_inspection(self, permit_number: str, inspection: Dict[str, Any]) -> bool:
        response = self.request("POST", f"/permits/{permit_number}/inspections", json=inspection)
        self.log_activity("inspection_scheduled", {"permit_number": permit_number, "inspection": inspection})
        return response.is_success

    def upload_document(self, permit_number: str, filename: str, content: bytes,
                        content_type: str = "application/pdf") -> bool:
        response = self.request(
            "POST",
            f"/permits/{permit_number}/documents",
            files={"document": (filename, content, content_type)},
            data={"permitNumber": permit_number},
        )
        self.log_activity("document_uploaded", {"permit_number": permit_number, "document_name": filename})
        return response.is_success

    def get_inspection_results(self, permit_number: str) -> List[PermitInspection]:
        data = self.request_json("GET", f"/permits/{permit_number}/inspections")
        return [self.transform_inspection(i) for i in data.get("inspections") or []]

    def search_permits(self, query: Dict[str, Any]) -> List[PermitData]:
        data = self.request_json("GET", "/permits/search", params=query)
        return [self.transform_permit(p) for p in data.get("results") or []]

    def transform_permit(self, data: Dict[str, Any]) -> PermitData:
        return PermitData(
            id=data.get("id"),
            permit_number=data.get("permitNumber") or "",
            project_id=data.get("projectId") or "",
            jurisdiction=self.credentials.jurisdiction,
            type=data.get("permitType"),
            status=PermitStatus(
                portal_status=data.get("status") or "",
                ipc_status=self.map_status(data.get("status")),
                last_updated=data.get("lastModified"),
            ),
            submitted_date=data.get("applicationDate"),
            approved_date=data.get("approvalDate"),
            expiration_date=data.get("expirationDate"),
            inspections=[self.transform_inspection(i) for i in data["inspections"]] if data.get("inspections") else None,
            documents=[self.transform_document(d) for d in data["documents"]] if data.get("documents") else None,
            fees=[self.transform_fee(f) for f in data["fees"]] if data.get("fees") else None,
            timeline=[PermitEvent(**e) for e in data["timeline"]] if data.get("timeline") else None,
        )

    @staticmethod
    def transform_inspection(inspection: Dict[str, Any]) -> PermitInspection:
        return PermitInspection(
            id=inspection.get("id"),
            type=inspection.get("inspectionType"),
            status=inspection.get("status"),
            scheduled_date=inspection.get("scheduledDate"),
            completed_date=inspection.get("completedDate"),
            inspector=inspection.get("inspectorName"),
            comments=inspection.get("comments"),
        )

    @staticmethod
    def transform_document(doc: Dict[str, Any]) -> PermitDocument:
        return PermitDocument(
            id=doc.get("id"),
            name=doc.get("fileName"),
            type=doc.get("documentType"),
            url=doc.get("downloadUrl"),
            uploaded_date=doc.get("uploadDate"),
            status=doc.get("reviewStatus"),
            comments=doc.get("reviewComments"),
        )

    @staticmethod
    def transform_fee(fee: Dict[str, Any]) -> PermitFee:
        return PermitFee(
            id=fee.get("id"),
            description=fee.get("feeDescription"),
            amount=fee.get("amount") or 0,
            status=fee.get("paymentStatus"),
            due_date=fee.get("dueDate"),
            paid_date=fee.get("paidDate"),
        )


class AccelaIntegration(PortalIntegration):
    """Accela Civic Platform v4 API. The session token is sent as-is in Authorization."""

    def authenticate(self) -> bool:
        try:
            response = self.client.post(
                f"{self.base_url}/oauth2/token",
                data={
                    "grant_type": "password",
                    "username": self.credentials.username or "",
                    "password": self.credentials.password or "",
                    "agency_name": self.credentials.jurisdiction,
                    "environment": "TEST" if self.credentials.sandbox else "PROD",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Accela authentication failed for {self.credentials.jurisdiction}: {e}")
            return False

        if response.is_success:
            self.access_token = response.json().get("access_token")
            return bool(self.access_token)
        return False

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": self.access_token or ""}

    def _record(self, permit_number: str) -> Dict[str, Any]:
        data = self.request_json("GET", f"/v4/records/{permit_number}")
        records = data.get("result") or []
        if not records:
            raise AppError(f"Permit {permit_number} not found in Accela", ErrorTypes.DB_NOT_FOUND)
        return records[0]

    def submit_permit(self, data: Dict[str, Any]) -> str:
        body = {"type": data.get("permitType"), "description": data.get("description"), **data}
        result = self.request_json("POST", "/v4/records", json=body)
        try:
            return result["result"][0]["id"]
        except (KeyError, IndexError, TypeError):
            logger.error(f"Accela submission for {self.credentials.jurisdiction} returned no record: {result}")
            raise AppError("Accela portal returned no record id", ErrorTypes.API_REQUEST_FAILED)

    def get_permit_status(self, permit_number: str) -> PermitStatus:
        record = self._record(permit_number)
        portal_status = (record.get("status") or {}).get("value") or ""
        return PermitStatus(
            portal_status=portal_status,
            ipc_status=self.map_status(portal_status),
            last_updated=record.get("updateDate"),
            next_action=record.get("nextInspectionType"),
        )

    def get_permit_details(self, permit_number: str) -> PermitData:
        return self.transform_record(self._record(permit_number))

    def schedule_inspection(self, permit_number: str, inspection: Dict[str, Any]) -> bool:
        body = {
            "recordId": permit_number,
            "type": inspection.get("type"),
            "scheduledDate": inspection.get("date"),
            **inspection,
        }
        return self.request("POST", "/v4/inspections", json=body).is_success

    def upload_document(self, permit_number: str, filename: str, content: bytes,
                        content_type: str = "application/pdf") -> bool:
        response = self.request(
            "POST",
            "/v4/documents",
            files={"uploadedFile": (filename, content, content_type)},
            data={"recordId": permit_number},
        )
        return response.is_success

    def get_inspection_results(self, permit_number: str) -> List[PermitInspection]:
        data = self.request_json("GET", "/v4/inspections", params={"recordId": permit_number})
        return [self.transform_inspection(i) for i in data.get("result") or []]

    def search_permits(self, query: Dict[str, Any]) -> List[PermitData]:
        data = self.request_json("POST", "/v4/records/search", json=query)
        return [self.transform_record(r) for r in data.get("result") or []]

    def transform_record(self, data: Dict[str, Any]) -> PermitData:
        portal_status = (data.get("status") or {}).get("value") or ""
        return PermitData(
            id=data.get("id"),
            permit_number=data.get("customId") or data.get("id") or "",
            project_id=data.get("projectId") or "",
            jurisdiction=self.credentials.jurisdiction,
            type=(data.get("type") or {}).get("type") or "",
            status=PermitStatus(
                portal_status=portal_status,
                ipc_status=self.map_status(portal_status),
                last_updated=data.get("updateDate"),
            ),
            submitted_date=data.get("openedDate"),
            approved_date=data.get("statusDate"),
            expiration_date=data.get("expirationDate"),
            timeline=[PermitEvent(**e) for e in data["statusHistory"]] if data.get("statusHistory") else None,
        )

    @staticmethod
    def transform_inspection(inspection: Dict[str, Any]) -> PermitInspection:
        return PermitInspection(
            id=inspection.get("id"),
            type=(inspection.get("type") or {}).get("value") or "",
            status=(inspection.get("status") or {}).get("value") or "scheduled",
            scheduled_date=inspection.get("scheduleDate"),
            completed_date=inspection.get("completedDate"),
            inspector=(inspection.get("inspector") or {}).get("value") or "",
            comments=inspection.get("resultComment"),
        )


class PortalIntegrationFactory:
    PROVIDERS = {
        "tyler": TylerIntegration,
        "accela": AccelaIntegration,
    }

    @classmethod
    def create(
        cls,
        credentials: PortalCredentials,
        supabase: Optional[Client] = None,
        client: Optional[httpx.Client] = None,
    ) -> PortalIntegration:
        integration_class = cls.PROVIDERS.get(credentials.provider)
        if integration_class is None:
            raise ValueError(f"Unsupported portal provider: {credentials.provider}")
        return integration_class(credentials, supabase=supabase, client=client)


class PortalIntegrationManager:
    def __init__(self, supabase: Client, client: Optional[httpx.Client] = None):
        self.supabase = supabase
        self.client = client
        self.integrations: Dict[str, PortalIntegration] = {}

    def load_credentials(self) -> List[PortalCredentials]:
        try:
            result = self.supabase.table("portal_credentials")\
                .select("*")\
                .eq("active", True)\
                .execute()
            return [PortalCredentials(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def initialize_integrations(self) -> int:
        """Create and authenticate an integration per active credential; returns how many are ready"""
        for credentials in self.load_credentials():
            try:
                integration = PortalIntegrationFactory.create(credentials, self.supabase, self.client)
            except ValueError as e:
                logger.error(f"Failed to initialize {credentials.jurisdiction}: {e}")
                continue
            try:
                authenticated = integration.authenticate()
            except Exception:
                integration.close()
                raise
            if authenticated:
                self.integrations[credentials.jurisdiction] = integration
            else:
                logger.warning(f"Portal authentication failed for {credentials.jurisdiction}")
                integration.close()
        return len(self.integrations)

    def close(self) -> None:
        for integration in self.integrations.values():
            integration.close()
        self.integrations.clear()

    def get_integration(self, jurisdiction: str) -> Optional[PortalIntegration]:
        return self.integrations.get(jurisdiction)

    def sync_permit(self, jurisdiction: str, permit_number: str) -> Optional[PermitData]:
        integration = self.get_integration(jurisdiction)
        if integration is None:
            logger.error(f"No integration found for {jurisdiction}")
            return None

        try:
            permit = integration.get_permit_details(permit_number)
            self.supabase.table("permits").upsert({
                "permit_number": permit.permit_number or permit_number,
                "jurisdiction": permit.jurisdiction,
                "status": permit.status.ipc_status,
                "portal_status": permit.status.portal_status,
                "last_synced": _now(),
                "data": permit.model_dump(mode="json"),
            }, on_conflict="jurisdiction,permit_number").execute()
            return permit
        except Exception as e:
            logger.error(f"Failed to sync permit {permit_number} ({jurisdiction}): {e}")
            return None

    def sync_all_permits(self) -> Dict[str, int]:
        try:
            result = self.supabase.table("permits").select("jurisdiction, permit_number").execute()
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        permits = result.data or []
        synced = sum(
            1 for permit in permits
            if self.sync_permit(permit["jurisdiction"], permit["permit_number"]) is not None
        )
        return {"total": len(permits), "synced": synced, "failed": len(permits) - synced}
