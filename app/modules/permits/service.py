from supabase import Client
from fastapi import HTTPException
from app.core.errors import AppError, ErrorTypes, to_app_error
from app.modules.activity_logs.service import ActivityLogService
from app.modules.permits.portal import PermitData, PermitStatus, PortalIntegrationManager
from app.modules.permits.schemas import PermitRecordResponse
from app.modules.permits import jurisdictions
from typing import Any, Dict, List, Optional, Tuple
import logging

import httpx

logger = logging.getLogger(__name__)


class PermitService:
    def __init__(self, supabase: Client, client: Optional[httpx.Client] = None):
        self.supabase = supabase
        self.client = client
        self.activity = ActivityLogService(supabase)
        self._manager: Optional[PortalIntegrationManager] = None

    @property
    def manager(self) -> PortalIntegrationManager:
        if self._manager is None:
            self._manager = PortalIntegrationManager(self.supabase, self.client)
            ready = self._manager.initialize_integrations()
            logger.info(f"Initialized {ready} permit portal integration(s)")
        return self._manager

    def close(self) -> None:
        """Release portal connections opened for this request"""
        if self._manager is not None:
            self._manager.close()
            self._manager = None

    def list_permits(self, jurisdiction: Optional[str] = None) -> List[PermitRecordResponse]:
        try:
            query = self.supabase.table("permits").select("*")
            if jurisdiction:
                query = query.eq("jurisdiction", jurisdiction)
            result = query.order("last_synced", desc=True).execute()
            return [PermitRecordResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def sync_permit(self, jurisdiction: str, permit_number: str, user_id: Optional[str] = None) -> PermitData:
        if self.manager.get_integration(jurisdiction) is None:
            raise AppError(f"No portal integration configured for {jurisdiction}", ErrorTypes.DB_NOT_FOUND)
        permit = self.manager.sync_permit(jurisdiction, permit_number)
        if permit is None:
            raise AppError(
                f"Permit {permit_number} could not be synchronized from {jurisdiction}",
                ErrorTypes.API_REQUEST_FAILED,
            )
        self.activity.log(
            "synced_permit",
            user_id=user_id,
            entity_type="permit",
            entity_id=permit_number,
            metadata={"jurisdiction": jurisdiction, "status": permit.status.ipc_status},
        )
        return permit

    def sync_all_permits(self, user_id: Optional[str] = None) -> Dict[str, int]:
        counts = self.manager.sync_all_permits()
        self.activity.log("synced_all_permits", user_id=user_id, entity_type="permit", metadata=counts)
        return counts

    def get_portal_status(self, jurisdiction: str, permit_number: str) -> PermitStatus:
        integration = self.manager.get_integration(jurisdiction)
        if integration is None:
            raise AppError(f"No portal integration configured for {jurisdiction}", ErrorTypes.DB_NOT_FOUND)
        try:
            return integration.get_permit_status(permit_number)
        except HTTPException:
            raise
        except Exception as e:
            raise to_app_error(e, ErrorTypes.API_REQUEST_FAILED)

    def submit(
        self,
        payload: jurisdictions.SubmittalPayload,
        documents: List[Tuple[str, bytes, str]],
        user_id: Optional[str] = None,
    ) -> jurisdictions.SubmittalResponse:
        response = jurisdictions.submit_to_jurisdiction(payload, documents, client=self.client)
        self.activity.log(
            "submitted_permit_application",
            user_id=user_id,
            entity_type="submittal",
            entity_id=payload.submittal_number,
            metadata={
                "jurisdiction": payload.jurisdiction,
                "success": response.success,
                "tracking_number": response.tracking_number,
                "documents": len(documents),
            },
        )
        return response

    def check_submittal_status(self, jurisdiction: str, tracking_number: str) -> Dict[str, Any]:
        return jurisdictions.check_permit_status(jurisdiction, tracking_number, client=self.client)

    def register_webhook(self, jurisdiction: str, submittal_id: str, callback_url: str) -> bool:
        return jurisdictions.register_webhook(jurisdiction, submittal_id, callback_url, client=self.client)
