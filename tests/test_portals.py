"""Tests for the Tyler and Accela portal integrations using httpx.MockTransport."""

from __future__ import annotations

import json
from urllib.parse import parse_qs

import httpx
import pytest

from app.core.errors import AppError, ErrorTypes
from app.modules.permits.portal import (
    AccelaIntegration,
    PortalCredentials,
    PortalIntegrationFactory,
    PortalIntegrationManager,
    TylerIntegration,
    map_status,
)
from app.modules.permits.service import PermitService

TYLER_URL = "https://tyler.test/api"
ACCELA_URL = "https://accela.test"


def _tyler_credentials(**overrides) -> PortalCredentials:
    values = {
        "jurisdiction": "Lee County",
        "provider": "tyler",
        "api_url": TYLER_URL + "/",
        "client_id": "cid",
        "client_secret": "secret",
    }
    values.update(overrides)
    return PortalCredentials(**values)


def _tyler_handler(requests: list, permit_status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path == "/api/auth/token":
            return httpx.Response(200, json={"access_token": "tok-1"})
        if path == "/api/permits/BP-1/status":
            return httpx.Response(permit_status, json={"status": "In Review", "nextRequiredAction": "Pay fees"})
        if path == "/api/permits/BP-1":
            return httpx.Response(200, json={
                "id": "42",
                "permitNumber": "BP-1",
                "permitType": "Building",
                "status": "Issued",
                "fees": [{"id": "f1", "description": "Plan review", "amount": 125.5, "status": "paid"}],
                "inspections": [{"id": "i1", "inspectionType": "Footing", "status": "passed"}],
            })
        return httpx.Response(404, json={})
    return handler


class TestStatusMapping:
    @pytest.mark.parametrize(
        "portal_status, expected",
        [("Pending", "under_review"), ("In Review", "under_review"), ("ON HOLD", "on_hold"),
         ("Expired", "closed"), ("Issued", "issued"), ("Whatever", "submitted"), (None, "submitted")],
    )
    def test_map_status(self, portal_status, expected) -> None:
        assert map_status(portal_status) == expected


class TestTylerIntegration:
    def test_authenticates_before_first_request(self) -> None:
        requests = []
        client = httpx.Client(transport=httpx.MockTransport(_tyler_handler(requests)))
        tyler = TylerIntegration(_tyler_credentials(), client=client)

        status = tyler.get_permit_status("BP-1")

        assert status.ipc_status == "under_review"
        assert status.next_action == "Pay fees"
        token_request, status_request = requests
        assert json.loads(token_request.content)["grant_type"] == "client_credentials"
        assert status_request.headers["Authorization"] == "Bearer tok-1"

    def test_permit_details_are_transformed(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(_tyler_handler([])))
        permit = TylerIntegration(_tyler_credentials(), client=client).get_permit_details("BP-1")

        assert permit.permit_number == "BP-1"
        assert permit.jurisdiction == "Lee County"
        assert permit.status.ipc_status == "issued"
        assert permit.fees[0].amount == 125.5
        assert permit.documents is None

    def test_rejected_token_raises_and_is_cleared(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(_tyler_handler([], permit_status=401)))
        tyler = TylerIntegration(_tyler_credentials(), client=client)
        with pytest.raises(AppError) as exc_info:
            tyler.get_permit_status("BP-1")
        assert exc_info.value.code == ErrorTypes.API_UNAUTHORIZED
        assert tyler.access_token is None

    def test_rate_limit(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(_tyler_handler([], permit_status=429)))
        with pytest.raises(AppError) as exc_info:
            TylerIntegration(_tyler_credentials(), client=client).get_permit_status("BP-1")
        assert exc_info.value.status_code == 429

    def test_failed_authentication(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(403)))
        tyler = TylerIntegration(_tyler_credentials(), client=client)
        assert tyler.authenticate() is False
        with pytest.raises(AppError) as exc_info:
            tyler.search_permits({"address": "1 Main"})
        assert exc_info.value.code == ErrorTypes.API_UNAUTHORIZED

    def test_authentication_is_logged(self, db) -> None:
        client = httpx.Client(transport=httpx.MockTransport(_tyler_handler([])))
        TylerIntegration(_tyler_credentials(), supabase=db, client=client).authenticate()
        log = db.tables["permit_portal_logs"][0]
        assert log["action"] == "authentication"
        assert log["details"] == {"status": "success"}


class TestAccelaIntegration:
    def test_password_grant_and_raw_token_header(self) -> None:
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path == "/oauth2/token":
                return httpx.Response(200, json={"access_token": "acc-tok"})
            return httpx.Response(200, json={"result": [{
                "id": "REC-1",
                "customId": "BLD-2024-1",
                "status": {"value": "Approved"},
                "type": {"type": "Residential"},
            }]})

        credentials = PortalCredentials(
            jurisdiction="Collier", provider="accela", api_url=ACCELA_URL,
            username="u", password="p", sandbox=True,
        )
        accela = AccelaIntegration(credentials, client=httpx.Client(transport=httpx.MockTransport(handler)))

        permit = accela.get_permit_details("REC-1")

        form = parse_qs(requests[0].content.decode())
        assert form["grant_type"] == ["password"]
        assert form["environment"] == ["TEST"]
        assert requests[1].headers["Authorization"] == "acc-tok"
        assert permit.permit_number == "BLD-2024-1"
        assert permit.status.ipc_status == "approved"

    def test_missing_record_is_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/oauth2/token":
                return httpx.Response(200, json={"access_token": "t"})
            return httpx.Response(200, json={"result": []})

        credentials = PortalCredentials(jurisdiction="Collier", provider="accela", api_url=ACCELA_URL)
        accela = AccelaIntegration(credentials, client=httpx.Client(transport=httpx.MockTransport(handler)))
        with pytest.raises(AppError) as exc_info:
            accela.get_permit_status("nope")
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("body", [{"result": []}, {"result": [{}]}, {}])
    def test_submission_without_record_id_is_api_failure(self, body) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/oauth2/token":
                return httpx.Response(200, json={"access_token": "t"})
            return httpx.Response(200, json=body)

        credentials = PortalCredentials(jurisdiction="Collier", provider="accela", api_url=ACCELA_URL)
        accela = AccelaIntegration(credentials, client=httpx.Client(transport=httpx.MockTransport(handler)))
        with pytest.raises(AppError) as exc_info:
            accela.submit_permit({"permitType": "Building"})
        assert exc_info.value.code == ErrorTypes.API_REQUEST_FAILED
        assert exc_info.value.status_code == 502


class TestFactoryAndManager:
    def test_factory_rejects_unsupported_provider(self) -> None:
        with pytest.raises(ValueError):
            PortalIntegrationFactory.create(_tyler_credentials(provider="cityview"))

    def test_factory_builds_tyler(self) -> None:
        assert isinstance(PortalIntegrationFactory.create(_tyler_credentials()), TylerIntegration)

    def test_manager_syncs_permits(self, db) -> None:
        db.seed("portal_credentials",
                {"id": "c1", "jurisdiction": "Lee County", "provider": "tyler", "api_url": TYLER_URL,
                 "client_id": "cid", "client_secret": "s", "active": True},
                {"id": "c2", "jurisdiction": "Naples", "provider": "cityview", "api_url": "https://x",
                 "active": True},
                {"id": "c3", "jurisdiction": "Old", "provider": "tyler", "api_url": TYLER_URL, "active": False})
        db.seed("permits",
                {"id": "r1", "jurisdiction": "Lee County", "permit_number": "BP-1"},
                {"id": "r2", "jurisdiction": "Naples", "permit_number": "N-9"})
        client = httpx.Client(transport=httpx.MockTransport(_tyler_handler([])))
        manager = PortalIntegrationManager(db, client=client)

        assert manager.initialize_integrations() == 1
        assert manager.sync_all_permits() == {"total": 2, "synced": 1, "failed": 1}

        synced = next(r for r in db.tables["permits"] if r["permit_number"] == "BP-1")
        assert synced["status"] == "issued"
        assert synced["portal_status"] == "Issued"
        assert synced["data"]["fees"][0]["amount"] == 125.5


class TestClientLifecycle:
    def test_injected_client_is_left_open(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(_tyler_handler([])))
        tyler = TylerIntegration(_tyler_credentials(), client=client)
        tyler.close()
        assert not client.is_closed

    def test_own_client_is_closed(self) -> None:
        tyler = TylerIntegration(_tyler_credentials())
        tyler.close()
        assert tyler.client.is_closed

    def test_manager_closes_ready_and_rejected_integrations(self, db, monkeypatch) -> None:
        created = []
        real_init = TylerIntegration.__init__

        def tracking_init(self, *args, **kwargs):
            real_init(self, *args, **kwargs)
            created.append(self)

        monkeypatch.setattr(TylerIntegration, "__init__", tracking_init)
        monkeypatch.setattr(TylerIntegration, "authenticate",
                            lambda self: self.credentials.jurisdiction == "Lee County")
        db.seed("portal_credentials",
                {"id": "c1", "jurisdiction": "Lee County", "provider": "tyler", "api_url": TYLER_URL, "active": True},
                {"id": "c2", "jurisdiction": "Sarasota", "provider": "tyler", "api_url": TYLER_URL, "active": True})
        manager = PortalIntegrationManager(db)

        assert manager.initialize_integrations() == 1
        ready = manager.get_integration("Lee County")
        rejected = next(i for i in created if i.credentials.jurisdiction == "Sarasota")
        assert rejected.client.is_closed
        assert not ready.client.is_closed

        manager.close()
        assert ready.client.is_closed
        assert manager.integrations == {}

    def test_manager_closes_integration_when_authentication_raises(self, db, monkeypatch) -> None:
        created = []
        real_init = TylerIntegration.__init__

        def tracking_init(self, *args, **kwargs):
            real_init(self, *args, **kwargs)
            created.append(self)

        def failing_authenticate(self):
            raise RuntimeError("portal down")

        monkeypatch.setattr(TylerIntegration, "__init__", tracking_init)
        monkeypatch.setattr(TylerIntegration, "authenticate", failing_authenticate)
        db.seed("portal_credentials",
                {"id": "c1", "jurisdiction": "Lee County", "provider": "tyler", "api_url": TYLER_URL, "active": True})

        with pytest.raises(RuntimeError):
            PortalIntegrationManager(db).initialize_integrations()
        assert created[0].client.is_closed

    def test_permit_service_close_releases_integrations(self, db, monkeypatch) -> None:
        monkeypatch.setattr(TylerIntegration, "authenticate", lambda self: True)
        db.seed("portal_credentials",
                {"id": "c1", "jurisdiction": "Lee County", "provider": "tyler", "api_url": TYLER_URL, "active": True})
        service = PermitService(db)
        integration = service.manager.get_integration("Lee County")

        service.close()

        assert integration.client.is_closed
        assert service._manager is None
