"""
Security event monitoring.

Authentication outcomes are written to ``security_events``. Repeated failed logins
from one source IP or against one email inside FAILED_LOGIN_WINDOW_MINUTES raise a
single high-severity ``brute_force_detected`` event per window.
"""

from supabase import Client
from app.modules.security.schemas import SecurityEventResponse, SecurityMetricsResponse
from app.core.errors import ErrorTypes, to_app_error
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

FAILED_LOGIN_THRESHOLD = 5
FAILED_LOGIN_WINDOW_MINUTES = 15

SEVERITIES = ["low", "medium", "high", "critical"]


class SecurityEventTypes:
    FAILED_LOGIN = "failed_login"
    SUCCESSFUL_LOGIN = "successful_login"
    BRUTE_FORCE_DETECTED = "brute_force_detected"


def _since(minutes: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(minutes=minutes)).isoformat()


class SecurityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def log_event(
        self,
        event_type: str,
        severity: str,
        description: str,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        source_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Record a security event. Failures are logged and never propagate to the caller."""
        try:
            result = self.supabase.table("security_events").insert({
                "event_type": event_type,
                "severity": severity,
                "description": description,
                "user_id": user_id,
                "email": email,
                "source_ip": source_ip,
                "user_agent": user_agent,
                "endpoint": endpoint,
                "metadata": metadata or {},
                "status": "active",
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.warning(f"Security event '{event_type}' could not be recorded: {e}")
            return None

    def record_login_attempt(
        self,
        email: str,
        success: bool,
        source_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        if success:
            self.log_event(
                SecurityEventTypes.SUCCESSFUL_LOGIN, "low", "Successful login attempt",
                user_id=user_id, email=email, source_ip=source_ip, user_agent=user_agent,
                endpoint="/auth/login", metadata={"login_method": "password"},
            )
            return

        self.log_event(
            SecurityEventTypes.FAILED_LOGIN, "medium", "Failed login attempt",
            email=email, source_ip=source_ip, user_agent=user_agent,
            endpoint="/auth/login", metadata={"login_method": "password"},
        )
        self.detect_brute_force(email, source_ip)

    def _recent(self, event_type: str, field: str, value: str) -> List[Dict[str, Any]]:
        result = self.supabase.table("security_events")\
            .select("id, created_at")\
            .eq("event_type", event_type)\
            .eq(field, value)\
            .gte("created_at", _since(FAILED_LOGIN_WINDOW_MINUTES))\
            .execute()
        return result.data or []

    def detect_brute_force(self, email: Optional[str], source_ip: Optional[str]) -> bool:
        """Flag FAILED_LOGIN_THRESHOLD failures inside the window, per source IP and per email"""
        detected = False
        for field, value in (("source_ip", source_ip), ("email", email)):
            if not value:
                continue
            try:
                attempts = len(self._recent(SecurityEventTypes.FAILED_LOGIN, field, value))
                if attempts < FAILED_LOGIN_THRESHOLD:
                    continue
                detected = True
                # one alert per identifier per window
                if self._recent(SecurityEventTypes.BRUTE_FORCE_DETECTED, field, value):
                    continue
            except Exception as e:
                logger.warning(f"Brute force check on {field} failed: {e}")
                continue

            logger.warning(f"SECURITY ALERT: {attempts} failed logins for {field}={value} "
                           f"within {FAILED_LOGIN_WINDOW_MINUTES} minutes")
            self.log_event(
                SecurityEventTypes.BRUTE_FORCE_DETECTED, "high",
                f"Multiple failed login attempts for {field} {value}",
                email=email if field == "email" else None,
                source_ip=source_ip if field == "source_ip" else None,
                endpoint="/auth/login",
                metadata={
                    "identifier": field,
                    "failed_attempts": attempts,
                    "window_minutes": FAILED_LOGIN_WINDOW_MINUTES,
                    "threshold": FAILED_LOGIN_THRESHOLD,
                },
            )
        return detected

    def list_events(
        self,
        limit: int = 50,
        event_type: Optional[str] = None,
        severity: Optional[str] = None,
    ) -> List[SecurityEventResponse]:
        """Most recent events first"""
        try:
            query = self.supabase.table("security_events").select("*")
            if event_type:
                query = query.eq("event_type", event_type)
            if severity:
                query = query.eq("severity", severity)
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [SecurityEventResponse(**row) for row in result.data or []]
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

    def get_metrics(self, hours: int = 24) -> SecurityMetricsResponse:
        try:
            result = self.supabase.table("security_events")\
                .select("*")\
                .gte("created_at", _since(hours * 60))\
                .execute()
        except Exception as e:
            raise to_app_error(e, ErrorTypes.DB_QUERY)

        events = result.data or []
        by_severity = {severity: 0 for severity in SEVERITIES}
        by_type: Dict[str, int] = {}
        suspicious_ips = set()
        suspicious_users = set()
        for event in events:
            severity = event.get("severity") or "low"
            by_severity[severity] = by_severity.get(severity, 0) + 1
            by_type[event["event_type"]] = by_type.get(event["event_type"], 0) + 1
            if event["event_type"] == SecurityEventTypes.BRUTE_FORCE_DETECTED:
                if event.get("source_ip"):
                    suspicious_ips.add(event["source_ip"])
                if event.get("email"):
                    suspicious_users.add(event["email"])

        return SecurityMetricsResponse(
            hours=hours,
            total_events=len(events),
            events_by_severity=by_severity,
            events_by_type=by_type,
            failed_logins=by_type.get(SecurityEventTypes.FAILED_LOGIN, 0),
            threats_detected=by_type.get(SecurityEventTypes.BRUTE_FORCE_DETECTED, 0),
            suspicious_ips=sorted(suspicious_ips),
            suspicious_users=sorted(suspicious_users),
        )
