import hashlib
import time
import logging
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from app.core.errors import AppError, ErrorTypes
from app.modules.security.service import SecurityService
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, data_client: Optional[Client] = None):
        self.supabase = supabase
        # profiles are written with the service client when available
        self.data_client = data_client or supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user with Supabase Auth and create their profile"""
        try:
            user_metadata = {}
            if register_data.name:
                user_metadata["name"] = register_data.name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise AppError("Failed to register user", ErrorTypes.VALIDATION_FAILED, 400)

            user_id = auth_response.user.id
            email = auth_response.user.email or register_data.email
            try:
                self.data_client.table("profiles").insert({
                    "user_id": user_id,
                    "email": email,
                    "name": register_data.name or email.split("@")[0],
                    "company": register_data.company,
                    "role": "inspector",
                }).execute()
            except Exception as e:
                # Profile can be created later via PUT /profiles
                logger.warning(f"Profile creation failed for {user_id}: {e}")

            return RegisterResponse(
                user_id=user_id,
                email=email,
                message="User registered successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise AppError("User already exists", ErrorTypes.DB_CONSTRAINT, 400)
            raise AppError(f"Registration failed: {error_message}", ErrorTypes.API_REQUEST_FAILED, 500)

    def login(
        self,
        login_data: LoginRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> TokenResponse:
        """Authenticate user using Supabase Auth. Every attempt is recorded as a security event."""
        security = SecurityService(self.data_client)
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                security.record_login_attempt(login_data.email, False, ip_address, user_agent)
                raise AppError(code=ErrorTypes.AUTH_INVALID_CREDENTIALS)

            security.record_login_attempt(
                login_data.email, True, ip_address, user_agent, user_id=auth_response.user.id
            )
            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                security.record_login_attempt(login_data.email, False, ip_address, user_agent)
                raise AppError(code=ErrorTypes.AUTH_INVALID_CREDENTIALS)
            raise AppError(f"Login failed: {error_message}", ErrorTypes.API_REQUEST_FAILED, 500)

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response.user:
                raise AppError(code=ErrorTypes.AUTH_SESSION_EXPIRED)
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise AppError(code=ErrorTypes.AUTH_SESSION_EXPIRED)
            raise AppError("Authentication failed", ErrorTypes.AUTH_SESSION_EXPIRED, 401)

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Tokens are stateless JWTs; this only ends the server-side session
            self.supabase.auth.sign_out()
            _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def set_role(self, user_id: str, role: str) -> Dict[str, Any]:
        """Set the application role stored on the user's profile"""
        try:
            result = self.data_client.table("profiles")\
                .update({"role": role})\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise AppError("User profile not found", ErrorTypes.DB_NOT_FOUND)
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise AppError(f"Failed to update role: {e}", ErrorTypes.DB_QUERY)
