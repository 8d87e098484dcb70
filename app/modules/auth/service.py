import hashlib
import logging
import time
from supabase import Client
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional, Tuple

logger = logging.getLogger(__name__)

# Token -> (user dict, expiry). Keeps parallel requests with the same token off the auth API.
_TOKEN_USER_CACHE: Dict[str, Tuple[Dict[str, Any], float]] = {}
_TOKEN_CACHE_TTL_SEC = 60
_TOKEN_CACHE_MAX_SIZE = 500


def _token_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def clear_token_cache() -> None:
    _TOKEN_USER_CACHE.clear()


def _purge_expired_tokens(now: float) -> None:
    for key in [k for k, (_, expiry) in _TOKEN_USER_CACHE.items() if expiry <= now]:
        del _TOKEN_USER_CACHE[key]


class AuthService:
    def __init__(self, supabase: Client, session_client_factory: Optional[Callable[[], Client]] = None):
        self.supabase = supabase
        self._session_client_factory = session_client_factory

    def _session_client(self) -> Client:
        """Sign-in stores the session on the client it runs on, so keep it off the shared one"""
        if self._session_client_factory is None:
            return self.supabase
        return self._session_client_factory()

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up through Supabase Auth; username rides along in user_metadata"""
        try:
            user_metadata = {}
            if register_data.username:
                user_metadata["username"] = register_data.username

            auth_response = self._session_client().auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            logger.info("Registered user %s", auth_response.user.id)
            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Registration failed: {error_message}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self._session_client().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

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
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to {id, email, user_metadata}. Cached for a short TTL."""
        cache_key = _token_key(token)
        now = time.monotonic()
        cached = _TOKEN_USER_CACHE.get(cache_key)
        if cached is not None:
            user_data, expiry = cached
            if now < expiry:
                return user_data
            del _TOKEN_USER_CACHE[cache_key]
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            logger.error(f"Error getting user: {error_msg}")
            raise HTTPException(status_code=401, detail="Failed to get user information")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
        }
        if len(_TOKEN_USER_CACHE) >= _TOKEN_CACHE_MAX_SIZE:
            _purge_expired_tokens(now)
        if len(_TOKEN_USER_CACHE) < _TOKEN_CACHE_MAX_SIZE:
            _TOKEN_USER_CACHE[cache_key] = (user_data, now + _TOKEN_CACHE_TTL_SEC)
        return user_data

    def logout(self, token: str) -> bool:
        """Drop the cached token and revoke the sessions behind it. Already issued JWTs still expire on their own."""
        _TOKEN_USER_CACHE.pop(_token_key(token), None)
        try:
            self._session_client().auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False
