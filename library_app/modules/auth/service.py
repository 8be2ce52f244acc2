import hashlib
import logging
import time
from supabase import Client
from library_app.modules.auth.schemas import SignUpRequest, SignUpResponse, SignInRequest, TokenResponse
from library_app.modules.coins.service import CoinService
from library_app.modules.profiles.schemas import ProfileResponse
from library_app.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

WELCOME_BONUS_REASON = "Welcome bonus - initial coins"


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, admin_supabase: Optional[Client] = None):
        self.supabase = supabase
        self.admin_supabase = admin_supabase
        self.coins = CoinService(supabase)

    def find_profile_by_student_id(self, student_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("student_id", student_id)\
                .limit(1)\
                .execute()
            return result.data[0] if result.data else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Profile lookup failed: {str(e)}")

    def sign_up(self, sign_up_data: SignUpRequest) -> SignUpResponse:
        """Register a student: credential, profile, then the welcome ledger entry"""
        if sign_up_data.student_id == settings.admin_identifier:
            raise HTTPException(status_code=400, detail="Student ID is reserved")
        if self.find_profile_by_student_id(sign_up_data.student_id):
            raise HTTPException(status_code=400, detail="Student ID already exists")

        try:
            auth_response = self.supabase.auth.sign_up({
                "email": sign_up_data.email,
                "password": sign_up_data.password,
                "options": {
                    "data": {
                        "full_name": sign_up_data.full_name,
                        "student_id": sign_up_data.student_id
                    }
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="Email already registered")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

        if not auth_response.user:
            raise HTTPException(status_code=400, detail="Failed to create user")

        user_id = auth_response.user.id
        starting_balance = settings.starting_coin_balance
        try:
            result = self.supabase.table("profiles").insert({
                "user_id": user_id,
                "full_name": sign_up_data.full_name,
                "date_of_birth": sign_up_data.date_of_birth.isoformat() if sign_up_data.date_of_birth else None,
                "class_grade": sign_up_data.class_grade,
                "student_id": sign_up_data.student_id,
                "email": sign_up_data.email,
                "role": "student",
                "coin_balance": starting_balance
            }).execute()
            if not result.data:
                raise RuntimeError("profile insert returned no rows")
        except Exception as e:
            logger.error(f"Profile creation failed for {sign_up_data.student_id}: {e}")
            self._discard_credential(user_id)
            raise HTTPException(status_code=500, detail=f"Registration failed: {str(e)}")

        self.coins.record_transaction(user_id, starting_balance, "initial", WELCOME_BONUS_REASON)
        logger.info(f"Registered student {sign_up_data.student_id} ({user_id})")

        return SignUpResponse(
            user_id=user_id,
            student_id=sign_up_data.student_id,
            email=auth_response.user.email or sign_up_data.email,
            coin_balance=starting_balance,
            message="User registered successfully"
        )

    def _discard_credential(self, user_id: str) -> None:
        """Delete an auth user whose profile could not be created"""
        if self.admin_supabase is None:
            logger.warning(f"No service role key configured; auth user {user_id} left without a profile")
            return
        try:
            self.admin_supabase.auth.admin.delete_user(user_id)
            logger.info(f"Removed orphaned auth user {user_id}")
        except Exception as e:
            logger.error(f"Failed to remove orphaned auth user {user_id}: {e}")

    def _password_sign_in(self, email: str, password: str):
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid student ID or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid student ID or password")
        return auth_response

    def sign_in(self, sign_in_data: SignInRequest) -> TokenResponse:
        """Resolve the student ID to its email and delegate the password check"""
        if sign_in_data.student_id == settings.admin_identifier and sign_in_data.password == settings.admin_password:
            return self.sign_in_admin()

        profile = self.find_profile_by_student_id(sign_in_data.student_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Student ID not found")

        auth_response = self._password_sign_in(profile["email"], sign_in_data.password)
        return self._token_response(auth_response, profile)

    def sign_in_admin(self) -> TokenResponse:
        """Sign in as the administrator, provisioning the account on first use"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": settings.admin_email,
                "password": settings.admin_account_password
            })
        except Exception as e:
            logger.info(f"Admin sign-in failed ({e}); provisioning administrator account")
            auth_response = None

        if auth_response is None or not auth_response.user or not auth_response.session:
            self._create_admin_credential()
            auth_response = self._password_sign_in(settings.admin_email, settings.admin_account_password)

        profile = self.ensure_admin_profile(auth_response.user.id)
        return self._token_response(auth_response, profile)

    def _create_admin_credential(self) -> str:
        try:
            sign_up_response = self.supabase.auth.sign_up({
                "email": settings.admin_email,
                "password": settings.admin_account_password
            })
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create admin user: {str(e)}")

        if not sign_up_response.user:
            raise HTTPException(status_code=500, detail="Failed to create admin user")
        logger.info(f"Created administrator credential {sign_up_response.user.id}")
        return sign_up_response.user.id

    def ensure_admin_profile(self, user_id: str) -> Dict[str, Any]:
        """Return the administrator profile, creating it if it does not exist yet"""
        existing = self.find_profile_by_student_id(settings.admin_identifier)
        if existing:
            if existing.get("user_id") != user_id or existing.get("role") != "admin":
                logger.error(f"Reserved ID {settings.admin_identifier} is held by {existing.get('user_id')}, not the administrator")
                raise HTTPException(status_code=409, detail="Administrator profile conflict")
            return existing

        try:
            result = self.supabase.table("profiles").insert({
                "user_id": user_id,
                "full_name": settings.admin_full_name,
                "student_id": settings.admin_identifier,
                "email": settings.admin_email,
                "role": "admin",
                "coin_balance": 0
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create admin profile: {str(e)}")

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create admin profile")
        logger.info("Created administrator profile")
        return result.data[0]

    def _token_response(self, auth_response, profile: Dict[str, Any]) -> TokenResponse:
        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            profile=ProfileResponse(**profile)
        )

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
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "created_at": user.created_at
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def get_current_profile(self, user_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return result.data[0]

    def sign_out(self, token: str) -> bool:
        """Sign out and drop the cached user for this token"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Tokens are stateless JWTs; they stay valid until they expire
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            return False
