"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from library_app.database.supabase_client import get_supabase, get_admin_supabase
from library_app.modules.auth.service import AuthService
from library_app.config.permissions_config import get_role_permissions
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin_supabase: Optional[Client] = Depends(get_admin_supabase)
) -> AuthService:
    return AuthService(supabase, admin_supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Resolve the bearer token to the Supabase auth user"""
    return auth_service.get_current_user(token)


def get_current_profile(
    request: Request,
    user_data: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Profile row of the authenticated user, cached on the request"""
    if getattr(request.state, "profile", None) is not None:
        return request.state.profile
    profile = auth_service.get_current_profile(user_data["id"])
    request.state.profile = profile
    return profile


def is_admin(profile: Dict[str, Any]) -> bool:
    return profile.get("role") == "admin"


def has_permission(profile: Dict[str, Any], permission: str) -> bool:
    return permission in get_role_permissions(profile.get("role", ""))


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(
        profile: Dict[str, Any] = Depends(get_current_profile)
    ) -> Dict[str, Any]:
        """Dependency to check if the profile's role holds the required permission"""
        if not has_permission(profile, required_permission):
            logger.info(f"Denied {required_permission} to {profile.get('student_id')} ({profile.get('role')})")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return profile
    return check_permission
