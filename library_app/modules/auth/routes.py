from fastapi import APIRouter, Depends, Request
from library_app.modules.auth.schemas import (
    SignUpRequest, SignUpResponse, SignInRequest, TokenResponse, PermissionResponse
)
from library_app.modules.auth.service import AuthService
from library_app.core.dependencies import get_auth_service, get_current_token, get_current_profile
from library_app.core.rate_limit import limiter
from library_app.config.permissions_config import get_role_permissions, describe_role_permissions
from library_app.config import settings
from typing import Dict, List

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-up", response_model=SignUpResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def sign_up(
    request: Request,
    sign_up_data: SignUpRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new student and grant the starting coin balance"""
    return service.sign_up(sign_up_data)


@router.post("/sign-in", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def sign_in(
    request: Request,
    sign_in_data: SignInRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Sign in with student ID and password"""
    return service.sign_in(sign_in_data)


@router.post("/sign-out", status_code=200)
async def sign_out(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    service.sign_out(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_me(
    profile: Dict = Depends(get_current_profile)
):
    """Current profile and the permissions its role grants (for frontend UI)."""
    return {**profile, "permissions": get_role_permissions(profile.get("role", ""))}


@router.get("/permissions", response_model=List[PermissionResponse])
async def get_my_permissions(
    profile: Dict = Depends(get_current_profile)
):
    """Permissions of the current role with human-readable descriptions"""
    return describe_role_permissions(profile.get("role", ""))
