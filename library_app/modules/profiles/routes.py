from fastapi import APIRouter, Depends
from library_app.database.supabase_client import get_supabase
from library_app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from library_app.modules.profiles.service import ProfileService
from library_app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("", response_model=List[ProfileResponse])
async def list_students(
    search: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
    profile: Dict = Depends(require_permission("profiles:list")),
    service: ProfileService = Depends(get_profile_service)
):
    """List students (admin)"""
    return service.list_students(search=search, limit=limit, offset=offset)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    profile: Dict = Depends(require_permission("profiles:read"))
):
    return ProfileResponse(**profile)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    profile: Dict = Depends(require_permission("profiles:update")),
    service: ProfileService = Depends(get_profile_service)
):
    return service.update_profile(profile["user_id"], profile_data)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    profile: Dict = Depends(require_permission("profiles:list")),
    service: ProfileService = Depends(get_profile_service)
):
    """Get any profile by ID (admin)"""
    return service.get_profile_by_id(profile_id)
