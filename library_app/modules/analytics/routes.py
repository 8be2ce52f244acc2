from fastapi import APIRouter, Depends
from library_app.database.supabase_client import get_supabase
from library_app.modules.analytics.schemas import StudentStats, AdminStats
from library_app.modules.analytics.service import AnalyticsService
from library_app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_analytics_service(supabase: Client = Depends(get_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("/me", response_model=StudentStats)
async def my_stats(
    profile: Dict = Depends(require_permission("analytics:student")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.student_stats(profile["user_id"])


@router.get("/admin", response_model=AdminStats)
async def admin_stats(
    profile: Dict = Depends(require_permission("analytics:admin")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Library-wide statistics for the admin dashboard"""
    return service.admin_stats()
