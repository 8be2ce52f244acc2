from fastapi import APIRouter, Depends, HTTPException, Query
from library_app.database.supabase_client import get_supabase
from library_app.modules.reading_goals.schemas import ReadingGoalSet, ReadingGoalResponse, MONTH_PATTERN
from library_app.modules.reading_goals.service import ReadingGoalService
from library_app.core.dependencies import require_permission
from supabase import Client
from typing import Optional, Dict

router = APIRouter(prefix="/reading-goals", tags=["reading-goals"])


def get_reading_goal_service(supabase: Client = Depends(get_supabase)) -> ReadingGoalService:
    return ReadingGoalService(supabase)


@router.get("/current", response_model=ReadingGoalResponse)
async def get_current_goal(
    month: Optional[str] = Query(default=None, pattern=MONTH_PATTERN),
    profile: Dict = Depends(require_permission("reading_goals:read")),
    service: ReadingGoalService = Depends(get_reading_goal_service)
):
    goal = service.get_goal(profile["user_id"], month)
    if goal is None:
        raise HTTPException(status_code=404, detail="No reading goal set for this month")
    return goal


@router.put("/current", response_model=ReadingGoalResponse)
async def set_current_goal(
    goal_data: ReadingGoalSet,
    profile: Dict = Depends(require_permission("reading_goals:update")),
    service: ReadingGoalService = Depends(get_reading_goal_service)
):
    """Set this month's (or the given month's) target"""
    return service.set_goal(profile["user_id"], goal_data.target_books, goal_data.month)


@router.post("/current/complete", response_model=ReadingGoalResponse)
async def complete_book(
    profile: Dict = Depends(require_permission("reading_goals:update")),
    service: ReadingGoalService = Depends(get_reading_goal_service)
):
    """Mark one more book finished this month"""
    return service.record_book_completed(profile["user_id"])
