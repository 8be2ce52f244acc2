from supabase import Client
from library_app.modules.reading_goals.schemas import ReadingGoalResponse
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException


def current_month() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m")


def to_response(goal: Dict[str, Any]) -> ReadingGoalResponse:
    target = goal["target_books"]
    completed = goal.get("completed_books") or 0
    progress = round(completed / target * 100) if target else 0
    return ReadingGoalResponse(**{**goal, "completed_books": completed, "progress_percent": min(progress, 100)})


class ReadingGoalService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _find_goal(self, user_id: str, month: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("reading_goals")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("month", month)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return result.data[0] if result.data else None

    def get_goal(self, user_id: str, month: Optional[str] = None) -> Optional[ReadingGoalResponse]:
        goal = self._find_goal(user_id, month or current_month())
        return to_response(goal) if goal else None

    def set_goal(self, user_id: str, target_books: int, month: Optional[str] = None) -> ReadingGoalResponse:
        """Create the month's goal or change its target"""
        month = month or current_month()
        existing = self._find_goal(user_id, month)
        try:
            if existing:
                result = self.supabase.table("reading_goals")\
                    .update({
                        "target_books": target_books,
                        "completed_books": min(existing.get("completed_books") or 0, target_books)
                    })\
                    .eq("id", existing["id"])\
                    .execute()
            else:
                result = self.supabase.table("reading_goals").insert({
                    "user_id": user_id,
                    "month": month,
                    "target_books": target_books,
                    "completed_books": 0
                }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to save reading goal")
        return to_response(result.data[0])

    def record_book_completed(self, user_id: str, month: Optional[str] = None) -> ReadingGoalResponse:
        """Count one more finished book, never beyond the target"""
        goal = self._find_goal(user_id, month or current_month())
        if not goal:
            raise HTTPException(status_code=404, detail="No reading goal set for this month")

        completed = min((goal.get("completed_books") or 0) + 1, goal["target_books"])
        try:
            result = self.supabase.table("reading_goals")\
                .update({"completed_books": completed})\
                .eq("id", goal["id"])\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        return to_response(result.data[0] if result.data else {**goal, "completed_books": completed})
