import logging
from supabase import Client
from library_app.modules.reviews.schemas import ReviewCreate, ReviewResponse
from library_app.modules.coins.service import CoinService
from library_app.config.settings import settings
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def reward_for(review_type: str) -> int:
    return settings.review_reward if review_type == "review" else settings.summary_reward


class ReviewService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.coins = CoinService(supabase)

    def submit(self, user_id: str, review_data: ReviewCreate) -> ReviewResponse:
        """Submit a review or summary of a book the student has borrowed"""
        try:
            borrowed = self.supabase.table("book_issues")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("book_id", review_data.book_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not borrowed.data:
            raise HTTPException(status_code=400, detail="You can only review books you have borrowed")

        try:
            result = self.supabase.table("reviews_summaries").insert({
                "user_id": user_id,
                "book_id": review_data.book_id,
                "type": review_data.type,
                "title": review_data.title,
                "content": review_data.content,
                "rating": review_data.rating,
                "status": "pending",
                "coins_earned": 0,
                "submitted_at": datetime.now(timezone.utc).isoformat()
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to submit review")
        return ReviewResponse(**result.data[0])

    def list_reviews(
        self,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        book_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[ReviewResponse]:
        """Reviews and summaries, newest first"""
        try:
            query = self.supabase.table("reviews_summaries").select("*")
            if status:
                query = query.eq("status", status)
            if user_id:
                query = query.eq("user_id", user_id)
            if book_id:
                query = query.eq("book_id", book_id)
            result = query.order("submitted_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ReviewResponse(**row) for row in self._attach_details(result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _attach_details(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not rows:
            return []
        books = self.supabase.table("books")\
            .select("id, title")\
            .in_("id", list({r["book_id"] for r in rows}))\
            .execute()
        profiles = self.supabase.table("profiles")\
            .select("user_id, full_name")\
            .in_("user_id", list({r["user_id"] for r in rows}))\
            .execute()
        titles = {b["id"]: b["title"] for b in books.data}
        names = {p["user_id"]: p["full_name"] for p in profiles.data}
        return [
            {**row, "book_title": titles.get(row["book_id"]), "student_name": names.get(row["user_id"])}
            for row in rows
        ]

    def process(self, review_id: str, action: str) -> ReviewResponse:
        """Approve (crediting the reward) or reject a pending review"""
        try:
            existing = self.supabase.table("reviews_summaries")\
                .select("*")\
                .eq("id", review_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not existing.data:
            raise HTTPException(status_code=404, detail="Review not found")
        review = existing.data[0]
        if review["status"] != "pending":
            raise HTTPException(status_code=400, detail=f"Review already {review['status']}")

        approved = action == "approve"
        coins_earned = reward_for(review["type"]) if approved else 0
        try:
            result = self.supabase.table("reviews_summaries")\
                .update({
                    "status": "approved" if approved else "rejected",
                    "coins_earned": coins_earned,
                    "processed_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", review_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=404, detail="Review not found")

        if coins_earned > 0:
            self.coins.add_coins(review["user_id"], coins_earned, f"{review['type']} approved", reference_id=review_id)
        logger.info(f"Review {review_id} {'approved' if approved else 'rejected'} ({coins_earned} coins)")
        return ReviewResponse(**result.data[0])
