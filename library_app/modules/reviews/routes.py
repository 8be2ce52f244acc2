from fastapi import APIRouter, Depends
from library_app.database.supabase_client import get_supabase
from library_app.modules.reviews.schemas import ReviewCreate, ReviewDecision, ReviewResponse
from library_app.modules.reviews.service import ReviewService
from library_app.core.dependencies import require_permission, is_admin
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/reviews", tags=["reviews"])


def get_review_service(supabase: Client = Depends(get_supabase)) -> ReviewService:
    return ReviewService(supabase)


@router.post("", response_model=ReviewResponse, status_code=201)
async def submit_review(
    review_data: ReviewCreate,
    profile: Dict = Depends(require_permission("reviews:create")),
    service: ReviewService = Depends(get_review_service)
):
    """Submit a review (rated) or summary; coins are awarded once approved"""
    return service.submit(profile["user_id"], review_data)


@router.get("", response_model=List[ReviewResponse])
async def list_reviews(
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    profile: Dict = Depends(require_permission("reviews:read")),
    service: ReviewService = Depends(get_review_service)
):
    """Admins see every submission; students see their own"""
    user_id = None if is_admin(profile) else profile["user_id"]
    return service.list_reviews(status=status, user_id=user_id, limit=limit, offset=offset)


@router.get("/books/{book_id}", response_model=List[ReviewResponse])
async def list_book_reviews(
    book_id: str,
    limit: int = 50,
    service: ReviewService = Depends(get_review_service)
):
    """Approved reviews and summaries of a book (public)"""
    return service.list_reviews(status="approved", book_id=book_id, limit=limit)


@router.post("/{review_id}/decision", response_model=ReviewResponse)
async def decide_review(
    review_id: str,
    decision: ReviewDecision,
    profile: Dict = Depends(require_permission("reviews:approve")),
    service: ReviewService = Depends(get_review_service)
):
    """Approve and award coins, or reject (admin)"""
    return service.process(review_id, decision.action)
