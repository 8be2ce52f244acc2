from fastapi import APIRouter, Depends
from library_app.database.supabase_client import get_supabase
from library_app.modules.addition_requests.schemas import (
    AdditionRequestCreate, AdditionRequestDecision, AdditionRequestResponse
)
from library_app.modules.addition_requests.service import AdditionRequestService
from library_app.core.dependencies import require_permission, is_admin
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/addition-requests", tags=["addition-requests"])


def get_addition_request_service(supabase: Client = Depends(get_supabase)) -> AdditionRequestService:
    return AdditionRequestService(supabase)


@router.post("", response_model=AdditionRequestResponse, status_code=201)
async def create_addition_request(
    request_data: AdditionRequestCreate,
    profile: Dict = Depends(require_permission("addition_requests:create")),
    service: AdditionRequestService = Depends(get_addition_request_service)
):
    """Suggest a new book for the catalog"""
    return service.create_request(profile["user_id"], request_data)


@router.get("", response_model=List[AdditionRequestResponse])
async def list_addition_requests(
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    profile: Dict = Depends(require_permission("addition_requests:read")),
    service: AdditionRequestService = Depends(get_addition_request_service)
):
    """Admins see every request; students see their own"""
    user_id = None if is_admin(profile) else profile["user_id"]
    return service.list_requests(status=status, user_id=user_id, limit=limit, offset=offset)


@router.post("/{request_id}/decision", response_model=AdditionRequestResponse)
async def decide_addition_request(
    request_id: str,
    decision: AdditionRequestDecision,
    profile: Dict = Depends(require_permission("addition_requests:approve")),
    service: AdditionRequestService = Depends(get_addition_request_service)
):
    return service.process_request(request_id, decision.action, decision.notes)
