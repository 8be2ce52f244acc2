from fastapi import APIRouter, Depends
from library_app.database.supabase_client import get_supabase
from library_app.modules.borrows.schemas import (
    IssueRequestCreate, RequestDecision, ManualIssueCreate,
    IssueRequestResponse, BookIssueResponse
)
from library_app.modules.borrows.service import BorrowService
from library_app.core.dependencies import require_permission, is_admin
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/borrows", tags=["borrows"])


def get_borrow_service(supabase: Client = Depends(get_supabase)) -> BorrowService:
    return BorrowService(supabase)


@router.post("/requests", response_model=IssueRequestResponse, status_code=201)
async def create_request(
    request_data: IssueRequestCreate,
    profile: Dict = Depends(require_permission("borrows:request")),
    service: BorrowService = Depends(get_borrow_service)
):
    """Request to borrow a book"""
    return service.create_request(profile["user_id"], request_data.book_id)


@router.get("/requests", response_model=List[IssueRequestResponse])
async def list_requests(
    status: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    profile: Dict = Depends(require_permission("borrows:read")),
    service: BorrowService = Depends(get_borrow_service)
):
    """Admins see every request; students see their own"""
    user_id = None if is_admin(profile) else profile["user_id"]
    return service.list_requests(status=status, user_id=user_id, limit=limit, offset=offset)


@router.post("/requests/{request_id}/decision", response_model=IssueRequestResponse)
async def decide_request(
    request_id: str,
    decision: RequestDecision,
    profile: Dict = Depends(require_permission("borrows:approve")),
    service: BorrowService = Depends(get_borrow_service)
):
    """Approve or reject a borrow request (admin)"""
    return service.process_request(request_id, decision.action, decision.notes)


@router.post("/issues", response_model=BookIssueResponse, status_code=201)
async def manual_issue(
    issue_data: ManualIssueCreate,
    profile: Dict = Depends(require_permission("borrows:issue")),
    service: BorrowService = Depends(get_borrow_service)
):
    """Issue a book directly to a student (admin)"""
    return service.manual_issue(issue_data.student_id, issue_data.book_id)


@router.get("/issues", response_model=List[BookIssueResponse])
async def list_issues(
    state: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    profile: Dict = Depends(require_permission("borrows:read")),
    service: BorrowService = Depends(get_borrow_service)
):
    """Borrow history: all issues for admins, own issues for students"""
    user_id = None if is_admin(profile) else profile["user_id"]
    return service.list_issues(user_id=user_id, state=state, limit=limit, offset=offset)


@router.post("/issues/{issue_id}/return-request", response_model=BookIssueResponse)
async def request_return(
    issue_id: str,
    profile: Dict = Depends(require_permission("borrows:return")),
    service: BorrowService = Depends(get_borrow_service)
):
    return service.request_return(issue_id, profile["user_id"])


@router.post("/issues/{issue_id}/return-decision", response_model=BookIssueResponse)
async def decide_return(
    issue_id: str,
    decision: RequestDecision,
    profile: Dict = Depends(require_permission("borrows:approve")),
    service: BorrowService = Depends(get_borrow_service)
):
    """Approve or reject a pending return (admin)"""
    return service.process_return(issue_id, decision.action)


@router.post("/issues/{issue_id}/returned", response_model=BookIssueResponse)
async def mark_returned(
    issue_id: str,
    profile: Dict = Depends(require_permission("borrows:approve")),
    service: BorrowService = Depends(get_borrow_service)
):
    """Record a return handed in at the desk (admin)"""
    return service.mark_returned(issue_id)
