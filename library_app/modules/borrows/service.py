import logging
from supabase import Client
from library_app.modules.borrows.schemas import IssueRequestResponse, BookIssueResponse
from library_app.modules.books.service import BookService
from library_app.modules.coins.service import CoinService
from library_app.config.settings import settings
from typing import List, Optional, Dict, Any
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ["issued", "return_requested"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def overdue_days(due_date: datetime, returned_at: Optional[datetime] = None, now: Optional[datetime] = None) -> int:
    """Whole calendar days between the due date and the return (or now); 0 when on time"""
    due_date = _aware(due_date)
    reference = _aware(returned_at or now or _utcnow())
    if reference <= due_date:
        return 0
    return max((reference.date() - due_date.date()).days, 0)


class BorrowService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.books = BookService(supabase)
        self.coins = CoinService(supabase)

    # Issue requests

    def create_request(self, user_id: str, book_id: str) -> IssueRequestResponse:
        """Student asks to borrow a book"""
        book = self.books.get_book(book_id)
        if book.available_quantity <= 0:
            raise HTTPException(status_code=400, detail="No available copies")

        pending = self._pending_requests(user_id)
        if any(request["book_id"] == book_id for request in pending):
            raise HTTPException(status_code=400, detail="You already have a pending request for this book")

        active = self._active_issues(user_id)
        if any(issue["book_id"] == book_id for issue in active):
            raise HTTPException(status_code=400, detail="You already have this book")
        if len(active) + len(pending) >= settings.max_active_issues:
            raise HTTPException(
                status_code=400,
                detail=f"You can borrow at most {settings.max_active_issues} books at a time, pending requests included"
            )

        try:
            result = self.supabase.table("issue_requests").insert({
                "user_id": user_id,
                "book_id": book_id,
                "status": "pending",
                "requested_at": _utcnow().isoformat()
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create request")
        return IssueRequestResponse(**result.data[0], book_title=book.title)

    def _pending_requests(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("issue_requests")\
                .select("id, book_id")\
                .eq("user_id", user_id)\
                .eq("status", "pending")\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return result.data or []

    def list_requests(
        self,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[IssueRequestResponse]:
        """Issue requests, newest first"""
        try:
            query = self.supabase.table("issue_requests").select("*")
            if status:
                query = query.eq("status", status)
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.order("requested_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        rows = self._attach_details(result.data)
        return [IssueRequestResponse(**row) for row in rows]

    def _get_request_row(self, request_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("issue_requests")\
                .select("*")\
                .eq("id", request_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Request not found")
        return result.data[0]

    def process_request(self, request_id: str, action: str, notes: Optional[str] = None) -> IssueRequestResponse:
        """Approve (issuing a copy) or reject a pending request"""
        request = self._get_request_row(request_id)
        if request["status"] != "pending":
            raise HTTPException(status_code=400, detail=f"Request already {request['status']}")

        if action == "approve":
            self.issue_book(request["user_id"], request["book_id"], request_id=request_id)
        status = "approved" if action == "approve" else "rejected"

        try:
            result = self.supabase.table("issue_requests")\
                .update({
                    "status": status,
                    "notes": notes,
                    "processed_at": _utcnow().isoformat()
                })\
                .eq("id", request_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Issue request {request_id} {status}")
        rows = self._attach_details(result.data or [{**request, "status": status, "notes": notes}])
        return IssueRequestResponse(**rows[0])

    # Issues

    def issue_book(self, user_id: str, book_id: str, request_id: Optional[str] = None) -> BookIssueResponse:
        """Hand one available copy to a student for the loan period"""
        cost = settings.borrow_coin_cost
        if cost > 0 and self.coins.get_stored_balance(user_id) < cost:
            raise HTTPException(status_code=400, detail=f"Borrowing costs {cost} coins; insufficient balance")
        if len(self._active_issues(user_id)) >= settings.max_active_issues:
            raise HTTPException(
                status_code=400,
                detail=f"Student already has {settings.max_active_issues} books on loan"
            )

        copy = self.books.check_out_copy(book_id)
        issued_at = _utcnow()
        try:
            result = self.supabase.table("book_issues").insert({
                "user_id": user_id,
                "book_id": book_id,
                "book_copy_id": copy["id"],
                "copy_number": copy["copy_number"],
                "request_id": request_id,
                "status": "issued",
                "issued_at": issued_at.isoformat(),
                "due_date": (issued_at + timedelta(days=settings.loan_period_days)).isoformat()
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to issue book")

        issue = result.data[0]
        if cost > 0:
            self.coins.deduct_coins(user_id, cost, "Book borrowed", reference_id=issue["id"])
        logger.info(f"Issued copy {copy['copy_number']} of book {book_id} to {user_id}")
        return self._to_issue_response(self._attach_details([issue])[0])

    def manual_issue(self, student_id: str, book_id: str) -> BookIssueResponse:
        """Issue a book directly to a student identified by student ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("user_id, role")\
                .eq("student_id", student_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Student ID not found")
        return self.issue_book(result.data[0]["user_id"], book_id)

    def _active_issues(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("book_issues")\
                .select("*")\
                .eq("user_id", user_id)\
                .in_("status", ACTIVE_STATUSES)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return result.data or []

    def list_issues(
        self,
        user_id: Optional[str] = None,
        state: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[BookIssueResponse]:
        """Borrow history, newest first. state: active, returned, overdue or return_requested"""
        try:
            query = self.supabase.table("book_issues").select("*")
            if user_id:
                query = query.eq("user_id", user_id)
            if state in ("active", "overdue"):
                query = query.in_("status", ACTIVE_STATUSES)
            elif state in ("returned", "return_requested"):
                query = query.eq("status", state)
            query = query.order("issued_at", desc=True)
            if state != "overdue":
                query = query.limit(limit).offset(offset)
            result = query.execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        issues = [self._to_issue_response(row) for row in self._attach_details(result.data)]
        if state == "overdue":
            # overdue depends on the clock, so page after filtering
            issues = [i for i in issues if i.is_overdue][offset:offset + limit]
        return issues

    def _get_issue_row(self, issue_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("book_issues")\
                .select("*")\
                .eq("id", issue_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Issue not found")
        return result.data[0]

    def _set_issue_status(self, issue_id: str, update: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = self.supabase.table("book_issues")\
                .update(update)\
                .eq("id", issue_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Issue not found")
        return result.data[0]

    # Returns

    def request_return(self, issue_id: str, user_id: str) -> BookIssueResponse:
        """Student signals they are handing a book back"""
        issue = self._get_issue_row(issue_id)
        if issue["user_id"] != user_id:
            raise HTTPException(status_code=403, detail="You can only return your own books")
        if issue["status"] != "issued":
            raise HTTPException(status_code=400, detail=f"Cannot request return of a book that is {issue['status']}")
        updated = self._set_issue_status(issue_id, {"status": "return_requested"})
        return self._to_issue_response(self._attach_details([updated])[0])

    def process_return(self, issue_id: str, action: str) -> BookIssueResponse:
        """Approve a pending return, or reject it so the book stays issued"""
        issue = self._get_issue_row(issue_id)
        if issue["status"] != "return_requested":
            raise HTTPException(status_code=400, detail="No pending return request for this issue")
        if action == "approve":
            return self.complete_return(issue)
        updated = self._set_issue_status(issue_id, {"status": "issued"})
        logger.info(f"Return request for issue {issue_id} rejected")
        return self._to_issue_response(self._attach_details([updated])[0])

    def mark_returned(self, issue_id: str) -> BookIssueResponse:
        """Admin records a return directly"""
        issue = self._get_issue_row(issue_id)
        if issue["status"] == "returned":
            raise HTTPException(status_code=400, detail="Book already returned")
        return self.complete_return(issue)

    def complete_return(self, issue: Dict[str, Any]) -> BookIssueResponse:
        returned_at = _utcnow()
        updated = self._set_issue_status(issue["id"], {
            "status": "returned",
            "returned_at": returned_at.isoformat()
        })
        self.books.check_in_copy(issue["book_id"], issue["book_copy_id"])

        response = self._to_issue_response(self._attach_details([updated])[0])
        if response.days_overdue > 0 and settings.overdue_penalty_per_day > 0:
            self._apply_overdue_penalty(issue, response.days_overdue)
        logger.info(f"Issue {issue['id']} returned ({response.days_overdue} days overdue)")
        return response

    def _apply_overdue_penalty(self, issue: Dict[str, Any], days: int) -> None:
        """Charge the late fee, capped at what the student holds"""
        penalty = min(days * settings.overdue_penalty_per_day, self.coins.get_stored_balance(issue["user_id"]))
        if penalty <= 0:
            return
        self.coins.deduct_coins(
            issue["user_id"],
            penalty,
            f"Late return ({days} days overdue)",
            reference_id=issue["id"],
            type="penalty"
        )

    # Helpers

    def _attach_details(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Add book title and student name/ID to request or issue rows"""
        if not rows:
            return []
        book_ids = list({r["book_id"] for r in rows})
        user_ids = list({r["user_id"] for r in rows})
        try:
            books = self.supabase.table("books")\
                .select("id, title")\
                .in_("id", book_ids)\
                .execute()
            profiles = self.supabase.table("profiles")\
                .select("user_id, full_name, student_id")\
                .in_("user_id", user_ids)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        titles = {b["id"]: b["title"] for b in books.data}
        people = {p["user_id"]: p for p in profiles.data}
        detailed = []
        for row in rows:
            person = people.get(row["user_id"], {})
            detailed.append({
                **row,
                "book_title": titles.get(row["book_id"]),
                "student_name": person.get("full_name"),
                "student_id": person.get("student_id")
            })
        return detailed

    def _to_issue_response(self, row: Dict[str, Any]) -> BookIssueResponse:
        issue = BookIssueResponse(**row)
        days = overdue_days(issue.due_date, issue.returned_at)
        is_overdue = _aware(issue.returned_at or _utcnow()) > _aware(issue.due_date)
        return issue.model_copy(update={"is_overdue": is_overdue, "days_overdue": days})
