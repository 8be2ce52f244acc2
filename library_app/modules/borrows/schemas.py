from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime


class IssueRequestCreate(BaseModel):
    book_id: str


class RequestDecision(BaseModel):
    action: Literal["approve", "reject"]
    notes: Optional[str] = None


class ManualIssueCreate(BaseModel):
    student_id: str
    book_id: str


class IssueRequestResponse(BaseModel):
    id: str
    user_id: str
    book_id: str
    status: str
    notes: Optional[str] = None
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    book_title: Optional[str] = None
    student_name: Optional[str] = None
    student_id: Optional[str] = None

    class Config:
        from_attributes = True


class BookIssueResponse(BaseModel):
    id: str
    user_id: str
    book_id: str
    book_copy_id: str
    copy_number: str
    request_id: Optional[str] = None
    status: str
    issued_at: Optional[datetime] = None
    due_date: datetime
    returned_at: Optional[datetime] = None
    is_overdue: bool = False
    days_overdue: int = 0
    book_title: Optional[str] = None
    student_name: Optional[str] = None
    student_id: Optional[str] = None

    class Config:
        from_attributes = True
