from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime


class AdditionRequestCreate(BaseModel):
    book_title: str = Field(min_length=1)
    author: Optional[str] = None
    reference_link: Optional[str] = None
    description: Optional[str] = None


class AdditionRequestDecision(BaseModel):
    action: Literal["approve", "reject"]
    notes: Optional[str] = None


class AdditionRequestResponse(BaseModel):
    id: str
    user_id: str
    book_title: str
    author: Optional[str] = None
    reference_link: Optional[str] = None
    description: Optional[str] = None
    status: str
    notes: Optional[str] = None
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    student_name: Optional[str] = None
    student_id: Optional[str] = None

    class Config:
        from_attributes = True
