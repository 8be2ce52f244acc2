from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    class_grade: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    full_name: str
    date_of_birth: Optional[date] = None
    class_grade: Optional[str] = None
    student_id: str
    email: str
    role: str
    coin_balance: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
