from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class ReadingGoalSet(BaseModel):
    target_books: int = Field(ge=1, le=100)
    month: Optional[str] = Field(default=None, pattern=MONTH_PATTERN)


class ReadingGoalResponse(BaseModel):
    id: str
    user_id: str
    month: str
    target_books: int
    completed_books: int = 0
    progress_percent: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
