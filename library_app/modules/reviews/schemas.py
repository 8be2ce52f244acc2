from pydantic import BaseModel, Field, model_validator
from typing import Optional, Literal
from datetime import datetime


class ReviewCreate(BaseModel):
    book_id: str
    type: Literal["review", "summary"]
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    rating: Optional[int] = Field(default=None, ge=1, le=5)

    @model_validator(mode="after")
    def check_rating(self):
        if self.type == "review" and self.rating is None:
            raise ValueError("A review needs a rating between 1 and 5")
        if self.type == "summary":
            self.rating = None
        return self


class ReviewDecision(BaseModel):
    action: Literal["approve", "reject"]


class ReviewResponse(BaseModel):
    id: str
    user_id: str
    book_id: str
    type: str
    title: str
    content: str
    rating: Optional[int] = None
    status: str
    coins_earned: int = 0
    submitted_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    book_title: Optional[str] = None
    student_name: Optional[str] = None

    class Config:
        from_attributes = True
