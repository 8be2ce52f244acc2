from pydantic import BaseModel
from typing import List


class Achievement(BaseModel):
    name: str
    description: str
    progress: int
    goal: int
    unlocked: bool


class StudentStats(BaseModel):
    total_books_issued: int
    active_issues: int
    total_reviews_submitted: int
    total_coins_earned: int
    current_coin_balance: int
    achievements: List[Achievement]


class MonthlyCount(BaseModel):
    month: str
    issues: int


class BookCount(BaseModel):
    book_id: str
    title: str
    count: int


class CategoryCount(BaseModel):
    category: str
    count: int


class AdminStats(BaseModel):
    total_books: int
    total_copies: int
    total_students: int
    active_issues: int
    overdue_issues: int
    pending_issue_requests: int
    pending_addition_requests: int
    pending_reviews: int
    approved_reviews: int
    approved_summaries: int
    monthly_issues: List[MonthlyCount]
    popular_books: List[BookCount]
    category_distribution: List[CategoryCount]
