from supabase import Client
from library_app.modules.analytics.schemas import (
    Achievement, StudentStats, AdminStats, MonthlyCount, BookCount, CategoryCount
)
from library_app.modules.borrows.service import ACTIVE_STATUSES, overdue_days
from library_app.modules.coins.service import CoinService
from typing import List, Dict, Any
from collections import Counter
from datetime import datetime, timezone
from fastapi import HTTPException
from pydantic import TypeAdapter

POPULAR_BOOKS_LIMIT = 5
MONTHS_OF_HISTORY = 6

_datetime_adapter = TypeAdapter(datetime)


def last_months(now: datetime, count: int) -> List[str]:
    """'YYYY-MM' labels for the last `count` months, oldest first, ending with now's month"""
    year, month = now.year, now.month
    labels = []
    for _ in range(count):
        labels.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(labels))


def achievements_for(books_issued: int, reviews_submitted: int, coins_earned: int) -> List[Achievement]:
    milestones = [
        ("First Book", "Borrow your first book", books_issued, 1),
        ("Reviewer", "Write 3 reviews", reviews_submitted, 3),
        ("Coin Collector", "Earn 50 coins", coins_earned, 50),
    ]
    return [
        Achievement(
            name=name,
            description=description,
            progress=min(progress, goal),
            goal=goal,
            unlocked=progress >= goal
        )
        for name, description, progress, goal in milestones
    ]


class AnalyticsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _count(self, table: str, **filters) -> int:
        return len(self._rows(table, "id", **filters))

    def _rows(self, table: str, columns: str, **filters) -> List[Dict[str, Any]]:
        try:
            query = self.supabase.table(table).select(columns)
            for column, value in filters.items():
                if isinstance(value, list):
                    query = query.in_(column, value)
                else:
                    query = query.eq(column, value)
            return query.execute().data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def student_stats(self, user_id: str) -> StudentStats:
        """Personal dashboard numbers and achievements"""
        books_issued = self._count("book_issues", user_id=user_id)
        active = self._count("book_issues", user_id=user_id, status=ACTIVE_STATUSES)
        reviews = self._count("reviews_summaries", user_id=user_id)
        balance = CoinService(self.supabase).get_balance(user_id)

        return StudentStats(
            total_books_issued=books_issued,
            active_issues=active,
            total_reviews_submitted=reviews,
            total_coins_earned=balance.total_earned,
            current_coin_balance=balance.coin_balance,
            achievements=achievements_for(books_issued, reviews, balance.total_earned)
        )

    def admin_stats(self) -> AdminStats:
        """Library-wide dashboard numbers"""
        now = datetime.now(timezone.utc)
        books = self._rows("books", "id, title, category, total_quantity")
        issues = self._rows("book_issues", "id, book_id, status, issued_at, due_date, returned_at")
        approved_reviews = self._rows("reviews_summaries", "id, type", status="approved")

        active = [i for i in issues if i["status"] in ACTIVE_STATUSES]
        overdue = [
            i for i in active
            if i.get("due_date") and overdue_days(_datetime_adapter.validate_python(i["due_date"]), now=now) > 0
        ]

        months = last_months(now, MONTHS_OF_HISTORY)
        per_month = Counter(
            _datetime_adapter.validate_python(i["issued_at"]).strftime("%Y-%m")
            for i in issues if i.get("issued_at")
        )

        titles = {b["id"]: b["title"] for b in books}
        per_book = Counter(i["book_id"] for i in issues)
        popular = [
            BookCount(book_id=book_id, title=titles.get(book_id, "Unknown"), count=count)
            for book_id, count in per_book.most_common(POPULAR_BOOKS_LIMIT)
        ]

        per_category: Counter = Counter()
        for book in books:
            per_category[book.get("category") or "Uncategorized"] += book.get("total_quantity") or 0

        return AdminStats(
            total_books=len(books),
            total_copies=sum(b.get("total_quantity") or 0 for b in books),
            total_students=self._count("profiles", role="student"),
            active_issues=len(active),
            overdue_issues=len(overdue),
            pending_issue_requests=self._count("issue_requests", status="pending"),
            pending_addition_requests=self._count("book_addition_requests", status="pending"),
            pending_reviews=self._count("reviews_summaries", status="pending"),
            approved_reviews=sum(1 for r in approved_reviews if r["type"] == "review"),
            approved_summaries=sum(1 for r in approved_reviews if r["type"] == "summary"),
            monthly_issues=[MonthlyCount(month=m, issues=per_month.get(m, 0)) for m in months],
            popular_books=popular,
            category_distribution=[
                CategoryCount(category=category, count=count)
                for category, count in sorted(per_category.items())
            ]
        )
