import logging
from supabase import Client
from library_app.modules.books.schemas import (
    BookCreate, BookUpdate, BookResponse, BookCopyResponse, BookWithCopiesResponse
)
from library_app.core.filters import ilike_any
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ("title", "author", "description")


def copy_number_prefix(title: str) -> str:
    """First three letters of the title, upper-cased (e.g. 'Dune' -> 'DUN')"""
    letters = "".join(ch for ch in title if ch.isalnum())
    return (letters[:3] or "BK").upper()


def make_copy_numbers(title: str, start: int, count: int) -> List[str]:
    prefix = copy_number_prefix(title)
    return [f"{prefix}-{n:03d}" for n in range(start, start + count)]


class BookService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_book_row(self, book_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("books")\
                .select("*")\
                .eq("id", book_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=404, detail="Book not found")
        return result.data[0]

    def get_book(self, book_id: str) -> BookResponse:
        return BookResponse(**self._get_book_row(book_id))

    def get_book_with_copies(self, book_id: str) -> BookWithCopiesResponse:
        """Get book with its physical copies"""
        book = self._get_book_row(book_id)
        try:
            copies = self.supabase.table("book_copies")\
                .select("*")\
                .eq("book_id", book_id)\
                .order("copy_number")\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        book["copies"] = [BookCopyResponse(**c) for c in copies.data]
        return BookWithCopiesResponse(**book)

    def list_books(
        self,
        category: Optional[str] = None,
        available_only: bool = False,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[BookResponse]:
        """List books ordered by title; search matches title, author or description"""
        try:
            query = self.supabase.table("books").select("*")
            if search and search.strip():
                query = query.or_(ilike_any(SEARCH_COLUMNS, search))
            if category:
                query = query.eq("category", category)
            if available_only:
                query = query.gt("available_quantity", 0)
            result = query.order("title")\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [BookResponse(**book) for book in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_categories(self) -> List[str]:
        try:
            result = self.supabase.table("books").select("category").execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return sorted({b["category"] for b in result.data if b.get("category")})

    def create_book(self, book_data: BookCreate) -> BookWithCopiesResponse:
        """Create a book and one copy row per unit of quantity"""
        try:
            result = self.supabase.table("books").insert({
                "title": book_data.title,
                "author": book_data.author,
                "category": book_data.category,
                "description": book_data.description,
                "cover_url": book_data.cover_url,
                "total_quantity": book_data.quantity,
                "available_quantity": book_data.quantity
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create book")

            book = result.data[0]
            self._insert_copies(book["id"], make_copy_numbers(book_data.title, 1, book_data.quantity))
            logger.info(f"Added book '{book_data.title}' with {book_data.quantity} copies")
            return self.get_book_with_copies(book["id"])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _insert_copies(self, book_id: str, copy_numbers: List[str]) -> None:
        self.supabase.table("book_copies").insert([
            {"book_id": book_id, "copy_number": number, "status": "available"}
            for number in copy_numbers
        ]).execute()

    def update_book(self, book_id: str, book_data: BookUpdate) -> BookResponse:
        """Update book metadata"""
        self._get_book_row(book_id)
        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        for field in ("title", "author", "category", "description", "cover_url"):
            value = getattr(book_data, field)
            if value is not None:
                update_data[field] = value

        try:
            result = self.supabase.table("books")\
                .update(update_data)\
                .eq("id", book_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=404, detail="Book not found")
        return BookResponse(**result.data[0])

    def add_copies(self, book_id: str, quantity: int) -> BookWithCopiesResponse:
        """Add physical copies, continuing the book's copy numbering"""
        book = self._get_book_row(book_id)
        try:
            self._insert_copies(book_id, make_copy_numbers(book["title"], book["total_quantity"] + 1, quantity))
            self.supabase.table("books")\
                .update({
                    "total_quantity": book["total_quantity"] + quantity,
                    "available_quantity": book["available_quantity"] + quantity
                })\
                .eq("id", book_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Added {quantity} copies of '{book['title']}'")
        return self.get_book_with_copies(book_id)

    def delete_book(self, book_id: str) -> bool:
        """Delete a book and its copies; refused while copies are out"""
        book = self._get_book_row(book_id)
        if book["available_quantity"] < book["total_quantity"]:
            raise HTTPException(status_code=400, detail="Book has copies currently issued")
        try:
            self.supabase.table("book_copies")\
                .delete()\
                .eq("book_id", book_id)\
                .execute()
            result = self.supabase.table("books")\
                .delete()\
                .eq("id", book_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def check_out_copy(self, book_id: str) -> Dict[str, Any]:
        """Mark one available copy as issued and decrement the available quantity"""
        book = self._get_book_row(book_id)
        try:
            copies = self.supabase.table("book_copies")\
                .select("*")\
                .eq("book_id", book_id)\
                .eq("status", "available")\
                .order("copy_number")\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not copies.data or book["available_quantity"] <= 0:
            raise HTTPException(status_code=400, detail="No available copies")

        copy = copies.data[0]
        try:
            self.supabase.table("book_copies")\
                .update({"status": "issued"})\
                .eq("id", copy["id"])\
                .execute()
            self.supabase.table("books")\
                .update({"available_quantity": book["available_quantity"] - 1})\
                .eq("id", book_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return copy

    def check_in_copy(self, book_id: str, copy_id: str) -> None:
        """Put a returned copy back on the shelf"""
        book = self._get_book_row(book_id)
        try:
            self.supabase.table("book_copies")\
                .update({"status": "available"})\
                .eq("id", copy_id)\
                .execute()
            self.supabase.table("books")\
                .update({"available_quantity": min(book["available_quantity"] + 1, book["total_quantity"])})\
                .eq("id", book_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
