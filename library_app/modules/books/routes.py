from fastapi import APIRouter, Depends
from library_app.database.supabase_client import get_supabase
from library_app.modules.books.schemas import (
    BookCreate, BookUpdate, CopiesAdd, BookResponse, BookWithCopiesResponse
)
from library_app.modules.books.service import BookService
from library_app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/books", tags=["books"])


def get_book_service(supabase: Client = Depends(get_supabase)) -> BookService:
    return BookService(supabase)


@router.get("", response_model=List[BookResponse])
async def list_books(
    category: Optional[str] = None,
    available_only: bool = False,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    service: BookService = Depends(get_book_service)
):
    """Browse the catalog (public); filters and search combine"""
    return service.list_books(
        category=category, available_only=available_only, search=search, limit=limit, offset=offset
    )


@router.get("/categories", response_model=List[str])
async def list_categories(
    service: BookService = Depends(get_book_service)
):
    return service.list_categories()


@router.get("/{book_id}", response_model=BookWithCopiesResponse)
async def get_book(
    book_id: str,
    service: BookService = Depends(get_book_service)
):
    return service.get_book_with_copies(book_id)


@router.post("", response_model=BookWithCopiesResponse, status_code=201)
async def create_book(
    book_data: BookCreate,
    profile: Dict = Depends(require_permission("books:create")),
    service: BookService = Depends(get_book_service)
):
    """Add a book to the inventory (admin)"""
    return service.create_book(book_data)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    book_data: BookUpdate,
    profile: Dict = Depends(require_permission("books:update")),
    service: BookService = Depends(get_book_service)
):
    return service.update_book(book_id, book_data)


@router.post("/{book_id}/copies", response_model=BookWithCopiesResponse, status_code=201)
async def add_copies(
    book_id: str,
    copies: CopiesAdd,
    profile: Dict = Depends(require_permission("books:update")),
    service: BookService = Depends(get_book_service)
):
    """Add physical copies of an existing book (admin)"""
    return service.add_copies(book_id, copies.quantity)


@router.delete("/{book_id}", status_code=204)
async def delete_book(
    book_id: str,
    profile: Dict = Depends(require_permission("books:delete")),
    service: BookService = Depends(get_book_service)
):
    service.delete_book(book_id)
    return None
