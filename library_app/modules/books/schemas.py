from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class BookCreate(BaseModel):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: Optional[str] = None
    cover_url: Optional[str] = None
    quantity: int = Field(ge=1, le=500)


class BookUpdate(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    cover_url: Optional[str] = None


class CopiesAdd(BaseModel):
    quantity: int = Field(ge=1, le=500)


class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    category: str
    description: Optional[str] = None
    cover_url: Optional[str] = None
    total_quantity: int
    available_quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookCopyResponse(BaseModel):
    id: str
    book_id: str
    copy_number: str
    status: str

    class Config:
        from_attributes = True


class BookWithCopiesResponse(BookResponse):
    copies: List[BookCopyResponse] = []
