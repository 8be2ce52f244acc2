"""
Provision Administrator Script
Creates the administrator credential and profile ahead of the first admin
sign-in, and optionally loads a starter catalog from a JSON file.

    python -m library_app.scripts.seed_admin [books.json]

books.json holds a list of objects with title, author, category, quantity
and optional description/cover_url. Books whose title already exists are
skipped, so the script can be re-run.
"""

import json
import sys
import logging
from typing import List

from pydantic import ValidationError
from supabase import Client

from library_app.database.supabase_client import get_supabase, get_admin_supabase
from library_app.modules.auth.service import AuthService
from library_app.modules.books.schemas import BookCreate
from library_app.modules.books.service import BookService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def provision_admin(supabase: Client) -> str:
    """Sign in as the administrator, creating the account if needed. Returns its user id."""
    token = AuthService(supabase, get_admin_supabase()).sign_in_admin()
    logger.info(f"Administrator account ready: {token.profile.student_id} ({token.user_id})")
    return token.user_id


def seed_books(supabase: Client, books: List[dict]) -> int:
    """Add books not already in the catalog"""
    service = BookService(supabase)
    created_count = 0
    skipped_count = 0

    for entry in books:
        try:
            book_data = BookCreate(**entry)
        except ValidationError as e:
            logger.error(f"Invalid book entry {entry.get('title')!r}: {e}")
            continue

        existing = supabase.table("books")\
            .select("id")\
            .eq("title", book_data.title)\
            .limit(1)\
            .execute()
        if existing.data:
            skipped_count += 1
            logger.debug(f"Skipped existing book: {book_data.title}")
            continue

        service.create_book(book_data)
        created_count += 1

    logger.info(f"Books seeded: {created_count} created, {skipped_count} skipped")
    return created_count


def main(argv: List[str]) -> int:
    supabase = get_supabase()
    provision_admin(supabase)
    if len(argv) > 1:
        with open(argv[1], encoding="utf-8") as f:
            seed_books(supabase, json.load(f))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
