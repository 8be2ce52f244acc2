# Supabase tables: issue_requests, book_issues
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

issue_requests:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null) - requesting student
- book_id: uuid (foreign key to books.id, not null)
- status: text (not null, default: 'pending') - values: pending, approved, rejected
- notes: text (nullable) - admin decision notes
- requested_at: timestamp (default: now())
- processed_at: timestamp (nullable)

book_issues:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null)
- book_id: uuid (foreign key to books.id, not null)
- book_copy_id: uuid (foreign key to book_copies.id, not null)
- copy_number: text (not null) - denormalized from book_copies
- request_id: uuid (foreign key to issue_requests.id, nullable) - null for manual issues
- status: text (not null, default: 'issued') - values: issued, return_requested, returned
- issued_at: timestamp (default: now())
- due_date: timestamp (not null)
- returned_at: timestamp (nullable)
"""
