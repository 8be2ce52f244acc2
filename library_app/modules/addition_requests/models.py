# Supabase table: book_addition_requests
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

book_addition_requests:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null) - suggesting student
- book_title: text (not null)
- author: text (nullable)
- reference_link: text (nullable) - where the book can be found
- description: text (nullable) - why the student wants it
- status: text (not null, default: 'pending') - values: pending, approved, rejected
- notes: text (nullable) - admin decision notes
- requested_at: timestamp (default: now())
- processed_at: timestamp (nullable)
"""
