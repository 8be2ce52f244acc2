# Supabase table: reading_goals
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

reading_goals:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null)
- month: text (not null) - 'YYYY-MM'
- target_books: integer (not null)
- completed_books: integer (not null, default: 0) - never exceeds target_books
- created_at: timestamp (default: now())
- unique constraint on (user_id, month)
"""
