# Supabase table: reviews_summaries
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

reviews_summaries:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null)
- book_id: uuid (foreign key to books.id, not null)
- type: text (not null) - values: review, summary
- title: text (not null)
- content: text (not null)
- rating: integer (nullable) - 1 to 5, reviews only
- status: text (not null, default: 'pending') - values: pending, approved, rejected
- coins_earned: integer (not null, default: 0) - set when approved
- submitted_at: timestamp (default: now())
- processed_at: timestamp (nullable)
"""
