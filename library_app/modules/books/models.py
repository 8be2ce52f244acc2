# Supabase tables: books, book_copies
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

books:
- id: uuid (primary key)
- title: text (not null)
- author: text (not null)
- category: text (not null)
- description: text (nullable)
- cover_url: text (nullable)
- total_quantity: integer (not null)
- available_quantity: integer (not null) - copies with status 'available'
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

book_copies:
- id: uuid (primary key)
- book_id: uuid (foreign key to books.id, not null)
- copy_number: text (not null, unique per book) - e.g. HAR-001
- status: text (not null, default: 'available') - values: available, issued
- created_at: timestamp (default: now())
"""
