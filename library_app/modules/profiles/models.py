# Supabase table: profiles
# One row per auth user; created at sign-up (students) or on the first
# administrator sign-in.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (unique, references auth.users.id)
- full_name: text (not null)
- date_of_birth: date (nullable)
- class_grade: text (nullable)
- student_id: text (unique, not null) - public login identifier
- email: text (unique, not null) - internal address used for the password check
- role: text (not null, default: 'student') - values: student, admin
- coin_balance: integer (not null, default: 0) - equals the sum of coin_transactions
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
