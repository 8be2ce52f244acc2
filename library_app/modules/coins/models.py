# Supabase table: coin_transactions
# Append-only ledger; profiles.coin_balance is kept equal to the sum of a
# user's entries by CoinService.

"""
Expected Supabase table structure:

coin_transactions:
- id: uuid (primary key)
- user_id: uuid (references auth.users.id, not null)
- amount: integer (not null) - positive for credits, negative for debits
- type: text (not null) - values: initial, earned, deducted, penalty, bonus
- reason: text (not null)
- reference_id: uuid (nullable) - review, issue or request that caused the entry
- created_at: timestamp (default: now())
"""
