import logging
from supabase import Client
from library_app.modules.coins.schemas import CoinTransactionResponse, CoinBalanceResponse
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)

DEBIT_TYPES = ("deducted", "penalty")


class CoinService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record_transaction(
        self,
        user_id: str,
        amount: int,
        type: str,
        reason: str,
        reference_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Append a ledger entry without touching the stored balance"""
        try:
            result = self.supabase.table("coin_transactions").insert({
                "user_id": user_id,
                "amount": amount,
                "type": type,
                "reason": reason,
                "reference_id": reference_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record coin transaction")

            logger.info(f"Coin transaction for {user_id}: {amount:+d} ({type}: {reason})")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_stored_balance(self, user_id: str) -> int:
        try:
            result = self.supabase.table("profiles")\
                .select("coin_balance")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return result.data[0].get("coin_balance") or 0
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _set_balance(self, user_id: str, balance: int) -> None:
        try:
            self.supabase.table("profiles")\
                .update({"coin_balance": balance})\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_coins(
        self,
        user_id: str,
        amount: int,
        reason: str,
        reference_id: Optional[str] = None,
        type: str = "earned"
    ) -> int:
        """Credit coins: ledger entry first, then the stored balance. Returns the new balance."""
        if amount <= 0:
            raise HTTPException(status_code=400, detail="Amount must be positive")
        balance = self.get_stored_balance(user_id)
        self.record_transaction(user_id, amount, type, reason, reference_id)
        new_balance = balance + amount
        self._set_balance(user_id, new_balance)
        return new_balance

    def deduct_coins(
        self,
        user_id: str,
        amount: int,
        reason: str,
        reference_id: Optional[str] = None,
        type: str = "deducted"
    ) -> int:
        """Debit coins, refusing to take the balance below zero. Returns the new balance."""
        if amount <= 0:
            raise HTTPException(status_code=400, detail="Amount must be positive")
        balance = self.get_stored_balance(user_id)
        if balance < amount:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient coins: balance {balance}, required {amount}"
            )
        self.record_transaction(user_id, -amount, type, reason, reference_id)
        new_balance = balance - amount
        self._set_balance(user_id, new_balance)
        return new_balance

    def list_transactions(self, user_id: str, limit: int = 50, offset: int = 0) -> List[CoinTransactionResponse]:
        """Ledger entries for a user, newest first"""
        try:
            result = self.supabase.table("coin_transactions")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [CoinTransactionResponse(**t) for t in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_balance(self, user_id: str) -> CoinBalanceResponse:
        """Stored balance alongside the ledger totals it should agree with"""
        stored = self.get_stored_balance(user_id)
        try:
            result = self.supabase.table("coin_transactions")\
                .select("amount, type")\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        entries = result.data or []
        ledger_total = sum(t["amount"] for t in entries)
        if ledger_total != stored:
            logger.warning(f"Coin balance drift for {user_id}: stored {stored}, ledger {ledger_total}")

        return CoinBalanceResponse(
            user_id=user_id,
            coin_balance=stored,
            ledger_total=ledger_total,
            total_earned=sum(t["amount"] for t in entries if t["type"] == "earned"),
            total_spent=-sum(t["amount"] for t in entries if t["type"] in DEBIT_TYPES)
        )
