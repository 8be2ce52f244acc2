from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime

TransactionType = Literal["initial", "earned", "deducted", "penalty", "bonus"]


class CoinTransactionResponse(BaseModel):
    id: str
    user_id: str
    amount: int
    type: str
    reason: str
    reference_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CoinBalanceResponse(BaseModel):
    user_id: str
    coin_balance: int
    ledger_total: int
    total_earned: int
    total_spent: int


class CoinAdjustment(BaseModel):
    amount: int = Field(gt=0)
    reason: str = Field(min_length=1)
    type: Literal["bonus", "penalty"] = "bonus"
