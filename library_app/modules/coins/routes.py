from fastapi import APIRouter, Depends, HTTPException
from library_app.database.supabase_client import get_supabase
from library_app.modules.coins.schemas import CoinTransactionResponse, CoinBalanceResponse, CoinAdjustment
from library_app.modules.coins.service import CoinService
from library_app.modules.profiles.service import ProfileService
from library_app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/coins", tags=["coins"])


def get_coin_service(supabase: Client = Depends(get_supabase)) -> CoinService:
    return CoinService(supabase)


@router.get("/balance", response_model=CoinBalanceResponse)
async def get_my_balance(
    profile: Dict = Depends(require_permission("coins:read")),
    service: CoinService = Depends(get_coin_service)
):
    return service.get_balance(profile["user_id"])


@router.get("/transactions", response_model=List[CoinTransactionResponse])
async def list_my_transactions(
    limit: int = 50,
    offset: int = 0,
    profile: Dict = Depends(require_permission("coins:read")),
    service: CoinService = Depends(get_coin_service)
):
    """Coin history of the current user, newest first"""
    return service.list_transactions(profile["user_id"], limit=limit, offset=offset)


@router.get("/students/{student_id}/transactions", response_model=List[CoinTransactionResponse])
async def list_student_transactions(
    student_id: str,
    limit: int = 50,
    offset: int = 0,
    profile: Dict = Depends(require_permission("coins:grant")),
    service: CoinService = Depends(get_coin_service),
    supabase: Client = Depends(get_supabase)
):
    student = ProfileService(supabase).get_profile_by_student_id(student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student ID not found")
    return service.list_transactions(student.user_id, limit=limit, offset=offset)


@router.post("/students/{student_id}/adjust", response_model=CoinBalanceResponse)
async def adjust_student_coins(
    student_id: str,
    adjustment: CoinAdjustment,
    profile: Dict = Depends(require_permission("coins:grant")),
    service: CoinService = Depends(get_coin_service),
    supabase: Client = Depends(get_supabase)
):
    """Grant a bonus or apply a penalty to a student (admin)"""
    student = ProfileService(supabase).get_profile_by_student_id(student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student ID not found")
    if adjustment.type == "bonus":
        service.add_coins(student.user_id, adjustment.amount, adjustment.reason, type="bonus")
    else:
        service.deduct_coins(student.user_id, adjustment.amount, adjustment.reason, type="penalty")
    return service.get_balance(student.user_id)
