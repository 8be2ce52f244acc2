import logging
from supabase import Client
from library_app.modules.addition_requests.schemas import AdditionRequestCreate, AdditionRequestResponse
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AdditionRequestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_request(self, user_id: str, request_data: AdditionRequestCreate) -> AdditionRequestResponse:
        """Student suggests a book for the catalog"""
        try:
            result = self.supabase.table("book_addition_requests").insert({
                "user_id": user_id,
                "book_title": request_data.book_title,
                "author": request_data.author,
                "reference_link": request_data.reference_link,
                "description": request_data.description,
                "status": "pending",
                "requested_at": datetime.now(timezone.utc).isoformat()
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create addition request")

            return AdditionRequestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_requests(
        self,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[AdditionRequestResponse]:
        """Addition requests, newest first, with the requesting student's name"""
        try:
            query = self.supabase.table("book_addition_requests").select("*")
            if status:
                query = query.eq("status", status)
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.order("requested_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()

            rows = result.data or []
            people: Dict[str, Dict[str, Any]] = {}
            if rows:
                profiles = self.supabase.table("profiles")\
                    .select("user_id, full_name, student_id")\
                    .in_("user_id", list({r["user_id"] for r in rows}))\
                    .execute()
                people = {p["user_id"]: p for p in profiles.data}

            return [
                AdditionRequestResponse(
                    **row,
                    student_name=people.get(row["user_id"], {}).get("full_name"),
                    student_id=people.get(row["user_id"], {}).get("student_id")
                )
                for row in rows
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def process_request(self, request_id: str, action: str, notes: Optional[str] = None) -> AdditionRequestResponse:
        """Approve or reject a pending addition request"""
        try:
            existing = self.supabase.table("book_addition_requests")\
                .select("status")\
                .eq("id", request_id)\
                .limit(1)\
                .execute()

            if not existing.data:
                raise HTTPException(status_code=404, detail="Addition request not found")
            if existing.data[0]["status"] != "pending":
                raise HTTPException(status_code=400, detail=f"Request already {existing.data[0]['status']}")

            status = "approved" if action == "approve" else "rejected"
            result = self.supabase.table("book_addition_requests")\
                .update({
                    "status": status,
                    "notes": notes,
                    "processed_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", request_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Addition request not found")

            logger.info(f"Addition request {request_id} {status}")
            return AdditionRequestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
