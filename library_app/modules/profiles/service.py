from supabase import Client
from library_app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from library_app.core.filters import ilike_any
from typing import List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile_by_id(self, profile_id: str) -> ProfileResponse:
        """Get profile by ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", profile_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileResponse(**result.data[0])

    def get_profile_by_student_id(self, student_id: str) -> Optional[ProfileResponse]:
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("student_id", student_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            return None
        return ProfileResponse(**result.data[0])

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's own profile fields"""
        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if profile_data.full_name is not None:
            update_data["full_name"] = profile_data.full_name
        if profile_data.date_of_birth is not None:
            update_data["date_of_birth"] = profile_data.date_of_birth.isoformat()
        if profile_data.class_grade is not None:
            update_data["class_grade"] = profile_data.class_grade

        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return ProfileResponse(**result.data[0])

    def list_students(
        self,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[ProfileResponse]:
        """List student profiles, newest first; search matches name or student ID"""
        try:
            query = self.supabase.table("profiles")\
                .select("*")\
                .eq("role", "student")
            if search:
                query = query.or_(ilike_any(("full_name", "student_id"), search))
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [ProfileResponse(**p) for p in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
