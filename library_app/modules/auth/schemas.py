from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date

from library_app.modules.profiles.schemas import ProfileResponse


class SignUpRequest(BaseModel):
    full_name: str = Field(min_length=1)
    date_of_birth: Optional[date] = None
    class_grade: Optional[str] = None
    student_id: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)


class SignUpResponse(BaseModel):
    user_id: str
    student_id: str
    email: str
    coin_balance: int
    message: str


class SignInRequest(BaseModel):
    student_id: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    profile: Optional[ProfileResponse] = None


class PermissionResponse(BaseModel):
    name: str
    resource: str
    action: str
    description: str
