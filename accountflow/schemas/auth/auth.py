# accountflow/schemas/auth/auth.py
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any


class SendCodeRequest(BaseModel):
    phone: str = Field("", description="Mainland China mobile number, e.g. 13800000001")


class RegisterRequest(BaseModel):
    username: str = ""
    phone: str = ""
    email: str = ""
    code: str = Field("", description="6-digit verification code")


class LoginRequest(BaseModel):
    phone: str = ""
    code: str = ""


class UserResponse(BaseModel):
    id: int
    username: str
    phone: str
    email: str
    createdAt: str


class SendCodeResponse(BaseModel):
    success: bool
    message: str
    data: Dict[str, Any]


class AuthResponse(BaseModel):
    success: bool
    message: str
    data: Optional[UserResponse] = None
