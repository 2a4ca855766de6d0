"""
Authentication Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List


class LoginRequest(BaseModel):
    """Login request schema"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Session user as exposed to the browser"""
    id: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None


class LoginResponse(BaseModel):
    """Login response schema"""
    session_token: str
    token_type: str = "bearer"
    user: UserResponse


class ProfileAddress(BaseModel):
    street: str = ""
    landmark: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    pincode: str = ""


class ProfileUpdate(BaseModel):
    """Fields a user may edit on their own profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    dateOfBirth: Optional[str] = None
    address: Optional[ProfileAddress] = None


class ResetLinkStatus(BaseModel):
    """Outcome of checking a password reset link"""
    state: str  # "form" or "invalid"
    title: str
    message: str
    reason: Optional[str] = None
    user_id: Optional[str] = None
    role: Optional[str] = None
    display_name: Optional[str] = None
    time_remaining: Optional[str] = None


class PasswordResetSubmit(BaseModel):
    userId: Optional[str] = None
    role: Optional[str] = None
    expires: Optional[str] = None
    password: str
    confirmPassword: str


class MessageResponse(BaseModel):
    message: str


class PermissionsResponse(BaseModel):
    role: str
    display_name: str
    sections: List[str]
    routes: List[str]
    navigation: List[dict]


class RouteCheckResponse(BaseModel):
    path: str
    allowed: bool
    can_edit: Optional[bool] = None
