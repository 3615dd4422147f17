from pydantic import BaseModel, EmailStr
from typing import Optional, List


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    display_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class SetAdminRoleRequest(BaseModel):
    user_id: str
    is_admin: bool = True


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: dict = {}
    roles: List[str] = []
    is_admin: bool = False
