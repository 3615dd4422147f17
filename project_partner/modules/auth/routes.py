from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from project_partner.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    SetAdminRoleRequest, CurrentUserResponse
)
from project_partner.modules.auth.service import AuthService
from project_partner.core.dependencies import (
    get_auth_service, get_current_user_id, require_admin, is_super_user,
    get_user_roles, get_access_cache
)
from project_partner.database.supabase_client import get_supabase
from supabase import Client
from typing import Dict, Any

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    cache: Dict[str, Any] = Depends(get_access_cache),
):
    """Get current authenticated user with roles (for frontend UI)."""
    roles = get_user_roles(current_user["id"], supabase, cache)
    return CurrentUserResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        user_metadata=current_user.get("user_metadata") or {},
        roles=roles,
        is_admin=is_super_user(current_user) or "admin" in roles,
    )


@router.post("/admin-role", status_code=200)
async def set_admin_role(
    request: SetAdminRoleRequest,
    current_user: Dict = Depends(require_admin),
    service: AuthService = Depends(get_auth_service)
):
    """Grant or revoke the admin role (requires current user to be an admin)"""
    service.set_admin_role(request.user_id, request.is_admin)
    return {
        "message": f"User {request.user_id} admin role set to {request.is_admin}",
        "user_id": request.user_id,
        "is_admin": request.is_admin
    }
