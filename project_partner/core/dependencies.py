"""
Core dependencies for route protection and admin checks
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from project_partner.database.supabase_client import get_supabase
from project_partner.modules.auth.service import AuthService
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for role lookups."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def is_super_user(user_data: dict) -> bool:
    """Check if user is a super user from app_metadata (set server-side only)"""
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("type") == "super_user"


def get_user_roles(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Return role names from user_roles. Uses request-scoped cache when provided."""
    if cache is not None and "roles" in cache:
        return cache["roles"]
    try:
        result = supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .execute()
        roles = [r["role"] for r in (result.data or []) if r.get("role")]
    except Exception as e:
        logger.error(f"Error getting user roles: {e}")
        roles = []
    if cache is not None:
        cache["roles"] = roles
    return roles


def is_admin(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    """Super users and users holding the admin role in user_roles"""
    if is_super_user(user_data):
        return True
    return "admin" in get_user_roles(user_data["id"], supabase, cache)


def require_admin(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Dependency that only lets administrators through"""
    cache = _get_request_cache(request)
    if not is_admin(user_data, supabase, cache):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can perform this action"
        )
    return user_data


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by require_admin when used)."""
    return _get_request_cache(request)
