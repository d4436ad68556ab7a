# SPDX-License-Identifier: Apache-2.0

"""
Authorization domain logic for role-based access control.

This module contains pure functions implementing the three policy tiers:
owner checks against a resource's identifying email, staff checks and admin
checks against the caller's stored role. A missing user record never raises;
it simply holds no privileged role.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass
from ..models.entities import UserContext
from ..models.enums import UserRole

STAFF_ROLES = frozenset({UserRole.STAFF.value, UserRole.ADMIN.value})
ADMIN_ROLES = frozenset({UserRole.ADMIN.value})


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""
    allowed: bool
    reason: Optional[str] = None


def get_role(user: Optional[Dict[str, Any]]) -> Optional[str]:
    """Return the stored role of a user document, or None if there is no user."""
    if not user:
        return None
    return user.get("role")


def check_owner(user_context: UserContext, resource_email: Optional[str]) -> AuthorizationResult:
    """
    Check that the caller's claimed email matches a resource's email.
    
    Args:
        user_context: Context of the authenticated caller
        resource_email: Identifying email of the resource
        
    Returns:
        AuthorizationResult indicating if access is granted
    """
    if user_context.email and user_context.email == resource_email:
        return AuthorizationResult(allowed=True)
    
    return AuthorizationResult(
        allowed=False,
        reason="Caller does not own this resource"
    )


def check_staff(user: Optional[Dict[str, Any]]) -> AuthorizationResult:
    """
    Check that a user holds the staff or admin role.
    
    Args:
        user: Stored user document of the caller, or None
        
    Returns:
        AuthorizationResult indicating if access is granted
    """
    if get_role(user) in STAFF_ROLES:
        return AuthorizationResult(allowed=True)
    
    return AuthorizationResult(allowed=False, reason="Staff role required")


def check_admin(user: Optional[Dict[str, Any]]) -> AuthorizationResult:
    """
    Check that a user holds the admin role.
    
    Args:
        user: Stored user document of the caller, or None
        
    Returns:
        AuthorizationResult indicating if access is granted
    """
    if get_role(user) in ADMIN_ROLES:
        return AuthorizationResult(allowed=True)
    
    return AuthorizationResult(allowed=False, reason="Admin role required")
