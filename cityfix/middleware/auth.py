# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and role checks.

This module provides Flask decorators that verify the bearer token, build the
caller's user context and, for privileged routes, look up the caller's stored
role. Failures short-circuit before the route body runs.
"""

from functools import wraps
from flask import request, g, current_app
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
import logging

from ..domain import authorization
from ..models.entities import UserContext
from ..services.auth import AuthService, TokenValidationError
from ..services.users import UserRepository
from .error_handler import AuthenticationException, AuthorizationException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.
    
    Handles token extraction, validation and user context building for
    protected endpoints, and the role lookups of the authorization policy.
    """
    
    def __init__(self, auth_service: AuthService, user_repository: UserRepository):
        """
        Initialize the authentication middleware.
        
        Args:
            auth_service: JWT authentication service
            user_repository: Identity store used for role checks
        """
        self.auth_service = auth_service
        self.user_repository = user_repository
    
    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract JWT token from the Authorization header.
        
        Returns:
            JWT token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '').strip()
        
        if not auth_header:
            return None
        
        # Handle "Bearer <token>" format
        parts = auth_header.split(None, 1)
        if len(parts) == 2 and parts[0].lower() == 'bearer':
            return parts[1].strip() or None
        
        if len(parts) == 1 and parts[0].lower() != 'bearer':
            return parts[0]
        
        return None
    
    def build_user_context(self, token_payload: Dict[str, Any]) -> UserContext:
        """
        Build user context from validated token payload and request information.
        
        Args:
            token_payload: Decoded JWT payload
            
        Returns:
            UserContext object for request processing
        """
        return UserContext(
            email=token_payload.get("email"),
            claims=token_payload,
            ip_address=request.remote_addr,
            user_agent=request.headers.get('User-Agent', '')
        )
    
    def authenticate(self) -> UserContext:
        """
        Verify the request's bearer token.
        
        Raises:
            AuthenticationException: If the token is missing or invalid
        """
        with tracer.start_as_current_span("auth.middleware.validate_request") as span:
            token = self.extract_token_from_request()
            if not token:
                span.set_attribute("auth.result", "missing_token")
                logger.warning("Authentication failed: missing token")
                raise AuthenticationException("Missing authorization token")
            
            try:
                token_payload = self.auth_service.validate_token(token)
            except TokenValidationError as e:
                span.set_attribute("auth.result", "invalid_token")
                logger.warning(f"Authentication failed: {str(e)}")
                raise AuthenticationException(str(e))
            
            user_context = self.build_user_context(token_payload)
            span.set_attribute("auth.result", "success")
            return user_context
    
    def load_caller(self, user_context: UserContext) -> Optional[Dict[str, Any]]:
        """Look up the caller's stored user record; None for unknown callers."""
        return self.user_repository.find_by_email(user_context.email)


def _authenticate_request() -> UserContext:
    auth_middleware: AuthMiddleware = current_app.auth_middleware
    user_context = auth_middleware.authenticate()
    # Store user context in Flask's g object
    g.user_context = user_context
    return user_context


def _require_role(check: Callable, tier: str) -> Callable:
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user_context = _authenticate_request()
            
            with tracer.start_as_current_span("auth.middleware.check_role") as span:
                span.set_attribute("auth.required_tier", tier)
                
                caller = current_app.auth_middleware.load_caller(user_context)
                result = check(caller)
                if not result.allowed:
                    span.set_attribute("auth.role_result", "denied")
                    logger.warning(
                        f"Authorization failed: {tier} role required",
                        extra={
                            "email": user_context.email,
                            "role": authorization.get_role(caller),
                            "path": request.path
                        }
                    )
                    raise AuthorizationException(result.reason)
                
                span.set_attribute("auth.role_result", "granted")
            
            return f(*args, **kwargs)
        
        return decorated_function
    return decorator


def require_auth(f: Callable) -> Callable:
    """
    Decorator to require a valid bearer token for Flask routes.
    
    The verified caller is available as ``g.user_context``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)
    
    return decorated_function


def require_staff(f: Callable) -> Callable:
    """Decorator requiring a valid token and a staff or admin role."""
    return _require_role(authorization.check_staff, "staff")(f)


def require_admin(f: Callable) -> Callable:
    """Decorator requiring a valid token and the admin role."""
    return _require_role(authorization.check_admin, "admin")(f)


def require_owner(user_context: UserContext, resource_email: Optional[str]) -> None:
    """
    Enforce that the caller owns a resource identified by email.
    
    Raises:
        AuthorizationException: On ownership mismatch
    """
    result = authorization.check_owner(user_context, resource_email)
    if not result.allowed:
        logger.warning(
            "Authorization failed: ownership mismatch",
            extra={"email": user_context.email, "resource_email": resource_email}
        )
        raise AuthorizationException(result.reason)
