# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for JWT token management.

Tokens are stateless HS256 credentials encoding caller-supplied claims and
expiring after seven days.
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

TOKEN_EXPIRE_DAYS = 7

# Registered claims are set or checked by the server, never taken from the caller.
RESERVED_CLAIMS = frozenset({"iss", "sub", "aud", "nbf", "iat", "exp", "jti"})


class AuthenticationError(Exception):
    """Raised when a token cannot be issued."""
    pass


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


class AuthService:
    """JWT authentication service with HS256 signing."""
    
    def __init__(self, secret_key: str, expire_days: int = TOKEN_EXPIRE_DAYS):
        """
        Initialize the authentication service.
        
        Args:
            secret_key: Shared secret used to sign and verify tokens
            expire_days: Token lifetime in days
        """
        if not secret_key:
            raise ValueError("A token signing secret is required")
        self.secret_key = secret_key
        self.algorithm = "HS256"
        self.expire_days = expire_days
    
    def issue_token(self, claims: Dict[str, Any]) -> str:
        """
        Sign a token carrying ``claims``.
        
        Args:
            claims: Identity claims supplied by the caller (at least ``email``);
                registered JWT claims among them are dropped
            
        Returns:
            Encoded JWT
        """
        with tracer.start_as_current_span("auth.issue_token") as span:
            span.set_attribute("auth.operation", "issue_token")
            
            now = datetime.now(timezone.utc)
            payload = {key: value for key, value in claims.items() if key not in RESERVED_CLAIMS}
            payload.update({
                "iat": now,
                "exp": now + timedelta(days=self.expire_days)
            })
            
            try:
                token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
            except Exception as e:
                logger.error(f"Token generation failed: {str(e)}")
                raise AuthenticationError(f"Failed to generate token: {str(e)}")
            
            logger.info("JWT token issued", extra={"email": claims.get("email")})
            return token
    
    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Validate and decode a JWT token.
        
        Args:
            token: JWT token string to validate
            
        Returns:
            Decoded token claims
            
        Raises:
            TokenValidationError: If token is malformed, expired or badly signed
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            span.set_attribute("auth.operation", "validate_token")
            
            try:
                payload = jwt.decode(
                    token,
                    self.secret_key,
                    algorithms=[self.algorithm],
                    options={"verify_exp": True, "require": ["exp"]}
                )
                
                span.set_attribute("auth.validation_result", "success")
                logger.debug("Token validated successfully", extra={"email": payload.get("email")})
                return payload
                
            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError("Token has expired")
                
            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(f"Invalid token: {str(e)}")
