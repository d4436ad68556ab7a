# SPDX-License-Identifier: Apache-2.0

"""
Tests for JWT issuing and validation.
"""

import jwt
import pytest
from datetime import datetime, timedelta, timezone

from cityfix.services.auth import AuthService, TokenValidationError, TOKEN_EXPIRE_DAYS


class TestAuthService:
    
    def setup_method(self):
        self.auth_service = AuthService("unit-test-secret")
    
    def test_requires_secret(self):
        with pytest.raises(ValueError):
            AuthService("")
    
    def test_issue_and_validate(self):
        token = self.auth_service.issue_token({"email": "user@example.com", "name": "User"})
        
        payload = self.auth_service.validate_token(token)
        
        assert payload["email"] == "user@example.com"
        assert payload["name"] == "User"
    
    def test_token_expires_after_seven_days(self):
        token = self.auth_service.issue_token({"email": "user@example.com"})
        payload = jwt.decode(token, options={"verify_signature": False})
        
        assert TOKEN_EXPIRE_DAYS == 7
        assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60
    
    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(days=8)
        token = jwt.encode(
            {"email": "user@example.com", "iat": past, "exp": past + timedelta(days=1)},
            "unit-test-secret",
            algorithm="HS256"
        )
        
        with pytest.raises(TokenValidationError, match="expired"):
            self.auth_service.validate_token(token)
    
    def test_wrong_secret(self):
        token = AuthService("another-secret").issue_token({"email": "user@example.com"})
        
        with pytest.raises(TokenValidationError):
            self.auth_service.validate_token(token)
    
    def test_token_without_expiry(self):
        token = jwt.encode({"email": "user@example.com"}, "unit-test-secret", algorithm="HS256")
        
        with pytest.raises(TokenValidationError):
            self.auth_service.validate_token(token)
    
    def test_caller_registered_claims_are_dropped(self):
        token = self.auth_service.issue_token({
            "email": "user@example.com",
            "sub": 123,
            "aud": "someone-else",
            "nbf": 4102444800,
            "exp": 1
        })
        
        payload = self.auth_service.validate_token(token)
        
        assert payload["email"] == "user@example.com"
        assert not {"sub", "aud", "nbf"} & set(payload)
        assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60
    
    def test_malformed_token(self):
        with pytest.raises(TokenValidationError):
            self.auth_service.validate_token("not-a-jwt")
