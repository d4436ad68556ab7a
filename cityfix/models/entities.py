# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the CityFix platform.
"""

import re
from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict
from .base import BaseDocument, utcnow
from .enums import UserRole, IssuePriority, IssueStatus

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email_address(value: str) -> str:
    """Validate email format and normalize surrounding whitespace."""
    value = value.strip()
    if not re.match(EMAIL_PATTERN, value):
        raise ValueError('Invalid email format')
    return value


class TimelineEvent(BaseDocument):
    """Immutable audit entry appended to an issue's timeline."""
    
    status: str = Field(..., description="Status label recorded for the event")
    text: str = Field(..., description="Human-readable description")
    user: Optional[str] = Field(None, description="Email of the acting user")
    date: datetime = Field(default_factory=utcnow, description="Event timestamp")


class AssignedStaff(BaseDocument):
    """Staff member descriptor stored on an assigned issue."""
    
    model_config = ConfigDict(populate_by_name=True, extra="allow")
    
    email: str = Field(..., description="Staff email address")
    name: Optional[str] = Field(None, description="Staff display name")
    
    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return validate_email_address(v)


class User(BaseDocument):
    """User account keyed by email."""
    
    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(None, max_length=200, description="Display name")
    photo: Optional[str] = Field(None, description="Profile photo URL")
    role: UserRole = Field(default=UserRole.CITIZEN, description="Privilege tier")
    is_blocked: bool = Field(default=False, alias="isBlocked")
    is_verified: bool = Field(default=False, alias="isVerified")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    
    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        return validate_email_address(v)


class Issue(BaseDocument):
    """Civic issue reported by a citizen and tracked through its lifecycle."""
    
    title: str = Field(..., min_length=1, max_length=200, description="Issue title")
    category: str = Field(..., min_length=1, description="Issue category")
    location: Optional[str] = Field(None, description="Where the issue is located")
    description: Optional[str] = Field(None, description="Free-text description")
    image: Optional[str] = Field(None, description="Image URL")
    reporter_email: str = Field(..., alias="reporterEmail")
    reporter_name: Optional[str] = Field(None, alias="reporterName")
    status: str = Field(default=IssueStatus.PENDING.value)
    priority: str = Field(default=IssuePriority.NORMAL.value)
    upvotes: int = Field(default=0, ge=0)
    upvoted_by: List[str] = Field(default_factory=list, alias="upvotedBy")
    date: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    assigned_staff: Optional[AssignedStaff] = Field(None, alias="assignedStaff")
    timeline: List[TimelineEvent] = Field(default_factory=list)
    
    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate issue title."""
        if not v.strip():
            raise ValueError('Issue title cannot be empty')
        return v.strip()


class Payment(BaseDocument):
    """Ledger entry for a confirmed external payment."""
    
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, extra="allow")
    
    type: str = Field(..., min_length=1, description="Payment type, e.g. subscription or boost")
    user_email: str = Field(..., alias="userEmail")
    amount: float = Field(..., ge=0, description="Amount in major currency units")
    issue_id: Optional[str] = Field(None, alias="issueId")
    transaction_id: Optional[str] = Field(None, alias="transactionId")
    date: datetime = Field(default_factory=utcnow)


class UserContext(BaseModel):
    """Identity of the caller derived from a verified token."""
    
    email: Optional[str] = Field(None, description="Email claim of the token")
    claims: Dict[str, Any] = Field(default_factory=dict, description="Full decoded token claims")
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
