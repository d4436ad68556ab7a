# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from .base import BaseRequest
from .entities import AssignedStaff, validate_email_address
from .enums import UserRole, IssueStatus


class TokenRequest(BaseModel):
    """Identity claims to encode in an access token."""
    
    model_config = ConfigDict(extra="allow")
    
    email: str = Field(..., description="Caller email address")
    
    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return validate_email_address(v)


class RegisterUserRequest(BaseRequest):
    """Request model for first login / registration."""
    
    email: str = Field(..., description="User email address")
    name: Optional[str] = Field(None, max_length=200, description="Display name")
    photo: Optional[str] = Field(None, description="Profile photo URL")
    
    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        return validate_email_address(v)


class UpdateProfileRequest(BaseRequest):
    """Request model for profile edits."""
    
    name: Optional[str] = Field(None, max_length=200)
    photo: Optional[str] = None


class AdminUpdateUserRequest(BaseRequest):
    """Request model for admin role and block changes."""
    
    role: Optional[UserRole] = None
    is_blocked: Optional[StrictBool] = Field(None, alias="isBlocked")


class CreateIssueRequest(BaseRequest):
    """Request model for reporting an issue."""
    
    title: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1)
    location: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    reporter_email: Optional[str] = Field(None, alias="reporterEmail")
    reporter_name: Optional[str] = Field(None, alias="reporterName")


class UpdateIssueRequest(BaseRequest):
    """Request model for editing issue content."""
    
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


class UpvoteRequest(BaseRequest):
    """Optional voter email; the token email is used when absent."""
    
    email: Optional[str] = None


class AssignStaffRequest(BaseRequest):
    """Request model for assigning a staff member to an issue."""
    
    staff: AssignedStaff


class StatusUpdateRequest(BaseRequest):
    """Request model for changing issue status."""
    
    status: IssueStatus


class PaymentIntentRequest(BaseRequest):
    """Request model for creating a payment intent."""
    
    price: Optional[float] = Field(None, description="Price in major currency units")


class RecordPaymentRequest(BaseRequest):
    """Request model for recording a confirmed payment."""
    
    type: str = Field(..., min_length=1)
    user_email: Optional[str] = Field(None, alias="userEmail")
    amount: float = Field(..., ge=0)
    issue_id: Optional[str] = Field(None, alias="issueId")
    transaction_id: Optional[str] = Field(None, alias="transactionId")
    date: Optional[datetime] = None


class IssueFilters(BaseRequest):
    """Query string of the public issue listing."""
    
    search: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=6, ge=0, description="Maximum issues returned; 0 returns every match")


# Path parameter models

class EmailPath(BaseModel):
    email: str


class IssuePath(BaseModel):
    issue_id: str


class UserIdPath(BaseModel):
    user_id: str
