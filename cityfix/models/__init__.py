# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the CityFix platform.
"""

from .base import BaseDocument, BaseRequest, utcnow

from .enums import (
    UserRole,
    IssuePriority,
    IssueStatus,
    TimelineLabel,
    PaymentType
)

from .entities import (
    TimelineEvent,
    AssignedStaff,
    User,
    Issue,
    Payment,
    UserContext
)

from .requests import (
    TokenRequest,
    RegisterUserRequest,
    UpdateProfileRequest,
    AdminUpdateUserRequest,
    CreateIssueRequest,
    UpdateIssueRequest,
    UpvoteRequest,
    AssignStaffRequest,
    StatusUpdateRequest,
    PaymentIntentRequest,
    RecordPaymentRequest,
    IssueFilters,
    EmailPath,
    IssuePath,
    UserIdPath
)

__all__ = [
    "BaseDocument",
    "BaseRequest",
    "utcnow",
    "UserRole",
    "IssuePriority",
    "IssueStatus",
    "TimelineLabel",
    "PaymentType",
    "TimelineEvent",
    "AssignedStaff",
    "User",
    "Issue",
    "Payment",
    "UserContext",
    "TokenRequest",
    "RegisterUserRequest",
    "UpdateProfileRequest",
    "AdminUpdateUserRequest",
    "CreateIssueRequest",
    "UpdateIssueRequest",
    "UpvoteRequest",
    "AssignStaffRequest",
    "StatusUpdateRequest",
    "PaymentIntentRequest",
    "RecordPaymentRequest",
    "IssueFilters",
    "EmailPath",
    "IssuePath",
    "UserIdPath"
]
