# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the CityFix platform.
"""

from enum import Enum


class UserRole(str, Enum):
    """Privilege tier of a user account."""
    CITIZEN = "citizen"
    STAFF = "staff"
    ADMIN = "admin"


class IssuePriority(str, Enum):
    """
    Issue priority labels.

    Issues are listed sorted by the label text, so "High" < "Low" < "Normal".
    """
    HIGH = "High"
    NORMAL = "Normal"
    LOW = "Low"


class IssueStatus(str, Enum):
    """Known issue status labels accepted on status changes."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    WORKING = "working"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REJECTED = "rejected"


class TimelineLabel(str, Enum):
    """Status labels recorded on timeline entries that are not issue statuses."""
    BOOSTED = "Boosted"
    ASSIGNED = "Assigned"


class PaymentType(str, Enum):
    """Payment types with a side effect on confirmation."""
    SUBSCRIPTION = "subscription"
    BOOST = "boost"
