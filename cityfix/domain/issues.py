# SPDX-License-Identifier: Apache-2.0

"""
Issue lifecycle domain logic.

Pure functions that build new issue documents and the MongoDB update
documents for each lifecycle transition. Every transition except a plain
content edit appends exactly one timeline entry through ``$push``, so prior
entries are never rewritten or reordered.
"""

import re
from typing import Any, Dict, Optional, Tuple

from ..models.base import utcnow
from ..models.entities import Issue, TimelineEvent, AssignedStaff
from ..models.enums import IssuePriority, IssueStatus, TimelineLabel
from ..models.requests import CreateIssueRequest, UpdateIssueRequest, IssueFilters

CONTENT_FIELDS = ("title", "category", "location", "description")


def build_timeline_event(status: str, text: str, user: Optional[str]) -> Dict[str, Any]:
    """Build a timeline entry stamped with the current time."""
    return TimelineEvent(status=status, text=text, user=user, date=utcnow()).to_document()


def build_new_issue(request: CreateIssueRequest, reporter_email: str) -> Dict[str, Any]:
    """
    Build the document for a newly reported issue.
    
    Server-managed fields are always reset: the issue starts pending with
    Normal priority, no votes, no assignee and a single creation entry.
    
    Args:
        request: Validated create request
        reporter_email: Email of the reporter (request value or caller)
        
    Returns:
        Issue document ready for insertion
    """
    now = utcnow()
    issue = Issue(
        title=request.title,
        category=request.category,
        location=request.location,
        description=request.description,
        image=request.image,
        reporter_email=reporter_email,
        reporter_name=request.reporter_name,
        status=IssueStatus.PENDING.value,
        priority=IssuePriority.NORMAL.value,
        upvotes=0,
        upvoted_by=[],
        date=now,
        assigned_staff=None,
        timeline=[
            TimelineEvent(
                status=IssueStatus.PENDING.value,
                text="Issue reported by citizen",
                user=reporter_email,
                date=now
            )
        ]
    )
    return issue.to_document()


def build_content_update(request: UpdateIssueRequest) -> Dict[str, Any]:
    """Overwrite the editable content fields; no timeline entry is added."""
    values = request.model_dump(include=set(CONTENT_FIELDS), exclude_none=True)
    return {"$set": values}


def build_upvote_update(email: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Build the conditional filter and update for an upvote.
    
    The filter only matches while ``email`` is absent from ``upvotedBy``, so
    the membership check, the push and the increment happen in one atomic
    document update and ``upvotes`` always equals ``len(upvotedBy)``.
    
    Returns:
        Tuple of (extra filter clauses, update document)
    """
    condition = {"upvotedBy": {"$ne": email}}
    update = {
        "$inc": {"upvotes": 1},
        "$push": {"upvotedBy": email}
    }
    return condition, update


def build_boost_update(actor_email: Optional[str], via_payment: bool = False) -> Dict[str, Any]:
    """Raise priority to High and record who boosted it."""
    text = "Priority boosted to High via payment" if via_payment else "Priority boosted to High"
    return {
        "$set": {"priority": IssuePriority.HIGH.value},
        "$push": {"timeline": build_timeline_event(TimelineLabel.BOOSTED.value, text, actor_email)}
    }


def build_assignment_update(staff: AssignedStaff, actor_email: Optional[str]) -> Dict[str, Any]:
    """Set the assigned staff member and record the assignment."""
    staff_name = staff.name or staff.email
    return {
        "$set": {"assignedStaff": staff.to_document()},
        "$push": {
            "timeline": build_timeline_event(
                TimelineLabel.ASSIGNED.value,
                f"Issue assigned to Staff: {staff_name}",
                actor_email
            )
        }
    }


def build_status_update(status: str, actor_email: Optional[str]) -> Dict[str, Any]:
    """Set the issue status; the timeline entry carries the new status."""
    return {
        "$set": {"status": status},
        "$push": {
            "timeline": build_timeline_event(status, f"Status updated to {status}", actor_email)
        }
    }


def build_issue_query(filters: IssueFilters) -> Dict[str, Any]:
    """
    Build the conjunctive MongoDB query for the public issue listing.
    
    The title search is a case-insensitive substring match; status, category
    and priority must match exactly.
    """
    query: Dict[str, Any] = {}
    
    if filters.search:
        query["title"] = {"$regex": re.escape(filters.search), "$options": "i"}
    
    if filters.status:
        query["status"] = filters.status
    
    if filters.category:
        query["category"] = filters.category
    
    if filters.priority:
        query["priority"] = filters.priority
    
    return query
