# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Issue repository: filtered listing, lookups and lifecycle mutations.

Update documents come from ``domain.issues``; this module only executes them
against the ``issues`` collection.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from pymongo import ASCENDING, DESCENDING
from opentelemetry import trace

from ..domain import issues as issue_domain
from ..models.entities import AssignedStaff
from ..models.requests import CreateIssueRequest, UpdateIssueRequest, IssueFilters
from .mongodb import (
    MongoDBService, ISSUES, serialize_document,
    insert_result_to_dict, update_result_to_dict, delete_result_to_dict
)

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

# Label order, not severity order: "High" < "Low" < "Normal".
LIST_SORT = [("priority", ASCENDING), ("date", DESCENDING)]


class AlreadyUpvotedError(Exception):
    """Raised when a voter has already upvoted an issue."""
    
    def __init__(self, issue_id: str, email: str):
        super().__init__(f"{email} has already upvoted issue {issue_id}")
        self.issue_id = issue_id
        self.email = email


class IssueRepository:
    """Reads and writes issue documents."""
    
    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service
    
    @property
    def collection(self):
        return self.mongodb_service.get_collection(ISSUES)
    
    def _update(self, issue_id: str, update: Dict[str, Any],
                extra_filter: Optional[Dict[str, Any]] = None):
        object_id = self.mongodb_service.parse_object_id(issue_id)
        if object_id is None:
            return None
        query = {"_id": object_id}
        if extra_filter:
            query.update(extra_filter)
        return self.collection.update_one(query, update)
    
    def create(self, request: CreateIssueRequest, reporter_email: str) -> Dict[str, Any]:
        """Insert a new pending issue with its creation timeline entry."""
        with tracer.start_as_current_span("db.issue.create") as span:
            document = issue_domain.build_new_issue(request, reporter_email)
            result = self.collection.insert_one(document)
            
            span.set_attribute("issue.id", str(result.inserted_id))
            logger.info(
                "Issue created",
                extra={"issue_id": str(result.inserted_id), "reporter": reporter_email}
            )
            return insert_result_to_dict(result)
    
    def list(self, filters: IssueFilters) -> Tuple[List[Dict[str, Any]], int]:
        """
        List issues matching the filters.
        
        Returns the first ``filters.limit`` issues after sorting by priority
        label then newest first, and the total count of the filtered set.
        A limit of 0 returns every match. ``filters.page`` does not offset the result.
        """
        with tracer.start_as_current_span("db.issue.list") as span:
            query = issue_domain.build_issue_query(filters)
            
            cursor = self.collection.find(query).sort(LIST_SORT).limit(filters.limit)
            items = [serialize_document(doc) for doc in cursor]
            total = self.collection.count_documents(query)
            
            span.set_attributes({
                "db.result_count": len(items),
                "db.total_count": total
            })
            return items, total
    
    def get_by_id(self, issue_id: str) -> Optional[Dict[str, Any]]:
        object_id = self.mongodb_service.parse_object_id(issue_id)
        if object_id is None:
            return None
        document = self.collection.find_one({"_id": object_id})
        return serialize_document(document) if document else None
    
    def count_by_reporter(self, email: str) -> int:
        return self.collection.count_documents({"reporterEmail": email})
    
    def list_by_reporter(self, email: str) -> List[Dict[str, Any]]:
        return [serialize_document(doc) for doc in self.collection.find({"reporterEmail": email})]
    
    def list_by_assigned_staff(self, email: str) -> List[Dict[str, Any]]:
        return [
            serialize_document(doc)
            for doc in self.collection.find({"assignedStaff.email": email})
        ]
    
    def upvote(self, issue_id: str, email: str) -> Dict[str, Any]:
        """
        Record one upvote by ``email``.
        
        Raises:
            AlreadyUpvotedError: If the issue exists and already counts this voter
        """
        with tracer.start_as_current_span("db.issue.upvote") as span:
            condition, update = issue_domain.build_upvote_update(email)
            result = self._update(issue_id, update, condition)
            
            if result is not None and result.matched_count == 0:
                if self.get_by_id(issue_id) is not None:
                    span.set_attribute("issue.upvote_result", "duplicate")
                    raise AlreadyUpvotedError(issue_id, email)
            
            span.set_attribute("issue.upvote_result", "counted" if result and result.modified_count else "missing")
            return update_result_to_dict(result)
    
    def update_content(self, issue_id: str, request: UpdateIssueRequest) -> Dict[str, Any]:
        update = issue_domain.build_content_update(request)
        if not update["$set"]:
            return update_result_to_dict(None)
        return update_result_to_dict(self._update(issue_id, update))
    
    def boost(self, issue_id: str, actor_email: Optional[str], via_payment: bool = False) -> Dict[str, Any]:
        """Raise the issue to High priority and append a Boosted entry."""
        result = self._update(issue_id, issue_domain.build_boost_update(actor_email, via_payment))
        logger.info(
            "Issue boosted",
            extra={"issue_id": issue_id, "actor": actor_email, "via_payment": via_payment}
        )
        return update_result_to_dict(result)
    
    def assign_staff(self, issue_id: str, staff: AssignedStaff, actor_email: Optional[str]) -> Dict[str, Any]:
        result = self._update(issue_id, issue_domain.build_assignment_update(staff, actor_email))
        logger.info(
            "Issue assigned",
            extra={"issue_id": issue_id, "staff": staff.email, "actor": actor_email}
        )
        return update_result_to_dict(result)
    
    def change_status(self, issue_id: str, status: str, actor_email: Optional[str]) -> Dict[str, Any]:
        result = self._update(issue_id, issue_domain.build_status_update(status, actor_email))
        logger.info(
            "Issue status changed",
            extra={"issue_id": issue_id, "status": status, "actor": actor_email}
        )
        return update_result_to_dict(result)
    
    def delete(self, issue_id: str) -> Dict[str, Any]:
        object_id = self.mongodb_service.parse_object_id(issue_id)
        if object_id is None:
            return delete_result_to_dict(None)
        result = self.collection.delete_one({"_id": object_id})
        logger.warning("Issue deleted", extra={"issue_id": issue_id, "deleted": result.deleted_count})
        return delete_result_to_dict(result)
    
    def estimated_count(self) -> int:
        return self.collection.estimated_document_count()
