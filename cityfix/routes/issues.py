# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Issue endpoints.

This module implements the issue lifecycle API: reporting, public listing,
lookups, upvotes, content edits, boosts, staff assignment, status changes and
deletion. Edits and deletes are open to any authenticated caller.
"""

from flask import jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from ..models.requests import (
    CreateIssueRequest, UpdateIssueRequest, UpvoteRequest, AssignStaffRequest,
    StatusUpdateRequest, IssueFilters, EmailPath, IssuePath
)
from ..services.issues import AlreadyUpvotedError
from ..middleware.auth import require_auth, require_staff, require_admin
from ..middleware.error_handler import ConflictException
from ..middleware.validation import validate_json_body, validate_query

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

issues_tag = Tag(name="Issues", description="Issue reporting and lifecycle")
issues_bp = APIBlueprint('issues', __name__, abp_tags=[issues_tag])


@issues_bp.post('/issues')
@require_auth
def create_issue():
    """
    Report a new issue.
    
    Status, priority, votes, date and timeline are set by the server.
    """
    user_context = g.user_context
    
    with tracer.start_as_current_span("issue.create") as span:
        create_request = validate_json_body(CreateIssueRequest)
        reporter_email = create_request.reporter_email or user_context.email
        span.set_attribute("issue.category", create_request.category)
        
        result = current_app.issue_repository.create(create_request, reporter_email)
        return jsonify(result)


@issues_bp.get('/issues')
def list_issues():
    """
    List issues with filtering.
    
    Returns ``{issues, total}`` where ``issues`` holds the first ``limit``
    matches sorted by priority label then newest first, and ``total`` counts
    every match.
    """
    filters = validate_query(IssueFilters)
    items, total = current_app.issue_repository.list(filters)
    return jsonify({"issues": items, "total": total})


@issues_bp.get('/issues/<issue_id>')
@require_auth
def get_issue(path: IssuePath):
    return jsonify(current_app.issue_repository.get_by_id(path.issue_id))


@issues_bp.get('/issues/count/<email>')
@require_auth
def count_issues(path: EmailPath):
    return jsonify({"count": current_app.issue_repository.count_by_reporter(path.email)})


@issues_bp.get('/issues/my-issues/<email>')
@require_auth
def list_reported_issues(path: EmailPath):
    return jsonify(current_app.issue_repository.list_by_reporter(path.email))


@issues_bp.get('/issues/assigned/<email>')
@require_staff
def list_assigned_issues(path: EmailPath):
    return jsonify(current_app.issue_repository.list_by_assigned_staff(path.email))


@issues_bp.patch('/issues/upvote/<issue_id>')
@require_auth
def upvote_issue(path: IssuePath):
    """Upvote once per email; the body email wins over the token email."""
    upvote_request = validate_json_body(UpvoteRequest, required=False)
    voter_email = upvote_request.email or g.user_context.email
    
    try:
        result = current_app.issue_repository.upvote(path.issue_id, voter_email)
    except AlreadyUpvotedError:
        raise ConflictException("You have already upvoted this issue.")
    
    return jsonify(result)


@issues_bp.patch('/issues/<issue_id>')
@require_auth
def update_issue(path: IssuePath):
    """Edit title, category, location and description."""
    update_request = validate_json_body(UpdateIssueRequest)
    return jsonify(current_app.issue_repository.update_content(path.issue_id, update_request))


@issues_bp.patch('/issues/<issue_id>/boost')
@require_auth
def boost_issue(path: IssuePath):
    result = current_app.issue_repository.boost(path.issue_id, g.user_context.email)
    return jsonify(result)


@issues_bp.patch('/issues/assign/<issue_id>')
@require_admin
def assign_staff(path: IssuePath):
    assign_request = validate_json_body(AssignStaffRequest)
    result = current_app.issue_repository.assign_staff(
        path.issue_id,
        assign_request.staff,
        g.user_context.email
    )
    return jsonify(result)


@issues_bp.patch('/issues/status/<issue_id>')
@require_staff
def change_status(path: IssuePath):
    status_request = validate_json_body(StatusUpdateRequest)
    result = current_app.issue_repository.change_status(
        path.issue_id,
        status_request.status,
        g.user_context.email
    )
    return jsonify(result)


@issues_bp.delete('/issues/<issue_id>')
@require_auth
def delete_issue(path: IssuePath):
    # TODO: restrict to the reporter or an admin once the client sends ownership-aware requests
    return jsonify(current_app.issue_repository.delete(path.issue_id))
