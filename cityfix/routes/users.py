# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
User management endpoints: registration, profiles, roles and admin changes.
"""

from flask import jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
import logging

from ..models.enums import UserRole
from ..models.requests import (
    RegisterUserRequest, UpdateProfileRequest, AdminUpdateUserRequest,
    EmailPath, UserIdPath
)
from ..middleware.auth import require_auth, require_admin
from ..middleware.validation import validate_json_body

logger = logging.getLogger(__name__)

users_tag = Tag(name="Users", description="User registration and management")
users_bp = APIBlueprint('users', __name__, abp_tags=[users_tag])


@users_bp.post('/users')
def register_user():
    """Save a user on first login; re-registering an email is a no-op."""
    register_request = validate_json_body(RegisterUserRequest)
    result = current_app.user_repository.register(register_request)
    return jsonify(result)


@users_bp.get('/users')
@require_admin
def list_users():
    return jsonify(current_app.user_repository.list_all())


@users_bp.get('/users/staff')
@require_admin
def list_staff():
    return jsonify(current_app.user_repository.list_by_role(UserRole.STAFF))


@users_bp.get('/users/<email>')
@require_auth
def get_user(path: EmailPath):
    return jsonify(current_app.user_repository.find_by_email(path.email))


@users_bp.get('/users/<email>/role')
def get_user_role(path: EmailPath):
    """Public role lookup used by the client to choose a dashboard."""
    return jsonify({"role": current_app.user_repository.get_role(path.email)})


@users_bp.patch('/users/<email>')
@require_auth
def update_profile(path: EmailPath):
    """Update name and photo of a profile."""
    profile_request = validate_json_body(UpdateProfileRequest)
    result = current_app.user_repository.update_profile(path.email, profile_request)
    return jsonify(result)


@users_bp.patch('/users/admin/<user_id>')
@require_admin
def admin_update_user(path: UserIdPath):
    """Change a user's role and/or block flag."""
    update_request = validate_json_body(AdminUpdateUserRequest)
    result = current_app.user_repository.admin_update(path.user_id, update_request)
    return jsonify(result)
