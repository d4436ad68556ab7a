# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Admin dashboard endpoints.
"""

from flask import jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag

from ..middleware.auth import require_admin

admin_tag = Tag(name="Admin", description="Dashboard statistics")
admin_bp = APIBlueprint('admin', __name__, abp_tags=[admin_tag])


@admin_bp.get('/admin-stats')
@require_admin
def admin_stats():
    """Total users, total issues and total revenue."""
    return jsonify(current_app.stats_service.compute_admin_stats())
