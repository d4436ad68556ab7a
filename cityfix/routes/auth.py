# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Token endpoint.
"""

from flask import jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from ..models.requests import TokenRequest
from ..middleware.validation import validate_json_body

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

auth_tag = Tag(name="Authentication", description="Access token issuing")
auth_bp = APIBlueprint('auth', __name__, abp_tags=[auth_tag])


@auth_bp.post('/jwt')
def issue_token():
    """
    Issue a signed access token.
    
    The posted identity claims (at least ``email``) are encoded as-is in a
    token valid for seven days. No server-side session is kept.
    """
    with tracer.start_as_current_span("auth.jwt"):
        token_request = validate_json_body(TokenRequest)
        token = current_app.auth_service.issue_token(token_request.model_dump())
        return jsonify({"token": token})
