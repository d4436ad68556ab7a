# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Payment endpoints: ledger queries, payment intents and payment recording.
"""

from flask import jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging

from ..domain.payments import InvalidPriceError
from ..models.requests import PaymentIntentRequest, RecordPaymentRequest, EmailPath
from ..services.payment_gateway import PaymentGatewayError
from ..middleware.auth import require_auth, require_admin, require_owner
from ..middleware.error_handler import ValidationException, ExternalServiceException
from ..middleware.validation import validate_json_body

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

payments_tag = Tag(name="Payments", description="Subscriptions and paid boosts")
payments_bp = APIBlueprint('payments', __name__, abp_tags=[payments_tag])


@payments_bp.get('/payments')
@require_admin
def list_payments():
    return jsonify(current_app.payment_repository.list_all())


@payments_bp.get('/payments/<email>')
@require_auth
def list_user_payments(path: EmailPath):
    """Payment history of the caller; other users' histories are forbidden."""
    require_owner(g.user_context, path.email)
    return jsonify(current_app.payment_repository.list_by_user(path.email))


@payments_bp.post('/create-payment-intent')
@require_auth
def create_payment_intent():
    """
    Create a card payment intent for ``price`` and return its client secret.
    
    The gateway is called once; failures are reported, not retried.
    """
    with tracer.start_as_current_span("payment.create_intent") as span:
        intent_request = validate_json_body(PaymentIntentRequest, required=False)
        
        try:
            client_secret = current_app.payment_service.create_payment_intent(intent_request.price)
        except InvalidPriceError as e:
            span.set_status(Status(StatusCode.ERROR, "invalid price"))
            logger.warning(f"Payment intent rejected: {str(e)}")
            raise ValidationException(str(e), [{
                "field": "price",
                "message": str(e),
                "type": "value_error"
            }])
        except PaymentGatewayError as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, "gateway error"))
            raise ExternalServiceException(e.message)
        
        return jsonify({"clientSecret": client_secret})


@payments_bp.post('/payments')
@require_auth
def record_payment():
    """Save a confirmed payment and apply its verification or boost effect."""
    payment_request = validate_json_body(RecordPaymentRequest)
    result = current_app.payment_service.record_payment(payment_request, g.user_context.email)
    return jsonify(result)
