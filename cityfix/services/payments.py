# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Payment ledger repository and payment orchestration.

A payment is written to the ledger first and its side effect (verifying the
payer or boosting an issue) is applied afterwards as a separate write. The two
writes are not atomic: when the side effect fails the ledger entry stays and
the failure is logged with the payment id for manual reconciliation.
"""

import logging
from typing import Any, Dict, List, Optional
from pymongo import DESCENDING
from pymongo.errors import PyMongoError
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ..domain.payments import to_minor_units, resolve_side_effect
from ..models.base import utcnow
from ..models.entities import Payment
from ..models.enums import PaymentType
from ..models.requests import RecordPaymentRequest
from .mongodb import MongoDBService, PAYMENTS, serialize_document, insert_result_to_dict
from .users import UserRepository
from .issues import IssueRepository
from .payment_gateway import StripeGateway

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "bdt"


class PaymentRepository:
    """Append-only ledger of confirmed payments."""
    
    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service
    
    @property
    def collection(self):
        return self.mongodb_service.get_collection(PAYMENTS)
    
    def insert(self, document: Dict[str, Any]):
        return self.collection.insert_one(document)
    
    def list_all(self) -> List[Dict[str, Any]]:
        """All payments, newest first."""
        cursor = self.collection.find().sort("date", DESCENDING)
        return [serialize_document(doc) for doc in cursor]
    
    def list_by_user(self, email: str) -> List[Dict[str, Any]]:
        """Payments made by ``email``, newest first."""
        cursor = self.collection.find({"userEmail": email}).sort("date", DESCENDING)
        return [serialize_document(doc) for doc in cursor]
    
    def total_revenue(self) -> float:
        """Exact sum of ``amount`` over the whole ledger, computed now."""
        pipeline = [{"$group": {"_id": None, "total": {"$sum": "$amount"}}}]
        results = list(self.collection.aggregate(pipeline))
        return results[0]["total"] if results else 0


class PaymentService:
    """Creates gateway intents and records payments with their side effects."""
    
    def __init__(self, payment_repository: PaymentRepository, user_repository: UserRepository,
                 issue_repository: IssueRepository, gateway: StripeGateway,
                 currency: str = DEFAULT_CURRENCY):
        self.payment_repository = payment_repository
        self.user_repository = user_repository
        self.issue_repository = issue_repository
        self.gateway = gateway
        self.currency = currency
    
    def create_payment_intent(self, price: Any) -> str:
        """
        Create a gateway payment intent for ``price`` in major units.
        
        Raises:
            InvalidPriceError: If price is absent or not positive
            PaymentGatewayError: If the gateway call fails
        """
        amount = to_minor_units(price)
        logger.info(f"Processing payment intent for amount (minor units): {amount}")
        return self.gateway.create_payment_intent(amount, self.currency)
    
    def record_payment(self, request: RecordPaymentRequest, payer_email: str) -> Dict[str, Any]:
        """
        Persist a payment and apply its side effect.
        
        Args:
            request: Validated payment payload
            payer_email: Used when the payload carries no ``userEmail``
            
        Returns:
            Insert result of the ledger entry
        """
        with tracer.start_as_current_span("payment.record") as span:
            payment = Payment(
                type=request.type,
                user_email=request.user_email or payer_email,
                amount=request.amount,
                issue_id=request.issue_id,
                transaction_id=request.transaction_id,
                date=request.date or utcnow()
            )
            
            result = self.payment_repository.insert(payment.to_document())
            payment_id = str(result.inserted_id)
            span.set_attributes({
                "payment.id": payment_id,
                "payment.type": payment.type
            })
            
            effect = resolve_side_effect(payment.type, payment.issue_id)
            try:
                self._apply_side_effect(effect, payment)
            except PyMongoError as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, "side effect failed"))
                logger.error(
                    "Payment recorded but side effect failed; manual reconciliation required",
                    extra={
                        "payment_id": payment_id,
                        "payment_type": payment.type,
                        "user_email": payment.user_email,
                        "issue_id": payment.issue_id,
                        "error": str(e)
                    }
                )
                raise
            
            span.set_attribute("payment.side_effect", effect.value if effect else "none")
            return insert_result_to_dict(result)
    
    def _apply_side_effect(self, effect: Optional[PaymentType], payment: Payment) -> None:
        if effect is PaymentType.SUBSCRIPTION:
            self.user_repository.mark_verified(payment.user_email)
            logger.info("User verified by subscription", extra={"user_email": payment.user_email})
        elif effect is PaymentType.BOOST:
            self.issue_repository.boost(payment.issue_id, payment.user_email, via_payment=True)
