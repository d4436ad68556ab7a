# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Stripe payment gateway client.

Creates payment intents through the Stripe REST API. Failures are reported to
the caller and never retried here.
"""

import logging
from typing import Optional
import requests
from opentelemetry import trace

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.stripe.com"


class PaymentGatewayError(Exception):
    """Raised when the payment gateway rejects or fails a request."""
    
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StripeGateway:
    """Minimal Stripe client for payment intents."""
    
    def __init__(self, secret_key: str, api_base: str = DEFAULT_API_BASE, timeout: float = 10.0):
        """
        Initialize the gateway client.
        
        Args:
            secret_key: Stripe secret API key
            api_base: Base URL of the Stripe API
            timeout: HTTP timeout in seconds
        """
        self.secret_key = secret_key
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
    
    def create_payment_intent(self, amount: int, currency: str) -> str:
        """
        Create a card payment intent.
        
        Args:
            amount: Amount in the smallest currency unit
            currency: ISO currency code
            
        Returns:
            The intent's client secret
            
        Raises:
            PaymentGatewayError: If the request fails or is rejected
        """
        with tracer.start_as_current_span("payment.gateway.create_intent") as span:
            span.set_attributes({
                "payment.amount": amount,
                "payment.currency": currency
            })
            
            if not self.secret_key:
                raise PaymentGatewayError("Payment gateway is not configured")
            
            try:
                response = requests.post(
                    f"{self.api_base}/v1/payment_intents",
                    auth=(self.secret_key, ""),
                    data={
                        "amount": amount,
                        "currency": currency,
                        "payment_method_types[]": "card"
                    },
                    timeout=self.timeout
                )
            except requests.RequestException as e:
                span.set_attribute("payment.result", "transport_error")
                logger.error(f"Payment gateway request failed: {str(e)}")
                raise PaymentGatewayError(f"Payment gateway unreachable: {str(e)}")
            
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            
            if response.status_code >= 400:
                message = payload.get("error", {}).get("message") or f"HTTP {response.status_code}"
                span.set_attribute("payment.result", "rejected")
                logger.error(
                    "Payment gateway rejected intent",
                    extra={"status_code": response.status_code, "gateway_message": message}
                )
                raise PaymentGatewayError(message, response.status_code)
            
            client_secret = payload.get("client_secret")
            if not client_secret:
                raise PaymentGatewayError("Payment gateway response missing client secret")
            
            span.set_attribute("payment.result", "created")
            logger.info("Payment intent created", extra={"amount": amount, "currency": currency})
            return client_secret
