# SPDX-License-Identifier: Apache-2.0

"""
Tests for the Stripe payment gateway client.
"""

import pytest
import requests
from unittest.mock import Mock, patch

from cityfix.services.payment_gateway import StripeGateway, PaymentGatewayError


def make_response(status_code, payload):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


class TestStripeGateway:
    
    def setup_method(self):
        self.gateway = StripeGateway("sk_test_123", "https://stripe.test/")
    
    @patch('cityfix.services.payment_gateway.requests.post')
    def test_create_payment_intent(self, mock_post):
        mock_post.return_value = make_response(200, {"id": "pi_1", "client_secret": "pi_1_secret"})
        
        client_secret = self.gateway.create_payment_intent(1050, "bdt")
        
        assert client_secret == "pi_1_secret"
        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == "https://stripe.test/v1/payment_intents"
        assert kwargs["auth"] == ("sk_test_123", "")
        assert kwargs["data"] == {
            "amount": 1050,
            "currency": "bdt",
            "payment_method_types[]": "card"
        }
    
    @patch('cityfix.services.payment_gateway.requests.post')
    def test_rejected_intent(self, mock_post):
        mock_post.return_value = make_response(400, {"error": {"message": "Amount too small"}})
        
        with pytest.raises(PaymentGatewayError) as exc_info:
            self.gateway.create_payment_intent(1, "bdt")
        
        assert exc_info.value.message == "Amount too small"
        assert exc_info.value.status_code == 400
    
    @patch('cityfix.services.payment_gateway.requests.post')
    def test_transport_error_is_not_retried(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("connection refused")
        
        with pytest.raises(PaymentGatewayError):
            self.gateway.create_payment_intent(1050, "bdt")
        
        assert mock_post.call_count == 1
    
    @patch('cityfix.services.payment_gateway.requests.post')
    def test_missing_client_secret(self, mock_post):
        mock_post.return_value = make_response(200, {"id": "pi_1"})
        
        with pytest.raises(PaymentGatewayError):
            self.gateway.create_payment_intent(1050, "bdt")
    
    @patch('cityfix.services.payment_gateway.requests.post')
    def test_unconfigured_gateway(self, mock_post):
        with pytest.raises(PaymentGatewayError):
            StripeGateway("").create_payment_intent(1050, "bdt")
        
        mock_post.assert_not_called()
