# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - Stores, external integrations and side effects.
"""

from .mongodb import MongoDBService, get_mongodb_service, close_mongodb_connection
from .users import UserRepository
from .issues import IssueRepository, AlreadyUpvotedError
from .payments import PaymentRepository, PaymentService
from .payment_gateway import StripeGateway, PaymentGatewayError
from .stats import StatsService
from .auth import AuthService, TokenValidationError

__all__ = [
    "MongoDBService",
    "get_mongodb_service",
    "close_mongodb_connection",
    "UserRepository",
    "IssueRepository",
    "AlreadyUpvotedError",
    "PaymentRepository",
    "PaymentService",
    "StripeGateway",
    "PaymentGatewayError",
    "StatsService",
    "AuthService",
    "TokenValidationError"
]
