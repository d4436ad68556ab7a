# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Admin dashboard statistics.
"""

from typing import Any, Dict
from opentelemetry import trace

from .users import UserRepository
from .issues import IssueRepository
from .payments import PaymentRepository

tracer = trace.get_tracer(__name__)


class StatsService:
    """Derives dashboard counts from the stores."""
    
    def __init__(self, user_repository: UserRepository, issue_repository: IssueRepository,
                 payment_repository: PaymentRepository):
        self.user_repository = user_repository
        self.issue_repository = issue_repository
        self.payment_repository = payment_repository
    
    def compute_admin_stats(self) -> Dict[str, Any]:
        """User and issue counts are estimates; revenue is an exact sum."""
        with tracer.start_as_current_span("stats.admin"):
            return {
                "totalUsers": self.user_repository.estimated_count(),
                "totalIssues": self.issue_repository.estimated_count(),
                "totalRevenue": self.payment_repository.total_revenue()
            }
