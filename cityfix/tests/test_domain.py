# SPDX-License-Identifier: Apache-2.0

"""
Tests for the pure domain logic: payments, issue updates and authorization.
"""

import re
import pytest

from cityfix.domain import authorization
from cityfix.domain.issues import (
    build_new_issue, build_content_update, build_upvote_update,
    build_boost_update, build_assignment_update, build_status_update,
    build_issue_query
)
from cityfix.domain.payments import InvalidPriceError, to_minor_units, resolve_side_effect
from cityfix.models.entities import AssignedStaff, UserContext
from cityfix.models.enums import PaymentType
from cityfix.models.requests import CreateIssueRequest, UpdateIssueRequest, IssueFilters


class TestToMinorUnits:
    """Test price conversion to the smallest currency unit."""
    
    def test_whole_price(self):
        assert to_minor_units(100) == 10000
    
    def test_fractional_price(self):
        assert to_minor_units(10.5) == 1050
    
    def test_numeric_string(self):
        assert to_minor_units("25") == 2500
    
    @pytest.mark.parametrize("price", [
        None, 0, -5, "abc", True, 0.001, 1e307, float("inf"), float("nan")
    ])
    def test_rejects_invalid_prices(self, price):
        with pytest.raises(InvalidPriceError):
            to_minor_units(price)


class TestResolveSideEffect:
    
    def test_subscription_verifies_payer(self):
        assert resolve_side_effect("subscription", None) is PaymentType.SUBSCRIPTION
    
    def test_boost_with_issue(self):
        assert resolve_side_effect("boost", "abc") is PaymentType.BOOST
    
    def test_boost_without_issue_is_ledger_only(self):
        assert resolve_side_effect("boost", None) is None
    
    def test_unknown_type_is_ledger_only(self):
        assert resolve_side_effect("donation", "abc") is None


class TestIssueUpdates:
    """Test issue document and update builders."""
    
    def test_new_issue_resets_server_fields(self):
        request = CreateIssueRequest.model_validate({
            "title": "Pothole",
            "category": "Road",
            "status": "resolved",
            "priority": "High",
            "upvotes": 40
        })
        
        document = build_new_issue(request, "reporter@example.com")
        
        assert document["status"] == "pending"
        assert document["priority"] == "Normal"
        assert document["upvotes"] == 0
        assert document["upvotedBy"] == []
        assert document["reporterEmail"] == "reporter@example.com"
        assert document["assignedStaff"] is None
        assert len(document["timeline"]) == 1
        assert document["timeline"][0]["status"] == "pending"
        assert document["timeline"][0]["text"] == "Issue reported by citizen"
        assert document["timeline"][0]["user"] == "reporter@example.com"
    
    def test_content_update_sets_only_given_fields(self):
        update = build_content_update(UpdateIssueRequest(title="New title"))
        assert update == {"$set": {"title": "New title"}}
    
    def test_upvote_update_is_conditional(self):
        condition, update = build_upvote_update("voter@example.com")
        
        assert condition == {"upvotedBy": {"$ne": "voter@example.com"}}
        assert update["$inc"] == {"upvotes": 1}
        assert update["$push"] == {"upvotedBy": "voter@example.com"}
    
    def test_boost_update(self):
        update = build_boost_update("citizen@example.com")
        
        assert update["$set"] == {"priority": "High"}
        entry = update["$push"]["timeline"]
        assert entry["status"] == "Boosted"
        assert entry["text"] == "Priority boosted to High"
        assert entry["user"] == "citizen@example.com"
    
    def test_paid_boost_text(self):
        update = build_boost_update("citizen@example.com", via_payment=True)
        assert update["$push"]["timeline"]["text"] == "Priority boosted to High via payment"
    
    def test_assignment_update_uses_staff_name(self):
        staff = AssignedStaff(email="staff@example.com", name="Sam")
        update = build_assignment_update(staff, "admin@example.com")
        
        assert update["$set"]["assignedStaff"]["email"] == "staff@example.com"
        entry = update["$push"]["timeline"]
        assert entry["status"] == "Assigned"
        assert entry["text"] == "Issue assigned to Staff: Sam"
    
    def test_assignment_update_falls_back_to_email(self):
        staff = AssignedStaff(email="staff@example.com")
        update = build_assignment_update(staff, "admin@example.com")
        assert update["$push"]["timeline"]["text"] == "Issue assigned to Staff: staff@example.com"
    
    def test_status_update(self):
        update = build_status_update("resolved", "staff@example.com")
        
        assert update["$set"] == {"status": "resolved"}
        entry = update["$push"]["timeline"]
        assert entry["status"] == "resolved"
        assert entry["text"] == "Status updated to resolved"


class TestIssueQuery:
    
    def test_empty_filters(self):
        assert build_issue_query(IssueFilters()) == {}
    
    def test_all_filters_are_conjunctive(self):
        query = build_issue_query(IssueFilters(
            search="light", status="pending", category="Streetlight", priority="High"
        ))
        
        assert query == {
            "title": {"$regex": "light", "$options": "i"},
            "status": "pending",
            "category": "Streetlight",
            "priority": "High"
        }
    
    def test_search_is_escaped(self):
        query = build_issue_query(IssueFilters(search="a.b(c"))
        pattern = query["title"]["$regex"]
        
        assert re.search(pattern, "A.B(C road", re.IGNORECASE)
        assert not re.search(pattern, "axb(c")


class TestAuthorization:
    """Test role and ownership checks."""
    
    def setup_method(self):
        self.context = UserContext(email="owner@example.com", claims={"email": "owner@example.com"})
    
    def test_owner_match(self):
        assert authorization.check_owner(self.context, "owner@example.com").allowed
    
    def test_owner_mismatch(self):
        result = authorization.check_owner(self.context, "other@example.com")
        assert not result.allowed
        assert result.reason
    
    @pytest.mark.parametrize("role,allowed", [
        ("citizen", False), ("staff", True), ("admin", True)
    ])
    def test_staff_check(self, role, allowed):
        assert authorization.check_staff({"role": role}).allowed is allowed
    
    @pytest.mark.parametrize("role,allowed", [
        ("citizen", False), ("staff", False), ("admin", True)
    ])
    def test_admin_check(self, role, allowed):
        assert authorization.check_admin({"role": role}).allowed is allowed
    
    def test_missing_user_is_denied(self):
        assert not authorization.check_staff(None).allowed
        assert not authorization.check_admin(None).allowed
        assert authorization.get_role(None) is None
