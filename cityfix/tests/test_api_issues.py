# SPDX-License-Identifier: Apache-2.0

"""
Tests for the issue lifecycle endpoints.
"""

from bson import ObjectId


class TestIssueReporting:
    
    def test_create_requires_auth(self, client, sample_issue_data):
        response = client.post('/issues', json=sample_issue_data)
        assert response.status_code == 401
    
    def test_create_resets_server_fields(self, client, citizen, sample_issue_data, issues_collection):
        payload = dict(sample_issue_data, status="resolved", priority="High", upvotes=99)
        
        response = client.post('/issues', json=payload, headers=citizen)
        
        assert response.status_code == 200
        stored = issues_collection.find_one({"_id": ObjectId(response.get_json()["insertedId"])})
        assert stored["status"] == "pending"
        assert stored["priority"] == "Normal"
        assert stored["upvotes"] == 0
        assert len(stored["timeline"]) == 1
    
    def test_create_defaults_reporter_to_caller(self, client, citizen, issues_collection):
        response = client.post('/issues', json={"title": "Leak", "category": "Water"}, headers=citizen)
        
        stored = issues_collection.find_one({"_id": ObjectId(response.get_json()["insertedId"])})
        assert stored["reporterEmail"] == "citizen@example.com"
    
    def test_create_requires_title(self, client, citizen):
        response = client.post('/issues', json={"category": "Water"}, headers=citizen)
        
        assert response.status_code == 400
        assert response.get_json()["errors"][0]["field"] == "title"


class TestIssueListing:
    
    def test_list_is_public(self, client, create_issue):
        create_issue()
        
        response = client.get('/issues')
        
        assert response.status_code == 200
        data = response.get_json()
        assert data["total"] == 1
        assert data["issues"][0]["title"] == "Broken streetlight on Main Road"
    
    def test_filters_and_limit(self, client, create_issue):
        for index in range(4):
            create_issue(title=f"Dark street {index}", category="Streetlight")
        create_issue(title="Overflowing drain", category="Drainage")
        
        response = client.get('/issues?search=DARK&category=Streetlight&limit=2&page=5')
        
        data = response.get_json()
        assert data["total"] == 4
        assert len(data["issues"]) == 2
        assert all(issue["category"] == "Streetlight" for issue in data["issues"])
    
    def test_boosted_issue_listed_first(self, client, citizen, create_issue):
        boosted_id = create_issue(title="Older but boosted")
        create_issue(title="Newer")
        client.patch(f'/issues/{boosted_id}/boost', headers=citizen)
        
        data = client.get('/issues').get_json()
        
        assert data["issues"][0]["id"] == boosted_id
    
    def test_zero_limit_returns_every_match(self, client, create_issue):
        for index in range(8):
            create_issue(title=f"Issue {index}")
        
        data = client.get('/issues?limit=0').get_json()
        
        assert data["total"] == 8
        assert len(data["issues"]) == 8
    
    def test_negative_limit(self, client):
        assert client.get('/issues?limit=-1').status_code == 400
    
    def test_reporter_queries(self, client, citizen, create_issue):
        create_issue()
        create_issue()
        
        count = client.get('/issues/count/citizen@example.com', headers=citizen).get_json()
        mine = client.get('/issues/my-issues/citizen@example.com', headers=citizen).get_json()
        
        assert count == {"count": 2}
        assert len(mine) == 2
    
    def test_get_issue(self, client, citizen, create_issue):
        issue_id = create_issue()
        
        data = client.get(f'/issues/{issue_id}', headers=citizen).get_json()
        
        assert data["id"] == issue_id
        assert data["timeline"][0]["text"] == "Issue reported by citizen"
    
    def test_get_malformed_id(self, client, citizen):
        response = client.get('/issues/not-an-object-id', headers=citizen)
        
        assert response.status_code == 200
        assert response.get_json() is None


class TestUpvotes:
    
    def test_upvote_once(self, client, citizen, create_issue):
        issue_id = create_issue()
        
        first = client.patch(f'/issues/upvote/{issue_id}', json={}, headers=citizen)
        second = client.patch(f'/issues/upvote/{issue_id}', json={}, headers=citizen)
        
        assert first.get_json()["modifiedCount"] == 1
        assert second.status_code == 400
        assert second.get_json()["detail"] == "You have already upvoted this issue."
        issue = client.get(f'/issues/{issue_id}', headers=citizen).get_json()
        assert issue["upvotes"] == 1
        assert issue["upvotedBy"] == ["citizen@example.com"]
    
    def test_body_email_is_the_voter(self, client, citizen, create_issue):
        issue_id = create_issue()
        
        client.patch(f'/issues/upvote/{issue_id}', json={"email": "neighbor@example.com"}, headers=citizen)
        
        issue = client.get(f'/issues/{issue_id}', headers=citizen).get_json()
        assert issue["upvotedBy"] == ["neighbor@example.com"]
    
    def test_upvote_without_body(self, client, citizen, create_issue):
        issue_id = create_issue()
        
        response = client.patch(f'/issues/upvote/{issue_id}', headers=citizen)
        
        assert response.get_json()["matchedCount"] == 1
    
    def test_upvote_missing_issue(self, client, citizen):
        response = client.patch(f'/issues/upvote/{ObjectId()}', json={}, headers=citizen)
        
        assert response.status_code == 200
        assert response.get_json()["matchedCount"] == 0


class TestIssueLifecycle:
    
    def test_assign_requires_admin(self, client, staff, create_issue):
        issue_id = create_issue()
        
        response = client.patch(
            f'/issues/assign/{issue_id}',
            json={"staff": {"email": "staff@example.com"}},
            headers=staff
        )
        
        assert response.status_code == 403
    
    def test_status_requires_staff(self, client, citizen, create_issue):
        issue_id = create_issue()
        
        response = client.patch(f'/issues/status/{issue_id}', json={"status": "resolved"}, headers=citizen)
        
        assert response.status_code == 403
    
    def test_full_lifecycle(self, client, citizen, staff, admin, create_issue):
        issue_id = create_issue()
        
        client.patch(f'/issues/{issue_id}/boost', headers=citizen)
        client.patch(
            f'/issues/assign/{issue_id}',
            json={"staff": {"email": "staff@example.com", "name": "Sam Staff"}},
            headers=admin
        )
        client.patch(f'/issues/status/{issue_id}', json={"status": "in-progress"}, headers=staff)
        client.patch(f'/issues/status/{issue_id}', json={"status": "resolved"}, headers=staff)
        
        issue = client.get(f'/issues/{issue_id}', headers=citizen).get_json()
        assert issue["status"] == "resolved"
        assert issue["priority"] == "High"
        assert issue["assignedStaff"]["name"] == "Sam Staff"
        assert [entry["text"] for entry in issue["timeline"]] == [
            "Issue reported by citizen",
            "Priority boosted to High",
            "Issue assigned to Staff: Sam Staff",
            "Status updated to in-progress",
            "Status updated to resolved"
        ]
        assert issue["timeline"][2]["user"] == "admin@example.com"
        
        assigned = client.get('/issues/assigned/staff@example.com', headers=staff).get_json()
        assert [item["id"] for item in assigned] == [issue_id]
    
    def test_unknown_status_rejected(self, client, staff, create_issue):
        issue_id = create_issue()
        
        response = client.patch(f'/issues/status/{issue_id}', json={"status": "done"}, headers=staff)
        
        assert response.status_code == 400
    
    def test_edit_does_not_touch_timeline(self, client, citizen, create_issue):
        issue_id = create_issue()
        
        response = client.patch(
            f'/issues/{issue_id}',
            json={"title": "Updated title", "status": "resolved"},
            headers=citizen
        )
        
        assert response.get_json()["modifiedCount"] == 1
        issue = client.get(f'/issues/{issue_id}', headers=citizen).get_json()
        assert issue["title"] == "Updated title"
        assert issue["status"] == "pending"
        assert len(issue["timeline"]) == 1
    
    def test_any_authenticated_caller_can_edit_and_delete(self, client, create_issue, make_user, auth_headers):
        issue_id = create_issue()
        make_user("stranger@example.com")
        stranger = auth_headers("stranger@example.com")
        
        edit = client.patch(f'/issues/{issue_id}', json={"title": "Changed"}, headers=stranger)
        delete = client.delete(f'/issues/{issue_id}', headers=stranger)
        
        assert edit.get_json()["matchedCount"] == 1
        assert delete.get_json()["deletedCount"] == 1
    
    def test_delete_requires_auth(self, client, create_issue):
        issue_id = create_issue()
        assert client.delete(f'/issues/{issue_id}').status_code == 401
