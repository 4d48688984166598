"""
Tests for executing saved collection requests, singly and in bulk.
"""

from .conftest import add_collection


class TestBulkExecute:

    def test_slow_item_with_tiny_timeout_fails_alone(self, client, db_session):
        collection_id, ids = add_collection(db_session, "Smoke", [
            {"name": "List", "method": "GET", "url": "https://upstream.test/items"},
            {"name": "Slow", "method": "GET", "url": "https://upstream.test/slow", "timeout_ms": 1},
            {"name": "Create", "method": "POST", "url": "https://upstream.test/echo", "body": {"name": "Ada"}},
        ])

        response = client.post(
            f"/api/collections/{collection_id}/requests/bulk-execute",
            json={"requestIds": ids},
        )

        assert response.status_code == 200
        report = response.json()
        assert report["collectionId"] == collection_id
        assert report["total"] == 3
        assert report["succeeded"] == 2
        assert report["failed"] == 1

        first, second, third = report["results"]
        assert first["requestId"] == ids[0]
        assert first["success"] is True
        assert first["status"] == 200
        assert second["requestName"] == "Slow"
        assert second["success"] is False
        assert second["code"] == "TIMEOUT"
        assert "status" not in second
        assert third["requestMethod"] == "POST"
        assert third["data"] == {"name": "Ada"}

    def test_results_follow_requested_order(self, client, db_session):
        collection_id, ids = add_collection(db_session, "Order", [
            {"name": f"R{i}", "method": "GET", "url": f"https://upstream.test/r{i}"} for i in range(4)
        ])
        requested = [ids[2], ids[0], ids[3], ids[1]]

        response = client.post(
            f"/api/collections/{collection_id}/requests/bulk-execute",
            json={"requestIds": requested},
        )

        assert [item["requestId"] for item in response.json()["results"]] == requested

    def test_unknown_ids_are_skipped(self, client, db_session):
        collection_id, ids = add_collection(db_session, "Partial", [
            {"name": "Only", "method": "GET", "url": "https://upstream.test/"},
        ])

        response = client.post(
            f"/api/collections/{collection_id}/requests/bulk-execute",
            json={"requestIds": [ids[0], 99999]},
        )

        assert response.status_code == 200
        assert response.json()["total"] == 1

    def test_repeated_id_runs_once_per_occurrence(self, client, db_session):
        collection_id, ids = add_collection(db_session, "Twice", [
            {"name": "Ping", "method": "GET", "url": "https://upstream.test/ping"},
        ])

        response = client.post(
            f"/api/collections/{collection_id}/requests/bulk-execute",
            json={"requestIds": [ids[0], ids[0]]},
        )

        report = response.json()
        assert report["total"] == 2
        assert [item["requestId"] for item in report["results"]] == [ids[0], ids[0]]

    def test_requests_from_other_collections_are_not_executed(self, client, db_session):
        first_id, _ = add_collection(db_session, "Mine", [
            {"name": "Mine", "method": "GET", "url": "https://upstream.test/"},
        ])
        _, foreign_ids = add_collection(db_session, "Theirs", [
            {"name": "Theirs", "method": "GET", "url": "https://upstream.test/"},
        ])

        response = client.post(
            f"/api/collections/{first_id}/requests/bulk-execute",
            json={"requestIds": foreign_ids},
        )

        assert response.status_code == 404

    def test_malformed_stored_request_is_a_failed_item(self, client, db_session):
        collection_id, ids = add_collection(db_session, "Broken", [
            {"name": "Good", "method": "GET", "url": "https://upstream.test/"},
            {"name": "Bad", "method": "GET", "url": "ftp://files.test/"},
        ])

        response = client.post(
            f"/api/collections/{collection_id}/requests/bulk-execute",
            json={"requestIds": ids},
        )

        assert response.status_code == 200
        report = response.json()
        assert (report["succeeded"], report["failed"]) == (1, 1)
        assert report["results"][1]["code"] == "VALIDATION_FAILED"

    def test_empty_id_list_is_400(self, client, db_session):
        collection_id, _ = add_collection(db_session, "Empty", [])
        response = client.post(
            f"/api/collections/{collection_id}/requests/bulk-execute",
            json={"requestIds": []},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_missing_collection_is_404(self, client):
        response = client.post("/api/collections/424242/requests/bulk-execute", json={"requestIds": [1]})
        assert response.status_code == 404
        data = response.json()
        assert data["code"] == "RESOURCE_NOT_FOUND"
        assert "424242" in data["message"]


class TestExecuteSavedRequest:

    def test_success_is_returned_inline(self, client, db_session):
        collection_id, ids = add_collection(db_session, "Single", [
            {"name": "Echo", "method": "PUT", "url": "https://upstream.test/echo", "body": "[1, 2]"},
        ])

        response = client.post(f"/api/collections/{collection_id}/requests/{ids[0]}/execute")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["requestName"] == "Echo"
        assert data["status"] == 200
        assert data["data"] == [1, 2]

    def test_failure_is_returned_inline_with_200(self, client, db_session):
        collection_id, ids = add_collection(db_session, "Single", [
            {"name": "Down", "method": "GET", "url": "http://refused.test/"},
        ])

        response = client.post(f"/api/collections/{collection_id}/requests/{ids[0]}/execute")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["code"] == "CONNECTION_REFUSED"

    def test_missing_request_is_404(self, client, db_session):
        collection_id, _ = add_collection(db_session, "Single", [])
        response = client.post(f"/api/collections/{collection_id}/requests/31337/execute")
        assert response.status_code == 404
        assert "31337" in response.json()["message"]
