"""
Tests for the job inspection endpoint.
"""

from shared.documents.paths import DocumentPaths
from tests.factories import THOUGHT_ID, USER_ID, seed_enrollments, seed_pro_user, seed_thought


class TestGetJob:
    """Tests for GET /api/v1/jobs/{id}."""

    def test_get_job(self, client, store, auth_headers, clock):
        """Test reading a job created by a trigger."""
        seed_pro_user(store)
        seed_enrollments(store, ["thoughts"])
        seed_thought(store)
        job_id = client.post(
            f"/api/v1/thoughts/{THOUGHT_ID}/process", headers=auth_headers
        ).json()["job_id"]

        response = client.get(f"/api/v1/jobs/{job_id}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == job_id
        assert data["thought_id"] == THOUGHT_ID
        assert data["trigger"] == "manual"
        assert data["status"] == "queued"
        assert data["tool_spec_ids"] == ["thoughts"]
        assert data["requested_by"] == USER_ID

    def test_job_of_other_user(self, client, store, auth_headers):
        """Test that jobs are only visible to their owner."""
        store._documents[DocumentPaths.job("someone_else", "j1")] = {
            "thoughtId": "t1",
            "trigger": "auto",
            "status": "queued",
        }

        response = client.get("/api/v1/jobs/j1", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Job not found"
