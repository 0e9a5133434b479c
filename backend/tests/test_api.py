"""
Tests for the reference REST API
"""

import base64

import pytest


def create(client, fields):
    response = client.post("/api/v1/assignments", json=fields)
    assert response.status_code == 201, response.text
    return response.json()


def upload(client, assignment_id, name="notes.txt", content=b"hello"):
    return client.post(
        "/api/v1/files",
        json={
            "file_name": name,
            "content": base64.b64encode(content).decode(),
            "mime_type": "text/plain",
            "context_id": assignment_id,
        },
    )


class TestHealth:
    """Root and health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")
        assert response.json()["status"] == "healthy"
        assert response.json()["startup_time"] is not None


class TestAssignmentRoutes:
    """Assignment lifecycle over REST."""

    def test_create_and_get(self, client, assignment_fields):
        created = create(client, assignment_fields)
        assert created["status"] == "DRAFT"
        assert created["is_visible"] is False

        response = client.get(f"/api/v1/assignments/{created['id']}")
        assert response.json()["title"] == assignment_fields["title"]

    def test_create_invalid_body(self, client, assignment_fields):
        assignment_fields["max_score"] = 0
        response = client.post("/api/v1/assignments", json=assignment_fields)
        assert response.status_code == 422

    def test_transitions(self, client, assignment_fields):
        created = create(client, assignment_fields)
        base = f"/api/v1/assignments/{created['id']}"

        assert client.post(f"{base}/close").status_code == 409
        assert client.post(f"{base}/publish").json()["status"] == "PUBLISHED"
        assert client.post(f"{base}/publish").status_code == 409
        assert client.patch(base, json={"title": "x"}).status_code == 409
        assert client.delete(base).status_code == 409
        assert client.post(f"{base}/close").json()["status"] == "CLOSED"

    def test_list_filters(self, client, assignment_fields):
        first = create(client, assignment_fields)
        create(client, {**assignment_fields, "class_id": "class-2"})
        client.post(f"/api/v1/assignments/{first['id']}/publish")

        assert len(client.get("/api/v1/assignments").json()) == 2
        published = client.get("/api/v1/assignments", params={"status": "PUBLISHED"}).json()
        assert [a["id"] for a in published] == [first["id"]]
        by_class = client.get("/api/v1/assignments", params={"class_id": "class-2"}).json()
        assert len(by_class) == 1

    def test_delete_draft_removes_files(self, client, assignment_fields):
        created = create(client, assignment_fields)
        upload(client, created["id"])

        response = client.delete(f"/api/v1/assignments/{created['id']}")

        assert response.status_code == 200
        assert client.get(f"/api/v1/assignments/{created['id']}").status_code == 404
        assert client.get(f"/api/v1/assignments/{created['id']}/files").json() == []

    def test_unknown_assignment(self, client):
        response = client.post("/api/v1/assignments/missing/publish")
        assert response.status_code == 404
        assert response.json()["detail"] == "Assignment not found"


class TestFileRoutes:
    """Upload, signed download and delete."""

    def test_upload_and_download(self, client, assignment_fields):
        created = create(client, assignment_fields)
        stored = upload(client, created["id"], content=b"chapter 3").json()

        assert stored["file_size"] == 9
        assert stored["file_path"].startswith(f"assignment_instruction/{created['id']}/")

        signed = client.post(
            "/api/v1/files/signed-url", json={"file_path": stored["file_path"], "ttl_seconds": 60}
        ).json()
        assert signed["expires_in"] == 60

        response = client.get(signed["url"])
        assert response.status_code == 200
        assert response.content == b"chapter 3"
        assert response.headers["content-type"].startswith("text/plain")

    def test_bad_token(self, client):
        response = client.get("/api/v1/files/download", params={"token": "not-a-token"})
        assert response.status_code == 403

    @pytest.mark.parametrize(
        "content,status",
        [("!!not base64!!", 400), ("", 400)],
    )
    def test_bad_content(self, client, assignment_fields, content, status):
        created = create(client, assignment_fields)
        response = client.post(
            "/api/v1/files",
            json={"file_name": "a.txt", "content": content, "context_id": created["id"]},
        )
        assert response.status_code == status

    def test_upload_for_unknown_assignment(self, client):
        assert upload(client, "missing").status_code == 404

    def test_signed_url_unknown_path(self, client):
        response = client.post("/api/v1/files/signed-url", json={"file_path": "nope"})
        assert response.status_code == 404

    def test_delete_file(self, client, assignment_fields):
        created = create(client, assignment_fields)
        stored = upload(client, created["id"]).json()

        assert client.delete(f"/api/v1/files/{stored['id']}").status_code == 200
        assert client.delete(f"/api/v1/files/{stored['id']}").status_code == 404
        assert client.get(f"/api/v1/assignments/{created['id']}").json()["attachment_ids"] == []


class TestSubmissionRoutes:
    """Submissions, grading and statistics."""

    def published(self, client, fields):
        created = create(client, fields)
        client.post(f"/api/v1/assignments/{created['id']}/publish")
        return created

    def test_submit_grade_and_statistics(self, client, assignment_fields):
        assignment = self.published(client, assignment_fields)
        submission = client.post(
            "/api/v1/submissions",
            json={"assignment_id": assignment["id"], "student_id": "st-1", "submission_text": "Done"},
        ).json()
        assert submission["attempt_number"] == 1
        assert submission["is_late"] is False

        graded = client.post(
            f"/api/v1/submissions/{submission['id']}/grade",
            json={"submission_id": submission["id"], "grader_id": "t-1", "score": 75},
        ).json()
        assert graded["grading_status"] == "MANUAL_GRADED"

        stats = client.get(
            f"/api/v1/assignments/{assignment['id']}/statistics", params={"total_students": 4}
        ).json()
        assert stats["submitted_count"] == 1
        assert stats["graded_count"] == 1
        assert stats["submission_rate"] == 25.0
        assert stats["average_score"] == 75.0

    def test_submit_to_draft_rejected(self, client, assignment_fields):
        assignment = create(client, assignment_fields)
        response = client.post(
            "/api/v1/submissions",
            json={"assignment_id": assignment["id"], "student_id": "st-1", "submission_text": "x"},
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Assignment is not published"

    def test_max_submissions(self, client, assignment_fields):
        assignment = self.published(client, assignment_fields)
        body = {"assignment_id": assignment["id"], "student_id": "st-1", "submission_text": "x"}

        assert client.post("/api/v1/submissions", json=body).status_code == 201
        response = client.post("/api/v1/submissions", json=body)
        assert response.status_code == 409
        assert response.json()["detail"] == "Maximum submissions reached"

    def test_empty_final_submission(self, client, assignment_fields):
        assignment = self.published(client, assignment_fields)
        response = client.post(
            "/api/v1/submissions", json={"assignment_id": assignment["id"], "student_id": "st-1"}
        )
        assert response.status_code == 422

    def test_grade_above_max(self, client, assignment_fields):
        assignment = self.published(client, assignment_fields)
        submission = client.post(
            "/api/v1/submissions",
            json={"assignment_id": assignment["id"], "student_id": "st-1", "submission_text": "x"},
        ).json()
        response = client.post(
            f"/api/v1/submissions/{submission['id']}/grade",
            json={"submission_id": submission["id"], "grader_id": "t-1", "score": 101},
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Score cannot exceed maximum of 100"

    def test_late_submission_penalized(self, client, assignment_fields):
        """A late hand-in loses late_penalty_percentage of the awarded score."""
        assignment = self.published(
            client,
            {
                **assignment_fields,
                "due_date": "2020-01-01T00:00:00Z",
                "allow_late_submission": True,
                "late_penalty_percentage": 10,
            },
        )
        submission = client.post(
            "/api/v1/submissions",
            json={"assignment_id": assignment["id"], "student_id": "st-1", "submission_text": "x"},
        ).json()
        assert submission["is_late"] is True
        assert submission["late_minutes"] > 0

        graded = client.post(
            f"/api/v1/submissions/{submission['id']}/grade",
            json={"submission_id": submission["id"], "grader_id": "t-1", "score": 80},
        ).json()
        assert graded["score"] == 72.0
        assert graded["penalty_applied"] == 8.0
