"""Tests for project and profile endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient


def test_requires_user_header(test_client: TestClient) -> None:
    response = test_client.get("/api/v1/projects")

    assert response.status_code == 401


def test_create_project_defaults(test_client: TestClient, project: dict) -> None:
    assert project["title"] == "Launch Week"
    assert project["status"] == "active"
    assert project["is_shared"] is False
    assert project["stats"]["video_count"] == 0
    assert project["stats"]["total_generations"] == 0
    assert project["tags"] == []


def test_create_project_validation(
    test_client: TestClient, auth_headers: dict[str, str]
) -> None:
    response = test_client.post("/api/v1/projects", json={"title": ""}, headers=auth_headers)

    assert response.status_code == 422


def test_list_only_own_projects(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    other = {"X-User-Id": f"other_{uuid4().hex[:8]}"}
    test_client.post("/api/v1/projects", json={"title": "Not mine"}, headers=other)

    response = test_client.get("/api/v1/projects", headers=auth_headers)

    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [project["id"]]


def test_other_user_is_forbidden(test_client: TestClient, project: dict) -> None:
    response = test_client.get(
        f"/api/v1/projects/{project['id']}", headers={"X-User-Id": "intruder"}
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_missing_and_malformed_ids(
    test_client: TestClient, auth_headers: dict[str, str]
) -> None:
    missing = test_client.get(f"/api/v1/projects/{uuid4()}", headers=auth_headers)
    malformed = test_client.get("/api/v1/projects/not-a-uuid", headers=auth_headers)

    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Project not found"
    assert malformed.status_code == 400
    assert malformed.json()["error"]["category"] == "validation"


def test_update_merges_settings(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    response = test_client.put(
        f"/api/v1/projects/{project['id']}",
        json={"title": "Launch Week 2", "tags": ["launch"], "settings": {"theme": "dark"}},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Launch Week 2"
    assert data["tags"] == ["launch"]
    assert data["settings"]["theme"] == "dark"
    # Untouched defaults survive the merge
    assert set(project["settings"]) <= set(data["settings"])


def test_archive_restore_and_soft_delete(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    base = f"/api/v1/projects/{project['id']}"

    archived = test_client.post(f"{base}/archive", headers=auth_headers)
    assert archived.json()["status"] == "archived"

    restored = test_client.post(f"{base}/restore", headers=auth_headers)
    assert restored.json()["status"] == "active"

    assert test_client.delete(base, headers=auth_headers).status_code == 204
    listed = test_client.get("/api/v1/projects", headers=auth_headers).json()
    assert listed == []
    deleted = test_client.get(
        "/api/v1/projects", params={"status": "deleted"}, headers=auth_headers
    ).json()
    assert [p["id"] for p in deleted] == [project["id"]]


def test_permanent_delete(
    test_client: TestClient, auth_headers: dict[str, str], project: dict, video: dict
) -> None:
    base = f"/api/v1/projects/{project['id']}"

    response = test_client.delete(base, params={"permanent": "true"}, headers=auth_headers)

    assert response.status_code == 204
    assert test_client.get(base, headers=auth_headers).status_code == 404
    assert test_client.get(f"/api/v1/videos/{video['id']}", headers=auth_headers).status_code == 404


def test_stats_count_videos_and_agents(
    test_client: TestClient, auth_headers: dict[str, str], project: dict, video: dict
) -> None:
    test_client.post(
        f"/api/v1/projects/{project['id']}/agents",
        json={"video_id": video["id"], "type": "title"},
        headers=auth_headers,
    )

    stats = test_client.get(f"/api/v1/projects/{project['id']}/stats", headers=auth_headers)

    assert stats.status_code == 200
    assert stats.json()["video_count"] == 1
    assert stats.json()["agent_count"] == 1


class TestProfile:
    def test_missing_profile(self, test_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = test_client.get("/api/v1/profile", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Profile not found"

    def test_upsert_profile(self, test_client: TestClient, auth_headers: dict[str, str]) -> None:
        body = {"channel_name": "Dev Daily", "content_type": "Tutorials", "niche": "Python"}

        created = test_client.put("/api/v1/profile", json=body, headers=auth_headers)
        updated = test_client.put(
            "/api/v1/profile", json={**body, "tone": "playful"}, headers=auth_headers
        )

        assert created.status_code == 200
        assert updated.json()["tone"] == "playful"
        fetched = test_client.get("/api/v1/profile", headers=auth_headers).json()
        assert fetched["channel_name"] == "Dev Daily"
        assert fetched["tone"] == "playful"

    def test_incomplete_profile(self, test_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = test_client.put(
            "/api/v1/profile", json={"channel_name": "Dev Daily"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == (
            "Profile must include channel name, content type, and niche"
        )
