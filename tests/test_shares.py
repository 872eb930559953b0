"""Tests for project sharing."""

from fastapi.testclient import TestClient

CANVAS = {
    "nodes": [
        {"id": "video-1", "type": "video", "position": {"x": 0, "y": 0}, "data": {"title": "Intro"}},
        {
            "id": "agent-1",
            "type": "agent",
            "position": {"x": 400, "y": 0},
            "data": {"agent_type": "title", "draft": "My Title"},
        },
    ],
    "edges": [{"id": "e1", "source": "video-1", "target": "agent-1"}],
    "viewport": {"x": 0, "y": 0, "zoom": 1},
}


def create_share(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> dict:
    response = test_client.post(
        f"/api/v1/projects/{project['id']}/shares",
        json={"canvas_state": CANVAS},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()


def test_create_share(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> None:
    share = create_share(test_client, auth_headers, project)

    assert share["share_id"].startswith("share_")
    assert share["share_url"] == f"http://testserver/share/{share['share_id']}"
    assert share["view_count"] == 0
    assert share["canvas_state"]["nodes"][1]["data"]["draft"] == "My Title"

    updated = test_client.get(f"/api/v1/projects/{project['id']}", headers=auth_headers).json()
    assert updated["is_shared"] is True
    assert updated["share_token"] == share["share_id"]


def test_public_view_is_anonymous_and_counts_explicitly(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    share_id = create_share(test_client, auth_headers, project)["share_id"]

    first = test_client.post(f"/api/v1/shares/{share_id}/views")
    second = test_client.post(f"/api/v1/shares/{share_id}/views")
    public = test_client.get(f"/api/v1/shares/{share_id}")

    assert first.json() == {"view_count": 1}
    assert second.json() == {"view_count": 2}
    assert public.status_code == 200
    assert public.json()["project_title"] == "Launch Week"
    assert public.json()["view_count"] == 2
    # Reading does not count a view
    assert test_client.get(f"/api/v1/shares/{share_id}").json()["view_count"] == 2


def test_unknown_share(test_client: TestClient) -> None:
    assert test_client.get("/api/v1/shares/share_0_missing").status_code == 404
    assert test_client.post("/api/v1/shares/share_0_missing/views").status_code == 404


def test_deleted_project_hides_share(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    share_id = create_share(test_client, auth_headers, project)["share_id"]

    test_client.delete(f"/api/v1/projects/{project['id']}", headers=auth_headers)

    response = test_client.get(f"/api/v1/shares/{share_id}")
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Share not found"


def test_deleted_project_share_does_not_count_views(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    share_id = create_share(test_client, auth_headers, project)["share_id"]
    test_client.post(f"/api/v1/shares/{share_id}/views")

    test_client.delete(f"/api/v1/projects/{project['id']}", headers=auth_headers)
    response = test_client.post(f"/api/v1/shares/{share_id}/views")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Share not found"
    listed = test_client.get("/api/v1/shares", headers=auth_headers).json()
    assert [s["view_count"] for s in listed if s["share_id"] == share_id] == [1]


def test_update_keeps_token_and_views(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    share_id = create_share(test_client, auth_headers, project)["share_id"]
    test_client.post(f"/api/v1/shares/{share_id}/views")

    response = test_client.put(
        f"/api/v1/shares/{share_id}",
        json={"canvas_state": {"nodes": [], "edges": []}},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["share_id"] == share_id
    assert response.json()["view_count"] == 1
    assert response.json()["canvas_state"]["nodes"] == []


def test_list_and_delete(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    first = create_share(test_client, auth_headers, project)["share_id"]
    second = create_share(test_client, auth_headers, project)["share_id"]

    listed = test_client.get(f"/api/v1/projects/{project['id']}/shares", headers=auth_headers)
    assert {s["share_id"] for s in listed.json()} == {first, second}

    assert test_client.delete(f"/api/v1/shares/{second}", headers=auth_headers).status_code == 204
    assert test_client.get(f"/api/v1/shares/{second}").status_code == 404

    updated = test_client.get(f"/api/v1/projects/{project['id']}", headers=auth_headers).json()
    assert updated["share_token"] == first
    assert updated["is_shared"] is True


def test_only_owner_manages_shares(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    share_id = create_share(test_client, auth_headers, project)["share_id"]
    intruder = {"X-User-Id": "intruder"}

    create = test_client.post(
        f"/api/v1/projects/{project['id']}/shares",
        json={"canvas_state": CANVAS},
        headers=intruder,
    )
    delete = test_client.delete(f"/api/v1/shares/{share_id}", headers=intruder)

    assert create.status_code == 403
    assert delete.status_code == 403
    assert test_client.get(f"/api/v1/shares/{share_id}").status_code == 200
