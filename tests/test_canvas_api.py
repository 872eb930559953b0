"""Tests for canvas persistence endpoints."""

from fastapi.testclient import TestClient

NODES = [
    {"id": "agent-1", "type": "agent", "position": {"x": 5, "y": 5}, "data": {"agent_type": "title"}},
    {"id": "video-1", "type": "video", "position": {"x": 900, "y": 40}, "data": {"title": "Intro"}},
    {"id": "agent-2", "type": "agent", "position": {"x": 7, "y": 700}, "data": {"agent_type": "tweets"}},
]


def canvas_url(project: dict) -> str:
    return f"/api/v1/projects/{project['id']}/canvas"


def test_empty_canvas(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> None:
    response = test_client.get(canvas_url(project), headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"nodes": [], "edges": [], "viewport": {"x": 0.0, "y": 0.0, "zoom": 1.0}}


def test_save_and_load(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> None:
    body = {
        "nodes": NODES,
        "edges": [{"id": "e1", "source": "video-1", "target": "agent-1"}],
        "viewport": {"x": 10, "y": 20, "zoom": 0.5},
    }

    assert test_client.put(canvas_url(project), json=body, headers=auth_headers).status_code == 200
    loaded = test_client.get(canvas_url(project), headers=auth_headers).json()

    assert [n["id"] for n in loaded["nodes"]] == ["agent-1", "video-1", "agent-2"]
    assert loaded["nodes"][2]["data"]["agent_type"] == "tweets"
    assert loaded["edges"][0]["source"] == "video-1"
    assert loaded["viewport"]["zoom"] == 0.5


def test_last_write_wins(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> None:
    test_client.put(canvas_url(project), json={"nodes": NODES}, headers=auth_headers)
    test_client.put(canvas_url(project), json={"nodes": NODES[:1]}, headers=auth_headers)

    loaded = test_client.get(canvas_url(project), headers=auth_headers).json()
    assert [n["id"] for n in loaded["nodes"]] == ["agent-1"]


def test_unknown_node_type_rejected(
    test_client: TestClient, auth_headers: dict[str, str], project: dict
) -> None:
    body = {"nodes": [{"id": "x", "type": "sticker", "data": {}}]}

    response = test_client.put(canvas_url(project), json=body, headers=auth_headers)

    assert response.status_code == 422


def test_arrange(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> None:
    test_client.put(canvas_url(project), json={"nodes": NODES}, headers=auth_headers)

    arranged = test_client.post(f"{canvas_url(project)}/arrange", headers=auth_headers).json()

    positions = {n["id"]: n["position"] for n in arranged["nodes"]}
    assert positions["agent-1"] == {"x": 100.0, "y": 100.0}
    assert positions["agent-2"] == {"x": 500.0, "y": 100.0}
    assert positions["video-1"] == {"x": 100.0, "y": 400.0}
    # The arranged layout is saved
    saved = test_client.get(canvas_url(project), headers=auth_headers).json()
    assert saved["nodes"] == arranged["nodes"]


def test_fit_view(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> None:
    body = {"nodes": [{"id": "video-1", "type": "video", "position": {"x": 0, "y": 0}}]}
    test_client.put(canvas_url(project), json=body, headers=auth_headers)

    fitted = test_client.post(f"{canvas_url(project)}/fit-view", headers=auth_headers).json()

    assert fitted["viewport"] == {"x": 450.0, "y": 300.0, "zoom": 1.0}


def test_clear(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> None:
    test_client.put(canvas_url(project), json={"nodes": NODES}, headers=auth_headers)

    assert test_client.delete(canvas_url(project), headers=auth_headers).status_code == 204
    assert test_client.get(canvas_url(project), headers=auth_headers).json()["nodes"] == []


def test_canvas_is_private(test_client: TestClient, project: dict) -> None:
    response = test_client.get(canvas_url(project), headers={"X-User-Id": "intruder"})

    assert response.status_code == 403
