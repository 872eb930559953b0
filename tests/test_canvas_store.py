"""Tests for the canvas graph store."""

import pytest
from pydantic import ValidationError

from vidcraft.domain.canvas import AgentNode, CanvasSnapshot, Position, VideoNode
from vidcraft.services.canvas import (
    NODE_SPACING_X,
    NODE_SPACING_Y,
    START_X,
    START_Y,
    CanvasStore,
)


def video_node(node_id: str, x: float = 0, y: float = 0) -> dict:
    return {
        "id": node_id,
        "type": "video",
        "position": {"x": x, "y": y},
        "data": {"title": f"Video {node_id}"},
    }


def agent_node(node_id: str, agent_type: str = "title", x: float = 0, y: float = 0) -> dict:
    return {
        "id": node_id,
        "type": "agent",
        "position": {"x": x, "y": y},
        "data": {"agent_type": agent_type, "draft": ""},
    }


def edge(edge_id: str, source: str, target: str) -> dict:
    return {"id": edge_id, "source": source, "target": target}


@pytest.fixture
def store() -> CanvasStore:
    canvas = CanvasStore()
    canvas.add_nodes([video_node("v1"), agent_node("a1"), agent_node("a2", "description")])
    canvas.add_edge(edge("e1", "v1", "a1"))
    canvas.add_edge(edge("e2", "v1", "a2"))
    return canvas


class TestNodes:
    def test_add_node_parses_variant(self) -> None:
        canvas = CanvasStore()
        node = canvas.add_node(video_node("v1"))

        assert isinstance(node, VideoNode)
        assert canvas.get_node("v1") is node

    def test_unknown_node_type_rejected(self) -> None:
        canvas = CanvasStore()
        with pytest.raises(ValidationError):
            canvas.add_node({"id": "x", "type": "sticker", "data": {}})

    def test_update_node_merges_data(self, store: CanvasStore) -> None:
        updated = store.update_node("a1", {"data": {"draft": "My Title"}})

        assert isinstance(updated, AgentNode)
        assert updated.data.draft == "My Title"
        assert updated.data.agent_type == "title"

    def test_update_node_replaces_position(self, store: CanvasStore) -> None:
        store.update_node("v1", {"position": {"x": 10, "y": 20}})

        assert store.get_node("v1").position == Position(x=10, y=20)

    def test_update_unknown_node_is_noop(self, store: CanvasStore) -> None:
        before = store.snapshot()

        assert store.update_node("missing", {"data": {"draft": "x"}}) is None
        assert store.snapshot() == before

    def test_remove_node_drops_edges_and_selection(self, store: CanvasStore) -> None:
        store.select_nodes(["v1", "a1"])

        store.remove_node("v1")

        assert store.get_node("v1") is None
        assert store.edges == []
        assert store.selected_node_ids == ["a1"]

    def test_remove_node_twice_is_noop(self, store: CanvasStore) -> None:
        store.select_nodes(["v1", "a1"])
        store.remove_node("v1")
        before = store.snapshot()

        store.remove_node("v1")

        assert store.snapshot() == before
        assert store.selected_node_ids == ["a1"]

    def test_duplicate_node_offsets_copy(self, store: CanvasStore) -> None:
        store.update_node("a1", {"position": {"x": 100, "y": 100}, "data": {"draft": "Hi"}})

        clone = store.duplicate_node("a1")

        assert clone is not None
        assert clone.id != "a1"
        assert clone.id.startswith("agent-")
        assert clone.position == Position(x=150, y=150)
        assert clone.data.draft == "Hi"
        assert clone.selected is False
        # Edges are not copied
        assert all(e.source != clone.id and e.target != clone.id for e in store.edges)

    def test_duplicate_unknown_node(self, store: CanvasStore) -> None:
        assert store.duplicate_node("missing") is None
        assert len(store.nodes) == 3


class TestEdges:
    def test_connected_nodes(self, store: CanvasStore) -> None:
        connected = {n.id for n in store.get_connected_nodes("v1")}
        assert connected == {"a1", "a2"}
        assert [n.id for n in store.get_connected_nodes("a1")] == ["v1"]

    def test_remove_edge(self, store: CanvasStore) -> None:
        store.remove_edge("e1")
        assert [e.id for e in store.edges] == ["e2"]

    def test_update_edge(self, store: CanvasStore) -> None:
        updated = store.update_edge("e1", {"animated": True})
        assert updated is not None
        assert updated.animated is True
        assert store.update_edge("missing", {"animated": True}) is None


class TestSelection:
    def test_select_node_replaces_selection(self, store: CanvasStore) -> None:
        store.select_node("v1")
        store.select_node("a1")

        assert store.selected_node_ids == ["a1"]
        assert [n.id for n in store.nodes if n.selected] == ["a1"]

    def test_toggle_selection(self, store: CanvasStore) -> None:
        store.toggle_node_selection("v1")
        store.toggle_node_selection("a2")
        store.toggle_node_selection("v1")

        assert store.selected_node_ids == ["a2"]
        assert [n.id for n in store.get_selected_nodes()] == ["a2"]

    def test_select_unknown_ids_ignored(self, store: CanvasStore) -> None:
        store.select_nodes(["v1", "ghost"])
        assert store.selected_node_ids == ["v1"]

    def test_deselect_all(self, store: CanvasStore) -> None:
        store.select_nodes(["v1", "a1"])
        store.deselect_all()

        assert store.selected_node_ids == []
        assert not any(n.selected for n in store.nodes)


class TestLayout:
    def test_fit_view_empty_canvas(self) -> None:
        canvas = CanvasStore()
        canvas.set_viewport({"x": 300, "y": -40, "zoom": 0.3})

        viewport = canvas.fit_view()

        assert (viewport.x, viewport.y, viewport.zoom) == (0, 0, 1)

    def test_fit_view_single_node_caps_zoom(self) -> None:
        canvas = CanvasStore()
        canvas.add_node(video_node("v1", 0, 0))

        viewport = canvas.fit_view()

        assert viewport.zoom == 1.0
        assert viewport.x == pytest.approx(-150 + 600)
        assert viewport.y == pytest.approx(-100 + 400)

    def test_fit_view_zooms_out_for_wide_layout(self) -> None:
        canvas = CanvasStore()
        canvas.add_nodes([video_node("v1", 0, 0), video_node("v2", 2700, 0)])

        viewport = canvas.fit_view()

        # Width 3000 into 1000px of usable viewport
        assert viewport.zoom == pytest.approx(1000 / 3000)

    def test_arrange_groups_by_type(self) -> None:
        canvas = CanvasStore()
        canvas.add_nodes(
            [
                video_node("v1", 999, 999),
                agent_node("a1"),
                agent_node("a2"),
                agent_node("a3"),
                agent_node("a4"),
            ]
        )

        canvas.arrange_nodes()

        positions = {n.id: (n.position.x, n.position.y) for n in canvas.nodes}
        assert positions["v1"] == (START_X, START_Y)
        agents_y = START_Y + NODE_SPACING_Y
        assert positions["a1"] == (START_X, agents_y)
        assert positions["a2"] == (START_X + NODE_SPACING_X, agents_y)
        assert positions["a3"] == (START_X + 2 * NODE_SPACING_X, agents_y)
        # Fourth agent wraps to a new row
        assert positions["a4"] == (START_X, agents_y + NODE_SPACING_Y / 2)
        assert [n.id for n in canvas.nodes] == ["v1", "a1", "a2", "a3", "a4"]


class TestSnapshots:
    def test_snapshot_round_trip(self, store: CanvasStore) -> None:
        store.select_node("a1")
        store.set_viewport({"x": 10, "y": 20, "zoom": 0.5})

        restored = CanvasStore(CanvasSnapshot.model_validate(store.snapshot().to_json()))

        assert restored.snapshot() == store.snapshot()
        assert restored.selected_node_ids == ["a1"]

    def test_snapshot_is_a_copy(self, store: CanvasStore) -> None:
        snapshot = store.snapshot()
        store.update_node("a1", {"data": {"draft": "changed"}})

        original = next(n for n in snapshot.nodes if n.id == "a1")
        assert original.data.draft == ""

    def test_reset(self, store: CanvasStore) -> None:
        store.reset()
        assert store.snapshot() == CanvasSnapshot()
