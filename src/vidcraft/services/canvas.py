"""Canvas graph store and canvas snapshot persistence.

The store is the in-memory authority for one open canvas. Mutations are
synchronous and last-write-wins; operations on unknown ids are no-ops.
"""

import secrets
import time
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.orm import Session

from vidcraft.db.models import CanvasStateModel
from vidcraft.domain.canvas import (
    CanvasEdge,
    CanvasNode,
    CanvasSnapshot,
    Position,
    Viewport,
)
from vidcraft.logging import get_logger

logger = get_logger(__name__)

_node_adapter: TypeAdapter[CanvasNode] = TypeAdapter(CanvasNode)

# Layout constants
NODE_SPACING_X = 400
NODE_SPACING_Y = 300
START_X = 100
START_Y = 100
NODES_PER_ROW = 3

NODE_WIDTH = 300
NODE_HEIGHT = 200
VIEWPORT_WIDTH = 1200
VIEWPORT_HEIGHT = 800
VIEWPORT_PADDING = 100


def _deep_merge(base: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_node(node: CanvasNode | dict[str, Any]) -> CanvasNode:
    """Accept a node model or its JSON form."""
    if isinstance(node, dict):
        return _node_adapter.validate_python(node)
    return node


def new_node_id(node_type: str) -> str:
    return f"{node_type}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


class CanvasStore:
    """Nodes, edges, viewport and selection for one canvas."""

    def __init__(self, snapshot: CanvasSnapshot | None = None) -> None:
        self.nodes: list[CanvasNode] = []
        self.edges: list[CanvasEdge] = []
        self.viewport = Viewport()
        self.selected_node_ids: list[str] = []
        if snapshot is not None:
            self.load(snapshot)

    # Nodes

    def add_node(self, node: CanvasNode | dict[str, Any]) -> CanvasNode:
        parsed = parse_node(node)
        self.nodes.append(parsed)
        return parsed

    def add_nodes(self, nodes: Iterable[CanvasNode | dict[str, Any]]) -> None:
        for node in nodes:
            self.add_node(node)

    def update_node(self, node_id: str, partial: dict[str, Any]) -> CanvasNode | None:
        """Merge ``partial`` into a node.

        ``position`` and ``selected`` are replaced; ``data`` is merged key by
        key so callers can patch a single field such as ``draft``.
        """
        index = self._index_of(node_id)
        if index is None:
            return None

        current = self.nodes[index].model_dump()
        updates = {k: v for k, v in partial.items() if k not in ("id", "type", "data")}
        if isinstance(updates.get("position"), Position):
            updates["position"] = updates["position"].model_dump()
        merged = {**current, **updates}
        if "data" in partial:
            data_patch = partial["data"]
            if hasattr(data_patch, "model_dump"):
                data_patch = data_patch.model_dump(exclude_unset=True)
            merged["data"] = _deep_merge(current["data"], data_patch or {})

        updated = _node_adapter.validate_python(merged)
        self.nodes[index] = updated
        return updated

    def remove_node(self, node_id: str) -> None:
        """Remove a node together with its edges and selection entry."""
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
        self.selected_node_ids = [i for i in self.selected_node_ids if i != node_id]

    def duplicate_node(self, node_id: str) -> CanvasNode | None:
        original = self.get_node(node_id)
        if original is None:
            return None

        clone = original.model_copy(
            deep=True,
            update={
                "id": new_node_id(original.type),
                "position": Position(
                    x=original.position.x + 50,
                    y=original.position.y + 50,
                ),
                "selected": False,
            },
        )
        self.nodes.append(clone)
        return clone

    # Edges

    def add_edge(self, edge: CanvasEdge | dict[str, Any]) -> CanvasEdge:
        parsed = CanvasEdge.model_validate(edge) if isinstance(edge, dict) else edge
        self.edges.append(parsed)
        return parsed

    def remove_edge(self, edge_id: str) -> None:
        self.edges = [e for e in self.edges if e.id != edge_id]

    def update_edge(self, edge_id: str, partial: dict[str, Any]) -> CanvasEdge | None:
        for i, edge in enumerate(self.edges):
            if edge.id == edge_id:
                updates = {k: v for k, v in partial.items() if k != "id"}
                self.edges[i] = CanvasEdge.model_validate({**edge.model_dump(), **updates})
                return self.edges[i]
        return None

    # Selection

    def select_node(self, node_id: str) -> None:
        self._set_selection([node_id] if self._index_of(node_id) is not None else [])

    def select_nodes(self, node_ids: Iterable[str]) -> None:
        known = {n.id for n in self.nodes}
        self._set_selection([i for i in dict.fromkeys(node_ids) if i in known])

    def toggle_node_selection(self, node_id: str) -> None:
        if self._index_of(node_id) is None:
            return
        if node_id in self.selected_node_ids:
            self._set_selection([i for i in self.selected_node_ids if i != node_id])
        else:
            self._set_selection([*self.selected_node_ids, node_id])

    def deselect_all(self) -> None:
        self._set_selection([])

    def _set_selection(self, node_ids: list[str]) -> None:
        self.selected_node_ids = node_ids
        chosen = set(node_ids)
        self.nodes = [
            n
            if n.selected == (n.id in chosen)
            else n.model_copy(update={"selected": n.id in chosen})
            for n in self.nodes
        ]

    # Layout

    def arrange_nodes(self) -> None:
        """Lay nodes out in rows of three, one block per node type.

        Types are placed in the order they first appear; node order in the
        list is unchanged.
        """
        groups: dict[str, list[int]] = {}
        for i, node in enumerate(self.nodes):
            groups.setdefault(node.type, []).append(i)

        current_y = float(START_Y)
        for indexes in groups.values():
            current_x = float(START_X)
            for n, index in enumerate(indexes):
                self.nodes[index] = self.nodes[index].model_copy(
                    update={"position": Position(x=current_x, y=current_y)}
                )
                current_x += NODE_SPACING_X
                if (n + 1) % NODES_PER_ROW == 0:
                    current_x = float(START_X)
                    current_y += NODE_SPACING_Y / 2
            current_y += NODE_SPACING_Y

    def fit_view(self) -> Viewport:
        """Center and zoom the viewport so every node is visible."""
        if not self.nodes:
            self.viewport = Viewport(x=0, y=0, zoom=1)
            return self.viewport

        min_x = min(n.position.x for n in self.nodes)
        min_y = min(n.position.y for n in self.nodes)
        max_x = max(n.position.x + NODE_WIDTH for n in self.nodes)
        max_y = max(n.position.y + NODE_HEIGHT for n in self.nodes)

        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        zoom = min(
            (VIEWPORT_WIDTH - VIEWPORT_PADDING * 2) / (max_x - min_x),
            (VIEWPORT_HEIGHT - VIEWPORT_PADDING * 2) / (max_y - min_y),
            1.0,
        )

        self.viewport = Viewport(
            x=-center_x * zoom + VIEWPORT_WIDTH / 2,
            y=-center_y * zoom + VIEWPORT_HEIGHT / 2,
            zoom=zoom,
        )
        return self.viewport

    def set_viewport(self, viewport: Viewport | dict[str, Any]) -> None:
        if isinstance(viewport, dict):
            viewport = Viewport.model_validate(viewport)
        self.viewport = viewport

    # Getters

    def _index_of(self, node_id: str) -> int | None:
        for i, node in enumerate(self.nodes):
            if node.id == node_id:
                return i
        return None

    def get_node(self, node_id: str) -> CanvasNode | None:
        index = self._index_of(node_id)
        return self.nodes[index] if index is not None else None

    def get_connected_nodes(self, node_id: str) -> list[CanvasNode]:
        connected: set[str] = set()
        for edge in self.edges:
            if edge.source == node_id:
                connected.add(edge.target)
            elif edge.target == node_id:
                connected.add(edge.source)
        return [n for n in self.nodes if n.id in connected]

    def get_selected_nodes(self) -> list[CanvasNode]:
        selected = set(self.selected_node_ids)
        return [n for n in self.nodes if n.id in selected]

    def get_nodes_by_type(self, node_type: str) -> list[CanvasNode]:
        return [n for n in self.nodes if n.type == node_type]

    # Snapshots

    def snapshot(self) -> CanvasSnapshot:
        return CanvasSnapshot(
            nodes=[n.model_copy(deep=True) for n in self.nodes],
            edges=[e.model_copy() for e in self.edges],
            viewport=self.viewport.model_copy(),
        )

    def load(self, snapshot: CanvasSnapshot) -> None:
        self.nodes = [n.model_copy(deep=True) for n in snapshot.nodes]
        self.edges = [e.model_copy() for e in snapshot.edges]
        self.viewport = snapshot.viewport.model_copy()
        self.selected_node_ids = [n.id for n in self.nodes if n.selected]

    def reset(self) -> None:
        self.nodes = []
        self.edges = []
        self.viewport = Viewport()
        self.selected_node_ids = []


class CanvasStateRepository:
    """Stores the last saved canvas per (user, project)."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _get_model(self, user_id: str, project_id: UUID) -> CanvasStateModel | None:
        stmt = select(CanvasStateModel).where(
            CanvasStateModel.user_id == user_id,
            CanvasStateModel.project_id == project_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_state(self, user_id: str, project_id: UUID) -> CanvasSnapshot | None:
        model = self._get_model(user_id, project_id)
        if model is None:
            return None
        return CanvasSnapshot.model_validate(
            {"nodes": model.nodes, "edges": model.edges, "viewport": model.viewport}
        )

    def save_state(self, user_id: str, project_id: UUID, snapshot: CanvasSnapshot) -> None:
        """Overwrite the stored snapshot wholesale."""
        data = snapshot.to_json()
        model = self._get_model(user_id, project_id)
        if model is None:
            model = CanvasStateModel(user_id=user_id, project_id=project_id)
            self.session.add(model)
        model.nodes = data["nodes"]
        model.edges = data["edges"]
        model.viewport = data["viewport"]
        self.session.flush()

        logger.debug(
            "canvas_state_saved",
            project_id=str(project_id),
            nodes=len(data["nodes"]),
            edges=len(data["edges"]),
        )

    def clear_state(self, user_id: str, project_id: UUID) -> bool:
        model = self._get_model(user_id, project_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.flush()
        return True
