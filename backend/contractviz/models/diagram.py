"""
Diagram graph model.

Nodes and edges follow the shape the React Flow front-end consumes
(``id``, ``data.label``, ``position``, ``style``; ``source``/``target``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DiagramMode = Literal["flow", "class", "state"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Position(_Frozen):
    x: float
    y: float


class NodeData(_Frozen):
    label: str
    category: str | None = None


class DiagramNode(_Frozen):
    id: str
    type: str = "default"
    data: NodeData
    position: Position
    style: dict[str, str | int] = Field(default_factory=dict)


class DiagramEdge(_Frozen):
    id: str
    source: str
    target: str
    label: str | None = None
    animated: bool = False
    style: dict[str, str | int] = Field(default_factory=dict)


class Diagram(_Frozen):
    """A node/edge graph derived from one AnalyzedContract."""
    mode: str
    nodes: tuple[DiagramNode, ...] = ()
    edges: tuple[DiagramEdge, ...] = ()

    def node(self, node_id: str) -> DiagramNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
