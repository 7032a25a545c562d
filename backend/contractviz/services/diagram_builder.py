"""
Diagram Builders.

Pure functions deriving node/edge graphs from an AnalyzedContract:

* flow graph: contract, roles, state summary, functions with call edges,
  events with emitter edges, and an aggregate security node;
* class graph: a compartmented class box, inheritance parents and event
  boxes, without behavioural edges;
* state graph: state variables and the functions that assign them;
* function graph: the sub-flow of a single function (inputs, modifiers,
  calls, outputs).

Node ids derive only from entity identity (``function-<index>``,
``event-<index>``, ``role-<name>``), so repeated builds are identical and a
``function-<i>`` id always maps back to ``contract.functions[i]``. Positions
depend only on ordinal position within each category.
"""

from __future__ import annotations

import re
from typing import Callable

from contractviz.middleware.error_handler import NodeNotFoundError
from contractviz.models.contract import AnalyzedContract, FunctionRecord, Parameter
from contractviz.models.diagram import (
    Diagram,
    DiagramEdge,
    DiagramNode,
    NodeData,
    Position,
)

# ── Styling ───────────────────────────────────────────────────

FLOW_COLORS: dict[str, tuple[str, str]] = {
    "owner": ("#ffe6e6", "#cc0000"),
    "admin": ("#fff0e6", "#cc6600"),
    "user": ("#e6ffe6", "#00cc00"),
    "system": ("#e6f3ff", "#0066cc"),
}

_CONTRACT_STYLE = ("#e6f3ff", "#0066cc")
_NEUTRAL_STYLE = ("#f0f0f0", "#666")
_EVENT_STYLE = ("#fff0e6", "#cc6600")
_SECURITY_STYLE = ("#ffe6e6", "#cc0000")
_STATE_STYLE = ("#e6ffe6", "#00cc00")

_FLOW_ROW = 150
_SUBFLOW_ROW = 80

_FUNCTION_NODE_RE = re.compile(r"function-(\d+)")


def _style(colors: tuple[str, str], width: int, border: int = 2, monospace: bool = False) -> dict[str, str | int]:
    background, stroke = colors
    style: dict[str, str | int] = {
        "background": background,
        "border": f"{border}px solid {stroke}",
        "padding": 10,
        "borderRadius": "8px",
        "width": width,
        "whiteSpace": "pre-wrap",
    }
    if monospace:
        style["fontFamily"] = "monospace"
    return style


def _node(
    node_id: str,
    label: str,
    x: float,
    y: float,
    style: dict[str, str | int],
    category: str | None = None,
) -> DiagramNode:
    return DiagramNode(
        id=node_id,
        data=NodeData(label=label, category=category),
        position=Position(x=x, y=y),
        style=style,
    )


def _edge(
    source: str,
    target: str,
    stroke: str | None = None,
    animated: bool = True,
    label: str | None = None,
) -> DiagramEdge:
    return DiagramEdge(
        id=f"e-{source}-{target}",
        source=source,
        target=target,
        label=label,
        animated=animated,
        style={"stroke": stroke} if stroke else {},
    )


def _signature(params: tuple[Parameter, ...]) -> str:
    return ", ".join(f"{p.type} {p.name}".strip() for p in params)


# ══════════════════════════════════════════════════════════════
# FLOW GRAPH
# ══════════════════════════════════════════════════════════════


def _contract_label(contract: AnalyzedContract) -> str:
    lines = [contract.name, f"Version: {contract.version}"]
    if contract.inherits_from:
        lines.append(f"Inherits: {', '.join(contract.inherits_from)}")
    if contract.license:
        lines.append(f"License: {contract.license}")
    return "\n".join(lines)


def _function_label(func: FunctionRecord) -> str:
    lines = [f"{func.name}({_signature(func.inputs)})"]
    if func.outputs:
        lines.append("→ " + ", ".join(o.type for o in func.outputs))
    lines.append(f"{func.visibility} {func.mutability}")
    lines.append(f"Role: {', '.join(func.roles)}")
    if func.modifiers:
        lines.append(f"Modifiers: {', '.join(func.modifiers)}")
    if func.calls:
        lines.append(f"Calls: {', '.join(func.calls)}")
    return "\n".join(lines)


def build_flow_graph(contract: AnalyzedContract) -> Diagram:
    """Call/flow view: everything hangs off a root ``contract`` node."""
    nodes: list[DiagramNode] = []
    edges: list[DiagramEdge] = []

    nodes.append(_node("contract", _contract_label(contract), 250, 0, _style(_CONTRACT_STYLE, 300)))
    y_offset = _FLOW_ROW

    # ── Roles ────────────────────────────────────────────────
    for index, role in enumerate(contract.roles):
        role_id = f"role-{role.name}"
        nodes.append(_node(
            role_id,
            f"Role: {role.name}\nFunctions: {len(role.functions)}",
            -300,
            y_offset + index * 100,
            _style(_NEUTRAL_STYLE, 200),
            category="role",
        ))
        edges.append(_edge("contract", role_id, stroke="#666"))

    # ── State summary ────────────────────────────────────────
    if contract.state_variables:
        entries = []
        for var in contract.state_variables:
            initial = f" = {var.initial_value}" if var.initial_value else ""
            entries.append(
                f"{var.visibility} {var.type} {var.name}{initial}\n"
                f"Accessed by: {len(var.read_by)} functions\n"
                f"Modified by: {len(var.written_by)} functions"
            )
        nodes.append(_node(
            "state",
            "State Variables\n" + "\n\n".join(entries),
            -200,
            y_offset,
            _style(_NEUTRAL_STYLE, 250, border=1),
            category="state",
        ))
        edges.append(_edge("contract", "state", stroke="#666", animated=False))

    # ── Functions ────────────────────────────────────────────
    for index, func in enumerate(contract.functions):
        node_id = f"function-{index}"
        colors = FLOW_COLORS[func.flow_category]
        nodes.append(_node(
            node_id,
            _function_label(func),
            250,
            y_offset,
            _style(colors, 300),
            category=func.flow_category,
        ))
        for dependency in func.calls:
            target = contract.function_index(dependency)
            if target != -1:
                edges.append(_edge(node_id, f"function-{target}", stroke=colors[1]))
        edges.append(_edge("contract", node_id, stroke=colors[1]))
        y_offset += _FLOW_ROW

    # ── Events ───────────────────────────────────────────────
    for index, event in enumerate(contract.events):
        node_id = f"event-{index}"
        lines = [f"Event: {event.name}"]
        lines.extend(f"{i.type} {'(indexed) ' if i.indexed else ''}{i.name}" for i in event.inputs)
        label = "\n".join(lines)
        if event.anonymous:
            label += "\nanonymous"
        if event.emitted_by:
            label += "\n\nEmitted by:\n" + "\n".join(event.emitted_by)
        nodes.append(_node(node_id, label, 700, 100 + index * _FLOW_ROW, _style(_EVENT_STYLE, 250), category="event"))

        emitters = dict.fromkeys(contract.function_index(name) for name in event.emitted_by)
        for func_index in emitters:
            if func_index != -1:
                edges.append(_edge(f"function-{func_index}", node_id, stroke=_EVENT_STYLE[1]))
        edges.append(_edge("contract", node_id, stroke=_EVENT_STYLE[1]))

    # ── Security ─────────────────────────────────────────────
    if contract.security_findings:
        entries = []
        for finding in contract.security_findings:
            entry = f"[{finding.severity}] {finding.description}\n"
            if finding.affected_functions:
                entry += f"Affected: {', '.join(finding.affected_functions)}"
            entries.append(entry)
        nodes.append(_node(
            "security",
            "Security Issues\n" + "\n\n".join(entries),
            -200,
            max(y_offset, 500),
            _style(_SECURITY_STYLE, 300),
            category="security",
        ))
        affected = dict.fromkeys(
            contract.function_index(name)
            for finding in contract.security_findings
            for name in finding.affected_functions
        )
        for func_index in affected:
            if func_index != -1:
                edges.append(_edge(f"function-{func_index}", "security", stroke=_SECURITY_STYLE[1]))
        edges.append(_edge("contract", "security", stroke=_SECURITY_STYLE[1]))

    return Diagram(mode="flow", nodes=tuple(nodes), edges=tuple(edges))


# ══════════════════════════════════════════════════════════════
# CLASS GRAPH
# ══════════════════════════════════════════════════════════════


def _marker(visibility: str) -> str:
    return "-" if visibility == "private" else "+"


def build_class_graph(contract: AnalyzedContract) -> Diagram:
    """UML-style structural snapshot. Only inheritance edges are drawn."""
    nodes: list[DiagramNode] = []
    edges: list[DiagramEdge] = []

    separator = "-" * 30
    attributes = "\n".join(
        f"{_marker(v.visibility)} {v.name}: {v.type}" for v in contract.state_variables
    )
    operations = "\n".join(
        f"{_marker(f.visibility)} {f.name}("
        + ", ".join(f"{i.name}: {i.type}" for i in f.inputs)
        + f"): {', '.join(o.type for o in f.outputs) or 'void'}"
        for f in contract.functions
    )
    label = f"{contract.name}\n{separator}\n{attributes}\n{separator}\n{operations}"
    nodes.append(_node("contract", label, 300, 0, _style(_CONTRACT_STYLE, 400, monospace=True), category="contract"))

    # Edges run parent -> contract; the arrow reads "contract extends parent"
    for index, parent in enumerate(contract.inherits_from):
        parent_id = f"parent-{index}"
        nodes.append(_node(parent_id, parent, 300 + index * 200, -100, _style(_NEUTRAL_STYLE, 150), category="parent"))
        edges.append(_edge(parent_id, "contract", stroke="#666", animated=False))

    for index, event in enumerate(contract.events):
        fields = "\n".join(
            f"+ {i.name}: {i.type}{' (indexed)' if i.indexed else ''}" for i in event.inputs
        )
        nodes.append(_node(
            f"event-{index}",
            f"«event»\n{event.name}\n{'-' * 20}\n{fields}",
            800,
            100 + index * _FLOW_ROW,
            _style(_EVENT_STYLE, 250, monospace=True),
            category="event",
        ))

    return Diagram(mode="class", nodes=tuple(nodes), edges=tuple(edges))


# ══════════════════════════════════════════════════════════════
# STATE GRAPH
# ══════════════════════════════════════════════════════════════


def build_state_graph(contract: AnalyzedContract) -> Diagram:
    """
    State-mutation view. Only functions that assign at least one state
    variable appear; their node ids keep the index into
    ``contract.functions``.
    """
    nodes: list[DiagramNode] = []
    edges: list[DiagramEdge] = []

    for index, var in enumerate(contract.state_variables):
        nodes.append(_node(
            f"state-{index}",
            f"{var.name}\n{var.type}\n{var.initial_value or '(uninitialized)'}",
            200,
            index * _FLOW_ROW,
            _style(_STATE_STYLE, 200),
            category="state",
        ))

    writers = [
        (index, func)
        for index, func in enumerate(contract.functions)
        if any(func.name in var.written_by for var in contract.state_variables)
    ]
    for row, (index, func) in enumerate(writers):
        node_id = f"function-{index}"
        nodes.append(_node(
            node_id,
            f"{func.name}\n{func.visibility} {func.mutability}",
            500,
            row * _FLOW_ROW,
            _style(_CONTRACT_STYLE, 200),
            category=func.flow_category,
        ))
        for var_index, var in enumerate(contract.state_variables):
            if func.name in var.written_by:
                edges.append(_edge(node_id, f"state-{var_index}", stroke="#0066cc", label="modifies"))

    return Diagram(mode="state", nodes=tuple(nodes), edges=tuple(edges))


# ══════════════════════════════════════════════════════════════
# FUNCTION SUB-FLOW
# ══════════════════════════════════════════════════════════════


def build_function_graph(func: FunctionRecord) -> Diagram:
    """Inputs feed the function; modifiers, calls and outputs hang off it."""
    nodes: list[DiagramNode] = []
    edges: list[DiagramEdge] = []

    nodes.append(_node(
        "function",
        f"{func.name}\n{func.visibility} {func.mutability}",
        250,
        0,
        _style(_CONTRACT_STYLE, 200),
        category=func.flow_category,
    ))
    y_offset = 100

    for index, param in enumerate(func.inputs):
        node_id = f"input-{index}"
        nodes.append(_node(
            node_id,
            f"Input: {param.name}\nType: {param.type}",
            50,
            y_offset + index * _SUBFLOW_ROW,
            _style(_NEUTRAL_STYLE, 150, border=1),
            category="input",
        ))
        edges.append(_edge(node_id, "function"))

    for index, modifier in enumerate(func.modifiers):
        node_id = f"modifier-{index}"
        nodes.append(_node(
            node_id,
            f"Modifier: {modifier}",
            450,
            y_offset + index * _SUBFLOW_ROW,
            _style(_EVENT_STYLE, 150),
            category="modifier",
        ))
        edges.append(_edge("function", node_id))

    if func.calls:
        y_offset += max(len(func.inputs), len(func.modifiers)) * _SUBFLOW_ROW + 50
        for index, dependency in enumerate(func.calls):
            node_id = f"dep-{index}"
            nodes.append(_node(
                node_id,
                f"Calls: {dependency}",
                250,
                y_offset + index * _SUBFLOW_ROW,
                _style(_STATE_STYLE, 150),
                category="call",
            ))
            edges.append(_edge("function", node_id))

    if func.outputs:
        y_offset += (len(func.calls) or 1) * _SUBFLOW_ROW + 50
        for index, output in enumerate(func.outputs):
            node_id = f"output-{index}"
            nodes.append(_node(
                node_id,
                f"Output: {output.name or 'return'}\nType: {output.type}",
                250,
                y_offset + index * _SUBFLOW_ROW,
                _style(_NEUTRAL_STYLE, 150, border=1),
                category="output",
            ))
            edges.append(_edge("function", node_id))

    return Diagram(mode="function", nodes=tuple(nodes), edges=tuple(edges))


# ══════════════════════════════════════════════════════════════
# SELECTION
# ══════════════════════════════════════════════════════════════

BUILDERS: dict[str, Callable[[AnalyzedContract], Diagram]] = {
    "flow": build_flow_graph,
    "class": build_class_graph,
    "state": build_state_graph,
}


def build_diagram(contract: AnalyzedContract, mode: str) -> Diagram:
    """Build the graph for *mode* (``flow`` | ``class`` | ``state``)."""
    try:
        builder = BUILDERS[mode]
    except KeyError:
        raise ValueError(f"Unknown diagram mode '{mode}'. Expected one of: {', '.join(BUILDERS)}") from None
    return builder(contract)


def resolve_function_node(contract: AnalyzedContract, node_id: str) -> FunctionRecord:
    """Map a ``function-<i>`` node id back to ``contract.functions[i]``."""
    match = _FUNCTION_NODE_RE.fullmatch(node_id)
    if not match:
        raise NodeNotFoundError(node_id)
    index = int(match.group(1))
    if index >= len(contract.functions):
        raise NodeNotFoundError(node_id)
    return contract.functions[index]
