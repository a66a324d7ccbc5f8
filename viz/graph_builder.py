"""
Cytoscape Graph Builder — Draws an automaton as an interactive graph.

States become nodes (start, accepting, current and dead-run styling);
transitions become edges, one per (source, target) pair with all symbols
joined into the label. The edge taken by the current step is highlighted.
"""

import math

import dash_cytoscape as cyto
from dash import html


# ── Cytoscape stylesheet ────────────────────────────────────────────────────

GRAPH_STYLESHEET = [
    {
        "selector": "node",
        "style": {
            "label": "data(label)",
            "text-valign": "center",
            "text-halign": "center",
            "background-color": "#2a2a4a",
            "color": "#e0e0ee",
            "font-size": "11px",
            "border-width": 2,
            "border-color": "#3a3a5a",
            "width": 60,
            "height": 60,
        },
    },
    {
        "selector": "node.start",
        "style": {"border-style": "dashed", "border-color": "#a78bfa"},
    },
    {
        "selector": "node.accepting",
        "style": {"border-width": 6, "border-style": "double",
                  "border-color": "#4ade80"},
    },
    {
        "selector": "node.current-state",
        "style": {
            "background-color": "#4f46e5",
            "border-color": "#c4b5fd",
            "width": 75,
            "height": 75,
            "font-size": "13px",
            "font-weight": "bold",
        },
    },
    {
        "selector": "node.error",
        "style": {"background-color": "#7f1d1d", "border-color": "#ef4444"},
    },
    {
        "selector": "edge",
        "style": {
            "width": 2,
            "label": "data(label)",
            "font-size": "10px",
            "color": "#aaa",
            "line-color": "#3a3a5a",
            "target-arrow-color": "#3a3a5a",
            "target-arrow-shape": "triangle",
            "curve-style": "bezier",
            "opacity": 0.8,
        },
    },
    {
        "selector": "edge.active",
        "style": {
            "line-color": "#6366f1",
            "target-arrow-color": "#6366f1",
            "width": 3,
            "opacity": 1,
        },
    },
]


def _calculate_positions(states: list[str]) -> dict[str, dict]:
    """Arrange states on a circle, first state on the left."""
    positions = {}
    n = len(states)
    radius = 60 + 40 * n
    for i, state in enumerate(states):
        angle = math.pi + 2 * math.pi * i / max(n, 1)
        positions[state] = {
            "x": round(radius + radius * math.cos(angle), 1) + 40,
            "y": round(radius + radius * math.sin(angle), 1) + 40,
        }
    return positions


def _group_edges(transitions) -> dict[tuple[str, str], list[str]]:
    """(source, target) -> symbols, in declaration order."""
    grouped: dict[tuple[str, str], list[str]] = {}
    for src, sym, dst in transitions:
        grouped.setdefault((src, dst), []).append(sym)
    return grouped


def _active_edge(step: dict | None) -> tuple[str, str] | None:
    """(source, target) of the edge a transition step just took."""
    if not step or step.get("phase") != "transition":
        return None
    src, dst = step.get("dfa_source"), step.get("dfa_state")
    if src is None or dst is None:
        return None
    return src, dst


def build_automaton_graph(automaton: dict, step: dict | None = None) -> list[dict]:
    """Build Cytoscape elements for an automaton dict (Automaton.to_dict()).

    Args:
        automaton: Definition with states, alphabet, start, accept, transitions.
        step: Optional trace step; marks the current state and taken edge.

    Returns:
        List of Cytoscape node/edge elements.
    """
    if not automaton:
        return []

    states = automaton.get("states", [])
    accept = set(automaton.get("accept", []))
    start = automaton.get("start")
    phase = step.get("phase") if step else None
    current = step.get("dfa_state") if step else None
    active = _active_edge(step)

    elements = []
    positions = _calculate_positions(states)
    for state in states:
        classes = []
        if state == start:
            classes.append("start")
        if state in accept:
            classes.append("accepting")
        if state == current:
            classes.append("current-state")
            if phase == "undefined":
                classes.append("error")
        elements.append({
            "data": {"id": state, "label": state},
            "position": positions[state],
            "classes": " ".join(classes),
        })

    for (src, dst), symbols in _group_edges(automaton.get("transitions", [])).items():
        elements.append({
            "data": {
                "id": f"{src}->{dst}",
                "source": src,
                "target": dst,
                "label": ", ".join(symbols),
            },
            "classes": "active" if active == (src, dst) else "",
        })

    return elements


# ── Component builders ───────────────────────────────────────────────────────

def create_graph_component(
    elements: list[dict],
    graph_id: str = "cyto-graph",
    height: str = "360px",
    layout_name: str = "preset",
) -> cyto.Cytoscape:
    """Create a Cytoscape component with the standard stylesheet."""
    return cyto.Cytoscape(
        id=graph_id,
        elements=elements,
        stylesheet=GRAPH_STYLESHEET,
        style={"width": "100%", "height": height,
               "backgroundColor": "#0f0f1a"},
        layout={"name": layout_name},
        userZoomingEnabled=True,
        userPanningEnabled=True,
        boxSelectionEnabled=False,
    )


def create_graph_panel(automaton: dict, step: dict | None = None) -> html.Div:
    """Graph component plus a one-line caption for the current step."""
    if not automaton:
        return html.Div("No automaton in this trace log.",
                        style={"color": "#666", "fontSize": "13px",
                               "padding": "40px", "textAlign": "center"})
    caption = "Automaton"
    if step:
        caption = f"Step {step.get('step', '?')}: {step.get('phase', '')}"
        if step.get("dfa_state"):
            caption += f" — state {step['dfa_state']}"
    return html.Div([
        html.Div(caption, style={"color": "#888", "fontSize": "12px",
                                 "marginBottom": "8px"}),
        create_graph_component(build_automaton_graph(automaton, step)),
    ])
