from __future__ import annotations

import json
from typing import Dict, List, Tuple

from plotly import graph_objects as go

from ..graph import DEFAULT_GROUP_COLOR
from .layout import radial_network_layout

CENTER_COLOR = "#F59E0B"
USER_COLOR = "#6B7280"


def node_color(node: dict) -> str:
    if node.get("isCenter"):
        return CENTER_COLOR
    if not node.get("groups"):
        return USER_COLOR if node["id"].startswith("user-") else DEFAULT_GROUP_COLOR
    colors = node.get("colors") or []
    return colors[0] if colors else DEFAULT_GROUP_COLOR


def _edge_traces(edges: List[dict], pos: Dict[str, Tuple[float, float]]) -> List[go.Scatter]:
    """One line trace per edge color so each relationship type keeps its color."""
    by_color: Dict[str, dict] = {}
    for e in edges:
        if e["source"] not in pos or e["target"] not in pos:
            continue
        x0, y0 = pos[e["source"]]
        x1, y1 = pos[e["target"]]
        seg = by_color.setdefault(e["color"], {"x": [], "y": [], "text": []})
        seg["x"] += [x0, x1, None]
        seg["y"] += [y0, y1, None]
        seg["text"] += [e["type"], e["type"], ""]

    return [
        go.Scatter(
            x=seg["x"],
            y=seg["y"],
            mode="lines",
            line=dict(width=2, color=color),
            hoverinfo="text",
            hovertext=seg["text"],
            showlegend=False,
        )
        for color, seg in by_color.items()
    ]


def build_network_figure(graph: dict, radius: float = 4.0) -> go.Figure:
    nodes = graph.get("nodes", [])
    center = next((n for n in nodes if n.get("isCenter")), None)
    if center is None:
        fig = go.Figure()
        fig.update_layout(title="No network data found")
        return fig

    pos = radial_network_layout(center["id"], [n["id"] for n in nodes if n is not center], radius=radius)

    node_trace = go.Scatter(
        x=[pos[n["id"]][0] for n in nodes],
        y=[pos[n["id"]][1] for n in nodes],
        mode="markers+text",
        text=[n["label"] for n in nodes],
        textposition="top center",
        hoverinfo="text",
        hovertext=[
            n["label"] + ("<br>" + ", ".join(n["groups"]) if n["groups"] else "")
            for n in nodes
        ],
        customdata=[n["id"] for n in nodes],
        marker=dict(
            size=[26 if n.get("isCenter") else 18 for n in nodes],
            color=[node_color(n) for n in nodes],
            line=dict(width=1, color="#333"),
        ),
        textfont=dict(size=10),
    )

    fig = go.Figure(data=[*_edge_traces(graph.get("edges", []), pos), node_trace])
    pad = radius * 0.3
    fig.update_layout(
        showlegend=False,
        hovermode="closest",
        dragmode="pan",
        autosize=True,
        margin=dict(l=0, r=0, t=0, b=0),
        plot_bgcolor="white",
        paper_bgcolor="white",
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[-radius - pad, radius + pad],
            scaleanchor="y",
            scaleratio=1,
        ),
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[-radius - pad, radius + pad],
        ),
    )
    return fig


def figure_to_json(fig: go.Figure) -> dict:
    return json.loads(fig.to_json())
