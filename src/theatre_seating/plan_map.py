"""Interactive HTML map of a venue with one seating strategy drawn on it."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import networkx as nx
from pyvis.network import Network

from .models import Arrangement, SeatingStrategy
from .topology import VenueLayout

_PALETTE = [
    "#FFB347", "#77DD77", "#AEC6CF", "#C23B22", "#F49AC2", "#B39EB5",
    "#03C03C", "#779ECB", "#966FD6", "#FFD700", "#FF6961", "#CB99C9",
]
_FREE_COLOR = "#3A3A3A"
_OCCUPIED_COLOR = "#777777"

_EDGE_COLOR = {
    "vertical": "#84B6F4",
    "horizontal": "#A9A9A9",
    "strategic": "#FDFD96",
}

# ---------------------------
# Public API
# ---------------------------

def build_plan_graph(layout: VenueLayout, strategy: Optional[SeatingStrategy] = None) -> nx.Graph:
    """Adjacency graph of the venue annotated with the strategy's groups.

    Each node gains ``group`` (guest label or ``None``) and ``color``; edges
    joining two tables of the same arrangement get ``combined=True``.
    """
    G = layout.graph()
    table_to_arrangement: Dict[int, Arrangement] = {}
    colors: Dict[int, str] = {}
    if strategy is not None:
        for i, a in enumerate(strategy.arrangements):
            for tid in a.table_ids:
                table_to_arrangement[tid] = a
                colors[tid] = _PALETTE[i % len(_PALETTE)]

    for tid, data in G.nodes(data=True):
        a = table_to_arrangement.get(tid)
        data["group"] = a.guest_group.name if a else None
        if a:
            data["color"] = colors[tid]
        else:
            data["color"] = _OCCUPIED_COLOR if data.get("occupied") else _FREE_COLOR

    for u, v, data in G.edges(data=True):
        au, av = table_to_arrangement.get(u), table_to_arrangement.get(v)
        data["combined"] = au is not None and au is av
    return G


def render_plan_map(
    layout: VenueLayout,
    strategy: Optional[SeatingStrategy] = None,
    canvas_size: Tuple[int, int] = (1200, 800),
) -> str:
    """
    Build an interactive map of tables, adjacency and assignments.

    Rows are laid out front to back in section order; tables inside a row
    left to right in id order.

    Returns:
      HTML string with embedded network.
    """
    G = build_plan_graph(layout, strategy)
    positions = _compute_table_positions(layout, *canvas_size)
    arrangements = {tid: a for a in (strategy.arrangements if strategy else []) for tid in a.table_ids}

    net = Network(height="700px", width="100%", bgcolor="#111111", font_color="#EEEEEE")
    net.toggle_physics(False)  # positions are fixed

    for tid, data in G.nodes(data=True):
        x, y = positions[tid]
        net.add_node(
            tid,
            label=f"T{tid} ({data['capacity']})",
            title=_node_tooltip(tid, data, arrangements.get(tid)),
            color=data["color"],
            x=x,
            y=y,
            physics=False,
            shape="box",
            borderWidth=4 if tid in arrangements else 1,
        )

    for u, v, data in G.edges(data=True):
        kind = data.get("kind", "horizontal")
        net.add_edge(
            u,
            v,
            color=_EDGE_COLOR.get(kind, "#A9A9A9"),
            width=5 if data["combined"] else 1,
            title=kind,
        )

    return _inject_legend_html(net.generate_html(), strategy)

# ---------------------------
# Internals
# ---------------------------

def _compute_table_positions(layout: VenueLayout, width: int, height: int) -> Dict[int, Tuple[int, int]]:
    rows: List[List[int]] = [[t.id for t in layout.tables_in(section)] for section in layout.sections()]
    margin_x = 120
    margin_y = 100
    step_y = max(1, (height - 2 * margin_y) // max(1, len(rows)))

    positions: Dict[int, Tuple[int, int]] = {}
    for r, ids in enumerate(rows):
        step_x = max(1, (width - 2 * margin_x) // max(1, len(ids)))
        y = margin_y + r * step_y + step_y // 2
        for c, tid in enumerate(sorted(ids)):
            positions[tid] = (margin_x + c * step_x + step_x // 2, y)
    return positions


def _node_tooltip(tid: int, data: dict, arrangement: Optional[Arrangement]) -> str:
    lines = [
        f"<b>Table {tid}</b>",
        f"Section: {data.get('section') or 'n/a'}",
        f"Seats: {data['capacity']}",
    ]
    if arrangement is not None:
        lines.append(f"Guests: {arrangement.guest_group.name} ({arrangement.guest_group.size})")
        lines.append(f"Extra chairs: {arrangement.extra_chairs}")
        lines.append(f"Efficiency: {arrangement.efficiency}%")
    elif data.get("occupied"):
        lines.append("Occupied")
    else:
        lines.append("Free")
    return "<br>".join(lines)


def _inject_legend_html(page: str, strategy: Optional[SeatingStrategy]) -> str:
    title = ""
    if strategy is not None:
        title = (
            f"<div style='font-weight:bold;margin-bottom:6px;'>{strategy.name} "
            f"({strategy.overall_efficiency.value})</div>"
        )
        if strategy.unplaced:
            names = ", ".join(g.name for g in strategy.unplaced)
            title += f"<div style='color:#FF6961;margin-bottom:6px;'>Needs manual seating: {names}</div>"
    css = """
    <style>
    .legend-box{
      position:absolute;right:12px;bottom:12px;
      background:#222;color:#eee;border:1px solid #444;border-radius:8px;
      padding:8px 12px;font-family:system-ui, -apple-system, Segoe UI, Roboto, Arial;font-size:12px;
      z-index:10;
    }
    .legend-swatch{display:inline-block;width:12px;height:12px;margin-right:6px;vertical-align:middle;border:1px solid #444;}
    </style>
    """
    html = f"""
    {css}
    <div class="legend-box">
      {title}
      <div><span class="legend-swatch" style="background:{_EDGE_COLOR['vertical']}"></span>vertical adjacency</div>
      <div><span class="legend-swatch" style="background:{_EDGE_COLOR['horizontal']}"></span>same row adjacency</div>
      <div><span class="legend-swatch" style="background:{_EDGE_COLOR['strategic']}"></span>strategic block</div>
      <div><span class="legend-swatch" style="background:{_FREE_COLOR}"></span>free table</div>
      <div><span class="legend-swatch" style="background:{_OCCUPIED_COLOR}"></span>occupied table</div>
      <div style="margin-top:6px;">thick edge: tables combined for one group</div>
    </div>
    """
    if "</body>" in page:
        return page.replace("</body>", html + "</body>", 1)
    return page + html
