# deck_estimator/plotting.py
# Minimal matplotlib visualization:
# - deck outline, cutouts, board rows and joist lines (boards drawn along x)
# - cut plan: one horizontal bar per stock piece, cuts laid out left to right

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.patches import Polygon as MplPolygon
from matplotlib.patches import Rectangle

from .geometry import bbox
from .rows import RowDecomposition
from .types import CutPlan, CutRow, Ring


@dataclass(frozen=True)
class PlotStyle:
    show_labels: bool = True
    show_joists: bool = True
    show_grid: bool = False
    font_size: int = 7
    padding_mm: int = 100
    bar_height: float = 0.6


def _hash_color(key: str) -> Tuple[float, float, float]:
    """Deterministic pastel-ish color from a string."""
    h = 2166136261
    for ch in key.encode("utf-8"):
        h ^= ch
        h *= 16777619
        h &= 0xFFFFFFFF
    r = 0.3 + ((h >> 0) & 0xFF) / 255 * 0.6
    g = 0.3 + ((h >> 8) & 0xFF) / 255 * 0.6
    b = 0.3 + ((h >> 16) & 0xFF) / 255 * 0.6
    return (r, g, b)


def _xy(ring: Ring) -> List[Tuple[float, float]]:
    return [(p.x_mm, p.y_mm) for p in ring]


def plot_deck(
    rows: RowDecomposition,
    joist_xs: Optional[List[float]] = None,
    style: Optional[PlotStyle] = None,
    figsize: Optional[Tuple[float, float]] = None,
) -> plt.Figure:
    """
    Draw the decomposed deck in the rotated frame (board rows horizontal).
    """
    style = style or PlotStyle()
    rot = rows.rotated
    if len(rot.outer) < 3:
        raise ValueError("Deck outline has fewer than 3 points, nothing to plot")

    min_x, min_y, max_x, max_y = bbox(rot.outer)
    fig, ax = plt.subplots(1, 1, figsize=figsize or (8, 6))

    ax.add_patch(MplPolygon(_xy(rot.outer), closed=True, fill=False, linewidth=1.4))
    for hole in rot.holes:
        if len(hole) >= 3:
            ax.add_patch(MplPolygon(_xy(hole), closed=True, facecolor="0.85", edgecolor="black", hatch="//"))

    half = rows.pitch_mm / 2
    for r in rows.rows:
        ax.add_patch(
            Rectangle(
                (r.x0_mm, r.y_mm - half * 0.9),
                r.x1_mm - r.x0_mm,
                half * 1.8,
                facecolor=_hash_color(r.row_id.split(".", 1)[0]),
                edgecolor="black",
                linewidth=0.4,
                alpha=0.8,
            )
        )
        if style.show_labels:
            ax.text(
                (r.x0_mm + r.x1_mm) / 2,
                r.y_mm,
                f"{r.row_id} {r.length_mm}",
                ha="center",
                va="center",
                fontsize=style.font_size,
            )

    if style.show_joists and joist_xs:
        for x in joist_xs:
            ax.plot([x, x], [min_y, max_y], linewidth=0.6, linestyle="--", color="0.4")

    ax.set_title(f"Rows: {rows.row_count} | pitch {rows.pitch_mm:g} mm | used {rows.used_length_mm:,} mm", fontsize=10)
    ax.set_aspect("equal", adjustable="box")
    pad = style.padding_mm
    ax.set_xlim(min_x - pad, max_x + pad)
    ax.set_ylim(min_y - pad, max_y + pad)
    ax.grid(style.show_grid, linewidth=0.3)
    fig.tight_layout()
    return fig


def _rows_by_piece(plan: CutPlan) -> Dict[str, List[CutRow]]:
    by_piece: Dict[str, List[CutRow]] = {}
    for r in plan.rows:
        by_piece.setdefault(r.source_id, []).append(r)
    return by_piece


def plot_cut_plan(
    plan: CutPlan,
    style: Optional[PlotStyle] = None,
    figsize: Optional[Tuple[float, float]] = None,
) -> plt.Figure:
    """
    One bar per stock piece; cuts in the order they were taken from the piece.
    Whatever is not covered at the right end is waste or leftover.
    """
    style = style or PlotStyle()
    by_piece = _rows_by_piece(plan)
    if not by_piece:
        raise ValueError("Cut plan has no rows to plot")

    n = len(by_piece)
    fig, ax = plt.subplots(1, 1, figsize=figsize or (10, max(2.0, 0.4 * n + 1)))
    L = plan.stock_length_mm
    h = style.bar_height

    for k, (piece_id, cuts) in enumerate(by_piece.items()):
        y = n - 1 - k
        ax.add_patch(Rectangle((0, y - h / 2), L, h, facecolor="0.9", edgecolor="black", linewidth=0.8))
        x = 0
        for c in cuts:
            ax.add_patch(
                Rectangle(
                    (x, y - h / 2),
                    c.required_length_mm,
                    h,
                    facecolor=_hash_color(c.row_id),
                    edgecolor="black",
                    linewidth=0.5,
                )
            )
            if style.show_labels:
                ax.text(
                    x + c.required_length_mm / 2,
                    y,
                    f"{c.row_id}\n{c.required_length_mm}",
                    ha="center",
                    va="center",
                    fontsize=style.font_size,
                )
            x += c.required_length_mm
        ax.text(-L * 0.01, y, piece_id, ha="right", va="center", fontsize=style.font_size + 1)

    ax.set_xlim(-L * 0.06, L * 1.02)
    ax.set_ylim(-1, n)
    ax.set_yticks([])
    ax.set_title(
        f"{plan.stock_pieces} x {L} mm | waste {plan.waste_mm:,} mm | leftover {plan.leftover_mm:,} mm",
        fontsize=10,
    )
    ax.grid(style.show_grid, linewidth=0.3)
    fig.tight_layout()
    return fig


def save_deck_png(
    rows: RowDecomposition,
    path: str,
    joist_xs: Optional[List[float]] = None,
    style: Optional[PlotStyle] = None,
    dpi: int = 200,
) -> None:
    fig = plot_deck(rows, joist_xs=joist_xs, style=style)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)


def save_cut_plan_png(plan: CutPlan, path: str, style: Optional[PlotStyle] = None, dpi: int = 200) -> None:
    fig = plot_cut_plan(plan, style=style)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
