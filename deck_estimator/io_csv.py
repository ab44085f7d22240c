# deck_estimator/io_csv.py
# CSV export helpers:
# - board rows (required lengths in laying order)
# - cut plan (which stock piece / offcut each row comes from)
# - one-line quantity summary (for the quote sheet)

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict

from .rows import RowDecomposition
from .types import CutPlan, Quantities

HARDWARE_FIELDS = (
    "bearer_pieces",
    "joist_pieces",
    "anchor_bolts",
    "angle_brackets",
    "joist_hangers",
    "self_drilling_screws",
)


def export_rows_csv(rows: RowDecomposition, path: str | Path) -> None:
    """
    Write board rows into a CSV file.
    Coordinates are in the rotated frame (boards along x).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = ["row_id", "row_index", "y_mm", "x0_mm", "x1_mm", "length_mm"]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in rows.rows:
            w.writerow(
                {
                    "row_id": r.row_id,
                    "row_index": r.row_index,
                    "y_mm": round(r.y_mm, 1),
                    "x0_mm": round(r.x0_mm, 1),
                    "x1_mm": round(r.x1_mm, 1),
                    "length_mm": r.length_mm,
                }
            )


def export_cut_plan_csv(plan: CutPlan, path: str | Path) -> None:
    """One line per row: required length, where it is cut from, what is left."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = ["row_id", "required_length_mm", "source_kind", "source_id", "remainder_mm"]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in plan.rows:
            w.writerow(
                {
                    "row_id": r.row_id,
                    "required_length_mm": r.required_length_mm,
                    "source_kind": r.source_kind,
                    "source_id": r.source_id,
                    "remainder_mm": r.remainder_mm,
                }
            )


def _hardware_row(q: Quantities) -> Dict[str, Any]:
    d = q.substructure.detail
    if d is None:
        return {k: "" for k in HARDWARE_FIELDS}
    return {
        "bearer_pieces": d.bearer.pieces,
        "joist_pieces": d.joist.pieces,
        "anchor_bolts": d.hardware.anchor_bolts,
        "angle_brackets": d.hardware.angle_brackets,
        "joist_hangers": d.hardware.joist_hangers,
        "self_drilling_screws": d.hardware.self_drilling_screws,
    }


def export_summary_csv(q: Quantities, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "deck_m2",
        "stairs_m2",
        "total_m2",
        "boards_qty",
        "stock_length_mm",
        "primary_len_m",
        "secondary_len_m",
        *HARDWARE_FIELDS,
        "anchors_qty",
        "footings_qty",
        "fastening_mode",
        "clips",
        "screws",
        "waste_m",
        "warnings",
    ]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        w.writerow(
            {
                "deck_m2": q.area.deck_m2,
                "stairs_m2": q.area.stairs_m2,
                "total_m2": q.area.total_m2,
                "boards_qty": q.boards.qty,
                "stock_length_mm": q.boards.stock_length_mm,
                "primary_len_m": q.substructure.primary_len_m,
                "secondary_len_m": q.substructure.secondary_len_m,
                **_hardware_row(q),
                "anchors_qty": q.anchors.qty,
                "footings_qty": q.footings.qty,
                "fastening_mode": q.fasteners.mode,
                "clips": q.fasteners.clips if q.fasteners.clips is not None else "",
                "screws": q.fasteners.screws if q.fasteners.screws is not None else "",
                "waste_m": q.cut_plan.waste_m if q.cut_plan is not None else "",
                "warnings": ";".join(i.code for i in q.warnings),
            }
        )


def export_all(q: Quantities, out_dir: str | Path, prefix: str = "deck", rows: RowDecomposition | None = None) -> None:
    """
    Export summary, and cut plan / rows when available, into out_dir.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    export_summary_csv(q, out_dir / f"{prefix}_summary.csv")
    if q.cut_plan is not None:
        export_cut_plan_csv(q.cut_plan, out_dir / f"{prefix}_cut_plan.csv")
    if rows is not None:
        export_rows_csv(rows, out_dir / f"{prefix}_rows.csv")
