# deck_estimator/debug.py
# Debug / inspection helpers:
# - pretty-print board rows and cut plans
# - quick text summary of a Quantities result
# - helpful when checking a plan against a hand take-off

from __future__ import annotations

from typing import Iterable

from .rows import BoardRow
from .types import CutPlan, CutRow, MemberDetail, Quantities, SubstructureDetail


def print_rows(rows: Iterable[BoardRow]) -> None:
    for r in rows:
        print(
            f"[{r.row_index:3d}] {r.row_id:8s} "
            f"y={r.y_mm:8.1f} x=({r.x0_mm:8.1f}..{r.x1_mm:8.1f}) len={r.length_mm:5d}"
        )


def print_cut_rows(rows: Iterable[CutRow]) -> None:
    for c in rows:
        print(
            f"{c.row_id:8s} {c.required_length_mm:5d} mm <- "
            f"{c.source_kind:6s} {c.source_id:4s} rest={c.remainder_mm:5d}"
        )


def print_cut_plan(plan: CutPlan) -> None:
    print(f"=== Cut plan ({plan.stock_length_mm} mm stock) ===")
    print(f"Stock pieces: {plan.stock_pieces}  Rows: {len(plan.rows)}")
    print(f"Waste: {plan.waste_mm:,} mm  Leftover: {plan.leftover_mm:,} mm")
    print("-- Rows --")
    print_cut_rows(plan.rows)
    if plan.offcut_pool:
        print("-- Offcuts left --")
        for o in plan.offcut_pool:
            print(f"{o.length_mm:5d} mm from {o.source_row_id} ({o.source_id})")


def _member_line(name: str, m: MemberDetail) -> str:
    groups = ", ".join(f"{g.qty}x{g.length_mm}" for g in m.breakdown)
    return (
        f"  {name}: {m.total_length_m} m  pieces={m.pieces} "
        f"(inner {m.inner_pieces}, rim {m.rim_pieces})  stock={m.stock_pieces}  [{groups}]"
    )


def print_substructure_detail(d: SubstructureDetail) -> None:
    print(_member_line("Bearers", d.bearer))
    print(_member_line("Joists", d.joist))
    hw = d.hardware
    line = (
        f"  Hardware: anchor bolts={hw.anchor_bolts}  brackets={hw.angle_brackets}  "
        f"hangers={hw.joist_hangers}  screws={hw.self_drilling_screws}"
    )
    if hw.base_plates is not None:
        line += f"  base plates={hw.base_plates}  post caps={hw.post_caps}"
    print(line)


def print_quantities(q: Quantities) -> None:
    print(f"Area: deck={q.area.deck_m2} m²  stairs={q.area.stairs_m2} m²  total={q.area.total_m2} m²")
    b = q.boards
    line = f"Boards: {b.qty} x {b.stock_length_mm} mm  rows={b.row_count}  used={b.used_length_mm:,} mm"
    if b.effective_loss_rate is not None:
        line += f"  effective loss={b.effective_loss_rate:.2%}"
    else:
        line += f"  loss={b.loss_rate:.2%}"
    print(line)
    s = q.substructure
    print(
        f"Substructure: primary={s.primary_len_m} m ({s.primary_stock_pieces} pcs)  "
        f"secondary={s.secondary_len_m} m ({s.secondary_stock_pieces} pcs)"
    )
    if s.detail is not None:
        print_substructure_detail(s.detail)
    print(f"Anchors: {q.anchors.qty}  Footings: {q.footings.qty}")
    f = q.fasteners
    if f.mode == "screw":
        print(f"Fasteners: screw  intersections={f.intersections}  screws={f.screws}")
    else:
        print(f"Fasteners: clip  intersections={f.intersections}  clips={f.clips}")
    if q.stairs is not None:
        st = q.stairs
        print(f"Stairs: {len(st.items)} flight(s)  tread={st.tread_area_m2} m²  riser={st.riser_area_m2} m²")
    if q.ledger is not None:
        print(f"Ledger: {q.ledger.length_m} m  bolts={q.ledger.anchor_bolts_qty}")
    if q.posts is not None:
        p = q.posts
        print(f"Posts: {p.qty} x {p.each_length_mm} mm ({p.stock_pieces} pcs)")
    if q.cut_plan is not None:
        print(f"Cut plan: {q.cut_plan.stock_pieces} pieces, waste {q.cut_plan.waste_m:.3f} m")
    for w in q.warnings:
        print(f"{w.level}: {w.code} - {w.message}")
