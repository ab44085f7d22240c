# deck_estimator/quantities.py
# Quantity take-off for one deck plan:
# - boards: consumer path (area x formula loss rate) or pro path (exact rows + cut plan)
# - substructure: primary (bearers, along the boards) and secondary (joists, across
#   the boards) lines clipped to the outline in the rotated frame
# - anchors / footings from spacing rules
# - substructure detail: cut lists grouped by length, rim bearers, hardware
# - fasteners from board-row x joist crossings
# - stairs, ledger and posts when the plan asks for them
#
# Invalid geometry never raises: the result carries zero quantities and the
# validation issues as warnings. A fastening mode the product does not support
# is rejected before anything is computed.

from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .cut_plan import plan_cuts
from .geometry import (
    area_m2,
    bbox,
    edge_length,
    grid_positions,
    intervals_at_x,
    intervals_at_y,
    point_segment_distance,
)
from .logger import get_logger
from .metrics import effective_loss_rate
from .rows import RowDecomposition, decompose_rows, deck_polygon, normalize_plan
from .stairs import calculate_stairs
from .types import (
    AreaBreakdown,
    BoardQuantities,
    ConsumerLossRule,
    Count,
    CutPlan,
    Fasteners,
    Hardware,
    InvalidFasteningModeError,
    LedgerQuantities,
    LengthGroup,
    MemberDetail,
    Plan,
    Point,
    Polygon,
    PostQuantities,
    Product,
    Quantities,
    Ruleset,
    StairResult,
    SubstructureDetail,
    SubstructureQuantities,
    ValidationIssue,
)
from .utils import round_half_up
from .validate import has_errors, validate_plan, validate_plan_product

Interval = Tuple[float, float]

# Bearers whose midpoint is this close to a wall-fixed edge are replaced by the ledger.
LEDGER_BEARER_TOL_MM = 5.0
LENGTH_GROUP_MM = 100

ANCHOR_BOLTS_PER_FOOTING = 4
BRACKETS_PER_MEMBER = 2   # one angle bracket at each end
SCREWS_PER_BRACKET = 4


# ----------------------------
# Boards
# ----------------------------

def consumer_loss_rate(polygon: Polygon, rule: ConsumerLossRule) -> float:
    """base + vertex_factor * vertices + cutout_factor * cutouts, clamped to [0, cap]."""
    vertices = len(polygon.outer)
    cutouts = len(polygon.holes)
    rate = rule.base + rule.vertex_factor * vertices + rule.cutout_factor * cutouts
    return min(rule.cap, max(0.0, rate))


def _boards_consumer(
    plan: Plan,
    product: Product,
    ruleset: Ruleset,
    deck: Polygon,
    deck_m2: float,
    rows: RowDecomposition,
) -> Tuple[BoardQuantities, Optional[CutPlan]]:
    # plan cutouts only, the stair footprint does not count
    loss = consumer_loss_rate(plan.polygon, ruleset.consumer_loss)
    board_m2 = (plan.board_width_mm / 1000) * (product.stock_length_mm / 1000)
    qty = math.ceil(deck_m2 * (1 + loss) / board_m2) if deck_m2 > 0 else 0
    boards = BoardQuantities(
        qty=qty,
        area_m2=round_half_up(deck_m2, 2),
        used_length_mm=rows.used_length_mm,
        stock_length_mm=product.stock_length_mm,
        row_count=rows.row_count,
        loss_rate=loss,
    )
    return boards, None


def _boards_pro(
    plan: Plan,
    product: Product,
    ruleset: Ruleset,
    deck: Polygon,
    deck_m2: float,
    rows: RowDecomposition,
) -> Tuple[BoardQuantities, Optional[CutPlan]]:
    cut = plan_cuts(
        rows.rows,
        product.stock_length_mm,
        min_offcut_mm=ruleset.min_offcut_mm,
        kerf_mm=ruleset.kerf_mm,
    )
    effective = effective_loss_rate(cut, plan.board_width_mm, deck_m2) or 0.0
    boards = BoardQuantities(
        qty=cut.stock_pieces,
        area_m2=round_half_up(deck_m2, 2),
        used_length_mm=rows.used_length_mm,
        stock_length_mm=product.stock_length_mm,
        row_count=rows.row_count,
        loss_rate=0.0,
        effective_loss_rate=round_half_up(effective, 4),
    )
    return boards, cut


BoardPath = Callable[..., Tuple[BoardQuantities, Optional[CutPlan]]]

BOARD_PATHS: Dict[str, BoardPath] = {
    "consumer": _boards_consumer,
    "pro": _boards_pro,
}


# ----------------------------
# Substructure
# ----------------------------

def _stock_pieces(total_mm: float, stock_mm: float, loss_rate: float) -> int:
    if total_mm <= 0 or stock_mm <= 0:
        return 0
    return math.ceil(total_mm / stock_mm * (1 + loss_rate))


def joist_lines(rot: Polygon, spacing_mm: float) -> List[Tuple[float, List[Interval]]]:
    """Secondary members: x=const lines (across the boards), with covered y-intervals."""
    min_x, _, max_x, _ = bbox(rot.outer)
    out = []
    for x in grid_positions(min_x, max_x, spacing_mm):
        ivs = intervals_at_x(rot, x)
        if ivs:
            out.append((x, ivs))
    return out


def bearer_lines(rot: Polygon, spacing_mm: float) -> List[Tuple[float, List[Interval]]]:
    """Primary members: y=const lines (along the boards), with covered x-intervals."""
    _, min_y, _, max_y = bbox(rot.outer)
    out = []
    for y in grid_positions(min_y, max_y, spacing_mm):
        ivs = intervals_at_y(rot, y)
        if ivs:
            out.append((y, ivs))
    return out


def _total_length(lines: Sequence[Tuple[float, List[Interval]]]) -> float:
    return sum(b - a for _, ivs in lines for a, b in ivs)


def _ledger_edges(rot: Polygon, attached: Sequence[int]) -> List[Tuple[Point, Point]]:
    outer = rot.outer
    n = len(outer)
    return [(outer[i], outer[(i + 1) % n]) for i in sorted(set(attached)) if 0 <= i < n]


def _on_ledger(mid: Point, ledger: Sequence[Tuple[Point, Point]]) -> bool:
    return any(point_segment_distance(mid, a, b) <= LEDGER_BEARER_TOL_MM for a, b in ledger)


def drop_ledger_bearers(
    bearers: Sequence[Tuple[float, List[Interval]]],
    ledger: Sequence[Tuple[Point, Point]],
) -> List[Tuple[float, List[Interval]]]:
    """Bearer runs along a wall-fixed edge are carried by the ledger instead."""
    out = []
    for y, ivs in bearers:
        kept = [(a, b) for a, b in ivs if not _on_ledger(Point((a + b) / 2, y), ledger)]
        if kept:
            out.append((y, kept))
    return out


def rim_bearers(rot: Polygon, attached: Sequence[int]) -> List[float]:
    """Lengths of the outline edges that are not fixed to a wall."""
    outer = rot.outer
    n = len(outer)
    skip = set(attached)
    ledger = _ledger_edges(rot, attached)
    out: List[float] = []
    for i in range(n):
        if i in skip:
            continue
        a, b = outer[i], outer[(i + 1) % n]
        length = edge_length(a, b)
        mid = Point((a.x_mm + b.x_mm) / 2, (a.y_mm + b.y_mm) / 2)
        if length > 0 and not _on_ledger(mid, ledger):
            out.append(length)
    return out


def group_by_length(lengths: Iterable[float], step_mm: int = LENGTH_GROUP_MM) -> Tuple[LengthGroup, ...]:
    """Cut list: lengths rounded to the nearest step, longest first."""
    counts: Dict[int, int] = {}
    for length in lengths:
        key = int(round_half_up(length / step_mm) * step_mm)
        if key <= 0:
            continue
        counts[key] = counts.get(key, 0) + 1
    return tuple(LengthGroup(length_mm=k, qty=v) for k, v in sorted(counts.items(), reverse=True))


def _member(inner: Sequence[float], rim: Sequence[float], ruleset: Ruleset) -> MemberDetail:
    total = sum(inner) + sum(rim)
    return MemberDetail(
        total_length_m=round_half_up(total / 1000, 3),
        pieces=len(inner) + len(rim),
        inner_pieces=len(inner),
        rim_pieces=len(rim),
        breakdown=group_by_length([*inner, *rim]),
        stock_pieces=_stock_pieces(total, ruleset.substructure_stock_length_mm, ruleset.substructure_loss_rate),
    )


def substructure_detail(
    plan: Plan,
    ruleset: Ruleset,
    rot: Polygon,
    bearers: Sequence[Tuple[float, List[Interval]]],
    joists: Sequence[Tuple[float, List[Interval]]],
    footings: int,
) -> SubstructureDetail:
    """
    Member cut lists and connection hardware. `bearers` must already have the
    ledger runs removed. Rim joists are not framed separately.
    """
    bearer = _member(
        [b - a for _, ivs in bearers for a, b in ivs],
        rim_bearers(rot, plan.attached_edge_indices),
        ruleset,
    )
    joist = _member([b - a for _, ivs in joists for a, b in ivs], [], ruleset)

    brackets = (bearer.pieces + joist.pieces) * BRACKETS_PER_MEMBER
    elevated = footings if plan.deck_height_mm > 0 else None
    hardware = Hardware(
        anchor_bolts=footings * ANCHOR_BOLTS_PER_FOOTING,
        angle_brackets=brackets,
        joist_hangers=joist.inner_pieces,
        self_drilling_screws=brackets * SCREWS_PER_BRACKET,
        base_plates=elevated,
        post_caps=elevated,
    )
    return SubstructureDetail(bearer=bearer, joist=joist, hardware=hardware)


def count_intersections(rows: RowDecomposition, joists: Sequence[Tuple[float, List[Interval]]]) -> int:
    """Crossings of board rows with joists (a joist counts only where it exists under the row)."""
    total = 0
    for r in rows.rows:
        for x, ivs in joists:
            if not r.x0_mm <= x <= r.x1_mm:
                continue
            if any(y0 <= r.y_mm <= y1 for y0, y1 in ivs):
                total += 1
    return total


# ----------------------------
# Extras (ledger, posts, area)
# ----------------------------

def _ledger(plan: Plan, ruleset: Ruleset) -> Optional[LedgerQuantities]:
    outer = plan.polygon.outer
    n = len(outer)
    length = 0.0
    for i in plan.attached_edge_indices:
        if 0 <= i < n:
            length += edge_length(outer[i], outer[(i + 1) % n])
    if length <= 0:
        return None
    bolts = max(2, math.ceil(length / ruleset.anchor_spacing_mm) + 1)
    return LedgerQuantities(length_m=round_half_up(length / 1000, 3), anchor_bolts_qty=bolts)


def _posts(plan: Plan, ruleset: Ruleset, footings: int) -> Optional[PostQuantities]:
    if plan.deck_height_mm <= 0:
        return None
    each = int(round_half_up(plan.deck_height_mm))
    total_mm = footings * plan.deck_height_mm
    return PostQuantities(
        qty=footings,
        each_length_mm=each,
        total_length_m=round_half_up(total_mm / 1000, 3),
        stock_pieces=_stock_pieces(total_mm, ruleset.substructure_stock_length_mm, ruleset.substructure_loss_rate),
    )


def _area(deck_m2: float, stairs: Optional[StairResult]) -> AreaBreakdown:
    stairs_m2 = stairs.tread_area_m2 if stairs is not None else 0.0
    return AreaBreakdown(
        deck_m2=round_half_up(deck_m2, 2),
        stairs_m2=round_half_up(stairs_m2, 2),
        total_m2=round_half_up(deck_m2 + stairs_m2, 2),
    )


def _fasteners(mode: str, intersections: int, ruleset: Ruleset) -> Fasteners:
    if mode == "screw":
        return Fasteners(mode=mode, intersections=intersections, screws=intersections * ruleset.screw_per_intersection)
    return Fasteners(mode=mode, intersections=intersections, clips=intersections)


def _degraded(
    product: Product,
    ruleset: Ruleset,
    fastening_mode: str,
    stairs: Optional[StairResult],
    issues: Sequence[ValidationIssue],
) -> Quantities:
    return Quantities(
        area=_area(0.0, stairs),
        boards=BoardQuantities(
            qty=0,
            area_m2=0.0,
            used_length_mm=0,
            stock_length_mm=product.stock_length_mm,
            row_count=0,
            loss_rate=0.0,
        ),
        substructure=SubstructureQuantities(primary_len_m=0.0, secondary_len_m=0.0),
        anchors=Count(0),
        footings=Count(0),
        fasteners=_fasteners(fastening_mode, 0, ruleset),
        stairs=stairs,
        warnings=tuple(issues),
    )


# ----------------------------
# Entry point
# ----------------------------

def _override_lengths(
    plan: Plan, ruleset: Ruleset, primary_mm: float, secondary_mm: float
) -> Tuple[float, float, List[ValidationIssue]]:
    ov = plan.substructure_overrides
    if ov is None or (ov.primary_len_mm is None and ov.secondary_len_mm is None):
        return primary_mm, secondary_mm, []
    if not ruleset.show_advanced_overrides:
        issue = ValidationIssue(
            level="WARN",
            code="substructure_overrides_ignored",
            message="Substructure length overrides need show_advanced_overrides; computed lengths are used",
        )
        return primary_mm, secondary_mm, [issue]
    return (
        primary_mm if ov.primary_len_mm is None else float(ov.primary_len_mm),
        secondary_mm if ov.secondary_len_mm is None else float(ov.secondary_len_mm),
        [],
    )


def calculate_quantities(plan: Plan, product: Product, ruleset: Ruleset, fastening_mode: str) -> Quantities:
    """
    Full take-off for one plan. Pure: builds a fresh Quantities every call.

    Raises InvalidFasteningModeError before any computation when the product
    does not support fastening_mode, and RowExceedsStockError (pro mode) when a
    board row is longer than the stock length.
    """
    if fastening_mode not in product.fastening_modes:
        raise InvalidFasteningModeError(fastening_mode, product.fastening_modes)

    log = get_logger()
    plan = normalize_plan(plan)
    stairs = calculate_stairs(plan, product, ruleset, fastening_mode)

    issues: List[ValidationIssue] = validate_plan(plan)
    if has_errors(issues):
        log.issues(issues)
        return _degraded(product, ruleset, fastening_mode, stairs, issues)
    issues.extend(validate_plan_product(plan, product))

    deck = deck_polygon(plan)
    deck_m2 = area_m2(deck)

    rows = decompose_rows(deck, plan.board_width_mm, ruleset.gap_mm, plan.decking_direction_deg)
    boards, cut = BOARD_PATHS[ruleset.mode](plan, product, ruleset, deck, deck_m2, rows)

    rot = rows.rotated
    joists = joist_lines(rot, ruleset.secondary_spacing_mm)
    bearers = drop_ledger_bearers(
        bearer_lines(rot, ruleset.primary_spacing_mm),
        _ledger_edges(rot, plan.attached_edge_indices),
    )
    bearer_mm = _total_length(bearers)
    anchors = math.ceil(bearer_mm / ruleset.anchor_spacing_mm) if bearer_mm > 0 else 0

    # anchors stay on the computed run, overrides only replace reported lengths
    primary_mm, secondary_mm, override_issues = _override_lengths(plan, ruleset, bearer_mm, _total_length(joists))
    issues.extend(override_issues)

    footing_cell_m2 = ruleset.footing_spacing_mm ** 2 / 1_000_000
    footings = math.ceil(deck_m2 / footing_cell_m2) if deck_m2 > 0 else 0

    substructure = SubstructureQuantities(
        primary_len_m=round_half_up(primary_mm / 1000, 3),
        secondary_len_m=round_half_up(secondary_mm / 1000, 3),
        primary_stock_pieces=_stock_pieces(
            primary_mm, ruleset.substructure_stock_length_mm, ruleset.substructure_loss_rate
        ),
        secondary_stock_pieces=_stock_pieces(
            secondary_mm, ruleset.substructure_stock_length_mm, ruleset.substructure_loss_rate
        ),
        detail=substructure_detail(plan, ruleset, rot, bearers, joists, footings),
    )

    intersections = count_intersections(rows, joists)

    log.issues(issues)

    return Quantities(
        area=_area(deck_m2, stairs),
        boards=boards,
        substructure=substructure,
        anchors=Count(anchors),
        footings=Count(footings),
        fasteners=_fasteners(fastening_mode, intersections, ruleset),
        stairs=stairs,
        cut_plan=cut if (ruleset.mode == "pro" and ruleset.enable_cut_plan) else None,
        ledger=_ledger(plan, ruleset),
        posts=_posts(plan, ruleset, footings),
        warnings=tuple(issues),
    )
