# deck_estimator/validate.py
# Validation utilities:
# - plan geometry checks (degenerate / self-intersecting outline, stray cutouts)
# - plan vs product consistency (board width option)
# - cut plan consistency (mass balance, no row longer than stock)
#
# Geometry problems are reported, never raised: the estimator degrades to zero
# quantities and hands these issues back to the caller as warnings.

from __future__ import annotations

from typing import Iterable, List

from .geometry import area_mm2, find_self_intersection, point_in_polygon
from .rows import normalize_plan, stair_footprint
from .types import CutPlan, Plan, Product, ValidationIssue

FOOTPRINT_MESSAGES = {
    "clipped": "Stair footprint crosses the outline; only the part on the deck is cut out",
    "outside": "Stair footprint does not overlap the deck and is not cut out",
    "ignored": "Stair footprint crosses the outline and is not convex; it is not cut out",
}


def validate_plan(plan: Plan) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    plan = normalize_plan(plan)
    poly = plan.polygon
    outer = poly.outer

    if len(outer) < 3:
        issues.append(
            ValidationIssue(
                level="ERROR",
                code="degenerate_outline",
                message=f"Outline needs at least 3 points, got {len(outer)}",
            )
        )
        return issues

    hit = find_self_intersection(outer)
    if hit is not None:
        issues.append(
            ValidationIssue(
                level="ERROR",
                code="self_intersecting_outline",
                message=f"Outline edges {hit[0]} and {hit[1]} intersect",
            )
        )
        return issues

    if area_mm2(poly) <= 0:
        issues.append(ValidationIssue(level="ERROR", code="zero_area", message="Deck area is zero"))

    for k, hole in enumerate(poly.holes):
        if len(hole) < 3:
            issues.append(
                ValidationIssue(
                    level="WARN",
                    code="degenerate_cutout",
                    message=f"Cutout {k} has {len(hole)} points and is ignored",
                )
            )
            continue
        if not all(point_in_polygon(p, outer) for p in hole):
            issues.append(
                ValidationIssue(
                    level="WARN",
                    code="cutout_outside_outline",
                    message=f"Cutout {k} is not fully inside the outline",
                )
            )

    n = len(outer)
    for i in plan.attached_edge_indices:
        if not 0 <= i < n:
            issues.append(
                ValidationIssue(
                    level="WARN",
                    code="attached_edge_out_of_range",
                    message=f"Attached edge index {i} not in [0, {n - 1}]",
                )
            )

    fp = stair_footprint(plan)
    if fp is not None and fp.status in FOOTPRINT_MESSAGES:
        issues.append(
            ValidationIssue(
                level="WARN",
                code=f"stair_footprint_{fp.status}",
                message=FOOTPRINT_MESSAGES[fp.status],
            )
        )

    return issues


def validate_plan_product(plan: Plan, product: Product) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if product.width_options_mm and plan.board_width_mm not in product.width_options_mm:
        issues.append(
            ValidationIssue(
                level="WARN",
                code="board_width_not_offered",
                message=(
                    f"Board width {plan.board_width_mm} mm is not one of "
                    f"{list(product.width_options_mm)} for {product.name}"
                ),
            )
        )
    return issues


def validate_cut_plan(plan: CutPlan) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for r in plan.rows:
        if r.required_length_mm > plan.stock_length_mm:
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    code="row_exceeds_stock",
                    message=f"Row {r.row_id}: {r.required_length_mm} mm > stock {plan.stock_length_mm} mm",
                )
            )
    balance = plan.required_total_mm + plan.waste_mm + plan.leftover_mm
    if balance != plan.dispensed_mm:
        issues.append(
            ValidationIssue(
                level="ERROR",
                code="mass_balance",
                message=(
                    f"required+waste+leftover={balance} mm but dispensed={plan.dispensed_mm} mm"
                ),
            )
        )
    if plan.waste_mm < 0:
        issues.append(ValidationIssue(level="ERROR", code="negative_waste", message=f"waste={plan.waste_mm} mm"))
    return issues


def has_errors(issues: Iterable[ValidationIssue]) -> bool:
    return any(i.level.upper() == "ERROR" for i in issues)


def raise_on_errors(issues: List[ValidationIssue]) -> None:
    errs = [i for i in issues if i.level.upper() == "ERROR"]
    if errs:
        msg = "\n".join(f"[{e.level}] {e.code} :: {e.message}" for e in errs)
        raise ValueError("Validation failed:\n" + msg)
