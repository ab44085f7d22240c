# deck_estimator/stairs.py
# Stair tread / riser areas per flight.
# Independent from the row decomposition: stairs are quantified from step geometry only.

from __future__ import annotations

from typing import List, Optional

from .types import Plan, StairItemResult, StairResult
from .utils import round_half_up


def calculate_stairs(
    plan: Plan,
    product: object = None,
    ruleset: object = None,
    fastening_mode: Optional[str] = None,
) -> Optional[StairResult]:
    """
    Tread and riser areas summed over all flights.

    Returns None when stairs are not enabled. Flights with step_count <= 0 or
    width_mm <= 0 are skipped (half-edited stairs are normal during editing).
    Each area is rounded to 2 decimals on its own, the total is rounded from the
    unrounded sum.

    product / ruleset / fastening_mode are accepted so the UI layer can call this
    with the same arguments as calculate_quantities; they are not used.
    """
    st = plan.stairs
    if st is None or not st.enabled:
        return None

    items: List[StairItemResult] = []
    tread_m2 = 0.0
    riser_m2 = 0.0

    for cfg in st.items:
        if cfg.step_count <= 0 or cfg.width_mm <= 0:
            continue

        tread_m2 += cfg.step_count * cfg.width_mm * cfg.step_depth_mm / 1_000_000
        riser_m2 += cfg.step_count * cfg.width_mm * cfg.step_height_mm / 1_000_000

        items.append(
            StairItemResult(
                id=cfg.id,
                step_count=cfg.step_count,
                unit_rise_mm=round_half_up(cfg.step_height_mm, 1),
                unit_run_mm=cfg.step_depth_mm,
                width_mm=cfg.width_mm,
            )
        )

    return StairResult(
        enabled=True,
        items=tuple(items),
        tread_area_m2=round_half_up(tread_m2, 2),
        riser_area_m2=round_half_up(riser_m2, 2),
        total_area_m2=round_half_up(tread_m2 + riser_m2, 2),
    )
