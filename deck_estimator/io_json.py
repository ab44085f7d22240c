# deck_estimator/io_json.py
# Load an estimation job exported by the drawing UI into Plan / Product / Ruleset.
#
# Expected JSON shape (camelCase, as the UI writes it):
# {
#   "plan": {
#     "unit": "mm",
#     "polygon": {"outer": [{"xMm": 0, "yMm": 0}, ...], "holes": [[...], ...]},
#     "boardWidthMm": 140,
#     "deckingDirectionDeg": 0,
#     "attachedEdgeIndices": [0],
#     "deckHeightMm": 600,
#     "substructureOverrides": {"primaryLenMm": 6000},      # needs showAdvancedOverrides
#     "stairs": {"enabled": true, "footprintPolygon": {...},
#                "items": [{"id": "s1", "widthMm": 1000, "stepCount": 3,
#                           "stepDepthMm": 280, "stepHeightMm": 180}]}
#   },
#   "product": {"id": "DN34", "stockLengthMm": 3000, ...},   # optional -> defaults
#   "rules": {"mode": "pro", "gapMm": 5, ...},               # optional -> defaults
#   "fasteningMode": "clip"                                   # optional -> first product mode
# }

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULTS, make_default_product, make_default_ruleset
from .types import (
    ConsumerLossRule,
    Plan,
    Point,
    Polygon,
    Product,
    Ring,
    Ruleset,
    StairConfig,
    StairsSpec,
    SubstructureOverrides,
)


@dataclass(frozen=True)
class JsonLoadResult:
    plan: Plan
    product: Product
    ruleset: Ruleset
    fastening_mode: str


def _ring(data: List[Dict[str, Any]]) -> Ring:
    return tuple(Point(float(p["xMm"]), float(p["yMm"])) for p in data)


def polygon_from_dict(data: Dict[str, Any]) -> Polygon:
    outer = data.get("outer") or []
    holes = data.get("holes") or []
    return Polygon(outer=_ring(outer), holes=tuple(_ring(h) for h in holes))


def stairs_from_dict(data: Optional[Dict[str, Any]]) -> Optional[StairsSpec]:
    if data is None:
        return None
    fp = data.get("footprintPolygon")
    items = []
    for k, it in enumerate(data.get("items") or []):
        items.append(
            StairConfig(
                id=str(it.get("id") or f"stair{k + 1}"),
                width_mm=float(it.get("widthMm", 0)),
                step_count=int(it.get("stepCount", 0)),
                step_depth_mm=float(it.get("stepDepthMm", 0)),
                step_height_mm=float(it.get("stepHeightMm", 0)),
            )
        )
    return StairsSpec(
        enabled=bool(data.get("enabled", False)),
        footprint_polygon=polygon_from_dict(fp) if fp else None,
        items=tuple(items),
    )


def overrides_from_dict(data: Optional[Dict[str, Any]]) -> Optional[SubstructureOverrides]:
    if not data:
        return None
    primary = data.get("primaryLenMm")
    secondary = data.get("secondaryLenMm")
    return SubstructureOverrides(
        primary_len_mm=float(primary) if primary is not None else None,
        secondary_len_mm=float(secondary) if secondary is not None else None,
    )


def plan_from_dict(data: Dict[str, Any]) -> Plan:
    if "polygon" not in data:
        raise ValueError("Plan JSON missing 'polygon'.")
    return Plan(
        polygon=polygon_from_dict(data["polygon"]),
        board_width_mm=float(data.get("boardWidthMm", DEFAULTS.board_width_mm)),
        decking_direction_deg=float(data.get("deckingDirectionDeg", 0)),
        stairs=stairs_from_dict(data.get("stairs")),
        unit=str(data.get("unit", "mm")),
        attached_edge_indices=tuple(int(i) for i in data.get("attachedEdgeIndices") or []),
        deck_height_mm=float(data.get("deckHeightMm") or 0),
        substructure_overrides=overrides_from_dict(data.get("substructureOverrides")),
    )


def product_from_dict(data: Optional[Dict[str, Any]]) -> Product:
    if not data:
        return make_default_product()
    base = make_default_product()
    return Product(
        id=str(data.get("id", base.id)),
        name=str(data.get("name", data.get("id", base.name))),
        stock_length_mm=int(data.get("stockLengthMm", base.stock_length_mm)),
        width_options_mm=tuple(int(w) for w in data.get("widthOptionsMm", base.width_options_mm)),
        thickness_mm=float(data.get("thicknessMm", base.thickness_mm)),
        gap_mm=float(data.get("gapMm", base.gap_mm)),
        fastening_modes=tuple(data.get("fasteningModes", base.fastening_modes)),
    )


def ruleset_from_dict(data: Optional[Dict[str, Any]]) -> Ruleset:
    if not data:
        return make_default_ruleset()
    base = make_default_ruleset(str(data.get("mode", "consumer")))
    loss = data.get("consumerLoss")
    consumer_loss = base.consumer_loss
    if loss:
        consumer_loss = ConsumerLossRule(
            base=float(loss.get("base", consumer_loss.base)),
            vertex_factor=float(loss.get("vertexFactor", consumer_loss.vertex_factor)),
            cutout_factor=float(loss.get("cutoutFactor", consumer_loss.cutout_factor)),
            cap=float(loss.get("cap", consumer_loss.cap)),
        )
    return replace(
        base,
        gap_mm=float(data.get("gapMm", base.gap_mm)),
        secondary_spacing_mm=float(data.get("secondarySpacingMm", base.secondary_spacing_mm)),
        primary_spacing_mm=float(data.get("primarySpacingMm", base.primary_spacing_mm)),
        anchor_spacing_mm=float(data.get("anchorSpacingMm", base.anchor_spacing_mm)),
        footing_spacing_mm=float(data.get("footingSpacingMm", base.footing_spacing_mm)),
        consumer_loss=consumer_loss,
        screw_per_intersection=int(data.get("screwPerIntersection", base.screw_per_intersection)),
        show_advanced_overrides=bool(data.get("showAdvancedOverrides", base.show_advanced_overrides)),
        enable_cut_plan=bool(data.get("enableCutPlan", base.enable_cut_plan)),
        kerf_mm=int(data.get("kerfMm", base.kerf_mm)),
        min_offcut_mm=int(data.get("minOffcutMm", base.min_offcut_mm)),
    )


def load_job_dict(data: Dict[str, Any]) -> JsonLoadResult:
    plan_data = data.get("plan")
    if not plan_data:
        raise ValueError("JSON missing 'plan'.")
    plan = plan_from_dict(plan_data)
    product = product_from_dict(data.get("product"))
    ruleset = ruleset_from_dict(data.get("rules"))
    mode = str(data.get("fasteningMode") or product.fastening_modes[0])
    return JsonLoadResult(plan=plan, product=product, ruleset=ruleset, fastening_mode=mode)


def load_job_json(path: str | Path) -> JsonLoadResult:
    """
    Load job definition from JSON.
    - Missing "product" / "rules" fall back to config defaults.
    - Missing "fasteningMode" takes the product's first mode.
    The fastening mode is not checked here; calculate_quantities does that.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return load_job_dict(data)
