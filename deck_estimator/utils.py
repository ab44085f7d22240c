# deck_estimator/utils.py
# Small utilities used across the project:
# - timing context manager
# - half-up rounding (matches the rounding the UI layer displays)
# - simple JSON export for quantity results
#
# Keeps dependencies minimal (stdlib only).

from __future__ import annotations

import json
import math
import time
from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Iterator

from .types import CutPlan, Quantities, SubstructureQuantities


@contextmanager
def timer(label: str = "timer") -> Iterator[Dict[str, float]]:
    """
    Usage:
      with timer("estimate") as t:
          ...
      print(t["seconds"])
    """
    t0 = time.perf_counter()
    payload: Dict[str, float] = {}
    try:
        yield payload
    finally:
        payload["seconds"] = time.perf_counter() - t0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from -inf (Python's round() is banker's rounding)."""
    f = 10 ** digits
    return math.floor(value * f + 0.5) / f


def _to_jsonable(obj: Any) -> Any:
    """Convert dataclasses and other objects to JSON-serializable structures."""
    if is_dataclass(obj):
        return _to_jsonable(asdict(obj))
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(x) for x in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def cut_plan_to_dict(plan: CutPlan) -> Dict[str, Any]:
    out = _to_jsonable(plan)
    out["waste_m"] = plan.waste_m
    out["totals"] = {
        "required_mm": plan.required_total_mm,
        "dispensed_mm": plan.dispensed_mm,
        "waste_mm": plan.waste_mm,
        "leftover_mm": plan.leftover_mm,
    }
    return out


def substructure_to_dict(s: SubstructureQuantities) -> Dict[str, Any]:
    out = _to_jsonable(s)
    if s.detail is None:
        del out["detail"]
    else:
        hw = out["detail"]["hardware"]
        out["detail"]["hardware"] = {k: v for k, v in hw.items() if v is not None}
    return out


def quantities_to_dict(q: Quantities) -> Dict[str, Any]:
    """
    Convert Quantities to a JSON-friendly dict.
    Optional sections that are absent are left out rather than emitted as null.
    """
    out: Dict[str, Any] = {
        "area": _to_jsonable(q.area),
        "boards": _to_jsonable(q.boards),
        "substructure": substructure_to_dict(q.substructure),
        "anchors": {"qty": q.anchors.qty},
        "footings": {"qty": q.footings.qty},
        "fasteners": {
            k: v for k, v in _to_jsonable(q.fasteners).items() if v is not None
        },
    }
    if q.stairs is not None:
        out["stairs"] = _to_jsonable(q.stairs)
    if q.cut_plan is not None:
        out["cut_plan"] = cut_plan_to_dict(q.cut_plan)
    if q.ledger is not None:
        out["ledger"] = _to_jsonable(q.ledger)
    if q.posts is not None:
        out["posts"] = _to_jsonable(q.posts)
    if q.warnings:
        out["warnings"] = _to_jsonable(q.warnings)
    return out


def save_quantities_json(q: Quantities, path: str | Path, *, indent: int = 2) -> None:
    """Save quantities (and cut plan, if any) as JSON for debugging/integration."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(quantities_to_dict(q), f, ensure_ascii=False, indent=indent)
