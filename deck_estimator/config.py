# deck_estimator/config.py
# Centralized defaults and configuration helpers.
# Keeps "magic numbers" (spacings, loss rule, default product) in one place.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .types import FASTENING_MODES, ConsumerLossRule, Product, Ruleset


@dataclass(frozen=True)
class Defaults:
    # Typical composite decking board (adjust to your supplier)
    product_id: str = "DN34"
    product_name: str = "DN34"
    stock_length_mm: int = 3000
    width_options_mm: Tuple[int, ...] = (95, 120, 140, 150)
    thickness_mm: float = 25
    board_width_mm: int = 140

    # Board gap, same for consumer and pro
    gap_mm: float = 5

    # Substructure spacing (mm)
    secondary_spacing_mm: float = 400   # joists
    primary_spacing_mm: float = 600     # bearers
    anchor_spacing_mm: float = 1000
    footing_spacing_mm: float = 1800

    consumer_loss: ConsumerLossRule = field(
        default_factory=lambda: ConsumerLossRule(base=0.03, vertex_factor=0.003, cutout_factor=0.005, cap=0.06)
    )
    screw_per_intersection: int = 2

    # Pro cut planning
    kerf_mm: int = 0
    min_offcut_mm: int = 50

    # Steel pipe stock for bearers/joists/posts
    substructure_stock_length_mm: int = 6000
    substructure_loss_rate: float = 0.05


DEFAULTS = Defaults()


def make_default_product(
    *,
    stock_length_mm: Optional[int] = None,
    fastening_modes: Optional[Tuple[str, ...]] = None,
) -> Product:
    """
    Convenience factory for the default decking board.
    """
    return Product(
        id=DEFAULTS.product_id,
        name=DEFAULTS.product_name,
        stock_length_mm=int(stock_length_mm if stock_length_mm is not None else DEFAULTS.stock_length_mm),
        width_options_mm=DEFAULTS.width_options_mm,
        thickness_mm=DEFAULTS.thickness_mm,
        gap_mm=DEFAULTS.gap_mm,
        fastening_modes=tuple(fastening_modes) if fastening_modes is not None else FASTENING_MODES,
    )


def make_default_ruleset(mode: str = "consumer", *, enable_cut_plan: Optional[bool] = None) -> Ruleset:
    """
    Default rules; pro mode turns the cut plan on unless told otherwise.
    """
    if enable_cut_plan is None:
        enable_cut_plan = mode == "pro"
    return Ruleset(
        mode=mode,
        gap_mm=DEFAULTS.gap_mm,
        secondary_spacing_mm=DEFAULTS.secondary_spacing_mm,
        primary_spacing_mm=DEFAULTS.primary_spacing_mm,
        anchor_spacing_mm=DEFAULTS.anchor_spacing_mm,
        footing_spacing_mm=DEFAULTS.footing_spacing_mm,
        consumer_loss=DEFAULTS.consumer_loss,
        screw_per_intersection=DEFAULTS.screw_per_intersection,
        show_advanced_overrides=mode == "pro",
        enable_cut_plan=bool(enable_cut_plan),
        kerf_mm=DEFAULTS.kerf_mm,
        min_offcut_mm=DEFAULTS.min_offcut_mm,
        substructure_stock_length_mm=DEFAULTS.substructure_stock_length_mm,
        substructure_loss_rate=DEFAULTS.substructure_loss_rate,
    )


def parse_direction_text(text: str) -> float:
    """
    Parse '90', '90deg', '45°' -> degrees as float.
    """
    s = text.strip().lower().replace("°", "").replace("deg", "").strip()
    if not s:
        raise ValueError("direction must be a number of degrees, e.g. '90'")
    return float(s)


def parse_modes_text(text: str) -> Tuple[str, ...]:
    """
    Parse 'clip,screw' -> ("clip", "screw")
    """
    vals = tuple(v.strip().lower() for v in text.split(",") if v.strip() != "")
    for v in vals:
        if v not in FASTENING_MODES:
            raise ValueError(f"Unknown fastening mode {v!r}; expected one of {FASTENING_MODES}")
    if not vals:
        raise ValueError("At least one fastening mode is required")
    return vals
