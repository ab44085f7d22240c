# deck_estimator/sample_data.py
# Sample deck outlines and random row lists for quick checks and benchmarking.
# The presets mirror the shapes the drawing UI offers (rectangle, L, T, circle).

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .types import Polygon


def rectangle(w_mm: float = 1000, h_mm: float = 1000) -> Polygon:
    return Polygon.from_xy([(0, 0), (w_mm, 0), (w_mm, h_mm), (0, h_mm)])


def l_shape() -> Polygon:
    return Polygon.from_xy(
        [(0, 0), (1000, 0), (1000, 200), (700, 200), (700, 1200), (0, 1200)]
    )


def t_shape() -> Polygon:
    return Polygon.from_xy(
        [
            (600, 0),
            (1600, 0),
            (1600, 200),
            (1000, 200),
            (1000, 1200),
            (800, 1200),
            (800, 200),
            (600, 200),
        ]
    )


def circle(radius_mm: float = 500, segments: int = 16) -> Polygon:
    pts = []
    for i in range(segments):
        a = i / segments * 2 * math.pi
        pts.append((radius_mm + math.cos(a) * radius_mm, radius_mm + math.sin(a) * radius_mm))
    return Polygon.from_xy(pts)


def rectangle_with_cutout(
    w_mm: float = 4000,
    h_mm: float = 2000,
    cutout: Tuple[float, float, float, float] = (1500, 500, 2500, 1500),
) -> Polygon:
    """Rectangle with one rectangular hole given as (x0, y0, x1, y1)."""
    x0, y0, x1, y1 = cutout
    return Polygon.from_xy(
        [(0, 0), (w_mm, 0), (w_mm, h_mm), (0, h_mm)],
        holes=[[(x0, y0), (x1, y0), (x1, y1), (x0, y1)]],
    )


SHAPE_PRESETS: Dict[str, Polygon] = {
    "rectangle": rectangle(),
    "l_shape": l_shape(),
    "t_shape": t_shape(),
    "circle": circle(),
}


@dataclass(frozen=True)
class RandomRowsConfig:
    seed: int = 123
    n_rows: int = 40
    length_range: Tuple[int, int] = (300, 3000)

    # probability a row is a short fragment next to a cutout
    p_fragment: float = 0.25
    fragment_range: Tuple[int, int] = (80, 600)


def generate_random_rows(cfg: RandomRowsConfig) -> List[Tuple[str, int]]:
    """
    Generate (row_id, length_mm) pairs resembling a deck with a few cutouts:
    mostly long rows plus some short fragments.
    """
    rnd = random.Random(cfg.seed)
    rows: List[Tuple[str, int]] = []
    for i in range(cfg.n_rows):
        if rnd.random() < cfg.p_fragment:
            length = rnd.randint(*cfg.fragment_range)
        else:
            length = rnd.randint(*cfg.length_range)
        rows.append((f"R{i}", length))
    return rows
