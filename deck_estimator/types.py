# deck_estimator/types.py
# Core data structures for deck quantity estimation and board cut planning.
# Keep this file dependency-light so it can be imported everywhere.
# All linear values are millimeters, areas in the outputs are square meters.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple

MODES = ("consumer", "pro")
FASTENING_MODES = ("clip", "screw")


# ----------------------------
# Errors
# ----------------------------

class DeckInputError(ValueError):
    """Configuration-level input the caller must fix (never raised for geometry)."""


class InvalidFasteningModeError(DeckInputError):
    def __init__(self, mode: str, valid_modes: Sequence[str]):
        self.mode = mode
        self.valid_modes = tuple(valid_modes)
        super().__init__(
            f"Fastening mode {mode!r} not supported by product; valid modes: {list(self.valid_modes)}"
        )


class RowExceedsStockError(DeckInputError):
    def __init__(self, row_id: str, length_mm: int, stock_length_mm: int):
        self.row_id = row_id
        self.length_mm = length_mm
        self.stock_length_mm = stock_length_mm
        super().__init__(
            f"Row {row_id} needs {length_mm} mm but stock length is {stock_length_mm} mm"
        )


# ----------------------------
# Geometry
# ----------------------------

@dataclass(frozen=True)
class Point:
    x_mm: float
    y_mm: float


Ring = Tuple[Point, ...]


def ring_from_xy(coords: Iterable[Sequence[float]]) -> Ring:
    return tuple(Point(float(c[0]), float(c[1])) for c in coords)


@dataclass(frozen=True)
class Polygon:
    """Outer boundary plus cutout rings. Rings are implicitly closed."""
    outer: Ring
    holes: Tuple[Ring, ...] = ()

    @classmethod
    def from_xy(
        cls,
        outer: Iterable[Sequence[float]],
        holes: Iterable[Iterable[Sequence[float]]] = (),
    ) -> "Polygon":
        return cls(outer=ring_from_xy(outer), holes=tuple(ring_from_xy(h) for h in holes))

    def with_holes(self, extra: Iterable[Ring]) -> "Polygon":
        return Polygon(outer=self.outer, holes=self.holes + tuple(extra))


# ----------------------------
# Inputs
# ----------------------------

@dataclass(frozen=True)
class StairConfig:
    """One flight of stairs."""
    id: str
    width_mm: float
    step_count: int
    step_depth_mm: float
    step_height_mm: float


@dataclass(frozen=True)
class StairsSpec:
    enabled: bool = False
    footprint_polygon: Optional[Polygon] = None
    items: Tuple[StairConfig, ...] = ()


@dataclass(frozen=True)
class SubstructureOverrides:
    """Hand-entered member lengths that replace the computed totals."""
    primary_len_mm: Optional[float] = None
    secondary_len_mm: Optional[float] = None


@dataclass(frozen=True)
class Plan:
    """Geometry of one estimation request."""
    polygon: Polygon
    board_width_mm: float
    decking_direction_deg: float = 0.0
    stairs: Optional[StairsSpec] = None
    unit: str = "mm"

    # Outer edge indices fixed to a wall (edge i runs from vertex i to i+1)
    attached_edge_indices: Tuple[int, ...] = ()

    # Ground to finished surface; 0 means posts are not estimated
    deck_height_mm: float = 0.0

    # Only honored when Ruleset.show_advanced_overrides is on
    substructure_overrides: Optional[SubstructureOverrides] = None

    def __post_init__(self):
        if self.unit != "mm":
            raise ValueError(f"Plan.unit must be 'mm', got {self.unit!r}")
        if self.board_width_mm <= 0:
            raise ValueError(f"board_width_mm must be > 0, got {self.board_width_mm}")


@dataclass(frozen=True)
class Product:
    """Decking board catalog entry, supplied by the caller."""
    id: str
    name: str
    stock_length_mm: int
    width_options_mm: Tuple[int, ...]
    thickness_mm: float
    gap_mm: float
    fastening_modes: Tuple[str, ...] = FASTENING_MODES

    def __post_init__(self):
        if self.stock_length_mm <= 0:
            raise ValueError(f"stock_length_mm must be > 0 for {self.id}")
        for m in self.fastening_modes:
            if m not in FASTENING_MODES:
                raise ValueError(f"Unknown fastening mode {m!r} for {self.id}")


@dataclass(frozen=True)
class ConsumerLossRule:
    base: float
    vertex_factor: float
    cutout_factor: float
    cap: float


@dataclass(frozen=True)
class Ruleset:
    mode: str
    gap_mm: float
    secondary_spacing_mm: float
    primary_spacing_mm: float
    anchor_spacing_mm: float
    footing_spacing_mm: float
    consumer_loss: ConsumerLossRule
    screw_per_intersection: int
    show_advanced_overrides: bool = False
    enable_cut_plan: bool = False

    # Pro cut planning
    kerf_mm: int = 0
    min_offcut_mm: int = 50

    # Substructure stock (steel pipe) estimate
    substructure_stock_length_mm: int = 6000
    substructure_loss_rate: float = 0.05

    def __post_init__(self):
        if self.mode not in MODES:
            raise ValueError(f"Ruleset.mode must be one of {MODES}, got {self.mode!r}")
        for name in ("secondary_spacing_mm", "primary_spacing_mm", "anchor_spacing_mm", "footing_spacing_mm"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Ruleset.{name} must be > 0")


# ----------------------------
# Outputs
# ----------------------------

@dataclass(frozen=True)
class ValidationIssue:
    level: str   # "ERROR" or "WARN"
    code: str
    message: str


@dataclass(frozen=True)
class AreaBreakdown:
    deck_m2: float
    stairs_m2: float
    total_m2: float


@dataclass(frozen=True)
class BoardQuantities:
    qty: int
    area_m2: float
    used_length_mm: int
    stock_length_mm: int
    row_count: int
    loss_rate: float                             # formula rate applied (consumer)
    effective_loss_rate: Optional[float] = None  # measured from the cut plan (pro)


@dataclass(frozen=True)
class LengthGroup:
    length_mm: int   # nearest 100 mm
    qty: int


@dataclass(frozen=True)
class MemberDetail:
    """One member family (bearers or joists), cut list grouped by length."""
    total_length_m: float
    pieces: int
    inner_pieces: int
    rim_pieces: int
    breakdown: Tuple[LengthGroup, ...]
    stock_pieces: int


@dataclass(frozen=True)
class Hardware:
    anchor_bolts: int
    angle_brackets: int
    joist_hangers: int
    self_drilling_screws: int
    base_plates: Optional[int] = None   # elevated decks only
    post_caps: Optional[int] = None


@dataclass(frozen=True)
class SubstructureDetail:
    bearer: MemberDetail
    joist: MemberDetail
    hardware: Hardware


@dataclass(frozen=True)
class SubstructureQuantities:
    primary_len_m: float
    secondary_len_m: float
    primary_stock_pieces: int = 0
    secondary_stock_pieces: int = 0
    detail: Optional[SubstructureDetail] = None


@dataclass(frozen=True)
class Count:
    qty: int


@dataclass(frozen=True)
class Fasteners:
    mode: str
    intersections: int
    clips: Optional[int] = None
    screws: Optional[int] = None


@dataclass(frozen=True)
class StairItemResult:
    id: str
    step_count: int
    unit_rise_mm: float
    unit_run_mm: float
    width_mm: float


@dataclass(frozen=True)
class StairResult:
    enabled: bool
    items: Tuple[StairItemResult, ...]
    tread_area_m2: float
    riser_area_m2: float
    total_area_m2: float


@dataclass(frozen=True)
class Offcut:
    length_mm: int
    source_row_id: str
    source_id: str   # stock piece the material came from, e.g. "S3"


@dataclass(frozen=True)
class CutRow:
    row_id: str
    required_length_mm: int
    source_kind: str   # "stock" or "offcut"
    source_id: str
    remainder_mm: int  # material left after the cut (pooled or wasted)

    def __post_init__(self):
        if self.source_kind not in ("stock", "offcut"):
            raise ValueError("CutRow.source_kind must be 'stock' or 'offcut'")


@dataclass(frozen=True)
class CutPlan:
    stock_length_mm: int
    rows: Tuple[CutRow, ...]
    stock_pieces: int
    waste_mm: int
    leftover_mm: int
    offcut_pool: Tuple[Offcut, ...] = ()

    @property
    def waste_m(self) -> float:
        return self.waste_mm / 1000

    @property
    def required_total_mm(self) -> int:
        return sum(r.required_length_mm for r in self.rows)

    @property
    def dispensed_mm(self) -> int:
        return self.stock_pieces * self.stock_length_mm


@dataclass(frozen=True)
class LedgerQuantities:
    length_m: float
    anchor_bolts_qty: int


@dataclass(frozen=True)
class PostQuantities:
    qty: int
    each_length_mm: int
    total_length_m: float
    stock_pieces: int


@dataclass(frozen=True)
class Quantities:
    """Immutable result of one calculate_quantities call."""
    area: AreaBreakdown
    boards: BoardQuantities
    substructure: SubstructureQuantities
    anchors: Count
    footings: Count
    fasteners: Fasteners
    stairs: Optional[StairResult] = None
    cut_plan: Optional[CutPlan] = None
    ledger: Optional[LedgerQuantities] = None
    posts: Optional[PostQuantities] = None
    warnings: Tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def is_degraded(self) -> bool:
        return any(w.level == "ERROR" for w in self.warnings)
