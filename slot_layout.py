"""Slot layout for organizer panels.

Pure Python - no build123d imports, so the layout math can be tested standalone.

Coordinates are panel-local: origin at the panel's top-left corner, X right,
Y up. The panel interior therefore lies at negative Y and every slot is
anchored by its top-left corner.
"""

from __future__ import annotations

import logging
import math

from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Point = tuple[float, float]

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Points closer than this are treated as the same vertex.
POINT_EPS = 1e-9


class InvalidLayoutError(ValueError):
    """Raised when panel parameters cannot produce a valid slot layout."""


def _require_finite(owner: str, **values: float) -> None:
    # NaN slips through every ordered comparison, so check explicitly.
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidLayoutError(f"{owner} {name} must be a finite number, got {value!r}.")


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutConstants:
    # Solid margin kept around the panel edge (mm)
    border: float = 6.0
    # Gap between neighbouring slots (mm)
    spacing: float = 3.0
    corner_radius: float = 2.0
    # Straight pieces per arc
    arc_segments: int = 8

    # Lettered slots take 3/8 of the inner height on the organizer panel
    lettered_height_fraction: float = 0.375
    side_column_width_fraction: float = 0.2

    # Label glyph height relative to the slot height
    label_size_fraction: float = 1.0 / 9.0
    # Label depth relative to the panel thickness
    label_depth_fraction: float = 0.5

    def __post_init__(self) -> None:
        for name in ("border", "spacing", "corner_radius"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value >= 0):
                raise InvalidLayoutError(f"{name} must be a non-negative length, got {value!r}.")
        if not self.corner_radius > 0:
            raise InvalidLayoutError(f"corner_radius must be positive, got {self.corner_radius!r}.")
        if not self.arc_segments >= 1:
            raise InvalidLayoutError(f"Arcs need at least one segment, got {self.arc_segments!r}.")
        for name in (
            "lettered_height_fraction",
            "side_column_width_fraction",
            "label_size_fraction",
            "label_depth_fraction",
        ):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise InvalidLayoutError(f"{name} must be in (0, 1], got {value!r}.")


DEFAULT_CONSTANTS = LayoutConstants()


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PanelSpec:
    width: float
    height: float
    thickness: float
    border: float

    def __post_init__(self) -> None:
        _require_finite(
            "Panel", width=self.width, height=self.height, thickness=self.thickness, border=self.border
        )
        if not (self.width > 2 * self.border and self.height > 2 * self.border):
            raise InvalidLayoutError(
                f"Panel {self.width:.3f}x{self.height:.3f} mm leaves no room inside a "
                f"{self.border:g} mm border."
            )
        if not self.thickness > 0:
            raise InvalidLayoutError(f"Panel thickness must be positive, got {self.thickness:g} mm.")

    @property
    def inner_width(self) -> float:
        return self.width - 2 * self.border

    @property
    def inner_height(self) -> float:
        return self.height - 2 * self.border


@dataclass(frozen=True)
class SlotPlacement:
    index: int
    row: int
    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y - self.height

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class GridSpec:
    count_per_row: int
    container_width: float
    container_height: float
    spacing: float
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self) -> None:
        _require_finite(
            "Grid",
            container_width=self.container_width,
            container_height=self.container_height,
            spacing=self.spacing,
            x=self.x,
            y=self.y,
        )
        if not self.count_per_row >= 1:
            raise InvalidLayoutError(f"Need at least one slot per row, got {self.count_per_row}.")
        if not (self.slot_width > 0 and self.slot_height > 0):
            raise InvalidLayoutError(
                f"{self.count_per_row} slots per row do not fit a "
                f"{self.container_width:.3f}x{self.container_height:.3f} mm container "
                f"(slot would be {self.slot_width:.3f}x{self.slot_height:.3f} mm)."
            )

    @property
    def slot_width(self) -> float:
        inner_borders = (self.count_per_row - 1) * self.spacing
        return (self.container_width - inner_borders) / self.count_per_row

    @property
    def slot_height(self) -> float:
        return (self.container_height - self.spacing) / 2


@dataclass(frozen=True)
class SideColumnSpec:
    width: float
    height: float
    rows: int
    split_rows: int
    spacing: float
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self) -> None:
        _require_finite(
            "Side column", width=self.width, height=self.height, spacing=self.spacing, x=self.x, y=self.y
        )
        if not self.rows >= 1:
            raise InvalidLayoutError(f"Side column needs at least one row, got {self.rows}.")
        if not 0 <= self.split_rows <= self.rows:
            raise InvalidLayoutError(
                f"Split rows must be between 0 and {self.rows}, got {self.split_rows}."
            )
        if not self.slot_height > 0:
            raise InvalidLayoutError(
                f"{self.rows} rows do not fit a {self.height:.3f} mm tall side column."
            )
        if self.split_rows and not self.split_slot_width > 0:
            raise InvalidLayoutError(
                f"Side column {self.width:.3f} mm wide is too narrow to split."
            )

    @property
    def slot_height(self) -> float:
        return (self.height - self.spacing * (self.rows - 1)) / self.rows

    @property
    def split_slot_width(self) -> float:
        return (self.width - self.spacing) / 2


@dataclass(frozen=True)
class SlotOutline:
    width: float
    height: float
    corner_radius: float
    x: float
    y: float
    # Eight groups in traversal order (bevel, wall, fillet, wall, fillet, wall, fillet, bevel)
    segments: tuple[tuple[Point, ...], ...] = field(repr=False)

    @property
    def points(self) -> tuple[Point, ...]:
        """All vertices in traversal order, with coincident neighbours merged."""
        pts: list[Point] = []
        for group in self.segments:
            for p in group:
                if pts and _same_point(pts[-1], p):
                    continue
                pts.append(p)
        if len(pts) > 1 and _same_point(pts[0], pts[-1]):
            pts.pop()
        return tuple(pts)

    def closed_points(self) -> tuple[Point, ...]:
        pts = self.points
        return pts + (pts[0],)


@dataclass(frozen=True)
class LabelGlyph:
    index: int
    letter: str
    # Top-left corner of the glyph box
    x: float
    y: float
    size: float


# ---------------------------------------------------------------------------
# Outline generator
# ---------------------------------------------------------------------------

def _same_point(a: Point, b: Point) -> bool:
    return abs(a[0] - b[0]) <= POINT_EPS and abs(a[1] - b[1]) <= POINT_EPS


def arc_points(
    center: Point,
    radius: float,
    start_angle: float,
    end_angle: float,
    segments: int,
) -> tuple[Point, ...]:
    """Counter-clockwise arc from start_angle to end_angle (radians).

    An end angle at or below the start wraps by a full turn, so 1.5*pi -> 0 is a
    quarter arc.
    """
    if end_angle <= start_angle:
        end_angle += math.tau
    step = (end_angle - start_angle) / segments
    cx, cy = center
    pts = []
    for i in range(segments + 1):
        a = start_angle + step * i
        pts.append((cx + radius * math.cos(a), cy + radius * math.sin(a)))
    return tuple(pts)


def slot_outline(
    width: float,
    height: float,
    x: float,
    y: float,
    constants: LayoutConstants = DEFAULT_CONSTANTS,
) -> SlotOutline:
    """Outline of one lettered slot anchored at its top-left corner (x, y).

    Bottom corners are plain fillets. The left wall only covers the lower half of
    the slot; the top edge is a diagonal cut from the top-right fillet down to the
    left midpoint, softened by two short bevel arcs. The closing edge of the
    polygon is that diagonal.
    """
    r = constants.corner_radius
    n = constants.arc_segments
    _require_finite("Slot", width=width, height=height, x=x, y=y)
    if not (width > 4 * r and height > 4 * r):
        raise InvalidLayoutError(
            f"Slot {width:.3f}x{height:.3f} mm is too small for {r:g} mm corners "
            f"(both sides must exceed {4 * r:g} mm)."
        )

    x_l = x
    x_r = x + width
    y_top = y
    y_mid = y - height / 2
    y_bot = y - height
    pi = math.pi

    segments = (
        arc_points((x_l + r, y_mid - r), r, pi * 0.75, pi, n),
        ((x_l, y_mid - r), (x_l, y_bot + r)),
        arc_points((x_l + r, y_bot + r), r, pi, pi * 1.5, n),
        ((x_l + r, y_bot), (x_r - r, y_bot)),
        arc_points((x_r - r, y_bot + r), r, pi * 1.5, 0.0, n),
        ((x_r, y_bot + r), (x_r, y_top - r)),
        arc_points((x_r - r, y_top - r), r, 0.0, pi * 0.5, n),
        arc_points((x_r - 2 * r, y_top - r), r, pi * 0.5, pi * 0.75, n),
    )
    return SlotOutline(width=width, height=height, corner_radius=r, x=x, y=y, segments=segments)


# ---------------------------------------------------------------------------
# Grid / column layout
# ---------------------------------------------------------------------------

def grid_layout(grid: GridSpec) -> tuple[SlotPlacement, ...]:
    """Two rows of slots in reading order (left-to-right, then top-to-bottom)."""
    w = grid.slot_width
    h = grid.slot_height
    slots: list[SlotPlacement] = []
    offset_y = grid.y
    for row in range(2):
        offset_x = grid.x
        for col in range(grid.count_per_row):
            slots.append(
                SlotPlacement(
                    index=row * grid.count_per_row + col,
                    row=row,
                    x=offset_x,
                    y=offset_y,
                    width=w,
                    height=h,
                )
            )
            offset_x += w + grid.spacing
        offset_y -= h + grid.spacing

    logger.debug("Grid: %d slots of %.3fx%.3f mm", len(slots), w, h)
    return tuple(slots)


def side_column_layout(column: SideColumnSpec) -> tuple[SlotPlacement, ...]:
    """Split rows (two half-width slots) first, then full-width rows, top to bottom."""
    h = column.slot_height
    half_w = column.split_slot_width
    slots: list[SlotPlacement] = []
    offset_y = column.y

    for row in range(column.split_rows):
        for x in (column.x, column.x + half_w + column.spacing):
            slots.append(SlotPlacement(index=len(slots), row=row, x=x, y=offset_y, width=half_w, height=h))
        offset_y -= h + column.spacing

    for row in range(column.split_rows, column.rows):
        slots.append(SlotPlacement(index=len(slots), row=row, x=column.x, y=offset_y, width=column.width, height=h))
        offset_y -= h + column.spacing

    return tuple(slots)


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

def letter_for_index(index: int) -> str:
    return ALPHABET[index % len(ALPHABET)]


def slot_label(slot: SlotPlacement, constants: LayoutConstants = DEFAULT_CONSTANTS) -> LabelGlyph:
    size = slot.height * constants.label_size_fraction
    return LabelGlyph(
        index=slot.index,
        letter=letter_for_index(slot.index),
        x=slot.x,
        y=slot.y - size,
        size=size,
    )


# ---------------------------------------------------------------------------
# Panel layouts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrganizerLayout:
    panel: PanelSpec
    grid: GridSpec
    lettered_slots: tuple[SlotPlacement, ...]
    labels: tuple[LabelGlyph, ...]
    side_columns: tuple[tuple[SlotPlacement, ...], ...]


@dataclass(frozen=True)
class BeadLayout:
    panel: PanelSpec
    grid: GridSpec
    slots: tuple[SlotPlacement, ...]
    labels: tuple[LabelGlyph, ...]


def _check_outlines(slots: tuple[SlotPlacement, ...], constants: LayoutConstants) -> None:
    # All grid slots share one size.
    if slots:
        s = slots[0]
        slot_outline(s.width, s.height, s.x, s.y, constants)


def organizer_layout(
    width: float,
    height: float,
    thickness: float,
    lettered_slots_per_row: int,
    side_column_rows: int,
    side_column_split_rows: int,
    constants: LayoutConstants = DEFAULT_CONSTANTS,
) -> OrganizerLayout:
    """Lettered slots across the top, two side columns beneath them (sizes in mm)."""
    b = constants.border
    s = constants.spacing
    panel = PanelSpec(width=width, height=height, thickness=thickness, border=b)

    lettered_w = width - b * 2
    lettered_h = constants.lettered_height_fraction * (height - b * 2)
    grid = GridSpec(
        count_per_row=lettered_slots_per_row,
        container_width=lettered_w,
        container_height=lettered_h,
        spacing=s,
        x=b,
        y=-b,
    )
    slots = grid_layout(grid)
    _check_outlines(slots, constants)

    column_w = (width - (b * 2 + s * 2)) * constants.side_column_width_fraction
    column_h = height - (b * 2 + (lettered_h + s))
    column_y = -height + b + column_h

    columns = tuple(
        side_column_layout(
            SideColumnSpec(
                width=column_w,
                height=column_h,
                rows=side_column_rows,
                split_rows=side_column_split_rows,
                spacing=s,
                x=x,
                y=column_y,
            )
        )
        for x in (b, width - b - column_w)
    )
    r = constants.corner_radius
    for rect in columns[0]:
        if not (rect.width > 2 * r and rect.height > 2 * r):
            raise InvalidLayoutError(
                f"Side column slot {rect.width:.3f}x{rect.height:.3f} mm is too small "
                f"for {r:g} mm corners."
            )

    logger.debug(
        "Organizer layout %.1fx%.1f mm: %d lettered slots, side columns %.3fx%.3f mm",
        width,
        height,
        len(slots),
        column_w,
        column_h,
    )
    return OrganizerLayout(
        panel=panel,
        grid=grid,
        lettered_slots=slots,
        labels=tuple(slot_label(slot, constants) for slot in slots),
        side_columns=columns,
    )


def bead_layout(
    width: float,
    height: float,
    thickness: float,
    slots_per_row: int,
    constants: LayoutConstants = DEFAULT_CONSTANTS,
) -> BeadLayout:
    """Two rows of lettered slots filling the whole inner area (sizes in mm)."""
    b = constants.border
    panel = PanelSpec(width=width, height=height, thickness=thickness, border=b)
    grid = GridSpec(
        count_per_row=slots_per_row,
        container_width=panel.inner_width,
        container_height=panel.inner_height,
        spacing=constants.spacing,
        x=b,
        y=-b,
    )
    slots = grid_layout(grid)
    _check_outlines(slots, constants)

    logger.debug("Bead layout %.1fx%.1f mm: %d slots", width, height, len(slots))
    return BeadLayout(
        panel=panel,
        grid=grid,
        slots=slots,
        labels=tuple(slot_label(slot, constants) for slot in slots),
    )
