"""build123d assembly shared by the organizer and bead panels.

The layout (see `slot_layout`) is computed first; this module only turns it into
solids:
- Base plate with every slot cut through
- Letter labels, either cut into the plate (deboss) or raised as a separate
  solid for 2-color printing (emboss)
- STL/STEP export and a 1:1 SVG/DXF cut template

Coordinates follow `slot_layout`: XY origin at the panel's top-left corner, Y up,
Z up from the bottom face. `finish_part` moves the result so the panel is
centered on the origin.
"""

from __future__ import annotations

import logging
import os

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from build123d import (
    Align,
    Box,
    BuildPart,
    BuildSketch,
    Color,
    FontStyle,
    Location,
    Locations,
    Mode,
    Plane,
    Polygon,
    Rectangle,
    RectangleRounded,
    Text,
    extrude,
    export_step,
    export_stl,
)
from build123d.exporters import ExportDXF, ExportSVG

from slot_layout import DEFAULT_CONSTANTS, LabelGlyph, LayoutConstants, PanelSpec, SlotOutline, SlotPlacement

logger = logging.getLogger(__name__)

TextMode = Literal["deboss", "emboss"]
TEXT_MODES: tuple[str, ...] = ("deboss", "emboss")


def _ocp_port(default: int = 3939) -> int:
    try:
        raw = os.environ.get("OCP_VSCODE_PORT") or os.environ.get("OCP_PORT") or str(default)
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class PanelFinish:
    # Labels
    label_enable: bool = True
    label_font: str = "Arial"
    label_font_style: FontStyle = FontStyle.BOLD
    # - deboss: letters cut into the top of the plate
    # - emboss: letters raised on top, returned as a separate solid
    text_mode: TextMode = "deboss"

    base_color: str = "green"
    label_color: str = "white"

    # Cut-outs start below the plate and end above it so faces never coincide.
    cut_overshoot: float = 0.2

    # Move exported/displayed solids so the panel center sits at (0, 0).
    centered: bool = True

    def __post_init__(self) -> None:
        if self.text_mode not in TEXT_MODES:
            raise ValueError(f"text_mode must be one of {TEXT_MODES}, got {self.text_mode!r}")


@dataclass(frozen=True)
class PanelCutouts:
    panel: PanelSpec
    # Lettered slots (bevelled outline polygons)
    outlines: tuple[SlotOutline, ...]
    # Plain rounded-rectangle slots
    rects: tuple[SlotPlacement, ...]
    labels: tuple[LabelGlyph, ...]


# ---------------------------------------------------------------------------
# Sketch helpers
# ---------------------------------------------------------------------------

def _add_slot_faces(cutouts: PanelCutouts, constants: LayoutConstants) -> None:
    # Must be called inside an active BuildSketch.
    for outline in cutouts.outlines:
        Polygon(*outline.points, align=None)

    for rect in cutouts.rects:
        with Locations((rect.x, rect.y)):
            RectangleRounded(rect.width, rect.height, constants.corner_radius, align=(Align.MIN, Align.MAX))


def _add_label_text(labels: Sequence[LabelGlyph], finish: PanelFinish) -> None:
    # Must be called inside an active BuildSketch. Each glyph is anchored by the
    # top-left corner of its box.
    for glyph in labels:
        with Locations((glyph.x, glyph.y)):
            Text(
                glyph.letter,
                font_size=glyph.size,
                font=finish.label_font,
                font_style=finish.label_font_style,
                align=(Align.MIN, Align.MAX),
            )


def label_depth(panel: PanelSpec, constants: LayoutConstants = DEFAULT_CONSTANTS) -> float:
    return panel.thickness * constants.label_depth_fraction


# ---------------------------------------------------------------------------
# Build functions
# ---------------------------------------------------------------------------

def build_base(
    cutouts: PanelCutouts,
    finish: PanelFinish,
    constants: LayoutConstants = DEFAULT_CONSTANTS,
) -> "object":
    """Base plate with all slots cut through (and letters cut in for deboss)."""
    panel = cutouts.panel
    cut_z0 = -finish.cut_overshoot
    cut_h = panel.thickness + 2 * finish.cut_overshoot

    logger.debug(
        "Base %.3fx%.3fx%.3f mm: %d outlined slots, %d rounded slots",
        panel.width,
        panel.height,
        panel.thickness,
        len(cutouts.outlines),
        len(cutouts.rects),
    )

    with BuildPart() as p:
        Box(
            panel.width,
            panel.height,
            panel.thickness,
            align=(Align.MIN, Align.MAX, Align.MIN),
            mode=Mode.ADD,
        )

        with BuildSketch(Plane.XY.offset(cut_z0)) as sk:
            _add_slot_faces(cutouts, constants)
        extrude(to_extrude=sk.sketch, amount=cut_h, mode=Mode.SUBTRACT)

        if finish.label_enable and finish.text_mode == "deboss" and cutouts.labels:
            depth = label_depth(panel, constants)
            with BuildSketch(Plane.XY.offset(panel.thickness - depth)) as label_sk:
                _add_label_text(cutouts.labels, finish)
            extrude(to_extrude=label_sk.sketch, amount=depth + finish.cut_overshoot, mode=Mode.SUBTRACT)

    return p.part


def build_labels(
    cutouts: PanelCutouts,
    finish: PanelFinish,
    constants: LayoutConstants = DEFAULT_CONSTANTS,
) -> "object":
    """Raised letters sitting on top of the plate (emboss mode)."""
    panel = cutouts.panel
    with BuildPart() as p:
        with BuildSketch(Plane.XY.offset(panel.thickness)) as sk:
            _add_label_text(cutouts.labels, finish)
        extrude(to_extrude=sk.sketch, amount=label_depth(panel, constants), mode=Mode.ADD)
    return p.part


def finish_part(obj: object, panel: PanelSpec, finish: PanelFinish, color: str) -> object:
    if finish.centered:
        # Keep Z unchanged; only move the panel center to the XY origin.
        obj = obj.moved(Location((-panel.width / 2, panel.height / 2, 0)))
    obj.color = Color(color)
    return obj


def build_panel(
    cutouts: PanelCutouts,
    finish: PanelFinish,
    constants: LayoutConstants = DEFAULT_CONSTANTS,
) -> list[object]:
    """Return `[base]`, or `[base, labels]` when the letters are embossed."""
    base = finish_part(build_base(cutouts, finish, constants), cutouts.panel, finish, finish.base_color)
    solids = [base]

    if finish.label_enable and finish.text_mode == "emboss" and cutouts.labels:
        labels = build_labels(cutouts, finish, constants)
        solids.append(finish_part(labels, cutouts.panel, finish, finish.label_color))

    return solids


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def export_solids(solids: Sequence[object], *, stl: Path | None = None, step: Path | None = None) -> None:
    if not solids:
        return

    if len(solids) == 1:
        obj = solids[0]
    else:
        from build123d import Compound

        obj = Compound(list(solids))

    if stl is not None:
        export_stl(obj, stl)
        logger.info("Wrote STL %s", stl)
    if step is not None:
        export_step(obj, step)
        logger.info("Wrote STEP %s", step)


def export_template(
    cutouts: PanelCutouts,
    finish: PanelFinish,
    constants: LayoutConstants = DEFAULT_CONSTANTS,
    *,
    svg: Path | None = None,
    dxf: Path | None = None,
) -> None:
    """Write a 1:1 paper template with outline, slot and label layers."""
    panel = cutouts.panel

    with BuildSketch(Plane.XY) as outline_sk:
        Rectangle(panel.width, panel.height, align=(Align.MIN, Align.MAX))

    with BuildSketch(Plane.XY) as slots_sk:
        _add_slot_faces(cutouts, constants)

    layers = [("outline", outline_sk.sketch), ("slots", slots_sk.sketch)]

    if finish.label_enable and cutouts.labels:
        with BuildSketch(Plane.XY) as labels_sk:
            _add_label_text(cutouts.labels, finish)
        layers.append(("labels", labels_sk.sketch))

    if svg is not None:
        exp = ExportSVG(margin=5, line_weight=0.18)
        for name, shape in layers:
            exp.add_layer(name)
            exp.add_shape(shape, layer=name)
        exp.write(svg)
        logger.info("Wrote SVG template %s", svg)

    if dxf is not None:
        exp = ExportDXF()
        for name, shape in layers:
            exp.add_layer(name)
            exp.add_shape(shape, layer=name)
        exp.write(dxf)
        logger.info("Wrote DXF template %s", dxf)


# ---------------------------------------------------------------------------
# Viewer
# ---------------------------------------------------------------------------

def show_solids(solids: Sequence[object], names: Sequence[str], colors: Sequence[str]) -> None:
    """Display in the OCP CAD Viewer; print instructions if it is not reachable."""
    from ocp_vscode import Camera, show

    try:
        show(
            *solids,
            names=list(names),
            colors=list(colors),
            reset_camera=Camera.RESET,
            grid=True,
            port=_ocp_port(),
        )
    except RuntimeError as ex:
        print("\nOCP viewer is not reachable.")
        print("- If you're using the VS Code extension: open 'OCP CAD Viewer' and ensure the backend is running.")
        print("- Or start the standalone viewer with: python -m ocp_vscode --port 3939")
        print(f"\nDetails: {ex}")
