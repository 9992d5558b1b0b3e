"""Lettered organizer panel in build123d.

Panel layout:
- Two rows of lettered slots (A, B, C, ...) across the top 3/8 of the panel
- Two side columns (left and right) of rounded slots beneath them; the first
  `side_column_split_rows` rows of each column are split into two half-width bays
- Letters cut into the top face next to each slot (or raised for 2-color printing)

Run:
  organizer-panel

Export:
  organizer-panel --no-show --stl organizer.stl
  organizer-panel --no-show --step organizer.step --template-svg organizer.svg
  organizer-panel --width 8 --height 6 --lettered-slots-per-row 10 --stl small.stl

Notes:
- Width/height parameters are inches, thickness is millimeters.
- Layout coordinates are anchored at the panel's top-left corner; the exported
  solid is centered on the origin.
"""

from __future__ import annotations

import logging

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from panel_build123d import (
    TEXT_MODES,
    PanelCutouts,
    PanelFinish,
    build_panel,
    export_solids,
    export_template,
    show_solids,
)
from panel_params import (
    ORGANIZER_PARAMETERS,
    ParameterDefinition,
    add_parameter_arguments,
    apply_parameters,
    inches_to_mm,
    initial_parameters,
    parameter_dicts,
    parameters_from_args,
)
from slot_layout import (
    DEFAULT_CONSTANTS,
    InvalidLayoutError,
    LayoutConstants,
    OrganizerLayout,
    organizer_layout,
    slot_outline,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

PARAMETER_DEFINITIONS: tuple[ParameterDefinition, ...] = ORGANIZER_PARAMETERS


@dataclass(frozen=True)
class OrganizerPanelParams:
    # Panel (width/height in inches, thickness in mm)
    width_in: float = 10.0
    height_in: float = 7.0
    thickness: float = 1.0

    # Lettered slots: two rows of this many
    lettered_slots_per_row: int = 13

    # Side columns
    side_column_rows: int = 3
    # Rows (from the top) split into two half-width slots
    side_column_split_rows: int = 1

    finish: PanelFinish = PanelFinish()
    layout: LayoutConstants = DEFAULT_CONSTANTS

    @property
    def width(self) -> float:
        return inches_to_mm(self.width_in)

    @property
    def height(self) -> float:
        return inches_to_mm(self.height_in)


def get_parameter_definitions() -> list[dict[str, Any]]:
    return parameter_dicts(PARAMETER_DEFINITIONS)


# ---------------------------------------------------------------------------
# Layout / build
# ---------------------------------------------------------------------------

def compute_layout(params: OrganizerPanelParams) -> OrganizerLayout:
    return organizer_layout(
        params.width,
        params.height,
        params.thickness,
        params.lettered_slots_per_row,
        params.side_column_rows,
        params.side_column_split_rows,
        params.layout,
    )


def panel_cutouts(layout: OrganizerLayout, constants: LayoutConstants = DEFAULT_CONSTANTS) -> PanelCutouts:
    return PanelCutouts(
        panel=layout.panel,
        outlines=tuple(slot_outline(s.width, s.height, s.x, s.y, constants) for s in layout.lettered_slots),
        rects=tuple(rect for column in layout.side_columns for rect in column),
        labels=layout.labels,
    )


def build_organizer_panel(params: OrganizerPanelParams) -> list[object]:
    layout = compute_layout(params)
    return build_panel(panel_cutouts(layout, params.layout), params.finish, params.layout)


def generate(values: Mapping[str, Any] | None = None, params: OrganizerPanelParams | None = None) -> list[object]:
    """Entry point for hosts: parameter name -> value mapping in, solids out.

    Parameters missing from `values` keep their declared initial value.
    """
    if params is None:
        params = initial_parameters(PARAMETER_DEFINITIONS, OrganizerPanelParams())
    params = apply_parameters(PARAMETER_DEFINITIONS, params, values or {})
    return build_organizer_panel(params)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Sequence[str] | None = None) -> None:
    import argparse

    from logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Lettered organizer panel with side columns")
    add_parameter_arguments(parser, PARAMETER_DEFINITIONS)
    parser.add_argument(
        "--text-mode",
        choices=TEXT_MODES,
        default="deboss",
        help="deboss: letters cut into the panel; emboss: raised letters as a separate solid",
    )
    parser.add_argument("--no-labels", action="store_true", help="Do not stamp slot letters")
    parser.add_argument("--font", default=None, help="Label font (default: Arial)")
    parser.add_argument("--stl", type=Path, default=None, help="Export STL to this path")
    parser.add_argument("--step", type=Path, default=None, help="Export STEP to this path")
    parser.add_argument("--template-svg", type=Path, default=None, help="Export a 1:1 SVG template")
    parser.add_argument("--template-dxf", type=Path, default=None, help="Export a 1:1 DXF template")
    parser.add_argument(
        "--no-export-centered",
        action="store_true",
        help="Keep the top-left panel corner at the origin instead of centering",
    )
    parser.add_argument("--no-show", action="store_true", help="Do not send the model to the OCP viewer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    finish = replace(
        PanelFinish(),
        text_mode=args.text_mode,
        label_enable=not args.no_labels,
        centered=not args.no_export_centered,
    )
    if args.font is not None:
        finish = replace(finish, label_font=args.font)

    params = replace(initial_parameters(PARAMETER_DEFINITIONS, OrganizerPanelParams()), finish=finish)
    params = apply_parameters(PARAMETER_DEFINITIONS, params, parameters_from_args(PARAMETER_DEFINITIONS, args))

    try:
        layout = compute_layout(params)
    except InvalidLayoutError as ex:
        parser.error(str(ex))

    logger.info(
        "Organizer panel %.1fx%.1fx%.1f mm, %d lettered slots, %d side column slots",
        layout.panel.width,
        layout.panel.height,
        layout.panel.thickness,
        len(layout.lettered_slots),
        sum(len(c) for c in layout.side_columns),
    )

    cutouts = panel_cutouts(layout, params.layout)

    if args.template_svg is not None or args.template_dxf is not None:
        export_template(cutouts, finish, params.layout, svg=args.template_svg, dxf=args.template_dxf)

    solids = build_panel(cutouts, finish, params.layout)
    export_solids(solids, stl=args.stl, step=args.step)

    if not args.no_show:
        show_solids(
            solids,
            names=["panel", "labels"][: len(solids)],
            colors=[finish.base_color, finish.label_color][: len(solids)],
        )


if __name__ == "__main__":
    main()
