"""Bead organizer panel in build123d.

Two rows of lettered bead slots filling the whole inner area of the panel.
Same slot shape and letters as the organizer panel, without side columns.

Run:
  bead-panel

Export:
  bead-panel --no-show --stl beads.stl
  bead-panel --slots-per-row 8 --text-mode emboss --stl beads.stl
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
    BEAD_PARAMETERS,
    ParameterDefinition,
    add_parameter_arguments,
    apply_parameters,
    inches_to_mm,
    initial_parameters,
    parameter_dicts,
    parameters_from_args,
)
from slot_layout import DEFAULT_CONSTANTS, BeadLayout, InvalidLayoutError, LayoutConstants, bead_layout, slot_outline

logger = logging.getLogger(__name__)

PARAMETER_DEFINITIONS: tuple[ParameterDefinition, ...] = BEAD_PARAMETERS


@dataclass(frozen=True)
class BeadPanelParams:
    width_in: float = 10.0
    height_in: float = 7.0
    thickness: float = 1.0
    slots_per_row: int = 13

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


def compute_layout(params: BeadPanelParams) -> BeadLayout:
    return bead_layout(params.width, params.height, params.thickness, params.slots_per_row, params.layout)


def panel_cutouts(layout: BeadLayout, constants: LayoutConstants = DEFAULT_CONSTANTS) -> PanelCutouts:
    return PanelCutouts(
        panel=layout.panel,
        outlines=tuple(slot_outline(s.width, s.height, s.x, s.y, constants) for s in layout.slots),
        rects=(),
        labels=layout.labels,
    )


def build_bead_panel(params: BeadPanelParams) -> list[object]:
    return build_panel(panel_cutouts(compute_layout(params), params.layout), params.finish, params.layout)


def generate(values: Mapping[str, Any] | None = None, params: BeadPanelParams | None = None) -> list[object]:
    if params is None:
        params = initial_parameters(PARAMETER_DEFINITIONS, BeadPanelParams())
    params = apply_parameters(PARAMETER_DEFINITIONS, params, values or {})
    return build_bead_panel(params)


def main(argv: Sequence[str] | None = None) -> None:
    import argparse

    from logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Lettered bead slot panel")
    add_parameter_arguments(parser, PARAMETER_DEFINITIONS)
    parser.add_argument("--text-mode", choices=TEXT_MODES, default="deboss", help="How to render slot letters")
    parser.add_argument("--no-labels", action="store_true", help="Do not stamp slot letters")
    parser.add_argument("--font", default=None, help="Label font (default: Arial)")
    parser.add_argument("--stl", type=Path, default=None, help="Export STL to this path")
    parser.add_argument("--step", type=Path, default=None, help="Export STEP to this path")
    parser.add_argument("--template-svg", type=Path, default=None, help="Export a 1:1 SVG template")
    parser.add_argument("--template-dxf", type=Path, default=None, help="Export a 1:1 DXF template")
    parser.add_argument("--no-export-centered", action="store_true", help="Do not center the exported solid")
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

    params = replace(initial_parameters(PARAMETER_DEFINITIONS, BeadPanelParams()), finish=finish)
    params = apply_parameters(PARAMETER_DEFINITIONS, params, parameters_from_args(PARAMETER_DEFINITIONS, args))

    try:
        layout = compute_layout(params)
    except InvalidLayoutError as ex:
        parser.error(str(ex))

    logger.info(
        "Bead panel %.1fx%.1fx%.1f mm, %d slots of %.2fx%.2f mm",
        layout.panel.width,
        layout.panel.height,
        layout.panel.thickness,
        len(layout.slots),
        layout.grid.slot_width,
        layout.grid.slot_height,
    )

    cutouts = panel_cutouts(layout, params.layout)
    if args.template_svg is not None or args.template_dxf is not None:
        export_template(cutouts, finish, params.layout, svg=args.template_svg, dxf=args.template_dxf)

    solids = build_panel(cutouts, finish, params.layout)
    export_solids(solids, stl=args.stl, step=args.step)

    if not args.no_show:
        show_solids(
            solids,
            names=["beads", "labels"][: len(solids)],
            colors=[finish.base_color, finish.label_color][: len(solids)],
        )


if __name__ == "__main__":
    main()
