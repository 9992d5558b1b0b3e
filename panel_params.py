"""Parameter declarations shared by the panel generators.

A host (UI, CLI, tests) reads `ParameterDefinition.as_dict()` entries, collects
values by parameter name and hands the resulting mapping back to the panel's
`generate()` entry point.
"""

from __future__ import annotations

import argparse
import math

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Literal, TypeVar

from slot_layout import InvalidLayoutError

MM_PER_INCH = 25.4

ParamType = Literal["float", "int"]

P = TypeVar("P")


def inches_to_mm(inches: float) -> float:
    return inches * MM_PER_INCH


@dataclass(frozen=True)
class ParameterDefinition:
    # External name used by hosts (e.g. "letteredSlotsPerRow")
    name: str
    # Field on the params dataclass (e.g. "lettered_slots_per_row")
    field: str
    type: ParamType
    caption: str
    initial: float

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type, "caption": self.caption, "initial": self.initial}

    def coerce(self, value: Any) -> float:
        number = float(value)
        if not math.isfinite(number):
            raise InvalidLayoutError(f"Parameter {self.name} must be a finite number, got {value!r}.")
        if self.type == "int":
            if not number.is_integer():
                raise InvalidLayoutError(f"Parameter {self.name} must be a whole number, got {value!r}.")
            return int(number)
        return number

    @property
    def flag(self) -> str:
        return "--" + self.field.replace("_", "-")


# ---------------------------------------------------------------------------
# Declared parameters per panel
# ---------------------------------------------------------------------------

_PANEL_SIZE: tuple[ParameterDefinition, ...] = (
    ParameterDefinition("width", "width_in", "float", "Width (inches)", 10),
    ParameterDefinition("height", "height_in", "float", "Height (inches)", 7),
    ParameterDefinition("thickness", "thickness", "float", "Thickness (millimeters)", 1),
)

ORGANIZER_PARAMETERS: tuple[ParameterDefinition, ...] = _PANEL_SIZE + (
    ParameterDefinition("letteredSlotsPerRow", "lettered_slots_per_row", "int", "Small slots per row", 13),
    ParameterDefinition("sideColumnRows", "side_column_rows", "int", "Total rows in side columns", 3),
    ParameterDefinition("sideColumnSplitRows", "side_column_split_rows", "int", "Split rows in side columns", 1),
)

BEAD_PARAMETERS: tuple[ParameterDefinition, ...] = _PANEL_SIZE + (
    ParameterDefinition("slotsPerRow", "slots_per_row", "int", "Slots per row", 13),
)


def parameter_dicts(definitions: Sequence[ParameterDefinition]) -> list[dict[str, Any]]:
    return [d.as_dict() for d in definitions]


def apply_parameters(definitions: Sequence[ParameterDefinition], params: P, values: Mapping[str, Any]) -> P:
    """Return a copy of `params` with host values applied by parameter name.

    Names that are not declared raise ValueError; undeclared fields keep their
    dataclass defaults.
    """
    by_name = {d.name: d for d in definitions}
    unknown = sorted(set(values) - set(by_name))
    if unknown:
        raise ValueError(f"Unknown parameter(s): {', '.join(unknown)}. Expected one of: {', '.join(by_name)}.")

    changes = {by_name[name].field: by_name[name].coerce(value) for name, value in values.items()}
    return replace(params, **changes)


def initial_parameters(definitions: Sequence[ParameterDefinition], params: P) -> P:
    return replace(params, **{d.field: d.coerce(d.initial) for d in definitions})


def add_parameter_arguments(parser: argparse.ArgumentParser, definitions: Sequence[ParameterDefinition]) -> None:
    group = parser.add_argument_group("panel parameters")
    for d in definitions:
        group.add_argument(
            d.flag,
            dest=d.field,
            type=int if d.type == "int" else float,
            default=None,
            help=f"{d.caption} (default: {d.initial:g})",
        )


def parameters_from_args(definitions: Sequence[ParameterDefinition], args: argparse.Namespace) -> dict[str, float]:
    """Collect the parameter flags the user actually passed, keyed by parameter name."""
    values: dict[str, float] = {}
    for d in definitions:
        value = getattr(args, d.field, None)
        if value is not None:
            values[d.name] = value
    return values
