import logging
from dataclasses import replace

import pytest

pytest.importorskip("build123d")

from build123d import BuildSketch, Plane  # noqa: E402

import bead_panel_build123d as bead  # noqa: E402
import organizer_panel_build123d as organizer  # noqa: E402
from logging_config import LOGGER_NAMES  # noqa: E402
from panel_build123d import (  # noqa: E402
    PanelCutouts,
    PanelFinish,
    _add_label_text,
    _add_slot_faces,
    build_base,
    build_labels,
    build_panel,
    export_solids,
    export_template,
)
from slot_layout import DEFAULT_CONSTANTS, InvalidLayoutError, PanelSpec, SlotPlacement  # noqa: E402

# Geometry tests run without labels; the label tests below use the default font.
NO_LABELS = PanelFinish(label_enable=False)


def test_organizer_cutouts_for_default_panel():
    layout = organizer.compute_layout(organizer.OrganizerPanelParams())
    cutouts = organizer.panel_cutouts(layout)
    assert len(cutouts.outlines) == 26
    assert len(cutouts.rects) == 8
    assert len(cutouts.labels) == 26


def test_organizer_panel_size_and_material_removed():
    params = organizer.OrganizerPanelParams(lettered_slots_per_row=4, finish=NO_LABELS)
    solids = organizer.build_organizer_panel(params)
    assert len(solids) == 1

    base = solids[0]
    bb = base.bounding_box()
    assert bb.size.X == pytest.approx(254.0, abs=1e-3)
    assert bb.size.Y == pytest.approx(177.8, abs=1e-3)
    assert bb.size.Z == pytest.approx(1.0, abs=1e-3)

    # Centered on the origin, sitting on Z=0.
    assert bb.center().X == pytest.approx(0.0, abs=1e-3)
    assert bb.center().Y == pytest.approx(0.0, abs=1e-3)
    assert bb.min.Z == pytest.approx(0.0, abs=1e-3)

    assert base.volume < 254.0 * 177.8 * 1.0


def test_generate_applies_host_values():
    solids = organizer.generate(
        {"width": 8, "height": 6, "letteredSlotsPerRow": 5, "sideColumnSplitRows": 0},
        params=organizer.OrganizerPanelParams(finish=NO_LABELS),
    )
    bb = solids[0].bounding_box()
    assert bb.size.X == pytest.approx(8 * 25.4, abs=1e-3)
    assert bb.size.Y == pytest.approx(6 * 25.4, abs=1e-3)


def test_generate_rejects_bad_values_before_building():
    with pytest.raises(ValueError, match="Unknown parameter"):
        organizer.generate({"slotsPerRow": 3})
    with pytest.raises(InvalidLayoutError):
        organizer.generate({"sideColumnRows": 2, "sideColumnSplitRows": 3})


def test_generate_is_repeatable():
    params = organizer.OrganizerPanelParams(lettered_slots_per_row=3, finish=NO_LABELS)
    a = organizer.generate({}, params=params)[0]
    b = organizer.generate({}, params=params)[0]
    assert a.volume == pytest.approx(b.volume)
    assert a.bounding_box().size.X == pytest.approx(b.bounding_box().size.X)


def test_bead_panel_removes_more_material_with_wider_slots():
    narrow = bead.build_bead_panel(bead.BeadPanelParams(slots_per_row=6, finish=NO_LABELS))[0]
    wide = bead.build_bead_panel(bead.BeadPanelParams(slots_per_row=2, finish=NO_LABELS))[0]
    # Fewer slots means fewer gaps between them.
    assert wide.volume < narrow.volume


def test_uncentered_base_keeps_top_left_anchor():
    finish = replace(NO_LABELS, centered=False)
    panel = PanelSpec(width=60.0, height=40.0, thickness=2.0, border=6.0)
    rect = SlotPlacement(index=0, row=0, x=10.0, y=-10.0, width=20.0, height=10.0)
    cutouts = PanelCutouts(panel=panel, outlines=(), rects=(rect,), labels=())

    base = build_panel(cutouts, finish)[0]
    bb = base.bounding_box()
    assert bb.min.X == pytest.approx(0.0, abs=1e-3)
    assert bb.max.Y == pytest.approx(0.0, abs=1e-3)
    assert bb.min.Y == pytest.approx(-40.0, abs=1e-3)

    plate = 60.0 * 40.0 * 2.0
    assert build_base(cutouts, finish).volume < plate


def test_unknown_text_mode_is_rejected():
    with pytest.raises(ValueError):
        PanelFinish(text_mode="inlay")


def test_export_stl(tmp_path):
    params = organizer.OrganizerPanelParams(lettered_slots_per_row=2, side_column_rows=1, side_column_split_rows=0, finish=NO_LABELS)
    solids = organizer.build_organizer_panel(params)
    out = tmp_path / "panel.stl"
    export_solids(solids, stl=out)
    assert out.exists()
    assert out.stat().st_size > 0


def test_generate_rejects_non_finite_values():
    with pytest.raises(InvalidLayoutError, match="finite"):
        bead.generate({"width": "nan"})
    with pytest.raises(InvalidLayoutError, match="finite"):
        organizer.generate({"height": float("inf")})


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def small_cutouts():
    params = organizer.OrganizerPanelParams(lettered_slots_per_row=2, side_column_rows=1, side_column_split_rows=0)
    return organizer.panel_cutouts(organizer.compute_layout(params))


def test_deboss_cuts_letters_half_way(small_cutouts):
    deboss = PanelFinish(text_mode="deboss")
    plain = build_base(small_cutouts, NO_LABELS)
    cut = build_base(small_cutouts, deboss)
    raised = build_labels(small_cutouts, deboss)

    removed = plain.volume - cut.volume
    assert removed > 0
    # Letters clear of the slots lose exactly their area times half the thickness.
    assert removed == pytest.approx(raised.volume, rel=1e-3)

    bb = raised.bounding_box()
    assert bb.size.Z == pytest.approx(small_cutouts.panel.thickness / 2, abs=1e-3)


def test_emboss_adds_label_solid_on_top(small_cutouts):
    solids = build_panel(small_cutouts, PanelFinish(text_mode="emboss"))
    assert len(solids) == 2

    base, labels = solids
    t = small_cutouts.panel.thickness
    assert base.bounding_box().max.Z == pytest.approx(t, abs=1e-3)

    bb = labels.bounding_box()
    assert bb.min.Z == pytest.approx(t, abs=1e-3)
    assert bb.max.Z == pytest.approx(1.5 * t, abs=1e-3)
    # The base keeps its full volume: nothing is cut for embossed letters.
    assert base.volume == pytest.approx(build_base(small_cutouts, NO_LABELS).volume, rel=1e-6)


def test_labels_do_not_touch_their_slots(small_cutouts):
    finish = PanelFinish()
    for outline, glyph in zip(small_cutouts.outlines, small_cutouts.labels):
        single = replace(small_cutouts, outlines=(outline,), rects=(), labels=(glyph,))
        with BuildSketch(Plane.XY) as slot_sk:
            _add_slot_faces(single, DEFAULT_CONSTANTS)
        with BuildSketch(Plane.XY) as label_sk:
            _add_label_text(single.labels, finish)

        slot_area = slot_sk.sketch.area
        label_area = label_sk.sketch.area
        assert label_area > 0
        fused = slot_sk.sketch + label_sk.sketch
        assert fused.area == pytest.approx(slot_area + label_area, rel=1e-6), glyph.letter


def test_export_template_writes_svg_and_dxf(small_cutouts, tmp_path):
    svg = tmp_path / "panel.svg"
    dxf = tmp_path / "panel.dxf"
    export_template(small_cutouts, PanelFinish(), svg=svg, dxf=dxf)

    assert svg.stat().st_size > 0
    assert dxf.stat().st_size > 0
    text = svg.read_text()
    for layer in ("outline", "slots", "labels"):
        assert layer in text


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------

@pytest.fixture
def reset_logging():
    yield
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.propagate = True


def test_bead_cli_writes_stl_and_log_file(tmp_path, reset_logging):
    stl = tmp_path / "beads.stl"
    log = tmp_path / "beads.log"
    bead.main(["--slots-per-row", "2", "--no-labels", "--no-show", "--stl", str(stl), "--log-file", str(log)])

    assert stl.stat().st_size > 0
    assert "Bead panel" in log.read_text()


def test_organizer_cli_writes_stl_and_log_file(tmp_path, reset_logging):
    stl = tmp_path / "organizer.stl"
    log = tmp_path / "organizer.log"
    organizer.main(
        [
            "--lettered-slots-per-row",
            "2",
            "--side-column-rows",
            "1",
            "--side-column-split-rows",
            "0",
            "--no-labels",
            "--no-show",
            "--stl",
            str(stl),
            "--log-file",
            str(log),
        ]
    )

    assert stl.stat().st_size > 0
    assert "Organizer panel" in log.read_text()


def test_cli_reports_impossible_layout(reset_logging):
    with pytest.raises(SystemExit) as excinfo:
        organizer.main(["--side-column-rows", "2", "--side-column-split-rows", "3", "--no-show"])
    assert excinfo.value.code == 2
