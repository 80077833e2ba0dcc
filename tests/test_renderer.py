from __future__ import annotations

import math

import pytest

from bubble_chamber.chamber_core import SeededRng
from bubble_chamber.event_generator import Event, EventGenerator, Scenario
from bubble_chamber.geometry import Point, StraightShape
from bubble_chamber.kinematics import MomentumVector
from bubble_chamber.numbering import build_numbering
from bubble_chamber.particles import PHOTON, PION_ZERO, PROTON
from bubble_chamber.renderer import (
    NEUTRINO_COLOR,
    RevealMode,
    ViewTransform,
    Viewport,
    blend,
    dash_segments,
    hit_test,
    label_anchor,
    layout_labels,
    render_scene,
    tooltip_lines,
)
from bubble_chamber.tracks import ParticleInfo, Track

VIEWPORT = Viewport(1000, 1000)
IDENTITY = ViewTransform(scale=1.0)


def _event(*tracks: Track) -> Event:
    return Event(
        scenario=Scenario.PROTON_PROTON,
        tracks=tracks,
        vertices=(),
        numbering=build_numbering(tracks, SeededRng(1)),
        background=(),
        grain_seed=1,
    )


def _proton(number: int, origin: Point, angle: float, length: float) -> Track:
    return Track(
        number=number,
        species=PROTON,
        momentum=MomentumVector(10.0, angle),
        shape=StraightShape(origin=origin, angle=angle, length=length),
    )


def _two_protons() -> Event:
    # Track 1's label sits at its end point (0.6, 0.5); track 2 starts right next to it.
    return _event(
        _proton(1, Point(0.1, 0.5), 0.0, 0.5),
        _proton(2, Point(0.615, 0.51), -math.pi / 2, 0.2),
    )


def test_viewport_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        Viewport(0, 100)
    with pytest.raises(ValueError):
        Viewport(100, -1)


def test_transform_round_trip_and_centre_anchor() -> None:
    view = ViewTransform(scale=1.7, pan_x=35.0, pan_y=-12.0)
    vp = Viewport(800, 600)
    p = Point(0.23, 0.71)
    back = view.unproject(view.project(p, vp), vp)
    assert math.isclose(back.x, p.x, abs_tol=1e-12)
    assert math.isclose(back.y, p.y, abs_tol=1e-12)

    # Without pan the viewport centre stays put under zoom.
    centre = ViewTransform(scale=2.5).project(Point(0.5, 0.5), vp)
    assert centre == (400.0, 300.0)


def test_viewport_scales_both_axes_alike_and_letterboxes() -> None:
    vp = Viewport(800, 600)
    assert vp.to_pixels(Point(0.0, 0.0)) == (100.0, 0.0)
    assert vp.to_pixels(Point(1.0, 1.0)) == (700.0, 600.0)
    assert vp.to_pixels(Point(0.5, 0.5)) == vp.center

    # A unit step is the same pixel length horizontally and vertically, so
    # arcs stay circular on screen.
    ox, oy = vp.to_pixels(Point(0.2, 0.3))
    hx, _ = vp.to_pixels(Point(0.3, 0.3))
    _, vy = vp.to_pixels(Point(0.2, 0.4))
    assert math.isclose(hx - ox, vy - oy)

    back = vp.to_normalized(*vp.to_pixels(Point(0.37, 0.81)))
    assert math.isclose(back.x, 0.37) and math.isclose(back.y, 0.81)


def test_zoom_is_clamped_and_pan_accumulates() -> None:
    view = ViewTransform(scale=0.7)
    for _ in range(50):
        view = view.zoomed(1.1, lo=0.5, hi=3.0)
    assert view.scale == 3.0
    for _ in range(50):
        view = view.zoomed(1 / 1.1, lo=0.5, hi=3.0)
    assert view.scale == 0.5
    assert view.panned(20, 0).panned(0, -20) == ViewTransform(0.5, 20.0, -20.0)


def test_label_on_screen_wins_over_closer_track_origin() -> None:
    event = _two_protons()
    pointer = (605.0, 500.0)

    hit = hit_test(event, pointer, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.IDENTIFIED)
    assert hit is not None
    assert hit.via_label is True
    assert hit.owner == 1

    # Before identities are revealed only track origins count.
    hit = hit_test(event, pointer, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.NUMBERED)
    assert hit is not None
    assert hit.via_label is False
    assert hit.owner == 2


def test_hit_test_uses_the_transformed_pointer() -> None:
    event = _two_protons()
    view = ViewTransform(scale=2.0, pan_x=40.0, pan_y=0.0)
    screen = view.project(Point(0.1, 0.5), VIEWPORT)
    hit = hit_test(event, screen, view=view, viewport=VIEWPORT, mode=RevealMode.NUMBERED)
    assert hit is not None and hit.owner == 1
    assert hit_test(event, (5.0, 5.0), view=view, viewport=VIEWPORT, mode=RevealMode.NUMBERED) is None


def test_label_anchor_rules() -> None:
    straight = StraightShape(origin=Point(0.2, 0.2), angle=0.0, length=0.4)
    assert label_anchor(PROTON, straight) == straight.end_point()
    assert label_anchor(PHOTON, straight) == straight.midpoint()
    assert label_anchor(PION_ZERO, straight, Point(0.3, 0.3)) == Point(0.3, 0.3)


def test_labels_per_mode() -> None:
    event = EventGenerator(seed=17).next_event(Scenario.PION_DECAY, pion_charge=-1)
    assert layout_labels(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.HIDDEN) == ()

    numbered = layout_labels(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.NUMBERED)
    assert all(m.badge for m in numbered)
    assert sorted(int(m.text) for m in numbered) == [1, 2, 3]

    identified = layout_labels(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.IDENTIFIED)
    texts = [m.text for m in identified]
    assert texts == ["π⁻", "μ⁻", "ν̄μ", "e⁻", "ν̄e", "νμ"]
    assert sum(1 for m in identified if m.particle.number is None) == 3


def test_hidden_mode_draws_only_charged_tracks_in_white() -> None:
    event = EventGenerator(seed=4).next_event(Scenario.NEUTRON_DECAY)
    scene = render_scene(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.HIDDEN)
    owned = [s for s in scene.strokes if s.owner is not None]
    assert {s.owner for s in owned} == {2, 3}
    assert all(s.color == (255, 255, 255) and not s.dashed for s in owned)
    assert scene.labels == ()


def test_identified_mode_adds_dashed_neutrals_and_neutrino_rays() -> None:
    event = EventGenerator(seed=4).next_event(Scenario.NEUTRON_DECAY)
    numbered = render_scene(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.NUMBERED)
    identified = render_scene(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.IDENTIFIED)

    neutron_numbered = [s for s in numbered.strokes if s.owner == 1]
    assert len(neutron_numbered) == 1 and neutron_numbered[0].dashed
    assert neutron_numbered[0].alpha == pytest.approx(0.3)

    rays = [s for s in identified.strokes if s.dashed and s.color == NEUTRINO_COLOR]
    assert len(rays) == 1
    assert not any(s.dashed and s.color == NEUTRINO_COLOR for s in numbered.strokes)


def test_rendering_is_idempotent() -> None:
    event = EventGenerator(seed=21).next_event(Scenario.PROTON_PROTON)
    view = ViewTransform(scale=1.3, pan_x=-15.0, pan_y=8.0)
    a = render_scene(event, view=view, viewport=VIEWPORT, mode=RevealMode.IDENTIFIED, pointer=(500.0, 500.0))
    b = render_scene(event, view=view, viewport=VIEWPORT, mode=RevealMode.IDENTIFIED, pointer=(500.0, 500.0))
    assert a == b
    assert len(a.grain) == int(1000 * 1000 * 0.0005)


def test_hovered_track_is_drawn_last_and_thicker() -> None:
    event = EventGenerator(seed=21).next_event(Scenario.PROTON_PROTON)
    plain = render_scene(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.NUMBERED)
    hovered = render_scene(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.NUMBERED, hovered=4)

    assert hovered.hovered == 4
    assert hovered.strokes[-1].owner == 4
    plain_width = max(s.width for s in plain.strokes if s.owner == 4)
    hovered_width = max(s.width for s in hovered.strokes if s.owner == 4)
    assert hovered_width > plain_width


def test_pointer_resolves_hover_inside_render() -> None:
    event = _two_protons()
    scene = render_scene(event, view=IDENTITY, viewport=VIEWPORT, mode=RevealMode.IDENTIFIED, pointer=(605.0, 500.0))
    assert scene.hover is not None
    assert scene.hovered == 1


def test_dash_segments_follow_pattern() -> None:
    segments = dash_segments([(0.0, 0.0), (12.0, 0.0)], on=2.0, off=4.0)
    assert len(segments) == 2
    flat = [coord for seg in segments for point in seg for coord in point]
    assert flat == pytest.approx([0.0, 0.0, 2.0, 0.0, 6.0, 0.0, 8.0, 0.0])


def test_blend_and_tooltip() -> None:
    assert blend((255, 255, 255), (0, 0, 0), 0.5) == (128, 128, 128)
    info = ParticleInfo(PROTON, MomentumVector(12.5, 0.0), 1, 1)
    lines = tooltip_lines(info)
    assert lines[0] == PROTON.name
    assert "12.50 GeV/c" in lines[3]
