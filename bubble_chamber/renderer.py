"""Scene building and hit-testing for one chamber event.

Everything here is a pure function of the event, the view transform, the
reveal mode and (optionally) the pointer. The output is a list of plain draw
commands in screen pixels; the pygame layer only has to paint them.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from .chamber_core import SeededRng, clamp
from .config import ChamberConfig
from .event_generator import Event
from .geometry import Point, Shape, StraightShape, ray_to_boundary
from .particles import ParticleSpec
from .tracks import MuonArc, NeutrinoRay, ParticleInfo, Track, iter_products

RGB = tuple[int, int, int]
ScreenPoint = tuple[float, float]

BACKGROUND_COLOR: RGB = (10, 10, 10)
GRID_COLOR: RGB = (26, 26, 26)
BUBBLE_COLOR: RGB = (255, 255, 255)
UNIDENTIFIED_COLOR: RGB = (255, 255, 255)
NEUTRAL_NUMBERED_COLOR: RGB = (136, 136, 136)
NEUTRAL_IDENTIFIED_COLOR: RGB = (102, 102, 102)
NEUTRINO_COLOR: RGB = (255, 255, 255)

TRACK_ALPHA = 0.8
GRAIN_ALPHA = 0.15
NEUTRAL_NUMBERED_ALPHA = 0.3
NEUTRAL_IDENTIFIED_ALPHA = 0.6
NEUTRINO_ALPHA = 0.8
HIGHLIGHT_WIDTH = 1.5
DASH_ON = 2.0
DASH_OFF = 4.0


class RevealMode(StrEnum):
    HIDDEN = "hidden"
    NUMBERED = "numbered"
    IDENTIFIED = "identified"


@dataclass(frozen=True, slots=True)
class Viewport:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("viewport width and height must be > 0")

    @property
    def center(self) -> ScreenPoint:
        return (self.width / 2.0, self.height / 2.0)

    @property
    def side(self) -> float:
        """Pixel size of the unit chamber square (one scale for both axes)."""

        return float(min(self.width, self.height))

    @property
    def offset(self) -> ScreenPoint:
        # Letterbox: the chamber square is centred in the longer dimension.
        return ((self.width - self.side) / 2.0, (self.height - self.side) / 2.0)

    def to_pixels(self, p: Point) -> ScreenPoint:
        ox, oy = self.offset
        return (ox + p.x * self.side, oy + p.y * self.side)

    def to_normalized(self, x: float, y: float) -> Point:
        ox, oy = self.offset
        return Point((x - ox) / self.side, (y - oy) / self.side)


@dataclass(frozen=True, slots=True)
class ViewTransform:
    """Zoom about the viewport centre followed by a pixel pan."""

    scale: float = 0.7
    pan_x: float = 0.0
    pan_y: float = 0.0

    def project(self, p: Point, viewport: Viewport) -> ScreenPoint:
        x, y = viewport.to_pixels(p)
        cx, cy = viewport.center
        return ((x - cx) * self.scale + cx + self.pan_x, (y - cy) * self.scale + cy + self.pan_y)

    def unproject(self, screen: ScreenPoint, viewport: Viewport) -> Point:
        cx, cy = viewport.center
        x = (screen[0] - cx - self.pan_x) / self.scale + cx
        y = (screen[1] - cy - self.pan_y) / self.scale + cy
        return viewport.to_normalized(x, y)

    def zoomed(self, factor: float, *, lo: float, hi: float) -> "ViewTransform":
        return ViewTransform(clamp(self.scale * factor, lo, hi), self.pan_x, self.pan_y)

    def panned(self, dx: float, dy: float) -> "ViewTransform":
        return ViewTransform(self.scale, self.pan_x + dx, self.pan_y + dy)


@dataclass(frozen=True, slots=True)
class Stroke:
    points: tuple[ScreenPoint, ...]
    color: RGB
    width: float
    alpha: float = 1.0
    dashed: bool = False
    owner: int | None = None  # top-level track number, None for decoration

    def blended(self, background: RGB = BACKGROUND_COLOR) -> RGB:
        return blend(self.color, background, self.alpha)


@dataclass(frozen=True, slots=True)
class Bubble:
    center: ScreenPoint
    radius: float


@dataclass(frozen=True, slots=True)
class LabelMark:
    text: str
    position: ScreenPoint
    particle: ParticleInfo
    badge: bool  # numbered badge (True) or symbol tag (False)


@dataclass(frozen=True, slots=True)
class Hit:
    particle: ParticleInfo
    via_label: bool

    @property
    def owner(self) -> int:
        return self.particle.owner


@dataclass(frozen=True, slots=True)
class Scene:
    mode: RevealMode
    grid: tuple[Stroke, ...]
    grain: tuple[Bubble, ...]
    strokes: tuple[Stroke, ...]
    labels: tuple[LabelMark, ...]
    hover: Hit | None = None
    hovered: int | None = None


def blend(color: RGB, background: RGB, alpha: float) -> RGB:
    a = clamp(alpha, 0.0, 1.0)
    return (
        int(round(color[0] * a + background[0] * (1.0 - a))),
        int(round(color[1] * a + background[1] * (1.0 - a))),
        int(round(color[2] * a + background[2] * (1.0 - a))),
    )


def dash_segments(
    points: Sequence[ScreenPoint],
    *,
    on: float = DASH_ON,
    off: float = DASH_OFF,
) -> list[tuple[ScreenPoint, ScreenPoint]]:
    """Split a polyline into the visible pieces of an on/off dash pattern."""

    pairs = list(zip(points, points[1:]))
    if on <= 0.0 or off <= 0.0:
        return pairs

    out: list[tuple[ScreenPoint, ScreenPoint]] = []
    drawing = True
    remaining = on
    for (x0, y0), (x1, y1) in pairs:
        seg = math.hypot(x1 - x0, y1 - y0)
        pos = 0.0
        while seg - pos > 1e-9:
            step = min(remaining, seg - pos)
            if drawing:
                a = pos / seg
                b = (pos + step) / seg
                out.append(((x0 + (x1 - x0) * a, y0 + (y1 - y0) * a), (x0 + (x1 - x0) * b, y0 + (y1 - y0) * b)))
            pos += step
            remaining -= step
            if remaining <= 1e-9:
                drawing = not drawing
                remaining = on if drawing else off
    return out


def _project(points: Iterable[Point], view: ViewTransform, viewport: Viewport) -> tuple[ScreenPoint, ...]:
    return tuple(view.project(p, viewport) for p in points)


def _neutrino_shape(ray: NeutrinoRay) -> StraightShape:
    end = ray_to_boundary(ray.origin, ray.momentum.angle)
    return StraightShape(origin=ray.origin, angle=ray.momentum.angle, length=ray.origin.distance_to(end))


def label_anchor(species: ParticleSpec, shape: Shape, decay_point: Point | None = None) -> Point:
    """Charged: end of the track. Neutral: decay point when it decays, else mid-track."""

    if not species.is_neutral:
        return shape.end_point()
    if decay_point is not None:
        return decay_point
    return shape.midpoint()


def _info(track: Track) -> ParticleInfo:
    return ParticleInfo(track.species, track.momentum, track.number, track.number, 0)


def layout_labels(
    event: Event,
    *,
    view: ViewTransform,
    viewport: Viewport,
    mode: RevealMode,
) -> tuple[LabelMark, ...]:
    if mode is RevealMode.HIDDEN:
        return ()

    numbering = event.numbering
    identified = mode is RevealMode.IDENTIFIED

    def mark(info: ParticleInfo, anchor: Point) -> LabelMark:
        if identified or info.number is None:
            text, badge = info.species.symbol, False
        else:
            text, badge = str(numbering.display_for(info.number)), True
        return LabelMark(text=text, position=view.project(anchor, viewport), particle=info, badge=badge)

    marks: list[LabelMark] = []
    for track in event.tracks:
        marks.append(mark(_info(track), label_anchor(track.species, track.shape, track.decay_point)))
        for product, depth in iter_products(track):
            if isinstance(product, NeutrinoRay):
                if not identified:
                    continue
                info = ParticleInfo(product.species, product.momentum, None, track.number, depth)
                marks.append(mark(info, _neutrino_shape(product).midpoint()))
                continue
            info = ParticleInfo(product.species, product.momentum, product.number, track.number, depth)
            decay_point = product.decay_point if isinstance(product, MuonArc) else None
            marks.append(mark(info, label_anchor(product.species, product.shape, decay_point)))
    return tuple(marks)


def _visible(track: Track, mode: RevealMode) -> bool:
    return mode is not RevealMode.HIDDEN or not track.species.is_neutral


def hit_test(
    event: Event,
    pointer: ScreenPoint,
    *,
    view: ViewTransform,
    viewport: Viewport,
    mode: RevealMode,
    labels: Sequence[LabelMark] | None = None,
    label_radius_px: float = 30.0,
    origin_threshold: float = 0.05,
) -> Hit | None:
    """Resolve what the pointer is over.

    With identities revealed, the nearest rendered label within
    ``label_radius_px`` wins. Otherwise (or with no label in range) the track
    whose origin is nearest to the pointer, in normalized chamber units,
    wins if it is closer than ``origin_threshold``.
    """

    px, py = pointer
    if mode is RevealMode.IDENTIFIED:
        if labels is None:
            labels = layout_labels(event, view=view, viewport=viewport, mode=mode)
        best_label: LabelMark | None = None
        best_d = float(label_radius_px)
        for label in labels:
            d = math.hypot(label.position[0] - px, label.position[1] - py)
            if d <= best_d:
                best_label, best_d = label, d
        if best_label is not None:
            return Hit(particle=best_label.particle, via_label=True)

    at = view.unproject(pointer, viewport)
    best_track: Track | None = None
    best_origin = float(origin_threshold)
    for track in event.tracks:
        if not _visible(track, mode):
            continue
        d = track.origin.distance_to(at)
        if d < best_origin:
            best_track, best_origin = track, d
    if best_track is None:
        return None
    return Hit(particle=_info(best_track), via_label=False)


def _grid(viewport: Viewport, size: int) -> tuple[Stroke, ...]:
    if size <= 0:
        return ()
    w, h = viewport.width, viewport.height
    lines = [((float(x), 0.0), (float(x), float(h))) for x in range(0, w, size)]
    lines += [((0.0, float(y)), (float(w), float(y))) for y in range(0, h, size)]
    return tuple(Stroke(points=line, color=GRID_COLOR, width=0.5) for line in lines)


def _grain(event: Event, viewport: Viewport, density: float) -> tuple[Bubble, ...]:
    # Positions come from the event's own seed so repeated frames match.
    rng = SeededRng(event.grain_seed)
    count = int(viewport.width * viewport.height * density)
    return tuple(
        Bubble(
            center=(rng.random() * viewport.width, rng.random() * viewport.height),
            radius=rng.random() * 1.0 + 0.3,
        )
        for _ in range(count)
    )


def _track_strokes(track: Track, *, view: ViewTransform, viewport: Viewport, mode: RevealMode, highlight: bool) -> list[Stroke]:
    identified = mode is RevealMode.IDENTIFIED
    owner = track.number

    def charged(species: ParticleSpec, shape: Shape) -> Stroke:
        width = species.width * (HIGHLIGHT_WIDTH if highlight else 1.0)
        return Stroke(
            points=_project(shape.sample(), view, viewport),
            color=species.color if identified else UNIDENTIFIED_COLOR,
            width=width * view.scale,
            alpha=1.0 if highlight else TRACK_ALPHA,
            owner=owner,
        )

    strokes: list[Stroke] = []
    species = track.species
    if species.is_neutral:
        if mode is not RevealMode.HIDDEN:
            width = max(0.5, species.width * 0.7) * (HIGHLIGHT_WIDTH if highlight else 1.0)
            strokes.append(
                Stroke(
                    points=_project(track.shape.sample(), view, viewport),
                    color=NEUTRAL_IDENTIFIED_COLOR if identified else NEUTRAL_NUMBERED_COLOR,
                    width=width * view.scale,
                    alpha=NEUTRAL_IDENTIFIED_ALPHA if identified else NEUTRAL_NUMBERED_ALPHA,
                    dashed=True,
                    owner=owner,
                )
            )
    else:
        strokes.append(charged(species, track.shape))

    for product, _ in iter_products(track):
        if isinstance(product, NeutrinoRay):
            if identified:
                strokes.append(
                    Stroke(
                        points=_project(_neutrino_shape(product).sample(), view, viewport),
                        color=NEUTRINO_COLOR,
                        width=0.5 * view.scale,
                        alpha=NEUTRINO_ALPHA,
                        dashed=True,
                        owner=owner,
                    )
                )
            continue
        strokes.append(charged(product.species, product.shape))
    return strokes


def render_scene(
    event: Event,
    *,
    view: ViewTransform,
    viewport: Viewport,
    mode: RevealMode,
    hovered: int | None = None,
    pointer: ScreenPoint | None = None,
    config: ChamberConfig | None = None,
) -> Scene:
    """Draw commands for one frame.

    When ``pointer`` is given the hover target is resolved from it and
    overrides ``hovered``. Identical inputs always produce an identical scene.
    """

    cfg = config or ChamberConfig()
    labels = layout_labels(event, view=view, viewport=viewport, mode=mode)

    hover: Hit | None = None
    if pointer is not None:
        hover = hit_test(
            event,
            pointer,
            view=view,
            viewport=viewport,
            mode=mode,
            labels=labels,
            label_radius_px=cfg.label_radius_px,
            origin_threshold=cfg.track_hover_threshold,
        )
        hovered = hover.owner if hover is not None else None

    strokes = [
        Stroke(points=_project(spiral.sample(), view, viewport), color=BUBBLE_COLOR, width=1.0)
        for spiral in event.background
    ]
    highlighted: list[Stroke] = []
    for track in event.tracks:
        on_top = hovered is not None and track.number == hovered and _visible(track, mode)
        drawn = _track_strokes(track, view=view, viewport=viewport, mode=mode, highlight=on_top)
        (highlighted if on_top else strokes).extend(drawn)

    return Scene(
        mode=mode,
        grid=_grid(viewport, cfg.grid_size_px),
        grain=_grain(event, viewport, cfg.grain_density),
        strokes=tuple(strokes + highlighted),
        labels=labels,
        hover=hover,
        hovered=hovered,
    )


def tooltip_lines(particle: ParticleInfo) -> tuple[str, ...]:
    species = particle.species
    charge = "+" if species.charge > 0 else "−" if species.charge < 0 else "0"
    return (
        species.name,
        f"Type: {species.particle_class.value}",
        f"Charge: {charge}",
        f"Momentum: {particle.momentum.magnitude:.2f} GeV/c",
        species.description,
    )
