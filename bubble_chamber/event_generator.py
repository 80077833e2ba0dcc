from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum

from .chamber_core import TAU, RandomSource, SeededRng, clamp, handedness, new_seed, signed
from .geometry import ArcShape, Point, Shape, SpiralShape, StraightShape
from .kinematics import MomentumVector, split_momentum, symmetric_pair
from .numbering import Numbering, build_numbering
from .particles import (
    ELECTRON,
    ELECTRON_ANTINEUTRINO,
    NEUTRON,
    PHOTON,
    PION_MINUS,
    PION_PLUS,
    PION_ZERO,
    POSITRON,
    PROTON,
    ParticleSpec,
    lepton_for,
    muon_decay_neutrinos_for,
    muon_for,
    pion_neutrino_for,
)
from .tracks import (
    DecayChain,
    LeptonSpiral,
    MuonArc,
    MuonDecay,
    NeutrinoEmission,
    NeutrinoRay,
    PionDecay,
    Track,
    Vertex,
)

logger = logging.getLogger(__name__)


class Scenario(StrEnum):
    PROTON_PROTON = "proton-proton"
    NEUTRON_DECAY = "neutron-decay"
    MUON_DECAY = "muon-decay"
    PION_DECAY = "pion-decay"
    NEUTRAL_PION_DECAY = "neutral-pion-decay"
    PAIR_PRODUCTION = "pair-production"


def parse_scenario(key: str | Scenario) -> Scenario:
    try:
        return Scenario(str(key).strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in Scenario)
        raise ValueError(f"unknown scenario {key!r}; expected one of: {valid}") from None


COLLISION_POINT = Point(0.5, 0.5)
CENTRAL_BAND = (0.35, 0.65)

PION_PAIRS = 1
NEUTRAL_PION_PROBABILITY = 0.8
NEUTRAL_PION_SHARE = 0.1

# Incoming charged particles: radius grows with momentum.
INCOMING_RADIUS_PER_GEV = 0.04
PROTON_RADIUS_PER_GEV = 0.15
PAIR_RADIUS_PER_GEV = 0.015

LEPTON_SPIRAL_RADIUS = 0.08
LEPTON_SPIRAL_TURNS = 3.0


@dataclass(frozen=True, slots=True)
class Event:
    scenario: Scenario
    tracks: tuple[Track, ...]
    vertices: tuple[Vertex, ...]
    numbering: Numbering
    background: tuple[SpiralShape, ...] = ()
    grain_seed: int = 0

    @property
    def total_particles(self) -> int:
        return self.numbering.total

    @property
    def neutrino_count(self) -> int:
        return self.numbering.neutrino_count

    def track(self, number: int) -> Track | None:
        for t in self.tracks:
            if t.number == number:
                return t
        return None


class _EventBuilder:
    """Per-call scratch state: the random stream and the track-number counter."""

    def __init__(self, rng: RandomSource) -> None:
        self.rng = rng
        self.tracks: list[Track] = []
        self.vertices: list[Vertex] = []
        self._next_number = 1

    def take_number(self) -> int:
        n = self._next_number
        self._next_number += 1
        return n

    def add(
        self,
        species: ParticleSpec,
        momentum: MomentumVector,
        shape: Shape,
        *,
        number: int | None = None,
        decays: bool = False,
        decay: DecayChain | None = None,
    ) -> Track:
        track = Track(
            number=self.take_number() if number is None else number,
            species=species,
            momentum=momentum,
            shape=shape,
            decay_point=shape.end_point() if decays else None,
            decay=decay,
        )
        self.tracks.append(track)
        return track

    def vertex(
        self,
        label: str,
        point: Point,
        parent: MomentumVector,
        children: tuple[MomentumVector, ...],
    ) -> None:
        self.vertices.append(Vertex(label=label, point=point, parent=parent, children=children))
        logger.debug("vertex %s at (%.3f, %.3f): parent %r -> %r", label, point.x, point.y, parent, children)

    def band_point(self) -> Point:
        return Point(self.rng.uniform(*CENTRAL_BAND), self.rng.uniform(*CENTRAL_BAND))

    def entry_point(self) -> Point:
        return Point(0.0, self.rng.uniform(*CENTRAL_BAND))


def _straight_between(start: Point, end: Point) -> StraightShape:
    return StraightShape(
        origin=start,
        angle=math.atan2(end.y - start.y, end.x - start.x),
        length=start.distance_to(end),
    )


def _arc_to_x(entry: Point, *, target_x: float, radius: float, charge: int) -> ArcShape:
    """Arc launched along +x from ``entry`` that ends exactly at ``x == target_x``."""

    reach = clamp((target_x - entry.x) / radius, 0.0, 1.0)
    return ArcShape.launched(
        origin=entry,
        direction=0.0,
        radius=radius,
        length=math.asin(reach) / TAU,
        handedness=handedness(charge),
    )


def _at_end(momentum: MomentumVector, shape: Shape) -> MomentumVector:
    """Momentum of a track when it reaches its end point (direction follows the curve)."""

    return MomentumVector(momentum.magnitude, shape.tangent_at(1.0))


def _muon_decay(b: _EventBuilder, *, charge: int, muon: MomentumVector, point: Point) -> MuonDecay:
    rng = b.rng
    lepton_p, rest = split_momentum(muon, fraction=rng.uniform(0.4, 0.6), offset=rng.uniform(0.3, 0.7))
    # Second neutrino goes nearly backwards; the first takes what is left.
    nu2_p = MomentumVector(
        muon.magnitude * rng.uniform(0.1, 0.25),
        muon.angle + math.pi + rng.uniform(-0.3, 0.3),
    )
    nu1_p = rest - nu2_p

    lepton = LeptonSpiral(
        number=b.take_number(),
        species=lepton_for(charge),
        momentum=lepton_p,
        shape=SpiralShape.launched(
            origin=point,
            direction=lepton_p.angle,
            radius=LEPTON_SPIRAL_RADIUS,
            turns=LEPTON_SPIRAL_TURNS,
            handedness=handedness(charge),
        ),
    )
    nu1_species, nu2_species = muon_decay_neutrinos_for(charge)
    b.vertex("muon decay", point, muon, (lepton_p, nu1_p, nu2_p))
    return MuonDecay(
        lepton=lepton,
        neutrinos=(NeutrinoRay(nu1_species, nu1_p, point), NeutrinoRay(nu2_species, nu2_p, point)),
    )


def _pion_decay(b: _EventBuilder, *, charge: int, pion: MomentumVector, point: Point) -> PionDecay:
    rng = b.rng
    muon_p, nu_p = split_momentum(pion, fraction=rng.uniform(0.4, 0.8), offset=rng.uniform(-0.1, 0.1))
    number = b.take_number()
    shape = ArcShape.launched(
        origin=point,
        direction=muon_p.angle,
        radius=rng.uniform(0.1, 0.25) * (15.0 / muon_p.magnitude),
        length=rng.uniform(0.3, 0.5),
        handedness=handedness(charge),
    )
    b.vertex("pion decay", point, pion, (muon_p, nu_p))
    decay = _muon_decay(b, charge=charge, muon=_at_end(muon_p, shape), point=shape.end_point())
    return PionDecay(
        muon=MuonArc(number=number, species=muon_for(charge), momentum=muon_p, shape=shape, decay=decay),
        neutrino=NeutrinoRay(pion_neutrino_for(charge), nu_p, point),
    )


def _neutral_pion_products(b: _EventBuilder, *, pi0: MomentumVector, point: Point) -> None:
    """π⁰ → γ + e⁺e⁻ pair, all emitted as top-level tracks from ``point``."""

    rng = b.rng
    gamma_p, pair_p = split_momentum(pi0, fraction=rng.uniform(0.3, 0.5), offset=rng.uniform(-math.pi / 8, math.pi / 8))
    # 60-90 degree opening between electron and positron.
    e_minus_p, e_plus_p = symmetric_pair(pair_p, half_opening=rng.uniform(math.pi / 6, math.pi / 4))

    b.add(PHOTON, gamma_p, StraightShape(origin=point, angle=gamma_p.angle, length=0.25))
    for species, momentum in ((ELECTRON, e_minus_p), (POSITRON, e_plus_p)):
        b.add(
            species,
            momentum,
            SpiralShape.launched(
                origin=point,
                direction=momentum.angle,
                radius=rng.uniform(0.05, 0.09),
                turns=LEPTON_SPIRAL_TURNS,
                handedness=handedness(species.charge),
            ),
        )
    b.vertex("neutral pion decay", point, pi0, (gamma_p, e_minus_p, e_plus_p))


def _proton_proton(b: _EventBuilder, *, pion_pairs: int = PION_PAIRS) -> None:
    rng = b.rng
    collision = COLLISION_POINT
    beam = MomentumVector(rng.uniform(40.0, 60.0), 0.0)
    b.add(PROTON, beam, _straight_between(Point(0.0, collision.y), collision), decays=True)

    # The neutral pion's share comes out of the beam first so the rest can be
    # split symmetrically around what remains.
    residual = beam
    pi0_p: MomentumVector | None = None
    if rng.random() < NEUTRAL_PION_PROBABILITY:
        pi0_p = MomentumVector(
            beam.magnitude * NEUTRAL_PION_SHARE,
            beam.angle + rng.uniform(-math.pi / 12, math.pi / 12),
        )
        residual = beam - pi0_p

    to_protons = rng.uniform(0.4, 0.7)
    proton_scatter = rng.uniform(math.pi / 18, math.pi / 12)  # 10-15 degrees
    proton_a, proton_b = symmetric_pair(residual.scaled(to_protons), half_opening=proton_scatter)
    for momentum in (proton_b, proton_a):
        b.add(
            PROTON,
            momentum,
            StraightShape(origin=collision, angle=momentum.angle, length=rng.uniform(0.25, 0.45)),
        )

    pair_share = residual.scaled((1.0 - to_protons) / pion_pairs)
    base_scatter = rng.uniform(math.pi / 8, math.pi / 4)
    pions: list[MomentumVector] = []
    for i in range(pion_pairs):
        pi_plus, pi_minus = symmetric_pair(pair_share, half_opening=base_scatter * (1.0 + i * 0.3))
        for species, momentum in ((PION_PLUS, pi_plus), (PION_MINUS, pi_minus)):
            number = b.take_number()
            shape = ArcShape.launched(
                origin=collision,
                direction=momentum.angle,
                radius=rng.uniform(0.15, 0.35) * (10.0 / momentum.magnitude) / pion_pairs,
                length=rng.uniform(0.3, 0.6) / pion_pairs,
                handedness=handedness(species.charge),
            )
            decay = _pion_decay(b, charge=species.charge, pion=_at_end(momentum, shape), point=shape.end_point())
            b.add(species, momentum, shape, number=number, decays=True, decay=decay)
            pions.append(momentum)

    children = [proton_b, proton_a, *pions]
    if pi0_p is not None:
        pi0_shape = StraightShape(origin=collision, angle=pi0_p.angle, length=0.08)
        b.add(PION_ZERO, pi0_p, pi0_shape, decays=True)
        _neutral_pion_products(b, pi0=pi0_p, point=pi0_shape.end_point())
        children.append(pi0_p)

    b.vertex("proton-proton collision", collision, beam, tuple(children))


def _neutron_decay(b: _EventBuilder) -> None:
    rng = b.rng
    shape = _straight_between(b.entry_point(), b.band_point())
    point = shape.end_point()
    neutron = MomentumVector(rng.uniform(5.0, 15.0), shape.angle)
    number = b.take_number()

    proton_offset = signed(rng, 0.15, 0.25)
    proton_p, rest = split_momentum(neutron, fraction=rng.uniform(0.5, 0.7), offset=proton_offset)
    # Electron leaves on the other side of the neutron line.
    electron_p = MomentumVector(
        neutron.magnitude * rng.uniform(0.2, 0.3),
        neutron.angle - math.copysign(rng.uniform(0.15, 0.25), proton_offset),
    )
    nu_p = rest - electron_p

    decay = NeutrinoEmission(neutrinos=(NeutrinoRay(ELECTRON_ANTINEUTRINO, nu_p, point),))
    b.add(NEUTRON, neutron, shape, number=number, decays=True, decay=decay)

    proton_radius = PROTON_RADIUS_PER_GEV * proton_p.magnitude
    b.add(
        PROTON,
        proton_p,
        ArcShape.launched(
            origin=point,
            direction=proton_p.angle,
            radius=proton_radius,
            length=rng.uniform(0.2, 0.35) / (TAU * proton_radius),
            handedness=handedness(PROTON.charge),
        ),
    )
    b.add(
        ELECTRON,
        electron_p,
        SpiralShape.launched(
            origin=point,
            direction=electron_p.angle,
            radius=rng.uniform(0.05, 0.1),
            turns=LEPTON_SPIRAL_TURNS,
            handedness=handedness(ELECTRON.charge),
        ),
    )
    b.vertex("neutron decay", point, neutron, (proton_p, electron_p, nu_p))


def _muon_decay_event(b: _EventBuilder) -> None:
    rng = b.rng
    charge = rng.choice((-1, 1))
    momentum = MomentumVector(rng.uniform(20.0, 40.0), 0.0)
    shape = _arc_to_x(
        b.entry_point(),
        target_x=rng.uniform(*CENTRAL_BAND),
        radius=INCOMING_RADIUS_PER_GEV * momentum.magnitude,
        charge=charge,
    )
    number = b.take_number()
    decay = _muon_decay(b, charge=charge, muon=_at_end(momentum, shape), point=shape.end_point())
    b.add(muon_for(charge), momentum, shape, number=number, decays=True, decay=decay)


def _neutral_pion_event(b: _EventBuilder) -> None:
    shape = _straight_between(b.entry_point(), b.band_point())
    point = shape.end_point()
    momentum = MomentumVector(b.rng.uniform(5.0, 15.0), shape.angle)
    b.add(PION_ZERO, momentum, shape, decays=True)
    _neutral_pion_products(b, pi0=momentum, point=point)


def _pion_decay_event(b: _EventBuilder, *, charge: int | None = None) -> None:
    rng = b.rng
    if charge is None:
        charge = rng.choice((-1, 0, 1))
    if charge == 0:
        _neutral_pion_event(b)
        return

    momentum = MomentumVector(rng.uniform(20.0, 40.0), 0.0)
    shape = _arc_to_x(
        b.entry_point(),
        target_x=COLLISION_POINT.x,
        radius=INCOMING_RADIUS_PER_GEV * momentum.magnitude,
        charge=charge,
    )
    species = PION_MINUS if charge < 0 else PION_PLUS
    number = b.take_number()
    decay = _pion_decay(b, charge=charge, pion=_at_end(momentum, shape), point=shape.end_point())
    b.add(species, momentum, shape, number=number, decays=True, decay=decay)


def _pair_production(b: _EventBuilder) -> None:
    rng = b.rng
    shape = _straight_between(b.entry_point(), b.band_point())
    point = shape.end_point()
    photon = MomentumVector(rng.uniform(5.0, 20.0), shape.angle)
    b.add(PHOTON, photon, shape, decays=True)

    # Equal leptons with a 60-90 degree opening; conservation fixes their magnitude.
    e_minus_p, e_plus_p = symmetric_pair(photon, half_opening=rng.uniform(math.pi / 6, math.pi / 4))
    for species, momentum in ((ELECTRON, e_minus_p), (POSITRON, e_plus_p)):
        b.add(
            species,
            momentum,
            SpiralShape.launched(
                origin=point,
                direction=momentum.angle,
                radius=clamp(PAIR_RADIUS_PER_GEV * momentum.magnitude, 0.04, 0.15),
                turns=LEPTON_SPIRAL_TURNS,
                handedness=handedness(species.charge),
            ),
        )
    b.vertex("photon conversion", point, photon, (e_minus_p, e_plus_p))


def _background_spirals(rng: RandomSource) -> tuple[SpiralShape, ...]:
    count = rng.randint(5, 6)
    return tuple(
        SpiralShape(
            origin=Point(rng.uniform(0.0, 1.0), rng.uniform(0.0, 1.0)),
            angle=rng.uniform(0.0, TAU),
            radius=rng.uniform(0.005, 0.015),
            turns=3.0,
            handedness=1,
        )
        for _ in range(count)
    )


def generate_event(
    scenario: Scenario | str = Scenario.PROTON_PROTON,
    *,
    rng: RandomSource,
    pion_charge: int | None = None,
) -> Event:
    """Build one complete, immutable event for ``scenario``.

    ``pion_charge`` pins the pion charge of the pion-decay scenario instead of
    drawing it uniformly from {-1, 0, +1}.
    """

    scenario = parse_scenario(scenario)
    b = _EventBuilder(rng)

    if scenario is Scenario.PROTON_PROTON:
        _proton_proton(b)
    elif scenario is Scenario.NEUTRON_DECAY:
        _neutron_decay(b)
    elif scenario is Scenario.MUON_DECAY:
        _muon_decay_event(b)
    elif scenario is Scenario.PION_DECAY:
        _pion_decay_event(b, charge=pion_charge)
    elif scenario is Scenario.NEUTRAL_PION_DECAY:
        _pion_decay_event(b, charge=0)
    else:
        _pair_production(b)

    tracks = tuple(sorted(b.tracks, key=lambda t: t.number))
    numbering = build_numbering(tracks, rng)
    event = Event(
        scenario=scenario,
        tracks=tracks,
        vertices=tuple(b.vertices),
        numbering=numbering,
        background=_background_spirals(rng),
        grain_seed=rng.randint(1, 2**31 - 1),
    )
    logger.info(
        "generated %s event: %d tracks, %d identifiable particles, %d neutrinos",
        scenario.value,
        len(tracks),
        numbering.total,
        numbering.neutrino_count,
    )
    return event


class EventGenerator:
    """Event source owning one random stream.

    Seeded generators replay the same sequence of events; without a seed or
    an injected source every run differs.
    """

    def __init__(self, *, seed: int | None = None, rng: RandomSource | None = None) -> None:
        if rng is None:
            rng = SeededRng(new_seed() if seed is None else seed)
        self._rng = rng

    def next_event(
        self,
        scenario: Scenario | str = Scenario.PROTON_PROTON,
        *,
        pion_charge: int | None = None,
    ) -> Event:
        return generate_event(scenario, rng=self._rng, pion_charge=pion_charge)
