from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .geometry import ArcShape, Point, Shape, ShapeKind, SpiralShape
from .kinematics import MomentumVector
from .particles import ParticleSpec


@dataclass(frozen=True, slots=True)
class NeutrinoRay:
    """Neutrino leaving a vertex; drawn as a ray to the chamber edge, never numbered."""

    species: ParticleSpec
    momentum: MomentumVector
    origin: Point


@dataclass(frozen=True, slots=True)
class LeptonSpiral:
    number: int
    species: ParticleSpec
    momentum: MomentumVector
    shape: SpiralShape


@dataclass(frozen=True, slots=True)
class MuonDecay:
    """μ → e + two neutrinos, anchored at the muon's end point."""

    lepton: LeptonSpiral
    neutrinos: tuple[NeutrinoRay, NeutrinoRay]


@dataclass(frozen=True, slots=True)
class MuonArc:
    number: int
    species: ParticleSpec
    momentum: MomentumVector
    shape: ArcShape
    decay: MuonDecay

    @property
    def decay_point(self) -> Point:
        return self.shape.end_point()


@dataclass(frozen=True, slots=True)
class PionDecay:
    """π± → μ± + neutrino; the muon carries its own decay."""

    muon: MuonArc
    neutrino: NeutrinoRay


@dataclass(frozen=True, slots=True)
class NeutrinoEmission:
    """Vertex whose only nested products are neutrinos (the charged ones are top-level)."""

    neutrinos: tuple[NeutrinoRay, ...]


DecayChain = PionDecay | MuonDecay | NeutrinoEmission
DecayProduct = MuonArc | LeptonSpiral | NeutrinoRay


@dataclass(frozen=True, slots=True)
class Track:
    number: int
    species: ParticleSpec
    momentum: MomentumVector
    shape: Shape
    decay_point: Point | None = None
    decay: DecayChain | None = None

    @property
    def name(self) -> str:
        return self.species.name

    @property
    def symbol(self) -> str:
        return self.species.symbol

    @property
    def charge(self) -> int:
        return self.species.charge

    @property
    def origin(self) -> Point:
        return self.shape.origin

    @property
    def kind(self) -> ShapeKind:
        return self.shape.kind

    @property
    def decay_products(self) -> tuple[DecayProduct, ...]:
        return decay_products(self.decay)


def decay_products(chain: DecayChain | None) -> tuple[DecayProduct, ...]:
    if chain is None:
        return ()
    if isinstance(chain, PionDecay):
        return (chain.muon, chain.neutrino)
    if isinstance(chain, MuonDecay):
        return (chain.lepton, *chain.neutrinos)
    return tuple(chain.neutrinos)


@dataclass(frozen=True, slots=True)
class ParticleInfo:
    """Identity of anything the user can point at: a track, a nested product or a neutrino."""

    species: ParticleSpec
    momentum: MomentumVector
    number: int | None
    owner: int  # number of the top-level track it belongs to
    depth: int = 0


@dataclass(frozen=True, slots=True)
class Vertex:
    """Momentum ledger of one collision or decay."""

    label: str
    point: Point
    parent: MomentumVector
    children: tuple[MomentumVector, ...]


def iter_products(track: Track) -> Iterator[tuple[DecayProduct, int]]:
    """Nested decay products of ``track`` with their nesting depth, parents first."""

    chain = track.decay
    if isinstance(chain, PionDecay):
        yield chain.muon, 1
        yield chain.neutrino, 1
        yield chain.muon.decay.lepton, 2
        for nu in chain.muon.decay.neutrinos:
            yield nu, 2
    elif chain is not None:
        for product in decay_products(chain):
            yield product, 1


def iter_particles(tracks: tuple[Track, ...] | list[Track]) -> Iterator[ParticleInfo]:
    """Every independently identifiable particle: tracks, nested muons and leptons."""

    for track in tracks:
        yield ParticleInfo(track.species, track.momentum, track.number, track.number, 0)
        for product, depth in iter_products(track):
            if not isinstance(product, NeutrinoRay):
                yield ParticleInfo(product.species, product.momentum, product.number, track.number, depth)


def iter_neutrinos(tracks: tuple[Track, ...] | list[Track]) -> Iterator[NeutrinoRay]:
    for track in tracks:
        for product, _ in iter_products(track):
            if isinstance(product, NeutrinoRay):
                yield product
