from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ParticleClass(StrEnum):
    PROTON = "Proton"
    NEUTRON = "Neutron"
    PION = "Pion"
    MUON = "Muon"
    ELECTRON = "Electron"
    POSITRON = "Positron"
    PHOTON = "Photon"
    NEUTRINO = "Neutrino"


@dataclass(frozen=True, slots=True)
class ParticleSpec:
    key: str
    name: str
    symbol: str
    particle_class: ParticleClass
    charge: int
    color: tuple[int, int, int]
    width: float
    description: str

    @property
    def is_neutral(self) -> bool:
        return self.charge == 0


def _rgb(hex_color: str) -> tuple[int, int, int]:
    h = hex_color.lstrip("#")
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))


_NEUTRINO_TEXT = "Neutral lepton with almost no interaction; leaves no visible track."

PROTON = ParticleSpec(
    "proton", "Proton (p)", "p", ParticleClass.PROTON, 1, _rgb("#845ef7"), 3.0,
    "Heavy baryon: short, thick track with high momentum.",
)
NEUTRON = ParticleSpec(
    "neutron", "Neutron (n)", "n", ParticleClass.NEUTRON, 0, _rgb("#94d2ff"), 2.0,
    "Neutral baryon: invisible until it decays into p, e⁻ and ν̄e.",
)
PION_PLUS = ParticleSpec(
    "pion_plus", "Pion (π⁺)", "π⁺", ParticleClass.PION, 1, _rgb("#51cf66"), 2.5,
    "Light meson, decays into a muon and a neutrino.",
)
PION_MINUS = ParticleSpec(
    "pion_minus", "Pion (π⁻)", "π⁻", ParticleClass.PION, -1, _rgb("#51cf66"), 2.5,
    "Light meson, decays into a muon and a neutrino.",
)
PION_ZERO = ParticleSpec(
    "pion_zero", "Pion (π⁰)", "π⁰", ParticleClass.PION, 0, _rgb("#94d2ff"), 2.0,
    "Neutral pion, decays almost immediately.",
)
MUON_PLUS = ParticleSpec(
    "muon_plus", "Muon (μ⁺)", "μ⁺", ParticleClass.MUON, 1, _rgb("#4dabf7"), 2.0,
    "Heavy lepton, minimal interaction, long curved track.",
)
MUON_MINUS = ParticleSpec(
    "muon_minus", "Muon (μ⁻)", "μ⁻", ParticleClass.MUON, -1, _rgb("#4dabf7"), 2.0,
    "Heavy lepton, minimal interaction, long curved track.",
)
ELECTRON = ParticleSpec(
    "electron", "Electron (e⁻)", "e⁻", ParticleClass.ELECTRON, -1, _rgb("#ffd43b"), 1.5,
    "Light lepton, loses energy quickly and curls into a tight spiral.",
)
POSITRON = ParticleSpec(
    "positron", "Positron (e⁺)", "e⁺", ParticleClass.POSITRON, 1, _rgb("#ff8787"), 1.5,
    "Antiparticle of the electron, curls into a tight spiral.",
)
PHOTON = ParticleSpec(
    "photon", "Photon (γ)", "γ", ParticleClass.PHOTON, 0, _rgb("#cccccc"), 1.0,
    "Neutral and invisible in the chamber until it converts or is absorbed.",
)
MUON_NEUTRINO = ParticleSpec(
    "muon_neutrino", "Muon neutrino (νμ)", "νμ", ParticleClass.NEUTRINO, 0,
    _rgb("#ffffff"), 0.5, _NEUTRINO_TEXT,
)
MUON_ANTINEUTRINO = ParticleSpec(
    "muon_antineutrino", "Muon antineutrino (ν̄μ)", "ν̄μ", ParticleClass.NEUTRINO, 0,
    _rgb("#ffffff"), 0.5, _NEUTRINO_TEXT,
)
ELECTRON_NEUTRINO = ParticleSpec(
    "electron_neutrino", "Electron neutrino (νe)", "νe", ParticleClass.NEUTRINO, 0,
    _rgb("#ffffff"), 0.5, _NEUTRINO_TEXT,
)
ELECTRON_ANTINEUTRINO = ParticleSpec(
    "electron_antineutrino", "Electron antineutrino (ν̄e)", "ν̄e", ParticleClass.NEUTRINO, 0,
    _rgb("#ffffff"), 0.5, _NEUTRINO_TEXT,
)

ALL_PARTICLES: tuple[ParticleSpec, ...] = (
    PROTON,
    NEUTRON,
    PION_PLUS,
    PION_MINUS,
    PION_ZERO,
    MUON_PLUS,
    MUON_MINUS,
    ELECTRON,
    POSITRON,
    PHOTON,
    MUON_NEUTRINO,
    MUON_ANTINEUTRINO,
    ELECTRON_NEUTRINO,
    ELECTRON_ANTINEUTRINO,
)

# Choices offered by the identification form, in display order.
FORM_SYMBOLS: tuple[str, ...] = tuple(spec.symbol for spec in ALL_PARTICLES)


def muon_for(charge: int) -> ParticleSpec:
    return MUON_MINUS if charge < 0 else MUON_PLUS


def lepton_for(charge: int) -> ParticleSpec:
    """Electron or positron carrying the charge of a decaying muon."""

    return ELECTRON if charge < 0 else POSITRON


def pion_neutrino_for(charge: int) -> ParticleSpec:
    # π⁻ → μ⁻ ν̄μ, π⁺ → μ⁺ νμ
    return MUON_ANTINEUTRINO if charge < 0 else MUON_NEUTRINO


def muon_decay_neutrinos_for(charge: int) -> tuple[ParticleSpec, ParticleSpec]:
    # μ⁻ → e⁻ ν̄e νμ, μ⁺ → e⁺ νe ν̄μ
    if charge < 0:
        return (ELECTRON_ANTINEUTRINO, MUON_NEUTRINO)
    return (ELECTRON_NEUTRINO, MUON_ANTINEUTRINO)
