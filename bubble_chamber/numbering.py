from __future__ import annotations

from dataclasses import dataclass

from .chamber_core import RandomSource
from .tracks import ParticleInfo, Track, iter_neutrinos, iter_particles


@dataclass(frozen=True, slots=True)
class Numbering:
    """Ground truth and quiz numbering of one event.

    ``particles[i]`` is the particle with natural number ``i + 1`` and
    ``display[i]`` the shuffled number shown for it. Natural number 1 is the
    incoming particle and always displays as 1.
    """

    particles: tuple[ParticleInfo, ...]
    display: tuple[int, ...]
    neutrino_count: int

    @property
    def total(self) -> int:
        return len(self.particles)

    def display_for(self, number: int) -> int:
        return self.display[int(number) - 1]

    def number_for(self, display: int) -> int:
        return self.display.index(int(display)) + 1

    def particle_for_display(self, display: int) -> ParticleInfo:
        return self.particles[self.number_for(display) - 1]

    def forward_map(self) -> dict[int, int]:
        """Natural number -> display number."""

        return {i + 1: d for i, d in enumerate(self.display)}

    def inverse_map(self) -> dict[int, int]:
        """Display number -> natural number."""

        return {d: i + 1 for i, d in enumerate(self.display)}

    def symbols_by_number(self) -> dict[int, str]:
        return {p.number: p.species.symbol for p in self.particles if p.number is not None}

    def symbols_by_display(self) -> dict[int, str]:
        return {d: self.particles[i].species.symbol for i, d in enumerate(self.display)}


def build_numbering(tracks: tuple[Track, ...] | list[Track], rng: RandomSource) -> Numbering:
    particles = sorted(iter_particles(tracks), key=lambda p: int(p.number or 0))
    numbers = [p.number for p in particles]
    if numbers != list(range(1, len(particles) + 1)):
        raise ValueError(f"particle numbers must be exactly 1..{len(particles)}, got {numbers}")

    rest = list(range(2, len(particles) + 1))
    rng.shuffle(rest)
    display = tuple([1, *rest]) if particles else ()

    return Numbering(
        particles=tuple(particles),
        display=display,
        neutrino_count=sum(1 for _ in iter_neutrinos(tracks)),
    )
