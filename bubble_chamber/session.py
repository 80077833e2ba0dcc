from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .clock import Clock, Throttle
from .config import ChamberConfig
from .event_generator import Event, EventGenerator, Scenario, parse_scenario
from .particles import ELECTRON, FORM_SYMBOLS, POSITRON
from .renderer import (
    Hit,
    RevealMode,
    Scene,
    ScreenPoint,
    ViewTransform,
    Viewport,
    hit_test,
    layout_labels,
    render_scene,
)
from .scoring import ScoreBreakdown, parse_neutrino_guess, score_breakdown

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 1


@dataclass(frozen=True, slots=True)
class FormRow:
    display: int
    selected: str
    hint: bool
    truth: str | None = None  # filled in once identities are revealed
    correct: bool | None = None


@dataclass(frozen=True, slots=True)
class ChamberSnapshot:
    """View model for the UI (pure data)."""

    scenario: Scenario
    mode: RevealMode
    total_particles: int
    neutrino_count: int
    form_shown: bool
    revealed: bool
    score: float
    view: ViewTransform
    hovered: int | None
    dragging: bool


class ChamberSession:
    """One interactive chamber: the current event, the quiz form and the view.

    - Every ``generate`` replaces the event and discards form answers and view.
    - Pointer hover is throttled through the injected Clock; dragging is not.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        seed: int | None = None,
        config: ChamberConfig | None = None,
        generator: EventGenerator | None = None,
    ) -> None:
        self._config = config or ChamberConfig()
        self._generator = generator or EventGenerator(seed=seed)
        self._throttle = Throttle(clock=clock, interval_s=self._config.hover_interval_s)
        self._viewport = Viewport(*self._config.window_size)
        self._scenario = self._config.default_scenario

        self._form_shown = False
        self._revealed = False
        self._identifications: dict[int, str] = {}
        self._neutrino_guess = ""
        self._view = ViewTransform(scale=self._config.initial_zoom)
        self._hover: Hit | None = None
        self._drag_from: ScreenPoint | None = None

        self._event = self.generate()

    @property
    def event(self) -> Event:
        return self._event

    @property
    def scenario(self) -> Scenario:
        return self._scenario

    @property
    def config(self) -> ChamberConfig:
        return self._config

    @property
    def view(self) -> ViewTransform:
        return self._view

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def hover(self) -> Hit | None:
        return self._hover

    @property
    def form_shown(self) -> bool:
        return self._form_shown

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def neutrino_guess(self) -> str:
        return self._neutrino_guess

    @property
    def dragging(self) -> bool:
        return self._drag_from is not None

    @property
    def mode(self) -> RevealMode:
        if self._revealed:
            return RevealMode.IDENTIFIED
        if self._form_shown:
            return RevealMode.NUMBERED
        return RevealMode.HIDDEN

    def set_viewport(self, viewport: Viewport) -> None:
        self._viewport = viewport

    # Event lifecycle

    def generate(self, scenario: Scenario | str | None = None) -> Event:
        if scenario is not None:
            self._scenario = parse_scenario(scenario)
        self._event = self._generator.next_event(self._scenario)
        self._form_shown = False
        self._revealed = False
        self._identifications = {}
        self._neutrino_guess = ""
        self._view = ViewTransform(scale=self._config.initial_zoom)
        self._hover = None
        self._drag_from = None
        self._throttle.reset()
        return self._event

    def show_form(self) -> None:
        self._form_shown = True

    def reveal(self) -> None:
        self._revealed = True

    # Identification form

    def hint_display(self) -> int | None:
        """First electron/positron row: shown pre-filled and locked."""

        numbering = self._event.numbering
        for display in sorted(numbering.display):
            if numbering.particle_for_display(display).species in (ELECTRON, POSITRON):
                return display
        return None

    def identifications(self) -> dict[int, str]:
        """Answers keyed by display number; the hint row counts once the form is open."""

        answers = dict(self._identifications)
        hint = self.hint_display()
        if hint is not None and self._form_shown:
            answers[hint] = self._event.numbering.particle_for_display(hint).species.symbol
        return answers

    def identify(self, display: int, symbol: str) -> bool:
        """Record ``symbol`` for row ``display``. Returns True if accepted.

        An empty symbol clears the row.
        """

        if not self._form_shown:
            logger.debug("identification ignored: form not shown")
            return False
        if display not in self._event.numbering.display:
            logger.debug("identification rejected: unknown row %r", display)
            return False
        if display == self.hint_display():
            logger.debug("identification rejected: row %d is the hint", display)
            return False
        symbol = symbol.strip()
        if symbol == "":
            self._identifications.pop(display, None)
            return True
        if symbol not in FORM_SYMBOLS:
            logger.debug("identification rejected: unknown symbol %r", symbol)
            return False
        self._identifications[display] = symbol
        return True

    def neutrino_options(self) -> tuple[int, ...]:
        return tuple(range(self._event.neutrino_count + 1))

    def set_neutrino_guess(self, raw: str) -> bool:
        if not self._form_shown:
            return False
        raw = raw.strip()
        if raw == "":
            self._neutrino_guess = ""
            return True
        guess = parse_neutrino_guess(raw)
        if guess is None or guess < 0:
            logger.debug("neutrino count rejected: %r", raw)
            return False
        self._neutrino_guess = str(guess)
        return True

    def form_rows(self) -> tuple[FormRow, ...]:
        numbering = self._event.numbering
        answers = self.identifications()
        hint = self.hint_display()
        rows: list[FormRow] = []
        for display in sorted(numbering.display):
            selected = answers.get(display, "")
            truth = numbering.particle_for_display(display).species.symbol
            if self._revealed:
                rows.append(FormRow(display, selected, display == hint, truth, selected == truth))
            else:
                rows.append(FormRow(display, selected, display == hint))
        return tuple(rows)

    def score_breakdown(self) -> ScoreBreakdown:
        return score_breakdown(
            self._event.numbering.symbols_by_display(),
            self.identifications(),
            self._neutrino_guess,
            self._event.neutrino_count,
        )

    def score(self) -> float:
        return self.score_breakdown().score

    # View controls

    def _set_view(self, view: ViewTransform) -> None:
        if view != self._view:
            logger.debug("view scale=%.3f pan=(%.1f, %.1f)", view.scale, view.pan_x, view.pan_y)
        self._view = view

    def zoom_in(self) -> None:
        cfg = self._config
        self._set_view(self._view.zoomed(cfg.zoom_factor, lo=cfg.zoom_min, hi=cfg.zoom_max))

    def zoom_out(self) -> None:
        cfg = self._config
        self._set_view(self._view.zoomed(1.0 / cfg.zoom_factor, lo=cfg.zoom_min, hi=cfg.zoom_max))

    def reset_view(self) -> None:
        self._set_view(ViewTransform(scale=self._config.initial_zoom))

    def pan_step(self, dx: int, dy: int) -> None:
        """Keyboard pan by whole steps in each direction."""

        step = self._config.pan_step_px
        self._set_view(self._view.panned(dx * step, dy * step))

    def wheel(self, delta: float) -> None:
        if delta > 0:
            self.zoom_in()
        elif delta < 0:
            self.zoom_out()

    # Pointer

    def _label_at(self, pos: ScreenPoint) -> bool:
        labels = layout_labels(self._event, view=self._view, viewport=self._viewport, mode=self.mode)
        radius = self._config.label_radius_px
        return any(math.hypot(m.position[0] - pos[0], m.position[1] - pos[1]) <= radius for m in labels)

    def pointer_down(self, pos: ScreenPoint, button: int = PRIMARY_BUTTON) -> None:
        if button != PRIMARY_BUTTON or self._label_at(pos):
            return
        self._drag_from = (float(pos[0]), float(pos[1]))

    def pointer_move(self, pos: ScreenPoint) -> None:
        if self._drag_from is not None:
            x0, y0 = self._drag_from
            self._drag_from = (float(pos[0]), float(pos[1]))
            self._set_view(self._view.panned(pos[0] - x0, pos[1] - y0))
            return
        if not self._throttle.ready():
            return
        self._hover = hit_test(
            self._event,
            pos,
            view=self._view,
            viewport=self._viewport,
            mode=self.mode,
            label_radius_px=self._config.label_radius_px,
            origin_threshold=self._config.track_hover_threshold,
        )

    def pointer_up(self) -> None:
        self._drag_from = None

    def pointer_leave(self) -> None:
        self._hover = None
        self._drag_from = None
        self._throttle.reset()

    # Output

    def render(self, viewport: Viewport | None = None) -> Scene:
        return render_scene(
            self._event,
            view=self._view,
            viewport=viewport or self._viewport,
            mode=self.mode,
            hovered=self._hover.owner if self._hover is not None else None,
            config=self._config,
        )

    def snapshot(self) -> ChamberSnapshot:
        return ChamberSnapshot(
            scenario=self._scenario,
            mode=self.mode,
            total_particles=self._event.total_particles,
            neutrino_count=self._event.neutrino_count,
            form_shown=self._form_shown,
            revealed=self._revealed,
            score=self.score(),
            view=self._view,
            hovered=self._hover.owner if self._hover is not None else None,
            dragging=self.dragging,
        )
