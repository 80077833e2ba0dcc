"""Pygame UI shell for the bubble chamber trainer.

A scenario menu opens a chamber screen:
- the chamber view (tracks, labels, tooltip) on the left
- the identification form, score and controls in a side panel

Deterministic event generation, numbering, hit-testing and scoring live in
bubble_chamber/* (core modules); this module only paints and forwards input.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Protocol

import pygame

from .chamber_core import new_seed
from .clock import RealClock
from .config import ChamberConfig
from .event_generator import Scenario
from .logger_setup import setup_logging
from .particles import FORM_SYMBOLS
from .renderer import (
    BACKGROUND_COLOR,
    BUBBLE_COLOR,
    DASH_OFF,
    DASH_ON,
    GRAIN_ALPHA,
    RevealMode,
    Scene,
    Viewport,
    blend,
    dash_segments,
    tooltip_lines,
)
from .session import ChamberSession

logger = logging.getLogger(__name__)

PANEL_WIDTH = 300

SCENARIO_TITLES: dict[Scenario, str] = {
    Scenario.PROTON_PROTON: "Proton-proton collision",
    Scenario.NEUTRON_DECAY: "Neutron decay",
    Scenario.MUON_DECAY: "Muon decay",
    Scenario.PION_DECAY: "Pion decay",
    Scenario.NEUTRAL_PION_DECAY: "Neutral pion decay",
    Scenario.PAIR_PRODUCTION: "Photon pair production",
}


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if event.type == pygame.VIDEORESIZE:
            self._surface = pygame.display.get_surface()
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    def __init__(
        self,
        app: App,
        title: str,
        items: list[MenuItem],
        *,
        is_root: bool = False,
        selected: int = 0,
    ) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = selected if 0 <= selected < len(items) else 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        border = (90, 90, 100)
        text_main = (235, 235, 240)
        text_muted = (150, 150, 160)
        active_bg = (235, 235, 240)
        active_text = (10, 10, 10)

        surface.fill(BACKGROUND_COLOR)

        title = self._title_font.render(self._title, True, text_main)
        surface.blit(title, title.get_rect(midtop=(w // 2, max(20, h // 12))))

        row_h = 40
        gap = 8
        total_h = len(self._items) * row_h + max(0, len(self._items) - 1) * gap
        y = max(90, (h - total_h) // 2)
        row_w = min(520, w - 80)
        for idx, item in enumerate(self._items):
            row = pygame.Rect((w - row_w) // 2, y, row_w, row_h)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, active_bg, row)
            pygame.draw.rect(surface, border, row, 1)
            color = active_text if selected else text_main
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, (row.x + 12, row.y + (row.h - text.get_height()) // 2))
            y += row_h + gap

        footer = "Enter/Space: Open  |  Up/Down: Select  |  Esc: Back"
        foot = self._hint_font.render(footer, True, text_muted)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 12)))


class ChamberScreen:
    """Chamber view plus identification panel for one session."""

    def __init__(self, app: App, session: ChamberSession) -> None:
        self._app = app
        self._session = session
        self._row = 0
        self._mouse: tuple[int, int] | None = None

        self._label_font = pygame.font.Font(None, 22)
        self._small_font = pygame.font.Font(None, 22)
        self._panel_font = pygame.font.Font(None, 26)
        self._title_font = pygame.font.Font(None, 30)

    @property
    def session(self) -> ChamberSession:
        return self._session

    def _chamber_size(self, surface: pygame.Surface) -> tuple[int, int]:
        w, h = surface.get_size()
        return (max(1, w - PANEL_WIDTH), max(1, h))

    # Input

    def handle_event(self, event: pygame.event.Event) -> None:
        s = self._session
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key, getattr(event, "mod", 0))
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 2, 3):
            s.pointer_down(event.pos, event.button)
        elif event.type == pygame.MOUSEBUTTONUP and event.button in (1, 2, 3):
            s.pointer_up()
        elif event.type == pygame.MOUSEMOTION:
            if event.pos[0] >= s.viewport.width and not s.dragging:
                self._mouse = None
                s.pointer_leave()
                return
            self._mouse = event.pos
            s.pointer_move(event.pos)
        elif event.type == pygame.MOUSEWHEEL:
            s.wheel(event.y)
        elif event.type == pygame.WINDOWLEAVE:
            self._mouse = None
            s.pointer_leave()

    def _handle_key(self, key: int, mod: int) -> None:
        s = self._session
        if key == pygame.K_ESCAPE:
            self._app.pop()
        elif key == pygame.K_n:
            s.generate()
            self._row = 0
        elif key == pygame.K_f:
            s.show_form()
        elif key == pygame.K_r:
            s.reveal()
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            s.zoom_in()
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            s.zoom_out()
        elif key in (pygame.K_HOME, pygame.K_c):
            s.reset_view()
        elif key == pygame.K_LEFT:
            s.pan_step(-1, 0)
        elif key == pygame.K_RIGHT:
            s.pan_step(1, 0)
        elif key == pygame.K_UP:
            s.pan_step(0, -1)
        elif key == pygame.K_DOWN:
            s.pan_step(0, 1)
        elif key == pygame.K_TAB:
            self._move_row(-1 if mod & pygame.KMOD_SHIFT else 1)
        elif key in (pygame.K_LEFTBRACKET, pygame.K_RIGHTBRACKET):
            self._cycle_symbol(-1 if key == pygame.K_LEFTBRACKET else 1)
        elif key == pygame.K_DELETE:
            rows = s.form_rows()
            if rows:
                s.identify(rows[self._row % len(rows)].display, "")
        elif key == pygame.K_BACKSPACE:
            s.set_neutrino_guess("")
        elif pygame.K_0 <= key <= pygame.K_9:
            s.set_neutrino_guess(str(key - pygame.K_0))

    def _move_row(self, delta: int) -> None:
        rows = self._session.form_rows()
        if rows:
            self._row = (self._row + delta) % len(rows)

    def _cycle_symbol(self, delta: int) -> None:
        rows = self._session.form_rows()
        if not rows:
            return
        row = rows[self._row % len(rows)]
        choices = ("", *FORM_SYMBOLS)
        current = choices.index(row.selected) if row.selected in choices else 0
        self._session.identify(row.display, choices[(current + delta) % len(choices)])

    # Drawing

    def render(self, surface: pygame.Surface) -> None:
        cw, ch = self._chamber_size(surface)
        viewport = Viewport(cw, ch)
        if viewport != self._session.viewport:
            self._session.set_viewport(viewport)
        scene = self._session.render(viewport)

        surface.fill(BACKGROUND_COLOR)
        chamber = pygame.Rect(0, 0, cw, ch)
        surface.set_clip(chamber)
        self._draw_scene(surface, scene)
        self._draw_tooltip(surface, chamber)
        surface.set_clip(None)
        self._draw_panel(surface, pygame.Rect(cw, 0, surface.get_width() - cw, ch))

    def _draw_scene(self, surface: pygame.Surface, scene: Scene) -> None:
        grain_color = blend(BUBBLE_COLOR, BACKGROUND_COLOR, GRAIN_ALPHA)
        for bubble in scene.grain:
            pygame.draw.circle(surface, grain_color, bubble.center, max(1, round(bubble.radius)))
        for line in scene.grid:
            pygame.draw.line(surface, line.color, line.points[0], line.points[-1], 1)

        scale = self._session.view.scale
        for stroke in scene.strokes:
            if len(stroke.points) < 2:
                continue
            color = stroke.blended()
            width = max(1, round(stroke.width))
            if stroke.dashed:
                for a, b in dash_segments(stroke.points, on=DASH_ON * scale, off=DASH_OFF * scale):
                    pygame.draw.line(surface, color, a, b, width)
            else:
                pygame.draw.lines(surface, color, False, stroke.points, width)

        for label in scene.labels:
            x, y = int(label.position[0]), int(label.position[1])
            if label.badge:
                text = self._label_font.render(label.text, True, (0, 0, 0))
                radius = max(text.get_width(), text.get_height()) // 2 + 5
                pygame.draw.circle(surface, (245, 245, 245), (x, y), radius)
                pygame.draw.circle(surface, (0, 0, 0), (x, y), radius, 2)
                surface.blit(text, text.get_rect(center=(x, y)))
            else:
                text = self._label_font.render(label.text, True, label.particle.species.color)
                box = text.get_rect(center=(x, y)).inflate(8, 4)
                pygame.draw.rect(surface, (20, 20, 24), box)
                surface.blit(text, text.get_rect(center=(x, y)))

    def _draw_tooltip(self, surface: pygame.Surface, chamber: pygame.Rect) -> None:
        hover = self._session.hover
        if hover is None or self._mouse is None or self._session.mode is RevealMode.HIDDEN:
            return
        lines = tooltip_lines(hover.particle)
        if self._session.mode is RevealMode.NUMBERED and hover.particle.number is not None:
            display = self._session.event.numbering.display_for(hover.particle.number)
            lines = (f"Particle #{display}", f"Momentum: {hover.particle.momentum.magnitude:.2f} GeV/c")
        rendered = [self._small_font.render(line, True, (235, 235, 240)) for line in lines]
        w = max(r.get_width() for r in rendered) + 16
        h = sum(r.get_height() + 2 for r in rendered) + 12
        box = pygame.Rect(self._mouse[0] + 16, self._mouse[1] + 16, w, h)
        box.clamp_ip(chamber)
        pygame.draw.rect(surface, (24, 24, 30), box)
        pygame.draw.rect(surface, (120, 120, 130), box, 1)
        y = box.y + 6
        for r in rendered:
            surface.blit(r, (box.x + 8, y))
            y += r.get_height() + 2

    def _draw_panel(self, surface: pygame.Surface, panel: pygame.Rect) -> None:
        s = self._session
        text_main = (235, 235, 240)
        text_muted = (150, 150, 160)
        good = (120, 220, 130)
        bad = (235, 110, 110)

        pygame.draw.rect(surface, (18, 18, 22), panel)
        pygame.draw.line(surface, (60, 60, 70), panel.topleft, panel.bottomleft, 1)
        x = panel.x + 14
        y = panel.y + 12

        def line(text: str, color: tuple[int, int, int] = text_main, font: pygame.font.Font | None = None) -> None:
            nonlocal y
            r = (font or self._panel_font).render(text, True, color)
            surface.blit(r, (x, y))
            y += r.get_height() + 4

        line(SCENARIO_TITLES[s.scenario], font=self._title_font)
        line(f"Zoom {s.view.scale:.2f}", text_muted, self._small_font)
        y += 6

        if not s.form_shown:
            line("F: identify particles", text_muted, self._small_font)
        else:
            rows = s.form_rows()
            for idx, row in enumerate(rows):
                color = text_main
                if row.correct is not None:
                    color = good if row.correct else bad
                marker = ">" if idx == self._row % max(1, len(rows)) else " "
                answer = row.selected or "--"
                extra = f"  ({row.truth})" if row.truth is not None and not row.correct else ""
                hint = "  hint" if row.hint else ""
                line(f"{marker} #{row.display}: {answer}{extra}{hint}", color, self._small_font)
                if y > panel.bottom - 140:
                    line("...", text_muted, self._small_font)
                    break
            y += 4
            guess = s.neutrino_guess or "--"
            line(f"Neutrinos: {guess}  (0-{s.event.neutrino_count})", text_main, self._small_font)
            if s.revealed:
                line(f"True neutrino count: {s.event.neutrino_count}", text_muted, self._small_font)
            line(f"Score: {s.score():.1f}%", text_main)

        help_lines = (
            "N new  F form  R reveal",
            "+/- zoom  C reset  arrows pan",
            "Tab row  [ ] symbol  0-9 neutrinos",
            "Esc back",
        )
        y = panel.bottom - (len(help_lines) * 20 + 10)
        for text in help_lines:
            line(text, text_muted, self._small_font)


def open_chamber(app: App, *, config: ChamberConfig, scenario: Scenario) -> ChamberScreen:
    session = ChamberSession(
        clock=RealClock(),
        seed=new_seed(),
        config=replace(config, default_scenario=scenario),
    )
    screen = ChamberScreen(app, session)
    app.push(screen)
    return screen


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    config = ChamberConfig.from_env()
    setup_logging(config)

    pygame.init()
    pygame.display.set_caption("Bubble Chamber Trainer")
    surface = pygame.display.set_mode(config.window_size, pygame.RESIZABLE)

    clock = pygame.time.Clock()

    app = App(surface=surface)

    def opener(scenario: Scenario) -> Callable[[], None]:
        return lambda: open_chamber(app, config=config, scenario=scenario)

    scenarios = list(Scenario)
    items = [MenuItem(SCENARIO_TITLES[scenario], opener(scenario)) for scenario in scenarios]
    items.append(MenuItem("Quit", app.quit))
    app.push(
        MenuScreen(
            app,
            "Bubble Chamber",
            items,
            is_root=True,
            selected=scenarios.index(config.default_scenario),
        )
    )
    logger.info("started (default scenario: %s)", config.default_scenario.value)

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(config.target_fps)
    finally:
        pygame.quit()

    return 0
