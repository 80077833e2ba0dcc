from __future__ import annotations

import os


def _post_key(pygame, key: int) -> None:  # type: ignore[no-untyped-def]
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "mod": 0, "unicode": ""}))


def test_ui_smoke_open_chamber_and_play_a_round(monkeypatch) -> None:
    # Headless SDL for CI.
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
    monkeypatch.setenv("BUBBLE_CHAMBER_SCENARIO", "pion-decay")

    import pygame

    from bubble_chamber.app import run

    def inject(frame: int) -> None:
        # Menu (default scenario preselected) -> chamber -> form -> answers -> reveal -> new event -> back
        if frame == 1:
            _post_key(pygame, pygame.K_RETURN)
        elif frame == 2:
            pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, {"pos": (300, 300), "rel": (0, 0), "buttons": (0, 0, 0)}))
        elif frame == 3:
            _post_key(pygame, pygame.K_f)
        elif frame == 4:
            _post_key(pygame, pygame.K_TAB)
        elif frame == 5:
            _post_key(pygame, pygame.K_RIGHTBRACKET)
        elif frame == 6:
            _post_key(pygame, pygame.K_2)
        elif frame == 7:
            pygame.event.post(pygame.event.Event(pygame.MOUSEWHEEL, {"x": 0, "y": 1}))
        elif frame == 8:
            pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": (50, 50), "button": 1}))
        elif frame == 9:
            pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, {"pos": (80, 70), "rel": (30, 20), "buttons": (1, 0, 0)}))
        elif frame == 10:
            pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONUP, {"pos": (80, 70), "button": 1}))
        elif frame == 11:
            _post_key(pygame, pygame.K_r)
        elif frame == 12:
            _post_key(pygame, pygame.K_LEFT)
        elif frame == 13:
            _post_key(pygame, pygame.K_n)
        elif frame == 14:
            _post_key(pygame, pygame.K_ESCAPE)

    assert run(max_frames=20, event_injector=inject) == 0
