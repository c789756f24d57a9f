"""pygame window hosting the interactive graph view.

Translates pygame input into controller events, posts a tick every
``tick_ms`` milliseconds, and paints the primitives the controller returns.
"""

from __future__ import annotations

import logging
import queue

from .controller import (
    InteractionController,
    PointerMoved,
    PointerPressed,
    PointerReleased,
    Scrolled,
    Tick,
)
from .scene import Circle, Line, Primitive, Text
from .viewport import Rect

logger = logging.getLogger(__name__)

_BUTTONS = {1: "left", 2: "middle", 3: "right"}


def _draw(pygame, screen, fonts: dict[int, object], primitives: list[Primitive]) -> None:
    overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
    for prim in primitives:
        if isinstance(prim, Line):
            pygame.draw.aaline(overlay, prim.color, prim.start, prim.end)
        elif isinstance(prim, Circle):
            pygame.draw.circle(overlay, prim.color, prim.center, max(1.0, prim.radius))
        elif isinstance(prim, Text):
            size = int(prim.size)
            font = fonts.get(size)
            if font is None:
                font = fonts[size] = pygame.font.Font(None, size)
            label = font.render(prim.content, True, prim.color[:3])
            label.set_alpha(prim.color[3])
            overlay.blit(label, label.get_rect(midleft=prim.position))
    screen.blit(overlay, (0, 0))


def run_window(
    controller: InteractionController,
    *,
    title: str = "Markdown Links",
    tick_ms: int = 15,
    changes: queue.Queue | None = None,
) -> None:
    """Open the window and process events until it is closed."""
    import pygame

    pygame.init()
    try:
        surface = controller.surface
        screen = pygame.display.set_mode((int(surface.width), int(surface.height)), pygame.RESIZABLE)
        pygame.display.set_caption(title)
        tick_event = pygame.USEREVENT + 1
        pygame.time.set_timer(tick_event, tick_ms)
        fonts: dict[int, object] = {}
        cursor = (0.0, 0.0)

        running = True
        while running:
            for event in [pygame.event.wait()] + pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    controller.resize(Rect(0, 0, event.w, event.h))
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button in _BUTTONS:
                    controller.handle(PointerPressed(event.pos, _BUTTONS[event.button]))
                elif event.type == pygame.MOUSEBUTTONUP and event.button in _BUTTONS:
                    controller.handle(PointerReleased(event.pos, _BUTTONS[event.button]))
                elif event.type == pygame.MOUSEMOTION:
                    cursor = event.pos
                    controller.handle(PointerMoved(event.pos))
                elif event.type == pygame.MOUSEWHEEL:
                    controller.handle(Scrolled(cursor, float(event.y)))
                elif event.type == tick_event:
                    if changes is not None:
                        while True:
                            try:
                                change = changes.get_nowait()
                            except queue.Empty:
                                break
                            controller.handle(change)
                    controller.handle(Tick())

            screen.fill(controller.settings.palette.background[:3])
            _draw(pygame, screen, fonts, controller.frame())
            pygame.display.flip()
    finally:
        pygame.quit()
