"""Window, input handling and tile viewer on top of pygame."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from germber.ppu import XRES, YRES  # noqa: E402

SCREEN_WIDTH = 1024
SCREEN_HEIGHT = 768

TILE_COLORS = (0xFFFFFFFF, 0xFFAAAAAA, 0xFF555555, 0xFF000000)
DEBUG_BACKGROUND = 0xFF111111
TILE_DATA_START = 0x8000
DEBUG_GAP = 10

_KEY_BINDINGS = {
    pygame.K_LSHIFT: "b",
    pygame.K_z: "b",
    pygame.K_x: "a",
    pygame.K_SPACE: "a",
    pygame.K_RETURN: "start",
    pygame.K_BACKSPACE: "select",
    pygame.K_w: "up",
    pygame.K_UP: "up",
    pygame.K_s: "down",
    pygame.K_DOWN: "down",
    pygame.K_a: "left",
    pygame.K_LEFT: "left",
    pygame.K_d: "right",
    pygame.K_RIGHT: "right",
}


def _rgb(argb: int) -> tuple[int, int, int]:
    return (argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF


def _frame_rgb(video_buffer: list[int]) -> bytes:
    return bytes(channel for argb in video_buffer for channel in _rgb(argb))


def apply_key(state: Any, key: int, down: bool) -> bool:
    """Update the button state for a key; return True if the key asks to quit."""
    if key == pygame.K_ESCAPE:
        return True
    button = _KEY_BINDINGS.get(key)
    if button is not None:
        setattr(state, button, bool(down))
    return False


def tile_pixels(read: Callable[[int], int], start: int, tile_num: int) -> list[list[int]]:
    """Decode one 8x8 tile into rows of colour indices 0-3."""
    base = start + tile_num * 16
    rows = []
    for row in range(8):
        b1 = read(base + row * 2)
        b2 = read(base + row * 2 + 1)
        rows.append([
            (int(bool(b1 & (1 << bit))) << 1) | int(bool(b2 & (1 << bit)))
            for bit in range(7, -1, -1)
        ])
    return rows


class Ui:
    """The game window, with the tile viewer beside it in debug mode."""

    def __init__(self, scale: int = 4, *, debug: bool = False) -> None:
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = scale
        self.debug = debug

        pygame.display.init()
        print("SDL INIT")

        self.screen_size = (XRES * scale, YRES * scale)
        if debug:
            self.debug_size = (16 * 8 * scale + 16 * scale, 32 * 8 * scale + 64 * scale)
            width = self.screen_size[0] + DEBUG_GAP + self.debug_size[0]
            height = max(self.screen_size[1], self.debug_size[1])
        else:
            self.debug_size = (0, 0)
            width, height = self.screen_size

        self.window = pygame.display.set_mode((width, height))
        pygame.display.set_caption("germber")
        self.debug_surface = pygame.Surface(self.debug_size) if debug else None

    def close(self) -> None:
        """Close the window."""
        pygame.display.quit()

    def handle_events(self, emulator: Any) -> None:
        """Apply pending key and window events to the emulator."""
        for event in pygame.event.get():
            if event.type in (pygame.KEYDOWN, pygame.KEYUP):
                if apply_key(emulator.gamepad_state, event.key, event.type == pygame.KEYDOWN):
                    emulator.die = True
            elif event.type in (pygame.QUIT, pygame.WINDOWCLOSE):
                emulator.die = True

    def _draw_tile(self, surface: pygame.Surface, read, tile_num: int, x: int, y: int) -> None:
        scale = self.scale
        for row, pixels in enumerate(tile_pixels(read, TILE_DATA_START, tile_num)):
            for col, index in enumerate(pixels):
                rect = pygame.Rect(x + col * scale, y + row * scale, scale, scale)
                surface.fill(_rgb(TILE_COLORS[index]), rect)

    def _update_debug(self, read: Callable[[int], int]) -> None:
        surface = self.debug_surface
        surface.fill(_rgb(DEBUG_BACKGROUND))
        scale = self.scale
        # 384 tiles laid out 16 across and 24 down.
        for ty in range(24):
            for tx in range(16):
                self._draw_tile(
                    surface,
                    read,
                    ty * 16 + tx,
                    tx * 8 * scale + tx * scale,
                    ty * 8 * scale + ty * scale,
                )

    def update(self, video_buffer: list[int], read: Callable[[int], int]) -> None:
        """Draw the latest frame, and the tile data in debug mode."""
        frame = pygame.image.frombuffer(_frame_rgb(video_buffer), (XRES, YRES), "RGB")
        self.window.blit(pygame.transform.scale(frame, self.screen_size), (0, 0))

        if self.debug_surface is not None:
            self._update_debug(read)
            self.window.blit(self.debug_surface, (self.screen_size[0] + DEBUG_GAP, 0))

        pygame.display.flip()