"""Rendering for boards and tapes: terminal glyphs and PNG/GIF export."""

import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

import numpy as np
from PIL import Image

CLEAR_SCREEN = "\x1b[H\x1b[2J"
LIVE_GLYPH = "█"
DEAD_GLYPH = " "
BRAILLE_BASE = 0x2800

# Braille dot values for a 4-row x 2-column block (dots 1,2,3,7 left, 4,5,6,8 right)
DOT_WEIGHTS = np.array([[1, 8], [2, 16], [4, 32], [64, 128]], dtype=np.int32)


def block_lines(grid: np.ndarray) -> List[str]:
    """One text line per row, a full block for every live cell."""
    return ["".join(LIVE_GLYPH if cell else DEAD_GLYPH for cell in row) for row in grid]


def braille_lines(grid: np.ndarray) -> List[str]:
    """Pack 2x4 cells into each braille character."""
    h, w = grid.shape
    padded = np.zeros((h + (-h) % 4, w + (-w) % 2), dtype=np.int32)
    padded[:h, :w] = grid
    lines = []
    for y in range(0, padded.shape[0], 4):
        chars = []
        for x in range(0, padded.shape[1], 2):
            dots = int((padded[y:y + 4, x:x + 2] * DOT_WEIGHTS).sum())
            chars.append(chr(BRAILLE_BASE + dots))
        lines.append("".join(chars))
    return lines


RENDERERS = {
    "block": block_lines,
    "braille": braille_lines,
}


def print_frame(lines: Iterable[str], out: Optional[TextIO] = None, clear: bool = True):
    """Redraw the terminal with the given lines."""
    out = out or sys.stdout
    if clear:
        out.write(CLEAR_SCREEN)
    for line in lines:
        out.write(line + "\n")
    out.flush()


def render_grid_fast(grid: np.ndarray, cell_size: int = 4) -> np.ndarray:
    """Fast vectorized grid rendering."""
    h, w = grid.shape

    # Create base image with dead cell color
    img = np.full((h * cell_size, w * cell_size, 3), 30, dtype=np.uint8)

    # Upscale grid using repeat
    upscaled = np.repeat(np.repeat(grid, cell_size, axis=0), cell_size, axis=1)

    # Set live cells to white
    img[upscaled == 1] = 255

    return img


def save_image(grid: np.ndarray, filepath: str, cell_size: int = 4):
    """Save grid state as PNG image."""
    img = Image.fromarray(render_grid_fast(grid, cell_size))
    img.save(filepath)


def save_animation(
    history: List[np.ndarray],
    filepath: str,
    cell_size: int = 4,
    duration: int = 100,
    loop: int = 0,
):
    """Save simulation history as animated GIF."""
    frames = [Image.fromarray(render_grid_fast(grid, cell_size)) for grid in history]

    if frames:
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        frames[0].save(
            filepath,
            save_all=True,
            append_images=frames[1:],
            duration=duration,
            loop=loop,
        )
