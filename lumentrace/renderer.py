"""
Frame rendering on top of the per-pixel shading core.

Implements:
- Tile-based rendering, serial or on a thread pool
- Progress reporting
- Quantization of linear colors to 8-bit
"""

from __future__ import annotations
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple
import numpy as np

from .vec3 import Color
from .render import RenderState

logger = logging.getLogger(__name__)


def render_frame(state: RenderState) -> List[Color]:
    """Render every pixel serially.

    Returns:
        Flat row-major buffer of width * height linear colors
    """
    return state.render_pixels()


def to_ldr(image: np.ndarray) -> np.ndarray:
    """Quantize linear colors to 8 bits per channel.

    Each channel is clamped to [0, 1], scaled to 255 and rounded.

    Args:
        image: Float image array

    Returns:
        uint8 array of the same shape
    """
    return np.round(np.clip(image, 0.0, 1.0) * 255.0).astype(np.uint8)


class Renderer:
    """Frame renderer with optional multi-threading.

    Pixels share nothing mutable, so tiles may run in any order on any
    thread; only the render state must stay fixed for the frame.
    """

    def __init__(self, num_threads: int = 1, tile_size: int = 1):
        """Create a renderer.

        Args:
            num_threads: Worker threads (0 = auto-detect, 1 = serial)
            tile_size: Image rows per tile
        """
        if num_threads == 0:
            num_threads = os.cpu_count() or 4
        if num_threads < 0 or tile_size <= 0:
            raise ValueError(
                f"Invalid renderer config: num_threads={num_threads}, tile_size={tile_size}"
            )
        self.num_threads = num_threads
        self.tile_size = tile_size
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, state: RenderState) -> np.ndarray:
        """Render one frame and return it as a numpy array.

        Args:
            state: The frame to render; must not change until this returns

        Returns:
            Linear image as numpy array of shape (height, width, 3)
        """
        width = state.settings.width
        height = state.settings.height

        image = np.zeros((height * width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)
        completed_tiles = [0]
        lock = threading.Lock()

        logger.debug(
            "Rendering %dx%d frame in %d tiles on %d thread(s)",
            width, height, total_tiles, self.num_threads
        )
        start_time = time.perf_counter()

        def render_tile(tile: Tuple[int, int]) -> Tuple[Tuple[int, int], List[Color]]:
            """Render a single tile."""
            start, end = tile
            colors = state.render_pixels(range(start, end))

            # Report under the lock so callbacks see a non-decreasing fraction
            with lock:
                completed_tiles[0] += 1
                if self._progress_callback:
                    self._progress_callback(completed_tiles[0] / total_tiles)

            return tile, colors

        if self.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
                results = list(executor.map(render_tile, tiles))
        else:
            results = [render_tile(tile) for tile in tiles]

        for (start, end), colors in results:
            image[start:end] = [c.to_array() for c in colors]

        logger.debug("Frame done in %.3fs", time.perf_counter() - start_time)
        return image.reshape((height, width, 3))

    def _generate_tiles(self, width: int, height: int) -> List[Tuple[int, int]]:
        """Split the frame into runs of whole rows.

        Returns:
            List of tiles as (first_pixel, end_pixel) index pairs
        """
        row_pixels = self.tile_size * width
        total = width * height
        return [
            (start, min(start + row_pixels, total))
            for start in range(0, total, row_pixels)
        ]

    def to_ldr(self, image: np.ndarray) -> np.ndarray:
        """Convert a linear image to 8-bit."""
        return to_ldr(image)

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file.

        Args:
            image: Image array (linear float or uint8)
            filename: Output filename (extension determines format)
        """
        from PIL import Image as PILImage

        if image.dtype != np.uint8:
            image = self.to_ldr(image)

        PILImage.fromarray(image, 'RGB').save(filename)
