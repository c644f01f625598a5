"""Module for serial convolution."""

import logging
import time

from conv.abstract import Conv2D
from loader.buffer import PixelBuffer

logger = logging.getLogger(__name__)


class Standard(Conv2D):
    """Single-threaded reference convolution."""

    def run(self, image: PixelBuffer) -> PixelBuffer:
        """Run convolution operation on the given image.

        Args:
            image (PixelBuffer): Image to apply convolution on.

        Returns:
            PixelBuffer: Convolved image.
        """
        start_time = time.perf_counter()

        output = PixelBuffer.blank(image.width, image.height)
        self.convolve_rows(image.pixels, 0, image.height, output.pixels)

        end_time = time.perf_counter()
        self.elapsed = end_time - start_time
        logger.debug("Standard convolution took %.6f seconds.", self.elapsed)

        return output.freeze()
