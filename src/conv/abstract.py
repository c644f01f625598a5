"""Abstract base classes for convolution operations."""

import numpy as np
from abc import ABC, abstractmethod

from conv.kernel import LAPLACIAN, Kernel
from loader.buffer import PixelBuffer


def clamp(values: np.ndarray) -> np.ndarray:
    """Clamp accumulated channel values to 8 bits.

    Values below 0 become 0, values above 255 become 255 and everything in
    between is truncated toward zero (17.9 -> 17), never rounded.

    Args:
        values (np.ndarray): Accumulated, scaled channel values.

    Returns:
        np.ndarray: uint8 array of the same shape.
    """
    return np.clip(np.trunc(values), 0, 255).astype(np.uint8)


class Conv2D(ABC):
    """Abstract base class for 2D convolution operations."""

    kernel: Kernel
    elapsed: float

    def __init__(self, kernel: Kernel = LAPLACIAN) -> None:
        """Initialize Conv2D class.

        Args:
            kernel (Kernel): Kernel that will be used.
        """
        self.kernel = kernel
        self.elapsed = 0.0

    def convolve_rows(self, source: np.ndarray, start_row: int, stop_row: int,
                      out: np.ndarray) -> None:
        """Apply the kernel to rows [start_row, stop_row) of the source.

        Neighbour coordinates wrap around the image edges, so every pixel,
        corners included, sees a full neighbourhood.

        Args:
            source (np.ndarray): Source pixels, shape (height, width, 3). Only read.
            start_row (int): First destination row.
            stop_row (int): One past the last destination row.
            out (np.ndarray): Destination rows, shape (stop_row - start_row, width, 3).
        """
        img_h, img_w, _ = source.shape
        radius = self.kernel.radius
        rows = np.arange(start_row, stop_row)
        cols = np.arange(img_w)

        total = np.zeros((stop_row - start_row, img_w, source.shape[2]), dtype=np.float64)
        for filter_y in range(self.kernel.size):
            image_y = (rows - radius + filter_y) % img_h
            for filter_x in range(self.kernel.size):
                image_x = (cols - radius + filter_x) % img_w
                total += source[np.ix_(image_y, image_x)] * self.kernel.weights[filter_y, filter_x]

        out[...] = clamp(total * self.kernel.factor)

    @abstractmethod
    def run(self, image: PixelBuffer) -> PixelBuffer:
        """Run convolution operation on the given image.

        Args:
            image (PixelBuffer): Image to apply convolution on.

        Returns:
            PixelBuffer: Convolved image, same dimensions as the input.
        """
        pass
