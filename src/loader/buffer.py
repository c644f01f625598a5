"""In-memory RGB pixel buffer."""

import numpy as np

CHANNELS = 3


class PixelBuffer:
    """Row-major array of 8-bit RGB pixels with fixed dimensions."""

    pixels: np.ndarray

    def __init__(self, pixels: np.ndarray) -> None:
        """Initialize PixelBuffer class.

        Args:
            pixels (np.ndarray): Array of shape (height, width, 3) and dtype uint8.

        Raises:
            ValueError: If the array shape or dtype does not describe an RGB image.
        """
        if pixels.dtype != np.uint8:
            raise ValueError(f"Pixel data must be uint8, got {pixels.dtype}")
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f"Pixel data must have shape (height, width, 3), got {pixels.shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError(f"Image dimensions must be positive, got {pixels.shape[1]}x{pixels.shape[0]}")
        self.pixels = pixels

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Allocate a zeroed buffer of the given dimensions."""
        return cls(np.zeros((height, width, CHANNELS), dtype=np.uint8))

    @classmethod
    def from_bytes(cls, data: bytes, width: int, height: int) -> "PixelBuffer":
        """Build a buffer from raw row-major R, G, B bytes.

        Args:
            data (bytes): At least width * height * 3 bytes.
            width (int): Image width in pixels.
            height (int): Image height in pixels.
        """
        size = width * height * CHANNELS
        pixels = np.frombuffer(data, dtype=np.uint8, count=size)
        return cls(pixels.reshape((height, width, CHANNELS)).copy())

    @property
    def width(self) -> int:
        """Image width in pixels.

        Returns:
            int: Number of columns.
        """
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        """Image height in pixels.

        Returns:
            int: Number of rows.
        """
        return self.pixels.shape[0]

    def freeze(self) -> "PixelBuffer":
        """Mark the pixel data read-only and return the buffer."""
        self.pixels.setflags(write=False)
        return self

    def to_bytes(self) -> bytes:
        """Serialize the pixels as raw row-major R, G, B bytes.

        Returns:
            bytes: width * height * 3 bytes.
        """
        return self.pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return bool(np.array_equal(self.pixels, other.pixels))

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
