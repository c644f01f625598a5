"""Convolution kernels."""

from dataclasses import dataclass, field
from typing import Final

import numpy as np


@dataclass(frozen=True, eq=False)
class Kernel:
    """Square, odd-sized convolution kernel with an output scale factor."""

    weights: np.ndarray = field(repr=False)
    factor: float = 1.0

    def __post_init__(self) -> None:
        """Validate the kernel shape and freeze the weights.

        Raises:
            ValueError: If the weights are not a square, odd-sized matrix.
        """
        weights = np.array(self.weights, dtype=np.float64)
        if weights.ndim != 2 or weights.shape[0] != weights.shape[1]:
            raise ValueError(f"Kernel must be square, got shape {weights.shape}")
        if weights.shape[0] % 2 == 0:
            raise ValueError(f"Kernel size must be odd, got {weights.shape[0]}")
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "factor", float(self.factor))

    @property
    def size(self) -> int:
        """Number of rows (and columns) of the weights.

        Returns:
            int: Kernel size, always odd.
        """
        return self.weights.shape[0]

    @property
    def radius(self) -> int:
        """Distance from the centre weight to the kernel edge.

        Returns:
            int: size // 2.
        """
        return self.size // 2


LAPLACIAN: Final = Kernel(
    weights=[
        [-1, -1, -1],
        [-1, 8, -1],
        [-1, -1, -1],
    ],
    factor=1.0,
)
