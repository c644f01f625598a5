import numpy as np
import pytest

from loader.buffer import PixelBuffer


def make_buffer(pixels) -> PixelBuffer:
    return PixelBuffer(np.array(pixels, dtype=np.uint8))


def uniform_buffer(width: int, height: int, value: int) -> PixelBuffer:
    return PixelBuffer(np.full((height, width, 3), value, dtype=np.uint8))


@pytest.fixture
def random_buffer():
    rng = np.random.default_rng(1234)

    def build(width: int, height: int) -> PixelBuffer:
        return PixelBuffer(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))

    return build


@pytest.fixture
def ppm_file(tmp_path):
    def write(data: bytes, name: str = "input.ppm") -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return write
