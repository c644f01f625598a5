import numpy as np
import pytest

from conftest import make_buffer, uniform_buffer
from conv.abstract import Conv2D
from conv.standard import Standard
from conv.threaded import THREADS, Threaded, WorkRange, partition_rows


@pytest.mark.parametrize("height,num_threads", [
    (4, 1), (4, 2), (4, 4), (10, 3), (7, 4), (3, 5), (1, 8), (100, 7),
])
def test_partition_covers_every_row_once(height, num_threads):
    ranges = partition_rows(height, num_threads)

    assert len(ranges) == num_threads
    rows = [row for r in ranges for row in range(r.start_row, r.stop_row)]
    assert rows == list(range(height))


def test_remainder_goes_to_last_range():
    assert partition_rows(10, 3) == [WorkRange(0, 3), WorkRange(3, 3), WorkRange(6, 4)]


def test_fewer_rows_than_threads():
    assert partition_rows(2, 4) == [WorkRange(0, 0), WorkRange(0, 0), WorkRange(0, 0), WorkRange(0, 2)]


@pytest.mark.parametrize("num_threads", [0, -1])
def test_rejects_invalid_thread_count(num_threads):
    with pytest.raises(ValueError):
        partition_rows(4, num_threads)
    with pytest.raises(ValueError):
        Threaded(num_threads=num_threads)


def test_default_thread_count():
    assert Threaded().num_threads == THREADS


@pytest.mark.parametrize("width,height", [(1, 1), (5, 7), (9, 2), (16, 13)])
@pytest.mark.parametrize("num_threads", [1, 2, 3, 4, 8])
def test_matches_standard(random_buffer, width, height, num_threads):
    image = random_buffer(width, height)

    expected = Standard().run(image)
    result = Threaded(num_threads=num_threads).run(image)

    assert result.to_bytes() == expected.to_bytes()


@pytest.mark.parametrize("num_threads", [1, 2, 4])
def test_uniform_4x4_is_black(num_threads):
    result = Threaded(num_threads=num_threads).run(uniform_buffer(4, 4, 50))
    assert not result.pixels.any()


@pytest.mark.parametrize("num_threads", [1, 2, 3])
def test_single_bright_corner_on_3x3(num_threads):
    pixels = np.zeros((3, 3, 3), dtype=np.uint8)
    pixels[0, 0] = 255
    result = Threaded(num_threads=num_threads).run(make_buffer(pixels))

    assert result.pixels[0, 0].tolist() == [255, 255, 255]
    assert result.pixels[1, 1].tolist() == [0, 0, 0]


def test_each_worker_writes_its_own_rows(monkeypatch, random_buffer):
    calls = []
    convolve_rows = Conv2D.convolve_rows

    def record(self, source, start_row, stop_row, out):
        calls.append((start_row, stop_row, out.shape[0]))
        convolve_rows(self, source, start_row, stop_row, out)

    monkeypatch.setattr(Conv2D, "convolve_rows", record)
    Threaded(num_threads=3).run(random_buffer(4, 11))

    assert sorted(calls) == [(0, 3, 3), (3, 6, 3), (6, 11, 5)]


def test_worker_failure_aborts_the_pass(monkeypatch, random_buffer):
    convolve_rows = Conv2D.convolve_rows

    def fail_on_second_block(self, source, start_row, stop_row, out):
        if start_row == 2:
            raise MemoryError("out of memory")
        convolve_rows(self, source, start_row, stop_row, out)

    monkeypatch.setattr(Conv2D, "convolve_rows", fail_on_second_block)

    with pytest.raises(MemoryError):
        Threaded(num_threads=4).run(random_buffer(4, 8))


def test_source_is_not_modified(random_buffer):
    image = random_buffer(6, 9)
    before = image.pixels.copy()
    Threaded(num_threads=4).run(image)
    np.testing.assert_array_equal(image.pixels, before)
