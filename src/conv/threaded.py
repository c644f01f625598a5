"""Module for threaded convolution."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Final, NamedTuple

from conv.abstract import Conv2D
from conv.kernel import LAPLACIAN, Kernel
from loader.buffer import PixelBuffer

logger = logging.getLogger(__name__)

THREADS: Final = 4


class WorkRange(NamedTuple):
    """Contiguous block of destination rows owned by one worker."""

    start_row: int
    row_count: int

    @property
    def stop_row(self) -> int:
        return self.start_row + self.row_count


def partition_rows(height: int, num_threads: int) -> list[WorkRange]:
    """Split [0, height) into num_threads contiguous, disjoint ranges.

    Every range gets height // num_threads rows except the last one, which
    also takes the remainder. When height < num_threads all but the last
    range are empty.

    Args:
        height (int): Number of image rows.
        num_threads (int): Number of workers, at least 1.

    Returns:
        list[WorkRange]: One range per worker, in row order.
    """
    if num_threads < 1:
        raise ValueError(f"Number of threads must be at least 1, got {num_threads}")

    rows_per_thread = height // num_threads
    ranges = [WorkRange(t * rows_per_thread, rows_per_thread) for t in range(num_threads - 1)]
    last_start = (num_threads - 1) * rows_per_thread
    ranges.append(WorkRange(last_start, height - last_start))
    return ranges


class Threaded(Conv2D):
    """Convolution split by row blocks over a fixed number of threads."""

    num_threads: int

    def __init__(self, kernel: Kernel = LAPLACIAN, num_threads: int = THREADS) -> None:
        """Initialize Threaded class.

        Args:
            kernel (Kernel): Kernel that will be used.
            num_threads (int): Number of threads to use.
        """
        if num_threads < 1:
            raise ValueError(f"Number of threads must be at least 1, got {num_threads}")
        super().__init__(kernel)
        self.num_threads = num_threads

    def run(self, image: PixelBuffer) -> PixelBuffer:
        """Run convolution operation on the given image.

        Each worker writes only its own rows of the shared output, so no
        locking is needed. The call returns after all workers finished; the
        first worker error is re-raised and no result is returned.

        Args:
            image (PixelBuffer): Image to apply convolution on.

        Returns:
            PixelBuffer: Convolved image.
        """
        start_time = time.perf_counter()

        output = PixelBuffer.blank(image.width, image.height)
        source = image.pixels

        def process_block(block: WorkRange) -> None:
            """Process image block.

            Args:
                block (WorkRange): Rows owned by this worker.
            """
            self.convolve_rows(
                source, block.start_row, block.stop_row,
                output.pixels[block.start_row:block.stop_row],
            )

        blocks = [block for block in partition_rows(image.height, self.num_threads) if block.row_count]
        logger.debug("Dispatching %d blocks over %d threads: %s", len(blocks), self.num_threads, blocks)

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            futures = [executor.submit(process_block, block) for block in blocks]

        for future in futures:
            future.result()

        end_time = time.perf_counter()
        self.elapsed = end_time - start_time
        logger.debug("Threaded convolution took %.6f seconds.", self.elapsed)

        return output.freeze()
