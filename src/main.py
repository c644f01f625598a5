"""Main module for the application."""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Final, Optional, Sequence

from conv.abstract import Conv2D
from conv.standard import Standard
from conv.threaded import THREADS, Threaded
from loader.buffer import PixelBuffer
from loader.service import Loader

logger = logging.getLogger(__name__)

OUTPUT_PATH: Final = "laplacian.ppm"
MODES: Final = ("standard", "threaded")


@dataclass(frozen=True)
class RunConfig:
    """Settings for one filter run."""

    image_path: str
    debug: bool = False
    mode: str = "threaded"
    num_threads: int = THREADS
    output_path: str = OUTPUT_PATH
    verbose: bool = False

    def build_engine(self) -> Conv2D:
        """Create the convolution engine for the configured mode.

        Returns:
            Conv2D: Standard engine, or Threaded engine with num_threads workers.
        """
        if self.mode == "standard":
            return Standard()
        return Threaded(num_threads=self.num_threads)


def parse_args(argv: Optional[Sequence[str]] = None) -> RunConfig:
    """Build the run configuration from command line arguments.

    The optional second argument enables debug mode whatever its value,
    including values that start with a dash such as -d or --debug.

    Args:
        argv (Optional[Sequence[str]]): Arguments without the program name.
            Defaults to sys.argv[1:].

    Returns:
        RunConfig: Parsed settings.
    """
    parser = argparse.ArgumentParser(
        prog="laplacian",
        description="Apply a Laplacian edge filter to a P6 PPM image and time it.",
        allow_abbrev=False,
    )
    parser.add_argument("image", help="input PPM (P6) image")
    parser.add_argument(
        "debug", nargs="?", default=None,
        help=f"any value: also write the filtered image to --output (default {OUTPUT_PATH})",
    )
    parser.add_argument("--mode", choices=MODES, default="threaded")
    parser.add_argument("--threads", type=int, default=THREADS, help="worker threads for threaded mode")
    parser.add_argument("--output", default=OUTPUT_PATH, help="output path used in debug mode")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    args, extras = parser.parse_known_args(argv)

    if extras:
        if args.debug is not None or len(extras) > 1:
            parser.error(f"unrecognized arguments: {' '.join(extras)}")
        args.debug = extras[0]

    if args.threads < 1:
        parser.error("--threads must be at least 1")

    return RunConfig(
        image_path=args.image,
        debug=args.debug is not None,
        mode=args.mode,
        num_threads=args.threads,
        output_path=args.output,
        verbose=args.verbose,
    )


def run(config: RunConfig) -> PixelBuffer:
    """Load the image, filter it and optionally save the result.

    Args:
        config (RunConfig): Run settings.

    Returns:
        PixelBuffer: Filtered image.

    Raises:
        OSError: If the input cannot be read or the output cannot be written.
            Write failures name config.output_path.
    """
    image = Loader.read(config.image_path)
    engine = config.build_engine()

    logger.info("Filtering %s (%dx%d) in %s mode", config.image_path, image.width, image.height, config.mode)
    result = engine.run(image)

    print(f"Time consumed: {engine.elapsed:.3f} s")

    if config.debug:
        try:
            Loader.write(result, config.output_path)
        except OSError as e:
            raise OSError(e.errno, e.strerror or str(e), config.output_path) from e

    return result


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the filter from the command line.

    Args:
        argv (Optional[Sequence[str]]): Arguments without the program name.

    Returns:
        int: Exit status, 0 on success and 1 on any failure.
    """
    config = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format='%(asctime)s - %(name)-20s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )

    try:
        run(config)
    except OSError as e:
        logger.error("I/O error on '%s': %s", e.filename or config.image_path, e.strerror or e)
        return 1
    except MemoryError:
        logger.error("Unable to allocate memory for '%s'", config.image_path)
        return 1
    except (ValueError, RuntimeError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
