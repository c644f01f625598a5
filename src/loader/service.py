"""Module for loading and saving binary PPM (P6) images."""

import logging
import os
import tempfile
from typing import Final

from PIL import Image

from loader.buffer import CHANNELS, PixelBuffer

logger = logging.getLogger(__name__)

MAGIC: Final = b"P6"
MAX_COLOR: Final = 255
WHITESPACE: Final = b" \t\r\n\v\f"


class ImageFormatError(ValueError):
    """Raised when a file is not a valid 8-bit binary PPM image."""


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


class _HeaderReader:
    """Cursor over the header tokens of a PPM file."""

    def __init__(self, data: bytes, name: str) -> None:
        self.data = data
        self.name = name
        self.pos = 0

    def _skip_line(self) -> None:
        end = self.data.find(b"\n", self.pos)
        self.pos = len(self.data) if end == -1 else end + 1

    def next_token(self) -> bytes:
        """Return the next whitespace separated token, skipping comments."""
        while self.pos < len(self.data):
            byte = self.data[self.pos:self.pos + 1]
            if byte == b"#":
                self._skip_line()
            elif byte in WHITESPACE:
                self.pos += 1
            else:
                break
        start = self.pos
        while self.pos < len(self.data) and self.data[self.pos:self.pos + 1] not in WHITESPACE + b"#":
            self.pos += 1
        if start == self.pos:
            raise ImageFormatError(f"Unexpected end of header (error loading '{self.name}')")
        return self.data[start:self.pos]

    def next_int(self, what: str) -> int:
        token = self.next_token()
        if not token.isdigit():
            raise ImageFormatError(f"Invalid {what} {token!r} (error loading '{self.name}')")
        return int(token)

    def end_of_header(self) -> int:
        """Consume the rest of the max value line and return the raster offset."""
        end = self.data.find(b"\n", self.pos)
        if end == -1:
            raise ImageFormatError(f"Missing pixel data (error loading '{self.name}')")
        return end + 1


class Loader:
    """Class for loading and saving PPM images."""

    @classmethod
    def read(cls, image_path: str) -> PixelBuffer:
        """Load a binary PPM image from the given path.

        Args:
            image_path (str): Path to the image file.

        Raises:
            OSError: If the file cannot be opened.
            ImageFormatError: If the file is not an 8-bit P6 image.
        """
        with open(image_path, "rb") as f:
            data = f.read()
        buffer = cls.decode(data, name=image_path)
        logger.debug("Loaded %s (%dx%d)", image_path, buffer.width, buffer.height)
        return buffer

    @classmethod
    def decode(cls, data: bytes, name: str = "<bytes>") -> PixelBuffer:
        """Decode PPM bytes into a pixel buffer.

        Args:
            data (bytes): Full contents of a P6 file.
            name (str): Name used in error messages.
        """
        header = _HeaderReader(data, name)

        if header.next_token() != MAGIC:
            raise ImageFormatError(f"Invalid image format (must be 'P6'): '{name}'")

        width = header.next_int("image size")
        height = header.next_int("image size")
        if width < 1 or height < 1:
            raise ImageFormatError(f"Invalid image size {width}x{height} (error loading '{name}')")

        max_color = header.next_int("rgb component")
        if max_color != MAX_COLOR:
            raise ImageFormatError(f"'{name}' does not have 8-bits components")

        offset = header.end_of_header()
        size = width * height * CHANNELS
        if len(data) - offset < size:
            raise ImageFormatError(
                f"Error loading image '{name}': expected {size} bytes of pixel data, "
                f"got {len(data) - offset}"
            )
        return PixelBuffer.from_bytes(data[offset:offset + size], width, height).freeze()

    @classmethod
    def encode(cls, buffer: PixelBuffer) -> bytes:
        """Encode a pixel buffer as P6 bytes, without comments."""
        header = b"%s\n%d %d\n%d\n" % (MAGIC, buffer.width, buffer.height, MAX_COLOR)
        return header + buffer.to_bytes()

    @classmethod
    def to_image(cls, buffer: PixelBuffer) -> Image.Image:
        """Convert a pixel buffer to a Pillow RGB image."""
        return Image.fromarray(buffer.pixels)

    @classmethod
    def write(cls, buffer: PixelBuffer, image_path: str) -> None:
        """Save a pixel buffer as a P6 image.

        The image is written to a temporary file next to the target and then
        renamed into place, so a failed write never leaves a partial file.

        Args:
            buffer (PixelBuffer): Image to save.
            image_path (str): Destination path.

        Raises:
            OSError: If the file cannot be written.
        """
        directory = os.path.dirname(os.path.abspath(image_path))
        fd, tmp_path = tempfile.mkstemp(suffix=".ppm", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                cls.to_image(buffer).save(f, format="PPM")
            # mkstemp creates 0600; give the output the usual umask-based mode
            os.chmod(tmp_path, 0o666 & ~_current_umask())
            os.replace(tmp_path, image_path)
        except BaseException:
            os.unlink(tmp_path)
            raise
        logger.info("Saved %s (%dx%d)", image_path, buffer.width, buffer.height)
