"""
Image pattern: plays a picture one row at a time along the strip.
"""

import numpy as np
from pathlib import Path
from PIL import Image

from lightloop.errors import PatternError
from lightloop.frame import BLACK, FrameBuffer
from lightloop.patterns.base import Pattern


def load_image_array(image_path):
    """ Loads an image from the specified file path as an RGB pixel array.
    Transparent areas are composited over black.

    Args:
        image_path (str or Path): The path to the image file.

    Returns:
        numpy uint8 array of shape (height, width, 3)
    """
    path = Path(image_path)
    try:
        image = Image.open(path)
        image.load()
    except OSError as e:
        raise PatternError(f"can't load image {str(path)!r}: {e}") from e
    if image.mode == 'RGBA':
        # Paste onto black, using the alpha channel as a mask
        background = Image.new('RGB', image.size, (0, 0, 0))
        background.paste(image, (0, 0), image)
        image = background
    elif image.mode != 'RGB':
        image = image.convert('RGB')
    return np.array(image, dtype=np.uint8)


class ImageRows(Pattern):
    """
    Each row of the image is shown for row_ms, top to bottom, then it loops.
    Rows are resampled (nearest pixel) to the strip length.
    """

    def __init__(self, pixel_array, row_ms=50):
        arr = np.asarray(pixel_array, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise PatternError(f"image must be (height, width, 3), got {arr.shape}")
        self.rows = arr
        self.row_ms = int(row_ms)
        self._cols = None

    @classmethod
    def from_file(cls, image_path, row_ms=50):
        return cls(load_image_array(image_path), row_ms=row_ms)

    def _columns(self, width):
        if self._cols is None or len(self._cols) != width:
            self._cols = (np.arange(width) * self.rows.shape[1]) // width
        return self._cols

    def render(self, frame: FrameBuffer, time_ms: int) -> None:
        height, width = self.rows.shape[:2]
        if height == 0 or width == 0 or self.row_ms <= 0:
            frame.fill(BLACK)
            return
        row = (time_ms // self.row_ms) % height
        frame.pixels[...] = self.rows[row, self._columns(len(frame))]
