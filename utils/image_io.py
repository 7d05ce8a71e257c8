"""Image I/O using OpenCV."""

import cv2
import numpy as np

from engines.errors import OpenError, OutputError
from models.intensity_image import IntensityImage


def load_grayscale(path: str) -> np.ndarray:
    """Decode an image to its 8-bit luma plane."""
    img = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise OpenError(f"Could not load image from {path}")
    return img


def _write(path: str, data: np.ndarray, params=()) -> None:
    try:
        ok = cv2.imwrite(str(path), data, list(params))
    except cv2.error as e:
        raise OutputError(f"Can't write {path}: {e}") from e
    if not ok:
        raise OutputError(f"Can't open {path} for writing")


def save_pgm(image: IntensityImage, path: str) -> None:
    """Binary PGM (P5): width/height header then raw 8-bit samples."""
    _write(path, image.data, (cv2.IMWRITE_PXM_BINARY, 1))


def save_jpeg(image: IntensityImage, path: str, quality: int = 90) -> None:
    """Single-channel baseline JPEG at the given quality."""
    _write(path, image.data, (cv2.IMWRITE_JPEG_QUALITY, int(quality)))
