"""Nearest-neighbor resampling of DC images onto the luma grid."""

from typing import Dict

import numpy as np

from engines.errors import InvalidArgument
from models.intensity_image import IntensityImage


def nearest_indices(src_size: int, dst_size: int) -> np.ndarray:
    """Source index for every destination index: floor(i * src / dst)."""
    return (np.arange(dst_size, dtype=np.int64) * src_size) // dst_size


def resample_nearest(image: IntensityImage, dst_width: int, dst_height: int) -> IntensityImage:
    """Integer nearest-neighbor resize. Samples are copied verbatim."""
    if dst_width <= 0 or dst_height <= 0:
        raise InvalidArgument(f"Resample target must be positive, got {dst_width}x{dst_height}")
    if image.width == 0 or image.height == 0:
        raise InvalidArgument(f"Cannot resample an empty {image.width}x{image.height} image")

    src_y = nearest_indices(image.height, dst_height)
    src_x = nearest_indices(image.width, dst_width)
    return IntensityImage(image.data[np.ix_(src_y, src_x)])


def align_to_luma(dc_images: Dict[str, IntensityImage], luma: str = 'Y') -> Dict[str, IntensityImage]:
    """Resample every component's DC image to the luma DC grid."""
    target = dc_images[luma]
    aligned = {}
    for name, image in dc_images.items():
        if name == luma:
            aligned[name] = target
        else:
            aligned[name] = resample_nearest(image, target.width, target.height)
    return aligned
