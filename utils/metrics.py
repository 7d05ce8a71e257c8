"""Metrics: preview fidelity and runtime."""

import time
import numpy as np
from skimage.metrics import peak_signal_noise_ratio, structural_similarity
from typing import Dict, Optional

from engines.block_processor import block_means
from models.intensity_image import IntensityImage

# skimage's default SSIM window
SSIM_MIN_SIDE = 7


def compute_preview_fidelity(preview: IntensityImage, decoded_gray: np.ndarray) -> Dict[str, Optional[float]]:
    """
    Compare a luma DC preview with the per-block mean of the decoded image.

    The DC term of an 8x8 block is 8x its mean level-shifted sample, so a
    correct preview tracks the block means up to quantization error.
    SSIM is only reported when the preview is at least 7x7.
    """
    reference = np.clip(np.round(block_means(decoded_gray)), 0, 255).astype(np.uint8)
    h = min(reference.shape[0], preview.height)
    w = min(reference.shape[1], preview.width)
    reference = reference[:h, :w]
    candidate = preview.data[:h, :w]

    psnr = peak_signal_noise_ratio(reference, candidate, data_range=255)
    ssim = None
    if min(h, w) >= SSIM_MIN_SIDE:
        ssim = float(structural_similarity(reference, candidate, data_range=255))

    return {
        'psnr_y': float(psnr),
        'ssim_y': ssim,
    }


class Timer:
    """Simple timer for extraction/dump runtime."""

    def __init__(self):
        self.extract_time_ms = 0.0
        self.dump_time_ms = 0.0

    def measure_extract(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.extract_time_ms += (time.perf_counter() - start) * 1000.0
        return result

    def measure_dump(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.dump_time_ms += (time.perf_counter() - start) * 1000.0
        return result
