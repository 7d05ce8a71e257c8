"""Quantization operations."""

import numpy as np


def scale_quant_matrix(base_matrix: np.ndarray, quality: int) -> np.ndarray:
    """Scale quantization matrix by quality factor (1-100)."""
    quality = int(np.clip(quality, 1, 100))

    # libjpeg jpeg_quality_scaling
    if quality < 50:
        scale = 5000.0 / quality
    else:
        scale = 200.0 - 2.0 * quality

    Q = np.floor((base_matrix * scale + 50.0) / 100.0)
    Q = np.clip(Q, 1, 255)
    return Q.astype(np.uint16)


def quantize(dct_coeffs: np.ndarray, Q_matrix: np.ndarray) -> np.ndarray:
    """Quantize DCT coefficients to int16."""
    q = np.round(dct_coeffs / Q_matrix.astype(np.float64))
    return np.clip(q, -32768, 32767).astype(np.int16)
