"""Color space conversion and chroma subsampling for synthetic sessions."""

import numpy as np
import cv2
from typing import Literal, Tuple

SubsamplingMode = Literal['4:4:4', '4:2:2', '4:2:0']

# (h, v) sampling factors for luma; chroma is always (1, 1)
LUMA_SAMPLING = {
    '4:4:4': (1, 1),
    '4:2:2': (2, 1),
    '4:2:0': (2, 2),
}


def rgb_to_ycbcr(rgb: np.ndarray) -> np.ndarray:
    """RGB to YCbCr using ITU-R BT.601."""
    R, G, B = rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]
    Y = 0.299 * R + 0.587 * G + 0.114 * B
    Cb = -0.168736 * R - 0.331264 * G + 0.5 * B + 128.0
    Cr = 0.5 * R - 0.418688 * G - 0.081312 * B + 128.0
    return np.stack([Y, Cb, Cr], axis=-1)


def subsample_chroma(
    cb: np.ndarray,
    cr: np.ndarray,
    mode: SubsamplingMode
) -> Tuple[np.ndarray, np.ndarray]:
    """Box-filter chroma down by the mode's luma sampling factors."""
    if mode not in LUMA_SAMPLING:
        raise ValueError(f"Unknown subsampling mode: {mode}")
    h_factor, v_factor = LUMA_SAMPLING[mode]
    if h_factor == 1 and v_factor == 1:
        return cb.copy(), cr.copy()

    h, w = cb.shape
    size = (-(-w // h_factor), -(-h // v_factor))
    cb_sub = cv2.resize(cb, size, interpolation=cv2.INTER_AREA)
    cr_sub = cv2.resize(cr, size, interpolation=cv2.INTER_AREA)
    return cb_sub, cr_sub
