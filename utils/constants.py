"""Static JPEG tables shared across engines."""

import numpy as np

BLOCK_SIZE = 8
BLOCK_AREA = BLOCK_SIZE * BLOCK_SIZE

# DC preview: intensity = DC * q0 / DC_SCALE + DC_BIAS
DC_SCALE = 8
DC_BIAS = 128
MID_GRAY = 128

# Natural block index for each zigzag position: output[i] = block[ZIGZAG_ORDER[i]]
ZIGZAG_ORDER = np.array([
     0,  1,  8, 16,  9,  2,  3, 10,
    17, 24, 32, 25, 18, 11,  4,  5,
    12, 19, 26, 33, 40, 48, 41, 34,
    27, 20, 13,  6,  7, 14, 21, 28,
    35, 42, 49, 56, 57, 50, 43, 36,
    29, 22, 15, 23, 30, 37, 44, 51,
    58, 59, 52, 45, 38, 31, 39, 46,
    53, 60, 61, 54, 47, 55, 62, 63,
], dtype=np.intp)
ZIGZAG_ORDER.setflags(write=False)

INVERSE_ZIGZAG_ORDER = np.argsort(ZIGZAG_ORDER)
INVERSE_ZIGZAG_ORDER.setflags(write=False)

JPEG_LUMA_Q50 = np.array([
    [16, 11, 10, 16, 24, 40, 51, 61],
    [12, 12, 14, 19, 26, 58, 60, 55],
    [14, 13, 16, 24, 40, 57, 69, 56],
    [14, 17, 22, 29, 51, 87, 80, 62],
    [18, 22, 37, 56, 68, 109, 103, 77],
    [24, 35, 55, 64, 81, 104, 113, 92],
    [49, 64, 78, 87, 103, 121, 120, 101],
    [72, 92, 95, 98, 112, 100, 103, 99],
], dtype=np.float64)
JPEG_LUMA_Q50.setflags(write=False)

JPEG_CHROMA_Q50 = np.array([
    [17, 18, 24, 47, 99, 99, 99, 99],
    [18, 21, 26, 66, 99, 99, 99, 99],
    [24, 26, 56, 99, 99, 99, 99, 99],
    [47, 66, 99, 99, 99, 99, 99, 99],
    [99, 99, 99, 99, 99, 99, 99, 99],
    [99, 99, 99, 99, 99, 99, 99, 99],
    [99, 99, 99, 99, 99, 99, 99, 99],
    [99, 99, 99, 99, 99, 99, 99, 99],
], dtype=np.float64)
JPEG_CHROMA_Q50.setflags(write=False)

COMPONENT_NAMES = ('Y', 'Cb', 'Cr')
