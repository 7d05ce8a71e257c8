"""Block processing: padding and block-grid reshaping."""

import numpy as np
from typing import Tuple

from utils.constants import BLOCK_SIZE


def pad_to_multiple(channel: np.ndarray, block_size: int = BLOCK_SIZE) -> Tuple[np.ndarray, Tuple[int, int]]:
    """Pad channel to multiple of block_size by edge replication."""
    h, w = channel.shape
    pad_h = (block_size - h % block_size) % block_size
    pad_w = (block_size - w % block_size) % block_size
    if pad_h > 0 or pad_w > 0:
        padded = np.pad(channel, ((0, pad_h), (0, pad_w)), mode='edge')
    else:
        padded = channel.copy()
    return padded, (h, w)


def to_block_grid(channel: np.ndarray, block_size: int = BLOCK_SIZE) -> np.ndarray:
    """Split a 2D channel into a (rows, cols, B, B) grid of blocks."""
    padded, _ = pad_to_multiple(channel, block_size)
    h, w = padded.shape
    grid = padded.reshape(h // block_size, block_size, w // block_size, block_size)
    return grid.transpose(0, 2, 1, 3)


def block_means(channel: np.ndarray, block_size: int = BLOCK_SIZE) -> np.ndarray:
    """Mean sample value of every block, one value per block."""
    grid = to_block_grid(channel.astype(np.float64), block_size)
    return grid.mean(axis=(2, 3))
