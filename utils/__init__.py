"""Shared utilities."""

from .constants import (
    JPEG_LUMA_Q50,
    JPEG_CHROMA_Q50,
    ZIGZAG_ORDER,
    INVERSE_ZIGZAG_ORDER,
)
from .test_images import generate_colored_checkerboard, generate_gradient, generate_demo_image

__all__ = [
    'JPEG_LUMA_Q50',
    'JPEG_CHROMA_Q50',
    'ZIGZAG_ORDER',
    'INVERSE_ZIGZAG_ORDER',
    'generate_colored_checkerboard',
    'generate_gradient',
    'generate_demo_image',
]
