"""Coefficient-domain engines - pure computation over decode sessions."""

from .errors import (
    InspectionError,
    OpenError,
    FormatError,
    StoreAccessError,
    ExtractionError,
    OutputError,
    InvalidArgument,
)
from .decode_session import DecodeSession, open_jpeg, session_from_image
from .coefficient_store import BlockRows, CoefficientStore
from .dc_extractor import dc_intensity, extract_dc, extract_component_dc
from .resampler import resample_nearest, align_to_luma
from .zigzag import to_zigzag, from_zigzag, format_block, dump_component, dump_coefficients, parse_coefficient_dump

__all__ = [
    'InspectionError',
    'OpenError',
    'FormatError',
    'StoreAccessError',
    'ExtractionError',
    'OutputError',
    'InvalidArgument',
    'DecodeSession',
    'open_jpeg',
    'session_from_image',
    'BlockRows',
    'CoefficientStore',
    'dc_intensity',
    'extract_dc',
    'extract_component_dc',
    'resample_nearest',
    'align_to_luma',
    'to_zigzag',
    'from_zigzag',
    'format_block',
    'dump_component',
    'dump_coefficients',
    'parse_coefficient_dump',
]
