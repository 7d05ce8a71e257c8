"""Data models for components, images, parameters and results."""

from .component import Component
from .intensity_image import IntensityImage
from .inspection_params import InspectionParams
from .inspection_result import ComponentDump, DumpReport, InspectionResult

__all__ = [
    'Component',
    'IntensityImage',
    'InspectionParams',
    'ComponentDump',
    'DumpReport',
    'InspectionResult',
]
