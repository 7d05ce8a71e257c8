"""Inspection parameters."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional


@dataclass
class InspectionParams:
    """What to produce for one inspected image."""

    output_dir: str = '.'
    output_prefix: str = ''
    write_pgm: bool = True
    write_jpeg: bool = True
    jpeg_quality: int = 90
    dump_coefficients: bool = False
    dump_path: Optional[str] = None
    absent_policy: Literal['fail', 'midgray'] = 'fail'
    compute_fidelity: bool = False
    verbose: bool = False

    def __post_init__(self):
        if not (1 <= self.jpeg_quality <= 100):
            raise ValueError(f"JPEG quality must be 1-100, got {self.jpeg_quality}")
        if self.absent_policy not in ('fail', 'midgray'):
            raise ValueError(f"Absent policy must be 'fail' or 'midgray', got {self.absent_policy!r}")

    def resolved_dump_path(self) -> str:
        """Dump destination; '-' means stdout. Relative paths land in output_dir."""
        path = self.dump_path or f"{self.output_prefix}coefficients.txt"
        if path == '-' or Path(path).is_absolute():
            return path
        return str(Path(self.output_dir) / path)
