"""Results from inspecting one image."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from models.intensity_image import IntensityImage


@dataclass
class ComponentDump:
    """Accounting for one component's coefficient dump."""

    index: int
    name: str
    records: int = 0
    absent_blocks: int = 0
    failed_rows: List[int] = field(default_factory=list)
    failed_row_blocks: int = 0

    @property
    def skipped_blocks(self) -> int:
        return self.absent_blocks + self.failed_row_blocks


@dataclass
class DumpReport:
    """Accounting for a whole-session coefficient dump."""

    components: List[ComponentDump] = field(default_factory=list)

    @property
    def records(self) -> int:
        return sum(c.records for c in self.components)

    @property
    def absent_blocks(self) -> int:
        return sum(c.absent_blocks for c in self.components)

    @property
    def failed_row_blocks(self) -> int:
        return sum(c.failed_row_blocks for c in self.components)

    @property
    def skipped_blocks(self) -> int:
        return sum(c.skipped_blocks for c in self.components)


@dataclass
class InspectionResult:
    """DC previews, written artifacts and dump accounting."""

    source: str
    width: int
    height: int

    # Native DC grids, keyed by component name
    dc_images: Dict[str, IntensityImage] = field(default_factory=dict)
    # Extracted components aligned to the luma grid
    aligned_images: Dict[str, IntensityImage] = field(default_factory=dict)

    # (component name, reason) for components whose extraction failed
    failed_components: List[Tuple[str, str]] = field(default_factory=list)
    written: List[str] = field(default_factory=list)
    failed_outputs: List[Tuple[str, str]] = field(default_factory=list)
    dump: Optional[DumpReport] = None

    psnr_y: Optional[float] = None
    ssim_y: Optional[float] = None

    extract_time_ms: float = 0.0
    dump_time_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed_outputs and not self.failed_components
