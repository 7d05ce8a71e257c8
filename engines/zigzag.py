"""Zigzag (frequency order) serialization of coefficient blocks.

Dump format, one section per component:

    # component 0 (Y): 10 x 6 blocks
    <64 space-separated integers in zigzag order>   one line per present block
    ...
    # skipped blocks: <N>

Blocks are visited top to bottom, left to right. Absent blocks and blocks in
rows the session refused to hand out are not written; both are counted.
"""

import re
from typing import Callable, Dict, Optional, TextIO, Tuple

import numpy as np

from engines.coefficient_store import CoefficientStore
from engines.decode_session import DecodeSession
from engines.errors import FormatError, InvalidArgument, OutputError, StoreAccessError
from models.inspection_result import ComponentDump, DumpReport
from utils.constants import BLOCK_AREA, INVERSE_ZIGZAG_ORDER, ZIGZAG_ORDER

HEADER_RE = re.compile(r'^# component (\d+) \((\w+)\): (\d+) x (\d+) blocks$')
TRAILER_RE = re.compile(r'^# skipped blocks: (\d+)$')


def _as_block(values) -> np.ndarray:
    block = np.asarray(values)
    if block.size != BLOCK_AREA:
        raise InvalidArgument(f"A block holds {BLOCK_AREA} coefficients, got {block.size}")
    return block.reshape(BLOCK_AREA)


def to_zigzag(block) -> np.ndarray:
    """Natural order -> zigzag order: out[i] = block[ZIGZAG_ORDER[i]]."""
    return _as_block(block)[ZIGZAG_ORDER]


def from_zigzag(sequence) -> np.ndarray:
    """Zigzag order -> natural order."""
    return _as_block(sequence)[INVERSE_ZIGZAG_ORDER]


def format_block(block) -> str:
    """One dump record for a natural-order block."""
    return ' '.join(str(int(v)) for v in to_zigzag(block))


def dump_component(
    store: CoefficientStore,
    stream: TextIO,
    progress: Optional[Callable[[str], None]] = None
) -> ComponentDump:
    """Write one component's header and records; rows that fail are skipped."""
    component = store.component
    report = ComponentDump(index=component.index, name=component.name)

    try:
        stream.write(f"# {component}\n")
        for start_row in store.row_starts():
            try:
                rows = store.fetch_rows(start_row)
            except StoreAccessError as e:
                stop_row = min(start_row + store.row_stride, component.height_in_blocks)
                report.failed_rows.extend(range(start_row, stop_row))
                report.failed_row_blocks += (stop_row - start_row) * component.width_in_blocks
                if progress:
                    progress(f"{component}: skipping rows {start_row}..{stop_row - 1}: {e}")
                continue

            zigzagged = rows.coefficients[:, :, ZIGZAG_ORDER]
            for r in range(rows.num_rows):
                for c in range(component.width_in_blocks):
                    if not rows.present[r, c]:
                        report.absent_blocks += 1
                        continue
                    stream.write(' '.join(str(int(v)) for v in zigzagged[r, c]))
                    stream.write('\n')
                    report.records += 1
    except OSError as e:
        raise OutputError(f"could not write coefficient dump: {e}") from e

    return report


def dump_coefficients(
    session: DecodeSession,
    stream: TextIO,
    progress: Optional[Callable[[str], None]] = None
) -> DumpReport:
    """Dump every component in index order, then the skipped-block total."""
    report = DumpReport()
    for ci in range(session.num_components):
        report.components.append(dump_component(CoefficientStore(session, ci), stream, progress))
    try:
        stream.write(f"# skipped blocks: {report.skipped_blocks}\n")
    except OSError as e:
        raise OutputError(f"could not write coefficient dump: {e}") from e
    return report


def parse_coefficient_dump(stream: TextIO) -> Tuple[Dict[str, np.ndarray], int]:
    """Read a dump back as {component name: (n, 64) zigzag-order array} and the skipped count."""
    records: Dict[str, list] = {}
    current = None
    skipped = 0
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        header = HEADER_RE.match(line)
        if header:
            current = header.group(2)
            records[current] = []
            continue
        trailer = TRAILER_RE.match(line)
        if trailer:
            skipped = int(trailer.group(1))
            continue
        if current is None:
            raise FormatError(f"line {lineno}: record before any component header")
        try:
            values = [int(v) for v in line.split()]
        except ValueError as e:
            raise FormatError(f"line {lineno}: {e}") from e
        if len(values) != BLOCK_AREA:
            raise FormatError(f"line {lineno}: expected {BLOCK_AREA} values, got {len(values)}")
        records[current].append(values)

    blocks = {
        name: np.array(rows, dtype=np.int16).reshape(-1, BLOCK_AREA)
        for name, rows in records.items()
    }
    return blocks, skipped
