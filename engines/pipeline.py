"""Inspection pipeline: session -> DC previews -> artifacts and coefficient dump."""

import sys
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from engines.coefficient_store import CoefficientStore
from engines.dc_extractor import extract_dc
from engines.decode_session import DecodeSession, open_jpeg
from engines.errors import ExtractionError, OutputError
from engines.resampler import align_to_luma
from engines.zigzag import dump_coefficients
from models.inspection_params import InspectionParams
from models.inspection_result import DumpReport, InspectionResult
from utils.image_io import load_grayscale, save_jpeg, save_pgm
from utils.metrics import Timer, compute_preview_fidelity

Progress = Optional[Callable[[str], None]]


def _describe_component(store: CoefficientStore) -> str:
    """Geometry, quantization table and raw DC grid of one component."""
    component = store.component
    lines = [
        f"{component} sampling: ({component.h_samp_factor} x {component.v_samp_factor})",
        f"quantization table: {component.quant_table_index}",
    ]
    table = store.quant_table().reshape(8, 8)
    lines.extend(' '.join(f"{int(v):4d}" for v in row) for row in table)
    lines.append("raw DC coefficients:")
    for rows in store.iter_row_groups():
        for r in range(rows.num_rows):
            lines.append(' '.join(f"{int(v):3d}" for v in rows.coefficients[r, :, 0]))
    return '\n'.join(lines)


def _write_dump(session: DecodeSession, path: str, progress: Progress) -> DumpReport:
    if path == '-':
        return dump_coefficients(session, sys.stdout, progress)
    try:
        with open(path, 'w') as stream:
            return dump_coefficients(session, stream, progress)
    except OSError as e:
        raise OutputError(f"Can't open {path} for writing: {e.strerror or e}") from e


def _write_artifacts(result: InspectionResult, params: InspectionParams, progress: Progress) -> None:
    out_dir = Path(params.output_dir)
    for name, image in result.aligned_images.items():
        stem = f"{params.output_prefix}{name.lower()}"
        targets = []
        if params.write_pgm:
            targets.append((out_dir / f"{stem}.pgm", lambda p, img=image: save_pgm(img, p)))
        if params.write_jpeg:
            targets.append((
                out_dir / f"{stem}_dc.jpg",
                lambda p, img=image: save_jpeg(img, p, params.jpeg_quality),
            ))
        for path, writer in targets:
            try:
                writer(str(path))
            except OutputError as e:
                result.failed_outputs.append((str(path), str(e)))
                if progress:
                    progress(f"[{e.category}] {e}")
                continue
            result.written.append(str(path))


def inspect_session(
    session: DecodeSession,
    params: InspectionParams,
    progress: Progress = None,
    decoded_gray: Optional[np.ndarray] = None
) -> InspectionResult:
    """Extract every component's DC image, align chroma to luma, write artifacts."""
    timer = Timer()
    result = InspectionResult(source=session.source, width=session.width, height=session.height)

    # === DC EXTRACTION ===
    for component in session.components:
        store = CoefficientStore(session, component.index)
        if params.verbose and progress:
            progress(_describe_component(store))
        try:
            result.dc_images[component.name] = timer.measure_extract(
                extract_dc, store, params.absent_policy
            )
        except ExtractionError as e:
            result.failed_components.append((component.name, str(e)))
            if progress:
                progress(f"[{e.category}] {e}")

    # Without a luma grid to align to, chroma previews stay on their native grids
    luma = session.components[0].name
    if luma in result.dc_images:
        result.aligned_images = timer.measure_extract(align_to_luma, result.dc_images, luma)
    else:
        result.aligned_images = dict(result.dc_images)

    # === COEFFICIENT DUMP ===
    if params.dump_coefficients:
        path = params.resolved_dump_path()
        try:
            result.dump = timer.measure_dump(_write_dump, session, path, progress)
        except OutputError as e:
            result.failed_outputs.append((path, str(e)))
            if progress:
                progress(f"[{e.category}] {e}")
        else:
            if path != '-':
                result.written.append(path)

    # === ARTIFACTS ===
    _write_artifacts(result, params, progress)

    # === METRICS ===
    if decoded_gray is not None and luma in result.dc_images:
        fidelity = compute_preview_fidelity(result.dc_images[luma], decoded_gray)
        result.psnr_y = fidelity['psnr_y']
        result.ssim_y = fidelity['ssim_y']

    result.extract_time_ms = timer.extract_time_ms
    result.dump_time_ms = timer.dump_time_ms
    return result


def inspect_jpeg(path: str, params: InspectionParams, progress: Progress = None) -> InspectionResult:
    """Open a JPEG, inspect it, and close the session before returning."""
    with open_jpeg(path) as session:
        decoded = load_grayscale(path) if params.compute_fidelity else None
        return inspect_session(session, params, progress, decoded_gray=decoded)
