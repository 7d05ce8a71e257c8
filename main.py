"""
JPEG DC Inspector
DC-term previews and zigzag coefficient dumps straight from JPEG coefficients
"""

import sys
import argparse
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='jpeg-dc-inspector',
        description='Extract DC previews and zigzag coefficient dumps from JPEG files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s photo.jpg
  %(prog)s photo.jpg -o previews -q 75
  %(prog)s a.jpg b.jpg --dump
  %(prog)s --synthetic checkerboard --dump --dump-path -
        '''
    )
    parser.add_argument('inputs', nargs='*', help='Input JPEG file(s)')
    parser.add_argument('--synthetic', metavar='KEY', nargs='?', const='checkerboard',
                        choices=['checkerboard', 'gradient', 'chroma_stripes'],
                        help='Inspect a generated test image instead of files')
    parser.add_argument('-o', '--output-dir', default='.',
                        help='Directory for preview artifacts (default: .)')
    parser.add_argument('-q', '--quality', type=int, default=90,
                        help='Quality of the preview JPEGs (1-100, default: 90)')
    parser.add_argument('--no-pgm', action='store_true', help='Do not write PGM previews')
    parser.add_argument('--no-jpeg', action='store_true', help='Do not write JPEG previews')
    parser.add_argument('--dump', action='store_true',
                        help='Dump zigzag coefficients (default file: coefficients.txt)')
    parser.add_argument('--dump-path', metavar='PATH',
                        help="Where --dump writes, relative to the output dir ('-' for stdout)")
    parser.add_argument('--absent-policy', choices=['fail', 'midgray'], default='fail',
                        help='What DC extraction does with blocks that have no data')
    parser.add_argument('--fidelity', action='store_true',
                        help='Compare the luma preview with decoded block means')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print component geometry, quant tables and raw DC terms')
    return parser


def print_result(result) -> None:
    print(f"Image: {result.width}x{result.height}")
    print("\n=== Results ===")
    for name, image in result.dc_images.items():
        print(f"{name:<3} DC:    {image.width}x{image.height} blocks")
    if result.dump is not None:
        print(f"Records:   {result.dump.records}")
        print(f"Skipped:   {result.dump.skipped_blocks} "
              f"({result.dump.absent_blocks} absent, {result.dump.failed_row_blocks} in failed rows)")
    if result.psnr_y is not None:
        print(f"PSNR (Y):  {result.psnr_y:.2f} dB")
    if result.ssim_y is not None:
        print(f"SSIM (Y):  {result.ssim_y:.4f}")
    print(f"Time:      {result.extract_time_ms + result.dump_time_ms:.2f} ms")
    if result.written:
        print("\nSaved:")
        for path in result.written:
            print(f"  - {path}")
    for name, reason in result.failed_components:
        print(f"Failed: component {name}: {reason}", file=sys.stderr)
    for path, reason in result.failed_outputs:
        print(f"Failed: {path}: {reason}", file=sys.stderr)


def run(argv=None) -> int:
    import cv2
    from engines.decode_session import session_from_image
    from engines.errors import InspectionError
    from engines.pipeline import inspect_jpeg, inspect_session
    from models.inspection_params import InspectionParams
    from utils.test_images import generate_demo_image

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.inputs and not args.synthetic:
        parser.print_usage(sys.stderr)
        return 1

    Path(args.output_dir).mkdir(parents=True, exist_ok=True)
    batch = len(args.inputs) > 1

    def params_for(prefix: str) -> InspectionParams:
        return InspectionParams(
            output_dir=args.output_dir,
            output_prefix=prefix,
            write_pgm=not args.no_pgm,
            write_jpeg=not args.no_jpeg,
            jpeg_quality=args.quality,
            dump_coefficients=args.dump,
            dump_path=args.dump_path,
            absent_policy=args.absent_policy,
            compute_fidelity=args.fidelity,
            verbose=args.verbose,
        )

    def prefix_for(path: str) -> str:
        return f"{Path(path).stem}_" if batch else ''

    try:
        params_for('')
    except ValueError as e:
        parser.error(str(e))

    if args.dump:
        sources = {Path(p).resolve() for p in args.inputs}
        for path in args.inputs:
            target = params_for(prefix_for(path)).resolved_dump_path()
            if target != '-' and Path(target).resolve() in sources:
                parser.error(f"dump path {target} would overwrite an input file")

    failures = 0

    if args.synthetic:
        print(f"Generating test image ({args.synthetic})...")
        image = generate_demo_image(args.synthetic)
        gray = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY) if args.fidelity else None
        try:
            with session_from_image(image) as session:
                result = inspect_session(session, params_for('synthetic_'), print, decoded_gray=gray)
        except InspectionError as e:
            print(f"[{e.category}] synthetic: {e}", file=sys.stderr)
            failures += 1
        else:
            print_result(result)
            failures += 0 if result.ok else 1

    for path in args.inputs:
        print(f"Loading: {path}")
        try:
            result = inspect_jpeg(path, params_for(prefix_for(path)), print)
        except InspectionError as e:
            print(f"[{e.category}] {path}: {e}", file=sys.stderr)
            failures += 1
            continue
        print_result(result)
        failures += 0 if result.ok else 1

    return 1 if failures else 0


def main():
    sys.exit(run())


if __name__ == '__main__':
    main()
