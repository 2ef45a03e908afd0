"""mipview headless renderer - CLI entry point.

Loads a raster image, builds its square power-of-two texture and mip chain,
and writes rendered frames to image files.

Usage:
    mipview-render <input_file> [-o OUTPUT_DIR] [--level N ...] [--all-levels]

Examples:
    mipview-render photo.jpg                   -> exports/photo.png
    mipview-render photo.jpg --level 3         -> exports/photo-03.png
    mipview-render photo.jpg --all-levels -o renders/
"""

import argparse
import logging
import os
import sys

from mipview.constants import MIP_STRATEGIES
from mipview.errors import MipviewError
from mipview.utils.logger import configure_logging
from mipview.version import get_version

logger = logging.getLogger(__name__)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Render an image as a square power-of-two texture and export mip levels (headless).',
    )
    parser.add_argument(
        'input_file',
        help='Path to a raster image (any format Pillow can decode).',
    )
    parser.add_argument(
        '-o', '--output-dir',
        help='Output directory for exported images (default: from config, ./exports).',
    )
    levels = parser.add_mutually_exclusive_group()
    levels.add_argument(
        '-l', '--level',
        type=int, action='append', dest='levels',
        help='Export at this mip level (repeatable).',
    )
    levels.add_argument(
        '-a', '--all-levels',
        action='store_true',
        help='Export one image per mip level.',
    )
    parser.add_argument(
        '--mip-strategy',
        choices=MIP_STRATEGIES,
        help='Generate mip levels on the CPU or with glGenerateMipmap.',
    )
    parser.add_argument(
        '--max-power',
        type=int,
        help='Largest canonical side as a power of two (default: 11 -> 2048).',
    )
    parser.add_argument(
        '--geometry-scale',
        type=float,
        help='Shrink factor applied to the rendered quad, in (0, 1].',
    )
    parser.add_argument(
        '--format',
        dest='export_format',
        help='Export file format (default: png).',
    )
    parser.add_argument(
        '-c', '--config',
        help='JSON configuration file.',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging.',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {get_version()}',
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    configure_logging(args.verbose)

    from mipview.config import load_config

    input_path = os.path.abspath(args.input_file)
    if not os.path.isfile(input_path):
        print(f"Error: Input file not found: {input_path}")
        sys.exit(1)

    try:
        config = load_config(
            args.config,
            max_power=args.max_power,
            mip_strategy=args.mip_strategy,
            export_format=args.export_format,
            output_dir=args.output_dir,
        )
    except MipviewError as e:
        print(f"Error: {e}")
        sys.exit(2)

    # GL context, shaders and pipeline (imports pull in Qt/OpenGL)
    from mipview.services.export_controller import FileSink
    from mipview.services.texture_pipeline import TexturePipeline
    from mipview.utils.gl_context import OffscreenGLContext

    try:
        context = OffscreenGLContext()
    except MipviewError as e:
        print(f"Error: {e}")
        sys.exit(1)

    sink = FileSink(config.output_dir)
    pipeline = TexturePipeline(config, sink=sink)
    exported = 0
    try:
        print(f"Loading {input_path} ...")
        canonical = pipeline.load_file(input_path)
        print(f"Canonical size: {canonical.side}x{canonical.side} ({canonical.power + 1} mip levels)")

        if args.geometry_scale is not None and not pipeline.set_parameter('geometry_scale', args.geometry_scale):
            print(f"Error: geometry scale must be in (0, 1], got {args.geometry_scale}")
            sys.exit(2)

        if args.all_levels:
            artifacts = pipeline.export_all_levels()
        elif args.levels:
            artifacts = [pipeline.export_at(level) for level in args.levels]
        else:
            artifacts = [pipeline.export_at()]

        for artifact in artifacts:
            if artifact is None:
                continue
            exported += 1
            print(f"  [{exported}/{len(artifacts)}] {artifact.filename}")
    except MipviewError as e:
        print(f"Error: {e}")
        if args.verbose:
            logger.exception("Render failed")
        sys.exit(1)
    finally:
        pipeline.close()
        context.done_current()

    print(f"\nDone. Exported {exported} image(s) to {os.path.abspath(config.output_dir)}/")


if __name__ == '__main__':
    main()
