"""
Command-line interface for the repeat stitcher.
"""

import sys
import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='repeat-stitch',
        description="Join repeat annotation features into composite elements by dynamic "
                    "programming over genomic and consensus end points",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Stitch a repeat masker GFF, writing composites to stdout
  %(prog)s --in hg38.rm.gff > hg38.stitched.gff

  # Use 8 worker processes and write to a file
  %(prog)s --in hg38.rm.gff --workers 8 --out hg38.stitched.gff

  # Other options
  %(prog)s --config my_config.yaml --log-level DEBUG
        """
    )

    parser.add_argument(
        '--in', '--input',
        dest='input',
        type=str,
        help='GFF file containing repeat annotations with a Repeat attribute'
    )

    parser.add_argument(
        '--out',
        type=str,
        help='Output GFF file (default: stdout)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        help='Number of parallel workers (0 = number of CPUs)'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration YAML file'
    )

    parser.add_argument(
        '--max-separation',
        type=int,
        help='Largest gap between successive sorted end points within one block'
    )

    parser.add_argument(
        '--max-span',
        type=int,
        help='Largest end point distance the cost model will link'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )

    parser.add_argument(
        '--version',
        action='store_true',
        help='Show version information'
    )

    return parser


def build_overrides(args) -> dict:
    """Turn parsed arguments into configuration overrides."""
    config_overrides = {}

    if args.input:
        config_overrides.setdefault('io', {})['input_gff'] = args.input

    if args.out:
        config_overrides.setdefault('io', {})['output_gff'] = args.out

    if args.workers is not None:
        config_overrides.setdefault('performance', {})['num_workers'] = (
            'auto' if args.workers == 0 else args.workers
        )

    if args.max_separation is not None:
        config_overrides.setdefault('stitching', {})['max_separation'] = args.max_separation

    if args.max_span is not None:
        config_overrides.setdefault('stitching', {})['max_span'] = args.max_span

    if args.log_level:
        config_overrides.setdefault('debug', {})['log_level'] = args.log_level

    return config_overrides


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.version:
        from repeat_stitcher import __version__
        print(f"repeat-stitch {__version__}")
        return 0

    from repeat_stitcher.pipeline.main_pipeline import main as pipeline_main
    return pipeline_main(config_path=args.config, overrides=build_overrides(args))


if __name__ == "__main__":
    sys.exit(main())
