import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..algorithms.cost_model import CostModel, DEFAULT_COST_MODEL
from ..algorithms.stitch_chaining import MAX_SEPARATION, partition_records
from ..config.config_loader import ConfigLoader
from ..core.records import Composite, SimpleRepeat
from .assembler import StitchResult, collect_composites
from .scheduler import DEFAULT_QUEUE_SIZE, PartitionFailure, composites_from


class PartitionError(RuntimeError):
    """One or more partitions failed during stitching."""

    def __init__(self, failures: List[PartitionFailure]):
        self.failures = failures
        super().__init__(
            f"{len(failures)} partition(s) failed: " + "; ".join(str(f) for f in failures)
        )


def setup_logging(config: Dict[str, Any]) -> logging.Logger:
    """Setup logging configuration."""
    debug = config.get('debug', {})
    log_level_str = debug.get('log_level', 'INFO')
    log_level = getattr(logging, str(log_level_str).upper(), logging.INFO)

    logger = logging.getLogger('repeat_stitcher')
    logger.setLevel(log_level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console handler; stdout may be carrying the GFF output
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if debug.get('log_to_file', False):
        log_dir = Path(config.get('io', {}).get('logs_dir', 'logs'))
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / 'stitch.log')
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


def stitch(
    records: Iterable[SimpleRepeat],
    max_separation: int = MAX_SEPARATION,
    workers: int = 1,
    cost_model: CostModel = DEFAULT_COST_MODEL,
    queue_size: int = DEFAULT_QUEUE_SIZE
) -> StitchResult:
    """Partition, chain and assemble records, reporting partition failures in the result."""
    partitions = partition_records(records)
    return collect_composites(
        composites_from(partitions, max_separation, workers, cost_model, queue_size)
    )


def stitch_records(
    records: Iterable[SimpleRepeat],
    max_separation: int = MAX_SEPARATION,
    workers: int = 1,
    cost_model: CostModel = DEFAULT_COST_MODEL
) -> List[Composite]:
    """
    Chain records into genome-ordered composites.

    Raises:
        PartitionError: if any partition failed
    """
    result = stitch(records, max_separation, workers, cost_model)
    if not result.ok:
        raise PartitionError(result.failures)
    return result.composites


def run_stitch_pipeline(config: Dict[str, Any], logger: logging.Logger) -> int:
    """
    Core stitching pipeline logic.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from ..diagnostics.performance import PerformanceMonitor
    from ..diagnostics.validation import validate_inputs
    from ..io.gff_reader import MalformedRecordError, read_repeats
    from ..io.gff_writer import write_composites

    loader = ConfigLoader.from_dict(config)

    io_params = loader.get_io_params()
    stitching = loader.get_stitching_params()
    input_gff = io_params.get('input_gff')

    if config.get('validation', {}).get('validate_inputs', True):
        is_valid, errors = validate_inputs(input_gff, config)
        if not is_valid:
            for error in errors:
                logger.error(f"Validation error: {error}")
            return 1
    elif not input_gff:
        logger.error("No input GFF file given")
        return 1

    perf_monitor = PerformanceMonitor()
    perf_monitor.start()

    logger.info(f"reading repeat features from {input_gff!r}")
    try:
        records = read_repeats(input_gff)
    except (OSError, MalformedRecordError) as e:
        logger.error(f"failed to read source feature: {e}")
        perf_monitor.stop()
        return 1
    perf_monitor.count('records', len(records))

    workers = loader.get_num_workers()
    max_separation = int(stitching.get('max_separation', MAX_SEPARATION))
    cost_model = CostModel.from_config(stitching)
    queue_size = int(loader.get_performance_params().get('queue_size', DEFAULT_QUEUE_SIZE))

    partitions = partition_records(records)
    logger.info(
        f"{len(records)} records in {len(partitions)} partitions; "
        f"max_separation={max_separation} max_span={cost_model.max_span} workers={workers}"
    )
    perf_monitor.count('partitions', len(partitions))

    result = collect_composites(
        composites_from(partitions, max_separation, workers, cost_model, queue_size)
    )
    perf_monitor.count('composites', len(result.composites))
    perf_monitor.count('failed_partitions', len(result.failures))

    output_gff = io_params.get('output_gff')
    if output_gff:
        n = write_composites(result.composites, output_gff)
        logger.info(f"wrote {n} composites to {output_gff}")
    else:
        write_composites(result.composites, sys.stdout)

    perf_monitor.stop()
    report = perf_monitor.get_report()
    logger.info(f"Total time: {report['total_time_seconds']:.2f}s")
    if loader.get_debug_params().get('performance_report', False):
        logs_dir = Path(io_params.get('logs_dir', 'logs'))
        logs_dir.mkdir(parents=True, exist_ok=True)
        perf_monitor.save_report(logs_dir / 'performance_report.json')

    if not result.ok:
        logger.error(f"{len(result.failures)} partition(s) failed; their records were not stitched")
        return 1
    return 0


def main(config_path: Optional[str] = None, overrides: Optional[Dict] = None) -> int:
    """Main pipeline entry point."""
    try:
        loader = ConfigLoader(config_path, overrides)
    except Exception as e:
        print(f"ERROR loading configuration: {e}", file=sys.stderr)
        return 1

    config = loader.config
    logger = setup_logging(config)
    logger.info(f"Configuration loaded from {config.get('_source', 'default')}")

    return run_stitch_pipeline(config, logger)


# Alias for convenience
run_pipeline = main

__all__ = [
    'PartitionError',
    'setup_logging',
    'stitch',
    'stitch_records',
    'run_stitch_pipeline',
    'main',
    'run_pipeline',
]
