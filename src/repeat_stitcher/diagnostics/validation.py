"""
Input validation before a stitching run.
"""

import logging
import os
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


def validate_gff_file(filepath: Optional[str]) -> Tuple[bool, str]:
    """
    Validate that a file exists and looks like GFF text.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not filepath:
        return False, "No input GFF file given"

    if not os.path.exists(filepath):
        return False, f"File does not exist: {filepath}"

    if not os.path.isfile(filepath):
        return False, f"Not a file: {filepath}"

    if os.path.getsize(filepath) == 0:
        return False, f"File is empty: {filepath}"

    try:
        with open(filepath, 'r') as f:
            for line in f:
                if line.strip() and not line.startswith('#'):
                    if line.count('\t') < 8:
                        return False, f"First feature line is not tab-separated GFF: {filepath}"
                    break
    except UnicodeDecodeError:
        return False, f"File is not a valid text file: {filepath}"

    return True, f"Valid GFF file: {filepath}"


def validate_stitching_params(stitching: Dict) -> List[str]:
    errors = []
    for key in ('max_separation', 'max_span'):
        value = stitching.get(key)
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
            errors.append(f"stitching.{key} must be a positive number, got {value!r}")

    if not errors and stitching['max_span'] < stitching['max_separation']:
        logger.warning(
            f"stitching.max_span ({stitching['max_span']}) is smaller than "
            f"stitching.max_separation ({stitching['max_separation']}); "
            "links across most of a block will be refused"
        )
    return errors


def validate_inputs(input_gff: Optional[str], config: Dict) -> Tuple[bool, List[str]]:
    """
    Validate all pipeline inputs.

    Args:
        input_gff: Path to the repeat annotation GFF
        config: Pipeline configuration

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    valid, msg = validate_gff_file(input_gff)
    if not valid:
        errors.append(f"Input GFF: {msg}")

    errors.extend(validate_stitching_params(config.get('stitching', {})))

    queue_size = config.get('performance', {}).get('queue_size', 1)
    if not isinstance(queue_size, int) or isinstance(queue_size, bool) or queue_size < 1:
        errors.append(f"performance.queue_size must be a positive integer, got {queue_size!r}")

    output_gff = config.get('io', {}).get('output_gff')
    if output_gff:
        parent = os.path.dirname(os.path.abspath(output_gff))
        if not os.path.isdir(parent):
            errors.append(f"Output directory does not exist: {parent}")

    return len(errors) == 0, errors


__all__ = [
    'validate_gff_file',
    'validate_stitching_params',
    'validate_inputs',
]
