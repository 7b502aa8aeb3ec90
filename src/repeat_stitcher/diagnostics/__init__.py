"""
Diagnostics and validation for the repeat stitcher.
"""

from .validation import validate_gff_file, validate_inputs
from .performance import PerformanceMonitor

__all__ = [
    'validate_gff_file',
    'validate_inputs',
    'PerformanceMonitor',
]
