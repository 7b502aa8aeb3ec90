"""
Command-line scripts for the repeat stitcher.
"""

from .run_pipeline import main as run_pipeline_main

__all__ = [
    'run_pipeline_main',
]
