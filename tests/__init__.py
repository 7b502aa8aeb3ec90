"""
Test suite for the repeat stitcher.

Run with: pytest tests/ -v
"""

TEST_CATEGORIES = {
    'cost_model': 'Link cost model tests',
    'chaining': 'Partitioning, block segmentation and DP chaining tests',
    'scheduler': 'Parallel partition scheduling tests',
    'assembler': 'Result collection and ordering tests',
    'gff_io': 'GFF reader and writer tests',
    'config': 'Configuration loading tests',
    'validation': 'Validation and diagnostics tests',
    'integration': 'Integration and end-to-end tests',
}
