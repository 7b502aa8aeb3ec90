"""
Core record types.
"""

from .records import (
    Strand,
    GenomicInterval,
    SimpleRepeat,
    Part,
    Composite,
    PartitionKey,
    partition_key,
    Feature,
    feature_chrom,
    feature_start,
    feature_end,
    feature_strand,
)

__all__ = [
    'Strand',
    'GenomicInterval',
    'SimpleRepeat',
    'Part',
    'Composite',
    'PartitionKey',
    'partition_key',
    'Feature',
    'feature_chrom',
    'feature_start',
    'feature_end',
    'feature_strand',
]
