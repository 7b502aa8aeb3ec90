"""
Chains fragmented repeat annotations into composite repeat elements.
"""

__version__ = "1.0.0"
__description__ = "Dynamic programming stitcher for fragmented repeat masker annotations"

from .core.records import (
    Strand,
    GenomicInterval,
    SimpleRepeat,
    Part,
    Composite,
    PartitionKey,
)
from .algorithms.cost_model import CostModel, UnresolvedConsensusError, cost_function
from .algorithms.stitch_chaining import (
    MAX_SEPARATION,
    partition_records,
    segment_blocks,
    stitch_block,
)
from .pipeline.assembler import StitchResult, collect_composites, sort_composites
from .pipeline.scheduler import BlockResult, PartitionDone, PartitionFailure, composites_from
from .pipeline.main_pipeline import PartitionError, stitch, stitch_records

__all__ = [
    # Records
    'Strand',
    'GenomicInterval',
    'SimpleRepeat',
    'Part',
    'Composite',
    'PartitionKey',

    # Chaining
    'CostModel',
    'UnresolvedConsensusError',
    'cost_function',
    'MAX_SEPARATION',
    'partition_records',
    'segment_blocks',
    'stitch_block',

    # Scheduling and assembly
    'BlockResult',
    'PartitionDone',
    'PartitionFailure',
    'composites_from',
    'StitchResult',
    'collect_composites',
    'sort_composites',
    'PartitionError',
    'stitch',
    'stitch_records',

    # Version info
    '__version__',
    '__description__',
]
