from .cost_model import *
from .stitch_chaining import *

__all__ = [
    # Cost model
    'CostModel',
    'UnresolvedConsensusError',
    'DEFAULT_COST_MODEL',
    'cost_function',
    'MAX_SPAN',

    # Chaining
    'MAX_SEPARATION',
    'partition_records',
    'sort_records',
    'count_splits',
    'split_blocks',
    'Segmentation',
    'segment_blocks',
    'relax_chains',
    'extract_chains',
    'stitch_block',
]
