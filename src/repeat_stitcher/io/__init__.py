from .gff_reader import (
    MalformedRecordError,
    parse_gff_line,
    iter_repeats,
    read_repeats,
)

from .gff_writer import (
    format_composite,
    write_composites,
)

__all__ = [
    # GFF reader functions
    'MalformedRecordError',
    'parse_gff_line',
    'iter_repeats',
    'read_repeats',

    # GFF writer functions
    'format_composite',
    'write_composites',
]
