"""
GFF writer for stitched composites.
"""

import os
from typing import Iterable, Optional, TextIO, Union

from ..core.records import Composite, Part

GFF_HEADER = "##gff-version 2"
SOURCE = "stitch"
FEATURE = "composite"


def _one_based(pos: Optional[int]) -> str:
    return "." if pos is None else str(pos + 1)


def _end(pos: Optional[int]) -> str:
    return "." if pos is None else str(pos)


def format_part(part: Part) -> str:
    """name consensusLeft consensusRight genomicLeft genomicRight, lefts 1-based."""
    return " ".join([
        part.name,
        _one_based(part.consensus_left), _end(part.consensus_right),
        _one_based(part.genomic.left), _end(part.genomic.right),
    ])


def format_parts(composite: Composite) -> str:
    return '"' + "|".join(format_part(p) for p in composite.parts) + '"'


def _format_score(score: float) -> str:
    score = float(score)
    return str(int(score)) if score.is_integer() else repr(score)


def format_composite(composite: Composite) -> str:
    """Render one composite as a GFF feature line (no trailing newline)."""
    attributes = f'Class "{composite.repeat_class}"; Parts {format_parts(composite)}'
    return "\t".join([
        composite.chrom,
        SOURCE,
        FEATURE,
        str(composite.start + 1),
        str(composite.end),
        _format_score(composite.score),
        str(composite.strand),
        ".",
        attributes,
    ])


def write_composites(
    composites: Iterable[Composite],
    destination: Union[str, os.PathLike, TextIO],
    header: bool = True
) -> int:
    """
    Write composites in the given order.

    Returns:
        Number of features written
    """
    if hasattr(destination, 'write'):
        return _write(composites, destination, header)
    with open(destination, 'w') as f:
        return _write(composites, f, header)


def _write(composites, handle, header):
    if header:
        handle.write(GFF_HEADER + "\n")
    n = 0
    for c in composites:
        handle.write(format_composite(c) + "\n")
        n += 1
    return n


__all__ = [
    'GFF_HEADER',
    'format_part',
    'format_parts',
    'format_composite',
    'write_composites',
]
