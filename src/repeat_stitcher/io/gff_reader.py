"""
GFF reader for masked repeat annotations.

Each feature carries a Repeat attribute of the form

    Repeat AluJr SINE/Alu 3 295 17

giving the repeat type and class, the alignment start and end relative to
the consensus (1-based, '.' when unavailable) and the number of consensus
bases beyond the alignment end.
"""

import os
from typing import Iterator, List, Optional, TextIO, Tuple, Union

from ..core.records import GenomicInterval, SimpleRepeat, Strand

REPEAT_TAG = "Repeat"
UNAVAILABLE = "."


class MalformedRecordError(ValueError):
    """An input line could not be turned into a repeat record."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


def parse_attributes(field: str) -> List[Tuple[str, str]]:
    """Split a GFF2 attribute column into (tag, value) pairs, unquoting values."""
    attributes = []
    for item in field.split(';'):
        item = item.strip()
        if not item:
            continue
        tag, _, value = item.partition(' ')
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        attributes.append((tag, value))
    return attributes


def _consensus_position(field: str, one_based: bool) -> Optional[int]:
    if field == UNAVAILABLE:
        return None
    pos = int(field)
    return pos - 1 if one_based else pos


def parse_repeat_attribute(value: str) -> Tuple[str, str, Optional[int], Optional[int]]:
    """
    Parse a Repeat attribute value.

    Returns:
        (name, class, consensus_left, consensus_right) with consensus_left
        converted to 0-based and unavailable positions as None
    """
    fields = value.split()
    if len(fields) < 4:
        raise ValueError(f"repeat attribute has {len(fields)} fields, need at least 4: {value!r}")
    try:
        left = _consensus_position(fields[2], one_based=True)
        right = _consensus_position(fields[3], one_based=False)
    except ValueError:
        raise ValueError(f"non-numeric consensus position in {value!r}") from None
    return fields[0], fields[1], left, right


def parse_gff_line(line: str, line_number: Optional[int] = None) -> SimpleRepeat:
    """Build a SimpleRepeat from one GFF feature line."""
    columns = line.rstrip('\r\n').split('\t')
    if len(columns) < 9:
        raise MalformedRecordError(f"expected 9 tab-separated columns, got {len(columns)}", line_number)

    seqname, _, _, start, end, score, strand, _, attributes = columns[:9]
    try:
        left = int(start) - 1
        right = int(end)
    except ValueError:
        raise MalformedRecordError(f"non-numeric coordinates {start!r}..{end!r}", line_number) from None
    try:
        score = 0.0 if score == UNAVAILABLE else float(score)
    except ValueError:
        raise MalformedRecordError(f"non-numeric score {score!r}", line_number) from None

    repeat = dict(parse_attributes(attributes)).get(REPEAT_TAG)
    if not repeat:
        raise MalformedRecordError("missing repeat tag: file probably not a repeat masker GFF", line_number)

    try:
        genomic = GenomicInterval(seqname, left, right, Strand.from_symbol(strand))
        name, repeat_class, consensus_left, consensus_right = parse_repeat_attribute(repeat)
        return SimpleRepeat(name, repeat_class, score, genomic, consensus_left, consensus_right)
    except ValueError as e:
        raise MalformedRecordError(str(e), line_number) from e


def iter_repeats(handle: TextIO) -> Iterator[SimpleRepeat]:
    """Yield repeat records from an open GFF stream, skipping comments and blank lines."""
    for n, line in enumerate(handle, 1):
        if not line.strip() or line.startswith('#'):
            continue
        yield parse_gff_line(line, n)


def read_repeats(source: Union[str, os.PathLike, TextIO]) -> List[SimpleRepeat]:
    """
    Read every repeat record from a GFF file or stream.

    Raises:
        MalformedRecordError: on the first line that cannot be parsed
    """
    if hasattr(source, 'read'):
        return list(iter_repeats(source))
    with open(source, 'r') as f:
        return list(iter_repeats(f))


__all__ = [
    'MalformedRecordError',
    'parse_attributes',
    'parse_repeat_attribute',
    'parse_gff_line',
    'iter_repeats',
    'read_repeats',
]
