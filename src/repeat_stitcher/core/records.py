"""
Repeat annotation records and the composites built from them.

All genomic coordinates are 0-based half-open. Consensus coordinates follow
the same convention; a consensus position that the masker did not report is
held as None.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional, Tuple, Union


class Strand(IntEnum):
    """Genomic strand of a repeat match."""
    MINUS = -1
    NONE = 0
    PLUS = 1

    def __str__(self):
        return _STRAND_SYMBOLS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> 'Strand':
        """Map a GFF strand column value to a Strand. Raises ValueError for anything else."""
        try:
            return _SYMBOL_STRANDS[symbol]
        except KeyError:
            raise ValueError(f"illegal strand: {symbol!r}") from None


_STRAND_SYMBOLS = {Strand.PLUS: '+', Strand.MINUS: '-', Strand.NONE: '.'}
_SYMBOL_STRANDS = {v: k for k, v in _STRAND_SYMBOLS.items()}


@dataclass(frozen=True)
class GenomicInterval:
    chrom: str
    left: int
    right: int
    strand: Strand = Strand.NONE

    def __post_init__(self):
        if self.right <= self.left:
            raise ValueError(
                f"empty or inverted interval {self.chrom}:[{self.left},{self.right})"
            )

    def __len__(self):
        return self.right - self.left

    def __str__(self):
        return f"{self.chrom}:[{self.left},{self.right})"


@dataclass(frozen=True)
class SimpleRepeat:
    """
    A single masker alignment of a repeat consensus to the genome.

    Attributes:
        name: Repeat type (e.g. AluJr)
        repeat_class: Repeat class/family (e.g. SINE/Alu)
        score: Alignment score
        genomic: Genomic region matched
        consensus_left: Alignment start relative to the consensus, or None
        consensus_right: Alignment end relative to the consensus, or None
    """
    name: str
    repeat_class: str
    score: float
    genomic: GenomicInterval
    consensus_left: Optional[int] = None
    consensus_right: Optional[int] = None

    def __post_init__(self):
        if (self.consensus_left is not None and self.consensus_right is not None
                and self.consensus_right < self.consensus_left):
            raise ValueError(
                f"{self.name}: consensus end {self.consensus_right} "
                f"before start {self.consensus_left}"
            )

    @property
    def has_consensus(self) -> bool:
        return self.consensus_left is not None and self.consensus_right is not None

    def to_part(self) -> 'Part':
        return Part(self.name, self.consensus_left, self.consensus_right, self.genomic)


@dataclass(frozen=True)
class Part:
    name: str
    consensus_left: Optional[int]
    consensus_right: Optional[int]
    genomic: GenomicInterval


@dataclass(frozen=True)
class Composite:
    """A chain of simple repeats judged to be one fragmented repeat element."""
    repeat_class: str
    score: float
    parts: Tuple[Part, ...]

    def __post_init__(self):
        if not self.parts:
            raise ValueError("composite must have at least one part")

    @property
    def chrom(self) -> str:
        return self.parts[0].genomic.chrom

    @property
    def strand(self) -> Strand:
        return self.parts[0].genomic.strand

    @property
    def start(self) -> int:
        return self.parts[0].genomic.left

    @property
    def end(self) -> int:
        return max(p.genomic.right for p in self.parts)


class PartitionKey(NamedTuple):
    """Records sharing a key are candidates for the same chain."""
    chrom: str
    strand: Strand
    repeat_class: str

    def __str__(self):
        return f"chr:{self.chrom} strand:({str(self.strand)}) class:{self.repeat_class}"


def partition_key(record: SimpleRepeat) -> PartitionKey:
    return PartitionKey(record.genomic.chrom, record.genomic.strand, record.repeat_class)


# Accessors over the two feature shapes the tools handle.
Feature = Union[SimpleRepeat, Composite]


def feature_chrom(feature: Feature) -> str:
    if isinstance(feature, SimpleRepeat):
        return feature.genomic.chrom
    return feature.chrom


def feature_start(feature: Feature) -> int:
    if isinstance(feature, SimpleRepeat):
        return feature.genomic.left
    return feature.start


def feature_end(feature: Feature) -> int:
    if isinstance(feature, SimpleRepeat):
        return feature.genomic.right
    return feature.end


def feature_strand(feature: Feature) -> Strand:
    if isinstance(feature, SimpleRepeat):
        return feature.genomic.strand
    return feature.strand


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
