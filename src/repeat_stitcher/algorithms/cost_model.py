"""
Link cost between two ordered simple repeats.

The cost combines how far the two alignments overlap (or are separated) in
genomic space with how far they overlap in consensus space. Consistent
fragments of one element sit next to each other in both spaces, so both
overlaps are near zero and so is the cost.
"""

from dataclasses import dataclass
import math
from typing import Tuple

from ..core.records import SimpleRepeat, Strand

# Maximum distance between sorted end points examined left of the right element.
MAX_SPAN = 100_000

# Tolerances set the width of the troughs in the cost surface. Values are >= 0.
GENOMIC_OVERLAP_TOLERANCE = 2
CONSENSUS_OVERLAP_TOLERANCE = 1
CONCORDANCE_TOLERANCE = 0.5


class UnresolvedConsensusError(ValueError):
    """A record without consensus coordinates was offered for linking."""


@dataclass(frozen=True)
class CostModel:
    """
    Scores a link from `left` to `right`.

    Calling the model returns (score, linkable). An unstranded right element or
    a pair whose right end points are more than `max_span` apart is never
    linkable. Otherwise the link is always allowed and scored as
    left.score - |cost|.
    """
    max_span: int = MAX_SPAN
    genomic_overlap_tolerance: float = GENOMIC_OVERLAP_TOLERANCE
    consensus_overlap_tolerance: float = CONSENSUS_OVERLAP_TOLERANCE
    concordance_tolerance: float = CONCORDANCE_TOLERANCE

    def __call__(self, left: SimpleRepeat, right: SimpleRepeat) -> Tuple[float, bool]:
        if (right.genomic.strand == Strand.NONE
                or right.genomic.right - left.genomic.right > self.max_span):
            return -math.inf, False

        for r in (left, right):
            if not r.has_consensus:
                raise UnresolvedConsensusError(
                    f"{r.name} at {r.genomic} has no consensus coordinates"
                )

        g_overlap = left.genomic.right - right.genomic.left
        if right.genomic.strand == Strand.PLUS:
            r_overlap = left.consensus_right - right.consensus_left
        else:
            r_overlap = right.consensus_right - left.consensus_left

        return left.score - abs(self.link_cost(g_overlap, r_overlap)), True

    def link_cost(self, g_overlap: int, r_overlap: int) -> float:
        """Signed cost for a genomic overlap and a consensus overlap (negative means a gap)."""
        cost = (abs(g_overlap) ** self.genomic_overlap_tolerance
                * abs(r_overlap) ** self.consensus_overlap_tolerance
                * abs(g_overlap - r_overlap) ** self.concordance_tolerance)

        # Immediately adjacent intervals are special-cased.
        if r_overlap == 0:
            return g_overlap * 2 if g_overlap < 0 else g_overlap * 100
        if g_overlap == 0:
            return r_overlap * 40 if r_overlap < 0 else r_overlap * 100

        if r_overlap < 0 and g_overlap < 0:
            # Separated parts.
            return cost * 10
        if (r_overlap < 0) != (g_overlap < 0):
            # Overlap in one space but not the other.
            return cost * 100
        # Co-overlaps.
        return cost * 10

    @classmethod
    def from_config(cls, stitching: dict) -> 'CostModel':
        """Build a model from the `stitching` section of the pipeline configuration."""
        tolerances = stitching.get('cost_model', {}) or {}
        return cls(
            max_span=int(stitching.get('max_span', MAX_SPAN)),
            genomic_overlap_tolerance=tolerances.get(
                'genomic_overlap_tolerance', GENOMIC_OVERLAP_TOLERANCE),
            consensus_overlap_tolerance=tolerances.get(
                'consensus_overlap_tolerance', CONSENSUS_OVERLAP_TOLERANCE),
            concordance_tolerance=tolerances.get(
                'concordance_tolerance', CONCORDANCE_TOLERANCE),
        )


DEFAULT_COST_MODEL = CostModel()


def cost_function(left: SimpleRepeat, right: SimpleRepeat) -> Tuple[float, bool]:
    """Cost of linking `left` to `right` under the default model."""
    return DEFAULT_COST_MODEL(left, right)


__all__ = [
    'CostModel',
    'UnresolvedConsensusError',
    'DEFAULT_COST_MODEL',
    'cost_function',
    'MAX_SPAN',
    'GENOMIC_OVERLAP_TOLERANCE',
    'CONSENSUS_OVERLAP_TOLERANCE',
    'CONCORDANCE_TOLERANCE',
]
