"""
Repeat chaining engine.

Records are grouped into partitions by (chrom, strand, class), each partition
is sorted by right end point and split into blocks wherever successive end
points are further apart than the maximum separation, and each block is
chained by dynamic programming so that score improving predecessors are
linked into composites.
"""

from collections import defaultdict
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..core.records import Composite, PartitionKey, SimpleRepeat, partition_key
from .cost_model import cost_function

# Maximum distance between successive sorted end points that allows two
# records to fall in the same block.
MAX_SEPARATION = 50_000

CostFn = Callable[[SimpleRepeat, SimpleRepeat], Tuple[float, bool]]


# ================================================================
# Partitioning
# ================================================================
def partition_records(records: Iterable[SimpleRepeat]) -> Dict[PartitionKey, List[SimpleRepeat]]:
    """Group records by partition key, keeping arrival order within each group."""
    partitions = defaultdict(list)
    for r in records:
        partitions[partition_key(r)].append(r)
    return dict(partitions)


# ================================================================
# Block segmentation
# ================================================================
def sort_records(records: Iterable[SimpleRepeat]) -> List[SimpleRepeat]:
    """Sort by chromosome then by genomic right end point."""
    return sorted(records, key=lambda r: (r.genomic.chrom, r.genomic.right))


def count_splits(records: Sequence[SimpleRepeat], max_separation: int = MAX_SEPARATION) -> int:
    """Number of separation breaks in an already sorted run of records."""
    return sum(
        1 for prev, r in zip(records, records[1:])
        if r.genomic.right - prev.genomic.right > max_separation
    )


def split_blocks(records: Sequence[SimpleRepeat], max_separation: int = MAX_SEPARATION) -> List[List[SimpleRepeat]]:
    """
    Split sorted records into maximal separation-bounded runs.

    Runs of a single record are dropped since they cannot be chained.
    """
    blocks = []
    start = 0
    for i in range(1, len(records) + 1):
        if i == len(records) or records[i].genomic.right - records[i - 1].genomic.right > max_separation:
            if i - start >= 2:
                blocks.append(list(records[start:i]))
            start = i
    return blocks


class Segmentation(NamedTuple):
    """Blocks of one partition, with the number of separation breaks or the reason it was skipped."""
    blocks: List[List[SimpleRepeat]]
    splits: int = 0
    skipped: Optional[str] = None


def segment_blocks(records: Sequence[SimpleRepeat], max_separation: int = MAX_SEPARATION) -> Segmentation:
    """
    Order one partition and split it into blocks for chaining.

    A partition with fewer than two records, or whose lead record has no
    consensus coordinates, yields no blocks and a skip reason.
    """
    if len(records) < 2:
        return Segmentation([], skipped="too few records")
    ordered = sort_records(records)
    if ordered[0].consensus_left is None:
        return Segmentation([], skipped="no consensus coordinates")
    return Segmentation(split_blocks(ordered, max_separation), count_splits(ordered, max_separation))


# ================================================================
# DP chaining
# ================================================================
def _predecessors(block: Sequence[SimpleRepeat], fn: CostFn) -> List[List[Tuple[int, float]]]:
    """
    Linkable predecessors of every record with their link scores.

    Pairs where either record has no consensus coordinates are not edges.
    The scan left of each record stops at the first pair the cost function
    refuses; the block is sorted by right end point so nothing further left
    can be within span either.
    """
    preds = []
    for j, right in enumerate(block):
        links = []
        if right.has_consensus:
            for k in range(j - 1, -1, -1):
                if not block[k].has_consensus:
                    continue
                s, ok = fn(block[k], right)
                if not ok:
                    break
                links.append((k, s))
        preds.append(links)
    return preds


def relax_chains(block: Sequence[SimpleRepeat], fn: CostFn = cost_function) -> Tuple[np.ndarray, np.ndarray]:
    """
    Maximise the score of chains ending at each record.

    Returns (scores, links) where links[j] is the best predecessor of j, or j
    itself when no predecessor improves on the record alone.

    Each round extends chains by at most one record using only the previous
    round's scores, so n - 1 rounds reach every chain in a block of n.
    """
    n = len(block)
    preds = _predecessors(block, fn)

    prev_scores = np.array([r.score for r in block], dtype=float)
    prev_links = np.arange(n)
    scores = np.empty_like(prev_scores)
    links = np.empty_like(prev_links)

    for _ in range(n - 1):
        scores[:] = prev_scores
        links[:] = prev_links
        for j in range(n):
            for k, s in preds[j]:
                s += prev_scores[k]
                if s > scores[j]:
                    scores[j] = s
                    links[j] = k

        converged = np.array_equal(scores, prev_scores) and np.array_equal(links, prev_links)
        prev_scores, scores = scores, prev_scores
        prev_links, links = links, prev_links
        if converged:
            break

    return prev_scores, prev_links


def extract_chains(block: Sequence[SimpleRepeat], scores: np.ndarray, links: np.ndarray,
                   fn: CostFn = cost_function) -> List[Composite]:
    """
    Pull disjoint chains out of a relaxed link table, right to left.

    A chain ending further right claims its records first. A later walk that
    runs into a claimed record is cut there and rescored from its new root.
    Parts are ordered by genomic start.
    """
    n = len(block)
    claimed = np.zeros(n, dtype=bool)
    composites = []

    for i in range(n - 1, -1, -1):
        if claimed[i]:
            continue

        path = [i]
        p = i
        truncated = False
        while links[p] != p:
            p = int(links[p])
            if claimed[p]:
                truncated = True
                break
            path.append(p)
        if len(path) < 2:
            continue

        claimed[path] = True
        path.reverse()

        if truncated:
            score = block[path[0]].score
            for k, j in zip(path, path[1:]):
                s, _ = fn(block[k], block[j])
                score += s
        else:
            score = float(scores[i])

        composites.append(Composite(
            repeat_class=block[0].repeat_class,
            score=float(score),
            parts=tuple(sorted(
                (block[p].to_part() for p in path),
                key=lambda part: (part.genomic.left, part.genomic.right),
            )),
        ))

    return composites


def stitch_block(block: Sequence[SimpleRepeat], fn: CostFn = cost_function) -> List[Composite]:
    """
    Chain one sorted block of records into composites.

    Input: records sorted by sort_records() and bounded by split_blocks()
    Output: disjoint composites of two or more parts; unchained records are dropped
    """
    if len(block) < 2:
        return []
    scores, links = relax_chains(block, fn)
    return extract_chains(block, scores, links, fn)


__all__ = [
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
