"""
Collects scheduler output into one ordered list of composites.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from ..core.records import Composite, PartitionKey
from .scheduler import BlockResult, Message, PartitionDone, PartitionFailure

logger = logging.getLogger(__name__)


def composite_sort_key(c: Composite):
    """
    Genome order: chromosome, then start. Equal starts are broken by end,
    class, strand and part names so that output order never depends on
    which partition finished first.
    """
    return (c.chrom, c.start, c.end, c.repeat_class, int(c.strand), tuple(p.name for p in c.parts))


def sort_composites(composites: Iterable[Composite]) -> List[Composite]:
    return sorted(composites, key=composite_sort_key)


@dataclass
class StitchResult:
    composites: List[Composite] = field(default_factory=list)
    failures: List[PartitionFailure] = field(default_factory=list)
    summaries: List[PartitionDone] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def collect_composites(messages: Iterable[Message]) -> StitchResult:
    """
    Drain the result channel.

    Block results are held per partition and only kept once that partition
    reports completion; a failed partition contributes nothing.
    """
    held: Dict[PartitionKey, List[Composite]] = {}
    result = StitchResult()

    for msg in messages:
        if isinstance(msg, BlockResult):
            held.setdefault(msg.key, []).extend(msg.composites)
        elif isinstance(msg, PartitionDone):
            if msg.skipped:
                logger.info(f"{msg.key} records={msg.records} - skip ({msg.skipped})")
            else:
                logger.info(f"{msg.key} records={msg.records} splits={msg.splits}")
            result.composites.extend(held.pop(msg.key, []))
            result.summaries.append(msg)
        elif isinstance(msg, PartitionFailure):
            dropped = held.pop(msg.key, [])
            logger.error(f"Partition failed: {msg} ({len(dropped)} composites discarded)")
            logger.debug(msg.traceback)
            result.failures.append(msg)
        else:
            raise TypeError(f"unexpected message on result channel: {msg!r}")

    logger.info("chaining complete.")
    result.composites = sort_composites(result.composites)
    return result


__all__ = [
    'StitchResult',
    'composite_sort_key',
    'sort_composites',
    'collect_composites',
]
