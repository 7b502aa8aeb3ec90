"""
Parallel stitching of independent partitions.

Every partition is one task. Tasks run on a pool of at most `workers`
processes and hand their results to the consumer through one bounded
channel, block by block, ending with either a PartitionDone or a
PartitionFailure message. A failing task never takes the run down with it.
"""

import logging
import queue
import traceback
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor
from multiprocessing import Manager
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..algorithms.cost_model import CostModel, DEFAULT_COST_MODEL
from ..algorithms.stitch_chaining import MAX_SEPARATION, segment_blocks, stitch_block
from ..core.records import Composite, PartitionKey, SimpleRepeat

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 64

# Seconds the consumer waits on the channel before checking for lost tasks.
POLL_INTERVAL = 0.5


# ================================================================
# Channel messages
# ================================================================
@dataclass(frozen=True)
class BlockResult:
    key: PartitionKey
    block: int
    size: int
    composites: Tuple[Composite, ...]


@dataclass(frozen=True)
class PartitionDone:
    key: PartitionKey
    records: int
    splits: int = 0
    blocks: int = 0
    skipped: Optional[str] = None


@dataclass(frozen=True)
class PartitionFailure:
    key: PartitionKey
    error_type: str
    message: str
    traceback: str = ""

    def __str__(self):
        return f"{self.key}: {self.error_type}: {self.message}"


Message = Union[BlockResult, PartitionDone, PartitionFailure]


# ================================================================
# Per-partition task
# ================================================================
def stitch_partition(
    key: PartitionKey,
    records: Sequence[SimpleRepeat],
    max_separation: int = MAX_SEPARATION,
    cost_model: CostModel = DEFAULT_COST_MODEL
) -> Iterator[Message]:
    """
    Segment and chain one partition, block by block.

    Yields a BlockResult for every block followed by one PartitionDone.
    Exceptions propagate to the caller.
    """
    segmentation = segment_blocks(records, max_separation)
    if segmentation.skipped:
        yield PartitionDone(key, len(records), skipped=segmentation.skipped)
        return

    for i, block in enumerate(segmentation.blocks):
        yield BlockResult(key, i, len(block), tuple(stitch_block(block, cost_model)))

    yield PartitionDone(key, len(records), segmentation.splits, len(segmentation.blocks))


def partition_messages(
    key: PartitionKey,
    records: Sequence[SimpleRepeat],
    max_separation: int = MAX_SEPARATION,
    cost_model: CostModel = DEFAULT_COST_MODEL
) -> Iterator[Message]:
    """stitch_partition() with any fault turned into a trailing PartitionFailure."""
    try:
        yield from stitch_partition(key, records, max_separation, cost_model)
    except Exception as e:
        yield PartitionFailure(key, type(e).__name__, str(e), traceback.format_exc())


def _run_partition(key, records, max_separation, cost_model, channel):
    """Worker task body: push every message for one partition onto the channel."""
    for msg in partition_messages(key, records, max_separation, cost_model):
        channel.put(msg)


# ================================================================
# Dispatch
# ================================================================
def composites_from(
    partitions: Dict[PartitionKey, List[SimpleRepeat]],
    max_separation: int = MAX_SEPARATION,
    workers: int = 1,
    cost_model: CostModel = DEFAULT_COST_MODEL,
    queue_size: int = DEFAULT_QUEUE_SIZE,
    poll_interval: float = POLL_INTERVAL
) -> Iterator[Message]:
    """
    Stitch all partitions, yielding channel messages as they arrive.

    With one worker partitions are processed in the calling process.
    Otherwise each partition is dispatched to a process pool of `workers`
    and results come back through a bounded queue; a task blocks on a full
    queue until the consumer catches up. There is no ordering across
    partitions.

    A task that ends without sending its final message, for instance because
    its worker process died, is reported as a PartitionFailure.
    """
    workers = max(1, int(workers))
    if not partitions:
        return

    if workers == 1:
        for key, records in partitions.items():
            yield from partition_messages(key, records, max_separation, cost_model)
        return

    logger.debug(f"Dispatching {len(partitions)} partitions to {workers} workers")
    with Manager() as manager:
        channel = manager.Queue(maxsize=max(1, queue_size))
        with ProcessPoolExecutor(max_workers=min(workers, len(partitions))) as pool:
            futures = {
                key: pool.submit(_run_partition, key, records, max_separation, cost_model, channel)
                for key, records in partitions.items()
            }
            finished = set()
            while len(finished) < len(futures):
                try:
                    msg = channel.get(timeout=poll_interval)
                except queue.Empty:
                    lost = [key for key, future in futures.items()
                            if key not in finished and future.done() and future.exception() is not None]
                    if not lost:
                        continue
                    # Messages sent before the task died are already queued.
                    while True:
                        try:
                            msg = channel.get_nowait()
                        except queue.Empty:
                            break
                        if not isinstance(msg, BlockResult):
                            finished.add(msg.key)
                        yield msg
                    for key in lost:
                        if key not in finished:
                            exc = futures[key].exception()
                            finished.add(key)
                            yield PartitionFailure(
                                key, type(exc).__name__, str(exc) or "worker process ended unexpectedly"
                            )
                    continue

                if not isinstance(msg, BlockResult):
                    finished.add(msg.key)
                yield msg


__all__ = [
    'BlockResult',
    'PartitionDone',
    'PartitionFailure',
    'Message',
    'stitch_partition',
    'partition_messages',
    'composites_from',
    'DEFAULT_QUEUE_SIZE',
    'POLL_INTERVAL',
]
