"""Historical block sampling and time-series assembly.

A period request is served from a fixed number of past blocks, spaced by a
period-specific stride and never earlier than the entity's deployment block.
Values fetched at each sampled block are zipped with that block's timestamp.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from ..models.enums import Period


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Approximate network throughput; not read from chain.
BLOCKS_PER_YEAR: int = 1_000_000
DAYS_PER_YEAR: float = 365.25

# period -> (labels, stride in blocks)
_SAMPLING_PLANS: Dict[Period, Tuple[int, int]] = {
    Period.DAY: (12, math.floor(BLOCKS_PER_YEAR / (DAYS_PER_YEAR * 12))),
    Period.WEEK: (7, math.floor(BLOCKS_PER_YEAR / DAYS_PER_YEAR)),
    Period.MONTH: (15, math.floor((BLOCKS_PER_YEAR * 2) / DAYS_PER_YEAR)),
    Period.YEAR: (12, math.floor(BLOCKS_PER_YEAR / 12)),
}


def resolve_period(value: Optional[Union[Period, str]]) -> Period:
    """Return the matching period, falling back to `week` for anything else."""
    if isinstance(value, Period):
        return value
    try:
        return Period(str(value).strip().lower())
    except ValueError:
        logger.debug("Unrecognized period=%s. Using week.", value)
        return Period.WEEK


def sampling_plan(period: Optional[Union[Period, str]]) -> Tuple[int, int]:
    """Return `(labels, stride)` for the period."""
    return _SAMPLING_PLANS[resolve_period(period)]


def past_block_numbers(
    period: Optional[Union[Period, str]],
    deploy_block: int,
    current_block: int,
) -> List[int]:
    """Build the sampled block numbers for a period.

    Sample ``i`` is ``current_block - stride * i`` unless that falls before
    ``deploy_block``, in which case it is ``deploy_block``. The list starts
    at the current block and walks backwards; clamped tails repeat.
    """
    labels, stride = sampling_plan(period)
    block_numbers: List[int] = []
    for i in range(labels):
        candidate = current_block - stride * i
        block_numbers.append(candidate if candidate >= deploy_block else deploy_block)
    return block_numbers


def block_timestamp_to_datetime(timestamp: int) -> datetime:
    """Convert a chain timestamp in seconds into an aware UTC datetime."""
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc)


async def assemble_series(
    block_numbers: Sequence[int],
    fetch_values: Callable[[int], Awaitable[T]],
    fetch_timestamp: Callable[[int], Awaitable[Any]],
) -> List[Tuple[datetime, T]]:
    """Fetch values and timestamps for every block concurrently, then zip.

    Output element ``i`` belongs to ``block_numbers[i]``. Any failed fetch
    fails the whole series, and the remaining fetches are cancelled and
    settled before the error reaches the caller.
    """
    count = len(block_numbers)
    tasks = [asyncio.ensure_future(fetch_values(block)) for block in block_numbers]
    tasks.extend(asyncio.ensure_future(fetch_timestamp(block)) for block in block_numbers)
    try:
        results = await asyncio.gather(*tasks)
    except Exception:
        logger.exception("Failed assembling series for blocks=%s", list(block_numbers))
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    values, timestamps = results[:count], results[count:]
    return [
        (block_timestamp_to_datetime(timestamp), value)
        for timestamp, value in zip(timestamps, values)
    ]
