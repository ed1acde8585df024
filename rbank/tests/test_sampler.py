"""Unit tests for historical block sampling and series assembly."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import unittest

from rbank.common.sampler import (
    BLOCKS_PER_YEAR,
    assemble_series,
    past_block_numbers,
    resolve_period,
    sampling_plan,
)
from rbank.models.enums import Period


class TestSamplingPlan(unittest.TestCase):
    """Verify label counts and strides per period."""

    def test_blocks_per_year(self) -> None:
        self.assertEqual(BLOCKS_PER_YEAR, 1_000_000)

    def test_day(self) -> None:
        self.assertEqual(sampling_plan("day"), (12, 228))

    def test_week(self) -> None:
        self.assertEqual(sampling_plan("week"), (7, 2737))

    def test_month(self) -> None:
        self.assertEqual(sampling_plan("month"), (15, 5475))

    def test_year(self) -> None:
        self.assertEqual(sampling_plan("year"), (12, 83333))

    def test_unrecognized_falls_back_to_week(self) -> None:
        for value in ("fortnight", "", None, "decade"):
            self.assertEqual(resolve_period(value), Period.WEEK)
            self.assertEqual(sampling_plan(value), (7, 2737))

    def test_enum_and_case_insensitive_strings(self) -> None:
        self.assertEqual(resolve_period(Period.MONTH), Period.MONTH)
        self.assertEqual(resolve_period(" Year "), Period.YEAR)


class TestPastBlockNumbers(unittest.TestCase):
    """Verify sample generation and deploy-block clamping."""

    def test_lengths(self) -> None:
        expected = {"day": 12, "week": 7, "month": 15, "year": 12, "unknown": 7}
        for period, length in expected.items():
            self.assertEqual(len(past_block_numbers(period, 0, 5_000_000)), length)

    def test_walks_backwards_from_current_block(self) -> None:
        self.assertEqual(
            past_block_numbers(Period.WEEK, 0, 100_000),
            [100_000, 97_263, 94_526, 91_789, 89_052, 86_315, 83_578],
        )

    def test_clamps_at_deploy_block(self) -> None:
        blocks = past_block_numbers(Period.DAY, 9_000, 10_000)
        self.assertEqual(blocks[:5], [10_000, 9_772, 9_544, 9_316, 9_088])
        self.assertEqual(blocks[5:], [9_000] * 7)

    def test_never_before_deploy_block(self) -> None:
        for period in Period:
            for deploy_block, current in ((0, 10), (500, 600), (1_000_000, 3_000_000)):
                blocks = past_block_numbers(period, deploy_block, current)
                self.assertTrue(all(block >= deploy_block for block in blocks))

    def test_freshly_deployed(self) -> None:
        for period in Period:
            blocks = past_block_numbers(period, 4_242, 4_242)
            self.assertEqual(set(blocks), {4_242})


class TestAssembleSeries(unittest.IsolatedAsyncioTestCase):
    """Verify ordered, all-or-nothing series assembly."""

    async def test_preserves_sample_order(self) -> None:
        blocks = [30, 20, 10]

        async def fetch_value(block: int) -> int:
            # Later samples resolve first.
            await asyncio.sleep(block / 10_000)
            return block * 2

        async def fetch_timestamp(block: int) -> int:
            return 1_600_000_000 + block

        series = await assemble_series(blocks, fetch_value, fetch_timestamp)
        self.assertEqual([value for _, value in series], [60, 40, 20])
        self.assertEqual(
            series[0][0],
            datetime.fromtimestamp(1_600_000_030, tz=timezone.utc),
        )

    async def test_duplicate_blocks_kept(self) -> None:
        async def fetch(block: int) -> int:
            return block

        series = await assemble_series([5, 5, 5], fetch, fetch)
        self.assertEqual(len(series), 3)

    async def test_any_failure_fails_whole_series(self) -> None:
        async def fetch_value(block: int) -> int:
            if block == 2:
                raise ConnectionError("node unavailable")
            return block

        async def fetch_timestamp(block: int) -> int:
            return block

        with self.assertRaises(ConnectionError):
            await assemble_series([1, 2, 3], fetch_value, fetch_timestamp)

    async def test_timestamp_failure_fails_whole_series(self) -> None:
        async def fetch_value(block: int) -> int:
            return block

        async def fetch_timestamp(block: int) -> int:
            raise TimeoutError("slow node")

        with self.assertRaises(TimeoutError):
            await assemble_series([1, 2], fetch_value, fetch_timestamp)

    async def test_failure_cancels_pending_fetches(self) -> None:
        finished = []

        async def fetch_value(block: int) -> int:
            if block == 1:
                raise ConnectionError("node unavailable")
            await asyncio.sleep(0.05)
            finished.append(block)
            return block

        async def fetch_timestamp(block: int) -> int:
            await asyncio.sleep(0.05)
            finished.append(-block)
            return block

        with self.assertRaises(ConnectionError):
            await assemble_series([1, 2, 3], fetch_value, fetch_timestamp)
        self.assertEqual(finished, [])

        await asyncio.sleep(0.1)
        self.assertEqual(finished, [])


if __name__ == "__main__":
    unittest.main()
