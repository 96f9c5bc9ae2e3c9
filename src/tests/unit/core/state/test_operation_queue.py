# -----------------------------------------------------------------------------
# /*
#  * Copyright (C) 2025 GitStage
#  *
#  * This program is free software; you can redistribute it and/or modify
#  * it under the terms of the GNU General Public License as published by
#  * the Free Software Foundation; Version 2.
#  *
#  * This program is distributed in the hope that it will be useful,
#  * but WITHOUT ANY WARRANTY; without even the implied warranty of
#  * MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
#  * GNU General Public License for more details.
#  *
#  * You should have received a copy of the GNU General Public License
#  * along with this program; if not, see <https://www.gnu.org/licenses/>.
#  */
# -----------------------------------------------------------------------------

import asyncio

import pytest

from gitstage.core.state.operation_queue import GitOperationQueue


def test_operations_run_one_at_a_time_in_order():
    events = []

    async def op(name):
        events.append(f"start {name}")
        await asyncio.sleep(0.01)
        events.append(f"end {name}")
        return name

    async def main():
        queue = GitOperationQueue()
        results = await asyncio.gather(
            queue.enqueue(lambda: op("a")),
            queue.enqueue(lambda: op("b")),
            queue.enqueue(lambda: op("c")),
        )
        return results

    assert asyncio.run(main()) == ["a", "b", "c"]
    assert events == ["start a", "end a", "start b", "end b", "start c", "end c"]


def test_failure_propagates_and_releases_queue():
    async def boom():
        raise RuntimeError("boom")

    async def ok():
        return 1

    async def main():
        queue = GitOperationQueue()
        with pytest.raises(RuntimeError):
            await queue.enqueue(boom)
        assert not queue.is_busy()
        return await queue.enqueue(ok)

    assert asyncio.run(main()) == 1


def test_pending_mutations_are_counted():
    async def main():
        queue = GitOperationQueue()
        release = asyncio.Event()

        async def mutation():
            await release.wait()

        task = asyncio.create_task(queue.enqueue_mutation(mutation))
        await asyncio.sleep(0)
        assert queue.has_pending_mutations()
        assert queue.is_busy()

        release.set()
        await task
        assert not queue.has_pending_mutations()
        assert not queue.is_busy()

    asyncio.run(main())


def test_schedule_refresh_coalesces():
    calls = []

    async def refresh():
        calls.append(1)
        await asyncio.sleep(0.01)

    async def main():
        queue = GitOperationQueue()
        assert queue.schedule_refresh(refresh)
        assert not queue.schedule_refresh(refresh)
        assert not queue.schedule_refresh(refresh)
        await queue.drain()
        assert calls == [1]

        # finished, so the next one goes through
        assert queue.schedule_refresh(refresh)
        await queue.drain()
        assert calls == [1, 1]

    asyncio.run(main())


def test_schedule_refresh_skipped_during_mutation():
    async def refresh():
        raise AssertionError("should not run")

    async def main():
        queue = GitOperationQueue()
        release = asyncio.Event()

        async def mutation():
            await release.wait()

        task = asyncio.create_task(queue.enqueue_mutation(mutation))
        await asyncio.sleep(0)
        assert not queue.schedule_refresh(refresh)
        release.set()
        await task

    asyncio.run(main())


def test_failed_scheduled_refresh_clears_flag():
    async def refresh():
        raise RuntimeError("git exploded")

    async def main():
        queue = GitOperationQueue()
        assert queue.schedule_refresh(refresh)
        await queue.drain()
        assert queue.schedule_refresh(refresh)
        await queue.drain()

    asyncio.run(main())


def test_cancel_background():
    started = []

    async def refresh():
        started.append(1)
        await asyncio.sleep(10)

    async def main():
        queue = GitOperationQueue()
        queue.schedule_refresh(refresh)
        await asyncio.sleep(0)
        queue.cancel_background()
        await queue.drain()

    asyncio.run(main())
    assert started == [1]
