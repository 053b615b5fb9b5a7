"""Tests for the interval and post-scan triggers."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from collection_tags.models import ReconcileSummary
from collection_tags.services.scheduler import IntervalTrigger, TagScheduler
from collection_tags.services.task import CollectionTagTask


def _task(make_settings, **settings):
    task = MagicMock(spec=CollectionTagTask)
    task.name = CollectionTagTask.name
    task.settings = make_settings(**settings)
    task.run = AsyncMock(return_value=ReconcileSummary(checked=1))
    return task


def test_default_trigger_is_six_hours(make_settings):
    scheduler = TagScheduler(_task(make_settings))

    assert scheduler.trigger.interval == timedelta(hours=6)
    assert IntervalTrigger().seconds == 6 * 60 * 60


@pytest.mark.asyncio
async def test_post_scan_runs_when_enabled(make_settings):
    task = _task(make_settings, update_on_scan=True)

    summary = await TagScheduler(task).on_library_scan_completed()

    task.run.assert_awaited_once()
    assert summary.checked == 1


@pytest.mark.asyncio
async def test_post_scan_does_nothing_when_disabled(make_settings):
    task = _task(make_settings, update_on_scan=False)

    summary = await TagScheduler(task).on_library_scan_completed()

    task.run.assert_not_awaited()
    assert summary is None


@pytest.mark.asyncio
async def test_overlapping_execute_is_skipped(make_settings):
    task = _task(make_settings)
    release = asyncio.Event()

    async def _slow_run(**kwargs):
        await release.wait()
        return ReconcileSummary()

    task.run = AsyncMock(side_effect=_slow_run)
    scheduler = TagScheduler(task)

    first = asyncio.create_task(scheduler.execute())
    await asyncio.sleep(0)
    assert scheduler.is_running

    assert await scheduler.execute(reason="second") is None
    release.set()
    await first

    task.run.assert_awaited_once()
    assert scheduler.get_status()["stats"]["skipped"] == 1


@pytest.mark.asyncio
async def test_interval_loop_runs_until_stopped(make_settings):
    task = _task(make_settings)
    scheduler = TagScheduler(task, trigger=IntervalTrigger(timedelta(seconds=0.01)))

    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert task.run.await_count >= 1
    assert scheduler.get_status()["stats"]["runs"] == task.run.await_count


@pytest.mark.asyncio
async def test_interval_loop_survives_failed_run(make_settings):
    task = _task(make_settings)
    task.run = AsyncMock(side_effect=[RuntimeError("boom"), ReconcileSummary()])
    scheduler = TagScheduler(task, trigger=IntervalTrigger(timedelta(seconds=0.01)))

    scheduler.start(run_immediately=True)
    while task.run.await_count < 2:
        await asyncio.sleep(0.01)
    await scheduler.stop()

    status = scheduler.get_status()["stats"]
    assert status["failed"] == 1
    assert status["last_error"] == "boom"


@pytest.mark.asyncio
async def test_stop_cancels_active_run(make_settings):
    task = _task(make_settings)
    started = asyncio.Event()

    async def _run(progress=None, cancel=None, **kwargs):
        started.set()
        while not cancel.is_cancelled:
            await asyncio.sleep(0.01)
        cancel.raise_if_cancelled()

    task.run = AsyncMock(side_effect=_run)
    scheduler = TagScheduler(task, trigger=IntervalTrigger(timedelta(hours=1)))

    scheduler.start(run_immediately=True)
    await asyncio.wait_for(started.wait(), timeout=1)
    await asyncio.wait_for(scheduler.stop(), timeout=1)

    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_execute_calls_run_hooks_in_order(make_settings):
    task = _task(make_settings)
    calls = []
    task.run = AsyncMock(
        side_effect=lambda **kwargs: calls.append("run") or ReconcileSummary(updated=2)
    )
    scheduler = TagScheduler(
        task,
        before_run=lambda: calls.append("before"),
        after_run=lambda summary: calls.append(("after", summary.updated)),
    )

    await scheduler.execute()

    assert calls == ["before", "run", ("after", 2)]


@pytest.mark.asyncio
async def test_after_run_skipped_when_run_fails(make_settings):
    task = _task(make_settings)
    task.run = AsyncMock(side_effect=RuntimeError("boom"))
    after_run = MagicMock()
    scheduler = TagScheduler(task, after_run=after_run)

    with pytest.raises(RuntimeError):
        await scheduler.execute()

    after_run.assert_not_called()
    assert not scheduler.is_running
