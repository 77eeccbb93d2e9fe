import asyncio
import time

import pytest

from simulator.engine import ExecutionEngine, InvalidOperation, Phase, StepEvent, Verdict
from simulator.examples import BINARY_INCREMENT, PALINDROME_CHECKER
from simulator.scheduler import Scheduler


def test_play_runs_until_halted_and_stops_itself():
    async def scenario():
        engine = ExecutionEngine(BINARY_INCREMENT, "101", speed_ms=1)
        assert engine.play() is True
        assert engine.phase is Phase.RUNNING
        await asyncio.wait_for(engine.scheduler.wait(), timeout=5)
        return engine

    engine = asyncio.run(scenario())
    assert engine.phase is Phase.HALTED
    assert engine.verdict is Verdict.ACCEPTED
    assert engine.tape.content() == "110"
    assert not engine.scheduler.active


def test_stop_before_first_tick_runs_zero_steps():
    async def scenario():
        engine = ExecutionEngine(BINARY_INCREMENT, "101", speed_ms=5)
        engine.play()
        engine.pause()
        await asyncio.sleep(0.05)
        return engine

    engine = asyncio.run(scenario())
    assert engine.steps == 0
    assert engine.phase is Phase.PAUSED


def test_reset_cancels_pending_steps():
    async def scenario():
        engine = ExecutionEngine(PALINDROME_CHECKER, "1001", speed_ms=5)
        engine.play()
        engine.reset()
        await asyncio.sleep(0.05)
        return engine

    engine = asyncio.run(scenario())
    assert engine.steps == 0
    assert engine.phase is Phase.IDLE
    assert not engine.scheduler.active


def test_start_on_halted_engine_does_nothing():
    async def scenario():
        engine = ExecutionEngine(BINARY_INCREMENT, "1")
        engine.run_to_halt(100)
        steps = engine.steps
        started = engine.scheduler.start(1)
        await asyncio.sleep(0.02)
        return engine, steps, started

    engine, steps, started = asyncio.run(scenario())
    assert started is False
    assert not engine.scheduler.active
    assert engine.steps == steps


def test_stop_after_timer_fired_but_before_tick_has_no_effect():
    ticks = []

    async def scenario():
        scheduler = Scheduler(lambda: ticks.append(1), lambda: False)
        scheduler.start(1)
        await asyncio.sleep(0)
        # block past the deadline so the timer is due but the loop has not resumed
        time.sleep(0.01)
        scheduler.stop()
        scheduler.stop()
        await asyncio.sleep(0.02)
        return scheduler

    scheduler = asyncio.run(scenario())
    assert ticks == []
    assert not scheduler.active


def test_restart_replaces_previous_loop():
    ticks = []

    async def scenario():
        scheduler = Scheduler(lambda: ticks.append(1), lambda: len(ticks) >= 3)
        scheduler.start(50)
        first = scheduler._task
        scheduler.start(1)
        await asyncio.wait_for(scheduler.wait(), timeout=5)
        return first

    first = asyncio.run(scenario())
    assert first.cancelled()
    assert len(ticks) == 3


def test_reschedule_changes_interval_without_losing_steps():
    async def scenario():
        engine = ExecutionEngine(BINARY_INCREMENT, "1011", speed_ms=200)
        seen = []
        engine.subscribe(lambda e: seen.append(e.steps) if isinstance(e, StepEvent) else None)
        engine.play()
        engine.set_speed(1)
        await asyncio.wait_for(engine.scheduler.wait(), timeout=5)
        return engine, seen

    engine, seen = asyncio.run(scenario())
    assert engine.phase is Phase.HALTED
    assert seen == list(range(1, engine.steps + 1))
    assert engine.speed_ms == 1


def test_manual_step_rejected_while_running_then_allowed_when_paused():
    async def scenario():
        engine = ExecutionEngine(PALINDROME_CHECKER, "1001", speed_ms=1000)
        engine.play()
        with pytest.raises(InvalidOperation):
            engine.step()
        engine.pause()
        snapshot = engine.step()
        return engine, snapshot

    engine, snapshot = asyncio.run(scenario())
    assert snapshot.steps == 1
    assert engine.phase is Phase.PAUSED


def test_play_requires_running_loop():
    engine = ExecutionEngine(BINARY_INCREMENT, "1")
    with pytest.raises(RuntimeError):
        engine.play()
    assert engine.phase is Phase.IDLE


def test_pause_then_resume_reaches_same_result():
    async def scenario():
        engine = ExecutionEngine(PALINDROME_CHECKER, "11011", speed_ms=1)
        engine.play()
        await asyncio.sleep(0.01)
        engine.pause()
        paused_at = engine.steps
        engine.play()
        await asyncio.wait_for(engine.scheduler.wait(), timeout=5)
        return engine, paused_at

    engine, paused_at = asyncio.run(scenario())
    reference = ExecutionEngine(PALINDROME_CHECKER, "11011").run_to_halt(10_000)
    assert paused_at <= engine.steps
    assert engine.snapshot().verdict is reference.verdict
    assert engine.steps == reference.steps


def test_listener_error_pauses_engine_and_play_resumes():
    def explode(event):
        if isinstance(event, StepEvent) and event.steps == 2:
            raise ValueError("listener broke")

    async def scenario():
        engine = ExecutionEngine(BINARY_INCREMENT, "101", speed_ms=1)
        engine.subscribe(explode)
        engine.play()
        with pytest.raises(ValueError):
            await asyncio.wait_for(engine.scheduler.wait(), timeout=5)
        assert engine.phase is Phase.PAUSED
        assert not engine.scheduler.active
        assert engine.steps == 2

        engine.unsubscribe(explode)
        assert engine.step().steps == 3
        engine.edit_cell(-5, "1")
        engine.edit_cell(-5, None)
        assert engine.play() is True
        assert engine.scheduler.active
        await asyncio.wait_for(engine.scheduler.wait(), timeout=5)
        return engine

    engine = asyncio.run(scenario())
    assert engine.phase is Phase.HALTED
    assert engine.verdict is Verdict.ACCEPTED
    assert engine.tape.content() == "110"
    assert engine.steps == 6


def test_play_restarts_dead_loop_left_in_running_phase():
    async def scenario():
        engine = ExecutionEngine(BINARY_INCREMENT, "1", speed_ms=1)
        engine.play()
        engine.scheduler.stop()
        assert engine.phase is Phase.RUNNING
        assert engine.play() is True
        await asyncio.wait_for(engine.scheduler.wait(), timeout=5)
        return engine

    engine = asyncio.run(scenario())
    assert engine.phase is Phase.HALTED
    assert engine.tape.content() == "10"
