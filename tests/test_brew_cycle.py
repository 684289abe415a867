"""
Tests for BrewCycle and IntervalTicker in isolation.
"""

import sys
import time
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from hardware.brew_cycle import BrewCycle, CycleState, IntervalTicker
from step_ticker import StepTicker


class Recorder:
    """Collects on_finish callbacks; optionally refuses to apply completion."""

    def __init__(self, apply=True):
        self.apply = apply
        self.calls = []

    def __call__(self, cycle, completed):
        self.calls.append(completed)
        return completed and self.apply


def make_cycle(valve=lambda: False, apply=True, brew_ticks=5):
    ticker = StepTicker()
    recorder = Recorder(apply)
    cycle = BrewCycle(ticker, valve_open=valve, on_finish=recorder, brew_ticks=brew_ticks)
    return cycle, ticker, recorder


def test_cycle_completes():
    """Test 1: Cycle reports completion once"""
    cycle, ticker, recorder = make_cycle()
    assert cycle.state == CycleState.IDLE
    cycle.start()
    assert cycle.state == CycleState.RUNNING

    ticker.ticks(5)
    assert cycle.join(timeout=2.0)
    assert recorder.calls == [True]
    assert cycle.outcome == CycleState.COMPLETED
    assert cycle.state == CycleState.IDLE
    assert ticker.stopped


def test_cycle_cancel_observed_on_next_tick():
    """Test 2: Cancellation waits for the current tick"""
    cycle, ticker, recorder = make_cycle()
    cycle.start()
    ticker.ticks(2)

    cycle.cancel()
    assert cycle.running
    assert recorder.calls == []

    ticker.ticks(1)
    assert cycle.join(timeout=2.0)
    assert recorder.calls == [False]
    assert cycle.outcome == CycleState.ABORTED
    assert cycle.ticks == 3


def test_valve_reset_restarts_countdown():
    """Test 3: Open valve resets the tick counter"""
    valve = {'open': False}
    cycle, ticker, recorder = make_cycle(valve=lambda: valve['open'], brew_ticks=3)
    cycle.start()

    ticker.ticks(2)
    valve['open'] = True
    ticker.ticks(3)
    valve['open'] = False
    ticker.ticks(2)
    assert cycle.running

    ticker.ticks(1)
    assert cycle.join(timeout=2.0)
    assert cycle.ticks == 8
    assert recorder.calls == [True]


def test_completion_not_applied_counts_as_abort():
    cycle, ticker, recorder = make_cycle(apply=False, brew_ticks=1)
    cycle.start()
    ticker.ticks(1)
    assert cycle.join(timeout=2.0)
    assert recorder.calls == [True]
    assert cycle.outcome == CycleState.ABORTED


def test_stopped_ticker_aborts():
    cycle, ticker, recorder = make_cycle()
    cycle.start()
    ticker.ticks(1)
    ticker.stop()
    assert cycle.join(timeout=2.0)
    assert recorder.calls == [False]
    assert cycle.outcome == CycleState.ABORTED


def test_invalid_brew_ticks():
    with pytest.raises(ValueError):
        BrewCycle(StepTicker(), valve_open=lambda: False, on_finish=Recorder(), brew_ticks=0)


def test_interval_ticker_fires_and_stops():
    """Test 4: IntervalTicker fires on schedule and wakes on stop"""
    ticker = IntervalTicker(0.01)
    start = time.monotonic()
    assert ticker.wait() is True
    assert ticker.wait() is True
    assert time.monotonic() - start >= 0.015

    slow = IntervalTicker(10.0)
    slow.stop()
    start = time.monotonic()
    assert slow.wait() is False
    assert time.monotonic() - start < 1.0
    assert slow.stopped


def test_interval_ticker_rejects_bad_interval():
    with pytest.raises(ValueError):
        IntervalTicker(0)


@pytest.mark.filterwarnings("ignore::pytest.PytestUnhandledThreadExceptionWarning")
def test_failing_finish_callback_reports_abort():
    """Test 5: A completion that could not be applied is not reported as completed"""
    def explode(cycle, completed):
        raise RuntimeError("write failed")

    ticker = StepTicker()
    cycle = BrewCycle(ticker, valve_open=lambda: False, on_finish=explode, brew_ticks=1)
    cycle.start()
    ticker.ticks(1)
    assert cycle.join(timeout=2.0)
    assert cycle.outcome == CycleState.ABORTED
    assert cycle.state == CycleState.IDLE
    assert ticker.stopped
