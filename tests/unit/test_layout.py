"""
Unit tests for collision layout
Tests lane assignment for overlapping events in one column
"""

import random

import pytest

# Import project modules
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '../..'))

from schedule_board.engine.layout import max_simultaneous_overlap, resolve_collisions
from schedule_board.models.schedule import ScheduleEvent, format_minutes


def make_event(start: str, end: str, reason: str = "") -> ScheduleEvent:
    return ScheduleEvent(name="Jinyo", date="1.14", start=start, end=end, reason=reason)


def random_events(seed: int, count: int = 30):
    rng = random.Random(seed)
    events = []
    for i in range(count):
        start = rng.randrange(8 * 60, 22 * 60, 15)
        duration = rng.choice([15, 30, 45, 60, 90, 120])
        events.append(make_event(format_minutes(start), format_minutes(start + duration), f"e{i}"))
    return events


class TestResolveCollisions:
    """Test greedy lane assignment"""

    def test_empty_input(self):
        """Test no events gives no layout"""
        assert resolve_collisions([]) == []

    def test_single_event_fills_column(self):
        """Test lone event uses full width"""
        resolved = resolve_collisions([make_event("10:00", "11:00")])

        assert len(resolved) == 1
        assert resolved[0].column_index == 0
        assert resolved[0].column_count == 1
        assert resolved[0].left_percent == pytest.approx(0)
        assert resolved[0].width_percent == pytest.approx(100)

    def test_touching_events_share_a_lane(self):
        """Test end == start does not count as overlap"""
        resolved = resolve_collisions([make_event("10:00", "11:00"), make_event("11:00", "12:00")])

        assert {r.column_index for r in resolved} == {0}
        assert all(r.width_percent == pytest.approx(100) for r in resolved)

    def test_three_mutually_overlapping_events(self):
        """Test 09:00-11:00, 10:00-11:00, 10:30-11:45 all overlap during 10:30-11:00"""
        meeting = make_event("10:00", "11:00", "Meeting")
        brunch = make_event("10:30", "11:45", "Brunch")
        gym = make_event("09:00", "11:00", "Gym")

        resolved = {r.event.reason: r for r in resolve_collisions([meeting, brunch, gym])}

        assert resolved["Gym"].column_index == 0
        assert resolved["Meeting"].column_index == 1
        assert resolved["Brunch"].column_index == 2
        for r in resolved.values():
            assert r.column_count == 3
            assert r.width_percent == pytest.approx(100 / 3)
        assert resolved["Brunch"].left_percent == pytest.approx(200 / 3)

    def test_two_lanes_reuse_earliest_free_lane(self):
        """Test a later event goes back to lane 0 when it is free"""
        first = make_event("09:00", "10:00", "first")
        second = make_event("09:30", "11:00", "second")
        third = make_event("10:00", "10:30", "third")

        resolved = {r.event.reason: r for r in resolve_collisions([first, second, third])}

        assert resolved["first"].column_index == 0
        assert resolved["second"].column_index == 1
        assert resolved["third"].column_index == 0
        assert resolved["third"].column_count == 2

    def test_identical_start_keeps_input_order(self):
        """Test ties on start time are placed in input order"""
        a = make_event("10:00", "11:00", "a")
        b = make_event("10:00", "11:00", "b")

        resolved = {r.event.reason: r.column_index for r in resolve_collisions([a, b])}
        assert resolved == {"a": 0, "b": 1}

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_no_overlap_within_a_lane(self, seed):
        """Test events in the same lane never overlap"""
        resolved = resolve_collisions(random_events(seed))

        by_lane = {}
        for r in resolved:
            by_lane.setdefault(r.column_index, []).append(r.event)

        for lane_events in by_lane.values():
            for i, a in enumerate(lane_events):
                for b in lane_events[i + 1:]:
                    assert not a.overlaps_with(b)

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_lane_count_equals_max_overlap(self, seed):
        """Test the greedy assignment is optimal"""
        events = random_events(seed)
        resolved = resolve_collisions(events)

        assert resolved[0].column_count == max_simultaneous_overlap(events)
        assert len(resolved) == len(events)

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_order_independent_lane_count(self, seed):
        """Test input order does not change lane count or widths"""
        events = random_events(seed)
        shuffled = list(events)
        random.Random(seed + 100).shuffle(shuffled)

        forward = resolve_collisions(events)
        backward = resolve_collisions(shuffled)

        assert forward[0].column_count == backward[0].column_count
        assert forward[0].width_percent == pytest.approx(backward[0].width_percent)


class TestMaxSimultaneousOverlap:
    """Test sweep-line overlap count"""

    def test_touching_is_not_overlap(self):
        assert max_simultaneous_overlap([make_event("10:00", "11:00"), make_event("11:00", "12:00")]) == 1

    def test_nested_events(self):
        events = [make_event("09:00", "12:00"), make_event("10:00", "11:00"), make_event("10:30", "10:45")]
        assert max_simultaneous_overlap(events) == 3

    def test_empty(self):
        assert max_simultaneous_overlap([]) == 0
