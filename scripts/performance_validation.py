#!/usr/bin/env python3
"""
Performance Validation Script
Validates that the input path and layout resolution fit within a 16ms frame budget
"""

import asyncio
import json
import statistics
import time
from datetime import datetime
from typing import Any, Dict, List, Optional
from pathlib import Path
import logging

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Import project modules
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from schedule_board.board.controller import BoardController
from schedule_board.board.view import build_snapshot
from schedule_board.engine.geometry import BoardGeometry
from schedule_board.engine.interaction import InteractionStateMachine
from schedule_board.engine.layout import resolve_collisions
from schedule_board.integrations.sheet_fetcher import ScheduleDataset
from schedule_board.models.input import HitTarget, InputDevice, PointerSample, SampleType
from schedule_board.models.operations import MoveOperation
from schedule_board.models.schedule import ScheduleEvent, format_minutes


class _StaticSource:
    """Data source returning a fixed dataset"""

    def __init__(self, dataset: ScheduleDataset):
        self.dataset = dataset

    async def fetch(self) -> ScheduleDataset:
        return self.dataset


class _NullSync:
    """Sync target that accepts everything"""

    async def save(self, action, data, original: Optional[Dict[str, Any]] = None) -> None:
        return None


class PerformanceBenchmark:
    """Performance benchmarking and validation system"""

    def __init__(self):
        self.frame_budget_ms = 16.0
        self.people = [f"Person {i:02d}" for i in range(12)]
        self.results = {
            "timestamp": datetime.now().isoformat(),
            "benchmarks": {},
            "summary": {}
        }

    async def run_all_benchmarks(self) -> Dict[str, Any]:
        """Run all benchmarks"""
        logger.info("🚀 Starting performance validation suite...")

        self._benchmark_touch_drag()
        self._benchmark_mouse_move()
        self._benchmark_layout(event_count=50)
        self._benchmark_layout(event_count=500)
        self._benchmark_snapshot()
        await self._benchmark_optimistic_apply()

        self._create_benchmark_summary()

        logger.info("✅ Performance validation complete")
        return self.results

    def _benchmark_touch_drag(self):
        """Per-sample cost of a long-press creation drag"""
        logger.info("📊 Benchmarking touch creation drag...")

        geometry = BoardGeometry(people=self.people)
        response_times = []

        for i in range(200):
            machine = InteractionStateMachine(geometry, "1.14")
            target = HitTarget.empty_cell(self.people[i % len(self.people)])
            samples = [self._sample(SampleType.PRESS, InputDevice.TOUCH, 100, 200, 0, target)]
            samples += [
                self._sample(SampleType.MOVE, InputDevice.TOUCH, 100, 200 + step * 2, 300 + step * 16, target)
                for step in range(60)
            ]
            samples.append(self._sample(SampleType.RELEASE, InputDevice.TOUCH, 100, 320, 1300, target))

            for sample in samples:
                start_time = time.perf_counter()
                machine.handle(sample)
                response_times.append((time.perf_counter() - start_time) * 1000)

        self.results["benchmarks"]["touch_creation_drag"] = self._analyze(response_times)

    def _benchmark_mouse_move(self):
        """Per-sample cost of moving a block across columns"""
        logger.info("📊 Benchmarking mouse block move...")

        geometry = BoardGeometry(people=self.people)
        event = ScheduleEvent(name=self.people[0], date="1.14", start="10:00", end="11:00")
        response_times = []

        for _ in range(200):
            machine = InteractionStateMachine(geometry, "1.14")
            target = HitTarget.event_body(event)
            samples = [self._sample(SampleType.PRESS, InputDevice.MOUSE, 100, 160, 0, target)]
            samples += [
                self._sample(SampleType.MOVE, InputDevice.MOUSE, 100 + step * 10, 160 + step, step * 16, target)
                for step in range(60)
            ]
            samples.append(self._sample(SampleType.RELEASE, InputDevice.MOUSE, 700, 220, 1000, target))

            for sample in samples:
                start_time = time.perf_counter()
                machine.handle(sample)
                response_times.append((time.perf_counter() - start_time) * 1000)

        self.results["benchmarks"]["mouse_block_move"] = self._analyze(response_times)

    def _benchmark_layout(self, event_count: int):
        """Collision resolution for one column"""
        logger.info(f"📊 Benchmarking layout ({event_count} events)...")

        events = self._create_test_events(event_count, people=[self.people[0]])
        response_times = []

        for _ in range(50):
            start_time = time.perf_counter()
            resolve_collisions(events)
            response_times.append((time.perf_counter() - start_time) * 1000)

        self.results["benchmarks"][f"layout_{event_count}_events"] = self._analyze(response_times)

    def _benchmark_snapshot(self):
        """Full board snapshot for a realistic day"""
        logger.info("📊 Benchmarking board snapshot...")

        geometry = BoardGeometry(people=self.people)
        events = self._create_test_events(120, people=self.people)
        response_times = []

        for _ in range(50):
            start_time = time.perf_counter()
            build_snapshot(geometry, events, "1.14")
            response_times.append((time.perf_counter() - start_time) * 1000)

        self.results["benchmarks"]["board_snapshot"] = self._analyze(response_times)

    async def _benchmark_optimistic_apply(self):
        """Local part of an optimistic move (sync target returns immediately)"""
        logger.info("📊 Benchmarking optimistic apply...")

        events = self._create_test_events(120, people=self.people)
        controller = BoardController(
            data_source=_StaticSource(ScheduleDataset(events=events, users=self.people)),
            sync_client=_NullSync()
        )
        await controller.load()
        response_times = []

        for index in range(100):
            event = controller.events[index % len(controller.events)]
            operation = MoveOperation(
                event=event,
                new_person=self.people[(index + 1) % len(self.people)],
                new_start=event.start,
                new_end=event.end
            )
            start_time = time.perf_counter()
            await controller.apply(operation)
            response_times.append((time.perf_counter() - start_time) * 1000)

        self.results["benchmarks"]["optimistic_apply"] = self._analyze(response_times)

    def _create_benchmark_summary(self):
        """Create benchmark summary and pass/fail assessment"""
        summary = {
            "overall_target_met": True,
            "total_benchmarks": 0,
            "passed_benchmarks": 0,
            "failed_benchmarks": 0,
            "performance_score": 0.0
        }

        for metrics in self.results["benchmarks"].values():
            summary["total_benchmarks"] += 1
            if metrics["target_met"]:
                summary["passed_benchmarks"] += 1
            else:
                summary["failed_benchmarks"] += 1
                summary["overall_target_met"] = False

        if summary["total_benchmarks"] > 0:
            summary["performance_score"] = summary["passed_benchmarks"] / summary["total_benchmarks"]

        self.results["summary"] = summary

    # Utility methods
    def _analyze(self, response_times: List[float]) -> Dict[str, Any]:
        """Summarize timings against the frame budget"""
        p95 = self._calculate_percentile(response_times, 95)
        return {
            "avg_response_time_ms": statistics.mean(response_times),
            "median_response_time_ms": statistics.median(response_times),
            "p95_response_time_ms": p95,
            "max_response_time_ms": max(response_times),
            "sample_size": len(response_times),
            "target_met": p95 < self.frame_budget_ms
        }

    def _sample(self, sample_type: SampleType, device: InputDevice, x: float, y: float,
                timestamp_ms: float, target: HitTarget) -> PointerSample:
        return PointerSample(
            sample_type=sample_type,
            device=device,
            x=x,
            y=y,
            timestamp_ms=timestamp_ms,
            target=target
        )

    def _create_test_events(self, count: int, people: List[str]) -> List[ScheduleEvent]:
        """Create overlapping events spread over the day"""
        events = []
        for i in range(count):
            start = 8 * 60 + (i * 35) % (15 * 60)
            end = min(start + 30 + (i % 4) * 30, 24 * 60)
            events.append(ScheduleEvent(
                name=people[i % len(people)],
                date="1.14",
                start=format_minutes(start),
                end=format_minutes(end),
                reason=f"Event {i}"
            ))
        return events

    def _calculate_percentile(self, data: List[float], percentile: int) -> float:
        """Calculate percentile value"""
        sorted_data = sorted(data)
        index = (percentile / 100) * (len(sorted_data) - 1)

        if index.is_integer():
            return sorted_data[int(index)]
        else:
            lower = sorted_data[int(index)]
            upper = sorted_data[int(index) + 1]
            return lower + (upper - lower) * (index - int(index))


async def main():
    """Main performance validation function"""
    print("🚀 Starting Performance Validation Suite")
    print("=" * 50)

    benchmark = PerformanceBenchmark()
    results = await benchmark.run_all_benchmarks()

    # Save results to file
    output_path = Path("performance_results.json")
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(results, f, indent=2, default=str)

    summary = results["summary"]
    print("\n" + "=" * 50)
    print("📊 PERFORMANCE VALIDATION RESULTS")
    print("=" * 50)
    print(f"Overall Target Met: {'✅ YES' if summary['overall_target_met'] else '❌ NO'}")
    print(f"Performance Score: {summary['performance_score']:.2%}")
    print(f"Benchmarks: {summary['passed_benchmarks']}/{summary['total_benchmarks']} passed")

    print("\n🎯 KEY METRICS (p95 vs 16ms frame):")
    for benchmark_name, metrics in results["benchmarks"].items():
        status = "✅" if metrics["target_met"] else "❌"
        print(f"{status} {benchmark_name}: {metrics['p95_response_time_ms']:.3f}ms p95")

    print(f"\n📄 Detailed results saved to: {output_path}")

    return summary["overall_target_met"]


if __name__ == "__main__":
    success = asyncio.run(main())
    if not success:
        sys.exit(1)
