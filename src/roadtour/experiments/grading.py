"""Grading harness for tour construction.

This module provides the runner that:
- Builds tours for a list of grading cases
- Times each run
- Compares the meta path against the expected answer
- Saves results for analysis

Every case yields an immutable GradingResult; reports are assembled
from those records after the run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Sequence
from pathlib import Path
import json
import time
import logging
import argparse
import threading
from datetime import datetime

from ..models.errors import TourCancelled, TourError
from ..models.graph import GraphConfig, MapGraph
from ..models.parsers import parse_answer, parse_road_map
from ..models.problem import Location, TourInstance
from ..solver import SolverConfig, solve

logger = logging.getLogger(__name__)


@dataclass
class GradingConfig:
    """Configuration for a grading run.

    Attributes:
        time_limit: Seconds after which a run is cancelled at its next
                    phase boundary (None = no limit)
        output_dir: Directory for JSON results (None = don't save)
    """
    time_limit: Optional[float] = 10.0
    output_dir: Optional[str] = None


@dataclass(frozen=True)
class GradingCase:
    """One tour request with its expected meta path.

    expected is None when the case expects no feasible tour.
    """
    name: str
    instance: TourInstance
    graph: MapGraph = field(repr=False, compare=False)
    use_two_opt: bool = False
    expected: Optional[tuple[Location, ...]] = None
    description: str = ""


@dataclass(frozen=True)
class GradingResult:
    """Outcome of one grading case."""
    case_name: str
    passed: bool
    message: str
    runtime: float
    meta_path: Optional[tuple[Location, ...]] = None
    cost: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'case_name': self.case_name,
            'passed': self.passed,
            'message': self.message,
            'runtime': self.runtime,
            'meta_path': (
                [[loc.x, loc.y] for loc in self.meta_path]
                if self.meta_path is not None else None
            ),
            'cost': self.cost,
        }


def judge(
    meta_path: Optional[Sequence[Location]],
    expected: Optional[Sequence[Location]],
) -> tuple[bool, str]:
    """Compare a meta path with the expected one.

    Returns:
        Tuple of (passed, feedback message)
    """
    if meta_path is None:
        if expected is None:
            return True, "PASSED."
        return False, f"FAILED. No tour returned; expected {_format_path(expected)}."

    if expected is None:
        return False, f"FAILED. Expected no feasible tour, got {_format_path(meta_path)}."

    meta_path, expected = list(meta_path), list(expected)
    if len(meta_path) != len(expected):
        return False, (
            f"FAILED. Expected {_format_path(expected)}, got {_format_path(meta_path)}. "
            f"Your result has size {len(meta_path)}; expected {len(expected)}."
        )
    if meta_path == expected:
        return True, "PASSED."
    if set(meta_path) <= set(expected):
        return False, f"FAILED. Expected {_format_path(expected)}, got {_format_path(meta_path)}. Path is out of order."
    return False, (
        f"FAILED. Expected {_format_path(expected)}, got {_format_path(meta_path)}. "
        f"Correct size, but incorrect path."
    )


def _format_path(path: Sequence[Location]) -> str:
    return " -> ".join(str(loc) for loc in path)


class GradingRunner:
    """Runs grading cases and collects results."""

    def __init__(self, config: Optional[GradingConfig] = None):
        self.config = config or GradingConfig()

    def run_case(self, case: GradingCase) -> GradingResult:
        """Run a single case.

        A TourError from the solver becomes a result with no meta path,
        which passes only when the case expects no feasible tour. A
        cancelled run, or one that finishes after the time limit, always
        fails.
        """
        logger.info(f"Running case: {case.name}")
        cancel = threading.Event()
        timer = None
        if self.config.time_limit is not None:
            timer = threading.Timer(self.config.time_limit, cancel.set)
            timer.daemon = True
            timer.start()

        meta_path = None
        cost = None
        error = None
        timed_out = False
        start_time = time.perf_counter()
        try:
            tour, _ = solve(
                case.instance,
                case.graph,
                SolverConfig(use_two_opt=case.use_two_opt),
                cancel=cancel,
            )
            meta_path = tuple(tour.meta_path())
            cost = tour.total_cost
        except TourCancelled as e:
            error = e
            timed_out = True
        except TourError as e:
            error = e
        finally:
            if timer is not None:
                timer.cancel()
        runtime = time.perf_counter() - start_time
        limit = self.config.time_limit
        if limit is not None and runtime > limit:
            timed_out = True

        if timed_out:
            passed = False
            message = f"FAILED. Timed out after {runtime:.3f}s."
        else:
            passed, message = judge(meta_path, case.expected)
        if error is not None:
            message = f"{message} ({type(error).__name__}: {error})"
        logger.info(f"Case {case.name} took {runtime:.4f} seconds: {message}")

        return GradingResult(
            case_name=case.name,
            passed=passed,
            message=message,
            runtime=runtime,
            meta_path=meta_path,
            cost=cost,
        )

    def run_suite(self, cases: Sequence[GradingCase]) -> tuple[GradingResult, ...]:
        """Run every case in order."""
        results = tuple(self.run_case(case) for case in cases)
        if self.config.output_dir:
            self._save_results(results)
        return results

    def _save_results(self, results: Sequence[GradingResult]) -> Path:
        """Save results to a timestamped JSON file."""
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        json_path = output_dir / f"grading_{timestamp}_results.json"
        with open(json_path, 'w') as f:
            json.dump(
                {'score': score(results), 'results': [r.to_dict() for r in results]},
                f,
                indent=2,
            )

        logger.info(f"Results saved to {json_path}")
        return json_path


def score(results: Sequence[GradingResult]) -> float:
    """Fraction of passed cases."""
    if not results:
        return 0.0
    return sum(1 for r in results if r.passed) / len(results)


def format_report(results: Sequence[GradingResult]) -> str:
    """Human-readable report for a suite run."""
    header = (
        "All tests passed. Great job!"
        if results and all(r.passed for r in results)
        else "Some tests failed."
    )
    lines = [f"Score: {score(results):.3f}", header]
    for num, r in enumerate(results, start=1):
        lines.append(f"** Test #{num}: {r.case_name} ({r.runtime:.4f}s)... {r.message}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Build a closed tour on a road map and grade it")
    parser.add_argument("--map", type=str, required=True, help="Path to road-map file")
    parser.add_argument("--start", type=float, nargs=2, required=True, metavar=("X", "Y"), help="Start location")
    parser.add_argument("--stop", type=float, nargs=2, action="append", default=[], metavar=("X", "Y"),
                        help="Stop location (repeatable)")
    parser.add_argument("--forbid", type=float, nargs=2, action="append", default=[], metavar=("X", "Y"),
                        help="Forbidden location (repeatable)")
    parser.add_argument("--two-opt", action="store_true", help="Refine the greedy tour with 2-opt")
    parser.add_argument("--answer", type=str, default=None, help="Answer file with the expected meta path")
    parser.add_argument("--metric", choices=["euclidean", "haversine"], default="euclidean",
                        help="How segment lengths are measured")
    parser.add_argument("--weight-by", choices=["distance", "time"], default="distance",
                        help="Edge cost: length, or length divided by road speed")
    parser.add_argument("--time-limit", type=float, default=10.0, help="Time limit (seconds)")
    parser.add_argument("--output", type=str, default=None, help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    graph = parse_road_map(args.map, GraphConfig(metric=args.metric, weight_by=args.weight_by))
    logger.info(graph.summary())

    instance = TourInstance.create(args.start, args.stop, args.forbid, name=Path(args.map).stem)
    expected = None
    if args.answer:
        answer = parse_answer(args.answer)
        expected = tuple(answer) if answer is not None else None

    case = GradingCase(
        name=instance.name,
        instance=instance,
        graph=graph,
        use_two_opt=args.two_opt,
        expected=expected,
    )
    runner = GradingRunner(GradingConfig(time_limit=args.time_limit, output_dir=args.output))
    results = runner.run_suite([case])

    result = results[0]
    if result.meta_path is not None:
        print(f"\nTour cost: {result.cost:.4f}")
        print("Meta path:")
        for loc in result.meta_path:
            print(f"  {loc}")
    if args.answer:
        print(f"\n{format_report(results)}")
        return 0 if result.passed else 1
    return 0 if result.meta_path is not None else 1


if __name__ == "__main__":
    raise SystemExit(main())
