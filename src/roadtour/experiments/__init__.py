"""Grading harness and benchmark analysis."""

from .grading import (
    GradingConfig,
    GradingCase,
    GradingResult,
    GradingRunner,
    judge,
    score,
    format_report,
    main as grading_main,
)
from .analysis import (
    BenchmarkSummary,
    random_instances,
    compare_greedy_two_opt,
    summarize,
    load_results,
)

__all__ = [
    # Grading
    "GradingConfig",
    "GradingCase",
    "GradingResult",
    "GradingRunner",
    "judge",
    "score",
    "format_report",
    "grading_main",
    # Analysis
    "BenchmarkSummary",
    "random_instances",
    "compare_greedy_two_opt",
    "summarize",
    "load_results",
]
