"""
Refinement orchestration — one validation pass over a file set.

The orchestrator never loops on its own: the caller applies fixes and calls
again with iteration + 1. The summary tells it whether that is worth doing
(NEEDS_REFINEMENT) or whether a human should take over (ESCALATED).
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from .config import QualityConfig
from .errors import ConfigurationError, OperationCancelled
from .models import FileQualityReport, PatternProfile, RefinementSummary
from .validate import round_half_up, validate_file

log = logging.getLogger(__name__)

Validator = Callable[[str, PatternProfile, QualityConfig, str], FileQualityReport]


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("validation cancelled")


def summarize(
    reports: list[FileQualityReport],
    threshold: int,
    iteration: int,
    max_iterations: int,
) -> RefinementSummary:
    passed = sum(1 for r in reports if r.passed)
    failed = len(reports) - passed
    average = round_half_up(sum(r.overall_score for r in reports) / len(reports)) if reports else 0
    all_passed = failed == 0
    return RefinementSummary(
        iteration=iteration,
        max_iterations=max_iterations,
        threshold=threshold,
        files=reports,
        average_score=average,
        passed_count=passed,
        failed_count=failed,
        all_passed=all_passed,
        needs_refinement=not all_passed and iteration < max_iterations,
    )


def run_refinement(
    files: list[str],
    profile: PatternProfile,
    config: QualityConfig,
    iteration: int = 1,
    max_iterations: int = 3,
    project_root: str = ".",
    workers: int = 1,
    cancel: threading.Event | None = None,
    validate: Validator = validate_file,
) -> RefinementSummary:
    """
    Validate every file once and summarize.

    Reports keep the order of *files* even when validation runs on a
    thread pool (workers > 1). Unreadable files are included as failures.
    """
    if iteration < 1:
        raise ConfigurationError(f"iteration must be at least 1, got {iteration}")
    if max_iterations < 1:
        raise ConfigurationError(f"max_iterations must be at least 1, got {max_iterations}")

    log.info("Refinement iteration %d/%d over %d files", iteration, max_iterations, len(files))

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = []
            for f in files:
                _check_cancel(cancel)
                futures.append(pool.submit(validate, f, profile, config, project_root))
            reports = []
            for fut in futures:
                if cancel is not None and cancel.is_set():
                    for pending in futures:
                        pending.cancel()
                    raise OperationCancelled("validation cancelled")
                reports.append(fut.result())
    else:
        reports = []
        for f in files:
            _check_cancel(cancel)
            reports.append(validate(f, profile, config, project_root))

    summary = summarize(reports, config.threshold, iteration, max_iterations)
    log.info(
        "Iteration %d: %d passed, %d failed, average %d → %s",
        iteration, summary.passed_count, summary.failed_count,
        summary.average_score, summary.state.value,
    )
    return summary
