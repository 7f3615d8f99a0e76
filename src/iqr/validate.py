"""
Quality validation — run every dimension's sub-checks on one file and aggregate.

    sub-check   → CheckResult (score 0..100)
    dimension   = round(mean(sub-check scores))
    overall     = round(Σ dimension × weight / Σ weight)

Rounding is half-up throughout, so 74.5 becomes 75 and passes a 75 gate.
"""

import logging
import math
from dataclasses import replace
from pathlib import Path

from .completeness import check_documentation, check_error_handling
from .config import QualityConfig
from .consistency import check_imports, check_naming, check_structure
from .context import CheckContext, DimensionCheck
from .errors import ValidationError
from .maintainability import check_maintainability
from .models import DIMENSIONS, FileQualityReport, Issue, PatternProfile
from .security import check_security

log = logging.getLogger(__name__)

SUB_CHECKS: dict[str, tuple[DimensionCheck, ...]] = {
    "consistency": (check_naming, check_imports, check_structure),
    "completeness": (check_documentation, check_error_handling),
    "security": (check_security,),
    "maintainability": (check_maintainability,),
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def weighted_overall(dimension_scores: dict[str, int], weights: dict[str, float]) -> int:
    total_weight = sum(weights.get(d, 0.0) for d in dimension_scores)
    if total_weight <= 0:
        return 0
    weighted = sum(score * weights.get(d, 0.0) for d, score in dimension_scores.items())
    return round_half_up(weighted / total_weight)


def validate_content(
    content: str,
    file: str,
    profile: PatternProfile,
    config: QualityConfig,
) -> FileQualityReport:
    """Score *content* as if it lived at *file* (relative to the project root)."""
    ctx = CheckContext(content=content, file=file, profile=profile, config=config)

    scores: dict[str, int] = {}
    issues: list[Issue] = []
    suggestions: list[str] = []
    for dimension in DIMENSIONS:
        results = [check(ctx) for check in SUB_CHECKS[dimension]]
        scores[dimension] = round_half_up(sum(r.score for r in results) / len(results))
        for r in results:
            issues.extend(i if i.file else replace(i, file=file) for i in r.issues)
            suggestions.extend(r.suggestions)

    overall = weighted_overall(scores, config.weights)
    return FileQualityReport(
        file=file,
        dimension_scores=scores,
        overall_score=overall,
        # sorted() is stable: equal severities keep check order
        issues=sorted(issues, key=lambda i: i.severity.rank),
        suggestions=list(dict.fromkeys(suggestions)),
        passed=overall >= config.threshold,
    )


def relative_name(path: Path, project_root: str) -> str:
    try:
        return path.resolve().relative_to(Path(project_root).resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def failed_report(file: str, error: ValidationError) -> FileQualityReport:
    return FileQualityReport(
        file=file,
        dimension_scores={},
        overall_score=0,
        issues=[],
        suggestions=[],
        passed=False,
        error=str(error),
    )


def validate_file(
    path: str,
    profile: PatternProfile,
    config: QualityConfig,
    project_root: str = ".",
) -> FileQualityReport:
    """Read and score one file. Never raises for an unreadable file: it fails with score 0."""
    p = Path(path)
    if not p.is_absolute():
        p = Path(project_root) / p
    file = relative_name(p, project_root)

    try:
        content = p.read_bytes().decode("utf-8")
    except OSError as e:
        err = ValidationError(file, e.strerror or str(e))
        log.warning("%s", err)
        return failed_report(file, err)
    except UnicodeDecodeError as e:
        err = ValidationError(file, f"not valid UTF-8 ({e.reason} at byte {e.start})")
        log.warning("%s", err)
        return failed_report(file, err)

    report = validate_content(content, file, profile, config)
    log.debug("%s: %d (%s)", file, report.overall_score, "pass" if report.passed else "fail")
    return report
