"""Maintainability check: file length, brace nesting depth, long lines."""

from .context import CheckContext
from .models import CheckResult, Issue, Severity

LONG_FILE_LINES = 500
LARGE_FILE_LINES = 300
DEEP_NESTING = 5
MODERATE_NESTING = 4
MAX_LINE_LENGTH = 120
LONG_LINE_PENALTY = 2
LONG_LINE_CAP = 10
LONG_LINES_REPORTED = 3


def peak_brace_depth(lines: list[str]) -> int:
    """Running `{`/`}` balance, evaluated at the end of each line."""
    depth = peak = 0
    for line in lines:
        depth = max(0, depth + line.count("{") - line.count("}"))
        peak = max(peak, depth)
    return peak


def check_maintainability(ctx: CheckContext) -> CheckResult:
    result = CheckResult()
    lines = ctx.lines
    n = len(lines)

    if n > LONG_FILE_LINES:
        result.deduct(
            15,
            Issue(type="maintainability", severity=Severity.MEDIUM,
                  message=f"File has {n} lines (over {LONG_FILE_LINES})"),
            "Split this file into smaller, focused modules",
        )
    elif n > LARGE_FILE_LINES:
        result.deduct(
            5,
            Issue(type="maintainability", severity=Severity.LOW,
                  message=f"File has {n} lines (over {LARGE_FILE_LINES})"),
            "Consider splitting this file",
        )

    depth = peak_brace_depth(lines)
    if depth > DEEP_NESTING:
        result.deduct(
            15,
            Issue(type="maintainability", severity=Severity.HIGH,
                  message=f"Nesting depth reaches {depth}"),
            "Reduce nesting with early returns or extracted functions",
        )
    elif depth > MODERATE_NESTING:
        result.deduct(
            5,
            Issue(type="maintainability", severity=Severity.MEDIUM,
                  message=f"Nesting depth reaches {depth}"),
            "Reduce nesting with early returns or extracted functions",
        )

    long_lines = [i for i, line in enumerate(lines, 1) if len(line) > MAX_LINE_LENGTH]
    if long_lines:
        result.deduct(min(LONG_LINE_CAP, LONG_LINE_PENALTY * len(long_lines)))
        for lineno in long_lines[:LONG_LINES_REPORTED]:
            result.issues.append(Issue(
                type="maintainability",
                severity=Severity.LOW,
                message=f"Line exceeds {MAX_LINE_LENGTH} characters ({len(lines[lineno - 1])})",
                line=lineno,
            ))
        if len(long_lines) > LONG_LINES_REPORTED:
            result.suggestions.append(f"Break up {len(long_lines)} lines longer than {MAX_LINE_LENGTH} characters")
    return result
