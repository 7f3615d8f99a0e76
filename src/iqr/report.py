"""Rendering of refinement summaries and pattern profiles for people and tools."""

import json
from dataclasses import replace

from .models import DIMENSIONS, PatternProfile, RefinementSummary, SessionState

FORMATS = ("structured", "narrative-detailed", "narrative-summary")

_NEXT_STEP = {
    SessionState.PASSED: "All files meet the quality threshold.",
    SessionState.NEEDS_REFINEMENT: "Apply the suggestions below and re-run with --iteration {next}.",
    SessionState.ESCALATED: (
        "Maximum iterations reached ({max}). Stop automated refinement and "
        "review the remaining issues manually."
    ),
}


def _headline(summary: RefinementSummary) -> str:
    state = summary.state.value.replace("_", " ").upper()
    return (
        f"{state}: {summary.passed_count}/{len(summary.files)} files passed, "
        f"average {summary.average_score} (threshold {summary.threshold})"
    )


def _next_step(summary: RefinementSummary) -> str:
    return _NEXT_STEP[summary.state].format(next=summary.iteration + 1, max=summary.max_iterations)


def render_structured(summary: RefinementSummary) -> str:
    return json.dumps(summary.to_dict(), indent=2)


def render_detailed(summary: RefinementSummary) -> str:
    out = [
        f"## Quality validation (iteration {summary.iteration}/{summary.max_iterations})",
        "",
        f"**{_headline(summary)}**",
        "",
        _next_step(summary),
    ]
    for report in summary.files:
        mark = "pass" if report.passed else "FAIL"
        out += ["", f"### {report.file}: {report.overall_score} ({mark})"]
        if report.error:
            out.append(f"Error: {report.error}")
            continue
        out += [
            "",
            "| " + " | ".join(DIMENSIONS) + " |",
            "|" + "---|" * len(DIMENSIONS),
            "| " + " | ".join(str(report.dimension_scores.get(d, "-")) for d in DIMENSIONS) + " |",
        ]
        if report.issues:
            out += ["", "Issues:"]
            for issue in report.issues:
                where = f"line {issue.line}: " if issue.line else ""
                out.append(f"- [{issue.severity.value}] {where}{issue.message}")
        if report.suggestions:
            out += ["", "Suggestions:"]
            out += [f"- {s}" for s in report.suggestions]
    return "\n".join(out)


def render_summary(summary: RefinementSummary) -> str:
    out = [_headline(summary)]
    failing = [r for r in summary.files if not r.passed]
    for report in failing:
        if report.error:
            out.append(f"  {report.file}: error ({report.error})")
            continue
        worst = report.issues[0].message if report.issues else "below threshold"
        out.append(f"  {report.file}: {report.overall_score} ({len(report.issues)} issues; {worst})")
    out.append(_next_step(summary))
    return "\n".join(out)


_RENDERERS = {
    "structured": render_structured,
    "narrative-detailed": render_detailed,
    "narrative-summary": render_summary,
}


def without_suggestions(summary: RefinementSummary) -> RefinementSummary:
    """Copy of *summary* with every file's suggestions dropped (check-only output)."""
    return replace(summary, files=[replace(r, suggestions=[]) for r in summary.files])


def render(summary: RefinementSummary, fmt: str = "narrative-summary", check_only: bool = False) -> str:
    if fmt not in _RENDERERS:
        raise ValueError(f"unknown output format {fmt!r}; choose from {', '.join(FORMATS)}")
    if check_only:
        summary = without_suggestions(summary)
    return _RENDERERS[fmt](summary)


def profile_summary(profile: PatternProfile) -> str:
    """Short human-readable digest of a pattern profile."""
    stack = profile.tech_stack
    out = [
        f"Project:   {profile.project_root}",
        f"Analyzed:  {profile.analyzed_at or '(never)'}",
        f"Files:     {profile.file_count}  ({profile.analysis_time_ms} ms)",
        f"Languages: {', '.join(stack.languages) or '-'}",
    ]
    if stack.frameworks:
        out.append(f"Frameworks: {', '.join(stack.frameworks)}")
    if stack.testing:
        out.append(f"Testing:   {', '.join(stack.testing)}")

    out += ["", "Dominant patterns:"]
    categories = [
        "naming.files", "naming.functions", "naming.variables", "naming.classes", "naming.constants",
        "imports.style", "error_handling.style", "error_handling.logging", "comments.style",
        "testing.naming", "testing.location",
    ]
    for category in categories:
        dom = profile.dominant(category)
        if dom is None:
            continue
        out.append(f"  {category:<24} {dom.pattern:<16} {dom.confidence:.0%} of {dom.total_samples}")

    rate = profile.comments.documentation_rate
    if rate is not None:
        out.append(f"  {'documentation rate':<24} {rate:.0%}")
    if profile.imports.grouping_detected:
        out.append("  imports are grouped with blank lines")
    if profile.structure.common_structures:
        out.append(f"  layouts: {', '.join(profile.structure.common_structures)}")
    return "\n".join(out)
