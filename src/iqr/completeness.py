"""
Completeness checks: documentation density and error-handling hygiene.

Async function bodies are located textually: brace matching (bounded to
2000 characters) for JS/TS, indentation for Python. Braces inside strings
and comments are counted like any other.
"""

import re
from fractions import Fraction

from .context import CheckContext
from .lexical import PY_MODULE_EXTENSIONS, adhoc_output_calls, function_docs, is_code_file
from .models import CheckResult, Issue, Severity
from .naming import is_candidate, line_of

DOC_GAP_PENALTY = 15
EMPTY_HANDLER_PENALTY = 15
ADHOC_OUTPUT_PENALTY = 5
UNGUARDED_AWAIT_PENALTY = 10

DOC_RATE_TOLERANCE = Fraction(3, 10)
ASYNC_BODY_LIMIT = 2000

_TODO = re.compile(r"(?://|#|/\*|\*)\s*(TODO|FIXME|HACK|XXX)\b:?\s*([^\n]*)")
_EMPTY_CATCH = re.compile(r"catch\s*(?:\([^)]*\))?\s*\{\s*\}")
_EXCEPT_HEADER = re.compile(r"^([ \t]*)except\b[^\n]*:[ \t]*(?:#[^\n]*)?$")
_EXCEPT_INLINE = re.compile(r"^[ \t]*except\b[^\n]*:[ \t]*(?:pass|\.\.\.)[ \t]*(?:#[^\n]*)?$")
_NOOP = re.compile(r"^(?:pass|\.\.\.)[ \t]*(?:#[^\n]*)?$")

_JS_ASYNC = [
    re.compile(r"\basync\s+function\b\s*\*?\s*(\w*)\s*\([^)]*\)[^{]*\{"),
    re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*async\b[^=]*=>\s*\{"),
    re.compile(r"\basync\s+(\w+)\s*\([^)]*\)[^{;]*\{"),          # class / object methods
]
_PY_ASYNC = re.compile(r"^([ \t]*)async\s+def\s+(\w+)", re.M)
_JS_GUARD = re.compile(r"\btry\s*\{|\.catch\s*\(")
_PY_GUARD = re.compile(r"^[ \t]*try[ \t]*:", re.M)


def check_documentation(ctx: CheckContext) -> CheckResult:
    result = CheckResult()
    if not is_code_file(ctx.extension):
        return result

    docs = [d for d in function_docs(ctx.content) if is_candidate(d[0])]
    comments = ctx.profile.comments
    project_rate = comments.documentation_rate
    if len(docs) > 2 and project_rate is not None:
        documented = sum(1 for d in docs if d[2])
        file_rate = documented / len(docs)
        # exact arithmetic: a gap equal to the tolerance is not a deduction
        gap = (
            Fraction(comments.documented, comments.documented + comments.undocumented)
            - Fraction(documented, len(docs))
        )
        if gap > DOC_RATE_TOLERANCE:
            result.deduct(
                DOC_GAP_PENALTY,
                Issue(
                    type="comments",
                    severity=Severity.MEDIUM,
                    message=(
                        f"{file_rate:.0%} of functions documented; "
                        f"project average is {project_rate:.0%}"
                    ),
                    current_value=f"{file_rate:.2f}",
                    suggested_value=f"{project_rate:.2f}",
                ),
                "Add doc comments to the undocumented functions",
            )

    for m in _TODO.finditer(ctx.content):
        text = m.group(2).strip()
        result.issues.append(Issue(
            type="comments",
            severity=Severity.INFO,
            message=f"{m.group(1)}: {text}" if text else m.group(1),
            line=line_of(ctx.content, m.start()),
        ))
    return result


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _empty_python_handlers(lines: list[str]) -> list[int]:
    """1-based lines of `except` clauses whose whole body is pass / ..."""
    found = []
    for i, line in enumerate(lines):
        if _EXCEPT_INLINE.match(line):
            found.append(i + 1)
            continue
        m = _EXCEPT_HEADER.match(line)
        if not m:
            continue
        own = _indent(line)
        body = [j for j in range(i + 1, len(lines)) if lines[j].strip()]
        if not body or _indent(lines[body[0]]) <= own or not _NOOP.match(lines[body[0]].strip()):
            continue
        if len(body) == 1 or _indent(lines[body[1]]) <= own:
            found.append(i + 1)
    return found


def _empty_handlers(ctx: CheckContext) -> list[int]:
    if ctx.extension in PY_MODULE_EXTENSIONS:
        return _empty_python_handlers(ctx.lines)
    return [line_of(ctx.content, m.start()) for m in _EMPTY_CATCH.finditer(ctx.content)]


def _brace_body(content: str, open_at: int) -> str:
    depth = 0
    end = min(len(content), open_at + ASYNC_BODY_LIMIT)
    for i in range(open_at, end):
        ch = content[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return content[open_at:i + 1]
    return content[open_at:end]


def _unguarded_async(ctx: CheckContext) -> list[tuple[str, int]]:
    """(name, line) of async functions that await with no try/except/.catch in their body."""
    content = ctx.content
    found = []
    if ctx.extension in PY_MODULE_EXTENSIONS:
        lines = ctx.lines
        for m in _PY_ASYNC.finditer(content):
            start = line_of(content, m.start(2)) - 1
            own = len(m.group(1).expandtabs())
            body = []
            for line in lines[start + 1:]:
                if line.strip() and len(line.expandtabs()) - len(line.expandtabs().lstrip()) <= own:
                    break
                body.append(line)
            text = "\n".join(body)
            if "await" in text and not _PY_GUARD.search(text):
                found.append((m.group(2), start + 1))
        return found

    bodies_seen: set[int] = set()
    for pattern in _JS_ASYNC:
        for m in pattern.finditer(content):
            open_at = m.end() - 1
            if open_at in bodies_seen:
                continue
            bodies_seen.add(open_at)
            body = _brace_body(content, open_at)
            if "await" in body and not _JS_GUARD.search(body):
                found.append((m.group(1) or "<anonymous>", line_of(content, m.start())))
    found.sort(key=lambda f: f[1])
    return found


def check_error_handling(ctx: CheckContext) -> CheckResult:
    result = CheckResult()
    if not is_code_file(ctx.extension):
        return result

    for line in _empty_handlers(ctx):
        result.deduct(
            EMPTY_HANDLER_PENALTY,
            Issue(
                type="error_handling",
                severity=Severity.HIGH,
                message="Empty exception handler silently swallows errors",
                line=line,
            ),
            "Log or re-raise errors instead of ignoring them",
        )

    if ctx.profile.error_handling.prefers_structured_logging:
        for m in adhoc_output_calls(ctx.content, ctx.extension):
            call = m.group(0).rstrip("( ")
            result.deduct(
                ADHOC_OUTPUT_PENALTY,
                Issue(
                    type="error_handling",
                    severity=Severity.LOW,
                    message=f"{call}() used where the project logs through a logger",
                    line=line_of(ctx.content, m.start()),
                    current_value=call,
                    suggested_value="logger",
                ),
                "Replace console/print output with the project's logger",
            )

    for name, line in _unguarded_async(ctx):
        result.deduct(
            UNGUARDED_AWAIT_PENALTY,
            Issue(
                type="error_handling",
                severity=Severity.MEDIUM,
                message=f"Async function '{name}' awaits without handling errors",
                line=line,
            ),
            "Wrap awaited calls in try/catch (or attach .catch()) in async functions",
        )
    return result
