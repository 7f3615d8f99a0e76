"""Security check: a fixed, profile-independent catalog of risky text patterns."""

import re
from dataclasses import dataclass

from .context import CheckContext
from .lexical import PY_MODULE_EXTENSIONS
from .models import CheckResult, Issue, Severity
from .naming import line_of

DEDUCTIONS = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 10,
    Severity.LOW: 5,
    Severity.INFO: 0,
}

_SQL = r"(?:SELECT\b[^\n]*?\bFROM|INSERT\s+INTO|UPDATE\b[^\n]*?\bSET|DELETE\s+FROM)\b"


@dataclass(frozen=True)
class SecurityRule:
    name: str
    pattern: re.Pattern
    severity: Severity
    message: str
    suggestion: str
    extensions: frozenset[str] | None = None    # None: every file

    def applies_to(self, extension: str) -> bool:
        return self.extensions is None or extension in self.extensions


RULES = (
    SecurityRule(
        "eval",
        re.compile(r"(?<![\w.])eval\s*\("),
        Severity.CRITICAL,
        "eval() executes arbitrary code",
        "Avoid eval(); parse data explicitly (e.g. JSON.parse / ast.literal_eval)",
    ),
    SecurityRule(
        "new-function",
        re.compile(r"\bnew\s+Function\s*\("),
        Severity.HIGH,
        "new Function() compiles code from strings",
        "Replace new Function() with a regular function",
    ),
    SecurityRule(
        "exec",
        re.compile(r"(?<![\w.])exec\s*\("),
        Severity.HIGH,
        "exec() executes arbitrary code",
        "Avoid exec(); dispatch explicitly instead",
        PY_MODULE_EXTENSIONS,
    ),
    SecurityRule(
        "inner-html",
        re.compile(r"\.innerHTML\s*=(?!=)\s*[^'\"\s]"),
        Severity.HIGH,
        "innerHTML assigned from a non-literal value (XSS risk)",
        "Use textContent or sanitize HTML before assigning innerHTML",
    ),
    SecurityRule(
        "dangerously-set-inner-html",
        re.compile(r"\bdangerouslySetInnerHTML\b"),
        Severity.MEDIUM,
        "dangerouslySetInnerHTML renders raw HTML",
        "Sanitize HTML (e.g. DOMPurify) before using dangerouslySetInnerHTML",
    ),
    SecurityRule(
        "document-write",
        re.compile(r"\bdocument\.write(?:ln)?\s*\("),
        Severity.MEDIUM,
        "document.write() injects markup into the page",
        "Build DOM nodes instead of calling document.write()",
    ),
    SecurityRule(
        "hardcoded-secret",
        re.compile(
            r"(?:password|passwd|secret|api_key|apikey|access_token|token)\s*[:=]\s*['\"][^'\"]+['\"]",
            re.I,
        ),
        Severity.CRITICAL,
        "Hardcoded credential",
        "Load secrets from environment variables or a secret store",
    ),
    SecurityRule(
        "private-key",
        re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |ENCRYPTED )?PRIVATE KEY-----"),
        Severity.CRITICAL,
        "Private key embedded in source",
        "Remove the key from source control and rotate it",
    ),
    SecurityRule(
        "sql-template",
        re.compile(r"`[^`]*?" + _SQL + r"[^`]*?\$\{", re.I),
        Severity.HIGH,
        "SQL built with template-literal interpolation",
        "Use parameterized queries instead of string interpolation",
    ),
    SecurityRule(
        "sql-fstring",
        re.compile(r"\b[fF][rR]?(?:\"[^\"\n]*?|'[^'\n]*?)" + _SQL + r"[^\n]*?\{", re.I),
        Severity.HIGH,
        "SQL built with f-string interpolation",
        "Use parameterized queries instead of string interpolation",
        PY_MODULE_EXTENSIONS,
    ),
    SecurityRule(
        "sql-concat",
        re.compile(r"\b(?:execute|query|raw)\s*\(\s*['\"`][^'\"`\n]*?" + _SQL + r"[^'\"`\n]*['\"`]\s*[+%]", re.I),
        Severity.HIGH,
        "SQL built by string concatenation",
        "Use parameterized queries instead of string concatenation",
    ),
)


def check_security(ctx: CheckContext) -> CheckResult:
    result = CheckResult()
    for rule in RULES:
        if not rule.applies_to(ctx.extension):
            continue
        for m in rule.pattern.finditer(ctx.content):
            result.deduct(
                DEDUCTIONS[rule.severity],
                Issue(
                    type="security",
                    severity=rule.severity,
                    message=rule.message,
                    line=line_of(ctx.content, m.start()),
                    current_value=rule.name,
                ),
                rule.suggestion,
            )
    return result
