"""
Identifier case classification and best-effort declaration extraction.

The extraction patterns are deliberately broad regexes shared across
languages (JS/TS, Python, Go, Rust, PHP, Ruby). They are not AST-accurate:
a declaration inside a string literal is still counted, and unusual
declaration forms are missed.
"""

import re
from collections.abc import Iterator


# Classification rules are mutually exclusive and tested in this order.
_CASE_RULES: list[tuple[str, re.Pattern]] = [
    ("UPPER_CASE", re.compile(r"^[A-Z][A-Z0-9]+(?:_[A-Z0-9]+)*$|^[A-Z](?:_[A-Z0-9]+)+$")),
    ("PascalCase", re.compile(r"^[A-Z][a-zA-Z0-9]*$")),
    ("camelCase", re.compile(r"^[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)+$")),
    ("snake_case", re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)*$")),
    ("kebab-case", re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)+$")),
]

# A lone lowercase word carries no word boundary, so it cannot contradict
# any lowercase-first convention.
_LONE_WORD = re.compile(r"^[a-z][a-z0-9]*$")
_LOWER_FIRST_CASES = frozenset({"camelCase", "snake_case", "kebab-case"})

CODE_EXTENSIONS = frozenset({
    ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs",
    ".py", ".php", ".rb", ".go", ".rs",
})

FUNCTION_PATTERNS = [
    re.compile(r"\bfunction\s*\*?\s*([a-zA-Z_$][\w$]*)\s*\("),                           # function name()
    re.compile(r"\b(?:const|let|var)\s+([a-zA-Z_$][\w$]*)\s*=\s*(?:async\s*)?\("),       # const name = (...) =>
    re.compile(r"\b(?:const|let|var)\s+([a-zA-Z_$][\w$]*)\s*=\s*(?:async\s*)?function\b"),
    re.compile(r"\bdef\s+([a-zA-Z_]\w*)\s*[(:]"),                                         # Python / Ruby def
    re.compile(r"\bfunc\s+(?:\([^)]*\)\s*)?([a-zA-Z_]\w*)\s*\("),                         # Go func (recv) name()
    re.compile(r"\bfn\s+([a-zA-Z_]\w*)\s*[<(]"),                                          # Rust fn
]

CLASS_PATTERNS = [
    re.compile(r"\bclass\s+([A-Za-z_]\w*)"),
    re.compile(r"\binterface\s+([A-Za-z_]\w*)"),
    re.compile(r"\btype\s+([A-Za-z_]\w*)\s*(?:<[^>]*>\s*)?="),
    re.compile(r"\bstruct\s+([A-Za-z_]\w*)"),
]

CONSTANT_PATTERNS = [
    re.compile(r"\b(?:const|final|static)\s+([A-Z][A-Z0-9_]*)\s*="),
    re.compile(r"^[ \t]*([A-Z][A-Z0-9_]{2,})\s*(?::\s*[^=\n]+)?=(?!=)", re.M),
]

VARIABLE_PATTERNS = [
    # JS/TS bindings that are not function expressions
    re.compile(r"\b(?:let|var|const)\s+([a-zA-Z_$][\w$]*)\s*=(?!=)(?!\s*(?:async\s*)?(?:function\b|\())"),
    # Python/Ruby/Go assignments at statement start
    re.compile(r"^[ \t]*([a-z_][A-Za-z0-9_]*)\s*(?::=|=(?!=))", re.M),
]


def detect_case(name: str) -> str:
    """Classify an identifier into exactly one naming convention."""
    for case_name, regex in _CASE_RULES:
        if regex.match(name):
            return case_name
    return "other"


def conforms(name: str, expected: str) -> bool:
    """True when *name* does not contradict the *expected* convention."""
    actual = detect_case(name)
    if actual == expected or actual == "other":
        return True
    return expected in _LOWER_FIRST_CASES and bool(_LONE_WORD.match(name))


def is_candidate(name: str) -> bool:
    """Names worth classifying: not private/dunder, at least three characters."""
    return not name.startswith("_") and len(name) > 2


def _split_words(name: str) -> list[str]:
    if "_" in name:
        words = name.lower().split("_")
    elif "-" in name:
        words = name.lower().split("-")
    else:
        words = [w.lower() for w in re.findall(r"[A-Z]+(?=[A-Z][a-z0-9]|$)|[A-Z]?[a-z0-9]+|[A-Z]+", name)]
    return [w for w in words if w]


def convert_case(name: str, target: str) -> str:
    """Render *name* in the *target* convention (best effort)."""
    words = _split_words(name)
    if not words:
        return name
    if target == "camelCase":
        return words[0] + "".join(w.capitalize() for w in words[1:])
    if target == "PascalCase":
        return "".join(w.capitalize() for w in words)
    if target == "snake_case":
        return "_".join(words)
    if target == "kebab-case":
        return "-".join(words)
    if target == "UPPER_CASE":
        return "_".join(words).upper()
    return name


def line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def _find(patterns: list[re.Pattern], content: str) -> Iterator[tuple[str, int]]:
    for pattern in patterns:
        for m in pattern.finditer(content):
            yield m.group(1), line_of(content, m.start(1))


def find_functions(content: str) -> Iterator[tuple[str, int]]:
    """Yield (name, line) for function-like declarations."""
    return _find(FUNCTION_PATTERNS, content)


def find_classes(content: str) -> Iterator[tuple[str, int]]:
    return _find(CLASS_PATTERNS, content)


def find_constants(content: str) -> Iterator[tuple[str, int]]:
    seen: set[tuple[str, int]] = set()
    for hit in _find(CONSTANT_PATTERNS, content):
        # both patterns can hit "const MAX_SIZE ="
        if hit not in seen:
            seen.add(hit)
            yield hit


def find_variables(content: str) -> Iterator[tuple[str, int]]:
    keywords = {"return", "yield", "await", "else", "elif", "self", "not", "and", "or", "in", "is"}
    for name, line in _find(VARIABLE_PATTERNS, content):
        if name not in keywords:
            yield name, line
