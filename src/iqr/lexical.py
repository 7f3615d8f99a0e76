"""
Line-scanning heuristics shared by the profiler and the validator.

Everything here works on raw text. Braces, quotes and keywords inside
string literals or comments are not distinguished from code, so results
are approximate by construction.
"""

import re
from pathlib import PurePosixPath

from .naming import CODE_EXTENSIONS, find_functions

JS_MODULE_EXTENSIONS = frozenset({".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"})
PY_MODULE_EXTENSIONS = frozenset({".py"})
MODULE_EXTENSIONS = JS_MODULE_EXTENSIONS | PY_MODULE_EXTENSIONS

# extensions whose file names take part in naming.files
NAMED_EXTENSIONS = CODE_EXTENSIONS | frozenset({".vue", ".svelte", ".java", ".kt", ".swift", ".cs"})

_JS_IMPORT = re.compile(r"""^import\s+(?:[^'"]*?\s+from\s+)?['"]([^'"]+)['"]""")
_JS_REQUIRE = re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)""")
_PY_FROM_IMPORT = re.compile(r"^from\s+(\.*[\w.]*)\s+import\b")
_PY_IMPORT = re.compile(r"^import\s+([\w.]+)")

TRY_BLOCK = re.compile(r"\btry\s*\{|^[ \t]*try[ \t]*:", re.M)
PROMISE_CATCH = re.compile(r"\.catch\s*\(")
LOGGER_CALL = re.compile(
    r"\b(?:logger|log|logging)\.(?:debug|info|warn|warning|error|exception|critical|fatal|trace)\s*\("
)
_CONSOLE_CALL = re.compile(r"\bconsole\.(log|error|warn|info|debug)\s*\(")
_PRINT_CALL = re.compile(r"(?<![\w.])(print)\s*\(")
ERROR_TYPE = re.compile(
    r"(?:\bthrow\s+new\s+|\braise\s+|\bcatch\s*\(\s*|\bexcept\s+\(?)([A-Z]\w*(?:Error|Exception))\b"
)

_DOC_OPENERS = ('"""', "'''", 'r"""', "r'''")
_COMMENT_PREFIXES = ("//", "#", "*", "/*", "///")


def file_stem(name: str) -> str:
    """Base name used for file naming: text before the first dot ("user.test.ts" → "user")."""
    return name.split(".", 1)[0] if not name.startswith(".") else name


def find_imports(content: str, extension: str) -> list[tuple[int, str]]:
    """Return (line_index, import_path) for top-level import statements."""
    imports: list[tuple[int, str]] = []
    if extension in JS_MODULE_EXTENSIONS:
        for i, line in enumerate(content.splitlines()):
            m = _JS_IMPORT.match(line) or _JS_REQUIRE.search(line)
            if m:
                imports.append((i, m.group(1)))
    elif extension in PY_MODULE_EXTENSIONS:
        for i, line in enumerate(content.splitlines()):
            m = _PY_FROM_IMPORT.match(line) or _PY_IMPORT.match(line)
            if m:
                imports.append((i, m.group(1)))
    return imports


def classify_import(path: str, alias_prefixes: tuple[str, ...]) -> str:
    if path.startswith("./") or path.startswith("../"):
        return "relative"
    # Python relative module paths: ".models", "..", ".".
    if path.startswith(".") and not path.startswith("./"):
        return "relative"
    if any(path.startswith(prefix) for prefix in alias_prefixes):
        return "alias"
    return "absolute"


def imports_grouped(imports: list[tuple[int, str]], lines: list[str]) -> bool:
    """True when some import statement is preceded by a blank line that follows another import."""
    for (prev, _), (cur, _) in zip(imports, imports[1:]):
        if cur - prev > 1 and not lines[cur - 1].strip():
            return True
    return False


def adhoc_output_calls(content: str, extension: str) -> list[re.Match]:
    """console.* calls in any code file, print() calls in Python files."""
    matches = list(_CONSOLE_CALL.finditer(content))
    if extension in PY_MODULE_EXTENSIONS:
        matches.extend(_PRINT_CALL.finditer(content))
    return sorted(matches, key=lambda m: m.start())


def _comment_above(lines: list[str], idx: int) -> bool:
    """True when the nearest non-blank line above, skipping decorators, is a comment."""
    j = idx - 1
    while j >= 0 and (not lines[j].strip() or lines[j].strip().startswith("@")):
        j -= 1
    if j < 0:
        return False
    above = lines[j].strip()
    return above.startswith(_COMMENT_PREFIXES) or above.endswith("*/")


def _docstring_below(lines: list[str], idx: int) -> bool:
    if not lines[idx].lstrip().startswith(("def ", "async def ")):
        return False
    # find the end of a (possibly multi-line) def header
    end = idx
    while end < len(lines) and end < idx + 10 and not lines[end].rstrip().endswith(":"):
        end += 1
    for line in lines[end + 1:end + 3]:
        stripped = line.strip()
        if stripped:
            return stripped.startswith(_DOC_OPENERS)
    return False


def function_docs(content: str) -> list[tuple[str, int, bool]]:
    """Return (name, line, documented) for every function-like declaration."""
    lines = content.splitlines()
    found = []
    for name, line in find_functions(content):
        idx = line - 1
        if idx >= len(lines):
            continue
        documented = _comment_above(lines, idx) or _docstring_below(lines, idx)
        found.append((name, line, documented))
    return found


def is_code_file(extension: str) -> bool:
    return extension in CODE_EXTENSIONS


def path_parts(relative_path: str) -> tuple[str, ...]:
    return PurePosixPath(relative_path).parts
