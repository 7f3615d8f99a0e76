"""
Per-category convention analysis over a collected file inventory.

Each analyzer takes the FileRecords and/or the (record, content) pairs the
profiler read, and returns the matching section of the PatternProfile.
"""

import logging
import re
from collections import Counter
from collections.abc import Iterable, Mapping

from .config import PatternPolicy
from .lexical import (
    ERROR_TYPE,
    LOGGER_CALL,
    MODULE_EXTENSIONS,
    NAMED_EXTENSIONS,
    PROMISE_CATCH,
    PY_MODULE_EXTENSIONS,
    TRY_BLOCK,
    adhoc_output_calls,
    classify_import,
    file_stem,
    find_imports,
    function_docs,
    imports_grouped,
    path_parts,
)
from .models import (
    CommentPatterns,
    ErrorHandlingPatterns,
    FileLocation,
    FileRecord,
    ImportPatterns,
    NamingPatterns,
    StructurePatterns,
    TestingPatterns,
)
from .naming import detect_case, find_classes, find_constants, find_functions, find_variables, is_candidate

log = logging.getLogger(__name__)

Source = tuple[FileRecord, str]

WELL_KNOWN_DIRS = (
    "src/components", "src/pages", "src/lib", "src/utils", "src/hooks",
    "src/services", "src/api", "app", "pages", "components", "lib", "utils",
    "controllers", "models", "views", "routes", "middleware",
    "tests", "__tests__", "spec",
)

# layout name → substrings that must all occur in some relative path
STRUCTURE_INDICATORS = {
    "nextjs-app-router": ("app/page", "app/layout"),
    "nextjs-pages-router": ("pages/_app", "pages/index"),
    "react-standard": ("src/App", "src/index"),
    "vue-standard": ("src/App.vue", "src/main"),
    "laravel": ("app/Http/Controllers", "resources/views"),
    "django": ("manage.py", "settings.py"),
    "express": ("routes/", "controllers/"),
    "rails": ("app/controllers", "app/models"),
    "python-src-layout": ("src/", "pyproject.toml"),
}

TEST_DIRS = frozenset({"test", "tests", "__tests__", "spec", "specs"})
TEST_FILES_TO_INSPECT = 10

_JSDOC = re.compile(r"/\*\*[\s\S]*?\*/")
_BLOCK = re.compile(r"/\*(?!\*)[\s\S]*?\*/")
_DOCSTRING = re.compile(r'"""[\s\S]*?"""|\'\'\'[\s\S]*?\'\'\'')
_SLASH_COMMENT = re.compile(r"(?<![:'\"\\])//[^\n]*")
_HASH_COMMENT = re.compile(r"^[ \t]*#(?!!)[^\n]*", re.M)
_HASH_COMMENT_LANGS = PY_MODULE_EXTENSIONS | {".rb"}


# -- naming ------------------------------------------------------------------

def analyze_naming(files: Iterable[FileRecord], sources: Iterable[Source]) -> NamingPatterns:
    naming = NamingPatterns()

    for rec in files:
        if rec.extension not in NAMED_EXTENSIONS:
            continue
        stem = file_stem(rec.name)
        if is_candidate(stem):
            case = detect_case(stem)
            naming.files.add(case, {"name": rec.name, "case": case})

    extractors = (
        ("functions", find_functions),
        ("classes", find_classes),
        ("constants", find_constants),
        ("variables", find_variables),
    )
    for rec, content in sources:
        for category, extract in extractors:
            tally = getattr(naming, category)
            for name, _line in extract(content):
                if not is_candidate(name):
                    continue
                case = detect_case(name)
                tally.add(case, {"name": name, "case": case, "file": rec.relative_path})
    return naming


# -- structure ---------------------------------------------------------------

def _under(directory: str, prefix: str) -> bool:
    return directory == prefix or directory.startswith(prefix + "/")


def analyze_structure(files: list[FileRecord]) -> StructurePatterns:
    structure = StructurePatterns()

    per_ext: dict[str, Counter] = {}
    dir_counts: Counter = Counter()
    for rec in files:
        dir_counts[rec.directory] += 1
        if rec.extension:
            per_ext.setdefault(rec.extension, Counter())[rec.directory] += 1

    for ext, counter in per_ext.items():
        # most_common is stable for equal counts, so first-seen directory wins
        ranked = counter.most_common()
        primary, count = ranked[0]
        structure.file_locations[ext] = FileLocation(
            primary=primary,
            count=count,
            alternatives=[{"dir": d, "count": c} for d, c in ranked[1:4]],
        )

    for known in WELL_KNOWN_DIRS:
        total = sum(c for d, c in dir_counts.items() if _under(d, known))
        if total:
            structure.directories[known] = total

    for layout, indicators in STRUCTURE_INDICATORS.items():
        if all(any(ind in rec.relative_path for rec in files) for ind in indicators):
            structure.common_structures.append(layout)
    return structure


# -- imports -----------------------------------------------------------------

def analyze_imports(sources: Iterable[Source], policy: PatternPolicy) -> ImportPatterns:
    patterns = ImportPatterns()
    for rec, content in sources:
        if rec.extension not in MODULE_EXTENSIONS:
            continue
        imports = find_imports(content, rec.extension)
        for _idx, path in imports:
            style = classify_import(path, policy.alias_prefixes)
            patterns.style.add(style, {"import": path, "style": style, "file": rec.relative_path})
        if not patterns.grouping_detected and len(imports) > 3:
            patterns.grouping_detected = imports_grouped(imports, content.splitlines())
    return patterns


# -- error handling ----------------------------------------------------------

def analyze_error_handling(sources: Iterable[Source]) -> ErrorHandlingPatterns:
    patterns = ErrorHandlingPatterns()
    error_types: Counter = Counter()
    for rec, content in sources:
        tries = len(TRY_BLOCK.findall(content))
        catches = len(PROMISE_CATCH.findall(content))
        if tries:
            patterns.style.add("try-catch", {"file": rec.relative_path, "style": "try-catch"}, count=tries)
        if catches:
            patterns.style.add("promise-catch", {"file": rec.relative_path, "style": "promise-catch"}, count=catches)

        structured = len(LOGGER_CALL.findall(content))
        adhoc = len(adhoc_output_calls(content, rec.extension))
        if structured:
            patterns.logging.add("structured", count=structured)
        if adhoc:
            patterns.logging.add("adhoc", count=adhoc)

        error_types.update(ERROR_TYPE.findall(content))

    patterns.error_types = dict(error_types.most_common())
    return patterns


# -- comments ----------------------------------------------------------------

def analyze_comments(sources: Iterable[Source]) -> CommentPatterns:
    patterns = CommentPatterns()
    for rec, content in sources:
        found = {
            "jsdoc": len(_JSDOC.findall(content)),
            "block": len(_BLOCK.findall(content)),
        }
        if rec.extension in _HASH_COMMENT_LANGS:
            found["docstring"] = len(_DOCSTRING.findall(content))
            found["inline"] = len(_HASH_COMMENT.findall(content))
        else:
            found["inline"] = len(_SLASH_COMMENT.findall(content))
        for style, n in found.items():
            if n:
                patterns.style.add(style, count=n)

        for name, line, documented in function_docs(content):
            if not is_candidate(name):
                continue
            if documented:
                patterns.documented += 1
            else:
                patterns.undocumented += 1
    return patterns


# -- testing -----------------------------------------------------------------

def classify_test_name(name: str) -> str | None:
    """Classify a test file name, or None when the name does not look like a test."""
    lower = name.lower()
    stem = file_stem(lower)
    if ".test." in lower:
        return "suffix_test"
    if ".spec." in lower or stem.endswith("_spec"):
        return "suffix_spec"
    if lower.startswith(("test_", "test.")):
        return "prefix_test"
    if stem.endswith("_test"):
        return "suffix_underscore_test"
    return None


def is_test_file(rec: FileRecord) -> bool:
    if rec.extension not in NAMED_EXTENSIONS:
        return False
    if classify_test_name(rec.name) is not None:
        return True
    return any(part in TEST_DIRS for part in path_parts(rec.directory))


def _framework_indicators(content: str) -> list[str]:
    found = []
    if "describe(" in content and "it(" in content:
        found.append("jest_or_mocha")
    if "test(" in content and "expect(" in content:
        found.append("jest")
    if "def test_" in content or "pytest" in content:
        found.append("pytest")
    if "PHPUnit" in content or "function test" in content:
        found.append("phpunit")
    return found


def analyze_testing(files: Iterable[FileRecord], contents: Mapping[str, str]) -> TestingPatterns:
    """Tally test naming and location; inspect up to ten test files found in *contents*."""
    patterns = TestingPatterns()
    frameworks: Counter = Counter()
    inspected = 0
    for rec in files:
        if not is_test_file(rec):
            continue
        patterns.total_test_files += 1
        kind = classify_test_name(rec.name) or "other"
        patterns.naming.add(kind, {"file": rec.relative_path, "naming": kind})
        patterns.location.add(rec.directory)

        content = contents.get(rec.relative_path)
        if content is not None and inspected < TEST_FILES_TO_INSPECT:
            inspected += 1
            frameworks.update(_framework_indicators(content))

    patterns.frameworks = dict(frameworks.most_common())
    log.debug("Found %d test files, inspected %d", patterns.total_test_files, inspected)
    return patterns
