"""Core data structures for iqr."""

from dataclasses import dataclass, field
from enum import Enum

MAX_EXAMPLES = 10           # examples retained per tally for diagnostics
SCHEMA_VERSION = 1          # bump when the persisted profile layout changes


@dataclass(frozen=True)
class FileRecord:
    path: str                   # absolute path on disk
    relative_path: str          # relative to project root, forward slashes
    name: str                   # basename incl. extension, e.g. "userProfile.tsx"
    extension: str              # ".tsx" ("" when none)
    directory: str              # relative dir, "." for the root


@dataclass(frozen=True)
class DominantPattern:
    pattern: str
    confidence: float           # max(count) / total_samples, in [0, 1]
    total_samples: int

    def to_dict(self) -> dict:
        return {
            "pattern": self.pattern,
            "confidence": self.confidence,
            "total_samples": self.total_samples,
        }


@dataclass
class PatternTally:
    """Frequency table for one category.

    Keys are inserted in a fixed enumeration order; on equal counts the
    dominant pattern is the key that comes first in that order.
    """
    counts: dict[str, int] = field(default_factory=dict)
    examples: list[dict] = field(default_factory=list)

    @classmethod
    def of(cls, *keys: str) -> "PatternTally":
        return cls(counts={k: 0 for k in keys})

    def add(self, key: str, example: dict | None = None, count: int = 1) -> None:
        self.counts[key] = self.counts.get(key, 0) + count
        if example is not None and len(self.examples) < MAX_EXAMPLES:
            self.examples.append(example)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def dominant(self) -> DominantPattern | None:
        total = self.total
        if total == 0:
            return None
        # max() keeps the first of equal keys, which is the enumeration order
        best = max(self.counts, key=lambda k: self.counts[k])
        return DominantPattern(
            pattern=best,
            confidence=self.counts[best] / total,
            total_samples=total,
        )

    def to_dict(self) -> dict:
        dom = self.dominant
        return {
            "counts": dict(self.counts),
            "dominant": dom.to_dict() if dom else None,
            "examples": list(self.examples),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PatternTally":
        counts = data["counts"]
        if not isinstance(counts, dict):
            raise TypeError("counts must be an object")
        return cls(
            counts={str(k): int(v) for k, v in counts.items()},
            examples=list(data.get("examples") or [])[:MAX_EXAMPLES],
        )


@dataclass
class FileLocation:
    primary: str                # directory holding most files of this extension
    count: int                  # number of files in primary
    alternatives: list[dict] = field(default_factory=list)  # [{"dir", "count"}], at most 3

    def alternative_dirs(self) -> list[str]:
        return [a["dir"] for a in self.alternatives]


@dataclass
class TechStack:
    languages: list[str] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    testing: list[str] = field(default_factory=list)
    database: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "languages": list(self.languages),
            "frameworks": list(self.frameworks),
            "testing": list(self.testing),
            "database": list(self.database),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TechStack":
        return cls(**{k: list(data.get(k) or []) for k in ("languages", "frameworks", "testing", "database")})


NAMING_CASES = ("camelCase", "PascalCase", "snake_case", "kebab-case", "UPPER_CASE", "other")


def _naming_tally() -> PatternTally:
    return PatternTally.of(*NAMING_CASES)


@dataclass
class NamingPatterns:
    files: PatternTally = field(default_factory=_naming_tally)
    functions: PatternTally = field(default_factory=_naming_tally)
    variables: PatternTally = field(default_factory=_naming_tally)
    classes: PatternTally = field(default_factory=_naming_tally)
    constants: PatternTally = field(default_factory=_naming_tally)

    CATEGORIES = ("files", "functions", "variables", "classes", "constants")

    def to_dict(self) -> dict:
        return {c: getattr(self, c).to_dict() for c in self.CATEGORIES}

    @classmethod
    def from_dict(cls, data: dict) -> "NamingPatterns":
        return cls(**{c: PatternTally.from_dict(data[c]) for c in cls.CATEGORIES})


@dataclass
class StructurePatterns:
    file_locations: dict[str, FileLocation] = field(default_factory=dict)   # extension → location
    directories: dict[str, int] = field(default_factory=dict)               # well-known dir → file count
    common_structures: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "file_locations": {
                ext: {"primary": loc.primary, "count": loc.count, "alternatives": loc.alternatives}
                for ext, loc in self.file_locations.items()
            },
            "directories": dict(self.directories),
            "common_structures": list(self.common_structures),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StructurePatterns":
        locations = {
            ext: FileLocation(
                primary=str(loc["primary"]),
                count=int(loc["count"]),
                alternatives=[{"dir": str(a["dir"]), "count": int(a["count"])} for a in loc.get("alternatives", [])],
            )
            for ext, loc in data["file_locations"].items()
        }
        return cls(
            file_locations=locations,
            directories={str(k): int(v) for k, v in data.get("directories", {}).items()},
            common_structures=list(data.get("common_structures", [])),
        )


IMPORT_STYLES = ("absolute", "relative", "alias")


@dataclass
class ImportPatterns:
    style: PatternTally = field(default_factory=lambda: PatternTally.of(*IMPORT_STYLES))
    grouping_detected: bool = False

    def to_dict(self) -> dict:
        return {"style": self.style.to_dict(), "grouping_detected": self.grouping_detected}

    @classmethod
    def from_dict(cls, data: dict) -> "ImportPatterns":
        return cls(style=PatternTally.from_dict(data["style"]), grouping_detected=bool(data["grouping_detected"]))


@dataclass
class ErrorHandlingPatterns:
    style: PatternTally = field(default_factory=lambda: PatternTally.of("try-catch", "promise-catch"))
    logging: PatternTally = field(default_factory=lambda: PatternTally.of("structured", "adhoc"))
    error_types: dict[str, int] = field(default_factory=dict)

    @property
    def prefers_structured_logging(self) -> bool:
        return self.logging.counts.get("structured", 0) > self.logging.counts.get("adhoc", 0)

    def to_dict(self) -> dict:
        return {
            "style": self.style.to_dict(),
            "logging": self.logging.to_dict(),
            "prefers_structured_logging": self.prefers_structured_logging,
            "error_types": dict(self.error_types),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ErrorHandlingPatterns":
        return cls(
            style=PatternTally.from_dict(data["style"]),
            logging=PatternTally.from_dict(data["logging"]),
            error_types={str(k): int(v) for k, v in data.get("error_types", {}).items()},
        )


COMMENT_STYLES = ("jsdoc", "docstring", "inline", "block")


@dataclass
class CommentPatterns:
    style: PatternTally = field(default_factory=lambda: PatternTally.of(*COMMENT_STYLES))
    documented: int = 0
    undocumented: int = 0

    @property
    def documentation_rate(self) -> float | None:
        total = self.documented + self.undocumented
        return self.documented / total if total else None

    def to_dict(self) -> dict:
        return {
            "style": self.style.to_dict(),
            "function_docs": {"documented": self.documented, "undocumented": self.undocumented},
            "documentation_rate": self.documentation_rate,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CommentPatterns":
        docs = data["function_docs"]
        return cls(
            style=PatternTally.from_dict(data["style"]),
            documented=int(docs["documented"]),
            undocumented=int(docs["undocumented"]),
        )


TEST_NAMING = ("suffix_test", "suffix_spec", "prefix_test", "suffix_underscore_test", "other")


@dataclass
class TestingPatterns:
    naming: PatternTally = field(default_factory=lambda: PatternTally.of(*TEST_NAMING))
    location: PatternTally = field(default_factory=PatternTally)
    frameworks: dict[str, int] = field(default_factory=dict)
    total_test_files: int = 0

    def to_dict(self) -> dict:
        return {
            "naming": self.naming.to_dict(),
            "location": self.location.to_dict(),
            "frameworks": dict(self.frameworks),
            "total_test_files": self.total_test_files,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TestingPatterns":
        return cls(
            naming=PatternTally.from_dict(data["naming"]),
            location=PatternTally.from_dict(data["location"]),
            frameworks={str(k): int(v) for k, v in data.get("frameworks", {}).items()},
            total_test_files=int(data.get("total_test_files", 0)),
        )


# dotted category name → (section attribute, tally attribute)
_CATEGORIES: dict[str, tuple[str, str]] = {
    **{f"naming.{c}": ("naming", c) for c in NamingPatterns.CATEGORIES},
    "imports.style": ("imports", "style"),
    "error_handling.style": ("error_handling", "style"),
    "error_handling.logging": ("error_handling", "logging"),
    "comments.style": ("comments", "style"),
    "testing.naming": ("testing", "naming"),
    "testing.location": ("testing", "location"),
}


@dataclass
class PatternProfile:
    project_root: str
    analyzed_at: str                # ISO 8601 UTC
    tech_stack: TechStack = field(default_factory=TechStack)
    file_count: int = 0
    naming: NamingPatterns = field(default_factory=NamingPatterns)
    structure: StructurePatterns = field(default_factory=StructurePatterns)
    imports: ImportPatterns = field(default_factory=ImportPatterns)
    error_handling: ErrorHandlingPatterns = field(default_factory=ErrorHandlingPatterns)
    comments: CommentPatterns = field(default_factory=CommentPatterns)
    testing: TestingPatterns = field(default_factory=TestingPatterns)
    analysis_time_ms: int = 0

    @classmethod
    def empty(cls, project_root: str) -> "PatternProfile":
        """A profile with every category absent — validation then only runs intrinsic checks."""
        return cls(project_root=project_root, analyzed_at="")

    def tally(self, category: str) -> PatternTally:
        key = category.replace("errorHandling", "error_handling")
        if key not in _CATEGORIES:
            raise KeyError(f"unknown pattern category: {category}")
        section, attr = _CATEGORIES[key]
        return getattr(getattr(self, section), attr)

    def dominant(self, category: str) -> DominantPattern | None:
        return self.tally(category).dominant

    def to_dict(self) -> dict:
        return {
            "schema_version": SCHEMA_VERSION,
            "project_root": self.project_root,
            "analyzed_at": self.analyzed_at,
            "tech_stack": self.tech_stack.to_dict(),
            "file_count": self.file_count,
            "patterns": {
                "naming": self.naming.to_dict(),
                "structure": self.structure.to_dict(),
                "imports": self.imports.to_dict(),
                "error_handling": self.error_handling.to_dict(),
                "comments": self.comments.to_dict(),
                "testing": self.testing.to_dict(),
            },
            "analysis_time_ms": self.analysis_time_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PatternProfile":
        """Rebuild a profile; raises KeyError/TypeError/ValueError on malformed input."""
        p = data["patterns"]
        return cls(
            project_root=str(data["project_root"]),
            analyzed_at=str(data["analyzed_at"]),
            tech_stack=TechStack.from_dict(data.get("tech_stack") or {}),
            file_count=int(data["file_count"]),
            naming=NamingPatterns.from_dict(p["naming"]),
            structure=StructurePatterns.from_dict(p["structure"]),
            imports=ImportPatterns.from_dict(p["imports"]),
            error_handling=ErrorHandlingPatterns.from_dict(p["error_handling"]),
            comments=CommentPatterns.from_dict(p["comments"]),
            testing=TestingPatterns.from_dict(p["testing"]),
            analysis_time_ms=int(data.get("analysis_time_ms", 0)),
        )


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {s: i for i, s in enumerate(Severity)}


@dataclass(frozen=True)
class Issue:
    type: str                   # "naming" | "structure" | "imports" | "comments" | "error_handling" | "security" | "maintainability"
    severity: Severity
    message: str
    line: int | None = None
    file: str | None = None
    current_value: str | None = None
    suggested_value: str | None = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.line,
            "file": self.file,
            "current": self.current_value,
            "suggested": self.suggested_value,
        }


@dataclass
class CheckResult:
    """Outcome of one sub-check: a sub-score in [0, 100] plus findings."""
    score: int = 100
    issues: list[Issue] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def deduct(self, points: int, issue: Issue | None = None, suggestion: str | None = None) -> None:
        self.score = max(0, self.score - points)
        if issue is not None:
            self.issues.append(issue)
        if suggestion:
            self.suggestions.append(suggestion)


DIMENSIONS = ("consistency", "completeness", "security", "maintainability")


@dataclass
class FileQualityReport:
    file: str                           # relative to project root
    dimension_scores: dict[str, int]
    overall_score: int
    issues: list[Issue]
    suggestions: list[str]
    passed: bool
    error: str | None = None            # set when the file could not be read

    def to_dict(self) -> dict:
        d = {
            "file": self.file,
            "scores": dict(self.dimension_scores),
            "overall_score": self.overall_score,
            "issues": [i.to_dict() for i in self.issues],
            "suggestions": list(self.suggestions),
            "passed": self.passed,
        }
        if self.error is not None:
            d["error"] = self.error
        return d


class SessionState(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    PASSED = "passed"
    NEEDS_REFINEMENT = "needs_refinement"
    ESCALATED = "escalated"


@dataclass
class RefinementSummary:
    iteration: int
    max_iterations: int
    threshold: int
    files: list[FileQualityReport]
    average_score: int
    passed_count: int
    failed_count: int
    all_passed: bool
    needs_refinement: bool

    @property
    def state(self) -> SessionState:
        if self.all_passed:
            return SessionState.PASSED
        if self.iteration >= self.max_iterations:
            return SessionState.ESCALATED
        return SessionState.NEEDS_REFINEMENT

    def to_dict(self) -> dict:
        return {
            "summary": {
                "total_files": len(self.files),
                "passed": self.passed_count,
                "failed": self.failed_count,
                "average_score": self.average_score,
                "iteration": self.iteration,
                "max_iterations": self.max_iterations,
                "threshold": self.threshold,
                "all_passed": self.all_passed,
                "needs_refinement": self.needs_refinement,
                "state": self.state.value,
            },
            "files": [f.to_dict() for f in self.files],
            "all_issues": [
                {**i.to_dict(), "file": f.file} for f in self.files for i in f.issues
            ],
            "all_suggestions": [
                {"suggestion": s, "file": f.file} for f in self.files for s in f.suggestions
            ],
        }
