"""
Pytest configuration and fixtures for iqr tests.

Profiles are built by hand so each test states exactly which learned
patterns it depends on.
"""

from pathlib import Path

import pytest

from iqr.config import QualityConfig
from iqr.context import CheckContext
from iqr.models import FileLocation, FileRecord, PatternProfile, PatternTally

# =========================================================================
# Profiles
# =========================================================================


@pytest.fixture
def quality() -> QualityConfig:
    """Default quality gate: threshold 75, default weights and policy."""
    return QualityConfig()


@pytest.fixture
def empty_profile() -> PatternProfile:
    """A profile with no learned patterns; only intrinsic checks apply."""
    return PatternProfile.empty("/project")


@pytest.fixture
def make_profile():
    """
    Factory for profiles with selected learned patterns.

    Keyword arguments are dotted category names with underscores for dots,
    e.g. ``naming_files={"PascalCase": 18, "camelCase": 2}``.
    """

    def make(
        naming_files: dict | None = None,
        naming_functions: dict | None = None,
        imports_style: dict | None = None,
        grouping_detected: bool = False,
        logging_counts: dict | None = None,
        documented: int = 0,
        undocumented: int = 0,
        locations: dict[str, FileLocation] | None = None,
    ) -> PatternProfile:
        profile = PatternProfile.empty("/project")
        profile.analyzed_at = "2026-01-01T00:00:00+00:00"
        if naming_files:
            profile.naming.files = PatternTally(counts=dict(naming_files))
        if naming_functions:
            profile.naming.functions = PatternTally(counts=dict(naming_functions))
        if imports_style:
            profile.imports.style = PatternTally(counts=dict(imports_style))
        profile.imports.grouping_detected = grouping_detected
        if logging_counts:
            profile.error_handling.logging = PatternTally(counts=dict(logging_counts))
        profile.comments.documented = documented
        profile.comments.undocumented = undocumented
        if locations:
            profile.structure.file_locations = dict(locations)
        return profile

    return make


# =========================================================================
# Files on disk
# =========================================================================


@pytest.fixture
def write_files(tmp_path: Path):
    """Factory writing {relative_path: content} under tmp_path; returns the root."""

    def write(files: dict[str, str | bytes], root: Path | None = None) -> Path:
        base = root or tmp_path
        for rel, content in files.items():
            path = base / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return base

    return write


@pytest.fixture
def record():
    """Factory for FileRecords from a relative path (no file on disk needed)."""

    def make(relative_path: str) -> FileRecord:
        p = Path(relative_path)
        parent = p.parent.as_posix()
        return FileRecord(
            path=f"/project/{relative_path}",
            relative_path=relative_path,
            name=p.name,
            extension=p.suffix,
            directory=parent if parent else ".",
        )

    return make


@pytest.fixture
def make_ctx(empty_profile, quality):
    """Factory for CheckContexts; profile and config default to empty / default."""

    def make(content: str, file: str = "src/module.ts", profile=None, config=None) -> CheckContext:
        return CheckContext(
            content=content,
            file=file,
            profile=profile or empty_profile,
            config=config or quality,
        )

    return make
