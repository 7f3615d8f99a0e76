"""
Profiling pipeline — wires collect → read → analyze → PatternProfile, plus the cache-aware entry point.
"""

import logging
import threading
import time
from pathlib import Path

from .analyze import (
    TEST_FILES_TO_INSPECT,
    Source,
    analyze_comments,
    analyze_error_handling,
    analyze_imports,
    analyze_naming,
    analyze_structure,
    analyze_testing,
    is_test_file,
)
from .cache import ProfileCache, utc_now
from .config import RefinementConfig, default_cache_path
from .discover import collect_files
from .errors import CacheError, OperationCancelled
from .lexical import is_code_file
from .models import FileRecord, PatternProfile
from .techstack import detect_tech_stack

log = logging.getLogger(__name__)


def _check_cancel(cancel: threading.Event | None, what: str) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled(f"{what} cancelled")


def _read(rec: FileRecord) -> str | None:
    try:
        return Path(rec.path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.debug("Skipping unreadable %s: %s", rec.relative_path, e)
        return None


def read_sources(
    files: list[FileRecord],
    max_files: int,
    cancel: threading.Event | None = None,
) -> tuple[list[Source], dict[str, str]]:
    """
    Read the files content analysis needs, each at most once.

    Returns the sampled code files (first *max_files* in collection order)
    and a relative_path → content map that additionally covers the first
    test files, so test framework detection sees them even past the sample.
    """
    sources: list[Source] = []
    contents: dict[str, str] = {}

    for rec in files:
        if len(sources) >= max_files:
            break
        if not is_code_file(rec.extension):
            continue
        _check_cancel(cancel, "profiling")
        text = _read(rec)
        if text is None:
            continue
        sources.append((rec, text))
        contents[rec.relative_path] = text

    tests = [rec for rec in files if is_test_file(rec)][:TEST_FILES_TO_INSPECT]
    for rec in tests:
        if rec.relative_path in contents:
            continue
        _check_cancel(cancel, "profiling")
        text = _read(rec)
        if text is not None:
            contents[rec.relative_path] = text
    return sources, contents


def build_profile(
    project_root: str,
    config: RefinementConfig,
    cancel: threading.Event | None = None,
) -> PatternProfile:
    """Collect, read and analyze a project into a fresh PatternProfile."""
    root = str(Path(project_root).resolve())
    t0 = time.monotonic()
    policy = config.policy

    tech_stack = detect_tech_stack(root)
    files = collect_files(root, config.collector, cancel=cancel)
    if len(files) < policy.min_files_for_pattern:
        log.warning(
            "Only %d files under %s; fewer than %d samples cannot establish patterns",
            len(files), root, policy.min_files_for_pattern,
        )

    sources, contents = read_sources(files, policy.max_files_to_sample, cancel)
    log.info("Analyzing %d of %d files under %s", len(sources), len(files), root)

    _check_cancel(cancel, "profiling")
    profile = PatternProfile(
        project_root=root,
        analyzed_at=utc_now().isoformat(timespec="seconds"),
        tech_stack=tech_stack,
        file_count=len(files),
        naming=analyze_naming(files, sources),
        structure=analyze_structure(files),
        imports=analyze_imports(sources, policy),
        error_handling=analyze_error_handling(sources),
        comments=analyze_comments(sources),
        testing=analyze_testing(files, contents),
    )
    profile.analysis_time_ms = int((time.monotonic() - t0) * 1000)
    log.info("Profiled %s in %d ms", root, profile.analysis_time_ms)
    return profile


def load_or_build_profile(
    project_root: str,
    config: RefinementConfig,
    cache_path: str | None = None,
    refresh: bool = False,
    auto_build: bool = True,
    cancel: threading.Event | None = None,
) -> PatternProfile:
    """
    Return a fresh cached profile, or build (and save) a new one.

    With auto_build=False and no usable cache, an empty profile is returned
    and validation falls back to the profile-independent checks.
    """
    cache = ProfileCache(cache_path or default_cache_path(project_root))

    if refresh:
        try:
            if cache.invalidate():
                log.info("Discarded cached profile %s for refresh", cache.path)
        except CacheError as e:
            log.warning("Cannot discard cached profile: %s", e)
    else:
        cached = cache.load_fresh(config.cache_ttl_hours)
        if cached is not None:
            log.debug("Using cached profile from %s", cache.path)
            return cached
        if not auto_build:
            log.warning("No usable pattern cache at %s; validating without learned patterns", cache.path)
            return PatternProfile.empty(str(Path(project_root).resolve()))

    profile = build_profile(project_root, config, cancel=cancel)
    if config.save_pattern_cache:
        try:
            cache.save(profile)
        except CacheError as e:
            log.warning("Pattern profile not cached: %s", e)
    return profile
