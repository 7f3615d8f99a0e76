"""File collection — walk a project, apply exclusion rules, return a bounded FileRecord inventory."""

import logging
import os
import threading
from pathlib import Path

import pathspec

from .config import CollectorConfig
from .errors import CollectionError, OperationCancelled
from .models import FileRecord

log = logging.getLogger(__name__)


def _load_gitignore_spec(root: Path) -> pathspec.PathSpec | None:
    gitignore = root / ".gitignore"
    if gitignore.exists():
        patterns = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
        return pathspec.PathSpec.from_lines("gitwildmatch", patterns)
    return None


def _skip_file_spec(patterns: tuple[str, ...]) -> pathspec.PathSpec:
    # "*.min.js" is a suffix match and a bare name an exact match; gitwildmatch does both
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def should_skip_dir(name: str, config: CollectorConfig) -> bool:
    return name.startswith(".") or name in config.skip_directories


def make_record(path: Path, root: Path) -> FileRecord:
    rel = path.relative_to(root)
    parent = rel.parent.as_posix()
    return FileRecord(
        path=str(path),
        relative_path=rel.as_posix(),
        name=path.name,
        extension=path.suffix,
        directory=parent if parent else ".",
    )


def collect_files(
    project_root: str,
    config: CollectorConfig,
    cancel: threading.Event | None = None,
    errors: list[CollectionError] | None = None,
) -> list[FileRecord]:
    """
    Return FileRecords for every collectable file under project_root.

    Depth-first, entries sorted by name, so the order is stable for a given
    filesystem state. Stops quietly at config.max_files. Unreadable
    directories are logged (and appended to *errors* when given) and skipped.
    """
    root = Path(project_root).resolve()
    gitignore_spec = _load_gitignore_spec(root) if config.respect_gitignore else None
    skip_spec = _skip_file_spec(config.skip_file_patterns)

    results: list[FileRecord] = []

    def walk(directory: Path, depth: int) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            err = CollectionError(str(directory), e.strerror or str(e))
            log.warning("%s", err)
            if errors is not None:
                errors.append(err)
            return

        for entry in entries:
            if cancel is not None and cancel.is_set():
                raise OperationCancelled(f"collection of {root} cancelled")
            if len(results) >= config.max_files:
                return

            path = Path(entry.path)
            rel_str = path.relative_to(root).as_posix()
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as e:
                err = CollectionError(entry.path, e.strerror or str(e))
                log.warning("%s", err)
                if errors is not None:
                    errors.append(err)
                continue

            if is_dir:
                if should_skip_dir(entry.name, config):
                    continue
                if depth + 1 > config.max_depth:
                    log.debug("Pruning %s (depth %d > %d)", rel_str, depth + 1, config.max_depth)
                    continue
                if gitignore_spec and gitignore_spec.match_file(rel_str + "/"):
                    continue
                walk(path, depth + 1)
            elif is_file:
                if skip_spec.match_file(entry.name):
                    continue
                if gitignore_spec and gitignore_spec.match_file(rel_str):
                    continue
                results.append(make_record(path, root))

    walk(root, 0)

    if len(results) >= config.max_files:
        log.info("Stopped at max_files=%d under %s", config.max_files, root)
    log.info("Collected %d files under %s", len(results), root)
    return results
