"""
Git-based changed-file discovery.

Used when `iqr validate` is run without explicit targets: the files touched
by the last commit, else the staged files, else the unstaged working-tree
changes.
"""

import logging
import subprocess
from pathlib import Path

from .errors import IqrError

log = logging.getLogger(__name__)

# tried in order; the first non-empty listing wins
_DIFF_COMMANDS = (
    ["git", "diff", "--name-only", "HEAD~1", "HEAD"],
    ["git", "diff", "--name-only", "--cached"],
    ["git", "diff", "--name-only"],
)


class GitUnavailable(IqrError):
    """git is not installed, timed out, or project_root is not a repository."""


def _git_lines(cmd: list[str], project_root: str) -> list[str] | None:
    try:
        result = subprocess.run(
            cmd,
            cwd=project_root,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise GitUnavailable(f"{' '.join(cmd)}: {e}") from e
    if result.returncode != 0:
        log.debug("%s failed: %s", " ".join(cmd), result.stderr.strip())
        return None
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def is_git_repo(project_root: str) -> bool:
    try:
        return _git_lines(["git", "rev-parse", "--is-inside-work-tree"], project_root) == ["true"]
    except GitUnavailable:
        return False


def changed_files(project_root: str) -> list[str]:
    """
    Return existing files changed in the repository, relative to project_root.

    Raises GitUnavailable when git cannot be run here at all. Deleted files
    are dropped since there is nothing left to validate.
    """
    if not is_git_repo(project_root):
        raise GitUnavailable(f"{project_root} is not inside a git work tree")

    for cmd in _DIFF_COMMANDS:
        lines = _git_lines(cmd, project_root)
        if lines:
            log.debug("%d changed files from: %s", len(lines), " ".join(cmd))
            break
    else:
        return []

    # git prints paths relative to the repository top level
    top = _git_lines(["git", "rev-parse", "--show-toplevel"], project_root)
    base = Path(top[0]) if top else Path(project_root)
    root = Path(project_root).resolve()

    files = []
    for rel in lines:
        path = (base / rel).resolve()
        if not path.is_file():
            continue
        try:
            files.append(path.relative_to(root).as_posix())
        except ValueError:
            log.debug("Skipping %s (outside %s)", rel, root)
    return files
