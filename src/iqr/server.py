"""
MCP server for iqr — lets coding agents learn a project's patterns and gate their edits on them.

IMPORTANT: Uses stdio transport. Never print to stdout — all logging goes to stderr.
"""

import functools
import inspect
import logging
import sys
import time
from pathlib import Path

# All logging must go to stderr in stdio MCP mode
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,
)

# File-based request log — tail -f this to watch MCP tool usage in real time
_LOG_PATH = Path.home() / ".local" / "log" / "iqr-mcp.log"
_request_log = logging.getLogger("iqr.requests")
_request_log.setLevel(logging.INFO)
_request_log.propagate = False  # don't send to stderr
try:
    _LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    _file_handler = logging.FileHandler(_LOG_PATH)
    _file_handler.setFormatter(logging.Formatter("%(asctime)s  %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    _request_log.addHandler(_file_handler)
except OSError:
    _request_log.addHandler(logging.NullHandler())

from mcp.server.fastmcp import FastMCP

from .cache import ProfileCache
from .changes import GitUnavailable, changed_files
from .config import default_cache_path, load_config
from .profiler import load_or_build_profile
from .refine import run_refinement
from .report import FORMATS, profile_summary, render

log = logging.getLogger(__name__)


def _log_tool(fn):
    """Decorator that logs every MCP tool invocation with args and duration."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        sig = inspect.signature(fn)
        bound = sig.bind(*args, **kwargs)
        bound.apply_defaults()
        params = ", ".join(f"{k}={v!r}" for k, v in bound.arguments.items())
        _request_log.info("→ %s(%s)", fn.__name__, params)
        t0 = time.monotonic()
        try:
            result = fn(*args, **kwargs)
            dt = time.monotonic() - t0
            preview = result.split("\n", 1)[0] if isinstance(result, str) else str(result)[:120]
            _request_log.info("← %s  %.3fs  %s", fn.__name__, dt, preview)
            return result
        except Exception as exc:
            dt = time.monotonic() - t0
            _request_log.info("✗ %s  %.3fs  %s: %s", fn.__name__, dt, type(exc).__name__, exc)
            raise

    return wrapper


def _build_instructions() -> str:
    """Generate instructions based on whether the current project has a pattern cache."""
    cwd = Path.cwd().resolve()
    base = (
        "iqr learns a codebase's conventions (naming, layout, imports, error "
        "handling, documentation) and scores files against them plus a fixed "
        "security/maintainability catalog."
    )

    profile = ProfileCache(default_cache_path(str(cwd))).load()
    if profile is None:
        return (
            f"{base}\n\n"
            f"This project ({cwd.name}/) has no pattern profile yet. "
            f"Run analyze_patterns first, then validate_files after each round of edits."
        )
    return (
        f"{base}\n\n"
        f"This project ({cwd.name}/) was analyzed at {profile.analyzed_at} "
        f"({profile.file_count} files). Call validate_files after editing; when it "
        f"reports needs_refinement, apply the suggestions and call again with iteration+1. "
        f"Stop and hand over to a human when the state is escalated."
    )


mcp = FastMCP(
    "iqr",
    instructions=_build_instructions(),
)


# ── Tools ────────────────────────────────────────────────────────────────────

@mcp.tool()
@_log_tool
def analyze_patterns(path: str = ".", refresh: bool = False) -> str:
    """
    Learn the project's coding patterns and cache them. Run this before validate_files.

    Args:
        path: Absolute or relative path to the project root directory.
        refresh: If True, re-analyze even when a fresh cache exists.
    """
    root = str(Path(path).resolve())
    config = load_config(project_root=root)
    profile = load_or_build_profile(root, config, refresh=refresh)
    return profile_summary(profile)


@mcp.tool()
@_log_tool
def validate_files(
    files: list[str] | None = None,
    project: str = ".",
    threshold: int | None = None,
    iteration: int = 1,
    max_iterations: int | None = None,
    output_format: str = "narrative-detailed",
    check_only: bool = False,
) -> str:
    """
    Score files against the learned patterns and the quality gate.

    Args:
        files: Paths relative to the project root. Empty: files changed in git.
        project: Project root directory.
        threshold: Minimum passing score, 0-100 (default from config, 75).
        iteration: Current refinement iteration, starting at 1.
        max_iterations: Iterations allowed before escalating to a human.
        output_format: structured, narrative-detailed or narrative-summary.
        check_only: Report scores and issues without suggested fixes.
    """
    if output_format not in FORMATS:
        return f"Unknown output_format {output_format!r}; choose from {', '.join(FORMATS)}"

    root = str(Path(project).resolve())
    config = load_config(project_root=root)
    quality = config.quality.with_threshold(threshold)

    targets = list(files or [])
    if not targets:
        try:
            targets = changed_files(root)
        except GitUnavailable as e:
            return f"No files given and no git changes available: {e}"
        if not targets:
            return "No files to validate"

    profile = load_or_build_profile(root, config)
    summary = run_refinement(
        targets,
        profile,
        quality,
        iteration=iteration,
        max_iterations=max_iterations if max_iterations is not None else config.max_iterations,
        project_root=root,
    )
    return render(summary, output_format, check_only=check_only)


@mcp.tool()
@_log_tool
def pattern_summary(project: str = ".") -> str:
    """
    Show the cached pattern profile for a project without re-analyzing.

    Args:
        project: Project root directory.
    """
    root = str(Path(project).resolve())
    cache = ProfileCache(default_cache_path(root))
    profile = cache.load()
    if profile is None:
        return f"No pattern profile at {cache.path}. Run analyze_patterns first."
    return profile_summary(profile)


# ── Entry point ───────────────────────────────────────────────────────────────

def run_server(http: bool = False, port: int = 8000) -> None:
    if http:
        mcp.settings.host = "127.0.0.1"
        mcp.settings.port = port
        mcp.run(transport="streamable-http")
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
