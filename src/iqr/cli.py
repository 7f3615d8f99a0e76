"""CLI entry point for iqr."""

import argparse
import logging
import sys
from pathlib import Path

from .cache import ProfileCache
from .changes import GitUnavailable, changed_files
from .config import default_cache_path, load_config
from .errors import ConfigurationError, IqrError
from .profiler import load_or_build_profile
from .refine import run_refinement
from .report import FORMATS, profile_summary, render

log = logging.getLogger(__name__)

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


def cmd_analyze(args: argparse.Namespace) -> int:
    root = str(Path(args.path).resolve())
    config = load_config(args.config, root)
    cache_path = args.cache or default_cache_path(root)

    print(f"Analyzing {root} → {cache_path}", file=sys.stderr)
    profile = load_or_build_profile(root, config, cache_path, refresh=args.refresh)
    print(profile_summary(profile))
    return EXIT_PASSED


def cmd_show(args: argparse.Namespace) -> int:
    root = str(Path(args.path).resolve())
    cache = ProfileCache(args.cache or default_cache_path(root))
    if not cache.exists():
        print(f"No pattern profile at {cache.path}", file=sys.stderr)
        print("Run 'iqr analyze' first to learn the project's patterns.", file=sys.stderr)
        return EXIT_FAILED
    profile = cache.load()
    if profile is None:
        print(f"Pattern profile at {cache.path} is unusable", file=sys.stderr)
        print("Run 'iqr analyze --refresh' to rebuild it.", file=sys.stderr)
        return EXIT_FAILED
    print(profile_summary(profile))
    return EXIT_PASSED


def cmd_validate(args: argparse.Namespace) -> int:
    root = str(Path(args.path).resolve())
    config = load_config(args.config, root)
    quality = config.quality.with_threshold(args.threshold)
    max_iterations = args.max_iterations if args.max_iterations is not None else config.max_iterations

    files = args.files
    if not files:
        try:
            files = changed_files(root)
        except GitUnavailable as e:
            print(f"No files given and no git changes available: {e}", file=sys.stderr)
            return EXIT_ERROR
        if not files:
            print("No files to validate")
            return EXIT_PASSED

    profile = load_or_build_profile(
        root, config, args.cache or default_cache_path(root), auto_build=args.auto_analyze,
    )
    summary = run_refinement(
        files,
        profile,
        quality,
        iteration=args.iteration,
        max_iterations=max_iterations,
        project_root=root,
        workers=args.workers,
    )
    print(render(summary, args.format, check_only=args.check_only))
    return EXIT_PASSED if summary.all_passed else EXIT_FAILED


def cmd_serve(args: argparse.Namespace) -> int:
    from .server import run_server
    run_server(http=args.http, port=args.port)
    return EXIT_PASSED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iqr",
        description="Learn a codebase's conventions and score changed files against them",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # analyze
    p = sub.add_parser("analyze", help="Learn the project's patterns and cache them")
    p.add_argument("path", nargs="?", default=".", help="Project root (default: .)")
    p.add_argument("--cache", help="Pattern cache path (default: <project>/.iqr/cache/patterns.json)")
    p.add_argument("--config", help="Refinement rules (default: <project>/.iqr/refinement-rules.json)")
    p.add_argument("--refresh", action="store_true", help="Re-analyze even if the cache is fresh")

    # show
    p = sub.add_parser("show", help="Show the cached pattern profile")
    p.add_argument("path", nargs="?", default=".", help="Project root")
    p.add_argument("--cache", help="Pattern cache path")

    # validate
    p = sub.add_parser("validate", help="Score files against the pattern profile")
    p.add_argument("files", nargs="*", help="Files to validate (default: changed files from git)")
    p.add_argument("--path", default=".", help="Project root")
    p.add_argument("--cache", help="Pattern cache path")
    p.add_argument("--config", help="Refinement rules")
    p.add_argument("--threshold", type=int, help="Minimum passing score (default: 75)")
    p.add_argument("--iteration", type=int, default=1, help="Current refinement iteration (default: 1)")
    p.add_argument("--max-iterations", type=int, help="Iterations before escalating (default: 3)")
    p.add_argument("--format", choices=FORMATS, default="narrative-summary", help="Output format")
    p.add_argument("--auto-analyze", action="store_true", help="Build the profile if no fresh cache exists")
    p.add_argument("--workers", type=int, default=1, help="Validate files on N threads")
    p.add_argument("--check-only", action="store_true", help="Report scores and issues without suggested fixes")

    # serve
    p = sub.add_parser("serve", help="Start MCP server")
    p.add_argument("--http", action="store_true", help="HTTP transport instead of stdio")
    p.add_argument("--port", type=int, default=8000, help="HTTP port (default: 8000)")
    return parser


def run(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger("iqr").setLevel(logging.DEBUG)

    handlers = {
        "analyze": cmd_analyze,
        "show": cmd_show,
        "validate": cmd_validate,
        "serve": cmd_serve,
    }

    try:
        return handlers[args.command](args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except IqrError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except Exception:
        log.exception("Unexpected error running %s", args.command)
        return EXIT_ERROR


def main() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(run())


if __name__ == "__main__":
    main()
