"""Configuration value objects and the refinement-rules loader.

Configuration is always passed explicitly into each component; nothing in
iqr reads a module-level "current config".
"""

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from .errors import ConfigurationError
from .models import DIMENSIONS

log = logging.getLogger(__name__)

CONFIG_DIR = ".iqr"
CONFIG_FILENAME = "refinement-rules.json"
CACHE_FILENAME = "patterns.json"


def default_config_path(project_root: str) -> str:
    return str(Path(project_root).resolve() / CONFIG_DIR / CONFIG_FILENAME)


def default_cache_path(project_root: str) -> str:
    return str(Path(project_root).resolve() / CONFIG_DIR / "cache" / CACHE_FILENAME)


@dataclass(frozen=True)
class CollectorConfig:
    skip_directories: frozenset[str] = frozenset({
        "node_modules", "vendor", "dist", "build", ".git",
        "__pycache__", "venv", ".venv", "target", "coverage",
    })
    skip_file_patterns: tuple[str, ...] = ("*.min.js", "*.min.css", "*.map", "*.lock")
    max_files: int = 500
    max_depth: int = 10
    respect_gitignore: bool = True


@dataclass(frozen=True)
class PatternPolicy:
    min_files_for_pattern: int = 3          # samples a learned pattern needs before it is enforced
    confidence_threshold: float = 0.7       # dominant patterns below this are advisory only
    max_files_to_sample: int = 200          # code files read for content analysis
    alias_prefixes: tuple[str, ...] = ("@/", "~/")


@dataclass(frozen=True)
class QualityConfig:
    threshold: int = 75
    weights: dict[str, float] = field(default_factory=lambda: {
        "consistency": 0.35,
        "completeness": 0.25,
        "security": 0.25,
        "maintainability": 0.15,
    })
    policy: PatternPolicy = field(default_factory=PatternPolicy)

    def with_threshold(self, threshold: int | None) -> "QualityConfig":
        if threshold is None:
            return self
        cfg = replace(self, threshold=threshold)
        validate_quality(cfg)
        return cfg


@dataclass(frozen=True)
class RefinementConfig:
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    policy: PatternPolicy = field(default_factory=PatternPolicy)
    quality: QualityConfig = field(default_factory=QualityConfig)
    max_iterations: int = 3
    cache_ttl_hours: float = 24.0
    save_pattern_cache: bool = True


def validate_quality(cfg: QualityConfig) -> None:
    if not 0 <= cfg.threshold <= 100:
        raise ConfigurationError(f"threshold must be between 0 and 100, got {cfg.threshold}")
    unknown = set(cfg.weights) - set(DIMENSIONS)
    if unknown:
        raise ConfigurationError(f"unknown quality dimensions: {', '.join(sorted(unknown))}")
    if any(w < 0 for w in cfg.weights.values()):
        raise ConfigurationError("dimension weights must not be negative")
    if sum(cfg.weights.values()) <= 0:
        raise ConfigurationError("dimension weights must sum to a positive number")


def _validate(cfg: RefinementConfig) -> RefinementConfig:
    validate_quality(cfg.quality)
    p = cfg.policy
    if not 0.0 <= p.confidence_threshold <= 1.0:
        raise ConfigurationError(f"confidence_threshold must be in [0, 1], got {p.confidence_threshold}")
    if p.min_files_for_pattern < 1 or p.max_files_to_sample < 1:
        raise ConfigurationError("min_files_for_pattern and max_files_to_sample must be positive")
    c = cfg.collector
    if c.max_files < 1 or c.max_depth < 0:
        raise ConfigurationError("max_files_to_scan must be positive and max_depth non-negative")
    if cfg.max_iterations < 1:
        raise ConfigurationError(f"max_iterations must be at least 1, got {cfg.max_iterations}")
    if cfg.cache_ttl_hours < 0:
        raise ConfigurationError("pattern_cache_ttl_hours must not be negative")
    return cfg


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{name}' must be an object")
    return value


def config_from_dict(raw: dict) -> RefinementConfig:
    """Merge a refinement-rules document over the defaults and validate it."""
    if not isinstance(raw, dict):
        raise ConfigurationError("configuration must be a JSON object")

    base = RefinementConfig()
    detection = _section(raw, "pattern_detection")
    thresholds = _section(raw, "quality_thresholds")
    loop = _section(raw, "refinement_loop")
    output = _section(raw, "output")

    try:
        collector = replace(
            base.collector,
            skip_directories=frozenset(detection.get("skip_directories", base.collector.skip_directories)),
            skip_file_patterns=tuple(detection.get("skip_files", base.collector.skip_file_patterns)),
            max_files=int(detection.get("max_files_to_scan", base.collector.max_files)),
            max_depth=int(detection.get("max_depth", base.collector.max_depth)),
            respect_gitignore=bool(detection.get("respect_gitignore", base.collector.respect_gitignore)),
        )
        policy = replace(
            base.policy,
            min_files_for_pattern=int(detection.get("min_files_for_pattern", base.policy.min_files_for_pattern)),
            confidence_threshold=float(detection.get("confidence_threshold", base.policy.confidence_threshold)),
            max_files_to_sample=int(detection.get("max_files_to_sample", base.policy.max_files_to_sample)),
            alias_prefixes=tuple(detection.get("alias_prefixes", base.policy.alias_prefixes)),
        )

        weights = dict(base.quality.weights)
        dims = thresholds.get("dimensions") or {}
        if not isinstance(dims, dict):
            raise ConfigurationError("'quality_thresholds.dimensions' must be an object")
        if dims:
            weights = {name: float((spec or {}).get("weight", 0.0)) for name, spec in dims.items()}
        quality = QualityConfig(
            threshold=int(thresholds.get("minimum_score", base.quality.threshold)),
            weights=weights,
            policy=policy,
        )

        cfg = RefinementConfig(
            collector=collector,
            policy=policy,
            quality=quality,
            max_iterations=int(loop.get("max_iterations", base.max_iterations)),
            cache_ttl_hours=float(output.get("pattern_cache_ttl_hours", base.cache_ttl_hours)),
            save_pattern_cache=bool(output.get("save_pattern_cache", base.save_pattern_cache)),
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"invalid configuration value: {e}") from e

    return _validate(cfg)


def load_config(path: str | None = None, project_root: str = ".") -> RefinementConfig:
    """
    Load refinement rules.

    An explicit *path* must exist and parse. Without one, the project's
    ``.iqr/refinement-rules.json`` is used when present, defaults otherwise.
    """
    explicit = path is not None
    cfg_path = Path(path) if explicit else Path(default_config_path(project_root))

    if not cfg_path.exists():
        if explicit:
            raise ConfigurationError(f"config file not found: {cfg_path}")
        log.debug("No config at %s, using defaults", cfg_path)
        return RefinementConfig()

    try:
        raw = json.loads(cfg_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"cannot read config {cfg_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"config {cfg_path} is not valid JSON: {e}") from e

    log.debug("Loaded refinement rules from %s", cfg_path)
    return config_from_dict(raw)
