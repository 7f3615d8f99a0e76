"""CheckContext — the single argument every quality sub-check receives."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from .config import QualityConfig
from .models import CheckResult, DominantPattern, PatternProfile


@dataclass(frozen=True)
class CheckContext:
    content: str
    file: str                       # relative to project root, forward slashes
    profile: PatternProfile
    config: QualityConfig
    lines: list[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", self.content.splitlines())

    @property
    def name(self) -> str:
        return PurePosixPath(self.file).name

    @property
    def extension(self) -> str:
        return PurePosixPath(self.file).suffix

    @property
    def directory(self) -> str:
        parent = PurePosixPath(self.file).parent.as_posix()
        return parent if parent else "."

    def enforced(self, category: str) -> DominantPattern | None:
        """The category's dominant pattern, if it is confident and sampled enough to act on."""
        dom = self.profile.dominant(category)
        policy = self.config.policy
        if dom is None:
            return None
        if dom.confidence < policy.confidence_threshold or dom.total_samples < policy.min_files_for_pattern:
            return None
        return dom


DimensionCheck = Callable[[CheckContext], CheckResult]
