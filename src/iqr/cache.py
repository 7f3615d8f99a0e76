"""ProfileCache — JSON persistence for the PatternProfile.

The cache file is the only resource shared between runs (and between
threads of one run). Writes go to a temp file in the same directory and are
renamed into place, so a reader sees either the old document or the new one,
never a partial write. Anything unreadable is a cache miss, not an error.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path

from .errors import CacheError
from .models import SCHEMA_VERSION, PatternProfile

log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    # older caches carry a trailing "Z"
    ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class ProfileCache:
    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"ProfileCache({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, profile: PatternProfile) -> None:
        """Atomically replace the cache document; raises CacheError on I/O failure."""
        data = json.dumps(profile.to_dict(), indent=2)
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp = tempfile.mkstemp(prefix=".patterns-", suffix=".tmp", dir=self.path.parent)
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(data)
                    os.replace(tmp, self.path)
                except BaseException:
                    Path(tmp).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise CacheError(f"cannot write {self.path}: {e}") from e
        log.debug("Saved pattern profile to %s", self.path)

    def _read(self) -> PatternProfile:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheError(f"cannot read {self.path}: {e}") from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheError(f"{self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CacheError(f"{self.path} does not hold a JSON object")
        version = data.get("schema_version")
        if version != SCHEMA_VERSION:
            raise CacheError(f"{self.path} has schema_version {version!r}, expected {SCHEMA_VERSION}")
        try:
            return PatternProfile.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CacheError(f"{self.path} is malformed: {e!r}") from e

    def load(self) -> PatternProfile | None:
        """Return the cached profile, or None when there is no usable document."""
        with self._lock:
            if not self.path.exists():
                log.debug("No pattern cache at %s", self.path)
                return None
            try:
                return self._read()
            except CacheError as e:
                log.warning("Ignoring pattern cache: %s", e)
                return None

    def load_fresh(self, ttl_hours: float = 24.0, now: datetime | None = None) -> PatternProfile | None:
        """Like load(), but a profile older than *ttl_hours* counts as a miss."""
        profile = self.load()
        if profile is None:
            return None
        try:
            analyzed = parse_timestamp(profile.analyzed_at)
        except ValueError:
            log.warning("Ignoring pattern cache %s: bad analyzed_at %r", self.path, profile.analyzed_at)
            return None
        age_hours = ((now or utc_now()) - analyzed).total_seconds() / 3600
        if age_hours > ttl_hours:
            log.info("Pattern cache %s expired (%.1fh old, ttl %.1fh)", self.path, age_hours, ttl_hours)
            return None
        return profile

    def invalidate(self) -> bool:
        """Delete the cache document. Returns True if a file was removed."""
        with self._lock:
            try:
                self.path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                raise CacheError(f"cannot remove {self.path}: {e}") from e
        log.debug("Invalidated pattern cache %s", self.path)
        return True
