"""Tech-stack detection from well-known manifest files at the project root."""

import json
import logging
from pathlib import Path

from .models import TechStack

log = logging.getLogger(__name__)

# dependency name → (bucket, label)
_NPM_DEPS = {
    "next": ("frameworks", "nextjs"),
    "react": ("frameworks", "react"),
    "vue": ("frameworks", "vue"),
    "@angular/core": ("frameworks", "angular"),
    "express": ("frameworks", "express"),
    "fastify": ("frameworks", "fastify"),
    "svelte": ("frameworks", "svelte"),
    "nuxt": ("frameworks", "nuxt"),
    "jest": ("testing", "jest"),
    "vitest": ("testing", "vitest"),
    "mocha": ("testing", "mocha"),
    "cypress": ("testing", "cypress"),
    "playwright": ("testing", "playwright"),
    "@playwright/test": ("testing", "playwright"),
    "prisma": ("database", "prisma"),
    "@prisma/client": ("database", "prisma"),
    "mongoose": ("database", "mongodb"),
    "pg": ("database", "postgresql"),
    "mysql2": ("database", "mysql"),
    "drizzle-orm": ("database", "drizzle"),
    "typeorm": ("database", "typeorm"),
}

_PY_MARKERS = {
    "django": ("frameworks", "django"),
    "flask": ("frameworks", "flask"),
    "fastapi": ("frameworks", "fastapi"),
    "pytest": ("testing", "pytest"),
    "sqlalchemy": ("database", "sqlalchemy"),
    "psycopg": ("database", "postgresql"),
    "duckdb": ("database", "duckdb"),
}


def _add(stack: TechStack, bucket: str, label: str) -> None:
    values = getattr(stack, bucket)
    if label not in values:
        values.append(label)


def _from_package_json(root: Path, stack: TechStack) -> None:
    pkg = json.loads((root / "package.json").read_text(encoding="utf-8"))
    deps = {**(pkg.get("dependencies") or {}), **(pkg.get("devDependencies") or {})}
    if "typescript" in deps or (root / "tsconfig.json").exists():
        _add(stack, "languages", "typescript")
    else:
        _add(stack, "languages", "javascript")
    for dep, (bucket, label) in _NPM_DEPS.items():
        if dep in deps:
            _add(stack, bucket, label)


def _from_composer(root: Path, stack: TechStack) -> None:
    _add(stack, "languages", "php")
    composer = json.loads((root / "composer.json").read_text(encoding="utf-8"))
    deps = {**(composer.get("require") or {}), **(composer.get("require-dev") or {})}
    if "laravel/framework" in deps:
        _add(stack, "frameworks", "laravel")
    if "symfony/symfony" in deps:
        _add(stack, "frameworks", "symfony")
    if "phpunit/phpunit" in deps:
        _add(stack, "testing", "phpunit")


def _from_manifest(filename: str, language: str, markers: dict[str, tuple[str, str]], lower: bool = False):
    def detect(root: Path, stack: TechStack) -> None:
        _add(stack, "languages", language)
        content = (root / filename).read_text(encoding="utf-8", errors="replace")
        if lower:
            content = content.lower()
        for marker, (bucket, label) in markers.items():
            if marker in content:
                _add(stack, bucket, label)
    return detect


_DETECTORS = {
    "package.json": _from_package_json,
    "requirements.txt": _from_manifest("requirements.txt", "python", _PY_MARKERS, lower=True),
    "pyproject.toml": _from_manifest("pyproject.toml", "python", _PY_MARKERS, lower=True),
    "setup.py": _from_manifest("setup.py", "python", _PY_MARKERS, lower=True),
    "composer.json": _from_composer,
    "Gemfile": _from_manifest("Gemfile", "ruby", {"rails": ("frameworks", "rails"), "rspec": ("testing", "rspec")}),
    "go.mod": _from_manifest("go.mod", "go", {"gin-gonic": ("frameworks", "gin"), "labstack/echo": ("frameworks", "echo")}),
    "Cargo.toml": _from_manifest("Cargo.toml", "rust", {"actix": ("frameworks", "actix"), "rocket": ("frameworks", "rocket")}),
}


def detect_tech_stack(project_root: str) -> TechStack:
    """Return languages, frameworks, test tools and databases named by root manifests."""
    root = Path(project_root)
    stack = TechStack()
    for filename, detector in _DETECTORS.items():
        if not (root / filename).is_file():
            continue
        try:
            detector(root, stack)
        except (OSError, ValueError, AttributeError) as e:
            log.debug("Cannot detect stack from %s: %s", filename, e)
    return stack
