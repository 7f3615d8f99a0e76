"""Tests for manifest-based tech stack detection."""

import json

from iqr.techstack import detect_tech_stack


class TestDetectTechStack:
    def test_package_json(self, write_files, tmp_path):
        write_files({
            "package.json": json.dumps({
                "dependencies": {"react": "18", "@prisma/client": "5"},
                "devDependencies": {"typescript": "5", "vitest": "1"},
            }),
        })
        stack = detect_tech_stack(str(tmp_path))
        assert stack.languages == ["typescript"]
        assert stack.frameworks == ["react"]
        assert stack.testing == ["vitest"]
        assert stack.database == ["prisma"]

    def test_tsconfig_means_typescript(self, write_files, tmp_path):
        write_files({"package.json": "{}", "tsconfig.json": "{}"})
        assert detect_tech_stack(str(tmp_path)).languages == ["typescript"]

    def test_python_manifests(self, write_files, tmp_path):
        write_files({
            "pyproject.toml": '[project]\ndependencies = ["Django>=5", "psycopg[binary]"]\n',
            "requirements.txt": "pytest\n",
        })
        stack = detect_tech_stack(str(tmp_path))
        assert stack.languages == ["python"]
        assert stack.frameworks == ["django"]
        assert stack.testing == ["pytest"]
        assert stack.database == ["postgresql"]

    def test_several_ecosystems(self, write_files, tmp_path):
        write_files({
            "composer.json": json.dumps({"require": {"laravel/framework": "^10"}}),
            "go.mod": "module x\n\nrequire github.com/gin-gonic/gin v1.9.0\n",
        })
        stack = detect_tech_stack(str(tmp_path))
        assert stack.languages == ["php", "go"]
        assert stack.frameworks == ["laravel", "gin"]

    def test_malformed_manifest_is_skipped(self, write_files, tmp_path):
        write_files({"package.json": "{not json", "Cargo.toml": "[dependencies]\nactix-web = \"4\"\n"})
        stack = detect_tech_stack(str(tmp_path))
        assert stack.languages == ["rust"]
        assert stack.frameworks == ["actix"]

    def test_no_manifests(self, tmp_path):
        stack = detect_tech_stack(str(tmp_path))
        assert (stack.languages, stack.frameworks, stack.testing, stack.database) == ([], [], [], [])
