"""Tests for the bounded, deterministic file collector."""

import os
import threading
from pathlib import Path

import pytest

from iqr.config import CollectorConfig
from iqr.discover import collect_files, make_record
from iqr.errors import OperationCancelled


@pytest.fixture
def project(write_files):
    return write_files({
        "src/app.ts": "export {}\n",
        "src/util.ts": "export {}\n",
        "node_modules/lib/index.js": "module.exports = {}\n",
        ".git/config": "[core]\n",
        "dist/bundle.js": "",
        "bundle.min.js": "",
        "README.md": "# demo\n",
        "deep/a/b/c.ts": "export {}\n",
    })


def _paths(records):
    return [r.relative_path for r in records]


class TestCollectFiles:
    def test_skips_dot_and_vendor_dirs_and_minified_files(self, project):
        paths = _paths(collect_files(str(project), CollectorConfig()))
        assert paths == ["README.md", "deep/a/b/c.ts", "src/app.ts", "src/util.ts"]

    def test_order_is_stable(self, project):
        first = _paths(collect_files(str(project), CollectorConfig()))
        second = _paths(collect_files(str(project), CollectorConfig()))
        assert first == second

    def test_max_depth_prunes_deeper_directories(self, project):
        paths = _paths(collect_files(str(project), CollectorConfig(max_depth=1)))
        assert "deep/a/b/c.ts" not in paths
        assert "src/app.ts" in paths

    def test_max_files_returns_partial_result(self, project):
        assert len(collect_files(str(project), CollectorConfig(max_files=2))) == 2

    def test_gitignore_is_respected(self, write_files, tmp_path):
        write_files({
            ".gitignore": "generated/\n*.log\n",
            "generated/api.ts": "",
            "app.log": "",
            "main.ts": "",
        })
        paths = _paths(collect_files(str(tmp_path), CollectorConfig()))
        assert "main.ts" in paths
        assert "generated/api.ts" not in paths
        assert "app.log" not in paths

    def test_gitignore_can_be_disabled(self, write_files, tmp_path):
        write_files({".gitignore": "*.log\n", "app.log": ""})
        paths = _paths(collect_files(str(tmp_path), CollectorConfig(respect_gitignore=False)))
        assert "app.log" in paths

    def test_unreadable_directory_is_reported_and_skipped(self, project, monkeypatch):
        (project / "locked").mkdir()
        real_scandir = os.scandir

        def fake_scandir(path):
            if Path(path).name == "locked":
                raise PermissionError(13, "Permission denied")
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)
        errors = []
        paths = _paths(collect_files(str(project), CollectorConfig(), errors=errors))

        assert "src/app.ts" in paths
        assert len(errors) == 1
        assert errors[0].path.endswith("locked")
        assert errors[0].reason == "Permission denied"

    def test_cancel_aborts_walk(self, project):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelled):
            collect_files(str(project), CollectorConfig(), cancel=cancel)


class TestMakeRecord:
    def test_nested_file(self, tmp_path):
        rec = make_record(tmp_path / "src" / "components" / "UserCard.tsx", tmp_path)
        assert rec.relative_path == "src/components/UserCard.tsx"
        assert rec.name == "UserCard.tsx"
        assert rec.extension == ".tsx"
        assert rec.directory == "src/components"

    def test_root_file_directory_is_dot(self, tmp_path):
        rec = make_record(tmp_path / "Makefile", tmp_path)
        assert rec.directory == "."
        assert rec.extension == ""
