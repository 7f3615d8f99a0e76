"""Tests for the refinement pass and its summary."""

import threading
import time

import pytest

from iqr.errors import ConfigurationError, OperationCancelled
from iqr.models import FileQualityReport, SessionState
from iqr.refine import run_refinement, summarize


def _fake_validator(scores: dict[str, int], delay: bool = False):
    """Validator stub returning fixed overall scores; optionally finishes files out of order."""
    names = list(scores)

    def validate(path, profile, config, project_root):
        if delay:
            time.sleep(0.01 * (len(names) - names.index(path)))
        score = scores[path]
        return FileQualityReport(
            file=path,
            dimension_scores={"security": score},
            overall_score=score,
            issues=[],
            suggestions=[],
            passed=score >= config.threshold,
        )

    return validate


class TestRunRefinement:
    def test_first_iteration_needs_refinement(self, empty_profile, quality):
        validate = _fake_validator({"a.ts": 60, "b.ts": 70, "c.ts": 74})
        summary = run_refinement(["a.ts", "b.ts", "c.ts"], empty_profile, quality, validate=validate)

        assert summary.average_score == 68
        assert summary.passed_count == 0
        assert summary.failed_count == 3
        assert not summary.all_passed
        assert summary.needs_refinement
        assert summary.state is SessionState.NEEDS_REFINEMENT

    def test_second_iteration_passes(self, empty_profile, quality):
        validate = _fake_validator({"a.ts": 80, "b.ts": 85, "c.ts": 84})
        summary = run_refinement(["a.ts", "b.ts", "c.ts"], empty_profile, quality, iteration=2, validate=validate)

        assert summary.average_score == 83
        assert summary.all_passed
        assert not summary.needs_refinement
        assert summary.state is SessionState.PASSED

    def test_last_iteration_escalates(self, empty_profile, quality):
        validate = _fake_validator({"a.ts": 60, "b.ts": 90})
        summary = run_refinement(
            ["a.ts", "b.ts"], empty_profile, quality, iteration=3, max_iterations=3, validate=validate,
        )
        assert summary.passed_count == 1
        assert not summary.needs_refinement
        assert summary.state is SessionState.ESCALATED

    def test_passing_on_last_iteration_is_not_escalated(self, empty_profile, quality):
        validate = _fake_validator({"a.ts": 90})
        summary = run_refinement(["a.ts"], empty_profile, quality, iteration=3, max_iterations=3, validate=validate)
        assert summary.state is SessionState.PASSED

    def test_threaded_validation_keeps_file_order(self, empty_profile, quality):
        scores = {f"f{i}.ts": 70 + i for i in range(6)}
        summary = run_refinement(
            list(scores), empty_profile, quality, workers=4, validate=_fake_validator(scores, delay=True),
        )
        assert [r.file for r in summary.files] == list(scores)
        assert summary.passed_count == 1

    def test_unreadable_file_counts_as_failure(self, write_files, tmp_path, empty_profile, quality):
        write_files({"ok.py": "x = 1\n"})
        summary = run_refinement(["ok.py", "missing.py"], empty_profile, quality, project_root=str(tmp_path))

        assert summary.passed_count == 1
        assert summary.failed_count == 1
        assert summary.average_score == 50
        assert summary.files[1].error is not None

    @pytest.mark.parametrize("kwargs", [{"iteration": 0}, {"max_iterations": 0}])
    def test_invalid_iteration_bounds(self, empty_profile, quality, kwargs):
        with pytest.raises(ConfigurationError):
            run_refinement(["a.ts"], empty_profile, quality, validate=_fake_validator({"a.ts": 90}), **kwargs)

    @pytest.mark.parametrize("workers", [1, 4])
    def test_cancel(self, empty_profile, quality, workers):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelled):
            run_refinement(
                ["a.ts", "b.ts"], empty_profile, quality, workers=workers, cancel=cancel,
                validate=_fake_validator({"a.ts": 90, "b.ts": 90}),
            )


class TestSummarize:
    def test_empty_file_set(self):
        summary = summarize([], threshold=75, iteration=1, max_iterations=3)
        assert summary.average_score == 0
        assert summary.all_passed
        assert summary.state is SessionState.PASSED

    def test_summary_dict(self, empty_profile, quality):
        validate = _fake_validator({"a.ts": 60, "b.ts": 90})
        data = run_refinement(["a.ts", "b.ts"], empty_profile, quality, validate=validate).to_dict()
        assert data["summary"] == {
            "total_files": 2,
            "passed": 1,
            "failed": 1,
            "average_score": 75,
            "iteration": 1,
            "max_iterations": 3,
            "threshold": 75,
            "all_passed": False,
            "needs_refinement": True,
            "state": "needs_refinement",
        }
        assert [f["file"] for f in data["files"]] == ["a.ts", "b.ts"]
