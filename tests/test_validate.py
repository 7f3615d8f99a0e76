"""Tests for per-file validation and score aggregation."""

import pytest

from iqr.config import QualityConfig
from iqr.models import Severity
from iqr.validate import round_half_up, validate_content, validate_file, weighted_overall


@pytest.fixture
def pascal_files(make_profile):
    return make_profile(naming_files={"PascalCase": 18, "camelCase": 2})


class TestRounding:
    @pytest.mark.parametrize("value, expected", [(74.5, 75), (68.5, 69), (2.5, 3), (92.49, 92), (0, 0)])
    def test_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_weighted_overall_ignores_unweighted_dimensions(self):
        assert weighted_overall({"security": 75, "consistency": 0}, {"security": 1.0}) == 75
        assert weighted_overall({"security": 75}, {}) == 0


class TestValidateContent:
    def test_clean_file_scores_100(self, empty_profile, quality):
        report = validate_content("export const answer = 42\n", "src/answer.ts", empty_profile, quality)
        assert report.dimension_scores == {
            "consistency": 100, "completeness": 100, "security": 100, "maintainability": 100,
        }
        assert report.overall_score == 100
        assert report.passed
        assert report.issues == []
        assert report.error is None

    def test_misnamed_file(self, pascal_files, quality):
        report = validate_content("export const x = 1\n", "src/components/userProfile.tsx", pascal_files, quality)
        assert report.dimension_scores["consistency"] == 95
        assert report.overall_score == 98
        assert report.passed

    def test_hardcoded_secret(self, empty_profile, quality):
        report = validate_content('api_key = "AKIA1234567890ABCD"\n', "settings.py", empty_profile, quality)
        assert report.dimension_scores["security"] == 75
        assert report.overall_score == 94
        assert report.passed
        assert report.issues[0].severity is Severity.CRITICAL

    def test_empty_catch(self, empty_profile, quality):
        report = validate_content("try {\n  run();\n} catch (e) {}\n", "src/job.ts", empty_profile, quality)
        assert report.dimension_scores["completeness"] == 93
        assert report.overall_score == 98

    def test_long_file(self, empty_profile, quality):
        report = validate_content("x = 1\n" * 600, "src/big.py", empty_profile, quality)
        assert report.dimension_scores["maintainability"] == 85
        assert report.overall_score == 98

    def test_threshold_boundary(self, pascal_files, quality):
        content, file = "export const x = 1\n", "src/userProfile.tsx"
        assert validate_content(content, file, pascal_files, quality.with_threshold(98)).passed
        assert not validate_content(content, file, pascal_files, quality.with_threshold(99)).passed

    def test_custom_weights(self, empty_profile):
        config = QualityConfig(weights={"security": 1.0})
        report = validate_content('api_key = "AKIA1234567890ABCD"\n', "settings.py", empty_profile, config)
        assert report.overall_score == 75

    def test_issues_sorted_and_attributed(self, empty_profile, quality):
        content = "const s = '" + "a" * 130 + "'\neval(a)\neval(b)\n"
        report = validate_content(content, "src/run.ts", empty_profile, quality)

        assert [i.severity for i in report.issues] == [Severity.CRITICAL, Severity.CRITICAL, Severity.LOW]
        assert [i.line for i in report.issues[:2]] == [2, 3]
        assert all(i.file == "src/run.ts" for i in report.issues)
        assert len(report.suggestions) == len(set(report.suggestions))
        assert report.suggestions[0].startswith("Avoid eval()")

    def test_report_dict_layout(self, empty_profile, quality):
        report = validate_content('api_key = "AKIA1234567890ABCD"\n', "settings.py", empty_profile, quality)
        data = report.to_dict()
        assert set(data) == {"file", "scores", "overall_score", "issues", "suggestions", "passed"}
        assert data["issues"][0]["severity"] == "critical"
        assert data["issues"][0]["current"] == "hardcoded-secret"


class TestValidateFile:
    def test_relative_path_is_resolved_against_project(self, write_files, tmp_path, empty_profile, quality):
        write_files({"src/run.ts": "eval(x)\n"})
        report = validate_file("src/run.ts", empty_profile, quality, project_root=str(tmp_path))
        assert report.file == "src/run.ts"
        assert report.issues[0].file == "src/run.ts"
        assert report.dimension_scores["security"] == 75

    def test_absolute_path(self, write_files, tmp_path, empty_profile, quality):
        write_files({"lib/ok.py": "x = 1\n"})
        report = validate_file(str(tmp_path / "lib" / "ok.py"), empty_profile, quality, project_root=str(tmp_path))
        assert report.file == "lib/ok.py"
        assert report.overall_score == 100

    def test_missing_file_fails_with_error(self, tmp_path, empty_profile, quality):
        report = validate_file("gone.ts", empty_profile, quality, project_root=str(tmp_path))
        assert report.overall_score == 0
        assert report.dimension_scores == {}
        assert not report.passed
        assert report.error.startswith("cannot validate gone.ts")
        assert report.to_dict()["error"] == report.error

    def test_invalid_utf8_fails_with_error(self, write_files, tmp_path, empty_profile, quality):
        write_files({"blob.py": b"x = '\xff\xfe'\n"})
        report = validate_file("blob.py", empty_profile, quality, project_root=str(tmp_path))
        assert report.overall_score == 0
        assert not report.passed
        assert "not valid UTF-8" in report.error
