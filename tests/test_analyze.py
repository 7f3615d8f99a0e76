"""Tests for per-category pattern analysis."""

import pytest

from iqr.analyze import (
    analyze_comments,
    analyze_error_handling,
    analyze_imports,
    analyze_naming,
    analyze_structure,
    analyze_testing,
    classify_test_name,
    is_test_file,
)
from iqr.config import PatternPolicy


class TestNamingAnalysis:
    def test_dominant_file_case_and_confidence(self, record):
        files = [record(p) for p in ("src/UserProfile.tsx", "src/UserCard.tsx", "src/userMenu.tsx")]
        dom = analyze_naming(files, []).files.dominant
        assert dom.pattern == "PascalCase"
        assert dom.confidence == pytest.approx(2 / 3)
        assert dom.total_samples == 3

    def test_non_source_files_are_not_counted(self, record):
        files = [record("README.md"), record("package.json"), record("src/UserCard.tsx")]
        assert analyze_naming(files, []).files.total == 1

    def test_single_class_has_full_confidence(self, record):
        files = [record("a/UserCard.tsx"), record("b/OrderList.tsx")]
        assert analyze_naming(files, []).files.dominant.confidence == 1.0

    def test_tie_breaks_by_enumeration_order(self, record):
        # camelCase precedes snake_case and PascalCase in the enumeration
        snake_camel = analyze_naming([record("user_card.ts"), record("userCard.ts")], []).files.dominant
        assert snake_camel.pattern == "camelCase"
        assert snake_camel.confidence == 0.5

        pascal_camel = analyze_naming([record("UserCard.ts"), record("userCard.ts")], []).files.dominant
        assert pascal_camel.pattern == "camelCase"

    def test_no_samples_means_no_dominant(self):
        assert analyze_naming([], []).functions.dominant is None

    def test_identifiers_from_sources(self, record):
        content = "function loadUser() {}\nfunction saveUser() {}\nclass UserService {}\nconst MAX_SIZE = 3\n"
        naming = analyze_naming([], [(record("src/user.ts"), content)])
        assert naming.functions.dominant.pattern == "camelCase"
        assert naming.classes.dominant.pattern == "PascalCase"
        assert naming.constants.dominant.pattern == "UPPER_CASE"
        assert naming.functions.examples[0] == {"name": "loadUser", "case": "camelCase", "file": "src/user.ts"}


class TestStructureAnalysis:
    def test_primary_location_and_alternatives(self, record):
        files = [record(p) for p in (
            "src/components/A.tsx", "src/components/B.tsx", "src/components/C.tsx",
            "src/pages/D.tsx", "lib/x.ts",
        )]
        structure = analyze_structure(files)
        loc = structure.file_locations[".tsx"]
        assert loc.primary == "src/components"
        assert loc.count == 3
        assert loc.alternatives == [{"dir": "src/pages", "count": 1}]
        assert structure.file_locations[".ts"].primary == "lib"

    def test_at_most_three_alternatives(self, record):
        files = [record("main/a.py"), record("main/b.py")] + [record(f"d{i}/x.py") for i in range(5)]
        assert len(analyze_structure(files).file_locations[".py"].alternatives) == 3

    def test_well_known_directories(self, record):
        files = [record("src/components/A.tsx"), record("src/components/ui/B.tsx"), record("tests/test_a.py")]
        dirs = analyze_structure(files).directories
        assert dirs == {"src/components": 2, "tests": 1}

    def test_common_structures(self, record):
        files = [record("manage.py"), record("mysite/settings.py"), record("mysite/urls.py")]
        assert analyze_structure(files).common_structures == ["django"]


class TestImportAnalysis:
    def test_js_styles_and_grouping(self, record):
        content = (
            "import React from 'react'\n"
            "import { x } from '@/lib/x'\n"
            "import { y } from '@/lib/y'\n"
            "\n"
            "import './styles.css'\n"
        )
        patterns = analyze_imports([(record("src/App.tsx"), content)], PatternPolicy())
        assert patterns.style.counts == {"absolute": 1, "relative": 1, "alias": 2}
        assert patterns.style.dominant.pattern == "alias"
        assert patterns.grouping_detected is True

    def test_python_relative_imports(self, record):
        content = "from .models import X\nimport os\nfrom iqr.config import Y\n"
        patterns = analyze_imports([(record("src/iqr/cli.py"), content)], PatternPolicy())
        assert patterns.style.counts == {"absolute": 2, "relative": 1, "alias": 0}

    def test_custom_alias_prefix(self, record):
        content = "import a from '#app/a'\nimport b from '#app/b'\n"
        policy = PatternPolicy(alias_prefixes=("#app/",))
        patterns = analyze_imports([(record("src/x.ts"), content)], policy)
        assert patterns.style.counts["alias"] == 2

    def test_scoped_packages_are_absolute(self, record):
        content = "import { test } from '@playwright/test'\n"
        patterns = analyze_imports([(record("e2e/x.ts"), content)], PatternPolicy())
        assert patterns.style.dominant.pattern == "absolute"

    def test_non_module_files_ignored(self, record):
        patterns = analyze_imports([(record("app.rb"), "require 'json'\n")], PatternPolicy())
        assert patterns.style.total == 0


class TestErrorHandlingAnalysis:
    def test_styles_logging_and_error_types(self, record):
        content = (
            "try {\n  a()\n} catch (e) { logger.error(e) }\n"
            "fetch().catch(handle)\n"
            "console.log('x')\n"
            "throw new ValidationError('bad')\n"
        )
        patterns = analyze_error_handling([(record("src/a.ts"), content)])
        assert patterns.style.counts == {"try-catch": 1, "promise-catch": 1}
        # equal counts: try-catch comes first
        assert patterns.style.dominant.pattern == "try-catch"
        assert patterns.logging.counts == {"structured": 1, "adhoc": 1}
        assert patterns.prefers_structured_logging is False
        assert patterns.error_types == {"ValidationError": 1}

    def test_python_logging_preference(self, record):
        content = (
            "try:\n    run()\nexcept KeyError:\n    log.warning('missing')\n"
            "logger.info('done')\n"
            "raise ValueError('x')\n"
        )
        patterns = analyze_error_handling([(record("a.py"), content)])
        assert patterns.style.counts["try-catch"] == 1
        assert patterns.prefers_structured_logging is True
        assert patterns.error_types == {"KeyError": 1, "ValueError": 1}


class TestCommentAnalysis:
    def test_documentation_rate(self, record):
        content = (
            "def documented_one():\n"
            '    """Doc."""\n'
            "    return 1\n"
            "\n\n"
            "# helper\n"
            "def commented_two():\n"
            "    return 2\n"
            "\n\n"
            "def bare_three():\n"
            "    return 3\n"
        )
        patterns = analyze_comments([(record("a.py"), content)])
        assert patterns.documented == 2
        assert patterns.undocumented == 1
        assert patterns.documentation_rate == pytest.approx(2 / 3)
        assert patterns.style.counts["docstring"] == 1
        assert patterns.style.counts["inline"] == 1

    def test_jsdoc_counts_as_documentation(self, record):
        content = "/**\n * Loads a user.\n */\nfunction loadUser() {}\n\nfunction saveUser() {}\n"
        patterns = analyze_comments([(record("a.js"), content)])
        assert (patterns.documented, patterns.undocumented) == (1, 1)
        assert patterns.style.dominant.pattern == "jsdoc"

    def test_no_functions_means_no_rate(self, record):
        assert analyze_comments([(record("a.js"), "const x = 1\n")]).documentation_rate is None


class TestTestingAnalysis:
    @pytest.mark.parametrize(
        "name, kind",
        [
            ("user.test.ts", "suffix_test"),
            ("user.spec.js", "suffix_spec"),
            ("user_spec.rb", "suffix_spec"),
            ("test_api.py", "prefix_test"),
            ("thing_test.go", "suffix_underscore_test"),
            ("latest.ts", None),
        ],
    )
    def test_classify_test_name(self, name, kind):
        assert classify_test_name(name) == kind

    def test_directory_marks_test_file(self, record):
        assert is_test_file(record("tests/conftest.py"))
        assert not is_test_file(record("contest/entry.py"))

    def test_naming_location_and_frameworks(self, record):
        files = [record(p) for p in (
            "src/user.test.ts", "tests/test_api.py", "pkg/thing_test.go",
            "spec/models/user_spec.rb", "tests/conftest.py", "src/latest.ts",
        )]
        contents = {"tests/test_api.py": "def test_x():\n    assert True\n"}
        patterns = analyze_testing(files, contents)
        assert patterns.total_test_files == 5
        assert patterns.naming.counts == {
            "suffix_test": 1, "suffix_spec": 1, "prefix_test": 1, "suffix_underscore_test": 1, "other": 1,
        }
        assert patterns.location.dominant.pattern == "tests"
        assert patterns.frameworks == {"pytest": 1}
