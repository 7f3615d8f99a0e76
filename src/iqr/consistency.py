"""Consistency checks: does the file follow the conventions the project already uses?"""

from .context import CheckContext
from .lexical import MODULE_EXTENSIONS, NAMED_EXTENSIONS, classify_import, file_stem, find_imports, imports_grouped
from .models import CheckResult, Issue, Severity
from .naming import conforms, convert_case, detect_case, find_functions, is_candidate

FILE_NAME_PENALTY = 15
FUNCTION_NAME_PENALTY = 5
MISPLACED_FILE_PENALTY = 20
IMPORT_STYLE_PENALTY = 10
IMPORT_GROUPING_PENALTY = 5


def check_naming(ctx: CheckContext) -> CheckResult:
    result = CheckResult()

    files_dom = ctx.enforced("naming.files")
    stem = file_stem(ctx.name)
    if (
        files_dom is not None
        and ctx.extension in NAMED_EXTENSIONS
        and is_candidate(stem)
        and not conforms(stem, files_dom.pattern)
    ):
        expected = convert_case(stem, files_dom.pattern)
        suggested_name = expected + ctx.name[len(stem):]
        result.deduct(
            FILE_NAME_PENALTY,
            Issue(
                type="naming",
                severity=Severity.MEDIUM,
                message=(
                    f"File name '{ctx.name}' is {detect_case(stem)}; project files use "
                    f"{files_dom.pattern} ({files_dom.confidence:.0%} of {files_dom.total_samples})"
                ),
                current_value=ctx.name,
                suggested_value=suggested_name,
            ),
            f"Rename {ctx.name} to {suggested_name}",
        )

    funcs_dom = ctx.enforced("naming.functions")
    if funcs_dom is not None:
        seen: set[str] = set()
        for name, line in find_functions(ctx.content):
            if name in seen or not is_candidate(name) or conforms(name, funcs_dom.pattern):
                continue
            seen.add(name)
            expected = convert_case(name, funcs_dom.pattern)
            result.deduct(
                FUNCTION_NAME_PENALTY,
                Issue(
                    type="naming",
                    severity=Severity.LOW,
                    message=f"Function '{name}' is {detect_case(name)}; project functions use {funcs_dom.pattern}",
                    line=line,
                    current_value=name,
                    suggested_value=expected,
                ),
                f"Rename function {name} to {expected}",
            )
    return result


def _within(directory: str, target: str) -> bool:
    return directory == target or directory.startswith(target + "/")


def check_structure(ctx: CheckContext) -> CheckResult:
    result = CheckResult()
    location = ctx.profile.structure.file_locations.get(ctx.extension)
    if location is None or location.count < ctx.config.policy.min_files_for_pattern:
        return result

    directory = ctx.directory
    allowed = [location.primary, *location.alternative_dirs()]
    if any(_within(directory, d) for d in allowed):
        return result

    result.deduct(
        MISPLACED_FILE_PENALTY,
        Issue(
            type="structure",
            severity=Severity.MEDIUM,
            message=(
                f"{ctx.extension} files usually live in '{location.primary}' "
                f"({location.count} files), not '{directory}'"
            ),
            current_value=directory,
            suggested_value=location.primary,
        ),
        f"Consider moving {ctx.name} to {location.primary}/",
    )
    return result


def check_imports(ctx: CheckContext) -> CheckResult:
    result = CheckResult()
    if ctx.extension not in MODULE_EXTENSIONS:
        return result

    imports = find_imports(ctx.content, ctx.extension)
    policy = ctx.config.policy

    if len(imports) > 2:
        styles = [classify_import(path, policy.alias_prefixes) for _, path in imports]
        relative = styles.count("relative")
        alias = styles.count("alias")
        dom = ctx.profile.dominant("imports.style")
        if dom is not None and dom.pattern == "alias" and dom.confidence >= policy.confidence_threshold and relative > alias:
            prefix = policy.alias_prefixes[0] if policy.alias_prefixes else "@/"
            result.deduct(
                IMPORT_STYLE_PENALTY,
                Issue(
                    type="imports",
                    severity=Severity.LOW,
                    message=f"{relative} relative imports vs {alias} alias imports; project prefers alias imports",
                    current_value="relative",
                    suggested_value="alias",
                ),
                f"Use alias imports ({prefix}...) instead of relative paths",
            )

    if ctx.profile.imports.grouping_detected and len(imports) > 3 and not imports_grouped(imports, ctx.lines):
        result.deduct(
            IMPORT_GROUPING_PENALTY,
            Issue(
                type="imports",
                severity=Severity.LOW,
                message=f"{len(imports)} imports with no blank-line grouping",
                line=imports[0][0] + 1,
            ),
            "Group imports (external, internal, relative) separated by blank lines",
        )
    return result
