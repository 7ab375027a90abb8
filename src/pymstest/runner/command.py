#
# src/pymstest/runner/command.py
#
"""
Builds the mstest.exe command line from run options.
"""
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, TypeAlias

import structlog
from attrs import define, field, mutable

from pymstest.exceptions import ConfigurationError, ExecutableNotFoundError
from pymstest.parsing.localization import DEFAULT_LANGUAGE

log = structlog.get_logger("runner.command")

# Newest first; the first variable that is set wins.
VS_TOOLS_ENV_VARS = ("VS120COMNTOOLS", "VS110COMNTOOLS", "VS100COMNTOOLS")
EXE_RELATIVE_PATH = Path("..") / "IDE" / "mstest.exe"

# Detail names understood by /detail:, in the spelling results should use.
KNOWN_DETAILS: tuple[str, ...] = (
    "adapter",
    "computerName",
    "debugTrace",
    "description",
    "displayText",
    "duration",
    "errorMessage",
    "errorStackTrace",
    "executionID",
    "groups",
    "ID",
    "isAutomated",
    "link",
    "longText",
    "name",
    "outcomeText",
    "owner",
    "parentExeCID",
    "priority",
    "projectName",
    "projectRelativePath",
    "readOnly",
    "spoolMessage",
    "stderr",
    "stdout",
    "storage",
    "testCategoryID",
    "testName",
    "testType",
    "traceInfo",
)
_KNOWN_DETAILS_LOOKUP = {name.lower(): name for name in KNOWN_DETAILS}

CATEGORY_OPERATORS = ("&!", "&", "|", "!")  # Longest first for prefix matching.


def _require_non_empty(inst: Any, attr: Any, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Publish option '{attr.name}' must be a non-empty string")


# --- Test source ---
@define(frozen=True, slots=True)
class TestContainer:
    """Run the tests in an assembly (/testcontainer:)."""

    __test__ = False

    path: str = field(converter=str)

    def to_argument(self) -> str:
        return f"/testcontainer:{self.path}"


@define(frozen=True, slots=True)
class TestMetadata:
    """Run the tests described by a .vsmdi file (/testmetadata:)."""

    __test__ = False

    path: str = field(converter=str)

    def to_argument(self) -> str:
        return f"/testmetadata:{self.path}"


TestSource: TypeAlias = TestContainer | TestMetadata


@define(frozen=True, slots=True)
class PublishOptions:
    """Settings for publishing results to a TFS server."""

    server: str = field(validator=_require_non_empty)
    build_name: str = field(validator=_require_non_empty)
    flavor: str = field(validator=_require_non_empty)
    platform: str = field(validator=_require_non_empty)
    team_project: str = field(validator=_require_non_empty)
    results_file: str | None = field(default=None)

    def to_arguments(self) -> list[str]:
        args = [
            f"/publish:{self.server}",
            f"/publishbuild:{self.build_name}",
            f"/flavor:{self.flavor}",
            f"/platform:{self.platform}",
            f"/teamproject:{self.team_project}",
        ]
        if self.results_file:
            args.append(f"/publishresultsfile:{self.results_file}")
        return args


@mutable(slots=True)
class CategoryFilter:
    """
    A /category: expression built up one category at a time.

    Stored as alternating category and operator tokens, e.g.
    ``["Unit", "&!", "Slow"]`` for ``Unit&!Slow``.
    """

    _tokens: list[str] = field(factory=list)

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> "CategoryFilter":
        """
        Builds a filter from prefixed categories such as ``["Unit", "&!Slow"]``.

        A token without an operator prefix is joined with ``&``.
        """
        category_filter = cls()
        for token in tokens:
            token = token.strip()
            if not token:
                continue
            for operator in CATEGORY_OPERATORS:
                if token.startswith(operator):
                    category_filter.append(operator, token[len(operator):])
                    break
            else:
                category_filter.append("&", token)
        return category_filter

    @property
    def tokens(self) -> list[str]:
        return list(self._tokens)

    def append(self, operator: str, category: str) -> "CategoryFilter":
        if operator not in CATEGORY_OPERATORS:
            raise ConfigurationError(f"Unknown category operator '{operator}'")
        if not category:
            raise ConfigurationError("Category name must not be empty")
        if self._tokens:
            self._tokens.extend((operator, category))
        else:
            self._tokens = [category]
        return self

    def set(self, category: str) -> "CategoryFilter":
        """Replaces the filter with a single category."""
        self._tokens = [category]
        return self

    def and_(self, category: str) -> "CategoryFilter":
        return self.append("&", category)

    def or_(self, category: str) -> "CategoryFilter":
        return self.append("|", category)

    def not_(self, category: str) -> "CategoryFilter":
        return self.append("!", category)

    def and_not(self, category: str) -> "CategoryFilter":
        return self.append("&!", category)

    def remove(self, category: str) -> "CategoryFilter":
        """Removes a category along with the operator that joins it."""
        # Categories sit at even positions, operators between them.
        positions = [i for i in range(0, len(self._tokens), 2) if self._tokens[i] == category]
        if not positions:
            return self
        index = positions[0]
        if index > 0:
            del self._tokens[index - 1 : index + 1]
        else:
            del self._tokens[0:2]
        return self

    def clear(self) -> "CategoryFilter":
        self._tokens = []
        return self

    @property
    def expression(self) -> str:
        return "".join(self._tokens)

    def __bool__(self) -> bool:
        return bool(self._tokens)

    def __str__(self) -> str:
        return self.expression


# --- Resolved command ---
@define(frozen=True, slots=True)
class RunCommand:
    """Everything the process runner needs for one invocation."""

    executable: str = field(converter=str)
    arguments: tuple[str, ...] = field(converter=tuple, factory=tuple)
    working_dir: Path | None = field(default=None)
    details: tuple[str, ...] = field(converter=tuple, factory=tuple)
    language: str = field(default=DEFAULT_LANGUAGE)

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.arguments]


@mutable(slots=True)
class MSTestOptions:
    """Mutable set of options for one mstest.exe run."""

    source: TestSource | None = field(default=None)
    test_lists: list[str] = field(factory=list)
    categories: CategoryFilter = field(factory=CategoryFilter)
    tests: list[str] = field(factory=list)
    no_isolation: bool = field(default=False)
    test_settings: str | None = field(default=None)
    run_config: str | None = field(default=None)
    results_file: str | None = field(default=None)
    details: list[str] = field(factory=list)
    publish: PublishOptions | None = field(default=None)

    def add_test_list(self, test_list: str) -> "MSTestOptions":
        if test_list not in self.test_lists:
            self.test_lists.append(test_list)
        return self

    def remove_test_list(self, test_list: str) -> "MSTestOptions":
        if test_list in self.test_lists:
            self.test_lists.remove(test_list)
        return self

    def add_test(self, test: str) -> "MSTestOptions":
        if test not in self.tests:
            self.tests.append(test)
        return self

    def remove_test(self, test: str) -> "MSTestOptions":
        """Removes a test from the explicit list; it is not excluded from the run."""
        if test in self.tests:
            self.tests.remove(test)
        return self

    def enable_detail(self, name: str) -> "MSTestOptions":
        """Requests a /detail: property. Known names are normalized to their canonical spelling."""
        canonical = _KNOWN_DETAILS_LOOKUP.get(name.lower(), name)
        if canonical.lower() not in (d.lower() for d in self.details):
            self.details.append(canonical)
        return self

    def disable_detail(self, name: str) -> "MSTestOptions":
        self.details = [d for d in self.details if d.lower() != name.lower()]
        return self

    @property
    def detail_names(self) -> tuple[str, ...]:
        """Names used to normalize attribute keys in parsed results."""
        extra = tuple(d for d in self.details if d.lower() not in _KNOWN_DETAILS_LOOKUP)
        return KNOWN_DETAILS + extra

    def build_arguments(self) -> list[str]:
        """Returns the argument list for mstest.exe, without the executable."""
        if self.source is None:
            raise ConfigurationError("Must specify a test container or test metadata")

        args = ["/nologo", self.source.to_argument()]
        args.extend(f"/testlist:{name}" for name in self.test_lists)
        if self.categories:
            args.append(f"/category:{self.categories.expression}")
        args.extend(f"/test:{name}" for name in self.tests)
        if self.no_isolation:
            args.append("/noisolation")
        if self.test_settings:
            args.append(f"/testsettings:{self.test_settings}")
        if self.run_config:
            args.append(f"/runconfig:{self.run_config}")
        if self.results_file:
            args.append(f"/resultsfile:{self.results_file}")
        args.extend(f"/detail:{name.lower()}" for name in self.details)
        if self.publish:
            args.extend(self.publish.to_arguments())
        return args

    def to_command(
        self,
        executable: str | Path,
        working_dir: Path | None = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> RunCommand:
        arguments = self.build_arguments()
        log.debug(
            "Built mstest command",
            executable=str(executable),
            arguments=" ".join(arguments),
        )
        return RunCommand(
            executable=executable,
            arguments=arguments,
            working_dir=working_dir,
            details=self.detail_names,
            language=language,
        )


def resolve_executable(
    env: Mapping[str, str] | None = None,
    override: str | Path | None = None,
) -> Path:
    """
    Locates mstest.exe.

    An explicit override is used as-is when it exists. Otherwise the Visual
    Studio tools directory is taken from the first VS*COMNTOOLS variable that
    is set. Nothing is cached; call once per run and pass the result on.
    """
    if override:
        exe_path = Path(override)
        if not exe_path.exists():
            raise ExecutableNotFoundError(f"Could not find mstest.exe at {exe_path}", [str(exe_path)])
        return exe_path

    environ = os.environ if env is None else env
    tools_dir = next((environ[name] for name in VS_TOOLS_ENV_VARS if environ.get(name)), None)
    if not tools_dir:
        raise ExecutableNotFoundError(
            "Could not find path to Visual Studio tools", list(VS_TOOLS_ENV_VARS)
        )

    exe_path = Path(os.path.normpath(Path(tools_dir) / EXE_RELATIVE_PATH))
    if not exe_path.exists():
        raise ExecutableNotFoundError(f"Could not find mstest.exe at {exe_path}", [str(exe_path)])
    log.debug("Resolved mstest.exe", path=str(exe_path))
    return exe_path

# 🔼⚙️
