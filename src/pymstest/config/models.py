#
# config/models.py
#
"""
Attrs-based data models for pymstest configuration structure.
"""

import logging
from pathlib import Path
from typing import Any

from attrs import define, field

from pymstest.parsing.localization import DEFAULT_LANGUAGE
from pymstest.runner.command import (
    CategoryFilter,
    MSTestOptions,
    PublishOptions,
    TestContainer,
    TestMetadata,
)


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_positive_timeout(inst: Any, attr: Any, value: float | None) -> None:
    if value is not None and (not isinstance(value, int | float) or value <= 0):
        raise ValueError(f"Field '{attr.name}' must be a positive number of seconds, got {value}")


def _validate_single_source(inst: "RunConfig", attr: Any, value: str | None) -> None:
    if inst.container and inst.metadata:
        raise ValueError("Only one of 'container' and 'metadata' may be set")


@define(frozen=True, slots=True)
class PublishConfig:
    """Publishing settings for a TFS server."""
    server: str = field()
    build_name: str = field()
    flavor: str = field()
    platform: str = field()
    team_project: str = field()
    results_file: str | None = field(default=None)

    def to_options(self) -> PublishOptions:
        return PublishOptions(
            server=self.server,
            build_name=self.build_name,
            flavor=self.flavor,
            platform=self.platform,
            team_project=self.team_project,
            results_file=self.results_file,
        )


@define(frozen=True, slots=True)
class RunConfig:
    """What to run and how."""
    container: str | None = field(default=None)
    metadata: str | None = field(default=None, validator=_validate_single_source)
    test_lists: list[str] = field(factory=list)
    categories: list[str] = field(factory=list)  # e.g. ["Unit", "&!Slow"]
    tests: list[str] = field(factory=list)
    no_isolation: bool = field(default=False)
    test_settings: str | None = field(default=None)
    run_config: str | None = field(default=None)
    results_file: str | None = field(default=None)
    details: list[str] = field(factory=list)
    working_dir: Path | None = field(default=None)
    mstest_path: Path | None = field(default=None)
    timeout: float | None = field(default=None, validator=_validate_positive_timeout)
    publish: PublishConfig | None = field(default=None)

    def to_options(self) -> MSTestOptions:
        options = MSTestOptions(
            no_isolation=self.no_isolation,
            test_settings=self.test_settings,
            run_config=self.run_config,
            results_file=self.results_file,
            categories=CategoryFilter.from_tokens(self.categories),
        )
        if self.container:
            options.source = TestContainer(self.container)
        elif self.metadata:
            options.source = TestMetadata(self.metadata)
        for test_list in self.test_lists:
            options.add_test_list(test_list)
        for test in self.tests:
            options.add_test(test)
        for detail in self.details:
            options.enable_detail(detail)
        if self.publish:
            options.publish = self.publish.to_options()
        return options


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for pymstest."""
    log_level: str = field(default="INFO", validator=_validate_log_level)
    language: str = field(default=DEFAULT_LANGUAGE)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


@define(frozen=True, slots=True)
class PyMSTestConfig:
    """Root configuration object for pymstest."""
    run: RunConfig = field(factory=RunConfig)
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})
    config_file_path: Path | None = field(default=None)


# 🔼⚙️
