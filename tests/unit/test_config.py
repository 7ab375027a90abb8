#
# tests/unit/test_config.py
#
"""Tests for TOML configuration loading."""

from pathlib import Path

import pytest

from pymstest.config import GlobalConfig, PyMSTestConfig, RunConfig, load_config
from pymstest.exceptions import ConfigurationError

FULL_CONFIG = """
[global]
log_level = "debug"
language = "de"

[run]
container = "bin/Tests.dll"
test_lists = ["Smoke"]
categories = ["Unit", "&!Slow"]
tests = ["Calc.Adds"]
no_isolation = true
details = ["owner", "errorMessage"]
working_dir = "work"
timeout = 120

[run.publish]
server = "http://tfs:8080"
build_name = "Nightly_1"
flavor = "Debug"
platform = "AnyCPU"
team_project = "Calc"
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "pymstest.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_full_config(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, FULL_CONFIG))

    assert config.global_config.language == "de"
    assert config.global_config.numeric_log_level == 10
    run = config.run
    assert run.container == "bin/Tests.dll"
    assert run.categories == ["Unit", "&!Slow"]
    assert run.working_dir == (tmp_path / "work").resolve()
    assert run.timeout == 120
    assert run.publish is not None and run.publish.team_project == "Calc"


def test_config_to_options(tmp_path: Path) -> None:
    options = load_config(_write(tmp_path, FULL_CONFIG)).run.to_options()

    args = options.build_arguments()
    assert args[:6] == [
        "/nologo",
        "/testcontainer:bin/Tests.dll",
        "/testlist:Smoke",
        "/category:Unit&!Slow",
        "/test:Calc.Adds",
        "/noisolation",
    ]
    assert "/detail:errormessage" in args
    assert "/publish:http://tfs:8080" in args


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, ""))
    assert config.run == RunConfig()
    assert config.global_config == GlobalConfig()


def test_single_string_becomes_list(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, '[run]\ncategories = "Unit"\n'))
    assert config.run.categories == ["Unit"]


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("[run\n", "Invalid TOML"),
        ("[extra]\n", "Unknown section"),
        ("[run]\nbogus = 1\n", "Unknown key"),
        ("[global]\nlog_level = 'LOUD'\n", "Invalid log_level"),
        ("[run]\ncontainer = 'a.dll'\nmetadata = 'b.vsmdi'\n", "Only one of"),
        ("[run]\ntimeout = -5\n", "positive"),
        ("[run]\ntests = [1, 2]\n", "list of strings"),
        ("[run.publish]\nserver = 'x'\n", "publish"),
        ("run = 3\n", "must be a table"),
    ],
)
def test_invalid_config(tmp_path: Path, text: str, message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        load_config(_write(tmp_path, text))


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "missing.toml")


def test_default_root_config() -> None:
    config = PyMSTestConfig()
    assert config.run.container is None
    assert config.global_config.language == "en"
