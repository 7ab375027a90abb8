#
# config/loader.py
#
"""
Loads pymstest configuration from a TOML file into attrs models.
"""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import attrs
import structlog

from pymstest.exceptions import ConfigurationError
from pymstest.telemetry import StructLogger

from .models import GlobalConfig, PublishConfig, PyMSTestConfig, RunConfig

log: StructLogger = structlog.get_logger("config.loader")

_LIST_FIELDS = ("test_lists", "categories", "tests", "details")
_PATH_FIELDS = ("working_dir", "mstest_path")


def _field_names(cls: type) -> set[str]:
    return {a.name for a in attrs.fields(cls)}


def _check_keys(section: str, data: Mapping[str, Any], cls: type, extra: set[str] = frozenset()) -> None:
    unknown = set(data) - _field_names(cls) - set(extra)
    if unknown:
        raise ConfigurationError(
            f"Unknown key(s) in [{section}]: {', '.join(sorted(unknown))}"
        )


def _as_table(section: str, value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"[{section}] must be a table, got {type(value).__name__}")
    return value


def _convert_run(data: Mapping[str, Any], base_dir: Path) -> RunConfig:
    _check_keys("run", data, RunConfig)
    values = dict(data)

    for name in _LIST_FIELDS:
        if name in values:
            value = values[name]
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"[run] {name} must be a list of strings")
            values[name] = list(value)

    for name in _PATH_FIELDS:
        if values.get(name):
            path = Path(values[name]).expanduser()
            values[name] = path if path.is_absolute() else (base_dir / path).resolve()

    if "publish" in values:
        publish = _as_table("run.publish", values["publish"])
        _check_keys("run.publish", publish, PublishConfig)
        try:
            values["publish"] = PublishConfig(**publish)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [run.publish] section: {e}") from e

    return RunConfig(**values)


def load_config(config_path: Path) -> PyMSTestConfig:
    """
    Reads and validates a TOML configuration file.

    Relative paths in [run] are resolved against the file's directory.

    Raises:
        ConfigurationError: if the file is unreadable or any value is invalid.
    """
    config_path = Path(config_path)
    load_log = log.bind(config_path=str(config_path))
    load_log.debug("Loading configuration", emoji_key="general")

    try:
        with config_path.open("rb") as fh:
            raw = tomllib.load(fh)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

    unknown = set(raw) - {"global", "run"}
    if unknown:
        raise ConfigurationError(f"Unknown section(s): {', '.join(sorted(unknown))}")

    base_dir = config_path.resolve().parent
    try:
        global_data = _as_table("global", raw.get("global", {}))
        _check_keys("global", global_data, GlobalConfig)
        global_config = GlobalConfig(**global_data)
        run_config = _convert_run(_as_table("run", raw.get("run", {})), base_dir)
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    load_log.info(
        "Configuration loaded",
        language=global_config.language,
        has_source=bool(run_config.container or run_config.metadata),
    )
    return PyMSTestConfig(run=run_config, global_config=global_config, config_file_path=config_path)


# 🔼⚙️
