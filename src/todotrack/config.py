"""
Configuration loading for todotrack.

Settings come from, in order of precedence: command-line flags, an explicit
``--config`` file, ``[tool.todotrack]`` in the nearest ``pyproject.toml``,
and finally ``.todotrack.yaml`` / ``.todotrack.yml`` in the start directory.
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from todotrack.errors import ConfigurationError
from todotrack.todos.issues import ISSUE_FORMATS
from todotrack.todos.lint import LintConfig
from todotrack.todos.parser import DEFAULT_PATTERN, compile_pattern

# Python 3.11+ has tomllib built-in
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

PYPROJECT_SECTION = "todotrack"
YAML_CONFIG_NAMES = (".todotrack.yaml", ".todotrack.yml")

TOP_LEVEL_KEYS = frozenset({"paths", "pattern", "workers", "hidden", "ignore_files", "lint"})
LINT_KEYS = frozenset({
    "require_assignees",
    "require_issues",
    "require_due_dates",
    "allowed_assignees",
    "issue_format",
    "issue_project_keys",
})


@dataclass(frozen=True)
class TodoConfig:
    """Settings for one todotrack run.

    Built once at startup and handed to each component.

    Attributes
    ----------
    roots : tuple[Path, ...]
        Directories or files to scan.
    pattern : re.Pattern[str]
        Compiled TODO search pattern.
    workers : int
        Number of threads used to scan files.
    hidden : bool
        Scan hidden files and directories.
    respect_ignore_files : bool
        Apply ``.gitignore`` / ``.ignore`` rules while walking.
    lint : LintConfig
        Lint rule settings.
    """

    roots: tuple[Path, ...] = (Path("."),)
    pattern: re.Pattern[str] = field(default_factory=compile_pattern)
    workers: int = 1
    hidden: bool = False
    respect_ignore_files: bool = True
    lint: LintConfig = field(default_factory=LintConfig)


def _normalize_keys(data: Mapping[str, Any], where: str) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{where}: expected a table, got {type(data).__name__}")
    return {str(key).replace("-", "_"): value for key, value in data.items()}


def _expect_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be true or false, got {value!r}")
    return value


def _expect_str_list(value: Any, key: str) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"'{key}' must be a list of strings, got {value!r}")
    return tuple(value)


def _expect_workers(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"'workers' must be a positive integer, got {value!r}")
    return value


def _lint_from_mapping(data: Mapping[str, Any]) -> LintConfig:
    values = _normalize_keys(data, "lint")
    for key in sorted(set(values) - LINT_KEYS):
        logger.warning("Ignoring unknown lint setting '%s'", key)

    issue_format = values.get("issue_format")
    if issue_format is not None and issue_format not in ISSUE_FORMATS:
        raise ConfigurationError(
            f"'issue_format' must be one of {', '.join(ISSUE_FORMATS)}, got {issue_format!r}"
        )

    def optional_list(key: str) -> tuple[str, ...] | None:
        if values.get(key) is None:
            return None
        return _expect_str_list(values[key], key)

    return LintConfig(
        require_assignee=_expect_bool(values.get("require_assignees", False), "require_assignees"),
        require_issue=_expect_bool(values.get("require_issues", False), "require_issues"),
        require_due_date=_expect_bool(values.get("require_due_dates", False), "require_due_dates"),
        allowed_assignees=optional_list("allowed_assignees"),
        required_issue_format=issue_format,
        allowed_project_keys=optional_list("issue_project_keys"),
    )


def config_from_mapping(data: Mapping[str, Any], base_dir: Path) -> TodoConfig:
    """
    Build a TodoConfig from a settings table.

    Args:
        data: Settings, with kebab-case or snake_case keys.
        base_dir: Directory that relative ``paths`` are resolved against.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If a value has the wrong type or the pattern is invalid.
    """
    values = _normalize_keys(data, PYPROJECT_SECTION)
    for key in sorted(set(values) - TOP_LEVEL_KEYS):
        logger.warning("Ignoring unknown setting '%s'", key)

    roots: tuple[Path, ...] = (Path("."),)
    if "paths" in values:
        roots = tuple(base_dir / p for p in _expect_str_list(values["paths"], "paths"))

    pattern = values.get("pattern", DEFAULT_PATTERN)
    if not isinstance(pattern, str):
        raise ConfigurationError(f"'pattern' must be a string, got {pattern!r}")

    return TodoConfig(
        roots=roots,
        pattern=compile_pattern(pattern),
        workers=_expect_workers(values.get("workers", 1)),
        hidden=_expect_bool(values.get("hidden", False), "hidden"),
        respect_ignore_files=_expect_bool(values.get("ignore_files", True), "ignore_files"),
        lint=_lint_from_mapping(values.get("lint", {})),
    )


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return data


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Read settings from an explicit config file.

    ``.toml`` files may hold the settings at the top level or under
    ``[tool.todotrack]``; ``.yaml`` / ``.yml`` files hold them at the top level.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        if path.suffix == ".toml":
            data = _read_toml(path)
            return data.get("tool", {}).get(PYPROJECT_SECTION, data)
        if path.suffix in (".yaml", ".yml"):
            return _read_yaml(path)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e.strerror or e}") from e

    raise ConfigurationError(f"Unsupported config file type: {path.name}")


def find_config(start: Path) -> tuple[dict[str, Any], Path] | None:
    """
    Look for implicit settings starting from ``start``.

    Walks up from ``start`` to the nearest ``pyproject.toml`` with a
    ``[tool.todotrack]`` table; otherwise checks ``start`` for a
    ``.todotrack.yaml`` / ``.todotrack.yml`` file.

    Returns:
        The settings and the directory they were found in, or None.
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        pyproject = directory / "pyproject.toml"
        if pyproject.is_file():
            section = _read_toml(pyproject).get("tool", {}).get(PYPROJECT_SECTION)
            if section is not None:
                logger.debug("Using [tool.%s] from %s", PYPROJECT_SECTION, pyproject)
                return section, directory

    for name in YAML_CONFIG_NAMES:
        candidate = start / name
        if candidate.is_file():
            logger.debug("Using config file %s", candidate)
            return _read_yaml(candidate), start

    return None


def load_config(config_path: Path | None = None, start: Path | None = None) -> TodoConfig:
    """
    Load configuration, merged over defaults.

    Args:
        config_path: Explicit config file, or None to search from ``start``.
        start: Directory to start the implicit search from (default: cwd).

    Returns:
        The configuration. Defaults are used when no settings are found.

    Raises:
        ConfigurationError: If a config file is unreadable or invalid.
    """
    if config_path is not None:
        return config_from_mapping(read_config_file(config_path), config_path.parent)

    start = start or Path.cwd()
    found = find_config(start)
    if found is None:
        return TodoConfig()

    data, base_dir = found
    return config_from_mapping(data, base_dir)
