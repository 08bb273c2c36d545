from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from llmctx.config import (
    CHARS_PER_TOKEN,
    CONFIG_FILE_NAME,
    DEFAULT_DEBUG_COMMAND,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEST_COMMAND,
    ENV_PREFIX,
)
from llmctx.exceptions import ConfigError, InvalidBudgetValueError
from llmctx.logging import DEFAULT_LOG_LEVEL

if TYPE_CHECKING:
    from collections.abc import Mapping

ENV_FILE = find_dotenv(usecwd=True)

# Keys accepted from the config file and from LLMCTX_* variables.
LAYERED_KEYS = (
    "max_tokens",
    "chars_per_token",
    "exclude",
    "gitignore",
    "debug_command",
    "test_command",
    "log_file",
    "log_level",
)


class Settings(BaseModel):
    """Configuration settings for an llmctx run."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    paths: list[Path] = Field(default_factory=list, description="Roots to walk, in order.")
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=0, description="Token ceiling.")
    chars_per_token: int = Field(
        default=CHARS_PER_TOKEN,
        ge=1,
        description="Characters counted per token.",
    )
    exclude: list[str] = Field(default_factory=list, description="Exclude patterns.")
    gitignore: bool = Field(default=True, description="Honor .gitignore files.")

    copy_to_clipboard: bool = Field(default=False, description="Copy output to clipboard.")
    debug: bool = Field(default=False, description="Append build command output.")
    test: bool = Field(default=False, description="Append test command output.")
    debug_command: str = Field(default=DEFAULT_DEBUG_COMMAND, description="Build command.")
    test_command: str = Field(default=DEFAULT_TEST_COMMAND, description="Test command.")

    log_file: str = Field(default="", description="Log file path.")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Minimum log level.")

    @property
    def max_units(self) -> int:
        """Budget ceiling in characters."""
        return self.max_tokens * self.chars_per_token


def parse_budget(value: object) -> int:
    """Validate a token budget coming from any configuration layer.

    Args:
        value (object): the raw value (CLI string, YAML scalar, env string)

    Raises:
        InvalidBudgetValueError: if the value is not a non-negative integer.

    Returns:
        int: the budget
    """
    if isinstance(value, bool):
        raise InvalidBudgetValueError(value=value)
    if isinstance(value, int):
        budget = value
    elif isinstance(value, str):
        try:
            budget = int(value.strip())
        except ValueError as e:
            raise InvalidBudgetValueError(value=value) from e
    else:
        raise InvalidBudgetValueError(value=value)
    if budget < 0:
        raise InvalidBudgetValueError(value=value)
    return budget


def split_patterns(value: object) -> list[str]:
    """Accept exclude patterns as a list or as a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, list):
        return [str(p) for p in value]
    raise TypeError(f"expected a list or a string, got {type(value).__name__}")


def load_config_file(path: Path) -> dict[str, Any]:
    """Load layered settings from a YAML file.

    Args:
        path (Path): the file to read

    Raises:
        ConfigError: if the file cannot be read, is not valid YAML, is not a
            mapping, or holds unknown keys.

    Returns:
        dict[str, Any]: the settings found in the file (possibly empty)
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(source=str(path), reason=e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError(source=str(path), reason=str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(source=str(path), reason="top level must be a mapping")
    unknown = sorted(str(k) for k in data if k not in LAYERED_KEYS)
    if unknown:
        raise ConfigError(source=str(path), reason=f"unknown keys: {', '.join(unknown)}")
    return dict(data)


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Extract layered settings from `LLMCTX_*` variables."""
    out: dict[str, Any] = {}
    for key in LAYERED_KEYS:
        value = environ.get(ENV_PREFIX + key.upper())
        if value is not None and value != "":
            out[key] = value
    return out


def default_environ() -> dict[str, str]:
    """Process environment on top of the values of the nearest `.env` file."""
    values: dict[str, str] = {}
    if ENV_FILE:
        values.update({k: v for k, v in dotenv_values(ENV_FILE).items() if v is not None})
    values.update(os.environ)
    return values


def load_settings(
    cli_values: Mapping[str, Any],
    *,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Merge defaults, config file, environment and command line into Settings.

    Later layers override earlier ones, except exclude patterns, which are
    concatenated across layers. `None` values mean "not given".

    Args:
        cli_values (Mapping[str, Any]): values parsed from the command line
        config_path (Path | None): explicit config file; `.llmctx.yaml` in
            the working directory is used when it exists and this is None
        environ (Mapping[str, str] | None): environment to read; the process
            environment (plus `.env`) if None

    Raises:
        ConfigError: if a layer is malformed or a value is out of range.
        InvalidBudgetValueError: if the token budget is invalid.

    Returns:
        Settings: the merged settings
    """
    if config_path is None:
        candidate = Path.cwd() / CONFIG_FILE_NAME
        file_values = load_config_file(candidate) if candidate.is_file() else {}
    else:
        file_values = load_config_file(config_path)
    env_values = env_overrides(default_environ() if environ is None else environ)

    merged: dict[str, Any] = {}
    excludes: list[str] = []
    for source, layer in (("config file", file_values), ("environment", env_values), ("command line", cli_values)):
        for key, value in layer.items():
            if value is None:
                continue
            if key == "exclude":
                try:
                    excludes.extend(split_patterns(value))
                except TypeError as e:
                    raise ConfigError(source=source, reason=f"exclude: {e}") from e
            elif key == "max_tokens":
                merged[key] = parse_budget(value)
            else:
                merged[key] = value
    merged["exclude"] = excludes

    try:
        return Settings(**merged)
    except ValidationError as e:
        raise ConfigError(source="settings", reason=str(e)) from e
