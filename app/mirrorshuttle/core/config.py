"""Options model and YAML configuration loading.

Options come from two layers: an optional YAML configuration file and
explicit command-line arguments. Arguments given on the command line always
override values from the file; the mode itself is never read from the file.

Example configuration::

    mirror: /mnt/user/incoming
    target: /mnt/user
    exclude:
      - /mnt/user/temp
    direct: false
    verify: true
    skip-failed: true
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mirrorshuttle.core.errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from mirrorshuttle.core.log import DEFAULT_LOG_LEVEL, parse_log_level


class ShuttleOptions(BaseModel):
    """Effective options for an init or move run.

    Field aliases use the hyphenated spelling of the configuration file
    (e.g. ``skip-failed``); Python names are accepted as well.

    Attributes:
        mirror: Absolute path to the mirror (staging) structure.
        target: Absolute path to the real (protected) structure.
        exclude: Absolute paths excluded from both modes.
        direct: Attempt an atomic rename before copy and remove.
        verify: Re-read the committed target file and compare digests.
        skip_empty: Only create target directories that receive files.
        remove_empty: Remove empty mirror directories missing on the target.
        skip_failed: Skip failed elements instead of aborting.
        slow_mode: Pause after every batch of created directories in init mode.
        init_depth: Maximum mirrored depth in init mode; negative is unlimited.
        dry_run: Preview operations without filesystem changes.
        log_level: Log verbosity (debug, info, warn, error).
        json_output: Emit logs as JSON lines.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    mirror: str = ""
    target: str = ""
    exclude: list[str] = Field(default_factory=list)
    direct: bool = False
    verify: bool = False
    skip_empty: Annotated[bool, Field(alias="skip-empty")] = False
    remove_empty: Annotated[bool, Field(alias="remove-empty")] = False
    skip_failed: Annotated[bool, Field(alias="skip-failed")] = False
    slow_mode: Annotated[bool, Field(alias="slow-mode")] = False
    init_depth: Annotated[int, Field(alias="init-depth")] = -1
    dry_run: Annotated[bool, Field(alias="dry-run")] = False
    log_level: Annotated[str, Field(alias="log-level")] = DEFAULT_LOG_LEVEL
    json_output: Annotated[bool, Field(alias="json")] = False


def clean_path(path: str) -> str:
    """Trim whitespace and normalize a path.

    Unlike ``os.path.normpath`` alone, a leading ``//`` is collapsed too.
    """
    cleaned = os.path.normpath(path.strip())
    if cleaned.startswith(os.sep * 2):
        cleaned = os.sep + cleaned.lstrip(os.sep)
    return cleaned


def load_config_file(path: Path) -> ShuttleOptions:
    """Load options from a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Options parsed from the file; unset fields keep their defaults.

    Raises:
        ConfigNotFoundError: If the file does not exist.
        ConfigParseError: If the YAML is malformed or contains unknown fields.
        ConfigError: If the file cannot be read.
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"config yaml file does not exist: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"config yaml file is malformed: {e}") from e
    except OSError as e:
        raise ConfigError(f"failed to read config yaml file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError("config yaml file is malformed: top level must be a mapping")

    try:
        return ShuttleOptions.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(f"config yaml file is malformed: {e}") from e


def merge_options(base: ShuttleOptions, overrides: Mapping[str, Any]) -> ShuttleOptions:
    """Apply explicitly given command-line values on top of file options.

    Args:
        base: Options loaded from the configuration file (or defaults).
        overrides: Field name to value, only for arguments the user set.

    Returns:
        New options with the overrides applied.

    Raises:
        ConfigValidationError: If an override has an invalid type.
    """
    data = base.model_dump()
    data.update(overrides)
    try:
        return ShuttleOptions.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"invalid option value: {e}") from e


def validate_options(options: ShuttleOptions) -> ShuttleOptions:
    """Validate and normalize effective options.

    Mirror, target and exclude paths are trimmed and normalized, and the
    log level is lower-cased.

    Args:
        options: Merged options.

    Returns:
        Normalized copy of the options.

    Raises:
        ConfigValidationError: If any option is invalid.
    """
    if not options.mirror.strip() or not options.target.strip():
        raise ConfigValidationError("--mirror and --target paths must both be set")

    mirror = clean_path(options.mirror)
    target = clean_path(options.target)

    if mirror == target:
        raise ConfigValidationError("--mirror and --target paths cannot be the same")

    if not os.path.isabs(mirror) or not os.path.isabs(target):
        raise ConfigValidationError("--mirror and --target paths must all be absolute")

    excludes = [clean_path(p) for p in options.exclude]
    for excluded in excludes:
        if not os.path.isabs(excluded):
            raise ConfigValidationError(f"--exclude paths must all be absolute: {excluded!r}")

    level = options.log_level.strip().lower() or DEFAULT_LOG_LEVEL
    try:
        parse_log_level(level)
    except ValueError as e:
        raise ConfigValidationError(
            f"--log-level has a not recognized value: {options.log_level!r}"
        ) from e

    return options.model_copy(
        update={
            "mirror": mirror,
            "target": target,
            "exclude": excludes,
            "log_level": level,
        }
    )


def dump_options(options: ShuttleOptions) -> str:
    """Render options as YAML using the configuration file spelling.

    Args:
        options: Options to render.

    Returns:
        YAML document, one option per line.
    """
    return yaml.safe_dump(options.model_dump(by_alias=True), sort_keys=False)
