"""Configuration model and file I/O.

Settings are stored in ~/.config/cachectl/config.toml and validated with
Pydantic. Example::

    watch_roots = ["~/src", "~/work"]
    central_root = "~/.cache/cachectl/central"
    quarantine_root = "~/.local/state/cachectl/quarantine"
    patterns = [".ruff_cache", ".mypy_cache", "node_modules/.cache"]
    allow_roots = ["~/src/vendor"]
    lock_timeout_seconds = 30

    [wrappers]
    bin_dir = "~/.local/share/cachectl/bin"
    deny = ["python"]

    [[wrappers.sources]]
    tag = "uv"
    priority = 1
    path = "~/.local/bin"
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from cachectl.core.paths import (
    get_config_path,
    get_default_bin_dir,
    get_default_central_root,
    get_default_quarantine_root,
)
from cachectl.models.collision import CommandSource
from cachectl.models.pattern import CachePattern

DEFAULT_PATTERNS: tuple[str, ...] = (
    ".ruff_cache",
    ".mypy_cache",
    ".pytest_cache",
    ".hypothesis",
    ".tox",
    "node_modules/.cache",
)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration content is invalid."""


def _expand(value: object) -> object:
    if isinstance(value, str | Path):
        return Path(os.path.expandvars(str(value))).expanduser()
    return value


class WrapperSourceConfig(BaseModel):
    """A source directory for command wrappers."""

    model_config = ConfigDict(extra="forbid")

    tag: Annotated[str, Field(min_length=1, description="Short source label")]
    priority: Annotated[int, Field(description="Lower values win collisions")] = 100
    path: Path

    @field_validator("path", mode="before")
    @classmethod
    def expand_path(cls, v: object) -> object:
        return _expand(v)

    def to_source(self) -> CommandSource:
        """Convert to the domain model."""
        return CommandSource(tag=self.tag, priority=self.priority, directory=self.path)


class WrapperConfig(BaseModel):
    """Settings for the unified command wrapper directory."""

    model_config = ConfigDict(extra="forbid")

    bin_dir: Path = Field(default_factory=get_default_bin_dir)
    deny: list[str] = Field(default_factory=list)
    sources: list[WrapperSourceConfig] = Field(default_factory=list)

    @field_validator("bin_dir", mode="before")
    @classmethod
    def expand_bin_dir(cls, v: object) -> object:
        return _expand(v)


class Settings(BaseModel):
    """cachectl settings.

    Attributes:
        watch_roots: Directories swept and watched for cache folders.
        central_root: Base directory holding one bucket per project.
        quarantine_root: Where pre-existing content is moved aside.
        patterns: Cache directory patterns, evaluated in order.
        allow_roots: Path prefixes never classified.
        lock_timeout_seconds: Timeout for cross-process locks.
        wrappers: Command wrapper settings.
    """

    model_config = ConfigDict(extra="forbid")

    watch_roots: list[Path] = Field(default_factory=list)
    central_root: Path = Field(default_factory=get_default_central_root)
    quarantine_root: Path = Field(default_factory=get_default_quarantine_root)
    patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_PATTERNS))
    allow_roots: list[Path] = Field(default_factory=list)
    lock_timeout_seconds: Annotated[
        float,
        Field(ge=1, le=600, description="Lock timeout in seconds (1-600)"),
    ] = 30.0
    wrappers: WrapperConfig = Field(default_factory=WrapperConfig)

    @field_validator("central_root", "quarantine_root", mode="before")
    @classmethod
    def expand_single(cls, v: object) -> object:
        return _expand(v)

    @field_validator("watch_roots", "allow_roots", mode="before")
    @classmethod
    def expand_list(cls, v: object) -> object:
        if isinstance(v, list):
            return [_expand(item) for item in v]
        return v

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        for text in v:
            CachePattern.parse(text)
        return v

    @property
    def cache_patterns(self) -> list[CachePattern]:
        """Parsed cache patterns in configured order."""
        return [CachePattern.parse(text) for text in self.patterns]

    @property
    def effective_allow_roots(self) -> list[Path]:
        """Configured allow roots plus the central and quarantine roots."""
        return [*self.allow_roots, self.central_root, self.quarantine_root]


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default path.

    Returns:
        Validated Settings object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def load_settings_or_default(path: Path | None = None) -> Settings:
    """Load settings, falling back to defaults when no file exists.

    Raises:
        ConfigParseError: If the file exists but is not valid TOML.
        ConfigValidationError: If the file exists but is invalid.
    """
    try:
        return load_settings(path)
    except ConfigNotFoundError:
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Convert Settings to a TOML-serializable dictionary.

    Paths become strings.
    """
    return settings.model_dump(mode="json")
