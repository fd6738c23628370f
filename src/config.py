"""Unified configuration loaded from .spacetraveling.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, ValidationError, field_validator

from spacetraveling.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".spacetraveling.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
    Path.home() / ".config" / "spacetraveling",
]


class CMSSectionConfig(BaseModel):
    """[cms] section."""

    api_endpoint: str = ""
    access_token: str = ""
    document_type: str = "post"
    timeout: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_endpoint)


class SiteSectionConfig(BaseModel):
    """[site] section."""

    title: str = "spacetraveling"
    page_size: int = 5
    locale: str = "pt-BR"
    timezone: str = "America/Sao_Paulo"
    output_dir: str = "./dist"
    revalidate_seconds: int = 60 * 30

    @field_validator("page_size")
    @classmethod
    def _positive_page_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("page_size must be at least 1")
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value


class CommentsSectionConfig(BaseModel):
    """[comments] section: utterances widget."""

    repo: str = ""
    theme: str = "dark-blue"
    issue_term: str = "pathname"

    @property
    def is_configured(self) -> bool:
        return bool(self.repo)


class PreviewSectionConfig(BaseModel):
    """[preview] section."""

    secret: str = ""
    max_age: int = 60 * 60
    cookie_name: str = "spacetraveling_preview"


class ServerSectionConfig(BaseModel):
    """[server] section."""

    host: str = "127.0.0.1"
    port: int = 3000


class SpacetravelingConfig(BaseModel):
    """Top-level configuration model."""

    cms: CMSSectionConfig = Field(default_factory=CMSSectionConfig)
    site: SiteSectionConfig = Field(default_factory=SiteSectionConfig)
    comments: CommentsSectionConfig = Field(default_factory=CommentsSectionConfig)
    preview: PreviewSectionConfig = Field(default_factory=PreviewSectionConfig)
    server: ServerSectionConfig = Field(default_factory=ServerSectionConfig)


def load_config(path: str | Path | None = None) -> SpacetravelingConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .spacetraveling.toml in CWD
    3. ~/.config/spacetraveling/.spacetraveling.toml
    4. ~/.config/spacetraveling/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged SpacetravelingConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        global_config = Path.home() / ".config" / "spacetraveling" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = _validate(data)

    return _apply_env_vars(config)


def merge_cli_overrides(
    config: SpacetravelingConfig, **cli_kwargs: object
) -> SpacetravelingConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``output_dir``, ``api_endpoint``.

    Returns:
        Updated config with CLI overrides applied.

    Raises:
        ConfigError: If an override is not a valid value.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "api_endpoint": ("cms", "api_endpoint"),
        "access_token": ("cms", "access_token"),
        "timeout": ("cms", "timeout"),
        "page_size": ("site", "page_size"),
        "output_dir": ("site", "output_dir"),
        "host": ("server", "host"),
        "port": ("server", "port"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return _validate(data)


def _validate(data: dict) -> SpacetravelingConfig:
    """Build the config model, reporting invalid values as ``ConfigError``."""
    try:
        return SpacetravelingConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: SpacetravelingConfig) -> SpacetravelingConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "PRISMIC_API_ENDPOINT": ("cms", "api_endpoint"),
        "PRISMIC_ACCESS_TOKEN": ("cms", "access_token"),
        "SPACETRAVELING_OUTPUT_DIR": ("site", "output_dir"),
        "SPACETRAVELING_PREVIEW_SECRET": ("preview", "secret"),
        "UTTERANCES_REPO": ("comments", "repo"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    timeout_raw = os.environ.get("PRISMIC_TIMEOUT")
    if timeout_raw is not None:
        try:
            data["cms"]["timeout"] = float(timeout_raw)
        except ValueError as exc:
            raise ConfigError(f"PRISMIC_TIMEOUT must be a number, got {timeout_raw!r}") from exc

    return _validate(data)
