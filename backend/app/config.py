"""Configuration loader for the protein explorer backend."""
from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from typing_extensions import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

ENDPOINT_ENV_VAR = "EXPLORER_SPARQL_ENDPOINT"
ALLOWED_ORIGINS_ENV_VAR = "EXPLORER_ALLOWED_ORIGINS"
ENV_FILE_ENV_VAR = "EXPLORER_ENV_FILE"
SKIP_ENV_FILE_ENV_VAR = "EXPLORER_SKIP_ENV_FILE"

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class AppSectionConfig(_FrozenModel):
    """Application identity."""

    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)


class EndpointConfig(_FrozenModel):
    """Settings for the remote SPARQL endpoint."""

    url: str = Field(..., min_length=1)
    accept: str = Field("application/sparql-results+json", min_length=1)
    user_agent: str = Field(..., min_length=1)
    timeout_seconds: Optional[float] = Field(default=None, gt=0)

    @field_validator("url")
    @classmethod
    def _validate_scheme(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned.startswith(("http://", "https://")):
            msg = f"endpoint url must use http or https: {value}"
            raise ValueError(msg)
        return cleaned


class GraphRenderConfig(_FrozenModel):
    """Render hints handed to the force-directed graph collaborator."""

    link_distance: float = Field(..., gt=0)
    charge_strength: float = Field(..., lt=0)
    entity_radius: float = Field(..., gt=0)
    category_radius: float = Field(..., gt=0)
    entity_color: str
    category_color: str
    emphasized_color: str
    baseline_color: str

    @field_validator("entity_color", "category_color", "emphasized_color", "baseline_color")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        if not _HEX_COLOR.match(value):
            msg = f"colour must be a #rrggbb or #rrggbbaa hex string: {value}"
            raise ValueError(msg)
        return value.lower()


class BubbleRenderConfig(_FrozenModel):
    """Render hints for the packing chart collaborator."""

    padding: float = Field(..., ge=0)
    preview_limit: int = Field(..., ge=1)
    min_font_px: int = Field(..., ge=1)


class UIConfig(_FrozenModel):
    """UI-specific configuration values."""

    default_display_mode: Literal["table", "graph", "bubble", "human"] = Field("table")
    allowed_origins: List[str] = Field(default_factory=list)
    graph: GraphRenderConfig
    bubble: BubbleRenderConfig


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    app: AppSectionConfig
    endpoint: EndpointConfig
    ui: UIConfig

    @model_validator(mode="after")
    def _validate_palette(self) -> "AppConfig":
        graph = self.ui.graph
        if graph.emphasized_color == graph.baseline_color:
            msg = "ui.graph.emphasized_color must differ from ui.graph.baseline_color"
            raise ValueError(msg)
        return self

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root.
        """
        return Path(__file__).resolve().parents[2] / "config.yaml"


def _determine_env_file_path() -> Optional[Path]:
    """Return the path to the environment file if one should be loaded."""

    skip = os.getenv(SKIP_ENV_FILE_ENV_VAR)
    if skip and skip.strip().lower() in {"1", "true", "yes"}:
        return None
    override = os.getenv(ENV_FILE_ENV_VAR)
    if override:
        candidate = Path(override).expanduser()
        if candidate.exists():
            return candidate
        LOGGER.warning("Configured environment file override does not exist: %s", candidate)
        return None
    if DEFAULT_ENV_FILE.exists():
        return DEFAULT_ENV_FILE
    return None


def _strip_inline_comment(value: str) -> str:
    """Remove inline comments from an environment value when unquoted."""

    comment_index = value.find("#")
    if comment_index == -1:
        return value
    return value[:comment_index].rstrip()


def _load_env_file(path: Path) -> None:
    """Populate ``os.environ`` with values read from a ``.env`` file."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.lower().startswith("export "):
                    line = line[7:].lstrip()
                if "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                key = key.strip()
                if not key:
                    continue
                existing_value = os.environ.get(key)
                if existing_value is not None and existing_value.strip() != "":
                    continue
                value = raw_value.strip()
                if not value:
                    os.environ[key] = ""
                    continue
                if value[0] in {'"', "'"} and value[-1] == value[0]:
                    os.environ[key] = value[1:-1]
                    continue
                os.environ[key] = _strip_inline_comment(value)
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)


def _parse_origins(value: str) -> List[str]:
    """Split a comma or whitespace separated origin list, keeping first occurrences."""

    unique: List[str] = []
    for candidate in re.split(r"[,\s]+", value):
        cleaned = candidate.strip()
        if cleaned and cleaned not in unique:
            unique.append(cleaned)
    return unique


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment-based overrides into the raw configuration mapping.

    Args:
        raw_content: Parsed YAML configuration prior to Pydantic validation.

    Returns:
        Dict[str, Any]: Configuration mapping with environment overrides applied.
    """

    env_file_path = _determine_env_file_path()
    if env_file_path is not None:
        _load_env_file(env_file_path)

    endpoint_override = (os.getenv(ENDPOINT_ENV_VAR) or "").strip()
    if endpoint_override:
        endpoint_section = raw_content.setdefault("endpoint", {})
        endpoint_section["url"] = endpoint_override
        LOGGER.info("SPARQL endpoint overridden from environment: %s", endpoint_override)

    origins = _parse_origins(os.getenv(ALLOWED_ORIGINS_ENV_VAR) or "")
    if origins:
        ui_section = raw_content.setdefault("ui", {})
        ui_section["allowed_origins"] = origins
        LOGGER.info("UI allowed origins overridden from environment (count=%d)", len(origins))
    return raw_content


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML content from disk.

    Args:
        path: Location of the YAML file.

    Returns:
        Dict[str, Any]: Parsed YAML content.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = path or AppConfig.default_path()
    raw_content = _read_yaml(config_path)
    raw_content = _apply_environment_overrides(raw_content)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
