from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import ConfigError

"""Config loader.

Responsibilities:
- Load YAML config (default location config/dashboard.yml)
- Validate against the JSON schema shipped next to this module
- Apply defaults for every missing key
- Let environment variables override the instruction service settings
"""

__all__ = [
    "ConfigError",
    "DashboardConfig",
    "InstructionConfig",
    "DEFAULT_CONFIG_PATH",
    "default_config",
    "load_config",
    "apply_env_overrides",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/dashboard.yml")

MISTRAL_API_URL = "https://api.mistral.ai/v1/chat/completions"
MISTRAL_MODEL = "mistral-small"

ENV_API_KEY = "MISTRAL_API_KEY"
ENV_ENDPOINT = "TABLELENS_INSTRUCTION_ENDPOINT"


@dataclass(frozen=True)
class InstructionConfig:
    """Settings for the natural-language chart interpretation service.

    provider "mistral" calls the chat-completions API directly with
    ``api_key``; provider "http" posts ``{instruction, columns}`` to
    ``endpoint``.
    """
    provider: str = "mistral"
    endpoint: str | None = None
    api_url: str = MISTRAL_API_URL
    model: str = MISTRAL_MODEL
    timeout_seconds: float = 30.0
    api_key: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class DashboardConfig:
    rows_per_page: int = 10
    page_window: int = 5
    ticker_interval_seconds: float = 5.0
    logs_directory: str = "./logs"
    instruction: InstructionConfig = field(default_factory=InstructionConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> DashboardConfig:
    return DashboardConfig()


def load_config(path: Path) -> DashboardConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = DashboardConfig()
    ins_raw = data.get("instruction", {}) or {}
    ins_defaults = defaults.instruction
    instruction = InstructionConfig(
        provider=ins_raw.get("provider", ins_defaults.provider),
        endpoint=ins_raw.get("endpoint", ins_defaults.endpoint),
        api_url=ins_raw.get("api_url", ins_defaults.api_url),
        model=ins_raw.get("model", ins_defaults.model),
        timeout_seconds=float(ins_raw.get("timeout_seconds", ins_defaults.timeout_seconds)),
    )
    if instruction.provider == "http" and not instruction.endpoint:
        raise ConfigError("config validation failed: instruction.endpoint is required for provider 'http'")

    return DashboardConfig(
        rows_per_page=data.get("rows_per_page", defaults.rows_per_page),
        page_window=data.get("page_window", defaults.page_window),
        ticker_interval_seconds=float(
            data.get("ticker_interval_seconds", defaults.ticker_interval_seconds)
        ),
        logs_directory=data.get("logs_directory", defaults.logs_directory),
        instruction=instruction,
    )


def apply_env_overrides(cfg: DashboardConfig) -> DashboardConfig:
    """Fill secrets and endpoint from the environment.

    The API key only ever comes from the environment (or a loaded .env).
    A configured endpoint env var switches the provider to "http".
    """
    ins = cfg.instruction
    api_key = os.getenv(ENV_API_KEY) or None
    endpoint = os.getenv(ENV_ENDPOINT) or None
    if endpoint:
        ins = replace(ins, provider="http", endpoint=endpoint)
    return replace(cfg, instruction=replace(ins, api_key=api_key))
