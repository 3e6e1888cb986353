"""Engine configuration: backend endpoint, model chains, store location.

Values come from a YAML file (see config/engine.yaml) and can be overridden
by environment variables, which win over the file.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from src.design_engine.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "engine.yaml"

_LIST_ENV_OVERRIDES = {
    "DESIGN_VISION_MODELS": "vision_models",
    "DESIGN_KEYWORD_MODELS": "keyword_models",
    "DESIGN_OUTLINE_MODELS": "outline_models",
}


def _split_models(value: str) -> list[str]:
    return [m.strip() for m in value.split(",") if m.strip()]


class EngineConfig(BaseModel):
    """Everything the engine needs to reach its backend and its store."""

    api_key: Optional[str] = Field(default=None, description="Bearer token for the inference backend")
    base_url: str = Field(default="https://openrouter.ai/api/v1")
    site_url: str = Field(default="https://localhost", description="Sent as HTTP-Referer")
    app_title: str = Field(default="Slide Style Engine", description="Sent as X-Title")
    request_timeout: float = Field(default=60.0, gt=0, description="Per-call timeout in seconds")

    # Ordered fallback chains, best first
    vision_models: list[str] = Field(default_factory=lambda: [
        "anthropic/claude-3.5-sonnet",
        "openai/gpt-4o",
        "google/gemini-pro-vision",
        "anthropic/claude-3-opus",
    ])
    keyword_models: list[str] = Field(default_factory=lambda: [
        "qwen/qwen-2-7b-instruct",
        "meta-llama/llama-3.2-3b-instruct",
        "google/gemini-flash-1.5",
    ])
    outline_models: list[str] = Field(default_factory=lambda: [
        "qwen/qwen-2-14b-instruct",
        "qwen/qwen-2-7b-instruct",
        "meta-llama/llama-3.2-11b-instruct",
        "mistralai/mistral-7b-instruct",
        "google/gemini-flash-1.5",
    ])

    retrieval_cap: int = Field(default=100, ge=1, description="Max exemplars fetched per match")
    store_path: Optional[str] = Field(default=None, description="Exemplar registry JSON; None = in-memory")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EngineConfig":
        """Load configuration from a YAML file (no environment overrides).

        Raises:
            FileNotFoundError: the file does not exist.
            ConfigurationError: the file is not valid YAML or has invalid values.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Engine config file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)
        except (yaml.YAMLError, ValidationError) as e:
            raise ConfigurationError(f"Invalid engine config: {path}", details=str(e)) from e

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML. The API key is never written."""
        data = self.model_dump(exclude_none=True, exclude={"api_key"})
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def with_env_overrides(self, environ: Optional[dict[str, str]] = None) -> "EngineConfig":
        """Return a copy with environment variables applied on top."""
        env = os.environ if environ is None else environ
        updates: dict = {}

        if env.get("OPENROUTER_API_KEY"):
            updates["api_key"] = env["OPENROUTER_API_KEY"]
        if env.get("OPENROUTER_BASE_URL"):
            updates["base_url"] = env["OPENROUTER_BASE_URL"]
        if env.get("DESIGN_STORE_PATH"):
            updates["store_path"] = env["DESIGN_STORE_PATH"]

        for var, field_name in _LIST_ENV_OVERRIDES.items():
            value = env.get(var, "")
            if value.strip():
                models = _split_models(value)
                if models:
                    updates[field_name] = models

        if updates:
            logger.debug(f"Applying environment overrides: {sorted(k for k in updates if k != 'api_key')}")
        return self.model_copy(update=updates)


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load config from ``path`` (or the bundled default) plus environment overrides.

    A missing default file is not an error: built-in defaults apply.
    """
    if path is not None:
        config = EngineConfig.from_yaml(path)
    elif DEFAULT_CONFIG_PATH.exists():
        config = EngineConfig.from_yaml(DEFAULT_CONFIG_PATH)
    else:
        config = EngineConfig()
    return config.with_env_overrides()
