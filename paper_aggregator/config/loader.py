"""Configuration loader with Pydantic validation and env var expansion."""

import logging
import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from ..settings import (
    ARXIV_API_URL,
    ARXIV_RATE_LIMIT_SECONDS,
    CACHE_TTL_SECONDS,
    MAX_RETRIES,
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    REDIS_URL,
    SEMANTIC_SCHOLAR_API_KEY,
)

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "dev"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "profiles.yaml"


class SourcesConfig(BaseModel):
    """Configuration for the upstream paper catalogs."""

    providers: list[Literal["arxiv", "semantic_scholar"]] = ["arxiv", "semantic_scholar"]
    deduplication: bool = True
    dedup_strategy: Literal["title", "arxiv_id"] = "title"
    truncate_abstracts: bool = False
    arxiv_url: str = ARXIV_API_URL
    arxiv_rate_limit: float = ARXIV_RATE_LIMIT_SECONDS  # Seconds between arXiv requests
    semantic_scholar_api_key: str | None = None
    max_retries: int = Field(MAX_RETRIES, ge=1)


class CacheConfig(BaseModel):
    """Configuration for the response cache."""

    backend: Literal["none", "memory", "redis"] = "none"
    url: str | None = None  # For redis backend
    ttl_seconds: int = CACHE_TTL_SECONDS
    max_entries: int = 500  # For memory backend


class EnhancementConfig(BaseModel):
    """Configuration for placeholder enhancement signals."""

    signals: Literal["random"] = "random"
    seed: int | None = None  # Fix for reproducible placeholder data


class LLMConfig(BaseModel):
    """Configuration for the optional AI summary backend."""

    backend: Literal["none", "openrouter", "mock"] = "none"
    model: str | None = None
    api_key: str | None = None
    base_url: str | None = None


class ProfileConfig(BaseModel):
    """Configuration profile containing every collaborator config."""

    sources: SourcesConfig = SourcesConfig()
    cache: CacheConfig = CacheConfig()
    enhancement: EnhancementConfig = EnhancementConfig()
    llm: LLMConfig = LLMConfig()


class ConfigFile(BaseModel):
    """Root configuration file structure."""

    profiles: dict[str, ProfileConfig]


def expand_env_vars(value: str) -> str:
    """Expand ${VAR} references in a string with environment variables.

    Unset variables are left as written.
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}]+)\}"

    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replacer, value)


def _drop_unset(value):
    # "${VAR}" left unexpanded means VAR is unset; treat it as missing
    if isinstance(value, str) and re.fullmatch(r"\$\{[^}]+\}", value):
        return None
    return value


def expand_env_vars_recursive(data):
    """Recursively expand env vars in nested dict/list structures."""
    if isinstance(data, dict):
        return {k: expand_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return _drop_unset(expand_env_vars(data))
    else:
        return data


def load_profiles(config_path: Path = DEFAULT_CONFIG_PATH) -> ConfigFile:
    with open(config_path) as f:
        raw_data = yaml.safe_load(f)
    return ConfigFile(**expand_env_vars_recursive(raw_data))


def load_config_from_yaml(config_path: Path, profile_name: str) -> ProfileConfig:
    """Load one profile from a YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config is invalid
        KeyError: If profile doesn't exist
    """
    config_file = load_profiles(config_path)

    if profile_name not in config_file.profiles:
        available = ", ".join(config_file.profiles.keys())
        raise KeyError(
            f"Profile '{profile_name}' not found. Available profiles: {available}"
        )

    return config_file.profiles[profile_name]


def load_config_from_env() -> ProfileConfig:
    """Build a profile from environment variables alone.

    Redis is used when REDIS_URL is set and OpenRouter when
    OPENROUTER_API_KEY is set.
    """
    sources = SourcesConfig(semantic_scholar_api_key=SEMANTIC_SCHOLAR_API_KEY)

    if REDIS_URL:
        cache = CacheConfig(backend="redis", url=REDIS_URL)
    else:
        cache = CacheConfig(backend="none")

    if OPENROUTER_API_KEY:
        llm = LLMConfig(
            backend="openrouter",
            model=OPENROUTER_DEFAULT_MODEL,
            api_key=OPENROUTER_API_KEY,
            base_url=OPENROUTER_BASE_URL,
        )
    else:
        llm = LLMConfig(backend="none")

    return ProfileConfig(sources=sources, cache=cache, llm=llm)


def load_config(
    profile: str | None = None,
    config_path: Path | None = None,
) -> ProfileConfig:
    """Load configuration from a YAML profile or environment variables.

    Args:
        profile: Profile name to load. If None, uses the AGGREGATOR_PROFILE
                 env var or "dev".
        config_path: Path to the profiles file. Defaults to the bundled
                     config/profiles.yaml.

    Raises:
        KeyError: If the requested profile doesn't exist
    """
    if profile is None:
        profile = os.environ.get("AGGREGATOR_PROFILE", DEFAULT_PROFILE)

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Config file {config_path} not found, using environment variables")
        return load_config_from_env()

    return load_config_from_yaml(config_path, profile)
