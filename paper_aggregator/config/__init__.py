"""Configuration profiles and collaborator factories."""

from .loader import (
    CacheConfig,
    EnhancementConfig,
    LLMConfig,
    ProfileConfig,
    SourcesConfig,
    load_config,
    load_config_from_env,
    load_config_from_yaml,
    load_profiles,
)
from .factory import (
    create_cache,
    create_llm,
    create_service,
    create_signal_provider,
    create_sources,
)

__all__ = [
    # Loader
    "CacheConfig",
    "EnhancementConfig",
    "LLMConfig",
    "ProfileConfig",
    "SourcesConfig",
    "load_config",
    "load_config_from_env",
    "load_config_from_yaml",
    "load_profiles",
    # Factory
    "create_cache",
    "create_llm",
    "create_service",
    "create_signal_provider",
    "create_sources",
]
