"""
Configuration module for the chat engine.

Exports the provider, mode and settings configuration used throughout the
application.
"""

from .agent_config import AgentConfig, ModeConfig, get_mode_config, list_modes, resolve_agent_config
from .chat_settings import ChatSettings
from .defaults import DEFAULT_MODE, DEFAULT_PROVIDER, PROVIDER_PRIORITY
from .exceptions import ConfigurationError
from .loader import get_config, load_config, load_config_file, merge_configs, strip_jsonc_comments
from .main_config import Config
from .providers import ModelProvider, ProviderRegistry, provider_registry

__all__ = [
    # Constants
    "DEFAULT_MODE",
    "DEFAULT_PROVIDER",
    "PROVIDER_PRIORITY",
    # Config models
    "Config",
    "ChatSettings",
    "AgentConfig",
    "ModeConfig",
    "ConfigurationError",
    # Providers
    "ModelProvider",
    "ProviderRegistry",
    "provider_registry",
    # Modes
    "get_mode_config",
    "list_modes",
    "resolve_agent_config",
    # Loader functions
    "load_config",
    "get_config",
    "load_config_file",
    "merge_configs",
    "strip_jsonc_comments",
]
