"""Model provider configuration and registry."""

from dataclasses import dataclass, field
from typing import Any, Optional
import os


@dataclass
class ModelProvider:
    """Represents a model provider configuration.

    Attributes:
        id: Unique identifier for the provider
        name: Human-readable name
        base_url: Base URL of the provider's OpenAI-compatible API
        env_key: Environment variable name for API key (None for local providers)
        default_model: Model used when a mode has no entry for this provider
        http_headers: Additional HTTP headers to include in requests
    """
    id: str
    name: str
    base_url: str
    env_key: Optional[str] = None
    default_model: str = ""
    http_headers: dict[str, str] = field(default_factory=dict)

    def get_api_key(self, override: Optional[str] = None) -> Optional[str]:
        """Get the API key, preferring a user-provided override.

        Args:
            override: Key supplied through user settings

        Returns:
            The override if set, else the environment variable value, else None
        """
        if override:
            return override
        if self.env_key:
            return os.environ.get(self.env_key) or None
        return None

    def is_local(self) -> bool:
        """Check if provider is local (no API key needed).

        Returns:
            True if provider doesn't require an API key
        """
        return self.env_key is None

    def is_available(self, override: Optional[str] = None) -> bool:
        """Check whether requests to this provider can be authenticated."""
        return self.is_local() or self.get_api_key(override) is not None

    def get_client_kwargs(self, override: Optional[str] = None) -> dict[str, Any]:
        """Get kwargs for OpenAI-compatible client initialization.

        Args:
            override: User-provided API key

        Returns:
            Dictionary with base_url, api_key and default headers
        """
        return {
            "base_url": self.base_url,
            # Local servers ignore the key but the client requires one
            "api_key": self.get_api_key(override) or "not-needed",
            "default_headers": self.http_headers.copy(),
        }


class ProviderRegistry:
    """Registry for managing model providers.

    Handles default and custom provider configurations loaded from config
    files.
    """

    def __init__(self) -> None:
        """Initialize the provider registry with default providers."""
        self._providers: dict[str, ModelProvider] = {}
        self._load_defaults()

    def _load_defaults(self) -> None:
        """Load default providers from config.defaults."""
        from config.defaults import DEFAULT_MODEL_PROVIDERS

        for provider_id, config in DEFAULT_MODEL_PROVIDERS.items():
            self._providers[provider_id] = ModelProvider(id=provider_id, **config)

    def load_from_config(self, config: dict[str, Any]) -> None:
        """Load custom providers from configuration dictionary.

        Args:
            config: Mapping of provider ID to provider fields
                (the ``model_providers`` config section)
        """
        for provider_id, provider_config in config.items():
            self._providers[provider_id] = ModelProvider(id=provider_id, **provider_config)

    def get(self, provider_id: str) -> Optional[ModelProvider]:
        """Get provider by ID.

        Args:
            provider_id: Provider identifier

        Returns:
            ModelProvider instance or None if not found
        """
        return self._providers.get(provider_id)

    def list_providers(self) -> list[ModelProvider]:
        """List all available providers.

        Returns:
            List of all registered ModelProvider instances
        """
        return list(self._providers.values())


# Global registry instance
provider_registry = ProviderRegistry()
