"""ChatSettings model and credential resolution."""

from pydantic import BaseModel, Field

from .defaults import DEFAULT_CONFIRMATION_TIMEOUT_SECONDS, DEFAULT_MODE, DEFAULT_PROVIDER, PROVIDER_PRIORITY
from .providers import ProviderRegistry, provider_registry


class ChatSettings(BaseModel):
    """User preferences for the assistant."""

    preferred_provider: str | None = Field(
        default=DEFAULT_PROVIDER,
        description="Provider to use when it has credentials",
    )
    auto_accept_sql: bool = Field(
        default=False,
        description="Run mutating SQL without asking for confirmation",
    )
    api_keys: dict[str, str] = Field(
        default_factory=dict,
        description="User-provided API keys by provider ID (override environment keys)",
    )
    default_mode: str = Field(
        default=DEFAULT_MODE,
        description="Agent mode for new chats",
    )
    confirmation_timeout_seconds: float | None = Field(
        default=DEFAULT_CONFIRMATION_TIMEOUT_SECONDS,
        description="Reject unanswered confirmations after this many seconds",
    )

    def resolve_api_key(
        self, provider_id: str, registry: ProviderRegistry = provider_registry
    ) -> str | None:
        """
        Resolve the API key for a provider.

        Resolution order is the user-provided override, then the provider's
        environment variable.

        Args:
            provider_id: Provider identifier
            registry: Provider registry to look the provider up in

        Returns:
            The API key, or None if neither source has one
        """
        provider = registry.get(provider_id)
        override = self.api_keys.get(provider_id)
        if provider is None:
            return override or None
        return provider.get_api_key(override)

    def is_provider_available(
        self, provider_id: str, registry: ProviderRegistry = provider_registry
    ) -> bool:
        """Check whether a provider is known and has usable credentials."""
        provider = registry.get(provider_id)
        if provider is None:
            return False
        return provider.is_available(self.api_keys.get(provider_id))

    def best_provider(self, registry: ProviderRegistry = provider_registry) -> str | None:
        """
        Pick the provider to use.

        Returns:
            The preferred provider if available, else the first available
            provider by priority, else None
        """
        if self.preferred_provider and self.is_provider_available(self.preferred_provider, registry):
            return self.preferred_provider
        for provider_id in PROVIDER_PRIORITY:
            if self.is_provider_available(provider_id, registry):
                return provider_id
        return None

    def has_any_provider(self, registry: ProviderRegistry = provider_registry) -> bool:
        return self.best_provider(registry) is not None
