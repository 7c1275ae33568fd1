"""Per-round agent configuration resolved from a provider and a mode."""

import logging

from pydantic import BaseModel, ConfigDict, Field

from .chat_settings import ChatSettings
from .defaults import MODE_CONFIGS
from .exceptions import ConfigurationError
from .providers import ProviderRegistry, provider_registry

logger = logging.getLogger(__name__)


class ModeConfig(BaseModel):
    """Generation settings for an agent mode."""

    models: dict[str, str] = Field(
        default_factory=dict,
        description="Model identifier per provider ID",
    )
    temperature: float = 0.7
    max_tokens: int = 4096
    max_steps: int = Field(
        default=10,
        ge=1,
        description="Maximum stream rounds per turn",
    )
    system_prompt: str = ""


class AgentConfig(BaseModel):
    """Immutable configuration for one turn's rounds."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    temperature: float
    max_tokens: int
    max_steps: int
    system_prompt: str


def list_modes() -> list[str]:
    return list(MODE_CONFIGS)


def get_mode_config(mode: str) -> ModeConfig:
    """
    Get the configuration of an agent mode.

    Args:
        mode: Mode name ("fast" or "deep")

    Returns:
        The mode's ModeConfig

    Raises:
        ConfigurationError: If the mode is unknown
    """
    config = MODE_CONFIGS.get(mode)
    if config is None:
        raise ConfigurationError(f"Unknown mode: {mode}")
    return ModeConfig(**config)


def resolve_agent_config(
    settings: ChatSettings,
    mode: str,
    provider: str | None = None,
    registry: ProviderRegistry = provider_registry,
) -> AgentConfig:
    """
    Resolve the configuration for a turn.

    Args:
        settings: User chat settings
        mode: Agent mode
        provider: Explicit provider ID; defaults to the best available one
        registry: Provider registry

    Returns:
        A frozen AgentConfig

    Raises:
        ConfigurationError: If the mode is unknown, the requested provider is
            unusable, or no provider has credentials
    """
    mode_config = get_mode_config(mode)

    if provider is not None:
        if not settings.is_provider_available(provider, registry):
            raise ConfigurationError(f"Provider not available: {provider}")
        provider_id = provider
    else:
        provider_id = settings.best_provider(registry)
        if provider_id is None:
            raise ConfigurationError(
                "No API key configured. Add a Grok, OpenAI, or Gemini API key "
                "in settings or the environment."
            )

    model = mode_config.models.get(provider_id) or registry.get(provider_id).default_model
    if not model:
        raise ConfigurationError(f"No model configured for provider {provider_id}")

    logger.debug("Resolved %s mode to %s/%s", mode, provider_id, model)
    return AgentConfig(
        provider=provider_id,
        model=model,
        temperature=mode_config.temperature,
        max_tokens=mode_config.max_tokens,
        max_steps=mode_config.max_steps,
        system_prompt=mode_config.system_prompt,
    )
