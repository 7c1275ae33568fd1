"""Configuration errors."""


class ConfigurationError(ValueError):
    """Raised when no usable provider, mode or model can be resolved."""

    pass
