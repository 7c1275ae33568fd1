"""Default configuration values."""

from .prompts import DEEP_SYSTEM_PROMPT, FAST_SYSTEM_PROMPT

DEFAULT_MODE = "fast"
DEFAULT_PROVIDER = "grok"

# Cloud providers in order of preference when none is chosen explicitly
PROVIDER_PRIORITY = ("grok", "openai", "gemini")

# Model provider configurations (all expose an OpenAI-compatible chat API)
DEFAULT_MODEL_PROVIDERS = {
    "grok": {
        "name": "xAI Grok",
        "base_url": "https://api.x.ai/v1",
        "env_key": "GROK_API_KEY",
        "default_model": "grok-4-1-fast-non-reasoning",
    },
    "openai": {
        "name": "OpenAI",
        "base_url": "https://api.openai.com/v1",
        "env_key": "OPENAI_API_KEY",
        "default_model": "gpt-4o-mini",
    },
    "gemini": {
        "name": "Google Gemini",
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "env_key": "GEMINI_API_KEY",
        "default_model": "gemini-2.0-flash",
    },
    "ollama": {
        "name": "Ollama (Local)",
        "base_url": "http://localhost:11434/v1",
        "env_key": None,  # No API key needed
        "default_model": "llama3.2",
    },
    "lmstudio": {
        "name": "LM Studio (Local)",
        "base_url": "http://localhost:1234/v1",
        "env_key": None,
        "default_model": "local-model",
    },
}

# Agent modes: fast answers vs. step-by-step work with reasoning models
MODE_CONFIGS = {
    "fast": {
        "models": {
            "grok": "grok-4-1-fast-non-reasoning",
            "openai": "gpt-4o-mini",
            "gemini": "gemini-2.0-flash",
        },
        "temperature": 0.7,
        "max_tokens": 4096,
        "max_steps": 10,
        "system_prompt": FAST_SYSTEM_PROMPT,
    },
    "deep": {
        "models": {
            "grok": "grok-3-mini-beta",
            "openai": "o1-mini",
            "gemini": "gemini-2.5-flash-preview-05-20",
        },
        "temperature": 0.3,  # More deterministic
        "max_tokens": 8192,
        "max_steps": 25,
        "system_prompt": DEEP_SYSTEM_PROMPT,
    },
}

# Confirmation gate (None waits for the user indefinitely)
DEFAULT_CONFIRMATION_TIMEOUT_SECONDS = None
