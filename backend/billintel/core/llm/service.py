from billintel.core.config import settings
from billintel.core.llm.base import BaseLLM
from billintel.core.llm.providers.anthropic import AnthropicProvider
from billintel.core.llm.providers.google import GoogleProvider
from billintel.core.llm.providers.openai import OpenAIProvider


PROVIDER_ALIASES = {
    "gemini": "google",
    "claude": "anthropic",
    "gpt": "openai",
}

LLM_REGISTRY: dict[str, type[BaseLLM]] = {
    "google": GoogleProvider,
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}

# settings attribute holding each provider's key
API_KEY_SETTINGS = {
    "google": "GOOGLE_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

# short, cheap models are enough for a one-paragraph billing narrative
NARRATIVE_MODELS: dict[str, list[str]] = {
    "google": ["gemini-2.5-flash", "gemini-2.5-flash-lite", "gemini-2.5-pro"],
    "openai": ["gpt-4o-mini", "gpt-4.1-mini", "gpt-4o"],
    "anthropic": ["claude-3-5-haiku-latest", "claude-sonnet-4-20250514"],
}


def list_llm_options() -> dict[str, object]:
    return {
        "providers": sorted(LLM_REGISTRY),
        "models": {name: NARRATIVE_MODELS.get(name, []) for name in LLM_REGISTRY},
    }


_instances: dict[tuple[str, str, float | None], BaseLLM] = {}


def normalize_provider(provider: str | None) -> str:
    name = (provider or settings.BILLINTEL_LLM_PROVIDER or "").strip().lower()
    return PROVIDER_ALIASES.get(name, name)


def _resolve_api_key(provider: str) -> str:
    attr = API_KEY_SETTINGS.get(provider)
    return str(getattr(settings, attr, "") or "") if attr else ""


def create_llm(
    provider: str | None = None,
    model: str | None = None,
    api_key: str | None = None,
    timeout: float | None = None,
    use_cache: bool = True,
) -> BaseLLM:
    """Build (or reuse) a provider client for the narrative collaborator.

    Raises ValueError when the provider is unknown or has no API key, so
    callers can decide to run without an LLM.
    """
    name = normalize_provider(provider)
    if name not in LLM_REGISTRY:
        raise ValueError(f"Unsupported LLM provider: {name}")

    api_key = api_key or _resolve_api_key(name)
    if not api_key:
        raise ValueError(f"Missing API key for provider '{name}'. Set {API_KEY_SETTINGS[name]} in env.")

    model = model or settings.BILLINTEL_LLM_MODEL
    cache_key = (name, model, timeout)
    if use_cache and cache_key in _instances:
        return _instances[cache_key]

    instance = LLM_REGISTRY[name](api_key=api_key, model=model, timeout=timeout)
    if use_cache:
        _instances[cache_key] = instance
    return instance


def clear_llm_cache() -> None:
    """Drop cached clients so the next call picks up new settings."""
    _instances.clear()
