"""Public resolver surface."""

from provider_resolver.core.model_resolver import ModelResolver

__all__ = ["ModelResolver"]
