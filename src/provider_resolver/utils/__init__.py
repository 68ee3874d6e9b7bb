"""Small async and data helpers shared across provider-resolver."""

from provider_resolver.utils.merge import deep_merge
from provider_resolver.utils.single_flight import SingleFlight

__all__ = ["SingleFlight", "deep_merge"]
