"""Provider and model catalog."""

from provider_resolver.catalog.models import (
    ModelCost,
    ModelDescriptor,
    ModelLimit,
    ModelModalities,
    ProviderDescriptor,
)
from provider_resolver.catalog.source import (
    CatalogSource,
    ModelsDevCatalog,
    StaticCatalog,
    parse_catalog,
)

__all__ = [
    "CatalogSource",
    "ModelCost",
    "ModelDescriptor",
    "ModelLimit",
    "ModelModalities",
    "ModelsDevCatalog",
    "ProviderDescriptor",
    "StaticCatalog",
    "parse_catalog",
]
