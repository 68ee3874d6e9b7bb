# src/provider_resolver/model_management/ranking.py
"""Model references, default-model ranking and small-model preferences."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import NamedTuple, TypeVar, Union

from provider_resolver.catalog.models import ModelDescriptor
from provider_resolver.config.defaults import (
    LATEST_MARKER,
    MODEL_PRIORITY,
    SMALL_MODEL_EXCLUSIONS,
    SMALL_MODEL_OVERRIDES,
    SMALL_MODEL_PRIORITY,
)

M = TypeVar("M", bound=Union[ModelDescriptor, str])


class ModelRef(NamedTuple):
    """A ``provider/model`` pair."""

    provider_id: str
    model_id: str

    def __str__(self) -> str:
        return f"{self.provider_id}/{self.model_id}"


def parse_model(model: str) -> ModelRef:
    """
    Split ``provider/model`` on the first slash.

    >>> parse_model("openrouter/openai/gpt-5")
    ModelRef(provider_id='openrouter', model_id='openai/gpt-5')
    """
    provider_id, _, model_id = model.partition("/")
    return ModelRef(provider_id, model_id)


def _model_id(model: ModelDescriptor | str) -> str:
    return model if isinstance(model, str) else model.id


def priority_rank(model_id: str, priority: Sequence[str] = MODEL_PRIORITY) -> int:
    """Index of the first priority fragment in ``model_id``; unlisted sort last."""
    for index, fragment in enumerate(priority):
        if fragment in model_id:
            return index
    return len(priority)


def sort_models(
    models: Iterable[M], priority: Sequence[str] = MODEL_PRIORITY
) -> list[M]:
    """
    Best default first.

    Keys, most significant first: priority rank, "latest" before the rest,
    then id descending. Stable sorts are applied least significant first.
    """
    ranked = sorted(models, key=_model_id, reverse=True)
    ranked.sort(key=lambda m: 0 if LATEST_MARKER in _model_id(m) else 1)
    ranked.sort(key=lambda m: priority_rank(_model_id(m), priority))
    return ranked


def small_model_priority(provider_id: str) -> list[str]:
    """Lightweight-model name fragments to try for a provider, best first."""
    if provider_id in SMALL_MODEL_OVERRIDES:
        return list(SMALL_MODEL_OVERRIDES[provider_id])
    excluded = SMALL_MODEL_EXCLUSIONS.get(provider_id, [])
    return [fragment for fragment in SMALL_MODEL_PRIORITY if fragment not in excluded]
