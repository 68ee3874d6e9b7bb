# src/provider_resolver/model_management/region.py
"""
Region-aware model id prefixes.

Cross-region inference profiles on Amazon Bedrock are addressed by
prefixing the model id with a geography (``us.``, ``eu.``, ``apac.``, ...).
Which prefix applies depends on the region and the model family, so the
rules are kept as an ordered table: the first rule that matches decides,
and a matching rule without a prefix means "leave the id alone".
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrefixRule:
    """
    One row of the prefix table.

    Attributes:
        family: Region family (the part of the region before the first "-")
        models: Fragments; the rule applies when the model id contains any
        prefix: Prefix to add (without the dot); None leaves the id unchanged
        regions: Exact regions the rule is limited to (None = whole family)
        excluded_region_prefixes: Regions starting with these never match
    """

    family: str
    models: tuple[str, ...] = ()
    prefix: str | None = None
    regions: frozenset[str] | None = None
    excluded_region_prefixes: tuple[str, ...] = ()

    def matches(self, region: str, model_id: str) -> bool:
        if region_family(region) != self.family:
            return False
        if self.regions is not None and region not in self.regions:
            return False
        if any(region.startswith(p) for p in self.excluded_region_prefixes):
            return False
        if self.models and not any(m in model_id for m in self.models):
            return False
        return True


EU_INFERENCE_REGIONS = frozenset(
    {
        "eu-west-1",
        "eu-west-2",
        "eu-west-3",
        "eu-north-1",
        "eu-central-1",
        "eu-south-1",
        "eu-south-2",
    }
)

AU_INFERENCE_REGIONS = frozenset({"ap-southeast-2", "ap-southeast-4"})

BEDROCK_PREFIX_RULES: tuple[PrefixRule, ...] = (
    PrefixRule(
        family="us",
        models=("nova-micro", "nova-lite", "nova-pro", "nova-premier", "claude", "deepseek"),
        prefix="us",
        excluded_region_prefixes=("us-gov",),
    ),
    PrefixRule(
        family="eu",
        models=("claude", "nova-lite", "nova-micro", "llama3", "pixtral"),
        prefix="eu",
        regions=EU_INFERENCE_REGIONS,
    ),
    PrefixRule(
        family="ap",
        models=("anthropic.claude-sonnet-4-5", "anthropic.claude-haiku"),
        prefix="au",
        regions=AU_INFERENCE_REGIONS,
    ),
    PrefixRule(
        family="ap",
        models=("claude", "nova-lite", "nova-micro", "nova-pro"),
        prefix="apac",
    ),
)


def region_family(region: str) -> str:
    """``"eu-west-1"`` -> ``"eu"``."""
    return region.split("-", 1)[0]


def rewrite_model_id(
    region: str,
    model_id: str,
    rules: Sequence[PrefixRule] = BEDROCK_PREFIX_RULES,
) -> str:
    """Apply the first matching prefix rule to ``model_id``."""
    for rule in rules:
        if rule.matches(region, model_id):
            if rule.prefix is None:
                return model_id
            rewritten = f"{rule.prefix}.{model_id}"
            logger.debug(f"Rewrote {model_id} -> {rewritten} for region {region}")
            return rewritten
    return model_id
