"""Default configuration values - no more magic strings!

All default values and fixed tables should be defined here, not hardcoded
in the code.
"""

from __future__ import annotations


# ================================================================
# Application Constants
# ================================================================

APP_NAME = "provider-resolver"
"""Application name (also used as the pip namespace and User-Agent)."""

APP_VERSION = "0.1.0"
"""Application version."""

APP_URL = "https://github.com/provider-resolver/provider-resolver"
"""Public project URL, sent as attribution to aggregator providers."""

DEFAULT_CONFIG_DIR = "~/.provider-resolver"
"""Default directory for configuration and data files."""

DEFAULT_CONFIG_FILENAME = "config.json"
"""Default configuration filename."""

DEFAULT_AUTH_FILENAME = "auth.json"
"""Credential store filename (inside the data dir)."""

DEFAULT_CATALOG_CACHE_FILENAME = "models.json"
"""Cached models catalog filename (inside the cache dir)."""

DEFAULT_CACHE_DIR = "~/.cache/provider-resolver"
"""Default cache directory."""


# ================================================================
# Logging Defaults
# ================================================================

DEFAULT_LOG_MAX_BYTES = 5 * 1024 * 1024
"""Maximum size of a log file before rotation."""

DEFAULT_LOG_BACKUP_COUNT = 3
"""Number of rotated log files to keep."""


# ================================================================
# Catalog Defaults
# ================================================================

MODELS_DEV_URL = "https://models.dev/api.json"
"""Upstream models catalog."""

CATALOG_FETCH_TIMEOUT = 10.0
"""Catalog fetch timeout (seconds)."""

CATALOG_USER_AGENT = f"{APP_NAME}/{APP_VERSION}"
"""User-Agent sent when fetching the catalog."""

DEFAULT_CLIENT_PACKAGE = "chuk_llm"
"""Client package used when the catalog names none we know."""

NPM_PACKAGE_MAP: dict[str, str] = {
    "@ai-sdk/openai": "openai",
    "@ai-sdk/openai-compatible": "openai",
    "@ai-sdk/azure": "openai",
    "@ai-sdk/anthropic": "anthropic",
}
"""Catalog (npm) package names mapped to Python client packages."""

OPENAI_COMPATIBLE_PACKAGES = frozenset({"openai"})
"""Client packages that understand the ``include_usage`` option."""


# ================================================================
# Client Acquisition
# ================================================================

LOCAL_PACKAGE_PREFIX = "file://"
"""Package refs with this prefix are loaded from disk, never installed."""

FACTORY_PREFIX = "create_"
"""Generic client modules expose exactly one factory with this prefix."""

PACKAGE_DISTRIBUTIONS: dict[str, str] = {
    "chuk_llm": "chuk-llm",
}
"""Import names whose pip distribution name differs."""

ENTRY_POINT_OVERRIDES: dict[str, tuple[str, str]] = {
    # The Vertex flavour of the Anthropic SDK lives below the package root.
    "google-vertex-anthropic": ("anthropic", "anthropic.lib.vertex"),
}
"""Provider id -> (package, module) for clients at a non-standard path."""

PACKAGE_ENTRY_MODULES: dict[str, str] = {
    "chuk_llm": "chuk_llm.llm.client",
}
"""Packages whose client factory lives in a submodule."""

DEFAULT_AZURE_API_VERSION = "2024-10-21"
"""Azure OpenAI API version used when none is configured."""

CHUK_PROVIDER_NAMES: dict[str, str] = {
    "amazon-bedrock": "bedrock",
    "google": "gemini",
    "github-copilot-enterprise": "github-copilot",
}
"""Provider ids that chuk-llm knows under another name."""

PIP_INSTALL_TIMEOUT = 300.0
"""Upper bound for a single ``pip install`` (seconds)."""


# ================================================================
# Provider Constants
# ================================================================

PROVIDER_OPENAI = "openai"
PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_AZURE = "azure"
PROVIDER_AZURE_COGNITIVE = "azure-cognitive-services"
PROVIDER_BEDROCK = "amazon-bedrock"
PROVIDER_OPENROUTER = "openrouter"
PROVIDER_VERCEL = "vercel"
PROVIDER_ZENMUX = "zenmux"
PROVIDER_OPENCODE = "opencode"
PROVIDER_LOCAL = "local"
PROVIDER_VERTEX = "google-vertex"
PROVIDER_VERTEX_ANTHROPIC = "google-vertex-anthropic"
PROVIDER_COPILOT = "github-copilot"
PROVIDER_COPILOT_ENTERPRISE = "github-copilot-enterprise"

COPILOT_ENTERPRISE_NAME = "GitHub Copilot Enterprise"
"""Display name of the synthesised enterprise variant."""

PUBLIC_API_KEY = "public"
"""Key used for providers that serve free models anonymously."""

ANTHROPIC_BETA_FEATURES = (
    "claude-code-20250219,"
    "interleaved-thinking-2025-05-14,"
    "fine-grained-tool-streaming-2025-05-14"
)
"""Beta features requested from Anthropic."""

ATTRIBUTION_HEADERS: dict[str, str] = {
    "HTTP-Referer": APP_URL,
    "X-Title": APP_NAME,
}
"""Headers aggregators use to attribute traffic to this application."""

DEFAULT_BEDROCK_REGION = "us-east-1"
DEFAULT_VERTEX_LOCATION = "us-east5"
DEFAULT_VERTEX_ANTHROPIC_LOCATION = "global"


# ================================================================
# Model Selection
# ================================================================

MODEL_PRIORITY = ["gpt-5", "claude-sonnet-4", "big-pickle", "gemini-3-pro"]
"""Name fragments of preferred default models, best first."""

LATEST_MARKER = "latest"
"""Models with this marker sort ahead of their siblings."""

SMALL_MODEL_PRIORITY = [
    "claude-haiku-4-5",
    "claude-haiku-4.5",
    "3-5-haiku",
    "3.5-haiku",
    "gemini-2.5-flash",
    "gpt-5-nano",
]
"""Name fragments of lightweight models, best first."""

SMALL_MODEL_EXCLUSIONS: dict[str, list[str]] = {
    # Counted as a premium request on Copilot.
    PROVIDER_COPILOT: ["claude-haiku-4.5"],
}

SMALL_MODEL_OVERRIDES: dict[str, list[str]] = {
    PROVIDER_OPENCODE: ["gpt-5-nano"],
    PROVIDER_LOCAL: ["gpt-5-nano"],
}

MODEL_DENYLIST = frozenset({"gpt-5-chat-latest"})
"""Model ids removed from every provider."""

PROVIDER_MODEL_DENYLIST: dict[str, frozenset[str]] = {
    PROVIDER_OPENROUTER: frozenset({"openai/gpt-5-chat"}),
}
"""Model ids removed from one provider only."""
