"""Configuration management for the storefront client.

Resolve once, freeze, then hand the frozen value to the client:

- ResolvedConfig: merged configuration with audit metadata
- FrozenConfig: immutable configuration consumed by `SessionClient`
- SourceMap: where each value came from
"""

from .api import check_environment, resolve_config
from .audit import SourceTracker
from .resolver import ConfigResolver
from .schema import ClientSettings
from .scope import config_scope, get_ambient_resolved_config
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [  # noqa: RUF022
    # Main API
    "resolve_config",
    "check_environment",
    # Scoping
    "config_scope",
    "get_ambient_resolved_config",
    # Core types
    "ResolvedConfig",
    "FrozenConfig",
    "SourceMap",
    "ConfigOrigin",
    # Advanced usage
    "ClientSettings",
    "ConfigResolver",
    "SourceTracker",
]
