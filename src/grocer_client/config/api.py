"""Public API for the configuration system."""

from pathlib import Path
from typing import Any

from grocer_client.core.exceptions import ConfigurationError

from .resolver import ConfigResolver
from .scope import get_ambient_resolved_config
from .types import ResolvedConfig

# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Programmatic > Environment > .env file > Defaults. Inside a
    `config_scope`, the scoped configuration replaces the lower sources and
    only programmatic overrides are applied on top of it.

    Args:
        programmatic: Dictionary of overrides (highest precedence).
        use_env_file: Optional .env file to read below the real environment.

    Returns:
        ResolvedConfig with merged values and source tracking for audit.

    Raises:
        ConfigurationError: If any source holds invalid values, or if
            ``use_env_file`` is given inside a `config_scope` (the scope
            already replaces the .env layer).

    Example:
        config = resolve_config({"base_url": "https://shop.example.com/api"})
        client = SessionClient(config.to_frozen())
    """
    ambient = get_ambient_resolved_config()
    if ambient is not None:
        if use_env_file is not None:
            raise ConfigurationError(
                f"use_env_file={str(use_env_file)!r} cannot be combined with an "
                "active config_scope"
            )
        return ambient.with_overrides(**programmatic) if programmatic else ambient
    return _resolver.resolve(programmatic, use_env_file=use_env_file)


def check_environment() -> dict[str, str]:
    """Return the ``GROCER_*`` environment variables currently set."""
    return _resolver.env_loader.get_env_summary()
