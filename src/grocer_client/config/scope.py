"""Configuration scoping for entry-time overrides.

A scope only affects configuration *resolution*; clients that were already
built keep the `FrozenConfig` they were given.
"""

from collections.abc import Generator
from contextlib import contextmanager
import contextvars

from .types import ResolvedConfig

_ambient_resolved_config: contextvars.ContextVar[ResolvedConfig] = (
    contextvars.ContextVar("grocer_client_resolved_config")
)


def get_ambient_resolved_config() -> ResolvedConfig | None:
    """Return the configuration set by an enclosing `config_scope`, if any."""
    try:
        return _ambient_resolved_config.get()
    except LookupError:
        return None


@contextmanager
def config_scope(config: ResolvedConfig) -> Generator[None]:
    """Temporarily make ``config`` the result of `resolve_config()`.

    Async-safe: the value lives in a context variable.

    Example:
        with config_scope(resolve_config({"base_url": "https://shop.test/api"})):
            client = create_client()
    """
    token = _ambient_resolved_config.set(config)
    try:
        yield
    finally:
        _ambient_resolved_config.reset(token)
