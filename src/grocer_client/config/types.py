"""Core configuration data types.

Configuration is resolved once, from every source, into a `ResolvedConfig`
that remembers where each value came from. The client only ever sees the
immutable `FrozenConfig` produced by `ResolvedConfig.to_frozen()`.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from pydantic import ValidationError

from grocer_client.core.exceptions import ConfigurationError

from .schema import FIELD_ORDER, ClientSettings

ConfigOrigin = Literal["programmatic", "env", "env_file", "default"]
SourceMap = Mapping[str, ConfigOrigin]


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing."""

    base_url: str
    timeout_seconds: float
    ok_code: int
    session_expired_code: int
    refresh_path: str
    logout_path: str
    login_path: str
    renewal_timeout_seconds: float | None

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def to_frozen(self) -> "FrozenConfig":
        """Drop audit metadata and return the immutable client configuration."""
        values = self._asdict()
        values.pop("origin")
        return FrozenConfig(**values)

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Return a copy with programmatic overrides applied.

        Unknown fields are ignored. Overridden fields are marked as
        ``programmatic`` in the origin map.

        Raises:
            ConfigurationError: If the merged values fail validation.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)
        for field, value in overrides.items():
            if field in FIELD_ORDER:
                new_values[field] = value
                new_origin[field] = "programmatic"
        new_values.pop("origin")
        try:
            validated = ClientSettings.model_validate(new_values)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e
        return ResolvedConfig(**validated.to_dict(), origin=new_origin)

    def audit(self) -> str:
        """Human-readable report of each field's value and origin."""
        lines = []
        for field in FIELD_ORDER:
            origin = self.origin.get(field, "default")
            value = getattr(self, field)
            if origin == "env":
                lines.append(f"{field}: env:GROCER_{field.upper()}={value}")
            else:
                lines.append(f"{field}: {origin}:{value}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration consumed by `SessionClient`."""

    base_url: str
    timeout_seconds: float
    ok_code: int
    session_expired_code: int
    refresh_path: str
    logout_path: str
    login_path: str
    renewal_timeout_seconds: float | None = None
