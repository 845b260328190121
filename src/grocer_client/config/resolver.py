"""Configuration resolution with precedence handling.

Precedence, highest first: Programmatic > Environment > .env file > Defaults
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from grocer_client.core.exceptions import ConfigurationError

from .audit import SourceTracker
from .env_loader import EnvironmentConfigLoader
from .schema import FIELD_ORDER, ClientSettings
from .types import ConfigOrigin, ResolvedConfig


class ConfigResolver:
    """Merges configuration sources into a validated `ResolvedConfig`."""

    def __init__(self) -> None:
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        use_env_file: str | Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence).
                Unknown keys are ignored.
            use_env_file: Optional .env file read below the real environment.

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ConfigurationError: If a source holds invalid values or the merged
                configuration fails validation.
        """
        source_tracker = SourceTracker()
        merged_config: dict[str, Any] = {}

        def _apply(values: dict[str, Any], origin: ConfigOrigin) -> None:
            for field, value in values.items():
                if field in FIELD_ORDER:  # Only override known fields
                    merged_config[field] = value
                    source_tracker.set_origin(field, origin)

        # Step 1: Schema defaults (read from the schema, not the environment)
        _apply(
            {name: ClientSettings.model_fields[name].default for name in FIELD_ORDER},
            "default",
        )

        # Step 2-3: .env file, then the real environment
        try:
            if use_env_file is not None:
                _apply(self.env_loader.load_env_file(use_env_file), "env_file")
            _apply(self.env_loader.load_env_config(), "env")
        except (ValueError, FileNotFoundError) as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e

        # Step 4: Programmatic overrides
        if programmatic:
            _apply(programmatic, "programmatic")

        # Step 5: Validate the merged result as a whole
        try:
            validated = ClientSettings.model_validate(merged_config)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(
            **validated.to_dict(),
            origin=source_tracker.get_source_map(),
        )
