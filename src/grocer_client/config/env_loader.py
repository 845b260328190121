"""Environment variable configuration loading.

Reads ``GROCER_*`` variables, and optionally a ``.env`` file through
python-dotenv. Values are validated field by field with `ClientSettings` so a
bad variable is reported by name.
"""

import os
from pathlib import Path
from typing import Annotated, Any

from dotenv import dotenv_values
from pydantic import TypeAdapter, ValidationError

from .schema import FIELD_ORDER, ClientSettings

ENV_PREFIX = "GROCER_"
ENV_VARS = {f"{ENV_PREFIX}{name.upper()}": name for name in FIELD_ORDER}


class EnvironmentConfigLoader:
    """Loads configuration from the process environment and ``.env`` files."""

    def load_env_config(self) -> dict[str, Any]:
        """Return validated values for every ``GROCER_*`` variable that is set."""
        raw = {
            field: os.environ[var] for var, field in ENV_VARS.items() if var in os.environ
        }
        return self._validate(raw, source="environment")

    def load_env_file(self, env_file: str | Path) -> dict[str, Any]:
        """Return validated values found in a ``.env`` file.

        Unlike ``load_dotenv`` this never mutates ``os.environ``.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        env_path = Path(env_file)
        if not env_path.exists():
            raise FileNotFoundError(f"Environment file not found: {env_path}")

        file_values = dotenv_values(env_path, encoding="utf-8")
        return self._validate(
            {
                field: file_values[var]
                for var, field in ENV_VARS.items()
                if file_values.get(var) is not None
            },
            source=str(env_path),
        )

    def get_env_summary(self) -> dict[str, str]:
        """Return the ``GROCER_*`` variables currently set."""
        return {var: os.environ[var] for var in ENV_VARS if var in os.environ}

    @staticmethod
    def _validate(raw: dict[str, Any], *, source: str) -> dict[str, Any]:
        if not raw:
            return {}
        result: dict[str, Any] = {}
        for field, value in raw.items():
            try:
                parsed = _field_adapter(field).validate_python(value)
            except ValidationError as e:
                raise ValueError(
                    f"Invalid value in {source}: "
                    f"{ENV_PREFIX}{field.upper()}={value!r}. "
                    f"Error: {e}"
                ) from e
            result[field] = parsed
        return result


def _field_adapter(field: str) -> TypeAdapter[Any]:
    """Coerce one field with its declared type and constraints.

    Cross-field rules run later, when the resolver validates the merged result.
    """
    info = ClientSettings.model_fields[field]
    if not info.metadata:
        return TypeAdapter(info.annotation)
    return TypeAdapter(Annotated[info.annotation, *info.metadata])
