"""Internal helpers for development-time feature flags.

Kept tiny so every module checks opt-in validation the same way.
"""

from __future__ import annotations

import os

__all__ = ["dev_validate_enabled"]


def dev_validate_enabled(*, override: bool | None = None) -> bool:
    """Return True when dev-time validation is enabled.

    - If ``override`` is provided, it takes precedence.
    - Otherwise, returns True when the environment variable
      ``GROCER_CLIENT_VALIDATE`` is exactly ``"1"``.
    """
    if override is not None:
        return bool(override)
    return os.getenv("GROCER_CLIENT_VALIDATE") == "1"
