"""Source tracking for configuration resolution."""

from .types import ConfigOrigin, SourceMap


class SourceTracker:
    """Builds a `SourceMap` while configuration sources are merged."""

    def __init__(self) -> None:
        self._origins: dict[str, ConfigOrigin] = {}

    def set_origin(self, field: str, origin: ConfigOrigin) -> None:
        self._origins[field] = origin

    def get_source_map(self) -> SourceMap:
        """Return a copy of the recorded origins."""
        return dict(self._origins)
