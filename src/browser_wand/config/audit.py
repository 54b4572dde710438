"""Source tracking for configuration resolution."""

from collections.abc import Iterable

from .types import ConfigOrigin, SourceMap


class SourceTracker:
    """Records where each configuration field's final value came from.

    Later sources overwrite earlier ones, so recording in precedence order
    leaves each field mapped to the source that actually won.
    """

    def __init__(self) -> None:
        self._origins: dict[str, ConfigOrigin] = {}

    def set_origin(self, field: str, origin: ConfigOrigin) -> None:
        self._origins[field] = origin

    def set_multiple(self, fields: Iterable[str], origin: ConfigOrigin) -> None:
        for field in fields:
            self._origins[field] = origin

    def get_source_map(self) -> SourceMap:
        """Return a copy of the recorded origins."""
        return dict(self._origins)


def summarize_origins(source_map: SourceMap) -> dict[str, int]:
    """Count how many fields each source supplied."""
    counts: dict[str, int] = {}
    for origin in source_map.values():
        counts[origin] = counts.get(origin, 0) + 1
    return counts
