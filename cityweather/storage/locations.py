from __future__ import annotations

from typing import List, Sequence

from ..core.models import Location


class ConfigLocationSource:
    """Serves the ``locations`` block of the JSON config as the active location set."""

    def __init__(self, locations: Sequence[Location]) -> None:
        self._locations = list(locations)

    def get_active_locations(self) -> List[Location]:
        return list(self._locations)
