"""Value sets: static values at construction, staged and frozen at resolution."""

from collections.abc import Mapping
from types import MappingProxyType

from envcompose.errors import ConstructionError


class ValueSet:
    """Key/value store owned by exactly one deployable.

    Constructors write static values directly. Resolution takes a staged copy,
    lets the hook fill it in and commits it only when the hook succeeds, so a
    consumer sees either the complete resolved set or nothing.
    """

    def __init__(self, owner_id: str, initial: Mapping | None = None):
        self.owner_id = owner_id
        self._data = dict(initial or {})
        self._committed: Mapping | None = None

    def __getitem__(self, key):
        return self._data[key]

    def __setitem__(self, key, value):
        if self._committed is not None:
            raise ConstructionError(
                f"values of '{self.owner_id}' are resolved and read-only",
                context={"key": str(key)},
            )
        self._data[key] = value

    def __contains__(self, key) -> bool:
        return key in self._data

    def get(self, key, default=None):
        return self._data.get(key, default)

    def snapshot(self) -> dict:
        """Shallow copy of the current values (static ones until resolved)."""
        return dict(self._data)

    def stage(self) -> dict:
        return dict(self._data)

    def commit(self, staged: dict) -> Mapping:
        self._data = staged
        self._committed = MappingProxyType(self._data)
        return self._committed

    @property
    def committed(self) -> Mapping | None:
        return self._committed
