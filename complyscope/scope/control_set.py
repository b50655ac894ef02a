"""Deduplicating set of control identifiers."""

from typing import Iterable, Iterator, List, Optional, Set


class ControlSetIndex:
    """Set of control IDs that always enumerates in ascending order."""

    def __init__(self, control_ids: Optional[Iterable[str]] = None):
        self._ids: Set[str] = set()
        if control_ids is not None:
            self.update(control_ids)

    def add(self, control_id: str) -> None:
        """Add a control ID; adding an existing ID is a no-op."""
        self._ids.add(control_id)

    def update(self, control_ids: Iterable[str]) -> None:
        """Add several control IDs."""
        for control_id in control_ids:
            self.add(control_id)

    def sorted(self) -> List[str]:
        """Return a new ascending list of the control IDs."""
        return sorted(self._ids)

    def __contains__(self, control_id: object) -> bool:
        return control_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self.sorted())

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __repr__(self) -> str:
        return f"ControlSetIndex({self.sorted()!r})"
