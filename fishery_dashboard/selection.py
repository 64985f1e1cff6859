"""Selected-entity state shared by the map and the stacked-area chart."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class SelectionState:
    """
    Immutable set of selected entity codes.

    `toggle` and `clear` are the only transitions; both return a new
    state. Iteration is always in sorted code order.
    """
    codes: FrozenSet[str] = frozenset()

    def toggle(self, code: str) -> "SelectionState":
        if code in self.codes:
            return SelectionState(self.codes - {code})
        return SelectionState(self.codes | {code})

    def clear(self) -> "SelectionState":
        return SelectionState()

    def sorted_codes(self) -> List[str]:
        return sorted(self.codes)

    def __contains__(self, code) -> bool:
        return code in self.codes

    def __iter__(self) -> Iterator[str]:
        return iter(self.sorted_codes())

    def __len__(self) -> int:
        return len(self.codes)

    def to_store(self) -> List[str]:
        return self.sorted_codes()

    @classmethod
    def from_store(cls, data: Optional[Iterable[str]]) -> "SelectionState":
        return cls(frozenset(data or ()))
