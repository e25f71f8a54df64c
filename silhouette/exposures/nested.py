"""Ordered child list of a nesting exposure."""

from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, List, Optional

if TYPE_CHECKING:
    from silhouette.exposures.base import Exposure


class NestedExposures:
    """List of exposures with attribute lookup and a memoized duplicate check.

    The memo is reset by every mutation, so it never outlives a change to
    the declarations.
    """

    def __init__(self, exposures: Optional[Iterable["Exposure"]] = None):
        self._exposures: List["Exposure"] = list(exposures or [])
        self._deep_complex_nesting: Optional[bool] = None

    def find_by(self, attribute: str) -> Optional["Exposure"]:
        """First exposure declared for attribute."""
        for exposure in self._exposures:
            if exposure.attribute == attribute:
                return exposure
        return None

    def select_by(self, attribute: str) -> List["Exposure"]:
        """All exposures declared for attribute, in declaration order."""
        return [e for e in self._exposures if e.attribute == attribute]

    def append(self, exposure: "Exposure") -> None:
        self._reset_memoization()
        self._exposures.append(exposure)

    def delete_by(self, *attributes: str) -> List["Exposure"]:
        """Remove every exposure declared for one of attributes."""
        self._reset_memoization()
        self._exposures = [e for e in self._exposures if e.attribute not in attributes]
        return self._exposures

    def clear(self) -> None:
        self._reset_memoization()
        self._exposures.clear()

    def copy(self) -> "NestedExposures":
        """Copy of the list with every exposure copied."""
        return NestedExposures(e.copy() for e in self._exposures)

    def select(self, predicate: Callable[["Exposure"], bool]) -> List["Exposure"]:
        return [e for e in self._exposures if predicate(e)]

    def deep_complex_nesting(self, entity: Any) -> bool:
        """Check whether two nesting exposures share an output key."""
        if self._deep_complex_nesting is None:
            seen = set()
            duplicated = False
            for exposure in self._exposures:
                if not exposure.nesting:
                    continue
                key = exposure.key(entity)
                if key in seen:
                    duplicated = True
                    break
                seen.add(key)
            self._deep_complex_nesting = duplicated
        return self._deep_complex_nesting

    def _reset_memoization(self) -> None:
        self._deep_complex_nesting = None

    def __iter__(self) -> Iterator["Exposure"]:
        return iter(self._exposures)

    def __len__(self) -> int:
        return len(self._exposures)

    def __getitem__(self, index: int) -> "Exposure":
        return self._exposures[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NestedExposures):
            return self._exposures == other._exposures
        if isinstance(other, list):
            return self._exposures == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"NestedExposures({self._exposures!r})"
