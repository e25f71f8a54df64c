"""Assembles the output of a nesting or root exposure."""

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Union

if TYPE_CHECKING:
    from silhouette.exposures.base import Exposure


class OutputBuilder:
    """Collects exposure results into a mapping, or a list when merging lists.

    Results of ``merge`` exposures are spliced into the output: lists are
    concatenated into a collection, mappings are merged into the output
    mapping. Everything else is stored under the exposure key.
    """

    def __init__(self, entity: Any):
        self._entity = entity
        self._output_hash: Dict[Any, Any] = {}
        self._output_collection: List[List[Any]] = []

    def add(self, exposure: "Exposure", result: Any) -> None:
        """Add one exposure result.

        Args:
            exposure: Exposure that produced result
            result: Resolved value
        """
        if exposure.for_merge and isinstance(result, list):
            self._output_collection.append(result)
        elif exposure.for_merge:
            if result is None:
                return
            self._merge(exposure.for_merge, _as_mapping(result))
        else:
            self._output_hash[exposure.key(self._entity)] = result

    def output(self) -> Union[Dict[Any, Any], List[Any]]:
        """Final structure: the mapping, or the merged list when one was collected."""
        if not self._output_collection:
            return self._output_hash

        collection = [item for items in self._output_collection for item in items]
        if self._output_hash:
            collection.append(self._output_hash)
        return collection

    def _merge(self, for_merge: Any, result: Mapping[Any, Any]) -> None:
        resolver = for_merge if callable(for_merge) else None
        for key, value in result.items():
            if resolver is not None and key in self._output_hash:
                self._output_hash[key] = resolver(key, self._output_hash[key], value)
            else:
                self._output_hash[key] = value


def _as_mapping(result: Any) -> Mapping[Any, Any]:
    if isinstance(result, Mapping):
        return result
    serializable_hash = getattr(result, "serializable_hash", None)
    if callable(serializable_hash):
        return serializable_hash() or {}
    return dict(result)
