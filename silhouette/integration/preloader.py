#!/usr/bin/env python3
"""Association preloading ahead of representation.

Exposures may carry a ``preload`` key naming an association. The Preloader
walks an entity's exposures, honoring only/except, and collects those keys
into a nested mapping, for example ``{"books": {"tags": {}}, "tags": {}}``.
Fetching is left to a loader callable supplied by the persistence layer.

Example:
    >>> def loader(objects, associations):
    ...     orm.preload(objects, associations)
    >>> Preloader(UserEntity, users, {"only": ["books"]}, loader).call()
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from silhouette.core.options import Options
from silhouette.exposures.base import Exposure
from silhouette.infrastructure.logger import get_logger

Associations = Dict[str, Any]
Loader = Callable[[List[Any], Associations], Any]

# Loader used when none is passed to the Preloader
_default_loader: Optional[Loader] = None


def set_default_loader(loader: Optional[Loader]) -> None:
    """Set the loader used by preloaders created without one.

    Args:
        loader: Callable receiving (objects, associations), or None to unset
    """
    global _default_loader
    _default_loader = loader


def get_default_loader() -> Optional[Loader]:
    return _default_loader


class Preloader:
    """Collects the preload keys of an entity and hands them to a loader."""

    def __init__(
        self,
        entity_class: Any,
        objects: Any,
        options: Any = None,
        loader: Optional[Loader] = None,
    ):
        """Initialize preloader.

        Args:
            entity_class: Entity whose exposures are walked
            objects: Object or collection of objects to preload for
            options: Runtime options (only/except are honored)
            loader: Callable receiving (objects, associations)
        """
        self.entity_class = entity_class
        self.objects = _wrap(objects)
        self.options = Options.wrap(options)
        self.loader = loader

    def associations(self) -> Associations:
        """Nested mapping of preload keys reachable under the options."""
        associations: Associations = {}
        self._collect(self.entity_class.root_exposures(), associations, self.options)
        return associations

    def call(self) -> Any:
        """Preload the associations of the objects.

        Returns:
            The loader's result, or None when no loader is configured
        """
        loader = self.loader or _default_loader
        if loader is None:
            get_logger().warning(
                "Preloading requires a loader; nothing was preloaded",
                entity=self.entity_class.__qualname__,
            )
            return None

        associations = self.associations()
        get_logger().debug(
            "Preloading associations",
            entity=self.entity_class.__qualname__,
            objects=len(self.objects),
            associations=list(associations),
        )
        return loader(self.objects, associations)

    def _collect(self, exposures: Iterable[Exposure], associations: Associations, options: Options) -> None:
        for exposure in exposures:
            if not exposure.should_return_key(options):
                continue

            new_associations = None
            if exposure.preload:
                new_associations = associations.setdefault(exposure.preload, {})
            if exposure.proc_key:
                continue

            if exposure.nesting:
                self._collect(exposure.nested_exposures, associations, options.for_nesting(exposure.raw_key))
            elif exposure.using is not None and new_associations is not None:
                self._collect(
                    exposure.using_class.root_exposures(),
                    new_associations,
                    options.for_nesting(exposure.raw_key),
                )


def _wrap(objects: Any) -> List[Any]:
    if objects is None:
        return []
    if isinstance(objects, (list, tuple, set, frozenset)):
        return list(objects)
    return [objects]
