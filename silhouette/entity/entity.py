#!/usr/bin/env python3
"""Entity base class: declaration and representation of objects.

Subclasses declare exposures at class level and represent objects with
``represent()``.

Example:
    >>> class UserEntity(Entity):
    ...     @classmethod
    ...     def declare(cls):
    ...         cls.expose("name")
    ...         cls.expose("email", if_={"type": "full"})
    >>> UserEntity.represent({"name": "Ada", "email": "ada@example.com"}, serializable=True)
    {'name': 'Ada'}
"""

import importlib
import inspect
import threading
import weakref
from collections.abc import Iterator as IteratorABC
from collections.abc import Mapping, Sequence, Set
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, Union

from silhouette.core.constants import ConfigKey, Defaults, RuntimeKey
from silhouette.core.errors import UnknownEntityError
from silhouette.core.options import Options
from silhouette.delegation.delegator import Delegator, delegator_for
from silhouette.entity.schema import COLLECTION_ROOT, ROOT, Schema
from silhouette.exposures.base import Exposure
from silhouette.exposures.nested import NestedExposures
from silhouette.infrastructure.config_manager import get_config_manager
from silhouette.infrastructure.logger import get_logger

OptionsLike = Union[Options, Mapping, None]

# Entity subclasses by name, qualified name and module path
_registry: "weakref.WeakValueDictionary[str, Type[Entity]]" = weakref.WeakValueDictionary()

# Class-level names an exposure can never resolve to
_RESERVED_NAMES = frozenset({"declare"})

# Set while a pool worker represents an item; nested collections stay sequential
_worker_state = threading.local()


class Entity:
    """Base class of all entities.

    A subclass receives a copy of its parent's declarations when it is
    created; a ``declare`` classmethod defined on the subclass then runs once.
    """

    _schema = Schema("Entity")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        parent = next(vars(base)["_schema"] for base in cls.__mro__[1:] if "_schema" in vars(base))
        cls._schema = parent.derive(cls.__qualname__)
        _register(cls)

        if "declare" in vars(cls):
            cls.declare()

    # Declaration

    @classmethod
    def expose(cls, *attributes: str, **options: Any) -> List[Exposure]:
        """Declare exposures for attributes.

        Args:
            *attributes: Attribute names
            **options: Exposure options (``if_``, ``as_`` and ``with_`` for
                the reserved words)

        Returns:
            The exposures created

        Raises:
            UnknownOptionError: If an option is not recognized
            InvalidMultiAttributeUsageError: If a single-field option is used
                with several attributes
        """
        return cls._schema.expose(list(attributes), options)

    @classmethod
    @contextmanager
    def nesting(cls, attribute: str, **options: Any) -> Iterator[Exposure]:
        """Open a nested block keyed by attribute.

        Example:
            >>> with UserEntity.nesting("contact"):
            ...     UserEntity.expose("email")
            ...     UserEntity.expose("phone")
        """
        with cls._schema.nesting(attribute, options) as exposure:
            yield exposure

    @classmethod
    @contextmanager
    def with_options(cls, **options: Any) -> Iterator[None]:
        """Apply options to every exposure declared inside the block."""
        with cls._schema.with_options(options):
            yield

    @classmethod
    def unexpose(cls, *attributes: str) -> None:
        cls._schema.unexpose(*attributes)

    @classmethod
    def unexpose_all(cls) -> None:
        cls._schema.unexpose_all()

    @classmethod
    def root(cls, plural: Optional[str], singular: Optional[str] = None) -> None:
        """Wrap represented collections under plural and single objects under singular."""
        cls._schema.set_root(plural, singular)

    @classmethod
    def present_collection(cls, present_collection: bool = False, collection_name: Optional[str] = None) -> None:
        """Represent collections as one object with the items under collection_name."""
        cls._schema.set_present_collection(present_collection, collection_name)

    @classmethod
    def format_with(cls, name: str, formatter: Callable[[Any], Any]) -> None:
        cls._schema.add_formatter(name, formatter)

    # Introspection

    @classmethod
    def formatters(cls) -> Dict[str, Callable[[Any], Any]]:
        return cls._schema.formatters

    @classmethod
    def root_exposure(cls) -> Exposure:
        return cls._schema.root_exposure

    @classmethod
    def root_exposures(cls) -> NestedExposures:
        return cls._schema.root_exposures

    @classmethod
    def find_exposure(cls, attribute: str) -> Optional[Exposure]:
        return cls._schema.find_exposure(attribute)

    @classmethod
    def documentation(cls) -> Dict[Any, Any]:
        return cls._schema.documentation()

    @classmethod
    def root_element(cls, root_type: str) -> Optional[str]:
        return cls._schema.root_element(root_type)

    # Representation

    @classmethod
    def represent(cls, objects: Any, options: OptionsLike = None, **kwargs: Any) -> Any:
        """Represent an object or a collection of objects.

        Args:
            objects: Object or collection
            options: Runtime options
            **kwargs: More runtime options, merged over options

        Returns:
            Entity instances, or plain data when ``serializable`` is set,
            wrapped under the root name when one applies
        """
        options = Options.wrap(options).merge(_runtime_kwargs(kwargs))
        logger = get_logger()

        if _is_collection(objects) and not cls._schema.presents_collection():
            items = list(objects)
            logger.debug("Representing collection", entity=cls.__qualname__, size=len(items))
            root_element = cls.root_element(COLLECTION_ROOT)
            inner: Any = cls._represent_each(items, options.reverse_merge({RuntimeKey.COLLECTION: True}))
        else:
            if cls._schema.presents_collection():
                if isinstance(objects, IteratorABC):
                    objects = list(objects)
                objects = {cls._schema.collection_name(): objects}
            logger.debug("Representing object", entity=cls.__qualname__)
            root_element = cls.root_element(ROOT)
            inner = cls(objects, options).presented()

        if RuntimeKey.ROOT in options:
            root_element = options[RuntimeKey.ROOT]
        if root_element:
            return {root_element: inner}
        return inner

    @classmethod
    def _represent_each(cls, objects: List[Any], options: Options) -> List[Any]:
        max_workers = int(get_config_manager().get(ConfigKey.MAX_WORKERS, Defaults.MAX_WORKERS) or 1)
        in_worker = getattr(_worker_state, "active", False)
        if max_workers > 1 and options[RuntimeKey.SERIALIZABLE] and len(objects) > 1 and not in_worker:
            # Each element gets its own attr_path stack
            def present(obj: Any) -> Any:
                path = list(options.get(RuntimeKey.ATTR_PATH) or [])
                _worker_state.active = True
                try:
                    return cls(obj, options.merge({RuntimeKey.ATTR_PATH: path})).presented()
                finally:
                    _worker_state.active = False

            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                return list(pool.map(present, objects))

        return [cls(obj, options).presented() for obj in objects]

    @classmethod
    def preload_and_represent(
        cls,
        objects: Any,
        options: OptionsLike = None,
        loader: Optional[Callable[[Any, Dict[str, Any]], Any]] = None,
        **kwargs: Any,
    ) -> Any:
        """Preload associations of objects, then represent them."""
        from silhouette.integration.preloader import Preloader

        options = Options.wrap(options).merge(_runtime_kwargs(kwargs))
        if _is_collection(objects) and isinstance(objects, IteratorABC):
            objects = list(objects)
        Preloader(cls, objects, options, loader).call()
        return cls.represent(objects, options)

    # Instance side

    def __init__(self, obj: Any, options: OptionsLike = None):
        """Initialize entity.

        Args:
            obj: Source object
            options: Runtime options
        """
        self.object = obj
        self.delegator: Delegator = delegator_for(obj)
        self.options = Options.wrap(options)

    def presented(self) -> Any:
        """Plain data when the options ask for serializable output, else self."""
        if self.options[RuntimeKey.SERIALIZABLE]:
            return self.serializable_hash()
        return self

    def serializable_hash(self, runtime_options: OptionsLike = None) -> Any:
        """Represent the object as plain data.

        Args:
            runtime_options: Options merged over the entity's own

        Returns:
            Mapping (or list, when merged lists were exposed), None when the
            object is None

        Raises:
            AttributeNotFoundError: If a non-safe attribute is missing
        """
        if self.object is None:
            return None
        options = self.options.merge(runtime_options)
        return self.root_exposure().serializable_value(self, options)

    as_json = serializable_hash

    def value_for(self, key: Any, options: OptionsLike = None) -> Any:
        """Value rendered under a root key."""
        return self.root_exposure().valid_value_for(key, self, self.options.merge(options))

    def delegate_attribute(self, attribute: str) -> Any:
        """Read attribute, preferring a method or property of the entity class."""
        if self.has_entity_method(attribute):
            value = getattr(self, attribute)
            if inspect.ismethod(value):
                return value()
            return value
        return self.delegator.delegate(attribute)

    def has_entity_method(self, name: str) -> bool:
        """Check whether a subclass of Entity defines name."""
        if name in _RESERVED_NAMES:
            return False
        for klass in type(self).__mro__:
            if klass is Entity:
                return False
            if name in vars(klass):
                return True
        return False

    def to_json(self, options: OptionsLike = None) -> str:
        from silhouette.integration.serializers import to_json

        return to_json(self.serializable_hash(options))

    def to_yaml(self, options: OptionsLike = None) -> str:
        from silhouette.integration.serializers import to_yaml

        return to_yaml(self.serializable_hash(options))

    def to_xml(self, options: OptionsLike = None) -> str:
        from silhouette.integration.serializers import to_xml

        return to_xml(self.serializable_hash(options))

    def __repr__(self) -> str:
        return f"#<{type(self).__qualname__} {self.serializable_hash()!r}>"


def _register(entity_class: Type[Entity]) -> None:
    for name in {
        entity_class.__name__,
        entity_class.__qualname__,
        f"{entity_class.__module__}.{entity_class.__qualname__}",
    }:
        _registry[name] = entity_class


def _runtime_kwargs(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    # except is a keyword, so callers pass except_
    return {(key[:-1] if key == "except_" else key): value for key, value in kwargs.items()}


def _is_collection(objects: Any) -> bool:
    if isinstance(objects, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(objects, (Sequence, Set, IteratorABC))


def resolve_entity(reference: Any) -> Type[Entity]:
    """Resolve a ``using`` reference to an Entity subclass.

    Args:
        reference: Entity subclass, registered name or dotted import path

    Returns:
        Entity subclass

    Raises:
        UnknownEntityError: If reference names no Entity subclass
    """
    if isinstance(reference, type) and issubclass(reference, Entity):
        return reference

    if isinstance(reference, str):
        registered = _registry.get(reference)
        if registered is not None:
            return registered

        module_name, _, class_name = reference.rpartition(".")
        if module_name:
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                raise UnknownEntityError(reference) from e
            candidate = getattr(module, class_name, None)
            if isinstance(candidate, type) and issubclass(candidate, Entity):
                return candidate

    raise UnknownEntityError(str(reference))
