"""Mixin attaching an entity class to model classes.

Example:
    >>> class User(EntityDSL):
    ...     def __init__(self, name):
    ...         self.name = name
    >>> User.entity("name")
    >>> User("Ada").to_entity().serializable_hash()
    {'name': 'Ada'}
"""

from typing import Any, Type

from silhouette.entity.entity import Entity, OptionsLike


class EntityDSL:
    """Gives each model subclass its own ``Entity`` class.

    A subclass's entity derives from the entity of its nearest model ancestor,
    so exposures declared for a parent model are inherited by its children.
    A model may also define ``Entity`` itself in its class body.
    """

    Entity: Type[Entity] = Entity

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        own = vars(cls).get("Entity")
        if isinstance(own, type) and issubclass(own, Entity):
            return

        parent = next(
            vars(base)["Entity"]
            for base in cls.__mro__[1:]
            if isinstance(vars(base).get("Entity"), type)
        )
        cls.Entity = type(
            "Entity",
            (parent,),
            {"__module__": cls.__module__, "__qualname__": f"{cls.__qualname__}.Entity"},
        )

    @classmethod
    def entity_class(cls) -> Type[Entity]:
        return cls.Entity

    @classmethod
    def entity(cls, *attributes: str, **options: Any) -> Type[Entity]:
        """Expose attributes on the model's entity and return the entity class."""
        if attributes:
            cls.Entity.expose(*attributes, **options)
        return cls.Entity

    def to_entity(self, options: OptionsLike = None) -> Entity:
        """Wrap this model instance in its entity."""
        return type(self).entity_class()(self, options)
