"""
Silhouette Core: Runtime options.

An Options value is passed through a whole representation. It carries the
caller's keys (read by conditions and procs), the only/except projection and
the attribute-path stack. Descending into a nested or `using` exposure derives
a new Options through for_nesting(); the parent value is never changed.

Example:
    >>> opts = Options({"only": ["name", {"address": ["city"]}]})
    >>> opts.should_return_key("email")
    False
    >>> opts.for_nesting("address").should_return_key("city")
    True
"""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from silhouette.core.constants import RuntimeKey
from silhouette.core.errors import RequiredOptionError

_MISSING = object()

FieldTree = Dict[str, Any]


class Options:
    """Immutable-by-convention bag of runtime options."""

    def __init__(self, opts: Optional[Mapping[str, Any]] = None):
        """Initialize options.

        Args:
            opts: Caller supplied options
        """
        self._opts: Dict[str, Any] = dict(opts or {})
        self._has_only = self._opts.get(RuntimeKey.ONLY) is not None
        self._has_except = self._opts.get(RuntimeKey.EXCEPT) is not None
        self._only_fields: Optional[FieldTree] = None
        self._except_fields: Optional[FieldTree] = None
        self._for_nesting_cache: Dict[Any, "Options"] = {}

    @classmethod
    def wrap(cls, opts: Union["Options", Mapping[str, Any], None]) -> "Options":
        """Return opts as an Options instance without copying existing ones."""
        if isinstance(opts, Options):
            return opts
        return cls(opts)

    def to_dict(self) -> Dict[str, Any]:
        """Return a shallow copy of the underlying mapping."""
        return dict(self._opts)

    def __getitem__(self, key: str) -> Any:
        # Missing keys read as None so conditions can test options freely
        return self._opts.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._opts

    def __iter__(self) -> Iterator[str]:
        return iter(self._opts)

    def __len__(self) -> int:
        return len(self._opts)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Options):
            return self._opts == other._opts
        if isinstance(other, Mapping):
            return self._opts == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Options({self._opts!r})"

    def get(self, key: str, default: Any = None) -> Any:
        """Get an option value.

        Args:
            key: Option name
            default: Value returned when the option is absent

        Returns:
            Option value or default
        """
        return self._opts.get(key, default)

    def fetch(self, key: str, default: Any = _MISSING) -> Any:
        """Get a required option value.

        Args:
            key: Option name
            default: Optional fallback

        Returns:
            Option value, or default when given

        Raises:
            RequiredOptionError: If the option is absent and no default is given
        """
        if key in self._opts:
            return self._opts[key]
        if default is _MISSING:
            raise RequiredOptionError(key)
        return default

    def dig(self, *keys: Any) -> Any:
        """Read a value from nested mappings, returning None on any miss."""
        current: Any = self._opts
        for key in keys:
            if not isinstance(current, Mapping):
                return None
            current = current.get(key)
            if current is None:
                return None
        return current

    def is_empty(self) -> bool:
        """Check whether no option is set."""
        return not self._opts

    def merge(self, new_opts: Union["Options", Mapping[str, Any], None]) -> "Options":
        """Return new Options where new_opts wins on conflicts."""
        other = _as_dict(new_opts)
        if not other:
            return self
        return Options({**self._opts, **other})

    def reverse_merge(self, new_opts: Union["Options", Mapping[str, Any], None]) -> "Options":
        """Return new Options where the current values win on conflicts."""
        other = _as_dict(new_opts)
        if not other:
            return self
        return Options({**other, **self._opts})

    def should_return_key(self, key: Any) -> bool:
        """Check whether key passes the only/except projection.

        Args:
            key: Output key

        Returns:
            True if the key is selected by `only` (or there is no `only`) and is
            not fully excluded by `except`
        """
        if not (self._has_only or self._has_except):
            return True

        only = self.only_fields()
        except_ = self.except_fields()
        selected = only is None or key in only
        excluded = except_ is not None and except_.get(key) is True
        return selected and not excluded

    def for_nesting(self, key: Any) -> "Options":
        """Derive options for descending into the exposure named key.

        The collection flag is dropped, the root override is cleared and
        only/except are narrowed to the sub-list declared for key. Results are
        memoized per key.
        """
        cached = self._for_nesting_cache.get(key)
        if cached is None:
            cached = self._build_for_nesting(key)
            self._for_nesting_cache[key] = cached
        return cached

    def only_fields(self, for_key: Any = None) -> Optional[Any]:
        """Parsed `only` projection, or the sub-list for for_key."""
        if not self._has_only:
            return None
        if self._only_fields is None:
            self._only_fields = _build_field_tree(self._opts[RuntimeKey.ONLY])
        return _only_for_given(for_key, self._only_fields)

    def except_fields(self, for_key: Any = None) -> Optional[Any]:
        """Parsed `except` projection, or the sub-list for for_key."""
        if not self._has_except:
            return None
        if self._except_fields is None:
            self._except_fields = _build_field_tree(self._opts[RuntimeKey.EXCEPT])
        return _only_for_given(for_key, self._except_fields)

    @contextmanager
    def with_attr_path(self, part: Any) -> Iterator[None]:
        """Push part onto the attribute path for the duration of the block.

        Example:
            >>> with options.with_attr_path("address"):
            ...     options["attr_path"]
            ['address']
        """
        if part is None or part is False:
            yield
            return

        stack = self._attr_path_stack()
        stack.append(part)
        try:
            yield
        finally:
            stack.pop()

    def _attr_path_stack(self) -> List[Any]:
        # Created on first use; derived options share the same list
        stack = self._opts.get(RuntimeKey.ATTR_PATH)
        if stack is None:
            stack = self._opts[RuntimeKey.ATTR_PATH] = []
        return stack

    def _build_for_nesting(self, key: Any) -> "Options":
        opts = {k: v for k, v in self._opts.items() if k != RuntimeKey.COLLECTION}
        opts.update(
            {
                RuntimeKey.ROOT: None,
                RuntimeKey.ONLY: self.only_fields(key),
                RuntimeKey.EXCEPT: self.except_fields(key),
                RuntimeKey.ATTR_PATH: self._attr_path_stack(),
            }
        )
        return Options(opts)


def _as_dict(opts: Union[Options, Mapping[str, Any], None]) -> Dict[str, Any]:
    if opts is None:
        return {}
    if isinstance(opts, Options):
        return opts.to_dict()
    return dict(opts)


def _build_field_tree(fields: Any) -> FieldTree:
    """Parse an only/except list into {name: True | [sub-fields]}."""
    tree: FieldTree = {}
    if isinstance(fields, (str, Mapping)):
        fields = [fields]
    for field in fields:
        if isinstance(field, Mapping):
            for name, nested in field.items():
                if isinstance(nested, (str, Mapping)):
                    nested = [nested]
                tree[str(name)] = list(nested)
        else:
            tree[str(field)] = True
    return tree


def _only_for_given(key: Any, fields: FieldTree) -> Optional[Any]:
    if key is None:
        return fields
    nested = fields.get(key)
    if isinstance(nested, list):
        return nested
    return None
