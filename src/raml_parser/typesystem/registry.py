"""Registry of the named types declared by one API definition."""

import logging
from collections.abc import Iterator, Mapping

from raml_parser.errors import InheritanceCycleError, UnresolvedTypeError

from .base import BaseType
from .determine import determine_type
from .proxy import LazyProxyType

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Mapping of type name to type variant.

    A registry belongs to a single parse: `ApiDefinition` clears it before
    populating it, and nothing is shared between registries.
    """

    def __init__(self) -> None:
        self._types: dict[str, BaseType] = {}

    def clear(self) -> None:
        self._types.clear()

    def add(self, type_: BaseType, key: str | None = None) -> None:
        """Register `type_` under `key` (defaults to the type's name)."""
        key = key or type_.name
        if isinstance(type_, LazyProxyType) and not type_.is_bound:
            type_.bind(self)
        logger.debug("Registering type '%s' (%s)", key, type_.kind)
        self._types[key] = type_

    def get(self, name: str, referenced_by: str | None = None) -> BaseType:
        try:
            return self._types[name]
        except KeyError:
            raise UnresolvedTypeError(name, referenced_by=referenced_by) from None

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def items(self) -> Iterator[tuple[str, BaseType]]:
        return iter(list(self._types.items()))

    def apply_inheritance(self) -> None:
        """Merge every declared supertype into its subtypes.

        Each entry that still refers to another named type is replaced by a
        new variant built from the parent's declaration overlaid with the
        child's own facets. Parents are resolved before their children, so
        declaration order does not matter. Afterwards every reference left
        anywhere in the registry must point at a registered name.
        """
        for name in list(self._types):
            self._resolve(name, [])
        self._check_references()

    def _resolve(self, name: str, chain: list[str]) -> BaseType:
        current = self._types[name]
        if not isinstance(current, LazyProxyType):
            return current
        if name in chain:
            raise InheritanceCycleError(chain + [name])

        parent_name = current.target
        if parent_name not in self._types:
            raise UnresolvedTypeError(parent_name, referenced_by=name)
        parent = self._resolve(parent_name, chain + [name])

        declaration = merge_declarations(parent.declaration, current.declaration)
        merged = determine_type(current.name, declaration, self)
        merged.parent = parent_name
        logger.debug("Resolved type '%s' from parent '%s'", name, parent_name)
        self._types[name] = merged
        return merged

    def _check_references(self) -> None:
        for name, type_ in self._types.items():
            for nested in _walk(type_):
                if isinstance(nested, LazyProxyType) and nested.target not in self._types:
                    raise UnresolvedTypeError(nested.target, referenced_by=name)


def merge_declarations(parent: Mapping, child: Mapping) -> dict:
    """Overlay a child declaration on its parent's.

    Facets set on the child win; `properties` are merged per property and
    the resulting `type` is always the parent's.
    """
    merged = dict(parent)
    for key, value in child.items():
        if key == "type":
            continue
        if key == "properties" and isinstance(value, Mapping) and isinstance(parent.get(key), Mapping):
            merged[key] = {**parent[key], **value}
        else:
            merged[key] = value
    return merged


def _walk(type_: BaseType) -> Iterator[BaseType]:
    for nested in type_.nested():
        yield nested
        yield from _walk(nested)
