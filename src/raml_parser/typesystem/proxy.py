"""Placeholder for a reference to a named type."""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import PrivateAttr

from raml_parser.errors import InheritanceCycleError, UnresolvedTypeError

from .base import BaseType

if TYPE_CHECKING:
    from .registry import TypeRegistry

# facets that describe a reference without constraining its values
DESCRIPTIVE_FACETS = (
    "type", "required", "displayName", "description", "example", "examples", "default", "repeat",
)


class LazyProxyType(BaseType):
    """Reference to a named type that may be declared after its first use.

    The proxy never holds a copy of its target. Every call to `resolve()`
    looks the name up in the registry it was bound to, so replacing a
    registry entry is seen by every proxy pointing at it.
    """

    kind: ClassVar[str] = "reference"

    target: str
    _registry: Any = PrivateAttr(default=None)

    def bind(self, registry: "TypeRegistry | None") -> "LazyProxyType":
        self._registry = registry
        return self

    @property
    def is_bound(self) -> bool:
        return self._registry is not None

    def resolve(self) -> BaseType:
        """Return the registered type this proxy refers to."""
        seen: list[str] = []
        current: BaseType = self
        # an entry still awaiting inheritance resolution is itself a proxy
        while isinstance(current, LazyProxyType):
            if current._registry is None:
                raise UnresolvedTypeError(current.target, referenced_by=current.name)
            if current.target in seen:
                raise InheritanceCycleError(seen + [current.target])
            seen.append(current.target)
            current = current._registry.get(current.target, referenced_by=current.name)
        return current

    def nested(self) -> Iterator[BaseType]:
        return iter(())

    def effective_type(self) -> BaseType:
        """The target, specialised by any constraint facets declared on this reference."""
        target = self.resolve()
        if not any(key not in DESCRIPTIVE_FACETS for key in self.declaration):
            return target

        from .determine import determine_type
        from .registry import merge_declarations

        return determine_type(self.name, merge_declarations(target.declaration, self.declaration), self._registry)

    def validate_value(self, value: Any) -> None:
        self.effective_type().validate_value(value)
