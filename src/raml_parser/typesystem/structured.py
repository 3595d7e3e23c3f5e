"""Structured type variants: object, array and union.

Nested types are built by `determine_type` before the variant is
constructed. A nested reference to a named type is a LazyProxyType, so the
embedding always goes through the registry by name.
"""

from collections.abc import Iterator, Mapping, Sequence
from typing import Any, ClassVar

from pydantic import Field, SerializeAsAny

from raml_parser.errors import TypeValidationError

from .base import BaseType


class ObjectType(BaseType):
    kind: ClassVar[str] = "object"

    properties: dict[str, SerializeAsAny[BaseType]] = Field(default_factory=dict)
    min_properties: int | None = Field(default=None, alias="minProperties")
    max_properties: int | None = Field(default=None, alias="maxProperties")
    additional_properties: bool = Field(default=True, alias="additionalProperties")
    discriminator: str | None = None
    discriminator_value: Any = Field(default=None, alias="discriminatorValue")

    def nested(self) -> Iterator[BaseType]:
        return iter(self.properties.values())

    def validate_value(self, value: Any) -> None:
        if not isinstance(value, Mapping):
            self._fail("Value is not an object.")
        if self.min_properties is not None and len(value) < self.min_properties:
            self._fail(f"Minimum allowed number of properties: {self.min_properties}.")
        if self.max_properties is not None and len(value) > self.max_properties:
            self._fail(f"Maximum allowed number of properties: {self.max_properties}.")

        for key, prop in self.properties.items():
            if key not in value:
                if prop.required:
                    raise TypeValidationError(key, "Property is required.")
                continue
            prop.validate_value(value[key])

        if not self.additional_properties:
            unknown = [key for key in value if key not in self.properties]
            if unknown:
                self._fail("Additional properties are not allowed: " + ", ".join(map(str, unknown)) + ".")
        self._check_enum(value)


class ArrayType(BaseType):
    kind: ClassVar[str] = "array"

    items: SerializeAsAny[BaseType] | None = None
    min_items: int | None = Field(default=None, alias="minItems")
    max_items: int | None = Field(default=None, alias="maxItems")
    unique_items: bool = Field(default=False, alias="uniqueItems")

    def nested(self) -> Iterator[BaseType]:
        return iter([self.items] if self.items is not None else [])

    def validate_value(self, value: Any) -> None:
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            self._fail("Value is not an array.")
        if self.min_items is not None and len(value) < self.min_items:
            self._fail(f"Minimum allowed number of items: {self.min_items}.")
        if self.max_items is not None and len(value) > self.max_items:
            self._fail(f"Maximum allowed number of items: {self.max_items}.")
        if self.unique_items:
            seen: list = []
            for item in value:
                if item in seen:
                    self._fail("Array items must be unique.")
                seen.append(item)
        if self.items is not None:
            for item in value:
                self.items.validate_value(item)
        self._check_enum(value)


class UnionType(BaseType):
    """Accepts a value when at least one member type accepts it."""

    kind: ClassVar[str] = "union"

    one_of: list[SerializeAsAny[BaseType]] = Field(default_factory=list, alias="oneOf")

    def nested(self) -> Iterator[BaseType]:
        return iter(self.one_of)

    def validate_value(self, value: Any) -> None:
        for member in self.one_of:
            try:
                member.validate_value(value)
            except TypeValidationError:
                continue
            self._check_enum(value)
            return
        names = ", ".join(member.name for member in self.one_of)
        self._fail(f"Value does not match any of the union types: {names}.")
