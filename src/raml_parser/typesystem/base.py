"""Common contract shared by every RAML data type variant.

A type variant is built from a normalised declaration mapping (the
`type` key is always present). Facets are read through pydantic aliases, so
RAML's camelCase keys (`displayName`, `minLength`, ...) map onto snake_case
fields. The raw declaration is kept on the instance because inheritance is
resolved by merging declarations, not instances.
"""

from collections.abc import Iterator
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from raml_parser.errors import TypeValidationError


class BaseType(BaseModel):
    """The untyped (`any`) variant and base class of all other variants."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: ClassVar[str] = "any"

    name: str
    required: bool = True
    default: Any = None
    example: Any = None
    examples: Any = None
    display_name: str | None = Field(default=None, alias="displayName")
    description: str | None = None
    enum: list | None = None
    parent: str | None = None  # supertype this declaration was merged from
    declaration: dict = Field(default_factory=dict, exclude=True)

    @classmethod
    def from_definition(cls, name: str, definition: dict, **resolved: Any) -> "BaseType":
        """Build the variant from a normalised declaration.

        `resolved` carries already-built nested types (object properties,
        array items, union members) which replace their raw counterparts.
        """
        data = {k: v for k, v in definition.items() if k not in ("name", "declaration", "parent")}
        data.update(resolved)
        data["name"] = name
        data["declaration"] = dict(definition)
        return cls.model_validate(data)

    def nested(self) -> Iterator["BaseType"]:
        """Yield the types embedded directly in this one."""
        return iter(())

    def validate_value(self, value: Any) -> None:
        """Raise TypeValidationError if `value` violates this type."""
        self._check_enum(value)

    def _check_enum(self, value: Any) -> None:
        if self.enum is not None and value not in self.enum:
            self._fail("Value must be one of: " + ", ".join(str(v) for v in self.enum) + ".")

    def _fail(self, constraint: str) -> None:
        raise TypeValidationError(self.name, constraint)
