"""Named parameters: URI, base URI, query and header parameters."""

import re
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny

from raml_parser.errors import InvalidDefinitionError, TypeValidationError
from raml_parser.typesystem.base import BaseType
from raml_parser.typesystem.determine import determine_type
from raml_parser.typesystem.proxy import LazyProxyType

if TYPE_CHECKING:
    from raml_parser.typesystem.registry import TypeRegistry

DAYS = "Mon|Tue|Wed|Thu|Fri|Sat|Sun"
MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"

TYPE_PATTERNS = {
    "number": r"^[-+]?[0-9]*\.?[0-9]+$",
    "integer": r"^[-+]?[0-9]+$",
    "boolean": r"^(true|false)$",
    "date": rf"^(?:{DAYS}), \d{{2}} (?:{MONTHS}) \d{{4}} \d{{2}}:\d{{2}}:\d{{2}} GMT$",
    "file": r"^(.*)$",
}


class NamedParameter(BaseModel):
    """A single named parameter.

    Scalar types (the RAML 0.8 parameter types plus the RAML 1.0 scalar
    keywords) are checked by the parameter itself. Any other type
    expression (`string[]`, `Genre`, `string | nil`) is built into
    `value_type` against the API's type registry and values are checked by
    that type. `match_pattern` is the regular expression used when a URI
    template placeholder is matched against a concrete path segment.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    valid_types: ClassVar[tuple[str, ...]] = (
        "string", "number", "integer", "date", "boolean", "file",
        "date-only", "time-only", "datetime-only", "datetime", "any",
    )

    key: str
    type: str = "string"
    display_name: str | None = Field(default=None, alias="displayName")
    description: str | None = None
    enum: list | None = None
    pattern: str | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    minimum: int | float | None = None
    maximum: int | float | None = None
    example: Any = None
    repeat: bool = False
    required: bool = False
    default: Any = None
    value_type: SerializeAsAny[BaseType] | None = None

    @classmethod
    def from_definition(
        cls,
        key: str,
        definition: Any = None,
        required: bool = False,
        registry: "TypeRegistry | None" = None,
    ) -> "NamedParameter":
        """Build a parameter; a bare string is taken as its type.

        A trailing `?` on the type marks the parameter optional. Named type
        references need `registry` and must already be declared there.
        """
        if definition is None:
            definition = {}
        elif isinstance(definition, str):
            definition = {"type": definition}
        elif not isinstance(definition, dict):
            raise InvalidDefinitionError(f"Invalid definition for parameter '{key}'")

        data = {"required": required, **definition, "key": key}
        param_type = data.get("type") or "string"
        if not isinstance(param_type, str):
            raise InvalidDefinitionError(f"Type of parameter '{key}' must be a type expression")
        if param_type.endswith("?"):
            param_type = param_type.removesuffix("?").strip()
            if "required" not in definition:
                data["required"] = False
        data["type"] = param_type

        if param_type not in cls.valid_types:
            data["value_type"] = cls._build_value_type(key, {**definition, "type": param_type}, registry)
        return cls.model_validate(data)

    @staticmethod
    def _build_value_type(key: str, definition: dict, registry: "TypeRegistry | None") -> BaseType:
        value_type = determine_type(key, definition, registry)
        if isinstance(value_type, LazyProxyType):
            if registry is None:
                raise InvalidDefinitionError(f"'{value_type.target}' is not a valid type for parameter '{key}'")
            value_type.resolve()
        return value_type

    @property
    def match_pattern(self) -> str:
        if self.pattern:
            return self.pattern
        if self.enum:
            return "^(" + "|".join(re.escape(str(value)) for value in self.enum) + ")$"

        if self.type in TYPE_PATTERNS:
            return TYPE_PATTERNS[self.type]
        if self.min_length is not None or self.max_length is not None:
            low = self.min_length or 0
            high = "" if self.max_length is None else self.max_length
            return f"^([^/]{{{low},{high}}})$"
        return r"^([^/]+)$"

    def validate_value(self, value: Any) -> None:
        """Raise TypeValidationError if `value` breaks this parameter's constraints."""
        if value is None:
            if self.required:
                raise TypeValidationError(self.key, "Parameter is required.")
            return
        if self.value_type is not None:
            self.value_type.validate_value(value)
            return
        if self.enum is not None and value not in self.enum:
            raise TypeValidationError(self.key, "Value must be one of: " + ", ".join(map(str, self.enum)) + ".")

        if isinstance(value, str):
            if self.min_length is not None and len(value) < self.min_length:
                raise TypeValidationError(self.key, f"Minimum allowed length: {self.min_length}.")
            if self.max_length is not None and len(value) > self.max_length:
                raise TypeValidationError(self.key, f"Maximum allowed length: {self.max_length}.")
            if re.search(self.match_pattern, value) is None:
                raise TypeValidationError(self.key, f"Value does not match pattern: {self.match_pattern}.")
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            if self.minimum is not None and value < self.minimum:
                raise TypeValidationError(self.key, f"Minimum allowed value: {self.minimum}.")
            if self.maximum is not None and value > self.maximum:
                raise TypeValidationError(self.key, f"Maximum allowed value: {self.maximum}.")
