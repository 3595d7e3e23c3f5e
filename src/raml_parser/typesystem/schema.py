"""Type variants backed by an embedded JSON or XML schema."""

import json
import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass
from typing import Any, ClassVar

import jsonschema
from jsonschema.exceptions import SchemaError, ValidationError

from raml_parser.errors import InvalidSchemaDefinitionError

from .base import BaseType

ROOT_ELEMENT_NAME = "__ROOT_ELEMENT__"


@dataclass(frozen=True)
class EmbeddedSchema:
    """An already decoded JSON schema passed to `determine_type` as is."""

    content: dict


class JsonType(BaseType):
    kind: ClassVar[str] = "json"

    raw_schema: dict = {}

    @classmethod
    def from_definition(cls, name: str, definition: dict, **resolved: Any) -> "JsonType":
        source = definition.get("type")
        if isinstance(source, str):
            try:
                source = json.loads(source)
            except json.JSONDecodeError as e:
                raise InvalidSchemaDefinitionError(f"Invalid JSON schema for '{name}': {e}") from e
        if not isinstance(source, dict):
            raise InvalidSchemaDefinitionError(f"JSON schema for '{name}' must be an object")
        return super().from_definition(name, definition, raw_schema=source, **resolved)

    @classmethod
    def from_embedded(cls, name: str, schema: EmbeddedSchema) -> "JsonType":
        return cls(name=name, raw_schema=schema.content, declaration={"type": schema.content})

    def validate_value(self, value: Any) -> None:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                self._fail(f"Invalid JSON: {e.msg}.")
        try:
            jsonschema.validate(instance=value, schema=self.raw_schema)
        except ValidationError as e:
            self._fail(e.message)
        except SchemaError as e:
            raise InvalidSchemaDefinitionError(f"Invalid JSON schema for '{self.name}': {e.message}") from e


class XmlType(BaseType):
    """XML schema holder; values are checked for well-formedness only."""

    kind: ClassVar[str] = "xml"

    raw_schema: str = ""

    @classmethod
    def from_definition(cls, name: str, definition: dict, **resolved: Any) -> "XmlType":
        return super().from_definition(name, definition, raw_schema=definition.get("type", ""), **resolved)

    def validate_value(self, value: Any) -> None:
        if not isinstance(value, str):
            self._fail("Value is not an XML document.")
        try:
            ElementTree.fromstring(value)
        except ElementTree.ParseError as e:
            self._fail(f"Invalid XML: {e}.")
