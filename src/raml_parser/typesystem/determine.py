"""Choose and build the type variant for a raw type declaration.

`determine_type` accepts the three shapes a declaration can take in a
decoded document: a type expression string (`string`, `Song[]`,
`string | nil`, an inline `{...}` JSON or `<...>` XML schema, ...), a
mapping of facets, or an already decoded EmbeddedSchema.
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from raml_parser.errors import InvalidDefinitionError

from .base import BaseType
from .proxy import LazyProxyType
from .scalars import BooleanType, FileType, IntegerType, NilType, NumberType, StringType
from .schema import ROOT_ELEMENT_NAME, EmbeddedSchema, JsonType, XmlType
from .structured import ArrayType, ObjectType, UnionType
from .temporal import DateOnlyType, DateTimeOnlyType, DateTimeType, TimeOnlyType

if TYPE_CHECKING:
    from .registry import TypeRegistry

logger = logging.getLogger(__name__)

UNTYPED = ("", "any")


def determine_type(name: str, definition: Any, registry: "TypeRegistry | None" = None) -> BaseType:
    """Build the type variant described by `definition`.

    References to names that are not built-in types become LazyProxyType
    instances bound to `registry`; they are resolved when used.
    """
    if not isinstance(name, str):
        raise InvalidDefinitionError(f"Type name must be a string, got {type(name).__name__}: {name!r}")

    if isinstance(definition, EmbeddedSchema):
        return JsonType.from_embedded("schema", definition)
    definition = normalize_definition(definition)

    type_expr = definition["type"]
    if isinstance(type_expr, Mapping):
        return JsonType.from_definition(ROOT_ELEMENT_NAME, definition)
    if not isinstance(type_expr, str):
        raise InvalidDefinitionError(
            f"Type expression of '{name}' must be a string, got {type(type_expr).__name__}"
        )

    is_schema = type_expr.lstrip().startswith(("<", "{"))
    optional = name.endswith("?") or (not is_schema and type_expr.rstrip().endswith("?"))
    if optional:
        # shorthand for required: false
        definition.setdefault("required", False)
        name = name.removesuffix("?")
        if not is_schema:
            type_expr = type_expr.rstrip().removesuffix("?")
            definition["type"] = type_expr

    expr = type_expr.strip()
    builder = BUILTIN_TYPES.get(expr)
    if builder is not None:
        return builder(name, definition, registry)

    if expr in UNTYPED:
        return BaseType.from_definition(name, definition)

    # inline schemas may contain '|' or '[]' themselves, so they are matched first
    if expr.startswith("<"):
        return XmlType.from_definition(ROOT_ELEMENT_NAME, definition)
    if expr.startswith("{"):
        return JsonType.from_definition(ROOT_ELEMENT_NAME, definition)

    if "|" in expr:
        members = [member.strip() for member in expr.split("|")]
        return UnionType.from_definition(
            name, definition, one_of=[determine_type(member, member, registry) for member in members]
        )

    if "[]" in expr:
        item_expr = expr.rsplit("[]", 1)[0].strip()
        return ArrayType.from_definition(name, definition, items=determine_type(item_expr, item_expr, registry))

    logger.debug("Type '%s' refers to '%s', resolving lazily", name, expr)
    proxy = LazyProxyType.from_definition(name, definition, target=expr)
    return proxy.bind(registry)


def normalize_definition(definition: Any) -> dict:
    """Return the declaration as a mapping that always has a `type` key."""
    if isinstance(definition, str):
        return {"type": definition}
    if definition is None:
        return {"type": "string"}
    if not isinstance(definition, Mapping):
        raise InvalidDefinitionError(f"Invalid datatype for type definition: {type(definition).__name__}")

    definition = dict(definition)
    if "type" not in definition or definition["type"] is None:
        if definition.get("schema") is not None:
            definition["type"] = definition.pop("schema")
        else:
            definition["type"] = "object" if "properties" in definition else "string"
    return definition


def _scalar(cls: type[BaseType]) -> Callable[[str, dict, "TypeRegistry | None"], BaseType]:
    def build(name: str, definition: dict, registry: "TypeRegistry | None") -> BaseType:
        return cls.from_definition(name, definition)
    return build


def _build_object(name: str, definition: dict, registry: "TypeRegistry | None") -> BaseType:
    raw_properties = definition.get("properties") or {}
    if not isinstance(raw_properties, Mapping):
        raise InvalidDefinitionError(f"Properties of '{name}' must be a mapping")

    properties = {}
    for prop_name, prop_definition in raw_properties.items():
        prop = determine_type(str(prop_name), prop_definition, registry)
        properties[str(prop_name).removesuffix("?")] = prop
    return ObjectType.from_definition(name, definition, properties=properties)


def _build_array(name: str, definition: dict, registry: "TypeRegistry | None") -> BaseType:
    items = definition.get("items")
    if items is None:
        return ArrayType.from_definition(name, definition, items=None)
    item_name = items if isinstance(items, str) else f"{name}Item"
    return ArrayType.from_definition(name, definition, items=determine_type(item_name, items, registry))


BUILTIN_TYPES: dict[str, Callable[[str, dict, "TypeRegistry | None"], BaseType]] = {
    "array": _build_array,
    "boolean": _scalar(BooleanType),
    "datetime": _scalar(DateTimeType),
    "datetime-only": _scalar(DateTimeOnlyType),
    "date-only": _scalar(DateOnlyType),
    "file": _scalar(FileType),
    "integer": _scalar(IntegerType),
    "nil": _scalar(NilType),
    "number": _scalar(NumberType),
    "object": _build_object,
    "string": _scalar(StringType),
    "time-only": _scalar(TimeOnlyType),
}
