"""Annotation types and annotation instances."""

import re
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, SerializeAsAny

from raml_parser.errors import InvalidAnnotationTargetError, UndefinedAnnotationTypeError
from raml_parser.typesystem.base import BaseType
from raml_parser.typesystem.determine import determine_type

if TYPE_CHECKING:
    from raml_parser.typesystem.registry import TypeRegistry

ANNOTATION_KEY = re.compile(r"^\((.+)\)$")

ANNOTATION_TYPE_FACETS = ("allowedTargets", "displayName", "description")


class AnnotationTarget(str, Enum):
    """Node kinds an annotation may be applied to."""

    API = "API"
    DOCUMENTATION_ITEM = "DocumentationItem"
    RESOURCE = "Resource"
    METHOD = "Method"
    RESPONSE = "Response"
    REQUEST_BODY = "RequestBody"
    RESPONSE_BODY = "ResponseBody"
    TYPE_DECLARATION = "TypeDeclaration"
    EXAMPLE = "Example"
    RESOURCE_TYPE = "ResourceType"
    TRAIT = "Trait"
    SECURITY_SCHEME = "SecurityScheme"
    SECURITY_SCHEME_SETTINGS = "SecuritySchemeSettings"
    ANNOTATION_TYPE = "AnnotationType"
    LIBRARY = "Library"
    OVERLAY = "Overlay"
    EXTENSION = "Extension"


class AnnotationType(BaseModel):
    key: str
    display_name: str | None = None
    description: str | None = None
    allowed_targets: list[AnnotationTarget] = []
    value_type: SerializeAsAny[BaseType] | None = None

    @classmethod
    def from_definition(
        cls, key: str, definition: Any = None, registry: "TypeRegistry | None" = None
    ) -> "AnnotationType":
        """Build an annotation type; a bare string is the type of its values."""
        if definition is None:
            definition = {}
        elif isinstance(definition, str):
            definition = {"type": definition}

        targets = definition.get("allowedTargets") or []
        if isinstance(targets, str):
            targets = [targets]
        allowed = []
        for target in targets:
            try:
                allowed.append(AnnotationTarget(target))
            except ValueError:
                raise InvalidAnnotationTargetError(
                    f"The '{target}' target is not a valid target for annotations."
                ) from None

        type_facets = {k: v for k, v in definition.items() if k not in ANNOTATION_TYPE_FACETS}
        value_type = determine_type(key, type_facets, registry) if type_facets else None

        return cls(
            key=key,
            display_name=definition.get("displayName", key),
            description=definition.get("description"),
            allowed_targets=allowed,
            value_type=value_type,
        )

    def allows(self, target: AnnotationTarget) -> bool:
        return not self.allowed_targets or target in self.allowed_targets

    def validate_value(self, value: Any) -> None:
        if self.value_type is not None:
            self.value_type.validate_value(value)


class Annotation(BaseModel):
    key: str
    value: Any = None

    @classmethod
    def from_definition(
        cls,
        key: str,
        value: Any,
        annotation_types: Mapping[str, AnnotationType],
        target: AnnotationTarget,
    ) -> "Annotation":
        if key not in annotation_types:
            raise UndefinedAnnotationTypeError(key)
        if not annotation_types[key].allows(target):
            raise InvalidAnnotationTargetError(
                f"The '{key}' annotation type cannot be used at this location ({target.value})."
            )
        return cls(key=key, value=value)


def parse_annotations(
    definition: Mapping, annotation_types: Mapping[str, AnnotationType], target: AnnotationTarget
) -> dict[str, Annotation]:
    """Collect the `(name)` keys of a definition as annotations on `target`."""
    annotations = {}
    for key, value in definition.items():
        match = ANNOTATION_KEY.match(str(key))
        if match:
            annotation = Annotation.from_definition(match.group(1), value, annotation_types, target)
            annotations[annotation.key] = annotation
    return annotations
