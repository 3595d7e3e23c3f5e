"""Resources and the recursive construction of the resource tree."""

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel

from raml_parser.errors import InvalidDefinitionError, InvalidUriError, MethodNotFoundError

from .annotation import Annotation, AnnotationTarget, parse_annotations
from .method import VALID_METHODS, Method
from .named_parameter import NamedParameter
from .security import SecurityScheme, resolve_secured_by

if TYPE_CHECKING:
    from .api_definition import ApiDefinition

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"(~?\{[^}]*\})")


@dataclass(frozen=True)
class ResourceContext:
    """What a resource inherits from the API definition and its parent."""

    base_uri_parameters: dict[str, NamedParameter] = field(default_factory=dict)
    secured_by: dict[str, SecurityScheme] = field(default_factory=dict)
    uri_parameters: dict[str, NamedParameter] = field(default_factory=dict)
    annotations: dict[str, Annotation] = field(default_factory=dict)

    @classmethod
    def from_api(cls, api: "ApiDefinition") -> "ResourceContext":
        return cls(base_uri_parameters=dict(api.base_uri_parameters), secured_by=dict(api.secured_by))


class Resource(BaseModel):
    uri: str
    relative_uri: str
    display_name: str
    description: str | None = None
    base_uri_parameters: dict[str, NamedParameter] = {}
    uri_parameters: dict[str, NamedParameter] = {}
    security_schemes: dict[str, SecurityScheme] = {}
    resources: dict[str, "Resource"] = {}
    methods: dict[str, Method] = {}
    annotations: dict[str, Annotation] = {}

    @classmethod
    def from_definition(
        cls,
        uri: str,
        definition: Any,
        api: "ApiDefinition",
        context: Optional[ResourceContext] = None,
        relative_uri: str | None = None,
    ) -> "Resource":
        """Build a resource and, recursively, its nested resources and methods.

        Security is applied first, then annotations, then nested resources and
        methods, so that children see the fully resolved parent.
        """
        if not isinstance(uri, str) or not uri.startswith("/"):
            raise InvalidUriError(f"URI must begin with a /: {uri!r}")
        definition = definition or {}
        if not isinstance(definition, Mapping):
            raise InvalidDefinitionError(f"Invalid definition for resource '{uri}'")
        context = context or ResourceContext.from_api(api)

        resource = cls(
            uri=uri,
            relative_uri=relative_uri or uri,
            display_name=definition.get("displayName", uri),
            description=definition.get("description"),
            base_uri_parameters=dict(context.base_uri_parameters),
            uri_parameters=dict(context.uri_parameters),
            security_schemes=dict(context.secured_by),
        )
        for key, value in (definition.get("baseUriParameters") or {}).items():
            resource.base_uri_parameters[key] = NamedParameter.from_definition(
                key, value, required=True, registry=api.types
            )
        for key, value in (definition.get("uriParameters") or {}).items():
            resource.uri_parameters[key] = NamedParameter.from_definition(
                key, value, required=True, registry=api.types
            )

        if "securedBy" in definition:
            resource.security_schemes.update(resolve_secured_by(definition["securedBy"], api.security_schemes))

        resource.annotations = {
            **context.annotations,
            **parse_annotations(definition, api.annotation_types, AnnotationTarget.RESOURCE),
        }

        child_context = ResourceContext(
            base_uri_parameters=context.base_uri_parameters,
            secured_by=context.secured_by,
            uri_parameters=resource.uri_parameters,
            annotations=resource.annotations,
        )
        for key, value in definition.items():
            key = str(key)
            if key.startswith("/"):
                resource.resources[key] = cls.from_definition(uri + key, value, api, child_context, key)
            elif key.upper() in VALID_METHODS:
                method = Method.from_definition(key, value, api, resource.security_schemes)
                resource.methods[method.type] = method

        logger.debug("Parsed resource '%s' (%d methods)", uri, len(resource.methods))
        return resource

    def get_method(self, method: str) -> Method:
        """Return the method for an HTTP verb (case-insensitive)."""
        try:
            return self.methods[method.upper()]
        except KeyError:
            raise MethodNotFoundError(method) from None

    def iter_resources(self) -> Iterator["Resource"]:
        """Yield this resource and all nested resources, parents first."""
        yield self
        for child in self.resources.values():
            yield from child.iter_resources()

    def uri_pattern(self) -> str:
        """Return the anchored regular expression matching concrete URIs."""
        parts = []
        for token in PLACEHOLDER.split(self.uri):
            if not PLACEHOLDER.fullmatch(token):
                parts.append(re.escape(token))
                continue
            optional = token.startswith("~")
            key = token.lstrip("~")[1:-1]
            if key in self.uri_parameters:
                pattern = _strip_anchors(self.uri_parameters[key].match_pattern)
                parts.append(f"(({pattern})|())" if optional else f"({pattern})")
            else:
                parts.append("([^/]*)" if optional else "([^/]+)")
        return "^" + "".join(parts) + "$"

    def matches_uri(self, uri: str) -> bool:
        """Does a concrete URI (query string ignored) match this resource?"""
        uri = uri.split("?", 1)[0]
        return re.match(self.uri_pattern(), uri) is not None


def _strip_anchors(pattern: str) -> str:
    if pattern.startswith("^"):
        pattern = pattern[1:]
    if pattern.endswith("$"):
        pattern = pattern[:-1]
    return pattern
