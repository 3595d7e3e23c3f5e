"""The root of a parsed RAML document."""

import logging
from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from raml_parser.errors import (
    InvalidDefinitionError,
    InvalidProtocolError,
    InvalidSchemaDefinitionError,
    MutuallyExclusiveElementsError,
    ResourceNotFoundError,
    UndefinedSecuritySchemeError,
)
from raml_parser.typesystem.determine import determine_type
from raml_parser.typesystem.registry import TypeRegistry

from .annotation import Annotation, AnnotationTarget, AnnotationType, parse_annotations
from .named_parameter import NamedParameter
from .resource import Resource
from .route import Route
from .security import SecurityScheme, resolve_secured_by

logger = logging.getLogger(__name__)

PROTOCOL_HTTP = "HTTP"
PROTOCOL_HTTPS = "HTTPS"


class ApiDefinition(BaseModel):
    """An API description: declarations, the type registry and the resource tree.

    Traits, resource types and library `uses` are stored as declared; they
    are not expanded into the resources that reference them.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    description: str | None = None
    version: str | None = None
    base_uri: str | None = None
    base_uri_parameters: dict[str, NamedParameter] = {}
    protocols: list[str] = []
    media_type: str | None = None
    documentation: dict[str, Any] = {}
    types: TypeRegistry = Field(default_factory=TypeRegistry)
    traits: dict[str, Any] = {}
    resource_types: dict[str, Any] = {}
    annotation_types: dict[str, AnnotationType] = {}
    annotations: dict[str, Annotation] = {}
    security_schemes: dict[str, SecurityScheme] = {}
    secured_by: dict[str, SecurityScheme] = {}
    uses: dict[str, Any] = {}
    resources: dict[str, Resource] = {}
    schema_collections: dict[str, Any] = {}
    raml_version: str | None = None

    @classmethod
    def from_definition(
        cls, title: str, data: Mapping | None = None, registry: TypeRegistry | None = None
    ) -> "ApiDefinition":
        """Build an API definition from a decoded RAML document.

        Declarations (types, annotation types, security schemes) are parsed
        first and type inheritance is resolved before any resource is built.
        """
        data = data or {}
        if data.get("schemas") is not None and data.get("types") is not None:
            raise MutuallyExclusiveElementsError()

        api = cls(title=title, types=registry if registry is not None else TypeRegistry())
        api.types.clear()

        api.description = data.get("description")
        if data.get("version") is not None:
            api.version = str(data["version"])
        for protocol in data.get("protocols") or []:
            api.add_protocol(protocol)
        if data.get("baseUri") is not None:
            api.set_base_uri(data["baseUri"])
        api.media_type = data.get("mediaType")
        api.documentation = _documentation(data.get("documentation"))

        if data.get("schemas") is not None:
            api.add_schema_collections(data["schemas"])
        for name, definition in (data.get("types") or {}).items():
            api.types.add(determine_type(name, definition, api.types), key=str(name).removesuffix("?"))
        for key, value in (data.get("baseUriParameters") or {}).items():
            api.base_uri_parameters[key] = NamedParameter.from_definition(
                key, value, required=True, registry=api.types
            )

        # traits and resource types are kept as declared, never applied
        api.traits = dict(data.get("traits") or {})
        api.resource_types = dict(data.get("resourceTypes") or {})

        for key, definition in (data.get("annotationTypes") or {}).items():
            api.annotation_types[key] = AnnotationType.from_definition(key, definition, api.types)
        for key, definition in (data.get("securitySchemes") or {}).items():
            api.security_schemes[key] = SecurityScheme.from_definition(key, definition, api.types)
        if data.get("securedBy") is not None:
            api.secured_by = resolve_secured_by(data["securedBy"], api.security_schemes)
        api.uses = dict(data.get("uses") or {})
        api.annotations = parse_annotations(data, api.annotation_types, AnnotationTarget.API)

        api.types.apply_inheritance()

        for key, definition in data.items():
            if isinstance(key, str) and key.startswith("/"):
                api.resources[key] = Resource.from_definition(key, definition, api)

        logger.debug("Parsed API '%s': %d types, %d top-level resources", title, len(api.types), len(api.resources))
        return api

    @property
    def base_url(self) -> str | None:
        """The base URI with `{version}` substituted."""
        if self.base_uri and self.version:
            return self.base_uri.replace("{version}", self.version)
        return self.base_uri

    def set_base_uri(self, base_uri: str) -> None:
        self.base_uri = base_uri
        if not self.protocols:
            scheme = urlsplit(base_uri).scheme.upper()
            if scheme in (PROTOCOL_HTTP, PROTOCOL_HTTPS):
                self.protocols.append(scheme)

    def add_protocol(self, protocol: str) -> None:
        normalized = str(protocol).upper()
        if normalized not in (PROTOCOL_HTTP, PROTOCOL_HTTPS):
            raise InvalidProtocolError(f'"{protocol}" is not a valid protocol')
        if normalized not in self.protocols:
            self.protocols.append(normalized)

    def supports_http(self) -> bool:
        return PROTOCOL_HTTP in self.protocols

    def supports_https(self) -> bool:
        return PROTOCOL_HTTPS in self.protocols

    def add_schema_collections(self, schemas: Any) -> None:
        """Keep legacy root `schemas` and register each one as a type."""
        if isinstance(schemas, Mapping):
            schemas = [schemas]
        if not isinstance(schemas, list):
            raise InvalidSchemaDefinitionError("'schemas' must be a list or a mapping")

        for collection in schemas:
            if not isinstance(collection, Mapping):
                raise InvalidSchemaDefinitionError("Each schema collection must be a mapping")
            for name, schema in collection.items():
                if not isinstance(schema, (str, Mapping)):
                    raise InvalidSchemaDefinitionError(f"Invalid schema definition for '{name}'")
                self.schema_collections[name] = schema
                self.types.add(determine_type(name, schema, self.types), key=name)

    def get_security_scheme(self, key: str) -> SecurityScheme:
        try:
            return self.security_schemes[key]
        except KeyError:
            raise UndefinedSecuritySchemeError(key) from None

    def iter_resources(self) -> Iterator[Resource]:
        """Yield every resource in the tree, parents before their children."""
        for resource in self.resources.values():
            yield from resource.iter_resources()

    def get_resource_by_uri(self, uri: str) -> Resource:
        """Return the first resource whose URI template matches `uri`."""
        uri = uri.split("?", 1)[0]
        for resource in self.iter_resources():
            if resource.matches_uri(uri):
                return resource
        raise ResourceNotFoundError(uri)

    def get_resource_by_path(self, path: str) -> Resource:
        """Return the resource whose URI template is exactly `path`."""
        path = path.split("?", 1)[0]
        for resource in self.iter_resources():
            if resource.uri == path:
                return resource
        raise ResourceNotFoundError(path)

    def get_routes(self) -> dict[str, Route]:
        """Flatten the tree into routes keyed by `"<VERB> <path>"`."""
        routes: dict[str, Route] = {}
        for resource in self.iter_resources():
            for verb, method in resource.methods.items():
                route = Route(
                    base_url=self.base_url,
                    path=resource.uri,
                    protocols=list(self.protocols),
                    verb=verb,
                    uri_parameters=resource.uri_parameters,
                    method=method,
                )
                routes[route.key] = route
        return routes


def _documentation(definition: Any) -> dict[str, Any]:
    if definition is None:
        return {}
    if isinstance(definition, Mapping):
        return dict(definition)
    if not isinstance(definition, list):
        raise InvalidDefinitionError("'documentation' must be a list of title/content items")

    documentation = {}
    for item in definition:
        if not isinstance(item, Mapping) or "title" not in item:
            raise InvalidDefinitionError("Each documentation item needs a title")
        documentation[item["title"]] = item.get("content")
    return documentation
